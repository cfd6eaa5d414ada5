"""Table heatmap tool: recent write rates per table."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from analytics.heatmap import build_heatmap_rows, select_tables
from client.base import DeploymentClient
from preview.server import PreviewRegistry
from reporting.generator import ReportGenerator
from reporting.schemas import HeatmapReport
from schemas.internal.reports import HeatmapConfig, config_payload
from schemas.requests import TableHeatmapArgs
from schemas.responses import ToolResponse
from services.common import (
    ADMIN_REQUIRED,
    CONNECT_HINT,
    CREDENTIALS_HINT,
    error_response,
    failure_response,
    launch_preview,
)

logger = logging.getLogger(__name__)

TITLE = "Table Heatmap"
APP_NAME = "table-heatmap"
DEFAULT_PORT = 3460


async def handle_table_heatmap(
    client: DeploymentClient,
    args: Optional[Mapping[str, Any]] = None,
    *,
    registry: Optional[PreviewRegistry] = None,
    generator: Optional[ReportGenerator] = None,
    html_out: Optional[Path] = None,
    now_ms: float | None = None,
) -> ToolResponse:
    if not client.is_connected():
        return error_response(TITLE, CONNECT_HINT)
    if not client.has_admin_access():
        return error_response(TITLE, ADMIN_REQUIRED)

    try:
        options = TableHeatmapArgs.model_validate(args or {})
    except ValidationError as exc:
        return failure_response(TITLE, exc)

    try:
        generator = generator or ReportGenerator()

        client.refresh()
        tables = select_tables(await client.list_tables(), options.max_tables)
        rows = await build_heatmap_rows(
            client,
            tables,
            window_minutes=options.window_minutes,
            max_docs_per_table=options.max_docs_per_table,
            now_ms=now_ms,
        )

        report = HeatmapReport(
            deployment_url=client.get_deployment_url(),
            theme=options.theme,
            rows=rows,
            window_minutes=options.window_minutes,
        )
        if html_out is not None:
            generator.write_html(report, html_out)
        if not options.no_browser:
            config = HeatmapConfig(
                deployment_url=client.get_deployment_url(),
                rows=rows,
                window_minutes=options.window_minutes,
            )
            report.ui_url = await launch_preview(
                registry,
                APP_NAME,
                config_payload(config),
                port=DEFAULT_PORT,
                custom_html=generator.render_html(report),
            ) or None
        return ToolResponse.text(generator.render_markdown(report))
    except Exception as exc:
        logger.exception("Table heatmap failed")
        return failure_response(TITLE, exc, CREDENTIALS_HINT)


__all__ = ["handle_table_heatmap"]
