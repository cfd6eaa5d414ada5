"""Schema drift tool: declared vs inferred fields per table."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from analytics.drift import compute_drift, rank_drift
from client.base import DeploymentClient
from preview.server import PreviewRegistry
from reporting.generator import ReportGenerator
from reporting.schemas import DriftReport
from schemas.internal.reports import DriftReportConfig, config_payload
from schemas.requests import SchemaDriftArgs
from schemas.responses import ToolResponse
from services.common import (
    CONNECT_HINT,
    CREDENTIALS_HINT,
    error_response,
    failure_response,
    launch_preview,
)

logger = logging.getLogger(__name__)

TITLE = "Schema Drift"
APP_NAME = "schema-drift"
DEFAULT_PORT = 3461


async def handle_schema_drift(
    client: DeploymentClient,
    args: Optional[Mapping[str, Any]] = None,
    *,
    registry: Optional[PreviewRegistry] = None,
    generator: Optional[ReportGenerator] = None,
    html_out: Optional[Path] = None,
) -> ToolResponse:
    if not client.is_connected():
        return error_response(TITLE, CONNECT_HINT)

    try:
        options = SchemaDriftArgs.model_validate(args or {})
    except ValidationError as exc:
        return failure_response(TITLE, exc)

    try:
        generator = generator or ReportGenerator()

        client.refresh()
        tables = await client.list_tables()
        rows = []
        for table in tables[: max(options.max_tables, 0)]:
            schema = await client.get_table_schema(table.name)
            rows.append(
                compute_drift(
                    schema.declared_fields, schema.inferred_fields, table=table.name
                )
            )
        rows = rank_drift(rows)
        logger.info("Computed drift for %d tables", len(rows))

        report = DriftReport(
            deployment_url=client.get_deployment_url(),
            theme=options.theme,
            rows=rows,
        )
        if html_out is not None:
            generator.write_html(report, html_out)
        if not options.no_browser:
            config = DriftReportConfig(
                deployment_url=client.get_deployment_url(), drift=rows
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
        logger.exception("Schema drift failed")
        return failure_response(TITLE, exc, CREDENTIALS_HINT)


__all__ = ["handle_schema_drift"]
