"""Realtime dashboard tool: metrics, charts and recent documents."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from analytics.aggregation import compute_metrics, recent_documents
from client.base import DeploymentClient
from preview.server import PreviewRegistry
from reporting.generator import ReportGenerator
from reporting.schemas import DashboardReport
from schemas.internal.reports import DashboardConfig, TableSummary, config_payload
from schemas.requests import DashboardArgs
from schemas.responses import ToolResponse
from services.common import (
    CREDENTIALS_HINT,
    DASHBOARD_CONNECT_HINT,
    error_response,
    failure_response,
    fallback_html,
    launch_preview,
)

logger = logging.getLogger(__name__)

TITLE = "Realtime Dashboard"
APP_NAME = "realtime-dashboard"
DEFAULT_PORT = 3457


async def handle_dashboard(
    client: DeploymentClient,
    args: Optional[Mapping[str, Any]] = None,
    *,
    registry: Optional[PreviewRegistry] = None,
    generator: Optional[ReportGenerator] = None,
    html_out: Optional[Path] = None,
) -> ToolResponse:
    """Compute the requested metrics and open the dashboard app.

    Without explicit metrics, one document-count metric is produced per
    table. Sample documents are fetched only with admin access, so sum, avg,
    min and max metrics read 0 without it.
    """
    if not client.is_connected():
        return error_response(TITLE, DASHBOARD_CONNECT_HINT)

    try:
        options = DashboardArgs.model_validate(args or {})
        generator = generator or ReportGenerator()

        client.refresh()
        tables = await client.list_tables()
        has_admin_access = client.has_admin_access()
        documents = await client.get_all_documents() if has_admin_access else {}
        metrics = compute_metrics(options.metrics, tables, documents)

        report = DashboardReport(
            deployment_url=client.get_deployment_url(),
            theme=options.theme,
            metrics=metrics,
            charts=options.charts,
            recent=recent_documents(documents),
            refresh_interval=options.refresh_interval,
            has_admin_access=has_admin_access,
        )
        if html_out is not None:
            generator.write_html(report, html_out)
        if not options.no_browser:
            config = DashboardConfig(
                deployment_url=client.get_deployment_url(),
                metrics=metrics,
                charts=options.charts,
                refresh_interval=options.refresh_interval,
                all_documents=documents,
                has_admin_access=has_admin_access,
                tables=[
                    TableSummary(name=t.name, document_count=t.document_count)
                    for t in tables
                ],
            )
            report.ui_url = await launch_preview(
                registry,
                APP_NAME,
                config_payload(config),
                port=DEFAULT_PORT,
                custom_html=fallback_html(registry, generator, report, APP_NAME),
            ) or None
        return ToolResponse.text(generator.render_markdown(report))
    except Exception as exc:
        logger.exception("Dashboard failed")
        return failure_response(TITLE, exc, CREDENTIALS_HINT)


__all__ = ["handle_dashboard"]
