"""Schema browser tool: tables, declared and inferred fields, sample documents."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from client.base import DeploymentClient
from preview.server import PreviewRegistry
from reporting.generator import ReportGenerator
from reporting.schemas import SchemaBrowserReport
from schemas.internal.reports import BrowserTable, SchemaBrowserConfig, config_payload
from schemas.requests import SchemaBrowserArgs
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

TITLE = "Schema Browser"
APP_NAME = "schema-browser"
DEFAULT_PORT = 3456


async def handle_schema_browser(
    client: DeploymentClient,
    args: Optional[Mapping[str, Any]] = None,
    *,
    registry: Optional[PreviewRegistry] = None,
    generator: Optional[ReportGenerator] = None,
    html_out: Optional[Path] = None,
) -> ToolResponse:
    """List every table with its schema and, given admin access, a page of documents."""
    if not client.is_connected():
        return error_response(TITLE, DASHBOARD_CONNECT_HINT)

    try:
        options = SchemaBrowserArgs.model_validate(args or {})
    except ValidationError as exc:
        return failure_response(TITLE, exc)

    try:
        generator = generator or ReportGenerator()
        client.refresh()
        has_admin_access = client.has_admin_access()
        page_size = max(options.page_size, 0)

        tables = []
        for table in await client.list_tables():
            schema = await client.get_table_schema(table.name)
            documents = []
            if has_admin_access and page_size:
                page = await client.query_documents(table.name, limit=page_size)
                documents = page.documents
            tables.append(
                BrowserTable(
                    name=table.name,
                    document_count=table.document_count,
                    indexes=table.indexes,
                    declared_fields=schema.declared_fields,
                    inferred_fields=schema.inferred_fields if options.show_inferred else [],
                    documents=documents,
                )
            )
        logger.info("Loaded %d tables for the schema browser", len(tables))

        report = SchemaBrowserReport(
            deployment_url=client.get_deployment_url(),
            theme=options.theme,
            tables=tables,
            selected_table=options.table,
            show_inferred=options.show_inferred,
            has_admin_access=has_admin_access,
        )
        if html_out is not None:
            generator.write_html(report, html_out)
        if not options.no_browser:
            config = SchemaBrowserConfig(
                deployment_url=client.get_deployment_url(),
                selected_table=options.table,
                show_inferred=options.show_inferred,
                page_size=page_size,
                tables=tables,
                has_admin_access=has_admin_access,
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
        logger.exception("Schema browser failed")
        return failure_response(TITLE, exc, CREDENTIALS_HINT)


__all__ = ["handle_schema_browser"]
