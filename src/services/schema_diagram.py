"""Schema diagram tool: Mermaid ER diagram of tables and their references."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from analytics.diagram import detect_relationships, mermaid_er, text_diagram
from client.base import DeploymentClient
from preview.server import PreviewRegistry
from reporting.generator import ReportGenerator
from reporting.schemas import DiagramReport
from schemas.internal.analytics import DiagramTable
from schemas.internal.reports import DiagramConfig, config_payload
from schemas.requests import SchemaDiagramArgs
from schemas.responses import ToolResponse
from services.common import (
    CONNECT_HINT,
    CREDENTIALS_HINT,
    error_response,
    failure_response,
    launch_preview,
)

logger = logging.getLogger(__name__)

TITLE = "Schema Diagram"
APP_NAME = "schema-diagram"
DEFAULT_PORT = 3458


async def handle_schema_diagram(
    client: DeploymentClient,
    args: Optional[Mapping[str, Any]] = None,
    *,
    registry: Optional[PreviewRegistry] = None,
    generator: Optional[ReportGenerator] = None,
    html_out: Optional[Path] = None,
) -> ToolResponse:
    """Draw the tables named in ``tables`` (all by default) and the references between them.

    Each table uses its declared fields, or its inferred fields when nothing
    is declared. References may point at tables outside the filter.
    """
    if not client.is_connected():
        return error_response(TITLE, CONNECT_HINT)

    try:
        options = SchemaDiagramArgs.model_validate(args or {})
    except ValidationError as exc:
        return failure_response(TITLE, exc)

    try:
        generator = generator or ReportGenerator()
        client.refresh()

        all_tables = await client.list_tables()
        names = [t.name for t in all_tables]
        wanted = set(options.tables) if options.tables is not None else None

        tables = []
        for info in all_tables:
            if wanted is not None and info.name not in wanted:
                continue
            schema = await client.get_table_schema(info.name)
            tables.append(
                DiagramTable(
                    name=info.name,
                    fields=schema.declared_fields or schema.inferred_fields,
                    document_count=info.document_count,
                )
            )
        relations = detect_relationships(tables, names)
        code = mermaid_er(tables, relations)
        logger.info("Diagram: %d tables, %d relationships", len(tables), len(relations))

        report = DiagramReport(
            deployment_url=client.get_deployment_url(),
            theme=options.theme,
            tables=tables,
            relations=relations,
            mermaid_code=code,
            text_diagram=text_diagram(tables, relations, ascii=options.ascii),
        )
        if html_out is not None:
            generator.write_html(report, html_out)
        if not options.no_browser:
            config = DiagramConfig(
                deployment_url=client.get_deployment_url(),
                mermaid_code=code,
                tables=tables,
                relations=relations,
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
        logger.exception("Schema diagram failed")
        return failure_response(TITLE, exc, CREDENTIALS_HINT)


__all__ = ["handle_schema_diagram"]
