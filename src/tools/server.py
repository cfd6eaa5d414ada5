"""Tool-calling server exposing the reports over stdio."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from client.base import DeploymentClient
from client.convex import ConvexClient
from core.config import Settings, get_settings
from preview.server import PreviewRegistry
from schemas.internal.reports import KanbanMode, ThemeName
from schemas.responses import ToolResponse
from services import (
    handle_dashboard,
    handle_kanban_board,
    handle_schema_browser,
    handle_schema_diagram,
    handle_schema_drift,
    handle_table_heatmap,
    handle_write_conflict_report,
)

logger = logging.getLogger(__name__)

SERVER_NAME = "convex-visual"


def _args(**values: Any) -> Dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


def _unwrap(response: ToolResponse) -> str:
    if response.is_error:
        raise ToolError(response.joined_text)
    return response.joined_text


def create_server(
    settings: Settings | None = None,
    client: DeploymentClient | None = None,
    registry: PreviewRegistry | None = None,
) -> FastMCP:
    settings = settings or get_settings()
    client = client or ConvexClient(settings)
    registry = registry or PreviewRegistry(settings)

    @asynccontextmanager
    async def lifespan(_server: FastMCP) -> AsyncIterator[None]:
        try:
            yield
        finally:
            logger.info("Closing %d preview(s)", len(registry.active_ports))
            registry.close_all()

    mcp = FastMCP(SERVER_NAME, lifespan=lifespan)

    # Parameter names are the camelCase keys callers send.
    @mcp.tool(name="dashboard_view")
    async def dashboard_view(
        metrics: Optional[List[Dict[str, Any]]] = None,
        charts: Optional[List[Dict[str, Any]]] = None,
        refreshInterval: Optional[float] = None,
        noBrowser: Optional[bool] = None,
        theme: Optional[ThemeName] = None,
    ) -> str:
        """Realtime dashboard of table metrics with an interactive browser view."""
        args = _args(
            metrics=metrics,
            charts=charts,
            refreshInterval=refreshInterval,
            noBrowser=noBrowser,
            theme=theme or settings.default_theme,
        )
        return _unwrap(await handle_dashboard(client, args, registry=registry))

    @mcp.tool(name="schema_drift")
    async def schema_drift(
        maxTables: Optional[int] = None,
        noBrowser: Optional[bool] = None,
        theme: Optional[ThemeName] = None,
    ) -> str:
        """Compare declared schema fields with fields inferred from stored documents."""
        args = _args(
            maxTables=maxTables,
            noBrowser=noBrowser,
            theme=theme or settings.default_theme,
        )
        return _unwrap(await handle_schema_drift(client, args, registry=registry))

    @mcp.tool(name="table_heatmap")
    async def table_heatmap(
        windowMinutes: Optional[float] = None,
        maxDocsPerTable: Optional[int] = None,
        maxTables: Optional[int] = None,
        noBrowser: Optional[bool] = None,
        theme: Optional[ThemeName] = None,
    ) -> str:
        """Recent writes per minute for each table. Requires a deploy key."""
        args = _args(
            windowMinutes=windowMinutes,
            maxDocsPerTable=maxDocsPerTable,
            maxTables=maxTables,
            noBrowser=noBrowser,
            theme=theme or settings.default_theme,
        )
        return _unwrap(await handle_table_heatmap(client, args, registry=registry))

    @mcp.tool(name="write_conflict_report")
    async def write_conflict_report(
        logFile: Optional[str] = None,
        sinceMinutes: Optional[float] = None,
        maxLines: Optional[int] = None,
        noBrowser: Optional[bool] = None,
        theme: Optional[ThemeName] = None,
    ) -> str:
        """Group write conflicts from an exported Convex log file."""
        args = _args(
            logFile=logFile,
            sinceMinutes=sinceMinutes,
            maxLines=maxLines,
            noBrowser=noBrowser,
            theme=theme or settings.default_theme,
        )
        return _unwrap(await handle_write_conflict_report(args, registry=registry))

    @mcp.tool(name="schema_browser")
    async def schema_browser(
        table: Optional[str] = None,
        showInferred: Optional[bool] = None,
        pageSize: Optional[int] = None,
        noBrowser: Optional[bool] = None,
        theme: Optional[ThemeName] = None,
    ) -> str:
        """Browse tables with document counts, declared vs inferred schemas and sample documents."""
        args = _args(
            table=table,
            showInferred=showInferred,
            pageSize=pageSize,
            noBrowser=noBrowser,
            theme=theme or settings.default_theme,
        )
        return _unwrap(await handle_schema_browser(client, args, registry=registry))

    @mcp.tool(name="kanban_board")
    async def kanban_board(
        mode: Optional[KanbanMode] = None,
        noBrowser: Optional[bool] = None,
        theme: Optional[ThemeName] = None,
    ) -> str:
        """Kanban board of scheduled functions and cron jobs (jobs), agent threads (agents) or both (auto)."""
        args = _args(mode=mode, noBrowser=noBrowser, theme=theme or settings.default_theme)
        return _unwrap(await handle_kanban_board(client, args, registry=registry))

    @mcp.tool(name="schema_diagram")
    async def schema_diagram(
        tables: Optional[List[str]] = None,
        ascii: Optional[bool] = None,
        noBrowser: Optional[bool] = None,
        theme: Optional[ThemeName] = None,
    ) -> str:
        """Mermaid ER diagram of table relationships. Use only when a diagram is asked for."""
        args = _args(
            tables=tables,
            ascii=ascii,
            noBrowser=noBrowser,
            theme=theme or settings.default_theme,
        )
        return _unwrap(await handle_schema_diagram(client, args, registry=registry))

    return mcp


def run_stdio(settings: Settings | None = None) -> None:
    create_server(settings).run(transport="stdio")


__all__ = ["SERVER_NAME", "create_server", "run_stdio"]
