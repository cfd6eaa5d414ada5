"""Kanban board tool: scheduled functions, cron jobs and agent threads by state."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from analytics.kanban import organize_agents, organize_jobs
from client.base import DeploymentClient
from preview.server import PreviewRegistry
from reporting.generator import ReportGenerator
from reporting.schemas import KanbanReport
from schemas.internal.analytics import KanbanBoard
from schemas.internal.deployment import AgentComponentInfo
from schemas.internal.reports import KanbanConfig, config_payload
from schemas.requests import KanbanBoardArgs
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

TITLE = "Kanban Board"
APP_NAME = "kanban-board"
DEFAULT_PORT = 3459

ACCESS_REQUIRED = (
    "**Access Error**: Admin access required.\n\n"
    "The kanban board needs to query system tables for scheduled functions "
    "and agent data.\n"
    "Please set CONVEX_DEPLOY_KEY environment variable with a deploy key from:\n"
    "https://dashboard.convex.dev → Settings → Deploy Keys"
)


async def handle_kanban_board(
    client: DeploymentClient,
    args: Optional[Mapping[str, Any]] = None,
    *,
    registry: Optional[PreviewRegistry] = None,
    generator: Optional[ReportGenerator] = None,
    html_out: Optional[Path] = None,
) -> ToolResponse:
    """Jobs in Pending/Running/Completed/Failed, agent threads in Idle/Processing/Waiting/Completed.

    ``mode="auto"`` shows both boards.
    """
    if not client.is_connected():
        return error_response(TITLE, DASHBOARD_CONNECT_HINT)
    if not client.has_admin_access():
        return error_response(TITLE, ACCESS_REQUIRED)

    try:
        options = KanbanBoardArgs.model_validate(args or {})
    except ValidationError as exc:
        return failure_response(TITLE, exc)

    try:
        generator = generator or ReportGenerator()
        client.refresh()

        jobs = KanbanBoard()
        if options.mode in ("jobs", "auto"):
            jobs = organize_jobs(
                await client.get_scheduled_functions(), await client.get_cron_jobs()
            )

        agents = KanbanBoard()
        component = AgentComponentInfo()
        if options.mode in ("agents", "auto"):
            component = await client.detect_agent_component()
            if component.installed:
                agents = organize_agents(await client.get_agent_threads())
        logger.info(
            "Kanban board: %d jobs, %d agent threads", jobs.total_count, agents.total_count
        )

        report = KanbanReport(
            deployment_url=client.get_deployment_url(),
            theme=options.theme,
            mode=options.mode,
            jobs=jobs,
            agents=agents,
            agent_component=component,
        )
        if html_out is not None:
            generator.write_html(report, html_out)
        if not options.no_browser:
            config = KanbanConfig(
                deployment_url=client.get_deployment_url(),
                mode=options.mode,
                jobs=jobs,
                agents=agents,
                agent_component=component,
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
        logger.exception("Kanban board failed")
        return failure_response(TITLE, exc, CREDENTIALS_HINT)


__all__ = ["handle_kanban_board"]
