"""Shared response texts and preview launching for the tool handlers."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from preview.content import find_app_html
from preview.server import PreviewRegistry
from reporting.generator import ReportGenerator
from reporting.schemas import ReportBase
from schemas.responses import ToolResponse

logger = logging.getLogger(__name__)

CONNECT_HINT = (
    "**Connection Error**: No Convex deployment configured.\n\n"
    "To connect:\n"
    "1. Run `npx convex login` (or `convex-visual test` to check the setup)\n"
    "2. Or set `CONVEX_URL` and `CONVEX_DEPLOY_KEY`"
)
DASHBOARD_CONNECT_HINT = (
    "**Connection Error**: No Convex deployment configured.\n\n"
    "To connect:\n"
    "1. Run `npx convex login` to authenticate\n"
    "2. Or set `CONVEX_URL` and `CONVEX_DEPLOY_KEY` environment variables"
)
ADMIN_REQUIRED = (
    "**Admin Access Required**: This view needs document access.\n\n"
    "Set `CONVEX_DEPLOY_KEY` and try again."
)
CREDENTIALS_HINT = "Please check your Convex credentials and deployment URL."
LOG_FILE_EXAMPLE = (
    "Example:\n"
    "```bash\n"
    "npx convex logs --limit 1000 > logs.txt\n"
    "convex-visual conflicts --log-file logs.txt\n"
    "```"
)
LOG_FILE_REQUIRED = (
    "**Log file required**: Provide a log file exported from Convex.\n\n"
    + LOG_FILE_EXAMPLE
)


def titled(title: str, body: str) -> str:
    return f"## {title}\n\n{body}"


def error_response(title: str, body: str) -> ToolResponse:
    return ToolResponse.error(titled(title, body))


def failure_response(title: str, exc: BaseException, hint: str | None = None) -> ToolResponse:
    """Upstream or unexpected failure, reported once at the handler boundary."""
    body = f"**Error**: {describe_error(exc)}"
    if hint:
        body = f"{body}\n\n{hint}"
    return error_response(title, body)


def describe_error(exc: BaseException) -> str:
    if isinstance(exc, ValidationError):
        return "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'arguments'}: {err['msg']}"
            for err in exc.errors()
        )
    return str(exc) or exc.__class__.__name__


async def launch_preview(
    registry: Optional[PreviewRegistry],
    app_name: str,
    config: Mapping[str, Any],
    *,
    port: int,
    custom_html: str | None = None,
) -> str:
    """Start a preview and return its URL, or "" when none could be started."""
    if registry is None:
        return ""
    try:
        session = await registry.launch(
            app_name,
            config,
            preferred_port=port,
            custom_html=custom_html,
        )
    except Exception:
        logger.exception("Failed to launch %s preview", app_name)
        return ""
    return session.url


def fallback_html(
    registry: Optional[PreviewRegistry],
    generator: ReportGenerator,
    report: ReportBase,
    app_name: str,
) -> str | None:
    """Server-rendered report when the named browser app is not installed."""
    if registry is None:
        return None
    settings = registry.settings
    if find_app_html(app_name, settings.apps_dist_dir, settings.apps_source_dir):
        return None
    return generator.render_html(report)


__all__ = [
    "ADMIN_REQUIRED",
    "CONNECT_HINT",
    "CREDENTIALS_HINT",
    "DASHBOARD_CONNECT_HINT",
    "LOG_FILE_EXAMPLE",
    "LOG_FILE_REQUIRED",
    "describe_error",
    "error_response",
    "failure_response",
    "fallback_html",
    "launch_preview",
    "titled",
]
