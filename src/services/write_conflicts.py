"""Write-conflict report tool: conflicts grouped from an exported log file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from analytics.logs import aggregate_conflicts, is_write_conflict, parse_lines, read_log_lines
from preview.server import PreviewRegistry
from reporting.generator import ReportGenerator
from reporting.schemas import ConflictReport
from schemas.internal.reports import ConflictReportConfig, config_payload
from schemas.requests import WriteConflictArgs
from schemas.responses import ToolResponse
from services.common import (
    LOG_FILE_EXAMPLE,
    LOG_FILE_REQUIRED,
    error_response,
    failure_response,
    launch_preview,
    titled,
)

logger = logging.getLogger(__name__)

TITLE = "Write Conflict Report"
APP_NAME = "write-conflicts"
DEFAULT_PORT = 3462


async def handle_write_conflict_report(
    args: Optional[Mapping[str, Any]] = None,
    *,
    registry: Optional[PreviewRegistry] = None,
    generator: Optional[ReportGenerator] = None,
    html_out: Optional[Path] = None,
) -> ToolResponse:
    """Needs no deployment connection; only the exported log file is read."""
    try:
        options = WriteConflictArgs.model_validate(args or {})
    except Exception as exc:
        return failure_response(TITLE, exc)
    if not options.log_file:
        return error_response(TITLE, LOG_FILE_REQUIRED)

    try:
        lines = await read_log_lines(options.log_file)
    except OSError as exc:
        logger.error("Cannot read log file %s: %s", options.log_file, exc)
        return failure_response(TITLE, exc, LOG_FILE_EXAMPLE)

    try:
        generator = generator or ReportGenerator()
        events = parse_lines(lines, options.max_lines)
        conflicts = [event for event in events if is_write_conflict(event.message)]
        logger.info(
            "%d of %d log events are write conflicts", len(conflicts), len(events)
        )

        if not conflicts:
            return ToolResponse.text(
                titled(
                    TITLE,
                    "No write conflicts found in logs.\n\n"
                    f"Log file: `{options.log_file}`",
                )
            )

        rows = aggregate_conflicts(conflicts)
        report = ConflictReport(
            theme=options.theme,
            rows=rows,
            window_minutes=options.since_minutes,
            log_file=options.log_file,
        )
        if html_out is not None:
            generator.write_html(report, html_out)
        if not options.no_browser:
            config = ConflictReportConfig(
                rows=rows, window_minutes=options.since_minutes
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
        logger.exception("Write conflict report failed")
        return failure_response(TITLE, exc)


__all__ = ["handle_write_conflict_report"]
