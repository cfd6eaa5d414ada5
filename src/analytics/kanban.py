"""Kanban columns for scheduled functions, cron jobs and agent threads."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from schemas.internal.analytics import KanbanBoard, KanbanColumn, KanbanItem
from schemas.internal.deployment import AgentThread, CronJob, ScheduledFunction

logger = logging.getLogger(__name__)

# (column id, title, color, states that land in it)
JOB_COLUMNS = (
    ("pending", "Pending", "#f59e0b", ("pending",)),
    ("running", "Running", "#3b82f6", ("inProgress",)),
    ("completed", "Completed", "#22c55e", ("success",)),
    ("failed", "Failed", "#ef4444", ("failed", "canceled")),
)
AGENT_COLUMNS = (
    ("idle", "Idle", "#6b7280", ("idle",)),
    ("processing", "Processing", "#3b82f6", ("processing",)),
    ("waiting", "Waiting for Tool", "#f59e0b", ("waiting",)),
    ("completed", "Completed", "#22c55e", ("completed", "error")),
)

ASCII_COLUMN_WIDTH = 20
ASCII_MAX_ROWS = 5


def _place(
    layout: Sequence[tuple[str, str, str, tuple[str, ...]]],
    items: Iterable[KanbanItem],
) -> list[KanbanColumn]:
    columns = [KanbanColumn(id=cid, title=title, color=color) for cid, title, color, _ in layout]
    by_state = {
        state: column
        for column, (_, _, _, states) in zip(columns, layout)
        for state in states
    }
    for item in items:
        column = by_state.get(item.state)
        if column is None:
            logger.debug("No column for %s state %r", item.kind, item.state)
            continue
        column.items.append(item)
    return columns


def organize_jobs(
    scheduled: Sequence[ScheduledFunction], crons: Sequence[CronJob]
) -> KanbanBoard:
    """Scheduled functions by state; cron jobs always wait for their next run."""
    items = [
        KanbanItem(id=fn.id, label=fn.name or fn.id[:10], kind="scheduled", state=fn.state)
        for fn in scheduled
    ]
    items += [
        KanbanItem(
            id=cron.id,
            label=cron.name or cron.id[:10],
            kind="cron",
            state="pending",
            detail=cron.schedule or None,
        )
        for cron in crons
    ]
    return KanbanBoard(
        columns=_place(JOB_COLUMNS, items),
        total_count=len(scheduled) + len(crons),
    )


def organize_agents(threads: Sequence[AgentThread]) -> KanbanBoard:
    """Agent threads by status; errored threads finish in Completed."""
    items = [
        KanbanItem(
            id=thread.id,
            label=thread.title or thread.id[:10],
            kind="thread",
            state=thread.status,
            detail="error" if thread.status == "error" else None,
        )
        for thread in threads
    ]
    return KanbanBoard(columns=_place(AGENT_COLUMNS, items), total_count=len(threads))


def _cell(text: str, width: int) -> str:
    return text.ljust(width)[:width]


def ascii_board(
    columns: Sequence[KanbanColumn],
    width: int = ASCII_COLUMN_WIDTH,
    max_rows: int = ASCII_MAX_ROWS,
) -> str:
    """Fixed-width board for terminals, ``max_rows`` items per column."""
    rule = "+" + "+".join("-" * width for _ in columns) + "+"
    lines = [
        rule,
        "|" + "|".join(_cell(f" {c.title} ({len(c.items)}) ", width) for c in columns) + "|",
        rule,
    ]

    rows = max((min(len(c.items), max_rows) for c in columns), default=0)
    for index in range(rows):
        cells = [
            _cell(f" {c.items[index].label}", width) if index < len(c.items) else " " * width
            for c in columns
        ]
        lines.append("|" + "|".join(cells) + "|")

    if any(len(c.items) > max_rows for c in columns):
        cells = [
            _cell(f" +{len(c.items) - max_rows} more", width)
            if len(c.items) > max_rows
            else " " * width
            for c in columns
        ]
        lines.append("|" + "|".join(cells) + "|")

    lines.append(rule)
    return "\n".join(lines)


__all__ = [
    "AGENT_COLUMNS",
    "JOB_COLUMNS",
    "ascii_board",
    "organize_agents",
    "organize_jobs",
]
