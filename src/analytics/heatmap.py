"""Recent write rates per table, estimated from document creation times."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Sequence

from schemas.internal.analytics import HeatmapRow
from schemas.internal.deployment import TableInfo

if TYPE_CHECKING:
    from client.base import DeploymentClient

logger = logging.getLogger(__name__)

PAGE_SIZE = 100


async def count_recent_writes(
    client: DeploymentClient,
    table_name: str,
    cutoff_ms: float,
    max_docs: int,
) -> tuple[int, int]:
    """Return ``(writes, scanned)`` for documents created at or after the cutoff.

    Pages are read newest first and the scan stops at the first document older
    than the cutoff, so out-of-order inserts would be under-counted.
    """
    writes = 0
    scanned = 0
    cursor: str | None = None

    while scanned < max_docs:
        page = await client.query_documents(
            table_name,
            limit=min(PAGE_SIZE, max_docs - scanned),
            cursor=cursor,
            order="desc",
        )
        for doc in page.documents:
            scanned += 1
            created = doc.get("_creationTime") or 0
            if created < cutoff_ms:
                return writes, scanned
            writes += 1

        if page.is_done or not page.continue_cursor or not page.documents:
            break
        cursor = page.continue_cursor

    return writes, scanned


def select_tables(tables: Sequence[TableInfo], max_tables: int) -> list[TableInfo]:
    """Largest tables first, capped at ``max_tables``."""
    ordered = sorted(tables, key=lambda t: t.document_count, reverse=True)
    return ordered[: max(max_tables, 0)]


async def build_heatmap_rows(
    client: DeploymentClient,
    tables: Sequence[TableInfo],
    *,
    window_minutes: float,
    max_docs_per_table: int,
    now_ms: float | None = None,
) -> list[HeatmapRow]:
    now_ms = time.time() * 1000 if now_ms is None else now_ms
    cutoff = now_ms - window_minutes * 60 * 1000

    rows = []
    for table in tables:
        writes, scanned = await count_recent_writes(
            client, table.name, cutoff, max_docs_per_table
        )
        logger.debug("%s: %d writes in %d scanned", table.name, writes, scanned)
        rows.append(
            HeatmapRow(
                table=table.name,
                writes=writes,
                writes_per_minute=writes / window_minutes if window_minutes > 0 else 0,
                scanned=scanned,
            )
        )

    rows.sort(key=lambda row: row.writes_per_minute, reverse=True)
    return rows


__all__ = ["PAGE_SIZE", "build_heatmap_rows", "count_recent_writes", "select_tables"]
