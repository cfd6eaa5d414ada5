"""Best-effort parsing of exported Convex log lines.

Each line is handled on its own. JSON lines are decoded; anything else is kept
as a raw message and mined with a couple of regular expressions. A line that
yields no function or table name is still kept and grouped under "unknown".
"""

from __future__ import annotations

import asyncio
import json
import re
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from schemas.internal.analytics import ConflictRow, ParsedEvent

UNKNOWN = "unknown"

TIMESTAMP_KEYS = ("timestamp", "time", "ts")
FUNCTION_KEYS = ("functionName", "function", "udfName", "name")
TABLE_KEYS = ("tableName", "table", "table_name")
MESSAGE_KEYS = ("message", "msg", "error", "text")

CONFLICT_MARKERS = ("write conflict", "writeconflict")

FUNCTION_PATTERNS = (
    re.compile(r"function\s+([a-zA-Z0-9_.-]+)", re.IGNORECASE),
    re.compile(r"mutation\s+([a-zA-Z0-9_.-]+)", re.IGNORECASE),
)
TABLE_PATTERNS = (
    re.compile(r"table\s+[\"'`]?([a-zA-Z0-9_]+)[\"'`]?", re.IGNORECASE),
    re.compile(r"tableName[:=]\s*([a-zA-Z0-9_]+)", re.IGNORECASE),
)

Extractor = Callable[[str], Optional[str]]


def _first_match(patterns: Iterable[re.Pattern[str]]) -> Extractor:
    def extract(text: str) -> Optional[str]:
        for pattern in patterns:
            match = pattern.search(text)
            if match:
                return match.group(1)
        return None

    return extract


extract_function_name: Extractor = _first_match(FUNCTION_PATTERNS)
extract_table_name: Extractor = _first_match(TABLE_PATTERNS)


def parse_timestamp(value: Any) -> Optional[float]:
    """Epoch millis from a number or an ISO-8601 string; None otherwise."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed.timestamp() * 1000
    return None


def _first_present(record: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        value = record.get(key)
        if value:
            return value
    return None


def _optional_str(value: Any) -> Optional[str]:
    return str(value) if value else None


def try_structured(line: str) -> Optional[ParsedEvent]:
    try:
        record = json.loads(line)
    except json.JSONDecodeError:
        return None
    if not isinstance(record, dict):
        return None

    message = _first_present(record, MESSAGE_KEYS)
    if message is None:
        message = json.dumps(record)
    return ParsedEvent(
        message=str(message),
        timestamp=parse_timestamp(_first_present(record, TIMESTAMP_KEYS)),
        function_name=_optional_str(_first_present(record, FUNCTION_KEYS)),
        table=_optional_str(_first_present(record, TABLE_KEYS)),
    )


def parse_line(line: str) -> ParsedEvent:
    structured = try_structured(line)
    if structured is not None:
        return structured
    return ParsedEvent(
        message=line,
        function_name=extract_function_name(line),
        table=extract_table_name(line),
    )


def parse_lines(lines: Iterable[str], max_lines: int | None = None) -> list[ParsedEvent]:
    """Parse up to ``max_lines`` raw lines, skipping blank ones."""
    events = []
    for index, line in enumerate(lines):
        if max_lines is not None and index >= max_lines:
            break
        stripped = line.strip()
        if stripped:
            events.append(parse_line(stripped))
    return events


def is_write_conflict(message: str) -> bool:
    lowered = message.lower()
    return any(marker in lowered for marker in CONFLICT_MARKERS)


def aggregate_conflicts(events: Iterable[ParsedEvent]) -> list[ConflictRow]:
    """Count conflict events per (function, table), most frequent first."""
    counts: dict[tuple[str, str], int] = {}
    for event in events:
        key = (event.function_name or UNKNOWN, event.table or UNKNOWN)
        counts[key] = counts.get(key, 0) + 1
    rows = [
        ConflictRow(function_name=function_name, table=table, count=count)
        for (function_name, table), count in counts.items()
    ]
    rows.sort(key=lambda row: row.count, reverse=True)
    return rows


async def read_log_lines(path: str | Path) -> list[str]:
    text = await asyncio.to_thread(
        Path(path).read_text, encoding="utf-8", errors="replace"
    )
    return text.split("\n")


__all__ = [
    "UNKNOWN",
    "aggregate_conflicts",
    "extract_function_name",
    "extract_table_name",
    "is_write_conflict",
    "parse_line",
    "parse_lines",
    "parse_timestamp",
    "read_log_lines",
    "try_structured",
]
