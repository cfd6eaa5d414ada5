import asyncio
import json

from analytics.logs import (
    UNKNOWN,
    aggregate_conflicts,
    is_write_conflict,
    parse_line,
    parse_lines,
    parse_timestamp,
    read_log_lines,
)
from schemas.internal.analytics import ParsedEvent


def test_structured_line():
    line = json.dumps(
        {
            "timestamp": "2024-01-01T00:00:00Z",
            "udfName": "messages:send",
            "table_name": "messages",
            "error": "Write conflict on messages",
        }
    )
    event = parse_line(line)

    assert event.message == "Write conflict on messages"
    assert event.function_name == "messages:send"
    assert event.table == "messages"
    assert event.timestamp == 1704067200000


def test_structured_line_without_message_reserializes():
    event = parse_line('{"ts": 1700000000000, "function": "tasks:add"}')
    assert event.timestamp == 1700000000000
    assert json.loads(event.message) == {"ts": 1700000000000, "function": "tasks:add"}


def test_non_object_json_falls_back_to_text():
    event = parse_line('"function foo"')
    assert event.message == '"function foo"'
    assert event.function_name == "foo"


def test_text_line_patterns():
    event = parse_line("WriteConflict in mutation tasks.update on table 'tasks'")
    assert event.function_name == "tasks.update"
    assert event.table == "tasks"

    event = parse_line("OCC retry tableName=documents")
    assert event.function_name is None
    assert event.table == "documents"


def test_invalid_timestamp_is_none():
    assert parse_timestamp("yesterday") is None
    assert parse_timestamp(True) is None
    assert parse_timestamp(12.5) == 12.5


def test_parse_lines_limits_and_skips_blanks():
    lines = ["first", "", "   ", "second", "third"]
    events = parse_lines(lines, max_lines=4)
    assert [e.message for e in events] == ["first", "second"]


def test_is_write_conflict_is_narrow():
    assert is_write_conflict("Write Conflict detected")
    assert is_write_conflict("writeconflict")
    assert not is_write_conflict("OptimisticConcurrencyControlFailure")
    assert not is_write_conflict("write-conflict")


def test_aggregate_conflicts_groups_and_sorts():
    events = [
        ParsedEvent(message="m", function_name="a", table="t1"),
        ParsedEvent(message="m", function_name="b", table="t2"),
        ParsedEvent(message="m", function_name="b", table="t2"),
        ParsedEvent(message="m"),
    ]
    rows = aggregate_conflicts(events)

    assert [(r.function_name, r.table, r.count) for r in rows] == [
        ("b", "t2", 2),
        ("a", "t1", 1),
        (UNKNOWN, UNKNOWN, 1),
    ]
    assert sum(r.count for r in rows) == len(events)


def test_read_log_lines(tmp_path):
    path = tmp_path / "logs.txt"
    path.write_text("one\ntwo\n", encoding="utf-8")
    assert asyncio.run(read_log_lines(path)) == ["one", "two", ""]


def test_read_log_lines_replaces_undecodable_bytes(tmp_path):
    path = tmp_path / "logs.txt"
    path.write_bytes(b"first\nstray byte \xff here\nlast\n")

    lines = asyncio.run(read_log_lines(path))

    assert lines[0] == "first"
    assert lines[1] == "stray byte � here"
    assert lines[2] == "last"
