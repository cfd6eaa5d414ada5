import asyncio

from core.errors import DeploymentError
from preview.server import PreviewRegistry
from schemas.internal.deployment import (
    AgentThread,
    CronJob,
    ScheduledFunction,
    SchemaField,
    TableInfo,
    TableSchema,
)
from services import (
    handle_dashboard,
    handle_kanban_board,
    handle_schema_browser,
    handle_schema_diagram,
    handle_schema_drift,
    handle_table_heatmap,
    handle_write_conflict_report,
)

NOW = 1_700_000_000_000
NO_BROWSER = {"noBrowser": True}


def _schema(table, declared, inferred):
    return TableSchema(
        table_name=table,
        declared_fields=[SchemaField(name=n, type=t) for n, t in declared],
        inferred_fields=[SchemaField(name=n, type=t) for n, t in inferred],
    )


def test_not_connected_responses(fake_client_cls):
    client = fake_client_cls(connected=False)

    for handler, title in (
        (handle_schema_drift, "## Schema Drift"),
        (handle_table_heatmap, "## Table Heatmap"),
        (handle_dashboard, "## Realtime Dashboard"),
    ):
        response = asyncio.run(handler(client, NO_BROWSER))
        assert response.is_error
        assert response.joined_text.startswith(title)
        assert "**Connection Error**" in response.joined_text
        assert "CONVEX_URL" in response.joined_text


def test_heatmap_requires_admin(fake_client_cls):
    response = asyncio.run(handle_table_heatmap(fake_client_cls(admin=False), NO_BROWSER))

    assert response.is_error
    assert "**Admin Access Required**" in response.joined_text
    assert "CONVEX_DEPLOY_KEY" in response.joined_text


def test_upstream_failure_is_reported_once(fake_client_cls):
    client = fake_client_cls(error=DeploymentError("upstream exploded"))

    drift = asyncio.run(handle_schema_drift(client, NO_BROWSER))
    dashboard = asyncio.run(handle_dashboard(client, NO_BROWSER))

    assert drift.is_error
    assert drift.joined_text == (
        "## Schema Drift\n\n**Error**: upstream exploded\n\n"
        "Please check your Convex credentials and deployment URL."
    )
    assert dashboard.joined_text.endswith(
        "**Error**: upstream exploded\n\n"
        "Please check your Convex credentials and deployment URL."
    )


def test_schema_drift_report(fake_client_cls):
    client = fake_client_cls(
        tables=[TableInfo(name="clean"), TableInfo(name="users"), TableInfo(name="skipped")],
        schemas={
            "clean": _schema("clean", [("a", "string")], [("a", "string")]),
            "users": _schema(
                "users", [("age", "number"), ("old", "string")], [("age", "string"), ("new", "string")]
            ),
        },
    )

    response = asyncio.run(handle_schema_drift(client, {"maxTables": 2, "noBrowser": True}))
    text = response.joined_text

    assert not response.is_error
    assert "**Interactive UI**" not in text
    assert text.index("| users | 1 | 1 | 1 |") < text.index("| clean | 0 | 0 | 0 |")
    assert "skipped" not in text


def test_heatmap_report(fake_client_cls):
    docs = [{"_id": f"d{i}", "_creationTime": NOW - 1_000 * (i + 1)} for i in range(5)]
    client = fake_client_cls(
        tables=[TableInfo(name="events", document_count=5), TableInfo(name="empty")],
        documents={"events": docs},
    )

    response = asyncio.run(
        handle_table_heatmap(client, {"windowMinutes": "1", "noBrowser": True}, now_ms=NOW)
    )

    assert not response.is_error
    assert "| events | 5 ██████████ | 5 | 5 |" in response.joined_text
    assert "| empty | 0 ░░░░░░░░░░ | 0 | 0 |" in response.joined_text


def test_dashboard_without_admin_skips_documents(fake_client_cls):
    client = fake_client_cls(
        tables=[TableInfo(name="users", document_count=42)],
        documents={"users": [{"_id": "u1", "_creationTime": NOW}]},
        admin=False,
    )

    response = asyncio.run(handle_dashboard(client, NO_BROWSER))

    assert client.document_calls == 0
    assert "| users count | **42** | users / count |" in response.joined_text
    assert "*No documents found*" in response.joined_text


def test_dashboard_with_metric_specs(fake_client_cls):
    client = fake_client_cls(
        tables=[TableInfo(name="orders", document_count=3)],
        documents={"orders": [{"_id": "o1", "total": 4}, {"_id": "o2", "total": 6}]},
    )
    args = {
        "metrics": [{"name": "Avg order", "table": "orders", "aggregation": "avg", "field": "total"}],
        "charts": [{"type": "bar", "title": "Orders", "table": "orders"}],
        "noBrowser": True,
    }

    response = asyncio.run(handle_dashboard(client, args))

    assert client.document_calls == 1
    assert "| Avg order | **5** | orders / avg(total) |" in response.joined_text
    assert "**Orders** (bar chart from `orders`)" in response.joined_text


def test_invalid_arguments_become_error_response(fake_client_cls):
    response = asyncio.run(handle_schema_drift(fake_client_cls(), {"theme": "neon"}))

    assert response.is_error
    assert response.joined_text.startswith("## Schema Drift\n\n**Error**: theme:")
    assert "credentials" not in response.joined_text


def test_conflicts_require_log_file():
    response = asyncio.run(handle_write_conflict_report({}))

    assert response.is_error
    assert "**Log file required**" in response.joined_text
    assert "npx convex logs --limit 1000 > logs.txt" in response.joined_text


def test_conflicts_missing_file(tmp_path):
    response = asyncio.run(
        handle_write_conflict_report({"logFile": str(tmp_path / "nope.txt")})
    )

    assert response.is_error
    assert response.joined_text.startswith("## Write Conflict Report\n\n**Error**:")
    assert "npx convex logs --limit 1000 > logs.txt" in response.joined_text
    assert "convex-visual conflicts --log-file logs.txt" in response.joined_text


def test_conflicts_none_found(tmp_path):
    log = tmp_path / "logs.txt"
    log.write_text("all good\nnothing to see\n")

    response = asyncio.run(handle_write_conflict_report({"logFile": str(log)}))

    assert not response.is_error
    assert response.joined_text == (
        f"## Write Conflict Report\n\nNo write conflicts found in logs.\n\nLog file: `{log}`"
    )


def test_conflicts_report(tmp_path):
    log = tmp_path / "logs.txt"
    log.write_text(
        "\n".join(
            [
                '{"functionName": "tasks:update", "table": "tasks", "message": "Write conflict"}',
                '{"functionName": "tasks:update", "table": "tasks", "message": "WriteConflict again"}',
                "Write conflict in function counters.bump on table counters",
                "unrelated line",
                "write conflict beyond the limit",
            ]
        )
    )
    out = tmp_path / "conflicts.html"

    response = asyncio.run(
        handle_write_conflict_report(
            {"logFile": str(log), "maxLines": 4, "noBrowser": True}, html_out=out
        )
    )
    text = response.joined_text

    assert "| tasks:update | tasks | 2 |" in text
    assert "| counters.bump | counters | 1 |" in text
    assert "unknown" not in text
    assert "tasks:update" in out.read_text(encoding="utf-8")


def test_preview_launch_adds_ui_link(fake_client_cls, settings):
    client = fake_client_cls(tables=[TableInfo(name="users")])
    registry = PreviewRegistry(settings)

    async def scenario():
        try:
            return await handle_schema_drift(client, {}, registry=registry)
        finally:
            registry.close_all()

    response = asyncio.run(scenario())

    assert "**Interactive UI**: http://127.0.0.1:" in response.joined_text
    assert registry.active_ports == []


def test_preview_failure_still_returns_report(fake_client_cls, settings, monkeypatch):
    async def broken_launch(*args, **kwargs):
        raise OSError("no sockets today")

    registry = PreviewRegistry(settings)
    monkeypatch.setattr(registry, "launch", broken_launch)

    response = asyncio.run(
        handle_schema_drift(fake_client_cls(tables=[TableInfo(name="users")]), {}, registry=registry)
    )

    assert not response.is_error
    assert "**Interactive UI**" not in response.joined_text
    assert "| users | 0 | 0 | 0 |" in response.joined_text


def test_heatmap_upstream_failure_mentions_credentials(fake_client_cls):
    client = fake_client_cls(error=DeploymentError("HTTP 401"))

    response = asyncio.run(handle_table_heatmap(client, NO_BROWSER))

    assert response.is_error
    assert response.joined_text == (
        "## Table Heatmap\n\n**Error**: HTTP 401\n\n"
        "Please check your Convex credentials and deployment URL."
    )


def test_conflicts_tolerate_undecodable_bytes(tmp_path):
    log = tmp_path / "logs.txt"
    log.write_bytes(
        b"Write conflict in mutation tasks.add on table tasks\n"
        b"stray byte \xff here\n"
        b"Write conflict in mutation tasks.add on table tasks\n"
    )

    response = asyncio.run(
        handle_write_conflict_report({"logFile": str(log), "noBrowser": True})
    )

    assert not response.is_error
    assert "| tasks.add | tasks | 2 |" in response.joined_text


def test_unexpected_preview_error_still_returns_report(fake_client_cls, settings, monkeypatch):
    async def broken_launch(*args, **kwargs):
        raise RuntimeError("event loop went away")

    registry = PreviewRegistry(settings)
    monkeypatch.setattr(registry, "launch", broken_launch)

    response = asyncio.run(
        handle_schema_drift(fake_client_cls(tables=[TableInfo(name="users")]), {}, registry=registry)
    )

    assert not response.is_error
    assert "**Interactive UI**" not in response.joined_text
    assert "| users | 0 | 0 | 0 |" in response.joined_text


def _browser_client(fake_client_cls, **kwargs):
    return fake_client_cls(
        tables=[
            TableInfo(name="users", document_count=2, indexes=["by_email"]),
            TableInfo(name="events"),
        ],
        documents={
            "users": [
                {"_id": "u1", "_creationTime": NOW - 10, "email": "a@x.io"},
                {"_id": "u2", "_creationTime": NOW, "email": "b@x.io"},
            ]
        },
        schemas={
            "users": _schema("users", [("email", "string")], [("email", "string"), ("nick", "string")]),
            "events": _schema("events", [], [("kind", "string")]),
        },
        **kwargs,
    )


def test_schema_browser_overview(fake_client_cls):
    client = _browser_client(fake_client_cls)

    response = asyncio.run(handle_schema_browser(client, {"pageSize": 1, "noBrowser": True}))
    text = response.joined_text

    assert not response.is_error
    assert "Found 2 tables:" in text
    assert "### users\nDocuments: 2" in text
    assert "**Declared Schema:**" in text
    assert "**Inferred Schema:**" in text
    assert "| kind | `string` | Yes |" in text
    assert "**Sample (1 of 2):**" in text
    assert '"_id": "u2"' in text
    assert client.refresh_calls == 1
    assert {r["limit"] for r in client.page_requests} == {1}


def test_schema_browser_selected_table(fake_client_cls):
    client = _browser_client(fake_client_cls)

    response = asyncio.run(
        handle_schema_browser(client, {"table": "users", "noBrowser": True})
    )
    text = response.joined_text

    assert "### users (2 documents)" in text
    assert "Indexes: by_email" in text
    assert "| nick | `string` | Yes |" in text
    assert "**Sample Documents:**" in text
    assert "### events" not in text


def test_schema_browser_unknown_table_falls_back(fake_client_cls):
    response = asyncio.run(
        handle_schema_browser(_browser_client(fake_client_cls), {"table": "nope", "noBrowser": True})
    )

    assert "*Table `nope` not found; showing all tables.*" in response.joined_text
    assert "Found 2 tables:" in response.joined_text


def test_schema_browser_without_admin_skips_documents(fake_client_cls):
    client = _browser_client(fake_client_cls, admin=False)

    response = asyncio.run(
        handle_schema_browser(client, {"showInferred": False, "noBrowser": True})
    )
    text = response.joined_text

    assert client.page_requests == []
    assert "require admin access" in text
    assert "| kind |" not in text
    assert "| *(no schema data)* | - | - |" in text


def test_kanban_requires_admin(fake_client_cls):
    response = asyncio.run(handle_kanban_board(fake_client_cls(admin=False), NO_BROWSER))

    assert response.is_error
    assert "**Access Error**" in response.joined_text


def test_kanban_board_jobs_and_agents(fake_client_cls):
    client = fake_client_cls(
        tables=[TableInfo(name="agentThreads")],
        scheduled=[
            ScheduledFunction(_id="s1", name="emails:send", state="pending"),
            ScheduledFunction(_id="s2", name="billing:charge", state="failed"),
        ],
        crons=[CronJob(_id="c1", name="cleanup", schedule="0 * * * *")],
        threads=[AgentThread(_id="t1", title="Support chat", status="processing")],
    )

    response = asyncio.run(handle_kanban_board(client, NO_BROWSER))
    text = response.joined_text

    assert not response.is_error
    assert "Total: 3 items" in text
    assert "| Pending (2)" in text
    assert "| emails:send" in text
    assert "*Detected agent tables: agentThreads*" in text
    assert "Total: 1 thread\n" in text
    assert "| Support chat" in text


def test_kanban_agents_mode_without_component(fake_client_cls):
    client = fake_client_cls(tables=[TableInfo(name="users")])

    response = asyncio.run(handle_kanban_board(client, {"mode": "agents", "noBrowser": True}))
    text = response.joined_text

    assert "### Scheduled Functions" not in text
    assert "*No agent component detected.*" in text


def test_schema_diagram_report(fake_client_cls):
    client = fake_client_cls(
        tables=[TableInfo(name="users"), TableInfo(name="posts"), TableInfo(name="logs")],
        schemas={
            "users": _schema("users", [("name", "string")], []),
            "posts": _schema("posts", [("authorId", "Id<users>"), ("title", "string")], []),
            "logs": _schema("logs", [], [("message", "string")]),
        },
    )

    response = asyncio.run(
        handle_schema_diagram(client, {"tables": ["users", "posts"], "noBrowser": True})
    )
    text = response.joined_text

    assert not response.is_error
    assert "Tables: 2 | Relationships: 1" in text
    assert "- `posts` ||--o{ `users` (via authorId)" in text
    assert '    users ||--o{ posts : "authorId"' in text
    assert "logs" not in text


def test_schema_diagram_upstream_failure(fake_client_cls):
    client = fake_client_cls(error=DeploymentError("boom"))

    response = asyncio.run(handle_schema_diagram(client, NO_BROWSER))

    assert response.is_error
    assert response.joined_text == (
        "## Schema Diagram\n\n**Error**: boom\n\n"
        "Please check your Convex credentials and deployment URL."
    )
