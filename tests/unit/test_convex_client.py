import asyncio
import json

import httpx
import pytest

from client.convex import (
    CRON_JOBS_QUERY,
    GET_DOCUMENTS_QUERY,
    LIST_TABLES_QUERY,
    SCHEDULED_FUNCTIONS_QUERY,
    ConvexClient,
)
from core.config import Settings
from core.errors import DeploymentError, NotConnectedError

TABLES = [
    {
        "name": "users",
        "documentCount": 2,
        "indexes": ["by_email"],
        "fields": [{"name": "email", "type": "string"}, {"name": "age", "type": "number", "optional": True}],
    }
]
DOCUMENTS = {
    "users": [
        {"_id": "u1", "_creationTime": 100, "email": "a@x.io"},
        {"_id": "u2", "_creationTime": 300, "email": "b@x.io", "nickname": "bee"},
        {"_id": "u3", "_creationTime": 200, "email": "c@x.io"},
    ]
}


def _settings(tmp_path, key="prod:secret"):
    return Settings(
        CONVEX_URL="https://happy-otter-123.convex.cloud",
        CONVEX_DEPLOY_KEY=key,
        CONVEX_CONFIG_PATH=tmp_path / "none.json",
        _env_file=None,
    )


def _transport(requests, responses=None):
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        requests.append((request, body))
        if responses is not None:
            return responses(body)
        value = {LIST_TABLES_QUERY: TABLES, GET_DOCUMENTS_QUERY: DOCUMENTS}[body["path"]]
        return httpx.Response(200, json={"status": "success", "value": value})

    return httpx.MockTransport(handler)


def test_list_tables_sends_auth_header(tmp_path):
    requests = []
    client = ConvexClient(_settings(tmp_path), transport=_transport(requests))

    tables = asyncio.run(client.list_tables())

    assert [(t.name, t.document_count, t.indexes) for t in tables] == [("users", 2, ["by_email"])]
    request, body = requests[0]
    assert request.url.path == "/api/query"
    assert request.headers["Authorization"] == "Convex prod:secret"
    assert body == {"path": LIST_TABLES_QUERY, "args": {}, "format": "json"}


def test_schema_infers_fields_from_documents(tmp_path):
    client = ConvexClient(_settings(tmp_path), transport=_transport([]))

    schema = asyncio.run(client.get_table_schema("users"))

    assert [f.name for f in schema.declared_fields] == ["email", "age"]
    assert schema.declared_fields[1].optional
    inferred = {f.name: f for f in schema.inferred_fields}
    assert inferred["nickname"].optional
    assert inferred["_id"].type == "Id<users>"


def test_schema_without_admin_has_no_inferred_fields(tmp_path):
    client = ConvexClient(_settings(tmp_path, key=None), transport=_transport([]))

    assert not client.has_admin_access()
    assert asyncio.run(client.get_table_schema("users")).inferred_fields == []


def test_query_documents_pages_newest_first(tmp_path):
    client = ConvexClient(_settings(tmp_path), transport=_transport([]))

    first = asyncio.run(client.query_documents("users", limit=2))
    second = asyncio.run(client.query_documents("users", limit=2, cursor=first.continue_cursor))

    assert [d["_id"] for d in first.documents] == ["u2", "u3"]
    assert not first.is_done
    assert [d["_id"] for d in second.documents] == ["u1"]
    assert second.is_done and second.continue_cursor is None


def test_error_payload_raises(tmp_path):
    transport = _transport(
        [], lambda body: httpx.Response(200, json={"status": "error", "errorMessage": "boom"})
    )
    client = ConvexClient(_settings(tmp_path), transport=transport)

    with pytest.raises(DeploymentError, match="boom"):
        asyncio.run(client.list_tables())


def test_http_error_raises(tmp_path):
    transport = _transport([], lambda body: httpx.Response(401, text="unauthorized"))
    client = ConvexClient(_settings(tmp_path), transport=transport)

    with pytest.raises(DeploymentError, match="401"):
        asyncio.run(client.get_all_documents())

    result = asyncio.run(client.test_connection())
    assert not result.success
    assert "401" in result.error


def test_not_connected(tmp_path):
    client = ConvexClient(Settings(CONVEX_CONFIG_PATH=tmp_path / "none.json", _env_file=None))

    assert not client.is_connected()
    with pytest.raises(NotConnectedError):
        asyncio.run(client.list_tables())
    result = asyncio.run(client.test_connection())
    assert not result.success
    assert "CONVEX_URL" in result.error


def test_connection_success(tmp_path):
    client = ConvexClient(_settings(tmp_path), transport=_transport([]))

    result = asyncio.run(client.test_connection())

    assert result.success
    assert result.table_count == 1
    assert result.tables == ["users"]


def _paths(requests):
    return [body["path"] for _, body in requests]


def test_paging_reads_one_document_snapshot(tmp_path):
    docs = [{"_id": f"e{i}", "_creationTime": i} for i in range(450)]
    requests = []
    transport = _transport(
        requests,
        lambda body: httpx.Response(200, json={"status": "success", "value": {"events": docs}}),
    )
    client = ConvexClient(_settings(tmp_path), transport=transport)

    async def read_all():
        seen, cursor = [], None
        while True:
            page = await client.query_documents("events", limit=100, cursor=cursor)
            seen.extend(page.documents)
            if page.is_done:
                return seen
            cursor = page.continue_cursor

    seen = asyncio.run(read_all())

    assert len(seen) == 450
    assert seen[0]["_id"] == "e449"
    assert _paths(requests) == [GET_DOCUMENTS_QUERY]


def test_schemas_share_one_table_listing(tmp_path):
    requests = []
    client = ConvexClient(_settings(tmp_path), transport=_transport(requests))

    async def scenario():
        tables = await client.list_tables()
        for table in tables:
            await client.get_table_schema(table.name)
        await client.get_table_schema("missing")

    asyncio.run(scenario())

    assert _paths(requests).count(LIST_TABLES_QUERY) == 1
    assert _paths(requests).count(GET_DOCUMENTS_QUERY) == 1


def test_refresh_drops_cached_reads(tmp_path):
    requests = []
    client = ConvexClient(_settings(tmp_path), transport=_transport(requests))

    asyncio.run(client.list_tables())
    asyncio.run(client.list_tables())
    client.refresh()
    asyncio.run(client.list_tables())

    assert _paths(requests) == [LIST_TABLES_QUERY, LIST_TABLES_QUERY]


def test_failed_reads_are_not_cached(tmp_path):
    calls = []

    def respond(body):
        if len(calls) == 1:
            return httpx.Response(503, text="busy")
        return httpx.Response(200, json={"status": "success", "value": TABLES})

    client = ConvexClient(_settings(tmp_path), transport=_transport(calls, respond))

    with pytest.raises(DeploymentError):
        asyncio.run(client.list_tables())
    assert [t.name for t in asyncio.run(client.list_tables())] == ["users"]


def test_scheduled_functions_and_crons(tmp_path):
    values = {
        SCHEDULED_FUNCTIONS_QUERY: [
            {"_id": "s1", "name": "emails:send", "state": {"kind": "inProgress"}},
            {"_id": "s2", "name": "emails:send", "state": "failed"},
            {"name": "missing id"},
        ],
        CRON_JOBS_QUERY: [{"_id": "c1", "name": "cleanup", "schedule": "0 * * * *"}],
    }
    transport = _transport(
        [], lambda body: httpx.Response(200, json={"status": "success", "value": values[body["path"]]})
    )
    client = ConvexClient(_settings(tmp_path), transport=transport)

    scheduled = asyncio.run(client.get_scheduled_functions())
    crons = asyncio.run(client.get_cron_jobs())

    assert [(s.id, s.state) for s in scheduled] == [("s1", "inProgress"), ("s2", "failed")]
    assert crons[0].schedule == "0 * * * *"


def test_missing_agent_queries_give_empty_lists(tmp_path):
    transport = _transport(
        [],
        lambda body: httpx.Response(
            200, json={"status": "error", "errorMessage": f"Could not find {body['path']}"}
        ),
    )
    client = ConvexClient(_settings(tmp_path), transport=transport)

    assert asyncio.run(client.get_agent_threads()) == []
    assert asyncio.run(client.get_cron_jobs()) == []


def test_detect_agent_component(tmp_path):
    listing = [{"name": "threads"}, {"name": "messages"}, {"name": "users"}]
    transport = _transport(
        [], lambda body: httpx.Response(200, json={"status": "success", "value": listing})
    )
    client = ConvexClient(_settings(tmp_path), transport=transport)

    info = asyncio.run(client.detect_agent_component())

    assert info.installed
    assert info.tables == ["threads"]
    assert info.is_official_component
