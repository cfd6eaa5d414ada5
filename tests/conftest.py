"""Shared fixtures: an in-memory deployment client and isolated settings."""

from __future__ import annotations

from typing import Dict, List, Optional

import pytest

from core.config import Settings, get_settings
from schemas.internal.deployment import (
    AgentComponentInfo,
    AgentThread,
    CronJob,
    DocumentPage,
    Record,
    ScheduledFunction,
    TableInfo,
    TableSchema,
)

DEPLOYMENT_URL = "https://happy-otter-123.convex.cloud"


class FakeClient:
    """Deployment client backed by plain dicts."""

    def __init__(
        self,
        tables: Optional[List[TableInfo]] = None,
        documents: Optional[Dict[str, List[Record]]] = None,
        schemas: Optional[Dict[str, TableSchema]] = None,
        *,
        connected: bool = True,
        admin: bool = True,
        error: Optional[Exception] = None,
        scheduled: Optional[List[ScheduledFunction]] = None,
        crons: Optional[List[CronJob]] = None,
        threads: Optional[List[AgentThread]] = None,
    ):
        self.tables = tables or []
        self.documents = documents or {}
        self.schemas = schemas or {}
        self.connected = connected
        self.admin = admin
        self.error = error
        self.document_calls = 0
        self.page_requests: list[dict] = []
        self.refresh_calls = 0
        self.scheduled = scheduled or []
        self.crons = crons or []
        self.threads = threads or []

    def is_connected(self) -> bool:
        return self.connected

    def has_admin_access(self) -> bool:
        return self.admin

    def get_deployment_url(self) -> Optional[str]:
        return DEPLOYMENT_URL if self.connected else None

    def refresh(self) -> None:
        self.refresh_calls += 1

    async def list_tables(self) -> List[TableInfo]:
        if self.error is not None:
            raise self.error
        return list(self.tables)

    async def get_table_schema(self, table_name: str) -> TableSchema:
        return self.schemas.get(table_name) or TableSchema(table_name=table_name)

    async def query_documents(
        self, table_name, *, limit=50, cursor=None, order="desc"
    ) -> DocumentPage:
        self.page_requests.append({"table": table_name, "limit": limit, "cursor": cursor})
        docs = sorted(
            self.documents.get(table_name, []),
            key=lambda doc: doc.get("_creationTime") or 0,
            reverse=order == "desc",
        )
        start = int(cursor) if cursor else 0
        end = start + limit
        is_done = end >= len(docs)
        return DocumentPage(
            documents=docs[start:end],
            continue_cursor=None if is_done else str(end),
            is_done=is_done,
        )

    async def get_all_documents(self) -> Dict[str, List[Record]]:
        self.document_calls += 1
        return {name: list(docs) for name, docs in self.documents.items()}

    async def get_scheduled_functions(self) -> List[ScheduledFunction]:
        return list(self.scheduled)

    async def get_cron_jobs(self) -> List[CronJob]:
        return list(self.crons)

    async def detect_agent_component(self) -> AgentComponentInfo:
        tables = [t.name for t in self.tables if "thread" in t.name.lower()]
        return AgentComponentInfo(installed=bool(tables), tables=tables)

    async def get_agent_threads(self) -> List[AgentThread]:
        return list(self.threads)


@pytest.fixture
def fake_client_cls():
    return FakeClient


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Keep tests away from real credentials, config files and browsers."""
    for name in ("CONVEX_URL", "CONVEX_DEPLOY_KEY", "LOG_LEVEL", "DEFAULT_THEME"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("CONVEX_CONFIG_PATH", str(tmp_path / "missing-config.json"))
    monkeypatch.setattr("webbrowser.open", lambda url: True)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        CONVEX_CONFIG_PATH=tmp_path / "missing-config.json",
        APPS_DIST_DIR=tmp_path / "dist" / "apps",
        APPS_SOURCE_DIR=tmp_path / "apps",
        PREVIEW_OPEN_BROWSER=False,
        _env_file=None,
    )
