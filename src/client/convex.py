"""HTTP client for a Convex deployment.

Reads the deployment URL from ``CONVEX_URL`` or the local Convex CLI config
(``~/.convex/config.json``) and authenticates with ``CONVEX_DEPLOY_KEY`` when
present. Table metadata and sample documents come from the deployment's
``schema_info`` query module, as do scheduled functions, cron jobs and agent
threads where that module exports them.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Literal, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from analytics.drift import infer_fields
from core.config import Settings, get_settings
from core.errors import DeploymentError, NotConnectedError
from schemas.internal.deployment import (
    AgentComponentInfo,
    AgentThread,
    ConnectionTestResult,
    CronJob,
    DocumentPage,
    Record,
    ScheduledFunction,
    SchemaField,
    TableInfo,
    TableSchema,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

LIST_TABLES_QUERY = "schema_info:listTables"
GET_DOCUMENTS_QUERY = "schema_info:getDocuments"
SCHEDULED_FUNCTIONS_QUERY = "schema_info:getScheduledFunctions"
CRON_JOBS_QUERY = "schema_info:getCronJobs"
AGENT_THREADS_QUERY = "schema_info:getAgentThreads"

AGENT_TABLE_MARKERS = ("thread", "agent")
AGENT_COMPONENT_TABLES = {"threads", "messages"}


def resolve_deployment_url(settings: Settings) -> Optional[str]:
    if settings.convex_url:
        return settings.convex_url.rstrip("/")
    path = settings.convex_config_path
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable Convex config %s: %s", path, exc)
        return None
    url = data.get("deploymentUrl") if isinstance(data, dict) else None
    return url.rstrip("/") if isinstance(url, str) and url else None


class ConvexClient:
    """Implements :class:`client.base.DeploymentClient` over the Convex HTTP API."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or get_settings()
        self.deployment_url = resolve_deployment_url(self.settings)
        self.deploy_key = self.settings.convex_deploy_key
        self._transport = transport
        self._snapshots: Dict[str, Any] = {}

    def is_connected(self) -> bool:
        return self.deployment_url is not None

    def has_admin_access(self) -> bool:
        return self.is_connected() and bool(self.deploy_key)

    def get_deployment_url(self) -> Optional[str]:
        return self.deployment_url

    async def query(self, path: str, args: Dict[str, Any] | None = None) -> Any:
        """Run a public or internal query function and return its value."""
        if not self.deployment_url:
            raise NotConnectedError("No Convex deployment configured")

        headers = {"Content-Type": "application/json"}
        if self.deploy_key:
            headers["Authorization"] = f"Convex {self.deploy_key}"
        payload = {"path": path, "args": args or {}, "format": "json"}

        async with httpx.AsyncClient(
            base_url=self.deployment_url,
            timeout=self.settings.http_timeout,
            transport=self._transport,
        ) as http:
            try:
                response = await http.post("/api/query", json=payload, headers=headers)
                response.raise_for_status()
                body = response.json()
            except httpx.HTTPStatusError as exc:
                raise DeploymentError(
                    f"{path} failed with HTTP {exc.response.status_code}"
                ) from exc
            except (httpx.HTTPError, ValueError) as exc:
                raise DeploymentError(f"{path} failed: {exc}") from exc

        if not isinstance(body, dict):
            raise DeploymentError(f"{path} returned an unexpected payload")
        if body.get("status") == "error":
            raise DeploymentError(body.get("errorMessage") or f"{path} failed")
        return body.get("value")

    async def snapshot(self, path: str) -> Any:
        """Value of an argument-free query, fetched once until :meth:`refresh`.

        A report reads the same listing and document sample many times while
        paging or walking tables; all of those reads share one response.
        """
        if path not in self._snapshots:
            self._snapshots[path] = await self.query(path)
        return self._snapshots[path]

    def refresh(self) -> None:
        """Forget cached responses so the next read hits the deployment."""
        self._snapshots.clear()

    async def list_tables(self) -> List[TableInfo]:
        result = await self.snapshot(LIST_TABLES_QUERY)
        if not isinstance(result, list):
            return []
        try:
            return [
                TableInfo(
                    name=item["name"],
                    document_count=item.get("documentCount") or 0,
                    indexes=item.get("indexes") or [],
                )
                for item in result
                if isinstance(item, dict) and "name" in item
            ]
        except ValidationError as exc:
            raise DeploymentError(f"Malformed table listing: {exc}") from exc

    async def get_table_schema(self, table_name: str) -> TableSchema:
        result = await self.snapshot(LIST_TABLES_QUERY)
        entry: Dict[str, Any] = {}
        if isinstance(result, list):
            entry = next(
                (t for t in result if isinstance(t, dict) and t.get("name") == table_name),
                {},
            )

        declared = [_to_field(f) for f in entry.get("fields") or []]
        if entry.get("inferredFields"):
            inferred = [_to_field(f) for f in entry["inferredFields"]]
        elif self.has_admin_access():
            documents = (await self.get_all_documents()).get(table_name, [])
            inferred = infer_fields(table_name, documents)
        else:
            inferred = []
        return TableSchema(
            table_name=table_name,
            declared_fields=declared,
            inferred_fields=inferred,
        )

    async def query_documents(
        self,
        table_name: str,
        *,
        limit: int = 50,
        cursor: Optional[str] = None,
        order: Literal["asc", "desc"] = "desc",
    ) -> DocumentPage:
        # schema_info only exposes a bounded sample, so pages are cut locally.
        documents = (await self.get_all_documents()).get(table_name, [])
        documents = sorted(
            documents,
            key=lambda doc: doc.get("_creationTime") or 0,
            reverse=order == "desc",
        )
        start = int(cursor) if cursor and cursor.isdigit() else 0
        end = start + max(limit, 0)
        page = documents[start:end]
        is_done = end >= len(documents)
        return DocumentPage(
            documents=page,
            continue_cursor=None if is_done else str(end),
            is_done=is_done,
        )

    async def get_all_documents(self) -> Dict[str, List[Record]]:
        result = await self.snapshot(GET_DOCUMENTS_QUERY)
        if not isinstance(result, dict):
            return {}
        return {
            table: [doc for doc in docs if isinstance(doc, dict)]
            for table, docs in result.items()
            if isinstance(docs, list)
        }

    async def get_scheduled_functions(self) -> List[ScheduledFunction]:
        return await self._optional_list(SCHEDULED_FUNCTIONS_QUERY, ScheduledFunction)

    async def get_cron_jobs(self) -> List[CronJob]:
        return await self._optional_list(CRON_JOBS_QUERY, CronJob)

    async def get_agent_threads(self) -> List[AgentThread]:
        return await self._optional_list(AGENT_THREADS_QUERY, AgentThread)

    async def detect_agent_component(self) -> AgentComponentInfo:
        """Guess whether agent threads are stored, from table names alone."""
        names = [t.name for t in await self.list_tables()]
        matches = [
            name
            for name in names
            if any(marker in name.lower() for marker in AGENT_TABLE_MARKERS)
        ]
        return AgentComponentInfo(
            installed=bool(matches),
            tables=matches,
            is_official_component=AGENT_COMPONENT_TABLES <= set(names),
        )

    async def _optional_list(self, path: str, model: type[ModelT]) -> List[ModelT]:
        # Deployments without these query functions get an empty board.
        try:
            result = await self.snapshot(path)
        except DeploymentError as exc:
            logger.warning("%s unavailable: %s", path, exc)
            return []
        if not isinstance(result, list):
            return []
        items = []
        for raw in result:
            try:
                items.append(model.model_validate(raw))
            except ValidationError as exc:
                logger.debug("Skipping malformed %s entry: %s", path, exc)
        return items

    async def test_connection(self) -> ConnectionTestResult:
        if not self.deployment_url:
            return ConnectionTestResult(
                success=False,
                error=(
                    "No Convex deployment configured. "
                    'Set CONVEX_URL or run "npx convex login".'
                ),
            )
        self.refresh()
        try:
            tables = await self.list_tables()
        except DeploymentError as exc:
            return ConnectionTestResult(
                success=False, deployment_url=self.deployment_url, error=str(exc)
            )
        return ConnectionTestResult(
            success=True,
            deployment_url=self.deployment_url,
            table_count=len(tables),
            tables=[t.name for t in tables],
        )


def _to_field(raw: Any) -> SchemaField:
    if not isinstance(raw, dict):
        raise DeploymentError(f"Malformed schema field: {raw!r}")
    return SchemaField(
        name=str(raw.get("name", "")),
        type=str(raw.get("type") or ""),
        optional=bool(raw.get("optional", False)),
    )


__all__ = ["ConvexClient", "resolve_deployment_url"]
