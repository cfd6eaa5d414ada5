"""Capability set the report handlers need from a deployment client."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional, Protocol

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


class DeploymentClient(Protocol):
    def is_connected(self) -> bool: ...

    def has_admin_access(self) -> bool: ...

    def get_deployment_url(self) -> Optional[str]: ...

    def refresh(self) -> None:
        """Drop cached reads; called once at the start of every report."""
        ...

    async def list_tables(self) -> List[TableInfo]: ...

    async def get_table_schema(self, table_name: str) -> TableSchema: ...

    async def query_documents(
        self,
        table_name: str,
        *,
        limit: int = 50,
        cursor: Optional[str] = None,
        order: Literal["asc", "desc"] = "desc",
    ) -> DocumentPage: ...

    async def get_all_documents(self) -> Dict[str, List[Record]]: ...

    async def get_scheduled_functions(self) -> List[ScheduledFunction]: ...

    async def get_cron_jobs(self) -> List[CronJob]: ...

    async def detect_agent_component(self) -> AgentComponentInfo: ...

    async def get_agent_threads(self) -> List[AgentThread]: ...


__all__ = ["DeploymentClient"]
