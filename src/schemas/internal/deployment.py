"""Contracts for data fetched from a Convex deployment."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# A document snapshot: user fields plus ``_id`` and ``_creationTime`` (epoch ms).
Record = Dict[str, Any]


class TableInfo(BaseModel):
    """A table listed by the deployment's schema_info module."""

    name: str
    document_count: int = Field(default=0, ge=0)
    indexes: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")


class SchemaField(BaseModel):
    """One field of a declared or inferred table schema."""

    name: str
    type: str = ""
    optional: bool = False

    model_config = ConfigDict(extra="ignore")


class TableSchema(BaseModel):
    table_name: str
    declared_fields: List[SchemaField] = Field(default_factory=list)
    inferred_fields: List[SchemaField] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @field_validator("declared_fields", "inferred_fields")
    @classmethod
    def _unique_names(cls, value: List[SchemaField]) -> List[SchemaField]:
        names = [field.name for field in value]
        if len(names) != len(set(names)):
            raise ValueError("field names must be unique within a schema")
        return value


class DocumentPage(BaseModel):
    """One page of documents, newest first when queried with order="desc"."""

    documents: List[Record] = Field(default_factory=list)
    continue_cursor: Optional[str] = None
    is_done: bool = True

    model_config = ConfigDict(extra="forbid")


class ConnectionTestResult(BaseModel):
    success: bool
    deployment_url: Optional[str] = None
    table_count: Optional[int] = None
    tables: List[str] = Field(default_factory=list)
    error: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class _SystemRecord(BaseModel):
    """A row keyed by ``_id`` as Convex returns it."""

    id: str = Field(alias="_id")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ScheduledFunction(_SystemRecord):
    """An entry of the ``_scheduled_functions`` system table."""

    name: str = ""
    state: str = "pending"
    scheduled_time: Optional[float] = Field(default=None, alias="scheduledTime")
    completed_time: Optional[float] = Field(default=None, alias="completedTime")

    @field_validator("state", mode="before")
    @classmethod
    def _state_kind(cls, value: Any) -> Any:
        # the system table stores {"kind": "pending"}
        if isinstance(value, dict):
            return value.get("kind", "pending")
        return value


class CronJob(_SystemRecord):
    name: str = ""
    schedule: str = ""
    next_run: Optional[float] = Field(default=None, alias="nextRun")


class AgentThread(_SystemRecord):
    title: str = ""
    status: str = "idle"
    user_id: Optional[str] = Field(default=None, alias="userId")
    last_message_at: Optional[float] = Field(default=None, alias="lastMessageAt")


class AgentComponentInfo(BaseModel):
    installed: bool = False
    tables: List[str] = Field(default_factory=list)
    is_official_component: bool = False

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


__all__ = [
    "AgentComponentInfo",
    "AgentThread",
    "ConnectionTestResult",
    "CronJob",
    "DocumentPage",
    "Record",
    "ScheduledFunction",
    "SchemaField",
    "TableInfo",
    "TableSchema",
]
