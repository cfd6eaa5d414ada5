"""Rows produced by the aggregation, drift, heatmap, log, kanban and diagram analyses."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .deployment import SchemaField

AggregationKind = Literal["count", "sum", "avg", "min", "max"]
ChartType = Literal["line", "bar", "pie"]


class CamelModel(BaseModel):
    """Serialized with camelCase keys for the browser-side apps."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class MetricSpec(CamelModel):
    """Declarative metric request: one aggregation over one table."""

    name: str
    table: str
    aggregation: AggregationKind
    field: Optional[str] = None
    filter: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class ComputedMetric(MetricSpec):
    value: float = 0
    document_count: int = 0


class ChartSpec(CamelModel):
    type: ChartType
    title: str
    table: str
    x_field: Optional[str] = None
    y_field: Optional[str] = None
    group_by: Optional[str] = None


class RecentDocument(CamelModel):
    table: str
    id: str = ""
    creation_time: Optional[float] = None


class TypeMismatch(CamelModel):
    field: str
    declared: str
    inferred: str


class DriftRow(CamelModel):
    """Declared-vs-inferred schema differences for one table."""

    table: str
    missing_declared: List[str] = Field(default_factory=list)
    missing_inferred: List[str] = Field(default_factory=list)
    mismatched: List[TypeMismatch] = Field(default_factory=list)

    @property
    def total_drift(self) -> int:
        return (
            len(self.missing_declared)
            + len(self.missing_inferred)
            + len(self.mismatched)
        )

    @property
    def is_clean(self) -> bool:
        return self.total_drift == 0


class ParsedEvent(CamelModel):
    """A single log line reduced to the fields the conflict report needs."""

    message: str
    timestamp: Optional[float] = None
    function_name: Optional[str] = None
    table: Optional[str] = None


class ConflictRow(CamelModel):
    function_name: str
    table: str
    count: int = Field(ge=0)


class HeatmapRow(CamelModel):
    table: str
    writes: int = Field(ge=0)
    writes_per_minute: float = Field(ge=0)
    scanned: int = Field(ge=0)


class KanbanItem(CamelModel):
    """A scheduled function, cron job or agent thread placed on a board."""

    id: str
    label: str
    kind: Literal["scheduled", "cron", "thread"]
    state: str = ""
    detail: Optional[str] = None


class KanbanColumn(CamelModel):
    id: str
    title: str
    color: str
    items: List[KanbanItem] = Field(default_factory=list)


class KanbanBoard(CamelModel):
    columns: List[KanbanColumn] = Field(default_factory=list)
    total_count: int = 0


class DiagramTable(CamelModel):
    name: str
    fields: List[SchemaField] = Field(default_factory=list)
    document_count: int = 0


class TableRelation(CamelModel):
    """``source.field`` references a document of ``target``."""

    source: str
    target: str
    field: str
    cardinality: str = "||--o{"


__all__ = [
    "AggregationKind",
    "CamelModel",
    "ChartSpec",
    "ChartType",
    "ComputedMetric",
    "ConflictRow",
    "DiagramTable",
    "DriftRow",
    "HeatmapRow",
    "KanbanBoard",
    "KanbanColumn",
    "KanbanItem",
    "MetricSpec",
    "ParsedEvent",
    "RecentDocument",
    "TableRelation",
    "TypeMismatch",
]
