"""Config payloads injected into the preview page, one schema per report."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, get_args

from pydantic import Field

from .analytics import (
    CamelModel,
    ChartSpec,
    ComputedMetric,
    ConflictRow,
    DiagramTable,
    DriftRow,
    HeatmapRow,
    KanbanBoard,
    TableRelation,
)
from .deployment import AgentComponentInfo, Record, SchemaField

ThemeName = Literal[
    "zinc-light",
    "zinc-dark",
    "tokyo-night",
    "github-light",
    "github-dark",
    "dracula",
    "nord",
]
THEMES: tuple[str, ...] = get_args(ThemeName)
KanbanMode = Literal["jobs", "agents", "auto"]


class TableSummary(CamelModel):
    name: str
    document_count: int = 0


class DashboardConfig(CamelModel):
    deployment_url: Optional[str] = None
    metrics: List[ComputedMetric] = Field(default_factory=list)
    charts: List[ChartSpec] = Field(default_factory=list)
    refresh_interval: float = 5
    all_documents: Dict[str, List[Record]] = Field(default_factory=dict)
    has_admin_access: bool = False
    tables: List[TableSummary] = Field(default_factory=list)


class DriftReportConfig(CamelModel):
    deployment_url: Optional[str] = None
    drift: List[DriftRow] = Field(default_factory=list)


class HeatmapConfig(CamelModel):
    deployment_url: Optional[str] = None
    rows: List[HeatmapRow] = Field(default_factory=list)
    window_minutes: float = 1


class ConflictReportConfig(CamelModel):
    rows: List[ConflictRow] = Field(default_factory=list)
    window_minutes: float = 60


class BrowserTable(CamelModel):
    name: str
    document_count: int = 0
    indexes: List[str] = Field(default_factory=list)
    declared_fields: List[SchemaField] = Field(default_factory=list)
    inferred_fields: List[SchemaField] = Field(default_factory=list)
    documents: List[Record] = Field(default_factory=list)

    @property
    def fields(self) -> List[SchemaField]:
        """Declared fields when the table has a schema, inferred ones otherwise."""
        return self.declared_fields or self.inferred_fields

    @property
    def schema_kind(self) -> str:
        return "Declared" if self.declared_fields else "Inferred"


class SchemaBrowserConfig(CamelModel):
    deployment_url: Optional[str] = None
    selected_table: Optional[str] = None
    show_inferred: bool = True
    page_size: int = 50
    tables: List[BrowserTable] = Field(default_factory=list)
    has_admin_access: bool = False


class KanbanConfig(CamelModel):
    deployment_url: Optional[str] = None
    mode: KanbanMode = "auto"
    jobs: KanbanBoard = Field(default_factory=KanbanBoard)
    agents: KanbanBoard = Field(default_factory=KanbanBoard)
    agent_component: AgentComponentInfo = Field(default_factory=AgentComponentInfo)


class DiagramConfig(CamelModel):
    deployment_url: Optional[str] = None
    mermaid_code: str = ""
    tables: List[DiagramTable] = Field(default_factory=list)
    relations: List[TableRelation] = Field(default_factory=list)


def config_payload(config: CamelModel) -> Dict[str, Any]:
    """JSON-ready dict with the camelCase keys the browser apps read."""
    return config.model_dump(mode="json", by_alias=True)


__all__ = [
    "THEMES",
    "BrowserTable",
    "ConflictReportConfig",
    "DashboardConfig",
    "DiagramConfig",
    "DriftReportConfig",
    "HeatmapConfig",
    "KanbanConfig",
    "KanbanMode",
    "SchemaBrowserConfig",
    "TableSummary",
    "ThemeName",
    "config_payload",
]
