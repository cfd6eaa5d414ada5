"""Report payloads consumed by the Markdown and HTML formatters."""

from __future__ import annotations

import time
from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from reporting.utils import is_dark_theme
from schemas.internal.analytics import (
    ChartSpec,
    ComputedMetric,
    ConflictRow,
    DiagramTable,
    DriftRow,
    HeatmapRow,
    KanbanBoard,
    RecentDocument,
    TableRelation,
)
from schemas.internal.deployment import AgentComponentInfo
from schemas.internal.reports import BrowserTable, KanbanMode, ThemeName


class ReportBase(BaseModel):
    title: str
    deployment_url: Optional[str] = None
    ui_url: Optional[str] = None
    theme: ThemeName = "github-dark"
    generated_at: datetime = Field(default_factory=datetime.now)

    model_config = ConfigDict(extra="forbid")

    @property
    def dark(self) -> bool:
        return is_dark_theme(self.theme)


class DashboardReport(ReportBase):
    kind: Literal["dashboard"] = "dashboard"
    title: str = "Realtime Dashboard"
    metrics: List[ComputedMetric] = Field(default_factory=list)
    charts: List[ChartSpec] = Field(default_factory=list)
    recent: List[RecentDocument] = Field(default_factory=list)
    refresh_interval: float = 5
    has_admin_access: bool = False
    now_ms: float = Field(default_factory=lambda: time.time() * 1000)


class DriftReport(ReportBase):
    kind: Literal["drift"] = "drift"
    title: str = "Schema Drift"
    rows: List[DriftRow] = Field(default_factory=list)


class HeatmapReport(ReportBase):
    kind: Literal["heatmap"] = "heatmap"
    title: str = "Table Heatmap"
    rows: List[HeatmapRow] = Field(default_factory=list)
    window_minutes: float = 1

    @property
    def max_rate(self) -> float:
        return max([row.writes_per_minute for row in self.rows] + [1])


class ConflictReport(ReportBase):
    kind: Literal["conflicts"] = "conflicts"
    title: str = "Write Conflict Report"
    rows: List[ConflictRow] = Field(default_factory=list)
    window_minutes: float = 60
    log_file: Optional[str] = None


class SchemaBrowserReport(ReportBase):
    kind: Literal["schema_browser"] = "schema_browser"
    title: str = "Schema Browser"
    tables: List[BrowserTable] = Field(default_factory=list)
    selected_table: Optional[str] = None
    show_inferred: bool = True
    has_admin_access: bool = False

    @property
    def selected(self) -> Optional[BrowserTable]:
        return next((t for t in self.tables if t.name == self.selected_table), None)


class KanbanReport(ReportBase):
    kind: Literal["kanban"] = "kanban"
    title: str = "Kanban Board"
    mode: KanbanMode = "auto"
    jobs: KanbanBoard = Field(default_factory=KanbanBoard)
    agents: KanbanBoard = Field(default_factory=KanbanBoard)
    agent_component: AgentComponentInfo = Field(default_factory=AgentComponentInfo)

    @property
    def show_jobs(self) -> bool:
        return self.mode in ("jobs", "auto")

    @property
    def show_agents(self) -> bool:
        return self.mode in ("agents", "auto")


class DiagramReport(ReportBase):
    kind: Literal["diagram"] = "diagram"
    title: str = "Schema Diagram"
    tables: List[DiagramTable] = Field(default_factory=list)
    relations: List[TableRelation] = Field(default_factory=list)
    mermaid_code: str = ""
    text_diagram: str = ""


ReportData = Annotated[
    Union[
        DashboardReport,
        DriftReport,
        HeatmapReport,
        ConflictReport,
        SchemaBrowserReport,
        KanbanReport,
        DiagramReport,
    ],
    Field(discriminator="kind"),
]


__all__ = [
    "ConflictReport",
    "DashboardReport",
    "DiagramReport",
    "DriftReport",
    "HeatmapReport",
    "KanbanReport",
    "ReportBase",
    "ReportData",
    "SchemaBrowserReport",
]
