"""Internal schema definitions."""

from .analytics import (  # noqa: F401
    AggregationKind,
    ChartSpec,
    ComputedMetric,
    ConflictRow,
    DiagramTable,
    DriftRow,
    HeatmapRow,
    KanbanBoard,
    KanbanColumn,
    KanbanItem,
    MetricSpec,
    ParsedEvent,
    RecentDocument,
    TableRelation,
    TypeMismatch,
)
from .deployment import (  # noqa: F401
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
from .reports import (  # noqa: F401
    THEMES,
    BrowserTable,
    ConflictReportConfig,
    DashboardConfig,
    DiagramConfig,
    DriftReportConfig,
    HeatmapConfig,
    KanbanConfig,
    KanbanMode,
    SchemaBrowserConfig,
    TableSummary,
    ThemeName,
    config_payload,
)

__all__ = [
    "THEMES",
    "AgentComponentInfo",
    "AgentThread",
    "AggregationKind",
    "BrowserTable",
    "ChartSpec",
    "ComputedMetric",
    "ConflictReportConfig",
    "ConflictRow",
    "ConnectionTestResult",
    "CronJob",
    "DashboardConfig",
    "DiagramConfig",
    "DiagramTable",
    "DocumentPage",
    "DriftReportConfig",
    "DriftRow",
    "HeatmapConfig",
    "HeatmapRow",
    "KanbanBoard",
    "KanbanColumn",
    "KanbanConfig",
    "KanbanItem",
    "KanbanMode",
    "MetricSpec",
    "ParsedEvent",
    "RecentDocument",
    "Record",
    "ScheduledFunction",
    "SchemaBrowserConfig",
    "SchemaField",
    "TableInfo",
    "TableRelation",
    "TableSchema",
    "TableSummary",
    "ThemeName",
    "TypeMismatch",
    "config_payload",
]
