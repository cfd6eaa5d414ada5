"""Schema package for external and internal contracts."""

from .requests import (
    DashboardArgs,
    KanbanBoardArgs,
    SchemaBrowserArgs,
    SchemaDiagramArgs,
    SchemaDriftArgs,
    TableHeatmapArgs,
    WriteConflictArgs,
)
from .responses import ToolContent, ToolResponse

__all__ = [
    "DashboardArgs",
    "KanbanBoardArgs",
    "SchemaBrowserArgs",
    "SchemaDiagramArgs",
    "SchemaDriftArgs",
    "TableHeatmapArgs",
    "ToolContent",
    "ToolResponse",
    "WriteConflictArgs",
]
