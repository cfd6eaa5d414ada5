"""Tool handlers: each returns a ToolResponse and never raises."""

from services.dashboard import handle_dashboard
from services.kanban_board import handle_kanban_board
from services.schema_browser import handle_schema_browser
from services.schema_diagram import handle_schema_diagram
from services.schema_drift import handle_schema_drift
from services.table_heatmap import handle_table_heatmap
from services.write_conflicts import handle_write_conflict_report

__all__ = [
    "handle_dashboard",
    "handle_kanban_board",
    "handle_schema_browser",
    "handle_schema_diagram",
    "handle_schema_drift",
    "handle_table_heatmap",
    "handle_write_conflict_report",
]
