"""Aggregation, schema drift, write heatmap, log, kanban and diagram analyses."""

from .aggregation import aggregate, compute_metrics, recent_documents
from .diagram import detect_relationships, mermaid_er, simplify_type, text_diagram
from .drift import compute_drift, infer_fields, normalize_type, rank_drift
from .heatmap import build_heatmap_rows, count_recent_writes
from .kanban import ascii_board, organize_agents, organize_jobs
from .logs import aggregate_conflicts, is_write_conflict, parse_line, parse_lines

__all__ = [
    "aggregate",
    "aggregate_conflicts",
    "ascii_board",
    "build_heatmap_rows",
    "compute_drift",
    "compute_metrics",
    "count_recent_writes",
    "detect_relationships",
    "infer_fields",
    "is_write_conflict",
    "mermaid_er",
    "normalize_type",
    "organize_agents",
    "organize_jobs",
    "parse_line",
    "parse_lines",
    "rank_drift",
    "recent_documents",
    "simplify_type",
    "text_diagram",
]
