"""Reporting module exports."""

from __future__ import annotations

from reporting.formatters import HTMLFormatter, MarkdownFormatter
from reporting.generator import ReportGenerator
from reporting.schemas import (
    ConflictReport,
    DashboardReport,
    DriftReport,
    HeatmapReport,
    ReportBase,
    ReportData,
)
from reporting.utils import format_number, format_time_ago

__all__ = [
    "ConflictReport",
    "DashboardReport",
    "DriftReport",
    "HTMLFormatter",
    "HeatmapReport",
    "MarkdownFormatter",
    "ReportBase",
    "ReportData",
    "ReportGenerator",
    "format_number",
    "format_time_ago",
]
