"""Tool argument schemas.

Arguments arrive as a flat JSON object with camelCase keys. Numeric options
are coerced leniently: a value that is not a finite number falls back to the
documented default instead of failing the call.
"""

from __future__ import annotations

import math
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from schemas.internal.analytics import ChartSpec, MetricSpec
from schemas.internal.reports import KanbanMode, ThemeName


def coerce_number(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else default
    if isinstance(value, str):
        try:
            parsed = float(value)
        except ValueError:
            return default
        return parsed if math.isfinite(parsed) else default
    return default


def _default_theme() -> str:
    # deferred: core.config imports the schemas package
    from core.config import get_settings

    return get_settings().default_theme


class ToolArgs(BaseModel):
    no_browser: bool = False
    theme: ThemeName = Field(default_factory=_default_theme)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("*", mode="before")
    @classmethod
    def _lenient_numbers(cls, value: Any, info: ValidationInfo) -> Any:
        field = cls.model_fields.get(info.field_name or "")
        if field is None or field.annotation not in (int, float):
            return value
        coerced = coerce_number(value, field.default)
        if field.annotation is int:
            return int(coerced)
        return coerced


class DashboardArgs(ToolArgs):
    metrics: List[MetricSpec] = Field(default_factory=list)
    charts: List[ChartSpec] = Field(default_factory=list)
    refresh_interval: float = 5


class SchemaDriftArgs(ToolArgs):
    max_tables: int = Field(default=80)


class TableHeatmapArgs(ToolArgs):
    window_minutes: float = Field(default=1)
    max_docs_per_table: int = Field(default=1500)
    max_tables: int = Field(default=60)


class WriteConflictArgs(ToolArgs):
    log_file: Optional[str] = None
    since_minutes: float = Field(default=60)
    max_lines: int = Field(default=5000)


class SchemaBrowserArgs(ToolArgs):
    table: Optional[str] = None
    show_inferred: bool = True
    page_size: int = Field(default=50)


class KanbanBoardArgs(ToolArgs):
    mode: KanbanMode = "auto"


class SchemaDiagramArgs(ToolArgs):
    tables: Optional[List[str]] = None
    ascii: bool = False


__all__ = [
    "DashboardArgs",
    "KanbanBoardArgs",
    "SchemaBrowserArgs",
    "SchemaDiagramArgs",
    "SchemaDriftArgs",
    "TableHeatmapArgs",
    "ToolArgs",
    "WriteConflictArgs",
    "coerce_number",
]
