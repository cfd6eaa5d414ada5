"""Metric aggregation over sampled documents.

``count`` prefers the table's server-side document count, so it stays exact
even though only a sample of documents is held in memory. The other kinds
work on the sample and are approximate for large tables.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping, Sequence

from schemas.internal.analytics import (
    AggregationKind,
    ComputedMetric,
    MetricSpec,
    RecentDocument,
)
from schemas.internal.deployment import Record, TableInfo


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def numeric_values(records: Iterable[Mapping[str, Any]], field: str) -> list[float]:
    return [record[field] for record in records if _is_number(record.get(field))]


def aggregate(
    records: Sequence[Mapping[str, Any]],
    kind: AggregationKind | str,
    field: str | None = None,
    fallback_count: int | None = None,
) -> float:
    """Aggregate one field across records.

    Non-numeric and missing values are skipped rather than counted as zero.
    ``avg``/``min``/``max`` with no numeric values return 0.
    """
    if kind == "count":
        return fallback_count if fallback_count is not None else len(records)
    if kind not in ("sum", "avg", "min", "max") or not field:
        return 0

    values = numeric_values(records, field)
    if not values:
        return 0
    if kind == "sum":
        return sum(values)
    if kind == "avg":
        return sum(values) / len(values)
    if kind == "min":
        return min(values)
    return max(values)


def compute_metrics(
    specs: Sequence[MetricSpec],
    tables: Sequence[TableInfo],
    documents: Mapping[str, Sequence[Record]],
) -> list[ComputedMetric]:
    """Resolve metric specs; with none given, one count metric per table."""
    counts = {table.name: table.document_count for table in tables}

    if not specs:
        return [
            ComputedMetric(
                name=f"{table.name} count",
                table=table.name,
                aggregation="count",
                value=table.document_count,
                document_count=table.document_count,
            )
            for table in tables
        ]

    metrics = []
    for spec in specs:
        document_count = counts.get(spec.table, 0)
        value = aggregate(
            documents.get(spec.table, []),
            spec.aggregation,
            spec.field,
            document_count,
        )
        metrics.append(
            ComputedMetric(
                **spec.model_dump(),
                value=value,
                document_count=document_count,
            )
        )
    return metrics


def recent_documents(
    documents: Mapping[str, Sequence[Record]], limit: int = 5
) -> list[RecentDocument]:
    """Newest documents across all tables by ``_creationTime``."""
    flat = [
        RecentDocument(
            table=table,
            id=str(doc.get("_id") or ""),
            creation_time=doc["_creationTime"]
            if _is_number(doc.get("_creationTime"))
            else None,
        )
        for table, docs in documents.items()
        for doc in docs
    ]
    flat.sort(key=lambda doc: doc.creation_time or 0, reverse=True)
    return flat[:limit]


__all__ = ["aggregate", "compute_metrics", "numeric_values", "recent_documents"]
