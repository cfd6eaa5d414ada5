"""Declared-vs-inferred schema drift."""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping, Sequence

from schemas.internal.analytics import DriftRow, TypeMismatch
from schemas.internal.deployment import SchemaField

_WHITESPACE = re.compile(r"\s+")


def normalize_type(label: str) -> str:
    """Drop optionality markers and whitespace, lowercase."""
    return _WHITESPACE.sub("", label.replace("?", "")).lower()


def types_compatible(declared: str, inferred: str) -> bool:
    """Compare normalized labels; document ids are plain strings once sampled."""
    if declared == inferred:
        return True
    return inferred == "string" and declared.startswith(("id<", "v.id("))


def compute_drift(
    declared: Sequence[SchemaField],
    inferred: Sequence[SchemaField],
    *,
    table: str = "",
) -> DriftRow:
    declared_by_name = {field.name: field for field in declared}
    inferred_by_name = {field.name: field for field in inferred}

    missing_declared: list[str] = []
    mismatched: list[TypeMismatch] = []
    for name, inferred_field in inferred_by_name.items():
        declared_field = declared_by_name.get(name)
        if declared_field is None:
            missing_declared.append(name)
            continue
        declared_type = normalize_type(declared_field.type)
        inferred_type = normalize_type(inferred_field.type)
        # an empty label means "unknown", not a conflicting type
        if (
            declared_type
            and inferred_type
            and not types_compatible(declared_type, inferred_type)
        ):
            mismatched.append(
                TypeMismatch(
                    field=name,
                    declared=declared_field.type,
                    inferred=inferred_field.type,
                )
            )

    missing_inferred = [name for name in declared_by_name if name not in inferred_by_name]

    return DriftRow(
        table=table,
        missing_declared=missing_declared,
        missing_inferred=missing_inferred,
        mismatched=mismatched,
    )


def rank_drift(rows: Iterable[DriftRow]) -> list[DriftRow]:
    """Most drifted tables first; ties keep their input order."""
    return sorted(rows, key=lambda row: row.total_drift, reverse=True)


def _value_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def infer_fields(table: str, documents: Sequence[Mapping[str, Any]]) -> list[SchemaField]:
    """Infer a field list from sampled documents.

    A field absent from some documents is optional; a field seen with several
    value types gets a union label such as ``number | string``.
    """
    seen: dict[str, set[str]] = {}
    presence: dict[str, int] = {}
    for doc in documents:
        for name, value in doc.items():
            if name == "_id":
                label = f"Id<{table}>"
            else:
                label = _value_type(value)
            seen.setdefault(name, set()).add(label)
            presence[name] = presence.get(name, 0) + 1

    return [
        SchemaField(
            name=name,
            type=" | ".join(sorted(labels)),
            optional=presence[name] < len(documents),
        )
        for name, labels in seen.items()
    ]


__all__ = [
    "compute_drift",
    "infer_fields",
    "normalize_type",
    "rank_drift",
    "types_compatible",
]
