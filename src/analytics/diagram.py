"""Table relationships and Mermaid ER diagrams."""

from __future__ import annotations

import re
from typing import Sequence

from schemas.internal.analytics import DiagramTable, TableRelation

ONE_TO_MANY = "||--o{"

FOREIGN_KEY_NAME = re.compile(r"^(.+?)(?:Id|_id)$", re.IGNORECASE)
ID_TYPE = re.compile(r"""v\.id\(\s*["']([^"']+)["']\s*\)|Id<\s*([A-Za-z0-9_]+)\s*>""")
_NOT_WORD = re.compile(r"\W+")

# first match wins, so "number | string" reads as string
TYPE_MARKERS = (
    (("string",), "string"),
    (("number", "float"), "number"),
    (("boolean",), "boolean"),
    (("array",), "array"),
    (("object",), "object"),
    (("null",), "null"),
    (("int64",), "int64"),
    (("bytes",), "bytes"),
)


def _named_target(stem: str, table_names: Sequence[str]) -> str | None:
    """Table named by a field stem, allowing a plural ``s`` on either side."""
    stem = stem.lower()
    for name in table_names:
        lowered = name.lower()
        if lowered == stem or lowered == stem + "s" or lowered + "s" == stem:
            return name
    return None


def _typed_target(label: str) -> str | None:
    match = ID_TYPE.search(label)
    if match is None:
        return None
    return match.group(1) or match.group(2)


def detect_relationships(
    tables: Sequence[DiagramTable], table_names: Sequence[str]
) -> list[TableRelation]:
    """References found from ``<table>Id`` field names and ``Id<table>`` types.

    System fields are skipped, as are references from a table to itself.
    """
    known = set(table_names)
    relations: list[TableRelation] = []
    seen: set[tuple[str, str, str]] = set()

    for table in tables:
        for field in table.fields:
            if field.name.startswith("_"):
                continue
            candidates = []
            match = FOREIGN_KEY_NAME.match(field.name)
            if match:
                candidates.append(_named_target(match.group(1), table_names))
            typed = _typed_target(field.type)
            if typed in known:
                candidates.append(typed)

            for target in candidates:
                key = (table.name, str(target), field.name)
                if target is None or target == table.name or key in seen:
                    continue
                seen.add(key)
                relations.append(
                    TableRelation(
                        source=table.name,
                        target=target,
                        field=field.name,
                        cardinality=ONE_TO_MANY,
                    )
                )
    return relations


def simplify_type(label: str) -> str:
    """Short attribute type for a Mermaid entity."""
    lowered = label.lower()
    if "v.id" in lowered or lowered.startswith("id<"):
        return "id"
    for markers, name in TYPE_MARKERS:
        if any(marker in lowered for marker in markers):
            return name
    return _NOT_WORD.sub("_", label)[:10].strip("_") or "any"


def mermaid_er(tables: Sequence[DiagramTable], relations: Sequence[TableRelation]) -> str:
    lines = ["erDiagram"]
    for table in tables:
        if not table.fields:
            lines.append(f"    {table.name}")
            continue
        lines.append(f"    {table.name} {{")
        for field in table.fields:
            comment = ' "optional"' if field.optional else ""
            lines.append(f"        {simplify_type(field.type)} {field.name}{comment}")
        lines.append("    }")
    for rel in relations:
        lines.append(f'    {rel.target} {rel.cardinality} {rel.source} : "{rel.field}"')
    return "\n".join(lines)


BOX_UNICODE = {
    "h": "─", "v": "│", "tl": "┌", "tr": "┐",
    "ml": "├", "mr": "┤", "bl": "└", "br": "┘", "rel": "──<",
}
BOX_ASCII = {
    "h": "-", "v": "|", "tl": "+", "tr": "+",
    "ml": "+", "mr": "+", "bl": "+", "br": "+", "rel": "--<",
}


def text_diagram(
    tables: Sequence[DiagramTable],
    relations: Sequence[TableRelation],
    *,
    ascii: bool = False,
) -> str:
    """One box per table followed by the relationship lines."""
    box = BOX_ASCII if ascii else BOX_UNICODE
    blocks = []
    for table in tables:
        rows = [
            f"{simplify_type(f.type)} {f.name}{'?' if f.optional else ''}"
            for f in table.fields
        ]
        width = max([len(table.name), *(len(row) for row in rows)]) + 2
        edge = box["h"] * width
        lines = [
            f"{box['tl']}{edge}{box['tr']}",
            f"{box['v']} {table.name.ljust(width - 1)}{box['v']}",
        ]
        if rows:
            lines.append(f"{box['ml']}{edge}{box['mr']}")
            lines += [f"{box['v']} {row.ljust(width - 1)}{box['v']}" for row in rows]
        lines.append(f"{box['bl']}{edge}{box['br']}")
        blocks.append("\n".join(lines))
    if relations:
        blocks.append(
            "\n".join(
                f"{rel.target} {box['rel']} {rel.source} ({rel.field})" for rel in relations
            )
        )
    return "\n\n".join(blocks)


__all__ = [
    "ONE_TO_MANY",
    "detect_relationships",
    "mermaid_er",
    "simplify_type",
    "text_diagram",
]
