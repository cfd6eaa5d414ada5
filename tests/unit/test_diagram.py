from analytics.diagram import (
    detect_relationships,
    mermaid_er,
    simplify_type,
    text_diagram,
)
from schemas.internal.analytics import DiagramTable, TableRelation
from schemas.internal.deployment import SchemaField

NAMES = ["users", "posts", "comments"]


def _table(name, *fields):
    return DiagramTable(
        name=name,
        fields=[SchemaField(name=n, type=t, optional=o) for n, t, o in fields],
    )


def test_relationships_from_field_names_and_id_types():
    tables = [
        _table("posts", ("userId", "string", False), ("title", "string", False)),
        _table(
            "comments",
            ("postId", 'v.id("posts")', False),
            ("author", "Id<users>", False),
        ),
    ]

    relations = detect_relationships(tables, NAMES)

    assert [(r.source, r.target, r.field) for r in relations] == [
        ("posts", "users", "userId"),
        ("comments", "posts", "postId"),
        ("comments", "users", "author"),
    ]
    assert all(r.cardinality == "||--o{" for r in relations)


def test_relationships_skip_system_self_and_unknown_targets():
    tables = [
        _table(
            "users",
            ("_id", "Id<users>", False),
            ("managerId", "Id<users>", False),
            ("teamId", "string", False),
            ("userId", "string", False),
        ),
    ]

    assert detect_relationships(tables, NAMES) == []


def test_simplify_type():
    assert simplify_type('v.id("users")') == "id"
    assert simplify_type("Id<users>") == "id"
    assert simplify_type("string | null") == "string"
    assert simplify_type("float64") == "number"
    assert simplify_type("array") == "array"
    assert simplify_type("") == "any"


def test_mermaid_er():
    tables = [
        _table("users", ("name", "string", False), ("age", "number", True)),
        _table("empty"),
    ]
    relations = [
        TableRelation(source="posts", target="users", field="userId", cardinality="||--o{")
    ]

    assert mermaid_er(tables, relations) == "\n".join(
        [
            "erDiagram",
            "    users {",
            "        string name",
            '        number age "optional"',
            "    }",
            "    empty",
            '    users ||--o{ posts : "userId"',
        ]
    )


def test_text_diagram_ascii():
    tables = [_table("users", ("age", "number", True))]
    relations = [
        TableRelation(source="posts", target="users", field="userId", cardinality="||--o{")
    ]

    assert text_diagram(tables, relations, ascii=True) == "\n".join(
        [
            "+-------------+",
            "| users       |",
            "+-------------+",
            "| number age? |",
            "+-------------+",
            "",
            "users --< posts (userId)",
        ]
    )


def test_text_diagram_unicode_boxes():
    diagram = text_diagram([_table("logs")], [])

    assert diagram == "┌──────┐\n│ logs │\n└──────┘"
