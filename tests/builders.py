"""Builders for raw Granola documents used across the test suite."""

from typing import Any

from granola_import.models import SourceDocument


def text(value: str, *marks: str, **attrs: Any) -> dict:
    """Text leaf with optional marks (link attrs go through ``href``)."""
    node: dict = {"type": "text", "text": value}
    if marks:
        node["marks"] = [
            {"type": mark, "attrs": attrs} if mark == "link" else {"type": mark} for mark in marks
        ]
    return node


def paragraph(*children: dict) -> dict:
    return {"type": "paragraph", "content": list(children)}


def heading(level: int, value: str) -> dict:
    return {"type": "heading", "attrs": {"level": level}, "content": [text(value)]}


def doc_tree(*children: dict) -> dict:
    return {"type": "doc", "content": list(children)}


def make_document(
    doc_id: str = "doc-1",
    title: str | None = "Weekly Sync",
    created_at: str = "2024-01-01T00:00:00Z",
    updated_at: str = "2024-01-02T09:30:00Z",
    **fields: Any,
) -> SourceDocument:
    """Build a SourceDocument; content fields are passed through as raw dicts."""
    return SourceDocument.model_validate(
        {
            "id": doc_id,
            "title": title,
            "created_at": created_at,
            "updated_at": updated_at,
            **fields,
        }
    )


