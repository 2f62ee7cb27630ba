"""
Rich-text node model.

Granola stores notes as a ProseMirror-style tagged tree. Nodes are parsed
leniently: unknown keys are kept and unknown node types are left for the
converter to report.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Mark(BaseModel):
    """Inline formatting applied to a text leaf (strong, em, code, link, ...)."""

    model_config = ConfigDict(extra="allow")

    type: str
    attrs: dict[str, Any] = Field(default_factory=dict)


class RichTextNode(BaseModel):
    """
    A single node of the rich-text tree.

    A node carrying ``text`` is a leaf; a node carrying ``content`` is a
    container. The root of a document is always ``{"type": "doc"}``.
    """

    model_config = ConfigDict(extra="allow")

    type: str
    attrs: dict[str, Any] = Field(default_factory=dict)
    content: list["RichTextNode"] | None = None
    text: str | None = None
    marks: list[Mark] = Field(default_factory=list)

    @property
    def children(self) -> list["RichTextNode"]:
        """Child nodes, empty for leaves."""
        return self.content or []

    def mark_types(self) -> set[str]:
        """Set of mark type names applied to this node."""
        return {mark.type for mark in self.marks}


def is_valid_doc(node: Any) -> bool:
    """Check that a value is a ``doc`` root with non-empty content."""
    return isinstance(node, RichTextNode) and node.type == "doc" and bool(node.content)
