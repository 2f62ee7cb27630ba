"""
Source document model.

Shape of a single document as returned by the Granola API. Only the fields
the importer consumes are declared; everything else is preserved as extra
data so a snapshot of the document can be replayed later.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from granola_import.models.rich_text import RichTextNode


class LastViewedPanel(BaseModel):
    """The panel the user last looked at, as a tree or as HTML markup."""

    model_config = ConfigDict(extra="allow")

    content: RichTextNode | str | None = None


class SourceDocument(BaseModel):
    """
    A Granola document with up to four alternative content representations.

    Representations, in decreasing order of structure: the last-viewed panel
    (tree or HTML), the ``notes`` tree, pre-rendered ``notes_markdown`` and
    ``notes_plain``. Any or all of them may be missing.
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., min_length=1, description="Granola document ID")
    title: str | None = Field(default=None, description="Document title")
    created_at: str = Field(..., description="Creation timestamp (ISO 8601)")
    updated_at: str = Field(..., description="Last update timestamp (ISO 8601)")

    notes: RichTextNode | None = Field(default=None, description="Rich-text notes tree")
    notes_markdown: str | None = Field(default=None, description="Pre-rendered Markdown")
    notes_plain: str | None = Field(default=None, description="Plain-text rendering")
    last_viewed_panel: LastViewedPanel | None = Field(
        default=None, description="Last-viewed panel (AI summary) content"
    )

    people: Any = Field(
        default=None,
        description="Attendees: list of names or {attendees: [...], creator: {...}}",
    )

    @property
    def display_title(self) -> str:
        """Title with surrounding whitespace removed, empty if missing."""
        return (self.title or "").strip()
