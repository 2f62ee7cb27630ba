"""
Converted note models.

Output of the Markdown converter: the frontmatter record, the final file
content and the filename the note should be written under.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

GRANOLA_SOURCE = "Granola"


class ContentPriority(str, Enum):
    """Which rich-text representation the converter tries first."""

    PANEL_FIRST = "panel_first"
    NOTES_FIRST = "notes_first"
    PANEL_ONLY = "panel_only"
    NOTES_ONLY = "notes_only"


class DatePrefixFormat(str, Enum):
    """Date prefix placed in front of generated filenames."""

    ISO = "iso"  # 2024-01-31 - Title.md
    US = "us"  # 01-31-2024 - Title.md
    EU = "eu"  # 31-01-2024 - Title.md
    DOT = "dot"  # 2024.01.31 - Title.md
    NONE = "none"  # Title.md


class ContentSourceKind(str, Enum):
    """Content representations a document may carry."""

    PANEL = "panel"
    NOTES = "notes"
    MARKDOWN = "markdown"
    PLAIN = "plain"
    PLACEHOLDER = "placeholder"


class NoteFrontmatter(BaseModel):
    """Frontmatter written at the top of every imported note."""

    id: str | None = None
    title: str | None = None
    created: str
    updated: str | None = None
    source: str = GRANOLA_SOURCE
    granola_url: str | None = None
    tags: list[str] | None = None


class ConvertedNote(BaseModel):
    """
    Result of converting one source document.

    Produced once per document and consumed by a single vault write.
    """

    model_config = ConfigDict(frozen=True)

    filename: str = Field(..., description="Generated filename including .md")
    content: str = Field(..., description="Frontmatter followed by the Markdown body")
    frontmatter: NoteFrontmatter
    body: str = Field(default="", description="Markdown body without frontmatter")
    content_source: ContentSourceKind = Field(
        default=ContentSourceKind.PLACEHOLDER, description="Representation the body came from"
    )
    is_empty: bool = Field(
        default=False,
        description="True when no content was found and the document was never edited",
    )


class DocumentValidation(BaseModel):
    """Structural validation of a source document before conversion."""

    is_valid: bool = True
    is_empty: bool = True
    reason: str | None = None
    available_content_sources: list[ContentSourceKind] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
