"""
Content source selection.

A document may carry several representations of its content. They are
modelled as an ordered list of typed sources; the converter walks the list
returned by select_sources() and uses the first one that renders to text.
"""

from dataclasses import dataclass

from granola_import.models.document import SourceDocument
from granola_import.models.note import ContentPriority, ContentSourceKind
from granola_import.models.rich_text import RichTextNode, is_valid_doc

TREE_ORDER: dict[ContentPriority, tuple[ContentSourceKind, ...]] = {
    ContentPriority.PANEL_FIRST: (ContentSourceKind.PANEL, ContentSourceKind.NOTES),
    ContentPriority.NOTES_FIRST: (ContentSourceKind.NOTES, ContentSourceKind.PANEL),
    ContentPriority.PANEL_ONLY: (ContentSourceKind.PANEL,),
    ContentPriority.NOTES_ONLY: (ContentSourceKind.NOTES,),
}

TEXT_FALLBACKS = (ContentSourceKind.MARKDOWN, ContentSourceKind.PLAIN)


@dataclass(frozen=True)
class ContentSource:
    """One optional content representation of a document."""

    kind: ContentSourceKind
    value: RichTextNode | str | None

    @property
    def is_usable(self) -> bool:
        """Trees must be non-empty ``doc`` roots; strings must be non-blank."""
        if self.value is None:
            return False
        if isinstance(self.value, RichTextNode):
            return is_valid_doc(self.value)
        return bool(self.value.strip())


def document_sources(doc: SourceDocument) -> dict[ContentSourceKind, ContentSource]:
    """All representations of a document keyed by kind, usable or not."""
    panel = doc.last_viewed_panel.content if doc.last_viewed_panel else None
    return {
        ContentSourceKind.PANEL: ContentSource(ContentSourceKind.PANEL, panel),
        ContentSourceKind.NOTES: ContentSource(ContentSourceKind.NOTES, doc.notes),
        ContentSourceKind.MARKDOWN: ContentSource(ContentSourceKind.MARKDOWN, doc.notes_markdown),
        ContentSourceKind.PLAIN: ContentSource(ContentSourceKind.PLAIN, doc.notes_plain),
    }


def select_sources(doc: SourceDocument, priority: ContentPriority) -> list[ContentSource]:
    """
    Usable sources in the order they should be tried.

    The rich-text representations allowed by ``priority`` come first, then
    the pre-rendered Markdown and the plain text, in that fixed order.
    """
    sources = document_sources(doc)
    order = (*TREE_ORDER[priority], *TEXT_FALLBACKS)
    return [sources[kind] for kind in order if sources[kind].is_usable]


def available_sources(doc: SourceDocument) -> list[ContentSourceKind]:
    """Kinds of every usable representation, regardless of priority."""
    return [kind for kind, source in document_sources(doc).items() if source.is_usable]
