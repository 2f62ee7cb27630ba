"""Tests for content source selection."""

import pytest

from granola_import.core.converter.content_sources import available_sources, select_sources
from granola_import.models import ContentPriority, ContentSourceKind
from tests.builders import doc_tree, make_document, paragraph, text


@pytest.fixture
def layered_document():
    """Document carrying every representation."""
    return make_document(
        last_viewed_panel={"content": doc_tree(paragraph(text("Summary")))},
        notes=doc_tree(paragraph(text("Raw notes"))),
        notes_markdown="Raw **markdown**",
        notes_plain="Raw plain",
    )


def kinds(sources):
    return [source.kind for source in sources]


@pytest.mark.unit
class TestSelectSources:
    """Test ordering of usable content sources."""

    def test_panel_first(self, layered_document):
        """Test default priority puts the panel before the notes tree."""
        assert kinds(select_sources(layered_document, ContentPriority.PANEL_FIRST)) == [
            ContentSourceKind.PANEL,
            ContentSourceKind.NOTES,
            ContentSourceKind.MARKDOWN,
            ContentSourceKind.PLAIN,
        ]

    def test_notes_first(self, layered_document):
        """Test notes-first priority."""
        assert kinds(select_sources(layered_document, ContentPriority.NOTES_FIRST))[:2] == [
            ContentSourceKind.NOTES,
            ContentSourceKind.PANEL,
        ]

    def test_only_priorities_keep_text_fallbacks(self, layered_document):
        """Test *_only priorities drop the other tree but keep text fallbacks."""
        assert kinds(select_sources(layered_document, ContentPriority.NOTES_ONLY)) == [
            ContentSourceKind.NOTES,
            ContentSourceKind.MARKDOWN,
            ContentSourceKind.PLAIN,
        ]

    def test_unusable_sources_are_dropped(self):
        """Test empty trees and blank strings are not offered."""
        doc = make_document(
            notes={"type": "doc", "content": []},
            notes_markdown="   ",
            notes_plain="only this",
        )

        assert kinds(select_sources(doc, ContentPriority.PANEL_FIRST)) == [
            ContentSourceKind.PLAIN
        ]

    def test_non_doc_root_is_unusable(self):
        """Test a tree whose root isn't a doc is ignored."""
        doc = make_document(notes=paragraph(text("stray")))

        assert select_sources(doc, ContentPriority.PANEL_FIRST) == []

    def test_html_panel_is_usable(self):
        """Test panel content given as an HTML string."""
        doc = make_document(last_viewed_panel={"content": "<p>Hello</p>"})

        assert available_sources(doc) == [ContentSourceKind.PANEL]
