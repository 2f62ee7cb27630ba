"""Tests for text and HTML helpers."""

from datetime import UTC, datetime

import pytest

from granola_import.models import RichTextNode
from granola_import.utils import GranolaImportError, NotFoundError, VaultError
from granola_import.utils.html import decode_html_entities, html_to_markdown, html_to_text
from granola_import.utils.text import (
    count_words,
    extract_plain_text,
    extract_text_from_content,
    parse_timestamp,
    same_timestamp,
    strip_markdown,
)
from tests.builders import doc_tree, heading, paragraph, text


@pytest.mark.unit
class TestHtml:
    """Test HTML helpers."""

    def test_entities(self):
        """Test named and numeric entities."""
        assert decode_html_entities("&amp; &#163; &#x7B; a&nbsp;b") == "& £ { a b"

    def test_html_to_text(self):
        assert html_to_text("<p>Hello <b>big</b></p><p>world</p>") == "Hello big world"

    def test_html_to_markdown(self):
        markup = (
            "<h2>Summary</h2><ul><li>First</li><li><em>Second</em></li></ul>"
            '<p>See <a href="https://example.com">docs</a> &amp; more</p>'
        )

        assert html_to_markdown(markup) == (
            "## Summary\n\n- First\n- _Second_\n\nSee [docs](https://example.com) & more"
        )

    def test_blank_markup(self):
        assert html_to_markdown("   ") == ""


@pytest.mark.unit
class TestText:
    """Test text helpers."""

    def test_count_words(self):
        assert count_words("  one two\nthree ") == 3
        assert count_words("") == 0

    def test_extract_plain_text(self):
        tree = RichTextNode.model_validate(
            doc_tree(heading(1, "Title"), paragraph(text("Body "), text("text", "strong")))
        )

        assert extract_plain_text(tree) == "Title Body text"
        assert extract_plain_text(None) == ""

    def test_extract_text_from_content(self):
        assert extract_text_from_content("<p>Hi</p>") == "Hi"
        assert extract_text_from_content("  plain  ") == "plain"
        assert extract_text_from_content(None) == ""

    def test_strip_markdown(self):
        assert strip_markdown("# Title\n> **quoted** `code`") == "Title quoted code"

    def test_parse_timestamp(self):
        assert parse_timestamp("2024-01-02T03:04:05Z") == datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
        assert parse_timestamp("garbage") is None
        assert parse_timestamp(None) is None

    @pytest.mark.parametrize(
        "left,right,expected",
        [
            ("2024-01-02T03:04:05Z", "2024-01-02T03:04:05.000Z", True),
            ("2024-01-02T03:04:05Z", "2024-01-02T04:04:05+01:00", True),
            ("2024-01-02T03:04:05Z", "2024-01-02T03:04:06Z", False),
            ("not a date", "not a date", True),
            ("not a date", None, False),
        ],
    )
    def test_same_timestamp(self, left, right, expected):
        assert same_timestamp(left, right) is expected


@pytest.mark.unit
class TestExceptions:
    """Test the error hierarchy."""

    def test_context_defaults_to_empty(self):
        error = VaultError("boom")

        assert error.message == "boom"
        assert error.context == {}

    def test_hierarchy(self):
        error = NotFoundError("missing", context={"path": "a.md"})

        assert isinstance(error, VaultError)
        assert isinstance(error, GranolaImportError)
        assert error.context["path"] == "a.md"
