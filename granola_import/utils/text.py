"""Text helpers shared by the converter, detector and metadata service."""

import re
from datetime import datetime

from granola_import.models.rich_text import RichTextNode
from granola_import.utils.html import html_to_text, looks_like_html

_MARKDOWN_SYNTAX = re.compile(r"[#*_`>]+")


def count_words(text: str) -> int:
    """Count whitespace-separated words."""
    return len(text.split()) if text else 0


def extract_plain_text(node: RichTextNode | None) -> str:
    """Flatten a rich-text tree to a single line of text."""
    if node is None:
        return ""

    def walk(current: RichTextNode) -> list[str]:
        if current.text is not None:
            return [current.text]
        parts: list[str] = []
        for child in current.children:
            parts.extend(walk(child))
        return parts

    return " ".join(" ".join(walk(node)).split())


def extract_text_from_content(content: RichTextNode | str | None) -> str:
    """Extract text from a tree, an HTML string or a plain string."""
    if not content:
        return ""
    if isinstance(content, str):
        return html_to_text(content) if looks_like_html(content) else content.strip()
    return extract_plain_text(content)


def strip_markdown(text: str) -> str:
    """Remove Markdown punctuation and collapse whitespace."""
    return " ".join(_MARKDOWN_SYNTAX.sub(" ", text).split())


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp, returning None when it isn't one."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None


def same_timestamp(left: str | None, right: str | None) -> bool:
    """Compare two timestamps as instants when both parse, else as strings."""
    left_dt, right_dt = parse_timestamp(left), parse_timestamp(right)
    if left_dt is not None and right_dt is not None:
        if (left_dt.tzinfo is None) != (right_dt.tzinfo is None):
            return left_dt.replace(tzinfo=None) == right_dt.replace(tzinfo=None)
        return left_dt == right_dt
    return (left or "").strip() == (right or "").strip()
