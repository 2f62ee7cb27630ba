"""HTML helpers for panel content delivered as markup instead of a tree."""

import html
import re

_BLOCK_RULES = [
    (re.compile(r"<h([1-6])[^>]*>(.*?)</h\1>", re.IGNORECASE | re.DOTALL), None),
    (re.compile(r"<li[^>]*>(.*?)</li>", re.IGNORECASE | re.DOTALL), r"- \1\n"),
    (re.compile(r"</?(?:ul|ol)[^>]*>", re.IGNORECASE), "\n"),
    (re.compile(r"<br\s*/?>", re.IGNORECASE), "\n"),
    (re.compile(r"</p\s*>|</div\s*>", re.IGNORECASE), "\n\n"),
    (re.compile(r"<hr\s*/?>", re.IGNORECASE), "\n---\n\n"),
]
_INLINE_RULES = [
    (re.compile(r"<(?:strong|b)>(.*?)</(?:strong|b)>", re.IGNORECASE | re.DOTALL), r"**\1**"),
    (re.compile(r"<(?:em|i)>(.*?)</(?:em|i)>", re.IGNORECASE | re.DOTALL), r"_\1_"),
    (re.compile(r"<code>(.*?)</code>", re.IGNORECASE | re.DOTALL), r"`\1`"),
    (
        re.compile(r"<a\s[^>]*href=[\"']([^\"']*)[\"'][^>]*>(.*?)</a>", re.IGNORECASE | re.DOTALL),
        r"[\2](\1)",
    ),
]
_TAG = re.compile(r"<[^>]+>")
_BLANK_LINES = re.compile(r"\n{3,}")


def decode_html_entities(text: str) -> str:
    """Decode named and numeric HTML entities (``&amp;``, ``&#163;``, ``&#x7B;``)."""
    # &nbsp; decodes to U+00A0, notes want a plain space
    return html.unescape(text).replace("\u00a0", " ")


def looks_like_html(text: str) -> bool:
    return "<" in text and ">" in text


def html_to_text(markup: str) -> str:
    """Strip all tags and collapse whitespace."""
    if not markup:
        return ""
    text = decode_html_entities(_TAG.sub(" ", markup))
    return " ".join(text.split())


def html_to_markdown(markup: str) -> str:
    """
    Convert simple HTML (headings, lists, paragraphs, emphasis, links) to Markdown.

    Anything not covered by the rules is reduced to its text content.
    """
    if not markup or not markup.strip():
        return ""

    text = markup
    for pattern, replacement in _INLINE_RULES:
        text = pattern.sub(replacement, text)
    for pattern, replacement in _BLOCK_RULES:
        if replacement is None:
            text = pattern.sub(
                lambda m: "#" * int(m.group(1)) + " " + _TAG.sub("", m.group(2)).strip() + "\n\n",
                text,
            )
        else:
            text = pattern.sub(replacement, text)

    text = decode_html_entities(_TAG.sub("", text))
    lines = [line.strip() for line in text.split("\n")]
    return _BLANK_LINES.sub("\n\n", "\n".join(lines)).strip()
