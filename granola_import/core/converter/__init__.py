"""
Rich-text to Markdown conversion.

- MarkdownConverter: SourceDocument -> ConvertedNote
- render_tree / convert_node: node dispatch with per-node error isolation
- select_sources: ordered content source selection
- render_frontmatter / parse_frontmatter: note frontmatter
- generate_filename: date-prefixed, sanitized filenames
"""

from granola_import.core.converter.content_sources import (
    ContentSource,
    available_sources,
    select_sources,
)
from granola_import.core.converter.converter import MarkdownConverter
from granola_import.core.converter.filename import (
    filename_for_document,
    generate_filename,
    legacy_filename,
    sanitize_title,
)
from granola_import.core.converter.frontmatter import (
    parse_frontmatter,
    parse_granola_frontmatter,
    render_frontmatter,
    split_frontmatter,
)
from granola_import.core.converter.nodes import NodeResult, convert_node, render_tree

__all__ = [
    "MarkdownConverter",
    "ContentSource",
    "select_sources",
    "available_sources",
    "NodeResult",
    "convert_node",
    "render_tree",
    "render_frontmatter",
    "parse_frontmatter",
    "parse_granola_frontmatter",
    "split_frontmatter",
    "filename_for_document",
    "generate_filename",
    "legacy_filename",
    "sanitize_title",
]
