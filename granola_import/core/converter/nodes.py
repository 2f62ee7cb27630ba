"""
Rich-text node renderers.

Each node type maps to a handler that returns Markdown text. Handlers are
called through convert_node(), which turns any failure into an inline error
marker so a single malformed node never aborts a whole document.
"""

from collections.abc import Callable
from dataclasses import dataclass, field

from granola_import.models.rich_text import RichTextNode
from granola_import.utils.html import decode_html_entities

LIST_TYPES = ("bulletList", "orderedList")
CELL_TYPES = ("tableCell", "tableHeader")
MARKDOWN_LINE_BREAK = "  \n"


@dataclass(frozen=True)
class NodeResult:
    """Outcome of rendering one node: Markdown text or an error marker."""

    text: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, node_type: str, message: str) -> "NodeResult":
        return cls(text=f"[Error converting {node_type} node: {message}]\n\n", error=message)


@dataclass
class RenderResult:
    """Markdown for a whole tree plus the per-node errors that were recovered."""

    markdown: str
    errors: list[str] = field(default_factory=list)


# Inline text


def render_text(node: RichTextNode) -> str:
    """Render a text leaf with its marks applied in a fixed nesting order."""
    text = decode_html_entities(node.text or "")
    if not text.strip():
        return text

    marks = {mark.type: mark for mark in node.marks}
    if "code" in marks:
        text = f"`{text}`"
    if "link" in marks:
        href = marks["link"].attrs.get("href") or "#"
        text = f"[{text}]({href})"
    if "strong" in marks or "bold" in marks:
        text = f"**{text}**"
    if "em" in marks or "italic" in marks:
        text = f"_{text}_"
    return text


def extract_inline(nodes: list[RichTextNode], hard_break: str = "\n") -> str:
    """
    Concatenate the inline text of a node list.

    Hard breaks become ``hard_break``: a bare newline for text that is split
    or collapsed afterwards, a Markdown line break inside paragraphs.
    """
    parts: list[str] = []
    for child in nodes:
        if child.type == "text":
            parts.append(render_text(child))
        elif child.type == "hardBreak":
            parts.append(hard_break)
        elif child.content:
            parts.append(extract_inline(child.content, hard_break))
        elif child.text:
            parts.append(decode_html_entities(child.text))
    return "".join(parts)


# Block handlers


def _paragraph(node: RichTextNode) -> str:
    text = extract_inline(node.children, MARKDOWN_LINE_BREAK).strip()
    return f"{text}\n\n" if text else ""


def _heading_level(value) -> int:
    try:
        level = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 1
    return max(1, min(6, level or 1))


def _heading(node: RichTextNode) -> str:
    prefix = "#" * _heading_level(node.attrs.get("level"))
    text = extract_inline(node.children, MARKDOWN_LINE_BREAK).strip()
    return f"{prefix} {text}\n\n"


def _list_item_lines(item: RichTextNode, prefix: str) -> str:
    texts: list[str] = []
    nested: list[str] = []
    for child in item.children:
        if child.type in LIST_TYPES:
            rendered = _render_list(child).rstrip()
            if rendered:
                nested.append("\n".join(f"  {line}" for line in rendered.split("\n")))
        elif child.type == "text":
            texts.append(render_text(child))
        else:
            text = extract_inline(child.children).strip() if child.content else (child.text or "")
            if text:
                texts.append(text)

    item_text = " ".join(texts).strip()
    if not item_text and not nested:
        return ""
    return "\n".join([f"{prefix}{item_text}", *nested])


def _render_list(node: RichTextNode) -> str:
    ordered = node.type == "orderedList"
    lines = []
    for index, item in enumerate(node.children):
        prefix = f"{index + 1}. " if ordered else "- "
        line = _list_item_lines(item, prefix)
        if line:
            lines.append(line)
    return "\n".join(lines)


def _list(node: RichTextNode) -> str:
    rendered = _render_list(node)
    return f"{rendered}\n\n" if rendered else ""


def _code_block(node: RichTextNode) -> str:
    language = node.attrs.get("language") or ""
    if node.content:
        code = "".join(child.text or "" for child in node.children)
    else:
        code = node.text or ""
    return f"```{language}\n{code.strip()}\n```\n\n"


def _blockquote(node: RichTextNode) -> str:
    lines: list[str] = []
    for child in node.children:
        if child.type == "paragraph":
            text = extract_inline(child.children).strip()
        else:
            text = convert_node(child).text.strip()
        if not text:
            lines.append("> ")
            continue
        lines.extend(f"> {line}" for line in text.split("\n"))

    if not lines:
        return "> \n\n"
    return "\n".join(lines) + "\n\n"


def _cell_text(cell: RichTextNode) -> str:
    parts = []
    for child in cell.children:
        text = extract_inline(child.children) if child.content else render_text(child)
        if text.strip():
            parts.append(" ".join(text.split()))
    return " ".join(parts).replace("|", "\\|")


def _table(node: RichTextNode) -> str:
    rows = [row for row in node.children if row.type == "tableRow"]
    lines = []
    for index, row in enumerate(rows):
        cells = [_cell_text(cell) for cell in row.children if cell.type in CELL_TYPES]
        lines.append("| " + " | ".join(cells) + " |")
        if index == 0:
            lines.append("|" + " --- |" * len(cells))
    return "\n".join(lines) + "\n\n" if lines else ""


def _hard_break(node: RichTextNode) -> str:
    return MARKDOWN_LINE_BREAK


def _horizontal_rule(node: RichTextNode) -> str:
    return "---\n\n"


def _doc(node: RichTextNode) -> str:
    return "".join(convert_node(child).text for child in node.children)


def _unsupported(node: RichTextNode) -> str:
    marker = f"[Unsupported content: {node.type}]"
    inner = extract_inline(node.children).strip() if node.content else ""
    return f"{marker}\n\n{inner}\n\n" if inner else f"{marker}\n\n"


NODE_HANDLERS: dict[str, Callable[[RichTextNode], str]] = {
    "doc": _doc,
    "paragraph": _paragraph,
    "heading": _heading,
    "bulletList": _list,
    "orderedList": _list,
    "text": render_text,
    "codeBlock": _code_block,
    "blockquote": _blockquote,
    "table": _table,
    "hardBreak": _hard_break,
    "horizontalRule": _horizontal_rule,
}


def convert_node(node: RichTextNode) -> NodeResult:
    """Render a single node, isolating any failure to an error marker."""
    handler = NODE_HANDLERS.get(node.type, _unsupported)
    try:
        return NodeResult(text=handler(node))
    except Exception as e:
        return NodeResult.failure(node.type, str(e))


def render_tree(root: RichTextNode) -> RenderResult:
    """Render the children of a ``doc`` root to Markdown."""
    results = [convert_node(child) for child in root.children]
    markdown = "".join(result.text for result in results).strip()
    return RenderResult(
        markdown=markdown,
        errors=[result.error for result in results if not result.ok],
    )
