"""
Frontmatter rendering and parsing.

Rendering follows the note format written by the importer. Parsing is a
single tolerant entry point: anything that is not a well-formed block comes
back as None and the file is treated as untracked.
"""

import re
from datetime import date, datetime
from typing import Any

import yaml

from granola_import.models.note import GRANOLA_SOURCE, NoteFrontmatter

FRONTMATTER_PATTERN = re.compile(r"\A---\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)
_LINE_PATTERN = re.compile(r"^([A-Za-z_][\w-]*):\s*(.*)$")
_NEEDS_QUOTES = (":", "#", "[", "]", "{", "}", '"', "'", "|", ">", "\n")
_INDICATORS = ("-", "?", "!", "&", "*", "%", "@", "`", ",")


def quote_value(value: str) -> str:
    """Quote a scalar when YAML would misread it, escaping quotes and backslashes."""
    value = value.replace("\r", " ").replace("\n", " ")
    if (
        not value
        or any(token in value for token in _NEEDS_QUOTES)
        or value.startswith(_INDICATORS)
        or value != value.strip()
    ):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return value


def render_frontmatter(frontmatter: NoteFrontmatter) -> str:
    """Render the ``---`` delimited block. Unset fields are omitted."""
    lines = ["---"]
    for key, value in frontmatter.model_dump().items():
        if value is None:
            continue
        if isinstance(value, list):
            if not value:
                continue
            lines.append(f"{key}:")
            lines.extend(f"  - {quote_value(str(item))}" for item in value)
        else:
            lines.append(f"{key}: {quote_value(str(value))}")
    lines.append("---")
    return "\n".join(lines) + "\n"


def split_frontmatter(content: str) -> tuple[str | None, str]:
    """
    Split file content into its frontmatter block and body.

    Returns:
        (block including delimiters, body with leading blank lines removed);
        the block is None when the file has no frontmatter.
    """
    match = FRONTMATTER_PATTERN.match(content)
    if not match:
        return None, content
    return match.group(0), content[match.end() :].lstrip("\r\n")


def _normalize(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


def _parse_lines(block: str) -> dict[str, Any]:
    record: dict[str, Any] = {}
    for line in block.splitlines():
        match = _LINE_PATTERN.match(line.strip())
        if not match:
            continue
        raw = match.group(2).strip()
        if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in "\"'":
            raw = raw[1:-1].replace('\\"', '"').replace("\\\\", "\\")
        record[match.group(1)] = raw
    return record


def parse_frontmatter(content: str) -> dict[str, Any] | None:
    """
    Parse the frontmatter block at the top of a note.

    YAML is tried first; a block YAML rejects is read line by line as
    ``key: value`` pairs.

    Returns:
        Mapping of keys to values, or None when there is no terminated block
    """
    match = FRONTMATTER_PATTERN.match(content)
    if not match:
        return None

    block = match.group(1)
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError:
        data = None
    if not isinstance(data, dict):
        data = _parse_lines(block)
    if not data:
        return None
    return {str(key): _normalize(value) for key, value in data.items()}


def parse_granola_frontmatter(content: str) -> dict[str, Any] | None:
    """Frontmatter of a note written by this importer, or None for anything else."""
    record = parse_frontmatter(content)
    if not record or record.get("source") != GRANOLA_SOURCE:
        return None
    return record
