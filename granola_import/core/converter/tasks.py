"""Conversion of action item bullets into Markdown tasks."""

import re

from granola_import.config import ActionItemsConfig

_KEYWORDS = r"(action\s*items?|actions?|tasks?|to-?dos?|to\s+dos?|follow-?\s*ups?|next\s+steps?)"

ACTION_HEADER_PATTERNS = [
    re.compile(rf"^#{{1,6}}\s+.*\b{_KEYWORDS}\b.*$", re.IGNORECASE),
    re.compile(rf"^{_KEYWORDS}\b.*$", re.IGNORECASE),
    re.compile(rf"^.*:\s*{_KEYWORDS}\b.*$", re.IGNORECASE),
]
_ANY_HEADER = re.compile(r"^#{1,6}\s")
_LEADING_SPACE = re.compile(r"^(\s*)")


def is_action_header(line: str) -> bool:
    return any(pattern.match(line) for pattern in ACTION_HEADER_PATTERNS)


def convert_action_items(markdown: str, config: ActionItemsConfig) -> str:
    """
    Turn bullets under action-item headers into ``- [ ]`` tasks.

    A section starts at a matching header and ends at the next Markdown
    header. When any task was produced and ``add_task_tag`` is set, the task
    tag is appended once at the end of the document.
    """
    if not config.convert_to_tasks or not markdown.strip():
        return markdown

    lines: list[str] = []
    in_section = False
    converted = False

    for line in markdown.split("\n"):
        stripped = line.strip()
        if is_action_header(stripped):
            in_section = True
            lines.append(line)
            continue
        if in_section and _ANY_HEADER.match(stripped):
            in_section = False

        if in_section and stripped.startswith(("- ", "* ")) and not stripped.startswith("- ["):
            indent = _LEADING_SPACE.match(line).group(1)
            lines.append(f"{indent}- [ ] {stripped[2:]}")
            converted = True
            continue
        lines.append(line)

    if converted and config.add_task_tag and config.task_tag_name:
        lines.extend(["", config.task_tag_name])
    return "\n".join(lines)
