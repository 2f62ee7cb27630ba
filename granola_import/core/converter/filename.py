"""Filename generation for imported notes."""

import re

from granola_import.config import ContentConfig
from granola_import.models.document import SourceDocument
from granola_import.models.note import DatePrefixFormat
from granola_import.utils.html import decode_html_entities
from granola_import.utils.text import parse_timestamp

INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')
MARKDOWN_EXTENSION = ".md"


def sanitize_title(title: str) -> str:
    """Remove characters invalid in filenames and collapse whitespace."""
    cleaned = INVALID_FILENAME_CHARS.sub("", decode_html_entities(title))
    return " ".join(cleaned.split())


def _date_parts(timestamp: str) -> dict[str, str]:
    parsed = parse_timestamp(timestamp)
    if parsed is None:
        return {key: "NaN" for key in ("year", "month", "day", "hour", "minute", "second")}
    return {
        "year": f"{parsed.year:04d}",
        "month": f"{parsed.month:02d}",
        "day": f"{parsed.day:02d}",
        "hour": f"{parsed.hour:02d}",
        "minute": f"{parsed.minute:02d}",
        "second": f"{parsed.second:02d}",
    }


def format_date(timestamp: str, date_format: DatePrefixFormat) -> str:
    """
    Format the calendar date of a timestamp.

    The date is taken in the timestamp's own offset. Unparseable timestamps
    produce ``NaN`` components instead of raising.
    """
    parts = _date_parts(timestamp)
    year, month, day = parts["year"], parts["month"], parts["day"]
    if date_format == DatePrefixFormat.US:
        return f"{month}-{day}-{year}"
    if date_format == DatePrefixFormat.EU:
        return f"{day}-{month}-{year}"
    if date_format == DatePrefixFormat.DOT:
        return f"{year}.{month}.{day}"
    if date_format == DatePrefixFormat.NONE:
        return ""
    return f"{year}-{month}-{day}"


def format_time(timestamp: str) -> str:
    """Format the time of day as ``HH-MM-SS``."""
    parts = _date_parts(timestamp)
    return f"{parts['hour']}-{parts['minute']}-{parts['second']}"


def date_prefix(timestamp: str, date_format: DatePrefixFormat) -> str:
    """``{date} - `` prefix, or an empty string when prefixes are disabled."""
    if date_format == DatePrefixFormat.NONE:
        return ""
    return f"{format_date(timestamp, date_format)} - "


def finalize_filename(stem: str, max_length: int = 100) -> str:
    """Truncate a stem so that stem plus ``.md`` fits ``max_length``."""
    limit = max(1, max_length - len(MARKDOWN_EXTENSION))
    return stem[:limit].rstrip() + MARKDOWN_EXTENSION


def title_stem(title: str | None, document_id: str) -> str:
    """Sanitized title, ``Untitled-{id}`` when missing, ``Untitled`` when nothing survives."""
    raw = title.strip() if title and title.strip() else f"Untitled-{document_id}"
    return sanitize_title(raw) or "Untitled"


def generate_filename(
    title: str | None,
    document_id: str,
    created_at: str,
    date_format: DatePrefixFormat = DatePrefixFormat.ISO,
    max_length: int = 100,
) -> str:
    """
    Build ``{date prefix}{sanitized title}.md``.

    Args:
        title: Document title
        document_id: Document ID, used when the title is missing
        created_at: Creation timestamp the date prefix is derived from
        date_format: Prefix format, NONE for no prefix
        max_length: Maximum filename length including the extension

    Returns:
        Filename with ``.md`` extension
    """
    stem = date_prefix(created_at, date_format) + title_stem(title, document_id)
    return finalize_filename(stem, max_length)


def generate_templated_filename(
    template: str,
    title: str | None,
    document_id: str,
    created_at: str,
    updated_at: str,
    date_format: DatePrefixFormat = DatePrefixFormat.ISO,
    max_length: int = 100,
) -> str:
    """
    Build a filename from a template.

    Supported variables: ``{title}``, ``{id}``, ``{created_date}``,
    ``{updated_date}``, ``{created_time}``, ``{updated_time}``,
    ``{created_datetime}``, ``{updated_datetime}``.
    """
    created_date = format_date(created_at, date_format)
    updated_date = format_date(updated_at, date_format)
    values = {
        "{created_datetime}": f"{created_date}_{format_time(created_at)}",
        "{updated_datetime}": f"{updated_date}_{format_time(updated_at)}",
        "{created_date}": created_date,
        "{updated_date}": updated_date,
        "{created_time}": format_time(created_at),
        "{updated_time}": format_time(updated_at),
        "{title}": title_stem(title, document_id),
        "{id}": document_id,
    }
    stem = template
    for variable, value in values.items():
        stem = stem.replace(variable, value)
    return finalize_filename(sanitize_title(stem) or "Untitled", max_length)


def legacy_filename(title: str | None, document_id: str, max_length: int = 100) -> str:
    """Filename used by older imports, without any date prefix."""
    return finalize_filename(title_stem(title, document_id), max_length)


def filename_for_document(doc: SourceDocument, content: ContentConfig) -> str:
    """Filename the converter writes a document under with the given options."""
    if content.use_custom_filename_template:
        return generate_templated_filename(
            content.filename_template,
            doc.title,
            doc.id,
            doc.created_at,
            doc.updated_at,
            content.date_prefix_format,
            content.max_filename_length,
        )
    return generate_filename(
        doc.title,
        doc.id,
        doc.created_at,
        content.date_prefix_format,
        content.max_filename_length,
    )
