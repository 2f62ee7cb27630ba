"""Attendee extraction and tag generation."""

import re
import unicodedata
from typing import Any

from pydantic import BaseModel

from granola_import.config import AttendeeTagsConfig

TEMPLATE_VARIABLES = ("{name}", "{email}", "{domain}", "{company}")


class Attendee(BaseModel):
    """A meeting participant as far as tags are concerned."""

    name: str
    email: str | None = None
    company: str | None = None
    is_host: bool = False


def normalize_for_tag(value: str) -> str:
    """Lowercase ASCII slug: accents stripped, spaces to hyphens, punctuation removed."""
    decomposed = unicodedata.normalize("NFD", value)
    ascii_only = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    slug = re.sub(r"\s+", "-", ascii_only.lower())
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    return re.sub(r"-+", "-", slug).strip("-")


def _dig(data: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def extract_attendees(people: Any, include_host: bool = False) -> list[Attendee]:
    """
    Read attendees from the ``people`` field of a document.

    Two shapes are understood: a plain list of names, and an object with an
    ``attendees`` list (name under ``details.person.name.fullName``) plus an
    optional ``creator``.
    """
    if isinstance(people, list):
        return [Attendee(name=name) for name in people if isinstance(name, str) and name.strip()]

    if not isinstance(people, dict) or not isinstance(people.get("attendees"), list):
        return []

    attendees = []
    for entry in people["attendees"]:
        full_name = _dig(entry, "details", "person", "name", "fullName")
        if not full_name:
            continue
        attendees.append(
            Attendee(
                name=full_name,
                email=entry.get("email") or None,
                company=_dig(entry, "details", "company", "name") or None,
            )
        )

    creator = people.get("creator")
    if include_host and isinstance(creator, dict):
        attendees.append(
            Attendee(
                name=creator.get("name") or "Unknown Host",
                email=creator.get("email") or None,
                is_host=True,
            )
        )
    return attendees


def _render_tag(template: str, attendee: Attendee) -> str | None:
    tag = template
    name = attendee.name.strip()
    email = attendee.email or ""

    if "{name}" in tag:
        if not name:
            return None
        tag = tag.replace("{name}", normalize_for_tag(name))
    if "{email}" in tag:
        if not email:
            return None
        tag = tag.replace("{email}", re.sub(r"[@.]", "-", email.lower()))
    if "{domain}" in tag:
        if "@" not in email:
            return None
        tag = tag.replace("{domain}", email.split("@", 1)[1].lower().replace(".", "-"))
    if "{company}" in tag:
        if not attendee.company:
            return None
        tag = tag.replace("{company}", normalize_for_tag(attendee.company))

    return re.sub(r"/+", "/", tag).rstrip("/").strip() or None


def attendee_tags(people: Any, config: AttendeeTagsConfig) -> list[str]:
    """
    Build unique tags for the attendees of a document.

    Attendees missing a value the template needs are skipped. Tags keep their
    order of first appearance.
    """
    if not config.enabled:
        return []

    template = config.tag_template or "person/{name}"
    my_name = config.my_name.strip().lower()
    tags: list[str] = []

    for attendee in extract_attendees(people, include_host=config.include_host):
        if config.exclude_my_name and my_name and attendee.name.strip().lower() == my_name:
            continue
        tag = _render_tag(template, attendee)
        if tag and tag not in tags:
            tags.append(tag)
    return tags
