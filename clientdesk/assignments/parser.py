"""Parse pasted free text into a structured client record.

Two layouts are accepted. A *labeled* block has at least one ``key: value``
line; keys are matched loosely (``Loc``, ``Location``, ``Occupation`` ...).
A *positional* block has no colons at all and is read as
name, age, location, work, application, one per line.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Any

from clientdesk.assignments.errors import MissingRequiredFieldError
from clientdesk.assignments.models import UNKNOWN

_AGE_DIGITS_RE = re.compile(r"[0-9]+")
_NAME_SEPARATOR = " / "

# Checked in order; the first label fragment found in the key wins.
_LABELS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("name",), "name"),
    (("age",), "age"),
    (("loc",), "location"),
    (("work", "occupation"), "work"),
    (("app",), "application"),
)
_POSITIONAL_FIELDS = ("name", "age", "location", "work", "application")


@dataclass(frozen=True)
class ParsedClient:
    name: str
    age: str
    location: str = UNKNOWN
    work: str = UNKNOWN
    application: str = UNKNOWN

    def as_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "age": self.age,
            "location": self.location,
            "work": self.work,
            "application": self.application,
        }


def clean_name(raw: str) -> str:
    """Keep the real name from ``"username / real name"`` values."""
    if _NAME_SEPARATOR in raw:
        return raw.split(_NAME_SEPARATOR)[1].strip()
    return raw.strip()


def extract_age(raw: str) -> str:
    """Return the first run of digits (``"41yrs old"`` -> ``"41"``)."""
    match = _AGE_DIGITS_RE.search(raw)
    return match.group(0) if match else raw.strip()


def _label_field(key: str) -> str | None:
    lowered = key.strip().lower()
    for fragments, field in _LABELS:
        if any(fragment in lowered for fragment in fragments):
            return field
    return None


def _raw_fields(lines: list[str]) -> dict[str, str]:
    fields = dict.fromkeys(_POSITIONAL_FIELDS, "")
    if any(":" in line for line in lines):
        for line in lines:
            if ":" not in line:
                continue
            key, *value_parts = line.split(":")
            field = _label_field(key)
            if field is not None:
                fields[field] = ":".join(value_parts).strip()
        return fields

    if len(lines) >= 2:
        for field, line in zip(_POSITIONAL_FIELDS, lines):
            fields[field] = line.strip()
    return fields


def parse_client_fields(text: str) -> dict[str, str]:
    """Extract the five raw fields, leaving absent ones as empty strings."""
    lines = [line for line in (text or "").split("\n") if line.strip()]
    fields = _raw_fields(lines)
    if fields["name"]:
        fields["name"] = clean_name(fields["name"])
    if fields["age"]:
        fields["age"] = extract_age(fields["age"])
    return fields


def parse_client_text(text: str) -> ParsedClient:
    """Parse one pasted record or raise ``MissingRequiredFieldError``."""
    if not (text or "").strip():
        raise MissingRequiredFieldError(
            "Please enter client information", fields=("name", "age")
        )

    fields = parse_client_fields(text)
    missing = tuple(field for field in ("name", "age") if not fields[field])
    if missing:
        raise MissingRequiredFieldError("Name and age are required", fields=missing)

    return ParsedClient(
        name=fields["name"],
        age=fields["age"],
        location=fields["location"] or UNKNOWN,
        work=fields["work"] or UNKNOWN,
        application=fields["application"] or UNKNOWN,
    )


def agent_display_name(identifier: str | None) -> str:
    """Capitalized local part of an email-like identifier."""
    local_part = (identifier or "").split("@", 1)[0]
    if not local_part:
        return ""
    return local_part[0].upper() + local_part[1:]


def build_new_assignment(
    parsed: ParsedClient, *, agent_identifier: str | None, today: date
) -> dict[str, Any]:
    """Creation payload for a parsed client, stamped with today's date."""
    return {
        **parsed.as_dict(),
        "assignedAgent": agent_display_name(agent_identifier),
        "date": today.isoformat(),
    }
