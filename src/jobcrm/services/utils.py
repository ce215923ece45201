from __future__ import annotations

import re
from datetime import UTC, date, datetime

CONTACT_RE = re.compile(r"^(?P<name>[^<]+?)(?:\s*<(?P<email>[^>]+)>)?$")


def utc_now_iso() -> str:
    return datetime.now(UTC).replace(microsecond=0).isoformat()


def parse_contact(contact: str) -> tuple[str, str | None]:
    match = CONTACT_RE.match(contact.strip())
    if not match:
        return contact.strip(), None
    name = match.group("name").strip()
    email = match.group("email")
    return name, email.strip() if email else None


def split_name(full_name: str) -> tuple[str | None, str | None]:
    parts = full_name.split(None, 1)
    if not parts:
        return None, None
    if len(parts) == 1:
        return parts[0], None
    return parts[0], parts[1]


def format_date(value: date | None) -> str:
    """Render a calendar date as DD/MM/YYYY, or an empty string."""
    if value is None:
        return ""
    return value.strftime("%d/%m/%Y")


def iso_or_none(value: date | None) -> str | None:
    return value.isoformat() if value else None
