from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from datetime import date

from jobcrm.domain.stages import CompanyType, SourceType

INPUT_DATE_RE = re.compile(r"^(?P<day>\d{1,2})/(?P<month>\d{1,2})/(?P<year>\d{4})$")


class ValidationError(ValueError):
    pass


def require(value: str | None, field: str) -> None:
    if value is None or str(value).strip() == "":
        raise ValidationError(f"{field} is required.")


def validate_enum(value: str | None, allowed: Iterable[str], field: str) -> None:
    if value is None:
        return
    allowed = list(allowed)
    if value not in allowed:
        raise ValidationError(f"{field} must be one of: {', '.join(sorted(allowed))}")


def parse_date(value: str | None, field: str) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValidationError(f"{field} must be YYYY-MM-DD.") from exc


def parse_input_date(value: str | None, field: str) -> date | None:
    """Parse a typed date, either ``YYYY-MM-DD`` or ``DD/MM/YYYY``."""
    if value is None:
        return None
    cleaned = re.sub(r"\s", "", value)
    if not cleaned:
        return None
    match = INPUT_DATE_RE.match(cleaned)
    if not match:
        return parse_date(cleaned, field)
    try:
        return date(int(match["year"]), int(match["month"]), int(match["day"]))
    except ValueError as exc:
        raise ValidationError(f"{field} is not a valid calendar date.") from exc


def validate_recruiter_source(
    source_type: str, recruiter_id: str | None, recruiter_type: str | None
) -> None:
    """Check the source/recruiter pairing of an interaction before it is written.

    ``recruiter_type`` is the stored type of the company ``recruiter_id`` points
    at, or ``None`` when no such company exists.
    """
    if source_type == SourceType.VIA_RECRUITER:
        if not recruiter_id:
            raise ValidationError("Recruiter is required when source is Via Recruiter.")
    elif source_type == SourceType.DIRECT:
        if recruiter_id:
            raise ValidationError("Recruiter must be empty when source is Direct.")
    if recruiter_id and recruiter_type != CompanyType.RECRUITER:
        raise ValidationError("Invalid recruiter: must be a company with type Recruiter.")


def validate_parent_link(
    record_id: str | None,
    parent_id: str | None,
    parents: Mapping[str, str | None],
    field: str = "Parent interaction",
) -> None:
    """Reject parent links that are dangling, self-referencing or cyclic.

    ``parents`` maps every existing id to its current parent id.
    """
    if parent_id is None:
        return
    if parent_id == record_id:
        raise ValidationError(f"{field} cannot reference itself.")
    if parent_id not in parents:
        raise ValidationError(f"{field} not found.")
    seen: set[str] = set()
    current: str | None = parent_id
    while current is not None and current not in seen:
        if current == record_id:
            raise ValidationError(f"{field} would create a cycle.")
        seen.add(current)
        current = parents.get(current)
