from datetime import date

import pytest

from jobcrm.domain import rules
from jobcrm.domain.rules import ValidationError


def test_parse_input_date_formats() -> None:
    assert rules.parse_input_date("2026-01-20", "sent") == date(2026, 1, 20)
    assert rules.parse_input_date("20/01/2026", "sent") == date(2026, 1, 20)
    assert rules.parse_input_date("5/3/2026", "sent") == date(2026, 3, 5)
    assert rules.parse_input_date("  ", "sent") is None
    assert rules.parse_input_date(None, "sent") is None


@pytest.mark.parametrize("value", ["31/02/2026", "20/01/26", "2026-13-01", "tomorrow"])
def test_parse_input_date_rejects(value: str) -> None:
    with pytest.raises(ValidationError):
        rules.parse_input_date(value, "sent")


def test_via_recruiter_requires_recruiter() -> None:
    with pytest.raises(ValidationError, match="Recruiter is required"):
        rules.validate_recruiter_source("ViaRecruiter", None, None)


def test_direct_rejects_recruiter() -> None:
    with pytest.raises(ValidationError, match="must be empty"):
        rules.validate_recruiter_source("Direct", "rec-1", "Recruiter")


def test_recruiter_must_be_recruiter_company() -> None:
    with pytest.raises(ValidationError, match="Invalid recruiter"):
        rules.validate_recruiter_source("ViaRecruiter", "bank-1", "Bank")
    with pytest.raises(ValidationError, match="Invalid recruiter"):
        rules.validate_recruiter_source("ViaRecruiter", "gone", None)


def test_valid_recruiter_pairings() -> None:
    rules.validate_recruiter_source("ViaRecruiter", "rec-1", "Recruiter")
    rules.validate_recruiter_source("Direct", None, None)


def test_parent_link_rules() -> None:
    parents = {"a": None, "b": "a", "c": "b"}
    rules.validate_parent_link("d", "c", parents)
    rules.validate_parent_link(None, "a", parents)
    with pytest.raises(ValidationError, match="itself"):
        rules.validate_parent_link("a", "a", parents)
    with pytest.raises(ValidationError, match="not found"):
        rules.validate_parent_link("a", "zzz", parents)
    with pytest.raises(ValidationError, match="cycle"):
        rules.validate_parent_link("a", "c", parents)
