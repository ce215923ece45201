from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any


@dataclass(frozen=True)
class Company:
    company_id: str
    name: str
    company_type: str
    main_location: str | None
    website_domain: str | None
    notes: str | None
    created_at: str
    updated_at: str

    @property
    def id(self) -> str:
        return self.company_id

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Company:
        return cls(
            company_id=row["company_id"],
            name=row["name"],
            company_type=row["company_type"],
            main_location=row["main_location"],
            website_domain=row["website_domain"],
            notes=row["notes"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


@dataclass(frozen=True)
class Contact:
    contact_id: str
    company_id: str
    first_name: str | None
    last_name: str | None
    exact_title: str | None
    email: str | None
    linkedin_url: str | None
    manager_id: str | None
    notes: str | None
    created_at: str
    updated_at: str

    @property
    def id(self) -> str:
        return self.contact_id

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Contact:
        return cls(
            contact_id=row["contact_id"],
            company_id=row["company_id"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            exact_title=row["exact_title"],
            email=row["email"],
            linkedin_url=row["linkedin_url"],
            manager_id=row["manager_id"],
            notes=row["notes"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


@dataclass(frozen=True)
class Process:
    process_id: str
    company_id: str
    role_title: str
    location: str | None
    status: str
    source_process_id: str | None
    created_at: str
    updated_at: str

    @property
    def id(self) -> str:
        return self.process_id

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Process:
        return cls(
            process_id=row["process_id"],
            company_id=row["company_id"],
            role_title=row["role_title"],
            location=row["location"],
            status=row["status"],
            source_process_id=row["source_process_id"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


@dataclass(frozen=True)
class Interaction:
    interaction_id: str
    company_id: str
    contact_id: str
    status: str
    source_type: str
    recruiter_id: str | None = None
    process_id: str | None = None
    parent_interaction_id: str | None = None
    role_title: str | None = None
    global_category: str | None = None
    interaction_type: str | None = None
    priority: str | None = None
    stage: str | None = None
    outcome: str | None = None
    date_sent: date | None = None
    last_update: date | None = None
    next_follow_up_date: date | None = None
    completed: bool = False
    comment: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def id(self) -> str:
        return self.interaction_id

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Interaction:
        return cls(
            interaction_id=row["interaction_id"],
            company_id=row["company_id"],
            contact_id=row["contact_id"],
            status=row["status"],
            source_type=row["source_type"],
            recruiter_id=row["recruiter_id"],
            process_id=row["process_id"],
            parent_interaction_id=row["parent_interaction_id"],
            role_title=row["role_title"],
            global_category=row["global_category"],
            interaction_type=row["interaction_type"],
            priority=row["priority"],
            stage=row["stage"],
            outcome=row["outcome"],
            date_sent=_stored_date(row["date_sent"]),
            last_update=_stored_date(row["last_update"]),
            next_follow_up_date=_stored_date(row["next_follow_up_date"]),
            completed=bool(row["completed"]),
            comment=row["comment"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


def _stored_date(value: str | None) -> date | None:
    # Rows with an unreadable date are shown without it rather than failing.
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


@dataclass(frozen=True)
class ProcessNote:
    note_id: str
    process_id: str
    content: str
    created_at: str

    @property
    def id(self) -> str:
        return self.note_id

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> ProcessNote:
        return cls(
            note_id=row["note_id"],
            process_id=row["process_id"],
            content=row["content"],
            created_at=row["created_at"],
        )
