from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any
from uuid import uuid4

from jobcrm.domain import rules
from jobcrm.domain.follow_up import FollowUpPolicy, follow_up_severity, utc_today
from jobcrm.domain.models import Interaction
from jobcrm.domain.recruiters import (
    DEFAULT_RANKING_LIMIT,
    RecruiterStats,
    RecruiterSummary,
    rank_recruiters,
    recruiter_stats,
)
from jobcrm.domain.stages import (
    CompanyType,
    FollowUpSeverity,
    GlobalCategory,
    InteractionStage,
    InteractionStatus,
    InteractionType,
    Outcome,
    Priority,
    SourceType,
)
from jobcrm.domain.taxonomy import (
    INTERACTION_STAGE,
    INTERACTION_STATUS,
    INTERACTION_TYPE,
    SOURCE_TYPE,
    EnumMapping,
)
from jobcrm.services.events import EventLogger, emit
from jobcrm.services.utils import iso_or_none, utc_now_iso
from jobcrm.store.sqlite import SqliteSession, SqliteStore

# Enum columns: (mapping from user labels, allowed stored values).
ENUM_FIELDS: dict[str, tuple[EnumMapping | None, list[str]]] = {
    "status": (INTERACTION_STATUS, [s.value for s in InteractionStatus]),
    "source_type": (SOURCE_TYPE, [s.value for s in SourceType]),
    "interaction_type": (INTERACTION_TYPE, [t.value for t in InteractionType]),
    "stage": (INTERACTION_STAGE, [s.value for s in InteractionStage]),
    "priority": (None, [p.value for p in Priority]),
    "outcome": (None, [o.value for o in Outcome]),
    "global_category": (None, [c.value for c in GlobalCategory]),
}
DATE_FIELDS = ("date_sent", "last_update", "next_follow_up_date")
TEXT_FIELDS = ("role_title", "comment")
LINK_FIELDS = ("recruiter_id", "process_id", "parent_interaction_id")
UPDATABLE_FIELDS = (*ENUM_FIELDS, *DATE_FIELDS, *TEXT_FIELDS, *LINK_FIELDS, "completed")
UPCOMING_WINDOW_DAYS = 7


class InteractionError(RuntimeError):
    pass


@dataclass(frozen=True)
class FollowUpBuckets:
    red: list[Interaction] = field(default_factory=list)
    orange: list[Interaction] = field(default_factory=list)
    scheduled: list[Interaction] = field(default_factory=list)
    this_week: list[Interaction] = field(default_factory=list)


def add_interaction(
    store: SqliteStore,
    company_id: str,
    contact_id: str,
    status: str | None = None,
    source_type: str | None = None,
    recruiter_id: str | None = None,
    process_id: str | None = None,
    parent_interaction_id: str | None = None,
    role_title: str | None = None,
    global_category: str | None = None,
    interaction_type: str | None = None,
    priority: str | None = None,
    stage: str | None = None,
    outcome: str | None = None,
    date_sent: date | None = None,
    next_follow_up_date: date | None = None,
    comment: str | None = None,
    logger: EventLogger | None = None,
) -> str:
    rules.require(company_id, "company")
    rules.require(contact_id, "contact")
    values = _normalize(
        {
            "status": status or InteractionStatus.SENT.value,
            "source_type": source_type or SourceType.DIRECT.value,
            "interaction_type": interaction_type,
            "stage": stage,
            "priority": priority,
            "outcome": outcome,
            "global_category": global_category,
            "recruiter_id": recruiter_id,
            "process_id": process_id,
            "parent_interaction_id": parent_interaction_id,
            "role_title": role_title,
            "comment": comment,
            "date_sent": date_sent,
            "last_update": None,
            "next_follow_up_date": next_follow_up_date,
            "completed": False,
        }
    )

    now = utc_now_iso()
    interaction_id = str(uuid4())
    with store.session() as session:
        contact = session.fetch_one("SELECT company_id FROM contacts WHERE contact_id = ?", (contact_id,))
        if contact is None:
            raise InteractionError("Contact not found.")
        if contact["company_id"] != company_id:
            raise InteractionError("Contact does not belong to the company.")
        _check_links(session, None, values)
        columns = ["interaction_id", "company_id", "contact_id", *values, "created_at", "updated_at"]
        params = [interaction_id, company_id, contact_id, *values.values(), now, now]
        placeholders = ", ".join("?" for _ in columns)
        session.execute(
            f"INSERT INTO interactions ({', '.join(columns)}) VALUES ({placeholders})",
            params,
        )
    emit(logger, "created", "interaction", interaction_id)
    return interaction_id


def update_interaction(
    store: SqliteStore,
    interaction_id: str,
    changes: Mapping[str, Any],
    logger: EventLogger | None = None,
) -> list[str]:
    """Apply ``changes`` (user labels and dates) to one interaction.

    Keys missing from ``changes`` are left alone; a ``None`` value clears the
    field. Source and recruiter are validated on the merged result.
    """
    unknown = sorted(set(changes) - set(UPDATABLE_FIELDS))
    if unknown:
        raise rules.ValidationError(f"Unknown interaction fields: {', '.join(unknown)}")
    updates = _normalize(dict(changes))
    if "status" in updates and updates["status"] is None:
        raise rules.ValidationError("status is required.")
    if "source_type" in updates and updates["source_type"] is None:
        raise rules.ValidationError("source type is required.")

    with store.session() as session:
        row = session.fetch_one("SELECT * FROM interactions WHERE interaction_id = ?", (interaction_id,))
        if row is None:
            raise InteractionError("Interaction not found.")
        merged = {key: row[key] for key in UPDATABLE_FIELDS}
        merged.update(updates)
        # Switching to Direct drops a recruiter that was not explicitly changed.
        if merged["source_type"] == SourceType.DIRECT and "recruiter_id" not in updates:
            merged["recruiter_id"] = None
            if row["recruiter_id"] is not None:
                updates["recruiter_id"] = None
        _check_links(session, interaction_id, merged)
        if not updates:
            return []
        assignments = ", ".join(f"{column} = ?" for column in updates)
        session.execute(
            f"UPDATE interactions SET {assignments}, updated_at = ? WHERE interaction_id = ?",
            (*updates.values(), utc_now_iso(), interaction_id),
        )
    emit(logger, "updated", "interaction", interaction_id, updates)
    return list(updates)


def delete_interaction(
    store: SqliteStore, interaction_id: str, logger: EventLogger | None = None
) -> None:
    with store.session() as session:
        deleted = session.execute(
            "DELETE FROM interactions WHERE interaction_id = ?", (interaction_id,)
        )
    if not deleted:
        raise InteractionError("Interaction not found.")
    emit(logger, "deleted", "interaction", interaction_id)


def get_interaction(store: SqliteStore, interaction_id: str) -> Interaction | None:
    row = store.fetch_one("SELECT * FROM interactions WHERE interaction_id = ?", (interaction_id,))
    return Interaction.from_row(row) if row else None


def list_interactions(
    store: SqliteStore,
    process_id: str | None = None,
    company_id: str | None = None,
    recruiter_id: str | None = None,
) -> list[Interaction]:
    clauses: list[str] = []
    params: list[str] = []
    for column, value in (
        ("process_id", process_id),
        ("company_id", company_id),
        ("recruiter_id", recruiter_id),
    ):
        if value:
            clauses.append(f"{column} = ?")
            params.append(value)
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    rows = store.fetch_all(
        f"SELECT * FROM interactions {where} ORDER BY date_sent DESC, created_at DESC", params
    )
    return [Interaction.from_row(row) for row in rows]


def follow_ups(
    store: SqliteStore,
    today: date | None = None,
    policy: FollowUpPolicy | None = None,
) -> FollowUpBuckets:
    """Sort interactions into the dashboard buckets.

    ``red`` and ``orange`` come from the severity classifier. ``scheduled``
    holds calls and interviews dated today or later, ``this_week`` anything
    dated within the next seven days; both are ordered by date sent.
    """
    today = today or utc_today()
    week_end = today + timedelta(days=UPCOMING_WINDOW_DAYS)
    buckets = FollowUpBuckets()
    for interaction in list_interactions(store):
        severity = follow_up_severity(interaction, today=today, policy=policy)
        if severity == FollowUpSeverity.RED:
            buckets.red.append(interaction)
        elif severity == FollowUpSeverity.ORANGE:
            buckets.orange.append(interaction)

        sent = interaction.date_sent
        if sent is None or sent < today:
            continue
        if (
            interaction.interaction_type == InteractionType.CALL
            or interaction.status == InteractionStatus.INTERVIEW
        ):
            buckets.scheduled.append(interaction)
        if sent <= week_end:
            buckets.this_week.append(interaction)
    buckets.scheduled.sort(key=lambda item: item.date_sent)
    buckets.this_week.sort(key=lambda item: item.date_sent)
    return buckets


def recruiter_report(store: SqliteStore, recruiter_id: str) -> RecruiterStats:
    company = store.fetch_one(
        "SELECT company_type FROM companies WHERE company_id = ?", (recruiter_id,)
    )
    if company is None:
        raise InteractionError("Recruiter not found.")
    if company["company_type"] != CompanyType.RECRUITER:
        raise rules.ValidationError("Company is not a Recruiter.")
    return recruiter_stats(list_interactions(store, recruiter_id=recruiter_id), recruiter_id)


def recruiter_overview(
    store: SqliteStore, limit: int = DEFAULT_RANKING_LIMIT
) -> list[RecruiterSummary]:
    names = {
        row["company_id"]: row["name"]
        for row in store.fetch_all("SELECT company_id, name FROM companies")
    }
    return rank_recruiters(list_interactions(store), names=names, limit=limit)


def _normalize(values: dict[str, Any]) -> dict[str, Any]:
    normalized: dict[str, Any] = {}
    for key, value in values.items():
        if key in ENUM_FIELDS:
            normalized[key] = _enum_value(key, value)
        elif key in DATE_FIELDS:
            normalized[key] = _date_value(key, value)
        elif key == "completed":
            normalized[key] = 1 if value else 0
        else:
            normalized[key] = value or None
    return normalized


def _enum_value(key: str, value: Any) -> str | None:
    if value is None or value == "":
        return None
    mapping, allowed = ENUM_FIELDS[key]
    internal = mapping.to_internal(value) if mapping else value
    internal = getattr(internal, "value", internal)
    label = key.replace("_", " ")
    rules.validate_enum(internal, allowed, label)
    return internal


def _date_value(key: str, value: Any) -> str | None:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return iso_or_none(value)
    parsed = rules.parse_input_date(str(value), key.replace("_", " "))
    return iso_or_none(parsed)


def _check_links(session: SqliteSession, interaction_id: str | None, values: Mapping[str, Any]) -> None:
    recruiter_id = values.get("recruiter_id")
    recruiter_type = None
    if recruiter_id:
        recruiter = session.fetch_one(
            "SELECT company_type FROM companies WHERE company_id = ?", (recruiter_id,)
        )
        recruiter_type = recruiter["company_type"] if recruiter else None
    rules.validate_recruiter_source(values["source_type"], recruiter_id, recruiter_type)

    process_id = values.get("process_id")
    if process_id and session.fetch_one(
        "SELECT process_id FROM processes WHERE process_id = ?", (process_id,)
    ) is None:
        raise rules.ValidationError("Process not found.")

    parent_id = values.get("parent_interaction_id")
    if parent_id:
        rows = session.fetch_all("SELECT interaction_id, parent_interaction_id FROM interactions")
        parents = {row["interaction_id"]: row["parent_interaction_id"] for row in rows}
        rules.validate_parent_link(interaction_id, parent_id, parents)
