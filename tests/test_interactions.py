import json
from datetime import date, timedelta
from pathlib import Path

import pytest

from jobcrm.domain.rules import ValidationError
from jobcrm.services import companies, contacts, interactions
from jobcrm.services.events import EventLogger
from jobcrm.services.interactions import InteractionError
from jobcrm.store.sqlite import SqliteStore


def _store(tmp_path: Path) -> SqliteStore:
    db_path = tmp_path / "test.sqlite"
    store = SqliteStore(db_path)
    schema_path = (
        Path(__file__).resolve().parents[1] / "resources" / "schema" / "canonical.yaml"
    )
    store.apply_schema(schema_path)
    return store


def _seed(store: SqliteStore) -> dict[str, str]:
    bank_id = companies.add_company(store, "Goldman Sachs", "Bank", main_location="New York")
    recruiter_id = companies.add_company(store, "Selby Jennings", "Recruiter")
    contact_id = contacts.add_contact(store, bank_id, "Jane Doe <jane@gs.com>")
    return {"bank": bank_id, "recruiter": recruiter_id, "contact": contact_id}


def test_add_interaction_stores_internal_values(tmp_path: Path) -> None:
    store = _store(tmp_path)
    ids = _seed(store)
    interaction_id = interactions.add_interaction(
        store,
        company_id=ids["bank"],
        contact_id=ids["contact"],
        status="Follow-up",
        source_type="Via Recruiter",
        recruiter_id=ids["recruiter"],
        interaction_type="Cold Email",
        stage="Phone Interview",
        date_sent=date(2026, 1, 20),
    )
    row = store.fetch_one(
        "SELECT status, source_type, interaction_type, stage, date_sent, completed "
        "FROM interactions WHERE interaction_id = ?",
        (interaction_id,),
    )
    assert row["status"] == "FollowUp"
    assert row["source_type"] == "ViaRecruiter"
    assert row["interaction_type"] == "ColdEmail"
    assert row["stage"] == "PhoneInterview"
    assert row["date_sent"] == "2026-01-20"
    assert row["completed"] == 0


def test_add_interaction_defaults(tmp_path: Path) -> None:
    store = _store(tmp_path)
    ids = _seed(store)
    interaction_id = interactions.add_interaction(store, ids["bank"], ids["contact"])
    interaction = interactions.get_interaction(store, interaction_id)
    assert interaction.status == "Sent"
    assert interaction.source_type == "Direct"
    assert interaction.recruiter_id is None


def test_via_recruiter_without_recruiter_rejected(tmp_path: Path) -> None:
    store = _store(tmp_path)
    ids = _seed(store)
    with pytest.raises(ValidationError):
        interactions.add_interaction(
            store, ids["bank"], ids["contact"], source_type="Via Recruiter"
        )


def test_recruiter_must_be_recruiter_company(tmp_path: Path) -> None:
    store = _store(tmp_path)
    ids = _seed(store)
    with pytest.raises(ValidationError, match="Invalid recruiter"):
        interactions.add_interaction(
            store,
            ids["bank"],
            ids["contact"],
            source_type="Via Recruiter",
            recruiter_id=ids["bank"],
        )


def test_unknown_status_rejected(tmp_path: Path) -> None:
    store = _store(tmp_path)
    ids = _seed(store)
    with pytest.raises(ValidationError):
        interactions.add_interaction(store, ids["bank"], ids["contact"], status="Ghosted")


def test_contact_must_belong_to_company(tmp_path: Path) -> None:
    store = _store(tmp_path)
    ids = _seed(store)
    with pytest.raises(InteractionError):
        interactions.add_interaction(store, ids["recruiter"], ids["contact"])


def test_update_to_direct_clears_recruiter(tmp_path: Path) -> None:
    store = _store(tmp_path)
    ids = _seed(store)
    interaction_id = interactions.add_interaction(
        store,
        ids["bank"],
        ids["contact"],
        source_type="Via Recruiter",
        recruiter_id=ids["recruiter"],
    )
    changed = interactions.update_interaction(store, interaction_id, {"source_type": "Direct"})

    interaction = interactions.get_interaction(store, interaction_id)
    assert interaction.source_type == "Direct"
    assert interaction.recruiter_id is None
    assert set(changed) == {"source_type", "recruiter_id"}


def test_update_keeps_untouched_fields(tmp_path: Path) -> None:
    store = _store(tmp_path)
    ids = _seed(store)
    interaction_id = interactions.add_interaction(
        store, ids["bank"], ids["contact"], role_title="Rates Trader", date_sent=date(2026, 1, 2)
    )
    interactions.update_interaction(
        store,
        interaction_id,
        {"status": "Waiting", "next_follow_up_date": "15/01/2026", "completed": True},
    )
    interaction = interactions.get_interaction(store, interaction_id)
    assert interaction.status == "Waiting"
    assert interaction.role_title == "Rates Trader"
    assert interaction.date_sent == date(2026, 1, 2)
    assert interaction.next_follow_up_date == date(2026, 1, 15)
    assert interaction.completed


def test_update_rejects_unknown_field(tmp_path: Path) -> None:
    store = _store(tmp_path)
    ids = _seed(store)
    interaction_id = interactions.add_interaction(store, ids["bank"], ids["contact"])
    with pytest.raises(ValidationError):
        interactions.update_interaction(store, interaction_id, {"owner": "someone"})


def test_parent_cycle_rejected(tmp_path: Path) -> None:
    store = _store(tmp_path)
    ids = _seed(store)
    first = interactions.add_interaction(store, ids["bank"], ids["contact"])
    second = interactions.add_interaction(
        store, ids["bank"], ids["contact"], parent_interaction_id=first
    )
    with pytest.raises(ValidationError, match="cycle"):
        interactions.update_interaction(store, first, {"parent_interaction_id": second})
    with pytest.raises(ValidationError, match="itself"):
        interactions.update_interaction(store, first, {"parent_interaction_id": first})


def test_deleting_parent_detaches_children(tmp_path: Path) -> None:
    store = _store(tmp_path)
    ids = _seed(store)
    parent = interactions.add_interaction(store, ids["bank"], ids["contact"])
    child = interactions.add_interaction(
        store, ids["bank"], ids["contact"], parent_interaction_id=parent
    )
    interactions.delete_interaction(store, parent)

    assert interactions.get_interaction(store, child).parent_interaction_id is None
    with pytest.raises(InteractionError):
        interactions.delete_interaction(store, parent)


def test_follow_ups_buckets(tmp_path: Path) -> None:
    store = _store(tmp_path)
    ids = _seed(store)
    today = date(2026, 3, 2)
    overdue = interactions.add_interaction(
        store, ids["bank"], ids["contact"], next_follow_up_date=today
    )
    aging = interactions.add_interaction(
        store, ids["bank"], ids["contact"], status="Waiting", date_sent=today - timedelta(days=20)
    )
    interactions.add_interaction(
        store, ids["bank"], ids["contact"], status="Waiting", date_sent=today - timedelta(days=2)
    )

    buckets = interactions.follow_ups(store, today=today)
    assert [i.interaction_id for i in buckets.red] == [overdue]
    assert [i.interaction_id for i in buckets.orange] == [aging]


def test_follow_ups_scheduled_and_this_week(tmp_path: Path) -> None:
    store = _store(tmp_path)
    ids = _seed(store)
    today = date(2026, 3, 2)

    def add(sent: date, **kwargs: str) -> str:
        return interactions.add_interaction(
            store, ids["bank"], ids["contact"], date_sent=sent, **kwargs
        )

    call_later = add(today + timedelta(days=10), interaction_type="Call")
    interview_soon = add(today + timedelta(days=3), status="Interview")
    email_today = add(today, interaction_type="Cold Email")
    call_week_end = add(today + timedelta(days=7), interaction_type="Call")
    add(today - timedelta(days=1), interaction_type="Call")
    interactions.add_interaction(store, ids["bank"], ids["contact"], status="Interview")

    buckets = interactions.follow_ups(store, today=today)
    assert [i.interaction_id for i in buckets.scheduled] == [
        interview_soon,
        call_week_end,
        call_later,
    ]
    assert [i.interaction_id for i in buckets.this_week] == [
        email_today,
        interview_soon,
        call_week_end,
    ]


def test_recruiter_report_and_overview(tmp_path: Path) -> None:
    store = _store(tmp_path)
    ids = _seed(store)
    for status in ("Interview", "Sent", "Rejected", "Offer"):
        interactions.add_interaction(
            store,
            ids["bank"],
            ids["contact"],
            status=status,
            source_type="Via Recruiter",
            recruiter_id=ids["recruiter"],
        )
    interactions.add_interaction(store, ids["bank"], ids["contact"], status="Interview")

    stats = interactions.recruiter_report(store, ids["recruiter"])
    assert stats.total == 4
    assert stats.interviews == 1
    assert stats.offers == 1
    assert stats.rejections == 1
    assert stats.active == 3
    assert stats.conversion_rate == 25

    overview = interactions.recruiter_overview(store)
    assert len(overview) == 1
    assert overview[0].name == "Selby Jennings"
    assert overview[0].mandates == 4


def test_recruiter_report_needs_a_recruiter_company(tmp_path: Path) -> None:
    store = _store(tmp_path)
    ids = _seed(store)

    with pytest.raises(ValidationError, match="not a Recruiter"):
        interactions.recruiter_report(store, ids["bank"])
    with pytest.raises(InteractionError):
        interactions.recruiter_report(store, "missing")
    assert interactions.recruiter_report(store, ids["recruiter"]).total == 0


def test_writes_are_logged(tmp_path: Path) -> None:
    store = _store(tmp_path)
    ids = _seed(store)
    logger = EventLogger(path=tmp_path / "events.jsonl", workspace="demo")
    interaction_id = interactions.add_interaction(store, ids["bank"], ids["contact"], logger=logger)
    interactions.update_interaction(store, interaction_id, {"status": "Waiting"}, logger=logger)

    events = [json.loads(line) for line in (tmp_path / "events.jsonl").read_text().splitlines()]
    assert [event["event_type"] for event in events] == ["created", "updated"]
    assert events[1]["entity_id"] == interaction_id
    assert events[1]["changed_fields"] == ["status"]
