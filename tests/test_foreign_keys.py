import sqlite3
from pathlib import Path

import pytest

from jobcrm.services import companies, contacts
from jobcrm.store.sqlite import SqliteStore


def _store(tmp_path: Path) -> SqliteStore:
    store = SqliteStore(tmp_path / "test.sqlite")
    schema_path = (
        Path(__file__).resolve().parents[1] / "resources" / "schema" / "canonical.yaml"
    )
    store.apply_schema(schema_path)
    return store


def test_foreign_keys_enforced(tmp_path: Path) -> None:
    store = _store(tmp_path)

    with pytest.raises(sqlite3.IntegrityError):
        store.execute(
            "INSERT INTO contacts (contact_id, company_id, created_at, updated_at) VALUES (?, ?, ?, ?)",
            ("contact-1", "missing-company", "2026-01-01T00:00:00Z", "2026-01-01T00:00:00Z"),
        )


def test_deleting_manager_unlinks_reports(tmp_path: Path) -> None:
    store = _store(tmp_path)
    company_id = companies.add_company(store, "Barclays", "Bank")
    manager_id = contacts.add_contact(store, company_id, "Ada Byron")
    report_id = contacts.add_contact(store, company_id, "Grace Hopper", manager_id=manager_id)

    store.execute("DELETE FROM contacts WHERE contact_id = ?", (manager_id,))

    row = store.fetch_one("SELECT manager_id FROM contacts WHERE contact_id = ?", (report_id,))
    assert row["manager_id"] is None
