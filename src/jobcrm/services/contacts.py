from __future__ import annotations

from uuid import uuid4

from jobcrm.domain import rules
from jobcrm.domain.models import Contact
from jobcrm.services.events import EventLogger, emit
from jobcrm.services.utils import parse_contact, split_name, utc_now_iso
from jobcrm.store.sqlite import SqliteStore


class ContactError(RuntimeError):
    pass


def add_contact(
    store: SqliteStore,
    company_id: str,
    contact: str,
    exact_title: str | None = None,
    linkedin_url: str | None = None,
    manager_id: str | None = None,
    notes: str | None = None,
    logger: EventLogger | None = None,
) -> str:
    """Add a contact given as ``"First Last"`` or ``"First Last <email>"``."""
    rules.require(contact, "contact")
    name, email = parse_contact(contact)
    first_name, last_name = split_name(name)

    now = utc_now_iso()
    contact_id = str(uuid4())
    with store.session() as session:
        if session.fetch_one("SELECT company_id FROM companies WHERE company_id = ?", (company_id,)) is None:
            raise ContactError("Company not found.")
        if manager_id and session.fetch_one(
            "SELECT contact_id FROM contacts WHERE contact_id = ?", (manager_id,)
        ) is None:
            raise ContactError("Manager contact not found.")
        session.execute(
            "INSERT INTO contacts (contact_id, company_id, first_name, last_name, exact_title, email, "
            "linkedin_url, manager_id, notes, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                contact_id,
                company_id,
                first_name,
                last_name,
                exact_title,
                email,
                linkedin_url,
                manager_id,
                notes,
                now,
                now,
            ),
        )
    emit(logger, "created", "contact", contact_id)
    return contact_id


def update_contact(
    store: SqliteStore,
    contact_id: str,
    first_name: str | None = None,
    last_name: str | None = None,
    exact_title: str | None = None,
    email: str | None = None,
    linkedin_url: str | None = None,
    manager_id: str | None = None,
    clear_manager: bool = False,
    notes: str | None = None,
    logger: EventLogger | None = None,
) -> list[str]:
    """Apply the given changes; ``None`` leaves a field as it is."""
    changes: dict[str, object] = {}
    for column, value in (
        ("first_name", first_name),
        ("last_name", last_name),
        ("exact_title", exact_title),
        ("email", email),
        ("linkedin_url", linkedin_url),
        ("notes", notes),
    ):
        if value is not None:
            changes[column] = value.strip() or None
    if clear_manager:
        changes["manager_id"] = None
    elif manager_id is not None:
        changes["manager_id"] = manager_id

    with store.session() as session:
        if session.fetch_one("SELECT contact_id FROM contacts WHERE contact_id = ?", (contact_id,)) is None:
            raise ContactError("Contact not found.")
        if changes.get("manager_id"):
            rows = session.fetch_all("SELECT contact_id, manager_id FROM contacts")
            managers = {row["contact_id"]: row["manager_id"] for row in rows}
            rules.validate_parent_link(contact_id, changes["manager_id"], managers, field="Manager")
        if not changes:
            return []
        assignments = ", ".join(f"{column} = ?" for column in changes)
        session.execute(
            f"UPDATE contacts SET {assignments}, updated_at = ? WHERE contact_id = ?",
            (*changes.values(), utc_now_iso(), contact_id),
        )
    emit(logger, "updated", "contact", contact_id, changes)
    return list(changes)


def list_contacts(store: SqliteStore, company_id: str | None = None) -> list[Contact]:
    params: list[str] = []
    where = ""
    if company_id:
        where = "WHERE company_id = ?"
        params.append(company_id)
    rows = store.fetch_all(f"SELECT * FROM contacts {where} ORDER BY last_name ASC", params)
    return [Contact.from_row(row) for row in rows]


def get_contact(store: SqliteStore, contact_id: str) -> Contact | None:
    row = store.fetch_one("SELECT * FROM contacts WHERE contact_id = ?", (contact_id,))
    return Contact.from_row(row) if row else None
