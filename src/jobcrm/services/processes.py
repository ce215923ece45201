from __future__ import annotations

from uuid import uuid4

from jobcrm.domain import rules
from jobcrm.domain.models import Process, ProcessNote
from jobcrm.domain.stages import ProcessStatus
from jobcrm.domain.taxonomy import process_status_to_internal
from jobcrm.services.events import EventLogger, emit
from jobcrm.services.utils import utc_now_iso
from jobcrm.store.sqlite import SqliteSession, SqliteStore


class ProcessError(RuntimeError):
    pass


def add_process(
    store: SqliteStore,
    company_id: str,
    role_title: str,
    location: str | None = None,
    status: str | None = None,
    source_process_id: str | None = None,
    logger: EventLogger | None = None,
) -> str:
    rules.require(company_id, "company")
    rules.require(role_title, "role title")
    internal_status = _status(status) if status else ProcessStatus.ACTIVE.value

    now = utc_now_iso()
    process_id = str(uuid4())
    with store.session() as session:
        if session.fetch_one("SELECT company_id FROM companies WHERE company_id = ?", (company_id,)) is None:
            raise ProcessError("Company not found.")
        if source_process_id:
            rules.validate_parent_link(
                None, source_process_id, _source_links(session), field="Source process"
            )
        session.execute(
            "INSERT INTO processes (process_id, company_id, role_title, location, status, source_process_id, "
            "created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (
                process_id,
                company_id,
                role_title.strip(),
                location,
                internal_status,
                source_process_id,
                now,
                now,
            ),
        )
    emit(logger, "created", "process", process_id)
    return process_id


def update_process(
    store: SqliteStore,
    process_id: str,
    role_title: str | None = None,
    location: str | None = None,
    status: str | None = None,
    source_process_id: str | None = None,
    clear_source: bool = False,
    logger: EventLogger | None = None,
) -> list[str]:
    """Apply the given changes; ``None`` leaves a field as it is."""
    changes: dict[str, object] = {}
    if role_title is not None:
        rules.require(role_title, "role title")
        changes["role_title"] = role_title.strip()
    if location is not None:
        changes["location"] = location
    if status is not None:
        changes["status"] = _status(status)
    if clear_source:
        changes["source_process_id"] = None
    elif source_process_id is not None:
        changes["source_process_id"] = source_process_id

    with store.session() as session:
        if session.fetch_one("SELECT process_id FROM processes WHERE process_id = ?", (process_id,)) is None:
            raise ProcessError("Process not found.")
        if changes.get("source_process_id"):
            rules.validate_parent_link(
                process_id,
                changes["source_process_id"],
                _source_links(session),
                field="Source process",
            )
        if not changes:
            return []
        assignments = ", ".join(f"{column} = ?" for column in changes)
        session.execute(
            f"UPDATE processes SET {assignments}, updated_at = ? WHERE process_id = ?",
            (*changes.values(), utc_now_iso(), process_id),
        )
    emit(logger, "updated", "process", process_id, changes)
    return list(changes)


def delete_process(store: SqliteStore, process_id: str, logger: EventLogger | None = None) -> None:
    """Delete a process, keeping its interactions and child processes unlinked."""
    now = utc_now_iso()
    with store.session() as session:
        if session.fetch_one("SELECT process_id FROM processes WHERE process_id = ?", (process_id,)) is None:
            raise ProcessError("Process not found.")
        session.execute(
            "UPDATE interactions SET process_id = NULL, updated_at = ? WHERE process_id = ?",
            (now, process_id),
        )
        session.execute(
            "UPDATE processes SET source_process_id = NULL, updated_at = ? WHERE source_process_id = ?",
            (now, process_id),
        )
        session.execute("DELETE FROM processes WHERE process_id = ?", (process_id,))
    emit(logger, "deleted", "process", process_id)


def get_process(store: SqliteStore, process_id: str) -> Process | None:
    row = store.fetch_one("SELECT * FROM processes WHERE process_id = ?", (process_id,))
    return Process.from_row(row) if row else None


def list_processes(store: SqliteStore, company_id: str | None = None) -> list[Process]:
    params: list[str] = []
    where = ""
    if company_id:
        where = "WHERE company_id = ?"
        params.append(company_id)
    rows = store.fetch_all(f"SELECT * FROM processes {where} ORDER BY updated_at DESC", params)
    return [Process.from_row(row) for row in rows]


def process_children(store: SqliteStore, process_id: str) -> list[Process]:
    rows = store.fetch_all(
        "SELECT * FROM processes WHERE source_process_id = ? ORDER BY created_at ASC",
        (process_id,),
    )
    return [Process.from_row(row) for row in rows]


def _status(label: str) -> str:
    internal = process_status_to_internal(label)
    rules.validate_enum(internal, [s.value for s in ProcessStatus], "status")
    return internal


def _source_links(session: SqliteSession) -> dict[str, str | None]:
    rows = session.fetch_all("SELECT process_id, source_process_id FROM processes")
    return {row["process_id"]: row["source_process_id"] for row in rows}


def add_process_note(
    store: SqliteStore, process_id: str, content: str, logger: EventLogger | None = None
) -> str:
    if content is None or not content.strip():
        raise rules.ValidationError("Note content cannot be empty.")
    note_id = str(uuid4())
    with store.session() as session:
        if session.fetch_one("SELECT process_id FROM processes WHERE process_id = ?", (process_id,)) is None:
            raise ProcessError("Process not found.")
        session.execute(
            "INSERT INTO process_notes (note_id, process_id, content, created_at) VALUES (?, ?, ?, ?)",
            (note_id, process_id, content.strip(), utc_now_iso()),
        )
    emit(logger, "created", "process_note", note_id)
    return note_id


def list_process_notes(store: SqliteStore, process_id: str) -> list[ProcessNote]:
    """Notes of one process, oldest first."""
    rows = store.fetch_all(
        "SELECT * FROM process_notes WHERE process_id = ? ORDER BY created_at ASC, rowid ASC",
        (process_id,),
    )
    return [ProcessNote.from_row(row) for row in rows]


def delete_process_note(store: SqliteStore, note_id: str, logger: EventLogger | None = None) -> None:
    deleted = store.execute("DELETE FROM process_notes WHERE note_id = ?", (note_id,))
    if not deleted:
        raise ProcessError("Note not found.")
    emit(logger, "deleted", "process_note", note_id)
