from __future__ import annotations

from uuid import uuid4

from jobcrm.domain import rules
from jobcrm.domain.models import Company
from jobcrm.domain.stages import CompanyType, SourceType
from jobcrm.domain.taxonomy import company_type_to_internal
from jobcrm.services.events import EventLogger, emit
from jobcrm.services.utils import utc_now_iso
from jobcrm.store.sqlite import SqliteStore


class CompanyError(RuntimeError):
    pass


def add_company(
    store: SqliteStore,
    name: str,
    company_type: str | None = None,
    main_location: str | None = None,
    website_domain: str | None = None,
    notes: str | None = None,
    logger: EventLogger | None = None,
) -> str:
    rules.require(name, "name")
    internal_type = company_type_to_internal(company_type) if company_type else CompanyType.OTHER.value
    rules.validate_enum(internal_type, [t.value for t in CompanyType], "type")

    now = utc_now_iso()
    company_id = str(uuid4())
    store.execute(
        "INSERT INTO companies (company_id, name, company_type, main_location, website_domain, notes, "
        "created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
        (
            company_id,
            name.strip(),
            internal_type,
            main_location,
            website_domain,
            notes,
            now,
            now,
        ),
    )
    emit(logger, "created", "company", company_id)
    return company_id


def update_company(
    store: SqliteStore,
    company_id: str,
    name: str | None = None,
    company_type: str | None = None,
    main_location: str | None = None,
    website_domain: str | None = None,
    notes: str | None = None,
    logger: EventLogger | None = None,
) -> list[str]:
    """Apply the given changes; ``None`` leaves a field as it is.

    A company still named as the recruiter of an interaction must stay a
    Recruiter.
    """
    changes: dict[str, object] = {}
    if name is not None:
        rules.require(name, "name")
        changes["name"] = name.strip()
    if company_type is not None:
        internal_type = company_type_to_internal(company_type)
        rules.validate_enum(internal_type, [t.value for t in CompanyType], "type")
        changes["company_type"] = internal_type
    for column, value in (
        ("main_location", main_location),
        ("website_domain", website_domain),
        ("notes", notes),
    ):
        if value is not None:
            changes[column] = value or None

    with store.session() as session:
        if session.fetch_one("SELECT company_id FROM companies WHERE company_id = ?", (company_id,)) is None:
            raise CompanyError("Company not found.")
        if changes.get("company_type", CompanyType.RECRUITER) != CompanyType.RECRUITER:
            sourced = session.fetch_one(
                "SELECT interaction_id FROM interactions WHERE recruiter_id = ? LIMIT 1", (company_id,)
            )
            if sourced is not None:
                raise rules.ValidationError(
                    "Company is the recruiter on existing interactions; its type must stay Recruiter."
                )
        if not changes:
            return []
        assignments = ", ".join(f"{column} = ?" for column in changes)
        session.execute(
            f"UPDATE companies SET {assignments}, updated_at = ? WHERE company_id = ?",
            (*changes.values(), utc_now_iso(), company_id),
        )
    emit(logger, "updated", "company", company_id, changes)
    return list(changes)


def get_company(store: SqliteStore, company_id: str) -> Company | None:
    row = store.fetch_one("SELECT * FROM companies WHERE company_id = ?", (company_id,))
    return Company.from_row(row) if row else None


def list_companies(store: SqliteStore, company_type: str | None = None) -> list[Company]:
    params: list[str] = []
    where = ""
    if company_type:
        where = "WHERE company_type = ?"
        params.append(company_type_to_internal(company_type))
    rows = store.fetch_all(f"SELECT * FROM companies {where} ORDER BY name ASC", params)
    return [Company.from_row(row) for row in rows]


def list_recruiters(store: SqliteStore) -> list[Company]:
    rows = store.fetch_all(
        "SELECT * FROM companies WHERE company_type = ? ORDER BY name ASC",
        (CompanyType.RECRUITER.value,),
    )
    return [Company.from_row(row) for row in rows]


def delete_company(
    store: SqliteStore, company_id: str, logger: EventLogger | None = None
) -> None:
    """Delete a company with its contacts, processes and interactions.

    Interactions at other companies that were sourced through it become Direct.
    """
    now = utc_now_iso()
    with store.session() as session:
        row = session.fetch_one("SELECT company_id FROM companies WHERE company_id = ?", (company_id,))
        if row is None:
            raise CompanyError("Company not found.")
        session.execute(
            "UPDATE interactions SET source_type = ?, recruiter_id = NULL, updated_at = ? "
            "WHERE recruiter_id = ? AND company_id != ?",
            (SourceType.DIRECT.value, now, company_id, company_id),
        )
        session.execute("DELETE FROM companies WHERE company_id = ?", (company_id,))
    emit(logger, "deleted", "company", company_id)
