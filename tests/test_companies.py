from pathlib import Path

import pytest

from jobcrm.domain.rules import ValidationError
from jobcrm.services import companies, contacts, interactions, processes
from jobcrm.services.companies import CompanyError
from jobcrm.store.sqlite import SqliteStore


def _store(tmp_path: Path) -> SqliteStore:
    db_path = tmp_path / "test.sqlite"
    store = SqliteStore(db_path)
    schema_path = (
        Path(__file__).resolve().parents[1] / "resources" / "schema" / "canonical.yaml"
    )
    store.apply_schema(schema_path)
    return store


def test_add_company_maps_type(tmp_path: Path) -> None:
    store = _store(tmp_path)
    company_id = companies.add_company(store, "Jane Street", "Prop Shop")
    assert companies.get_company(store, company_id).company_type == "PropShop"
    with pytest.raises(ValidationError):
        companies.add_company(store, "Family Office", "Family Office")


def test_list_recruiters(tmp_path: Path) -> None:
    store = _store(tmp_path)
    companies.add_company(store, "UBS", "Bank")
    recruiter_id = companies.add_company(store, "Options Group", "Recruiter")

    assert [c.company_id for c in companies.list_recruiters(store)] == [recruiter_id]
    assert [c.name for c in companies.list_companies(store, "Bank")] == ["UBS"]


def test_delete_company_cascades(tmp_path: Path) -> None:
    store = _store(tmp_path)
    company_id = companies.add_company(store, "UBS", "Bank")
    contact_id = contacts.add_contact(store, company_id, "Jane Doe")
    process_id = processes.add_process(store, company_id, "Analyst")
    interaction_id = interactions.add_interaction(
        store, company_id, contact_id, process_id=process_id
    )

    companies.delete_company(store, company_id)

    assert companies.get_company(store, company_id) is None
    assert contacts.list_contacts(store) == []
    assert processes.get_process(store, process_id) is None
    assert interactions.get_interaction(store, interaction_id) is None


def test_delete_recruiter_makes_interactions_direct(tmp_path: Path) -> None:
    store = _store(tmp_path)
    bank_id = companies.add_company(store, "UBS", "Bank")
    recruiter_id = companies.add_company(store, "Robert Half", "Recruiter")
    contact_id = contacts.add_contact(store, bank_id, "Jane Doe")
    interaction_id = interactions.add_interaction(
        store, bank_id, contact_id, source_type="Via Recruiter", recruiter_id=recruiter_id
    )

    companies.delete_company(store, recruiter_id)

    interaction = interactions.get_interaction(store, interaction_id)
    assert interaction.source_type == "Direct"
    assert interaction.recruiter_id is None


def test_delete_missing_company(tmp_path: Path) -> None:
    store = _store(tmp_path)
    with pytest.raises(CompanyError):
        companies.delete_company(store, "missing")


def test_update_company_fields(tmp_path: Path) -> None:
    store = _store(tmp_path)
    company_id = companies.add_company(store, "UBS", "Bank", main_location="Zurich")

    changed = companies.update_company(
        store, company_id, name=" UBS AG ", company_type="Asset Manager", notes="Wealth arm"
    )

    company = companies.get_company(store, company_id)
    assert changed == ["name", "company_type", "notes"]
    assert company.name == "UBS AG"
    assert company.company_type == "AssetManager"
    assert company.main_location == "Zurich"
    assert company.notes == "Wealth arm"
    assert companies.update_company(store, company_id) == []


def test_update_company_rejects_unknown_type_and_missing_company(tmp_path: Path) -> None:
    store = _store(tmp_path)
    company_id = companies.add_company(store, "UBS", "Bank")

    with pytest.raises(ValidationError):
        companies.update_company(store, company_id, company_type="Family Office")
    with pytest.raises(CompanyError):
        companies.update_company(store, "missing", name="Nobody")


def test_recruiter_in_use_keeps_its_type(tmp_path: Path) -> None:
    store = _store(tmp_path)
    bank_id = companies.add_company(store, "UBS", "Bank")
    recruiter_id = companies.add_company(store, "Robert Half", "Recruiter")
    idle_recruiter_id = companies.add_company(store, "Hays", "Recruiter")
    contact_id = contacts.add_contact(store, bank_id, "Jane Doe")
    interactions.add_interaction(
        store, bank_id, contact_id, source_type="Via Recruiter", recruiter_id=recruiter_id
    )

    with pytest.raises(ValidationError):
        companies.update_company(store, recruiter_id, company_type="Other")
    assert companies.get_company(store, recruiter_id).company_type == "Recruiter"

    companies.update_company(store, recruiter_id, name="Robert Half Finance")
    companies.update_company(store, idle_recruiter_id, company_type="Other")
    assert companies.get_company(store, idle_recruiter_id).company_type == "Other"
