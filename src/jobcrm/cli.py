from __future__ import annotations

from pathlib import Path
from typing import Any

import typer

from jobcrm import __version__
from jobcrm.config import (
    WorkspaceConfig,
    WorkspaceError,
    ensure_workspaces_dir,
    load_workspace,
    set_current_workspace,
    workspace_config_path,
    write_workspace_config,
)
from jobcrm.domain import rules
from jobcrm.domain.follow_up import follow_up_severity
from jobcrm.domain.hierarchy import build_process_tree, display_order
from jobcrm.domain.models import Interaction
from jobcrm.domain.rules import ValidationError
from jobcrm.domain.stages import FollowUpSeverity
from jobcrm.domain.taxonomy import (
    company_type_to_external,
    interaction_stage_to_external,
    interaction_status_to_external,
    interaction_type_to_external,
    process_status_to_external,
    source_type_to_external,
)
from jobcrm.services import companies, contacts, interactions, processes
from jobcrm.services.companies import CompanyError
from jobcrm.services.contacts import ContactError
from jobcrm.services.events import EventLogger
from jobcrm.services.interactions import InteractionError
from jobcrm.services.processes import ProcessError
from jobcrm.services.utils import format_date
from jobcrm.store.migrations import SchemaError
from jobcrm.store.sqlite import SqliteStore

app = typer.Typer(help="Job search CRM")
workspace_app = typer.Typer(help="Workspace management")
schema_app = typer.Typer(help="Schema operations")
company_app = typer.Typer(help="Companies")
contact_app = typer.Typer(help="Contacts")
process_app = typer.Typer(help="Recruitment processes")
note_app = typer.Typer(help="Process notes")
interaction_app = typer.Typer(help="Interactions")
recruiter_app = typer.Typer(help="Recruiter performance")

app.add_typer(workspace_app, name="workspace")
app.add_typer(schema_app, name="schema")
app.add_typer(company_app, name="company")
app.add_typer(contact_app, name="contact")
app.add_typer(process_app, name="process")
process_app.add_typer(note_app, name="note")
app.add_typer(interaction_app, name="interaction")
app.add_typer(recruiter_app, name="recruiters")

SCHEMA_PATH = Path("resources/schema/canonical.yaml")
DOMAIN_ERRORS = (ValidationError, CompanyError, ContactError, InteractionError, ProcessError)
SEVERITY_MARKS = {
    FollowUpSeverity.NORMAL: " ",
    FollowUpSeverity.ORANGE: "!",
    FollowUpSeverity.RED: "!!",
}


@app.callback()
def version_callback(version: bool = typer.Option(False, "--version", help="Show version and exit.")):
    if version:
        typer.echo(__version__)
        raise typer.Exit()


@app.command("init")
def init() -> None:
    """Initialize the workspaces directory."""
    ensure_workspaces_dir()
    typer.echo("Initialized jobcrm directories.")


@workspace_app.command("add")
def workspace_add(
    name: str = typer.Argument(...),
    use: bool = typer.Option(True, "--use/--no-use", help="Set as current workspace."),
    force: bool = typer.Option(
        False, "--force", help="Overwrite existing workspace config if it exists."
    ),
) -> None:
    config_path = workspace_config_path(name)
    if config_path.exists() and not force:
        raise typer.BadParameter(
            f"Workspace already exists: {config_path}. Use --force to overwrite."
        )
    config_path = write_workspace_config(name)
    if use:
        set_current_workspace(name)
    typer.echo(f"Workspace created: {config_path}")


@workspace_app.command("use")
def workspace_use(name: str = typer.Argument(...)) -> None:
    if not workspace_config_path(name).exists():
        raise typer.BadParameter(f"Workspace config not found: {workspace_config_path(name)}")
    set_current_workspace(name)
    typer.echo(f"Active workspace: {name}")


@schema_app.command("apply")
def schema_apply() -> None:
    ws = _load_workspace()
    store = SqliteStore(ws.store.sqlite_path)
    try:
        store.apply_schema(SCHEMA_PATH)
    except (SchemaError, OSError) as exc:
        _exit_with_error(str(exc))
    typer.echo("Applied schema to local SQLite.")


@company_app.command("add")
def company_add(
    name: str = typer.Argument(...),
    company_type: str | None = typer.Option(None, "--type", help='e.g. "Hedge Fund", "Recruiter".'),
    location: str | None = typer.Option(None, "--location"),
    domain: str | None = typer.Option(None, "--domain"),
    notes: str | None = typer.Option(None, "--notes"),
) -> None:
    ws, store, logger = _context()
    try:
        company_id = companies.add_company(
            store,
            name=name,
            company_type=company_type,
            main_location=location,
            website_domain=domain,
            notes=notes,
            logger=logger,
        )
    except DOMAIN_ERRORS as exc:
        _exit_with_error(str(exc))
    typer.echo(f"Created company: {company_id}")


@company_app.command("list")
def company_list(company_type: str | None = typer.Option(None, "--type")) -> None:
    _, store, _ = _context()
    for company in companies.list_companies(store, company_type):
        typer.echo(
            f"{company.company_id} | {company.name} | {company_type_to_external(company.company_type)} | "
            f"{company.main_location or ''}"
        )


@company_app.command("update")
def company_update(
    company_id: str = typer.Argument(...),
    name: str | None = typer.Option(None, "--name"),
    company_type: str | None = typer.Option(None, "--type"),
    location: str | None = typer.Option(None, "--location"),
    domain: str | None = typer.Option(None, "--domain"),
    notes: str | None = typer.Option(None, "--notes"),
) -> None:
    _, store, logger = _context()
    try:
        changed = companies.update_company(
            store,
            company_id,
            name=name,
            company_type=company_type,
            main_location=location,
            website_domain=domain,
            notes=notes,
            logger=logger,
        )
    except DOMAIN_ERRORS as exc:
        _exit_with_error(str(exc))
    typer.echo(f"Updated company: {company_id} ({', '.join(changed) or 'no changes'})")


@company_app.command("delete")
def company_delete(company_id: str = typer.Argument(...)) -> None:
    _, store, logger = _context()
    try:
        companies.delete_company(store, company_id, logger=logger)
    except DOMAIN_ERRORS as exc:
        _exit_with_error(str(exc))
    typer.echo(f"Deleted company: {company_id}")


@contact_app.command("add")
def contact_add(
    company_id: str = typer.Argument(...),
    contact: str = typer.Argument(..., help='"First Last" or "First Last <email>".'),
    title: str | None = typer.Option(None, "--title"),
    linkedin: str | None = typer.Option(None, "--linkedin"),
    manager: str | None = typer.Option(None, "--manager"),
    notes: str | None = typer.Option(None, "--notes"),
) -> None:
    _, store, logger = _context()
    try:
        contact_id = contacts.add_contact(
            store,
            company_id=company_id,
            contact=contact,
            exact_title=title,
            linkedin_url=linkedin,
            manager_id=manager,
            notes=notes,
            logger=logger,
        )
    except DOMAIN_ERRORS as exc:
        _exit_with_error(str(exc))
    typer.echo(f"Created contact: {contact_id}")


@contact_app.command("update")
def contact_update(
    contact_id: str = typer.Argument(...),
    first_name: str | None = typer.Option(None, "--first-name"),
    last_name: str | None = typer.Option(None, "--last-name"),
    title: str | None = typer.Option(None, "--title"),
    email: str | None = typer.Option(None, "--email"),
    linkedin: str | None = typer.Option(None, "--linkedin"),
    manager: str | None = typer.Option(None, "--manager"),
    clear_manager: bool = typer.Option(False, "--clear-manager"),
    notes: str | None = typer.Option(None, "--notes"),
) -> None:
    _, store, logger = _context()
    try:
        changed = contacts.update_contact(
            store,
            contact_id,
            first_name=first_name,
            last_name=last_name,
            exact_title=title,
            email=email,
            linkedin_url=linkedin,
            manager_id=manager,
            clear_manager=clear_manager,
            notes=notes,
            logger=logger,
        )
    except DOMAIN_ERRORS as exc:
        _exit_with_error(str(exc))
    typer.echo(f"Updated contact: {contact_id} ({', '.join(changed) or 'no changes'})")


@process_app.command("add")
def process_add(
    company_id: str = typer.Argument(...),
    role_title: str = typer.Argument(...),
    location: str | None = typer.Option(None, "--location"),
    status: str | None = typer.Option(None, "--status"),
    source: str | None = typer.Option(None, "--source", help="Process that introduced this one."),
) -> None:
    _, store, logger = _context()
    try:
        process_id = processes.add_process(
            store,
            company_id=company_id,
            role_title=role_title,
            location=location,
            status=status,
            source_process_id=source,
            logger=logger,
        )
    except DOMAIN_ERRORS as exc:
        _exit_with_error(str(exc))
    typer.echo(f"Created process: {process_id}")


@process_app.command("update")
def process_update(
    process_id: str = typer.Argument(...),
    role_title: str | None = typer.Option(None, "--role"),
    location: str | None = typer.Option(None, "--location"),
    status: str | None = typer.Option(None, "--status"),
    source: str | None = typer.Option(None, "--source"),
    clear_source: bool = typer.Option(False, "--clear-source"),
) -> None:
    _, store, logger = _context()
    try:
        changed = processes.update_process(
            store,
            process_id,
            role_title=role_title,
            location=location,
            status=status,
            source_process_id=source,
            clear_source=clear_source,
            logger=logger,
        )
    except DOMAIN_ERRORS as exc:
        _exit_with_error(str(exc))
    typer.echo(f"Updated process: {process_id} ({', '.join(changed) or 'no changes'})")


@process_app.command("list")
def process_list(company_id: str | None = typer.Option(None, "--company")) -> None:
    _, store, _ = _context()
    for node in build_process_tree(processes.list_processes(store, company_id)):
        process = node.item
        typer.echo(
            f"{'  ' * node.depth}{process.process_id} | {process.role_title} | "
            f"{process_status_to_external(process.status)} | {process.location or ''}"
        )


@process_app.command("delete")
def process_delete(process_id: str = typer.Argument(...)) -> None:
    _, store, logger = _context()
    try:
        processes.delete_process(store, process_id, logger=logger)
    except DOMAIN_ERRORS as exc:
        _exit_with_error(str(exc))
    typer.echo(f"Deleted process: {process_id}")


@note_app.command("add")
def note_add(
    process_id: str = typer.Argument(...),
    content: str = typer.Argument(...),
) -> None:
    _, store, logger = _context()
    try:
        note_id = processes.add_process_note(store, process_id, content, logger=logger)
    except DOMAIN_ERRORS as exc:
        _exit_with_error(str(exc))
    typer.echo(f"Created note: {note_id}")


@note_app.command("list")
def note_list(process_id: str = typer.Argument(...)) -> None:
    _, store, _ = _context()
    notes = processes.list_process_notes(store, process_id)
    if not notes:
        typer.echo("No notes.")
        return
    for note in notes:
        typer.echo(f"{note.note_id} | {note.created_at} | {note.content}")


@note_app.command("delete")
def note_delete(note_id: str = typer.Argument(...)) -> None:
    _, store, logger = _context()
    try:
        processes.delete_process_note(store, note_id, logger=logger)
    except DOMAIN_ERRORS as exc:
        _exit_with_error(str(exc))
    typer.echo(f"Deleted note: {note_id}")


@interaction_app.command("add")
def interaction_add(
    company_id: str = typer.Argument(...),
    contact_id: str = typer.Argument(...),
    status: str | None = typer.Option(None, "--status", help='e.g. "Waiting", "Follow-up".'),
    source: str | None = typer.Option(None, "--source", help='"Direct" or "Via Recruiter".'),
    recruiter: str | None = typer.Option(None, "--recruiter"),
    process: str | None = typer.Option(None, "--process"),
    parent: str | None = typer.Option(None, "--parent"),
    role: str | None = typer.Option(None, "--role"),
    category: str | None = typer.Option(None, "--category"),
    channel: str | None = typer.Option(None, "--type", help='e.g. "Cold Email".'),
    priority: str | None = typer.Option(None, "--priority"),
    stage: str | None = typer.Option(None, "--stage"),
    outcome: str | None = typer.Option(None, "--outcome"),
    sent: str | None = typer.Option(None, "--sent", help="YYYY-MM-DD or DD/MM/YYYY."),
    follow_up: str | None = typer.Option(None, "--follow-up", help="YYYY-MM-DD or DD/MM/YYYY."),
    comment: str | None = typer.Option(None, "--comment"),
) -> None:
    _, store, logger = _context()
    try:
        interaction_id = interactions.add_interaction(
            store,
            company_id=company_id,
            contact_id=contact_id,
            status=status,
            source_type=source,
            recruiter_id=recruiter,
            process_id=process,
            parent_interaction_id=parent,
            role_title=role,
            global_category=category,
            interaction_type=channel,
            priority=priority,
            stage=stage,
            outcome=outcome,
            date_sent=rules.parse_input_date(sent, "sent"),
            next_follow_up_date=rules.parse_input_date(follow_up, "follow-up"),
            comment=comment,
            logger=logger,
        )
    except DOMAIN_ERRORS as exc:
        _exit_with_error(str(exc))
    typer.echo(f"Created interaction: {interaction_id}")


@interaction_app.command("update")
def interaction_update(
    interaction_id: str = typer.Argument(...),
    status: str | None = typer.Option(None, "--status"),
    source: str | None = typer.Option(None, "--source"),
    recruiter: str | None = typer.Option(None, "--recruiter"),
    process: str | None = typer.Option(None, "--process"),
    parent: str | None = typer.Option(None, "--parent"),
    role: str | None = typer.Option(None, "--role"),
    category: str | None = typer.Option(None, "--category"),
    channel: str | None = typer.Option(None, "--type"),
    priority: str | None = typer.Option(None, "--priority"),
    stage: str | None = typer.Option(None, "--stage"),
    outcome: str | None = typer.Option(None, "--outcome"),
    sent: str | None = typer.Option(None, "--sent"),
    last_update: str | None = typer.Option(None, "--last-update"),
    follow_up: str | None = typer.Option(None, "--follow-up"),
    comment: str | None = typer.Option(None, "--comment"),
    completed: bool | None = typer.Option(None, "--completed/--not-completed"),
    clear: list[str] = typer.Option([], "--clear", help="Field to empty; repeatable."),
) -> None:
    _, store, logger = _context()
    options = {
        "status": status,
        "source_type": source,
        "recruiter_id": recruiter,
        "process_id": process,
        "parent_interaction_id": parent,
        "role_title": role,
        "global_category": category,
        "interaction_type": channel,
        "priority": priority,
        "stage": stage,
        "outcome": outcome,
        "date_sent": sent,
        "last_update": last_update,
        "next_follow_up_date": follow_up,
        "comment": comment,
        "completed": completed,
    }
    changes: dict[str, Any] = {key: value for key, value in options.items() if value is not None}
    for field_name in clear:
        changes[field_name] = None
    try:
        changed = interactions.update_interaction(store, interaction_id, changes, logger=logger)
    except DOMAIN_ERRORS as exc:
        _exit_with_error(str(exc))
    typer.echo(f"Updated interaction: {interaction_id} ({', '.join(changed) or 'no changes'})")


@interaction_app.command("list")
def interaction_list(
    process_id: str | None = typer.Option(None, "--process"),
    company_id: str | None = typer.Option(None, "--company"),
) -> None:
    ws, store, _ = _context()
    items = interactions.list_interactions(store, process_id=process_id, company_id=company_id)
    if not items:
        typer.echo("No interactions.")
        return
    for node in display_order(items):
        severity = follow_up_severity(node.item, policy=ws.follow_up)
        typer.echo(f"{SEVERITY_MARKS[severity]:<2} {'  ' * node.depth}{_describe(node.item)}")


@interaction_app.command("delete")
def interaction_delete(interaction_id: str = typer.Argument(...)) -> None:
    _, store, logger = _context()
    try:
        interactions.delete_interaction(store, interaction_id, logger=logger)
    except DOMAIN_ERRORS as exc:
        _exit_with_error(str(exc))
    typer.echo(f"Deleted interaction: {interaction_id}")


@app.command("follow-ups")
def follow_ups_command() -> None:
    ws, store, _ = _context()
    buckets = interactions.follow_ups(store, policy=ws.follow_up)
    sections = (
        ("Overdue", buckets.red),
        ("Approaching", buckets.orange),
        ("Scheduled", buckets.scheduled),
        ("This week", buckets.this_week),
    )
    if not any(items for _, items in sections):
        typer.echo("Nothing due or scheduled.")
        return
    for title, items in sections:
        if not items:
            continue
        typer.echo(f"{title} ({len(items)})")
        for item in items:
            typer.echo(f"  {_describe(item)}")


@recruiter_app.command("overview")
def recruiters_overview(limit: int | None = typer.Option(None, "--limit")) -> None:
    ws, store, _ = _context()
    ranked = interactions.recruiter_overview(store, limit=limit or ws.dashboard.top_recruiters)
    if not ranked:
        typer.echo("No recruiter mandates.")
        return
    for summary in ranked:
        typer.echo(
            f"{summary.name} | mandates={summary.mandates} | interviews={summary.interviews} | "
            f"offers={summary.offers}"
        )


@recruiter_app.command("stats")
def recruiters_stats(recruiter_id: str = typer.Argument(...)) -> None:
    _, store, _ = _context()
    try:
        stats = interactions.recruiter_report(store, recruiter_id)
    except DOMAIN_ERRORS as exc:
        _exit_with_error(str(exc))
    recruiter = companies.get_company(store, recruiter_id)
    typer.echo(
        f"{recruiter.name} | total={stats.total} | interviews={stats.interviews} | "
        f"offers={stats.offers} | rejections={stats.rejections} | active={stats.active} | "
        f"conversion={stats.conversion_rate}%"
    )


def _describe(item: Interaction) -> str:
    parts = [
        item.interaction_id,
        format_date(item.date_sent),
        interaction_status_to_external(item.status),
        interaction_type_to_external(item.interaction_type) or "",
        interaction_stage_to_external(item.stage) or "",
        source_type_to_external(item.source_type),
        item.role_title or "",
    ]
    if item.next_follow_up_date:
        parts.append(f"follow-up {format_date(item.next_follow_up_date)}")
    return " | ".join(parts)


def _context() -> tuple[WorkspaceConfig, SqliteStore, EventLogger]:
    ws = _load_workspace()
    store = SqliteStore(ws.store.sqlite_path)
    logger = EventLogger(path=ws.events.path, workspace=ws.name, enabled=ws.events.enabled)
    return ws, store, logger


def _load_workspace() -> WorkspaceConfig:
    try:
        return load_workspace()
    except WorkspaceError as exc:
        typer.echo(str(exc))
        raise typer.Exit(code=1) from exc


def _exit_with_error(message: str) -> None:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
