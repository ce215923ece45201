from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from jobcrm.domain.follow_up import FollowUpPolicy
from jobcrm.domain.recruiters import DEFAULT_RANKING_LIMIT

WORKSPACES_DIR = Path("workspaces")
CURRENT_WORKSPACE_FILE = WORKSPACES_DIR / ".current"
WORKSPACE_FILENAME = "workspace.yaml"


@dataclass(frozen=True)
class StoreConfig:
    sqlite_path: Path


@dataclass(frozen=True)
class EventsConfig:
    path: Path
    enabled: bool = True


@dataclass(frozen=True)
class DashboardConfig:
    top_recruiters: int = DEFAULT_RANKING_LIMIT


@dataclass(frozen=True)
class WorkspaceConfig:
    name: str
    store: StoreConfig
    events: EventsConfig
    path: Path
    follow_up: FollowUpPolicy = field(default_factory=FollowUpPolicy)
    dashboard: DashboardConfig = field(default_factory=DashboardConfig)


class WorkspaceError(RuntimeError):
    pass


def ensure_workspaces_dir() -> None:
    WORKSPACES_DIR.mkdir(parents=True, exist_ok=True)


def set_current_workspace(name: str) -> None:
    ensure_workspaces_dir()
    CURRENT_WORKSPACE_FILE.write_text(f"{name}\n", encoding="utf-8")


def get_current_workspace_name() -> str:
    if not CURRENT_WORKSPACE_FILE.exists():
        raise WorkspaceError("No active workspace. Run `jobcrm workspace use <name>`.")
    return CURRENT_WORKSPACE_FILE.read_text(encoding="utf-8").strip()


def workspace_path(name: str) -> Path:
    return WORKSPACES_DIR / name


def workspace_config_path(name: str) -> Path:
    return workspace_path(name) / WORKSPACE_FILENAME


def load_workspace(name: str | None = None) -> WorkspaceConfig:
    if name is None:
        name = get_current_workspace_name()
    return load_workspace_file(workspace_config_path(name), name)


def load_workspace_file(config_path: Path, name: str | None = None) -> WorkspaceConfig:
    if not config_path.exists():
        raise WorkspaceError(f"Workspace config not found: {config_path}")
    data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise WorkspaceError("Workspace config must be a mapping.")
    return WorkspaceConfig(
        name=name or str(data.get("workspace") or config_path.parent.name),
        store=_parse_store(data.get("store"), config_path),
        events=_parse_events(data.get("events"), config_path),
        path=config_path.parent,
        follow_up=_parse_follow_up(data.get("follow_up")),
        dashboard=_parse_dashboard(data.get("dashboard")),
    )


def write_workspace_config(name: str) -> Path:
    ensure_workspaces_dir()
    ws_dir = workspace_path(name)
    ws_dir.mkdir(parents=True, exist_ok=True)
    policy = FollowUpPolicy()
    config = {
        "workspace": name,
        "store": {"sqlite_path": "./local.sqlite"},
        "events": {"enabled": True, "path": "./events.jsonl"},
        "follow_up": {
            "orange_after_days": policy.orange_after_days,
            "red_after_days": policy.red_after_days,
        },
        "dashboard": {"top_recruiters": DEFAULT_RANKING_LIMIT},
    }
    config_path = workspace_config_path(name)
    config_path.write_text(yaml.safe_dump(config, sort_keys=False), encoding="utf-8")
    return config_path


def _parse_store(store_data: Any, config_path: Path) -> StoreConfig:
    if not isinstance(store_data, dict):
        raise WorkspaceError("Invalid workspace store configuration.")
    sqlite_path_raw = store_data.get("sqlite_path")
    if not sqlite_path_raw:
        raise WorkspaceError("Workspace store.sqlite_path is required.")
    sqlite_path = _resolve_path(sqlite_path_raw, config_path)
    if sqlite_path is None:
        raise WorkspaceError("Workspace store.sqlite_path must be a string.")
    return StoreConfig(sqlite_path=sqlite_path)


def _parse_events(events_data: Any, config_path: Path) -> EventsConfig:
    if events_data is None:
        events_data = {}
    if not isinstance(events_data, dict):
        raise WorkspaceError("Invalid workspace events configuration.")
    path = _resolve_path(events_data.get("path", "./events.jsonl"), config_path)
    if path is None:
        raise WorkspaceError("Workspace events.path must be a string.")
    return EventsConfig(path=path, enabled=bool(events_data.get("enabled", True)))


def _parse_follow_up(follow_up_data: Any) -> FollowUpPolicy:
    if follow_up_data is None:
        return FollowUpPolicy()
    if not isinstance(follow_up_data, dict):
        raise WorkspaceError("Invalid workspace follow_up configuration.")
    defaults = FollowUpPolicy()
    orange = _positive_int(
        follow_up_data.get("orange_after_days", defaults.orange_after_days),
        "follow_up.orange_after_days",
    )
    red = _positive_int(
        follow_up_data.get("red_after_days", defaults.red_after_days),
        "follow_up.red_after_days",
    )
    if red < orange:
        raise WorkspaceError("follow_up.red_after_days must not be below orange_after_days.")
    return FollowUpPolicy(orange_after_days=orange, red_after_days=red)


def _parse_dashboard(dashboard_data: Any) -> DashboardConfig:
    if dashboard_data is None:
        return DashboardConfig()
    if not isinstance(dashboard_data, dict):
        raise WorkspaceError("Invalid workspace dashboard configuration.")
    top = _positive_int(
        dashboard_data.get("top_recruiters", DEFAULT_RANKING_LIMIT), "dashboard.top_recruiters"
    )
    return DashboardConfig(top_recruiters=top)


def _positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise WorkspaceError(f"Workspace {field_name} must be a positive integer.")
    return value


def _resolve_path(raw: Any, config_path: Path) -> Path | None:
    if not isinstance(raw, str):
        return None
    raw_path = Path(raw)
    if raw_path.is_absolute():
        return raw_path
    # Prefer paths relative to the workspace directory.
    workspace_dir = config_path.parent
    if raw_path.parts and raw_path.parts[0] == WORKSPACES_DIR.name:
        # Also accept paths written relative to the repo root ("workspaces/...").
        return (workspace_dir.parent.parent / raw_path).resolve()
    return (workspace_dir / raw_path).resolve()
