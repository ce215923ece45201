"""Follow-up severity for interactions awaiting a reply.

An explicit next follow-up date that has arrived always escalates to red.
Otherwise only interactions in ``Waiting`` status age: two weeks since they were
sent turns them orange, four weeks turns them red.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Protocol

from jobcrm.domain.stages import FollowUpSeverity, InteractionStatus


class _FollowUpLike(Protocol):
    status: str
    date_sent: date | None
    next_follow_up_date: date | None


class _ScheduledLike(Protocol):
    next_follow_up_date: date | None


@dataclass(frozen=True)
class FollowUpPolicy:
    orange_after_days: int = 14
    red_after_days: int = 28


DEFAULT_POLICY = FollowUpPolicy()


def follow_up_severity(
    interaction: _FollowUpLike,
    today: date | datetime | None = None,
    policy: FollowUpPolicy | None = None,
) -> FollowUpSeverity:
    policy = policy or DEFAULT_POLICY
    today = _as_day(today) if today is not None else utc_today()

    if is_overdue_follow_up(interaction, today):
        return FollowUpSeverity.RED

    if interaction.status != InteractionStatus.WAITING or not interaction.date_sent:
        return FollowUpSeverity.NORMAL

    days = (today - _as_day(interaction.date_sent)).days
    if days >= policy.red_after_days:
        return FollowUpSeverity.RED
    if days >= policy.orange_after_days:
        return FollowUpSeverity.ORANGE
    return FollowUpSeverity.NORMAL


def is_overdue_follow_up(
    interaction: _ScheduledLike, today: date | datetime | None = None
) -> bool:
    if not interaction.next_follow_up_date:
        return False
    today = _as_day(today) if today is not None else utc_today()
    return _as_day(interaction.next_follow_up_date) <= today


def utc_today() -> date:
    return datetime.now(UTC).date()


def _as_day(value: date | datetime) -> date:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.date()
    return value
