from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Protocol

from jobcrm.domain.stages import InteractionStatus, Outcome, SourceType

DEFAULT_RANKING_LIMIT = 5


class _Attributed(Protocol):
    status: str
    outcome: str | None
    source_type: str
    recruiter_id: str | None


@dataclass(frozen=True)
class RecruiterStats:
    total: int
    interviews: int
    offers: int
    rejections: int
    active: int
    conversion_rate: int


@dataclass
class RecruiterSummary:
    recruiter_id: str
    name: str
    mandates: int = 0
    interviews: int = 0
    offers: int = 0


def recruiter_stats(
    interactions: Iterable[_Attributed], recruiter_id: str | None = None
) -> RecruiterStats:
    """Summarise how a recruiter's mandates turned out.

    With ``recruiter_id`` only interactions sourced through that recruiter are
    counted; without it every interaction passed in is.
    """
    total = interviews = offers = rejections = active = 0
    for interaction in interactions:
        if recruiter_id is not None and not _via(interaction, recruiter_id):
            continue
        total += 1
        if _reached(interaction, InteractionStatus.INTERVIEW, Outcome.INTERVIEW):
            interviews += 1
        if _reached(interaction, InteractionStatus.OFFER, Outcome.OFFER):
            offers += 1
        if _reached(interaction, InteractionStatus.REJECTED, Outcome.REJECTED):
            rejections += 1
        if (
            interaction.status not in (InteractionStatus.REJECTED, InteractionStatus.CLOSED)
            and interaction.outcome != Outcome.REJECTED
        ):
            active += 1

    return RecruiterStats(
        total=total,
        interviews=interviews,
        offers=offers,
        rejections=rejections,
        active=active,
        conversion_rate=conversion_rate(interviews, total),
    )


def conversion_rate(interviews: int, total: int) -> int:
    if total <= 0:
        return 0
    # Integer percentage, halves rounded up.
    return (200 * interviews + total) // (2 * total)


def rank_recruiters(
    interactions: Iterable[_Attributed],
    names: Mapping[str, str] | None = None,
    limit: int = DEFAULT_RANKING_LIMIT,
) -> list[RecruiterSummary]:
    names = names or {}
    summaries: dict[str, RecruiterSummary] = {}
    for interaction in interactions:
        if interaction.source_type != SourceType.VIA_RECRUITER or not interaction.recruiter_id:
            continue
        summary = summaries.get(interaction.recruiter_id)
        if summary is None:
            summary = RecruiterSummary(
                recruiter_id=interaction.recruiter_id,
                name=names.get(interaction.recruiter_id, interaction.recruiter_id),
            )
            summaries[interaction.recruiter_id] = summary
        summary.mandates += 1
        if _reached(interaction, InteractionStatus.INTERVIEW, Outcome.INTERVIEW):
            summary.interviews += 1
        if _reached(interaction, InteractionStatus.OFFER, Outcome.OFFER):
            summary.offers += 1

    ranked = sorted(summaries.values(), key=lambda s: (-s.interviews, -s.mandates))
    return ranked[:limit]


def _via(interaction: _Attributed, recruiter_id: str) -> bool:
    return (
        interaction.source_type == SourceType.VIA_RECRUITER
        and interaction.recruiter_id == recruiter_id
    )


def _reached(interaction: _Attributed, status: InteractionStatus, outcome: Outcome) -> bool:
    return interaction.status == status or interaction.outcome == outcome
