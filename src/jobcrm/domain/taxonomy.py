"""Translation between stored enum values and the labels users read and type.

Each enum family is a single list of ``(internal, external)`` pairs and both
lookup directions are derived from it. Values missing from a table are echoed
back unchanged so that rows written by a newer schema still render.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from typing import Any

from jobcrm.domain.stages import (
    CompanyType,
    InteractionStage,
    InteractionStatus,
    InteractionType,
    ProcessStatus,
    SourceType,
)


@dataclass(frozen=True)
class EnumMapping:
    name: str
    pairs: tuple[tuple[str, str], ...]

    @cached_property
    def _external_by_internal(self) -> dict[str, str]:
        return {internal: external for internal, external in self.pairs}

    @cached_property
    def _internal_by_external(self) -> dict[str, str]:
        return {external: internal for internal, external in self.pairs}

    def to_external(self, value: Any) -> Any:
        raw = _raw(value)
        if not isinstance(raw, str):
            return value
        return self._external_by_internal.get(raw, value)

    def to_internal(self, label: Any) -> Any:
        raw = _raw(label)
        if not isinstance(raw, str):
            return label
        return self._internal_by_external.get(raw, label)

    def internal_values(self) -> list[str]:
        return [internal for internal, _ in self.pairs]

    def external_labels(self) -> list[str]:
        return [external for _, external in self.pairs]


def _raw(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def _pairs(*items: tuple[Enum, str]) -> tuple[tuple[str, str], ...]:
    return tuple((member.value, label) for member, label in items)


INTERACTION_STATUS = EnumMapping(
    "interaction_status",
    _pairs(
        (InteractionStatus.SENT, "Sent"),
        (InteractionStatus.WAITING, "Waiting"),
        (InteractionStatus.FOLLOW_UP, "Follow-up"),
        (InteractionStatus.DISCUSSION, "Discussion"),
        (InteractionStatus.INTERVIEW, "Interview"),
        (InteractionStatus.OFFER, "Offer"),
        (InteractionStatus.REJECTED, "Rejected"),
        (InteractionStatus.CLOSED, "Closed"),
    ),
)

COMPANY_TYPE = EnumMapping(
    "company_type",
    _pairs(
        (CompanyType.BANK, "Bank"),
        (CompanyType.HEDGE_FUND, "Hedge Fund"),
        (CompanyType.ASSET_MANAGER, "Asset Manager"),
        (CompanyType.PRIVATE_EQUITY, "Private Equity"),
        (CompanyType.PROP_SHOP, "Prop Shop"),
        (CompanyType.RECRUITER, "Recruiter"),
        (CompanyType.OTHER, "Other"),
    ),
)

INTERACTION_TYPE = EnumMapping(
    "interaction_type",
    _pairs(
        (InteractionType.OFFICIAL_APPLICATION, "Official Application"),
        (InteractionType.LINKEDIN_MESSAGE, "LinkedIn Message"),
        (InteractionType.COLD_EMAIL, "Cold Email"),
        (InteractionType.CALL, "Call"),
        (InteractionType.REFERRAL, "Referral"),
        (InteractionType.PHYSICAL_MEETING, "Physical Meeting"),
    ),
)

SOURCE_TYPE = EnumMapping(
    "source_type",
    _pairs(
        (SourceType.DIRECT, "Direct"),
        (SourceType.VIA_RECRUITER, "Via Recruiter"),
    ),
)

# Same spelling on both sides today.
PROCESS_STATUS = EnumMapping(
    "process_status",
    tuple((status.value, status.value) for status in ProcessStatus),
)

INTERACTION_STAGE = EnumMapping(
    "interaction_stage",
    _pairs(
        (InteractionStage.APPLICATION, "Application"),
        (InteractionStage.SCREENING, "Screening"),
        (InteractionStage.PHONE_INTERVIEW, "Phone Interview"),
        (InteractionStage.TECHNICAL, "Technical"),
        (InteractionStage.FINAL_ROUND, "Final Round"),
        (InteractionStage.OFFER_STAGE, "Offer Stage"),
        (InteractionStage.OTHER, "Other"),
    ),
)

FAMILIES: dict[str, EnumMapping] = {
    mapping.name: mapping
    for mapping in (
        INTERACTION_STATUS,
        COMPANY_TYPE,
        INTERACTION_TYPE,
        SOURCE_TYPE,
        PROCESS_STATUS,
        INTERACTION_STAGE,
    )
}


def family(name: str) -> EnumMapping:
    return FAMILIES[name]


def to_external(family_name: str, value: Any) -> Any:
    return FAMILIES[family_name].to_external(value)


def to_internal(family_name: str, label: Any) -> Any:
    return FAMILIES[family_name].to_internal(label)


interaction_status_to_external = INTERACTION_STATUS.to_external
interaction_status_to_internal = INTERACTION_STATUS.to_internal
company_type_to_external = COMPANY_TYPE.to_external
company_type_to_internal = COMPANY_TYPE.to_internal
interaction_type_to_external = INTERACTION_TYPE.to_external
interaction_type_to_internal = INTERACTION_TYPE.to_internal
source_type_to_external = SOURCE_TYPE.to_external
source_type_to_internal = SOURCE_TYPE.to_internal
process_status_to_external = PROCESS_STATUS.to_external
process_status_to_internal = PROCESS_STATUS.to_internal
interaction_stage_to_external = INTERACTION_STAGE.to_external
interaction_stage_to_internal = INTERACTION_STAGE.to_internal
