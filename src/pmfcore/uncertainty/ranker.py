"""Ranked list of open risks from the locked foundation stages.

The next market experiment should test the biggest unresolved risk. Each
weak or guessed answer in stages 1-5 raises a weighted flag; flags are
ordered by weight, then by a fixed category order (price, channel,
differentiation, customer, pain, other).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import StrEnum
from typing import TypeVar

from pydantic import BaseModel, ConfigDict, Field

from pmfcore.models.records import FlowRecord, flows_by_number
from pmfcore.models.stages import (
    HonestyVerdict,
    PriceTier,
    SolutionVerdict,
    Stage1Data,
    Stage2Data,
    Stage3Data,
    Stage4Data,
    Stage5Data,
)

logger = logging.getLogger(__name__)

_S = TypeVar("_S")


class UncertaintyType(StrEnum):
    PAIN_UNVALIDATED = "PAIN_UNVALIDATED"
    CUSTOMER_UNVALIDATED = "CUSTOMER_UNVALIDATED"
    DIFFERENTIATION_UNCLEAR = "DIFFERENTIATION_UNCLEAR"
    NO_DIFFERENTIATION = "NO_DIFFERENTIATION"
    PRICE_OPTIMISTIC = "PRICE_OPTIMISTIC"
    PRICE_AGGRESSIVE = "PRICE_AGGRESSIVE"
    CHANNEL_MISMATCH = "CHANNEL_MISMATCH"
    EXECUTION_CAPABILITY = "EXECUTION_CAPABILITY"
    DEMAND_VALIDATION = "DEMAND_VALIDATION"


class Uncertainty(BaseModel):
    """One unresolved risk and the question an experiment should answer."""

    model_config = ConfigDict(frozen=True)

    type: UncertaintyType
    weight: int = Field(..., ge=0)
    question: str


_CATALOG: dict[UncertaintyType, tuple[int, str]] = {
    UncertaintyType.PAIN_UNVALIDATED: (30, "Do real people actually have this problem?"),
    UncertaintyType.CUSTOMER_UNVALIDATED: (25, "Is this the right buyer?"),
    UncertaintyType.DIFFERENTIATION_UNCLEAR: (20, "Will customers see this as different?"),
    UncertaintyType.NO_DIFFERENTIATION: (
        25,
        "This product may be undifferentiated. Will anyone switch?",
    ),
    UncertaintyType.PRICE_OPTIMISTIC: (20, "Will customers actually pay this price?"),
    UncertaintyType.PRICE_AGGRESSIVE: (
        15,
        "Is this price above what the market will tolerate?",
    ),
    UncertaintyType.CHANNEL_MISMATCH: (15, "Will customers actually be on this channel?"),
    # not raised by any stage rule; available to callers ranking their own flags
    UncertaintyType.EXECUTION_CAPABILITY: (15, "Can this channel actually be run well enough?"),
    UncertaintyType.DEMAND_VALIDATION: (20, "Will people actually buy this product?"),
}

TIEBREAK_RANK: dict[UncertaintyType, int] = {
    UncertaintyType.PRICE_OPTIMISTIC: 0,
    UncertaintyType.PRICE_AGGRESSIVE: 0,
    UncertaintyType.CHANNEL_MISMATCH: 1,
    UncertaintyType.EXECUTION_CAPABILITY: 1,
    UncertaintyType.DIFFERENTIATION_UNCLEAR: 2,
    UncertaintyType.NO_DIFFERENTIATION: 2,
    UncertaintyType.CUSTOMER_UNVALIDATED: 3,
    UncertaintyType.PAIN_UNVALIDATED: 4,
}
_DEFAULT_TIEBREAK_RANK = 5


def make_uncertainty(kind: UncertaintyType) -> Uncertainty:
    weight, question = _CATALOG[kind]
    return Uncertainty(type=kind, weight=weight, question=question)


def tiebreak_rank(kind: UncertaintyType) -> int:
    return TIEBREAK_RANK.get(kind, _DEFAULT_TIEBREAK_RANK)


def _locked_stage(
    flows: dict[int, FlowRecord], number: int, stage_type: type[_S]
) -> tuple[FlowRecord, _S] | None:
    record = flows.get(number)
    if record is None or not record.locked or not isinstance(record.data, stage_type):
        return None
    return record, record.data


def rank_uncertainties(records: Iterable[FlowRecord]) -> list[Uncertainty]:
    """Rank open uncertainties from the locked stage 1-5 records.

    Unlocked stages are ignored. When nothing triggers, a single
    DEMAND_VALIDATION uncertainty is returned.

    Returns:
        Uncertainties sorted by weight descending, then tiebreak rank.
    """
    flows = flows_by_number(records)
    found: list[Uncertainty] = []

    pain = _locked_stage(flows, 1, Stage1Data)
    if pain is not None and pain[1].is_guess:
        found.append(make_uncertainty(UncertaintyType.PAIN_UNVALIDATED))

    customer = _locked_stage(flows, 2, Stage2Data)
    if customer is not None and customer[1].is_guess:
        found.append(make_uncertainty(UncertaintyType.CUSTOMER_UNVALIDATED))

    solution = _locked_stage(flows, 3, Stage3Data)
    if solution is not None:
        if solution[1].verdict is SolutionVerdict.WEAK:
            found.append(make_uncertainty(UncertaintyType.DIFFERENTIATION_UNCLEAR))
        elif solution[1].verdict is SolutionVerdict.NONE:
            found.append(make_uncertainty(UncertaintyType.NO_DIFFERENTIATION))

    price = _locked_stage(flows, 4, Stage4Data)
    if price is not None:
        if price[1].honesty_verdict is HonestyVerdict.CONTRADICTED:
            found.append(make_uncertainty(UncertaintyType.PRICE_OPTIMISTIC))
        if price[1].committed_tier is PriceTier.AGGRESSIVE:
            found.append(make_uncertainty(UncertaintyType.PRICE_AGGRESSIVE))

    channel = _locked_stage(flows, 5, Stage5Data)
    if channel is not None and (channel[0].override_applied or channel[1].override_applied):
        found.append(make_uncertainty(UncertaintyType.CHANNEL_MISMATCH))

    if not found:
        found.append(make_uncertainty(UncertaintyType.DEMAND_VALIDATION))

    found.sort(key=lambda u: (-u.weight, tiebreak_rank(u.type)))
    logger.debug("Ranked uncertainties: %s", [u.type.value for u in found])
    return found


def top_uncertainty(records: Iterable[FlowRecord]) -> Uncertainty:
    """The single biggest open risk; what the next experiment should test."""
    return rank_uncertainties(records)[0]
