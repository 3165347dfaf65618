"""Foundation sub-score (max 40).

A function of lock state and the verdicts stored by stages 1-5 only.
An unlocked or missing stage scores 0 and is labelled "Skipped".
"""

from __future__ import annotations

from collections.abc import Iterable

from pmfcore.constants import CHANNEL_MAX, CUSTOMER_MAX, PAIN_MAX, PRICE_MAX, SOLUTION_MAX
from pmfcore.models.records import FlowRecord, flows_by_number
from pmfcore.models.stages import (
    HonestyVerdict,
    PainConfidence,
    SolutionVerdict,
    Stage1Data,
    Stage3Data,
    Stage4Data,
    Stage5Data,
)
from pmfcore.scoring.models import ComponentScore, FoundationBreakdown

SKIPPED = "Skipped"


def _locked(flows: dict[int, FlowRecord], number: int) -> FlowRecord | None:
    record = flows.get(number)
    if record is None or not record.locked:
        return None
    return record


def score_pain(record: FlowRecord | None) -> ComponentScore:
    """Evidence-based pain 10, guessed pain 5."""
    if record is not None and isinstance(record.data, Stage1Data):
        confidence = record.data.confidence
        if confidence in (PainConfidence.CUSTOMERS, PainConfidence.OBSERVED):
            return ComponentScore(score=PAIN_MAX, max=PAIN_MAX, label="High (evidence-based)")
        if confidence is PainConfidence.GUESS:
            return ComponentScore(score=5, max=PAIN_MAX, label="Guess")
    return ComponentScore(score=0, max=PAIN_MAX, label=SKIPPED)


def score_customer(record: FlowRecord | None) -> ComponentScore:
    """Customer locked without penalty 10, with a guess penalty 5."""
    if record is None:
        return ComponentScore(score=0, max=CUSTOMER_MAX, label=SKIPPED)
    if record.penalties > 0:
        return ComponentScore(score=5, max=CUSTOMER_MAX, label="Guess")
    return ComponentScore(score=CUSTOMER_MAX, max=CUSTOMER_MAX, label="High")


def score_solution(record: FlowRecord | None) -> ComponentScore:
    """STRONG 10, WEAK 5, NONE kept by override 2."""
    if record is not None and isinstance(record.data, Stage3Data):
        verdict = record.data.verdict
        if verdict is SolutionVerdict.STRONG:
            return ComponentScore(score=SOLUTION_MAX, max=SOLUTION_MAX, label="Strong")
        if verdict is SolutionVerdict.WEAK:
            return ComponentScore(score=5, max=SOLUTION_MAX, label="Weak")
        if verdict is SolutionVerdict.NONE and record.override_applied:
            return ComponentScore(score=2, max=SOLUTION_MAX, label="None (override)")
    return ComponentScore(score=0, max=SOLUTION_MAX, label=SKIPPED)


def score_price(record: FlowRecord | None) -> ComponentScore:
    """HONEST 5, CONTRADICTED and downgraded 4, CONTRADICTED and defended 2."""
    if record is not None and isinstance(record.data, Stage4Data):
        verdict = record.data.honesty_verdict
        if verdict is HonestyVerdict.HONEST:
            return ComponentScore(score=PRICE_MAX, max=PRICE_MAX, label="Honest")
        if verdict is HonestyVerdict.CONTRADICTED and not record.override_applied:
            return ComponentScore(score=4, max=PRICE_MAX, label="Contradicted (downgraded)")
        if verdict is HonestyVerdict.CONTRADICTED:
            return ComponentScore(score=2, max=PRICE_MAX, label="Contradicted (defended)")
    return ComponentScore(score=0, max=PRICE_MAX, label=SKIPPED)


def score_channel(record: FlowRecord | None) -> ComponentScore:
    """Recommended and capable 5, recommended with gaps 4, weak pick 2."""
    if record is not None and isinstance(record.data, Stage5Data):
        if record.data.picked_from_weak:
            return ComponentScore(score=2, max=CHANNEL_MAX, label="Weak override")
        if record.data.capability_complete:
            return ComponentScore(score=CHANNEL_MAX, max=CHANNEL_MAX, label="Recommended + capable")
        return ComponentScore(score=4, max=CHANNEL_MAX, label="Recommended + gaps resolved")
    return ComponentScore(score=0, max=CHANNEL_MAX, label=SKIPPED)


def score_foundation(records: Iterable[FlowRecord]) -> FoundationBreakdown:
    """Score the five foundation stages."""
    flows = flows_by_number(records)
    pain = score_pain(_locked(flows, 1))
    customer = score_customer(_locked(flows, 2))
    solution = score_solution(_locked(flows, 3))
    price = score_price(_locked(flows, 4))
    channel = score_channel(_locked(flows, 5))
    return FoundationBreakdown(
        pain=pain,
        customer=customer,
        solution=solution,
        price=price,
        channel=channel,
        total=pain.score + customer.score + solution.score + price.score + channel.score,
    )
