"""Scoring engine domain models.

Defines the PMF scoring output:
- Verdict: PMF_CONFIRMED / PMF_PARTIAL / NO_PMF
- HardKillReason: conditions that force NO_PMF regardless of the total
- ComponentScore: one labelled sub-score line
- Foundation/Experiment/Consistency breakdowns (max 40/30/30)
- PenaltySource / ModifierSource: audit entries for adjustments
- ScoringResult: the single immutable engine output
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from pmfcore.constants import (
    CONSISTENCY_MAX,
    EXPERIMENT_MAX,
    FOUNDATION_MAX,
    MODIFIER_CAP,
    PENALTY_CAP,
)


class Verdict(StrEnum):
    """Three-way PMF verdict."""

    PMF_CONFIRMED = "PMF_CONFIRMED"
    PMF_PARTIAL = "PMF_PARTIAL"
    NO_PMF = "NO_PMF"


class HardKillReason(StrEnum):
    """Conditions that cap the score at 49 and force NO_PMF."""

    NET_MARGIN = "Net margin < 15%"
    CANCEL_RATE = "Cancel rate > 50%"
    ZERO_ORDERS = "Zero orders across all experiments"
    CPA_OVER_PRICE = "CPA > 50% of price"


class ComponentScore(BaseModel):
    """A single scored line with its maximum and a display label."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(..., ge=0)
    max: int = Field(..., ge=0)
    label: str

    @model_validator(mode="after")
    def _within_max(self) -> ComponentScore:
        if self.score > self.max:
            raise ValueError(f"Component score {self.score} exceeds max {self.max}")
        return self


class GatesComponentScore(ComponentScore):
    pass_count: int = Field(..., ge=0, le=4)


class SeanEllisComponentScore(ComponentScore):
    skipped: bool


class _Breakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int
    max: int

    def _components(self) -> list[ComponentScore]:
        values = [getattr(self, name) for name in type(self).model_fields]
        return [v for v in values if isinstance(v, ComponentScore)]

    @model_validator(mode="after")
    def _total_matches_components(self) -> _Breakdown:
        components = self._components()
        if self.total != sum(c.score for c in components):
            raise ValueError(f"{type(self).__name__} total does not match its components")
        if self.max != sum(c.max for c in components):
            raise ValueError(f"{type(self).__name__} max does not match its components")
        return self


class FoundationBreakdown(_Breakdown):
    """Pain, customer, solution, price and channel (max 40)."""

    pain: ComponentScore
    customer: ComponentScore
    solution: ComponentScore
    price: ComponentScore
    channel: ComponentScore
    max: int = FOUNDATION_MAX


class ExperimentBreakdown(_Breakdown):
    """Primary metric, gates, signal quality and integrity (max 30)."""

    primary_metric: ComponentScore
    gates: GatesComponentScore
    signal_quality: ComponentScore
    integrity: ComponentScore
    max: int = EXPERIMENT_MAX


class ConsistencyBreakdown(_Breakdown):
    """Post-launch steady-state metrics (max 30)."""

    cpa_stability: ComponentScore
    net_margin: ComponentScore
    cancel_rate: ComponentScore
    repeat_buyers: ComponentScore
    sean_ellis: SeanEllisComponentScore
    max: int = CONSISTENCY_MAX


class PenaltySource(BaseModel):
    """One penalty entry. ``penalty`` is negative."""

    model_config = ConfigDict(frozen=True)

    flow: int
    penalty: float = Field(..., le=0.0)
    source: str


class ModifierSource(BaseModel):
    """One bonus entry. ``value`` is positive."""

    model_config = ConfigDict(frozen=True)

    reason: str
    value: float = Field(..., ge=0.0)


class ScoringResult(BaseModel):
    """Complete, immutable PMF scoring output.

    Identical input always yields an equal result, including source
    ordering, so results can be stored as audit records and compared in
    regression tests.
    """

    model_config = ConfigDict(frozen=True)

    pmf_score: int = Field(..., ge=0, le=100)
    verdict: Verdict
    hard_kill_applied: HardKillReason | None
    foundation: FoundationBreakdown
    experiment: ExperimentBreakdown
    consistency: ConsistencyBreakdown
    total_penalty: float = Field(..., ge=-PENALTY_CAP, le=0.0)
    penalty_cap_applied: bool
    total_modifiers: float = Field(..., ge=0.0, le=MODIFIER_CAP)
    modifier_cap_applied: bool
    penalty_sources: tuple[PenaltySource, ...]
    modifier_sources: tuple[ModifierSource, ...]

    @model_validator(mode="after")
    def _hard_kill_forces_no_pmf(self) -> ScoringResult:
        if self.hard_kill_applied is not None and self.verdict is not Verdict.NO_PMF:
            raise ValueError("A hard kill must force the NO_PMF verdict")
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-safe dictionary."""
        return self.model_dump(mode="json")
