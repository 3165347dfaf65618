"""PMF scoring engine.

Combines the foundation, experiment and consistency sub-scores with
penalties, modifiers and hard kills into a single 0-100 score and verdict.

The engine is a pure function of its input: no clock, no randomness, no
I/O. The same ``ScoringInput`` always yields an equal ``ScoringResult``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from pmfcore.constants import (
    HARD_KILL_SCORE_CEILING,
    PMF_CONFIRMED_MIN,
    PMF_PARTIAL_MIN,
    SCORE_MAX,
    SCORE_MIN,
)
from pmfcore.models.records import (
    ConsistencyInput,
    DecisionRecord,
    ExperimentRecord,
    FlowRecord,
    SignalRecord,
    flows_by_number,
)
from pmfcore.models.stages import Stage4Data, Stage6Data
from pmfcore.numeric import clamp, round_half_up, to_flag, to_number
from pmfcore.scoring.adjustments import check_hard_kills, sum_modifiers, sum_penalties
from pmfcore.scoring.consistency import score_consistency
from pmfcore.scoring.experiment import score_experiment
from pmfcore.scoring.foundation import score_foundation
from pmfcore.scoring.models import ScoringResult, Verdict

logger = logging.getLogger(__name__)


class ScoringInput(BaseModel):
    """Everything the engine needs to score one product."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    flows: tuple[FlowRecord, ...] = Field(
        default=(), validation_alias=AliasChoices("flows", "all_flow_data")
    )
    experiments: tuple[ExperimentRecord, ...] = ()
    signals: tuple[SignalRecord, ...] = ()
    decisions: tuple[DecisionRecord, ...] = ()
    consistency: ConsistencyInput | None = None
    committed_price_usd: float = 0.0
    signal_quality_score: float = 0.0
    accelerating_signals: bool = False

    @field_validator("flows", "experiments", "signals", "decisions", mode="before")
    @classmethod
    def _none_as_empty(cls, v: Any) -> Any:
        return () if v is None else v

    @field_validator("committed_price_usd", "signal_quality_score", mode="before")
    @classmethod
    def _parse_number(cls, v: Any) -> float:
        return to_number(v)

    @field_validator("accelerating_signals", mode="before")
    @classmethod
    def _parse_flag(cls, v: Any) -> bool:
        return to_flag(v)


@dataclass(frozen=True)
class ScoringContext:
    """Scalar scoring inputs stored in stage payloads."""

    committed_price_usd: float = 0.0
    signal_quality_score: float = 0.0
    accelerating_signals: bool = False

    @classmethod
    def from_flows(cls, records: Iterable[FlowRecord]) -> ScoringContext:
        """Read the committed price from stage 4 and signal figures from stage 6.

        Lock state is not consulted; a missing stage contributes defaults.
        """
        flows = flows_by_number(records)
        price = 0.0
        quality = 0.0
        accelerating = False
        stage4 = flows.get(4)
        if stage4 is not None and isinstance(stage4.data, Stage4Data):
            price = stage4.data.committed_price_usd
        stage6 = flows.get(6)
        if stage6 is not None and isinstance(stage6.data, Stage6Data):
            quality = stage6.data.signal_quality_score
            accelerating = stage6.data.accelerating_signals
        return cls(
            committed_price_usd=price,
            signal_quality_score=quality,
            accelerating_signals=accelerating,
        )


def verdict_for(raw_score: float) -> Verdict:
    """Map a raw score to a verdict, before any hard kill is applied."""
    if raw_score >= PMF_CONFIRMED_MIN:
        return Verdict.PMF_CONFIRMED
    if raw_score >= PMF_PARTIAL_MIN:
        return Verdict.PMF_PARTIAL
    return Verdict.NO_PMF


def compute_pmf_score(scoring_input: ScoringInput) -> ScoringResult:
    """Compute the PMF score and verdict for one product.

    Args:
        scoring_input: Flow records, experiments, signal rows, decisions,
            optional consistency figures and the scalar context values.

    Returns:
        ScoringResult with every breakdown, adjustment and its sources.
    """
    foundation = score_foundation(scoring_input.flows)
    experiment = score_experiment(
        scoring_input.experiments,
        scoring_input.signals,
        scoring_input.decisions,
        scoring_input.signal_quality_score,
    )
    consistency = score_consistency(scoring_input.consistency)
    penalties = sum_penalties(scoring_input.flows, scoring_input.decisions)
    modifiers = sum_modifiers(
        scoring_input.accelerating_signals, scoring_input.signal_quality_score
    )
    hard_kill = check_hard_kills(
        scoring_input.experiments,
        scoring_input.signals,
        scoring_input.consistency,
        scoring_input.committed_price_usd,
    )

    raw_score = (
        foundation.total
        + experiment.total
        + consistency.total
        + penalties.total
        + modifiers.total
    )
    verdict = verdict_for(raw_score)
    if hard_kill is not None:
        logger.info("Hard kill applied: %s (raw score %.2f)", hard_kill.value, raw_score)
        raw_score = min(raw_score, HARD_KILL_SCORE_CEILING)
        verdict = Verdict.NO_PMF

    pmf_score = int(round_half_up(clamp(raw_score, SCORE_MIN, SCORE_MAX), 0))

    logger.info(
        "PMF score computed: score=%d verdict=%s foundation=%d experiment=%d consistency=%d "
        "penalty=%.2f modifiers=%.2f",
        pmf_score,
        verdict.value,
        foundation.total,
        experiment.total,
        consistency.total,
        penalties.total,
        modifiers.total,
    )

    return ScoringResult(
        pmf_score=pmf_score,
        verdict=verdict,
        hard_kill_applied=hard_kill,
        foundation=foundation,
        experiment=experiment,
        consistency=consistency,
        total_penalty=penalties.total,
        penalty_cap_applied=penalties.capped,
        total_modifiers=modifiers.total,
        modifier_cap_applied=modifiers.capped,
        penalty_sources=penalties.sources,
        modifier_sources=modifiers.sources,
    )


def score_product(
    flows: Sequence[FlowRecord],
    experiments: Sequence[ExperimentRecord] = (),
    signals: Sequence[SignalRecord] = (),
    decisions: Sequence[DecisionRecord] = (),
    consistency: ConsistencyInput | None = None,
) -> ScoringResult:
    """Score a product, reading price and signal context from its flow records."""
    context = ScoringContext.from_flows(flows)
    return compute_pmf_score(
        ScoringInput(
            flows=tuple(flows),
            experiments=tuple(experiments),
            signals=tuple(signals),
            decisions=tuple(decisions),
            consistency=consistency,
            committed_price_usd=context.committed_price_usd,
            signal_quality_score=context.signal_quality_score,
            accelerating_signals=context.accelerating_signals,
        )
    )
