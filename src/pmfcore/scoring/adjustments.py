"""Penalties, modifiers and hard kills applied on top of the sub-scores."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from pmfcore.constants import (
    ACCELERATING_SIGNALS_BONUS,
    DECISION_PENALTY_FLOW,
    HARD_KILL_MAX_CANCEL_RATE_PCT,
    HARD_KILL_MAX_CPA_PRICE_RATIO,
    HARD_KILL_MIN_NET_MARGIN_PCT,
    HIGH_SIGNAL_QUALITY_BONUS,
    HIGH_SIGNAL_QUALITY_MIN,
    MODIFIER_CAP,
    PENALTY_CAP,
)
from pmfcore.gates.results import build_results_from_signals
from pmfcore.models.cpa import DefinedCpa, cpa_from
from pmfcore.models.records import (
    ConsistencyInput,
    DecisionRecord,
    ExperimentRecord,
    FlowRecord,
    SignalRecord,
)
from pmfcore.scoring.models import HardKillReason, ModifierSource, PenaltySource

logger = logging.getLogger(__name__)

ACCELERATING_SIGNALS = "Accelerating signals"
HIGH_SIGNAL_QUALITY = "High signal quality"


@dataclass(frozen=True)
class PenaltyTotal:
    """Summed penalties. ``total`` is negative or zero."""

    total: float
    capped: bool
    sources: tuple[PenaltySource, ...]


@dataclass(frozen=True)
class ModifierTotal:
    """Summed bonuses. ``total`` is positive or zero."""

    total: float
    capped: bool
    sources: tuple[ModifierSource, ...]


def sum_penalties(
    flows: Sequence[FlowRecord],
    decisions: Sequence[DecisionRecord],
) -> PenaltyTotal:
    """Sum stage and decision-override penalties, capped at 40.

    Sources list every non-zero stage penalty in flow order of the input,
    then every decision override penalty attributed to flow 9. Sources are
    reported uncapped.
    """
    sources: list[PenaltySource] = []
    for record in flows:
        if record.penalties > 0:
            sources.append(
                PenaltySource(
                    flow=record.flow_number,
                    penalty=-record.penalties,
                    source=f"Flow {record.flow_number}",
                )
            )
    for decision in decisions:
        if decision.override_penalty > 0:
            sources.append(
                PenaltySource(
                    flow=DECISION_PENALTY_FLOW,
                    penalty=-decision.override_penalty,
                    source="Decision override",
                )
            )

    raw = sum(-s.penalty for s in sources)
    capped = raw > PENALTY_CAP
    if capped:
        logger.debug("Penalty total %.2f capped at %.2f", raw, PENALTY_CAP)
    return PenaltyTotal(total=0.0 - min(raw, PENALTY_CAP), capped=capped, sources=tuple(sources))


def sum_modifiers(accelerating_signals: bool, signal_quality_score: float) -> ModifierTotal:
    """Sum bonuses for accelerating signals and high signal quality, capped at 15."""
    sources: list[ModifierSource] = []
    if accelerating_signals:
        sources.append(
            ModifierSource(reason=ACCELERATING_SIGNALS, value=ACCELERATING_SIGNALS_BONUS)
        )
    if signal_quality_score >= HIGH_SIGNAL_QUALITY_MIN:
        sources.append(ModifierSource(reason=HIGH_SIGNAL_QUALITY, value=HIGH_SIGNAL_QUALITY_BONUS))

    raw = sum(s.value for s in sources)
    return ModifierTotal(
        total=min(raw, MODIFIER_CAP), capped=raw > MODIFIER_CAP, sources=tuple(sources)
    )


def worst_cpa(experiments: Sequence[ExperimentRecord], signals: Sequence[SignalRecord]) -> float:
    """Highest defined CPA across experiments, or 0 when none is defined."""
    worst = 0.0
    for experiment in experiments:
        results = build_results_from_signals(signals, experiment.id)
        if results.cpa is not None:
            cpa = DefinedCpa(value=results.cpa)
        else:
            cpa = cpa_from(results.spend or 0.0, results.order_count())
        if isinstance(cpa, DefinedCpa) and cpa.value > worst:
            worst = cpa.value
    return worst


def check_hard_kills(
    experiments: Sequence[ExperimentRecord],
    signals: Sequence[SignalRecord],
    consistency: ConsistencyInput | None,
    committed_price_usd: float,
) -> HardKillReason | None:
    """Return the first hard-kill condition that holds, in fixed order.

    Margin and cancel-rate checks only apply when the figure was supplied.
    """
    c = consistency or ConsistencyInput()

    if c.net_margin_pct is not None and c.net_margin_pct < HARD_KILL_MIN_NET_MARGIN_PCT:
        return HardKillReason.NET_MARGIN
    if c.cancel_rate_pct is not None and c.cancel_rate_pct > HARD_KILL_MAX_CANCEL_RATE_PCT:
        return HardKillReason.CANCEL_RATE

    total_orders = sum(
        build_results_from_signals(signals, e.id).order_count() for e in experiments
    )
    if experiments and total_orders == 0:
        return HardKillReason.ZERO_ORDERS

    if committed_price_usd > 0:
        if worst_cpa(experiments, signals) > committed_price_usd * HARD_KILL_MAX_CPA_PRICE_RATIO:
            return HardKillReason.CPA_OVER_PRICE

    return None
