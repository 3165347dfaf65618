"""Experiment sub-score (max 30).

Judged on the experiments a human marked GO: best primary-metric tier,
best gate pass count, the signal quality input, and decision integrity
(how often the rules were overridden).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pmfcore.constants import (
    GATES_SCORE_BY_PASS_COUNT,
    GATES_SCORE_MAX,
    INTEGRITY_KILL_IGNORED,
    INTEGRITY_MANY_OVERRIDES,
    INTEGRITY_MANY_OVERRIDES_THRESHOLD,
    INTEGRITY_MAX,
    INTEGRITY_SOME_OVERRIDES,
    PRIMARY_METRIC_MAX,
    PRIMARY_METRIC_PARTIAL_SCORE,
    PRIMARY_METRIC_TIERS,
    SIGNAL_QUALITY_MAX,
    SIGNAL_QUALITY_TIERS,
)
from pmfcore.gates.evaluator import evaluate_gates
from pmfcore.gates.results import build_results_from_signals
from pmfcore.models.records import (
    DecisionAction,
    DecisionRecord,
    ExperimentRecord,
    SignalRecord,
)
from pmfcore.scoring.models import ComponentScore, ExperimentBreakdown, GatesComponentScore
from pmfcore.scoring.tiers import tier_at_least

logger = logging.getLogger(__name__)

NO_GO_EXPERIMENT = "No GO experiment"
NO_VERDICT_YET = "No verdict yet"


def primary_metric_tier(orders: float) -> int:
    """10 for 3+ orders, 7 for 1+, 3 for a fractional count, else 0."""
    score = tier_at_least(orders, PRIMARY_METRIC_TIERS)
    if score == 0 and orders > 0:
        return PRIMARY_METRIC_PARTIAL_SCORE
    return score


def _primary_metric_label(score: int) -> str:
    if score >= 10:
        return "Met"
    if score >= 7:
        return "Near"
    if score >= 3:
        return "Missed"
    return "Zero"


def score_signal_quality(signal_quality_score: float) -> ComponentScore:
    score = tier_at_least(signal_quality_score, SIGNAL_QUALITY_TIERS)
    if signal_quality_score >= 60:
        label = "High (≥60)"
    elif signal_quality_score >= 40:
        label = "Medium (40-59)"
    elif signal_quality_score >= 20:
        label = "Low (20-39)"
    else:
        label = "Very low (<20)"
    return ComponentScore(score=score, max=SIGNAL_QUALITY_MAX, label=label)


def score_integrity(decisions: Sequence[DecisionRecord]) -> ComponentScore:
    """5 when the rules were followed; lower the more they were overridden."""
    kill_ignored = any(
        d.human_decision is DecisionAction.GO and d.ai_recommendation is DecisionAction.KILL
        for d in decisions
    )
    overrides = sum(1 for d in decisions if d.override_applied)
    if kill_ignored:
        return ComponentScore(score=INTEGRITY_KILL_IGNORED, max=INTEGRITY_MAX, label="Kill ignored")
    if overrides > INTEGRITY_MANY_OVERRIDES_THRESHOLD:
        return ComponentScore(score=INTEGRITY_MANY_OVERRIDES, max=INTEGRITY_MAX, label="Minimum")
    if overrides > 0:
        return ComponentScore(
            score=INTEGRITY_SOME_OVERRIDES, max=INTEGRITY_MAX, label="Simplified"
        )
    return ComponentScore(score=INTEGRITY_MAX, max=INTEGRITY_MAX, label="Full, complete")


def score_experiment(
    experiments: Sequence[ExperimentRecord],
    signals: Sequence[SignalRecord],
    decisions: Sequence[DecisionRecord],
    signal_quality_score: float,
) -> ExperimentBreakdown:
    """Score the experiment phase.

    Only experiments with a GO decision count towards the primary metric
    and gates. With no GO decision at all, the gates of the first
    experiment are still shown and the primary metric reads "No verdict yet".
    """
    go_decisions = [d for d in decisions if d.human_decision is DecisionAction.GO]
    go_ids = {d.experiment_id for d in go_decisions if d.experiment_id}

    best_pass_count = 0
    primary_score = 0
    primary_label = NO_GO_EXPERIMENT

    for experiment in experiments:
        if experiment.id not in go_ids:
            continue
        results = build_results_from_signals(signals, experiment.id)
        best_pass_count = max(best_pass_count, evaluate_gates(results).pass_count)
        if "order" in experiment.primary_metric.target.lower():
            primary_score = max(primary_score, primary_metric_tier(results.order_count()))

    if not go_decisions and experiments:
        results = build_results_from_signals(signals, experiments[0].id)
        best_pass_count = evaluate_gates(results).pass_count
        primary_label = NO_VERDICT_YET
    elif go_decisions:
        primary_label = _primary_metric_label(primary_score)

    primary_metric = ComponentScore(
        score=primary_score, max=PRIMARY_METRIC_MAX, label=primary_label
    )
    gates = GatesComponentScore(
        score=GATES_SCORE_BY_PASS_COUNT.get(best_pass_count, 0),
        max=GATES_SCORE_MAX,
        label=f"{best_pass_count}/4 gates",
        pass_count=best_pass_count,
    )
    signal_quality = score_signal_quality(signal_quality_score)
    integrity = score_integrity(decisions)

    logger.debug(
        "Experiment sub-score: primary=%d gates=%d quality=%d integrity=%d",
        primary_metric.score,
        gates.score,
        signal_quality.score,
        integrity.score,
    )
    return ExperimentBreakdown(
        primary_metric=primary_metric,
        gates=gates,
        signal_quality=signal_quality,
        integrity=integrity,
        total=primary_metric.score + gates.score + signal_quality.score + integrity.score,
    )
