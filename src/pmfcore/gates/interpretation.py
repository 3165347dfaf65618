"""Rule half of the experiment interpretation step.

Rebuilds results from the latest checkpoint, evaluates the gates and
criteria, and derives the rule recommendation that the human decision
step starts from.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from pmfcore.gates.criteria import CriteriaMatcher, CriteriaVerdict, evaluate_criteria
from pmfcore.gates.evaluator import (
    DEFAULT_GATE_THRESHOLDS,
    GatesResult,
    GateThresholds,
    evaluate_gates,
)
from pmfcore.gates.recommendation import RuleRecommendation, rule_recommendation
from pmfcore.gates.results import ExperimentResults, build_results_from_signals
from pmfcore.models.records import ExperimentRecord, SignalRecord

logger = logging.getLogger(__name__)


class Interpretation(BaseModel):
    """Everything the rules say about one experiment."""

    model_config = ConfigDict(frozen=True)

    experiment_id: str
    results: ExperimentResults
    gates: GatesResult
    criteria: CriteriaVerdict
    recommendation: RuleRecommendation


def interpret_experiment(
    experiment: ExperimentRecord,
    signals: Iterable[SignalRecord],
    *,
    kill_triggered: bool = False,
    matcher: CriteriaMatcher | None = None,
    thresholds: GateThresholds = DEFAULT_GATE_THRESHOLDS,
) -> Interpretation:
    """Interpret an experiment from its signal log.

    Args:
        experiment: The experiment being judged.
        signals: Signal rows; rows for other experiments are ignored.
        kill_triggered: Whether the pre-committed kill condition fired.
        matcher: Criteria matcher override.
        thresholds: Gate cutoffs.

    Returns:
        Interpretation with results, gates, criteria verdict and recommendation.
    """
    results = build_results_from_signals(signals, experiment.id)
    gates = evaluate_gates(results, thresholds)
    criteria = evaluate_criteria(experiment, results, matcher)
    recommendation = rule_recommendation(gates, criteria, kill_triggered)
    logger.info(
        "Experiment %s: %d/4 gates, criteria %s, recommend %s",
        experiment.id,
        gates.pass_count,
        criteria.value,
        recommendation.recommendation.value,
    )
    return Interpretation(
        experiment_id=experiment.id,
        results=results,
        gates=gates,
        criteria=criteria,
        recommendation=recommendation,
    )
