"""Experiment gates, criteria matching and rule recommendations."""

from pmfcore.gates.criteria import (
    CriteriaMatcher,
    CriteriaVerdict,
    RegexCriteriaMatcher,
    evaluate_criteria,
)
from pmfcore.gates.evaluator import (
    DEFAULT_GATE_THRESHOLDS,
    GateName,
    GateResult,
    GatesResult,
    GateThresholds,
    evaluate_gates,
)
from pmfcore.gates.interpretation import Interpretation, interpret_experiment
from pmfcore.gates.recommendation import (
    RecommendationConfidence,
    RuleRecommendation,
    rule_recommendation,
)
from pmfcore.gates.results import (
    ExperimentResults,
    build_results_from_signals,
    latest_checkpoint,
)

__all__ = [
    "DEFAULT_GATE_THRESHOLDS",
    "CriteriaMatcher",
    "CriteriaVerdict",
    "ExperimentResults",
    "GateName",
    "GateResult",
    "GateThresholds",
    "GatesResult",
    "Interpretation",
    "RecommendationConfidence",
    "RegexCriteriaMatcher",
    "RuleRecommendation",
    "build_results_from_signals",
    "evaluate_criteria",
    "evaluate_gates",
    "interpret_experiment",
    "latest_checkpoint",
    "rule_recommendation",
]
