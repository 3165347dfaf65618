"""PMF scoring engine: sub-scores, adjustments, hard kills and verdict."""

from pmfcore.scoring.adjustments import (
    ModifierTotal,
    PenaltyTotal,
    check_hard_kills,
    sum_modifiers,
    sum_penalties,
    worst_cpa,
)
from pmfcore.scoring.consistency import score_consistency
from pmfcore.scoring.engine import (
    ScoringContext,
    ScoringInput,
    compute_pmf_score,
    score_product,
    verdict_for,
)
from pmfcore.scoring.experiment import primary_metric_tier, score_experiment
from pmfcore.scoring.foundation import score_foundation
from pmfcore.scoring.models import (
    ComponentScore,
    ConsistencyBreakdown,
    ExperimentBreakdown,
    FoundationBreakdown,
    GatesComponentScore,
    HardKillReason,
    ModifierSource,
    PenaltySource,
    ScoringResult,
    SeanEllisComponentScore,
    Verdict,
)
from pmfcore.scoring.summary import (
    VerdictConfidence,
    VerdictSummary,
    fallback_summary,
    format_breakdown,
    verdict_confidence,
)

__all__ = [
    "ComponentScore",
    "ConsistencyBreakdown",
    "ExperimentBreakdown",
    "FoundationBreakdown",
    "GatesComponentScore",
    "HardKillReason",
    "ModifierSource",
    "ModifierTotal",
    "PenaltySource",
    "PenaltyTotal",
    "ScoringContext",
    "ScoringInput",
    "ScoringResult",
    "SeanEllisComponentScore",
    "Verdict",
    "VerdictConfidence",
    "VerdictSummary",
    "check_hard_kills",
    "compute_pmf_score",
    "fallback_summary",
    "format_breakdown",
    "primary_metric_tier",
    "score_consistency",
    "score_experiment",
    "score_foundation",
    "score_product",
    "sum_modifiers",
    "sum_penalties",
    "verdict_confidence",
    "worst_cpa",
]
