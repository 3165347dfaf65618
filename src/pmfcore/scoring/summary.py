"""Deterministic verdict summary.

Used when no qualitative summary is available: a one-line summary, the
recommended next step for the verdict, and a gap note for partial PMF.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from pmfcore.scoring.models import ScoringResult, Verdict


class VerdictConfidence(StrEnum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


_CONFIDENCE_BY_VERDICT: dict[Verdict, VerdictConfidence] = {
    Verdict.PMF_CONFIRMED: VerdictConfidence.HIGH,
    Verdict.PMF_PARTIAL: VerdictConfidence.MEDIUM,
    Verdict.NO_PMF: VerdictConfidence.LOW,
}

_NEXT_STEP_BY_VERDICT: dict[Verdict, str] = {
    Verdict.PMF_CONFIRMED: "Proceed to scale.",
    Verdict.PMF_PARTIAL: "Fix gaps and re-prove.",
    Verdict.NO_PMF: "Kill or pivot.",
}

PARTIAL_GAP_NOTE = "Review breakdown and fix weakest components."
NO_SUMMARY_EXPLANATION = "Summary could not be generated."


def verdict_confidence(verdict: Verdict) -> VerdictConfidence:
    return _CONFIDENCE_BY_VERDICT[verdict]


class VerdictSummary(BaseModel):
    """Plain-language summary of a scoring result."""

    model_config = ConfigDict(frozen=True)

    one_line_summary: str
    strengths: tuple[str, ...] = ()
    risks: tuple[str, ...] = ()
    score_explanation: str
    recommended_next: str
    gap_analysis: str | None = None


def format_breakdown(result: ScoringResult) -> str:
    """Multi-line text rendering of the sub-scores and adjustments."""
    f = result.foundation
    e = result.experiment
    c = result.consistency
    lines = [
        f"Foundation: {f.total}/{f.max}",
        f"  Pain {f.pain.score}/{f.pain.max}, Customer {f.customer.score}/{f.customer.max}, "
        f"Solution {f.solution.score}/{f.solution.max}, Price {f.price.score}/{f.price.max}, "
        f"Channel {f.channel.score}/{f.channel.max}",
        f"Experiment: {e.total}/{e.max}",
        f"  Primary metric {e.primary_metric.score}/{e.primary_metric.max}, "
        f"Gates {e.gates.score}/{e.gates.max}, "
        f"Signal quality {e.signal_quality.score}/{e.signal_quality.max}, "
        f"Integrity {e.integrity.score}/{e.integrity.max}",
        f"Consistency: {c.total}/{c.max}",
        f"Penalties: {result.total_penalty:g}, Modifiers: +{result.total_modifiers:g}",
    ]
    return "\n".join(lines)


def fallback_summary(result: ScoringResult) -> VerdictSummary:
    """Build the summary from the scoring result alone."""
    one_line = f"Score {result.pmf_score}/100 - {result.verdict.value}."
    if result.hard_kill_applied is not None:
        one_line += f" Hard kill: {result.hard_kill_applied.value}."
    return VerdictSummary(
        one_line_summary=one_line,
        score_explanation=NO_SUMMARY_EXPLANATION,
        recommended_next=_NEXT_STEP_BY_VERDICT[result.verdict],
        gap_analysis=PARTIAL_GAP_NOTE if result.verdict is Verdict.PMF_PARTIAL else None,
    )
