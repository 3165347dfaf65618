"""Tests for the deterministic verdict summary and breakdown text."""

from __future__ import annotations

import pytest

from pmfcore.models import ConsistencyInput, FlowRecord
from pmfcore.scoring import (
    ScoringInput,
    Verdict,
    VerdictConfidence,
    compute_pmf_score,
    fallback_summary,
    format_breakdown,
    verdict_confidence,
)


@pytest.mark.parametrize(
    ("verdict", "confidence"),
    [
        (Verdict.PMF_CONFIRMED, VerdictConfidence.HIGH),
        (Verdict.PMF_PARTIAL, VerdictConfidence.MEDIUM),
        (Verdict.NO_PMF, VerdictConfidence.LOW),
    ],
)
def test_verdict_confidence(verdict: Verdict, confidence: VerdictConfidence) -> None:
    assert verdict_confidence(verdict) is confidence


class TestFallbackSummary:
    def test_partial(self, strong_flows: list[FlowRecord]) -> None:
        # 40 foundation + 5 integrity + 13 default consistency
        result = compute_pmf_score(ScoringInput(flows=strong_flows))
        assert result.verdict is Verdict.PMF_PARTIAL

        summary = fallback_summary(result)
        assert summary.one_line_summary == "Score 58/100 - PMF_PARTIAL."
        assert summary.recommended_next == "Fix gaps and re-prove."
        assert summary.gap_analysis == "Review breakdown and fix weakest components."
        assert summary.strengths == ()
        assert summary.risks == ()

    def test_no_pmf_with_hard_kill(self) -> None:
        result = compute_pmf_score(ScoringInput(consistency=ConsistencyInput(net_margin_pct=5)))
        summary = fallback_summary(result)
        assert summary.one_line_summary == "Score 18/100 - NO_PMF. Hard kill: Net margin < 15%."
        assert summary.recommended_next == "Kill or pivot."
        assert summary.gap_analysis is None

    def test_confirmed(self, strong_flows: list[FlowRecord]) -> None:
        result = compute_pmf_score(
            ScoringInput(
                flows=strong_flows,
                signal_quality_score=70,
                accelerating_signals=True,
            )
        )
        summary = fallback_summary(result)
        assert result.verdict is Verdict.PMF_CONFIRMED
        assert summary.recommended_next == "Proceed to scale."
        assert summary.gap_analysis is None
        assert summary.score_explanation == "Summary could not be generated."


def test_format_breakdown_empty_input() -> None:
    text = format_breakdown(compute_pmf_score(ScoringInput()))
    assert text.splitlines() == [
        "Foundation: 0/40",
        "  Pain 0/10, Customer 0/10, Solution 0/10, Price 0/5, Channel 0/5",
        "Experiment: 5/30",
        "  Primary metric 0/10, Gates 0/10, Signal quality 0/5, Integrity 5/5",
        "Consistency: 13/30",
        "Penalties: 0, Modifiers: +0",
    ]
