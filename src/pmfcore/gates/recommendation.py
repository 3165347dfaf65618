"""Rule-based GO/FIX/KILL recommendation.

Derived only from gate outcomes, the criteria verdict and the kill
trigger. A human may override it, at a recorded penalty.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from pmfcore.gates.criteria import CriteriaVerdict
from pmfcore.gates.evaluator import GatesResult
from pmfcore.models.records import DecisionAction


class RecommendationConfidence(StrEnum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"


class RuleRecommendation(BaseModel):
    """Recommendation with the rule that produced it."""

    model_config = ConfigDict(frozen=True)

    recommendation: DecisionAction
    confidence: RecommendationConfidence
    reason: str


def rule_recommendation(
    gates: GatesResult,
    criteria: CriteriaVerdict,
    kill_triggered: bool,
) -> RuleRecommendation:
    """Apply the recommendation rules in strict precedence; first match wins.

    1. kill triggered -> KILL (HIGH)
    2. SUCCESS with 3+ gates -> GO (HIGH)
    3. FAILURE with at most 1 gate -> KILL
    4. CONTRADICTORY or AMBIGUOUS -> FIX
    5. exactly 2 gates -> FIX
    6. otherwise -> KILL
    """
    criteria = CriteriaVerdict(criteria)
    passed = gates.pass_count

    if kill_triggered:
        return RuleRecommendation(
            recommendation=DecisionAction.KILL,
            confidence=RecommendationConfidence.HIGH,
            reason="Kill condition was triggered.",
        )

    if criteria is CriteriaVerdict.SUCCESS and passed >= 3:
        return RuleRecommendation(
            recommendation=DecisionAction.GO,
            confidence=RecommendationConfidence.HIGH,
            reason=f"Success criteria met with {passed} gates passed.",
        )

    if criteria is CriteriaVerdict.FAILURE and passed <= 1:
        return RuleRecommendation(
            recommendation=DecisionAction.KILL,
            confidence=RecommendationConfidence.MEDIUM,
            reason="Failure criteria met with 1 or fewer gates passed.",
        )

    if criteria in (CriteriaVerdict.CONTRADICTORY, CriteriaVerdict.AMBIGUOUS):
        return RuleRecommendation(
            recommendation=DecisionAction.FIX,
            confidence=RecommendationConfidence.MEDIUM,
            reason=f"Criteria verdict: {criteria.value}. Needs clarification.",
        )

    if passed == 2:
        return RuleRecommendation(
            recommendation=DecisionAction.FIX,
            confidence=RecommendationConfidence.MEDIUM,
            reason="2 gates passed: partial success, fix and retest.",
        )

    return RuleRecommendation(
        recommendation=DecisionAction.KILL,
        confidence=RecommendationConfidence.MEDIUM,
        reason="Insufficient gates passed and criteria not met.",
    )
