"""Consistency sub-score (max 30) from post-launch steady-state figures.

Each figure is bucketed independently. The Sean Ellis figure is optional:
when absent it scores 0 and is marked skipped rather than failing.
"""

from __future__ import annotations

from pmfcore.constants import (
    CANCEL_RATE_MAX,
    CANCEL_RATE_TIERS,
    CPA_STABILITY_FLOOR_SCORE,
    CPA_STABILITY_MAX,
    CPA_STABILITY_TIERS,
    DEFAULT_CPA_STABILITY_PCT,
    NET_MARGIN_MAX,
    NET_MARGIN_TIERS,
    REPEAT_BUYER_TIERS,
    REPEAT_BUYERS_MAX,
    SEAN_ELLIS_MAX,
    SEAN_ELLIS_TIERS,
)
from pmfcore.models.records import ConsistencyInput
from pmfcore.scoring.models import ComponentScore, ConsistencyBreakdown, SeanEllisComponentScore
from pmfcore.scoring.tiers import tier_at_least, tier_at_most

NO_DATA = "No data"


def _pct_label(value: float) -> str:
    return f"{value:g}%"


def score_consistency(consistency: ConsistencyInput | None) -> ConsistencyBreakdown:
    """Score post-launch consistency.

    Absent CPA stability counts as fully stable; absent margin, cancel rate
    and repeat-buyer figures count as 0%.
    """
    c = consistency or ConsistencyInput()

    stability = (
        c.cpa_stability_pct if c.cpa_stability_pct is not None else DEFAULT_CPA_STABILITY_PCT
    )
    margin = c.net_margin_pct if c.net_margin_pct is not None else 0.0
    cancel = c.cancel_rate_pct if c.cancel_rate_pct is not None else 0.0
    repeat = c.repeat_buyer_pct if c.repeat_buyer_pct is not None else 0.0

    cpa_stability = ComponentScore(
        score=tier_at_least(stability, CPA_STABILITY_TIERS, floor=CPA_STABILITY_FLOOR_SCORE),
        max=CPA_STABILITY_MAX,
        label=f"Within {100 - stability:g}% variance",
    )
    net_margin = ComponentScore(
        score=tier_at_least(margin, NET_MARGIN_TIERS),
        max=NET_MARGIN_MAX,
        label=_pct_label(margin),
    )
    cancel_rate = ComponentScore(
        score=tier_at_most(cancel, CANCEL_RATE_TIERS),
        max=CANCEL_RATE_MAX,
        label=_pct_label(cancel),
    )
    repeat_buyers = ComponentScore(
        score=tier_at_least(repeat, REPEAT_BUYER_TIERS),
        max=REPEAT_BUYERS_MAX,
        label=_pct_label(repeat),
    )
    if c.sean_ellis_pct is None:
        sean_ellis = SeanEllisComponentScore(
            score=0, max=SEAN_ELLIS_MAX, label=NO_DATA, skipped=True
        )
    else:
        sean_ellis = SeanEllisComponentScore(
            score=tier_at_least(c.sean_ellis_pct, SEAN_ELLIS_TIERS),
            max=SEAN_ELLIS_MAX,
            label=_pct_label(c.sean_ellis_pct),
            skipped=False,
        )

    return ConsistencyBreakdown(
        cpa_stability=cpa_stability,
        net_margin=net_margin,
        cancel_rate=cancel_rate,
        repeat_buyers=repeat_buyers,
        sean_ellis=sean_ellis,
        total=(
            cpa_stability.score
            + net_margin.score
            + cancel_rate.score
            + repeat_buyers.score
            + sean_ellis.score
        ),
    )
