"""Threshold bucketing for tiered sub-scores."""

from __future__ import annotations

from collections.abc import Sequence


def tier_at_least(value: float, tiers: Sequence[tuple[float, int]], floor: int = 0) -> int:
    """Score of the first ``(minimum, score)`` tier that *value* reaches."""
    for minimum, score in tiers:
        if value >= minimum:
            return score
    return floor


def tier_at_most(value: float, tiers: Sequence[tuple[float, int]], floor: int = 0) -> int:
    """Score of the first ``(maximum, score)`` tier that *value* stays within."""
    for maximum, score in tiers:
        if value <= maximum:
            return score
    return floor
