"""Derived experiment metrics.

Turns raw checkpoint counters into click-through rate, cost per
acquisition, message-to-order conversion and cancellation rate.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from pmfcore.models.cpa import Cpa, DefinedCpa, cpa_from, format_cpa
from pmfcore.numeric import round_half_up, to_number


class RawCounters(BaseModel):
    """Counters entered at an experiment checkpoint. Missing values are 0."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    spend: float = 0.0
    hours_elapsed: float = 0.0
    impressions: float = 0.0
    clicks: float = 0.0
    messages_received: float = 0.0
    orders_placed: float = 0.0
    orders_delivered: float = 0.0
    orders_canceled: float = 0.0

    @field_validator("*", mode="before")
    @classmethod
    def _parse_counter(cls, v: Any) -> float:
        return to_number(v)


class ComputedMetrics(BaseModel):
    """Ratios derived from one set of raw counters."""

    model_config = ConfigDict(frozen=True)

    ctr: float
    cpa: Cpa
    message_to_order_rate: float
    cancel_rate: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-safe dict; undefined CPA renders as a label."""
        cpa: float | str = (
            self.cpa.value if isinstance(self.cpa, DefinedCpa) else format_cpa(self.cpa)
        )
        return {
            "ctr": self.ctr,
            "cpa": cpa,
            "message_to_order_rate": self.message_to_order_rate,
            "cancel_rate": self.cancel_rate,
        }


def coerce_counters(raw: RawCounters | Mapping[str, Any]) -> RawCounters:
    """Accept either a validated model or a raw mapping."""
    if isinstance(raw, RawCounters):
        return raw
    return RawCounters.model_validate(dict(raw))


def compute_metrics(raw: RawCounters | Mapping[str, Any]) -> ComputedMetrics:
    """Compute derived metrics from raw counters.

    ctr is a percentage (2dp), cpa is spend per placed order (2dp, undefined
    with no orders), message_to_order_rate is a fraction (3dp) and
    cancel_rate is a percentage (2dp).
    """
    counters = coerce_counters(raw)

    ctr = counters.clicks / counters.impressions * 100 if counters.impressions > 0 else 0.0

    cpa = cpa_from(counters.spend, counters.orders_placed)
    if isinstance(cpa, DefinedCpa):
        cpa = DefinedCpa(value=round_half_up(cpa.value, 2))

    message_to_order_rate = (
        counters.orders_placed / counters.messages_received
        if counters.messages_received > 0
        else 0.0
    )

    placed_for_cancel = (
        counters.orders_placed
        or (counters.orders_delivered + counters.orders_canceled)
        or 1.0
    )
    cancel_rate = counters.orders_canceled / placed_for_cancel * 100

    return ComputedMetrics(
        ctr=round_half_up(ctr, 2),
        cpa=cpa,
        message_to_order_rate=round_half_up(message_to_order_rate, 3),
        cancel_rate=round_half_up(cancel_rate, 2),
    )
