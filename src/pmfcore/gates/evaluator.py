"""Four fixed pass/fail gates on experiment results.

Gates are independent of each other and of any qualitative judgment:
CPA at or under the ceiling, CTR at or over the floor, message-to-order
conversion at or over the floor, and a minimum order count.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from pmfcore.constants import (
    GATE_COUNT,
    GATE_CPA_MAX_USD,
    GATE_CTR_MIN_PCT,
    GATE_MESSAGE_ORDER_MIN_PCT,
    GATE_ORDERS_MIN,
)
from pmfcore.gates.results import ExperimentResults
from pmfcore.models.cpa import DefinedCpa, cpa_at_most

logger = logging.getLogger(__name__)

UNDEFINED_DISPLAY = "n/a"


class GateName(StrEnum):
    """The four experiment gates."""

    CPA = "CPA"
    CTR = "CTR"
    MESSAGE_TO_ORDER = "MESSAGE_TO_ORDER"
    ORDERS = "ORDERS"


class GateThresholds(BaseModel):
    """Gate cutoffs. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    cpa_max_usd: float = Field(default=GATE_CPA_MAX_USD, gt=0.0)
    ctr_min_pct: float = Field(default=GATE_CTR_MIN_PCT, ge=0.0)
    message_order_min_pct: float = Field(default=GATE_MESSAGE_ORDER_MIN_PCT, ge=0.0, le=100.0)
    orders_min: int = Field(default=GATE_ORDERS_MIN, ge=1)


DEFAULT_GATE_THRESHOLDS = GateThresholds()


class GateResult(BaseModel):
    """Outcome of a single gate, with its raw value for display.

    ``value`` is None when the metric is undefined (CPA with no orders).
    """

    model_config = ConfigDict(frozen=True)

    gate: GateName
    name: str
    passed: bool
    value: float | None
    display_value: str
    threshold: str


class GatesResult(BaseModel):
    """All four gate outcomes and the pass count."""

    model_config = ConfigDict(frozen=True)

    pass_count: int = Field(..., ge=0, le=GATE_COUNT)
    gates: tuple[GateResult, ...]

    @model_validator(mode="after")
    def _require_all_gates(self) -> GatesResult:
        if len(self.gates) != GATE_COUNT:
            raise ValueError(f"Expected exactly {GATE_COUNT} gates, got {len(self.gates)}")
        if self.pass_count != sum(1 for g in self.gates if g.passed):
            raise ValueError("pass_count does not match gate outcomes")
        return self

    def by_name(self, gate: GateName) -> GateResult:
        return next(g for g in self.gates if g.gate is gate)


def _display(value: float) -> str:
    return f"{value:g}"


def evaluate_gates(
    results: ExperimentResults | Mapping[str, Any],
    thresholds: GateThresholds = DEFAULT_GATE_THRESHOLDS,
) -> GatesResult:
    """Check experiment results against the four gates.

    Args:
        results: Experiment results, as a model or a raw mapping.
        thresholds: Gate cutoffs.

    Returns:
        GatesResult with exactly four gates.
    """
    if not isinstance(results, ExperimentResults):
        results = ExperimentResults.model_validate(dict(results))

    cpa = results.effective_cpa()
    ctr = results.ctr_pct()
    message_to_order = results.message_to_order_pct()
    orders = results.order_count()

    cpa_value = cpa.value if isinstance(cpa, DefinedCpa) else None
    gates = (
        GateResult(
            gate=GateName.CPA,
            name=f"CPA ≤ ${thresholds.cpa_max_usd:.2f}",
            passed=cpa_at_most(cpa, thresholds.cpa_max_usd),
            value=cpa_value,
            display_value=f"{cpa_value:.2f}" if cpa_value is not None else UNDEFINED_DISPLAY,
            threshold=f"≤ {_display(thresholds.cpa_max_usd)}",
        ),
        GateResult(
            gate=GateName.CTR,
            name=f"CTR ≥ {_display(thresholds.ctr_min_pct)}%",
            passed=ctr >= thresholds.ctr_min_pct,
            value=ctr,
            display_value=f"{_display(ctr)}%",
            threshold=f"≥ {_display(thresholds.ctr_min_pct)}%",
        ),
        GateResult(
            gate=GateName.MESSAGE_TO_ORDER,
            name=f"Message-to-Order ≥ {_display(thresholds.message_order_min_pct)}%",
            passed=message_to_order >= thresholds.message_order_min_pct,
            value=message_to_order,
            display_value=f"{_display(message_to_order)}%",
            threshold=f"≥ {_display(thresholds.message_order_min_pct)}%",
        ),
        GateResult(
            gate=GateName.ORDERS,
            name=f"Orders ≥ {thresholds.orders_min}",
            passed=orders >= thresholds.orders_min,
            value=orders,
            display_value=_display(orders),
            threshold=f"≥ {thresholds.orders_min}",
        ),
    )
    pass_count = sum(1 for g in gates if g.passed)
    logger.debug("Gates passed: %d/%d", pass_count, GATE_COUNT)
    return GatesResult(pass_count=pass_count, gates=gates)
