"""Experiment results as seen by the gate evaluator.

Results are usually rebuilt from the latest signal checkpoint of an
experiment: the rows with the highest ``hours_elapsed``, keyed by metric
name.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from pmfcore.models.cpa import UNDEFINED_CPA, Cpa, DefinedCpa, cpa_from
from pmfcore.models.records import SignalRecord
from pmfcore.numeric import to_optional_number


class ExperimentResults(BaseModel):
    """Numeric results for one experiment. Any field may be absent.

    Metrics beyond the named ones are retained as extra fields.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    cpa: float | None = None
    ctr: float | None = None
    message_to_order_rate: float | None = None
    orders: float | None = None
    orders_placed: float | None = None
    spend: float | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _parse_optional(cls, v: Any) -> float | None:
        return to_optional_number(v)

    def effective_cpa(self) -> Cpa:
        """Given CPA, else spend per placed order, else undefined."""
        if self.cpa is not None:
            return DefinedCpa(value=self.cpa)
        if self.orders_placed:
            return cpa_from(self.spend or 0.0, self.orders_placed)
        return UNDEFINED_CPA

    def order_count(self) -> float:
        if self.orders is not None:
            return self.orders
        return self.orders_placed or 0.0

    def ctr_pct(self) -> float:
        return self.ctr or 0.0

    def message_to_order_pct(self) -> float:
        return (self.message_to_order_rate or 0.0) * 100


def latest_checkpoint(signals: Iterable[SignalRecord], experiment_id: str) -> list[SignalRecord]:
    """Rows of the most recent checkpoint (max ``hours_elapsed``) for an experiment."""
    rows = [s for s in signals if s.experiment_id == experiment_id]
    if not rows:
        return []
    latest = max(s.hours_elapsed for s in rows)
    return [s for s in rows if s.hours_elapsed == latest]


def build_results_from_signals(
    signals: Iterable[SignalRecord],
    experiment_id: str,
) -> ExperimentResults:
    """Rebuild experiment results from its latest signal checkpoint.

    Later rows for the same metric win. ``orders`` and ``orders_placed``
    alias each other, preferring ``orders_placed``. A CPA row without a
    value leaves the CPA to be derived, so a checkpoint without orders
    reads back as undefined.
    """
    values: dict[str, float | None] = {}
    for row in latest_checkpoint(signals, experiment_id):
        values[row.metric_name.lower()] = row.value

    orders = values.get("orders_placed", values.get("orders"))
    fields: dict[str, Any] = dict(values)
    fields["orders"] = orders
    fields["orders_placed"] = orders
    return ExperimentResults.model_validate(fields)
