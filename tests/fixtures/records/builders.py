"""Builders for flow records and signal checkpoints."""

from __future__ import annotations

from typing import Any

from pmfcore.models import FlowRecord, SignalRecord

EXPERIMENT_ID = "exp-001"


def make_flow(flow_number: int, data: dict[str, Any] | None = None, **fields: Any) -> FlowRecord:
    """Build a flow record, locked unless told otherwise."""
    fields.setdefault("locked", True)
    return FlowRecord.model_validate({"flow_number": flow_number, "data": data or {}, **fields})


def make_signals(
    experiment_id: str,
    metrics: dict[str, float],
    hours_elapsed: float = 72.0,
) -> list[SignalRecord]:
    """One checkpoint's worth of signal rows."""
    return [
        SignalRecord(
            experiment_id=experiment_id,
            metric_name=name,
            value=value,
            hours_elapsed=hours_elapsed,
        )
        for name, value in metrics.items()
    ]
