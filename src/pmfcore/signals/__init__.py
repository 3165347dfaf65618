"""Metric derivation and rule-based signal classification."""

from pmfcore.signals.classifier import (
    SignalItem,
    classify_by_rules,
    is_permanent_noise,
    merge_classifications,
    override_classification,
    permanent_noise_metrics,
    to_signal_records,
)
from pmfcore.signals.metrics import ComputedMetrics, RawCounters, compute_metrics

__all__ = [
    "ComputedMetrics",
    "RawCounters",
    "SignalItem",
    "classify_by_rules",
    "compute_metrics",
    "is_permanent_noise",
    "merge_classifications",
    "override_classification",
    "permanent_noise_metrics",
    "to_signal_records",
]
