"""Metric derivation tests.

Covers ratio formulas, half-up rounding, undefined CPA, the cancel-rate
denominator fallback, and lenient coercion of raw counters.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from pmfcore.models import DefinedCpa, UndefinedCpa
from pmfcore.signals import ComputedMetrics, RawCounters, compute_metrics

VIABLE_CHECKPOINT = {
    "spend": 30,
    "impressions": 1000,
    "clicks": 20,
    "messages_received": 15,
    "orders_placed": 3,
    "orders_delivered": 2,
    "orders_canceled": 1,
    "hours_elapsed": 24,
}


class TestThreeOrderCheckpoint:
    """Reference checkpoint with three orders at $10 each."""

    def test_ctr(self) -> None:
        assert compute_metrics(VIABLE_CHECKPOINT).ctr == pytest.approx(2.0)

    def test_cpa(self) -> None:
        assert compute_metrics(VIABLE_CHECKPOINT).cpa == DefinedCpa(value=10.0)

    def test_message_to_order_rate(self) -> None:
        assert compute_metrics(VIABLE_CHECKPOINT).message_to_order_rate == pytest.approx(0.2)

    def test_cancel_rate(self) -> None:
        assert compute_metrics(VIABLE_CHECKPOINT).cancel_rate == pytest.approx(33.33)

    def test_accepts_model_input(self) -> None:
        from_model = compute_metrics(RawCounters(**VIABLE_CHECKPOINT))
        assert from_model == compute_metrics(VIABLE_CHECKPOINT)


class TestUndefinedCpa:
    def test_zero_orders_gives_undefined_cpa(self) -> None:
        metrics = compute_metrics({"spend": 25, "orders_placed": 0})
        assert isinstance(metrics.cpa, UndefinedCpa)

    def test_undefined_cpa_renders_as_label(self) -> None:
        metrics = compute_metrics({"spend": 25})
        assert metrics.to_dict()["cpa"] == "INFINITY"

    def test_defined_cpa_renders_as_number(self) -> None:
        metrics = compute_metrics({"spend": 25, "orders_placed": 5})
        assert metrics.to_dict()["cpa"] == pytest.approx(5.0)


class TestZeroDenominators:
    def test_no_impressions_gives_zero_ctr(self) -> None:
        assert compute_metrics({"clicks": 5}).ctr == 0.0

    def test_no_messages_gives_zero_conversion(self) -> None:
        assert compute_metrics({"orders_placed": 2}).message_to_order_rate == 0.0

    def test_all_empty_counters(self) -> None:
        metrics = compute_metrics({})
        assert metrics.ctr == 0.0
        assert metrics.message_to_order_rate == 0.0
        assert metrics.cancel_rate == 0.0


class TestCancelRateDenominator:
    def test_uses_orders_placed(self) -> None:
        metrics = compute_metrics({"orders_placed": 4, "orders_canceled": 1})
        assert metrics.cancel_rate == pytest.approx(25.0)

    def test_falls_back_to_delivered_plus_canceled(self) -> None:
        metrics = compute_metrics({"orders_delivered": 3, "orders_canceled": 1})
        assert metrics.cancel_rate == pytest.approx(25.0)

    def test_cancellations_without_any_orders(self) -> None:
        metrics = compute_metrics({"orders_canceled": 2})
        assert metrics.cancel_rate == pytest.approx(100.0)


class TestRounding:
    def test_ctr_two_decimals(self) -> None:
        metrics = compute_metrics({"impressions": 3, "clicks": 1})
        assert metrics.ctr == pytest.approx(33.33)

    def test_conversion_three_decimals(self) -> None:
        metrics = compute_metrics({"messages_received": 3, "orders_placed": 2})
        assert metrics.message_to_order_rate == pytest.approx(0.667)

    def test_cpa_rounds_half_up(self) -> None:
        metrics = compute_metrics({"spend": 1.005, "orders_placed": 1})
        assert metrics.cpa == DefinedCpa(value=1.01)


class TestCounterCoercion:
    def test_numeric_strings_are_parsed(self) -> None:
        metrics = compute_metrics({"spend": "30", "orders_placed": "3"})
        assert metrics.cpa == DefinedCpa(value=10.0)

    def test_garbage_becomes_zero(self) -> None:
        counters = RawCounters.model_validate({"spend": "lots", "clicks": None})
        assert counters.spend == 0.0
        assert counters.clicks == 0.0

    def test_unknown_counters_are_ignored(self) -> None:
        counters = RawCounters.model_validate({"spend": 5, "likes": 900})
        assert not hasattr(counters, "likes")

    def test_result_is_frozen(self) -> None:
        metrics = compute_metrics(VIABLE_CHECKPOINT)
        assert isinstance(metrics, ComputedMetrics)
        with pytest.raises(ValidationError):
            metrics.ctr = 5.0  # type: ignore[misc]
