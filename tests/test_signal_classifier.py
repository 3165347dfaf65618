"""Rule classification, vanity-metric lock and external label merging."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from pmfcore.errors import ClassificationLockedError, PMFCoreError
from pmfcore.gates import GateName, build_results_from_signals, evaluate_gates
from pmfcore.models import Classification, SignalRecord, UndefinedCpa
from pmfcore.signals import (
    SignalItem,
    classify_by_rules,
    is_permanent_noise,
    merge_classifications,
    override_classification,
    permanent_noise_metrics,
    to_signal_records,
)

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


def _by_metric(items: list[SignalItem]) -> dict[str, Classification]:
    return {item.metric: item.classification for item in items}


class TestViableOrdersCheckpoint:
    def test_rule_classifications(self) -> None:
        items = classify_by_rules(VIABLE_CHECKPOINT)
        assert _by_metric(items) == {
            "impressions": Classification.NOISE,
            "orders_placed": Classification.STRONG,
            "cpa": Classification.STRONG,
        }

    def test_rule_order(self) -> None:
        items = classify_by_rules(VIABLE_CHECKPOINT)
        assert [item.metric for item in items] == ["impressions", "orders_placed", "cpa"]

    def test_clicks_and_cancel_rate_left_unclassified(self) -> None:
        metrics = _by_metric(classify_by_rules(VIABLE_CHECKPOINT))
        assert "clicks" not in metrics
        assert "cancel_rate" not in metrics

    def test_all_rule_items_are_marked(self) -> None:
        assert all(item.from_rules for item in classify_by_rules(VIABLE_CHECKPOINT))


class TestRules:
    def test_impressions_always_noise(self) -> None:
        items = classify_by_rules({})
        assert _by_metric(items) == {"impressions": Classification.NOISE}

    def test_clicks_without_messages_is_weak(self) -> None:
        items = _by_metric(classify_by_rules({"clicks": 10, "messages_received": 0}))
        assert items["clicks"] is Classification.WEAK

    def test_nine_clicks_is_not_enough(self) -> None:
        items = _by_metric(classify_by_rules({"clicks": 9}))
        assert "clicks" not in items

    def test_messages_without_orders_is_weak(self) -> None:
        items = _by_metric(classify_by_rules({"messages_received": 10}))
        assert items["messages_received"] is Classification.WEAK

    def test_orders_at_expensive_cpa_not_strong(self) -> None:
        items = _by_metric(classify_by_rules({"spend": 60, "orders_placed": 3}))
        assert "orders_placed" not in items
        assert "cpa" not in items

    def test_cpa_exactly_viable_is_strong(self) -> None:
        items = _by_metric(classify_by_rules({"spend": 45, "orders_placed": 3}))
        assert items["cpa"] is Classification.STRONG

    def test_high_cancel_rate_is_weak(self) -> None:
        items = _by_metric(classify_by_rules({"orders_placed": 5, "orders_canceled": 2}))
        assert items["cancel_rate"] is Classification.WEAK

    def test_cancel_rate_below_threshold(self) -> None:
        items = _by_metric(classify_by_rules({"orders_placed": 10, "orders_canceled": 3}))
        assert "cancel_rate" not in items


class TestVanityMetrics:
    @pytest.mark.parametrize("metric", ["likes", "Likes", "story views", "FOLLOWER_COUNT"])
    def test_recognised_after_normalisation(self, metric: str) -> None:
        assert is_permanent_noise(metric)

    def test_list_contains_impressions(self) -> None:
        assert "impressions" in permanent_noise_metrics()

    def test_order_metrics_are_not_vanity(self) -> None:
        assert not is_permanent_noise("orders_placed")

    @pytest.mark.parametrize(
        "classification", [Classification.WEAK, Classification.STRONG, Classification.PMF]
    )
    def test_cannot_build_non_noise_vanity_item(self, classification: Classification) -> None:
        with pytest.raises(ValidationError):
            SignalItem(metric="likes", value=500, classification=classification)

    def test_noise_vanity_item_is_valid(self) -> None:
        item = SignalItem(metric="reach", value=5000, classification=Classification.NOISE)
        assert item.classification is Classification.NOISE


class TestMergeClassifications:
    def test_external_label_for_rule_metric_is_dropped(self) -> None:
        rules = classify_by_rules(VIABLE_CHECKPOINT)
        merged = merge_classifications(
            rules, [{"metric": "cpa", "value": 10, "classification": "WEAK"}]
        )
        assert merged == rules

    def test_external_vanity_label_forced_to_noise(self) -> None:
        merged = merge_classifications(
            [], [{"metric": "shares", "value": 40, "classification": "STRONG"}]
        )
        assert len(merged) == 1
        assert merged[0].classification is Classification.NOISE
        assert merged[0].from_rules is False

    def test_unknown_label_is_dropped(self) -> None:
        merged = merge_classifications(
            [], [{"metric": "dm_questions", "value": 4, "classification": "MAYBE"}]
        )
        assert merged == []

    def test_missing_metric_name_is_dropped(self) -> None:
        merged = merge_classifications([], [{"value": 4, "classification": "WEAK"}])
        assert merged == []

    def test_non_object_entry_is_dropped(self) -> None:
        merged = merge_classifications(
            [], ["cpa is great", {"metric": "dm_questions", "classification": "WEAK"}]
        )
        assert [item.metric for item in merged] == ["dm_questions"]

    def test_first_label_per_metric_wins(self) -> None:
        merged = merge_classifications(
            [],
            [
                {"metric": "DM Questions", "value": 4, "classification": "STRONG"},
                {"metric": "dm_questions", "value": 4, "classification": "WEAK"},
            ],
        )
        assert len(merged) == 1
        assert merged[0].classification is Classification.STRONG

    def test_unknown_label_does_not_claim_metric(self) -> None:
        merged = merge_classifications(
            [],
            [
                {"metric": "dm_questions", "classification": "MAYBE"},
                {"metric": "dm_questions", "classification": "WEAK"},
            ],
        )
        assert [item.classification for item in merged] == [Classification.WEAK]

    def test_new_metric_appended_after_rules(self) -> None:
        rules = classify_by_rules(VIABLE_CHECKPOINT)
        merged = merge_classifications(
            rules,
            [
                {
                    "metric": "price_questions",
                    "value": 6,
                    "classification": "strong",
                    "reason": "Buyers asking about price",
                }
            ],
        )
        assert merged[: len(rules)] == rules
        extra = merged[-1]
        assert extra.metric == "price_questions"
        assert extra.classification is Classification.STRONG
        assert extra.reason == "Buyers asking about price"
        assert extra.from_rules is False


class TestOverrideClassification:
    def test_rule_item_is_locked(self) -> None:
        cpa_item = next(i for i in classify_by_rules(VIABLE_CHECKPOINT) if i.metric == "cpa")
        with pytest.raises(ClassificationLockedError) as exc_info:
            override_classification(cpa_item, Classification.WEAK)
        assert exc_info.value.metric == "cpa"

    def test_vanity_item_is_locked(self) -> None:
        item = SignalItem(metric="saves", value=12, classification=Classification.NOISE)
        with pytest.raises(PMFCoreError):
            override_classification(item, Classification.STRONG)

    def test_external_item_can_be_relabelled(self) -> None:
        item = SignalItem(metric="dm_questions", value=4, classification=Classification.WEAK)
        relabelled = override_classification(item, Classification.STRONG, "Confirmed buyers")
        assert relabelled.classification is Classification.STRONG
        assert relabelled.reason == "Confirmed buyers"
        assert item.classification is Classification.WEAK


class TestToSignalRecords:
    def test_rows_tagged_by_origin(self) -> None:
        items = merge_classifications(
            classify_by_rules(VIABLE_CHECKPOINT),
            [{"metric": "dm_questions", "value": 4, "classification": "WEAK"}],
        )
        rows = to_signal_records("exp-1", items, hours_elapsed=24)
        assert all(isinstance(row, SignalRecord) for row in rows)
        assert [row.classified_by for row in rows] == ["rules", "rules", "rules", "external"]
        assert all(row.hours_elapsed == 24 for row in rows)

    def test_undefined_cpa_stored_without_value(self) -> None:
        item = SignalItem(metric="cpa", value="INFINITY", classification=Classification.WEAK)
        rows = to_signal_records("exp-1", [item], hours_elapsed=48)
        assert rows[0].value is None

    def test_zero_order_checkpoint_fails_cpa_gate(self) -> None:
        counters = {
            "spend": 30,
            "impressions": 1000,
            "clicks": 20,
            "messages_received": 15,
            "orders_placed": 0,
        }
        items = merge_classifications(
            classify_by_rules(counters),
            [{"metric": "cpa", "value": "INFINITY", "classification": "WEAK"}],
        )
        rows = to_signal_records("exp-1", items, hours_elapsed=72)

        results = build_results_from_signals(rows, "exp-1")
        cpa_gate = evaluate_gates(results).by_name(GateName.CPA)

        assert results.cpa is None
        assert isinstance(results.effective_cpa(), UndefinedCpa)
        assert cpa_gate.passed is False
        assert cpa_gate.value is None
        assert cpa_gate.display_value == "n/a"
