"""Uncertainty ranking tests.

Weights sort descending; equal weights fall back to the category order
price, channel, differentiation, customer, pain.
"""

from __future__ import annotations

from pmfcore.uncertainty import (
    TIEBREAK_RANK,
    UncertaintyType,
    rank_uncertainties,
    top_uncertainty,
)
from tests.fixtures.records import make_flow


def _types(records: list) -> list[UncertaintyType]:
    return [u.type for u in rank_uncertainties(records)]


class TestGuessedPainAggressivePrice:
    def test_guessed_pain_and_aggressive_price(self) -> None:
        records = [
            make_flow(1, {"confidence": "guess"}),
            make_flow(4, {"committed_tier": "AGGRESSIVE"}),
        ]
        ranked = rank_uncertainties(records)
        assert [(u.type, u.weight) for u in ranked] == [
            (UncertaintyType.PAIN_UNVALIDATED, 30),
            (UncertaintyType.PRICE_AGGRESSIVE, 15),
        ]


class TestTriggers:
    def test_nothing_open_defaults_to_demand_validation(self) -> None:
        ranked = rank_uncertainties([])
        assert len(ranked) == 1
        assert ranked[0].type is UncertaintyType.DEMAND_VALIDATION
        assert ranked[0].weight == 20

    def test_evidence_based_answers_raise_nothing(self, strong_flows: list) -> None:
        assert _types(strong_flows) == [UncertaintyType.DEMAND_VALIDATION]

    def test_unlocked_stage_is_ignored(self) -> None:
        records = [make_flow(1, {"confidence": "guess"}, locked=False)]
        assert _types(records) == [UncertaintyType.DEMAND_VALIDATION]

    def test_was_guessed_flag_on_customer(self) -> None:
        records = [make_flow(2, {"confidence": "observed", "was_guessed": True})]
        assert _types(records) == [UncertaintyType.CUSTOMER_UNVALIDATED]

    def test_confidence_label_is_case_insensitive(self) -> None:
        assert _types([make_flow(1, {"confidence": "GUESS"})]) == [
            UncertaintyType.PAIN_UNVALIDATED
        ]

    def test_weak_solution_from_nested_verdict(self) -> None:
        records = [make_flow(3, {"ai_verdict": {"verdict": "weak"}})]
        assert _types(records) == [UncertaintyType.DIFFERENTIATION_UNCLEAR]

    def test_no_differentiation(self) -> None:
        ranked = rank_uncertainties([make_flow(3, {"ai_verdict": "NONE"})])
        assert ranked[0].type is UncertaintyType.NO_DIFFERENTIATION
        assert ranked[0].weight == 25

    def test_contradicted_price(self) -> None:
        records = [make_flow(4, {"honesty_verdict": "CONTRADICTED"})]
        assert _types(records) == [UncertaintyType.PRICE_OPTIMISTIC]

    def test_channel_override_on_record(self) -> None:
        records = [make_flow(5, {"picked_from_weak": True}, override_applied=True)]
        assert _types(records) == [UncertaintyType.CHANNEL_MISMATCH]

    def test_channel_override_in_payload(self) -> None:
        records = [make_flow(5, {"override_applied": True})]
        assert _types(records) == [UncertaintyType.CHANNEL_MISMATCH]

    def test_later_duplicate_flow_wins(self) -> None:
        records = [
            make_flow(1, {"confidence": "guess"}),
            make_flow(1, {"confidence": "customers"}),
        ]
        assert _types(records) == [UncertaintyType.DEMAND_VALIDATION]


class TestOrdering:
    def test_full_ranking(self) -> None:
        records = [
            make_flow(1, {"confidence": "guess"}),
            make_flow(2, {"confidence": "guess"}),
            make_flow(3, {"ai_verdict": "WEAK"}),
            make_flow(4, {"honesty_verdict": "CONTRADICTED", "committed_tier": "AGGRESSIVE"}),
            make_flow(5, {}, override_applied=True),
        ]
        assert _types(records) == [
            UncertaintyType.PAIN_UNVALIDATED,
            UncertaintyType.CUSTOMER_UNVALIDATED,
            UncertaintyType.PRICE_OPTIMISTIC,
            UncertaintyType.DIFFERENTIATION_UNCLEAR,
            UncertaintyType.PRICE_AGGRESSIVE,
            UncertaintyType.CHANNEL_MISMATCH,
        ]

    def test_differentiation_before_customer_at_equal_weight(self) -> None:
        records = [
            make_flow(2, {"confidence": "guess"}),
            make_flow(3, {"ai_verdict": "NONE"}),
        ]
        assert _types(records) == [
            UncertaintyType.NO_DIFFERENTIATION,
            UncertaintyType.CUSTOMER_UNVALIDATED,
        ]

    def test_weights_never_increase(self) -> None:
        records = [
            make_flow(4, {"committed_tier": "AGGRESSIVE"}),
            make_flow(1, {"confidence": "guess"}),
            make_flow(3, {"ai_verdict": "WEAK"}),
        ]
        weights = [u.weight for u in rank_uncertainties(records)]
        assert weights == sorted(weights, reverse=True)

    def test_tiebreak_ranks(self) -> None:
        assert TIEBREAK_RANK[UncertaintyType.PRICE_OPTIMISTIC] == 0
        assert TIEBREAK_RANK[UncertaintyType.EXECUTION_CAPABILITY] == 1
        assert TIEBREAK_RANK[UncertaintyType.PAIN_UNVALIDATED] == 4
        assert UncertaintyType.DEMAND_VALIDATION not in TIEBREAK_RANK


class TestTopUncertainty:
    def test_returns_highest_weight(self) -> None:
        records = [
            make_flow(4, {"committed_tier": "AGGRESSIVE"}),
            make_flow(2, {"was_guessed": True}),
        ]
        top = top_uncertainty(records)
        assert top.type is UncertaintyType.CUSTOMER_UNVALIDATED
        assert top.question == "Is this the right buyer?"
