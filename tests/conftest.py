"""Pytest configuration and fixtures for pmfcore tests.

Provides a product that scores full marks on every component, so tests can
degrade one input at a time and check the effect in isolation.
"""

from __future__ import annotations

import pytest

from pmfcore.models import (
    ConsistencyInput,
    DecisionRecord,
    ExperimentRecord,
    FlowRecord,
    SignalRecord,
)
from tests.fixtures.records import EXPERIMENT_ID, make_flow, make_signals


@pytest.fixture
def strong_flows() -> list[FlowRecord]:
    """Stages 1-6 locked with the best possible answers."""
    return [
        make_flow(1, {"confidence": "customers"}),
        make_flow(2, {"confidence": "observed"}),
        make_flow(3, {"ai_verdict": "STRONG"}),
        make_flow(
            4,
            {
                "honesty_verdict": "HONEST",
                "committed_tier": "MID-RANGE",
                "committed_price_usd": 40,
            },
        ),
        make_flow(5, {"picked_from_weak": False, "capability_complete": True}),
        make_flow(6, {"signal_quality_score": 70, "accelerating_signals": True}),
    ]


@pytest.fixture
def experiment() -> ExperimentRecord:
    return ExperimentRecord.model_validate(
        {
            "id": EXPERIMENT_ID,
            "hypothesis": "Busy parents will pre-order meal kits from an Instagram ad",
            "primary_metric": {"target": "orders", "unit": "count"},
            "kill_condition": {"trigger": "zero orders after $30 spend", "timepoint": "72h"},
            "results": {
                "success_criteria": "3+ orders in 72h at CPA under $2.50",
                "failure_criteria": "zero orders after $30 spend",
            },
            "status": "running",
        }
    )


@pytest.fixture
def strong_signals() -> list[SignalRecord]:
    """An early checkpoint followed by a strong latest checkpoint."""
    early = make_signals(
        EXPERIMENT_ID,
        {"spend": 4.0, "orders_placed": 1, "ctr": 0.5, "message_to_order_rate": 0.1},
        hours_elapsed=24.0,
    )
    latest = make_signals(
        EXPERIMENT_ID,
        {
            "spend": 10.0,
            "orders_placed": 5,
            "cpa": 2.0,
            "ctr": 2.0,
            "message_to_order_rate": 0.5,
        },
        hours_elapsed=72.0,
    )
    return early + latest


@pytest.fixture
def go_decision() -> DecisionRecord:
    return DecisionRecord(
        experiment_id=EXPERIMENT_ID,
        human_decision="GO",
        ai_recommendation="GO",
    )


@pytest.fixture
def strong_consistency() -> ConsistencyInput:
    return ConsistencyInput(
        cpa_stability_pct=90,
        net_margin_pct=35,
        cancel_rate_pct=10,
        repeat_buyer_pct=20,
        sean_ellis_pct=45,
    )
