"""Deterministic record builders for pmfcore tests."""

from tests.fixtures.records.builders import EXPERIMENT_ID, make_flow, make_signals

__all__ = ["EXPERIMENT_ID", "make_flow", "make_signals"]
