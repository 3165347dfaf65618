"""Comparison of experiment results with free-text success/failure criteria.

Criteria are written by the operator before the experiment runs, in plain
language ("3+ orders in 72h", "zero orders after $30"). Matching is a
keyword heuristic kept behind the ``CriteriaMatcher`` protocol so a
structured criteria format can replace it without touching gate or
recommendation logic.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from enum import StrEnum
from typing import Any, Protocol

from pmfcore.constants import (
    GATE_CPA_MAX_USD,
    GATE_CTR_MIN_PCT,
    GATE_MESSAGE_ORDER_MIN_PCT,
    GATE_ORDERS_MIN,
)
from pmfcore.gates.results import ExperimentResults
from pmfcore.models.cpa import cpa_at_most
from pmfcore.models.records import ExperimentCriteria, ExperimentRecord

logger = logging.getLogger(__name__)


class CriteriaVerdict(StrEnum):
    """How results compare with the pre-committed criteria."""

    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    CONTRADICTORY = "CONTRADICTORY"
    AMBIGUOUS = "AMBIGUOUS"


class CriteriaMatcher(Protocol):
    """Decides whether results satisfy a criteria text."""

    def success_met(self, text: str, results: ExperimentResults) -> bool: ...

    def failure_met(self, text: str, results: ExperimentResults) -> bool: ...


_ORDER_COUNT = re.compile(r"\d+\+?\s*orders?", re.IGNORECASE)
_CPA = re.compile(r"cpa|cost.*per", re.IGNORECASE)
_CTR = re.compile(r"ctr|click", re.IGNORECASE)
_CONVERSION = re.compile(r"message.*order|conversion", re.IGNORECASE)
_NO_ORDERS = re.compile(r"zero\s*orders?|no\s*orders?", re.IGNORECASE)
_ZERO_ORDERS = re.compile(r"0\s*orders?", re.IGNORECASE)


class RegexCriteriaMatcher:
    """Keyword heuristic over natural-language criteria.

    Success text is satisfied when any mentioned metric meets its gate
    threshold; failure text is satisfied when it names zero orders and
    there were none.
    """

    def success_met(self, text: str, results: ExperimentResults) -> bool:
        if _ORDER_COUNT.search(text) and results.order_count() >= GATE_ORDERS_MIN:
            return True
        if _CPA.search(text) and cpa_at_most(results.effective_cpa(), GATE_CPA_MAX_USD):
            return True
        if _CTR.search(text) and results.ctr_pct() >= GATE_CTR_MIN_PCT:
            return True
        if (
            _CONVERSION.search(text)
            and results.message_to_order_pct() >= GATE_MESSAGE_ORDER_MIN_PCT
        ):
            return True
        return False

    def failure_met(self, text: str, results: ExperimentResults) -> bool:
        if results.order_count() != 0:
            return False
        return bool(_NO_ORDERS.search(text) or _ZERO_ORDERS.search(text))


DEFAULT_MATCHER: CriteriaMatcher = RegexCriteriaMatcher()


def _criteria_of(
    experiment: ExperimentRecord | ExperimentCriteria | Mapping[str, Any],
) -> ExperimentCriteria:
    if isinstance(experiment, ExperimentRecord):
        return experiment.results
    if isinstance(experiment, ExperimentCriteria):
        return experiment
    return ExperimentCriteria.model_validate(dict(experiment))


def evaluate_criteria(
    experiment: ExperimentRecord | ExperimentCriteria | Mapping[str, Any],
    results: ExperimentResults | Mapping[str, Any],
    matcher: CriteriaMatcher | None = None,
) -> CriteriaVerdict:
    """Compare results against an experiment's success/failure criteria.

    Args:
        experiment: The experiment, its criteria container, or a raw mapping
            with ``success_criteria`` / ``failure_criteria``.
        results: Experiment results.
        matcher: Criteria matcher; the keyword heuristic when omitted.

    Returns:
        SUCCESS or FAILURE when exactly one side matched, CONTRADICTORY when
        both did, AMBIGUOUS when neither did or there is no criteria text.
    """
    criteria = _criteria_of(experiment)
    if not isinstance(results, ExperimentResults):
        results = ExperimentResults.model_validate(dict(results))
    matcher = matcher or DEFAULT_MATCHER

    if not criteria.success_criteria and not criteria.failure_criteria:
        return CriteriaVerdict.AMBIGUOUS

    success_met = bool(criteria.success_criteria) and matcher.success_met(
        criteria.success_criteria, results
    )
    failure_met = bool(criteria.failure_criteria) and matcher.failure_met(
        criteria.failure_criteria, results
    )

    if success_met and failure_met:
        verdict = CriteriaVerdict.CONTRADICTORY
    elif success_met:
        verdict = CriteriaVerdict.SUCCESS
    elif failure_met:
        verdict = CriteriaVerdict.FAILURE
    else:
        verdict = CriteriaVerdict.AMBIGUOUS
    logger.debug("Criteria verdict: %s", verdict.value)
    return verdict
