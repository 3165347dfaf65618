"""Exceptions raised by the PMF decision core.

Scoring is total over its inputs and never raises for missing or
malformed data. These errors cover policy violations only.
"""

from __future__ import annotations


class PMFCoreError(Exception):
    """Base class for decision-core errors."""


class ClassificationLockedError(PMFCoreError):
    """Raised when a caller tries to reclassify a locked metric.

    Rule-derived classifications and permanent-noise metrics cannot be
    overridden by any actor.
    """

    def __init__(self, metric: str, reason: str) -> None:
        self.metric = metric
        self.reason = reason
        super().__init__(f"Classification of '{metric}' is locked: {reason}")
