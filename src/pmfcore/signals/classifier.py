"""Rule-based signal/noise classification.

Rules run before any qualitative classifier and their output is final:
an external classifier may only label metrics the rules left alone, and
its labels are merged alongside the rule output. Vanity metrics are
permanently NOISE; a ``SignalItem`` that says otherwise cannot be built.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

from pmfcore.constants import (
    PERMANENT_NOISE_METRICS,
    RULE_MIN_CLICKS_WITHOUT_MESSAGES,
    RULE_MIN_MESSAGES_WITHOUT_ORDERS,
    RULE_MIN_STRONG_ORDERS,
    RULE_WEAK_CANCEL_RATE_PCT,
    VIABLE_CPA_USD,
)
from pmfcore.errors import ClassificationLockedError
from pmfcore.models.cpa import DefinedCpa
from pmfcore.models.records import (
    Classification,
    SignalRecord,
    is_permanent_noise,
    normalize_metric_name,
    parse_classification,
)
from pmfcore.signals.metrics import ComputedMetrics, RawCounters, coerce_counters, compute_metrics

logger = logging.getLogger(__name__)

CLASSIFIED_BY_RULES = "rules"
CLASSIFIED_BY_EXTERNAL = "external"


def permanent_noise_metrics() -> list[str]:
    """The vanity metric list, for display."""
    return list(PERMANENT_NOISE_METRICS)


class SignalItem(BaseModel):
    """One classified metric."""

    model_config = ConfigDict(frozen=True)

    metric: str
    value: float | str
    classification: Classification
    reason: str = ""
    action: str = ""
    from_rules: bool = False

    @model_validator(mode="after")
    def _vanity_is_noise(self) -> SignalItem:
        if is_permanent_noise(self.metric) and self.classification is not Classification.NOISE:
            raise ValueError(
                f"'{self.metric}' is a vanity metric and must be NOISE, "
                f"got {self.classification.value}"
            )
        return self


def classify_by_rules(
    raw: RawCounters | Mapping[str, Any],
    computed: ComputedMetrics | None = None,
) -> list[SignalItem]:
    """Apply the fixed classification rules to one checkpoint.

    Args:
        raw: Raw checkpoint counters.
        computed: Derived metrics; computed from *raw* when omitted.

    Returns:
        Rule classifications in evaluation order, each ``from_rules=True``.
    """
    counters = coerce_counters(raw)
    metrics = computed if computed is not None else compute_metrics(counters)
    items: dict[str, SignalItem] = {}

    items["impressions"] = SignalItem(
        metric="impressions",
        value=counters.impressions,
        classification=Classification.NOISE,
        reason="Vanity metric, not a buying signal",
        from_rules=True,
    )

    if counters.clicks >= RULE_MIN_CLICKS_WITHOUT_MESSAGES and counters.messages_received == 0:
        items["clicks"] = SignalItem(
            metric="clicks",
            value=counters.clicks,
            classification=Classification.WEAK,
            reason="High clicks with zero messages: interest but no intent",
            from_rules=True,
        )

    cpa = metrics.cpa
    if (
        counters.orders_placed >= RULE_MIN_STRONG_ORDERS
        and isinstance(cpa, DefinedCpa)
        and cpa.value <= VIABLE_CPA_USD
    ):
        items["orders_placed"] = SignalItem(
            metric="orders_placed",
            value=counters.orders_placed,
            classification=Classification.STRONG,
            reason=f"{RULE_MIN_STRONG_ORDERS}+ orders at ${cpa.value:.2f} CPA (viable)",
            from_rules=True,
        )
        items["cpa"] = SignalItem(
            metric="cpa",
            value=cpa.value,
            classification=Classification.STRONG,
            reason="Viable CPA with volume",
            from_rules=True,
        )

    if (
        counters.messages_received >= RULE_MIN_MESSAGES_WITHOUT_ORDERS
        and counters.orders_placed == 0
    ):
        items["messages_received"] = SignalItem(
            metric="messages_received",
            value=counters.messages_received,
            classification=Classification.WEAK,
            reason=f"{RULE_MIN_MESSAGES_WITHOUT_ORDERS}+ messages but zero orders",
            from_rules=True,
        )

    if metrics.cancel_rate >= RULE_WEAK_CANCEL_RATE_PCT:
        items["cancel_rate"] = SignalItem(
            metric="cancel_rate",
            value=metrics.cancel_rate,
            classification=Classification.WEAK,
            reason=f"{RULE_WEAK_CANCEL_RATE_PCT:g}%+ cancel rate",
            from_rules=True,
        )

    logger.debug(
        "Rule classifications: %s",
        {metric: item.classification.value for metric, item in items.items()},
    )
    return list(items.values())


def merge_classifications(
    rule_items: Sequence[SignalItem],
    external_items: Iterable[SignalItem | Mapping[str, Any]],
) -> list[SignalItem]:
    """Merge an external classifier's labels alongside the rule output.

    External labels for metrics the rules already classified are dropped.
    External labels for vanity metrics are forced to NOISE. Entries with no
    metric name or an unknown label are dropped, as is any later label for a
    metric already labelled in the same batch.

    Returns:
        Rule items first, then the accepted external items in input order.
    """
    ruled = {normalize_metric_name(item.metric) for item in rule_items}
    accepted: set[str] = set()
    merged: list[SignalItem] = list(rule_items)

    for entry in external_items:
        if isinstance(entry, SignalItem):
            fields = entry.model_dump()
        elif isinstance(entry, Mapping):
            fields = dict(entry)
        else:
            logger.warning("Dropping external classification that is not an object: %r", entry)
            continue
        metric = str(fields.get("metric") or "").strip()
        if not metric:
            logger.warning("Dropping external classification without a metric name")
            continue
        name = normalize_metric_name(metric)
        if name in ruled:
            logger.debug("Ignoring external label for rule-classified metric %s", metric)
            continue
        if name in accepted:
            logger.warning("Dropping duplicate external classification for %s", metric)
            continue

        classification = parse_classification(fields.get("classification"))
        if classification is None:
            logger.warning(
                "Dropping external classification for %s: unknown label %r",
                metric,
                fields.get("classification"),
            )
            continue

        reason = str(fields.get("reason") or "")
        if is_permanent_noise(metric) and classification is not Classification.NOISE:
            logger.warning(
                "External classifier labelled vanity metric %s as %s; forcing NOISE",
                metric,
                classification.value,
            )
            classification = Classification.NOISE
            reason = "Vanity metric, permanently NOISE"

        value = fields.get("value")
        merged.append(
            SignalItem(
                metric=metric,
                value=value if isinstance(value, (int, float, str)) else 0.0,
                classification=classification,
                reason=reason,
                action=str(fields.get("action") or ""),
                from_rules=False,
            )
        )
        accepted.add(name)

    return merged


def override_classification(
    item: SignalItem,
    classification: Classification,
    reason: str = "",
) -> SignalItem:
    """Relabel a metric that neither the rules nor the vanity list own.

    Raises:
        ClassificationLockedError: If *item* came from the rules or is a
            vanity metric.
    """
    if item.from_rules:
        raise ClassificationLockedError(item.metric, "classified by rules")
    if is_permanent_noise(item.metric):
        raise ClassificationLockedError(item.metric, "vanity metric is permanently NOISE")
    return SignalItem(
        metric=item.metric,
        value=item.value,
        classification=classification,
        reason=reason or item.reason,
        action=item.action,
        from_rules=False,
    )


def to_signal_records(
    experiment_id: str,
    items: Iterable[SignalItem],
    hours_elapsed: float,
) -> list[SignalRecord]:
    """Convert classified items into checkpoint rows for the signal log.

    An undefined CPA is stored without a value so it reads back as undefined.
    """
    rows: list[SignalRecord] = []
    for item in items:
        rows.append(
            SignalRecord(
                experiment_id=experiment_id,
                metric_name=item.metric,
                value=item.value,
                classification=item.classification,
                hours_elapsed=hours_elapsed,
                classified_by=CLASSIFIED_BY_RULES if item.from_rules else CLASSIFIED_BY_EXTERNAL,
            )
        )
    return rows
