"""Materialized records consumed by the decision core.

Flow records (one per stage per product), experiments, signal checkpoint
rows, human decisions, and post-launch consistency figures. All records
are frozen; the core never mutates caller-owned input.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from enum import StrEnum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

from pmfcore.constants import PERMANENT_NOISE_METRICS
from pmfcore.models.cpa import UNDEFINED_CPA_LABEL
from pmfcore.models.stages import StageData
from pmfcore.numeric import to_flag, to_number, to_optional_number

logger = logging.getLogger(__name__)

MAX_FLOW_NUMBER = 10

_NOISE_SET = frozenset(PERMANENT_NOISE_METRICS)


class Classification(StrEnum):
    """Signal/noise label for an experiment metric."""

    NOISE = "NOISE"
    WEAK = "WEAK"
    STRONG = "STRONG"
    PMF = "PMF"


class DecisionAction(StrEnum):
    """Verdict on an experiment, by a human or by the rules."""

    GO = "GO"
    FIX = "FIX"
    KILL = "KILL"


def parse_classification(value: Any) -> Classification | None:
    """Parse a classification label, or None when unrecognised."""
    if value is None:
        return None
    try:
        return Classification(str(value).strip().upper())
    except ValueError:
        return None


def parse_decision(value: Any) -> DecisionAction | None:
    """Parse a GO/FIX/KILL label, or None when unrecognised."""
    if value is None:
        return None


def normalize_metric_name(name: str) -> str:
    """Lower-case and underscore a metric name for comparison."""
    return "_".join(str(name).lower().split())


def is_permanent_noise(metric: str) -> bool:
    """True for vanity metrics that are always NOISE."""
    return normalize_metric_name(metric) in _NOISE_SET
    try:
        return DecisionAction(str(value).strip().upper())
    except ValueError:
        return None


class FlowRecord(BaseModel):
    """Answers for one questionnaire stage.

    ``locked`` never reverts to False and ``penalties`` only grows; use
    :meth:`lock` to produce the next state.
    """

    model_config = ConfigDict(frozen=True)

    flow_number: int = Field(..., ge=1, le=MAX_FLOW_NUMBER)
    data: StageData
    locked: bool = False
    penalties: float = Field(default=0.0, ge=0.0)
    override_applied: bool = False

    @model_validator(mode="before")
    @classmethod
    def _tag_stage_payload(cls, values: Any) -> Any:
        if not isinstance(values, Mapping):
            return values
        values = dict(values)
        data = values.get("data")
        if not isinstance(data, BaseModel):
            payload = dict(data) if isinstance(data, Mapping) else {}
            payload["stage"] = int(to_number(values.get("flow_number")))
            values["data"] = payload
        return values

    @field_validator("penalties", mode="before")
    @classmethod
    def _parse_penalties(cls, v: Any) -> float:
        return abs(to_number(v))

    @field_validator("locked", "override_applied", mode="before")
    @classmethod
    def _parse_flag(cls, v: Any) -> bool:
        return to_flag(v)

    @model_validator(mode="after")
    def _stage_matches_flow(self) -> FlowRecord:
        if self.data.stage != self.flow_number:
            raise ValueError(
                f"Stage payload for stage {self.data.stage} attached to flow {self.flow_number}"
            )
        return self

    def lock(self, penalty: float = 0.0) -> FlowRecord:
        """Return the locked successor of this record, adding *penalty*."""
        return self.model_copy(
            update={"locked": True, "penalties": self.penalties + abs(to_number(penalty))}
        )


class PrimaryMetric(BaseModel):
    """What the experiment is trying to move."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    target: str = "orders"
    unit: str | None = None

    @field_validator("target", mode="before")
    @classmethod
    def _parse_target(cls, v: Any) -> str:
        return "orders" if v is None else str(v)

    @field_validator("unit", mode="before")
    @classmethod
    def _parse_unit(cls, v: Any) -> str | None:
        return None if v is None else str(v)


class KillCondition(BaseModel):
    """Pre-committed condition under which the experiment is killed."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    trigger: str = ""
    timepoint: str = ""

    @model_validator(mode="before")
    @classmethod
    def _accept_plain_text(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"trigger": data}
        return data if isinstance(data, Mapping) else {}


class ExperimentCriteria(BaseModel):
    """Free-text success/failure criteria stored on an experiment.

    Other keys (checkpoints, notes) are retained untouched.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    success_criteria: str = ""
    failure_criteria: str = ""

    @field_validator("success_criteria", "failure_criteria", mode="before")
    @classmethod
    def _parse_text(cls, v: Any) -> str:
        return "" if v is None else str(v)


class ExperimentRecord(BaseModel):
    """A live market experiment owned by a product."""

    model_config = ConfigDict(frozen=True)

    id: str
    hypothesis: str = ""
    primary_metric: PrimaryMetric = Field(default_factory=PrimaryMetric)
    kill_condition: KillCondition = Field(default_factory=KillCondition)
    results: ExperimentCriteria = Field(default_factory=ExperimentCriteria)
    status: str | None = None

    @field_validator("id", "hypothesis", mode="before")
    @classmethod
    def _parse_text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, v: Any) -> str | None:
        return None if v is None else str(v)

    @field_validator("primary_metric", "kill_condition", "results", mode="before")
    @classmethod
    def _default_when_missing(cls, v: Any) -> Any:
        return {} if v is None else v


class SignalRecord(BaseModel):
    """One metric row of an experiment checkpoint. Append-only.

    ``value`` is None for a metric with no defined value, such as the CPA
    of a checkpoint without orders. Vanity metrics are always stored as
    NOISE whatever label they arrive with.
    """

    model_config = ConfigDict(frozen=True)

    experiment_id: str
    metric_name: str = ""
    value: float | None = 0.0
    classification: Classification | None = None
    hours_elapsed: float = 0.0
    classified_by: str | None = None

    @field_validator("experiment_id", "metric_name", mode="before")
    @classmethod
    def _parse_name(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("value", mode="before")
    @classmethod
    def _parse_value(cls, v: Any) -> float | None:
        if v is None:
            return None
        if isinstance(v, str) and v.strip().upper() == UNDEFINED_CPA_LABEL:
            return None
        if isinstance(v, float) and math.isinf(v):
            return None
        return to_number(v)

    @field_validator("hours_elapsed", mode="before")
    @classmethod
    def _parse_number(cls, v: Any) -> float:
        return to_number(v)

    @field_validator("classification", mode="before")
    @classmethod
    def _parse_classification(cls, v: Any) -> Classification | None:
        return parse_classification(v)

    @field_validator("classification")
    @classmethod
    def _vanity_is_noise(
        cls, v: Classification | None, info: ValidationInfo
    ) -> Classification | None:
        metric = info.data.get("metric_name", "")
        if v is None or v is Classification.NOISE or not is_permanent_noise(metric):
            return v
        logger.warning("Signal row labels vanity metric %s as %s; storing NOISE", metric, v.value)
        return Classification.NOISE


class DecisionRecord(BaseModel):
    """A human GO/FIX/KILL verdict, possibly overriding the rules."""

    model_config = ConfigDict(frozen=True)

    experiment_id: str | None = None
    human_decision: DecisionAction | None = None
    ai_recommendation: DecisionAction | None = None
    override_applied: bool = False
    override_penalty: float = Field(default=0.0, ge=0.0)

    @field_validator("experiment_id", mode="before")
    @classmethod
    def _parse_experiment_id(cls, v: Any) -> str | None:
        return None if v is None or v == "" else str(v)

    @field_validator("human_decision", "ai_recommendation", mode="before")
    @classmethod
    def _parse_action(cls, v: Any) -> DecisionAction | None:
        return parse_decision(v)

    @field_validator("override_applied", mode="before")
    @classmethod
    def _parse_flag(cls, v: Any) -> bool:
        return to_flag(v)

    @field_validator("override_penalty", mode="before")
    @classmethod
    def _parse_penalty(cls, v: Any) -> float:
        return abs(to_number(v))


class ConsistencyInput(BaseModel):
    """Post-launch steady-state figures. Absent is not the same as zero."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    cpa_stability_pct: float | None = None
    net_margin_pct: float | None = None
    cancel_rate_pct: float | None = None
    repeat_buyer_pct: float | None = None
    sean_ellis_pct: float | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _parse_optional(cls, v: Any) -> float | None:
        return to_optional_number(v)


def flows_by_number(records: Iterable[FlowRecord]) -> dict[int, FlowRecord]:
    """Index flow records by stage number; a later duplicate wins."""
    return {record.flow_number: record for record in records}
