"""Typed stage payloads for the ten questionnaire stages.

Each stage stores its answers as one tagged record (``stage`` literal).
Stages 1-6 carry the fields the decision core reads; stages 7-10 are
retained opaquely. Parsing is lenient: labels are case-normalised,
nested ``{"verdict": ...}`` objects are unwrapped, unknown labels become
None and malformed numbers become 0.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Annotated, Any, Literal, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from pmfcore.numeric import clamp, to_flag, to_number


_E = TypeVar("_E", bound=StrEnum)


class PainConfidence(StrEnum):
    """How the operator knows the pain or customer is real."""

    CUSTOMERS = "customers"
    OBSERVED = "observed"
    GUESS = "guess"


class SolutionVerdict(StrEnum):
    """Differentiation verdict recorded in stage 3."""

    STRONG = "STRONG"
    WEAK = "WEAK"
    NONE = "NONE"


class HonestyVerdict(StrEnum):
    """Price honesty verdict recorded in stage 4."""

    HONEST = "HONEST"
    CONTRADICTED = "CONTRADICTED"


class PriceTier(StrEnum):
    """Committed price tier recorded in stage 4."""

    CONSERVATIVE = "CONSERVATIVE"
    MID_RANGE = "MID-RANGE"
    AGGRESSIVE = "AGGRESSIVE"


def _unwrap_label(value: Any) -> str:
    if isinstance(value, Mapping):
        value = value.get("verdict")
    if value is None:
        return ""
    return str(value).strip()


def _parse_label(enum_cls: type[_E], value: Any, *, upper: bool) -> _E | None:
    raw = _unwrap_label(value)
    raw = raw.upper() if upper else raw.lower()
    try:
        return enum_cls(raw)
    except ValueError:
        return None


class _StageData(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class _GuessableStageData(_StageData):
    confidence: PainConfidence | None = None
    was_guessed: bool = False

    @field_validator("confidence", mode="before")
    @classmethod
    def _parse_confidence(cls, v: Any) -> PainConfidence | None:
        return _parse_label(PainConfidence, v, upper=False)

    @field_validator("was_guessed", mode="before")
    @classmethod
    def _parse_flag(cls, v: Any) -> bool:
        return to_flag(v)

    @property
    def is_guess(self) -> bool:
        return self.confidence is PainConfidence.GUESS or self.was_guessed


class Stage1Data(_GuessableStageData):
    """Pain discovery."""

    stage: Literal[1] = 1


class Stage2Data(_GuessableStageData):
    """Customer definition."""

    stage: Literal[2] = 2


class Stage3Data(_StageData):
    """Solution differentiation."""

    stage: Literal[3] = 3
    verdict: SolutionVerdict | None = Field(
        default=None, validation_alias=AliasChoices("ai_verdict", "verdict")
    )

    @field_validator("verdict", mode="before")
    @classmethod
    def _parse_verdict(cls, v: Any) -> SolutionVerdict | None:
        return _parse_label(SolutionVerdict, v, upper=True)


class Stage4Data(_StageData):
    """Pricing commitment."""

    stage: Literal[4] = 4
    honesty_verdict: HonestyVerdict | None = None
    committed_tier: PriceTier | None = None
    committed_price_usd: float = 0.0
    insisted_despite_contradiction: bool = False

    @field_validator("honesty_verdict", mode="before")
    @classmethod
    def _parse_honesty(cls, v: Any) -> HonestyVerdict | None:
        return _parse_label(HonestyVerdict, v, upper=True)

    @field_validator("committed_tier", mode="before")
    @classmethod
    def _parse_tier(cls, v: Any) -> PriceTier | None:
        return _parse_label(PriceTier, v, upper=True)

    @field_validator("committed_price_usd", mode="before")
    @classmethod
    def _parse_price(cls, v: Any) -> float:
        return to_number(v)

    @field_validator("insisted_despite_contradiction", mode="before")
    @classmethod
    def _parse_flag(cls, v: Any) -> bool:
        return to_flag(v)


class Stage5Data(_StageData):
    """Channel selection."""

    stage: Literal[5] = 5
    picked_from_weak: bool = False
    capability_complete: bool = False
    override_applied: bool = False
    primary_channel: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _merge_checklist_flag(cls, data: Any) -> Any:
        # older payloads record capability as checklist_complete
        if isinstance(data, Mapping) and "checklist_complete" in data:
            data = dict(data)
            data["capability_complete"] = to_flag(data.get("capability_complete")) or to_flag(
                data["checklist_complete"]
            )
        return data

    @field_validator("picked_from_weak", "capability_complete", "override_applied", mode="before")
    @classmethod
    def _parse_flag(cls, v: Any) -> bool:
        return to_flag(v)

    @field_validator("primary_channel", mode="before")
    @classmethod
    def _parse_channel(cls, v: Any) -> str | None:
        return None if v is None else str(v)


class Stage6Data(_StageData):
    """Live signal monitoring."""

    stage: Literal[6] = 6
    signal_quality_score: float = 0.0
    accelerating_signals: bool = False

    @field_validator("signal_quality_score", mode="before")
    @classmethod
    def _parse_quality(cls, v: Any) -> float:
        return clamp(to_number(v), 0.0, 100.0)

    @field_validator("accelerating_signals", mode="before")
    @classmethod
    def _parse_flag(cls, v: Any) -> bool:
        return to_flag(v)


class _OpaqueStageData(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")


class Stage7Data(_OpaqueStageData):
    stage: Literal[7] = 7


class Stage8Data(_OpaqueStageData):
    stage: Literal[8] = 8


class Stage9Data(_OpaqueStageData):
    stage: Literal[9] = 9


class Stage10Data(_OpaqueStageData):
    stage: Literal[10] = 10


StageData = Annotated[
    Stage1Data
    | Stage2Data
    | Stage3Data
    | Stage4Data
    | Stage5Data
    | Stage6Data
    | Stage7Data
    | Stage8Data
    | Stage9Data
    | Stage10Data,
    Field(discriminator="stage"),
]
