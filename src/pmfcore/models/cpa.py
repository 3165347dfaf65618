"""Cost-per-acquisition as an explicit sum type.

An experiment with no orders has no CPA. Instead of a floating-point
infinity that silently flows through comparisons and formatting, CPA is
either ``DefinedCpa(value)`` or ``UndefinedCpa``. Undefined CPA never
passes a threshold and is never rendered as a number.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

UNDEFINED_CPA_LABEL = "INFINITY"


class DefinedCpa(BaseModel):
    """CPA computed from at least one order."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["defined"] = "defined"
    value: float = Field(..., description="Spend per order in USD")


class UndefinedCpa(BaseModel):
    """CPA for an experiment with zero orders."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["undefined"] = "undefined"


Cpa = Annotated[DefinedCpa | UndefinedCpa, Field(discriminator="kind")]

UNDEFINED_CPA = UndefinedCpa()


def cpa_from(spend: float, orders: float) -> DefinedCpa | UndefinedCpa:
    """Derive CPA from spend and order count."""
    if orders > 0:
        return DefinedCpa(value=spend / orders)
    return UNDEFINED_CPA


def cpa_at_most(cpa: DefinedCpa | UndefinedCpa, ceiling: float) -> bool:
    """True when CPA is defined and does not exceed *ceiling*."""
    return isinstance(cpa, DefinedCpa) and cpa.value <= ceiling


def cpa_value_or(cpa: DefinedCpa | UndefinedCpa, default: float) -> float:
    """Return the CPA value, or *default* when undefined."""
    if isinstance(cpa, DefinedCpa):
        return cpa.value
    return default


def format_cpa(cpa: DefinedCpa | UndefinedCpa, places: int = 2) -> str:
    """Render CPA for display. Undefined CPA is never shown as a number."""
    if isinstance(cpa, DefinedCpa):
        return f"{cpa.value:.{places}f}"
    return UNDEFINED_CPA_LABEL
