"""Uncertainty ranking over the foundation stages."""

from pmfcore.uncertainty.ranker import (
    TIEBREAK_RANK,
    Uncertainty,
    UncertaintyType,
    rank_uncertainties,
    top_uncertainty,
)

__all__ = [
    "TIEBREAK_RANK",
    "Uncertainty",
    "UncertaintyType",
    "rank_uncertainties",
    "top_uncertainty",
]
