"""ELO rating modules."""

from domain.elo.calculator import (
    EloCalculator,
    EloParameters,
    EloResult,
    calculate_expected_score,
    calculate_new_rating,
    evaluate_match,
    round_rating_delta,
)

__all__ = [
    "EloCalculator",
    "EloParameters",
    "EloResult",
    "calculate_expected_score",
    "calculate_new_rating",
    "evaluate_match",
    "round_rating_delta",
]
