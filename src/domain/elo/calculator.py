"""Match-driven ELO updates with a fixed K-factor and integer ratings."""

from __future__ import annotations

from dataclasses import dataclass
from math import floor

from domain.common import PlayerRating, RatingUpdate
from domain.errors import ValidationError
from domain.protocol import RatingEventKind

VALID_MATCH_SCORES = (0.0, 0.5, 1.0)
ROUNDING_MODES = ("half_up", "half_even")


@dataclass(frozen=True)
class EloParameters:
    initial_elo: int = 1200
    k_factor: float = 32.0
    scale_factor: float = 400.0
    rounding: str = "half_up"


@dataclass(frozen=True)
class EloResult:
    expected_score: float
    rating_delta: int
    new_rating: int


def calculate_expected_score(rating: float, opponent_rating: float, scale_factor: float = 400.0) -> float:
    """Compute the ELO expected score for one side."""
    return 1.0 / (1.0 + 10.0 ** ((opponent_rating - rating) / scale_factor))


def round_rating_delta(value: float, rounding: str = "half_up") -> int:
    """Round a raw rating change to an integer.

    ``half_up`` rounds exact halves toward positive infinity (2.5 -> 3,
    -2.5 -> -2); ``half_even`` is Python's built-in banker's rounding.
    """
    if rounding == "half_up":
        return int(floor(value + 0.5))
    if rounding == "half_even":
        return int(round(value))
    raise ValueError(f"Unsupported rounding mode: {rounding!r}")


def evaluate_match(
    rating: float,
    opponent_rating: float,
    actual_score: float,
    params: EloParameters = EloParameters(),
) -> EloResult:
    """Return expected score, integer delta and new rating for one player."""
    if actual_score not in VALID_MATCH_SCORES:
        raise ValidationError(f"Match score must be one of 1, 0.5 or 0 (got {actual_score!r})")

    expected = calculate_expected_score(rating, opponent_rating, params.scale_factor)
    delta = round_rating_delta(params.k_factor * (actual_score - expected), params.rounding)
    return EloResult(
        expected_score=expected,
        rating_delta=delta,
        new_rating=int(rating) + delta,
    )


def calculate_new_rating(
    rating: int,
    opponent_rating: float,
    actual_score: float,
    params: EloParameters = EloParameters(),
) -> int:
    """Return ``rating`` after one match against ``opponent_rating``.

    The result is not clamped and may drop below zero for extreme mismatches.
    """
    return evaluate_match(rating, opponent_rating, actual_score, params).new_rating


class EloCalculator:
    """Turns player snapshots and match outcomes into rating updates."""

    def __init__(self, params: EloParameters | None = None) -> None:
        self.params = params or EloParameters()

    def rate_player(
        self,
        player: PlayerRating,
        *,
        opponent_rating: float,
        actual_score: float,
        kind: RatingEventKind,
    ) -> RatingUpdate:
        result = evaluate_match(player.rating, opponent_rating, actual_score, self.params)
        return RatingUpdate(
            player_id=player.player_id,
            context=player.context,
            kind=kind,
            sequence=player.sequence + 1,
            pre_rating=player.rating,
            post_rating=result.new_rating,
            counts_as_match=True,
            won=actual_score == 1.0,
            actual_score=actual_score,
            expected_score=result.expected_score,
            opponent_rating=float(opponent_rating),
        )

    def bonus(self, player: PlayerRating, *, amount: int) -> RatingUpdate:
        """Flat additive bonus that bypasses the ELO formula."""
        if amount < 0:
            raise ValidationError("Bonus ELO must be non-negative")
        return RatingUpdate(
            player_id=player.player_id,
            context=player.context,
            kind=RatingEventKind.TOURNAMENT_BONUS,
            sequence=player.sequence + 1,
            pre_rating=player.rating,
            post_rating=player.rating + amount,
            counts_as_match=False,
            won=False,
        )
