"""Shared types passed between calculators, processors and repositories."""

from __future__ import annotations

from dataclasses import dataclass

from domain.protocol import RatingContext, RatingEventKind


@dataclass(frozen=True)
class PlayerRating:
    """Current rating and statistics of one player in one rating context.

    ``sequence`` is the number of rating events recorded so far and is the
    version a writer must build on.
    """

    player_id: int
    context: RatingContext
    rating: int
    matches_played: int = 0
    matches_won: int = 0
    sequence: int = 0


@dataclass(frozen=True)
class RatingUpdate:
    """One rating/statistics delta for one player, ready to append to the log."""

    player_id: int
    context: RatingContext
    kind: RatingEventKind
    sequence: int
    pre_rating: int
    post_rating: int
    counts_as_match: bool
    won: bool
    actual_score: float | None = None
    expected_score: float | None = None
    opponent_rating: float | None = None

    @property
    def rating_delta(self) -> int:
        return self.post_rating - self.pre_rating

    def apply(self, rating: PlayerRating) -> PlayerRating:
        """Return ``rating`` advanced by this update."""
        if rating.player_id != self.player_id or rating.context != self.context:
            raise ValueError(
                f"update for player_id={self.player_id}/{self.context.value} "
                f"cannot apply to player_id={rating.player_id}/{rating.context.value}"
            )
        return PlayerRating(
            player_id=rating.player_id,
            context=rating.context,
            rating=self.post_rating,
            matches_played=rating.matches_played + (1 if self.counts_as_match else 0),
            matches_won=rating.matches_won + (1 if self.counts_as_match and self.won else 0),
            sequence=self.sequence,
        )


__all__ = ["PlayerRating", "RatingUpdate"]
