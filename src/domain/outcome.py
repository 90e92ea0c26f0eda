"""Winner/loser/tie resolution and tennis score parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass

from domain.errors import ValidationError

_SET_PATTERN = re.compile(r"^(\d+)-(\d+)$")
MAX_SETS = 3
MAX_GAMES_PER_SET = 7


@dataclass(frozen=True)
class MatchOutcome:
    """Resolved result of one two-sided match."""

    side1_id: int
    side2_id: int
    winner_id: int | None
    side1_match_score: float
    side2_match_score: float

    @property
    def is_tie(self) -> bool:
        return self.winner_id is None

    def match_score_for(self, side_id: int) -> float:
        if side_id == self.side1_id:
            return self.side1_match_score
        if side_id == self.side2_id:
            return self.side2_match_score
        raise ValueError(f"side_id={side_id} is not part of this match")


@dataclass(frozen=True)
class TennisScore:
    """Set-by-set score reduced to sets and games won per side."""

    sets: tuple[tuple[int, int], ...]
    side1_sets: int
    side2_sets: int
    side1_games: int
    side2_games: int


def validate_scores(score1: int, score2: int) -> None:
    if score1 < 0 or score2 < 0:
        raise ValidationError("Scores must be non-negative")


def resolve_outcome(
    side1_id: int,
    side2_id: int,
    score1: int,
    score2: int,
    *,
    allow_tie: bool,
) -> MatchOutcome:
    """Decide the winner and per-side match score (1, 0.5 or 0)."""
    validate_scores(score1, score2)
    if score1 == score2:
        if not allow_tie:
            raise ValidationError("Match cannot end in a tie")
        return MatchOutcome(
            side1_id=side1_id,
            side2_id=side2_id,
            winner_id=None,
            side1_match_score=0.5,
            side2_match_score=0.5,
        )

    side1_won = score1 > score2
    return MatchOutcome(
        side1_id=side1_id,
        side2_id=side2_id,
        winner_id=side1_id if side1_won else side2_id,
        side1_match_score=1.0 if side1_won else 0.0,
        side2_match_score=0.0 if side1_won else 1.0,
    )


def parse_tennis_score(score: str) -> TennisScore:
    """Parse a score such as ``"6-4 3-6 7-5"`` (one to three sets, no tied sets)."""
    tokens = score.split()
    if not tokens or len(tokens) > MAX_SETS:
        raise ValidationError(
            'Invalid tennis score. Enter 1-3 sets (e.g., "6-4 6-3" or "6-4 3-6 6-2")'
        )

    sets: list[tuple[int, int]] = []
    for token in tokens:
        match = _SET_PATTERN.match(token)
        if match is None:
            raise ValidationError(f"Invalid set score {token!r}; expected games like 6-4")
        games1, games2 = int(match.group(1)), int(match.group(2))
        if games1 > MAX_GAMES_PER_SET or games2 > MAX_GAMES_PER_SET:
            raise ValidationError(f"Invalid set score {token!r}; at most {MAX_GAMES_PER_SET} games per set")
        if games1 == games2:
            raise ValidationError(f"Invalid set score {token!r}; a set cannot be tied")
        sets.append((games1, games2))

    return TennisScore(
        sets=tuple(sets),
        side1_sets=sum(1 for games1, games2 in sets if games1 > games2),
        side2_sets=sum(1 for games1, games2 in sets if games2 > games1),
        side1_games=sum(games1 for games1, _ in sets),
        side2_games=sum(games2 for _, games2 in sets),
    )


__all__ = ["MatchOutcome", "TennisScore", "parse_tennis_score", "resolve_outcome", "validate_scores"]
