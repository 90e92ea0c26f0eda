"""Round-robin scoring rules."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TournamentRules:
    points_for_win: int = 2
    points_for_loss: int = 1
    points_for_tie: int = 1
    max_sets_won: int = 2
    max_winner_bonus_elo: int = 500
