"""Round-robin group standings derived from the match log."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

from domain.tournament.rules import TournamentRules


@dataclass(frozen=True)
class GroupParticipant:
    """A group roster entry; guests have no ``player_id``."""

    participant_id: int
    player_id: int | None = None
    is_guest: bool = False
    display_name: str | None = None


@dataclass(frozen=True)
class GroupMatchResult:
    """One group match; set scores stay ``None`` until the result is recorded."""

    participant1_id: int
    participant2_id: int
    participant1_sets: int | None
    participant2_sets: int | None
    participant1_games: int = 0
    participant2_games: int = 0
    match_id: int | None = None

    @property
    def is_completed(self) -> bool:
        return self.participant1_sets is not None and self.participant2_sets is not None


@dataclass(frozen=True)
class GroupStanding:
    participant_id: int
    player_id: int | None
    is_guest: bool
    display_name: str | None = None
    wins: int = 0
    losses: int = 0
    ties: int = 0
    sets_won: int = 0
    sets_lost: int = 0
    games_won: int = 0
    games_lost: int = 0
    points: int = 0

    @property
    def set_difference(self) -> int:
        return self.sets_won - self.sets_lost

    @property
    def game_difference(self) -> int:
        return self.games_won - self.games_lost

    @property
    def matches_played(self) -> int:
        return self.wins + self.losses + self.ties

    def sort_key(self) -> tuple[int, int, int]:
        return (self.points, self.set_difference, self.game_difference)


def completed_matches(matches: Iterable[GroupMatchResult]) -> list[GroupMatchResult]:
    """Keep only matches with both set scores recorded."""
    return [match for match in matches if match.is_completed]


def _apply_result(
    standing: GroupStanding,
    *,
    sets_for: int,
    sets_against: int,
    games_for: int,
    games_against: int,
    rules: TournamentRules,
) -> GroupStanding:
    if sets_for > sets_against:
        outcome = {"wins": standing.wins + 1, "points": standing.points + rules.points_for_win}
    elif sets_for < sets_against:
        outcome = {"losses": standing.losses + 1, "points": standing.points + rules.points_for_loss}
    else:
        outcome = {"ties": standing.ties + 1, "points": standing.points + rules.points_for_tie}

    return replace(
        standing,
        sets_won=standing.sets_won + sets_for,
        sets_lost=standing.sets_lost + sets_against,
        games_won=standing.games_won + games_for,
        games_lost=standing.games_lost + games_against,
        **outcome,
    )


def calculate_standings(
    participants: Sequence[GroupParticipant],
    matches: Iterable[GroupMatchResult],
    rules: TournamentRules = TournamentRules(),
) -> list[GroupStanding]:
    """Aggregate completed matches into standings sorted best-first.

    Ordering is points, then set difference, then game difference, all
    descending. Remaining ties keep roster order. Matches that are not yet
    completed, or that reference someone outside the roster, are skipped.
    """
    standings: dict[int, GroupStanding] = {}
    for participant in participants:
        if participant.participant_id in standings:
            raise ValueError(f"participant_id={participant.participant_id} appears twice in the roster")
        standings[participant.participant_id] = GroupStanding(
            participant_id=participant.participant_id,
            player_id=participant.player_id,
            is_guest=participant.is_guest,
            display_name=participant.display_name,
        )

    for match in completed_matches(matches):
        first = standings.get(match.participant1_id)
        second = standings.get(match.participant2_id)
        if first is None or second is None:
            continue

        # is_completed guarantees both set scores are present.
        sets1 = int(match.participant1_sets or 0)
        sets2 = int(match.participant2_sets or 0)
        standings[match.participant1_id] = _apply_result(
            first,
            sets_for=sets1,
            sets_against=sets2,
            games_for=match.participant1_games,
            games_against=match.participant2_games,
            rules=rules,
        )
        standings[match.participant2_id] = _apply_result(
            second,
            sets_for=sets2,
            sets_against=sets1,
            games_for=match.participant2_games,
            games_against=match.participant1_games,
            rules=rules,
        )

    return sorted(standings.values(), key=GroupStanding.sort_key, reverse=True)


__all__ = [
    "GroupMatchResult",
    "GroupParticipant",
    "GroupStanding",
    "calculate_standings",
    "completed_matches",
]
