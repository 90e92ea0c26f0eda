"""Recording round-robin group matches, including guest-aware ELO."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date

from domain.common import PlayerRating, RatingUpdate
from domain.elo.calculator import EloCalculator, EloParameters
from domain.errors import DuplicateError, MembershipError, ValidationError
from domain.outcome import MatchOutcome, parse_tennis_score, resolve_outcome, validate_scores
from domain.protocol import RatingContext, RatingEventKind
from domain.tournament.rules import TournamentRules
from domain.tournament.standings import GroupMatchResult, GroupParticipant
from domain.tournament.status import TournamentStatus, ensure_accepts_matches

TOURNAMENT_RATING_CONTEXT = RatingContext.SINGLES


@dataclass(frozen=True)
class TournamentMatchSubmission:
    tournament_id: int
    group_id: int
    participant1_id: int
    participant2_id: int
    participant1_sets: int
    participant2_sets: int
    match_date: date
    participant1_games: int = 0
    participant2_games: int = 0

    @classmethod
    def from_tennis_score(
        cls,
        *,
        tournament_id: int,
        group_id: int,
        participant1_id: int,
        participant2_id: int,
        score: str,
        match_date: date,
    ) -> TournamentMatchSubmission:
        """Build a submission from a set-by-set score such as ``"6-4 4-6"``."""
        parsed = parse_tennis_score(score)
        return cls(
            tournament_id=tournament_id,
            group_id=group_id,
            participant1_id=participant1_id,
            participant2_id=participant2_id,
            participant1_sets=parsed.side1_sets,
            participant2_sets=parsed.side2_sets,
            match_date=match_date,
            participant1_games=parsed.side1_games,
            participant2_games=parsed.side2_games,
        )


@dataclass(frozen=True)
class GroupSnapshot:
    """Live group state read at submission time."""

    tournament_id: int
    group_id: int
    status: TournamentStatus
    participants: Mapping[int, GroupParticipant]
    matches: tuple[GroupMatchResult, ...] = ()
    ratings: Mapping[int, PlayerRating] = field(default_factory=dict)


@dataclass(frozen=True)
class TournamentMatchRecord:
    tournament_id: int
    group_id: int
    match_date: date
    participant1_id: int
    participant2_id: int
    participant1_score: int
    participant2_score: int
    participant1_games: int
    participant2_games: int
    winner_participant_id: int | None
    affects_elo: bool
    player1_elo_before: int | None = None
    player1_elo_after: int | None = None
    player2_elo_before: int | None = None
    player2_elo_after: int | None = None


@dataclass(frozen=True)
class TournamentMatchPlan:
    match: TournamentMatchRecord
    outcome: MatchOutcome
    updates: tuple[RatingUpdate, ...]


def has_played(matches: tuple[GroupMatchResult, ...], participant1_id: int, participant2_id: int) -> bool:
    pair = {participant1_id, participant2_id}
    return any({match.participant1_id, match.participant2_id} == pair for match in matches)


class TournamentMatchProcessor:
    """Validates a group match and plans its (possibly empty) rating updates."""

    def __init__(self, params: EloParameters | None = None, rules: TournamentRules | None = None) -> None:
        self.params = params or EloParameters()
        self.rules = rules or TournamentRules()
        self.calculator = EloCalculator(self.params)

    def validate(self, submission: TournamentMatchSubmission, snapshot: GroupSnapshot) -> None:
        if submission.participant1_id == submission.participant2_id:
            raise ValidationError("Cannot record a match between the same player")
        validate_scores(submission.participant1_sets, submission.participant2_sets)
        if max(submission.participant1_sets, submission.participant2_sets) > self.rules.max_sets_won:
            raise ValidationError(f"A player can win at most {self.rules.max_sets_won} sets")
        if submission.participant1_games < 0 or submission.participant2_games < 0:
            raise ValidationError("Games must be non-negative")

        ensure_accepts_matches(snapshot.status)

        if (
            submission.participant1_id not in snapshot.participants
            or submission.participant2_id not in snapshot.participants
        ):
            raise MembershipError("Both players must be participants in this tournament group")

        if has_played(snapshot.matches, submission.participant1_id, submission.participant2_id):
            raise DuplicateError(
                "These players have already played each other in this group. "
                "Each pair should only play once in round robin."
            )

    def _rating(self, snapshot: GroupSnapshot, player_id: int) -> PlayerRating:
        rating = snapshot.ratings.get(player_id)
        if rating is None:
            return PlayerRating(
                player_id=player_id,
                context=TOURNAMENT_RATING_CONTEXT,
                rating=self.params.initial_elo,
            )
        return rating

    def process(self, submission: TournamentMatchSubmission, snapshot: GroupSnapshot) -> TournamentMatchPlan:
        self.validate(submission, snapshot)

        first = snapshot.participants[submission.participant1_id]
        second = snapshot.participants[submission.participant2_id]
        outcome = resolve_outcome(
            first.participant_id,
            second.participant_id,
            submission.participant1_sets,
            submission.participant2_sets,
            allow_tie=True,
        )
        affects_elo = not first.is_guest and not second.is_guest

        first_rating = None if first.player_id is None else self._rating(snapshot, first.player_id)
        second_rating = None if second.player_id is None else self._rating(snapshot, second.player_id)

        updates: tuple[RatingUpdate, ...] = ()
        if affects_elo and first_rating is not None and second_rating is not None:
            updates = (
                self.calculator.rate_player(
                    first_rating,
                    opponent_rating=second_rating.rating,
                    actual_score=outcome.side1_match_score,
                    kind=RatingEventKind.TOURNAMENT_MATCH,
                ),
                self.calculator.rate_player(
                    second_rating,
                    opponent_rating=first_rating.rating,
                    actual_score=outcome.side2_match_score,
                    kind=RatingEventKind.TOURNAMENT_MATCH,
                ),
            )

        first_after = updates[0].post_rating if updates else _rating_value(first_rating, first.is_guest)
        second_after = updates[1].post_rating if updates else _rating_value(second_rating, second.is_guest)

        record = TournamentMatchRecord(
            tournament_id=submission.tournament_id,
            group_id=submission.group_id,
            match_date=submission.match_date,
            participant1_id=submission.participant1_id,
            participant2_id=submission.participant2_id,
            participant1_score=submission.participant1_sets,
            participant2_score=submission.participant2_sets,
            participant1_games=submission.participant1_games,
            participant2_games=submission.participant2_games,
            winner_participant_id=outcome.winner_id,
            affects_elo=affects_elo,
            player1_elo_before=_rating_value(first_rating, first.is_guest),
            player1_elo_after=first_after,
            player2_elo_before=_rating_value(second_rating, second.is_guest),
            player2_elo_after=second_after,
        )
        return TournamentMatchPlan(match=record, outcome=outcome, updates=updates)


def _rating_value(rating: PlayerRating | None, is_guest: bool) -> int | None:
    if rating is None or is_guest:
        return None
    return rating.rating


__all__ = [
    "GroupSnapshot",
    "TOURNAMENT_RATING_CONTEXT",
    "TournamentMatchPlan",
    "TournamentMatchProcessor",
    "TournamentMatchRecord",
    "TournamentMatchSubmission",
    "has_played",
]
