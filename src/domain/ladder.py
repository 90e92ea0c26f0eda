"""Ladder match validation and singles/doubles ELO updates."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date

from domain.common import PlayerRating, RatingUpdate
from domain.elo.calculator import EloCalculator, EloParameters
from domain.errors import DuplicateError, MembershipError, ValidationError
from domain.outcome import MatchOutcome, parse_tennis_score, resolve_outcome, validate_scores
from domain.protocol import LadderType, RatingContext, RatingEventKind


@dataclass(frozen=True)
class LadderMatchSubmission:
    """A match as entered by a member, before any validation."""

    ladder_id: int
    player1_id: int
    player2_id: int
    player1_score: int
    player2_score: int
    match_date: date
    player1_partner_id: int | None = None
    player2_partner_id: int | None = None

    @classmethod
    def from_tennis_score(
        cls,
        *,
        ladder_id: int,
        player1_id: int,
        player2_id: int,
        score: str,
        match_date: date,
        player1_partner_id: int | None = None,
        player2_partner_id: int | None = None,
    ) -> LadderMatchSubmission:
        """Ladder matches are scored in sets won, e.g. ``"6-3 2-6 7-5"`` is 2-1."""
        parsed = parse_tennis_score(score)
        return cls(
            ladder_id=ladder_id,
            player1_id=player1_id,
            player2_id=player2_id,
            player1_score=parsed.side1_sets,
            player2_score=parsed.side2_sets,
            match_date=match_date,
            player1_partner_id=player1_partner_id,
            player2_partner_id=player2_partner_id,
        )

    @property
    def side1(self) -> tuple[int, ...]:
        if self.player1_partner_id is None:
            return (self.player1_id,)
        return (self.player1_id, self.player1_partner_id)

    @property
    def side2(self) -> tuple[int, ...]:
        if self.player2_partner_id is None:
            return (self.player2_id,)
        return (self.player2_id, self.player2_partner_id)

    @property
    def participant_ids(self) -> tuple[int, ...]:
        return self.side1 + self.side2


@dataclass(frozen=True)
class ExistingLadderMatch:
    """The fields of a stored ladder match the duplicate guard compares."""

    match_date: date
    player1_id: int
    player2_id: int
    player1_score: int
    player2_score: int

    def scores_by_player(self) -> dict[int, int]:
        return {self.player1_id: self.player1_score, self.player2_id: self.player2_score}


@dataclass(frozen=True)
class LadderSnapshot:
    """Live ladder state read at submission time."""

    ladder_id: int
    ladder_type: LadderType
    active_player_ids: frozenset[int]
    ratings: Mapping[int, PlayerRating] = field(default_factory=dict)
    existing_matches: tuple[ExistingLadderMatch, ...] = ()


@dataclass(frozen=True)
class LadderMatchRecord:
    """Immutable match row with before/after snapshots of every participant."""

    ladder_id: int
    rating_context: RatingContext
    match_date: date
    player1_id: int
    player2_id: int
    player1_score: int
    player2_score: int
    winner_id: int
    player1_elo_before: int
    player1_elo_after: int
    player2_elo_before: int
    player2_elo_after: int
    player1_partner_id: int | None = None
    player2_partner_id: int | None = None
    player1_partner_elo_before: int | None = None
    player1_partner_elo_after: int | None = None
    player2_partner_elo_before: int | None = None
    player2_partner_elo_after: int | None = None


@dataclass(frozen=True)
class LadderMatchPlan:
    """Everything that must be written atomically for one accepted match."""

    match: LadderMatchRecord
    outcome: MatchOutcome
    updates: tuple[RatingUpdate, ...]

    def update_for(self, player_id: int) -> RatingUpdate:
        for update in self.updates:
            if update.player_id == player_id:
                return update
        raise KeyError(player_id)


def is_duplicate(submission: LadderMatchSubmission, existing: ExistingLadderMatch) -> bool:
    """Same date, same unordered primary pair and the same score for each player."""
    if existing.match_date != submission.match_date:
        return False
    if {existing.player1_id, existing.player2_id} != {submission.player1_id, submission.player2_id}:
        return False
    scores = existing.scores_by_player()
    return (
        scores[submission.player1_id] == submission.player1_score
        and scores[submission.player2_id] == submission.player2_score
    )


def _average(ratings: Iterable[PlayerRating]) -> float:
    values = [rating.rating for rating in ratings]
    return sum(values) / float(len(values))


class LadderMatchProcessor:
    """Validates a submission against a ladder snapshot and plans the rating updates."""

    def __init__(self, params: EloParameters | None = None) -> None:
        self.params = params or EloParameters()
        self.calculator = EloCalculator(self.params)

    def validate(self, submission: LadderMatchSubmission, snapshot: LadderSnapshot) -> None:
        if submission.ladder_id != snapshot.ladder_id:
            raise ValueError(
                f"submission for ladder_id={submission.ladder_id} checked against ladder_id={snapshot.ladder_id}"
            )
        if submission.player1_id == submission.player2_id:
            raise ValidationError("Cannot record a match between the same player")
        validate_scores(submission.player1_score, submission.player2_score)
        if submission.player1_score == submission.player2_score:
            raise ValidationError("Match cannot end in a tie")

        self._validate_partners(submission, snapshot.ladder_type)

        for player_id in submission.participant_ids:
            if player_id not in snapshot.active_player_ids:
                raise MembershipError(f"Player {player_id} is not an active participant in this ladder")

        for existing in snapshot.existing_matches:
            if is_duplicate(submission, existing):
                raise DuplicateError("This match has already been recorded")

    def _validate_partners(self, submission: LadderMatchSubmission, ladder_type: LadderType) -> None:
        partners = (submission.player1_partner_id, submission.player2_partner_id)
        if not ladder_type.requires_partners:
            if any(partner is not None for partner in partners):
                raise ValidationError("Partners cannot be recorded on a singles ladder")
            return

        if any(partner is None for partner in partners):
            raise ValidationError(f"Both partners are required on a {ladder_type.value} ladder")
        if len(set(submission.participant_ids)) != 4:
            raise ValidationError("All four players in a doubles match must be different")

    def _rating(self, snapshot: LadderSnapshot, player_id: int, context: RatingContext) -> PlayerRating:
        rating = snapshot.ratings.get(player_id)
        if rating is None:
            return PlayerRating(player_id=player_id, context=context, rating=self.params.initial_elo)
        if rating.context != context:
            raise ValueError(
                f"player_id={player_id} rating is {rating.context.value}, expected {context.value}"
            )
        return rating

    def process(self, submission: LadderMatchSubmission, snapshot: LadderSnapshot) -> LadderMatchPlan:
        self.validate(submission, snapshot)
        context = snapshot.ladder_type.rating_context

        outcome = resolve_outcome(
            submission.player1_id,
            submission.player2_id,
            submission.player1_score,
            submission.player2_score,
            allow_tie=False,
        )

        side1 = [self._rating(snapshot, player_id, context) for player_id in submission.side1]
        side2 = [self._rating(snapshot, player_id, context) for player_id in submission.side2]
        side1_average = _average(side1)
        side2_average = _average(side2)

        updates: list[RatingUpdate] = []
        for player in side1:
            updates.append(
                self.calculator.rate_player(
                    player,
                    opponent_rating=side2_average,
                    actual_score=outcome.side1_match_score,
                    kind=RatingEventKind.LADDER_MATCH,
                )
            )
        for player in side2:
            updates.append(
                self.calculator.rate_player(
                    player,
                    opponent_rating=side1_average,
                    actual_score=outcome.side2_match_score,
                    kind=RatingEventKind.LADDER_MATCH,
                )
            )

        by_player = {update.player_id: update for update in updates}
        record = LadderMatchRecord(
            ladder_id=submission.ladder_id,
            rating_context=context,
            match_date=submission.match_date,
            player1_id=submission.player1_id,
            player2_id=submission.player2_id,
            player1_score=submission.player1_score,
            player2_score=submission.player2_score,
            winner_id=outcome.winner_id,
            player1_elo_before=by_player[submission.player1_id].pre_rating,
            player1_elo_after=by_player[submission.player1_id].post_rating,
            player2_elo_before=by_player[submission.player2_id].pre_rating,
            player2_elo_after=by_player[submission.player2_id].post_rating,
            player1_partner_id=submission.player1_partner_id,
            player2_partner_id=submission.player2_partner_id,
            player1_partner_elo_before=_snapshot(by_player, submission.player1_partner_id, before=True),
            player1_partner_elo_after=_snapshot(by_player, submission.player1_partner_id, before=False),
            player2_partner_elo_before=_snapshot(by_player, submission.player2_partner_id, before=True),
            player2_partner_elo_after=_snapshot(by_player, submission.player2_partner_id, before=False),
        )
        return LadderMatchPlan(match=record, outcome=outcome, updates=tuple(updates))


def _snapshot(by_player: Mapping[int, RatingUpdate], player_id: int | None, *, before: bool) -> int | None:
    if player_id is None:
        return None
    update = by_player[player_id]
    return update.pre_rating if before else update.post_rating


__all__ = [
    "ExistingLadderMatch",
    "LadderMatchPlan",
    "LadderMatchProcessor",
    "LadderMatchRecord",
    "LadderMatchSubmission",
    "LadderSnapshot",
    "is_duplicate",
]
