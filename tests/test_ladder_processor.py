"""Unit tests for ladder match validation and rating updates."""

from __future__ import annotations

from datetime import date

import pytest

from domain.common import PlayerRating
from domain.errors import DuplicateError, MembershipError, ValidationError
from domain.ladder import (
    ExistingLadderMatch,
    LadderMatchProcessor,
    LadderMatchSubmission,
    LadderSnapshot,
)
from domain.protocol import LadderType, RatingContext

MATCH_DATE = date(2026, 5, 2)


def _snapshot(
    ladder_type: LadderType = LadderType.SINGLES,
    *,
    ratings: dict[int, int] | None = None,
    active: tuple[int, ...] = (1, 2, 3, 4),
    existing: tuple[ExistingLadderMatch, ...] = (),
) -> LadderSnapshot:
    context = ladder_type.rating_context
    return LadderSnapshot(
        ladder_id=1,
        ladder_type=ladder_type,
        active_player_ids=frozenset(active),
        ratings={
            player_id: PlayerRating(player_id=player_id, context=context, rating=rating, sequence=2)
            for player_id, rating in (ratings or {}).items()
        },
        existing_matches=existing,
    )


def _singles(player1_score: int = 2, player2_score: int = 1, **kwargs) -> LadderMatchSubmission:
    return LadderMatchSubmission(
        ladder_id=1,
        player1_id=1,
        player2_id=2,
        player1_score=player1_score,
        player2_score=player2_score,
        match_date=MATCH_DATE,
        **kwargs,
    )


def _doubles(player1_score: int = 2, player2_score: int = 0) -> LadderMatchSubmission:
    return LadderMatchSubmission(
        ladder_id=1,
        player1_id=1,
        player2_id=2,
        player1_score=player1_score,
        player2_score=player2_score,
        match_date=MATCH_DATE,
        player1_partner_id=3,
        player2_partner_id=4,
    )


def test_singles_win_updates_both_players() -> None:
    plan = LadderMatchProcessor().process(_singles(), _snapshot(ratings={1: 1000, 2: 1000}))

    assert plan.outcome.winner_id == 1
    assert plan.match.winner_id == 1
    assert plan.match.rating_context is RatingContext.SINGLES
    assert (plan.match.player1_elo_before, plan.match.player1_elo_after) == (1000, 1016)
    assert (plan.match.player2_elo_before, plan.match.player2_elo_after) == (1000, 984)
    assert plan.match.player1_partner_elo_before is None

    winner = plan.update_for(1)
    loser = plan.update_for(2)
    assert winner.won and winner.counts_as_match
    assert not loser.won and loser.counts_as_match
    assert winner.sequence == 3
    assert loser.sequence == 3


def test_player_without_rating_starts_at_initial_elo() -> None:
    plan = LadderMatchProcessor().process(_singles(player1_score=0, player2_score=2), _snapshot())

    assert plan.update_for(1).pre_rating == 1200
    assert plan.update_for(1).post_rating == 1184
    assert plan.update_for(2).post_rating == 1216
    assert plan.update_for(1).sequence == 1


def test_doubles_rates_each_player_against_opposing_average() -> None:
    snapshot = _snapshot(LadderType.DOUBLES, ratings={1: 1100, 3: 1300, 2: 1200, 4: 1200})

    plan = LadderMatchProcessor().process(_doubles(), snapshot)

    assert len(plan.updates) == 4
    assert {update.context for update in plan.updates} == {RatingContext.DOUBLES}
    # Each winner uses their own rating against the losing side's 1200 average.
    assert plan.update_for(1).post_rating == 1120
    assert plan.update_for(3).post_rating == 1312
    assert plan.update_for(2).post_rating == 1184
    assert plan.update_for(4).post_rating == 1184
    assert plan.match.player1_partner_elo_before == 1300
    assert plan.match.player1_partner_elo_after == 1312
    assert plan.match.player2_partner_elo_after == 1184
    assert all(update.opponent_rating == pytest.approx(1200.0) for update in plan.updates)


def test_mixed_ladder_requires_partners_like_doubles() -> None:
    with pytest.raises(ValidationError, match="Both partners are required on a mixed ladder"):
        LadderMatchProcessor().process(_singles(), _snapshot(LadderType.MIXED))


def test_partners_forbidden_on_singles_ladder() -> None:
    with pytest.raises(ValidationError, match="Partners cannot be recorded on a singles ladder"):
        LadderMatchProcessor().process(_singles(player1_partner_id=3), _snapshot())


def test_doubles_players_must_all_differ() -> None:
    submission = LadderMatchSubmission(
        ladder_id=1,
        player1_id=1,
        player2_id=2,
        player1_score=2,
        player2_score=0,
        match_date=MATCH_DATE,
        player1_partner_id=2,
        player2_partner_id=4,
    )
    with pytest.raises(ValidationError, match="All four players"):
        LadderMatchProcessor().process(submission, _snapshot(LadderType.DOUBLES))


def test_same_player_on_both_sides_rejected() -> None:
    submission = LadderMatchSubmission(
        ladder_id=1,
        player1_id=1,
        player2_id=1,
        player1_score=2,
        player2_score=0,
        match_date=MATCH_DATE,
    )
    with pytest.raises(ValidationError, match="same player"):
        LadderMatchProcessor().process(submission, _snapshot())


def test_negative_and_tied_scores_rejected() -> None:
    processor = LadderMatchProcessor()
    with pytest.raises(ValidationError, match="non-negative"):
        processor.process(_singles(player1_score=-1, player2_score=2), _snapshot())
    with pytest.raises(ValidationError, match="tie"):
        processor.process(_singles(player1_score=1, player2_score=1), _snapshot())


def test_inactive_participant_rejected() -> None:
    with pytest.raises(MembershipError, match="Player 2 is not an active participant"):
        LadderMatchProcessor().process(_singles(), _snapshot(active=(1, 3)))


def test_same_match_with_swapped_sides_is_duplicate() -> None:
    existing = ExistingLadderMatch(
        match_date=MATCH_DATE,
        player1_id=2,
        player2_id=1,
        player1_score=1,
        player2_score=2,
    )
    with pytest.raises(DuplicateError, match="already been recorded"):
        LadderMatchProcessor().process(_singles(), _snapshot(existing=(existing,)))


def test_rematch_with_different_score_or_date_is_allowed() -> None:
    different_score = ExistingLadderMatch(
        match_date=MATCH_DATE, player1_id=1, player2_id=2, player1_score=2, player2_score=0
    )
    different_day = ExistingLadderMatch(
        match_date=date(2026, 5, 1), player1_id=1, player2_id=2, player1_score=2, player2_score=1
    )

    plan = LadderMatchProcessor().process(_singles(), _snapshot(existing=(different_score, different_day)))

    assert plan.match.winner_id == 1


def test_submission_from_tennis_score_counts_sets() -> None:
    submission = LadderMatchSubmission.from_tennis_score(
        ladder_id=1,
        player1_id=1,
        player2_id=2,
        score="4-6 6-3 6-2",
        match_date=MATCH_DATE,
    )

    assert (submission.player1_score, submission.player2_score) == (2, 1)
    assert submission.participant_ids == (1, 2)
