"""Unit tests for recording round-robin group matches."""

from __future__ import annotations

from datetime import date

import pytest

from domain.common import PlayerRating
from domain.errors import DuplicateError, MembershipError, TournamentStateError, ValidationError
from domain.protocol import RatingContext, RatingEventKind
from domain.tournament import (
    GroupMatchResult,
    GroupParticipant,
    GroupSnapshot,
    TournamentMatchProcessor,
    TournamentMatchSubmission,
    TournamentStatus,
)

PARTICIPANTS = {
    1: GroupParticipant(participant_id=1, player_id=101),
    2: GroupParticipant(participant_id=2, player_id=102),
    3: GroupParticipant(participant_id=3, is_guest=True, display_name="Guest Gary"),
}


def _snapshot(
    *,
    status: TournamentStatus = TournamentStatus.ACTIVE,
    matches: tuple[GroupMatchResult, ...] = (),
) -> GroupSnapshot:
    return GroupSnapshot(
        tournament_id=5,
        group_id=50,
        status=status,
        participants=PARTICIPANTS,
        matches=matches,
        ratings={
            101: PlayerRating(player_id=101, context=RatingContext.SINGLES, rating=1000, sequence=4),
            102: PlayerRating(player_id=102, context=RatingContext.SINGLES, rating=1200, sequence=1),
        },
    )


def _submission(participant1_id: int = 1, participant2_id: int = 2, sets: tuple[int, int] = (2, 0)):
    return TournamentMatchSubmission(
        tournament_id=5,
        group_id=50,
        participant1_id=participant1_id,
        participant2_id=participant2_id,
        participant1_sets=sets[0],
        participant2_sets=sets[1],
        match_date=date(2026, 6, 13),
        participant1_games=12,
        participant2_games=7,
    )


def test_member_match_updates_singles_ratings() -> None:
    plan = TournamentMatchProcessor().process(_submission(), _snapshot())

    assert plan.match.affects_elo
    assert plan.match.winner_participant_id == 1
    assert (plan.match.player1_elo_before, plan.match.player1_elo_after) == (1000, 1024)
    assert (plan.match.player2_elo_before, plan.match.player2_elo_after) == (1200, 1176)
    assert [update.player_id for update in plan.updates] == [101, 102]
    assert all(update.kind is RatingEventKind.TOURNAMENT_MATCH for update in plan.updates)
    assert [update.sequence for update in plan.updates] == [5, 2]


def test_tied_match_is_legal_and_rated_as_half_point() -> None:
    plan = TournamentMatchProcessor().process(_submission(sets=(1, 1)), _snapshot())

    assert plan.match.winner_participant_id is None
    assert plan.outcome.is_tie
    assert plan.updates[0].post_rating > 1000
    assert not any(update.won for update in plan.updates)


def test_guest_match_never_affects_elo() -> None:
    plan = TournamentMatchProcessor().process(_submission(1, 3, sets=(0, 2)), _snapshot())

    assert plan.match.affects_elo is False
    assert plan.updates == ()
    assert plan.match.winner_participant_id == 3
    assert plan.match.player1_elo_before == plan.match.player1_elo_after == 1000
    assert plan.match.player2_elo_before is None
    assert plan.match.player2_elo_after is None


def test_draft_tournament_rejects_matches() -> None:
    with pytest.raises(TournamentStateError, match="active status"):
        TournamentMatchProcessor().process(_submission(), _snapshot(status=TournamentStatus.DRAFT))


def test_participants_must_belong_to_group() -> None:
    with pytest.raises(MembershipError, match="Both players must be participants"):
        TournamentMatchProcessor().process(_submission(1, 9), _snapshot())


def test_each_pair_plays_once() -> None:
    played = (GroupMatchResult(2, 1, 0, 2),)
    with pytest.raises(DuplicateError, match="already played each other"):
        TournamentMatchProcessor().process(_submission(), _snapshot(matches=played))


@pytest.mark.parametrize(
    ("submission", "message"),
    [
        (_submission(1, 1), "same player"),
        (_submission(sets=(-1, 2)), "non-negative"),
        (_submission(sets=(3, 0)), "at most 2 sets"),
    ],
)
def test_invalid_submissions_rejected(submission: TournamentMatchSubmission, message: str) -> None:
    with pytest.raises(ValidationError, match=message):
        TournamentMatchProcessor().process(submission, _snapshot())


def test_from_tennis_score_carries_games() -> None:
    submission = TournamentMatchSubmission.from_tennis_score(
        tournament_id=5,
        group_id=50,
        participant1_id=1,
        participant2_id=2,
        score="7-5 3-6",
        match_date=date(2026, 6, 13),
    )

    assert (submission.participant1_sets, submission.participant2_sets) == (1, 1)
    assert (submission.participant1_games, submission.participant2_games) == (10, 11)
