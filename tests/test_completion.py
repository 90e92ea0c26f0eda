"""Tests for tournament completion: placements and winner bonuses."""

from __future__ import annotations

import pytest

from domain.common import PlayerRating
from domain.errors import TournamentStateError, ValidationError
from domain.protocol import RatingContext, RatingEventKind
from domain.tournament import (
    CompletionGroup,
    GroupMatchResult,
    GroupParticipant,
    TournamentCompletionProcessor,
    TournamentStatus,
)


def _group(group_id: int, *, guest_wins: bool = False) -> CompletionGroup:
    base = group_id * 10
    participants = (
        GroupParticipant(participant_id=base + 1, player_id=base + 101),
        GroupParticipant(participant_id=base + 2, player_id=base + 102),
        GroupParticipant(participant_id=base + 3, is_guest=True, display_name="Guest"),
    )
    guest_sets = (0, 2) if guest_wins else (2, 0)
    matches = (
        GroupMatchResult(base + 1, base + 2, 2, 1),
        GroupMatchResult(base + 1, base + 3, *guest_sets),
        GroupMatchResult(base + 2, base + 3, *guest_sets),
    )
    return CompletionGroup(group_id=group_id, participants=participants, matches=matches)


def test_one_placement_per_participant_and_bonus_to_winner() -> None:
    plan = TournamentCompletionProcessor().complete(
        status=TournamentStatus.ACTIVE,
        winner_bonus_elo=50,
        groups=[_group(1)],
        ratings={111: PlayerRating(player_id=111, context=RatingContext.SINGLES, rating=1230, sequence=6)},
    )

    placements = plan.placements_for(1)
    assert [placement.final_standing for placement in placements] == [1, 2, 3]
    assert [placement.participant_id for placement in placements] == [11, 12, 13]
    assert [placement.bonus_elo_awarded for placement in placements] == [50, 0, 0]

    (bonus,) = plan.bonus_updates
    assert bonus.player_id == 111
    assert bonus.kind is RatingEventKind.TOURNAMENT_BONUS
    assert (bonus.pre_rating, bonus.post_rating) == (1230, 1280)
    assert bonus.sequence == 7
    assert not bonus.counts_as_match


def test_guest_winner_forfeits_bonus_for_whole_group() -> None:
    plan = TournamentCompletionProcessor().complete(
        status=TournamentStatus.ACTIVE,
        winner_bonus_elo=100,
        groups=[_group(1, guest_wins=True)],
    )

    placements = plan.placements_for(1)
    assert placements[0].standing.is_guest
    assert all(placement.bonus_elo_awarded == 0 for placement in placements)
    assert plan.bonus_updates == ()


def test_groups_without_completed_matches_are_skipped() -> None:
    empty = CompletionGroup(
        group_id=2,
        participants=(GroupParticipant(participant_id=21, player_id=121),),
        matches=(GroupMatchResult(21, 22, None, None),),
    )

    plan = TournamentCompletionProcessor().complete(
        status=TournamentStatus.ACTIVE,
        winner_bonus_elo=25,
        groups=[_group(1), empty],
    )

    assert plan.processed_group_ids == (1,)
    assert plan.skipped_group_ids == (2,)
    assert plan.placements_for(2) == []


def test_pending_matches_do_not_affect_final_standing() -> None:
    group = _group(1)
    pending = CompletionGroup(
        group_id=1,
        participants=group.participants,
        matches=group.matches + (GroupMatchResult(12, 11, None, 2),),
    )

    plan = TournamentCompletionProcessor().complete(
        status=TournamentStatus.ACTIVE,
        winner_bonus_elo=0,
        groups=[pending],
    )

    assert plan.placements_for(1)[0].participant_id == 11
    assert plan.placements_for(1)[0].standing.matches_played == 2


def test_player_winning_two_groups_stacks_bonuses() -> None:
    first = _group(1)
    second = CompletionGroup(
        group_id=2,
        participants=(
            GroupParticipant(participant_id=31, player_id=111),
            GroupParticipant(participant_id=32, player_id=999),
        ),
        matches=(GroupMatchResult(31, 32, 2, 0),),
    )

    plan = TournamentCompletionProcessor().complete(
        status=TournamentStatus.ACTIVE,
        winner_bonus_elo=40,
        groups=[first, second],
    )

    assert [(update.pre_rating, update.post_rating, update.sequence) for update in plan.bonus_updates] == [
        (1200, 1240, 1),
        (1240, 1280, 2),
    ]


@pytest.mark.parametrize("status", [TournamentStatus.DRAFT, TournamentStatus.COMPLETED])
def test_only_active_tournaments_complete(status: TournamentStatus) -> None:
    with pytest.raises(TournamentStateError):
        TournamentCompletionProcessor().complete(status=status, winner_bonus_elo=0, groups=[_group(1)])


@pytest.mark.parametrize("bonus", [-1, 501])
def test_bonus_outside_range_rejected(bonus: int) -> None:
    with pytest.raises(ValidationError, match="between 0 and 500"):
        TournamentCompletionProcessor().complete(
            status=TournamentStatus.ACTIVE,
            winner_bonus_elo=bonus,
            groups=[_group(1)],
        )
