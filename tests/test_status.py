"""Tests for the tournament status state machine."""

from __future__ import annotations

import pytest

from domain.errors import TournamentStateError
from domain.tournament import (
    TournamentStatus,
    can_transition,
    ensure_accepts_matches,
    ensure_deletable,
    ensure_transition,
)


def test_forward_transitions_allowed() -> None:
    assert ensure_transition(TournamentStatus.DRAFT, TournamentStatus.ACTIVE) is TournamentStatus.ACTIVE
    assert ensure_transition(TournamentStatus.ACTIVE, TournamentStatus.COMPLETED) is TournamentStatus.COMPLETED


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (TournamentStatus.DRAFT, TournamentStatus.COMPLETED),
        (TournamentStatus.ACTIVE, TournamentStatus.DRAFT),
        (TournamentStatus.DRAFT, TournamentStatus.DRAFT),
    ],
)
def test_skips_and_reversals_rejected(current: TournamentStatus, target: TournamentStatus) -> None:
    assert not can_transition(current, target)
    with pytest.raises(TournamentStateError, match="Cannot move tournament"):
        ensure_transition(current, target)


@pytest.mark.parametrize("target", list(TournamentStatus))
def test_completed_is_terminal(target: TournamentStatus) -> None:
    with pytest.raises(TournamentStateError, match="already completed"):
        ensure_transition(TournamentStatus.COMPLETED, target)


def test_only_draft_can_be_deleted() -> None:
    ensure_deletable(TournamentStatus.DRAFT)
    for status in (TournamentStatus.ACTIVE, TournamentStatus.COMPLETED):
        with pytest.raises(TournamentStateError, match="Only draft tournaments"):
            ensure_deletable(status)


def test_only_active_accepts_matches() -> None:
    ensure_accepts_matches(TournamentStatus.ACTIVE)
    for status in (TournamentStatus.DRAFT, TournamentStatus.COMPLETED):
        with pytest.raises(TournamentStateError, match="active status"):
            ensure_accepts_matches(status)
