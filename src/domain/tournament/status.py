"""Tournament lifecycle: draft -> active -> completed."""

from __future__ import annotations

from enum import Enum

from domain.errors import TournamentStateError


class TournamentStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"


_ALLOWED_TRANSITIONS: dict[TournamentStatus, TournamentStatus] = {
    TournamentStatus.DRAFT: TournamentStatus.ACTIVE,
    TournamentStatus.ACTIVE: TournamentStatus.COMPLETED,
}


def can_transition(current: TournamentStatus, target: TournamentStatus) -> bool:
    return _ALLOWED_TRANSITIONS.get(current) is target


def ensure_transition(current: TournamentStatus, target: TournamentStatus) -> TournamentStatus:
    """Return ``target`` if ``current`` may move to it, else raise."""
    if current is TournamentStatus.COMPLETED:
        raise TournamentStateError("Tournament is already completed")
    if not can_transition(current, target):
        raise TournamentStateError(
            f"Cannot move tournament from {current.value} to {target.value}"
        )
    return target


def ensure_deletable(current: TournamentStatus) -> None:
    if current is not TournamentStatus.DRAFT:
        raise TournamentStateError(f"Only draft tournaments can be deleted (status is {current.value})")


def ensure_accepts_matches(current: TournamentStatus) -> None:
    if current is not TournamentStatus.ACTIVE:
        raise TournamentStateError("Tournament must be in active status to record matches")


__all__ = [
    "TournamentStatus",
    "can_transition",
    "ensure_accepts_matches",
    "ensure_deletable",
    "ensure_transition",
]
