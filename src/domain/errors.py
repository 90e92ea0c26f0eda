"""Error taxonomy for the rating engine.

Every error derives from ``ValueError`` so callers that only guard against bad
input keep working, and carries a short human-readable message.
"""

from __future__ import annotations


class RatingEngineError(ValueError):
    """Base class for all rating engine failures."""


class ValidationError(RatingEngineError):
    """Malformed input; safe to retry after correction."""


class MembershipError(RatingEngineError):
    """A named player is not an active participant of the ladder or group."""


class DuplicateError(RatingEngineError):
    """An identical match already exists."""


class NotFoundError(RatingEngineError):
    """A referenced ladder, tournament, group or participant does not exist."""


class TournamentStateError(RatingEngineError):
    """The requested tournament status transition is not allowed."""


class ConsistencyError(RatingEngineError):
    """A multi-row write failed; the transaction was rolled back."""


class ConcurrentUpdateError(ConsistencyError):
    """Another writer appended a rating event for the same player first."""


__all__ = [
    "ConcurrentUpdateError",
    "ConsistencyError",
    "DuplicateError",
    "MembershipError",
    "NotFoundError",
    "RatingEngineError",
    "TournamentStateError",
    "ValidationError",
]
