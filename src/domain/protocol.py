"""Shared enums for rating contexts and competition types."""

from __future__ import annotations

from enum import Enum


class RatingContext(str, Enum):
    """Which rating pool a match updates."""

    SINGLES = "singles"
    DOUBLES = "doubles"


class LadderType(str, Enum):
    """Ladder format; decides partner requirements and the rating context."""

    SINGLES = "singles"
    DOUBLES = "doubles"
    MIXED = "mixed"

    @property
    def requires_partners(self) -> bool:
        return self is not LadderType.SINGLES

    @property
    def rating_context(self) -> RatingContext:
        if self is LadderType.SINGLES:
            return RatingContext.SINGLES
        return RatingContext.DOUBLES


class RatingEventKind(str, Enum):
    """What produced a rating event."""

    LADDER_MATCH = "ladder_match"
    TOURNAMENT_MATCH = "tournament_match"
    TOURNAMENT_BONUS = "tournament_bonus"


__all__ = ["LadderType", "RatingContext", "RatingEventKind"]
