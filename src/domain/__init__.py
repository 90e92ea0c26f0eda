"""Pure rating, standings and tournament logic."""

from domain.common import PlayerRating, RatingUpdate
from domain.protocol import LadderType, RatingContext, RatingEventKind

__all__ = ["LadderType", "PlayerRating", "RatingContext", "RatingEventKind", "RatingUpdate"]
