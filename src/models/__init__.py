"""ORM models."""

from models.base import Base
from models.ladder import Ladder, LadderMatch, LadderParticipant
from models.player import Player
from models.rating_event import RatingEvent
from models.tournament import (
    Tournament,
    TournamentGroup,
    TournamentMatch,
    TournamentParticipant,
    TournamentWinner,
)

__all__ = [
    "Base",
    "Ladder",
    "LadderMatch",
    "LadderParticipant",
    "Player",
    "RatingEvent",
    "Tournament",
    "TournamentGroup",
    "TournamentMatch",
    "TournamentParticipant",
    "TournamentWinner",
]
