"""Transactional application services."""

from services.ladder_service import LadderService, RecordedLadderMatch
from services.tournament_service import RecordedTournamentMatch, TournamentService

__all__ = ["LadderService", "RecordedLadderMatch", "RecordedTournamentMatch", "TournamentService"]
