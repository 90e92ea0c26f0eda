"""Round-robin tournament logic."""

from domain.tournament.completion import (
    CompletionGroup,
    CompletionPlan,
    Placement,
    TournamentCompletionProcessor,
)
from domain.tournament.matches import (
    TOURNAMENT_RATING_CONTEXT,
    GroupSnapshot,
    TournamentMatchPlan,
    TournamentMatchProcessor,
    TournamentMatchRecord,
    TournamentMatchSubmission,
    has_played,
)
from domain.tournament.rules import TournamentRules
from domain.tournament.standings import (
    GroupMatchResult,
    GroupParticipant,
    GroupStanding,
    calculate_standings,
    completed_matches,
)
from domain.tournament.status import (
    TournamentStatus,
    can_transition,
    ensure_accepts_matches,
    ensure_deletable,
    ensure_transition,
)

__all__ = [
    "TOURNAMENT_RATING_CONTEXT",
    "CompletionGroup",
    "CompletionPlan",
    "GroupMatchResult",
    "GroupParticipant",
    "GroupSnapshot",
    "GroupStanding",
    "Placement",
    "TournamentCompletionProcessor",
    "TournamentMatchPlan",
    "TournamentMatchProcessor",
    "TournamentMatchRecord",
    "TournamentMatchSubmission",
    "TournamentRules",
    "TournamentStatus",
    "calculate_standings",
    "can_transition",
    "completed_matches",
    "ensure_accepts_matches",
    "ensure_deletable",
    "ensure_transition",
    "has_played",
]
