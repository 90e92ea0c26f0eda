"""Database repository helpers."""

from repositories.ladder import (
    LeaderboardEntry,
    fetch_active_player_ids,
    fetch_leaderboard,
    fetch_same_day_matches,
    get_ladder,
    insert_ladder_match,
)
from repositories.players import create_player, get_player
from repositories.ratings import (
    count_tracked_players,
    fetch_player_ratings,
    fetch_rating_history,
    insert_rating_events,
)
from repositories.tournament import (
    fetch_completion_groups,
    fetch_group_matches,
    fetch_group_participants,
    get_tournament,
    insert_tournament_match,
    insert_winners,
    transition_status,
)

__all__ = [
    "LeaderboardEntry",
    "count_tracked_players",
    "create_player",
    "fetch_active_player_ids",
    "fetch_completion_groups",
    "fetch_group_matches",
    "fetch_group_participants",
    "fetch_leaderboard",
    "fetch_player_ratings",
    "fetch_rating_history",
    "fetch_same_day_matches",
    "get_ladder",
    "get_player",
    "get_tournament",
    "insert_ladder_match",
    "insert_rating_events",
    "insert_tournament_match",
    "insert_winners",
    "transition_status",
]
