"""Persistence helpers for the append-only rating event log."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date
from typing import Any

from sqlalchemy import and_, case, func, insert, select
from sqlalchemy.orm import Session

from domain.common import PlayerRating, RatingUpdate
from domain.errors import ConcurrentUpdateError
from domain.protocol import RatingContext
from models import RatingEvent


def _update_to_row(
    update: RatingUpdate,
    *,
    event_date: date,
    ladder_match_id: int | None,
    tournament_match_id: int | None,
    tournament_id: int | None,
) -> dict[str, Any]:
    return {
        "player_id": update.player_id,
        "context": update.context.value,
        "sequence": update.sequence,
        "kind": update.kind.value,
        "ladder_match_id": ladder_match_id,
        "tournament_match_id": tournament_match_id,
        "tournament_id": tournament_id,
        "event_date": event_date,
        "counts_as_match": update.counts_as_match,
        "won": update.won,
        "actual_score": update.actual_score,
        "expected_score": update.expected_score,
        "opponent_rating": update.opponent_rating,
        "pre_rating": update.pre_rating,
        "rating_delta": update.rating_delta,
        "post_rating": update.post_rating,
    }


def fetch_player_ratings(
    session: Session,
    player_ids: Iterable[int],
    *,
    context: RatingContext,
    initial_elo: int,
) -> dict[int, PlayerRating]:
    """Derive current rating and statistics for each player from the event log.

    Players without events get ``initial_elo`` and zero counters.
    """
    ids = sorted(set(player_ids))
    if not ids:
        return {}

    latest = (
        select(
            RatingEvent.player_id.label("player_id"),
            func.max(RatingEvent.sequence).label("sequence"),
            func.sum(case((RatingEvent.counts_as_match, 1), else_=0)).label("matches_played"),
            func.sum(
                case((and_(RatingEvent.counts_as_match, RatingEvent.won), 1), else_=0)
            ).label("matches_won"),
        )
        .where(RatingEvent.context == context.value, RatingEvent.player_id.in_(ids))
        .group_by(RatingEvent.player_id)
        .subquery()
    )
    statement = select(
        latest.c.player_id,
        latest.c.sequence,
        latest.c.matches_played,
        latest.c.matches_won,
        RatingEvent.post_rating,
    ).join(
        RatingEvent,
        and_(
            RatingEvent.player_id == latest.c.player_id,
            RatingEvent.context == context.value,
            RatingEvent.sequence == latest.c.sequence,
        ),
    )

    ratings = {
        player_id: PlayerRating(player_id=player_id, context=context, rating=initial_elo)
        for player_id in ids
    }
    for row in session.execute(statement).mappings():
        player_id = int(row["player_id"])
        ratings[player_id] = PlayerRating(
            player_id=player_id,
            context=context,
            rating=int(row["post_rating"]),
            matches_played=int(row["matches_played"] or 0),
            matches_won=int(row["matches_won"] or 0),
            sequence=int(row["sequence"]),
        )
    return ratings


def fetch_latest_sequences(session: Session, player_ids: Iterable[int], *, context: RatingContext) -> dict[int, int]:
    """Return the highest recorded sequence per player (0 when none)."""
    ids = sorted(set(player_ids))
    sequences = {player_id: 0 for player_id in ids}
    if not ids:
        return sequences

    rows = session.execute(
        select(RatingEvent.player_id, func.max(RatingEvent.sequence))
        .where(RatingEvent.context == context.value, RatingEvent.player_id.in_(ids))
        .group_by(RatingEvent.player_id)
    ).all()
    for player_id, sequence in rows:
        sequences[int(player_id)] = int(sequence)
    return sequences


def check_versions(session: Session, updates: Sequence[RatingUpdate]) -> None:
    """Reject updates that were not planned on top of each player's latest event."""
    by_context: dict[RatingContext, list[RatingUpdate]] = {}
    for update in updates:
        by_context.setdefault(update.context, []).append(update)

    for context, context_updates in by_context.items():
        latest = fetch_latest_sequences(
            session,
            (update.player_id for update in context_updates),
            context=context,
        )
        expected = dict(latest)
        for update in context_updates:
            if update.sequence != expected[update.player_id] + 1:
                raise ConcurrentUpdateError(
                    f"Rating for player {update.player_id} changed while this result was being recorded; "
                    "please retry"
                )
            expected[update.player_id] = update.sequence


def insert_rating_events(
    session: Session,
    updates: Sequence[RatingUpdate],
    *,
    event_date: date,
    ladder_match_id: int | None = None,
    tournament_match_id: int | None = None,
    tournament_id: int | None = None,
) -> None:
    """Version-check then append rating events for one operation."""
    if not updates:
        return

    check_versions(session, updates)
    payload = [
        _update_to_row(
            update,
            event_date=event_date,
            ladder_match_id=ladder_match_id,
            tournament_match_id=tournament_match_id,
            tournament_id=tournament_id,
        )
        for update in updates
    ]
    session.execute(insert(RatingEvent), payload)


def fetch_rating_history(session: Session, player_id: int, *, context: RatingContext) -> list[RatingEvent]:
    """All events of one player in one context, oldest first."""
    return list(
        session.scalars(
            select(RatingEvent)
            .where(RatingEvent.player_id == player_id, RatingEvent.context == context.value)
            .order_by(RatingEvent.sequence)
        )
    )


def count_tracked_players(session: Session, *, context: RatingContext | None = None) -> int:
    """Count players with at least one rating event."""
    statement = select(func.count(func.distinct(RatingEvent.player_id)))
    if context is not None:
        statement = statement.where(RatingEvent.context == context.value)
    return int(session.scalar(statement) or 0)
