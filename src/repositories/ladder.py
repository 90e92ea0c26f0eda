"""Persistence helpers for ladders, memberships and ladder matches."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from domain.errors import NotFoundError
from domain.ladder import ExistingLadderMatch, LadderMatchRecord
from domain.protocol import LadderType, RatingContext
from models import Ladder, LadderMatch, LadderParticipant, Player
from repositories.ratings import fetch_player_ratings


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    player_id: int
    display_name: str
    rating: int
    matches_played: int
    matches_won: int

    @property
    def win_rate(self) -> float:
        if self.matches_played == 0:
            return 0.0
        return self.matches_won / float(self.matches_played)


def get_ladder(session: Session, ladder_id: int) -> Ladder:
    ladder = session.get(Ladder, ladder_id)
    if ladder is None:
        raise NotFoundError(f"Ladder {ladder_id} not found")
    return ladder


def ladder_type(ladder: Ladder) -> LadderType:
    return LadderType(ladder.type)


def create_ladder(session: Session, *, name: str, kind: LadderType) -> Ladder:
    ladder = Ladder(name=name, type=kind.value, is_active=True)
    session.add(ladder)
    session.flush()
    return ladder


def set_membership(session: Session, *, ladder_id: int, player_id: int, is_active: bool) -> LadderParticipant:
    """Join (or re-join) a ladder, or deactivate an existing membership."""
    membership = session.execute(
        select(LadderParticipant).where(
            LadderParticipant.ladder_id == ladder_id,
            LadderParticipant.player_id == player_id,
        )
    ).scalar_one_or_none()
    if membership is None:
        if not is_active:
            raise NotFoundError(f"Player {player_id} is not a member of ladder {ladder_id}")
        membership = LadderParticipant(ladder_id=ladder_id, player_id=player_id, is_active=True)
        session.add(membership)
    else:
        membership.is_active = is_active
    session.flush()
    return membership


def fetch_active_player_ids(session: Session, ladder_id: int) -> frozenset[int]:
    """Active membership read live at submission time."""
    rows = session.scalars(
        select(LadderParticipant.player_id).where(
            LadderParticipant.ladder_id == ladder_id,
            LadderParticipant.is_active.is_(True),
        )
    )
    return frozenset(int(player_id) for player_id in rows)


def fetch_same_day_matches(
    session: Session,
    *,
    ladder_id: int,
    match_date: date,
    player_ids: tuple[int, int],
) -> tuple[ExistingLadderMatch, ...]:
    """Matches on ``match_date`` involving either primary player."""
    rows = session.scalars(
        select(LadderMatch).where(
            LadderMatch.ladder_id == ladder_id,
            LadderMatch.match_date == match_date,
            or_(LadderMatch.player1_id.in_(player_ids), LadderMatch.player2_id.in_(player_ids)),
        )
    )
    return tuple(
        ExistingLadderMatch(
            match_date=row.match_date,
            player1_id=row.player1_id,
            player2_id=row.player2_id,
            player1_score=row.player1_score,
            player2_score=row.player2_score,
        )
        for row in rows
    )


def insert_ladder_match(session: Session, record: LadderMatchRecord) -> LadderMatch:
    match = LadderMatch(
        ladder_id=record.ladder_id,
        rating_context=record.rating_context.value,
        match_date=record.match_date,
        player1_id=record.player1_id,
        player2_id=record.player2_id,
        player1_partner_id=record.player1_partner_id,
        player2_partner_id=record.player2_partner_id,
        player1_score=record.player1_score,
        player2_score=record.player2_score,
        winner_id=record.winner_id,
        player1_elo_before=record.player1_elo_before,
        player1_elo_after=record.player1_elo_after,
        player2_elo_before=record.player2_elo_before,
        player2_elo_after=record.player2_elo_after,
        player1_partner_elo_before=record.player1_partner_elo_before,
        player1_partner_elo_after=record.player1_partner_elo_after,
        player2_partner_elo_before=record.player2_partner_elo_before,
        player2_partner_elo_after=record.player2_partner_elo_after,
    )
    session.add(match)
    session.flush()
    return match


def fetch_ladder_matches(session: Session, ladder_id: int) -> list[LadderMatch]:
    """Ladder match log, newest first."""
    return list(
        session.scalars(
            select(LadderMatch)
            .where(LadderMatch.ladder_id == ladder_id)
            .order_by(LadderMatch.match_date.desc(), LadderMatch.id.desc())
        )
    )


def fetch_leaderboard(
    session: Session,
    ladder_id: int,
    *,
    context: RatingContext,
    initial_elo: int,
) -> list[LeaderboardEntry]:
    """Active members ranked by current rating in the ladder's context."""
    players = session.execute(
        select(Player)
        .join(LadderParticipant, LadderParticipant.player_id == Player.id)
        .where(LadderParticipant.ladder_id == ladder_id, LadderParticipant.is_active.is_(True))
    ).scalars().all()
    ratings = fetch_player_ratings(
        session,
        (player.id for player in players),
        context=context,
        initial_elo=initial_elo,
    )

    ordered = sorted(
        players,
        key=lambda player: (-ratings[player.id].rating, -ratings[player.id].matches_won, player.id),
    )
    return [
        LeaderboardEntry(
            rank=index,
            player_id=player.id,
            display_name=player.display_name,
            rating=ratings[player.id].rating,
            matches_played=ratings[player.id].matches_played,
            matches_won=ratings[player.id].matches_won,
        )
        for index, player in enumerate(ordered, start=1)
    ]
