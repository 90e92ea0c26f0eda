"""Persistence helpers for tournaments, groups, participants, matches and winners."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from domain.errors import ConcurrentUpdateError, DuplicateError, NotFoundError, ValidationError
from domain.tournament.completion import CompletionGroup, Placement
from domain.tournament.matches import TournamentMatchRecord
from domain.tournament.standings import GroupMatchResult, GroupParticipant
from domain.tournament.status import TournamentStatus
from models import (
    Player,
    Tournament,
    TournamentGroup,
    TournamentMatch,
    TournamentParticipant,
    TournamentWinner,
)


def get_tournament(session: Session, tournament_id: int) -> Tournament:
    tournament = session.get(Tournament, tournament_id)
    if tournament is None:
        raise NotFoundError(f"Tournament {tournament_id} not found")
    return tournament


def get_group(session: Session, group_id: int) -> TournamentGroup:
    group = session.get(TournamentGroup, group_id)
    if group is None:
        raise NotFoundError(f"Tournament group {group_id} not found")
    return group


def create_tournament(
    session: Session,
    *,
    name: str,
    start_date: date,
    end_date: date,
    winner_bonus_elo: int,
) -> Tournament:
    tournament = Tournament(
        name=name,
        start_date=start_date,
        end_date=end_date,
        status=TournamentStatus.DRAFT.value,
        winner_bonus_elo=winner_bonus_elo,
    )
    session.add(tournament)
    session.flush()
    return tournament


def create_group(
    session: Session,
    *,
    tournament_id: int,
    name: str,
    gender: str = "mixed",
    match_type: str = "singles",
    level: str | None = None,
) -> TournamentGroup:
    existing = session.scalar(
        select(TournamentGroup.id).where(
            TournamentGroup.tournament_id == tournament_id,
            TournamentGroup.name == name,
        )
    )
    if existing is not None:
        raise DuplicateError(f"A group named {name} already exists in this tournament")

    group = TournamentGroup(
        tournament_id=tournament_id,
        name=name,
        gender=gender,
        match_type=match_type,
        level=level,
    )
    session.add(group)
    session.flush()
    return group


def add_participant(
    session: Session,
    *,
    group: TournamentGroup,
    player_id: int | None = None,
    guest_name: str | None = None,
) -> TournamentParticipant:
    """Enter a registered player, or a named guest when ``player_id`` is omitted."""
    if (player_id is None) == (guest_name is None):
        raise ValidationError("Provide either a player or a guest name")
    if guest_name is not None and not guest_name.strip():
        raise ValidationError("Guest name cannot be empty")
    if player_id is not None:
        existing = session.scalar(
            select(TournamentParticipant.id).where(
                TournamentParticipant.group_id == group.id,
                TournamentParticipant.player_id == player_id,
            )
        )
        if existing is not None:
            raise DuplicateError("Player is already in this group")

    participant = TournamentParticipant(
        tournament_id=group.tournament_id,
        group_id=group.id,
        player_id=player_id,
        is_guest=player_id is None,
        guest_name=None if guest_name is None else guest_name.strip(),
    )
    session.add(participant)
    session.flush()
    return participant


def fetch_groups(session: Session, tournament_id: int) -> list[TournamentGroup]:
    return list(
        session.scalars(
            select(TournamentGroup)
            .where(TournamentGroup.tournament_id == tournament_id)
            .order_by(TournamentGroup.name, TournamentGroup.id)
        )
    )


def fetch_group_participants(session: Session, group_id: int) -> list[GroupParticipant]:
    """Roster in entry order, with display names resolved."""
    rows = session.execute(
        select(TournamentParticipant, Player)
        .outerjoin(Player, Player.id == TournamentParticipant.player_id)
        .where(TournamentParticipant.group_id == group_id)
        .order_by(TournamentParticipant.id)
    ).all()
    participants: list[GroupParticipant] = []
    for participant, player in rows:
        if participant.is_guest and participant.guest_deleted_at is not None:
            display_name = "Guest"
        elif participant.is_guest:
            display_name = participant.guest_name or "Guest"
        else:
            display_name = player.display_name if player is not None else "Unknown"
        participants.append(
            GroupParticipant(
                participant_id=participant.id,
                player_id=participant.player_id,
                is_guest=participant.is_guest,
                display_name=display_name,
            )
        )
    return participants


def fetch_group_matches(session: Session, group_id: int) -> list[GroupMatchResult]:
    rows = session.scalars(
        select(TournamentMatch).where(TournamentMatch.group_id == group_id).order_by(TournamentMatch.id)
    )
    return [
        GroupMatchResult(
            match_id=row.id,
            participant1_id=row.participant1_id,
            participant2_id=row.participant2_id,
            participant1_sets=row.participant1_score,
            participant2_sets=row.participant2_score,
            participant1_games=row.participant1_games,
            participant2_games=row.participant2_games,
        )
        for row in rows
    ]


def fetch_completion_groups(session: Session, tournament_id: int) -> list[CompletionGroup]:
    return [
        CompletionGroup(
            group_id=group.id,
            participants=tuple(fetch_group_participants(session, group.id)),
            matches=tuple(fetch_group_matches(session, group.id)),
        )
        for group in fetch_groups(session, tournament_id)
    ]


def insert_tournament_match(session: Session, record: TournamentMatchRecord) -> TournamentMatch:
    match = TournamentMatch(
        tournament_id=record.tournament_id,
        group_id=record.group_id,
        match_date=record.match_date,
        participant1_id=record.participant1_id,
        participant2_id=record.participant2_id,
        participant1_score=record.participant1_score,
        participant2_score=record.participant2_score,
        participant1_games=record.participant1_games,
        participant2_games=record.participant2_games,
        winner_participant_id=record.winner_participant_id,
        affects_elo=record.affects_elo,
        player1_elo_before=record.player1_elo_before,
        player1_elo_after=record.player1_elo_after,
        player2_elo_before=record.player2_elo_before,
        player2_elo_after=record.player2_elo_after,
    )
    session.add(match)
    session.flush()
    return match


def insert_winners(session: Session, *, tournament_id: int, placements: Sequence[Placement]) -> None:
    """One row per participant per group, including non-winners."""
    session.add_all(
        [
            TournamentWinner(
                tournament_id=tournament_id,
                group_id=placement.group_id,
                participant_id=placement.participant_id,
                player_id=placement.player_id,
                final_standing=placement.final_standing,
                points=placement.standing.points,
                match_wins=placement.standing.wins,
                match_losses=placement.standing.losses,
                sets_won=placement.standing.sets_won,
                sets_lost=placement.standing.sets_lost,
                games_won=placement.standing.games_won,
                games_lost=placement.standing.games_lost,
                bonus_elo_awarded=placement.bonus_elo_awarded,
            )
            for placement in placements
        ]
    )
    session.flush()


def fetch_winners(session: Session, tournament_id: int) -> list[TournamentWinner]:
    return list(
        session.scalars(
            select(TournamentWinner)
            .where(TournamentWinner.tournament_id == tournament_id)
            .order_by(TournamentWinner.group_id, TournamentWinner.final_standing)
        )
    )


def transition_status(
    session: Session,
    *,
    tournament_id: int,
    current: TournamentStatus,
    target: TournamentStatus,
) -> None:
    """Compare-and-set the status so two concurrent transitions cannot both win."""
    result = session.execute(
        update(Tournament)
        .where(Tournament.id == tournament_id, Tournament.status == current.value)
        .values(status=target.value)
    )
    if result.rowcount != 1:
        raise ConcurrentUpdateError(
            f"Tournament {tournament_id} changed status while it was being moved to {target.value}"
        )


def delete_tournament(session: Session, tournament_id: int) -> None:
    """Remove a draft tournament together with its groups and roster."""
    session.execute(delete(TournamentParticipant).where(TournamentParticipant.tournament_id == tournament_id))
    session.execute(delete(TournamentGroup).where(TournamentGroup.tournament_id == tournament_id))
    session.execute(delete(Tournament).where(Tournament.id == tournament_id))


def erase_expired_guests(session: Session, *, ended_before: date, erased_at: datetime) -> int:
    """Blank guest names in completed tournaments that ended before ``ended_before``.

    Returns the number of guests erased. Already-erased guests are left alone,
    so running it twice is harmless.
    """
    expired_tournaments = select(Tournament.id).where(
        Tournament.status == TournamentStatus.COMPLETED.value,
        Tournament.end_date < ended_before,
    )
    result = session.execute(
        update(TournamentParticipant)
        .where(
            TournamentParticipant.is_guest.is_(True),
            TournamentParticipant.guest_deleted_at.is_(None),
            TournamentParticipant.tournament_id.in_(expired_tournaments),
        )
        .values(guest_name=None, guest_deleted_at=erased_at)
    )
    return result.rowcount
