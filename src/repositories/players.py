"""Persistence helpers for club members."""

from __future__ import annotations

from sqlalchemy.orm import Session

from domain.errors import NotFoundError, ValidationError
from models import Player


def create_player(session: Session, *, first_name: str, last_name: str) -> Player:
    if not first_name.strip() or not last_name.strip():
        raise ValidationError("First and last name are required")
    player = Player(first_name=first_name.strip(), last_name=last_name.strip())
    session.add(player)
    session.flush()
    return player


def get_player(session: Session, player_id: int) -> Player:
    player = session.get(Player, player_id)
    if player is None:
        raise NotFoundError(f"Player {player_id} not found")
    return player
