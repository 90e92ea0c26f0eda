"""Shared fixtures: a throwaway SQLite database per test."""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy.orm import Session, sessionmaker

from db import create_db_engine, create_session_factory, ensure_schema
from domain.config import ClubConfig, default_club_config
from repositories.players import create_player


@pytest.fixture()
def session_factory(tmp_path: Path) -> sessionmaker[Session]:
    engine = create_db_engine(f"sqlite:///{tmp_path / 'club.db'}")
    ensure_schema(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture()
def config() -> ClubConfig:
    return default_club_config()


@pytest.fixture()
def player_ids(session_factory: sessionmaker[Session]) -> list[int]:
    """Six registered players: Ana, Ben, Cleo, Dan, Eva, Finn."""
    names = [
        ("Ana", "Alves"),
        ("Ben", "Brooks"),
        ("Cleo", "Carter"),
        ("Dan", "Dorsey"),
        ("Eva", "Evans"),
        ("Finn", "Fischer"),
    ]
    with session_factory() as session:
        with session.begin():
            players = [create_player(session, first_name=first, last_name=last) for first, last in names]
            return [player.id for player in players]
