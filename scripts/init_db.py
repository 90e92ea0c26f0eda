#!/usr/bin/env python3
"""Create the club rating schema and register players."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer
from sqlalchemy.orm import Session, sessionmaker

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db import DEFAULT_DB_URL, create_db_engine, create_session_factory, ensure_schema
from domain.config import ClubConfig, load_club_config
from domain.errors import RatingEngineError
from repositories.players import create_player
from services.base import atomic

DbUrlOption = Annotated[
    str,
    typer.Option(
        "--db-url",
        help="Database URL. Defaults to the local club_ratings postgres instance.",
    ),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        help="Club config TOML file. Defaults to configs/default.toml.",
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Log each step at INFO level."),
]

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Database setup commands.",
)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def open_session_factory(db_url: str) -> sessionmaker[Session]:
    engine = create_db_engine(db_url)
    ensure_schema(engine)
    return create_session_factory(engine)


def load_config_option(config: Path | None) -> ClubConfig:
    try:
        return load_club_config(config)
    except (FileNotFoundError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc


def fail(exc: RatingEngineError) -> typer.Exit:
    typer.echo(f"error: {exc}", err=True)
    return typer.Exit(code=1)


@app.command()
def create_schema(db_url: DbUrlOption = DEFAULT_DB_URL, verbose: VerboseOption = False) -> None:
    """Create every missing table and index."""
    configure_logging(verbose)
    engine = create_db_engine(db_url)
    ensure_schema(engine)
    typer.echo(f"schema ready on {engine.url.render_as_string(hide_password=True)}")


@app.command()
def add_player(
    first_name: Annotated[str, typer.Argument(help="Player first name.")],
    last_name: Annotated[str, typer.Argument(help="Player last name.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
    verbose: VerboseOption = False,
) -> None:
    """Register a club member and print the new player id."""
    configure_logging(verbose)
    session_factory = open_session_factory(db_url)
    try:
        with session_factory() as session:
            with atomic(session, "add player"):
                player = create_player(session, first_name=first_name, last_name=last_name)
                player_id = player.id
    except RatingEngineError as exc:
        raise fail(exc) from exc
    typer.echo(f"player_id={player_id} name={first_name} {last_name}")


if __name__ == "__main__":
    app()
