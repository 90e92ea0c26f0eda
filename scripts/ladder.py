#!/usr/bin/env python3
"""Ladder commands: create, membership, match recording and leaderboards."""

from __future__ import annotations

import sys
from datetime import date, datetime
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db import DEFAULT_DB_URL
from domain.errors import RatingEngineError
from domain.ladder import LadderMatchSubmission
from domain.protocol import LadderType, RatingContext
from init_db import (
    ConfigOption,
    DbUrlOption,
    VerboseOption,
    configure_logging,
    fail,
    load_config_option,
    open_session_factory,
)
from services.ladder_service import LadderService

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Ladder commands.",
)


def _service(db_url: str, config: Path | None, verbose: bool) -> LadderService:
    configure_logging(verbose)
    return LadderService(open_session_factory(db_url), load_config_option(config))


@app.command()
def create(
    name: Annotated[str, typer.Argument(help="Ladder name.")],
    kind: Annotated[LadderType, typer.Option("--type", help="Ladder format.")] = LadderType.SINGLES,
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Create an active ladder and print its id."""
    service = _service(db_url, config, verbose)
    try:
        ladder_id = service.create_ladder(name=name, kind=kind)
    except RatingEngineError as exc:
        raise fail(exc) from exc
    typer.echo(f"ladder_id={ladder_id} type={kind.value}")


@app.command()
def join(
    ladder_id: Annotated[int, typer.Argument(help="Ladder id.")],
    player_id: Annotated[int, typer.Argument(help="Player id.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Add (or re-activate) a player on a ladder."""
    service = _service(db_url, config, verbose)
    try:
        service.join(ladder_id=ladder_id, player_id=player_id)
    except RatingEngineError as exc:
        raise fail(exc) from exc
    typer.echo(f"player {player_id} joined ladder {ladder_id}")


@app.command()
def leave(
    ladder_id: Annotated[int, typer.Argument(help="Ladder id.")],
    player_id: Annotated[int, typer.Argument(help="Player id.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Deactivate a player's ladder membership."""
    service = _service(db_url, config, verbose)
    try:
        service.leave(ladder_id=ladder_id, player_id=player_id)
    except RatingEngineError as exc:
        raise fail(exc) from exc
    typer.echo(f"player {player_id} left ladder {ladder_id}")


@app.command()
def record(
    ladder_id: Annotated[int, typer.Argument(help="Ladder id.")],
    player1_id: Annotated[int, typer.Argument(help="Side 1 primary player id.")],
    player2_id: Annotated[int, typer.Argument(help="Side 2 primary player id.")],
    score: Annotated[
        str | None,
        typer.Option("--score", help='Set-by-set score from side 1\'s view, e.g. "6-4 3-6 7-5".'),
    ] = None,
    player1_score: Annotated[
        int | None,
        typer.Option("--player1-score", help="Sets won by side 1 (instead of --score)."),
    ] = None,
    player2_score: Annotated[
        int | None,
        typer.Option("--player2-score", help="Sets won by side 2 (instead of --score)."),
    ] = None,
    player1_partner_id: Annotated[
        int | None,
        typer.Option("--player1-partner", help="Side 1 partner id on doubles/mixed ladders."),
    ] = None,
    player2_partner_id: Annotated[
        int | None,
        typer.Option("--player2-partner", help="Side 2 partner id on doubles/mixed ladders."),
    ] = None,
    match_date: Annotated[
        datetime | None,
        typer.Option("--date", formats=["%Y-%m-%d"], help="Match date. Defaults to today."),
    ] = None,
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Record one ladder match and print every participant's rating change."""
    played_on = match_date.date() if match_date is not None else date.today()
    if score is None and (player1_score is None or player2_score is None):
        raise typer.BadParameter("Pass --score or both --player1-score and --player2-score")
    if score is not None and (player1_score is not None or player2_score is not None):
        raise typer.BadParameter("--score cannot be combined with --player1-score/--player2-score")

    service = _service(db_url, config, verbose)
    try:
        if score is not None:
            submission = LadderMatchSubmission.from_tennis_score(
                ladder_id=ladder_id,
                player1_id=player1_id,
                player2_id=player2_id,
                score=score,
                match_date=played_on,
                player1_partner_id=player1_partner_id,
                player2_partner_id=player2_partner_id,
            )
        else:
            submission = LadderMatchSubmission(
                ladder_id=ladder_id,
                player1_id=player1_id,
                player2_id=player2_id,
                player1_score=player1_score,
                player2_score=player2_score,
                match_date=played_on,
                player1_partner_id=player1_partner_id,
                player2_partner_id=player2_partner_id,
            )
        recorded = service.record_match(submission)
    except RatingEngineError as exc:
        raise fail(exc) from exc

    typer.echo(
        f"match_id={recorded.match_id} score={submission.player1_score}-{submission.player2_score} "
        f"winner={recorded.plan.outcome.winner_id}"
    )
    for update in recorded.plan.updates:
        typer.echo(
            f"  player_id={update.player_id:<6d} {update.pre_rating:5d} -> {update.post_rating:5d} "
            f"({update.rating_delta:+d})"
        )


@app.command()
def leaderboard(
    ladder_id: Annotated[int, typer.Argument(help="Ladder id.")],
    top_n: Annotated[int, typer.Option("--top-n", help="Number of players to show.")] = 20,
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Print active ladder members ranked by current rating."""
    if top_n <= 0:
        raise typer.BadParameter("--top-n must be greater than 0")

    service = _service(db_url, config, verbose)
    try:
        entries = service.leaderboard(ladder_id)
    except RatingEngineError as exc:
        raise fail(exc) from exc

    if not entries:
        typer.echo(f"No active participants on ladder {ladder_id}.")
        return
    for entry in entries[:top_n]:
        typer.echo(
            f"{entry.rank:2d}. {entry.display_name:<24} elo={entry.rating:5d} "
            f"played={entry.matches_played:3d} won={entry.matches_won:3d} win_rate={entry.win_rate:5.1%}"
        )


@app.command()
def history(
    player_id: Annotated[int, typer.Argument(help="Player id.")],
    context: Annotated[
        RatingContext,
        typer.Option("--context", help="Rating pool to show."),
    ] = RatingContext.SINGLES,
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Print a player's rating events, oldest first."""
    service = _service(db_url, config, verbose)
    try:
        events = service.history(player_id, context=context)
    except RatingEngineError as exc:
        raise fail(exc) from exc

    if not events:
        typer.echo(f"No {context.value} rating events for player {player_id}.")
        return
    for event in events:
        typer.echo(
            f"#{event.sequence:<4d} {event.event_date} {event.kind:<17} "
            f"{event.pre_rating:5d} -> {event.post_rating:5d} ({event.rating_delta:+d})"
        )


if __name__ == "__main__":
    app()
