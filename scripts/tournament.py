#!/usr/bin/env python3
"""Tournament commands: setup, lifecycle, match recording and standings."""

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
from domain.tournament import TournamentMatchSubmission
from init_db import (
    ConfigOption,
    DbUrlOption,
    VerboseOption,
    configure_logging,
    fail,
    load_config_option,
    open_session_factory,
)
from services.tournament_service import GUEST_RETENTION_DAYS, TournamentService

DateOption = Annotated[
    datetime | None,
    typer.Option("--date", formats=["%Y-%m-%d"], help="Match date. Defaults to today."),
]

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Round-robin tournament commands.",
)


def _service(db_url: str, config: Path | None, verbose: bool) -> TournamentService:
    configure_logging(verbose)
    return TournamentService(open_session_factory(db_url), load_config_option(config))


@app.command()
def create(
    name: Annotated[str, typer.Argument(help="Tournament name.")],
    start_date: Annotated[datetime, typer.Argument(formats=["%Y-%m-%d"], help="First day.")],
    end_date: Annotated[datetime, typer.Argument(formats=["%Y-%m-%d"], help="Last day.")],
    winner_bonus_elo: Annotated[
        int,
        typer.Option("--winner-bonus-elo", help="Flat ELO bonus for each group winner (0-500)."),
    ] = 0,
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Create a draft tournament and print its id."""
    service = _service(db_url, config, verbose)
    try:
        tournament_id = service.create_tournament(
            name=name,
            start_date=start_date.date(),
            end_date=end_date.date(),
            winner_bonus_elo=winner_bonus_elo,
        )
    except RatingEngineError as exc:
        raise fail(exc) from exc
    typer.echo(f"tournament_id={tournament_id} status=draft")


@app.command()
def add_group(
    tournament_id: Annotated[int, typer.Argument(help="Tournament id.")],
    name: Annotated[str, typer.Argument(help="Group name.")],
    gender: Annotated[str, typer.Option("--gender", help="mens, womens or mixed.")] = "mixed",
    match_type: Annotated[str, typer.Option("--match-type", help="singles or doubles.")] = "singles",
    level: Annotated[str | None, typer.Option("--level", help="Free-form level label.")] = None,
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Add a round-robin group and print its id."""
    service = _service(db_url, config, verbose)
    try:
        group_id = service.add_group(
            tournament_id=tournament_id,
            name=name,
            gender=gender,
            match_type=match_type,
            level=level,
        )
    except RatingEngineError as exc:
        raise fail(exc) from exc
    typer.echo(f"group_id={group_id}")


@app.command()
def add_player(
    group_id: Annotated[int, typer.Argument(help="Group id.")],
    player_id: Annotated[int, typer.Argument(help="Registered player id.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Enter a registered player into a group."""
    service = _service(db_url, config, verbose)
    try:
        participant_id = service.add_player(group_id=group_id, player_id=player_id)
    except RatingEngineError as exc:
        raise fail(exc) from exc
    typer.echo(f"participant_id={participant_id}")


@app.command()
def add_guest(
    group_id: Annotated[int, typer.Argument(help="Group id.")],
    guest_name: Annotated[str, typer.Argument(help="Guest display name.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Enter a guest (no ELO impact) into a group."""
    service = _service(db_url, config, verbose)
    try:
        participant_id = service.add_guest(group_id=group_id, guest_name=guest_name)
    except RatingEngineError as exc:
        raise fail(exc) from exc
    typer.echo(f"participant_id={participant_id} guest")


@app.command()
def activate(
    tournament_id: Annotated[int, typer.Argument(help="Tournament id.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Move a draft tournament to active so matches can be recorded."""
    service = _service(db_url, config, verbose)
    try:
        service.activate(tournament_id)
    except RatingEngineError as exc:
        raise fail(exc) from exc
    typer.echo(f"tournament {tournament_id} is active")


@app.command()
def record_match(
    tournament_id: Annotated[int, typer.Argument(help="Tournament id.")],
    group_id: Annotated[int, typer.Argument(help="Group id.")],
    participant1_id: Annotated[int, typer.Argument(help="First participant id.")],
    participant2_id: Annotated[int, typer.Argument(help="Second participant id.")],
    score: Annotated[
        str,
        typer.Argument(help='Set-by-set score from the first participant\'s view, e.g. "6-4 7-5".'),
    ],
    match_date: DateOption = None,
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Record one group match; guest matches never change ELO."""
    service = _service(db_url, config, verbose)
    try:
        submission = TournamentMatchSubmission.from_tennis_score(
            tournament_id=tournament_id,
            group_id=group_id,
            participant1_id=participant1_id,
            participant2_id=participant2_id,
            score=score,
            match_date=match_date.date() if match_date is not None else date.today(),
        )
        recorded = service.record_match(submission)
    except RatingEngineError as exc:
        raise fail(exc) from exc

    match = recorded.plan.match
    typer.echo(
        f"match_id={recorded.match_id} sets={match.participant1_score}-{match.participant2_score} "
        f"winner={match.winner_participant_id or 'tie'} affects_elo={match.affects_elo}"
    )
    for update in recorded.plan.updates:
        typer.echo(
            f"  player_id={update.player_id:<6d} {update.pre_rating:5d} -> {update.post_rating:5d} "
            f"({update.rating_delta:+d})"
        )


@app.command()
def standings(
    tournament_id: Annotated[int, typer.Argument(help="Tournament id.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Print live standings for every group."""
    service = _service(db_url, config, verbose)
    try:
        by_group = service.standings(tournament_id)
    except RatingEngineError as exc:
        raise fail(exc) from exc

    if not by_group:
        typer.echo(f"Tournament {tournament_id} has no groups.")
        return
    for group_id, rows in by_group.items():
        typer.echo(f"group_id={group_id}")
        for index, row in enumerate(rows, start=1):
            name = row.display_name or f"participant {row.participant_id}"
            typer.echo(
                f"{index:2d}. {name:<24} pts={row.points:3d} W={row.wins:2d} L={row.losses:2d} "
                f"T={row.ties:2d} sets={row.sets_won}-{row.sets_lost} games={row.games_won}-{row.games_lost}"
            )


@app.command()
def complete(
    tournament_id: Annotated[int, typer.Argument(help="Tournament id.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Finalise placements, award winner bonuses and mark the tournament completed."""
    service = _service(db_url, config, verbose)
    try:
        plan = service.complete(tournament_id)
    except RatingEngineError as exc:
        raise fail(exc) from exc

    for group_id in plan.processed_group_ids:
        winner = plan.placements_for(group_id)[0]
        name = winner.standing.display_name or f"participant {winner.participant_id}"
        typer.echo(f"group_id={group_id} winner={name} bonus_elo={winner.bonus_elo_awarded}")
    for group_id in plan.skipped_group_ids:
        typer.echo(f"group_id={group_id} skipped (no completed matches)")
    typer.echo(f"tournament {tournament_id} is completed")


@app.command()
def delete(
    tournament_id: Annotated[int, typer.Argument(help="Tournament id.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Delete a draft tournament."""
    service = _service(db_url, config, verbose)
    try:
        service.delete(tournament_id)
    except RatingEngineError as exc:
        raise fail(exc) from exc
    typer.echo(f"tournament {tournament_id} deleted")


@app.command()
def cleanup_guests(
    retention_days: Annotated[
        int,
        typer.Option("--retention-days", help="Days a completed tournament keeps its guest names."),
    ] = GUEST_RETENTION_DAYS,
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Erase guest names from tournaments that were completed a while ago."""
    service = _service(db_url, config, verbose)
    try:
        erased = service.cleanup_guests(retention_days=retention_days)
    except RatingEngineError as exc:
        raise fail(exc) from exc
    typer.echo(f"erased {erased} guest names")


if __name__ == "__main__":
    app()
