"""Load club rating configuration from a TOML file."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
import tomllib

from domain.elo.calculator import ROUNDING_MODES, EloParameters
from domain.tournament.rules import TournamentRules

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "configs" / "default.toml"


@dataclass(frozen=True)
class ClubConfig:
    """ELO parameters and tournament rules for one club deployment."""

    name: str
    description: str | None
    file_path: Path | None
    elo: EloParameters = field(default_factory=EloParameters)
    tournament: TournamentRules = field(default_factory=TournamentRules)

    def as_config_json(self) -> dict[str, Any]:
        return {
            "initial_elo": self.elo.initial_elo,
            "k_factor": self.elo.k_factor,
            "scale_factor": self.elo.scale_factor,
            "rounding": self.elo.rounding,
            "points_for_win": self.tournament.points_for_win,
            "points_for_loss": self.tournament.points_for_loss,
            "points_for_tie": self.tournament.points_for_tie,
            "max_sets_won": self.tournament.max_sets_won,
            "max_winner_bonus_elo": self.tournament.max_winner_bonus_elo,
        }


def default_club_config() -> ClubConfig:
    return ClubConfig(name="default", description=None, file_path=None)


def load_club_config(file_path: Path | None = None) -> ClubConfig:
    """Load and validate one club config file (the bundled default when omitted)."""
    path = file_path or DEFAULT_CONFIG_PATH
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    if not path.is_file():
        raise ValueError(f"Config path is not a file: {path}")

    with path.open("rb") as file:
        raw = tomllib.load(file)
    return parse_club_config(raw, path)


def parse_club_config(raw: dict[str, Any], file_path: Path) -> ClubConfig:
    system_raw = raw.get("system", {})
    elo_raw = raw.get("elo", {})
    tournament_raw = raw.get("tournament", {})

    name = str(system_raw.get("name", "")).strip()
    if not name:
        raise ValueError(f"{file_path}: [system].name is required")

    description_value = system_raw.get("description")
    description = None if description_value is None else str(description_value)

    elo = EloParameters(
        initial_elo=int(elo_raw.get("initial_elo", 1200)),
        k_factor=float(elo_raw.get("k_factor", 32.0)),
        scale_factor=float(elo_raw.get("scale_factor", 400.0)),
        rounding=str(elo_raw.get("rounding", "half_up")),
    )
    tournament = TournamentRules(
        points_for_win=int(tournament_raw.get("points_for_win", 2)),
        points_for_loss=int(tournament_raw.get("points_for_loss", 1)),
        points_for_tie=int(tournament_raw.get("points_for_tie", 1)),
        max_sets_won=int(tournament_raw.get("max_sets_won", 2)),
        max_winner_bonus_elo=int(tournament_raw.get("max_winner_bonus_elo", 500)),
    )
    _validate_elo(file_path=file_path, elo=elo)
    _validate_tournament(file_path=file_path, tournament=tournament)

    return ClubConfig(
        name=name,
        description=description,
        file_path=file_path,
        elo=elo,
        tournament=tournament,
    )


def _validate_elo(*, file_path: Path, elo: EloParameters) -> None:
    if elo.initial_elo <= 0:
        raise ValueError(f"{file_path}: [elo].initial_elo must be > 0")
    if elo.k_factor <= 0.0:
        raise ValueError(f"{file_path}: [elo].k_factor must be > 0")
    if elo.scale_factor <= 0.0:
        raise ValueError(f"{file_path}: [elo].scale_factor must be > 0")
    if elo.rounding not in ROUNDING_MODES:
        raise ValueError(f"{file_path}: [elo].rounding must be one of {', '.join(ROUNDING_MODES)}")


def _validate_tournament(*, file_path: Path, tournament: TournamentRules) -> None:
    if tournament.points_for_win < 0:
        raise ValueError(f"{file_path}: [tournament].points_for_win must be >= 0")
    if tournament.points_for_loss < 0:
        raise ValueError(f"{file_path}: [tournament].points_for_loss must be >= 0")
    if tournament.points_for_tie < 0:
        raise ValueError(f"{file_path}: [tournament].points_for_tie must be >= 0")
    if tournament.points_for_win < tournament.points_for_loss:
        raise ValueError(f"{file_path}: [tournament].points_for_win must be >= points_for_loss")
    if tournament.max_sets_won <= 0:
        raise ValueError(f"{file_path}: [tournament].max_sets_won must be > 0")
    if not 0 <= tournament.max_winner_bonus_elo <= 500:
        raise ValueError(f"{file_path}: [tournament].max_winner_bonus_elo must be between 0 and 500")


__all__ = ["ClubConfig", "DEFAULT_CONFIG_PATH", "default_club_config", "load_club_config", "parse_club_config"]
