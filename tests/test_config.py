"""Tests for TOML-based club config loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from domain.config import DEFAULT_CONFIG_PATH, load_club_config


def test_bundled_default_config_matches_club_rules() -> None:
    config = load_club_config()

    assert config.file_path == DEFAULT_CONFIG_PATH
    assert config.name == "club_default"
    assert config.elo.initial_elo == 1200
    assert config.elo.k_factor == pytest.approx(32.0)
    assert config.elo.scale_factor == pytest.approx(400.0)
    assert config.elo.rounding == "half_up"
    assert config.tournament.points_for_win == 2
    assert config.tournament.points_for_loss == 1
    assert config.tournament.points_for_tie == 1
    assert config.tournament.max_sets_won == 2
    assert config.tournament.max_winner_bonus_elo == 500


def test_load_club_config_from_file(tmp_path: Path) -> None:
    config_path = tmp_path / "league.toml"
    config_path.write_text(
        """
[system]
name = "summer_league"
description = "Three points for a win"

[elo]
initial_elo = 1500
k_factor = 24.0
rounding = "half_even"

[tournament]
points_for_win = 3
points_for_loss = 0
max_winner_bonus_elo = 100
""".strip()
    )

    config = load_club_config(config_path)

    assert config.name == "summer_league"
    assert config.description == "Three points for a win"
    assert config.elo.initial_elo == 1500
    assert config.elo.k_factor == pytest.approx(24.0)
    assert config.elo.scale_factor == pytest.approx(400.0)
    assert config.elo.rounding == "half_even"
    assert config.tournament.points_for_win == 3
    assert config.tournament.points_for_loss == 0
    assert config.tournament.points_for_tie == 1
    assert config.tournament.max_winner_bonus_elo == 100
    assert config.as_config_json()["k_factor"] == pytest.approx(24.0)


def test_missing_system_name_raises(tmp_path: Path) -> None:
    config_path = tmp_path / "broken.toml"
    config_path.write_text("[elo]\nk_factor = 20.0\n")

    with pytest.raises(ValueError, match=r"\[system\].name is required"):
        load_club_config(config_path)


@pytest.mark.parametrize(
    ("section", "body", "message"),
    [
        ("elo", "k_factor = 0.0", r"\[elo\].k_factor must be > 0"),
        ("elo", 'rounding = "truncate"', r"\[elo\].rounding must be one of"),
        ("tournament", "points_for_win = 0", r"\[tournament\].points_for_win must be >= points_for_loss"),
        ("tournament", "max_sets_won = 0", r"\[tournament\].max_sets_won must be > 0"),
        ("tournament", "max_winner_bonus_elo = 600", r"\[tournament\].max_winner_bonus_elo must be between"),
    ],
)
def test_invalid_values_raise(tmp_path: Path, section: str, body: str, message: str) -> None:
    config_path = tmp_path / "invalid.toml"
    config_path.write_text(f'[system]\nname = "bad"\n\n[{section}]\n{body}\n')

    with pytest.raises(ValueError, match=message):
        load_club_config(config_path)


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_club_config(tmp_path / "nope.toml")
