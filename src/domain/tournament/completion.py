"""One-shot tournament finalisation: placements and winner bonuses."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from domain.common import PlayerRating, RatingUpdate
from domain.elo.calculator import EloCalculator, EloParameters
from domain.errors import ValidationError
from domain.tournament.matches import TOURNAMENT_RATING_CONTEXT
from domain.tournament.rules import TournamentRules
from domain.tournament.standings import (
    GroupMatchResult,
    GroupParticipant,
    GroupStanding,
    calculate_standings,
    completed_matches,
)
from domain.tournament.status import TournamentStatus, ensure_transition


@dataclass(frozen=True)
class CompletionGroup:
    group_id: int
    participants: tuple[GroupParticipant, ...]
    matches: tuple[GroupMatchResult, ...]


@dataclass(frozen=True)
class Placement:
    """Final standing of one participant; persisted as a tournament winner row."""

    group_id: int
    final_standing: int
    standing: GroupStanding
    bonus_elo_awarded: int

    @property
    def participant_id(self) -> int:
        return self.standing.participant_id

    @property
    def player_id(self) -> int | None:
        return self.standing.player_id


@dataclass(frozen=True)
class CompletionPlan:
    placements: tuple[Placement, ...]
    bonus_updates: tuple[RatingUpdate, ...]
    processed_group_ids: tuple[int, ...]
    skipped_group_ids: tuple[int, ...]

    def placements_for(self, group_id: int) -> list[Placement]:
        return [placement for placement in self.placements if placement.group_id == group_id]


class TournamentCompletionProcessor:
    """Ranks every group and decides which winners receive the flat bonus."""

    def __init__(self, params: EloParameters | None = None, rules: TournamentRules | None = None) -> None:
        self.params = params or EloParameters()
        self.rules = rules or TournamentRules()
        self.calculator = EloCalculator(self.params)

    def validate_bonus(self, winner_bonus_elo: int) -> None:
        if winner_bonus_elo < 0 or winner_bonus_elo > self.rules.max_winner_bonus_elo:
            raise ValidationError(
                f"Bonus ELO must be between 0 and {self.rules.max_winner_bonus_elo}"
            )

    def rank_group(self, group: CompletionGroup, *, winner_bonus_elo: int) -> list[Placement]:
        """Placements for one group; only a non-guest rank 1 gets the bonus."""
        standings = calculate_standings(group.participants, completed_matches(group.matches), self.rules)
        placements: list[Placement] = []
        for index, standing in enumerate(standings):
            eligible = index == 0 and not standing.is_guest and standing.player_id is not None
            placements.append(
                Placement(
                    group_id=group.group_id,
                    final_standing=index + 1,
                    standing=standing,
                    bonus_elo_awarded=winner_bonus_elo if eligible else 0,
                )
            )
        return placements

    def complete(
        self,
        *,
        status: TournamentStatus,
        winner_bonus_elo: int,
        groups: Sequence[CompletionGroup],
        ratings: Mapping[int, PlayerRating] | None = None,
    ) -> CompletionPlan:
        ensure_transition(status, TournamentStatus.COMPLETED)
        self.validate_bonus(winner_bonus_elo)

        current: dict[int, PlayerRating] = dict(ratings or {})
        placements: list[Placement] = []
        bonus_updates: list[RatingUpdate] = []
        processed: list[int] = []
        skipped: list[int] = []

        for group in groups:
            if not group.participants or not completed_matches(group.matches):
                skipped.append(group.group_id)
                continue

            group_placements = self.rank_group(group, winner_bonus_elo=winner_bonus_elo)
            placements.extend(group_placements)
            processed.append(group.group_id)

            winner = group_placements[0]
            if winner.bonus_elo_awarded > 0 and winner.player_id is not None:
                player_rating = current.get(winner.player_id) or PlayerRating(
                    player_id=winner.player_id,
                    context=TOURNAMENT_RATING_CONTEXT,
                    rating=self.params.initial_elo,
                )
                update = self.calculator.bonus(player_rating, amount=winner.bonus_elo_awarded)
                bonus_updates.append(update)
                # A player winning several groups stacks bonuses on the latest rating.
                current[winner.player_id] = update.apply(player_rating)

        return CompletionPlan(
            placements=tuple(placements),
            bonus_updates=tuple(bonus_updates),
            processed_group_ids=tuple(processed),
            skipped_group_ids=tuple(skipped),
        )


__all__ = ["CompletionGroup", "CompletionPlan", "Placement", "TournamentCompletionProcessor"]
