"""Tournament lifecycle: setup, match recording, standings and completion."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from sqlalchemy.orm import Session, sessionmaker

from domain.config import ClubConfig, default_club_config
from domain.errors import TournamentStateError, ValidationError
from domain.tournament import (
    TOURNAMENT_RATING_CONTEXT,
    CompletionPlan,
    GroupSnapshot,
    GroupStanding,
    TournamentCompletionProcessor,
    TournamentMatchPlan,
    TournamentMatchProcessor,
    TournamentMatchSubmission,
    TournamentStatus,
    calculate_standings,
    completed_matches,
    ensure_deletable,
    ensure_transition,
)
from models import TournamentGroup
from repositories.players import get_player
from repositories.ratings import fetch_player_ratings, insert_rating_events
from repositories.tournament import (
    add_participant,
    create_group,
    create_tournament,
    delete_tournament,
    erase_expired_guests,
    fetch_completion_groups,
    fetch_group_matches,
    fetch_group_participants,
    fetch_groups,
    get_group,
    get_tournament,
    insert_tournament_match,
    insert_winners,
    transition_status,
)
from services.base import atomic

logger = logging.getLogger(__name__)

GROUP_GENDERS = ("mens", "womens", "mixed")
GROUP_MATCH_TYPES = ("singles", "doubles")
GUEST_RETENTION_DAYS = 7


@dataclass(frozen=True)
class RecordedTournamentMatch:
    match_id: int
    plan: TournamentMatchPlan


class TournamentService:
    def __init__(self, session_factory: sessionmaker[Session], config: ClubConfig | None = None) -> None:
        self.session_factory = session_factory
        self.config = config or default_club_config()
        self.match_processor = TournamentMatchProcessor(self.config.elo, self.config.tournament)
        self.completion_processor = TournamentCompletionProcessor(self.config.elo, self.config.tournament)

    def create_tournament(
        self,
        *,
        name: str,
        start_date: date,
        end_date: date,
        winner_bonus_elo: int = 0,
    ) -> int:
        if not name.strip():
            raise ValidationError("Tournament name is required")
        if end_date < start_date:
            raise ValidationError("End date cannot be before start date")
        self.completion_processor.validate_bonus(winner_bonus_elo)

        with self.session_factory() as session:
            with atomic(session, "create tournament"):
                tournament = create_tournament(
                    session,
                    name=name.strip(),
                    start_date=start_date,
                    end_date=end_date,
                    winner_bonus_elo=winner_bonus_elo,
                )
                tournament_id = tournament.id
        logger.info("Created draft tournament %s (%s)", tournament_id, name)
        return tournament_id

    def add_group(
        self,
        *,
        tournament_id: int,
        name: str,
        gender: str = "mixed",
        match_type: str = "singles",
        level: str | None = None,
    ) -> int:
        if gender not in GROUP_GENDERS:
            raise ValidationError(f"Group gender must be one of: {', '.join(GROUP_GENDERS)}")
        if match_type not in GROUP_MATCH_TYPES:
            raise ValidationError(f"Group match type must be one of: {', '.join(GROUP_MATCH_TYPES)}")

        with self.session_factory() as session:
            with atomic(session, "add group"):
                tournament = get_tournament(session, tournament_id)
                if TournamentStatus(tournament.status) == TournamentStatus.COMPLETED:
                    raise TournamentStateError("Cannot add groups to a completed tournament")
                group = create_group(
                    session,
                    tournament_id=tournament_id,
                    name=name,
                    gender=gender,
                    match_type=match_type,
                    level=level,
                )
                group_id = group.id
        return group_id

    def add_player(self, *, group_id: int, player_id: int) -> int:
        with self.session_factory() as session:
            with atomic(session, "add participant"):
                group = self._open_group(session, group_id)
                get_player(session, player_id)
                participant = add_participant(session, group=group, player_id=player_id)
                participant_id = participant.id
        return participant_id

    def add_guest(self, *, group_id: int, guest_name: str) -> int:
        """Guests play and place like members but never touch ELO."""
        with self.session_factory() as session:
            with atomic(session, "add guest"):
                group = self._open_group(session, group_id)
                participant = add_participant(session, group=group, guest_name=guest_name)
                participant_id = participant.id
        return participant_id

    def _open_group(self, session: Session, group_id: int) -> TournamentGroup:
        group = get_group(session, group_id)
        tournament = get_tournament(session, group.tournament_id)
        if TournamentStatus(tournament.status) == TournamentStatus.COMPLETED:
            raise TournamentStateError("Cannot change the roster of a completed tournament")
        return group

    def activate(self, tournament_id: int) -> None:
        with self.session_factory() as session:
            with atomic(session, "activate tournament"):
                tournament = get_tournament(session, tournament_id)
                current = TournamentStatus(tournament.status)
                target = ensure_transition(current, TournamentStatus.ACTIVE)
                transition_status(session, tournament_id=tournament_id, current=current, target=target)
        logger.info("Tournament %s is now active", tournament_id)

    def delete(self, tournament_id: int) -> None:
        with self.session_factory() as session:
            with atomic(session, "delete tournament"):
                tournament = get_tournament(session, tournament_id)
                ensure_deletable(TournamentStatus(tournament.status))
                delete_tournament(session, tournament_id)
        logger.info("Deleted draft tournament %s", tournament_id)

    def load_group_snapshot(self, session: Session, submission: TournamentMatchSubmission) -> GroupSnapshot:
        tournament = get_tournament(session, submission.tournament_id)
        group = get_group(session, submission.group_id)
        if group.tournament_id != tournament.id:
            raise ValidationError("Group does not belong to this tournament")
        participants = fetch_group_participants(session, group.id)
        player_ids = [participant.player_id for participant in participants if participant.player_id is not None]
        return GroupSnapshot(
            tournament_id=tournament.id,
            group_id=group.id,
            status=TournamentStatus(tournament.status),
            participants={participant.participant_id: participant for participant in participants},
            matches=tuple(fetch_group_matches(session, group.id)),
            ratings=fetch_player_ratings(
                session,
                player_ids,
                context=TOURNAMENT_RATING_CONTEXT,
                initial_elo=self.config.elo.initial_elo,
            ),
        )

    def record_match(self, submission: TournamentMatchSubmission) -> RecordedTournamentMatch:
        with self.session_factory() as session:
            with atomic(session, "record tournament match"):
                snapshot = self.load_group_snapshot(session, submission)
                plan = self.match_processor.process(submission, snapshot)
                match = insert_tournament_match(session, plan.match)
                insert_rating_events(
                    session,
                    plan.updates,
                    event_date=submission.match_date,
                    tournament_match_id=match.id,
                    tournament_id=submission.tournament_id,
                )
                match_id = match.id

        logger.info(
            "Recorded tournament match %s in group %s: %s-%s%s",
            match_id,
            submission.group_id,
            submission.participant1_sets,
            submission.participant2_sets,
            "" if plan.match.affects_elo else " (guest match, ELO unchanged)",
        )
        return RecordedTournamentMatch(match_id=match_id, plan=plan)

    def standings(self, tournament_id: int) -> dict[int, list[GroupStanding]]:
        """Live standings per group id, counting only completed matches."""
        with self.session_factory() as session:
            get_tournament(session, tournament_id)
            result: dict[int, list[GroupStanding]] = {}
            for group in fetch_groups(session, tournament_id):
                participants = fetch_group_participants(session, group.id)
                matches = completed_matches(fetch_group_matches(session, group.id))
                result[group.id] = calculate_standings(participants, matches, self.config.tournament)
            return result

    def complete(self, tournament_id: int, *, completed_on: date | None = None) -> CompletionPlan:
        """Finalise placements, award winner bonuses and mark the tournament completed.

        Everything happens in one transaction: if any group fails, no winner
        rows, bonuses or status change are kept.
        """
        event_date = completed_on or date.today()
        with self.session_factory() as session:
            with atomic(session, "complete tournament"):
                tournament = get_tournament(session, tournament_id)
                status = TournamentStatus(tournament.status)
                groups = fetch_completion_groups(session, tournament_id)
                player_ids = {
                    participant.player_id
                    for group in groups
                    for participant in group.participants
                    if participant.player_id is not None
                }
                ratings = fetch_player_ratings(
                    session,
                    player_ids,
                    context=TOURNAMENT_RATING_CONTEXT,
                    initial_elo=self.config.elo.initial_elo,
                )
                plan = self.completion_processor.complete(
                    status=status,
                    winner_bonus_elo=tournament.winner_bonus_elo,
                    groups=groups,
                    ratings=ratings,
                )
                insert_winners(session, tournament_id=tournament_id, placements=plan.placements)
                insert_rating_events(
                    session,
                    plan.bonus_updates,
                    event_date=event_date,
                    tournament_id=tournament_id,
                )
                transition_status(
                    session,
                    tournament_id=tournament_id,
                    current=status,
                    target=TournamentStatus.COMPLETED,
                )

        for group_id in plan.skipped_group_ids:
            logger.info("Group %s has no completed matches, skipped", group_id)
        logger.info(
            "Completed tournament %s: %s groups ranked, %s bonuses awarded",
            tournament_id,
            len(plan.processed_group_ids),
            len(plan.bonus_updates),
        )
        return plan

    def cleanup_guests(self, *, today: date | None = None, retention_days: int = GUEST_RETENTION_DAYS) -> int:
        """Erase guest names from tournaments completed more than ``retention_days`` ago."""
        if retention_days < 0:
            raise ValidationError("Retention days cannot be negative")
        today = today or date.today()
        ended_before = today - timedelta(days=retention_days)
        with self.session_factory() as session:
            with atomic(session, "clean up tournament guests"):
                erased = erase_expired_guests(session, ended_before=ended_before, erased_at=datetime.now())
        logger.info("Erased %s guest names from tournaments that ended before %s", erased, ended_before)
        return erased
