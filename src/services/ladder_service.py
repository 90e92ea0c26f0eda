"""Ladder operations, each run as a single transaction."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session, sessionmaker

from domain.config import ClubConfig, default_club_config
from domain.errors import ValidationError
from domain.ladder import LadderMatchPlan, LadderMatchProcessor, LadderMatchSubmission, LadderSnapshot
from domain.protocol import LadderType, RatingContext
from models import RatingEvent
from repositories.ladder import (
    LeaderboardEntry,
    create_ladder,
    fetch_active_player_ids,
    fetch_leaderboard,
    fetch_same_day_matches,
    get_ladder,
    insert_ladder_match,
    ladder_type,
    set_membership,
)
from repositories.players import get_player
from repositories.ratings import fetch_player_ratings, fetch_rating_history, insert_rating_events
from services.base import atomic

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordedLadderMatch:
    match_id: int
    plan: LadderMatchPlan


class LadderService:
    def __init__(self, session_factory: sessionmaker[Session], config: ClubConfig | None = None) -> None:
        self.session_factory = session_factory
        self.config = config or default_club_config()
        self.processor = LadderMatchProcessor(self.config.elo)

    def create_ladder(self, *, name: str, kind: LadderType) -> int:
        if not name.strip():
            raise ValidationError("Ladder name is required")
        with self.session_factory() as session:
            with atomic(session, "create ladder"):
                ladder = create_ladder(session, name=name.strip(), kind=kind)
                ladder_id = ladder.id
        logger.info("Created %s ladder %s (%s)", kind.value, ladder_id, name)
        return ladder_id

    def join(self, *, ladder_id: int, player_id: int) -> None:
        with self.session_factory() as session:
            with atomic(session, "join ladder"):
                ladder = get_ladder(session, ladder_id)
                if not ladder.is_active:
                    raise ValidationError("This ladder is not accepting new participants")
                get_player(session, player_id)
                set_membership(session, ladder_id=ladder_id, player_id=player_id, is_active=True)
        logger.info("Player %s joined ladder %s", player_id, ladder_id)

    def leave(self, *, ladder_id: int, player_id: int) -> None:
        """Deactivate a membership; past matches and ratings are kept."""
        with self.session_factory() as session:
            with atomic(session, "leave ladder"):
                get_ladder(session, ladder_id)
                set_membership(session, ladder_id=ladder_id, player_id=player_id, is_active=False)
        logger.info("Player %s left ladder %s", player_id, ladder_id)

    def load_snapshot(self, session: Session, submission: LadderMatchSubmission) -> LadderSnapshot:
        ladder = get_ladder(session, submission.ladder_id)
        if not ladder.is_active:
            raise ValidationError("This ladder is not active")
        kind = ladder_type(ladder)
        return LadderSnapshot(
            ladder_id=ladder.id,
            ladder_type=kind,
            active_player_ids=fetch_active_player_ids(session, ladder.id),
            ratings=fetch_player_ratings(
                session,
                submission.participant_ids,
                context=kind.rating_context,
                initial_elo=self.config.elo.initial_elo,
            ),
            existing_matches=fetch_same_day_matches(
                session,
                ladder_id=ladder.id,
                match_date=submission.match_date,
                player_ids=(submission.player1_id, submission.player2_id),
            ),
        )

    def record_match(self, submission: LadderMatchSubmission) -> RecordedLadderMatch:
        """Validate, rate and persist one ladder match.

        The match row and every participant's rating event are written in one
        transaction; a rejected submission or a lost race leaves nothing behind.
        """
        with self.session_factory() as session:
            with atomic(session, "record ladder match"):
                snapshot = self.load_snapshot(session, submission)
                plan = self.processor.process(submission, snapshot)
                match = insert_ladder_match(session, plan.match)
                insert_rating_events(
                    session,
                    plan.updates,
                    event_date=submission.match_date,
                    ladder_match_id=match.id,
                )
                match_id = match.id

        logger.info(
            "Recorded ladder match %s on ladder %s: %s-%s, winner %s",
            match_id,
            submission.ladder_id,
            submission.player1_score,
            submission.player2_score,
            plan.outcome.winner_id,
        )
        for update in plan.updates:
            logger.debug(
                "player_id=%s %s %s -> %s",
                update.player_id,
                update.context.value,
                update.pre_rating,
                update.post_rating,
            )
        return RecordedLadderMatch(match_id=match_id, plan=plan)

    def leaderboard(self, ladder_id: int) -> list[LeaderboardEntry]:
        with self.session_factory() as session:
            ladder = get_ladder(session, ladder_id)
            return fetch_leaderboard(
                session,
                ladder_id,
                context=ladder_type(ladder).rating_context,
                initial_elo=self.config.elo.initial_elo,
            )

    def history(self, player_id: int, *, context: RatingContext = RatingContext.SINGLES) -> list[RatingEvent]:
        with self.session_factory() as session:
            get_player(session, player_id)
            return fetch_rating_history(session, player_id, context=context)
