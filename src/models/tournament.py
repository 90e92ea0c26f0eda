"""Tournament table models (tournaments, groups, participants, matches, winners)."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base
from models.mixins import CreatedAtMixin, MatchSnapshotMixin


class Tournament(CreatedAtMixin, Base):
    """A time-boxed round-robin tournament."""

    __tablename__ = "tournaments"
    __table_args__ = (
        CheckConstraint("status IN ('draft', 'active', 'completed')", name="ck_tournaments_status"),
        CheckConstraint("end_date >= start_date", name="ck_tournaments_date_range"),
        CheckConstraint(
            "winner_bonus_elo >= 0 AND winner_bonus_elo <= 500",
            name="ck_tournaments_winner_bonus_elo",
        ),
        Index("idx_tournaments_status", "status"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="draft")
    winner_bonus_elo: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class TournamentGroup(CreatedAtMixin, Base):
    """A round-robin bracket inside a tournament."""

    __tablename__ = "tournament_groups"
    __table_args__ = (
        UniqueConstraint("tournament_id", "name", name="uq_tournament_groups_tournament_name"),
        CheckConstraint("gender IN ('mens', 'womens', 'mixed')", name="ck_tournament_groups_gender"),
        CheckConstraint("match_type IN ('singles', 'doubles')", name="ck_tournament_groups_match_type"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tournament_id: Mapped[int] = mapped_column(ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    level: Mapped[str | None] = mapped_column(String(64), nullable=True)
    gender: Mapped[str] = mapped_column(String(16), nullable=False, default="mixed")
    match_type: Mapped[str] = mapped_column(String(16), nullable=False, default="singles")


class TournamentParticipant(CreatedAtMixin, Base):
    """A registered player or a named guest entered into one group.

    Guest names are erased once the tournament has been over for a while;
    ``guest_deleted_at`` records when.
    """

    __tablename__ = "tournament_participants"
    __table_args__ = (
        UniqueConstraint("group_id", "player_id", name="uq_tournament_participants_group_player"),
        CheckConstraint(
            "(is_guest = false AND player_id IS NOT NULL) "
            "OR (is_guest = true AND (guest_name IS NOT NULL OR guest_deleted_at IS NOT NULL))",
            name="ck_tournament_participants_identity",
        ),
        Index("idx_tournament_participants_group", "group_id"),
        Index("idx_tournament_participants_guest_cleanup", "is_guest", "guest_deleted_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tournament_id: Mapped[int] = mapped_column(ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False)
    group_id: Mapped[int] = mapped_column(ForeignKey("tournament_groups.id", ondelete="CASCADE"), nullable=False)
    player_id: Mapped[int | None] = mapped_column(ForeignKey("players.id"), nullable=True)
    is_guest: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    guest_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    guest_deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)


class TournamentMatch(MatchSnapshotMixin, Base):
    """Immutable group match; scores are sets won and stay NULL until recorded."""

    __tablename__ = "tournament_matches"
    __table_args__ = (
        CheckConstraint("participant1_id != participant2_id", name="ck_tournament_matches_different_participants"),
        CheckConstraint(
            "(participant1_score IS NULL OR participant1_score >= 0) "
            "AND (participant2_score IS NULL OR participant2_score >= 0)",
            name="ck_tournament_matches_scores",
        ),
        CheckConstraint(
            "winner_participant_id IS NULL "
            "OR winner_participant_id = participant1_id "
            "OR winner_participant_id = participant2_id",
            name="ck_tournament_matches_winner_or_tie",
        ),
        Index("idx_tournament_matches_group", "group_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tournament_id: Mapped[int] = mapped_column(ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False)
    group_id: Mapped[int] = mapped_column(ForeignKey("tournament_groups.id", ondelete="CASCADE"), nullable=False)
    participant1_id: Mapped[int] = mapped_column(ForeignKey("tournament_participants.id"), nullable=False)
    participant2_id: Mapped[int] = mapped_column(ForeignKey("tournament_participants.id"), nullable=False)
    participant1_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    participant2_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    participant1_games: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    participant2_games: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    winner_participant_id: Mapped[int | None] = mapped_column(
        ForeignKey("tournament_participants.id"),
        nullable=True,
    )
    affects_elo: Mapped[bool] = mapped_column(Boolean, nullable=False)


class TournamentWinner(CreatedAtMixin, Base):
    """Final placement of one participant in one group."""

    __tablename__ = "tournament_winners"
    __table_args__ = (
        UniqueConstraint("group_id", "final_standing", name="uq_tournament_winners_group_standing"),
        UniqueConstraint("group_id", "participant_id", name="uq_tournament_winners_group_participant"),
        CheckConstraint("bonus_elo_awarded >= 0", name="ck_tournament_winners_bonus"),
        Index("idx_tournament_winners_tournament", "tournament_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tournament_id: Mapped[int] = mapped_column(ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False)
    group_id: Mapped[int] = mapped_column(ForeignKey("tournament_groups.id", ondelete="CASCADE"), nullable=False)
    participant_id: Mapped[int] = mapped_column(ForeignKey("tournament_participants.id"), nullable=False)
    player_id: Mapped[int | None] = mapped_column(ForeignKey("players.id"), nullable=True)
    final_standing: Mapped[int] = mapped_column(Integer, nullable=False)
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    match_wins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    match_losses: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sets_won: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sets_lost: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    games_won: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    games_lost: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bonus_elo_awarded: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
