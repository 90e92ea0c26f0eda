"""ladders, ladder_participants and ladder_matches table models."""

from __future__ import annotations

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base
from models.mixins import CreatedAtMixin, MatchSnapshotMixin


class Ladder(CreatedAtMixin, Base):
    """A join-anytime competition pool ranked by ELO."""

    __tablename__ = "ladders"
    __table_args__ = (
        CheckConstraint("type IN ('singles', 'doubles', 'mixed')", name="ck_ladders_type"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class LadderParticipant(CreatedAtMixin, Base):
    """Ladder membership; ``is_active`` is re-checked on every submission."""

    __tablename__ = "ladder_participants"
    __table_args__ = (
        UniqueConstraint("ladder_id", "player_id", name="uq_ladder_participants_ladder_player"),
        Index("idx_ladder_participants_active", "ladder_id", "is_active"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    ladder_id: Mapped[int] = mapped_column(ForeignKey("ladders.id"), nullable=False)
    player_id: Mapped[int] = mapped_column(ForeignKey("players.id"), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class LadderMatch(MatchSnapshotMixin, Base):
    """Immutable ladder match record with rating snapshots for every participant."""

    __tablename__ = "ladder_matches"
    __table_args__ = (
        CheckConstraint("player1_id != player2_id", name="ck_ladder_matches_different_players"),
        CheckConstraint(
            "player1_score >= 0 AND player2_score >= 0",
            name="ck_ladder_matches_scores",
        ),
        CheckConstraint("player1_score != player2_score", name="ck_ladder_matches_no_tie"),
        CheckConstraint(
            "winner_id = player1_id OR winner_id = player2_id",
            name="ck_ladder_matches_winner",
        ),
        Index("idx_ladder_matches_ladder_date", "ladder_id", "match_date"),
        Index("idx_ladder_matches_player1", "player1_id"),
        Index("idx_ladder_matches_player2", "player2_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    ladder_id: Mapped[int] = mapped_column(ForeignKey("ladders.id"), nullable=False)
    rating_context: Mapped[str] = mapped_column(String(16), nullable=False)
    player1_id: Mapped[int] = mapped_column(ForeignKey("players.id"), nullable=False)
    player2_id: Mapped[int] = mapped_column(ForeignKey("players.id"), nullable=False)
    player1_partner_id: Mapped[int | None] = mapped_column(ForeignKey("players.id"), nullable=True)
    player2_partner_id: Mapped[int | None] = mapped_column(ForeignKey("players.id"), nullable=True)
    player1_score: Mapped[int] = mapped_column(Integer, nullable=False)
    player2_score: Mapped[int] = mapped_column(Integer, nullable=False)
    winner_id: Mapped[int] = mapped_column(ForeignKey("players.id"), nullable=False)
    player1_partner_elo_before: Mapped[int | None] = mapped_column(Integer, nullable=True)
    player1_partner_elo_after: Mapped[int | None] = mapped_column(Integer, nullable=True)
    player2_partner_elo_before: Mapped[int | None] = mapped_column(Integer, nullable=True)
    player2_partner_elo_after: Mapped[int | None] = mapped_column(Integer, nullable=True)
