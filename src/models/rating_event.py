"""rating_events table model."""

from __future__ import annotations

from datetime import date

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base
from models.mixins import CreatedAtMixin


class RatingEvent(CreatedAtMixin, Base):
    """Append-only rating history (one row per player per rating change).

    ``sequence`` numbers a player's events within one context starting at 1 and
    doubles as the optimistic-concurrency version of that player's rating.
    """

    __tablename__ = "rating_events"
    __table_args__ = (
        UniqueConstraint("player_id", "context", "sequence", name="uq_rating_events_player_context_sequence"),
        CheckConstraint("context IN ('singles', 'doubles')", name="ck_rating_events_context"),
        CheckConstraint(
            "kind IN ('ladder_match', 'tournament_match', 'tournament_bonus')",
            name="ck_rating_events_kind",
        ),
        CheckConstraint(
            "actual_score IS NULL OR actual_score IN (0.0, 0.5, 1.0)",
            name="ck_rating_events_actual_score",
        ),
        CheckConstraint("sequence >= 1", name="ck_rating_events_sequence"),
        CheckConstraint("post_rating = pre_rating + rating_delta", name="ck_rating_events_delta"),
        Index("idx_rating_events_player_context", "player_id", "context", "sequence"),
        Index("idx_rating_events_ladder_match", "ladder_match_id"),
        Index("idx_rating_events_tournament_match", "tournament_match_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    player_id: Mapped[int] = mapped_column(ForeignKey("players.id"), nullable=False)
    context: Mapped[str] = mapped_column(String(16), nullable=False)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    kind: Mapped[str] = mapped_column(String(32), nullable=False)
    ladder_match_id: Mapped[int | None] = mapped_column(ForeignKey("ladder_matches.id"), nullable=True)
    tournament_match_id: Mapped[int | None] = mapped_column(
        ForeignKey("tournament_matches.id"),
        nullable=True,
    )
    tournament_id: Mapped[int | None] = mapped_column(ForeignKey("tournaments.id"), nullable=True)
    event_date: Mapped[date] = mapped_column(Date, nullable=False)
    counts_as_match: Mapped[bool] = mapped_column(Boolean, nullable=False)
    won: Mapped[bool] = mapped_column(Boolean, nullable=False)
    actual_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    expected_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    opponent_rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    pre_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    rating_delta: Mapped[int] = mapped_column(Integer, nullable=False)
    post_rating: Mapped[int] = mapped_column(Integer, nullable=False)
