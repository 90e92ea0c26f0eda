"""SQLAlchemy mixins for columns shared by match and event tables."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Date, DateTime, Integer, func
from sqlalchemy.orm import Mapped, mapped_column


class CreatedAtMixin:
    """Server-populated creation timestamp."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )


class MatchSnapshotMixin(CreatedAtMixin):
    """Match date plus before/after rating snapshots of both primary sides.

    Snapshots are nullable because guest entrants carry no rating.
    """

    match_date: Mapped[date] = mapped_column(Date, nullable=False)
    player1_elo_before: Mapped[int | None] = mapped_column(Integer, nullable=True)
    player1_elo_after: Mapped[int | None] = mapped_column(Integer, nullable=True)
    player2_elo_before: Mapped[int | None] = mapped_column(Integer, nullable=True)
    player2_elo_after: Mapped[int | None] = mapped_column(Integer, nullable=True)
