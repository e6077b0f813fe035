"""
PYQ session summary and time-tracking database models.
"""

from __future__ import annotations

from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from pyq.database import Base


class PYQSession(Base):
    """
    Summary of one finished (or abandoned) assessment attempt.
    """

    __tablename__ = "pyq_sessions"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    subject: Mapped[str] = mapped_column(String(120), index=True, nullable=False)
    quiz_type: Mapped[str] = mapped_column(String(120), default="", nullable=False)

    # Results
    correct: Mapped[int] = mapped_column(default=0, nullable=False)
    wrong: Mapped[int] = mapped_column(default=0, nullable=False)
    skipped: Mapped[int] = mapped_column(default=0, nullable=False)
    total: Mapped[int] = mapped_column(default=0, nullable=False)
    pct: Mapped[int] = mapped_column(default=0, nullable=False)
    quit: Mapped[bool] = mapped_column(default=False, nullable=False)

    # Day bucket (YYYY-MM-DD) and exact creation time
    date: Mapped[str] = mapped_column(String(10), index=True, nullable=False)
    created: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


class TimeEntry(Base):
    """
    Time spent on one study activity.
    """

    __tablename__ = "time_entries"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    subject_name: Mapped[str] = mapped_column(String(120), index=True, nullable=False)
    activity_type: Mapped[str] = mapped_column(String(40), nullable=False)
    date: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), index=True, nullable=False)
    duration_millis: Mapped[int] = mapped_column(default=0, nullable=False)
