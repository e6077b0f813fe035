"""Service layer for persisted session summaries and time entries."""
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session as DBSession, sessionmaker

from pyq.engine.recorder import SessionSummary, TimeEntry
from pyq.models.db.session import PYQSession, TimeEntry as TimeEntryRow
from pyq.utils.time_utils import day_key


class SqlSessionStore:
    """Recorder store backed by SQLAlchemy; one DB session per write."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self.session_factory = session_factory

    def save_session(self, summary: SessionSummary, recorded_at: datetime) -> PYQSession:
        db = self.session_factory()
        try:
            row = PYQSession(
                subject=summary.subject,
                quiz_type=summary.quiz_type,
                correct=summary.correct_count,
                wrong=summary.wrong_count,
                skipped=summary.skipped_count,
                total=summary.total_questions,
                pct=summary.score_percent,
                quit=summary.abandoned,
                date=day_key(recorded_at),
                created=recorded_at,
            )
            db.add(row)
            db.commit()
            db.refresh(row)
            return row
        finally:
            db.close()

    def save_time_entry(self, entry: TimeEntry) -> TimeEntryRow:
        db = self.session_factory()
        try:
            row = TimeEntryRow(
                subject_name=entry.subject,
                activity_type=entry.activity_type,
                date=entry.at_timestamp,
                duration_millis=entry.duration_millis,
            )
            db.add(row)
            db.commit()
            db.refresh(row)
            return row
        finally:
            db.close()


def list_sessions(
    db: DBSession,
    subject: str | None = None,
    limit: int = 100,
    offset: int = 0,
) -> list[PYQSession]:
    """Get stored summaries, newest first, optionally for one subject."""
    query = select(PYQSession)
    if subject:
        query = query.where(PYQSession.subject == subject)
    query = query.order_by(PYQSession.created.desc(), PYQSession.id.desc()).limit(limit).offset(offset)
    return list(db.execute(query).scalars().all())


def list_time_entries(
    db: DBSession,
    subject: str | None = None,
    activity_type: str | None = None,
    limit: int = 100,
    offset: int = 0,
) -> list[TimeEntryRow]:
    """Get stored time entries, newest first."""
    query = select(TimeEntryRow)
    if subject:
        query = query.where(TimeEntryRow.subject_name == subject)
    if activity_type:
        query = query.where(TimeEntryRow.activity_type == activity_type)
    query = query.order_by(TimeEntryRow.date.desc(), TimeEntryRow.id.desc()).limit(limit).offset(offset)
    return list(db.execute(query).scalars().all())


def serialize_session_row(row: PYQSession) -> dict[str, object]:
    return {
        "id": row.id,
        "subject": row.subject,
        "quizType": row.quiz_type,
        "correct": row.correct,
        "wrong": row.wrong,
        "skipped": row.skipped,
        "total": row.total,
        "pct": row.pct,
        "quit": row.quit,
        "date": row.date,
        "created": row.created.isoformat() if row.created else None,
    }


def serialize_time_entry_row(row: TimeEntryRow) -> dict[str, object]:
    return {
        "id": row.id,
        "subjectName": row.subject_name,
        "activityType": row.activity_type,
        "date": row.date.isoformat() if row.date else None,
        "durationMillis": row.duration_millis,
    }
