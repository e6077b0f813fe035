from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from sqlalchemy.orm import sessionmaker

from pyq.database import init_db, make_engine
from pyq.engine.recorder import SessionSummary, TimeEntry
from pyq.services import session_service

NOON = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def session_factory(tmp_path: Path) -> sessionmaker:
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


def summary(subject: str, pct: int, abandoned: bool = False) -> SessionSummary:
    return SessionSummary(
        subject=subject,
        quiz_type="Mock",
        correct_count=3,
        wrong_count=1,
        skipped_count=0,
        total_questions=5,
        score_percent=pct,
        abandoned=abandoned,
    )


def test_save_session_writes_row(session_factory: sessionmaker) -> None:
    store = session_service.SqlSessionStore(session_factory)
    row = store.save_session(summary("Physics", 60, abandoned=True), NOON)

    assert row.id is not None
    assert row.date == "2024-06-01"
    payload = session_service.serialize_session_row(row)
    assert payload["subject"] == "Physics"
    assert payload["quizType"] == "Mock"
    assert payload["pct"] == 60
    assert payload["quit"] is True


def test_list_sessions_filters_and_orders_newest_first(session_factory: sessionmaker) -> None:
    store = session_service.SqlSessionStore(session_factory)
    store.save_session(summary("Physics", 40), NOON)
    store.save_session(summary("Chemistry", 70), NOON + timedelta(hours=1))
    store.save_session(summary("Physics", 80), NOON + timedelta(hours=2))

    db = session_factory()
    try:
        rows = session_service.list_sessions(db)
        physics = session_service.list_sessions(db, subject="Physics")
        paged = session_service.list_sessions(db, limit=1, offset=1)
    finally:
        db.close()

    assert [row.pct for row in rows] == [80, 70, 40]
    assert [row.pct for row in physics] == [80, 40]
    assert [row.pct for row in paged] == [70]


def test_time_entries_round_trip(session_factory: sessionmaker) -> None:
    store = session_service.SqlSessionStore(session_factory)
    store.save_time_entry(TimeEntry("Physics", "assessment", 1500, NOON))
    store.save_time_entry(TimeEntry("Physics", "reading", 900, NOON + timedelta(minutes=5)))
    store.save_time_entry(TimeEntry("Maths", "assessment", 300, NOON + timedelta(minutes=10)))

    db = session_factory()
    try:
        physics = session_service.list_time_entries(db, subject="Physics")
        assessments = session_service.list_time_entries(db, activity_type="assessment")
    finally:
        db.close()

    assert [row.duration_millis for row in physics] == [900, 1500]
    assert [row.subject_name for row in assessments] == ["Maths", "Physics"]
    payload = session_service.serialize_time_entry_row(assessments[0])
    assert payload["subjectName"] == "Maths"
    assert payload["activityType"] == "assessment"
    assert payload["durationMillis"] == 300
    assert payload["date"].startswith("2024-06-01T12:10")
