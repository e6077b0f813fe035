"""Session recorder: turns a finished attempt into persisted records."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Protocol

from pyq.config import ACTIVITY_TYPE
from pyq.engine.attempt import AttemptResult, AttemptSession
from pyq.engine.scoring import round_half_up
from pyq.errors import InvalidOperationError
from pyq.utils.time_utils import elapsed_millis, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionSummary:
    subject: str
    quiz_type: str
    correct_count: int
    wrong_count: int
    skipped_count: int
    total_questions: int
    score_percent: int
    abandoned: bool = False


@dataclass(frozen=True)
class TimeEntry:
    subject: str
    activity_type: str
    duration_millis: int
    at_timestamp: datetime


class SessionStore(Protocol):
    """Persistence collaborator for finished attempts."""

    def save_session(self, summary: SessionSummary, recorded_at: datetime) -> None:
        ...

    def save_time_entry(self, entry: TimeEntry) -> None:
        ...


def summarize(result: AttemptResult, subject: str, quiz_type: str) -> SessionSummary:
    """
    Build the summary record.

    A question counts as correct when it earned its full marks and as wrong
    when it earned nothing; partial credit lands in neither bucket.
    """
    correct = 0
    wrong = 0
    for outcome in result.outcomes:
        if outcome.awarded == outcome.marks:
            correct += 1
        elif outcome.awarded == 0:
            wrong += 1
    pct = round_half_up(result.percent) if result.percent is not None else 0
    return SessionSummary(
        subject=subject,
        quiz_type=quiz_type,
        correct_count=correct,
        wrong_count=wrong,
        skipped_count=0,
        total_questions=len(result.outcomes),
        score_percent=pct,
        abandoned=result.abandoned,
    )


class SessionRecorder:
    """Finalizes attempts and hands the records to a store, best-effort."""

    def __init__(
        self,
        store: SessionStore | None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.clock = clock

    def finalize(self, session: AttemptSession, subject: str, quiz_type: str) -> SessionSummary:
        """Snapshot a submitted or abandoned attempt. Repeated calls are no-ops."""
        with session.lock:
            if session.summary is not None:
                return session.summary
            result = session.result
            if result is None:
                raise InvalidOperationError("attempt must be submitted or abandoned first")
            summary = summarize(result, subject, quiz_type)
            session.summary = summary
            now = self.clock()
            entry = TimeEntry(
                subject=subject,
                activity_type=ACTIVITY_TYPE,
                duration_millis=elapsed_millis(session.attempt.started_at, now),
                at_timestamp=now,
            )

        # The summary is already available to the caller; storage is best-effort.
        self._persist(summary, entry)
        return summary

    def _persist(self, summary: SessionSummary, entry: TimeEntry) -> None:
        if self.store is None:
            return
        try:
            self.store.save_session(summary, entry.at_timestamp)
        except Exception as e:
            logger.error(f"Failed to save session summary: {e}")
        try:
            self.store.save_time_entry(entry)
        except Exception as e:
            logger.error(f"Failed to save time entry: {e}")
