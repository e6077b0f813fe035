"""Service layer for in-progress attempts."""
import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from fastapi import HTTPException

from pyq.config import FINISHED_ATTEMPT_TTL_SECONDS
from pyq.engine.attempt import AttemptMode, AttemptResult, AttemptSession
from pyq.engine.bank import QuestionBank
from pyq.engine.recorder import SessionRecorder, SessionStore, SessionSummary
from pyq.engine.timer import CountdownTimer
from pyq.utils.time_utils import utc_now

logger = logging.getLogger(__name__)


@dataclass
class ActiveAttempt:
    """An attempt together with its countdown and recorder."""

    attempt_id: str
    session: AttemptSession
    recorder: SessionRecorder
    subject: str
    quiz_type: str
    timer: CountdownTimer | None = None

    def stop_timer(self) -> None:
        if self.timer is not None:
            self.timer.cancel()


class AttemptRegistry:
    """
    Active attempts by ID. Each attempt is owned by the client that started it.

    Submitted attempts stay available for review for ``ttl_seconds`` after
    submission; expired ones are dropped whenever a new attempt is added.
    """

    def __init__(
        self,
        ttl_seconds: int = FINISHED_ATTEMPT_TTL_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._attempts: dict[str, ActiveAttempt] = {}
        self._lock = threading.Lock()
        self.ttl = timedelta(seconds=ttl_seconds)
        self.clock = clock

    def add(self, active: ActiveAttempt) -> None:
        self.evict_finished()
        with self._lock:
            self._attempts[active.attempt_id] = active

    def evict_finished(self) -> int:
        """Drop attempts submitted longer than ``ttl`` ago. Returns the count."""
        cutoff = self.clock() - self.ttl
        with self._lock:
            expired = [
                attempt_id
                for attempt_id, active in self._attempts.items()
                if active.session.submitted_at is not None and active.session.submitted_at < cutoff
            ]
            evicted = [self._attempts.pop(attempt_id) for attempt_id in expired]
        for active in evicted:
            active.stop_timer()
        if evicted:
            logger.info(f"Evicted {len(evicted)} finished attempts")
        return len(evicted)

    def get(self, attempt_id: str) -> ActiveAttempt:
        with self._lock:
            active = self._attempts.get(attempt_id)
        if active is None:
            raise HTTPException(status_code=404, detail="Attempt not found")
        return active

    def discard(self, attempt_id: str) -> ActiveAttempt | None:
        with self._lock:
            return self._attempts.pop(attempt_id, None)

    def close_all(self) -> None:
        """Stop every countdown (application shutdown)."""
        with self._lock:
            attempts = list(self._attempts.values())
            self._attempts.clear()
        for active in attempts:
            active.stop_timer()

    def __len__(self) -> int:
        with self._lock:
            return len(self._attempts)


def start_attempt(
    registry: AttemptRegistry,
    bank: QuestionBank,
    mode: AttemptMode,
    subject: str,
    quiz_type: str,
    store: SessionStore | None,
    *,
    start_timer: bool = True,
) -> ActiveAttempt:
    """
    Start a new attempt.

    In exam mode a countdown is attached; when it expires the attempt is
    submitted and recorded without a confirmation step.
    """
    active = ActiveAttempt(
        attempt_id=uuid.uuid4().hex,
        session=AttemptSession(bank, mode),
        recorder=SessionRecorder(store),
        subject=subject,
        quiz_type=quiz_type,
    )
    if active.session.mode is AttemptMode.EXAM:
        active.timer = CountdownTimer(
            active.session,
            on_expire=lambda _result: record_attempt(active),
        )
        if start_timer:
            active.timer.start()
    registry.add(active)
    logger.info(
        "Started %s attempt %s (%s %s)",
        mode.value,
        active.attempt_id,
        subject,
        quiz_type,
    )
    return active


def record_attempt(active: ActiveAttempt) -> SessionSummary:
    """Finalize a submitted or abandoned attempt and persist it."""
    return active.recorder.finalize(active.session, active.subject, active.quiz_type)


def submit_attempt(active: ActiveAttempt) -> tuple[AttemptResult | None, SessionSummary | None]:
    """Submit (idempotent), stop the countdown and record the result."""
    active.stop_timer()
    result = active.session.submit()
    if result is None or result.abandoned:
        return result, None
    return result, record_attempt(active)


def abandon_attempt(registry: AttemptRegistry, active: ActiveAttempt) -> SessionSummary | None:
    """
    Abandon an attempt and drop it from the registry.

    An in-progress attempt is recorded with ``abandoned=True``; a finished
    one keeps the summary it already has.
    """
    active.stop_timer()
    registry.discard(active.attempt_id)
    result = active.session.abandon()
    if result is None:
        return active.session.summary
    return record_attempt(active)
