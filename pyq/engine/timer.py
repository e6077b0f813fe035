"""
Exam countdown.

``CountdownTimer.tick()`` advances the clock by one second; ``start()`` runs
ticks on a daemon thread once per ``interval`` until the countdown expires,
the attempt ends, or ``cancel()`` is called. Ticks take the session lock, so
an expiry submit is serialized with user operations.
"""

from __future__ import annotations

import enum
import logging
import threading
from typing import Callable

from pyq.config import (
    DEFAULT_EXAM_MINUTES,
    LEGACY_EXAM_MINUTES,
    TIMER_DANGER_SECONDS,
    TIMER_TICK_SECONDS,
    TIMER_WARNING_SECONDS,
)
from pyq.engine.attempt import AttemptMode, AttemptResult, AttemptSession
from pyq.engine.bank import PaperInfo
from pyq.errors import InvalidOperationError

logger = logging.getLogger(__name__)


class Urgency(str, enum.Enum):
    NORMAL = "normal"
    WARNING = "warning"
    DANGER = "danger"


def exam_minutes(paper: PaperInfo) -> int:
    """Countdown length from paper metadata, with the legacy "4" fixed up."""
    minutes = paper.total_time_minutes
    if minutes is None or minutes <= 0 or minutes == LEGACY_EXAM_MINUTES:
        return DEFAULT_EXAM_MINUTES
    return minutes


def initial_seconds(paper: PaperInfo) -> int:
    return exam_minutes(paper) * 60


def urgency_for(remaining: int) -> Urgency:
    if remaining < TIMER_DANGER_SECONDS:
        return Urgency.DANGER
    if remaining < TIMER_WARNING_SECONDS:
        return Urgency.WARNING
    return Urgency.NORMAL


class CountdownTimer:
    """Drives ``remaining_seconds`` down and forces submission at zero."""

    def __init__(
        self,
        session: AttemptSession,
        seconds: int | None = None,
        *,
        on_tick: Callable[[int], None] | None = None,
        on_threshold: Callable[[Urgency, int], None] | None = None,
        on_expire: Callable[[AttemptResult | None], None] | None = None,
        interval: float = TIMER_TICK_SECONDS,
        wait: Callable[[float], bool] | None = None,
    ) -> None:
        if session.mode is not AttemptMode.EXAM:
            raise InvalidOperationError("countdown only runs in exam mode")
        self.session = session
        self.on_tick = on_tick
        self.on_threshold = on_threshold
        self.on_expire = on_expire
        self.interval = interval
        self.expired = False
        self._cancelled = threading.Event()
        # wait(interval) -> True means stop; defaults to a cancelable sleep
        self._wait = wait or self._cancelled.wait
        self._thread: threading.Thread | None = None

        with session.lock:
            self.remaining = initial_seconds(session.bank.paper) if seconds is None else seconds
            session.attempt.remaining_seconds = self.remaining
        self._urgency = urgency_for(self.remaining)

    @property
    def urgency(self) -> Urgency:
        return self._urgency

    @property
    def running(self) -> bool:
        return not self._cancelled.is_set()

    def tick(self) -> bool:
        """Advance one second. Returns False once the countdown is over."""
        crossed: Urgency | None = None
        result: AttemptResult | None = None
        with self.session.lock:
            if self._cancelled.is_set() or self.session.is_terminal:
                self._cancelled.set()
                return False
            self.remaining = max(0, self.remaining - 1)
            self.session.attempt.remaining_seconds = self.remaining
            urgency = urgency_for(self.remaining)
            if urgency is not self._urgency:
                crossed = urgency
                self._urgency = urgency
            if self.remaining == 0:
                self._cancelled.set()
                self.expired = True
                result = self.session.submit()

        if self.on_tick:
            self.on_tick(self.remaining)
        if crossed is not None and self.on_threshold:
            self.on_threshold(crossed, self.remaining)
        if self.expired:
            logger.info("Exam time is up, attempt submitted automatically")
            if self.on_expire:
                self.on_expire(result)
            return False
        return True

    def run(self) -> None:
        """Tick until the countdown ends or is cancelled."""
        while not self._wait(self.interval):
            try:
                if not self.tick():
                    break
            except Exception as e:
                logger.error(f"Countdown tick failed: {e}")
                self._cancelled.set()
                break

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self.run,
            name="exam_countdown",
            daemon=True,
        )
        self._thread.start()

    def cancel(self) -> None:
        """Stop ticking; safe to call from any thread, more than once."""
        self._cancelled.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.interval * 2 if self.interval else None)
