"""
Attempt state machine.

One ``AttemptSession`` drives one learner through one question bank. It owns
the mutable ``Attempt`` record and serializes every operation on a re-entrant
lock, which the exam countdown shares, so a timer-forced submit never
interleaves with a user operation.

Rejected operations (answering a locked question, checking in exam mode, ...)
are no-ops that return ``False``/``None``. Pass ``strict=True`` to get an
``InvalidOperationError`` instead.
"""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Mapping

from pyq.engine.answers import AnswerValue, MultiChoiceAnswer, fits
from pyq.engine.bank import Question, QuestionBank, QuestionKind
from pyq.engine.linker import link_extra_info
from pyq.engine.scoring import (
    Grade,
    ScoreResult,
    describe_correct,
    feedback_for,
    grade,
    percent,
    score,
)
from pyq.errors import InvalidOperationError, OutOfRangeError
from pyq.utils.time_utils import utc_now

logger = logging.getLogger(__name__)


class AttemptMode(str, enum.Enum):
    PRACTICE = "practice"
    EXAM = "exam"


class AttemptStatus(str, enum.Enum):
    """Lifecycle of an attempt."""

    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"
    REVIEWING = "reviewing"
    ABANDONED = "abandoned"


class Navigation(str, enum.Enum):
    """Outcome of next()/previous()."""

    MOVED = "moved"
    STAYED = "stayed"
    CONFIRM_SUBMIT = "confirm_submit"


@dataclass
class Attempt:
    mode: AttemptMode
    started_at: datetime
    answers: dict[int, AnswerValue] = field(default_factory=dict)
    checked_scores: dict[int, float] = field(default_factory=dict)
    current_index: int = 0
    review_mode: bool = False
    remaining_seconds: int | None = None
    status: AttemptStatus = AttemptStatus.IN_PROGRESS


@dataclass(frozen=True)
class QuestionOutcome:
    index: int
    number: int
    marks: float
    awarded: float

    @property
    def grade(self) -> Grade:
        return grade(self.awarded, self.marks)


@dataclass(frozen=True)
class AttemptResult:
    outcomes: tuple[QuestionOutcome, ...]
    score: float
    total_marks: float
    percent: float | None
    abandoned: bool = False

    @property
    def feedback(self) -> str:
        return feedback_for(self.percent or 0.0)


class AttemptSession:
    """Navigation, answering, checking and submission for one attempt."""

    def __init__(
        self,
        bank: QuestionBank,
        mode: AttemptMode | str = AttemptMode.PRACTICE,
        *,
        links: Mapping[int, int] | None = None,
        strict: bool = False,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.bank = bank
        self.links = dict(links) if links is not None else link_extra_info(bank.questions)
        self.strict = strict
        self.clock = clock
        self.lock = threading.RLock()
        self.attempt = Attempt(mode=AttemptMode(mode), started_at=clock())
        self.submitted_at: datetime | None = None
        self.summary = None
        self._result: AttemptResult | None = None

    # --- state -------------------------------------------------------------

    @property
    def mode(self) -> AttemptMode:
        return self.attempt.mode

    @property
    def status(self) -> AttemptStatus:
        return self.attempt.status

    @property
    def is_terminal(self) -> bool:
        return self.attempt.status is not AttemptStatus.IN_PROGRESS

    @property
    def result(self) -> AttemptResult | None:
        return self._result

    @property
    def current(self) -> Question:
        return self.bank[self.attempt.current_index]

    def is_locked(self, index: int) -> bool:
        return (
            self.attempt.status is not AttemptStatus.IN_PROGRESS
            or index in self.attempt.checked_scores
        )

    def is_revealed(self, index: int) -> bool:
        """Correct answers are shown once checked, and everywhere in review."""
        return self.attempt.review_mode or index in self.attempt.checked_scores

    def extra_info_for(self, index: int) -> Question | None:
        info_index = self.links.get(index)
        return self.bank[info_index] if info_index is not None else None

    def _check_index(self, index: int) -> None:
        if not isinstance(index, int) or not 0 <= index < len(self.bank):
            raise OutOfRangeError(index, len(self.bank))

    def _reject(self, message: str) -> bool:
        if self.strict:
            raise InvalidOperationError(message)
        logger.debug("Rejected: %s", message)
        return False

    # --- navigation --------------------------------------------------------

    def go_to(self, index: int) -> Question:
        with self.lock:
            self._check_index(index)
            self.attempt.current_index = index
            return self.bank[index]

    def next(self) -> Navigation:
        with self.lock:
            current = self.attempt.current_index
            if not self.attempt.review_mode and current == self.bank.last_question_index:
                return Navigation.CONFIRM_SUBMIT
            if current < len(self.bank) - 1:
                self.attempt.current_index = current + 1
                return Navigation.MOVED
            return Navigation.STAYED

    def previous(self) -> Navigation:
        with self.lock:
            if self.attempt.current_index > 0:
                self.attempt.current_index -= 1
                return Navigation.MOVED
            return Navigation.STAYED

    # --- answering ---------------------------------------------------------

    def record_answer(self, index: int, value: AnswerValue) -> bool:
        with self.lock:
            self._check_index(index)
            question = self.bank[index]
            if self.attempt.status is not AttemptStatus.IN_PROGRESS:
                return self._reject(f"attempt is {self.attempt.status.value}")
            if question.is_info:
                return self._reject(f"entry {index} is an info block")
            if index in self.attempt.checked_scores:
                return self._reject(f"question {index} is already checked")
            if not fits(question, value):
                return self._reject(f"{value!r} does not fit a {question.kind.value} question")
            self.attempt.answers[index] = value
            return True

    def toggle_option(self, index: int, option: int) -> bool:
        """Add or remove one option from a multi-choice selection."""
        with self.lock:
            self._check_index(index)
            if self.bank[index].kind is not QuestionKind.MULTI_CHOICE:
                return self._reject(f"question {index} is not multi-choice")
            stored = self.attempt.answers.get(index)
            selected = set(stored.selected_indices) if isinstance(stored, MultiChoiceAnswer) else set()
            selected ^= {option}
            return self.record_answer(index, MultiChoiceAnswer(frozenset(selected)))

    def check_current(self) -> ScoreResult | None:
        """Score the current question immediately (practice mode only)."""
        with self.lock:
            index = self.attempt.current_index
            question = self.bank[index]
            if self.attempt.mode is not AttemptMode.PRACTICE:
                self._reject("questions cannot be checked in exam mode")
                return None
            if self.attempt.status is not AttemptStatus.IN_PROGRESS:
                self._reject(f"attempt is {self.attempt.status.value}")
                return None
            if question.is_info:
                self._reject(f"entry {index} is an info block")
                return None
            if index in self.attempt.checked_scores:
                self._reject(f"question {index} is already checked")
                return None
            result = score(question, self.attempt.answers.get(index))
            self.attempt.checked_scores[index] = result.awarded
            return result

    def score_of(self, index: int) -> ScoreResult | None:
        """Stored result for a checked question, with its correct answer."""
        with self.lock:
            self._check_index(index)
            awarded = self.attempt.checked_scores.get(index)
            if awarded is None:
                return None
            return ScoreResult(awarded=awarded, correct_description=describe_correct(self.bank[index]))

    # --- completion --------------------------------------------------------

    def submit(self) -> AttemptResult | None:
        """Score every question and freeze the attempt. Idempotent."""
        with self.lock:
            status = self.attempt.status
            if status in (AttemptStatus.SUBMITTED, AttemptStatus.REVIEWING):
                return self._result
            if status is AttemptStatus.ABANDONED:
                self._reject("attempt was abandoned")
                return self._result
            scores = self.attempt.checked_scores
            for question in self.bank.scoreable():
                if question.index not in scores:
                    scores[question.index] = score(
                        question, self.attempt.answers.get(question.index)
                    ).awarded
            self.attempt.status = AttemptStatus.SUBMITTED
            self.submitted_at = self.clock()
            self._result = self._build_result(scores)
            logger.info(
                "Attempt submitted: %s/%s marks (%s mode)",
                self._result.score,
                self._result.total_marks,
                self.attempt.mode.value,
            )
            return self._result

    def enter_review(self, index: int = 0) -> bool:
        with self.lock:
            if self.attempt.status not in (AttemptStatus.SUBMITTED, AttemptStatus.REVIEWING):
                return self._reject("review is only available after submitting")
            self._check_index(index)
            self.attempt.review_mode = True
            self.attempt.status = AttemptStatus.REVIEWING
            self.attempt.current_index = index
            return True

    def abandon(self) -> AttemptResult | None:
        """Stop an in-progress attempt; scores are provisional and not stored."""
        with self.lock:
            if self.attempt.status is not AttemptStatus.IN_PROGRESS:
                self._reject(f"attempt is {self.attempt.status.value}")
                return None
            provisional = {
                q.index: score(q, self.attempt.answers.get(q.index)).awarded
                for q in self.bank.scoreable()
            }
            self.attempt.status = AttemptStatus.ABANDONED
            self._result = self._build_result(provisional, abandoned=True)
            logger.info("Attempt abandoned")
            return self._result

    def _build_result(self, scores: Mapping[int, float], abandoned: bool = False) -> AttemptResult:
        outcomes = tuple(
            QuestionOutcome(
                index=q.index,
                number=q.display_number,
                marks=q.marks,
                awarded=scores.get(q.index, 0.0),
            )
            for q in self.bank.scoreable()
        )
        total = sum(o.awarded for o in outcomes)
        total_marks = self.bank.total_marks
        return AttemptResult(
            outcomes=outcomes,
            score=total,
            total_marks=total_marks,
            percent=percent(total, total_marks),
            abandoned=abandoned,
        )
