"""Timed assessment engine."""
from pyq.engine.answers import (
    AnswerValue,
    MultiChoiceAnswer,
    SingleChoiceAnswer,
    TextAnswer,
)
from pyq.engine.attempt import (
    Attempt,
    AttemptMode,
    AttemptResult,
    AttemptSession,
    AttemptStatus,
    Navigation,
    QuestionOutcome,
)
from pyq.engine.bank import (
    Option,
    PaperInfo,
    Question,
    QuestionBank,
    QuestionKind,
    load_bank,
    load_bank_json,
)
from pyq.engine.linker import link_extra_info
from pyq.engine.recorder import SessionRecorder, SessionStore, SessionSummary, TimeEntry
from pyq.engine.scoring import Grade, ScoreResult, score
from pyq.engine.timer import CountdownTimer, Urgency, initial_seconds

__all__ = [
    "AnswerValue",
    "MultiChoiceAnswer",
    "SingleChoiceAnswer",
    "TextAnswer",
    "Attempt",
    "AttemptMode",
    "AttemptResult",
    "AttemptSession",
    "AttemptStatus",
    "Navigation",
    "QuestionOutcome",
    "Option",
    "PaperInfo",
    "Question",
    "QuestionBank",
    "QuestionKind",
    "load_bank",
    "load_bank_json",
    "link_extra_info",
    "SessionRecorder",
    "SessionStore",
    "SessionSummary",
    "TimeEntry",
    "Grade",
    "ScoreResult",
    "score",
    "CountdownTimer",
    "Urgency",
    "initial_seconds",
]
