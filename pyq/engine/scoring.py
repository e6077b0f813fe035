"""
Scoring engine.

Pure functions: given a question and the learner's recorded answer, compute
the awarded marks. Nothing here raises on bad learner input; anything that
cannot be interpreted scores 0.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass

from pyq.engine.answers import (
    AnswerValue,
    MultiChoiceAnswer,
    SingleChoiceAnswer,
    TextAnswer,
)
from pyq.engine.bank import Question, QuestionKind

NUMERIC_TOLERANCE = 1e-5


@dataclass(frozen=True)
class ScoreResult:
    awarded: float
    correct_description: str


class Grade(str, enum.Enum):
    CORRECT = "correct"
    PARTIAL = "partial"
    WRONG = "wrong"


def parse_number(text: str | None) -> float | None:
    """Parse a finite number from learner or payload text."""
    if text is None:
        return None
    try:
        value = float(text.strip())
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def describe_correct(question: Question) -> str:
    """Human-readable correct answer, as shown after checking."""
    if question.is_choice:
        texts = [question.options[i].text for i in question.correct_indices]
        label = "Correct Answers: " if len(texts) > 1 else "Correct Answer: "
        return label + ", ".join(texts)
    if question.is_info:
        return ""
    expected = (question.correct_answer_text or "").strip()
    return "Correct Answer: " + (expected or "[Empty]")


def _score_single(question: Question, answer: AnswerValue | None) -> float:
    if not isinstance(answer, SingleChoiceAnswer):
        return 0.0
    correct = question.correct_indices
    if len(correct) == 1 and answer.selected_index == correct[0]:
        return question.marks
    return 0.0


def _score_multi(question: Question, answer: AnswerValue | None) -> float:
    if not isinstance(answer, MultiChoiceAnswer) or not answer.selected_indices:
        return 0.0
    correct = set(question.correct_indices)
    selected = set(answer.selected_indices)
    if selected == correct:
        return question.marks
    per_option = question.marks / len(correct)
    hits = len(selected & correct)
    # one deduction for each pick beyond the number of correct options
    excess = max(0, len(selected) - len(correct))
    awarded = per_option * hits
    if excess > 0:
        awarded = max(0.0, awarded - per_option * excess)
    return awarded


def _score_text(question: Question, answer: AnswerValue | None) -> float:
    if not isinstance(answer, TextAnswer):
        return 0.0
    given = answer.text.strip()
    if not given:
        return 0.0
    value = parse_number(given)

    if question.range_start is not None and value is not None:
        if question.range_end is not None:
            if question.range_start <= value <= question.range_end:
                return question.marks
        elif abs(value - question.range_start) < NUMERIC_TOLERANCE:
            return question.marks

    expected = (question.correct_answer_text or "").strip()
    expected_value = parse_number(expected)
    if value is not None and expected_value is not None:
        if abs(value - expected_value) < NUMERIC_TOLERANCE:
            return question.marks
        return 0.0
    if given.lower() == expected.lower():
        return question.marks
    return 0.0


_SCORERS = {
    QuestionKind.SINGLE_CHOICE: _score_single,
    QuestionKind.MULTI_CHOICE: _score_multi,
    QuestionKind.NUMERIC_OR_TEXT: _score_text,
}


def score(question: Question, answer: AnswerValue | None) -> ScoreResult:
    """Score one answer. Info blocks and missing answers award 0."""
    scorer = _SCORERS.get(question.kind)
    awarded = scorer(question, answer) if scorer else 0.0
    return ScoreResult(awarded=awarded, correct_description=describe_correct(question))


def grade(awarded: float, marks: float) -> Grade:
    if awarded == marks:
        return Grade.CORRECT
    if awarded > 0:
        return Grade.PARTIAL
    return Grade.WRONG


def percent(awarded: float, total_marks: float) -> float | None:
    """Percentage of total marks; None when there is nothing to score."""
    if total_marks <= 0:
        return None
    return awarded / total_marks * 100


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def feedback_for(pct: float) -> str:
    """Results banner text for a final percentage."""
    if pct >= 90:
        return "Outstanding!"
    if pct >= 80:
        return "Excellent!"
    if pct >= 70:
        return "Good Job!"
    if pct >= 60:
        return "Above Average"
    if pct >= 50:
        return "Keep Going!"
    if pct >= 40:
        return "Keep Practising"
    return "Needs More Work"
