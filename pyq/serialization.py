from __future__ import annotations

from typing import Any

from pyq.engine.answers import AnswerValue, MultiChoiceAnswer, SingleChoiceAnswer, TextAnswer
from pyq.engine.attempt import AttemptResult, AttemptSession
from pyq.engine.bank import Question, QuestionKind
from pyq.engine.recorder import SessionSummary
from pyq.engine.scoring import ScoreResult, grade
from pyq.engine.timer import urgency_for
from pyq.utils.time_utils import format_clock


TYPE_LABELS = {
    QuestionKind.SINGLE_CHOICE: "Single answer",
    QuestionKind.MULTI_CHOICE: "Multiple answers",
    QuestionKind.NUMERIC_OR_TEXT: "Text / Numeric answer",
}


def serialize_answer(answer: AnswerValue | None) -> dict[str, Any] | None:
    if isinstance(answer, SingleChoiceAnswer):
        return {"selectedIndex": answer.selected_index}
    if isinstance(answer, MultiChoiceAnswer):
        return {"selectedIndices": sorted(answer.selected_indices)}
    if isinstance(answer, TextAnswer):
        return {"text": answer.text}
    return None


def serialize_score(result: ScoreResult, marks: float) -> dict[str, Any]:
    return {
        "awarded": result.awarded,
        "marks": marks,
        "grade": grade(result.awarded, marks).value,
        "correctAnswer": result.correct_description,
        "message": f"You scored {result.awarded:g} out of {marks:g} marks for this question.",
    }


def serialize_info(question: Question) -> dict[str, Any]:
    return {
        "index": question.index,
        "extraText": question.extra_text or "",
        "imageUrl": question.image_ref,
        "forQuestions": sorted(question.for_questions),
    }


def _serialize_options(question: Question, revealed: bool) -> list[dict[str, Any]]:
    return [
        {
            "index": option_index,
            "text": option.text,
            "imageUrl": option.image_ref,
            "isCorrect": option.is_correct if revealed else None,
        }
        for option_index, option in enumerate(question.options)
    ]


def serialize_question_view(session: AttemptSession) -> dict[str, Any]:
    """Projection of the current question for rendering."""
    with session.lock:
        attempt = session.attempt
        bank = session.bank
        index = attempt.current_index
        question = bank[index]
        total = bank.total_display_count
        remaining = attempt.remaining_seconds

        payload: dict[str, Any] = {
            "index": index,
            "size": len(bank),
            "kind": question.kind.value,
            "mode": attempt.mode.value,
            "status": attempt.status.value,
            "reviewMode": attempt.review_mode,
            "totalDisplayCount": total,
            "remainingSeconds": remaining,
            "clock": format_clock(remaining) if remaining is not None else None,
            "urgency": urgency_for(remaining).value if remaining is not None else None,
            "canGoPrevious": index > 0 and index != bank.first_question_index,
            "nextIsSubmit": not attempt.review_mode and index == bank.last_question_index,
        }

        if question.is_info:
            payload["progressText"] = "Extra Info"
            payload["progressPercent"] = None
            payload["info"] = serialize_info(question)
            return payload

        number = question.display_number
        revealed = session.is_revealed(index)
        payload.update(
            {
                "number": number,
                "progressText": f"Question {number}/{total}",
                "progressPercent": number / total * 100 if total else None,
                "marks": question.marks,
                "text": question.text,
                "imageUrl": question.image_ref,
                "typeLabel": TYPE_LABELS[question.kind],
                "options": _serialize_options(question, revealed),
                "answer": serialize_answer(attempt.answers.get(index)),
                "locked": session.is_locked(index),
                "checked": index in attempt.checked_scores,
                "hasExtraInfo": index in session.links,
                "correctAnswerText": (
                    question.correct_answer_text
                    if revealed and question.kind is QuestionKind.NUMERIC_OR_TEXT
                    else None
                ),
                "score": None,
            }
        )
        checked = session.score_of(index)
        if checked is not None:
            payload["score"] = serialize_score(checked, question.marks)
        return payload


def serialize_result(result: AttemptResult) -> dict[str, Any]:
    return {
        "score": result.score,
        "totalMarks": result.total_marks,
        "percent": result.percent,
        "feedback": result.feedback,
        "abandoned": result.abandoned,
        "questions": [
            {
                "index": outcome.index,
                "number": outcome.number,
                "marks": outcome.marks,
                "awarded": outcome.awarded,
                "grade": outcome.grade.value,
            }
            for outcome in result.outcomes
        ],
    }


def serialize_summary(summary: SessionSummary) -> dict[str, Any]:
    return {
        "subject": summary.subject,
        "quizType": summary.quiz_type,
        "correct": summary.correct_count,
        "wrong": summary.wrong_count,
        "skipped": summary.skipped_count,
        "total": summary.total_questions,
        "pct": summary.score_percent,
        "quit": summary.abandoned,
    }
