"""Attempt endpoints: start, navigate, answer, check, submit, review."""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from pyq.dependencies import get_active_attempt, get_registry, get_session_store
from pyq.engine.bank import load_bank
from pyq.errors import MalformedBankError, OutOfRangeError
from pyq.models.attempts import (
    AnswerRequest,
    AttemptStartRequest,
    GoToRequest,
    ReviewRequest,
    ToggleRequest,
)
from pyq.serialization import (
    serialize_info,
    serialize_question_view,
    serialize_result,
    serialize_score,
    serialize_summary,
)
from pyq.services.attempt_service import (
    ActiveAttempt,
    AttemptRegistry,
    abandon_attempt,
    start_attempt,
    submit_attempt,
)
from pyq.services.bank_service import load_stored_bank
from pyq.services.session_service import SqlSessionStore
from pyq.utils import validate_id

router = APIRouter(prefix="/api/attempts", tags=["attempts"])

Active = Annotated[ActiveAttempt, Depends(get_active_attempt)]


def _require_index(active: ActiveAttempt, index: int) -> None:
    if not 0 <= index < len(active.session.bank):
        raise HTTPException(status_code=400, detail=str(OutOfRangeError(index, len(active.session.bank))))


@router.post("")
def create_attempt(
    payload: AttemptStartRequest,
    registry: Annotated[AttemptRegistry, Depends(get_registry)],
    store: Annotated[SqlSessionStore, Depends(get_session_store)],
) -> dict[str, object]:
    """Start an attempt on a stored or inline question bank."""
    try:
        if payload.bankId is not None:
            bank = load_stored_bank(validate_id("bankId", payload.bankId))
        else:
            bank = load_bank(payload.bank)
    except MalformedBankError as e:
        raise HTTPException(status_code=422, detail=str(e))

    active = start_attempt(
        registry,
        bank,
        payload.mode,
        payload.subject.strip(),
        payload.quizType.strip(),
        store,
    )
    return {
        "attemptId": active.attempt_id,
        "mode": active.session.mode.value,
        "subject": active.subject,
        "quizType": active.quiz_type,
        "totalDisplayCount": bank.total_display_count,
        "totalMarks": bank.total_marks,
        "question": serialize_question_view(active.session),
    }


@router.get("/{attempt_id}")
def get_attempt(active: Active) -> dict[str, object]:
    """Current question and attempt state."""
    result = active.session.result
    return {
        "attemptId": active.attempt_id,
        "question": serialize_question_view(active.session),
        "result": serialize_result(result) if result is not None else None,
    }


@router.post("/{attempt_id}/goto")
def go_to_question(active: Active, payload: GoToRequest) -> dict[str, object]:
    """Jump to any entry; allowed in every state."""
    try:
        active.session.go_to(payload.index)
    except OutOfRangeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"question": serialize_question_view(active.session)}


@router.post("/{attempt_id}/next")
def next_question(active: Active) -> dict[str, object]:
    """Move forward; on the last question this asks for submit confirmation."""
    navigation = active.session.next()
    return {
        "navigation": navigation.value,
        "question": serialize_question_view(active.session),
    }


@router.post("/{attempt_id}/previous")
def previous_question(active: Active) -> dict[str, object]:
    """Move back one entry."""
    navigation = active.session.previous()
    return {
        "navigation": navigation.value,
        "question": serialize_question_view(active.session),
    }


@router.put("/{attempt_id}/answers/{index}")
def record_answer(active: Active, index: int, payload: AnswerRequest) -> dict[str, object]:
    """Record (replace) the answer for one question."""
    _require_index(active, index)
    recorded = active.session.record_answer(index, payload.to_answer())
    return {
        "recorded": recorded,
        "question": serialize_question_view(active.session),
    }


@router.post("/{attempt_id}/answers/{index}/toggle")
def toggle_option(active: Active, index: int, payload: ToggleRequest) -> dict[str, object]:
    """Select or deselect one option of a multi-choice question."""
    _require_index(active, index)
    recorded = active.session.toggle_option(index, payload.option)
    return {
        "recorded": recorded,
        "question": serialize_question_view(active.session),
    }


@router.post("/{attempt_id}/check")
def check_answer(active: Active) -> dict[str, object]:
    """Score the current question (practice mode)."""
    session = active.session
    result = session.check_current()
    return {
        "checked": result is not None,
        "score": serialize_score(result, session.current.marks) if result is not None else None,
        "question": serialize_question_view(session),
    }


@router.post("/{attempt_id}/submit")
def submit(active: Active) -> dict[str, object]:
    """Submit the attempt and record its summary."""
    result, summary = submit_attempt(active)
    if result is None:
        raise HTTPException(status_code=409, detail="Attempt cannot be submitted")
    return {
        "result": serialize_result(result),
        "summary": serialize_summary(summary) if summary is not None else None,
        "question": serialize_question_view(active.session),
    }


@router.post("/{attempt_id}/review")
def review(active: Active, payload: ReviewRequest | None = None) -> dict[str, object]:
    """Browse a submitted attempt with correct answers revealed."""
    index = payload.index if payload is not None else 0
    _require_index(active, index)
    if not active.session.enter_review(index):
        raise HTTPException(status_code=409, detail="Submit the attempt before reviewing")
    return {"question": serialize_question_view(active.session)}


@router.get("/{attempt_id}/extra-info")
def get_extra_info(active: Active) -> dict[str, object]:
    """Info block linked to the current question."""
    session = active.session
    info = session.extra_info_for(session.attempt.current_index)
    if info is None:
        raise HTTPException(status_code=404, detail="No extra info for this question")
    return serialize_info(info)


@router.delete("/{attempt_id}")
def abandon(
    active: Active,
    registry: Annotated[AttemptRegistry, Depends(get_registry)],
) -> dict[str, object]:
    """Abandon the attempt and stop its countdown."""
    summary = abandon_attempt(registry, active)
    return {
        "status": "abandoned",
        "attemptId": active.attempt_id,
        "summary": serialize_summary(summary) if summary is not None else None,
    }
