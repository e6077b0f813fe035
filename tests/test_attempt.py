from datetime import datetime, timedelta, timezone

import pytest

from payloads import info_block, multi_choice, scenario, single_choice, text_question
from pyq.engine.answers import MultiChoiceAnswer, SingleChoiceAnswer, TextAnswer
from pyq.engine.attempt import AttemptMode, AttemptSession, AttemptStatus, Navigation
from pyq.engine.bank import load_bank
from pyq.engine.scoring import Grade
from pyq.errors import InvalidOperationError, OutOfRangeError


def make_session(questions=None, mode=AttemptMode.PRACTICE, **kwargs) -> AttemptSession:
    return AttemptSession(load_bank(questions or scenario()), mode, **kwargs)


def test_scenario_exam_submit() -> None:
    session = make_session(mode=AttemptMode.EXAM)
    assert session.record_answer(0, SingleChoiceAnswer(0))
    assert session.record_answer(1, SingleChoiceAnswer(1))
    assert session.record_answer(2, MultiChoiceAnswer.of(0, 1))

    result = session.submit()

    assert result is not None
    assert [o.awarded for o in result.outcomes] == [2, 0, 2]
    assert result.score == 4
    assert result.total_marks == 8
    assert result.percent == 50
    assert [o.grade for o in result.outcomes] == [Grade.CORRECT, Grade.WRONG, Grade.PARTIAL]
    assert session.status is AttemptStatus.SUBMITTED


def test_navigation_stays_in_bounds() -> None:
    session = make_session()
    assert session.previous() is Navigation.STAYED
    assert session.attempt.current_index == 0
    assert session.next() is Navigation.MOVED
    assert session.next() is Navigation.MOVED
    assert session.next() is Navigation.CONFIRM_SUBMIT
    assert session.attempt.current_index == 2
    assert session.status is AttemptStatus.IN_PROGRESS


def test_go_to_out_of_range_leaves_state_unchanged() -> None:
    session = make_session()
    session.go_to(1)
    with pytest.raises(OutOfRangeError):
        session.go_to(3)
    with pytest.raises(OutOfRangeError):
        session.go_to(-1)
    assert session.attempt.current_index == 1


def test_confirm_submit_uses_highest_number_not_position() -> None:
    session = make_session([single_choice(2), single_choice(3), single_choice(1)])
    session.go_to(1)
    assert session.next() is Navigation.CONFIRM_SUBMIT
    session.go_to(2)
    assert session.next() is Navigation.STAYED


def test_info_blocks_are_navigable_but_not_answerable() -> None:
    session = make_session([info_block("1"), single_choice(1)])
    assert session.current.is_info
    assert not session.record_answer(0, SingleChoiceAnswer(0))
    session.check_current()
    assert session.attempt.checked_scores == {}
    assert session.next() is Navigation.MOVED
    assert session.extra_info_for(1).extra_text == "Context"
    assert session.extra_info_for(0) is None


def test_answer_replacement_keeps_latest_value() -> None:
    session = make_session()
    session.record_answer(0, SingleChoiceAnswer(1))
    session.record_answer(0, SingleChoiceAnswer(0))
    assert session.attempt.answers[0] == SingleChoiceAnswer(0)


def test_answers_must_fit_the_question() -> None:
    session = make_session([single_choice(1, count=4), text_question(2, correct_answer_text="x")])
    assert not session.record_answer(0, SingleChoiceAnswer(4))
    assert not session.record_answer(0, TextAnswer("Option 1"))
    assert not session.record_answer(1, SingleChoiceAnswer(0))
    assert session.record_answer(1, TextAnswer("x"))
    assert session.attempt.answers == {1: TextAnswer("x")}


def test_toggle_option_builds_selection() -> None:
    session = make_session()
    assert session.toggle_option(2, 0)
    assert session.toggle_option(2, 1)
    assert session.toggle_option(2, 0)
    assert session.attempt.answers[2] == MultiChoiceAnswer.of(1)
    assert not session.toggle_option(0, 1)
    assert not session.toggle_option(2, 9)


def test_check_locks_question_in_practice_mode() -> None:
    session = make_session()
    session.record_answer(0, SingleChoiceAnswer(0))

    result = session.check_current()

    assert result.awarded == 2
    assert result.correct_description == "Correct Answer: Option 1"
    assert session.is_locked(0)
    assert session.is_revealed(0)
    assert not session.record_answer(0, SingleChoiceAnswer(1))
    assert session.check_current() is None
    assert session.attempt.answers[0] == SingleChoiceAnswer(0)
    assert session.score_of(0).awarded == 2
    assert session.score_of(1) is None


def test_check_without_answer_awards_zero_and_locks() -> None:
    session = make_session()
    result = session.check_current()
    assert result.awarded == 0
    assert not session.record_answer(0, SingleChoiceAnswer(0))


def test_check_is_unavailable_in_exam_mode() -> None:
    session = make_session(mode=AttemptMode.EXAM)
    session.record_answer(0, SingleChoiceAnswer(0))
    assert session.check_current() is None
    assert session.attempt.checked_scores == {}


def test_strict_session_raises_on_rejected_operations() -> None:
    session = make_session(mode=AttemptMode.EXAM, strict=True)
    with pytest.raises(InvalidOperationError):
        session.check_current()
    with pytest.raises(InvalidOperationError):
        session.record_answer(0, TextAnswer("nope"))
    with pytest.raises(InvalidOperationError):
        session.enter_review()


def test_submit_reuses_checked_scores() -> None:
    session = make_session()
    session.record_answer(0, SingleChoiceAnswer(0))
    session.check_current()
    session.attempt.checked_scores[0] = 1.0

    result = session.submit()

    assert result.outcomes[0].awarded == 1.0


def test_submit_is_idempotent_and_freezes_answers() -> None:
    session = make_session()
    session.record_answer(0, SingleChoiceAnswer(0))
    first = session.submit()
    assert session.submit() is first
    assert not session.record_answer(1, SingleChoiceAnswer(0))
    assert session.check_current() is None
    assert all(session.is_locked(i) for i in range(3))
    assert session.attempt.checked_scores == {0: 2, 1: 0, 2: 0}


def test_review_reveals_answers_and_allows_free_navigation() -> None:
    session = make_session()
    assert not session.enter_review()
    session.submit()

    assert session.enter_review()

    assert session.status is AttemptStatus.REVIEWING
    assert session.attempt.review_mode
    assert session.attempt.current_index == 0
    assert session.is_revealed(1)
    session.go_to(2)
    assert session.next() is Navigation.STAYED
    assert session.submit() is session.result


def test_abandon_scores_provisionally() -> None:
    session = make_session()
    session.record_answer(0, SingleChoiceAnswer(0))

    result = session.abandon()

    assert result.abandoned
    assert result.score == 2
    assert session.status is AttemptStatus.ABANDONED
    assert session.attempt.checked_scores == {}
    assert session.submit() is result
    assert session.abandon() is None
    assert not session.record_answer(1, SingleChoiceAnswer(0))


def test_info_only_bank_has_no_percent() -> None:
    session = make_session([info_block("1")])
    result = session.submit()
    assert result.total_marks == 0
    assert result.percent is None
    assert result.feedback == "Needs More Work"


def test_zero_mark_question_contributes_nothing() -> None:
    session = make_session([single_choice(1, marks=0), single_choice(2, marks=2)])
    session.record_answer(1, SingleChoiceAnswer(0))
    result = session.submit()
    assert result.score == 2
    assert result.percent == 100


def test_submitted_at_uses_session_clock() -> None:
    start = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
    ticks = iter([start, start + timedelta(minutes=12)])
    session = make_session(clock=lambda: next(ticks))
    session.submit()
    assert session.attempt.started_at == start
    assert session.submitted_at == start + timedelta(minutes=12)


def test_unnumbered_questions_use_position_for_display() -> None:
    session = make_session([multi_choice(None), text_question(None, correct_answer_text="1")])
    session.submit()
    assert [o.number for o in session.result.outcomes] == [1, 2]
