import threading

import pytest

from payloads import paper, scenario, single_choice
from pyq.engine import attempt as attempt_module
from pyq.engine.answers import SingleChoiceAnswer
from pyq.engine.attempt import AttemptMode, AttemptSession, AttemptStatus
from pyq.engine.bank import PaperInfo, load_bank
from pyq.engine.timer import CountdownTimer, Urgency, exam_minutes, urgency_for
from pyq.errors import InvalidOperationError


def exam_session(minutes=None) -> AttemptSession:
    return AttemptSession(load_bank(paper(scenario(), minutes=minutes)), AttemptMode.EXAM)


@pytest.mark.parametrize(
    ("minutes", "expected"),
    [(None, 60), (0, 60), (-5, 60), (4, 60), (90, 90), (30, 30)],
)
def test_exam_minutes(minutes: int | None, expected: int) -> None:
    assert exam_minutes(PaperInfo(total_time_minutes=minutes)) == expected


def test_countdown_starts_from_paper_time() -> None:
    session = exam_session(minutes=90)
    timer = CountdownTimer(session)
    assert timer.remaining == 5400
    assert session.attempt.remaining_seconds == 5400


def test_legacy_four_minute_papers_get_an_hour() -> None:
    timer = CountdownTimer(exam_session(minutes="4"))
    assert timer.remaining == 3600


def test_practice_mode_has_no_countdown() -> None:
    session = AttemptSession(load_bank(scenario()))
    with pytest.raises(InvalidOperationError):
        CountdownTimer(session)
    assert session.attempt.remaining_seconds is None


@pytest.mark.parametrize(
    ("remaining", "expected"),
    [
        (301, Urgency.NORMAL),
        (300, Urgency.NORMAL),
        (299, Urgency.WARNING),
        (60, Urgency.WARNING),
        (59, Urgency.DANGER),
        (0, Urgency.DANGER),
    ],
)
def test_urgency_thresholds(remaining: int, expected: Urgency) -> None:
    assert urgency_for(remaining) is expected


def test_ticks_report_threshold_crossings_once() -> None:
    crossings = []
    timer = CountdownTimer(
        exam_session(),
        seconds=301,
        on_threshold=lambda urgency, remaining: crossings.append((urgency, remaining)),
    )
    for _ in range(250):
        assert timer.tick()
    assert crossings == [(Urgency.WARNING, 299), (Urgency.DANGER, 59)]
    assert timer.urgency is Urgency.DANGER


def test_expiry_submits_attempt_exactly_once() -> None:
    session = exam_session()
    session.record_answer(0, SingleChoiceAnswer(0))
    expired = []
    timer = CountdownTimer(session, seconds=2, on_expire=expired.append)

    assert timer.tick()
    assert not timer.tick()
    assert not timer.tick()

    assert timer.expired
    assert not timer.running
    assert session.status is AttemptStatus.SUBMITTED
    assert session.attempt.remaining_seconds == 0
    assert len(expired) == 1
    assert expired[0] is session.result
    assert expired[0].score == 2


def test_tick_after_manual_submit_stops_without_expiring() -> None:
    session = exam_session()
    expired = []
    timer = CountdownTimer(session, seconds=10, on_expire=expired.append)
    session.submit()

    assert not timer.tick()

    assert not timer.expired
    assert expired == []
    assert timer.remaining == 10


def test_cancel_stops_ticking() -> None:
    session = exam_session()
    timer = CountdownTimer(session, seconds=10)
    timer.cancel()
    timer.cancel()
    assert not timer.tick()
    assert session.status is AttemptStatus.IN_PROGRESS


def test_run_ticks_until_expiry_with_injected_wait() -> None:
    session = exam_session()
    ticks = []
    timer = CountdownTimer(
        session,
        seconds=3,
        on_tick=ticks.append,
        wait=lambda interval: False,
    )
    timer.run()
    assert ticks == [2, 1, 0]
    assert session.status is AttemptStatus.SUBMITTED


def test_run_stops_when_tick_callback_fails(caplog: pytest.LogCaptureFixture) -> None:
    def broken(remaining: int) -> None:
        raise RuntimeError("display gone")

    session = exam_session()
    timer = CountdownTimer(session, seconds=5, on_tick=broken, wait=lambda interval: False)
    timer.run()
    assert "Countdown tick failed" in caplog.text
    assert not timer.running
    assert timer.remaining == 4


def test_background_thread_expires_attempt() -> None:
    session = AttemptSession(load_bank([single_choice(1)]), AttemptMode.EXAM)
    done = threading.Event()
    timer = CountdownTimer(
        session,
        seconds=2,
        interval=0.01,
        on_expire=lambda result: done.set(),
    )
    timer.start()
    assert done.wait(5)
    timer.cancel()
    assert session.status is AttemptStatus.SUBMITTED


def test_expiry_racing_user_submit_scores_once(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []
    real_score = attempt_module.score

    def counting_score(question, answer):
        calls.append(question.index)
        return real_score(question, answer)

    monkeypatch.setattr(attempt_module, "score", counting_score)

    for seconds in range(1, 21):
        calls.clear()
        session = exam_session()
        results = []
        timer = CountdownTimer(
            session,
            seconds=seconds,
            on_expire=results.append,
            wait=lambda interval: False,
        )
        barrier = threading.Barrier(2)

        def countdown() -> None:
            barrier.wait()
            timer.run()

        thread = threading.Thread(target=countdown)
        thread.start()
        barrier.wait()
        for option in range(4):
            session.record_answer(0, SingleChoiceAnswer(option))
        results.append(session.submit())
        thread.join(5)

        assert not thread.is_alive()
        assert session.status is AttemptStatus.SUBMITTED
        assert all(result is session.result for result in results)
        assert sorted(calls) == [0, 1, 2]
        assert sorted(session.attempt.checked_scores) == [0, 1, 2]
