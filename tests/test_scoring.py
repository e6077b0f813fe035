import pytest

from payloads import info_block, multi_choice, single_choice, text_question
from pyq.engine.answers import MultiChoiceAnswer, SingleChoiceAnswer, TextAnswer
from pyq.engine.bank import load_bank
from pyq.engine.scoring import (
    Grade,
    feedback_for,
    grade,
    parse_number,
    percent,
    round_half_up,
    score,
)


def build(raw: dict[str, object]):
    return load_bank([raw])[0]


def test_single_choice_scores_full_or_nothing() -> None:
    question = build(single_choice(1, marks=2, correct=1))
    assert score(question, SingleChoiceAnswer(1)).awarded == 2
    assert score(question, SingleChoiceAnswer(0)).awarded == 0
    assert score(question, None).awarded == 0


def test_single_choice_describes_correct_option() -> None:
    question = build(single_choice(1, correct=2))
    assert score(question, None).correct_description == "Correct Answer: Option 3"


@pytest.mark.parametrize(
    ("selected", "expected"),
    [
        ((0, 2), 4.0),
        ((0,), 2.0),
        ((2,), 2.0),
        ((0, 1), 2.0),
        ((1,), 0.0),
        ((0, 1, 2), 2.0),
        ((0, 1, 2, 3), 0.0),
        ((1, 3), 0.0),
        ((), 0.0),
    ],
)
def test_multi_choice_partial_credit(selected: tuple[int, ...], expected: float) -> None:
    question = build(multi_choice(1, marks=4, correct=(0, 2)))
    assert score(question, MultiChoiceAnswer.of(*selected)).awarded == pytest.approx(expected)


def test_multi_choice_never_exceeds_marks_or_goes_negative() -> None:
    question = build(multi_choice(1, marks=3, correct=(0, 1, 2), count=5))
    for picks in [(0,), (0, 1), (0, 1, 3), (0, 1, 2, 3, 4), (3, 4), (0, 3, 4)]:
        awarded = score(question, MultiChoiceAnswer.of(*picks)).awarded
        assert 0 <= awarded <= 3


def test_multi_choice_describes_all_correct_options() -> None:
    question = build(multi_choice(1, correct=(0, 2)))
    assert score(question, None).correct_description == "Correct Answers: Option 1, Option 3"


def test_numeric_answers_compare_with_tolerance() -> None:
    question = build(text_question(1, marks=2, correct_answer_text="3.14"))
    assert score(question, TextAnswer("3.140000001")).awarded == 2
    assert score(question, TextAnswer(" 3.14 ")).awarded == 2
    assert score(question, TextAnswer("3.15")).awarded == 0


def test_text_answers_compare_case_insensitively() -> None:
    question = build(text_question(1, correct_answer_text="Photosynthesis"))
    assert score(question, TextAnswer("  photosynthesis ")).awarded == 1
    assert score(question, TextAnswer("respiration")).awarded == 0


def test_numeric_answer_against_text_expectation_falls_back_to_text() -> None:
    question = build(text_question(1, correct_answer_text="ten"))
    assert score(question, TextAnswer("10")).awarded == 0


def test_range_bounds_are_inclusive() -> None:
    question = build(text_question(1, marks=2, range_start=1.5, range_end=2.5))
    assert score(question, TextAnswer("1.5")).awarded == 2
    assert score(question, TextAnswer("2.5")).awarded == 2
    assert score(question, TextAnswer("2")).awarded == 2
    assert score(question, TextAnswer("2.51")).awarded == 0
    assert score(question, TextAnswer("abc")).awarded == 0


def test_range_start_alone_is_an_exact_value() -> None:
    question = build(text_question(1, range_start=7))
    assert score(question, TextAnswer("7.000001")).awarded == 1
    assert score(question, TextAnswer("7.1")).awarded == 0


def test_range_miss_still_accepts_the_correct_text() -> None:
    question = build(text_question(1, correct_answer_text="5", range_start=1, range_end=2))
    assert score(question, TextAnswer("5")).awarded == 1


def test_blank_text_answer_scores_zero() -> None:
    question = build(text_question(1, correct_answer_text=""))
    assert score(question, TextAnswer("   ")).awarded == 0
    assert score(question, None).correct_description == "Correct Answer: [Empty]"


def test_wrong_answer_shape_scores_zero() -> None:
    question = build(single_choice(1))
    assert score(question, TextAnswer("Option 1")).awarded == 0


def test_info_block_scores_zero() -> None:
    question = build(info_block("1"))
    result = score(question, None)
    assert result.awarded == 0
    assert result.correct_description == ""


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("42", 42.0),
        (" -1.5 ", -1.5),
        ("1e3", 1000.0),
        ("nan", None),
        ("inf", None),
        ("12abc", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_number(text: str | None, expected: float | None) -> None:
    assert parse_number(text) == expected


def test_grade_bands() -> None:
    assert grade(2, 2) is Grade.CORRECT
    assert grade(1, 2) is Grade.PARTIAL
    assert grade(0, 2) is Grade.WRONG
    assert grade(0, 0) is Grade.CORRECT


def test_percent_and_rounding() -> None:
    assert percent(4, 8) == 50
    assert percent(0, 0) is None
    assert round_half_up(62.5) == 63
    assert round_half_up(62.49) == 62


@pytest.mark.parametrize(
    ("pct", "message"),
    [
        (100, "Outstanding!"),
        (90, "Outstanding!"),
        (85, "Excellent!"),
        (70, "Good Job!"),
        (65, "Above Average"),
        (50, "Keep Going!"),
        (40, "Keep Practising"),
        (39.9, "Needs More Work"),
    ],
)
def test_feedback_bands(pct: float, message: str) -> None:
    assert feedback_for(pct) == message
