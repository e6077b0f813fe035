"""Answer values recorded against questions."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from pyq.engine.bank import Question, QuestionKind


@dataclass(frozen=True)
class SingleChoiceAnswer:
    selected_index: int


@dataclass(frozen=True)
class MultiChoiceAnswer:
    selected_indices: frozenset[int]

    @classmethod
    def of(cls, *indices: int) -> "MultiChoiceAnswer":
        return cls(frozenset(indices))


@dataclass(frozen=True)
class TextAnswer:
    text: str


AnswerValue = Union[SingleChoiceAnswer, MultiChoiceAnswer, TextAnswer]

_ACCEPTED = {
    QuestionKind.SINGLE_CHOICE: SingleChoiceAnswer,
    QuestionKind.MULTI_CHOICE: MultiChoiceAnswer,
    QuestionKind.NUMERIC_OR_TEXT: TextAnswer,
}


def fits(question: Question, answer: AnswerValue) -> bool:
    """Check that an answer has the right shape for the question."""
    expected = _ACCEPTED.get(question.kind)
    if expected is None or not isinstance(answer, expected):
        return False
    size = len(question.options)
    if isinstance(answer, SingleChoiceAnswer):
        return 0 <= answer.selected_index < size
    if isinstance(answer, MultiChoiceAnswer):
        return all(0 <= i < size for i in answer.selected_indices)
    return True
