"""Attempt-related Pydantic models."""
from typing import Any

from pydantic import BaseModel, Field, model_validator

from pyq.engine.answers import AnswerValue, MultiChoiceAnswer, SingleChoiceAnswer, TextAnswer
from pyq.engine.attempt import AttemptMode


class AttemptStartRequest(BaseModel):
    """Model for starting an attempt from a stored or inline question bank."""

    bankId: str | None = None
    bank: dict[str, Any] | list[Any] | None = None
    subject: str = Field("PYQ", min_length=1)
    quizType: str = ""
    mode: AttemptMode = AttemptMode.PRACTICE

    @model_validator(mode="after")
    def _bank_source(self) -> "AttemptStartRequest":
        if (self.bankId is None) == (self.bank is None):
            raise ValueError("Provide exactly one of bankId or bank")
        return self


class AnswerRequest(BaseModel):
    """Model for recording an answer; exactly one field is set."""

    selectedIndex: int | None = None
    selectedIndices: list[int] | None = None
    text: str | None = None

    @model_validator(mode="after")
    def _one_value(self) -> "AnswerRequest":
        given = [
            value
            for value in (self.selectedIndex, self.selectedIndices, self.text)
            if value is not None
        ]
        if len(given) != 1:
            raise ValueError("Provide exactly one of selectedIndex, selectedIndices or text")
        return self

    def to_answer(self) -> AnswerValue:
        if self.selectedIndex is not None:
            return SingleChoiceAnswer(self.selectedIndex)
        if self.selectedIndices is not None:
            return MultiChoiceAnswer(frozenset(self.selectedIndices))
        return TextAnswer(self.text or "")


class ToggleRequest(BaseModel):
    """Model for toggling one multi-choice option."""

    option: int = Field(..., ge=0)


class GoToRequest(BaseModel):
    """Model for jumping to a question."""

    index: int


class ReviewRequest(BaseModel):
    """Model for entering review mode."""

    index: int = 0
