"""Pydantic models for the raw question-bank payload."""
from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def coerce_float(value: Any) -> float | None:
    """Lenient number coercion: blanks and garbage become None."""
    if _blank(value) or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def coerce_int(value: Any) -> int | None:
    number = coerce_float(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def coerce_label(value: Any) -> str | None:
    """Optional text field: blanks become None, other scalars their str()."""
    if _blank(value) or isinstance(value, (dict, list)):
        return None
    return str(value)


class RawOption(BaseModel):
    """Single answer option as shipped in the payload."""

    model_config = ConfigDict(extra="ignore")

    text: str = ""
    image_url: str | None = None
    is_correct: bool = False

    @field_validator("text", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("is_correct", mode="before")
    @classmethod
    def _is_correct(cls, value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes"}
        return bool(value)

    @field_validator("image_url", mode="before")
    @classmethod
    def _image_url(cls, value: Any) -> str | None:
        return coerce_label(value)


class RawQuestion(BaseModel):
    """Question entry as shipped in the payload (snake_case keys)."""

    model_config = ConfigDict(extra="ignore")

    question_number: int | None = None
    question_text: str = ""
    question_type: str | None = None
    question_image_url: str | None = None
    marks: float = 0.0
    options: list[RawOption] = Field(default_factory=list)
    correct_answer_text: str | None = None
    range_start: float | None = None
    range_end: float | None = None
    for_questions: str | list[Any] | None = None
    extra_text: str | None = None

    @field_validator("question_number", mode="before")
    @classmethod
    def _number(cls, value: Any) -> int | None:
        return coerce_int(value)

    @field_validator("question_text", mode="before")
    @classmethod
    def _question_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("marks", mode="before")
    @classmethod
    def _marks(cls, value: Any) -> float:
        number = coerce_float(value)
        return max(number, 0.0) if number is not None else 0.0

    @field_validator("question_type", "question_image_url", "extra_text", mode="before")
    @classmethod
    def _label(cls, value: Any) -> str | None:
        return coerce_label(value)

    @field_validator("range_start", "range_end", mode="before")
    @classmethod
    def _range(cls, value: Any) -> float | None:
        return coerce_float(value)

    @field_validator("correct_answer_text", mode="before")
    @classmethod
    def _correct_text(cls, value: Any) -> str | None:
        return None if value is None else str(value)

    @field_validator("for_questions", mode="before")
    @classmethod
    def _for_questions(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("options", mode="before")
    @classmethod
    def _options(cls, value: Any) -> list[Any]:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict)]


class RawPaper(BaseModel):
    """Paper metadata, taken from ``papers[0]``."""

    model_config = ConfigDict(extra="ignore")

    total_time_minutes: int | None = None
    paper_name: str | None = None
    year: str | None = None
    session: str | None = None

    @field_validator("total_time_minutes", mode="before")
    @classmethod
    def _minutes(cls, value: Any) -> int | None:
        return coerce_int(value)

    @field_validator("paper_name", "year", "session", mode="before")
    @classmethod
    def _label(cls, value: Any) -> str | None:
        return coerce_label(value)
