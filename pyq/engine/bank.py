"""
Question-bank model: turns a raw payload into immutable questions.

Payloads come in two shapes, ``{"papers": [...], "questions": [...]}`` or a
bare list of question objects. Both normalize to the same ``QuestionBank``.
"""

from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Iterator

from pydantic import ValidationError

from pyq.config import EXTRA_INFO_MARKER
from pyq.errors import MalformedBankError
from pyq.models.bank import RawPaper, RawQuestion, coerce_int
from pyq.utils.json_utils import json_load

logger = logging.getLogger(__name__)


class QuestionKind(str, enum.Enum):
    """How a question is answered and scored."""

    SINGLE_CHOICE = "single_choice"
    MULTI_CHOICE = "multi_choice"
    NUMERIC_OR_TEXT = "numeric_or_text"
    INFO = "info"


@dataclass(frozen=True)
class Option:
    text: str
    image_ref: str | None = None
    is_correct: bool = False


@dataclass(frozen=True)
class Question:
    index: int
    number: int | None
    kind: QuestionKind
    text: str = ""
    marks: float = 0.0
    options: tuple[Option, ...] = ()
    correct_answer_text: str | None = None
    range_start: float | None = None
    range_end: float | None = None
    for_questions: frozenset[int] = frozenset()
    image_ref: str | None = None
    extra_text: str | None = None

    @property
    def is_info(self) -> bool:
        return self.kind is QuestionKind.INFO

    @property
    def is_choice(self) -> bool:
        return self.kind in (QuestionKind.SINGLE_CHOICE, QuestionKind.MULTI_CHOICE)

    @property
    def correct_indices(self) -> tuple[int, ...]:
        return tuple(i for i, option in enumerate(self.options) if option.is_correct)

    @property
    def display_number(self) -> int:
        """Ordinal shown to the learner; unnumbered payloads fall back to position."""
        return self.number if self.number is not None else self.index + 1

    @property
    def order_key(self) -> int:
        """Ordering used to find the first and last real question."""
        return self.number if self.number is not None else self.index


@dataclass(frozen=True)
class PaperInfo:
    total_time_minutes: int | None = None
    name: str | None = None
    year: str | None = None
    session: str | None = None


@dataclass(frozen=True)
class QuestionBank:
    questions: tuple[Question, ...]
    paper: PaperInfo = field(default_factory=PaperInfo)

    def __len__(self) -> int:
        return len(self.questions)

    def __getitem__(self, index: int) -> Question:
        return self.questions[index]

    def scoreable(self) -> Iterator[Question]:
        """Iterate non-info questions in payload order."""
        return (q for q in self.questions if not q.is_info)

    @property
    def question_count(self) -> int:
        return sum(1 for _ in self.scoreable())

    @property
    def total_display_count(self) -> int:
        """Largest declared number, else the count of real questions."""
        numbers = [q.number for q in self.scoreable() if q.number is not None]
        if numbers:
            return max(numbers)
        return self.question_count

    @property
    def total_marks(self) -> float:
        return sum(q.marks for q in self.scoreable())

    @property
    def first_question_index(self) -> int | None:
        return self._extreme_index(lambda key, best: key < best)

    @property
    def last_question_index(self) -> int | None:
        return self._extreme_index(lambda key, best: key > best)

    def _extreme_index(self, better) -> int | None:
        found: int | None = None
        best: int | None = None
        for question in self.scoreable():
            key = question.order_key
            if best is None or better(key, best):
                best = key
                found = question.index
        return found

    def index_of_number(self, number: int) -> int | None:
        """Index of the first real question carrying ``number``."""
        for question in self.scoreable():
            if question.number == number:
                return question.index
        return None


def derive_kind(raw: RawQuestion) -> QuestionKind:
    """Classify a raw question; computed once at load time."""
    if raw.question_text == EXTRA_INFO_MARKER:
        return QuestionKind.INFO
    correct = sum(1 for option in raw.options if option.is_correct)
    if raw.options and correct == 1:
        return QuestionKind.SINGLE_CHOICE
    if raw.options and correct > 1:
        return QuestionKind.MULTI_CHOICE
    return QuestionKind.NUMERIC_OR_TEXT


def parse_for_questions(value: str | list[Any] | None) -> frozenset[int]:
    """Parse a ``"3,5"`` style declaration; unparseable parts are dropped."""
    if value is None:
        return frozenset()
    parts = value.split(",") if isinstance(value, str) else value
    numbers = set()
    for part in parts:
        number = coerce_int(part)
        if number is not None:
            numbers.add(number)
    return frozenset(numbers)


def _build_question(index: int, raw: RawQuestion) -> Question:
    kind = derive_kind(raw)
    options = tuple(
        Option(text=o.text, image_ref=o.image_url, is_correct=o.is_correct)
        for o in raw.options
    )
    if kind is QuestionKind.INFO:
        return Question(
            index=index,
            number=None,
            kind=kind,
            text=raw.question_text,
            for_questions=parse_for_questions(raw.for_questions),
            image_ref=raw.question_image_url,
            extra_text=raw.extra_text or "",
        )
    return Question(
        index=index,
        number=raw.question_number,
        kind=kind,
        text=raw.question_text,
        marks=raw.marks,
        options=options,
        correct_answer_text=raw.correct_answer_text,
        range_start=raw.range_start,
        range_end=raw.range_end,
        image_ref=raw.question_image_url,
    )


def _split_payload(raw: object) -> tuple[object, dict[str, Any] | None]:
    if isinstance(raw, list):
        return raw, None
    if isinstance(raw, dict):
        papers = raw.get("papers")
        paper = None
        if isinstance(papers, list) and papers and isinstance(papers[0], dict):
            paper = papers[0]
        return raw.get("questions"), paper
    raise MalformedBankError("Question bank payload must be an object or a list")


def load_bank(raw: object) -> QuestionBank:
    """Validate a parsed payload and build the question bank."""
    items, paper_payload = _split_payload(raw)
    if not isinstance(items, list):
        raise MalformedBankError("Question bank has no question list")
    if not items:
        raise MalformedBankError("No questions found")

    questions = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise MalformedBankError(f"Question entry {index} is not an object")
        try:
            raw_question = RawQuestion.model_validate(item)
        except ValidationError as exc:
            raise MalformedBankError(f"Question entry {index} is invalid: {exc}") from exc
        questions.append(_build_question(index, raw_question))

    paper = PaperInfo()
    if paper_payload is not None:
        try:
            raw_paper = RawPaper.model_validate(paper_payload)
        except ValidationError as exc:
            raise MalformedBankError(f"Paper metadata is invalid: {exc}") from exc
        paper = PaperInfo(
            total_time_minutes=raw_paper.total_time_minutes,
            name=raw_paper.paper_name,
            year=raw_paper.year,
            session=raw_paper.session,
        )

    bank = QuestionBank(questions=tuple(questions), paper=paper)
    logger.info(
        "Loaded question bank: %d entries, %d questions, %s marks",
        len(bank),
        bank.question_count,
        bank.total_marks,
    )
    return bank


def load_bank_json(text: str) -> QuestionBank:
    """Parse a JSON document and build the question bank."""
    try:
        raw = json_load(text)
    except json.JSONDecodeError as exc:
        raise MalformedBankError(f"Question bank is not valid JSON: {exc}") from exc
    return load_bank(raw)
