"""Link extra-info blocks to the questions they annotate."""
from __future__ import annotations

import logging
from typing import Sequence

from pyq.engine.bank import Question

logger = logging.getLogger(__name__)


def _first_index_by_number(questions: Sequence[Question]) -> dict[int, int]:
    lookup: dict[int, int] = {}
    for question in questions:
        if question.is_info or question.number is None:
            continue
        lookup.setdefault(question.number, question.index)
    return lookup


def link_extra_info(questions: Sequence[Question]) -> dict[int, int]:
    """
    Map question index -> index of its info block.

    Numbers that match no question are ignored. When two blocks claim the
    same question the later one wins and the conflict is logged.
    """
    by_number = _first_index_by_number(questions)
    links: dict[int, int] = {}
    for info in questions:
        if not info.is_info:
            continue
        for number in sorted(info.for_questions):
            target = by_number.get(number)
            if target is None:
                logger.debug("Info block %d references unknown question %d", info.index, number)
                continue
            previous = links.get(target)
            if previous is not None and previous != info.index:
                logger.warning(
                    "Question %d is annotated by info blocks %d and %d; using %d",
                    number,
                    previous,
                    info.index,
                    info.index,
                )
            links[target] = info.index
    return links
