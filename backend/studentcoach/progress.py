"""Assignment progress aggregation.

Pure functions over per-item (question_count, completed_count) pairs; no
database access. Percentages use two-stage rounding: the completion ratio is
rounded half-up at 1/10000 granularity and then divided by 100, so
3 of 10 gives 30.0 and 25 of 30 gives 83.33. Per-item figures scale the
ratio by 10000 in one step; the assignment-wide figure scales to percent and
then by 100.

Over-reporting is not clamped: completing 12 of 10 questions yields 120.0.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional


@dataclass(frozen=True)
class ItemCounts:
    """Counts for one assignment item.

    completed_count is None when the student has never reported on the item.
    """

    item_id: str
    question_count: int
    completed_count: Optional[int] = None
    subject: str = ""
    topic: str = ""


def _round_half_up(x: float) -> int:
    return math.floor(x + 0.5)


def percentage(completed: int, total: int) -> float:
    """Completion percentage with two decimals; 0.0 when there is nothing to do.

    >>> percentage(3, 10)
    30.0
    >>> percentage(25, 30)
    83.33
    """
    if total == 0:
        return 0.0
    return _round_half_up(completed / total * 10000) / 100


def overall_percentage(completed: int, total: int) -> float:
    """Assignment-wide percentage: the ratio is scaled to percent first.

    Float scaling in two steps differs from ``percentage`` on some ties,
    e.g. 23 of 160 gives 14.37 here and 14.38 there.
    """
    if total == 0:
        return 0.0
    return _round_half_up(completed / total * 100 * 100) / 100


def item_progress(item: ItemCounts) -> dict:
    """Progress of a single item."""
    completed = item.completed_count or 0
    return {
        "id": item.item_id,
        "subject": item.subject,
        "topic": item.topic,
        "question_count": item.question_count,
        "completed_count": completed,
        "progress_percentage": percentage(completed, item.question_count),
    }


def summarize(assignment_id: str, items: Iterable[ItemCounts]) -> dict:
    """Aggregate progress over all items of an assignment."""
    items = list(items)
    total_questions = sum(i.question_count for i in items)
    completed_questions = sum(i.completed_count or 0 for i in items)

    return {
        "assignment_id": assignment_id,
        "total_questions": total_questions,
        "completed_questions": completed_questions,
        "progress_percentage": overall_percentage(completed_questions, total_questions),
        "items": [item_progress(i) for i in items],
    }
