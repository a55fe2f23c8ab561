"""Progress percentage and page bounds."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import Book


def _is_finite_number(value: Any) -> bool:
    # bool is an int subclass but never a page count
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def calculate_progress(current_page: Any, total_page: Any) -> int:
    """Return reading progress as an integer percentage in [0, 100].

    Any non-finite or non-numeric input, or a non-positive total, yields 0.
    """
    if not _is_finite_number(current_page) or not _is_finite_number(total_page):
        return 0
    if total_page <= 0:
        return 0
    progress = _round_half_up(current_page / total_page * 100)
    return max(0, min(100, progress))


def clamp_page(page: int, min_page: int, max_page: int) -> int:
    return min(max_page, max(min_page, page))


def is_completed(book: Book) -> bool:
    return book.current_page >= book.total_page
