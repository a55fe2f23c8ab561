"""Tests for progress math."""

from __future__ import annotations

import itertools
import math

import pytest

from tsundoku.library.characters import CHARACTER_TEMPLATES
from tsundoku.library.models import Book
from tsundoku.library.progress import calculate_progress, clamp_page, is_completed


class TestCalculateProgress:
    @pytest.mark.parametrize(
        "current,total,expected",
        [
            (0, 100, 0),
            (50, 100, 50),
            (100, 100, 100),
            (120, 350, 34),
            (1, 3, 33),
            (2, 3, 67),
            (1, 8, 13),  # 12.5 rounds up
            (50, 280, 18),
        ],
    )
    def test_rounds_to_nearest(self, current, total, expected):
        assert calculate_progress(current, total) == expected

    def test_in_range_for_valid_inputs(self):
        for total in (1, 7, 99, 350, 1001):
            for current in range(0, total + 1, max(1, total // 13)):
                pct = calculate_progress(current, total)
                assert 0 <= pct <= 100
                assert pct == math.floor(current / total * 100 + 0.5)

    @pytest.mark.parametrize(
        "current,total",
        [
            (10, 0),
            (10, -5),
            (math.nan, 100),
            (10, math.nan),
            (math.inf, 100),
            (10, math.inf),
            (None, 100),
            ("50", 100),
            (10, "100"),
        ],
    )
    def test_invalid_inputs_yield_zero(self, current, total):
        assert calculate_progress(current, total) == 0

    def test_clamps_out_of_range(self):
        assert calculate_progress(250, 200) == 100
        assert calculate_progress(-10, 200) == 0


class TestClampPage:
    def test_within_bounds(self):
        assert clamp_page(5, 0, 10) == 5

    def test_below_and_above(self):
        assert clamp_page(-3, 0, 10) == 0
        assert clamp_page(250, 0, 200) == 200

    def test_result_in_range_and_idempotent(self):
        for p, lo, hi in itertools.product(range(-5, 15, 3), (0, 2), (2, 10)):
            once = clamp_page(p, lo, hi)
            assert lo <= once <= hi
            assert clamp_page(once, lo, hi) == once


class TestIsCompleted:
    def _book(self, current: int, total: int) -> Book:
        return Book(
            id="x",
            title="T",
            genre="study",
            total_page=total,
            current_page=current,
            reason="r",
            character=CHARACTER_TEMPLATES["study"],
        )

    def test_completed_at_last_page(self):
        assert is_completed(self._book(200, 200))

    def test_not_completed_before_last_page(self):
        assert not is_completed(self._book(199, 200))
