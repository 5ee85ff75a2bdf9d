# SPDX-License-Identifier: Apache-2.0
"""Tests for line and block metering."""

from __future__ import annotations

import pytest

from glyphbox.core.byte_map import ByteMap, parse_byte_map
from glyphbox.core.models import BlockMetrics, LineMetrics
from glyphbox.core.text_metrics import (
    compare_byte_budget,
    exceeds_byte_budget,
    measure_block,
    measure_line,
)


@pytest.fixture
def byte_map() -> ByteMap:
    return parse_byte_map("A=1\n[=1\n]=1\n[ABC]=4\n[ICON]=3\né=2")


class TestMeasureLine:
    """Tests for measure_line."""

    def test_tag_consumed_once(self, byte_map: ByteMap) -> None:
        """A tag counts as one character with its own cost."""
        metrics = measure_line("[ABC]", byte_map, default_cost=9)
        assert metrics == LineMetrics(char_count=1, byte_count=4)

    def test_tag_inside_text(self, byte_map: ByteMap) -> None:
        metrics = measure_line("A[ICON]A", byte_map, default_cost=9)
        assert metrics == LineMetrics(char_count=3, byte_count=5)

    def test_unmatched_bracket_falls_back_to_single_chars(self, byte_map: ByteMap) -> None:
        metrics = measure_line("[AB]", byte_map, default_cost=9)
        # [ A B ]  -> 1 + 1 + 9 + 1
        assert metrics == LineMetrics(char_count=4, byte_count=12)

    def test_default_cost_for_unmapped(self, byte_map: ByteMap) -> None:
        assert measure_line("Z", byte_map, default_cost=2).byte_count == 2
        assert measure_line("Z", byte_map, default_cost=0).byte_count == 0

    def test_multibyte_character(self, byte_map: ByteMap) -> None:
        assert measure_line("éA", byte_map, default_cost=1) == LineMetrics(2, 3)

    def test_empty_line(self, byte_map: ByteMap) -> None:
        assert measure_line("", byte_map, default_cost=1) == LineMetrics(0, 0)

    def test_empty_map(self) -> None:
        metrics = measure_line("[ICON]", ByteMap(), default_cost=1)
        assert metrics == LineMetrics(char_count=6, byte_count=6)


class TestMeasureBlock:
    """Tests for measure_block."""

    def test_totals_are_sum_of_lines(self, byte_map: ByteMap) -> None:
        text = "A[ICON]\nhello\n\né"
        block = measure_block(text, byte_map, default_cost=1)
        lines = [measure_line(line, byte_map, 1) for line in text.split("\n")]

        assert block.line_details == tuple(lines)
        assert block.total_bytes == sum(line.byte_count for line in lines)
        assert block.total_chars == sum(line.char_count for line in lines)
        assert block.total_bits == block.total_bytes * 8

    def test_crlf_normalized(self, byte_map: ByteMap) -> None:
        block = measure_block("A\r\nA", byte_map, default_cost=1)
        assert block.line_details == (LineMetrics(1, 1), LineMetrics(1, 1))

    def test_empty_block_is_one_empty_line(self, byte_map: ByteMap) -> None:
        block = measure_block("", byte_map, default_cost=1)
        assert block == BlockMetrics(0, 0, 0, (LineMetrics(0, 0),))


class TestByteBudget:
    """Tests for compare_byte_budget."""

    def test_line_over_reference(self, byte_map: ByteMap) -> None:
        reference = measure_block("AAA\nAA", byte_map, 1)
        current = measure_block("AAA\nAAA", byte_map, 1)

        budgets = compare_byte_budget(current, reference)

        assert [b.is_over_limit for b in budgets] == [False, True]
        assert budgets[1].original_bytes == 2
        assert budgets[1].current_bytes == 3
        assert exceeds_byte_budget(budgets)

    def test_equal_bytes_within_budget(self, byte_map: ByteMap) -> None:
        reference = measure_block("[ICON]", byte_map, 1)
        current = measure_block("AAA", byte_map, 1)
        budgets = compare_byte_budget(current, reference)
        assert not exceeds_byte_budget(budgets)

    def test_extra_lines_always_over(self, byte_map: ByteMap) -> None:
        reference = measure_block("AAAA", byte_map, 1)
        current = measure_block("A\n", byte_map, 1)

        budgets = compare_byte_budget(current, reference)

        assert budgets[0].is_over_limit is False
        assert budgets[1].is_over_limit is True
        assert budgets[1].original_bytes is None
        assert budgets[1].original_chars is None

    def test_fewer_lines_than_reference(self, byte_map: ByteMap) -> None:
        reference = measure_block("A\nA\nA", byte_map, 1)
        current = measure_block("A", byte_map, 1)
        assert len(compare_byte_budget(current, reference)) == 1
