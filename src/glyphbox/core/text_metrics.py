# SPDX-License-Identifier: Apache-2.0
"""Character and byte metering of text against an encoding table."""

from __future__ import annotations

from collections.abc import Sequence

from .byte_map import ByteMap
from .models import BlockMetrics, LineBudget, LineMetrics


def measure_line(line: str, byte_map: ByteMap, default_cost: int) -> LineMetrics:
    """Count logical characters and encoded bytes of one line.

    Tags are matched longest first at every position. A matched tag counts as
    a single character. Characters absent from the map cost ``default_cost``.

    Args:
        line: One line of text without line breaks.
        byte_map: Parsed encoding table.
        default_cost: Byte cost of unmapped characters.

    Returns:
        LineMetrics for the line.
    """
    tags = byte_map.tag_entries
    single_costs = byte_map.single_char_costs()

    chars = 0
    total = 0
    i = 0
    while i < len(line):
        chars += 1
        for entry in tags:
            if line.startswith(entry.key, i):
                total += entry.byte_cost
                i += len(entry.key)
                break
        else:
            total += single_costs.get(line[i], default_cost)
            i += 1

    return LineMetrics(char_count=chars, byte_count=total)


def split_lines(text: str) -> list[str]:
    """Split block text on line breaks; an empty block is one empty line."""
    return text.replace("\r\n", "\n").split("\n")


def measure_block(text: str, byte_map: ByteMap, default_cost: int) -> BlockMetrics:
    """Measure every line of a block and sum the totals."""
    details = tuple(
        measure_line(line, byte_map, default_cost) for line in split_lines(text)
    )
    total_chars = sum(line.char_count for line in details)
    total_bytes = sum(line.byte_count for line in details)
    return BlockMetrics(
        total_chars=total_chars,
        total_bytes=total_bytes,
        total_bits=total_bytes * 8,
        line_details=details,
    )


def compare_byte_budget(
    current: BlockMetrics,
    reference: BlockMetrics,
) -> list[LineBudget]:
    """Compare each line's bytes against the reference block's same line.

    Lines beyond the reference's line count are always over the limit.
    """
    budgets: list[LineBudget] = []
    for index, line in enumerate(current.line_details):
        if index < len(reference.line_details):
            original = reference.line_details[index]
            budgets.append(
                LineBudget(
                    current_chars=line.char_count,
                    current_bytes=line.byte_count,
                    original_chars=original.char_count,
                    original_bytes=original.byte_count,
                    is_over_limit=line.byte_count > original.byte_count,
                )
            )
        else:
            budgets.append(
                LineBudget(
                    current_chars=line.char_count,
                    current_bytes=line.byte_count,
                    original_chars=None,
                    original_bytes=None,
                    is_over_limit=True,
                )
            )
    return budgets


def exceeds_byte_budget(budgets: Sequence[LineBudget]) -> bool:
    """Return True if any line is over its byte budget."""
    return any(budget.is_over_limit for budget in budgets)
