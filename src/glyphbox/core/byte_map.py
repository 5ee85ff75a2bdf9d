# SPDX-License-Identifier: Apache-2.0
"""Parser for user-edited character encoding tables.

The table text holds one ``key=cost`` entry per line. A key is a single
character or a bracketed tag such as ``[ICON]``; the cost is the number of
bytes the game's text format spends on it. Blank lines and lines starting
with ``#`` are ignored. Malformed lines are skipped and reported as warnings.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from .models import ByteMapEntry, ParseWarning

logger = logging.getLogger(__name__)

_COST_RE = re.compile(r"^\d+$")


@dataclass(frozen=True)
class ByteMap:
    """Parsed encoding table.

    Attributes:
        entries: Entries sorted by descending key length; ties keep file order.
        warnings: Lines that were skipped, in file order.
    """

    entries: tuple[ByteMapEntry, ...] = ()
    warnings: tuple[ParseWarning, ...] = ()

    @property
    def tag_entries(self) -> tuple[ByteMapEntry, ...]:
        """Entries whose key is longer than one character."""
        return tuple(entry for entry in self.entries if len(entry.key) > 1)

    def single_char_costs(self) -> dict[str, int]:
        """Map single-character keys to their cost (first entry wins)."""
        costs: dict[str, int] = {}
        for entry in self.entries:
            if len(entry.key) == 1 and entry.key not in costs:
                costs[entry.key] = entry.byte_cost
        return costs


def _is_tag(key: str) -> bool:
    return len(key) > 2 and key.startswith("[") and key.endswith("]")


def _normalize_key(raw_key: str) -> str | None:
    if len(raw_key) == 1:
        return raw_key
    stripped = raw_key.strip()
    if _is_tag(stripped) or len(stripped) == 1:
        return stripped
    return None


def parse_byte_map(text: str | None) -> ByteMap:
    """Parse encoding table text into an ordered ``ByteMap``.

    Args:
        text: Raw table text. ``None`` or empty yields an empty map.

    Returns:
        ByteMap with valid entries (longest key first) and accumulated warnings.
    """
    if not text:
        return ByteMap()

    entries: list[ByteMapEntry] = []
    warnings: list[ParseWarning] = []

    for line_number, raw_line in enumerate(text.split("\n"), start=1):
        line = raw_line.rstrip("\r")
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        if line.count("=") != 1:
            warnings.append(
                ParseWarning(line_number, line, "expected exactly one '=' separator")
            )
            continue

        raw_key, raw_cost = line.split("=", 1)
        key = _normalize_key(raw_key)
        if key is None:
            warnings.append(
                ParseWarning(
                    line_number,
                    line,
                    f"key {raw_key.strip()!r} is neither one character nor a [tag]",
                )
            )
            continue

        cost_text = raw_cost.strip()
        if not _COST_RE.match(cost_text):
            warnings.append(
                ParseWarning(
                    line_number,
                    line,
                    f"cost {cost_text!r} is not a non-negative integer",
                )
            )
            continue

        entries.append(ByteMapEntry(key=key, byte_cost=int(cost_text)))

    for warning in warnings:
        logger.warning(
            "Skipping byte map line %d (%r): %s",
            warning.line_number,
            warning.text,
            warning.reason,
        )

    entries.sort(key=lambda entry: len(entry.key), reverse=True)
    return ByteMap(entries=tuple(entries), warnings=tuple(warnings))
