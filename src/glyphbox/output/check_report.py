# SPDX-License-Identifier: Apache-2.0
"""JSON report of a checked script."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from glyphbox.pipeline.preview_pipeline import BlockReport

CHECK_REPORT_VERSION = "1.0.0"


@dataclass
class CheckReport:
    """Fit check results for every block of one script."""

    source_file: str
    blocks: list[BlockReport]
    reference_file: str | None = None
    checked_at: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def overflow_count(self) -> int:
        return sum(1 for block in self.blocks if block.is_overflowing)

    @property
    def over_budget_count(self) -> int:
        return sum(1 for block in self.blocks if block.over_byte_budget)

    @property
    def all_fit(self) -> bool:
        return all(block.fits for block in self.blocks)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "version": CHECK_REPORT_VERSION,
            "source_file": self.source_file,
            "reference_file": self.reference_file,
            "checked_at": self.checked_at,
            "summary": {
                "blocks": len(self.blocks),
                "overflowing": self.overflow_count,
                "over_byte_budget": self.over_budget_count,
                "all_fit": self.all_fit,
            },
            "blocks": [block.to_dict() for block in self.blocks],
        }

    def to_json(self, indent: int = 2) -> str:
        """Export to JSON string.

        Args:
            indent: JSON indentation level.

        Returns:
            JSON string representation.
        """
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)

    def save(self, path: Path) -> None:
        """Save to a JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_json(), encoding="utf-8")
