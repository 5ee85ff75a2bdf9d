# SPDX-License-Identifier: Apache-2.0
"""Preview pipeline: fit checks for translated script blocks."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from glyphbox.core.byte_map import ByteMap, parse_byte_map
from glyphbox.core.compositor import GlyphCompositor, RenderedText
from glyphbox.core.glyph_cache import CacheLoadResult, GlyphCache, GlyphCacheManager
from glyphbox.core.models import (
    BlockMetrics,
    FontConfig,
    LineBudget,
    OverflowConfig,
    OverflowMode,
    ParseWarning,
    TagConfig,
    TextTransform,
)
from glyphbox.core.overflow import OverflowDetector, OverflowResult
from glyphbox.core.tags import display_segments
from glyphbox.core.text_metrics import compare_byte_budget, exceeds_byte_budget, measure_block
from glyphbox.pipeline.progress import ProgressCallback

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreviewConfig:
    """Everything needed to check whether text fits its box."""

    font: FontConfig = field(default_factory=FontConfig)
    overflow: OverflowConfig = field(default_factory=OverflowConfig)
    tags: TagConfig = field(default_factory=TagConfig)
    transform: TextTransform = field(default_factory=TextTransform)
    line_height_factor: float = 1.2
    view_zoom: float = 1.0

    # Encoding table text (key=cost lines) and cost of unmapped characters
    byte_map: str = ""
    default_byte_value: int = 1
    # Count lines that exceed the reference block's bytes as failures
    enforce_byte_budget: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "font": self.font.to_dict(),
            "overflow": self.overflow.to_dict(),
            "tags": self.tags.to_dict(),
            "transform": self.transform.to_dict(),
            "line_height_factor": self.line_height_factor,
            "view_zoom": self.view_zoom,
            "byte_map": self.byte_map,
            "default_byte_value": self.default_byte_value,
            "enforce_byte_budget": self.enforce_byte_budget,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PreviewConfig:
        """Create from dictionary; missing sections take their defaults."""
        return cls(
            font=FontConfig.from_dict(data.get("font", {})),
            overflow=OverflowConfig.from_dict(data.get("overflow", {})),
            tags=TagConfig.from_dict(data.get("tags", {})),
            transform=TextTransform.from_dict(data.get("transform", {})),
            line_height_factor=float(data.get("line_height_factor", 1.2)),
            view_zoom=float(data.get("view_zoom", 1.0)),
            byte_map=str(data.get("byte_map", "")),
            default_byte_value=int(data.get("default_byte_value", 1)),
            enforce_byte_budget=bool(data.get("enforce_byte_budget", False)),
        )

    def to_json(self, indent: int = 2) -> str:
        """Export to JSON string."""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> PreviewConfig:
        """Create from JSON string."""
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def load(cls, path: Path) -> PreviewConfig:
        """Load a JSON profile.

        A relative ``font.image_source`` is resolved against the profile's
        directory.
        """
        data = json.loads(path.read_text(encoding="utf-8"))
        font = data.get("font")
        if isinstance(font, dict):
            source = font.get("image_source")
            if source and not Path(source).is_absolute():
                font["image_source"] = str(path.parent / source)
        return cls.from_dict(data)


@dataclass
class BlockReport:
    """Fit check result for one block."""

    index: int
    text: str
    overflow: OverflowResult
    metrics: BlockMetrics
    line_budgets: list[LineBudget] | None = None
    enforce_byte_budget: bool = False
    warnings: list[ParseWarning] = field(default_factory=list)

    @property
    def is_overflowing(self) -> bool:
        return self.overflow.is_overflowing

    @property
    def over_byte_budget(self) -> bool:
        """True if any line exceeds the reference (only when enforced)."""
        if not self.enforce_byte_budget or self.line_budgets is None:
            return False
        return exceeds_byte_budget(self.line_budgets)

    @property
    def fits(self) -> bool:
        return not self.is_overflowing and not self.over_byte_budget

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "index": self.index,
            "text": self.text,
            "fits": self.fits,
            "overflow": self.overflow.to_dict(),
            "metrics": self.metrics.to_dict(),
            "line_budgets": (
                [budget.to_dict() for budget in self.line_budgets]
                if self.line_budgets is not None
                else None
            ),
            "over_byte_budget": self.over_byte_budget,
            "warnings": [
                {"text": warning.text, "reason": warning.reason}
                for warning in self.warnings
            ],
        }


class PreviewPipeline:
    """Checks script blocks against a font, a box and a byte budget."""

    def __init__(
        self,
        config: PreviewConfig | None = None,
        progress_callback: ProgressCallback | None = None,
        cache_manager: GlyphCacheManager | None = None,
    ) -> None:
        """Initialize PreviewPipeline."""
        self._config = config or PreviewConfig()
        self._progress_callback = progress_callback
        self._cache_manager = cache_manager or GlyphCacheManager()
        self._byte_map = parse_byte_map(self._config.byte_map)
        self._compositor = GlyphCompositor(self._config.line_height_factor)
        self._detector = OverflowDetector(self._config.overflow, self._config.tags)

    @property
    def config(self) -> PreviewConfig:
        return self._config

    @property
    def byte_map(self) -> ByteMap:
        return self._byte_map

    @property
    def cache(self) -> GlyphCache:
        """Currently published glyph cache."""
        return self._cache_manager.cache

    @property
    def compositor(self) -> GlyphCompositor:
        return self._compositor

    async def load_font(self, image_data: bytes | None = None) -> CacheLoadResult:
        """Load the configured sprite sheet into the glyph cache."""
        result = await self._cache_manager.load(self._config.font, image_data)
        if result.error is not None:
            logger.warning("Font unavailable, previews will be empty: %s", result.error)
        return result

    def render_block(
        self,
        text: str,
        expected_generation: int | None = None,
    ) -> RenderedText:
        """Composite a block's display text with the current glyph cache."""
        scan = display_segments(text, self._config.tags)
        return self._compositor.compose(
            scan.segments,
            self.cache,
            self._config.font,
            expected_generation=expected_generation,
        )

    def check_block(
        self,
        text: str,
        reference: str | None = None,
        index: int = 0,
    ) -> BlockReport:
        """Check one block.

        Args:
            text: Translated block text.
            reference: Original block text whose byte size is the budget.
            index: Block index, carried into the report.

        Returns:
            BlockReport for the block.
        """
        config = self._config
        warnings: list[ParseWarning] = []

        rendered: RenderedText | None = None
        if config.overflow.mode == OverflowMode.PIXEL:
            scan = display_segments(text, config.tags)
            warnings.extend(scan.warnings)
            rendered = self._compositor.compose(scan.segments, self.cache, config.font)

        overflow = self._detector.check(
            text, rendered, config.transform, config.view_zoom
        )

        metrics = measure_block(text, self._byte_map, config.default_byte_value)
        budgets: list[LineBudget] | None = None
        if reference is not None:
            reference_metrics = measure_block(
                reference, self._byte_map, config.default_byte_value
            )
            budgets = compare_byte_budget(metrics, reference_metrics)

        return BlockReport(
            index=index,
            text=text,
            overflow=overflow,
            metrics=metrics,
            line_budgets=budgets,
            enforce_byte_budget=config.enforce_byte_budget,
            warnings=warnings,
        )

    def check_blocks(
        self,
        blocks: Sequence[str],
        references: Sequence[str] | None = None,
    ) -> list[BlockReport]:
        """Check every block of a script.

        Blocks without a counterpart in ``references`` are checked without a
        byte budget.
        """
        reports: list[BlockReport] = []
        total = len(blocks)
        for index, text in enumerate(blocks):
            reference = None
            if references is not None and index < len(references):
                reference = references[index]
            report = self.check_block(text, reference, index)
            reports.append(report)
            if self._progress_callback:
                self._progress_callback(index + 1, total, report)

        overflowing = sum(1 for report in reports if not report.fits)
        logger.info("Checked %d blocks, %d do not fit", total, overflowing)
        return reports
