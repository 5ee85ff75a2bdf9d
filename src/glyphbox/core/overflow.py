# SPDX-License-Identifier: Apache-2.0
"""Overflow detection for text inside a fixed-size preview box.

Pixel mode compares rendered geometry with the box (optionally with per-edge
margins). Character mode counts the characters of each line of the raw text
after removing every tag. The detector keeps no state between checks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from .compositor import RenderedText
from .models import BBox, OverflowConfig, OverflowMode, TagConfig, TextTransform
from .tags import clean_text_for_counting

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OverflowResult:
    """Outcome of one overflow check.

    Attributes:
        is_overflowing: True if the text does not fit.
        bounds: Text bounds in logical box pixels (pixel mode only).
        reasons: Human-readable description of each violated limit.
    """

    is_overflowing: bool
    bounds: BBox | None = None
    reasons: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "is_overflowing": self.is_overflowing,
            "bounds": self.bounds.to_dict() if self.bounds is not None else None,
            "reasons": list(self.reasons),
        }


def text_bounds(
    width: float,
    height: float,
    transform: TextTransform,
    view_zoom: float = 1.0,
) -> BBox:
    """Screen-space bounds of text placed by ``transform`` inside the box.

    Scaling is anchored at the text's top-left corner. The whole preview is
    magnified by ``view_zoom``.
    """
    x0 = transform.position_x
    y0 = transform.position_y
    return BBox(
        x0=x0,
        y0=y0,
        x1=x0 + width * transform.scale_x,
        y1=y0 + height * transform.scale_y,
    ).scaled(view_zoom)


class OverflowDetector:
    """Decides whether a block overflows its box."""

    def __init__(
        self,
        config: OverflowConfig,
        tags: TagConfig | None = None,
    ) -> None:
        """Initialize OverflowDetector.

        Args:
            config: Box geometry and overflow policy.
            tags: Tag handling used to clean text in character mode.
        """
        self._config = config
        self._tags = tags or TagConfig()

    @property
    def config(self) -> OverflowConfig:
        return self._config

    def check(
        self,
        text: str,
        rendered: RenderedText | None = None,
        transform: TextTransform | None = None,
        view_zoom: float = 1.0,
    ) -> OverflowResult:
        """Run the check selected by the configured mode.

        Args:
            text: Raw block text (used in character mode).
            rendered: Composited text (used in pixel mode).
            transform: Text placement; defaults to ``TextTransform()``.
            view_zoom: Uniform magnification of the whole preview.

        Returns:
            OverflowResult. Pixel mode without rendered text never overflows.
        """
        if self._config.mode == OverflowMode.CHARACTER:
            return self.check_characters(text)
        if rendered is None:
            return OverflowResult(is_overflowing=False)
        return self.check_rendered(rendered, transform or TextTransform(), view_zoom)

    def check_rendered(
        self,
        rendered: RenderedText,
        transform: TextTransform,
        view_zoom: float = 1.0,
    ) -> OverflowResult:
        """Pixel-mode check of composited text."""
        if self._config.margins.enabled:
            bounds = text_bounds(rendered.width, rendered.height, transform, view_zoom)
            return self.check_margins(
                bounds, rendered.width, rendered.height, transform, view_zoom
            )
        return self.check_size(rendered.width, rendered.height, transform)

    def check_size(
        self,
        width: float,
        height: float,
        transform: TextTransform,
    ) -> OverflowResult:
        """Compare the scaled text size with the box (margins disabled).

        Text exactly as large as the box fits.
        """
        config = self._config
        scaled_width = width * transform.scale_x
        scaled_height = height * transform.scale_y
        reasons: list[str] = []

        if config.box_width > 0 and scaled_width > config.box_width:
            reasons.append(f"width {scaled_width:g} > box width {config.box_width}")
        if config.box_height > 0:
            if scaled_height > config.box_height:
                reasons.append(
                    f"height {scaled_height:g} > box height {config.box_height}"
                )
        elif config.max_pixel_height > 0 and scaled_height > config.max_pixel_height:
            reasons.append(
                f"height {scaled_height:g} > max pixel height {config.max_pixel_height}"
            )

        bounds = text_bounds(width, height, transform)
        return OverflowResult(bool(reasons), bounds, tuple(reasons))

    def check_margins(
        self,
        bounds: BBox,
        width: float,
        height: float,
        transform: TextTransform,
        view_zoom: float = 1.0,
    ) -> OverflowResult:
        """Check text bounds against the margins inside the box.

        Args:
            bounds: Text bounds relative to the box's top-left, as measured on
                screen (multiplied by ``view_zoom``).
            width: Unscaled text width, for the overall size check.
            height: Unscaled text height, for the overall size check.
            transform: Text placement.
            view_zoom: Magnification to divide out of ``bounds``.

        Returns:
            OverflowResult with the logical bounds.
        """
        config = self._config
        margins = config.margins
        zoom = view_zoom if view_zoom > 0 else 1.0
        logical = bounds.scaled(1.0 / zoom)
        reasons: list[str] = []

        if config.box_width > 0:
            if not margins.left.break_line and logical.x0 < margins.left.value:
                reasons.append(f"left edge {logical.x0:g} < margin {margins.left.value:g}")
            right_limit = config.box_width - margins.right.value
            if not margins.right.break_line and logical.x1 > right_limit:
                reasons.append(f"right edge {logical.x1:g} > {right_limit:g}")
        if config.box_height > 0:
            if not margins.top.break_line and logical.y0 < margins.top.value:
                reasons.append(f"top edge {logical.y0:g} < margin {margins.top.value:g}")
            bottom_limit = config.box_height - margins.bottom.value
            if not margins.bottom.break_line and logical.y1 > bottom_limit:
                reasons.append(f"bottom edge {logical.y1:g} > {bottom_limit:g}")

        if not reasons:
            scaled_width = width * transform.scale_x
            scaled_height = height * transform.scale_y
            if config.box_width > 0 and scaled_width > config.box_width:
                reasons.append(f"width {scaled_width:g} > box width {config.box_width}")
            if config.box_height > 0 and scaled_height > config.box_height:
                reasons.append(
                    f"height {scaled_height:g} > box height {config.box_height}"
                )

        return OverflowResult(bool(reasons), logical, tuple(reasons))

    def check_characters(self, text: str) -> OverflowResult:
        """Character-mode check on the raw text.

        A ``max_characters`` of 0 or less disables the check.
        """
        limit = self._config.max_characters
        if limit <= 0:
            return OverflowResult(is_overflowing=False)

        cleaned = clean_text_for_counting(text, self._tags)
        reasons = [
            f"line {number} has {len(line)} characters > {limit}"
            for number, line in enumerate(cleaned.replace("\r", "").split("\n"), start=1)
            if len(line) > limit
        ]
        return OverflowResult(bool(reasons), None, tuple(reasons))
