# SPDX-License-Identifier: Apache-2.0
"""Glyph compositing for bitmap font previews.

The compositor walks colored text segments, looks every character up in the
glyph cache, tints it and assigns it a position. Layout is a fixed advance
per glyph; there is no kerning and no automatic wrapping.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from PIL import Image

from .errors import StaleCacheError
from .glyph_cache import GlyphCache
from .models import Color, ColoredSegment, FontConfig, PlainSegment, Segment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PositionedGlyph:
    """A glyph placed in text coordinates (zoom applied).

    ``image`` is None for characters that reserve space but draw nothing.
    """

    character: str
    x: float
    y: float
    width: float
    height: float
    image: Image.Image | None
    color: Color | None


@dataclass(frozen=True)
class RenderedText:
    """Composited text ready for drawing and overflow checks."""

    glyphs: tuple[PositionedGlyph, ...]
    line_widths: tuple[float, ...]
    line_height: float
    width: float
    height: float
    generation: int
    zoom: float = 1.0

    @property
    def line_count(self) -> int:
        return len(self.line_widths)


def tint_glyph(raster: Image.Image, color: Color) -> Image.Image:
    """Recolor every pixel to ``color`` while keeping the alpha channel.

    Equivalent to drawing the raster and filling it with ``source-in``
    compositing.
    """
    source = raster if raster.mode == "RGBA" else raster.convert("RGBA")
    tinted = Image.new("RGBA", source.size, color.as_tuple() + (255,))
    tinted.putalpha(source.getchannel("A"))
    return tinted


def _split_lines(segments: Iterable[Segment]) -> list[list[Segment]]:
    lines: list[list[Segment]] = [[]]
    for segment in segments:
        parts = segment.text.replace("\r", "").split("\n")
        for index, part in enumerate(parts):
            if index > 0:
                lines.append([])
            if part:
                if isinstance(segment, ColoredSegment):
                    lines[-1].append(ColoredSegment(part, segment.color))
                else:
                    lines[-1].append(PlainSegment(part))
    return lines


class GlyphCompositor:
    """Places tinted glyphs for colored text segments."""

    def __init__(self, line_height_factor: float = 1.2) -> None:
        """Initialize GlyphCompositor.

        Args:
            line_height_factor: Multiplier applied to the tile height per line.
        """
        self._line_height_factor = line_height_factor

    def resolve_color(self, segment: Segment, font: FontConfig) -> Color | None:
        """Color for a segment: its own, else the global tint when enabled."""
        if isinstance(segment, ColoredSegment):
            return segment.color
        if not font.enable_tint_color:
            return None
        try:
            return Color.from_hex(font.tint_color)
        except ValueError:
            logger.warning("Invalid tint color %r; rendering untinted", font.tint_color)
            return None

    def compose(
        self,
        segments: Iterable[Segment],
        cache: GlyphCache,
        font: FontConfig,
        expected_generation: int | None = None,
    ) -> RenderedText:
        """Lay out segments with the glyphs of ``cache``.

        Args:
            segments: Text split into plain and colored runs. Line breaks
                inside segment text start new lines.
            cache: Published glyph cache.
            font: Font configuration (tint, zoom, spacing, tile height).
            expected_generation: If given, the generation the caller holds
                glyph references for.

        Returns:
            RenderedText with glyph positions and overall size.

        Raises:
            StaleCacheError: If ``expected_generation`` differs from the cache.
        """
        if expected_generation is not None and expected_generation != cache.generation:
            raise StaleCacheError(
                f"Glyph cache generation {cache.generation} does not match "
                f"expected generation {expected_generation}",
                stage="compose",
            )

        zoom = font.zoom
        advance_gap = font.spacing * zoom
        glyph_height = font.tile_height * zoom
        line_height = glyph_height * self._line_height_factor

        glyphs: list[PositionedGlyph] = []
        line_widths: list[float] = []
        for line_index, line_segments in enumerate(_split_lines(segments)):
            y = line_index * line_height
            x = 0.0
            for segment in line_segments:
                color = self.resolve_color(segment, font)
                for character in segment.text:
                    entry = cache.get(character)
                    if entry is None:
                        x += advance_gap
                        continue
                    width = entry.width * zoom
                    image: Image.Image | None = None
                    if entry.raster is not None:
                        image = (
                            tint_glyph(entry.raster, color)
                            if color is not None
                            else entry.raster.copy()
                        )
                    glyphs.append(
                        PositionedGlyph(
                            character=character,
                            x=x,
                            y=y,
                            width=width,
                            height=entry.height * zoom,
                            image=image,
                            color=color,
                        )
                    )
                    x += width + advance_gap
            line_widths.append(x)

        return RenderedText(
            glyphs=tuple(glyphs),
            line_widths=tuple(line_widths),
            line_height=line_height,
            width=max(line_widths, default=0.0),
            height=line_height * len(line_widths),
            generation=cache.generation,
            zoom=zoom,
        )

    def render(
        self,
        rendered: RenderedText,
        canvas: Image.Image | None = None,
        origin: tuple[float, float] = (0.0, 0.0),
    ) -> Image.Image:
        """Draw composited glyphs with nearest-neighbour scaling.

        Args:
            rendered: Output of ``compose``.
            canvas: RGBA image to draw onto; a transparent one sized to the
                text is created if omitted.
            origin: Offset of the text's top-left corner on the canvas.

        Returns:
            The canvas with the glyphs drawn.
        """
        if canvas is None:
            canvas = Image.new(
                "RGBA",
                (max(1, round(rendered.width)), max(1, round(rendered.height))),
                (0, 0, 0, 0),
            )
        elif canvas.mode != "RGBA":
            canvas = canvas.convert("RGBA")
        ox, oy = origin
        for glyph in rendered.glyphs:
            if glyph.image is None or glyph.width <= 0:
                continue
            size = (max(1, round(glyph.width)), max(1, round(glyph.height)))
            scaled = glyph.image.resize(size, Image.Resampling.NEAREST)
            _composite(canvas, scaled, round(ox + glyph.x), round(oy + glyph.y))
        return canvas


def _composite(canvas: Image.Image, image: Image.Image, x: int, y: int) -> None:
    # alpha_composite rejects negative destinations; clip the source instead
    left = max(0, -x)
    top = max(0, -y)
    if left >= image.width or top >= image.height:
        return
    dest = (x + left, y + top)
    if dest[0] >= canvas.width or dest[1] >= canvas.height:
        return
    canvas.alpha_composite(image, dest=dest, source=(left, top, image.width, image.height))
