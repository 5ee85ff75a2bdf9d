# SPDX-License-Identifier: Apache-2.0
"""Shared fixtures: synthetic sprite sheets built in memory."""

from __future__ import annotations

import io
from collections.abc import Callable, Sequence

import pytest
from PIL import Image

from glyphbox.core.glyph_cache import GlyphCache, GlyphCacheBuilder
from glyphbox.core.models import FontConfig

INK = (255, 255, 255, 255)
PAPER = (255, 0, 255, 255)


def make_sheet(
    ink_widths: Sequence[int],
    tile_width: int = 8,
    tile_height: int = 8,
    tiles_per_row: int = 4,
    separation_x: int = 0,
    separation_y: int = 0,
    ink: tuple[int, int, int, int] = INK,
    paper: tuple[int, int, int, int] = PAPER,
) -> Image.Image:
    """Sheet where tile ``i`` has ``ink_widths[i]`` inked columns from the left."""
    rows = max(1, -(-len(ink_widths) // tiles_per_row))
    width = tiles_per_row * tile_width + (tiles_per_row - 1) * separation_x
    height = rows * tile_height + (rows - 1) * separation_y
    sheet = Image.new("RGBA", (width, height), paper)
    for index, ink_width in enumerate(ink_widths):
        left = (index % tiles_per_row) * (tile_width + separation_x)
        top = (index // tiles_per_row) * (tile_height + separation_y)
        for x in range(ink_width):
            for y in range(tile_height):
                sheet.putpixel((left + x, top + y), ink)
    return sheet


def png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def keyed_font() -> FontConfig:
    """Font with magenta keyed out and pixel scanning enabled."""
    return FontConfig(
        tile_width=8,
        tile_height=8,
        character_sequence="AB C",
        enable_color_removal=True,
        color_to_remove="#FF00FF",
        enable_pixel_scanning=True,
        enable_tint_color=False,
        spacing=1,
    )


@pytest.fixture
def keyed_sheet() -> Image.Image:
    """Sheet for ``keyed_font``: A is 3 columns, B is 5, C is 8."""
    return make_sheet([3, 5, 0, 8])


@pytest.fixture
def keyed_cache(keyed_sheet: Image.Image, keyed_font: FontConfig) -> GlyphCache:
    entries = GlyphCacheBuilder().build(keyed_sheet, keyed_font)
    return GlyphCache(entries, generation=1, font_key=keyed_font.cache_key)


SheetFactory = Callable[..., Image.Image]


@pytest.fixture
def sheet_factory() -> SheetFactory:
    """Factory for sheets laid out like ``make_sheet``."""
    return make_sheet


@pytest.fixture
def encode_png() -> Callable[[Image.Image], bytes]:
    return png_bytes
