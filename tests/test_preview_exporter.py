# SPDX-License-Identifier: Apache-2.0
"""Tests for PreviewExporter."""

from __future__ import annotations

from pathlib import Path

import pytest

from glyphbox.core.compositor import GlyphCompositor, RenderedText
from glyphbox.core.glyph_cache import GlyphCache
from glyphbox.core.models import (
    Color,
    ColoredSegment,
    FontConfig,
    MarginSetting,
    OverflowConfig,
    OverflowMargins,
    TextTransform,
)
from glyphbox.output.preview_exporter import ExportConfig, PreviewExporter

RED = (255, 0, 0, 255)
WHITE = (255, 255, 255, 255)
GREEN = (0, 255, 0, 255)


@pytest.fixture
def rendered(keyed_cache: GlyphCache, keyed_font: FontConfig) -> RenderedText:
    """A single red 'A' (3x8 pixels)."""
    return GlyphCompositor().compose(
        [ColoredSegment("A", Color(255, 0, 0))], keyed_cache, keyed_font
    )


class TestExportConfig:
    """Tests for ExportConfig."""

    def test_default_values(self) -> None:
        config = ExportConfig()

        assert config.background_color == "#FFFFFF"
        assert config.draw_guides is False


class TestPreviewExporter:
    """Tests for PreviewExporter."""

    def test_text_placed_in_box(self, rendered: RenderedText) -> None:
        image = PreviewExporter().render(
            rendered, OverflowConfig(box_width=16, box_height=12), TextTransform(2, 1)
        )

        assert image.size == (16, 12)
        assert image.getpixel((0, 0)) == WHITE
        assert image.getpixel((2, 1)) == RED
        assert image.getpixel((4, 8)) == RED
        assert image.getpixel((5, 1)) == WHITE

    def test_auto_box_grows_to_text(self, rendered: RenderedText) -> None:
        image = PreviewExporter().render(
            rendered, OverflowConfig(box_width=0, box_height=0), TextTransform(2, 1)
        )
        assert image.size == (6, 11)

    def test_scaled_text(self, rendered: RenderedText) -> None:
        image = PreviewExporter().render(
            rendered,
            OverflowConfig(box_width=20, box_height=30),
            TextTransform(0, 0, scale_x=2.0, scale_y=2.0),
        )

        assert image.getpixel((5, 10)) == RED
        assert image.getpixel((6, 0)) == WHITE

    def test_margin_guides(self, rendered: RenderedText) -> None:
        overflow = OverflowConfig(
            box_width=16,
            box_height=12,
            margins=OverflowMargins(left=MarginSetting(10), top=MarginSetting(3), enabled=True),
        )
        exporter = PreviewExporter(config=ExportConfig(draw_guides=True, guide_color="#00FF00"))

        image = exporter.render(rendered, overflow, TextTransform(0, 0))

        assert image.getpixel((10, 11)) == GREEN
        assert image.getpixel((15, 3)) == GREEN

    def test_max_height_guide(self, rendered: RenderedText) -> None:
        overflow = OverflowConfig(box_width=16, box_height=0, max_pixel_height=5)
        exporter = PreviewExporter(config=ExportConfig(draw_guides=True, guide_color="#00FF00"))

        image = exporter.render(rendered, overflow, TextTransform(4, 0))

        assert image.getpixel((15, 5)) == GREEN

    def test_generate_png(self, rendered: RenderedText) -> None:
        image_bytes, width, height = PreviewExporter().generate(
            rendered, OverflowConfig(box_width=16, box_height=12), TextTransform(0, 0)
        )

        assert (width, height) == (16, 12)
        assert image_bytes[:8] == b"\x89PNG\r\n\x1a\n"

    def test_generate_to_file(self, rendered: RenderedText, tmp_path: Path) -> None:
        output_path = tmp_path / "previews" / "block.png"

        size = PreviewExporter().generate_to_file(
            rendered,
            OverflowConfig(box_width=16, box_height=12),
            TextTransform(0, 0),
            output_path,
        )

        assert size == (16, 12)
        assert output_path.read_bytes()[:4] == b"\x89PNG"
