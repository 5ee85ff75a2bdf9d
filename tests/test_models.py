# SPDX-License-Identifier: Apache-2.0
"""Tests for configuration and data models."""

from __future__ import annotations

import dataclasses

import pytest

from glyphbox.core.models import (
    BBox,
    Color,
    ColorTag,
    FontConfig,
    MarginSetting,
    OverflowConfig,
    OverflowMargins,
    OverflowMode,
    TagConfig,
)


class TestColor:
    """Tests for Color."""

    def test_from_hex(self) -> None:
        assert Color.from_hex("#FF8000") == Color(255, 128, 0)
        assert Color.from_hex("ff8000") == Color(255, 128, 0)
        assert Color.from_hex("#F80") == Color(255, 136, 0)

    def test_invalid(self) -> None:
        with pytest.raises(ValueError, match="Invalid hex color"):
            Color.from_hex("#GG0000")

    def test_to_hex(self) -> None:
        assert Color(1, 2, 255).to_hex() == "#0102FF"


class TestBBox:
    """Tests for BBox."""

    def test_size(self) -> None:
        bbox = BBox(10, 20, 110, 70)
        assert bbox.width == 100
        assert bbox.height == 50
        assert bbox.scaled(0.5) == BBox(5, 10, 55, 35)

    def test_from_dict(self) -> None:
        assert BBox.from_dict({"x0": 1, "y0": 2, "x1": 3, "y1": 4}) == BBox(1, 2, 3, 4)


class TestFontConfig:
    """Tests for FontConfig."""

    def test_cache_key_ignores_render_settings(self) -> None:
        font = FontConfig()
        restyled = dataclasses.replace(
            font, tint_color="#FF0000", enable_tint_color=False, zoom=4.0, spacing=3
        )
        assert font.cache_key == restyled.cache_key

    def test_cache_key_tracks_raster_settings(self) -> None:
        font = FontConfig()
        assert font.cache_key != dataclasses.replace(font, tile_width=16).cache_key
        assert font.cache_key != dataclasses.replace(font, color_removal_tolerance=5).cache_key
        assert font.cache_key == dataclasses.replace(font, color_to_remove="#000000").cache_key

    def test_from_dict_defaults(self) -> None:
        font = FontConfig.from_dict({"tile_width": "12"})
        assert font.tile_width == 12
        assert font.tile_height == 8
        assert font.spacing == 1

    def test_from_dict_rejects_bad_values(self) -> None:
        with pytest.raises(ValueError):
            FontConfig.from_dict({"zoom": 0})
        with pytest.raises(ValueError):
            FontConfig.from_dict({"tint_color": "red"})


class TestOverflowConfig:
    """Tests for OverflowConfig."""

    def test_defaults(self) -> None:
        config = OverflowConfig()
        assert config.mode == OverflowMode.PIXEL
        assert (config.box_width, config.box_height) == (320, 240)
        assert config.max_characters == 150
        assert config.margins.enabled is False

    def test_from_dict(self) -> None:
        config = OverflowConfig.from_dict(
            {
                "mode": "character",
                "max_characters": 28,
                "margins": {"enabled": True, "left": 4, "right": {"value": 6, "break_line": True}},
            }
        )

        assert config.mode == OverflowMode.CHARACTER
        assert config.max_characters == 28
        assert config.margins == OverflowMargins(
            left=MarginSetting(4.0),
            right=MarginSetting(6.0, break_line=True),
            enabled=True,
        )


class TestTagConfig:
    """Tests for TagConfig."""

    def test_active_color_tags(self) -> None:
        config = TagConfig(
            color_tags=(
                ColorTag("<r>", "</r>", "#FF0000"),
                ColorTag("<g>", "</g>", "#00FF00", enabled=False),
                ColorTag("", "</b>", "#0000FF"),
            )
        )
        assert [tag.opening_tag for tag in config.active_color_tags] == ["<r>"]

    def test_from_dict(self) -> None:
        config = TagConfig.from_dict(
            {
                "hide_tags": False,
                "color_tags": [{"opening_tag": "^R", "closing_tag": "^W", "color": "#F00"}],
                "line_break_tags": ["<br>"],
            }
        )

        assert config.hide_tags is False
        assert config.color_tags == (ColorTag("^R", "^W", "#F00"),)
        assert config.line_break_tags == ("<br>",)
        assert config.block_separators == ("<PAGE>", "<END>", "[NEXT]")
