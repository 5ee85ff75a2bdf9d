# SPDX-License-Identifier: Apache-2.0
"""Data models shared by the layout and measurement core.

All configuration values are immutable. Callers build a complete
``FontConfig``/``OverflowConfig``/``TagConfig`` per call instead of mutating
shared settings objects.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

_HEX_COLOR_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

DEFAULT_CHARACTER_SEQUENCE = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789.,!?"
DEFAULT_TAG_PATTERNS: tuple[str, ...] = (r"<[^>]*>", r"\[[^\]]*\]", r"\{[^\}]*\}")


@dataclass(frozen=True)
class Color:
    """Opaque RGB color."""

    r: int
    g: int
    b: int

    @classmethod
    def from_hex(cls, value: str) -> Color:
        """Parse ``#RRGGBB`` (or the short ``#RGB`` form).

        Raises:
            ValueError: If the string is not a hex color.
        """
        match = _HEX_COLOR_RE.match(value.strip())
        if match is None:
            raise ValueError(f"Invalid hex color: {value!r}")
        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        return cls(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))

    def to_hex(self) -> str:
        """Format as ``#RRGGBB``."""
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)


@dataclass(frozen=True)
class BBox:
    """Bounding box in screen coordinates (origin at top-left, y grows down).

    Attributes:
        x0: Left X coordinate
        y0: Top Y coordinate
        x1: Right X coordinate
        y1: Bottom Y coordinate
    """

    x0: float
    y0: float
    x1: float
    y1: float

    @property
    def width(self) -> float:
        """Width of the bounding box."""
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        """Height of the bounding box."""
        return self.y1 - self.y0

    def scaled(self, factor: float) -> BBox:
        """Return the box with every coordinate multiplied by ``factor``."""
        return BBox(
            self.x0 * factor, self.y0 * factor, self.x1 * factor, self.y1 * factor
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"x0": self.x0, "y0": self.y0, "x1": self.x1, "y1": self.y1}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BBox:
        """Create from dictionary."""
        return cls(
            x0=float(data["x0"]),
            y0=float(data["y0"]),
            x1=float(data["x1"]),
            y1=float(data["y1"]),
        )


@dataclass(frozen=True)
class FontConfig:
    """Bitmap font configuration.

    Attributes:
        image_source: Path of the sprite-sheet image.
        tile_width: Width of one tile in pixels (must be > 0).
        tile_height: Height of one tile in pixels (must be > 0).
        separation_x: Horizontal gap between tiles.
        separation_y: Vertical gap between tiles.
        character_sequence: Characters in sprite-sheet reading order.
        space_width_override: Width of the space glyph, 0 for automatic.
        color_to_remove: Transparency key color (``#RRGGBB``).
        color_removal_tolerance: Per-channel tolerance for the key color.
        enable_color_removal: Apply transparency keying.
        enable_pixel_scanning: Trim each glyph to its rightmost opaque column.
        enable_tint_color: Recolor glyphs with ``tint_color`` at render time.
        tint_color: Global tint color (``#RRGGBB``).
        zoom: Render scale of each glyph pixel.
        spacing: Gap between glyphs in unscaled pixels.
    """

    image_source: str = ""
    tile_width: int = 8
    tile_height: int = 8
    separation_x: int = 0
    separation_y: int = 0
    character_sequence: str = DEFAULT_CHARACTER_SEQUENCE
    space_width_override: int = 0
    color_to_remove: str = "#000000"
    color_removal_tolerance: int = 0
    enable_color_removal: bool = False
    enable_pixel_scanning: bool = False
    enable_tint_color: bool = True
    tint_color: str = "#000000"
    zoom: float = 1.0
    spacing: int = 1

    @property
    def cache_key(self) -> tuple[Any, ...]:
        """Fields that affect the untinted glyph rasters.

        Tint, zoom and spacing are render-time settings and are excluded, so
        changing them never invalidates a built cache.
        """
        return (
            self.image_source,
            self.tile_width,
            self.tile_height,
            self.separation_x,
            self.separation_y,
            self.character_sequence,
            self.space_width_override,
            self.color_to_remove.upper(),
            self.color_removal_tolerance,
            self.enable_color_removal,
            self.enable_pixel_scanning,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "image_source": self.image_source,
            "tile_width": self.tile_width,
            "tile_height": self.tile_height,
            "separation_x": self.separation_x,
            "separation_y": self.separation_y,
            "character_sequence": self.character_sequence,
            "space_width_override": self.space_width_override,
            "color_to_remove": self.color_to_remove,
            "color_removal_tolerance": self.color_removal_tolerance,
            "enable_color_removal": self.enable_color_removal,
            "enable_pixel_scanning": self.enable_pixel_scanning,
            "enable_tint_color": self.enable_tint_color,
            "tint_color": self.tint_color,
            "zoom": self.zoom,
            "spacing": self.spacing,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FontConfig:
        """Create from dictionary; missing keys take their defaults.

        Raises:
            ValueError: If a color is not a hex string or zoom is not positive.
        """
        defaults = cls()
        config = cls(
            image_source=str(data.get("image_source", defaults.image_source)),
            tile_width=int(data.get("tile_width", defaults.tile_width)),
            tile_height=int(data.get("tile_height", defaults.tile_height)),
            separation_x=int(data.get("separation_x", defaults.separation_x)),
            separation_y=int(data.get("separation_y", defaults.separation_y)),
            character_sequence=str(
                data.get("character_sequence", defaults.character_sequence)
            ),
            space_width_override=int(
                data.get("space_width_override", defaults.space_width_override)
            ),
            color_to_remove=str(data.get("color_to_remove", defaults.color_to_remove)),
            color_removal_tolerance=int(
                data.get("color_removal_tolerance", defaults.color_removal_tolerance)
            ),
            enable_color_removal=bool(
                data.get("enable_color_removal", defaults.enable_color_removal)
            ),
            enable_pixel_scanning=bool(
                data.get("enable_pixel_scanning", defaults.enable_pixel_scanning)
            ),
            enable_tint_color=bool(
                data.get("enable_tint_color", defaults.enable_tint_color)
            ),
            tint_color=str(data.get("tint_color", defaults.tint_color)),
            zoom=float(data.get("zoom", defaults.zoom)),
            spacing=int(data.get("spacing", defaults.spacing)),
        )
        Color.from_hex(config.color_to_remove)
        Color.from_hex(config.tint_color)
        if config.zoom <= 0:
            raise ValueError(f"zoom must be positive, got {config.zoom}")
        return config


@dataclass(frozen=True)
class MarginSetting:
    """One edge of the pixel overflow margins."""

    value: float = 10.0
    break_line: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"value": self.value, "break_line": self.break_line}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | float | int) -> MarginSetting:
        """Create from dictionary, or from a bare number (legacy profiles)."""
        if isinstance(data, (int, float)):
            return cls(value=float(data))
        return cls(
            value=float(data.get("value", 10.0)),
            break_line=bool(data.get("break_line", False)),
        )


@dataclass(frozen=True)
class OverflowMargins:
    """Four margins inside the preview box, used in pixel mode only."""

    top: MarginSetting = field(default_factory=MarginSetting)
    right: MarginSetting = field(default_factory=MarginSetting)
    bottom: MarginSetting = field(default_factory=MarginSetting)
    left: MarginSetting = field(default_factory=MarginSetting)
    enabled: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "top": self.top.to_dict(),
            "right": self.right.to_dict(),
            "bottom": self.bottom.to_dict(),
            "left": self.left.to_dict(),
            "enabled": self.enabled,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OverflowMargins:
        """Create from dictionary."""
        return cls(
            top=MarginSetting.from_dict(data.get("top", {})),
            right=MarginSetting.from_dict(data.get("right", {})),
            bottom=MarginSetting.from_dict(data.get("bottom", {})),
            left=MarginSetting.from_dict(data.get("left", {})),
            enabled=bool(data.get("enabled", False)),
        )


class OverflowMode(str, Enum):
    """Overflow detection policy."""

    PIXEL = "pixel"
    CHARACTER = "character"


@dataclass(frozen=True)
class OverflowConfig:
    """Box geometry and overflow policy.

    A ``box_width`` or ``box_height`` of 0 means the dimension is automatic
    and is not checked (``max_pixel_height`` then bounds the height).
    """

    mode: OverflowMode = OverflowMode.PIXEL
    box_width: int = 320
    box_height: int = 240
    max_pixel_height: int = 200
    max_characters: int = 150
    margins: OverflowMargins = field(default_factory=OverflowMargins)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "mode": self.mode.value,
            "box_width": self.box_width,
            "box_height": self.box_height,
            "max_pixel_height": self.max_pixel_height,
            "max_characters": self.max_characters,
            "margins": self.margins.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OverflowConfig:
        """Create from dictionary."""
        defaults = cls()
        return cls(
            mode=OverflowMode(data.get("mode", defaults.mode.value)),
            box_width=int(data.get("box_width", defaults.box_width)),
            box_height=int(data.get("box_height", defaults.box_height)),
            max_pixel_height=int(data.get("max_pixel_height", defaults.max_pixel_height)),
            max_characters=int(data.get("max_characters", defaults.max_characters)),
            margins=OverflowMargins.from_dict(data.get("margins", {})),
        )


@dataclass(frozen=True)
class TextTransform:
    """Placement of the text inside the preview box."""

    position_x: float = 13.0
    position_y: float = 14.0
    scale_x: float = 1.0
    scale_y: float = 1.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "position_x": self.position_x,
            "position_y": self.position_y,
            "scale_x": self.scale_x,
            "scale_y": self.scale_y,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TextTransform:
        """Create from dictionary."""
        defaults = cls()
        return cls(
            position_x=float(data.get("position_x", defaults.position_x)),
            position_y=float(data.get("position_y", defaults.position_y)),
            scale_x=float(data.get("scale_x", defaults.scale_x)),
            scale_y=float(data.get("scale_y", defaults.scale_y)),
        )


@dataclass(frozen=True)
class ColorTag:
    """A custom color tag pair such as ``[red]...[/red]``."""

    opening_tag: str
    closing_tag: str
    color: str
    enabled: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "opening_tag": self.opening_tag,
            "closing_tag": self.closing_tag,
            "color": self.color,
            "enabled": self.enabled,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ColorTag:
        """Create from dictionary."""
        return cls(
            opening_tag=str(data["opening_tag"]),
            closing_tag=str(data["closing_tag"]),
            color=str(data["color"]),
            enabled=bool(data.get("enabled", True)),
        )


@dataclass(frozen=True)
class TagConfig:
    """Tag handling for display and for character counting."""

    hide_tags: bool = True
    tag_patterns_to_hide: tuple[str, ...] = DEFAULT_TAG_PATTERNS
    color_tags: tuple[ColorTag, ...] = ()
    use_custom_block_separator: bool = False
    block_separators: tuple[str, ...] = ("<PAGE>", "<END>", "[NEXT]")
    use_custom_line_break_tags: bool = False
    line_break_tags: tuple[str, ...] = ()

    @property
    def active_color_tags(self) -> tuple[ColorTag, ...]:
        """Enabled color tags with both markers set."""
        return tuple(
            tag
            for tag in self.color_tags
            if tag.enabled and tag.opening_tag and tag.closing_tag
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "hide_tags": self.hide_tags,
            "tag_patterns_to_hide": list(self.tag_patterns_to_hide),
            "color_tags": [tag.to_dict() for tag in self.color_tags],
            "use_custom_block_separator": self.use_custom_block_separator,
            "block_separators": list(self.block_separators),
            "use_custom_line_break_tags": self.use_custom_line_break_tags,
            "line_break_tags": list(self.line_break_tags),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TagConfig:
        """Create from dictionary."""
        defaults = cls()
        return cls(
            hide_tags=bool(data.get("hide_tags", defaults.hide_tags)),
            tag_patterns_to_hide=tuple(
                data.get("tag_patterns_to_hide", defaults.tag_patterns_to_hide)
            ),
            color_tags=tuple(
                ColorTag.from_dict(item) for item in data.get("color_tags", [])
            ),
            use_custom_block_separator=bool(
                data.get("use_custom_block_separator", defaults.use_custom_block_separator)
            ),
            block_separators=tuple(
                data.get("block_separators", defaults.block_separators)
            ),
            use_custom_line_break_tags=bool(
                data.get("use_custom_line_break_tags", defaults.use_custom_line_break_tags)
            ),
            line_break_tags=tuple(data.get("line_break_tags", defaults.line_break_tags)),
        )


@dataclass(frozen=True)
class PlainSegment:
    """Run of text drawn with the font's default color."""

    text: str


@dataclass(frozen=True)
class ColoredSegment:
    """Run of text drawn with an explicit color from a color tag."""

    text: str
    color: Color


Segment = Union[PlainSegment, ColoredSegment]


@dataclass(frozen=True)
class ParseWarning:
    """A recoverable problem found while parsing user-edited input."""

    line_number: int
    text: str
    reason: str


@dataclass(frozen=True)
class ByteMapEntry:
    """Encoded size of one character or bracketed tag."""

    key: str
    byte_cost: int


@dataclass(frozen=True)
class LineMetrics:
    """Character and byte count of one line."""

    char_count: int
    byte_count: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"char_count": self.char_count, "byte_count": self.byte_count}


@dataclass(frozen=True)
class BlockMetrics:
    """Totals of a whole block plus per-line detail."""

    total_chars: int
    total_bytes: int
    total_bits: int
    line_details: tuple[LineMetrics, ...]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total_chars": self.total_chars,
            "total_bytes": self.total_bytes,
            "total_bits": self.total_bits,
            "line_details": [line.to_dict() for line in self.line_details],
        }


@dataclass(frozen=True)
class LineBudget:
    """Byte budget of one line compared with the reference block."""

    current_chars: int
    current_bytes: int
    original_chars: int | None
    original_bytes: int | None
    is_over_limit: bool

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "current_chars": self.current_chars,
            "current_bytes": self.current_bytes,
            "original_chars": self.original_chars,
            "original_bytes": self.original_bytes,
            "is_over_limit": self.is_over_limit,
        }
