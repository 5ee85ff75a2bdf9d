# SPDX-License-Identifier: Apache-2.0
"""Glyph cache built from a sprite-sheet bitmap font.

This module provides:
- Slicing a sprite sheet into one raster per mapped character
- Transparency keying with a per-channel tolerance
- Pixel-trim of each glyph to its rightmost visible column
- An immutable cache published under a monotonically increasing generation id
- Asynchronous sheet decoding where a newer load supersedes an older one

Rasters are stored untinted. Tinting happens at render time, so one cache
serves every tint color.
"""

from __future__ import annotations

import asyncio
import io
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any

from PIL import Image, ImageChops, UnidentifiedImageError

from .errors import FontConfigError, FontLoadError, GlyphboxError
from .models import Color, FontConfig

logger = logging.getLogger(__name__)

SPACE = " "
# Alpha at or below this value is treated as noise by the pixel-trim scan
NOISE_ALPHA_THRESHOLD = 10


@dataclass(frozen=True)
class GlyphCacheEntry:
    """One cached glyph.

    Attributes:
        character: The mapped character.
        raster: Untinted RGBA raster, or None when nothing should be drawn.
        width: Advance width in unscaled pixels.
        height: Height in unscaled pixels.
    """

    character: str
    raster: Image.Image | None
    width: int
    height: int


class GlyphCache:
    """Read-only arena of glyph records for one build of a font.

    Rasters must not be modified by consumers; the compositor always works on
    copies.
    """

    def __init__(
        self,
        entries: Mapping[str, GlyphCacheEntry],
        generation: int,
        font_key: tuple[Any, ...] | None = None,
    ) -> None:
        self._entries = MappingProxyType(dict(entries))
        self._generation = generation
        self._font_key = font_key

    @classmethod
    def empty(cls, generation: int = 0) -> GlyphCache:
        """Create a cache with no glyphs."""
        return cls({}, generation)

    @property
    def generation(self) -> int:
        """Build counter; a higher value supersedes every earlier cache."""
        return self._generation

    @property
    def font_key(self) -> tuple[Any, ...] | None:
        """``FontConfig.cache_key`` of the build, None for an empty cache."""
        return self._font_key

    @property
    def is_empty(self) -> bool:
        return not self._entries

    def get(self, character: str) -> GlyphCacheEntry | None:
        """Look up a character; None if it is not mapped."""
        return self._entries.get(character)

    def __contains__(self, character: object) -> bool:
        return character in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"GlyphCache(generation={self._generation}, glyphs={len(self._entries)})"


def validate_font_config(
    config: FontConfig,
    image_size: tuple[int, int] | None = None,
) -> FontConfigError | None:
    """Check that a configuration can slice a sheet of the given size.

    Returns:
        FontConfigError describing the problem, or None if the config is usable.
    """
    if config.tile_width <= 0 or config.tile_height <= 0:
        return FontConfigError(
            f"Tile size must be positive, got {config.tile_width}x{config.tile_height}",
            stage="config",
        )
    if config.separation_x < 0 or config.separation_y < 0:
        return FontConfigError(
            f"Tile separation must be >= 0, got "
            f"{config.separation_x},{config.separation_y}",
            stage="config",
        )
    for label, value in (("key", config.color_to_remove), ("tint", config.tint_color)):
        try:
            Color.from_hex(value)
        except ValueError as exc:
            return FontConfigError(f"Unusable {label} color: {exc}", stage="config", cause=exc)
    if image_size is not None:
        image_width = image_size[0]
        if (image_width + config.separation_x) // (config.tile_width + config.separation_x) <= 0:
            return FontConfigError(
                f"Sprite sheet width {image_width} is smaller than one tile",
                stage="config",
            )
    return None


class GlyphCacheBuilder:
    """Slices a sprite sheet into untinted glyph rasters."""

    def build(self, image: Image.Image, config: FontConfig) -> dict[str, GlyphCacheEntry]:
        """Build glyph entries for every character of the sequence.

        Args:
            image: Decoded sprite sheet.
            config: Font configuration.

        Returns:
            Entries keyed by character. Empty if the configuration is rejected.
        """
        error = validate_font_config(config, image.size)
        if error is not None:
            logger.warning("Glyph cache not built: %s", error)
            return {}

        sheet = image if image.mode == "RGBA" else image.convert("RGBA")
        key_color = Color.from_hex(config.color_to_remove)
        tolerance = max(0, min(255, config.color_removal_tolerance))

        tile_w = config.tile_width
        tile_h = config.tile_height
        step_x = tile_w + config.separation_x
        step_y = tile_h + config.separation_y
        tiles_per_row = (sheet.width + config.separation_x) // step_x

        entries: dict[str, GlyphCacheEntry] = {}
        for index, character in enumerate(config.character_sequence):
            if character in entries:
                logger.debug(
                    "Character %r repeats at sprite index %d; keeping the first tile",
                    character,
                    index,
                )
                continue

            if character == SPACE:
                entries[character] = GlyphCacheEntry(
                    character, None, self._space_width(config), tile_h
                )
                continue

            left = (index % tiles_per_row) * step_x
            top = (index // tiles_per_row) * step_y
            if top >= sheet.height:
                logger.debug("Sprite index %d (%r) lies below the sheet", index, character)

            tile = sheet.crop((left, top, left + tile_w, top + tile_h))
            if config.enable_color_removal:
                self._remove_color(tile, key_color, tolerance)

            raster: Image.Image | None = tile
            width = tile_w
            if config.enable_pixel_scanning:
                raster, width = self._trim(tile)

            entries[character] = GlyphCacheEntry(character, raster, width, tile_h)

        logger.debug(
            "Built %d glyphs from %dx%d sheet (%d tiles per row)",
            len(entries),
            sheet.width,
            sheet.height,
            tiles_per_row,
        )
        return entries

    @staticmethod
    def _space_width(config: FontConfig) -> int:
        if config.space_width_override > 0:
            return config.space_width_override
        if config.enable_pixel_scanning:
            return max(1, config.tile_width // 4)
        return config.tile_width

    @staticmethod
    def _remove_color(tile: Image.Image, key: Color, tolerance: int) -> None:
        """Zero the alpha of pixels within ``tolerance`` of ``key`` on every channel."""
        match: Image.Image | None = None
        for band, target in zip(("R", "G", "B"), key.as_tuple()):
            band_match = tile.getchannel(band).point(
                lambda v, target=target: 255 if abs(v - target) <= tolerance else 0
            )
            match = band_match if match is None else ImageChops.multiply(match, band_match)
        tile.putalpha(ImageChops.subtract(tile.getchannel("A"), match))

    @staticmethod
    def _trim(tile: Image.Image) -> tuple[Image.Image | None, int]:
        """Crop the tile after its rightmost column with a visible pixel."""
        mask = tile.getchannel("A").point(
            lambda a: 255 if a > NOISE_ALPHA_THRESHOLD else 0
        )
        bbox = mask.getbbox()
        if bbox is None:
            return None, 0
        width = bbox[2]
        if width == tile.width:
            return tile, width
        return tile.crop((0, 0, width, tile.height)), width


def decode_image(source: str | Path | bytes) -> Image.Image:
    """Read and decode a sprite sheet into RGBA.

    Raises:
        FontLoadError: If the source is missing or cannot be decoded.
    """
    if isinstance(source, (bytes, bytearray)):
        stream: Any = io.BytesIO(source)
        label = f"<{len(source)} bytes>"
    else:
        if not str(source):
            raise FontLoadError("No sprite sheet configured", stage="load")
        stream = Path(source)
        label = str(source)

    try:
        with Image.open(stream) as image:
            return image.convert("RGBA")
    except (OSError, UnidentifiedImageError, ValueError) as exc:
        raise FontLoadError(
            f"Failed to decode sprite sheet {label}: {exc}", stage="load", cause=exc
        ) from exc


class CancellationToken:
    """Flag set when a newer cache load supersedes this one."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


@dataclass(frozen=True)
class CacheLoadResult:
    """Outcome of one cache load.

    Attributes:
        cache: The cache current after this load.
        error: Why the load produced an empty cache, if it did.
        discarded: True if a newer load superseded this one before publishing.
    """

    cache: GlyphCache
    error: GlyphboxError | None = None
    discarded: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.discarded


class GlyphCacheManager:
    """Owns the published glyph cache and its generation id.

    Only the most recent load may publish. Each load captures a cancellation
    token at start; starting another load cancels it, and a cancelled load
    discards its result. Publication replaces the cache and the generation id
    in a single assignment.
    """

    def __init__(self, builder: GlyphCacheBuilder | None = None) -> None:
        self._builder = builder or GlyphCacheBuilder()
        self._cache = GlyphCache.empty()
        self._token: CancellationToken | None = None

    @property
    def cache(self) -> GlyphCache:
        """The currently published cache."""
        return self._cache

    @property
    def generation(self) -> int:
        return self._cache.generation

    def cancel_pending(self) -> None:
        """Cancel the in-flight load, if any."""
        if self._token is not None:
            self._token.cancel()
            self._token = None

    def _begin(self) -> CancellationToken:
        self.cancel_pending()
        token = CancellationToken()
        self._token = token
        return token

    def _publish(
        self,
        entries: Mapping[str, GlyphCacheEntry],
        font_key: tuple[Any, ...] | None,
    ) -> GlyphCache:
        self._cache = GlyphCache(entries, self._cache.generation + 1, font_key)
        logger.debug("Published %r", self._cache)
        return self._cache

    async def load(
        self,
        config: FontConfig,
        image_data: bytes | None = None,
    ) -> CacheLoadResult:
        """Decode the sprite sheet and publish a new cache.

        Args:
            config: Font configuration; ``image_source`` is read unless
                ``image_data`` is given.
            image_data: Encoded image bytes to use instead of the source path.

        Returns:
            CacheLoadResult. Failures publish an empty cache and are reported
            in ``error`` rather than raised.
        """
        if (
            image_data is None
            and not self._cache.is_empty
            and self._cache.font_key == config.cache_key
        ):
            # Still supersedes a pending load for another font
            self.cancel_pending()
            return CacheLoadResult(self._cache)

        token = self._begin()
        source: str | bytes = image_data if image_data is not None else config.image_source
        try:
            image = await asyncio.to_thread(decode_image, source)
        except FontLoadError as exc:
            if token.cancelled:
                return CacheLoadResult(self._cache, discarded=True)
            logger.warning("%s", exc)
            self._token = None
            return CacheLoadResult(self._publish({}, None), error=exc)

        if token.cancelled:
            logger.debug("Discarding superseded glyph cache build")
            return CacheLoadResult(self._cache, discarded=True)
        self._token = None
        return self._finish(image, config)

    def build_sync(self, image: Image.Image, config: FontConfig) -> CacheLoadResult:
        """Build and publish from an already decoded image.

        Supersedes any in-flight asynchronous load.
        """
        self._begin()
        self._token = None
        return self._finish(image, config)

    def _finish(self, image: Image.Image, config: FontConfig) -> CacheLoadResult:
        error = validate_font_config(config, image.size)
        if error is not None:
            logger.warning("Glyph cache not built: %s", error)
            return CacheLoadResult(self._publish({}, None), error=error)
        entries = self._builder.build(image, config)
        return CacheLoadResult(self._publish(entries, config.cache_key))
