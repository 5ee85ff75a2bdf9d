# SPDX-License-Identifier: Apache-2.0
"""Error definitions for the layout and measurement core."""

from __future__ import annotations


class GlyphboxError(Exception):
    """Base exception for glyphbox errors."""

    def __init__(
        self,
        message: str,
        stage: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.stage = stage
        self.cause = cause


class FontConfigError(GlyphboxError):
    """Font configuration cannot produce a glyph cache.

    Reported through the cache load result; an empty cache is published.
    """


class FontLoadError(GlyphboxError):
    """Sprite-sheet image could not be read or decoded.

    Reported through the cache load result; an empty cache is published.
    """


class StaleCacheError(GlyphboxError):
    """Glyph cache generation differs from the one the caller expects."""
