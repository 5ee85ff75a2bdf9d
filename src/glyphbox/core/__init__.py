# SPDX-License-Identifier: Apache-2.0
"""Constrained text layout and measurement core."""

from .byte_map import ByteMap, parse_byte_map
from .compositor import GlyphCompositor, PositionedGlyph, RenderedText, tint_glyph
from .errors import FontConfigError, FontLoadError, GlyphboxError, StaleCacheError
from .glyph_cache import (
    CacheLoadResult,
    CancellationToken,
    GlyphCache,
    GlyphCacheBuilder,
    GlyphCacheEntry,
    GlyphCacheManager,
)
from .models import (
    BBox,
    BlockMetrics,
    ByteMapEntry,
    Color,
    ColoredSegment,
    ColorTag,
    FontConfig,
    LineBudget,
    LineMetrics,
    MarginSetting,
    OverflowConfig,
    OverflowMargins,
    OverflowMode,
    ParseWarning,
    PlainSegment,
    Segment,
    TagConfig,
    TextTransform,
)
from .overflow import OverflowDetector, OverflowResult
from .text_metrics import compare_byte_budget, exceeds_byte_budget, measure_block, measure_line

__all__ = [
    "BBox",
    "BlockMetrics",
    "ByteMap",
    "ByteMapEntry",
    "CacheLoadResult",
    "CancellationToken",
    "Color",
    "ColoredSegment",
    "ColorTag",
    "FontConfig",
    "FontConfigError",
    "FontLoadError",
    "GlyphboxError",
    "GlyphCache",
    "GlyphCacheBuilder",
    "GlyphCacheEntry",
    "GlyphCacheManager",
    "GlyphCompositor",
    "LineBudget",
    "LineMetrics",
    "MarginSetting",
    "OverflowConfig",
    "OverflowDetector",
    "OverflowMargins",
    "OverflowMode",
    "OverflowResult",
    "ParseWarning",
    "PlainSegment",
    "PositionedGlyph",
    "RenderedText",
    "Segment",
    "StaleCacheError",
    "TagConfig",
    "TextTransform",
    "compare_byte_budget",
    "exceeds_byte_budget",
    "measure_block",
    "measure_line",
    "parse_byte_map",
    "tint_glyph",
]
