# SPDX-License-Identifier: Apache-2.0
"""Markup handling for script text.

Scripts carry control codes as inline tags. For display, general tags are
hidden, custom line-break tags become real line breaks, and color tag pairs
split the text into colored segments. For character counting every kind of
tag is removed.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from .models import (
    Color,
    ColoredSegment,
    ColorTag,
    ParseWarning,
    PlainSegment,
    Segment,
    TagConfig,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TagScan:
    """Result of splitting text on color tags."""

    segments: tuple[Segment, ...]
    warnings: tuple[ParseWarning, ...] = ()


def _compile(pattern: str) -> re.Pattern[str] | None:
    try:
        return re.compile(pattern)
    except re.error as exc:
        logger.warning("Ignoring invalid tag pattern %r: %s", pattern, exc)
        return None


def _make_segment(text: str, color: Color | None) -> Segment:
    if color is None:
        return PlainSegment(text)
    return ColoredSegment(text, color)


def parse_color_segments(text: str, color_tags: tuple[ColorTag, ...]) -> TagScan:
    """Split text into plain and colored segments.

    Color tags nest: an opening tag pushes its color, the matching closing tag
    pops it. A closing tag that does not match the innermost open tag is
    dropped from the text and reported.

    Args:
        text: Text that may contain color tags.
        color_tags: Tag definitions; disabled or incomplete ones are ignored.

    Returns:
        TagScan with non-empty segments in text order.
    """
    active = [
        tag for tag in color_tags if tag.enabled and tag.opening_tag and tag.closing_tag
    ]
    if not active:
        return TagScan(segments=(PlainSegment(text),) if text else ())

    active.sort(key=lambda tag: len(tag.opening_tag) + len(tag.closing_tag), reverse=True)
    colors: dict[str, Color | None] = {}
    for tag in active:
        try:
            colors[tag.opening_tag] = Color.from_hex(tag.color)
        except ValueError:
            logger.warning(
                "Color tag %r has invalid color %r; rendering it uncolored",
                tag.opening_tag,
                tag.color,
            )
            colors[tag.opening_tag] = None

    alternatives: list[str] = []
    for tag in active:
        alternatives.append(re.escape(tag.opening_tag))
        alternatives.append(re.escape(tag.closing_tag))
    splitter = re.compile("(" + "|".join(alternatives) + ")")

    segments: list[Segment] = []
    warnings: list[ParseWarning] = []
    stack: list[tuple[ColorTag, Color | None, int]] = []
    pending = ""
    line_number = 1

    def flush() -> None:
        nonlocal pending
        if pending:
            color = stack[-1][1] if stack else None
            segments.append(_make_segment(pending, color))
            pending = ""

    for part in splitter.split(text):
        if not part:
            continue
        for tag in active:
            if part == tag.opening_tag:
                flush()
                stack.append((tag, colors[tag.opening_tag], line_number))
                break
            if part == tag.closing_tag:
                flush()
                if stack and stack[-1][0].closing_tag == part:
                    stack.pop()
                else:
                    warnings.append(
                        ParseWarning(line_number, part, "unmatched closing color tag")
                    )
                break
        else:
            pending += part
        line_number += part.count("\n")
    flush()

    for tag, _, opened_on in stack:
        warnings.append(ParseWarning(opened_on, tag.opening_tag, "color tag never closed"))
    for warning in warnings:
        logger.debug(
            "Color tag %r on line %d: %s", warning.text, warning.line_number, warning.reason
        )

    return TagScan(segments=tuple(segments), warnings=tuple(warnings))


def apply_line_break_tags(text: str, config: TagConfig, replacement: str = "\n") -> str:
    """Replace custom line-break tags when they are enabled."""
    if not config.use_custom_line_break_tags:
        return text
    for tag in config.line_break_tags:
        if tag.strip():
            text = text.replace(tag, replacement)
    return text


def hide_tags(text: str, config: TagConfig) -> str:
    """Remove hideable tags and block separators from display text.

    Strings that are themselves color tags are kept so the color scanner can
    still see them. Invalid patterns are skipped.
    """
    keep = {
        marker
        for tag in config.active_color_tags
        for marker in (tag.opening_tag, tag.closing_tag)
    }

    for pattern_text in config.tag_patterns_to_hide:
        pattern_text = pattern_text.strip()
        if not pattern_text:
            continue
        pattern = _compile(pattern_text)
        if pattern is None:
            continue
        text = pattern.sub(lambda m: m.group(0) if m.group(0) in keep else "", text)

    if config.use_custom_block_separator:
        for separator in config.block_separators:
            if separator.strip() and separator not in keep:
                text = text.replace(separator, "")
    return text


def prepare_display_text(text: str, config: TagConfig) -> str:
    """Apply line-break tags and, if enabled, tag hiding."""
    text = apply_line_break_tags(text, config)
    if config.hide_tags:
        text = hide_tags(text, config)
    return text


def display_segments(text: str, config: TagConfig) -> TagScan:
    """Prepare display text and split it into color segments."""
    prepared = prepare_display_text(text.replace("\r", ""), config)
    return parse_color_segments(prepared, config.active_color_tags)


def clean_text_for_counting(text: str, config: TagConfig) -> str:
    """Strip every tag, separator and line-break tag for character counting.

    Tag patterns are applied whether or not tags are hidden in the preview.
    """
    for tag in config.active_color_tags:
        text = text.replace(tag.opening_tag, "").replace(tag.closing_tag, "")

    for pattern_text in config.tag_patterns_to_hide:
        pattern_text = pattern_text.strip()
        if not pattern_text:
            continue
        pattern = _compile(pattern_text)
        if pattern is not None:
            text = pattern.sub("", text)

    if config.use_custom_block_separator:
        for separator in config.block_separators:
            separator = separator.strip()
            if separator:
                text = text.replace(separator, "")

    return apply_line_break_tags(text, config, replacement="")
