# SPDX-License-Identifier: Apache-2.0
"""PNG export of a rendered block inside its preview box."""

from __future__ import annotations

import io
import logging
import math
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, ImageDraw

from glyphbox.core.compositor import GlyphCompositor, RenderedText
from glyphbox.core.models import Color, OverflowConfig, TextTransform

logger = logging.getLogger(__name__)


@dataclass
class ExportConfig:
    """Configuration for preview export.

    Attributes:
        background_color: Fill color of the preview box.
        draw_guides: Draw the box limit or margin lines.
        guide_color: Color of the guide lines.

    Note:
        Output format is fixed to PNG for transparency support.
    """

    background_color: str = "#FFFFFF"
    draw_guides: bool = False
    guide_color: str = "#FF0000"


class PreviewExporter:
    """Draw a composited block into an image of the preview box."""

    def __init__(
        self,
        compositor: GlyphCompositor | None = None,
        config: ExportConfig | None = None,
    ) -> None:
        """Initialize PreviewExporter.

        Args:
            compositor: Compositor used to draw glyphs.
            config: Export configuration.
        """
        self._compositor = compositor or GlyphCompositor()
        self._config = config or ExportConfig()

    def render(
        self,
        rendered: RenderedText,
        overflow: OverflowConfig,
        transform: TextTransform,
    ) -> Image.Image:
        """Render the text placed by ``transform`` inside the box.

        An automatic box dimension (0) grows to fit the text.
        """
        text_width = rendered.width * transform.scale_x
        text_height = rendered.height * transform.scale_y
        box_width = overflow.box_width or math.ceil(transform.position_x + text_width)
        box_height = overflow.box_height or math.ceil(transform.position_y + text_height)

        background = Color.from_hex(self._config.background_color)
        canvas = Image.new(
            "RGBA", (max(1, box_width), max(1, box_height)), background.as_tuple() + (255,)
        )

        text_layer = self._compositor.render(rendered)
        if transform.scale_x != 1.0 or transform.scale_y != 1.0:
            text_layer = text_layer.resize(
                (max(1, round(text_width)), max(1, round(text_height))),
                Image.Resampling.NEAREST,
            )
        layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        layer.paste(text_layer, (round(transform.position_x), round(transform.position_y)))
        canvas = Image.alpha_composite(canvas, layer)

        if self._config.draw_guides:
            self._draw_guides(canvas, overflow)
        return canvas

    def _draw_guides(self, canvas: Image.Image, overflow: OverflowConfig) -> None:
        draw = ImageDraw.Draw(canvas)
        color = Color.from_hex(self._config.guide_color).as_tuple()
        width, height = canvas.size
        margins = overflow.margins
        if margins.enabled:
            if overflow.box_width > 0:
                left = round(margins.left.value)
                right = round(width - margins.right.value)
                draw.line([(left, 0), (left, height)], fill=color)
                draw.line([(right, 0), (right, height)], fill=color)
            if overflow.box_height > 0:
                top = round(margins.top.value)
                bottom = round(height - margins.bottom.value)
                draw.line([(0, top), (width, top)], fill=color)
                draw.line([(0, bottom), (width, bottom)], fill=color)
        elif overflow.box_height <= 0 and overflow.max_pixel_height > 0:
            limit = overflow.max_pixel_height
            draw.line([(0, limit), (width, limit)], fill=color)

    def generate(
        self,
        rendered: RenderedText,
        overflow: OverflowConfig,
        transform: TextTransform,
    ) -> tuple[bytes, int, int]:
        """Render to PNG bytes.

        Returns:
            Tuple of (image_bytes, width, height).
        """
        image = self.render(rendered, overflow, transform)
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue(), image.width, image.height

    def generate_to_file(
        self,
        rendered: RenderedText,
        overflow: OverflowConfig,
        transform: TextTransform,
        output_path: Path,
    ) -> tuple[int, int]:
        """Render and save a PNG file.

        Returns:
            Tuple of (width, height).
        """
        image_bytes, width, height = self.generate(rendered, overflow, transform)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(image_bytes)
        logger.debug("Wrote preview %s (%dx%d)", output_path, width, height)
        return width, height
