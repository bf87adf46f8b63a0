"""
Text measurement backed by Pillow fonts.

The layout planner only needs ``measure_line(text, font_size)``; the
renderer also needs the font object itself so that drawn text matches the
measured extents exactly. :class:`FontMetrics` provides both from the
same cached font.
"""

from __future__ import annotations

import math
from functools import lru_cache
from pathlib import Path

from PIL import ImageFont

from collage_plot.constants import FONT_CACHE_SIZE, FONT_FILE
from collage_plot.errors import MetricsError
from collage_plot.logging_utils import logger

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont

# Reaches both the ascender and the descender line of a font
_LINE_SAMPLE = "Agjpqy|"


def font_px(font_size: float) -> int:
    """Return the integer pixel size used for a requested font size."""
    if not math.isfinite(font_size) or font_size <= 0:
        msg = f"Font size must be a positive number, got {font_size!r}"
        raise MetricsError(msg)
    return max(1, round(font_size))


@lru_cache(maxsize=FONT_CACHE_SIZE)
def _get_font(font_file: str, px: int) -> Font:
    """Load a font at the given pixel size with fallback; cached."""
    try:
        return ImageFont.truetype(font_file, px)
    except OSError:
        logger.debug("Font %s unavailable, using Pillow default", font_file)
        return ImageFont.load_default(px)


class FontMetrics:
    """Measure and draw label text with a single font asset."""

    def __init__(self, font_file: str | Path = FONT_FILE) -> None:
        self.font_file = str(font_file)

    def font(self, font_size: float) -> Font:
        """Return the font used to draw text at ``font_size``."""
        try:
            return _get_font(self.font_file, font_px(font_size))
        except (OSError, ValueError) as exc:
            msg = f"Cannot load font '{self.font_file}': {exc}"
            raise MetricsError(msg) from exc

    def measure_line(self, text: str, font_size: float) -> tuple[int, int]:
        """
        Return ``(width, line_height)`` of one line of text.

        The line height is the pixel font size, or the depth of the font's
        ascender-to-descender box when that is deeper. It is the same for
        every line and is also the spacing the renderer uses between
        consecutive lines, so descenders stay inside the label rect.
        """
        font = self.font(font_size)
        try:
            width = font.getlength(text)
            _, _, _, bottom = font.getbbox(_LINE_SAMPLE)
        except (OSError, ValueError, UnicodeError) as exc:
            msg = f"Cannot measure text {text!r}: {exc}"
            raise MetricsError(msg) from exc
        return math.ceil(width), max(font_px(font_size), math.ceil(bottom))


_DEFAULT_METRICS = FontMetrics()


def default_metrics() -> FontMetrics:
    """Return the shared metrics provider for the bundled font."""
    return _DEFAULT_METRICS


def measure_line(text: str, font_size: float) -> tuple[int, int]:
    """Measure ``text`` with the default font; see :meth:`FontMetrics.measure_line`."""  # noqa: E501
    return _DEFAULT_METRICS.measure_line(text, font_size)
