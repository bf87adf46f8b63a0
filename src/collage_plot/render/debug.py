"""Color-coded overlay showing the geometry of every planned element."""

from __future__ import annotations

from typing import TYPE_CHECKING, assert_never

from PIL import ImageDraw

from collage_plot.constants import (
    COLOR_WHITE,
    DEBUG_BORDER_PX,
    DEBUG_COLOR_BORDER,
    DEBUG_COLOR_COLUMN_LABEL,
    DEBUG_COLOR_IMAGE,
    DEBUG_COLOR_PADDING,
    DEBUG_COLOR_ROW_LABEL,
)
from collage_plot.layout.model import (
    ColumnLabel,
    ImageElement,
    Padding,
    RowLabel,
)
from collage_plot.render.compose import new_canvas

if TYPE_CHECKING:  # pragma: no cover
    from PIL import Image

    from collage_plot.layout.model import Layout, LayoutElement

_RGB = tuple[int, int, int]


def element_color(element: LayoutElement) -> _RGB:
    """Return the fill color for an element's kind."""
    match element:
        case ImageElement():
            return DEBUG_COLOR_IMAGE
        case RowLabel():
            return DEBUG_COLOR_ROW_LABEL
        case ColumnLabel():
            return DEBUG_COLOR_COLUMN_LABEL
        case Padding():
            return DEBUG_COLOR_PADDING
        case _:
            assert_never(element)


def render_debug(layout: Layout) -> Image.Image:
    """
    Draw every element of ``layout`` as a filled, outlined rectangle.

    The canvas has exactly the size of the real render, and each rect is
    the one the renderer fills, so the overlay can be laid over the
    collage pixel for pixel.
    """
    canvas = new_canvas(layout.size, COLOR_WHITE)
    draw = ImageDraw.Draw(canvas)
    for element in layout.elements:
        rect = element.rect
        if rect.is_empty:
            continue
        draw.rectangle(
            (rect.x, rect.y, rect.right - 1, rect.bottom - 1),
            fill=element_color(element),
            outline=DEBUG_COLOR_BORDER,
            width=DEBUG_BORDER_PX,
        )
    return canvas
