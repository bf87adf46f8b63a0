"""Composite decoded images and label text onto a planned canvas."""

from __future__ import annotations

from typing import TYPE_CHECKING, assert_never

from PIL import Image, ImageDraw

from collage_plot.constants import COLOR_BLACK, COLOR_MODE_RGB, COLOR_WHITE
from collage_plot.errors import MissingImageError, RenderError
from collage_plot.image_io import to_rgb
from collage_plot.layout.model import (
    ColumnLabel,
    ImageElement,
    Padding,
    RowLabel,
)
from collage_plot.layout.planner import align_offset, split_lines
from collage_plot.metrics import FontMetrics, default_metrics

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Mapping

    from collage_plot.layout.model import Layout, LayoutRect
    from collage_plot.type_defs import LabelAlignment

_RGB = tuple[int, int, int]


def new_canvas(size: tuple[int, int], color: _RGB) -> Image.Image:
    """Allocate an opaque RGB canvas, reporting failure as RenderError."""
    try:
        return Image.new(COLOR_MODE_RGB, size, color)
    except (MemoryError, ValueError) as exc:
        msg = f"Cannot allocate a {size[0]}x{size[1]} canvas: {exc}"
        raise RenderError(msg) from exc


def fit_size(src: tuple[int, int], box: tuple[int, int]) -> tuple[int, int]:
    """Largest size with ``src``'s aspect ratio that fits inside ``box``."""
    sw, sh = src
    bw, bh = box
    scale = min(bw / sw, bh / sh)
    return (
        min(bw, max(1, round(sw * scale))),
        min(bh, max(1, round(sh * scale))),
    )


def paste_fitted(
    canvas: Image.Image,
    img: Image.Image,
    rect: LayoutRect,
) -> None:
    """Scale ``img`` to fit ``rect`` keeping aspect, and paste it centered."""
    size = fit_size(img.size, rect.size())
    if size != img.size:
        img = img.resize(size, Image.Resampling.LANCZOS)
    x = rect.x + (rect.width - size[0]) // 2
    y = rect.y + (rect.height - size[1]) // 2
    canvas.paste(img, (x, y))


def draw_label(  # noqa: PLR0913
    canvas: Image.Image,
    text: str,
    rect: LayoutRect,
    alignment: LabelAlignment,
    font_size: float,
    fonts: FontMetrics,
) -> None:
    """
    Draw each line of ``text`` inside ``rect``, aligned horizontally.

    Glyphs are rendered into a mask the size of ``rect`` and stamped onto
    the canvas through it, so text never leaves the planned rect even
    when the rect was cut down to fit the canvas.
    """
    if rect.is_empty:
        return
    mask = Image.new("L", rect.size(), 0)
    draw = ImageDraw.Draw(mask)
    font = fonts.font(font_size)
    for i, line in enumerate(split_lines(text)):
        width, line_height = fonts.measure_line(line, font_size)
        x = align_offset(0, rect.width, width, alignment)
        draw.text((x, i * line_height), line, font=font, fill=255)
    canvas.paste(COLOR_BLACK, rect.as_box(), mask)


def render(
    layout: Layout,
    buffers: Mapping[int, Image.Image],
    fonts: FontMetrics | None = None,
) -> Image.Image:
    """
    Compose the final collage for ``layout``.

    Args:
        layout: Plan produced by :func:`collage_plot.layout.plan`.
        buffers: Decoded image per ``source_index``.
        fonts: Font provider; must match the one used for planning.

    Returns:
        An RGB image of exactly ``layout.size``.

    Raises:
        MissingImageError: If an image element has no buffer.

    """
    for element in layout.images():
        if element.source_index not in buffers:
            raise MissingImageError(element.source_index)

    fonts = fonts or default_metrics()
    canvas = new_canvas(layout.size, COLOR_WHITE)
    for element in layout.elements:
        match element:
            case ImageElement(rect=rect, source_index=index):
                paste_fitted(canvas, to_rgb(buffers[index]), rect)
            case (
                RowLabel(rect=rect, text=text, alignment=alignment)
                | ColumnLabel(rect=rect, text=text, alignment=alignment)
            ):
                draw_label(canvas, text, rect, alignment, layout.font_size,
                           fonts)
            case Padding():
                pass
            case _:
                assert_never(element)
    return canvas
