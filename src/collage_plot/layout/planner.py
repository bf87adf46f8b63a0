"""
Pure geometric planner turning a grid config into a :class:`Layout`.

No I/O happens here: image dimensions and a text measuring function are
passed in, so the same inputs always produce the same plan.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import TYPE_CHECKING

from collage_plot.config_defaults import DEFAULT_FONT_SIZE
from collage_plot.constants import LABEL_LINE_SEPARATOR, LABEL_MARGIN
from collage_plot.errors import ConfigError
from collage_plot.layout.model import (
    ColumnLabel,
    ImageElement,
    Layout,
    LayoutElement,
    LayoutRect,
    Padding,
    RowLabel,
)
from collage_plot.logging_utils import logger

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Sequence

    from collage_plot.config import GridConfig
    from collage_plot.type_defs import (
        ImageDimensions,
        LabelAlignment,
        MeasureLine,
        Size,
    )


def grid_shape(image_count: int, rows: int) -> tuple[int, int]:
    """
    Return ``(columns, occupied_rows)`` for ``image_count`` images.

    Columns are ``ceil(image_count / rows)``; the occupied row count can
    be smaller than ``rows`` when the last requested rows stay empty.
    """
    if rows < 1:
        msg = f"must be at least 1, got {rows}"
        raise ConfigError(msg, field="rows")
    if image_count == 0:
        return 0, 0
    cols = math.ceil(image_count / rows)
    return cols, math.ceil(image_count / cols)


def cell_position(index: int, cols: int) -> tuple[int, int]:
    """Return ``(row, col)`` of the image at ``index`` in row-major order."""
    return index // cols, index % cols


def align_offset(
    cell_start: int,
    cell_size: int,
    label_size: int,
    alignment: LabelAlignment,
) -> int:
    """Resolve a label's start coordinate against one cell axis."""
    if alignment == "start":
        return cell_start
    if alignment == "end":
        return cell_start + cell_size - label_size
    return cell_start + (cell_size - label_size) // 2


def split_lines(text: str) -> list[str]:
    """Split label text into the lines drawn one below another."""
    return text.split(LABEL_LINE_SEPARATOR)


def measure_label(
    text: str,
    measure: MeasureLine,
    font_size: float,
) -> tuple[int, int, int]:
    """
    Measure a possibly multi-line label.

    Returns ``(width, height, line_height)`` where width is the widest
    line and height is ``line_count * line_height``.
    """
    sizes = [measure(line, font_size) for line in split_lines(text)]
    line_height = max(h for _, h in sizes)
    width = max(w for w, _ in sizes)
    return max(1, width), max(1, len(sizes) * line_height), line_height


def band_size(
    labels: Sequence[str | None],
    measure: MeasureLine,
    font_size: float,
    minimum: int,
    *,
    fit_width: bool = False,
) -> int:
    """
    Return the depth of a label band.

    The band grows to ``line_count * line_height + LABEL_MARGIN`` for the
    tallest label and never shrinks below ``minimum``. With ``fit_width``
    it also grows to ``width + LABEL_MARGIN`` for the widest label, which
    keeps row labels inside the left band. Axes without any label get no
    band at all.
    """
    present = [text for text in labels if text]
    if not present:
        return 0
    extents = [measure_label(text, measure, font_size) for text in present]
    required = max(height for _, height, _ in extents)
    if fit_width:
        required = max(required, max(width for width, _, _ in extents))
    return max(minimum, required + LABEL_MARGIN)


def _slot_labels(labels: Sequence[str], count: int) -> list[str | None]:
    """Pad or truncate labels to ``count`` slots; blanks become None."""
    slots: list[str | None] = [text or None for text in labels[:count]]
    slots.extend([None] * (count - len(slots)))
    return slots


def _clamp_span(start: int, size: int, limit: int) -> tuple[int, int]:
    """Shift ``[start, start + size)`` inside ``[0, limit)``."""
    if size >= limit:
        return 0, limit
    return min(max(start, 0), limit - size), size


def _subtract(rect: LayoutRect, holes: Sequence[LayoutRect]) -> list[LayoutRect]:  # noqa: E501
    """Return non-overlapping pieces of ``rect`` not covered by ``holes``."""
    pieces = [rect]
    for hole in holes:
        remaining: list[LayoutRect] = []
        for piece in pieces:
            if not piece.intersects(hole):
                remaining.append(piece)
                continue
            top = max(piece.y, hole.y)
            bottom = min(piece.bottom, hole.bottom)
            left = max(piece.x, hole.x)
            right = min(piece.right, hole.right)
            candidates = (
                LayoutRect(piece.x, piece.y, piece.width, top - piece.y),
                LayoutRect(piece.x, bottom, piece.width, piece.bottom - bottom),
                LayoutRect(piece.x, top, left - piece.x, bottom - top),
                LayoutRect(right, top, piece.right - right, bottom - top),
            )
            remaining.extend(c for c in candidates if not c.is_empty)
        pieces = remaining
    return pieces


def _validate(config: GridConfig, image_dims: ImageDimensions) -> None:
    if config.rows < 1:
        msg = f"must be at least 1, got {config.rows}"
        raise ConfigError(msg, field="rows")
    if not config.images and (config.row_labels or config.column_labels):
        msg = "labels were supplied but there are no images to label"
        raise ConfigError(msg, field="images")
    for index in range(len(config.images)):
        dims = image_dims.get(index)
        if dims is None:
            msg = f"no dimensions resolved for image #{index}"
            raise ConfigError(msg, field="images")
        if dims[0] <= 0 or dims[1] <= 0:
            msg = f"image #{index} has empty dimensions {dims[0]}x{dims[1]}"
            raise ConfigError(msg, field="images")


def plan(
    config: GridConfig,
    image_dims: ImageDimensions,
    measure: MeasureLine,
) -> Layout:
    """
    Plan the placement of every image, label, and padding band.

    Args:
        config: Validated grid configuration.
        image_dims: ``(width, height)`` per image index in ``config.images``,
            as a mapping or a sequence in image order.
        measure: Text measuring function ``(text, font_size) -> (w, h)``.

    Returns:
        A layout whose canvas is the smallest rect holding every element.
        Its height covers the occupied rows only, so 5 images with
        ``rows=4`` lay out as 3 rows of 2.

    Raises:
        ConfigError: If ``rows`` is below 1, labels are given without
            images, or a dimension is missing.

    """
    if not isinstance(image_dims, Mapping):
        image_dims = dict(enumerate(image_dims))
    _validate(config, image_dims)
    font_size = config.font_size or DEFAULT_FONT_SIZE
    count = len(config.images)
    cols, rows = grid_shape(count, config.rows)
    if count == 0:
        return Layout((), 0, 0, font_size)

    sizes: list[Size] = [image_dims[i] for i in range(count)]
    cell_w = max(w for w, _ in sizes)
    cell_h = max(h for _, h in sizes)

    column_texts = _slot_labels(config.column_labels, cols)
    row_texts = _slot_labels(config.row_labels, rows)
    top = band_size(column_texts, measure, font_size, config.top_padding)
    left = band_size(row_texts, measure, font_size, config.left_padding,
                     fit_width=True)

    total_w = left + cols * cell_w
    total_h = top + rows * cell_h
    logger.debug(
        "Planning %d images as %dx%d grid, cell %dx%d, bands top=%d left=%d",
        count, rows, cols, cell_w, cell_h, top, left,
    )

    images: list[LayoutElement] = []
    for index in range(count):
        row, col = cell_position(index, cols)
        images.append(ImageElement(
            rect=LayoutRect(left + col * cell_w, top + row * cell_h,
                            cell_w, cell_h),
            source_index=index,
        ))

    column_labels: list[ColumnLabel] = []
    for col, text in enumerate(column_texts):
        if text is None:
            continue
        width, height, _ = measure_label(text, measure, font_size)
        x = align_offset(left + col * cell_w, cell_w, width,
                         config.column_label_alignment)
        x, width = _clamp_span(x, width, total_w)
        y, height = _clamp_span((top - height) // 2, height, top)
        column_labels.append(ColumnLabel(
            rect=LayoutRect(x, y, width, height),
            text=text,
            column_index=col,
            alignment=config.column_label_alignment,
        ))

    row_labels: list[RowLabel] = []
    for row, text in enumerate(row_texts):
        if text is None:
            continue
        width, height, _ = measure_label(text, measure, font_size)
        y = align_offset(top + row * cell_h, cell_h, height,
                         config.row_label_alignment)
        y, height = _clamp_span(y, height, total_h)
        x, width = _clamp_span((left - width) // 2, width, total_w)
        row_labels.append(RowLabel(
            rect=LayoutRect(x, y, width, height),
            text=text,
            row_index=row,
            alignment=config.row_label_alignment,
        ))

    paddings = _band_paddings(
        (top, left),
        (cell_w, cell_h),
        (cols, rows),
        [label.rect for label in (*column_labels, *row_labels)],
    )
    return Layout(
        elements=(*paddings, *images, *column_labels, *row_labels),
        total_width=total_w,
        total_height=total_h,
        font_size=font_size,
    )


def _band_paddings(
    bands: tuple[int, int],
    cell: tuple[int, int],
    grid: tuple[int, int],
    label_rects: list[LayoutRect],
) -> list[Padding]:
    """Emit padding for band area left uncovered by any label."""
    top, left = bands
    cell_w, cell_h = cell
    cols, rows = grid
    slots: list[tuple[LayoutRect, str]] = []
    if top and left:
        slots.append((LayoutRect(0, 0, left, top), "top-left corner"))
    if top:
        slots.extend(
            (LayoutRect(left + c * cell_w, 0, cell_w, top),
             f"top band, column {c}")
            for c in range(cols)
        )
    if left:
        slots.extend(
            (LayoutRect(0, top + r * cell_h, left, cell_h),
             f"left band, row {r}")
            for r in range(rows)
        )

    paddings: list[Padding] = []
    for slot, description in slots:
        holes = [rect for rect in label_rects if rect.intersects(slot)]
        paddings.extend(
            Padding(rect=piece, description=description)
            for piece in _subtract(slot, holes)
        )
    return paddings
