"""
Layout engine: immutable plan types and the pure planner producing them.

The renderer and the debug overlay both consume a single :class:`Layout`
so their geometry can never drift apart.
"""

from __future__ import annotations

from . import model, planner
from .model import (
    ColumnLabel,
    ImageElement,
    Layout,
    LayoutElement,
    LayoutRect,
    Padding,
    RowLabel,
)
from .planner import (
    align_offset,
    band_size,
    cell_position,
    grid_shape,
    measure_label,
    plan,
    split_lines,
)

__all__ = [
    "ColumnLabel",
    "ImageElement",
    "Layout",
    "LayoutElement",
    "LayoutRect",
    "Padding",
    "RowLabel",
    "align_offset",
    "band_size",
    "cell_position",
    "grid_shape",
    "measure_label",
    "model",
    "plan",
    "planner",
    "split_lines",
]
