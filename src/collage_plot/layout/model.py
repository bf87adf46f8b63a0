"""
Immutable value objects describing a planned collage.

A :class:`Layout` is the single source of geometry for both the real
render and the debug overlay. Elements form a closed set of four kinds;
consumers dispatch with ``match`` and end with ``assert_never`` so a new
kind cannot be silently skipped.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias

from collage_plot.type_defs import LabelAlignment


@dataclass(frozen=True, slots=True)
class LayoutRect:
    """Rectangle with a signed top-left corner and non-negative size."""

    x: int
    y: int
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            msg = f"Rect size must be non-negative, got {self.width}x{self.height}"  # noqa: E501
            raise ValueError(msg)

    @property
    def right(self) -> int:
        """Exclusive right edge."""
        return self.x + self.width

    @property
    def bottom(self) -> int:
        """Exclusive bottom edge."""
        return self.y + self.height

    @property
    def is_empty(self) -> bool:
        """True for zero-area placeholders."""
        return self.width == 0 or self.height == 0

    def size(self) -> tuple[int, int]:
        """Return (width, height)."""
        return self.width, self.height

    def contains(self, other: LayoutRect) -> bool:
        """True when ``other`` lies entirely inside this rect."""
        return (
            self.x <= other.x
            and self.y <= other.y
            and other.right <= self.right
            and other.bottom <= self.bottom
        )

    def intersects(self, other: LayoutRect) -> bool:
        """True when the two rects share a non-empty area."""
        return (
            self.x < other.right
            and other.x < self.right
            and self.y < other.bottom
            and other.y < self.bottom
        )

    def as_box(self) -> tuple[int, int, int, int]:
        """Return the Pillow box ``(x0, y0, x1, y1)`` with exclusive ends."""
        return self.x, self.y, self.right, self.bottom


@dataclass(frozen=True, slots=True)
class ImageElement:
    """Grid cell holding the input image at ``source_index``."""

    rect: LayoutRect
    source_index: int


@dataclass(frozen=True, slots=True)
class RowLabel:
    """Label drawn in the left band beside a grid row."""

    rect: LayoutRect
    text: str
    row_index: int
    alignment: LabelAlignment


@dataclass(frozen=True, slots=True)
class ColumnLabel:
    """Label drawn in the top band above a grid column."""

    rect: LayoutRect
    text: str
    column_index: int
    alignment: LabelAlignment


@dataclass(frozen=True, slots=True)
class Padding:
    """Reserved band area; only ever drawn by the debug overlay."""

    rect: LayoutRect
    description: str


LayoutElement: TypeAlias = ImageElement | RowLabel | ColumnLabel | Padding


@dataclass(frozen=True, slots=True)
class Layout:
    """
    Complete plan for one collage.

    ``font_size`` is the size labels were measured at; the renderer
    draws at the same size so text fills exactly the planned rects.
    """

    elements: tuple[LayoutElement, ...]
    total_width: int
    total_height: int
    font_size: float

    @property
    def size(self) -> tuple[int, int]:
        """Canvas (width, height)."""
        return self.total_width, self.total_height

    @property
    def canvas_rect(self) -> LayoutRect:
        """Rect covering the whole canvas."""
        return LayoutRect(0, 0, self.total_width, self.total_height)

    def images(self) -> list[ImageElement]:
        """Image elements in row-major order."""
        return [e for e in self.elements if isinstance(e, ImageElement)]

    def row_labels(self) -> list[RowLabel]:
        """Row label elements in row order."""
        return [e for e in self.elements if isinstance(e, RowLabel)]

    def column_labels(self) -> list[ColumnLabel]:
        """Column label elements in column order."""
        return [e for e in self.elements if isinstance(e, ColumnLabel)]

    def paddings(self) -> list[Padding]:
        """Padding placeholders."""
        return [e for e in self.elements if isinstance(e, Padding)]
