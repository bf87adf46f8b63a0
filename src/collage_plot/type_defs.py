"""
Defines shared type aliases for the collage plotter.

Centralizes reusable type hints to improve consistency and readability.
"""
from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Literal

LabelAlignment = Literal["start", "center", "end"]
ALIGNMENT_CHOICES: tuple[LabelAlignment, ...] = ("start", "center", "end")

Size = tuple[int, int]
ImageDimensions = Mapping[int, Size]

# (text, font_size) -> (width, line_height)
MeasureLine = Callable[[str, float], Size]
