"""Rasterization of a planned layout: the collage and its debug twin."""

from __future__ import annotations

from .compose import draw_label, fit_size, new_canvas, paste_fitted, render
from .debug import element_color, render_debug

__all__ = [
    "draw_label",
    "element_color",
    "fit_size",
    "new_canvas",
    "paste_fitted",
    "render",
    "render_debug",
]
