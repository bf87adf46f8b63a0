"""Public package exports for the collage plotter."""

from __future__ import annotations

from .config import ConfigLoader, GridConfig, build_grid_config
from .errors import (
    ConfigError,
    DecodeError,
    EncodeError,
    LayoutError,
    MetricsError,
    MissingImageError,
    PlotError,
    RenderError,
)
from .layout import Layout, LayoutRect, plan
from .plot import PlotResult, create_plot
from .render import render, render_debug

__all__ = [
    "ConfigError",
    "ConfigLoader",
    "DecodeError",
    "EncodeError",
    "GridConfig",
    "Layout",
    "LayoutError",
    "LayoutRect",
    "MetricsError",
    "MissingImageError",
    "PlotError",
    "PlotResult",
    "RenderError",
    "build_grid_config",
    "create_plot",
    "plan",
    "render",
    "render_debug",
]
