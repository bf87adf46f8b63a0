"""
Error taxonomy for planning and rendering collages.

Every error names the source path, image index, or configuration field
that caused it so a failed plot can be traced to a single input.
"""

from __future__ import annotations

from pathlib import Path


class PlotError(Exception):
    """Base class for every failure raised by ``create_plot``."""


class LayoutError(PlotError):
    """The grid could not be planned."""


class RenderError(PlotError):
    """A planned grid could not be turned into pixels or written out."""


class ConfigError(LayoutError, ValueError):
    """The configuration is invalid or describes an ambiguous grid."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        self.field = field
        if field is not None:
            message = f"{field}: {message}"
        super().__init__(message)


class MetricsError(LayoutError):
    """Text could not be measured, so label space cannot be reserved."""


class DecodeError(RenderError):
    """An input image cannot be read or parsed."""

    def __init__(self, source: str | Path, reason: str = "") -> None:
        self.source = Path(source)
        msg = f"Failed to decode image '{source}'"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class MissingImageError(RenderError):
    """A planned image element has no decoded buffer at render time."""

    def __init__(self, source_index: int) -> None:
        self.source_index = source_index
        super().__init__(f"No pixel buffer supplied for image #{source_index}")


class EncodeError(RenderError):
    """A composed raster cannot be written to its destination."""

    def __init__(self, destination: str | Path, reason: str = "") -> None:
        self.destination = Path(destination)
        msg = f"Failed to write image '{destination}'"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
