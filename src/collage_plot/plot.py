"""Top-level orchestration: config in, collage (and debug overlay) out."""

from __future__ import annotations

import time
from collections.abc import Mapping
from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from collage_plot.config import GridConfig, build_grid_config
from collage_plot.errors import ConfigError, EncodeError
from collage_plot.image_io import (
    commit,
    decode_pixels,
    is_image_file,
    processed_copy,
    resolve_dimensions,
    sniff_format,
    stage_encode,
)
from collage_plot.layout import Layout, plan
from collage_plot.logging_utils import logger
from collage_plot.metrics import FontMetrics, default_metrics
from collage_plot.render import render, render_debug

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Callable, Sequence

    from PIL import Image

    Preprocessor = Callable[[Image.Image], Image.Image]


@dataclass(frozen=True, slots=True)
class PlotResult:
    """Paths written by :func:`create_plot` and the layout they share."""

    output: Path
    debug_output: Path | None
    layout: Layout


def _warn_unrecognized(source: Path) -> None:
    """Log sources whose extension and content both look unfamiliar."""
    if is_image_file(source) or not source.is_file():
        return
    if sniff_format(source) is None:
        logger.warning("Source does not look like an image: %s", source)


def _prepare_sources(
    images: Sequence[Path],
    preprocess: Preprocessor | None,
    stack: ExitStack,
) -> list[Path]:
    """Return the paths to read, swapping in processed temporary copies."""
    for source in images:
        _warn_unrecognized(source)
    if preprocess is None:
        return list(images)
    return [
        stack.enter_context(processed_copy(source, preprocess))
        for source in images
    ]


def create_plot(
    config: GridConfig | Mapping[str, Any],
    *,
    fonts: FontMetrics | None = None,
    preprocess: Preprocessor | None = None,
) -> PlotResult:
    """
    Plan, render, and write a labeled image grid.

    The layout is computed once and handed to both the renderer and, when
    ``debug_mode`` is set, the debug overlay. Everything is composed in
    memory before any file is written, and each file is written
    atomically.

    Args:
        config: A validated config, or a mapping of config options.
        fonts: Text measuring and drawing provider.
        preprocess: Optional transform applied to every source image
            through a temporary copy that is always cleaned up.

    Returns:
        The written paths and the shared layout.

    Raises:
        LayoutError: If the grid cannot be planned.
        RenderError: If an image cannot be read or an output written.

    """
    if not isinstance(config, GridConfig):
        config = build_grid_config(dict(config))
    if not config.images:
        msg = "at least one image is required to create a plot"
        raise ConfigError(msg, field="images")

    fonts = fonts or default_metrics()
    start = time.perf_counter()
    logger.info(
        "Plotting %d images in %d row(s) to %s",
        len(config.images), config.rows, config.output,
    )

    with ExitStack() as stack:
        sources = _prepare_sources(config.images, preprocess, stack)
        dims = {i: resolve_dimensions(src) for i, src in enumerate(sources)}
        layout = plan(config, dims, fonts.measure_line)
        logger.info(
            "Layout: %dx%d canvas, %d elements",
            layout.total_width, layout.total_height, len(layout.elements),
        )
        buffers = {
            i: stack.enter_context(decode_pixels(src))
            for i, src in enumerate(sources)
        }
        canvas = render(layout, buffers, fonts)
        debug_canvas = render_debug(layout) if config.debug_mode else None

    # Both rasters are staged before either destination is replaced
    staged = [(stage_encode(canvas, config.output), config.output)]
    if debug_canvas is not None:
        try:
            staged.append((stage_encode(debug_canvas, config.debug_output),
                           config.debug_output))
        except EncodeError:
            staged[0][0].unlink(missing_ok=True)
            raise
    written = [commit(tmp, dest) for tmp, dest in staged]
    output = written[0]
    debug_output = written[1] if len(written) > 1 else None
    if debug_output is not None:
        logger.info("Debug layout saved to: %s", debug_output)

    logger.info("Plot created in %.2f seconds", time.perf_counter() - start)
    logger.info("Plot saved to: %s", output)
    return PlotResult(output=output, debug_output=debug_output, layout=layout)
