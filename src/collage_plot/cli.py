"""CLI argument parsing and main entry point."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import TYPE_CHECKING, Any

import collage_plot.config as cp_config
import collage_plot.image_io as cp_image_io
from collage_plot.config_defaults import (
    DEFAULT_FONT_SIZE,
    DEFAULT_LEFT_PADDING,
    DEFAULT_TOP_PADDING,
)
from collage_plot.errors import PlotError
from collage_plot.logging_utils import logger, set_verbosity
from collage_plot.plot import create_plot
from collage_plot.type_defs import ALIGNMENT_CHOICES

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Callable, Sequence

    from PIL import Image

# Keys of argparse.Namespace that map directly onto GridConfig fields
_CONFIG_KEYS = (
    "images",
    "output",
    "rows",
    "row_labels",
    "column_labels",
    "column_label_alignment",
    "row_label_alignment",
    "top_padding",
    "left_padding",
    "font_size",
    "debug_mode",
)


def _unescape_newlines(text: str) -> str:
    r"""Let shell users write multi-line labels as ``"Line 1\nLine 2"``."""
    return text.replace("\\n", "\n")


def build_arg_parser() -> argparse.ArgumentParser:
    """Construct the argument parser for the command-line interface."""
    prog = "collage-plot"
    p = argparse.ArgumentParser(
        prog=prog,
        description="Arrange images into a labeled grid",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            f"  {prog} plot.toml\n"
            f"  {prog} plot.json --debug\n"
            f"  {prog} --images a.png b.png c.png d.png --rows 2 "
            "--row-labels R1 R2 --column-labels C1 C2 --output grid.png\n\n"
            "Note:\n"
            "  Command-line options override values from the config file.\n"
            "  Use \\n inside a label for a line break."
        ),
    )

    p.add_argument(
        "config", nargs="?", type=Path,
        help="Path to a .toml or .json plot config")

    grid = p.add_argument_group("grid")
    grid.add_argument(
        "--images", nargs="+", type=Path, default=argparse.SUPPRESS,
        help="Image files in row-major order")
    grid.add_argument(
        "--output", "-o", type=Path, default=argparse.SUPPRESS,
        help="Output image path (format from extension)")
    grid.add_argument(
        "--rows", type=int, default=argparse.SUPPRESS,
        help="Number of grid rows; columns are derived")

    labels = p.add_argument_group("labels")
    labels.add_argument(
        "--row-labels", nargs="*", type=_unescape_newlines,
        default=argparse.SUPPRESS, help="Labels for each row")
    labels.add_argument(
        "--column-labels", nargs="*", type=_unescape_newlines,
        default=argparse.SUPPRESS, help="Labels for each column")
    labels.add_argument(
        "--row-label-alignment", choices=ALIGNMENT_CHOICES,
        type=str.lower, default=argparse.SUPPRESS,
        help="Vertical alignment of row labels against their row")
    labels.add_argument(
        "--column-label-alignment", choices=ALIGNMENT_CHOICES,
        type=str.lower, default=argparse.SUPPRESS,
        help="Horizontal alignment of column labels against their column")
    labels.add_argument(
        "--font-size", type=float, default=argparse.SUPPRESS,
        help=f"Label font size in pixels (default: {DEFAULT_FONT_SIZE:g})")
    labels.add_argument(
        "--top-padding", type=int, default=argparse.SUPPRESS,
        help=(
            "Minimum height of the column label band "
            f"(default: {DEFAULT_TOP_PADDING})"
        ))
    labels.add_argument(
        "--left-padding", type=int, default=argparse.SUPPRESS,
        help=(
            "Minimum width of the row label band "
            f"(default: {DEFAULT_LEFT_PADDING})"
        ))

    pre = p.add_argument_group("preprocessing")
    pre.add_argument(
        "--remove-transparency", action="store_true",
        help="Turn fully transparent pixels opaque black before plotting")
    pre.add_argument(
        "--remove-letterbox", type=int, nargs="?", const=0, default=None,
        metavar="THRESHOLD",
        help=(
            "Crop dark borders whose channels are all <= THRESHOLD "
            "(default threshold: 0)"
        ))

    out = p.add_argument_group("diagnostics")
    out.add_argument(
        "--debug", dest="debug_mode", action="store_true",
        default=argparse.SUPPRESS,
        help="Also write a layout overlay next to the output (*_debug.*)")
    out.add_argument(
        "--validate-config-only", action="store_true",
        help="Validate the configuration and exit without plotting")
    out.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable debug logging")

    return p


def build_preprocessor(
    args: argparse.Namespace,
) -> Callable[[Image.Image], Image.Image] | None:
    """Chain the requested preprocessing steps, or None if there are none."""
    steps: list[Callable[[Image.Image], Image.Image]] = []
    if args.remove_transparency:
        steps.append(cp_image_io.remove_transparency)
    if args.remove_letterbox is not None:
        threshold = args.remove_letterbox

        def crop(img: Image.Image) -> Image.Image:
            return cp_image_io.remove_letterbox(img, threshold)

        steps.append(crop)
    if not steps:
        return None

    def run(img: Image.Image) -> Image.Image:
        for step in steps:
            img = step(img)
        return img

    return run


def config_from_args(args: argparse.Namespace) -> cp_config.GridConfig:
    """Load the optional config file and apply command-line overrides."""
    data: dict[str, Any] = {}
    if args.config is not None:
        data = cp_config.ConfigLoader.read(args.config)
        logger.info("Loaded config from: %s", args.config)
    options = vars(args)
    data.update({key: options[key] for key in _CONFIG_KEYS if key in options})
    return cp_config.build_grid_config(data)


def log_parameters(cfg: cp_config.GridConfig) -> None:
    """Log the effective plot parameters."""
    logger.info("Images: %d", len(cfg.images))
    logger.info("Output: %s", cfg.output)
    logger.info("Grid: %d row(s) x %d column(s)", cfg.rows, cfg.columns)
    logger.info("Row Labels: %s", list(cfg.row_labels) or "(none)")
    logger.info("Column Labels: %s", list(cfg.column_labels) or "(none)")
    logger.info("Alignment: rows=%s columns=%s",
                cfg.row_label_alignment, cfg.column_label_alignment)
    logger.info("Padding: top=%d left=%d", cfg.top_padding, cfg.left_padding)
    logger.info("Font Size: %s", cfg.font_size or "(default)")
    logger.info("Debug Overlay: %s",
                "Enabled" if cfg.debug_mode else "Disabled")


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command-line interface; return the process exit code."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    set_verbosity(args.verbose)

    if args.config is None and "images" not in vars(args):
        parser.error("either a config file or --images is required")

    try:
        cfg = config_from_args(args)
    except FileNotFoundError as exc:
        parser.error(str(exc))
    except PlotError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    if args.validate_config_only:
        logger.info("Config validated successfully.")
        return 0

    log_parameters(cfg)
    try:
        create_plot(cfg, preprocess=build_preprocessor(args))
    except PlotError as exc:
        logger.error("Failed to create plot: %s", exc)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
