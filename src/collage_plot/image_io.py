"""
Image loading, saving, and per-source preprocessing.

Decoding and encoding go through Pillow. Encoding is atomic: the raster
is written to a temporary file beside the destination and moved into
place only once it is complete.
"""
from __future__ import annotations

import os
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
from PIL import Image, UnidentifiedImageError

from collage_plot.constants import (
    COLOR_BLACK,
    COLOR_MODE_RGB,
    COLOR_WHITE,
    IMAGE_EXTENSIONS,
    JPEG_QUALITY,
    WEBP_QUALITY,
)
from collage_plot.errors import DecodeError, EncodeError
from collage_plot.logging_utils import logger

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Callable, Iterator

_RGB = tuple[int, int, int]

# Leading bytes identifying supported containers
_MAGIC_PREFIXES: tuple[tuple[bytes, str], ...] = (
    (b"\xff\xd8\xff", "jpeg"),
    (b"\x89PNG\r\n\x1a\n", "png"),
    (b"GIF87a", "gif"),
    (b"GIF89a", "gif"),
    (b"\xff\x0a", "jxl"),
    (b"\x00\x00\x00\x0cJXL \r\n\x87\n", "jxl"),
)
_SNIFF_BYTES = 16


def is_image_file(path: str | Path) -> bool:
    """Return True when ``path`` has a supported image extension."""
    return Path(path).suffix.lower() in IMAGE_EXTENSIONS


def sniff_format(path: str | Path) -> str | None:
    """
    Identify an image container from its leading bytes.

    Returns one of ``"jpeg"``, ``"png"``, ``"gif"``, ``"webp"``, ``"jxl"``
    or None when the content is not recognized.
    """
    with Path(path).open("rb") as f:
        head = f.read(_SNIFF_BYTES)
    if head[:4] == b"RIFF" and head[8:12] == b"WEBP":
        return "webp"
    for prefix, name in _MAGIC_PREFIXES:
        if head.startswith(prefix):
            return name
    return None


def resolve_dimensions(source: str | Path) -> tuple[int, int]:
    """
    Read an image's ``(width, height)`` without decoding its pixels.

    Raises:
        DecodeError: If the file is missing, unreadable, or not an image.

    """
    try:
        with Image.open(source) as img:
            return img.size
    except FileNotFoundError as e:
        raise DecodeError(source, "file not found") from e
    except UnidentifiedImageError as e:
        raise DecodeError(source, "unrecognized image format") from e
    except Image.DecompressionBombError as e:
        raise DecodeError(source, str(e)) from e
    except OSError as e:
        raise DecodeError(source, str(e)) from e


def decode_pixels(source: str | Path) -> Image.Image:
    """
    Fully decode an image into memory.

    The returned image owns its pixel data; callers close it when done.

    Raises:
        DecodeError: If the file is missing, unreadable, or corrupt.

    """
    try:
        img = Image.open(source)
    except FileNotFoundError as e:
        raise DecodeError(source, "file not found") from e
    except UnidentifiedImageError as e:
        raise DecodeError(source, "unrecognized image format") from e
    except Image.DecompressionBombError as e:
        raise DecodeError(source, str(e)) from e
    except OSError as e:
        raise DecodeError(source, str(e)) from e
    try:
        img.load()
    except (OSError, SyntaxError) as e:
        img.close()
        raise DecodeError(source, str(e)) from e
    return img


def to_rgb(img: Image.Image, *, bg_color: _RGB = COLOR_WHITE) -> Image.Image:
    """Convert PIL image to RGB, alpha compositing if needed."""
    if img.mode == COLOR_MODE_RGB:
        return img
    if img.mode in ("RGBA", "LA", "PA") or (
        img.mode == "P" and "transparency" in img.info
    ):
        bg = Image.new("RGBA", img.size, (*bg_color, 255))
        comp = Image.alpha_composite(bg, img.convert("RGBA"))
        return comp.convert(COLOR_MODE_RGB)
    return img.convert(COLOR_MODE_RGB)


@dataclass(frozen=True)
class EncodeOptions:
    """Format-specific encoder settings."""

    quality: int | None = None
    lossless: bool = False

    def save_kwargs(self, fmt: str) -> dict[str, object]:
        """Translate options into Pillow ``save`` keyword arguments."""
        if fmt == "JPEG":
            return {"quality": self.quality or JPEG_QUALITY}
        if fmt == "PNG":
            return {"optimize": True}
        if fmt == "WEBP":
            if self.lossless:
                return {"lossless": True}
            return {"quality": self.quality or WEBP_QUALITY}
        return {}


def format_for_path(path: str | Path) -> str:
    """
    Return the Pillow format name implied by ``path``'s extension.

    Raises:
        EncodeError: If the extension is missing or unknown to Pillow.

    """
    suffix = Path(path).suffix.lower()
    fmt = Image.registered_extensions().get(suffix)
    if fmt is None:
        raise EncodeError(path, f"unsupported output extension '{suffix}'")
    return fmt


def stage_encode(
    image: Image.Image,
    destination: str | Path,
    options: EncodeOptions | None = None,
) -> Path:
    """
    Encode ``image`` into a temporary file beside ``destination``.

    The parent directory is created if needed. The returned path is moved
    into place by :func:`commit`; ``destination`` itself is untouched.

    Raises:
        EncodeError: If the raster cannot be written.

    """
    dest = Path(destination)
    fmt = format_for_path(dest)
    kwargs = (options or EncodeOptions()).save_kwargs(fmt)
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{dest.stem}.", suffix=dest.suffix, dir=dest.parent,
        )
    except OSError as e:
        raise EncodeError(dest, str(e)) from e

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            image.save(f, format=fmt, **kwargs)
    except (OSError, ValueError, KeyError) as e:
        tmp_path.unlink(missing_ok=True)
        raise EncodeError(dest, str(e)) from e
    logger.debug("Encoded %s (%dx%d, %s)", dest, *image.size, fmt)
    return tmp_path


def commit(staged: Path, destination: str | Path) -> Path:
    """Atomically move a staged file onto ``destination``."""
    dest = Path(destination)
    try:
        staged.replace(dest)
    except OSError as e:
        staged.unlink(missing_ok=True)
        raise EncodeError(dest, str(e)) from e
    logger.debug("Wrote %s", dest)
    return dest


def encode(
    image: Image.Image,
    destination: str | Path,
    options: EncodeOptions | None = None,
) -> Path:
    """
    Write ``image`` to ``destination`` all at once.

    Nothing is left at ``destination`` if encoding fails.

    Raises:
        EncodeError: If the raster cannot be written.

    """
    return commit(stage_encode(image, destination, options), destination)


def remove_transparency(img: Image.Image) -> Image.Image:
    """Return an RGBA copy where fully transparent pixels are opaque black."""
    arr = np.array(img.convert("RGBA"), dtype=np.uint8)
    clear = arr[..., 3] == 0
    arr[clear] = (*COLOR_BLACK, 255)
    return Image.fromarray(arr)


def remove_letterbox(img: Image.Image, threshold: int = 0) -> Image.Image:
    """
    Crop dark borders from the edges of an image.

    A row or column belongs to the border while every pixel in it has all
    RGB channels ``<= threshold``. The image is returned unchanged when no
    border is found or nothing would remain.
    """
    arr = np.asarray(img.convert(COLOR_MODE_RGB))
    content = (arr > threshold).any(axis=2)
    rows = np.flatnonzero(content.any(axis=1))
    cols = np.flatnonzero(content.any(axis=0))
    if rows.size == 0 or cols.size == 0:
        logger.info("No letterbox detected in image")
        return img
    top, bottom = int(rows[0]), int(rows[-1])
    left, right = int(cols[0]), int(cols[-1])
    if not (left < right and top < bottom):
        logger.info("No letterbox detected in image")
        return img
    box = (left, top, right + 1, bottom + 1)
    if box == (0, 0, *img.size):
        return img
    logger.info(
        "Cropped image from %dx%d to %dx%d",
        img.width, img.height, right - left + 1, bottom - top + 1,
    )
    return img.crop(box)


@contextmanager
def processed_copy(
    source: str | Path,
    processor: Callable[[Image.Image], Image.Image],
) -> Iterator[Path]:
    """
    Yield the path of a processed temporary copy of ``source``.

    The source is decoded, passed through ``processor``, and written as a
    PNG temporary file. The file is removed when the context exits,
    whether the body finished, raised, or returned early. ``source``
    itself is never modified.
    """
    fd, tmp_name = tempfile.mkstemp(prefix="collage_", suffix=".png")
    os.close(fd)
    tmp_path = Path(tmp_name)
    try:
        with decode_pixels(source) as img:
            processed = processor(img)
            encode(processed, tmp_path)
        yield tmp_path
    finally:
        tmp_path.unlink(missing_ok=True)
