"""
Tests for image I/O and preprocessing in collage_plot.

Covers:
- Extension and magic-byte detection
- Dimension probing and decoding, with error handling
- Atomic encoding and format selection
- Transparency and letterbox preprocessing
"""

from collections.abc import Callable
from pathlib import Path

import pytest
from _pytest.logging import LogCaptureFixture
from _pytest.monkeypatch import MonkeyPatch
from PIL import Image

import collage_plot.image_io as cp_image_io
from collage_plot.constants import COLOR_MODE_RGB, JPEG_QUALITY, WEBP_QUALITY
from collage_plot.errors import DecodeError, EncodeError


class TestFormatDetection:
    """Extension checks and content sniffing."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("a.png", True),
            ("a.JPG", True),
            ("a.jpeg", True),
            ("a.webp", True),
            ("a.jxl", True),
            ("a.txt", False),
            ("noext", False),
        ],
    )
    def test_is_image_file(self, name: str, expected: bool) -> None:  # noqa: FBT001
        assert cp_image_io.is_image_file(name) is expected

    @pytest.mark.parametrize(
        ("fmt", "suffix", "expected"),
        [("PNG", ".png", "png"), ("JPEG", ".jpg", "jpeg"),
         ("GIF", ".gif", "gif"), ("WEBP", ".webp", "webp")],
    )
    def test_sniff_real_files(
        self, tmp_path: Path, fmt: str, suffix: str, expected: str,
    ) -> None:
        path = tmp_path / f"img{suffix}"
        Image.new(COLOR_MODE_RGB, (4, 4)).save(path, format=fmt)
        assert cp_image_io.sniff_format(path) == expected

    def test_sniff_jxl_codestream(self, tmp_path: Path) -> None:
        path = tmp_path / "x.bin"
        path.write_bytes(b"\xff\x0a" + b"\x00" * 14)
        assert cp_image_io.sniff_format(path) == "jxl"

    def test_sniff_unknown(self, tmp_path: Path) -> None:
        path = tmp_path / "notes.png"
        path.write_text("hello", encoding="utf-8")
        assert cp_image_io.sniff_format(path) is None


class TestDecoding:
    """Probing and decoding source images."""

    def test_resolve_dimensions(
        self, make_image_file: Callable[..., Path],
    ) -> None:
        path = make_image_file("wide.png", size=(120, 30))
        assert cp_image_io.resolve_dimensions(path) == (120, 30)

    def test_resolve_dimensions_missing(self, tmp_path: Path) -> None:
        with pytest.raises(DecodeError, match="file not found"):
            cp_image_io.resolve_dimensions(tmp_path / "missing.png")

    def test_resolve_dimensions_garbage(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.jpg"
        path.write_bytes(b"not an image data")
        with pytest.raises(DecodeError, match="unrecognized") as info:
            cp_image_io.resolve_dimensions(path)
        assert info.value.source == path

    def test_decode_pixels_loads_data(
        self, make_image_file: Callable[..., Path],
    ) -> None:
        path = make_image_file("blue.png", color="blue")
        with cp_image_io.decode_pixels(path) as img:
            assert img.size == (100, 100)
            assert img.getpixel((0, 0)) == (0, 0, 255)

    def test_decode_truncated_file(
        self, make_image_file: Callable[..., Path],
    ) -> None:
        path = make_image_file("cut.png", size=(64, 64))
        data = path.read_bytes()
        path.write_bytes(data[: len(data) // 2])
        with pytest.raises(DecodeError):
            cp_image_io.decode_pixels(path)

    @pytest.mark.parametrize(
        "reader", [cp_image_io.resolve_dimensions, cp_image_io.decode_pixels],
    )
    def test_oversized_image_is_decode_error(
        self,
        reader: Callable[[Path], object],
        make_image_file: Callable[..., Path],
        monkeypatch: MonkeyPatch,
    ) -> None:
        """Pillow's pixel-count guard is reported against the source."""
        path = make_image_file("huge.png", size=(100, 100))
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)
        with pytest.raises(DecodeError) as info:
            reader(path)
        assert info.value.source == path

    def test_to_rgb_composites_on_white(self) -> None:
        img = Image.new("RGBA", (2, 2), (255, 0, 0, 0))
        assert cp_image_io.to_rgb(img).getpixel((0, 0)) == (255, 255, 255)

    def test_to_rgb_passthrough(self, sample_image: Image.Image) -> None:
        assert cp_image_io.to_rgb(sample_image) is sample_image

    def test_to_rgb_grayscale(self) -> None:
        img = Image.new("L", (2, 2), 128)
        out = cp_image_io.to_rgb(img)
        assert out.mode == COLOR_MODE_RGB
        assert out.getpixel((0, 0)) == (128, 128, 128)


class TestEncoding:
    """Atomic writes and encoder settings."""

    def test_encode_creates_parent(
        self, tmp_path: Path, sample_image: Image.Image,
    ) -> None:
        dest = tmp_path / "nested" / "dir" / "out.png"
        assert cp_image_io.encode(sample_image, dest) == dest
        with Image.open(dest) as img:
            assert img.size == sample_image.size

    def test_encode_leaves_no_temp_files(
        self, tmp_path: Path, sample_image: Image.Image,
    ) -> None:
        cp_image_io.encode(sample_image, tmp_path / "out.webp")
        assert [p.name for p in tmp_path.iterdir()] == ["out.webp"]

    def test_encode_unknown_extension(
        self, tmp_path: Path, sample_image: Image.Image,
    ) -> None:
        with pytest.raises(EncodeError, match="unsupported output"):
            cp_image_io.encode(sample_image, tmp_path / "out.xyz")
        assert not (tmp_path / "out.xyz").exists()

    def test_failed_save_cleans_up(
        self,
        tmp_path: Path,
        sample_image: Image.Image,
        monkeypatch: MonkeyPatch,
    ) -> None:
        def boom(*_args: object, **_kwargs: object) -> None:
            msg = "disk full"
            raise OSError(msg)

        monkeypatch.setattr(Image.Image, "save", boom)
        with pytest.raises(EncodeError, match="disk full"):
            cp_image_io.encode(sample_image, tmp_path / "out.png")
        assert list(tmp_path.iterdir()) == []

    def test_stage_then_commit(
        self, tmp_path: Path, sample_image: Image.Image,
    ) -> None:
        dest = tmp_path / "out.png"
        dest.write_bytes(b"old")
        staged = cp_image_io.stage_encode(sample_image, dest)
        assert staged.parent == tmp_path
        assert dest.read_bytes() == b"old"

        assert cp_image_io.commit(staged, dest) == dest
        assert not staged.exists()
        with Image.open(dest) as img:
            assert img.size == sample_image.size

    def test_save_kwargs(self) -> None:
        opts = cp_image_io.EncodeOptions()
        assert opts.save_kwargs("JPEG") == {"quality": JPEG_QUALITY}
        assert opts.save_kwargs("WEBP") == {"quality": WEBP_QUALITY}
        assert cp_image_io.EncodeOptions(lossless=True).save_kwargs(
            "WEBP") == {"lossless": True}
        assert cp_image_io.EncodeOptions(quality=50).save_kwargs(
            "JPEG") == {"quality": 50}

    def test_format_for_path(self) -> None:
        assert cp_image_io.format_for_path("x.JPG") == "JPEG"
        assert cp_image_io.format_for_path("x.png") == "PNG"


class TestPreprocessing:
    """Transparency removal, letterbox cropping, and temp copies."""

    def test_remove_transparency(self) -> None:
        img = Image.new("RGBA", (2, 1), (10, 20, 30, 255))
        img.putpixel((1, 0), (200, 200, 200, 0))
        out = cp_image_io.remove_transparency(img)
        assert out.getpixel((0, 0)) == (10, 20, 30, 255)
        assert out.getpixel((1, 0)) == (0, 0, 0, 255)

    def test_remove_letterbox_crops_bars(self) -> None:
        img = Image.new(COLOR_MODE_RGB, (50, 40), "black")
        img.paste((255, 255, 255), (5, 10, 45, 30))
        out = cp_image_io.remove_letterbox(img)
        assert out.size == (40, 20)

    def test_remove_letterbox_threshold(self) -> None:
        img = Image.new(COLOR_MODE_RGB, (20, 20), (8, 8, 8))
        img.paste((255, 255, 255), (0, 5, 20, 15))
        assert cp_image_io.remove_letterbox(img, 0).size == (20, 20)
        assert cp_image_io.remove_letterbox(img, 10).size == (20, 10)

    def test_remove_letterbox_all_black(
        self, caplog: LogCaptureFixture,
    ) -> None:
        img = Image.new(COLOR_MODE_RGB, (10, 10), "black")
        with caplog.at_level("INFO", logger="collage_plot"):
            assert cp_image_io.remove_letterbox(img) is img
        assert "No letterbox detected" in caplog.text

    def test_processed_copy_is_removed(
        self, make_image_file: Callable[..., Path],
    ) -> None:
        src = make_image_file("src.png", color="green")
        with cp_image_io.processed_copy(
                src, lambda im: im.rotate(90)) as tmp:
            assert tmp.exists()
            assert tmp != src
        assert not tmp.exists()

    def test_processed_copy_removed_on_error(
        self, make_image_file: Callable[..., Path],
    ) -> None:
        src = make_image_file("src.png")
        seen: list[Path] = []
        with pytest.raises(RuntimeError):  # noqa: PT012
            with cp_image_io.processed_copy(src, lambda im: im) as tmp:
                seen.append(tmp)
                msg = "body failed"
                raise RuntimeError(msg)
        assert not seen[0].exists()
