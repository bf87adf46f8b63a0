"""
Test configuration and shared fixtures for collage_plot.

Provides a deterministic fake text measurer for planner tests, factories
for solid-color images on disk, and a GridConfig builder. These fixtures
support all test modules in the test suite.

Note:
    This file is automatically loaded by pytest and should not be
    renamed.

"""
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from PIL import Image

from collage_plot.config import GridConfig, build_grid_config
from collage_plot.constants import COLOR_MODE_RGB
from collage_plot.logging_utils import logger

# Fake metrics: every character is 10 px wide and every line 20 px tall
FAKE_CHAR_W = 10
FAKE_LINE_H = 20


def fake_measure(text: str, font_size: float) -> tuple[int, int]:  # noqa: ARG001
    """Measure text with fixed-width glyphs, independent of font size."""
    return FAKE_CHAR_W * len(text), FAKE_LINE_H


@pytest.fixture
def measure() -> Callable[[str, float], tuple[int, int]]:
    """Provide the deterministic fake text measurer."""
    return fake_measure


@pytest.fixture
def make_config() -> Callable[..., GridConfig]:
    """
    Build GridConfig instances for planner tests.

    ``count`` generates placeholder image paths; the planner never opens
    them.
    """

    def _build(count: int = 4, **overrides: Any) -> GridConfig:  # noqa: ANN401
        data: dict[str, Any] = {
            "images": [f"img{i}.png" for i in range(count)],
        }
        data.update(overrides)
        return build_grid_config(data)

    return _build


@pytest.fixture
def make_image_file(tmp_path: Path) -> Callable[..., Path]:
    """Write a solid-color image to tmp_path and return its path."""

    def _make(
        name: str,
        size: tuple[int, int] = (100, 100),
        color: str | tuple[int, ...] = "red",
        mode: str = COLOR_MODE_RGB,
    ) -> Path:
        path = tmp_path / name
        Image.new(mode, size, color=color).save(path)
        return path

    return _make


@pytest.fixture
def four_images(make_image_file: Callable[..., Path]) -> list[Path]:
    """Four 100x100 images in distinct colors."""
    colors = ["red", "green", "blue", "yellow"]
    return [make_image_file(f"img{i}.png", color=c)
            for i, c in enumerate(colors)]


@pytest.fixture
def sample_image() -> Image.Image:
    """Create a sample 100x100 red RGB PIL image."""
    return Image.new(COLOR_MODE_RGB, (100, 100), color="red")


@pytest.fixture(autouse=True)
def enable_logger_propagation(monkeypatch: pytest.MonkeyPatch) -> None:
    """Enable propagation for the shared logger to allow caplog to work."""
    monkeypatch.setattr(logger, "propagate", True)
