"""
Configuration schema and loader for the collage plotter.

Defines the Pydantic model describing a labeled image grid and a loader
that reads TOML or JSON files into a validated config. Validation runs
once, when the config is built, so the layout planner only ever sees a
well-formed grid.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import tomlkit
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from tomlkit.exceptions import TOMLKitError

from collage_plot.config_defaults import (
    DEFAULT_ALIGNMENT,
    DEFAULT_DEBUG_MODE,
    DEFAULT_LEFT_PADDING,
    DEFAULT_OUTPUT,
    DEFAULT_ROWS,
    DEFAULT_TOP_PADDING,
)
from collage_plot.constants import DEBUG_SUFFIX
from collage_plot.errors import ConfigError
from collage_plot.logging_utils import logger
from collage_plot.type_defs import ALIGNMENT_CHOICES, LabelAlignment


class GridConfig(BaseModel):
    """
    Declarative description of one labeled image grid.

    Images fill the grid row by row. The column count is derived from
    the image count and ``rows``. Label lists may be shorter or longer
    than the grid: missing labels leave a slot blank and extra labels
    are ignored.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    images: tuple[Path, ...] = ()
    output: Path = Path(DEFAULT_OUTPUT)
    rows: int = Field(DEFAULT_ROWS, ge=1)
    row_labels: tuple[str, ...] = ()
    column_labels: tuple[str, ...] = ()
    column_label_alignment: LabelAlignment = DEFAULT_ALIGNMENT
    row_label_alignment: LabelAlignment = DEFAULT_ALIGNMENT
    top_padding: int = Field(DEFAULT_TOP_PADDING, ge=0)
    left_padding: int = Field(DEFAULT_LEFT_PADDING, ge=0)
    font_size: float | None = Field(None, gt=0)
    debug_mode: bool = DEFAULT_DEBUG_MODE

    @field_validator(
        "column_label_alignment",
        "row_label_alignment",
        mode="before",
    )
    @classmethod
    def _normalize_alignment(cls, value: Any) -> Any:  # noqa: ANN401
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("top_padding", "left_padding", mode="before")
    @classmethod
    def _clamp_negative_padding(cls, value: Any) -> Any:  # noqa: ANN401
        if isinstance(value, int) and not isinstance(value, bool) \
                and value < 0:
            logger.warning("Negative padding value (%d), using 0 instead",
                           value)
            return 0
        return value

    @model_validator(mode="after")
    def _check_grid_shape(self) -> GridConfig:
        if not self.images and (self.row_labels or self.column_labels):
            msg = "labels were supplied but there are no images to label"
            raise ValueError(msg)
        return self

    @property
    def columns(self) -> int:
        """Number of grid columns implied by the image count."""
        return -(-len(self.images) // self.rows)

    @property
    def debug_output(self) -> Path:
        """Destination of the debug overlay, next to ``output``."""
        out = self.output
        return out.with_name(f"{out.stem}{DEBUG_SUFFIX}{out.suffix}")


def build_grid_config(data: dict[str, Any]) -> GridConfig:
    """
    Validate a mapping of options into a :class:`GridConfig`.

    Pydantic errors are re-raised as :class:`ConfigError` naming the
    first offending field.
    """
    try:
        return GridConfig.model_validate(data)
    except ValidationError as exc:
        first = exc.errors()[0]
        loc = ".".join(str(part) for part in first["loc"]) or None
        raise ConfigError(first["msg"], field=loc) from exc


def merge_overrides(
    base: GridConfig,
    overrides: dict[str, Any],
) -> GridConfig:
    """Return a new config with non-None ``overrides`` applied to ``base``."""
    data = base.model_dump()
    data.update({k: v for k, v in overrides.items() if v is not None})
    return build_grid_config(data)


def parse_alignment(text: str) -> LabelAlignment:
    """Parse an alignment name case-insensitively."""
    value = text.strip().lower()
    if value not in ALIGNMENT_CHOICES:
        choices = ", ".join(ALIGNMENT_CHOICES)
        msg = f"alignment must be one of {choices}, got {text!r}"
        raise ConfigError(msg, field="alignment")
    return value  # type: ignore[return-value]


class ConfigLoader:
    """
    Loads a TOML or JSON configuration file into a typed config object.

    Top-level keys map one to one onto :class:`GridConfig` fields and
    fall back to defaults when missing.
    """

    @staticmethod
    def read(path: str | Path) -> dict[str, Any]:
        """Read the raw option mapping from ``path`` without validating."""
        config_path = Path(path)
        if not config_path.is_file():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)

        suffix = config_path.suffix.lower()
        with config_path.open("r", encoding="utf-8") as f:
            if suffix == ".toml":
                try:
                    return tomlkit.load(f).unwrap()
                except TOMLKitError as exc:
                    msg = f"invalid TOML in {path}: {exc}"
                    raise ConfigError(msg) from exc
            if suffix == ".json":
                try:
                    data = json.load(f)
                except json.JSONDecodeError as exc:
                    msg = f"invalid JSON in {path}: {exc}"
                    raise ConfigError(msg) from exc
                if not isinstance(data, dict):
                    msg = f"expected a JSON object at the top of {path}"
                    raise ConfigError(msg)
                return data

        msg = f"unsupported config format '{suffix}' (use .toml or .json)"
        raise ConfigError(msg, field="config")

    @staticmethod
    def load(path: str | Path) -> GridConfig:
        """
        Load a grid configuration from a TOML or JSON file.

        Returns a validated GridConfig instance based on the file contents.
        """
        return build_grid_config(ConfigLoader.read(path))
