from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError
from openpyxl.utils import column_index_from_string

from ..models.config_models import (
    DEFAULT_OUTPUT_SUFFIX,
    DEFAULT_TARGET_COLUMNS,
    ColumnLayout,
    RewriteConfig,
)

"""Config loader for config/rewrite.yml.

Responsibilities:
- Load the YAML file
- Validate it against config_schema.json (unknown keys rejected)
- Apply defaults (output directory, columns E/F/G, layout B/C/D)
- Convert spreadsheet column letters to 0-based indices
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/rewrite.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: If the schema file is missing or invalid, or the data
            violates the schema (missing keys, wrong types, unknown keys)
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def column_index(value: str | int) -> int:
    """Return the 0-based index of a column given as letters (``"E"``) or int."""
    if isinstance(value, int):
        return value
    try:
        return column_index_from_string(value.strip().upper()) - 1
    except ValueError as e:
        raise ConfigError(f"invalid column: {value!r}") from e


def parse_columns(values: list[str | int] | str) -> tuple[int, ...]:
    """Parse a column list; a string is split on commas (``"E,F,G"``)."""
    if isinstance(values, str):
        values = [v for v in (p.strip() for p in values.split(",")) if v]
    if not values:
        raise ConfigError("at least one target column is required")
    columns = tuple(column_index(v) for v in values)
    if len(set(columns)) != len(columns):
        raise ConfigError(f"duplicate target columns: {values}")
    return columns


def load_config(path: Path) -> RewriteConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")

    _validate_config_schema(data)

    source_directory = data["source_directory"]
    output_directory = data.get("output_directory") or str(Path(source_directory) / "output")
    if "target_columns" in data:
        target_columns = parse_columns(data["target_columns"])
    else:
        target_columns = DEFAULT_TARGET_COLUMNS

    defaults = ColumnLayout()
    layout_raw = data.get("layout") or {}
    layout = ColumnLayout(
        description=column_index(layout_raw.get("description", defaults.description)),
        upper=column_index(layout_raw.get("upper", defaults.upper)),
        lower=column_index(layout_raw.get("lower", defaults.lower)),
    )

    return RewriteConfig(
        source_directory=source_directory,
        output_directory=output_directory,
        target_columns=target_columns,
        output_suffix=data.get("output_suffix", DEFAULT_OUTPUT_SUFFIX),
        seed=data.get("seed"),
        layout=layout,
    )
