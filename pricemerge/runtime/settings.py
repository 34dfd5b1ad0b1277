"""Runtime loader for merge engine tunables."""

from __future__ import annotations

import tomllib
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from pricemerge.receipt.similarity import MergeConfig
from pricemerge.runtime.paths import get_paths

_DECIMAL_KEYS = {"exact_price_tolerance", "relative_price_tolerance"}
_FLOAT_KEYS = {"name_similarity_threshold", "section_bonus"}


def _coerce(key: str, value: Any) -> Decimal | float:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"merge.{key} must be a number, got {value!r}")
    if key in _DECIMAL_KEYS:
        try:
            # str() keeps TOML floats like 0.1 from picking up binary noise.
            return Decimal(str(value))
        except InvalidOperation as exc:
            raise ValueError(f"merge.{key} must be a number, got {value!r}") from exc
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"merge.{key} must be a number, got {value!r}") from exc


def load_merge_config(config_path: str | Path | None = None) -> MergeConfig:
    """
    Load merge tunables from the [merge] table of a TOML file.

    Args:
        config_path: Optional TOML path override. If None, uses config/merge.toml
            under the project root.

    Returns:
        MergeConfig with file values over defaults. Missing file -> defaults.
    """
    path = Path(config_path) if config_path is not None else get_paths().merge_config
    if not path.exists():
        return MergeConfig()

    with open(path, "rb") as f:
        config = tomllib.load(f)

    table = config.get("merge", {})
    unknown = set(table) - _DECIMAL_KEYS - _FLOAT_KEYS
    if unknown:
        raise ValueError(f"Unknown merge settings in {path}: {', '.join(sorted(unknown))}")

    return MergeConfig(**{key: _coerce(key, value) for key, value in table.items()})
