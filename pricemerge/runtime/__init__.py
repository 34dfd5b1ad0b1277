"""Runtime infrastructure for the pricemerge project.

This package provides process/runtime services including:
- Logging setup via get_logger()
- Path resolution via get_paths(), ProjectPaths

Usage:
    from pricemerge.runtime import get_logger, get_paths

    logger = get_logger(__name__)
    paths = get_paths()
    print(paths.root, paths.receipts_ocr_json)
"""

from pricemerge.runtime.logging import (
    configure_logging,
    get_logger,
    set_log_level,
)
from pricemerge.runtime.paths import ProjectPaths, get_paths, reset_paths

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "set_log_level",
    # Paths
    "get_paths",
    "reset_paths",
    "ProjectPaths",
]
