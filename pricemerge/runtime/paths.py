"""Centralized path management for the pricemerge project.

This module provides a single source of truth for project paths, so the
CLI, server and workflows agree on where configuration and cached OCR
output live regardless of the current working directory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _get_project_root() -> Path:
    """Determine the project data root (PRICEMERGE_HOME, else the working directory)."""
    env_root = os.environ.get("PRICEMERGE_HOME")
    if env_root:
        return Path(env_root).expanduser()
    return Path.cwd()


@dataclass
class ProjectPaths:
    """Container for all project-related paths.

    All paths are computed relative to the project root.
    """

    root: Path = field(default_factory=_get_project_root)

    def __post_init__(self) -> None:
        self.root = self.root.resolve()

    # --- Configuration paths ---
    @property
    def config(self) -> Path:
        """Configuration directory (config/)."""
        return self.root / "config"

    @property
    def merge_config(self) -> Path:
        """Merge engine tunables TOML file."""
        return self.config / "merge.toml"

    # --- Receipt paths ---
    @property
    def receipts(self) -> Path:
        """Root receipts directory."""
        return self.root / "receipts"

    @property
    def receipts_ocr_json(self) -> Path:
        """Raw OCR results (JSON), one file per scanned section."""
        return self.receipts / "ocr_json"

    def ensure_receipt_directories(self) -> None:
        """Create receipt-related directories if they don't exist."""
        self.receipts_ocr_json.mkdir(parents=True, exist_ok=True)


_paths: ProjectPaths | None = None


def get_paths() -> ProjectPaths:
    """Get the singleton ProjectPaths instance."""
    global _paths
    if _paths is None:
        _paths = ProjectPaths()
    return _paths


def reset_paths() -> None:
    """Drop the cached ProjectPaths so the next get_paths() re-reads the environment."""
    global _paths
    _paths = None
