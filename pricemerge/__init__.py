"""Receipt price extraction and multi-section merge."""

__version__ = "0.1.0"
