"""Core domain models for the pricemerge project.

This module provides the data models used throughout the project:
- ExtractedPriceRecord, BoundingBox: OCR line-item candidates
- SectionCapture: one photographed receipt section
- MergePolicy, MergedResult: merge engine inputs/outputs

Usage:
    from pricemerge.domain import ExtractedPriceRecord, MergePolicy, MergedResult
"""

from pricemerge.domain.prices import (
    BoundingBox,
    ExtractedPriceRecord,
    MergedResult,
    MergePolicy,
    SectionCapture,
)

__all__ = [
    "BoundingBox",
    "ExtractedPriceRecord",
    "MergedResult",
    "MergePolicy",
    "SectionCapture",
]
