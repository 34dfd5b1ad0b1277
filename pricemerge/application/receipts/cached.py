"""Merge previously saved OCR results without calling the OCR service."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

from pricemerge.domain.prices import ExtractedPriceRecord, MergedResult, MergePolicy
from pricemerge.receipt.formatter import record_from_dict
from pricemerge.receipt.merge import merge
from pricemerge.receipt.ocr_helpers import ocr_image_height, records_from_ocr_result
from pricemerge.receipt.similarity import MergeConfig
from pricemerge.runtime import get_logger

logger = get_logger(__name__)

CachedMergeStatus = Literal["file_not_found", "invalid_json", "merged"]


@dataclass(frozen=True)
class CachedMergeRequest:
    """Inputs for merging cached section files, in capture order."""

    json_paths: tuple[Path, ...]
    policy: MergePolicy = MergePolicy.SIMPLE
    config: MergeConfig | None = None


@dataclass(frozen=True)
class CachedMergeResult:
    """Outcome from the cached merge workflow."""

    status: CachedMergeStatus
    result: MergedResult | None = None
    error: str | None = None


def _records_from_payload(payload: Any, y_offset: float) -> tuple[list[ExtractedPriceRecord], float]:
    """
    Return (records, section_height) for one cached file.

    Accepts a raw OCR service result, a ``{"prices": [...]}`` object or a
    bare list of record dicts. Record files carry their own positions, so
    their height is 0.
    """
    if isinstance(payload, dict) and "detections" in payload:
        return records_from_ocr_result(payload, y_offset=y_offset), ocr_image_height(payload)
    if isinstance(payload, dict) and "prices" in payload:
        payload = payload["prices"]
    if not isinstance(payload, list):
        raise ValueError("expected OCR detections, a 'prices' list or a list of records")
    return [record_from_dict(item) for item in payload], 0.0


def run_cached_merge(request: CachedMergeRequest) -> CachedMergeResult:
    """Load each cached section file, convert to records and merge."""
    sections: list[list[ExtractedPriceRecord]] = []
    y_offset = 0.0
    for path in request.json_paths:
        if not path.exists():
            return CachedMergeResult(status="file_not_found", error=f"File not found: {path}")
        try:
            payload = json.loads(path.read_text())
            records, height = _records_from_payload(payload, y_offset)
        except (ValueError, TypeError, KeyError, IndexError) as exc:
            logger.error("Invalid section file %s: %s", path, exc)
            return CachedMergeResult(status="invalid_json", error=f"{path}: {exc}")
        sections.append(records)
        y_offset += height

    return CachedMergeResult(status="merged", result=merge(sections, request.policy, request.config))
