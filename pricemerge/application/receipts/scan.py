"""Receipt scan workflow orchestration: OCR every section, then merge."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from pricemerge.domain.prices import ExtractedPriceRecord, MergedResult, MergePolicy, SectionCapture
from pricemerge.receipt.merge import merge
from pricemerge.receipt.ocr_helpers import ocr_image_height, records_from_ocr_result
from pricemerge.receipt.similarity import MergeConfig
from pricemerge.runtime import get_logger
from pricemerge.runtime.ocr_client import (
    NoContentExtracted,
    OCRServiceUnavailable,
    OCRSourceUnavailable,
    call_ocr_service,
    save_ocr_json,
)

logger = get_logger(__name__)

ScanStatus = Literal[
    "file_not_found",
    "ocr_unavailable",
    "no_content",
    "merged",
]


@dataclass(frozen=True)
class ReceiptScanRequest:
    """Inputs for running the receipt scan workflow."""

    image_paths: tuple[Path, ...]  # capture order
    ocr_url: str
    policy: MergePolicy = MergePolicy.SIMPLE
    config: MergeConfig | None = None
    save_json: bool = True
    ocr_json_dir: Path | None = None


@dataclass(frozen=True)
class ReceiptScanResult:
    """Outcome from the receipt scan workflow."""

    status: ScanStatus
    result: MergedResult | None = None
    sections: tuple[SectionCapture, ...] = ()
    saved_json: tuple[Path, ...] = ()
    error: str | None = None
    failed_section: int | None = None


def build_section_captures(image_paths: tuple[Path, ...]) -> tuple[SectionCapture, ...]:
    """Number sections 1..n in capture order."""
    return tuple(SectionCapture(image_reference=path, section_index=i) for i, path in enumerate(image_paths, 1))


def run_receipt_scan(request: ReceiptScanRequest) -> ReceiptScanResult:
    """Run scan flow: OCR each section -> records on a shared axis -> merge."""
    sections = build_section_captures(request.image_paths)

    for section in sections:
        if not section.image_reference.exists():
            return ReceiptScanResult(
                status="file_not_found",
                sections=sections,
                error=f"Receipt file not found: {section.image_reference}",
                failed_section=section.section_index,
            )

    section_records: list[list[ExtractedPriceRecord]] = []
    saved_json: list[Path] = []
    y_offset = 0.0
    for section in sections:
        try:
            raw_result = call_ocr_service(section.image_reference, request.ocr_url)
        except OCRSourceUnavailable as exc:
            return ReceiptScanResult(
                status="file_not_found",
                sections=sections,
                error=str(exc),
                failed_section=section.section_index,
            )
        except OCRServiceUnavailable as exc:
            return ReceiptScanResult(
                status="ocr_unavailable",
                sections=sections,
                error=str(exc),
                failed_section=section.section_index,
            )
        except NoContentExtracted as exc:
            return ReceiptScanResult(
                status="no_content",
                sections=sections,
                error=str(exc),
                failed_section=section.section_index,
            )

        if request.save_json:
            saved_json.append(save_ocr_json(raw_result, section.image_reference, request.ocr_json_dir))

        try:
            records = records_from_ocr_result(raw_result, y_offset=y_offset)
            height = ocr_image_height(raw_result)
        except (ValueError, TypeError, KeyError, IndexError) as exc:
            logger.error("Malformed OCR result for section %d: %s", section.section_index, exc)
            return ReceiptScanResult(
                status="ocr_unavailable",
                sections=sections,
                saved_json=tuple(saved_json),
                error=f"Malformed OCR result: {exc}",
                failed_section=section.section_index,
            )
        logger.info("Section %d: %d candidate price(s)", section.section_index, len(records))
        section_records.append(records)
        # Stack sections vertically so positions stay comparable across images.
        y_offset += height

    merged = merge(section_records, request.policy, request.config)
    logger.info(
        "Merged %d section(s) into %d item(s), confidence %.2f",
        merged.total_sections_considered,
        len(merged.prices),
        merged.aggregate_confidence,
    )
    return ReceiptScanResult(
        status="merged",
        result=merged,
        sections=sections,
        saved_json=tuple(saved_json),
    )
