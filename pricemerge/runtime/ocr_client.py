"""Runtime client for the external OCR service (non-HTTP-server side)."""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any

import httpx

from pricemerge.runtime import get_logger, get_paths

logger = get_logger(__name__)

DEFAULT_OCR_TIMEOUT = 60.0


class OCRError(Exception):
    """Base class for OCR collaborator failures."""

    retryable = False


class OCRSourceUnavailable(OCRError):
    """Raised when the image to scan is missing or unreadable."""


class OCRServiceUnavailable(OCRError, RuntimeError):
    """Raised when the OCR service cannot be reached or returns an error."""

    retryable = True


class NoContentExtracted(OCRError):
    """Raised when the OCR service answers but detects no text."""


def call_ocr_service(image_path: Path, ocr_url: str, timeout: float = DEFAULT_OCR_TIMEOUT) -> dict[str, Any]:
    """
    Send an image to the OCR service and return its raw JSON result.

    Raises:
        OCRSourceUnavailable: image cannot be read.
        OCRServiceUnavailable: connection failure, timeout or non-200 response.
        NoContentExtracted: the service returned no detections.
    """
    ocr_url = ocr_url.rstrip("/")

    try:
        image_bytes = image_path.read_bytes()
    except OSError as e:
        raise OCRSourceUnavailable(f"Cannot read image {image_path}: {e}") from e

    logger.info("Sending %s to OCR service at %s...", image_path.name, ocr_url)
    try:
        start_time = time.time()
        response = httpx.post(
            f"{ocr_url}/ocr",
            files={"file": (image_path.name, image_bytes, "image/jpeg")},
            timeout=timeout,
        )
        elapsed_time = time.time() - start_time
        logger.info("OCR service returned in %.2f seconds", elapsed_time)
    except httpx.TimeoutException as e:
        logger.error("OCR service timed out: %s", e)
        raise OCRServiceUnavailable(f"OCR service timed out: {e}") from e
    except httpx.RequestError as e:
        logger.error("Failed to connect to OCR service: %s", e)
        raise OCRServiceUnavailable(f"Failed to connect to OCR service: {e}") from e

    if response.status_code != 200:
        # Response body may echo receipt text; log the status only.
        logger.error("OCR service error: %s", response.status_code)
        raise OCRServiceUnavailable(f"OCR service error: {response.status_code}")

    try:
        raw_result = response.json()
    except ValueError as e:
        raise OCRServiceUnavailable(f"OCR service returned invalid JSON: {e}") from e

    if not isinstance(raw_result, dict) or not raw_result.get("detections"):
        raise NoContentExtracted(f"No text detected in {image_path.name}")
    return raw_result


def save_ocr_json(ocr_result: dict[str, Any], image_path: Path, directory: Path | None = None) -> Path:
    """Save a raw OCR result next to the other cached results, named after the image."""
    target_dir = directory if directory is not None else get_paths().receipts_ocr_json
    target_dir.mkdir(parents=True, exist_ok=True)
    ocr_json_path = target_dir / f"{image_path.stem}.json"
    ocr_json_path.write_text(json.dumps(ocr_result, indent=2))
    logger.debug("OCR JSON saved to: %s", ocr_json_path)
    return ocr_json_path
