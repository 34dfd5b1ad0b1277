"""Pure OCR transformation helpers: raw service detections -> price records."""

from __future__ import annotations

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any

from pricemerge.domain.prices import BoundingBox, ExtractedPriceRecord

OCR_IMAGE_PADDING = 50  # White padding the OCR service adds around the image
MIN_CONFIDENCE = 0.5  # Ignore detections with lower OCR confidence
MIN_TEXT_LENGTH = 2  # Shorter detections are usually punctuation noise

# Trailing price, optionally "$"-prefixed and followed by a one-letter tax flag ("12.99 H").
TRAILING_PRICE = re.compile(r"(?:^|\s)\$?\s?(\d{1,6}[.,]\d{2})(?:\s+[A-Z])?\s*$")
PRICE_TOKEN = re.compile(r"^\$?\s?(\d{1,6}[.,]\d{2})(?:\s*[A-Z])?$")

SUMMARY_PATTERNS = re.compile(
    r"^(SUB\s*TOTAL|SUBTOTAL|TOTAL|HST|GST|GCT|PST|TAX|MASTER|VISA|DEBIT|"
    r"CREDIT|POINTS|CASH|CHANGE|BALANCE|APPROVED|CARD|TERMINAL|MEMBER|TENDER)",
    re.IGNORECASE,
)

UNIT_PATTERN = re.compile(
    r"\b\d+(?:\.\d+)?\s?(kg|g|lbs?|oz|ml|l|ltr)\b|\b(ea|each|pk|pack|dozen)\b",
    re.IGNORECASE,
)

CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "produce": ("banana", "apple", "tomato", "onion", "potato", "carrot", "lettuce", "yam", "plantain"),
    "dairy": ("milk", "cheese", "yogurt", "butter", "cream"),
    "meat": ("chicken", "beef", "pork", "fish", "turkey", "sausage", "ham"),
    "bakery": ("bread", "bun", "cake", "bagel", "roll"),
    "beverages": ("juice", "soda", "water", "coffee", "tea", "beer", "coke"),
    "household": ("soap", "detergent", "tissue", "bleach", "towel"),
    "grocery": ("rice", "flour", "sugar", "oil", "pasta", "cereal"),
}


def parse_price_text(text: str) -> Decimal | None:
    """Parse a single price token like "$12.99", "12,99" or "17.19 H"; None if not a price."""
    match = PRICE_TOKEN.match(text.strip())
    if not match:
        return None
    try:
        return Decimal(match.group(1).replace(",", "."))
    except InvalidOperation:
        return None


def _strip_leading_receipt_codes(text: str) -> str:
    """Remove leading quantity/SKU prefixes from an OCR item line."""
    cleaned = text.strip()
    cleaned = re.sub(r"^\(\d+\)\s*", "", cleaned)
    cleaned = re.sub(r"^\d{6,}\s*", "", cleaned)
    return cleaned.strip()


def _detect_unit(name: str) -> str | None:
    match = UNIT_PATTERN.search(name)
    if not match:
        return None
    return (match.group(1) or match.group(2)).lower()


def _detect_category(name: str) -> str | None:
    words = set(re.findall(r"[a-z]+", name.lower()))
    for category, keywords in CATEGORY_KEYWORDS.items():
        if words.intersection(keywords):
            return category
    return None


def _boxes_overlap_y(det1: dict[str, Any], det2: dict[str, Any], min_overlap_ratio: float = 0.3) -> bool:
    """Check if two detection boxes overlap in Y by at least min_overlap_ratio of the smaller height."""
    overlap_start = max(det1["y_min"], det2["y_min"])
    overlap_end = min(det1["y_max"], det2["y_max"])
    if overlap_start >= overlap_end:
        return False

    smaller_height = min(det1["y_max"] - det1["y_min"], det2["y_max"] - det2["y_min"])
    # Avoid division by zero for degenerate boxes
    if smaller_height <= 0:
        return False

    return (overlap_end - overlap_start) / smaller_height >= min_overlap_ratio


def _group_detections_into_lines(detections: list[dict[str, Any]], image_width: float) -> list[list[dict[str, Any]]]:
    """
    Group detections into receipt lines.

    Left-side item text is paired with the first unassigned right-side price
    overlapping it vertically; everything else joins the line it overlaps
    most, or starts a new line.
    """
    if not detections:
        return []

    width = image_width if image_width > 0 else 1.0
    left_items = sorted((d for d in detections if d["min_x"] / width < 0.3), key=lambda d: d["center_y"])
    right_items = sorted((d for d in detections if d["min_x"] / width > 0.7), key=lambda d: d["center_y"])
    middle_items = [d for d in detections if 0.3 <= d["min_x"] / width <= 0.7]

    assigned_prices: set[int] = set()
    lines: list[list[dict[str, Any]]] = []

    for left_det in left_items:
        line = [left_det]
        for ri, right_det in enumerate(right_items):
            if ri in assigned_prices:
                continue
            if _boxes_overlap_y(left_det, right_det, min_overlap_ratio=0.3):
                line.append(right_det)
                assigned_prices.add(ri)
                break  # First match wins
        lines.append(line)

    for ri, right_det in enumerate(right_items):
        if ri not in assigned_prices:
            lines.append([right_det])

    for mid_det in middle_items:
        target = next((line for line in lines if any(_boxes_overlap_y(mid_det, d, 0.5) for d in line)), None)
        if target is not None:
            target.append(mid_det)
        else:
            lines.append([mid_det])

    for line in lines:
        line.sort(key=lambda d: d["min_x"])
    lines.sort(key=lambda line: sum(d["center_y"] for d in line) / len(line))
    return lines


def _line_to_record(line: list[dict[str, Any]]) -> ExtractedPriceRecord | None:
    text = " ".join(d["text"].strip() for d in line)
    match = TRAILING_PRICE.search(text)
    if not match:
        return None

    name_part = text[: match.start()].strip()
    if SUMMARY_PATTERNS.match(name_part):
        return None

    try:
        price = Decimal(match.group(1).replace(",", "."))
    except InvalidOperation:
        return None

    item_name = _strip_leading_receipt_codes(name_part)
    left = min(d["min_x"] for d in line)
    right = max(d["max_x"] for d in line)
    top = min(d["y_min"] for d in line)
    bottom = max(d["y_max"] for d in line)
    confidence = sum(d["confidence"] for d in line) / len(line)

    return ExtractedPriceRecord(
        item_name=item_name,
        price=price,
        original_text=text,
        confidence=max(0.0, min(1.0, confidence)),
        position=BoundingBox(left=left, top=top, width=right - left, height=bottom - top),
        category=_detect_category(item_name),
        unit=_detect_unit(item_name),
    )


def ocr_image_height(raw_result: dict[str, Any], padding: int = OCR_IMAGE_PADDING) -> float:
    """Height of the original (unpadded) image the OCR result describes."""
    height = float(raw_result.get("image_height", 0))
    if not math.isfinite(height):
        raise ValueError(f"image_height must be finite, got {height!r}")
    return max(height - 2 * padding, 0.0)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def records_from_ocr_result(
    raw_result: dict[str, Any],
    *,
    padding: int = OCR_IMAGE_PADDING,
    y_offset: float = 0.0,
    min_confidence: float = MIN_CONFIDENCE,
) -> list[ExtractedPriceRecord]:
    """
    Transform a raw OCR service result into candidate price records.

    Coordinates are shifted to remove the padding added before OCR, and
    moved down by ``y_offset`` so records from stacked sections share one
    vertical axis.
    """
    image_width = float(raw_result.get("image_width", 0)) - 2 * padding
    detections = raw_result.get("detections") or []

    detection_data: list[dict[str, Any]] = []
    for detection in detections:
        try:
            bbox, (text, confidence) = detection
        except (TypeError, ValueError) as exc:
            raise ValueError(f"malformed OCR detection: {detection!r}") from exc
        if not isinstance(text, str) or not _is_number(confidence):
            raise ValueError(f"malformed OCR detection: {detection!r}")

        if confidence < min_confidence:
            continue
        if len(text.strip()) < MIN_TEXT_LENGTH:
            continue

        xs = [p[0] - padding for p in bbox]
        ys = [p[1] - padding + y_offset for p in bbox]
        if not xs or not all(math.isfinite(v) for v in xs + ys):
            raise ValueError(f"malformed OCR bounding box: {bbox!r}")
        detection_data.append(
            {
                "text": text,
                "confidence": float(confidence),
                "center_y": sum(ys) / len(ys),
                "y_min": min(ys),
                "y_max": max(ys),
                "min_x": min(xs),
                "max_x": max(xs),
            }
        )

    detection_data.sort(key=lambda d: (d["center_y"], d["min_x"]))
    lines = _group_detections_into_lines(detection_data, image_width)

    records = []
    for line in lines:
        record = _line_to_record(line)
        if record is not None:
            records.append(record)
    return records
