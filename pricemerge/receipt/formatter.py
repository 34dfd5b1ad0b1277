"""Format merged price records for review (text) and exchange (JSON-ready dicts)."""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from typing import Any

from pricemerge.domain.prices import BoundingBox, ExtractedPriceRecord, MergedResult

CENTS = Decimal("0.01")
# Largest price accepted from exchanged records; totals must still quantize to cents.
MAX_PRICE = Decimal("999999999999.99")


def _format_price(price: Decimal) -> str:
    return str(price.quantize(CENTS))


def record_to_dict(record: ExtractedPriceRecord) -> dict[str, Any]:
    """Serialize a record; price is a string to keep minor-unit precision."""
    return {
        "item_name": record.item_name,
        "price": _format_price(record.price),
        "original_text": record.original_text,
        "confidence": record.confidence,
        "position": {
            "left": record.position.left,
            "top": record.position.top,
            "width": record.position.width,
            "height": record.position.height,
        },
        "category": record.category,
        "unit": record.unit,
    }


def _to_float(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"{field_name} must be a number, got {value!r}")
    try:
        number = float(value)
    except ValueError as exc:
        raise ValueError(f"{field_name} must be a number, got {value!r}") from exc
    if not math.isfinite(number):
        raise ValueError(f"{field_name} must be finite, got {value!r}")
    return number


def record_from_dict(data: Any) -> ExtractedPriceRecord:
    """
    Build a record from its dict form.

    ``position`` may be a full box dict or a bare vertical offset number.

    Raises:
        ValueError: if required fields are missing or malformed.
    """
    if not isinstance(data, dict):
        raise ValueError(f"record must be an object, got {type(data).__name__}")
    if "price" not in data:
        raise ValueError("record is missing 'price'")

    raw_price = data["price"]
    if isinstance(raw_price, bool) or not isinstance(raw_price, (int, float, str)):
        raise ValueError(f"price must be a number, got {raw_price!r}")
    try:
        price = Decimal(str(raw_price))
    except InvalidOperation as exc:
        raise ValueError(f"price must be a number, got {raw_price!r}") from exc
    if price.is_finite() and abs(price) > MAX_PRICE:
        raise ValueError(f"price out of range, got {raw_price!r}")

    raw_position = data.get("position", 0.0)
    if isinstance(raw_position, dict):
        position = BoundingBox(
            left=_to_float(raw_position.get("left", 0.0), "position.left"),
            top=_to_float(raw_position.get("top", 0.0), "position.top"),
            width=_to_float(raw_position.get("width", 0.0), "position.width"),
            height=_to_float(raw_position.get("height", 0.0), "position.height"),
        )
    else:
        position = BoundingBox(top=_to_float(raw_position, "position"))

    return ExtractedPriceRecord(
        item_name=str(data.get("item_name") or ""),
        price=price,
        original_text=str(data.get("original_text") or ""),
        confidence=_to_float(data.get("confidence", 0.0), "confidence"),
        position=position,
        category=data.get("category"),
        unit=data.get("unit"),
    )


def merged_result_to_dict(result: MergedResult) -> dict[str, Any]:
    """Serialize a merged result for JSON output."""
    return {
        "total_sections_considered": result.total_sections_considered,
        "aggregate_confidence": round(result.aggregate_confidence, 4),
        "item_count": len(result.prices),
        "total": _format_price(result.total),
        "prices": [record_to_dict(record) for record in result.prices],
    }


def format_merged_result(result: MergedResult) -> str:
    """
    Format a merged result as an aligned table for human review.

    Example:
        1. Rice 1lb            120.00  (90%)  [grocery]
    """
    lines = [
        f"Sections: {result.total_sections_considered}",
        f"Confidence: {result.aggregate_confidence:.0%}",
        f"Items ({len(result.prices)}):",
    ]
    if not result.prices:
        lines.append("  (no prices found)")
        return "\n".join(lines)

    names = [record.item_name or "(unnamed)" for record in result.prices]
    prices = [_format_price(record.price) for record in result.prices]
    name_width = max(len(name) for name in names)
    price_width = max(len(price) for price in prices)
    index_width = len(str(len(result.prices)))

    for i, (record, name, price) in enumerate(zip(result.prices, names, prices), 1):
        row = f"  {str(i).rjust(index_width)}. {name.ljust(name_width)}  {price.rjust(price_width)}"
        row += f"  ({record.confidence:.0%})"
        tags = [tag for tag in (record.category, record.unit) if tag]
        if tags:
            row += f"  [{', '.join(tags)}]"
        lines.append(row)

    lines.append(f"Total: {_format_price(result.total)}")
    return "\n".join(lines)
