"""Tests for merged result formatting and record (de)serialization."""

from decimal import Decimal

import pytest

from pricemerge.domain.prices import BoundingBox, ExtractedPriceRecord, MergedResult
from pricemerge.receipt.formatter import (
    format_merged_result,
    merged_result_to_dict,
    record_from_dict,
    record_to_dict,
)


def _result() -> MergedResult:
    return MergedResult(
        prices=(
            ExtractedPriceRecord(
                item_name="Rice 1lb",
                price=Decimal("120"),
                original_text="Rice 1lb 120.00",
                confidence=0.9,
                position=BoundingBox(left=12.0, top=40.0, width=300.0, height=18.0),
                category="grocery",
                unit="lb",
            ),
            ExtractedPriceRecord(item_name="", price=Decimal("5.5"), confidence=0.6),
        ),
        total_sections_considered=2,
        aggregate_confidence=0.8,
    )


def test_record_to_dict_uses_cent_precision_strings() -> None:
    data = record_to_dict(_result().prices[0])

    assert data["price"] == "120.00"
    assert data["position"] == {"left": 12.0, "top": 40.0, "width": 300.0, "height": 18.0}
    assert record_from_dict(data) == _result().prices[0]


def test_record_from_dict_accepts_bare_vertical_offset() -> None:
    record = record_from_dict({"item_name": "Milk", "price": 5.49, "confidence": "0.8", "position": 150})

    assert record.price == Decimal("5.49")
    assert record.confidence == 0.8
    assert record.position == BoundingBox(top=150.0)
    assert record.category is None


@pytest.mark.parametrize(
    "data",
    [
        {"item_name": "Milk"},
        {"price": "abc"},
        {"price": "-2.00"},
        {"price": True},
        {"price": "1e30"},
        {"price": "1.00", "position": "nan"},
        {"price": "1.00", "position": {"top": float("inf")}},
        {"price": "1.00", "confidence": float("nan")},
        {"price": "1.00", "confidence": "high"},
        ["price", "1.00"],
    ],
)
def test_record_from_dict_rejects_invalid_input(data: object) -> None:
    with pytest.raises(ValueError):
        record_from_dict(data)


def test_merged_result_to_dict() -> None:
    data = merged_result_to_dict(_result())

    assert data["total_sections_considered"] == 2
    assert data["aggregate_confidence"] == 0.8
    assert data["item_count"] == 2
    assert data["total"] == "125.50"
    assert [p["price"] for p in data["prices"]] == ["120.00", "5.50"]


def test_format_merged_result_lists_items() -> None:
    text = format_merged_result(_result())

    assert "Sections: 2" in text
    assert "Confidence: 80%" in text
    assert "1. Rice 1lb   120.00  (90%)  [grocery, lb]" in text
    assert "2. (unnamed)    5.50  (60%)" in text
    assert text.endswith("Total: 125.50")


def test_format_merged_result_empty() -> None:
    text = format_merged_result(MergedResult())

    assert "Items (0):" in text
    assert "(no prices found)" in text


def test_record_from_dict_accepts_largest_price() -> None:
    record = record_from_dict({"item_name": "Car", "price": "999999999999.99"})

    assert record_to_dict(record)["price"] == "999999999999.99"
