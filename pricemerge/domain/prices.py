"""Data models for receipt price extraction and merging."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from pathlib import Path


@dataclass(frozen=True)
class BoundingBox:
    """Region of a detected line on the source image, in pixels."""

    left: float = 0.0
    top: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def shifted(self, dy: float) -> BoundingBox:
        """Return a copy moved down by ``dy`` pixels."""
        return BoundingBox(left=self.left, top=self.top + dy, width=self.width, height=self.height)


@dataclass(frozen=True)
class ExtractedPriceRecord:
    """A single candidate line item detected by OCR."""

    item_name: str
    price: Decimal
    original_text: str = ""
    # OCR self-reported certainty. Not validated here; the merge engine clamps it.
    confidence: float = 0.0
    position: BoundingBox = field(default_factory=BoundingBox)
    category: str | None = None
    unit: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.price, Decimal):
            object.__setattr__(self, "price", Decimal(str(self.price)))
        if not self.price.is_finite() or self.price < 0:
            raise ValueError(f"price must be a non-negative amount, got {self.price}")


@dataclass(frozen=True)
class SectionCapture:
    """One photographed region of a (possibly multi-photo) receipt."""

    image_reference: Path
    section_index: int  # 1-based, capture order
    capture_time: datetime = field(default_factory=datetime.now)


class MergePolicy(enum.Enum):
    """Duplicate detection policy used by the merge engine.

    SIMPLE treats records with the same price (to the cent) as duplicates.
    STRICT additionally treats records with near-identical names and prices
    within a relative tolerance as duplicates.
    """

    SIMPLE = "simple"
    STRICT = "strict"

    @classmethod
    def parse(cls, value: str | MergePolicy) -> MergePolicy:
        if isinstance(value, MergePolicy):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(p.value for p in cls)
            raise ValueError(f"Unknown merge policy {value!r} (expected one of: {choices})") from None


@dataclass(frozen=True)
class MergedResult:
    """Deduplicated, position-ordered line items from one merge invocation."""

    prices: tuple[ExtractedPriceRecord, ...] = ()
    total_sections_considered: int = 0
    aggregate_confidence: float = 0.0

    @property
    def total(self) -> Decimal:
        return sum((record.price for record in self.prices), Decimal("0"))
