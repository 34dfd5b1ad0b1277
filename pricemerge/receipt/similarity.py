"""Similarity rules for deciding whether two OCR line items are the same item.

Pure functions only; consumed by the merge engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from pricemerge.domain.prices import ExtractedPriceRecord, MergePolicy


@dataclass(frozen=True)
class MergeConfig:
    """Tunables for duplicate detection and confidence aggregation."""

    exact_price_tolerance: Decimal = Decimal("0.01")
    name_similarity_threshold: float = 0.85
    relative_price_tolerance: Decimal = Decimal("0.10")  # 10% around the mean price
    section_bonus: float = 0.05  # per extra section


DEFAULT_MERGE_CONFIG = MergeConfig()


def text_similarity(a: str, b: str) -> float:
    """
    Jaccard index of the space-separated word sets of two strings.

    Case-sensitive: callers lower-case both inputs for case-insensitive
    comparison. Tokens are split on a single ASCII space only, so
    "1kg" and "1 kg" produce different tokens.
    """
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0

    words_a = set(a.split(" "))
    words_b = set(b.split(" "))
    return len(words_a & words_b) / len(words_a | words_b)


def _same_price(x: ExtractedPriceRecord, y: ExtractedPriceRecord, config: MergeConfig) -> bool:
    return abs(x.price - y.price) < config.exact_price_tolerance


def _similar_item(x: ExtractedPriceRecord, y: ExtractedPriceRecord, config: MergeConfig) -> bool:
    similarity = text_similarity(x.item_name.lower(), y.item_name.lower())
    if similarity <= config.name_similarity_threshold:
        return False

    price_sum = x.price + y.price
    # Relative difference is undefined for two zero prices.
    if price_sum == 0:
        return False

    mean_price = price_sum / 2
    return abs(x.price - y.price) / mean_price < config.relative_price_tolerance


def is_duplicate(
    x: ExtractedPriceRecord,
    y: ExtractedPriceRecord,
    policy: MergePolicy | str = MergePolicy.SIMPLE,
    config: MergeConfig | None = None,
) -> bool:
    """
    Return True if two records denote the same real-world line item.

    SIMPLE: prices equal to the cent.
    STRICT: prices equal to the cent, or names near-identical with prices
    within the relative tolerance band.
    """
    policy = MergePolicy.parse(policy)
    if config is None:
        config = DEFAULT_MERGE_CONFIG

    if _same_price(x, y, config):
        return True
    if policy is MergePolicy.STRICT:
        return _similar_item(x, y, config)
    return False
