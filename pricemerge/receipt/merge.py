"""Merge OCR line items from one or more receipt sections.

The engine flattens the sections in capture order, resolves duplicates by
keeping the more confident record at the position of the first occurrence,
then restores top-to-bottom receipt order.
"""

from __future__ import annotations

import dataclasses
import math
from collections.abc import Iterable, Sequence

from pricemerge.domain.prices import ExtractedPriceRecord, MergedResult, MergePolicy
from pricemerge.receipt.similarity import DEFAULT_MERGE_CONFIG, MergeConfig, is_duplicate
from pricemerge.runtime import get_logger

logger = get_logger(__name__)


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    if math.isnan(value):
        return low
    return max(low, min(high, value))


def _normalized(record: ExtractedPriceRecord) -> ExtractedPriceRecord:
    """Return a fresh copy of the record with confidence clamped to [0, 1]."""
    return dataclasses.replace(record, confidence=_clamp(float(record.confidence)))


def _find_duplicate_index(
    candidate: ExtractedPriceRecord,
    survivors: list[ExtractedPriceRecord],
    policy: MergePolicy,
    config: MergeConfig,
) -> int | None:
    for idx, existing in enumerate(survivors):
        if is_duplicate(candidate, existing, policy, config):
            return idx  # First match wins
    return None


def deduplicate(
    records: Iterable[ExtractedPriceRecord],
    policy: MergePolicy | str = MergePolicy.SIMPLE,
    config: MergeConfig | None = None,
) -> list[ExtractedPriceRecord]:
    """
    Collapse duplicate records, keeping the higher-confidence one of each conflict.

    Survivors keep the slot of the first record of their group. On equal
    confidence the record already kept wins.
    """
    policy = MergePolicy.parse(policy)
    if config is None:
        config = DEFAULT_MERGE_CONFIG

    survivors: list[ExtractedPriceRecord] = []
    for candidate in records:
        candidate = _normalized(candidate)
        idx = _find_duplicate_index(candidate, survivors, policy, config)
        if idx is None:
            survivors.append(candidate)
            continue

        existing = survivors[idx]
        if candidate.confidence > existing.confidence:
            logger.debug(
                "Replacing %r (%.2f) with %r (%.2f) at %s",
                existing.item_name,
                existing.confidence,
                candidate.item_name,
                candidate.confidence,
                existing.price,
            )
            survivors[idx] = candidate
        else:
            logger.debug(
                "Dropping %r (%.2f), duplicate of %r (%.2f)",
                candidate.item_name,
                candidate.confidence,
                existing.item_name,
                existing.confidence,
            )
    return survivors


def aggregate_confidence(
    records: Sequence[ExtractedPriceRecord],
    section_count: int,
    config: MergeConfig | None = None,
) -> float:
    """Mean record confidence plus a corroboration bonus per extra section, clamped to [0, 1]."""
    if not records:
        return 0.0
    if config is None:
        config = DEFAULT_MERGE_CONFIG

    mean = sum(_clamp(r.confidence) for r in records) / len(records)
    bonus = config.section_bonus * max(section_count - 1, 0)
    return _clamp(mean + bonus)


def merge(
    sections: Sequence[Sequence[ExtractedPriceRecord]],
    policy: MergePolicy | str = MergePolicy.SIMPLE,
    config: MergeConfig | None = None,
) -> MergedResult:
    """
    Merge per-section OCR records into one deduplicated, position-ordered result.

    Args:
        sections: One record sequence per scanned image, in capture order.
            A single photo is a one-element sequence.
        policy: Duplicate detection policy, or its name ('simple' or 'strict').
        config: Tolerances and section bonus. Defaults to MergeConfig().

    Returns:
        MergedResult with survivors sorted by vertical position (stable).
    """
    policy = MergePolicy.parse(policy)
    if config is None:
        config = DEFAULT_MERGE_CONFIG

    flattened = [record for section in sections for record in section]
    survivors = deduplicate(flattened, policy, config)
    # sorted() is stable, so equal positions keep their post-dedup order.
    ordered = sorted(survivors, key=lambda r: r.position.top)

    section_count = len(sections)
    result = MergedResult(
        prices=tuple(ordered),
        total_sections_considered=section_count,
        aggregate_confidence=aggregate_confidence(ordered, section_count, config),
    )
    logger.debug(
        "Merged %d candidates from %d section(s) into %d item(s) [%s], confidence %.2f",
        len(flattened),
        section_count,
        len(ordered),
        policy.value,
        result.aggregate_confidence,
    )
    return result
