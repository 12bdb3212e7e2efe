"""Collapse keyword variants that differ only by locale diacritics."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Iterable, List, Sequence, TypeVar

from .models import KeywordRecord
from .normalizer import DEFAULT_NORMALIZER, Normalizer

logger = logging.getLogger(__name__)

_Number = TypeVar("_Number", int, float)


@dataclass(slots=True)
class DeduplicationResult:
    """Deduplicated records plus the merge statistics shown next to them."""

    records: List[KeywordRecord]
    original_count: int

    @property
    def duplicates_merged(self) -> int:
        return self.original_count - len(self.records)

    @property
    def total_volume(self) -> int:
        return sum(record.volume for record in self.records)

    @property
    def avg_volume(self) -> int:
        if not self.records:
            return 0
        # Halves round up: floor(total / count + 0.5) in integer arithmetic.
        count = len(self.records)
        return (2 * self.total_volume + count) // (2 * count)

    @property
    def max_volume(self) -> int:
        return max((record.volume for record in self.records), default=0)

    @property
    def min_volume(self) -> int:
        return min((record.volume for record in self.records), default=0)

    def stats(self) -> dict[str, Any]:
        return {
            "total": len(self.records),
            "avg_volume": self.avg_volume,
            "total_volume": self.total_volume,
            "max_volume": self.max_volume,
            "min_volume": self.min_volume,
            "original_count": self.original_count,
            "duplicates_merged": self.duplicates_merged,
        }


def _merge_metric(left: _Number | None, right: _Number | None) -> _Number | None:
    # Metrics are non-negative, so a missing side never beats a present one.
    if left is None:
        return right
    if right is None:
        return left
    return max(left, right)


def merge_records(
    existing: KeywordRecord,
    incoming: KeywordRecord,
    *,
    normalizer: Normalizer = DEFAULT_NORMALIZER,
) -> KeywordRecord:
    """Merge two records that share a normalized key.

    The merged volume and cpc are the maxima of both sides. The record whose
    keyword carries locale diacritics supplies the identity; when both or
    neither do, the incoming record only wins with a strictly higher volume.
    """

    search_volume = _merge_metric(existing.search_volume, incoming.search_volume)
    cpc = _merge_metric(existing.cpc, incoming.cpc)

    existing_marked = normalizer.has_locale_diacritics(existing.keyword)
    incoming_marked = normalizer.has_locale_diacritics(incoming.keyword)
    if incoming_marked and not existing_marked:
        identity = incoming
    elif existing_marked and not incoming_marked:
        identity = existing
    elif incoming.volume > existing.volume:
        identity = incoming
    else:
        identity = existing
    return replace(identity, search_volume=search_volume, cpc=cpc)


def deduplicate(
    records: Iterable[KeywordRecord],
    *,
    normalizer: Normalizer | None = None,
) -> List[KeywordRecord]:
    """Return one surviving record per normalized keyword.

    Survivors come back in the order their key was first seen; callers that
    need an order should sort.
    """

    active = normalizer or DEFAULT_NORMALIZER
    survivors: dict[str, KeywordRecord] = {}
    for record in records:
        key = active.normalize(record.keyword)
        existing = survivors.get(key)
        if existing is None:
            survivors[key] = record
            continue
        survivors[key] = merge_records(existing, record, normalizer=active)
    return list(survivors.values())


def deduplicate_with_report(
    records: Sequence[KeywordRecord],
    *,
    normalizer: Normalizer | None = None,
) -> DeduplicationResult:
    result = DeduplicationResult(
        records=deduplicate(records, normalizer=normalizer),
        original_count=len(records),
    )
    if result.duplicates_merged:
        logger.debug(
            "dedup.merged original=%s remaining=%s merged=%s",
            result.original_count,
            len(result.records),
            result.duplicates_merged,
        )
    return result


def sort_by_volume(records: Iterable[KeywordRecord]) -> List[KeywordRecord]:
    """Stable sort by search volume, highest first; missing volume counts as 0."""

    return sorted(records, key=lambda record: record.volume, reverse=True)


__all__ = [
    "DeduplicationResult",
    "deduplicate",
    "deduplicate_with_report",
    "merge_records",
    "sort_by_volume",
]
