"""End-to-end keyword grouping: validate, deduplicate, classify, aggregate."""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Protocol, Sequence

from .aggregation import GroupingSummary, aggregate, summarize
from .config import Settings
from .dedup import DeduplicationResult, deduplicate_with_report
from .grouping import group, group_by_assigned_category, has_assigned_categories
from .lexicons import LexiconSet, load_lexicons
from .matchers import KeywordMatchers
from .models import Group, InvalidKeywordRecordError, KeywordRecord
from .normalizer import DEFAULT_NORMALIZER, Normalizer
from .observability import MetricsRecorder

logger = logging.getLogger(__name__)
_configured_level = os.getenv("KEYWORD_TAXONOMY_LOG_LEVEL")
if _configured_level:
    level_value = getattr(logging, _configured_level.upper(), None)
    if isinstance(level_value, int):
        logger.setLevel(level_value)
    elif logger.level == logging.NOTSET:
        logger.setLevel(logging.INFO)
elif logger.level == logging.NOTSET:
    logger.setLevel(logging.INFO)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setLevel(logging.INFO)
    formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)
logger.propagate = False


class KeywordSource(Protocol):
    """Storage collaborator that hands over the raw records of a project."""

    def fetch_raw_keywords(self, project_id: str) -> Sequence[Mapping[str, Any] | KeywordRecord]:
        ...


@dataclass(slots=True)
class InvalidRecord:
    index: int
    reason: str


@dataclass(slots=True)
class GroupingResult:
    """Output of one pipeline run, ready to serialize for a display layer."""

    groups: List[Group]
    summary: GroupingSummary
    deduplication: DeduplicationResult
    skipped_invalid: List[InvalidRecord] = field(default_factory=list)
    strategy: str = "rules"

    def to_dict(self, *, include_groups: bool = True) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "strategy": self.strategy,
            "summary": self.summary.to_dict(),
            "stats": self.deduplication.stats(),
            "skipped_invalid": [
                {"index": item.index, "reason": item.reason} for item in self.skipped_invalid
            ],
        }
        if include_groups:
            payload["groups"] = [item.to_dict() for item in self.groups]
        return payload


class KeywordGroupingPipeline:
    """Run the grouping stages over a fully materialized list of records.

    The pipeline keeps no state between runs; one instance can be shared
    between threads.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        lexicons: LexiconSet | None = None,
        normalizer: Normalizer | None = None,
        metrics: MetricsRecorder | None = None,
    ) -> None:
        self._settings = settings or Settings.from_env()
        self._lexicons = lexicons or load_lexicons(self._settings.lexicon_path)
        self._normalizer = normalizer or DEFAULT_NORMALIZER
        self._matchers = KeywordMatchers.from_lexicons(self._lexicons, normalizer=self._normalizer)
        self._metrics = metrics or MetricsRecorder.from_settings(self._settings)

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def lexicons(self) -> LexiconSet:
        return self._lexicons

    def prepare(
        self, payloads: Iterable[Mapping[str, Any] | KeywordRecord]
    ) -> tuple[List[KeywordRecord], List[InvalidRecord]]:
        """Turn raw payloads into records, honouring the invalid record policy."""

        records: List[KeywordRecord] = []
        skipped: List[InvalidRecord] = []
        for index, payload in enumerate(payloads):
            if isinstance(payload, KeywordRecord):
                records.append(payload)
                continue
            try:
                records.append(KeywordRecord.from_mapping(payload, index=index))
            except InvalidKeywordRecordError as exc:
                if not self._settings.skip_invalid_records:
                    raise
                skipped.append(InvalidRecord(index=index, reason=exc.reason))
        if skipped:
            logger.warning(
                "keyword_grouping.invalid_records skipped=%s first_index=%s reason=%s",
                len(skipped),
                skipped[0].index,
                skipped[0].reason,
            )
            self._metrics.increment("pipeline.invalid_records", value=len(skipped))
        return records, skipped

    def run(self, payloads: Iterable[Mapping[str, Any] | KeywordRecord]) -> GroupingResult:
        start = time.perf_counter()
        records, skipped = self.prepare(payloads)
        deduplication = deduplicate_with_report(records, normalizer=self._normalizer)

        strategy = "rules"
        if self._settings.use_assigned_categories and has_assigned_categories(
            deduplication.records, generic_label=self._settings.generic_cluster_label
        ):
            strategy = "assigned"
            groups = aggregate(
                group_by_assigned_category(
                    deduplication.records,
                    fallback_label=self._settings.fallback_category_label,
                    normalizer=self._normalizer,
                ),
                order=None,
            )
        else:
            groups = aggregate(group(deduplication.records, matchers=self._matchers, lexicons=self._lexicons))

        summary = summarize(groups)
        elapsed = time.perf_counter() - start

        self._metrics.record_grouping_run(
            strategy=strategy,
            duplicates_merged=deduplication.duplicates_merged,
            groups=summary.total_groups,
            duration_seconds=elapsed,
        )
        logger.info(
            "keyword_grouping.completed strategy=%s input=%s unique=%s merged=%s groups=%s placements=%s volume=%s duration=%.4fs",
            strategy,
            deduplication.original_count,
            len(deduplication.records),
            deduplication.duplicates_merged,
            summary.total_groups,
            summary.total_keywords,
            summary.total_volume,
            elapsed,
        )
        return GroupingResult(
            groups=groups,
            summary=summary,
            deduplication=deduplication,
            skipped_invalid=skipped,
            strategy=strategy,
        )

    def run_for_project(self, source: KeywordSource, project_id: str) -> GroupingResult:
        payloads = list(source.fetch_raw_keywords(project_id))
        logger.debug("keyword_grouping.fetched project=%s records=%s", project_id, len(payloads))
        return self.run(payloads)


def group_keywords(
    payloads: Iterable[Mapping[str, Any] | KeywordRecord],
    *,
    settings: Settings | None = None,
    lexicons: LexiconSet | None = None,
) -> GroupingResult:
    """Convenience wrapper running a fresh pipeline once."""

    return KeywordGroupingPipeline(settings, lexicons=lexicons).run(payloads)


__all__ = [
    "GroupingResult",
    "InvalidRecord",
    "KeywordGroupingPipeline",
    "KeywordSource",
    "group_keywords",
]
