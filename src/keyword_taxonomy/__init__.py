"""Keyword deduplication and rule-based grouping for keyword research data."""

from __future__ import annotations

from .aggregation import GroupingSummary, aggregate, summarize
from .config import Settings
from .dedup import deduplicate
from .grouping import group
from .models import Group, InvalidKeywordRecordError, KeywordRecord, Subgroup
from .normalizer import has_locale_diacritics, normalize

__all__ = [
    "Group",
    "GroupingResult",
    "GroupingSummary",
    "InvalidKeywordRecordError",
    "KeywordGroupingPipeline",
    "KeywordRecord",
    "Settings",
    "Subgroup",
    "aggregate",
    "deduplicate",
    "group",
    "group_keywords",
    "has_locale_diacritics",
    "normalize",
    "summarize",
]


def __getattr__(name: str):  # pragma: no cover - small helper
    if name in {"GroupingResult", "KeywordGroupingPipeline", "group_keywords"}:
        from . import pipeline

        return getattr(pipeline, name)
    raise AttributeError(f"module 'keyword_taxonomy' has no attribute {name}")
