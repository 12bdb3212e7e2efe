"""Keyword records and the group hierarchy built from them."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, List, Mapping

_CORE_FIELDS = frozenset({"id", "keyword", "search_volume", "cpc"})

BRANDS_GROUP_ID = "brands"
SIZES_GROUP_ID = "sizes"
PRICE_GROUP_ID = "price"
COMPARISON_GROUP_ID = "comparison"
QUESTIONS_GROUP_ID = "questions"
OTHER_GROUP_ID = "other"

# Presentation order of the rule-based groups.
GROUP_ORDER = (
    BRANDS_GROUP_ID,
    SIZES_GROUP_ID,
    PRICE_GROUP_ID,
    COMPARISON_GROUP_ID,
    QUESTIONS_GROUP_ID,
    OTHER_GROUP_ID,
)


class KeywordTaxonomyError(Exception):
    """Base class for errors raised by the grouping pipeline."""


class InvalidKeywordRecordError(KeywordTaxonomyError, ValueError):
    """Raised when a record cannot enter the pipeline."""

    def __init__(self, reason: str, *, index: int | None = None) -> None:
        self.reason = reason
        self.index = index
        prefix = f"Record {index}: " if index is not None else ""
        super().__init__(f"{prefix}{reason}")


def _coerce_number(value: object, name: str, index: int | None) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidKeywordRecordError(f"{name} must be numeric, got a boolean", index=index)
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        cleaned = value.strip()
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError as exc:
            raise InvalidKeywordRecordError(f"{name} must be numeric, got {value!r}", index=index) from exc
    else:
        raise InvalidKeywordRecordError(f"{name} must be numeric, got {type(value).__name__}", index=index)
    if math.isnan(number) or math.isinf(number):
        raise InvalidKeywordRecordError(f"{name} must be a finite number", index=index)
    if number < 0:
        raise InvalidKeywordRecordError(f"{name} must be non-negative, got {value!r}", index=index)
    return number


def _coerce_optional_int(value: object, name: str, index: int | None) -> int | None:
    number = _coerce_number(value, name, index)
    if number is None:
        return None
    if not number.is_integer():
        raise InvalidKeywordRecordError(f"{name} must be a whole number, got {value!r}", index=index)
    return int(number)


def _coerce_id(value: object, index: int | None) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError as exc:
        raise InvalidKeywordRecordError(f"id must be an integer, got {value!r}", index=index) from exc


@dataclass(slots=True, frozen=True)
class KeywordRecord:
    """A single harvested keyword observation.

    ``extra`` carries every descriptive field the pipeline does not interpret
    (competition, source, ai_category, ...). Records are never mutated; merges
    build new instances with ``dataclasses.replace``.
    """

    keyword: str
    id: int | None = None
    search_volume: int | None = None
    cpc: float | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.keyword, str) or not self.keyword.strip():
            raise InvalidKeywordRecordError("keyword must be a non-empty string")
        if self.search_volume is not None and self.search_volume < 0:
            raise InvalidKeywordRecordError("search_volume must be non-negative")
        if self.cpc is not None and self.cpc < 0:
            raise InvalidKeywordRecordError("cpc must be non-negative")
        if not isinstance(self.extra, MappingProxyType):
            object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    @property
    def volume(self) -> int:
        return self.search_volume or 0

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any], *, index: int | None = None) -> KeywordRecord:
        """Build a record from a raw mapping delivered by a storage collaborator."""

        if not isinstance(payload, Mapping):
            raise InvalidKeywordRecordError(
                f"expected a mapping, got {type(payload).__name__}", index=index
            )
        keyword = payload.get("keyword")
        if not isinstance(keyword, str) or not keyword.strip():
            raise InvalidKeywordRecordError("keyword is missing or empty", index=index)
        extra = {key: value for key, value in payload.items() if key not in _CORE_FIELDS}
        return cls(
            keyword=keyword,
            id=_coerce_id(payload.get("id"), index),
            search_volume=_coerce_optional_int(payload.get("search_volume"), "search_volume", index),
            cpc=_coerce_number(payload.get("cpc"), "cpc", index),
            extra=extra,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.id is not None:
            data["id"] = self.id
        data["keyword"] = self.keyword
        data["search_volume"] = self.search_volume
        data["cpc"] = self.cpc
        data.update(self.extra)
        return data


def ensure_records(items: Iterable[KeywordRecord | Mapping[str, Any]]) -> List[KeywordRecord]:
    """Accept records or raw mappings; reject anything without a usable keyword."""

    records: List[KeywordRecord] = []
    for index, item in enumerate(items):
        if isinstance(item, KeywordRecord):
            records.append(item)
        else:
            records.append(KeywordRecord.from_mapping(item, index=index))
    return records


def calculate_total_volume(records: Iterable[KeywordRecord]) -> int:
    return sum(record.volume for record in records)


@dataclass(slots=True)
class Subgroup:
    """A named partition inside a group, e.g. one brand or one size."""

    name: str
    display_name: str
    keywords: List[KeywordRecord] = field(default_factory=list)
    total_volume: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "keywords": [record.to_dict() for record in self.keywords],
            "total_volume": self.total_volume,
        }


@dataclass(slots=True)
class Group:
    """A top-level bucket of the taxonomy."""

    id: str
    display_name: str
    icon: str = "folder"
    keywords: List[KeywordRecord] = field(default_factory=list)
    subgroups: List[Subgroup] | None = None
    total_volume: int = 0

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "name": self.display_name,
            "icon": self.icon,
            "keywords": [record.to_dict() for record in self.keywords],
            "total_volume": self.total_volume,
        }
        if self.subgroups is not None:
            payload["subgroups"] = [subgroup.to_dict() for subgroup in self.subgroups]
        return payload


__all__ = [
    "BRANDS_GROUP_ID",
    "COMPARISON_GROUP_ID",
    "GROUP_ORDER",
    "OTHER_GROUP_ID",
    "PRICE_GROUP_ID",
    "QUESTIONS_GROUP_ID",
    "SIZES_GROUP_ID",
    "Group",
    "InvalidKeywordRecordError",
    "KeywordRecord",
    "KeywordTaxonomyError",
    "Subgroup",
    "calculate_total_volume",
    "ensure_records",
]
