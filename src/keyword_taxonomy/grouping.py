"""Build the group hierarchy from deduplicated keyword records."""

from __future__ import annotations

import re
from typing import Any, Iterable, List, Mapping, Tuple

from .lexicons import LexiconSet, default_lexicons
from .matchers import KeywordIntent, KeywordMatchers, default_matchers
from .models import (
    BRANDS_GROUP_ID,
    COMPARISON_GROUP_ID,
    OTHER_GROUP_ID,
    PRICE_GROUP_ID,
    QUESTIONS_GROUP_ID,
    SIZES_GROUP_ID,
    Group,
    KeywordRecord,
    Subgroup,
    calculate_total_volume,
    ensure_records,
)
from .normalizer import DEFAULT_NORMALIZER, Normalizer

GENERIC_CLUSTER_LABEL = "Genel"
FALLBACK_CATEGORY_LABEL = "Diğer"

_INTENT_GROUPS = {
    KeywordIntent.PRICE: PRICE_GROUP_ID,
    KeywordIntent.COMPARISON: COMPARISON_GROUP_ID,
    KeywordIntent.QUESTION: QUESTIONS_GROUP_ID,
}

# Fragments are matched against the normalized category label.
_CATEGORY_ICONS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("marka", "brand"), "tag"),
    (("fiyat", "price"), "dollar-sign"),
    (("soru", "question"), "help-circle"),
    (("karsilastir", "compar"), "git-compare"),
    (("ebat", "size"), "ruler"),
    (("bilgi", "info"), "info"),
    (("rehber", "guide"), "book-open"),
)
_SLUG_SPACE_RE = re.compile(r"\s+")
_SLUG_STRIP_RE = re.compile(r"[^a-z0-9-]")


def _subgroups(buckets: Mapping[str, List[KeywordRecord]], *, lowercase_names: bool) -> List[Subgroup]:
    return [
        Subgroup(
            name=label.lower() if lowercase_names else label,
            display_name=label,
            keywords=list(members),
            total_volume=calculate_total_volume(members),
        )
        for label, members in buckets.items()
    ]


def _flat_group(group_id: str, members: List[KeywordRecord], lexicons: LexiconSet) -> Group:
    label = lexicons.label_for(group_id)
    return Group(
        id=group_id,
        display_name=label.display_name,
        icon=label.icon,
        keywords=list(members),
        total_volume=calculate_total_volume(members),
    )


def _nested_group(
    group_id: str,
    buckets: Mapping[str, List[KeywordRecord]],
    lexicons: LexiconSet,
    *,
    lowercase_names: bool,
) -> Group:
    label = lexicons.label_for(group_id)
    members = [record for bucket in buckets.values() for record in bucket]
    return Group(
        id=group_id,
        display_name=label.display_name,
        icon=label.icon,
        keywords=members,
        subgroups=_subgroups(buckets, lowercase_names=lowercase_names),
        total_volume=calculate_total_volume(members),
    )


def group(
    records: Iterable[KeywordRecord | Mapping[str, Any]],
    *,
    matchers: KeywordMatchers | None = None,
    lexicons: LexiconSet | None = None,
) -> List[Group]:
    """Classify records into Brands, Sizes, Price, Comparison, Questions and Other.

    Brand, size and intent are evaluated independently, so one record can sit
    in several groups at once. Only records that match none of the three land
    in Other. Empty groups are left out. Members keep input order here; use
    :func:`keyword_taxonomy.aggregation.aggregate` for the presentation order.
    """

    items = ensure_records(records)
    if matchers is None:
        matchers = default_matchers() if lexicons is None else KeywordMatchers.from_lexicons(lexicons)
    lexicons = lexicons or default_lexicons()

    brands: dict[str, List[KeywordRecord]] = {}
    sizes: dict[str, List[KeywordRecord]] = {}
    intents: dict[str, List[KeywordRecord]] = {group_id: [] for group_id in _INTENT_GROUPS.values()}
    other: List[KeywordRecord] = []

    for record in items:
        categorized = False

        brand = matchers.brand.match(record.keyword)
        if brand:
            brands.setdefault(brand, []).append(record)
            categorized = True

        size = matchers.size.match(record.keyword)
        if size:
            sizes.setdefault(size, []).append(record)
            categorized = True

        intent = matchers.intent.match(record.keyword)
        if intent is not None:
            intents[_INTENT_GROUPS[intent]].append(record)
            categorized = True

        if not categorized:
            other.append(record)

    groups: List[Group] = []
    if brands:
        groups.append(_nested_group(BRANDS_GROUP_ID, brands, lexicons, lowercase_names=True))
    if sizes:
        groups.append(_nested_group(SIZES_GROUP_ID, sizes, lexicons, lowercase_names=False))
    for group_id in (PRICE_GROUP_ID, COMPARISON_GROUP_ID, QUESTIONS_GROUP_ID):
        if intents[group_id]:
            groups.append(_flat_group(group_id, intents[group_id], lexicons))
    if other:
        groups.append(_flat_group(OTHER_GROUP_ID, other, lexicons))
    return groups


def _clean_label(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def assigned_category(record: KeywordRecord) -> str | None:
    """Return the category a previous tagging step stored on the record, if any."""

    return _clean_label(record.extra.get("keyword_cluster")) or _clean_label(record.extra.get("ai_category"))


def has_assigned_categories(
    records: Iterable[KeywordRecord],
    *,
    generic_label: str = GENERIC_CLUSTER_LABEL,
) -> bool:
    """True when any record carries a specific cluster or an ai_category."""

    for record in records:
        cluster = _clean_label(record.extra.get("keyword_cluster"))
        if cluster and cluster != generic_label:
            return True
        if _clean_label(record.extra.get("ai_category")):
            return True
    return False


def category_icon(label: str, *, normalizer: Normalizer = DEFAULT_NORMALIZER) -> str:
    normalized = normalizer.normalize(label)
    for fragments, icon in _CATEGORY_ICONS:
        if any(fragment in normalized for fragment in fragments):
            return icon
    return "folder"


def category_slug(label: str, *, normalizer: Normalizer = DEFAULT_NORMALIZER) -> str:
    slug = _SLUG_SPACE_RE.sub("-", normalizer.normalize(label))
    return _SLUG_STRIP_RE.sub("", slug)


def group_by_assigned_category(
    records: Iterable[KeywordRecord | Mapping[str, Any]],
    *,
    fallback_label: str = FALLBACK_CATEGORY_LABEL,
    normalizer: Normalizer = DEFAULT_NORMALIZER,
) -> List[Group]:
    """Group records by their stored category instead of the lexicon rules.

    Records without a category share the ``fallback_label`` bucket. Groups come
    back in first-seen order with their totals filled in.
    """

    buckets: dict[str, List[KeywordRecord]] = {}
    for record in ensure_records(records):
        label = assigned_category(record) or fallback_label
        buckets.setdefault(label, []).append(record)

    groups: List[Group] = []
    used_ids: set[str] = set()
    for position, (label, members) in enumerate(buckets.items(), start=1):
        group_id = category_slug(label, normalizer=normalizer) or f"category-{position}"
        candidate, suffix = group_id, 2
        while candidate in used_ids:
            candidate = f"{group_id}-{suffix}"
            suffix += 1
        used_ids.add(candidate)
        groups.append(
            Group(
                id=candidate,
                display_name=label,
                icon=category_icon(label, normalizer=normalizer),
                keywords=list(members),
                total_volume=calculate_total_volume(members),
            )
        )
    return groups


__all__ = [
    "FALLBACK_CATEGORY_LABEL",
    "GENERIC_CLUSTER_LABEL",
    "assigned_category",
    "category_icon",
    "category_slug",
    "group",
    "group_by_assigned_category",
    "has_assigned_categories",
]
