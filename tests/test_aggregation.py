from __future__ import annotations

from keyword_taxonomy.aggregation import aggregate, summarize
from keyword_taxonomy.grouping import group
from keyword_taxonomy.models import Group, KeywordRecord, Subgroup


def _keywords(records):
    return [record.keyword for record in records]


def test_aggregate_sorts_members_by_volume_and_keeps_ties_stable() -> None:
    item = Group(
        id="other",
        display_name="Diğer",
        keywords=[
            KeywordRecord("a", search_volume=5),
            KeywordRecord("b", search_volume=20),
            KeywordRecord("c"),
            KeywordRecord("d", search_volume=20),
        ],
    )

    (aggregated,) = aggregate([item])

    assert _keywords(aggregated.keywords) == ["b", "d", "a", "c"]
    assert aggregated.total_volume == 45


def test_aggregate_orders_subgroups_by_total_volume() -> None:
    records = [
        KeywordRecord("petlas yaz", search_volume=10),
        KeywordRecord("lassa kış", search_volume=40),
        KeywordRecord("petlas kış", search_volume=20),
        KeywordRecord("michelin yaz", search_volume=30),
    ]

    brands = next(item for item in aggregate(group(records)) if item.id == "brands")

    assert [subgroup.display_name for subgroup in brands.subgroups] == ["Lassa", "Petlas", "Michelin"]
    assert [subgroup.total_volume for subgroup in brands.subgroups] == [40, 30, 30]
    assert _keywords(brands.subgroups[1].keywords) == ["petlas kış", "petlas yaz"]
    assert brands.total_volume == 100


def test_aggregate_places_groups_in_fixed_order() -> None:
    groups = [
        Group(id="other", display_name="Diğer", keywords=[KeywordRecord("x", search_volume=999)]),
        Group(id="seasonal", display_name="Seasonal"),
        Group(id="questions", display_name="Sorular"),
        Group(id="brands", display_name="Markalar", subgroups=[]),
        Group(id="price", display_name="Fiyat"),
    ]

    ordered = [item.id for item in aggregate(groups)]

    assert ordered == ["brands", "price", "questions", "other", "seasonal"]


def test_aggregate_without_order_ranks_groups_by_volume() -> None:
    groups = [
        Group(id="kis", display_name="Kış", keywords=[KeywordRecord("kış", search_volume=5)]),
        Group(id="yaz", display_name="Yaz", keywords=[KeywordRecord("yaz", search_volume=50)]),
        Group(id="diger", display_name="Diğer", keywords=[KeywordRecord("oto", search_volume=5)]),
    ]

    ordered = [item.id for item in aggregate(groups, order=None)]

    assert ordered == ["yaz", "kis", "diger"]


def test_aggregate_recomputes_stale_totals() -> None:
    item = Group(
        id="sizes",
        display_name="Ebatlar",
        keywords=[KeywordRecord("205/55r16", search_volume=30)],
        subgroups=[
            Subgroup(
                name="205/55 R16",
                display_name="205/55 R16",
                keywords=[KeywordRecord("205/55r16", search_volume=30)],
                total_volume=7,
            )
        ],
        total_volume=0,
    )

    (aggregated,) = aggregate([item])

    assert aggregated.total_volume == 30
    assert aggregated.subgroups[0].total_volume == 30


def test_aggregate_leaves_input_untouched() -> None:
    members = [KeywordRecord("a", search_volume=1), KeywordRecord("b", search_volume=2)]
    item = Group(id="other", display_name="Diğer", keywords=members)

    (aggregated,) = aggregate([item])

    assert aggregated is not item
    assert _keywords(item.keywords) == ["a", "b"]
    assert item.total_volume == 0


def test_summarize_empty_input() -> None:
    summary = summarize(aggregate(group([])))

    assert summary.total_groups == 0
    assert summary.total_keywords == 0
    assert summary.total_volume == 0
    assert summary.by_group == []


def test_summarize_counts_placements() -> None:
    groups = aggregate(group([KeywordRecord("petlas 205/55r16 fiyatı", search_volume=50)]))

    summary = summarize(groups)

    assert summary.total_groups == 3
    assert summary.total_keywords == 3
    assert summary.total_volume == 150
    assert [entry.id for entry in summary.by_group] == ["brands", "sizes", "price"]
    assert [entry.subgroup_count for entry in summary.by_group] == [1, 1, 0]
    assert summary.to_dict()["by_group"][0] == {
        "id": "brands",
        "name": "Markalar",
        "count": 1,
        "volume": 50,
        "subgroup_count": 1,
    }
