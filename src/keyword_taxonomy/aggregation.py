"""Volume totals, presentation order and the summary view of grouped keywords."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Sequence

from .dedup import sort_by_volume
from .models import GROUP_ORDER, Group, Subgroup, calculate_total_volume


@dataclass(slots=True)
class GroupSummary:
    id: str
    name: str
    count: int
    volume: int
    subgroup_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "count": self.count,
            "volume": self.volume,
            "subgroup_count": self.subgroup_count,
        }


@dataclass(slots=True)
class GroupingSummary:
    """Derived counts over grouped output; cheap to rebuild at any time."""

    total_groups: int = 0
    total_keywords: int = 0
    total_volume: int = 0
    by_group: List[GroupSummary] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_groups": self.total_groups,
            "total_keywords": self.total_keywords,
            "total_volume": self.total_volume,
            "by_group": [entry.to_dict() for entry in self.by_group],
        }


def _aggregate_subgroup(subgroup: Subgroup) -> Subgroup:
    return Subgroup(
        name=subgroup.name,
        display_name=subgroup.display_name,
        keywords=sort_by_volume(subgroup.keywords),
        total_volume=calculate_total_volume(subgroup.keywords),
    )


def _aggregate_group(item: Group) -> Group:
    subgroups = None
    if item.subgroups is not None:
        subgroups = sorted(
            (_aggregate_subgroup(subgroup) for subgroup in item.subgroups),
            key=lambda subgroup: subgroup.total_volume,
            reverse=True,
        )
    return Group(
        id=item.id,
        display_name=item.display_name,
        icon=item.icon,
        keywords=sort_by_volume(item.keywords),
        subgroups=subgroups,
        total_volume=calculate_total_volume(item.keywords),
    )


def aggregate(groups: Iterable[Group], *, order: Sequence[str] | None = GROUP_ORDER) -> List[Group]:
    """Return new groups with totals filled in and every level sorted.

    Members and subgroups are ordered by volume, highest first, keeping input
    order on ties. Top-level groups follow ``order``; ids it does not list keep
    their relative order after the listed ones. With ``order=None`` the
    top-level groups are ordered by total volume instead.
    """

    aggregated = [_aggregate_group(item) for item in groups]
    if order is None:
        return sorted(aggregated, key=lambda item: item.total_volume, reverse=True)
    rank = {group_id: position for position, group_id in enumerate(order)}
    return sorted(aggregated, key=lambda item: rank.get(item.id, len(rank)))


def summarize(groups: Iterable[Group]) -> GroupingSummary:
    """Summarize grouped output.

    ``total_keywords`` counts placements, so a record that appears in Brands
    and Price is counted twice.
    """

    entries = [
        GroupSummary(
            id=item.id,
            name=item.display_name,
            count=len(item.keywords),
            volume=item.total_volume,
            subgroup_count=len(item.subgroups or ()),
        )
        for item in groups
    ]
    return GroupingSummary(
        total_groups=len(entries),
        total_keywords=sum(entry.count for entry in entries),
        total_volume=sum(entry.volume for entry in entries),
        by_group=entries,
    )


__all__ = ["GroupSummary", "GroupingSummary", "aggregate", "summarize"]
