"""Ordered vocabularies that drive brand and intent classification."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Tuple

import yaml

from .models import (
    BRANDS_GROUP_ID,
    COMPARISON_GROUP_ID,
    OTHER_GROUP_ID,
    PRICE_GROUP_ID,
    QUESTIONS_GROUP_ID,
    SIZES_GROUP_ID,
)


class LexiconLoadError(RuntimeError):
    """Raised when a lexicon file cannot be parsed."""


@dataclass(slots=True, frozen=True)
class BrandEntry:
    """A known brand; ``term`` is matched, ``display`` is shown."""

    term: str
    display_name: str | None = None

    @property
    def display(self) -> str:
        if self.display_name:
            return self.display_name
        return self.term[:1].upper() + self.term[1:]


@dataclass(slots=True, frozen=True)
class Lexicon:
    """An ordered, immutable list of terms.

    With ``whole_word`` set an entry only matches when it is not directly
    preceded or followed by another letter or digit.
    """

    name: str
    entries: Tuple[str, ...]
    whole_word: bool = False

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(slots=True, frozen=True)
class GroupLabel:
    display_name: str
    icon: str


@dataclass(slots=True, frozen=True)
class LexiconSet:
    """Everything the matchers and the grouper need to classify keywords."""

    brands: Tuple[BrandEntry, ...]
    price: Lexicon
    comparison: Lexicon
    question: Lexicon
    labels: Mapping[str, GroupLabel] = field(default_factory=dict)

    def label_for(self, group_id: str) -> GroupLabel:
        label = self.labels.get(group_id)
        if label is None:
            return GroupLabel(display_name=group_id.replace("-", " ").title(), icon="folder")
        return label


# Common tire brands. Order matters: the first contained entry wins, so longer
# names that share a prefix ("nokian") precede the shorter one ("nokia").
DEFAULT_BRANDS: Tuple[str, ...] = (
    "petlas", "lassa", "goodyear", "pirelli", "michelin", "continental",
    "bridgestone", "nokian", "nokia", "hankook", "dunlop", "falken",
    "yokohama", "toyo", "kumho", "nexen", "riken", "barum", "milestone",
    "firestone", "bfgoodrich", "general tire", "maxxis", "cooper",
    "gt radial", "sailun", "triangle", "linglong", "westlake", "goodride",
    "debica", "sava", "matador", "kormoran", "fulda", "semperit", "uniroyal",
    "kleber", "vredestein", "giti", "achilles", "accelera", "federal",
    "nankang", "zeetex", "apollo", "ceat", "mrf", "jk tyre",
)

DEFAULT_PRICE_TERMS: Tuple[str, ...] = (
    "fiyat", "fiyatı", "fiyatları", "fiyatlari", "ucuz", "indirim",
    "kampanya", "taksit", "kredi", "kaç para", "ne kadar", "uygun",
    "ekonomik", "hesaplı", "bütçe",
)

DEFAULT_COMPARISON_TERMS: Tuple[str, ...] = (
    "vs", "karşılaştırma", "fark", "farkı", "mı yoksa", "mi yoksa",
    "arasındaki", "hangisi daha", "en iyi",
)

DEFAULT_QUESTION_TERMS: Tuple[str, ...] = (
    "nasıl", "nedir", "ne zaman", "hangisi", "kaç", "neden", "niçin",
    "hangi", "mi", "mı", "mu", "mü", "ne", "kim", "nerede", "nereden",
)

DEFAULT_LABELS: Mapping[str, GroupLabel] = MappingProxyType(
    {
        BRANDS_GROUP_ID: GroupLabel("Markalar", "tag"),
        SIZES_GROUP_ID: GroupLabel("Ebatlar", "ruler"),
        PRICE_GROUP_ID: GroupLabel("Fiyat Aramaları", "dollar-sign"),
        COMPARISON_GROUP_ID: GroupLabel("Karşılaştırma", "git-compare"),
        QUESTIONS_GROUP_ID: GroupLabel("Sorular", "help-circle"),
        OTHER_GROUP_ID: GroupLabel("Diğer", "package"),
    }
)


def default_lexicons() -> LexiconSet:
    return LexiconSet(
        brands=tuple(BrandEntry(term) for term in DEFAULT_BRANDS),
        price=Lexicon("price", DEFAULT_PRICE_TERMS),
        comparison=Lexicon("comparison", DEFAULT_COMPARISON_TERMS),
        question=Lexicon("question", DEFAULT_QUESTION_TERMS),
        labels=DEFAULT_LABELS,
    )


def _clean_terms(values: Iterable[Any], section: str) -> Tuple[str, ...]:
    terms: list[str] = []
    for value in values:
        if isinstance(value, (dict, list)):
            raise LexiconLoadError(f"Lexicon section '{section}' must contain plain strings")
        text = str(value).strip()
        if text and text not in terms:
            terms.append(text)
    return tuple(terms)


def _parse_lexicon(raw: Any, base: Lexicon) -> Lexicon:
    if raw is None:
        return base
    if isinstance(raw, list):
        return replace(base, entries=_clean_terms(raw, base.name))
    if isinstance(raw, dict):
        entries = raw.get("entries")
        whole_word = raw.get("whole_word", base.whole_word)
        if not isinstance(whole_word, bool):
            raise LexiconLoadError(f"'{base.name}.whole_word' must be true or false")
        if entries is None:
            return replace(base, whole_word=whole_word)
        if not isinstance(entries, list):
            raise LexiconLoadError(f"'{base.name}.entries' must be a list")
        return Lexicon(base.name, _clean_terms(entries, base.name), whole_word=whole_word)
    raise LexiconLoadError(f"Lexicon section '{base.name}' must be a list or a mapping")


def _parse_brands(raw: Any) -> Tuple[BrandEntry, ...] | None:
    if raw is None:
        return None
    if not isinstance(raw, list):
        raise LexiconLoadError("Lexicon section 'brands' must be a list")
    brands: list[BrandEntry] = []
    for item in raw:
        if isinstance(item, dict):
            term = str(item.get("term", "")).strip()
            display = item.get("display")
            display_name = str(display).strip() if display is not None else None
        else:
            term = str(item).strip()
            display_name = None
        if not term:
            continue
        brands.append(BrandEntry(term=term, display_name=display_name or None))
    return tuple(brands)


def _parse_labels(raw: Any, base: Mapping[str, GroupLabel]) -> Mapping[str, GroupLabel]:
    if raw is None:
        return base
    if not isinstance(raw, dict):
        raise LexiconLoadError("Lexicon section 'labels' must be a mapping")
    labels = dict(base)
    for group_id, value in raw.items():
        current = labels.get(str(group_id), GroupLabel(str(group_id), "folder"))
        if isinstance(value, str):
            labels[str(group_id)] = GroupLabel(value.strip() or current.display_name, current.icon)
        elif isinstance(value, dict):
            name = str(value.get("name") or current.display_name).strip()
            icon = str(value.get("icon") or current.icon).strip()
            labels[str(group_id)] = GroupLabel(name, icon)
        else:
            raise LexiconLoadError(f"Label for group '{group_id}' must be a string or mapping")
    return MappingProxyType(labels)


def parse_lexicons(data: Mapping[str, Any] | None, *, base: LexiconSet | None = None) -> LexiconSet:
    """Overlay the sections present in ``data`` on top of ``base``."""

    lexicons = base or default_lexicons()
    if not data:
        return lexicons
    if not isinstance(data, Mapping):
        raise LexiconLoadError("Lexicon document must be a mapping of sections")
    brands = _parse_brands(data.get("brands"))
    return LexiconSet(
        brands=lexicons.brands if brands is None else brands,
        price=_parse_lexicon(data.get("price"), lexicons.price),
        comparison=_parse_lexicon(data.get("comparison"), lexicons.comparison),
        question=_parse_lexicon(data.get("question"), lexicons.question),
        labels=_parse_labels(data.get("labels"), lexicons.labels),
    )


def load_lexicons(path: str | Path | None) -> LexiconSet:
    """Load lexicons from a YAML file; return the defaults if it is missing."""

    if path is None:
        return default_lexicons()
    lexicon_path = Path(path)
    if not lexicon_path.exists():
        return default_lexicons()
    try:
        data = yaml.safe_load(lexicon_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise LexiconLoadError(f"Could not parse lexicon file {lexicon_path}: {exc}") from exc
    return parse_lexicons(data)


__all__ = [
    "BrandEntry",
    "DEFAULT_BRANDS",
    "DEFAULT_COMPARISON_TERMS",
    "DEFAULT_LABELS",
    "DEFAULT_PRICE_TERMS",
    "DEFAULT_QUESTION_TERMS",
    "GroupLabel",
    "Lexicon",
    "LexiconLoadError",
    "LexiconSet",
    "default_lexicons",
    "load_lexicons",
    "parse_lexicons",
]
