"""Independent detectors for brand, size and search intent."""

from __future__ import annotations

import re
from enum import Enum
from typing import Final, Pattern, Sequence, Tuple

from .lexicons import BrandEntry, Lexicon, LexiconSet, default_lexicons
from .normalizer import DEFAULT_NORMALIZER, Normalizer

# Width, aspect ratio, optional radial marker, rim diameter: 205/55R16, 205 55 16.
SIZE_PATTERN: Final[Pattern[str]] = re.compile(r"(\d{3})\s*[/\s]?\s*(\d{2,3})\s*[rR]?\s*(\d{2})")


class KeywordIntent(str, Enum):
    PRICE = "price"
    COMPARISON = "comparison"
    QUESTION = "question"


class BrandMatcher:
    """Return the display name of the first lexicon brand contained in a keyword."""

    def __init__(
        self,
        brands: Sequence[BrandEntry],
        *,
        normalizer: Normalizer = DEFAULT_NORMALIZER,
    ) -> None:
        self._normalizer = normalizer
        self._brands: Tuple[Tuple[str, str], ...] = tuple(
            (normalizer.normalize(entry.term), entry.display)
            for entry in brands
            if normalizer.normalize(entry.term)
        )

    def match(self, keyword: str) -> str | None:
        normalized = self._normalizer.normalize(keyword)
        if not normalized:
            return None
        # Plain containment tolerates concatenated tokens such as "petlaslastik".
        for term, display in self._brands:
            if term in normalized:
                return display
        return None


class SizeMatcher:
    """Extract the first tire size from the raw keyword text."""

    def __init__(self, pattern: Pattern[str] = SIZE_PATTERN) -> None:
        if pattern.groups < 3:
            raise ValueError("Size pattern needs width, ratio and diameter groups")
        self._pattern = pattern

    def match(self, keyword: str) -> str | None:
        found = self._pattern.search(keyword or "")
        if found is None:
            return None
        width, ratio, diameter = found.group(1, 2, 3)
        return f"{width}/{ratio} R{diameter}"


class _CompiledLexicon:
    __slots__ = ("terms", "patterns")

    def __init__(self, lexicon: Lexicon, normalizer: Normalizer) -> None:
        terms = tuple(term for term in (normalizer.normalize(entry) for entry in lexicon.entries) if term)
        self.terms = terms
        self.patterns: Tuple[Pattern[str], ...] | None = None
        if lexicon.whole_word:
            self.patterns = tuple(re.compile(rf"(?<!\w){re.escape(term)}(?!\w)") for term in terms)

    def contains(self, normalized: str) -> bool:
        if self.patterns is not None:
            return any(pattern.search(normalized) for pattern in self.patterns)
        return any(term in normalized for term in self.terms)


class IntentMatcher:
    """Assign at most one intent, checking price, then comparison, then question."""

    def __init__(
        self,
        price: Lexicon,
        comparison: Lexicon,
        question: Lexicon,
        *,
        normalizer: Normalizer = DEFAULT_NORMALIZER,
    ) -> None:
        self._normalizer = normalizer
        self._ordered = (
            (KeywordIntent.PRICE, _CompiledLexicon(price, normalizer)),
            (KeywordIntent.COMPARISON, _CompiledLexicon(comparison, normalizer)),
            (KeywordIntent.QUESTION, _CompiledLexicon(question, normalizer)),
        )

    def match(self, keyword: str) -> KeywordIntent | None:
        normalized = self._normalizer.normalize(keyword)
        if not normalized:
            return None
        for intent, lexicon in self._ordered:
            if lexicon.contains(normalized):
                return intent
        return None


class KeywordMatchers:
    """Bundle of the three matchers built from one lexicon set."""

    __slots__ = ("brand", "size", "intent")

    def __init__(
        self,
        brand: BrandMatcher,
        size: SizeMatcher,
        intent: IntentMatcher,
    ) -> None:
        self.brand = brand
        self.size = size
        self.intent = intent

    @classmethod
    def from_lexicons(
        cls,
        lexicons: LexiconSet | None = None,
        *,
        normalizer: Normalizer = DEFAULT_NORMALIZER,
        size_pattern: Pattern[str] = SIZE_PATTERN,
    ) -> KeywordMatchers:
        lexicons = lexicons or default_lexicons()
        return cls(
            brand=BrandMatcher(lexicons.brands, normalizer=normalizer),
            size=SizeMatcher(size_pattern),
            intent=IntentMatcher(
                lexicons.price,
                lexicons.comparison,
                lexicons.question,
                normalizer=normalizer,
            ),
        )


_DEFAULT_MATCHERS: Final[KeywordMatchers] = KeywordMatchers.from_lexicons()


def default_matchers() -> KeywordMatchers:
    return _DEFAULT_MATCHERS


def detect_brand(keyword: str) -> str | None:
    return default_matchers().brand.match(keyword)


def detect_size(keyword: str) -> str | None:
    return default_matchers().size.match(keyword)


def detect_intent(keyword: str) -> KeywordIntent | None:
    return default_matchers().intent.match(keyword)


__all__ = [
    "BrandMatcher",
    "IntentMatcher",
    "KeywordIntent",
    "KeywordMatchers",
    "SIZE_PATTERN",
    "SizeMatcher",
    "default_matchers",
    "detect_brand",
    "detect_intent",
    "detect_size",
]
