"""Locale-aware folding of keyword text into comparison keys."""

from __future__ import annotations

import re
from typing import Final, Mapping

# Turkish letters and their ASCII base letters, both cases.
TURKISH_DIACRITICS: Final[Mapping[str, str]] = {
    "ı": "i",
    "İ": "i",
    "ğ": "g",
    "Ğ": "g",
    "ü": "u",
    "Ü": "u",
    "ş": "s",
    "Ş": "s",
    "ö": "o",
    "Ö": "o",
    "ç": "c",
    "Ç": "c",
}

_WHITESPACE_RE = re.compile(r"\s+")


class Normalizer:
    """Fold keywords into lowercase, diacritic-free, whitespace-collapsed keys."""

    __slots__ = ("_table", "_characters")

    def __init__(self, table: Mapping[str, str] | None = None) -> None:
        mapping = dict(TURKISH_DIACRITICS if table is None else table)
        for source, target in mapping.items():
            if len(source) != 1:
                raise ValueError(f"Diacritic table keys must be single characters, got {source!r}")
            if not target.isascii():
                raise ValueError(f"Diacritic {source!r} must map to ASCII, got {target!r}")
        self._table = str.maketrans(mapping)
        self._characters = frozenset(mapping)

    @property
    def characters(self) -> frozenset[str]:
        return self._characters

    def normalize(self, text: str) -> str:
        if not text:
            return ""
        # Folding before lower() keeps "İ" from turning into "i" plus a combining dot.
        folded = text.translate(self._table).lower().translate(self._table)
        return _WHITESPACE_RE.sub(" ", folded).strip()

    def has_locale_diacritics(self, text: str) -> bool:
        if not text:
            return False
        return any(char in self._characters for char in text)


DEFAULT_NORMALIZER: Final[Normalizer] = Normalizer()


def normalize(text: str) -> str:
    """Return the comparison key of ``text`` using the default Turkish table."""

    return DEFAULT_NORMALIZER.normalize(text)


def has_locale_diacritics(text: str) -> bool:
    """Return True when the raw ``text`` contains a Turkish diacritic letter."""

    return DEFAULT_NORMALIZER.has_locale_diacritics(text)


__all__ = [
    "DEFAULT_NORMALIZER",
    "Normalizer",
    "TURKISH_DIACRITICS",
    "has_locale_diacritics",
    "normalize",
]
