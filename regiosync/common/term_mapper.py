"""Generic term mapping utilities.

This module provides a `TermMapper` class which centralises synonym -> canonical
value mappings used by the RegioWyniki parsers instead of ad-hoc if/else chains.

Design goals:
 - Normalise input (case-fold, strip accents, collapse whitespace, remove punctuation)
 - Provide fast O(1) lookup via pre-built dictionary of normalised synonyms
 - Allow runtime extension (register / bulk update) without breaking existing mappings
 - Keyword search inside free text (league tier detection in page headings)

Two default mappers are shipped:
 - form codes: Polish single-letter results (W = wygrana, R = remis, P = porażka)
   mapped onto W / D / L
 - league tiers: the Polish league vocabulary found in RegioWyniki headings
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, field
from typing import ClassVar, Dict, Iterable, Mapping, Optional

_WHITESPACE_RE = re.compile(r"\s+")
_PUNCT_RE = re.compile(r"[\.,;:_/\\()+\-\[\]{}]+")


def _strip_accents(value: str) -> str:
    """Return *value* with accents removed (NFKD decomposition -> drop marks)."""
    normalized = unicodedata.normalize("NFKD", value)
    return "".join(ch for ch in normalized if not unicodedata.combining(ch))


def _base_normalize(value: str) -> str:
    """Apply text normalisation pipeline used for dictionary keys.

    Steps:
      1. Lowercase
      2. Trim
      3. Remove accents
      4. Replace punctuation with space
      5. Collapse multiple whitespace to single space
    """
    v = value.lower().strip()
    v = _strip_accents(v)
    v = _PUNCT_RE.sub(" ", v)
    v = _WHITESPACE_RE.sub(" ", v).strip()
    return v


@dataclass
class TermMapper:
    """Generic normalising synonym mapper.

    Attributes
    -----------
    mappings: Dict[str, str]
        Dict of normalised synonym -> canonical value.
    label: str
        Optional label indicating the domain (e.g. "form") for easier debugging.
    """

    mappings: Dict[str, str] = field(default_factory=dict)
    label: str = ""
    _search_re: Optional[re.Pattern] = field(default=None, init=False, repr=False)

    # ---------------------------- Construction helpers ----------------------------
    @classmethod
    def from_groups(cls, groups: Mapping[str, Iterable[str]], label: str = "") -> "TermMapper":
        """Create a TermMapper from a mapping of canonical -> iterable of synonyms.

        Example
        -------
        groups = {"D": ["R", "remis", "draw"]}
        mapper = TermMapper.from_groups(groups, label="form")
        """
        inst = cls(label=label)
        inst.register_groups(groups)
        return inst

    # ---------------------------- Registration API ----------------------------
    def register(self, canonical: str, *synonyms: str) -> None:
        """Register synonyms for a canonical value.

        Existing synonyms are overwritten (idempotent). Canonical itself is also
        registered so passing only the canonical is fine.
        """
        for term in list(synonyms) + [canonical]:
            norm = _base_normalize(term)
            if not norm:
                continue
            self.mappings[norm] = canonical
        self._search_re = None

    def register_groups(self, groups: Mapping[str, Iterable[str]]) -> None:
        for canonical, syns in groups.items():
            self.register(canonical, *list(syns))

    # ---------------------------- Lookup ----------------------------
    def lookup(self, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        return self.mappings.get(_base_normalize(value))

    def search(self, text: Optional[str]) -> Optional[str]:
        """Return the canonical value of the leftmost whole-word synonym in *text*."""
        if not text or not self.mappings:
            return None
        if self._search_re is None:
            # Longest first so "ekstraklasa" wins over a shorter overlapping term
            terms = sorted(self.mappings, key=len, reverse=True)
            self._search_re = re.compile(
                r"\b(" + "|".join(re.escape(t) for t in terms) + r")\b"
            )
        m = self._search_re.search(_base_normalize(text))
        return self.mappings[m.group(1)] if m else None

    # ---------------------------- Default static mappers ----------------------------
    _FORM_INSTANCE: ClassVar[Optional["TermMapper"]] = None
    _LEAGUE_INSTANCE: ClassVar[Optional["TermMapper"]] = None

    @classmethod
    def default_form_mapper(cls) -> "TermMapper":
        """Single-letter result codes as rendered in RegioWyniki form columns."""
        if cls._FORM_INSTANCE is None:
            cls._FORM_INSTANCE = cls.from_groups(
                {"W": ["W"], "D": ["D", "R"], "L": ["L", "P"]},
                label="form(static)",
            )
        return cls._FORM_INSTANCE

    @classmethod
    def default_league_mapper(cls) -> "TermMapper":
        if cls._LEAGUE_INSTANCE is None:
            cls._LEAGUE_INSTANCE = cls.from_groups(
                {
                    "Ekstraklasa": [],
                    "Liga": [],
                    "Klasa": [],
                    "Okręgowa": ["Okregowa"],
                },
                label="league(static)",
            )
        return cls._LEAGUE_INSTANCE


def map_form_code(value: Optional[str]) -> Optional[str]:
    return TermMapper.default_form_mapper().lookup(value)


__all__ = ["TermMapper", "map_form_code"]
