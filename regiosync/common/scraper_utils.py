"""Shared pure scraper helpers.

RegioWyniki markup is not uniform across regions and page templates, so every
field is read through an ordered list of CSS selectors (a `FieldStrategy`).
The first selector that yields non-empty text wins. Keeping the fallbacks as
data makes them testable and easy to extend when the site changes.

All functions are intentionally side-effect free to ease testing.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from bs4.element import Comment, Tag

from .parsing import clean_text, url_path_segments

# Labels appended to the club heading on sub-pages ("Wisła Kraków Terminarz")
HEADING_SUFFIX_RE = re.compile(r"\b(?:Terminarz|Tabela)\b", re.IGNORECASE)


@dataclass(frozen=True)
class FieldStrategy:
    """Ordered selector fallbacks for one field of a row or page."""

    name: str
    selectors: tuple[str, ...]
    default: str = ""

    def extract(self, node: Tag) -> str:
        value = self.extract_optional(node)
        return value if value is not None else self.default

    def extract_optional(self, node: Tag) -> Optional[str]:
        for selector in self.selectors:
            for el in node.select(selector):
                text = clean_text(el.get_text(" "))
                if text:
                    return text
        return None


def node_text(node: Optional[Tag]) -> str:
    if node is None:
        return ""
    return clean_text(node.get_text(" ")) or ""


# Tags whose text is never page content
NON_CONTENT_TAGS = frozenset({"script", "style", "noscript", "template"})


def visible_text(node: Tag) -> str:
    """Text of *node* without script/style bodies and HTML comments."""
    parts = []
    for s in node.find_all(string=True):
        if isinstance(s, Comment):
            continue
        if any(p.name in NON_CONTENT_TAGS for p in s.parents):
            continue
        parts.append(str(s))
    return " ".join(parts)


def clean_club_heading(text: Optional[str]) -> str:
    """Strip sub-page labels from a club page heading."""
    if not text:
        return ""
    return clean_text(HEADING_SUFFIX_RE.sub(" ", text)) or ""


def find_labeled_value(node: Tag, labels: list[str]) -> Optional[str]:
    """Find a value rendered as <dt>Label</dt><dd>value</dd> or 'Label: value' text."""
    for label in labels:
        dt = node.find("dt", string=re.compile(rf"^\s*{re.escape(label)}\s*:?", re.I))
        if dt:
            dd = dt.find_next_sibling("dd")
            if dd:
                value = clean_text(dd.get_text(" "))
                if value:
                    return value
    text = node.get_text("\n")
    for label in labels:
        m = re.search(rf"{re.escape(label)}\s*:\s*([^\n\r]+)", text, re.I)
        if m:
            value = clean_text(m.group(1))
            if value:
                return value
    return None


def dedupe_preserving_order(items: list, key) -> list:
    seen: set = set()
    out = []
    for item in items:
        k = key(item)
        if k in seen:
            continue
        seen.add(k)
        out.append(item)
    return out


# Voivodeship slugs as used in RegioWyniki paths -> display names
REGIONS: dict[str, str] = {
    "dolnoslaskie": "Dolnośląskie",
    "kujawsko-pomorskie": "Kujawsko-pomorskie",
    "lubelskie": "Lubelskie",
    "lubuskie": "Lubuskie",
    "lodzkie": "Łódzkie",
    "malopolskie": "Małopolskie",
    "mazowieckie": "Mazowieckie",
    "opolskie": "Opolskie",
    "podkarpackie": "Podkarpackie",
    "podlaskie": "Podlaskie",
    "pomorskie": "Pomorskie",
    "slaskie": "Śląskie",
    "swietokrzyskie": "Świętokrzyskie",
    "warminsko-mazurskie": "Warmińsko-mazurskie",
    "wielkopolskie": "Wielkopolskie",
    "zachodniopomorskie": "Zachodniopomorskie",
}

SPORT_SEGMENT = "Pilka_Nozna"


def region_from_url(url: str) -> str:
    """Region token: the path segment after 'Pilka_Nozna', underscores as spaces."""
    segments = url_path_segments(url)
    try:
        idx = segments.index(SPORT_SEGMENT)
    except ValueError:
        return ""
    if idx + 1 >= len(segments):
        return ""
    return segments[idx + 1].replace("_", " ")


def region_label(region: Optional[str]) -> str:
    """Display name for a region token; unknown tokens are returned unchanged."""
    if not region:
        return ""
    slug = region.strip().lower().replace(" ", "-").replace("_", "-")
    return REGIONS.get(slug, region)
