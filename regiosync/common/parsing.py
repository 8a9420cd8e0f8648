import re
from typing import Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

_SCORE_RE = re.compile(r"^\s*(\d+)\s*:\s*(\d+)(?!\d)")


def clean_text(s: str | None) -> str | None:
    if s is None:
        return None
    s = re.sub(r"\s+", " ", s.strip())
    return s or None


def parse_int(s: str | None) -> int | None:
    if not s:
        return None
    m = re.search(r"-?\d+", s.replace(".", ""))
    return int(m.group(0)) if m else None


def parse_goal_pair(s: str | None) -> tuple[int, int]:
    """'10:4' -> (10, 4). Without a colon both sides are 0; bad halves are 0."""
    if not s or ":" not in s:
        return 0, 0
    parts = s.split(":")
    return parse_int(parts[0]) or 0, parse_int(parts[1]) or 0


def parse_score(s: str | None) -> tuple[Optional[int], Optional[int]]:
    """Parse a played score like '2:1' into (2, 1); anything else is (None, None)."""
    if not s:
        return None, None
    m = _SCORE_RE.match(s)
    if not m:
        return None, None
    return int(m.group(1)), int(m.group(2))


def soup_from_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def absolute_url(base_url: str, href: str | None) -> str | None:
    if not href:
        return None
    if href.startswith("http://") or href.startswith("https://"):
        return href
    return urljoin(base_url.rstrip("/") + "/", href.lstrip("/"))


def url_path_segments(url: str) -> list[str]:
    """Path segments of *url* (absolute or relative), empty ones dropped."""
    path = urlparse(url).path if "://" in url else url.split("?")[0]
    return [seg for seg in path.split("/") if seg]
