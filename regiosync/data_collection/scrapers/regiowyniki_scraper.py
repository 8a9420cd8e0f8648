"""
RegioWyniki.pl Scraper
======================

Club search, club details, league table and match schedule for Polish
regional football, plus the aggregate snapshot used by the sync job.

The ``parse_*`` functions are pure (BeautifulSoup in, domain models out) and
never raise on missing or malformed markup: they return the emptiest valid
value. The scraper methods add fetching around them and map transport
failures to the same empty values. ``get_full_club_data`` additionally
records which part failed to load.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Optional
from urllib.parse import quote

from bs4 import BeautifulSoup
from bs4.element import Tag

from ...common.http import FetchError
from ...common.parsing import absolute_url, clean_text, parse_goal_pair, parse_int, parse_score
from ...common.scraper_utils import (
    FieldStrategy,
    clean_club_heading,
    dedupe_preserving_order,
    find_labeled_value,
    node_text,
    region_from_url,
    visible_text,
)
from ...common.term_mapper import TermMapper, map_form_code
from ...domain.models import (
    DEFAULT_COMPETITION,
    DEFAULT_LEAGUE,
    FORM_MAX_LENGTH,
    ClubDetails,
    ClubSearchResult,
    ClubSnapshot,
    LeagueTableEntry,
    MatchScheduleEntry,
)
from .base import BaseScraper, ScrapingConfig

if TYPE_CHECKING:  # pragma: no cover
    from ...core.config import Settings

GapReporter = Callable[[str], None]

# =============================================================================
# 1. CONFIGURATION & SELECTORS
# =============================================================================

SEARCH_PATH = "/szukaj/Pilka_Nozna/"
CLUB_LINK_SELECTOR = 'a[href*="/druzyna/Pilka_Nozna/"]'
LOGO_SELECTOR = 'img[src*="herb"], img[src*="logo"]'
CLUB_INFO_SELECTOR = ".club-info, .team-info"

TABLE_ROW_SELECTOR = "table tr, .standings-row, .table-row"
TABLE_CELL_SELECTOR = "td, .cell"
FORM_SELECTOR = ".form a, .form-indicator"
MIN_TABLE_CELLS = 7

FIXTURE_ROW_SELECTOR = '.match-row, .fixture, tr[class*="match"]'

LEAGUE_SOURCES = FieldStrategy("league", (".league-name", "h4"))

FIXTURE_FIELDS: dict[str, FieldStrategy] = {
    "date": FieldStrategy("date", (".date", ".match-date", "td:first-child")),
    "time": FieldStrategy("time", (".time", ".match-time")),
    "home_team": FieldStrategy("home_team", (".home-team", ".team-home")),
    "away_team": FieldStrategy("away_team", (".away-team", ".team-away")),
    "score": FieldStrategy("score", (".score", ".result")),
    "competition": FieldStrategy(
        "competition", (".competition", ".league"), default=DEFAULT_COMPETITION
    ),
}

# Labels of the optional club-info block (Polish)
CLUB_INFO_LABELS: dict[str, list[str]] = {
    "founded": ["Rok założenia", "Data założenia", "Założony"],
    "colors": ["Barwy klubowe", "Barwy"],
    "address": ["Adres"],
    "president": ["Prezes"],
    "phone": ["Telefon", "Tel."],
}


@dataclass
class RegioWynikiScraperConfig(ScrapingConfig):
    base_url: str = "https://regiowyniki.pl"
    search_limit: int = 20
    season: str = "2025/2026"

    @classmethod
    def from_settings(cls, cfg: "Settings") -> "RegioWynikiScraperConfig":
        return cls(
            base_url=cfg.regiowyniki_base_url,
            user_agent=cfg.scraping_user_agent,
            accept=cfg.scraping_accept,
            timeout=cfg.scraping_timeout,
            rate_limit_backoff=cfg.scraping_rate_limit_backoff_seconds,
            search_limit=cfg.search_result_limit,
            season=cfg.season_label,
        )


# =============================================================================
# 2. URL HELPERS
# =============================================================================

# Unreserved marks kept literal in the search query
SAFE_QUERY_CHARS = "-_.!~*'()"


def build_search_url(base_url: str, query: str) -> str:
    return f"{base_url.rstrip('/')}{SEARCH_PATH}?search_text={quote(query, safe=SAFE_QUERY_CHARS)}"


def build_table_url(club_url: str) -> str:
    return f"{club_url}tabela/" if club_url.endswith("/") else f"{club_url}/tabela/"


def _noop_gap(_field: str) -> None:
    return None


# =============================================================================
# 3. PURE PARSERS
# =============================================================================

def parse_search_results(
    soup: BeautifulSoup, base_url: str, limit: int = 20
) -> list[ClubSearchResult]:
    """Club links of a search result page, unique on (name, region), first ``limit``."""
    results: list[ClubSearchResult] = []
    for a in soup.select(CLUB_LINK_SELECTOR):
        href = a.get("href") or ""
        name = clean_text(a.get_text(" "))
        if not name or "/druzyna/" not in href:
            continue
        img = a.find("img")
        logo = absolute_url(base_url, img.get("src")) if img is not None else None
        results.append(
            ClubSearchResult(
                name=name,
                region=region_from_url(href),
                source_url=absolute_url(base_url, href) or href,
                logo_url=logo,
            )
        )
    unique = dedupe_preserving_order(results, key=lambda r: (r.name, r.region))
    return unique[: max(limit, 0)]


def detect_league(soup: BeautifulSoup, mapper: Optional[TermMapper] = None) -> Optional[str]:
    """First league-tier term in `.league-name`, then `h4`, then the whole page."""
    mapper = mapper or TermMapper.default_league_mapper()
    for selector in LEAGUE_SOURCES.selectors:
        for el in soup.select(selector):
            found = mapper.search(el.get_text(" "))
            if found:
                return found
    return mapper.search(visible_text(soup))


def parse_club_details(
    soup: BeautifulSoup,
    club_url: str,
    base_url: str,
    on_gap: Optional[GapReporter] = None,
) -> ClubDetails:
    gap = on_gap or _noop_gap

    name = clean_club_heading(node_text(soup.find("h1")))
    if not name:
        gap("name")

    logo_el = soup.select_one(LOGO_SELECTOR)
    logo_url = absolute_url(base_url, logo_el.get("src")) if logo_el is not None else None
    if not logo_url:
        gap("logo_url")

    league = detect_league(soup)
    if league is None:
        gap("league")
        league = DEFAULT_LEAGUE

    region = region_from_url(club_url)
    if not region:
        gap("region")

    info: dict[str, Optional[str]] = {}
    block = soup.select_one(CLUB_INFO_SELECTOR)
    if block is not None:
        for key, labels in CLUB_INFO_LABELS.items():
            info[key] = find_labeled_value(block, labels)

    return ClubDetails(name=name, logo_url=logo_url, league=league, region=region, **info)


def _parse_table_row(row: Tag, index: int, base_url: str, gap: GapReporter) -> Optional[LeagueTableEntry]:
    cells = row.select(TABLE_CELL_SELECTOR)
    if len(cells) < MIN_TABLE_CELLS:
        return None

    def cell_int(i: int) -> int:
        return parse_int(node_text(cells[i])) or 0

    team_cell = cells[1]
    link = team_cell.find("a")
    team_name = node_text(link) or node_text(team_cell)
    if not team_name:
        return None
    team_url = absolute_url(base_url, link.get("href")) if link is not None else None

    position = parse_int(node_text(cells[0]))
    if position is None or position <= 0:
        gap("position")
        position = index + 1

    goals_text = node_text(cells[7]) if len(cells) > 7 else ""
    goals_for, goals_against = parse_goal_pair(goals_text)

    form: list[str] = []
    for marker in row.select(FORM_SELECTOR):
        code = map_form_code(node_text(marker))
        if code:
            form.append(code)

    return LeagueTableEntry(
        position=position,
        team_name=team_name,
        team_url=team_url or "",
        points=cell_int(2),
        matches_played=cell_int(3),
        wins=cell_int(4),
        draws=cell_int(5),
        losses=cell_int(6),
        goals_for=goals_for,
        goals_against=goals_against,
        form=form[:FORM_MAX_LENGTH],
    )


def parse_league_table(
    soup: BeautifulSoup, base_url: str, on_gap: Optional[GapReporter] = None
) -> list[LeagueTableEntry]:
    """Standings rows sorted by position.

    The fallback position is the 1-based index among all candidate rows
    (header rows included), matching document order.
    """
    gap = on_gap or _noop_gap
    entries: list[LeagueTableEntry] = []
    for index, row in enumerate(soup.select(TABLE_ROW_SELECTOR)):
        entry = _parse_table_row(row, index, base_url, gap)
        if entry is not None:
            entries.append(entry)
    if not entries:
        gap("rows")
    # sorted() is stable: equal positions keep document order
    return sorted(entries, key=lambda e: e.position)


def parse_match_schedule(
    soup: BeautifulSoup, on_gap: Optional[GapReporter] = None
) -> list[MatchScheduleEntry]:
    """Fixtures in document order; `is_home` is derived from the page heading."""
    gap = on_gap or _noop_gap
    club_name = clean_club_heading(node_text(soup.find("h1")))
    if not club_name:
        gap("club_name")

    matches: list[MatchScheduleEntry] = []
    for row in soup.select(FIXTURE_ROW_SELECTOR):
        values = {key: strategy.extract(row) for key, strategy in FIXTURE_FIELDS.items()}
        home, away = values["home_team"], values["away_team"]
        if not home or not away:
            gap("team")
            continue
        home_score, away_score = parse_score(values["score"])
        matches.append(
            MatchScheduleEntry(
                date=values["date"],
                time=values["time"],
                home_team=home,
                away_team=away,
                home_score=home_score,
                away_score=away_score,
                is_home=bool(club_name) and club_name in home,
                competition=values["competition"],
            )
        )
    return matches


# =============================================================================
# 4. SCRAPER
# =============================================================================


class RegioWynikiScraper(BaseScraper):
    """Fetch + parse facade for RegioWyniki.pl club pages."""

    def __init__(
        self,
        config: Optional[RegioWynikiScraperConfig] = None,
        *,
        fetcher=None,
        rate_limiter=None,
        metrics=None,
    ):
        super().__init__(
            config or RegioWynikiScraperConfig(),
            name="regiowyniki",
            fetcher=fetcher,
            rate_limiter=rate_limiter,
            metrics=metrics,
        )

    @classmethod
    def from_settings(cls, cfg: "Settings", **kwargs) -> "RegioWynikiScraper":
        return cls(RegioWynikiScraperConfig.from_settings(cfg), **kwargs)

    @property
    def base_url(self) -> str:
        return self.config.base_url

    # -------------------- Helpers --------------------
    def _gap_reporter(self, page: str) -> GapReporter:
        def report(field_name: str) -> None:
            self.logger.debug(f"Extraction gap on {page}: {field_name}")
            if self.metrics is not None:
                self.metrics.record_extraction_gap(page, field_name)

        return report

    async def _load(self, url: str, page: str) -> tuple[Optional[BeautifulSoup], Optional[str]]:
        """Fetch and parse *url*. Returns (soup, None) or (None, error message)."""
        try:
            html = await self.fetch_page(url, page=page)
        except FetchError as e:
            self.logger.error(f"Fetching {page} failed for {url}: {e}")
            return None, str(e)
        except Exception as e:
            self.logger.exception(f"Unexpected error fetching {page} from {url}")
            return None, str(e) or type(e).__name__
        return self.parse_html(html), None

    # -------------------- Part loaders (value, error) --------------------
    async def _club_details(self, url: str) -> tuple[Optional[ClubDetails], Optional[str]]:
        soup, error = await self._load(url, "details")
        if soup is None:
            return None, error
        try:
            return parse_club_details(soup, url, self.base_url, self._gap_reporter("details")), None
        except Exception:
            self.logger.exception(f"Parsing club details failed for {url}")
            return ClubDetails(name="", region=region_from_url(url)), None

    async def _league_table(self, url: str) -> tuple[list[LeagueTableEntry], Optional[str]]:
        soup, error = await self._load(build_table_url(url), "table")
        if soup is None:
            return [], error
        try:
            return parse_league_table(soup, self.base_url, self._gap_reporter("table")), None
        except Exception:
            self.logger.exception(f"Parsing league table failed for {url}")
            return [], None

    async def _match_schedule(self, url: str) -> tuple[list[MatchScheduleEntry], Optional[str]]:
        soup, error = await self._load(url, "schedule")
        if soup is None:
            return [], error
        try:
            return parse_match_schedule(soup, self._gap_reporter("schedule")), None
        except Exception:
            self.logger.exception(f"Parsing match schedule failed for {url}")
            return [], None

    # -------------------- Public API --------------------
    async def search_clubs(self, query: str) -> list[ClubSearchResult]:
        """Search clubs by name. Queries shorter than 2 chars are the caller's problem."""
        soup, _ = await self._load(build_search_url(self.base_url, query), "search")
        if soup is None:
            return []
        try:
            return parse_search_results(soup, self.base_url, self.config.search_limit)
        except Exception:
            self.logger.exception(f"Parsing search results failed for query {query!r}")
            return []

    async def get_club_details(self, url: str) -> Optional[ClubDetails]:
        """None only when the page could not be fetched."""
        details, _ = await self._club_details(url)
        return details

    async def get_league_table(self, url: str) -> list[LeagueTableEntry]:
        table, _ = await self._league_table(url)
        return table

    async def get_match_schedule(self, url: str) -> list[MatchScheduleEntry]:
        schedule, _ = await self._match_schedule(url)
        return schedule

    async def get_full_club_data(self, url: str) -> ClubSnapshot:
        """Details, table and schedule fetched concurrently into one snapshot."""
        (details, details_err), (table, table_err), (schedule, schedule_err) = await asyncio.gather(
            self._club_details(url),
            self._league_table(url),
            self._match_schedule(url),
        )
        errors = {
            part: message
            for part, message in (
                ("details", details_err),
                ("table", table_err),
                ("schedule", schedule_err),
            )
            if message is not None
        }
        snapshot = ClubSnapshot(
            details=details,
            table=table,
            schedule=schedule,
            fetched_at=datetime.now(timezone.utc),
            season=self.config.season,
            fetch_errors=errors,
        )
        self.logger.info(
            f"Fetched {url}: {len(table)} table rows, {len(schedule)} fixtures"
            + (f", failed parts: {sorted(errors)}" if errors else "")
        )
        return snapshot

    async def scrape_data(self, url: str) -> ClubSnapshot:
        return await self.get_full_club_data(url)
