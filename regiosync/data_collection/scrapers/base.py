"""
Base classes and utilities for web scraping.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from bs4 import BeautifulSoup

from ...common.http import DocumentFetcher
from ...common.parsing import soup_from_html

# =============================================================================
# 1. SCRAPING CONFIGURATION
# =============================================================================


@dataclass
class ScrapingConfig:
    """Konfiguration für Web Scraping"""

    base_url: str
    user_agent: str = "Mozilla/5.0 (compatible; SmallClubManager/1.0)"
    accept: str = "text/html,application/xhtml+xml"
    timeout: int = 30
    rate_limit_backoff: float = 60.0


# =============================================================================
# 2. BASE SCRAPER CLASS
# =============================================================================


class BaseScraper(ABC):
    """Abstrakte Basisklasse für alle Scraper"""

    def __init__(
        self,
        config: ScrapingConfig,
        name: str,
        fetcher: Optional[DocumentFetcher] = None,
        rate_limiter=None,
        metrics=None,
    ):
        self.config = config
        self.name = name
        self.metrics = metrics
        self.logger = logging.getLogger(f"scraper.{name}")
        self.fetcher = fetcher or DocumentFetcher(
            user_agent=config.user_agent,
            accept=config.accept,
            timeout=config.timeout,
            rate_limiter=rate_limiter,
            rate_limit_backoff=config.rate_limit_backoff,
            metrics=metrics,
        )

    async def initialize(self):
        """Initialisiert den Scraper"""
        await self.fetcher.initialize()

    async def cleanup(self):
        """Räumt Ressourcen auf"""
        await self.fetcher.cleanup()

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info):
        await self.cleanup()

    @abstractmethod
    async def scrape_data(self, url: str) -> Any:
        """Hauptmethode zum Scrapen von Daten"""

    async def fetch_page(self, url: str, page: str = "page") -> str:
        """Lädt eine Webseite herunter (ein Versuch, kein Retry)"""
        return await self.fetcher.fetch(url, page=page)

    def parse_html(self, html: str) -> BeautifulSoup:
        """Parst HTML mit BeautifulSoup"""
        return soup_from_html(html)
