"""Global pytest fixtures for the test suite.

Centralizes:
 - Project root path insertion (so individual tests don't repeat sys.path hacks)
 - Reusable HTML sample snippets for RegioWyniki search, club, table pages
 - A fake site (url -> html) to patch into the scraper's fetch_page
"""

import sys
from pathlib import Path

import pytest

# Ensure project root (containing regiosync/) is on sys.path once
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from regiosync.common.http import HttpStatusError  # noqa: E402
from regiosync.common.term_mapper import TermMapper  # noqa: E402

BASE_URL = "https://regiowyniki.pl"
CLUB_URL = f"{BASE_URL}/druzyna/Pilka_Nozna/malopolskie/Wisla_Krakow/"
TABLE_URL = f"{CLUB_URL}tabela/"


# -------------------- Mapper Fixtures -------------------- #

@pytest.fixture(scope="session")
def form_mapper():
    """Session-scoped default form code mapper."""
    return TermMapper.default_form_mapper()


@pytest.fixture(scope="session")
def league_mapper():
    return TermMapper.default_league_mapper()


# -------------------- HTML Fixtures -------------------- #

@pytest.fixture
def sample_search_html():
    return (
        """
        <html>
        <body>
            <div class="results">
                <a href="/druzyna/Pilka_Nozna/malopolskie/Wisla_Krakow/">
                    <img src="/images/herb/wisla_krakow.png" /> Wisła Kraków
                </a>
                <a href="/druzyna/Pilka_Nozna/malopolskie/Wisla_Krakow/">Wisła Kraków</a>
                <a href="https://regiowyniki.pl/druzyna/Pilka_Nozna/mazowieckie/Wisla_Plock/">Wisła Płock</a>
                <a href="/druzyna/Pilka_Nozna/slaskie/Wisla_Ustronianka/">Wisła Ustronianka</a>
                <a href="/druzyna/Pilka_Nozna/dolnoslaskie/Wisla_Oldboys/"></a>
                <a href="/liga/Pilka_Nozna/malopolskie/IV_Liga/">IV Liga</a>
            </div>
        </body>
        </html>
        """
    )


@pytest.fixture
def sample_club_html():
    return (
        """
        <html>
        <head><title>Wisła Kraków - RegioWyniki</title></head>
        <body>
            <h1>Wisła Kraków Terminarz</h1>
            <img src="/images/banner.jpg" />
            <img src="/images/herb/wisla_krakow.png" />
            <h4>IV Liga Małopolska</h4>
            <div class="club-info">
                <dl>
                    <dt>Rok założenia</dt><dd>1906</dd>
                    <dt>Barwy</dt><dd>biało-czerwono-niebieskie</dd>
                </dl>
                <p>Adres: ul. Reymonta 22, Kraków</p>
                <p>Prezes: Jan Kowalski</p>
            </div>
            <div class="match-row">
                <span class="date">15.08.2025</span>
                <span class="time">17:00</span>
                <span class="home-team">Wisła Kraków</span>
                <span class="away-team">Hutnik Kraków</span>
                <span class="score">2:1</span>
                <span class="competition">IV Liga</span>
            </div>
            <div class="fixture">
                <span class="match-date">22.08.2025</span>
                <span class="match-time">18:00</span>
                <span class="team-home">Garbarnia Kraków</span>
                <span class="team-away">Wisła Kraków</span>
                <span class="result">-:-</span>
            </div>
            <div class="match-row">
                <span class="date">29.08.2025</span>
                <span class="home-team">Wisła Kraków</span>
            </div>
            <table class="fixtures">
                <tr class="match-item">
                    <td>05.09.2025</td>
                    <td class="home-team">Wisła Kraków II</td>
                    <td class="away-team">Orzeł Piaski Wielkie</td>
                    <td class="score">1:1</td>
                </tr>
            </table>
        </body>
        </html>
        """
    )


@pytest.fixture
def sample_table_html():
    return (
        """
        <html>
        <body>
            <h1>Wisła Kraków Tabela</h1>
            <table class="standings">
                <tr><th>#</th><th>Drużyna</th><th>Pkt</th><th>M</th><th>Z</th><th>R</th><th>P</th><th>Bramki</th><th>Forma</th></tr>
                <tr>
                    <td>2</td>
                    <td><a href="/druzyna/Pilka_Nozna/malopolskie/Hutnik_Krakow/">Hutnik Kraków</a></td>
                    <td>14</td><td>6</td><td>4</td><td>2</td><td>0</td><td>12:5</td>
                    <td class="form"><a>W</a><a>W</a><a>R</a></td>
                </tr>
                <tr>
                    <td>3</td>
                    <td><a href="/druzyna/Pilka_Nozna/malopolskie/Wisla_Krakow/">Wisła Kraków</a></td>
                    <td>12</td><td>6</td><td>3</td><td>3</td><td>0</td><td>10:4</td>
                    <td class="form"><a>W</a><a>R</a><a>P</a><a>W</a><a>W</a><a>R</a></td>
                </tr>
                <tr>
                    <td>1</td>
                    <td><a href="/druzyna/Pilka_Nozna/malopolskie/Garbarnia_Krakow/">Garbarnia Kraków</a></td>
                    <td>16</td><td>6</td><td>5</td><td>1</td><td>0</td><td>15:3</td>
                    <td class="form"><a>W</a><a>x</a><a>W</a></td>
                </tr>
                <tr>
                    <td>-</td>
                    <td>Wisła Kraków II</td>
                    <td>5</td><td>6</td><td>1</td><td>2</td><td>3</td><td>—</td>
                </tr>
                <tr><td>x</td><td>za mało</td><td>kolumn</td></tr>
            </table>
        </body>
        </html>
        """
    )


# -------------------- Fake site -------------------- #

@pytest.fixture
def fake_site():
    """Factory: pages dict (url -> html or Exception) -> async fetch_page replacement.

    Unknown URLs answer with HTTP 404. The returned callable records every URL
    it was asked for in ``.calls``.
    """

    def factory(pages: dict):
        calls: list[str] = []

        async def fetch_page(url, page="page"):
            calls.append(url)
            value = pages.get(url)
            if value is None:
                raise HttpStatusError(url, 404)
            if isinstance(value, Exception):
                raise value
            return value

        fetch_page.calls = calls
        return fetch_page

    return factory


@pytest.fixture
def club_pages(sample_club_html, sample_table_html):
    return {CLUB_URL: sample_club_html, TABLE_URL: sample_table_html}


# -------------------- Clock -------------------- #

class FakeClock:
    """Manual monotonic clock; sleeping advances it."""

    def __init__(self, start: float = 100.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
