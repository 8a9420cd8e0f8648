"""
Domain models for validated RegioWyniki data using Pydantic.

Feldnamen sind snake_case, serialisiert wird mit camelCase-Aliasen
(``model_dump(by_alias=True)``), so wie die Anwendungsschicht sie erwartet.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

FormCode = Literal["W", "D", "L"]

FORM_MAX_LENGTH = 5
DEFAULT_LEAGUE = "Nieznana"
DEFAULT_COMPETITION = "Liga"


class RegioModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Suche & Vereinsdaten ---

class ClubSearchResult(RegioModel):
    name: str
    region: str
    source_url: str
    logo_url: Optional[str] = None


class ClubDetails(RegioModel):
    name: str
    logo_url: Optional[str] = None
    league: str = DEFAULT_LEAGUE
    region: str = ""
    # Optional club-info block
    founded: Optional[str] = None
    colors: Optional[str] = None
    address: Optional[str] = None
    president: Optional[str] = None
    phone: Optional[str] = None


# --- Tabelle & Spielplan ---

class LeagueTableEntry(RegioModel):
    position: int = Field(ge=1)
    team_name: str
    team_url: str = ""
    points: int = 0
    matches_played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    goal_difference: int = 0
    form: list[FormCode] = Field(default_factory=list, max_length=FORM_MAX_LENGTH)

    @model_validator(mode="after")
    def _recompute_goal_difference(self) -> "LeagueTableEntry":
        # Never trusted from the source
        self.goal_difference = self.goals_for - self.goals_against
        return self


class MatchScheduleEntry(RegioModel):
    date: str = ""
    time: str = ""
    home_team: str
    away_team: str
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    is_home: bool = False
    competition: str = DEFAULT_COMPETITION

    @model_validator(mode="after")
    def _scores_complete(self) -> "MatchScheduleEntry":
        if (self.home_score is None) != (self.away_score is None):
            raise ValueError("home_score and away_score must be set together")
        return self


# --- Aggregat ---

SnapshotPart = Literal["details", "table", "schedule"]
SNAPSHOT_PARTS: tuple[str, ...] = ("details", "table", "schedule")


class ClubSnapshot(RegioModel):
    details: Optional[ClubDetails] = None
    table: list[LeagueTableEntry] = Field(default_factory=list)
    schedule: list[MatchScheduleEntry] = Field(default_factory=list)
    fetched_at: AwareDatetime
    season: str
    # Part name -> transport error message
    fetch_errors: dict[SnapshotPart, str] = Field(default_factory=dict)

    @property
    def unreachable(self) -> bool:
        """True when every part failed at the transport level."""
        return all(part in self.fetch_errors for part in SNAPSHOT_PARTS)

    def content_dump(self) -> dict:
        """Dump without ``fetched_at`` (for comparing two fetches of the same page)."""
        return self.model_dump(exclude={"fetched_at"})


# --- Registry ---

class ClubSyncRegistration(RegioModel):
    club_id: int
    external_url: str
    last_sync_at: Optional[AwareDatetime] = None
    sync_enabled: bool = True
