from .contracts import (
    NOT_REGISTERED,
    SYNC_DISABLED,
    BatchSyncResult,
    ClubSyncOutcome,
    ClubSyncResult,
)
from .models import (
    ClubDetails,
    ClubSearchResult,
    ClubSnapshot,
    ClubSyncRegistration,
    LeagueTableEntry,
    MatchScheduleEntry,
)

__all__ = [
    "NOT_REGISTERED",
    "SYNC_DISABLED",
    "BatchSyncResult",
    "ClubSyncOutcome",
    "ClubSyncResult",
    "ClubDetails",
    "ClubSearchResult",
    "ClubSnapshot",
    "ClubSyncRegistration",
    "LeagueTableEntry",
    "MatchScheduleEntry",
]
