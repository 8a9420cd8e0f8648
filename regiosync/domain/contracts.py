from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from .models import ClubSnapshot

# Typed results returned by the sync orchestrator

NOT_REGISTERED = "not registered"
SYNC_DISABLED = "sync disabled"

SyncErrorKind = Literal["registration", "transport", "unexpected"]


@dataclass
class ClubSyncResult:
    club_id: int
    success: bool
    matches_count: Optional[int] = None
    table_position: Optional[int] = None
    error: Optional[str] = None
    error_kind: Optional[SyncErrorKind] = None
    synced_at: Optional[datetime] = None
    snapshot: Optional[ClubSnapshot] = field(default=None, repr=False)

    @classmethod
    def failure(cls, club_id: int, error: str, kind: SyncErrorKind) -> "ClubSyncResult":
        return cls(club_id=club_id, success=False, error=error, error_kind=kind)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"clubId": self.club_id, "success": self.success}
        if self.success:
            data["matchesCount"] = self.matches_count
            data["tablePosition"] = self.table_position
            data["syncedAt"] = self.synced_at.isoformat() if self.synced_at else None
        else:
            data["error"] = self.error
            data["errorKind"] = self.error_kind
        return data


@dataclass
class ClubSyncOutcome:
    club_id: int
    success: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"clubId": self.club_id, "success": self.success}
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class BatchSyncResult:
    total: int
    started_at: datetime
    successful: int = 0
    failed: int = 0
    skipped: int = 0
    results: List[ClubSyncOutcome] = field(default_factory=list)
    ended_at: Optional[datetime] = None

    def add(self, result: ClubSyncResult) -> None:
        self.results.append(ClubSyncOutcome(result.club_id, result.success, result.error))
        if result.success:
            self.successful += 1
        else:
            self.failed += 1

    @property
    def duration_s(self) -> Optional[float]:
        if self.ended_at is None:
            return None
        return (self.ended_at - self.started_at).total_seconds()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "successful": self.successful,
            "failed": self.failed,
            "skipped": self.skipped,
            "results": [r.to_dict() for r in self.results],
            "startedAt": self.started_at.isoformat(),
            "endedAt": self.ended_at.isoformat() if self.ended_at else None,
        }
