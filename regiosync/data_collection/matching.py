"""Locate a club in a parsed league table."""

from __future__ import annotations

from typing import Optional, Sequence

from ..domain.models import LeagueTableEntry


def find_table_entry(
    club_name: Optional[str], table: Sequence[LeagueTableEntry]
) -> Optional[LeagueTableEntry]:
    """First entry whose team name contains *club_name*, case-insensitive.

    Substring containment is a heuristic: "Polonia" also matches "Polonia II".
    The first hit in table order wins.
    """
    if not club_name or not club_name.strip():
        return None
    needle = club_name.lower()
    for entry in table:
        if needle in entry.team_name.lower():
            return entry
    return None


def find_table_position(
    club_name: Optional[str], table: Sequence[LeagueTableEntry]
) -> Optional[int]:
    entry = find_table_entry(club_name, table)
    return entry.position if entry is not None else None
