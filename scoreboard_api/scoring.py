# scoreboard_api/scoring.py
from __future__ import annotations

from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from scoreboard_api.models import BattingEntry, BowlingEntry, TeamStats
from scoreboard_api.overs_math import as_int, as_number, normalize_overs

BATTING_FIELDS = ("player", "runs", "balls", "fours", "extras", "ones", "twos")
BOWLING_FIELDS = ("player", "overs", "maidens", "runs", "wickets")

# Editing any of these re-derives the batter's runs
_BREAKDOWN_FIELDS = {"ones", "twos", "fours"}


def default_team_stats(players: Sequence[str], existing: Optional[TeamStats] = None) -> TeamStats:
    """
    Starting sheet for one side of a match.

    Stats already recorded are kept as they are. Otherwise every roster
    player gets a zeroed batting row and a zeroed bowling row.
    """
    if existing is not None:
        return existing
    return TeamStats(
        batting=[BattingEntry(player=p) for p in players],
        bowling=[BowlingEntry(player=p) for p in players],
    )


def _with_breakdown_runs(row: BattingEntry) -> BattingEntry:
    # A recorded breakdown is authoritative over a typed runs value
    if row.ones or row.twos or row.fours:
        return replace(row, runs=row.breakdown_runs())
    return row


def _check_index(rows: Sequence[object], index: int) -> None:
    if index < 0 or index >= len(rows):
        raise ValueError(f"Row index out of range: {index}")


def edit_batting(stats: TeamStats, index: int, field: str, value: object) -> TeamStats:
    if field not in BATTING_FIELDS:
        raise ValueError(f"Unknown batting field: {field}")
    _check_index(stats.batting, index)

    row = stats.batting[index]
    if field == "player":
        row = replace(row, player=str(value or ""))
    else:
        row = replace(row, **{field: as_int(value)})
        if field in _BREAKDOWN_FIELDS:
            row = replace(row, runs=row.breakdown_runs())

    batting = list(stats.batting)
    batting[index] = row
    return replace(stats, batting=batting).with_derived_totals()


def edit_bowling(stats: TeamStats, index: int, field: str, value: object) -> TeamStats:
    if field not in BOWLING_FIELDS:
        raise ValueError(f"Unknown bowling field: {field}")
    _check_index(stats.bowling, index)

    row = stats.bowling[index]
    if field == "player":
        row = replace(row, player=str(value or ""))
    elif field == "overs":
        row = replace(row, overs=normalize_overs(as_number(value)))
    else:
        row = replace(row, **{field: as_int(value)})

    bowling = list(stats.bowling)
    bowling[index] = row
    return replace(stats, bowling=bowling).with_derived_totals()


def prepare_for_save(stats: Optional[TeamStats]) -> Optional[TeamStats]:
    """
    Puts a submitted sheet into its stored shape: batter runs re-derived from
    a recorded breakdown, bowler overs normalized, totals recomputed.
    """
    if stats is None:
        return None
    batting = [_with_breakdown_runs(b) for b in stats.batting]
    bowling = [replace(b, overs=normalize_overs(b.overs)) for b in stats.bowling]
    return replace(stats, batting=batting, bowling=bowling).with_derived_totals()


def clean_roster(players: Sequence[str], photos: Sequence[str] = ()) -> Tuple[List[str], List[str]]:
    """
    Drops blank player names. Photos are a parallel list, so the photo at a
    dropped position goes with it.
    """
    kept_players: List[str] = []
    kept_photos: List[str] = []
    for i, p in enumerate(players):
        name = (p or "").strip()
        if not name:
            continue
        kept_players.append(name)
        if i < len(photos):
            kept_photos.append(photos[i])
    return kept_players, kept_photos
