from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Literal

from scoreboard_api.overs_math import as_int, as_number, sum_overs


# -----------------------------
# Match lifecycle / classification
# -----------------------------
MatchStatus = Literal["scheduled", "live", "completed"]
MatchType = Literal["group", "semi-final", "final"]

MATCH_STATUSES = ("scheduled", "live", "completed")
MATCH_TYPES = ("group", "semi-final", "final")


def _text(value: object) -> str:
    if value is None:
        return ""
    return str(value)


# -----------------------------
# Per-player rows
# -----------------------------
@dataclass(frozen=True)
class BattingEntry:
    player: str
    runs: int = 0
    balls: int = 0
    fours: int = 0
    extras: int = 0

    # Per-ball breakdown; runs is derived from these once they are edited
    ones: int = 0
    twos: int = 0

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "BattingEntry":
        return cls(
            player=_text(raw.get("player")),
            runs=as_int(raw.get("runs")),
            balls=as_int(raw.get("balls")),
            fours=as_int(raw.get("fours")),
            extras=as_int(raw.get("extras")),
            ones=as_int(raw.get("ones")),
            twos=as_int(raw.get("twos")),
        )

    def breakdown_runs(self) -> int:
        return self.ones + 2 * self.twos + 4 * self.fours

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player": self.player,
            "runs": self.runs,
            "balls": self.balls,
            "fours": self.fours,
            "extras": self.extras,
            "ones": self.ones,
            "twos": self.twos,
        }


@dataclass(frozen=True)
class BowlingEntry:
    player: str
    overs: float = 0.0
    maidens: int = 0
    runs: int = 0
    wickets: int = 0

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "BowlingEntry":
        return cls(
            player=_text(raw.get("player")),
            overs=as_number(raw.get("overs")),
            maidens=as_int(raw.get("maidens")),
            runs=as_int(raw.get("runs")),
            wickets=as_int(raw.get("wickets")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player": self.player,
            "overs": self.overs,
            "maidens": self.maidens,
            "runs": self.runs,
            "wickets": self.wickets,
        }


# -----------------------------
# Embedded per-side statistics
# -----------------------------
@dataclass(frozen=True)
class TeamStats:
    batting: List[BattingEntry] = field(default_factory=list)
    bowling: List[BowlingEntry] = field(default_factory=list)
    total_runs: int = 0
    total_wickets: int = 0
    overs: float = 0.0

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> Optional["TeamStats"]:
        """Stored JSON -> TeamStats. None/non-dict stays None (scoring not started)."""
        if not isinstance(raw, dict):
            return None
        return cls(
            batting=[BattingEntry.from_dict(b) for b in (raw.get("batting") or []) if isinstance(b, dict)],
            bowling=[BowlingEntry.from_dict(b) for b in (raw.get("bowling") or []) if isinstance(b, dict)],
            total_runs=as_int(raw.get("totalRuns")),
            total_wickets=as_int(raw.get("totalWickets")),
            overs=as_number(raw.get("overs")),
        )

    def bowling_overs(self) -> float:
        return sum_overs(b.overs for b in self.bowling)

    def bowling_wickets(self) -> int:
        return sum(b.wickets for b in self.bowling)

    def with_derived_totals(self) -> "TeamStats":
        """
        Totals are never entered directly:
        - totalRuns    = sum(batting runs + extras)
        - totalWickets = sum(bowling wickets)
        - overs        = sum(bowling overs), 6-ball rollover applied
        """
        return replace(
            self,
            total_runs=sum(b.runs + b.extras for b in self.batting),
            total_wickets=self.bowling_wickets(),
            overs=self.bowling_overs(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "batting": [b.to_dict() for b in self.batting],
            "bowling": [b.to_dict() for b in self.bowling],
            "totalRuns": self.total_runs,
            "totalWickets": self.total_wickets,
            "overs": self.overs,
        }


def runs_of(stats: Optional[TeamStats]) -> int:
    return stats.total_runs if stats is not None else 0


def bowling_overs_of(stats: Optional[TeamStats]) -> float:
    return stats.bowling_overs() if stats is not None else 0.0


def bowling_wickets_of(stats: Optional[TeamStats]) -> int:
    return stats.bowling_wickets() if stats is not None else 0


# -----------------------------
# Canonical Match
# -----------------------------
@dataclass(frozen=True)
class Match:
    id: str
    date: str
    match_number: int
    team_a: str
    team_b: str
    status: MatchStatus = "scheduled"
    match_type: MatchType = "group"

    # Absent until scoring begins
    team_a_stats: Optional[TeamStats] = None
    team_b_stats: Optional[TeamStats] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Match":
        status = _text(row.get("status")) or "scheduled"
        match_type = _text(row.get("match_type")) or "group"
        return cls(
            id=_text(row.get("id")),
            date=_text(row.get("date")),
            match_number=as_int(row.get("match_number")),
            team_a=_text(row.get("team_a")),
            team_b=_text(row.get("team_b")),
            status=status if status in MATCH_STATUSES else "scheduled",
            match_type=match_type if match_type in MATCH_TYPES else "group",
            team_a_stats=TeamStats.from_dict(row.get("team_a_stats")),
            team_b_stats=TeamStats.from_dict(row.get("team_b_stats")),
        )

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"

    def to_row(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "match_number": self.match_number,
            "team_a": self.team_a,
            "team_b": self.team_b,
            "status": self.status,
            "match_type": self.match_type,
            "team_a_stats": self.team_a_stats.to_dict() if self.team_a_stats is not None else None,
            "team_b_stats": self.team_b_stats.to_dict() if self.team_b_stats is not None else None,
        }


# -----------------------------
# Team roster
# -----------------------------
@dataclass(frozen=True)
class Team:
    id: str
    name: str
    players: List[str] = field(default_factory=list)
    player_photos: List[str] = field(default_factory=list)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Team":
        return cls(
            id=_text(row.get("id")),
            name=_text(row.get("name")),
            players=[_text(p) for p in (row.get("players") or [])],
            player_photos=[_text(p) for p in (row.get("player_photos") or [])],
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "players": list(self.players),
            "player_photos": list(self.player_photos),
        }


# -----------------------------
# Derived standings row (never persisted)
# -----------------------------
@dataclass
class Standing:
    rank: int
    team: str
    matches: int
    wins: int
    losses: int
    points: int
    nrr: float
