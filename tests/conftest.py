from __future__ import annotations

import itertools
from typing import Any, Dict, List, Optional

import pytest

from scoreboard_api import cache
from scoreboard_api.models import Match, Team


def stats(runs: int, bowling: List[tuple], batting: Optional[List[tuple]] = None) -> Dict[str, Any]:
    """
    Stored stats JSON for one side.
    bowling: [(player, overs, runs, wickets), ...]
    batting: [(player, runs, balls), ...]
    """
    return {
        "batting": [
            {"player": p, "runs": r, "balls": b, "fours": 0, "extras": 0}
            for p, r, b in (batting or [])
        ],
        "bowling": [
            {"player": p, "overs": o, "maidens": 0, "runs": r, "wickets": w}
            for p, o, r, w in bowling
        ],
        "totalRuns": runs,
        "totalWickets": sum(w for _, _, _, w in bowling),
        "overs": 0,
    }


def match_row(
    match_id: str,
    team_a: str,
    team_b: str,
    *,
    status: str = "completed",
    date: str = "9th February",
    number: int = 1,
    a_stats: Optional[Dict[str, Any]] = None,
    b_stats: Optional[Dict[str, Any]] = None,
    match_type: str = "group",
) -> Dict[str, Any]:
    return {
        "id": match_id,
        "date": date,
        "match_number": number,
        "team_a": team_a,
        "team_b": team_b,
        "status": status,
        "match_type": match_type,
        "team_a_stats": a_stats,
        "team_b_stats": b_stats,
    }


def make_match(*args: Any, **kwargs: Any) -> Match:
    return Match.from_row(match_row(*args, **kwargs))


class FakeStore:
    """In-memory stand-in for StoreClient with the same method surface."""

    def __init__(self, matches: Optional[List[Dict[str, Any]]] = None, teams: Optional[List[Dict[str, Any]]] = None):
        self.matches: List[Dict[str, Any]] = [dict(m) for m in (matches or [])]
        self.teams: List[Dict[str, Any]] = [dict(t) for t in (teams or [])]
        self._ids = itertools.count(100)
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            from scoreboard_api.store_client import StoreError
            raise StoreError("HTTP 503: unavailable")

    def list_matches(self) -> List[Match]:
        self._check()
        return [Match.from_row(m) for m in self.matches]

    def get_match(self, match_id: str) -> Optional[Match]:
        self._check()
        for m in self.matches:
            if m["id"] == match_id:
                return Match.from_row(m)
        return None

    def insert_match(self, fields: Dict[str, Any]) -> Match:
        self._check()
        row = {"team_a_stats": None, "team_b_stats": None, **fields, "id": str(next(self._ids))}
        self.matches.append(row)
        return Match.from_row(row)

    def update_match(self, match_id: str, fields: Dict[str, Any]) -> Optional[Match]:
        self._check()
        for m in self.matches:
            if m["id"] == match_id:
                m.update(fields)
                return Match.from_row(m)
        return None

    def delete_match(self, match_id: str) -> None:
        self._check()
        self.matches = [m for m in self.matches if m["id"] != match_id]

    def list_teams(self) -> List[Team]:
        self._check()
        return [Team.from_row(t) for t in sorted(self.teams, key=lambda t: t["name"])]

    def get_team(self, team_id: str) -> Optional[Team]:
        self._check()
        for t in self.teams:
            if t["id"] == team_id:
                return Team.from_row(t)
        return None

    def insert_team(self, fields: Dict[str, Any]) -> Team:
        self._check()
        row = {**fields, "id": "t" + str(next(self._ids))}
        self.teams.append(row)
        return Team.from_row(row)

    def update_team(self, team_id: str, fields: Dict[str, Any]) -> Optional[Team]:
        self._check()
        for t in self.teams:
            if t["id"] == team_id:
                t.update(fields)
                return Team.from_row(t)
        return None

    def rename_team(self, team_id: str, new_name: str) -> Optional[Team]:
        team = self.get_team(team_id)
        if team is None:
            return None
        updated = self.update_team(team_id, {"name": new_name})
        for m in self.matches:
            if m["team_a"] == team.name:
                m["team_a"] = new_name
            if m["team_b"] == team.name:
                m["team_b"] = new_name
        return updated


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def two_wins_for_a() -> List[Dict[str, Any]]:
    """Team A beats Team B twice, 80/2 against 70/3, ten overs each side."""
    a = stats(80, [("A1", 5, 35, 2), ("A2", 5, 35, 1)])
    b = stats(70, [("B1", 5, 40, 1), ("B2", 5, 40, 1)])
    return [
        match_row("1", "Team A", "Team B", number=1, a_stats=a, b_stats=b),
        match_row("2", "Team A", "Team B", number=2, date="10th February", a_stats=a, b_stats=b),
    ]
