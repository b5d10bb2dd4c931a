# scoreboard_api/fixtures.py
from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from scoreboard_api.models import (
    Match,
    TeamStats,
    bowling_overs_of,
    bowling_wickets_of,
    runs_of,
)
from scoreboard_api.overs_math import economy_rate, strike_rate

_MONTHS = {
    "january": 1, "february": 2, "march": 3, "april": 4, "may": 5, "june": 6,
    "july": 7, "august": 8, "september": 9, "october": 10, "november": 11, "december": 12,
}

_DAY_RE = re.compile(r"(\d+)")
_MONTH_RE = re.compile(r"(" + "|".join(_MONTHS) + r")")


def parse_date_label(label: str) -> int:
    """
    Free-text calendar label -> sortable number (month * 100 + day).

    "9th February" -> 209, "11th February" -> 211.
    Missing day or month counts as 0.
    """
    s = (label or "").strip()

    m_day = _DAY_RE.search(s)
    day = int(m_day.group(1)) if m_day else 0

    m_month = _MONTH_RE.search(s.lower())
    month = _MONTHS[m_month.group(1)] if m_month else 0

    return month * 100 + day


def sort_matches(matches: Iterable[Match]) -> List[Match]:
    """Tournament calendar order: date label first, then match number within the date."""
    return sorted(matches, key=lambda m: (parse_date_label(m.date), m.match_number))


def group_by_date(matches: Iterable[Match]) -> List[Tuple[str, List[Match]]]:
    groups: Dict[str, List[Match]] = {}
    for m in sort_matches(matches):
        groups.setdefault(m.date, []).append(m)
    return sorted(groups.items(), key=lambda kv: parse_date_label(kv[0]))


def side_summary(team: str, own: Optional[TeamStats], opponent: Optional[TeamStats]) -> Dict[str, Any]:
    """
    Scoreline for a batting side. Wickets lost and overs faced come from the
    opponent's bowling figures, not from the side's own totals.
    """
    return {
        "team": team,
        "runs": runs_of(own),
        "wickets": bowling_wickets_of(opponent),
        "overs": bowling_overs_of(opponent),
    }


def score_summary(match: Match) -> Dict[str, Any]:
    return {
        "team_a": side_summary(match.team_a, match.team_a_stats, match.team_b_stats),
        "team_b": side_summary(match.team_b, match.team_b_stats, match.team_a_stats),
    }


def match_result(match: Match) -> Optional[str]:
    """Winner by strictly higher runs; None for ties and unfinished matches."""
    if not match.is_completed:
        return None
    a_runs = runs_of(match.team_a_stats)
    b_runs = runs_of(match.team_b_stats)
    if a_runs > b_runs:
        return match.team_a
    if b_runs > a_runs:
        return match.team_b
    return None


def _batting_rows(stats: Optional[TeamStats]) -> List[Dict[str, Any]]:
    if stats is None:
        return []
    return [
        {**b.to_dict(), "strike_rate": strike_rate(b.runs, b.balls)}
        for b in stats.batting
    ]


def _bowling_rows(stats: Optional[TeamStats]) -> List[Dict[str, Any]]:
    if stats is None:
        return []
    return [
        {**b.to_dict(), "economy": economy_rate(b.runs, b.overs)}
        for b in stats.bowling
    ]


def scorecard(match: Match) -> Dict[str, Any]:
    """
    One innings view per side: the side's batting plus the opposing side's
    bowling against it. Rates are derived here on every call.
    """
    return {
        "team_a": {
            "team": match.team_a,
            "batting": _batting_rows(match.team_a_stats),
            "bowling": _bowling_rows(match.team_b_stats),
        },
        "team_b": {
            "team": match.team_b,
            "batting": _batting_rows(match.team_b_stats),
            "bowling": _bowling_rows(match.team_a_stats),
        },
    }
