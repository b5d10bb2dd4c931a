# scoreboard_api/points_table.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List

from scoreboard_api.models import Match, Standing, bowling_overs_of, runs_of
from scoreboard_api.overs_math import run_rate

POINTS_PER_WIN = 2


@dataclass
class TeamAggregate:
    """
    Running totals for one team across its completed matches.
    Overs are cricket-notation decimals as recorded by the bowling side.
    """
    team: str
    matches: int = 0
    wins: int = 0
    losses: int = 0
    runs_scored: int = 0
    runs_conceded: int = 0
    overs_played: float = 0.0
    overs_bowled: float = 0.0

    @property
    def points(self) -> int:
        return self.wins * POINTS_PER_WIN

    def nrr(self) -> float:
        """
        Net Run Rate = (runs_scored / overs_played) - (runs_conceded / overs_bowled)
        A zero denominator makes its term 0.
        """
        return run_rate(self.runs_scored, self.overs_played) - run_rate(self.runs_conceded, self.overs_bowled)


def _aggregate_for(table: Dict[str, TeamAggregate], team: str) -> TeamAggregate:
    agg = table.get(team)
    if agg is None:
        agg = TeamAggregate(team=team)
        table[team] = agg
    return agg


def apply_match(table: Dict[str, TeamAggregate], match: Match) -> None:
    """
    Folds one completed match into the aggregates.

    Overs faced by a side = overs delivered by the opposing bowlers, so each
    side's overs_played comes from the OTHER side's bowling figures.
    Equal runs record neither a win nor a loss.
    """
    agg_a = _aggregate_for(table, match.team_a)
    agg_b = _aggregate_for(table, match.team_b)

    a_runs = runs_of(match.team_a_stats)
    b_runs = runs_of(match.team_b_stats)

    a_overs_faced = bowling_overs_of(match.team_b_stats)
    b_overs_faced = bowling_overs_of(match.team_a_stats)

    agg_a.matches += 1
    agg_b.matches += 1

    agg_a.runs_scored += a_runs
    agg_a.runs_conceded += b_runs
    agg_a.overs_played += a_overs_faced
    agg_a.overs_bowled += b_overs_faced

    agg_b.runs_scored += b_runs
    agg_b.runs_conceded += a_runs
    agg_b.overs_played += b_overs_faced
    agg_b.overs_bowled += a_overs_faced

    if a_runs > b_runs:
        agg_a.wins += 1
        agg_b.losses += 1
    elif b_runs > a_runs:
        agg_b.wins += 1
        agg_a.losses += 1


def compute_sorted_table(aggregates: Iterable[TeamAggregate]) -> List[Standing]:
    """
    Returns standings sorted by:
    1) Points (desc)
    2) NRR (desc)
    """
    def key_fn(agg: TeamAggregate):
        return (agg.points, agg.nrr())

    sorted_aggs = sorted(aggregates, key=key_fn, reverse=True)

    out: List[Standing] = []
    for idx, agg in enumerate(sorted_aggs, start=1):
        out.append(Standing(
            rank=idx,
            team=agg.team,
            matches=agg.matches,
            wins=agg.wins,
            losses=agg.losses,
            points=agg.points,
            nrr=agg.nrr(),
        ))
    return out


def calculate_standings(matches: Iterable[Match]) -> List[Standing]:
    """
    Ranked league table from the current match list.

    Only completed matches count. Teams are keyed by their literal name, so
    only teams with at least one completed match appear. Absent statistics
    count as zero.
    """
    table: Dict[str, TeamAggregate] = {}
    for match in matches:
        if not match.is_completed:
            continue
        apply_match(table, match)
    return compute_sorted_table(table.values())
