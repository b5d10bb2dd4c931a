# main.py
from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from scoreboard_api import cache, config
from scoreboard_api.fixtures import group_by_date, match_result, score_summary, scorecard
from scoreboard_api.live_feed import MatchFeed
from scoreboard_api.models import Match, TeamStats
from scoreboard_api.overs_math import format_nrr
from scoreboard_api.points_table import calculate_standings
from scoreboard_api.scoring import (
    clean_roster,
    default_team_stats,
    edit_batting,
    edit_bowling,
    prepare_for_save,
)
from scoreboard_api.store_client import CACHE_NAMESPACE, StoreClient, StoreError

logger = logging.getLogger(__name__)

# -----------------------
# App
# -----------------------
app = FastAPI(
    title="Cricket Tournament Scoreboard API",
    version="0.1.0",
    description="Fixtures, points table and admin scoring for a cricket tournament",
)

_store: Optional[StoreClient] = None
_feed = MatchFeed()


@app.on_event("startup")
def on_startup():
    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    config.validate_config()
    logger.info("scoreboard api started (admin guard %s)", "on" if config.SCOREBOARD_ADMIN_TOKEN else "off")


@app.exception_handler(StoreError)
async def _store_error_handler(request: Request, exc: StoreError):
    logger.error("store failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=502, content={"detail": f"Store unavailable: {exc}"})


@app.get("/health")
def health_check():
    return {"status": "ok", "time": datetime.utcnow().isoformat() + "Z"}


# -----------------------
# Dependencies
# -----------------------
def get_store() -> StoreClient:
    global _store
    if _store is None:
        _store = StoreClient(
            config.SUPABASE_URL,
            config.SUPABASE_KEY,
            rest_path=config.SUPABASE_REST_PATH,
            timeout=config.STORE_TIMEOUT_SECONDS,
            cache_ttl=config.STORE_CACHE_TTL_SECONDS,
        )
    return _store


def get_feed() -> MatchFeed:
    return _feed


def require_admin(x_admin_token: Optional[str] = Header(None)) -> None:
    required = config.SCOREBOARD_ADMIN_TOKEN
    if not required:
        return
    if (x_admin_token or "").strip() != required:
        raise HTTPException(status_code=401, detail="Unauthorized: invalid X-Admin-Token")


# -----------------------
# Helpers
# -----------------------
def _current_matches(store: StoreClient, feed: MatchFeed) -> List[Match]:
    # Live feed wins when it has been primed by change events
    if feed.primed:
        return feed.snapshot()
    return store.list_matches()


def _match_out(match: Match) -> Dict[str, Any]:
    return {
        **match.to_row(),
        "summary": score_summary(match),
        "winner": match_result(match),
    }


def _require_match(store: StoreClient, match_id: str) -> Match:
    match = store.get_match(match_id)
    if match is None:
        raise HTTPException(status_code=404, detail=f"Unknown match: {match_id}")
    return match


def _roster(store: StoreClient, team_name: str) -> List[str]:
    for team in store.list_teams():
        if team.name == team_name:
            return list(team.players)
    return []


# -----------------------
# Public endpoints
# -----------------------
@app.get("/api/matches")
def list_matches(store: StoreClient = Depends(get_store), feed: MatchFeed = Depends(get_feed)):
    matches = _current_matches(store, feed)
    return {
        "count": len(matches),
        "dates": [
            {"date": date, "matches": [_match_out(m) for m in day]}
            for date, day in group_by_date(matches)
        ],
    }


@app.get("/api/matches/{match_id}")
def get_match(match_id: str, store: StoreClient = Depends(get_store)):
    match = _require_match(store, match_id)
    return {**_match_out(match), "scorecard": scorecard(match)}


@app.get("/api/standings")
def get_standings(store: StoreClient = Depends(get_store), feed: MatchFeed = Depends(get_feed)):
    standings = calculate_standings(_current_matches(store, feed))
    out: Dict[str, Any] = {
        "standings": [{**asdict(s), "nrr_display": format_nrr(s.nrr)} for s in standings],
    }
    if not standings:
        out["note"] = "No completed matches yet"
    return out


@app.get("/api/teams")
def list_teams(store: StoreClient = Depends(get_store)):
    return {"teams": [t.to_row() for t in store.list_teams()]}


# -----------------------
# Admin request bodies
# -----------------------
MatchStatusIn = Literal["scheduled", "live", "completed"]
MatchTypeIn = Literal["group", "semi-final", "final"]


class BattingIn(BaseModel):
    player: str = ""
    runs: int = Field(0, ge=0)
    balls: int = Field(0, ge=0)
    fours: int = Field(0, ge=0)
    extras: int = Field(0, ge=0)
    ones: int = Field(0, ge=0)
    twos: int = Field(0, ge=0)


class BowlingIn(BaseModel):
    player: str = ""
    overs: float = Field(0.0, ge=0, description="Cricket notation, e.g. 3.4 = 3 overs 4 balls")
    maidens: int = Field(0, ge=0)
    runs: int = Field(0, ge=0)
    wickets: int = Field(0, ge=0, le=10)


class TeamStatsIn(BaseModel):
    batting: List[BattingIn] = Field(default_factory=list)
    bowling: List[BowlingIn] = Field(default_factory=list)

    def to_stats(self) -> TeamStats:
        return TeamStats.from_dict(self.model_dump())


class MatchCreateRequest(BaseModel):
    date: str = Field(..., min_length=1, description="Calendar label, e.g. 9th February")
    match_number: int = Field(..., ge=1)
    team_a: str = Field(..., min_length=1)
    team_b: str = Field(..., min_length=1)
    status: MatchStatusIn = "scheduled"
    match_type: MatchTypeIn = "group"


class MatchUpdateRequest(BaseModel):
    team_a_stats: Optional[TeamStatsIn] = None
    team_b_stats: Optional[TeamStatsIn] = None
    status: Optional[MatchStatusIn] = None


class StatsEditRequest(BaseModel):
    stats: TeamStatsIn
    table: Literal["batting", "bowling"]
    index: int = Field(..., ge=0)
    field: str
    value: Any = None


class RosterRequest(BaseModel):
    players: List[str] = Field(default_factory=list)
    player_photos: Optional[List[str]] = None


class TeamCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    players: List[str] = Field(default_factory=list)
    player_photos: Optional[List[str]] = None


class RenameRequest(BaseModel):
    name: str = Field(..., min_length=1)


# -----------------------
# Admin endpoints
# -----------------------
@app.post("/api/admin/matches", dependencies=[Depends(require_admin)])
def create_match(req: MatchCreateRequest, store: StoreClient = Depends(get_store)):
    team_a = req.team_a.strip()
    team_b = req.team_b.strip()
    if team_a == team_b:
        raise HTTPException(status_code=400, detail="team_a and team_b must be different")

    match = store.insert_match({**req.model_dump(), "team_a": team_a, "team_b": team_b})
    return _match_out(match)


@app.put("/api/admin/matches/{match_id}", dependencies=[Depends(require_admin)])
def save_match(match_id: str, req: MatchUpdateRequest, store: StoreClient = Depends(get_store)):
    current = _require_match(store, match_id)

    team_a_stats = prepare_for_save(req.team_a_stats.to_stats()) if req.team_a_stats is not None else current.team_a_stats
    team_b_stats = prepare_for_save(req.team_b_stats.to_stats()) if req.team_b_stats is not None else current.team_b_stats

    fields = {
        "team_a_stats": team_a_stats.to_dict() if team_a_stats is not None else None,
        "team_b_stats": team_b_stats.to_dict() if team_b_stats is not None else None,
        "status": req.status or current.status,
    }
    updated = store.update_match(match_id, fields)
    if updated is None:
        raise HTTPException(status_code=404, detail=f"Unknown match: {match_id}")
    return _match_out(updated)


@app.delete("/api/admin/matches/{match_id}", dependencies=[Depends(require_admin)])
def delete_match(match_id: str, store: StoreClient = Depends(get_store)):
    _require_match(store, match_id)
    store.delete_match(match_id)
    return {"deleted": match_id}


@app.get("/api/admin/matches/{match_id}/stats-template", dependencies=[Depends(require_admin)])
def stats_template(match_id: str, store: StoreClient = Depends(get_store)):
    match = _require_match(store, match_id)
    return {
        "match_id": match.id,
        "status": match.status,
        "team_a": default_team_stats(_roster(store, match.team_a), match.team_a_stats).to_dict(),
        "team_b": default_team_stats(_roster(store, match.team_b), match.team_b_stats).to_dict(),
    }


@app.post("/api/admin/stats/edit", dependencies=[Depends(require_admin)])
def edit_stats(req: StatsEditRequest):
    stats = req.stats.to_stats()
    try:
        if req.table == "batting":
            updated = edit_batting(stats, req.index, req.field, req.value)
        else:
            updated = edit_bowling(stats, req.index, req.field, req.value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return updated.to_dict()


@app.post("/api/admin/teams", dependencies=[Depends(require_admin)])
def create_team(req: TeamCreateRequest, store: StoreClient = Depends(get_store)):
    name = req.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Team name is required")
    if any(t.name == name for t in store.list_teams()):
        raise HTTPException(status_code=409, detail=f"Team already exists: {name}")

    players, photos = clean_roster(req.players, req.player_photos or [])
    team = store.insert_team({"name": name, "players": players, "player_photos": photos})
    return team.to_row()


@app.put("/api/admin/teams/{team_id}/players", dependencies=[Depends(require_admin)])
def save_roster(team_id: str, req: RosterRequest, store: StoreClient = Depends(get_store)):
    team = store.get_team(team_id)
    if team is None:
        raise HTTPException(status_code=404, detail=f"Unknown team: {team_id}")

    photos = req.player_photos if req.player_photos is not None else team.player_photos
    players, photos = clean_roster(req.players, photos)

    updated = store.update_team(team_id, {"players": players, "player_photos": photos})
    if updated is None:
        raise HTTPException(status_code=404, detail=f"Unknown team: {team_id}")
    return updated.to_row()


@app.post("/api/admin/teams/{team_id}/rename", dependencies=[Depends(require_admin)])
def rename_team(team_id: str, req: RenameRequest, store: StoreClient = Depends(get_store)):
    new_name = req.name.strip()
    if not new_name:
        raise HTTPException(status_code=400, detail="Team name is required")

    updated = store.rename_team(team_id, new_name)
    if updated is None:
        raise HTTPException(status_code=404, detail=f"Unknown team: {team_id}")
    return updated.to_row()


@app.get("/api/admin/cache", dependencies=[Depends(require_admin)])
def cache_snapshot():
    return {"keys": cache.debug_snapshot()}


# -----------------------
# Store change events (live feed)
# -----------------------
class MatchEventIn(BaseModel):
    type: str
    table: str = "matches"
    record: Optional[Dict[str, Any]] = None
    old_record: Optional[Dict[str, Any]] = None


@app.post("/api/webhooks/matches", dependencies=[Depends(require_admin)])
def match_event(
    event: MatchEventIn,
    store: StoreClient = Depends(get_store),
    feed: MatchFeed = Depends(get_feed),
):
    if event.table != "matches":
        raise HTTPException(status_code=400, detail=f"Unexpected table: {event.table}")

    # Drop cached reads; the store has changed underneath them
    cache.invalidate(CACHE_NAMESPACE)

    if not feed.primed:
        # A fresh fetch already reflects this event
        feed.load(store.list_matches())
        return {"applied": None, "primed": True, "count": len(feed.snapshot())}

    applied = feed.apply_event(event.model_dump())
    return {"applied": applied, "primed": True, "count": len(feed.snapshot())}
