# scoreboard_api/store_client.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from scoreboard_api import cache
from scoreboard_api.models import Match, Team

logger = logging.getLogger(__name__)

CACHE_NAMESPACE = "store"


class StoreError(Exception):
    """Raised when a call to the hosted table store fails or is misconfigured."""
    pass


class StoreClient:
    """
    Thin PostgREST client for the `teams` and `matches` tables.

    Built once at startup from configuration and handed to request handlers
    as a dependency. Reads are cached for `cache_ttl` seconds; every write
    clears the cache so the next read re-fetches.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        rest_path: str = "/rest/v1",
        timeout: int = 12,
        cache_ttl: int = 30,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not base_url.startswith("http"):
            raise StoreError("Store URL must start with http/https")
        if not api_key:
            raise StoreError("Store API key is not configured")

        self.base_url = f"{base_url.rstrip('/')}{rest_path}"
        self.api_key = api_key
        self.timeout = timeout
        self.cache_ttl = cache_ttl
        self.session = session

    # -----------------------
    # transport
    # -----------------------
    def _headers(self, *, returning: bool = False) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if returning:
            headers["Prefer"] = "return=representation"
        return headers

    def _request(
        self,
        method: str,
        table: str,
        *,
        params: Optional[Dict[str, str]] = None,
        body: Any = None,
        returning: bool = False,
    ) -> Any:
        url = f"{self.base_url}/{table}"
        send = self.session.request if self.session is not None else requests.request

        logger.debug("store %s %s params=%s", method, table, params)
        try:
            resp = send(
                method,
                url,
                params=params,
                json=body,
                headers=self._headers(returning=returning),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("store %s %s failed: %s", method, table, e)
            raise StoreError(f"Network error: {e}") from e

        if resp.status_code >= 400:
            logger.warning("store %s %s -> HTTP %s", method, table, resp.status_code)
            raise StoreError(f"HTTP {resp.status_code}: {resp.text}")

        if resp.status_code == 204 or not resp.content:
            return None

        try:
            return resp.json()
        except ValueError as e:
            raise StoreError(f"Invalid JSON response: {e}") from e

    def _write(self, method: str, table: str, **kwargs: Any) -> Any:
        try:
            return self._request(method, table, **kwargs)
        finally:
            cache.invalidate(CACHE_NAMESPACE)

    def _cached_select(self, table: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        key = cache.make_key(CACHE_NAMESPACE, table, *(f"{k}={v}" for k, v in sorted(params.items())))
        cached = cache.get(key)
        if cached is not None:
            return cached

        rows = self._request("GET", table, params=params) or []
        if not isinstance(rows, list):
            raise StoreError(f"Expected a list of rows from {table}")

        cache.set(key, rows, ttl_seconds=self.cache_ttl)
        return rows

    @staticmethod
    def _single(rows: Any) -> Optional[Dict[str, Any]]:
        if isinstance(rows, list) and rows:
            return rows[0]
        return None

    # -----------------------
    # matches
    # -----------------------
    def list_matches(self) -> List[Match]:
        rows = self._cached_select("matches", {"select": "*", "order": "date.asc,match_number.asc"})
        return [Match.from_row(r) for r in rows]

    def get_match(self, match_id: str) -> Optional[Match]:
        rows = self._cached_select("matches", {"select": "*", "id": f"eq.{match_id}"})
        row = self._single(rows)
        return Match.from_row(row) if row is not None else None

    def insert_match(self, fields: Dict[str, Any]) -> Match:
        rows = self._write("POST", "matches", body=fields, returning=True)
        row = self._single(rows)
        if row is None:
            raise StoreError("Insert into matches returned no row")
        logger.info("match created id=%s %s vs %s", row.get("id"), row.get("team_a"), row.get("team_b"))
        return Match.from_row(row)

    def update_match(self, match_id: str, fields: Dict[str, Any]) -> Optional[Match]:
        rows = self._write("PATCH", "matches", params={"id": f"eq.{match_id}"}, body=fields, returning=True)
        row = self._single(rows)
        if row is None:
            return None
        logger.info("match updated id=%s status=%s", match_id, row.get("status"))
        return Match.from_row(row)

    def delete_match(self, match_id: str) -> None:
        self._write("DELETE", "matches", params={"id": f"eq.{match_id}"})
        logger.info("match deleted id=%s", match_id)

    # -----------------------
    # teams
    # -----------------------
    def list_teams(self) -> List[Team]:
        rows = self._cached_select("teams", {"select": "*", "order": "name.asc"})
        return [Team.from_row(r) for r in rows]

    def get_team(self, team_id: str) -> Optional[Team]:
        rows = self._cached_select("teams", {"select": "*", "id": f"eq.{team_id}"})
        row = self._single(rows)
        return Team.from_row(row) if row is not None else None

    def insert_team(self, fields: Dict[str, Any]) -> Team:
        rows = self._write("POST", "teams", body=fields, returning=True)
        row = self._single(rows)
        if row is None:
            raise StoreError("Insert into teams returned no row")
        logger.info("team created id=%s name=%s", row.get("id"), row.get("name"))
        return Team.from_row(row)

    def update_team(self, team_id: str, fields: Dict[str, Any]) -> Optional[Team]:
        rows = self._write("PATCH", "teams", params={"id": f"eq.{team_id}"}, body=fields, returning=True)
        row = self._single(rows)
        return Team.from_row(row) if row is not None else None

    def rename_team(self, team_id: str, new_name: str) -> Optional[Team]:
        """
        Renames a team and rewrites every match that references the old name.

        Matches are linked by literal name, so the rewrite is a bulk update on
        team_a and team_b. The calls are sequential with no transaction.
        """
        team = self.get_team(team_id)
        if team is None:
            return None

        old_name = team.name
        if old_name == new_name:
            return team

        updated = self.update_team(team_id, {"name": new_name})
        if updated is None:
            # Gone between the read and the write; leave matches alone
            return None

        as_a = self._write("PATCH", "matches", params={"team_a": f"eq.{old_name}"}, body={"team_a": new_name}, returning=True)
        as_b = self._write("PATCH", "matches", params={"team_b": f"eq.{old_name}"}, body={"team_b": new_name}, returning=True)

        logger.info(
            "team renamed id=%s %r -> %r (matches rewritten: team_a=%d team_b=%d)",
            team_id, old_name, new_name, len(as_a or []), len(as_b or []),
        )
        return updated
