# scoreboard_api/live_feed.py
from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Iterable, List, Optional

from scoreboard_api.models import Match

logger = logging.getLogger(__name__)

EVENT_TYPES = ("INSERT", "UPDATE", "DELETE")


class MatchFeed:
    """
    In-memory match list kept current by store change events.

    insert appends, update replaces by id, delete filters by id. Events are
    applied in delivery order; the last one wins. Webhook deliveries and
    public reads can arrive on different threads, so the list is only
    touched under the feed's lock.
    """

    def __init__(self) -> None:
        self._matches: List[Match] = []
        self._primed = False
        self._lock = threading.Lock()

    @property
    def primed(self) -> bool:
        with self._lock:
            return self._primed

    def load(self, matches: Iterable[Match]) -> None:
        loaded = list(matches)
        with self._lock:
            self._matches = loaded
            self._primed = True
        logger.info("match feed primed with %d matches", len(loaded))

    def reset(self) -> None:
        with self._lock:
            self._matches = []
            self._primed = False

    def snapshot(self) -> List[Match]:
        with self._lock:
            return list(self._matches)

    def apply_event(self, event: Dict[str, Any]) -> Optional[str]:
        """
        Applies one change payload of the form
        {"type": "INSERT"|"UPDATE"|"DELETE", "record": {...}, "old_record": {...}}.

        Returns the event type applied, or None when the event was ignored.
        """
        event_type = str(event.get("type") or "").upper()
        if event_type not in EVENT_TYPES:
            logger.warning("ignoring match event with type=%r", event.get("type"))
            return None

        if event_type == "DELETE":
            old = event.get("old_record") or {}
            old_id = str(old.get("id") or "")
            if not old_id:
                logger.warning("ignoring DELETE event without old_record.id")
                return None
            with self._lock:
                self._matches = [m for m in self._matches if m.id != old_id]
            return event_type

        record = event.get("record")
        if not isinstance(record, dict) or not record.get("id"):
            logger.warning("ignoring %s event without record.id", event_type)
            return None

        match = Match.from_row(record)
        with self._lock:
            if event_type == "INSERT":
                self._matches.append(match)
            else:
                self._matches = [match if m.id == match.id else m for m in self._matches]
        return event_type
