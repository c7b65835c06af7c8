"""Activity feed for plan events.

Subscribes to the event bus for every plan event and stores a lightweight
in-memory ring buffer of recent events that the web layer can poll to show
what changed on a client's calendar (for example after another device edited
the same plan).

Design:
  * Each event gets an auto-increment integer id (cursor) so clients can
    request only newer events (since=<last_id_seen>).
  * A Lock guards the buffer; the feed is per process.
  * The buffer is capped at MAX_ACTIVITY_EVENTS.
"""
from __future__ import annotations
import logging
from typing import List, Dict, Any, Optional
from threading import Lock
from datetime import datetime, timezone

from coach.utilities.constants import MAX_ACTIVITY_EVENTS
from .Event_Bus import EventBus, GLOBAL_EVENT_BUS, ALL_EVENTS

logger = logging.getLogger(__name__)


class ActivityFeed:
    def __init__(self, max_events: int = MAX_ACTIVITY_EVENTS):
        self._lock = Lock()
        self._events: List[Dict[str, Any]] = []
        self._next_id = 1
        self.max_events = max_events
        self._bus: Optional[EventBus] = None

    def record(self, event_name: str, payload: Any):  # signature expected by EventBus
        evt = {
            'type': event_name,
            'ts': datetime.now(timezone.utc).isoformat(),
        }
        if isinstance(payload, dict):
            entry = payload.get('entry')
            if entry is not None:
                evt['entry_id'] = getattr(entry, 'id', None)
                evt['owner_id'] = getattr(entry, 'owner_id', None)
                evt['date'] = getattr(entry, 'scheduled_date', None)
                evt['name'] = getattr(entry, 'name', '')
                evt['status'] = getattr(entry, 'status', None)
            for k in ('entry_id', 'owner_id', 'source_date', 'target_date', 'count', 'fields'):
                if k in payload and k not in evt:
                    evt[k] = payload[k]
        with self._lock:
            evt['id'] = self._next_id
            self._next_id += 1
            self._events.append(evt)
            if len(self._events) > self.max_events:
                del self._events[: len(self._events) - self.max_events]

    def start(self, bus: Optional[EventBus] = None):
        """Idempotent start: subscribe once."""
        if self._bus is not None:
            return self
        self._bus = bus if bus is not None else GLOBAL_EVENT_BUS
        for name in ALL_EVENTS:
            self._bus.subscribe(name, self.record)
        logger.info("Activity feed subscribed to %d plan events", len(ALL_EVENTS))
        return self

    def stop(self):
        if self._bus is None:
            return
        for name in ALL_EVENTS:
            self._bus.unsubscribe(name, self.record)
        self._bus = None

    def get_events(self, since: int | None = None, owner_id: str | None = None) -> Dict[str, Any]:
        """Return events newer than 'since' (exclusive), optionally for one owner.

        Response includes next_cursor (largest id) so client can poll with since=next_cursor.
        """
        with self._lock:
            data = [e for e in self._events if since is None or e['id'] > since]
            next_cursor = self._events[-1]['id'] if self._events else since or 0
        if owner_id is not None:
            data = [e for e in data if e.get('owner_id') == owner_id]
        return {'events': data, 'next_cursor': next_cursor}


DEFAULT_FEED = ActivityFeed()


def start():
    DEFAULT_FEED.start()


def get_events(since: int | None = None, owner_id: str | None = None) -> Dict[str, Any]:
    return DEFAULT_FEED.get_events(since, owner_id)


__all__ = ['ActivityFeed', 'DEFAULT_FEED', 'start', 'get_events']
