"""Simple Event Bus / Observer implementation for plan changes.

Event names used so far:
  plan.entry_created   -> payload {"entry": PlanEntry}
  plan.entry_updated   -> payload {"entry": PlanEntry, "fields": [str]}
  plan.entry_deleted   -> payload {"entry_id": str, "owner_id": str | None}
  plan.entry_completed -> payload {"entry": PlanEntry}
  plan.entry_skipped   -> payload {"entry": PlanEntry}
  plan.day_copied      -> payload {"owner_id": str, "source_date": str, "target_date": str, "count": int}

Subscribers are callables taking (event_name, payload).
"""
from __future__ import annotations
import logging
from collections import defaultdict
from typing import Callable, Any, Dict, List

logger = logging.getLogger(__name__)

# --- Event name constants (used across modules) ---
ENTRY_CREATED = "plan.entry_created"
ENTRY_UPDATED = "plan.entry_updated"
ENTRY_DELETED = "plan.entry_deleted"
ENTRY_COMPLETED = "plan.entry_completed"
ENTRY_SKIPPED = "plan.entry_skipped"
DAY_COPIED = "plan.day_copied"

ALL_EVENTS = (ENTRY_CREATED, ENTRY_UPDATED, ENTRY_DELETED, ENTRY_COMPLETED, ENTRY_SKIPPED, DAY_COPIED)


class EventBus:
	def __init__(self):
		self._subscribers: Dict[str, List[Callable[[str, Any], None]]] = defaultdict(list)

	def subscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		if callback not in self._subscribers[event_name]:
			self._subscribers[event_name].append(callback)

	def unsubscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		try:
			self._subscribers[event_name].remove(callback)
		except (ValueError, KeyError):
			pass

	def publish(self, event_name: str, payload: Any):
		for cb in list(self._subscribers.get(event_name, [])):
			try:
				cb(event_name, payload)
			except Exception:
				# a broken subscriber must not undo a mutation that already reached storage
				logger.exception("Error delivering %s to %r", event_name, cb)


# A singleton-like instance (can be imported)
GLOBAL_EVENT_BUS = EventBus()


__all__ = [
	'EventBus', 'GLOBAL_EVENT_BUS', 'ALL_EVENTS',
	'ENTRY_CREATED', 'ENTRY_UPDATED', 'ENTRY_DELETED', 'ENTRY_COMPLETED', 'ENTRY_SKIPPED', 'DAY_COPIED'
]
