"""Event helper utilities.

Publishing helpers for plan events, so the mutator does not build payload
dicts inline.

Quick import:
    from coach.events.event_helpers import publish_entry_created, publish_day_copied
"""
from __future__ import annotations
from typing import Any, Iterable, Optional

from .Event_Bus import (
    EventBus, GLOBAL_EVENT_BUS,
    ENTRY_CREATED, ENTRY_UPDATED, ENTRY_DELETED, ENTRY_COMPLETED, ENTRY_SKIPPED, DAY_COPIED
)

__all__ = [
    'publish_entry_created', 'publish_entry_updated', 'publish_entry_deleted',
    'publish_entry_completed', 'publish_entry_skipped', 'publish_day_copied'
]


def _bus(bus: Optional[EventBus]) -> EventBus:
    return bus if bus is not None else GLOBAL_EVENT_BUS


def publish_entry_created(entry: Any, bus: Optional[EventBus] = None):
    _bus(bus).publish(ENTRY_CREATED, {'entry': entry})


def publish_entry_updated(entry: Any, fields: Iterable[str], bus: Optional[EventBus] = None):
    _bus(bus).publish(ENTRY_UPDATED, {'entry': entry, 'fields': sorted(fields)})


def publish_entry_deleted(entry_id: str, owner_id: Optional[str] = None, bus: Optional[EventBus] = None):
    _bus(bus).publish(ENTRY_DELETED, {'entry_id': entry_id, 'owner_id': owner_id})


def publish_entry_completed(entry: Any, bus: Optional[EventBus] = None):
    _bus(bus).publish(ENTRY_COMPLETED, {'entry': entry})


def publish_entry_skipped(entry: Any, bus: Optional[EventBus] = None):
    _bus(bus).publish(ENTRY_SKIPPED, {'entry': entry})


def publish_day_copied(owner_id: str, source_date: str, target_date: str, count: int,
                       bus: Optional[EventBus] = None):
    """Publish a plan.day_copied event.

    Payload structure:
        { 'owner_id': str, 'source_date': str, 'target_date': str, 'count': int }
    """
    _bus(bus).publish(DAY_COPIED, {
        'owner_id': owner_id,
        'source_date': source_date,
        'target_date': target_date,
        'count': count,
    })
