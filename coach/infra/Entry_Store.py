"""Storage interface the plan engine talks to.

Every method is awaitable and either resolves with data or raises:
NotFoundError for unknown ids, StorageError for backend failures.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from coach.domain.PlanEntry import PlanEntry
from coach.domain.Template import Template


class EntryStore(ABC):
    @abstractmethod
    async def fetch_entries(self, owner_id: str, start: str, end: str) -> List[PlanEntry]:
        """Entries of ``owner_id`` with start <= scheduled_date <= end, by date then creation."""

    @abstractmethod
    async def get_entry(self, entry_id: str) -> PlanEntry:
        ...

    @abstractmethod
    async def create_entry(self, entry: PlanEntry) -> PlanEntry:
        """Persist a new entry; the returned copy carries the assigned id."""

    @abstractmethod
    async def update_entry(self, entry_id: str, patch: Dict[str, Any]) -> PlanEntry:
        """Apply a partial update. Never creates a missing entry."""

    @abstractmethod
    async def delete_entry(self, entry_id: str) -> None:
        ...

    @abstractmethod
    async def fetch_templates(self, owner_id: str) -> List[Template]:
        """Templates of the owner plus global ones (owner_id None)."""

    @abstractmethod
    async def create_template(self, template: Template) -> Template:
        ...

    async def aclose(self) -> None:
        return None


def apply_patch(entry: PlanEntry, patch: Dict[str, Any]) -> PlanEntry:
    """Return a new entry with ``patch`` applied (payload fields are merged)."""
    data = entry.to_dict()
    for key, value in patch.items():
        if key == 'payload' and isinstance(value, dict):
            merged = dict(data['payload'])
            merged.update(value)
            data['payload'] = merged
        elif key not in ('id', 'family'):
            data[key] = value
    return PlanEntry.from_dict(data)


__all__ = ['EntryStore', 'apply_patch']
