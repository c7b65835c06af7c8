"""In-process entry store: the default backend and the fake used by tests."""
import logging
from datetime import datetime
from itertools import count
from typing import Any, Dict, List, Optional

from coach.domain.PlanEntry import PlanEntry
from coach.domain.Template import Template
from coach.domain.errors import NotFoundError
from coach.infra.Entry_Store import EntryStore, apply_patch

logger = logging.getLogger(__name__)


class InMemoryEntryStore(EntryStore):
    def __init__(self, entries: Optional[List[PlanEntry]] = None,
                 templates: Optional[List[Template]] = None):
        self._entries: Dict[str, PlanEntry] = {}
        self._templates: Dict[str, Template] = {}
        self._ids = count(1)
        # (operation, argument) log; tests use it to check call ordering
        self.calls: List[tuple] = []
        for entry in entries or []:
            self._insert(entry)
        for template in templates or []:
            self._insert_template(template)

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    def _insert(self, entry: PlanEntry) -> PlanEntry:
        stored = PlanEntry.from_dict(entry.to_dict())
        stored.id = stored.id or self._next_id("entry")
        stored.created_at = stored.created_at or datetime.now().isoformat()
        self._entries[stored.id] = stored
        return PlanEntry.from_dict(stored.to_dict())

    def _insert_template(self, template: Template) -> Template:
        stored = Template.from_dict(template.to_dict())
        stored.id = stored.id or self._next_id("template")
        self._templates[stored.id] = stored
        return Template.from_dict(stored.to_dict())

    async def fetch_entries(self, owner_id: str, start: str, end: str) -> List[PlanEntry]:
        self.calls.append(("fetch_entries", (owner_id, start, end)))
        # dicts keep insertion order, so a stable sort by date leaves creation order inside a day
        found = [e for e in self._entries.values()
                 if e.owner_id == owner_id and start <= e.scheduled_date <= end]
        found.sort(key=lambda e: e.scheduled_date)
        return [PlanEntry.from_dict(e.to_dict()) for e in found]

    async def get_entry(self, entry_id: str) -> PlanEntry:
        self.calls.append(("get_entry", entry_id))
        entry = self._entries.get(entry_id)
        if entry is None:
            raise NotFoundError(f"Entry '{entry_id}' not found")
        return PlanEntry.from_dict(entry.to_dict())

    async def create_entry(self, entry: PlanEntry) -> PlanEntry:
        self.calls.append(("create_entry", entry.scheduled_date))
        created = self._insert(entry)
        logger.debug("Created entry %s on %s", created.id, created.scheduled_date)
        return created

    async def update_entry(self, entry_id: str, patch: Dict[str, Any]) -> PlanEntry:
        self.calls.append(("update_entry", entry_id))
        entry = self._entries.get(entry_id)
        if entry is None:
            raise NotFoundError(f"Entry '{entry_id}' not found")
        updated = apply_patch(entry, patch)
        self._entries[entry_id] = updated
        return PlanEntry.from_dict(updated.to_dict())

    async def delete_entry(self, entry_id: str) -> None:
        self.calls.append(("delete_entry", entry_id))
        if self._entries.pop(entry_id, None) is None:
            raise NotFoundError(f"Entry '{entry_id}' not found")

    async def fetch_templates(self, owner_id: str) -> List[Template]:
        self.calls.append(("fetch_templates", owner_id))
        return [Template.from_dict(t.to_dict()) for t in self._templates.values()
                if t.owner_id in (None, owner_id)]

    async def create_template(self, template: Template) -> Template:
        self.calls.append(("create_template", template.name))
        return self._insert_template(template)

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ['InMemoryEntryStore']
