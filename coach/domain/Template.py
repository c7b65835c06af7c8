"""Template domain entity: a reusable, undated entry payload."""
import copy
from typing import Optional

from coach.domain.PlanEntry import PlanEntry, family_of, payload_for_kind


class Template:
    def __init__(self, kind: str, name: str = "", payload=None, owner_id: Optional[str] = None,
                 notes: str = "", id: Optional[str] = None):
        self.id = id
        self.owner_id = owner_id  # None means available to every client
        self.kind = kind
        self.family = family_of(kind)
        self.name = name
        if payload is None or isinstance(payload, dict):
            payload = payload_for_kind(kind, payload)
        self.payload = payload
        self.notes = notes or ""

    def __str__(self) -> str:
        return f"Template {self.name} ({self.kind})"

    __repr__ = __str__

    def instantiate(self, owner_id: str, scheduled_date) -> PlanEntry:
        """New unsaved planned entry on the given day."""
        return PlanEntry(
            owner_id=owner_id,
            scheduled_date=scheduled_date,
            kind=self.kind,
            name=self.name,
            payload=copy.deepcopy(self.payload),
            notes=self.notes,
        )

    @staticmethod
    def from_entry(entry: PlanEntry, name: Optional[str] = None) -> "Template":
        return Template(
            kind=entry.kind,
            name=name or entry.name,
            payload=copy.deepcopy(entry.payload),
            owner_id=entry.owner_id,
            notes=entry.notes,
        )

    @staticmethod
    def from_dict(data):
        d = dict(data)
        return Template(
            id=d.get("id"),
            owner_id=d.get("owner_id"),
            kind=d.get("kind"),
            name=d.get("name") or "",
            payload=d.get("payload"),
            notes=d.get("notes") or "",
        )

    def to_dict(self):
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "kind": self.kind,
            "family": self.family,
            "name": self.name,
            "payload": self.payload.to_dict(),
            "notes": self.notes,
        }
