"""JSON file entry store.

Entries and templates live in two JSON arrays under the data directory.
Every write goes to a temporary file first and is then moved over the
existing file, so a crash never leaves a half-written file behind.
"""
import json
import logging
import os
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional
from uuid import uuid4

from coach.domain.PlanEntry import PlanEntry
from coach.domain.Template import Template
from coach.domain.errors import NotFoundError, StorageError
from coach.infra.Entry_Store import EntryStore, apply_patch
from coach.infra.paths import DATA_DIR, ENTRIES_FILE_NAME, TEMPLATES_FILE_NAME

logger = logging.getLogger(__name__)


def _load(path: Path) -> List[dict]:
    if not path.exists():
        return []
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f) or []
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON in %s: %s", path, e)
        raise StorageError(f"Data file {path.name} is corrupted") from e
    except OSError as e:
        logger.error("Cannot read %s: %s", path, e)
        raise StorageError(f"Cannot read {path.name}: {e}") from e


def _atomic_write(path: Path, records: list) -> None:
    try:
        os.makedirs(path.parent, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.stem}_", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                json.dump(records, tmp, indent=2, ensure_ascii=False)
            shutil.move(tmp_path, str(path))
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
    except OSError as e:
        logger.error("Cannot write %s: %s", path, e)
        raise StorageError(f"Cannot write {path.name}: {e}") from e


class JsonEntryStore(EntryStore):
    def __init__(self, data_dir: Optional[Path] = None):
        self.data_dir = Path(data_dir) if data_dir is not None else DATA_DIR
        self.entries_file = self.data_dir / ENTRIES_FILE_NAME
        self.templates_file = self.data_dir / TEMPLATES_FILE_NAME

    def _entries(self) -> List[dict]:
        return _load(self.entries_file)

    def _find(self, records: List[dict], entry_id: str) -> int:
        for i, rec in enumerate(records):
            if rec.get("id") == entry_id:
                return i
        raise NotFoundError(f"Entry '{entry_id}' not found")

    async def fetch_entries(self, owner_id: str, start: str, end: str) -> List[PlanEntry]:
        found = [PlanEntry.from_dict(r) for r in self._entries()
                 if r.get("owner_id") == owner_id and start <= (r.get("scheduled_date") or "") <= end]
        found.sort(key=lambda e: e.scheduled_date)
        return found

    async def get_entry(self, entry_id: str) -> PlanEntry:
        records = self._entries()
        return PlanEntry.from_dict(records[self._find(records, entry_id)])

    async def create_entry(self, entry: PlanEntry) -> PlanEntry:
        records = self._entries()
        data = entry.to_dict()
        data["id"] = data.get("id") or uuid4().hex
        data["created_at"] = data.get("created_at") or datetime.now().isoformat()
        records.append(data)
        _atomic_write(self.entries_file, records)
        logger.info("Saved entry %s (%s) on %s", data["id"], data["kind"], data["scheduled_date"])
        return PlanEntry.from_dict(data)

    async def update_entry(self, entry_id: str, patch: Dict[str, Any]) -> PlanEntry:
        records = self._entries()
        i = self._find(records, entry_id)
        updated = apply_patch(PlanEntry.from_dict(records[i]), patch)
        records[i] = updated.to_dict()
        _atomic_write(self.entries_file, records)
        return updated

    async def delete_entry(self, entry_id: str) -> None:
        records = self._entries()
        del records[self._find(records, entry_id)]
        _atomic_write(self.entries_file, records)

    async def fetch_templates(self, owner_id: str) -> List[Template]:
        return [Template.from_dict(r) for r in _load(self.templates_file)
                if r.get("owner_id") in (None, owner_id)]

    async def create_template(self, template: Template) -> Template:
        records = _load(self.templates_file)
        data = template.to_dict()
        data["id"] = data.get("id") or uuid4().hex
        records.append(data)
        _atomic_write(self.templates_file, records)
        return Template.from_dict(data)


__all__ = ['JsonEntryStore']
