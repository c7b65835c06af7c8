from typing import Any, Dict, Optional
import logging

from fastapi import APIRouter, Body, Depends, Query

from coach.api.deps import get_mutator
from coach.events.activity_feed import get_events
from coach.logic.planner.mutator import EntryMutator
from coach.utilities.export_import import import_entries
from coach.utilities.validators import (
    CopyDayInput, DuplicateEntryInput, ImportInput, SaveTemplateInput, validate
)

router = APIRouter(prefix="/api", tags=["entries"])
logger = logging.getLogger(__name__)


def _entry(entry):
    return entry.to_dict() if entry is not None else None


# -------------------- Create / edit / delete --------------------
@router.post("/entries", status_code=201)
async def create_entry(payload: Dict[str, Any] = Body(...),
                       mutator: EntryMutator = Depends(get_mutator)):
    data = dict(payload)
    owner_id = data.pop("owner_id", None)
    scheduled_date = data.pop("scheduled_date", None)
    kind = data.pop("kind", None)
    return _entry(await mutator.create(owner_id, scheduled_date, kind, data))


@router.post("/entries/import", status_code=201)
async def import_plan(payload: Dict[str, Any] = Body(...),
                      mutator: EntryMutator = Depends(get_mutator)):
    inp = validate(ImportInput, payload)
    result = await import_entries(mutator, inp.owner_id, inp.entries)
    return {
        "imported": [_entry(e) for e in result["imported"]],
        "count": len(result["imported"]),
        "errors": result["errors"],
    }


@router.patch("/entries/{entry_id}")
async def update_entry(entry_id: str, payload: Dict[str, Any] = Body(...),
                       mutator: EntryMutator = Depends(get_mutator)):
    return _entry(await mutator.update(entry_id, payload))


@router.delete("/entries/{entry_id}")
async def delete_entry(entry_id: str, mutator: EntryMutator = Depends(get_mutator)):
    await mutator.confirmed_delete(entry_id)
    return {"deleted": entry_id}


# -------------------- Status --------------------
@router.post("/entries/{entry_id}/complete")
async def complete_entry(entry_id: str, mutator: EntryMutator = Depends(get_mutator)):
    """An entry deleted in the meantime is ignored: ``entry`` comes back null."""
    return {"entry": _entry(await mutator.mark_complete(entry_id))}


@router.post("/entries/{entry_id}/skip")
async def skip_entry(entry_id: str, mutator: EntryMutator = Depends(get_mutator)):
    return {"entry": _entry(await mutator.mark_skipped(entry_id))}


# -------------------- Copies & templates --------------------
@router.post("/entries/{entry_id}/duplicate", status_code=201)
async def duplicate_entry(entry_id: str, payload: Dict[str, Any] = Body(...),
                          mutator: EntryMutator = Depends(get_mutator)):
    inp = validate(DuplicateEntryInput, payload)
    return _entry(await mutator.duplicate_entry(entry_id, inp.target_date))


@router.post("/entries/{entry_id}/template", status_code=201)
async def save_template(entry_id: str, payload: Optional[Dict[str, Any]] = Body(default=None),
                        mutator: EntryMutator = Depends(get_mutator)):
    inp = validate(SaveTemplateInput, payload or {})
    template = await mutator.save_as_template(entry_id, inp.name)
    return template.to_dict()


@router.post("/days/copy", status_code=201)
async def copy_day(payload: Dict[str, Any] = Body(...),
                   mutator: EntryMutator = Depends(get_mutator)):
    inp = validate(CopyDayInput, payload)
    copied = await mutator.copy_day_to_many(
        inp.owner_id, inp.source_date, inp.target_dates, replace_existing=inp.replace_existing
    )
    return {
        "source_date": inp.source_date,
        "copied": {day: [_entry(e) for e in entries] for day, entries in copied.items()},
        "count": sum(len(entries) for entries in copied.values()),
    }


# -------------------- Activity --------------------
@router.get("/activity")
def activity(since: Optional[int] = Query(default=None),
             owner_id: Optional[str] = Query(default=None)):
    """Poll recent plan events; pass next_cursor back as ``since``."""
    return get_events(since, owner_id)
