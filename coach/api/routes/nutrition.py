from datetime import date as _date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from coach.api.deps import get_store
from coach.infra.Entry_Store import EntryStore
from coach.logic.calendar.index import build_index
from coach.logic.reporting.nutrition import summarize_by_kind, summarize_entries
from coach.logic.reporting.portions import scale_portion
from coach.utilities.constants import MEAL
from coach.utilities.dates import to_date_string
from coach.utilities.validators import PortionInput, validate

router = APIRouter(prefix="/api/nutrition", tags=["nutrition"])


@router.post("/portion")
def portion(payload: Dict[str, Any] = Body(...)):
    """Scale per-100g (or per-serving) values to the chosen quantity."""
    inp = validate(PortionInput, payload)
    return scale_portion(inp.base, inp.quantity, inp.base_quantity)


@router.get("/{owner_id}/day")
async def day_nutrition(owner_id: str, date: Optional[str] = Query(default=None),
                        store: EntryStore = Depends(get_store)):
    day = to_date_string(date or _date.today())
    entries = [e for e in await store.fetch_entries(owner_id, day, day) if e.family == MEAL]
    ordered = build_index(entries).get(day)
    return {
        "date": day,
        "entries": [e.to_dict() for e in ordered],
        "totals": summarize_entries(ordered),
        "by_kind": summarize_by_kind(ordered),
    }
