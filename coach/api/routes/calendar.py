from datetime import date as _date
from typing import Optional
import logging

from fastapi import APIRouter, Depends, Query, Response

from coach.api.deps import get_store
from coach.domain.errors import ValidationError
from coach.infra.Entry_Store import EntryStore
from coach.infra.pdf_utils import generate_pdf_for_month
from coach.logic.calendar.grid import generate_week_grid
from coach.logic.planner.view import CalendarView, default_first_weekday
from coach.logic.reporting.nutrition import summarize_grid, summarize_period
from coach.utilities.constants import FAMILIES
from coach.utilities.export_import import entries_to_csv, entries_to_json

router = APIRouter(prefix="/api/calendar", tags=["calendar"])
logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("pdf", "json", "csv")


async def _load_view(store, owner_id, year, month, family, first_weekday) -> CalendarView:
    view = CalendarView(store, owner_id, family=family, first_weekday=first_weekday,
                        year=year, month=month)
    await view.refresh()
    return view


@router.get("/{owner_id}")
async def get_month(owner_id: str,
                    year: Optional[int] = Query(default=None),
                    month: Optional[int] = Query(default=None),
                    family: Optional[str] = Query(default=None),
                    first_weekday: Optional[int] = Query(default=None),
                    store: EntryStore = Depends(get_store)):
    """Month grid with per-day summaries and the month summary."""
    view = await _load_view(store, owner_id, year, month, family, first_weekday)
    return view.to_dict()


@router.get("/{owner_id}/week")
async def get_week(owner_id: str,
                   date: Optional[str] = Query(default=None, description="Any day of the week (YYYY-MM-DD)"),
                   family: Optional[str] = Query(default=None),
                   first_weekday: Optional[int] = Query(default=None),
                   store: EntryStore = Depends(get_store)):
    if family is not None and family not in FAMILIES:
        raise ValidationError(f"Unknown calendar family '{family}'")
    reference = date or _date.today()
    fw = first_weekday if first_weekday is not None else default_first_weekday(family)
    bounds = generate_week_grid(reference, fw)
    entries = await store.fetch_entries(owner_id, bounds[0].date, bounds[-1].date)
    if family is not None:
        entries = [e for e in entries if e.family == family]
    cells = generate_week_grid(reference, fw, entries)
    return {
        "owner_id": owner_id,
        "family": family,
        "first_weekday": fw,
        "start": cells[0].date,
        "end": cells[-1].date,
        "cells": [c.to_dict() for c in cells],
        "summaries": summarize_grid(cells),
        "week_summary": summarize_period(cells),
    }


@router.get("/{owner_id}/export/{fmt}")
async def export_month(owner_id: str, fmt: str,
                       year: Optional[int] = Query(default=None),
                       month: Optional[int] = Query(default=None),
                       family: Optional[str] = Query(default=None),
                       store: EntryStore = Depends(get_store)):
    if fmt not in EXPORT_FORMATS:
        raise ValidationError(f"Unsupported export format '{fmt}'")
    view = await _load_view(store, owner_id, year, month, family, None)
    entries = [e for c in view.cells if c.is_in_displayed_month for e in c.entries]
    filename = f"plan_{owner_id}_{view.year}_{view.month:02d}.{fmt}"
    if fmt == "pdf":
        title = f"{(family or 'Training & nutrition').capitalize()} plan"
        content = generate_pdf_for_month(view.cells, view.year, view.month, view.first_weekday, title)
        media_type = "application/pdf"
    elif fmt == "json":
        content = entries_to_json(entries, owner_id)
        media_type = "application/json"
    else:
        content = entries_to_csv(entries)
        media_type = "text/csv"
    logger.info("Exported %d entries of %s as %s", len(entries), owner_id, fmt)
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
