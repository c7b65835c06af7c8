"""Calendar view state for one client's workout or meal calendar.

Holds the displayed month, the fetched entries, their date index, the grid
cells and per-day summaries. All of it is replaced together after a
successful fetch; when the store fails the previous state stays in place and
the error propagates.
"""
import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from coach.domain.CalendarCell import CalendarCell
from coach.domain.PlanEntry import PlanEntry
from coach.domain.errors import ValidationError
from coach.events.Event_Bus import EventBus
from coach.infra.Entry_Store import EntryStore
from coach.logic.calendar.grid import generate_month_grid, generate_week_grid, month_grid_bounds
from coach.logic.calendar.index import EntryIndex, build_index
from coach.logic.planner.mutator import EntryMutator
from coach.logic.reporting.nutrition import (
    summarize_entries, summarize_by_kind, summarize_grid, summarize_period
)
from coach.utilities import config
from coach.utilities.constants import FAMILIES, MEAL, MONDAY, WORKOUT
from coach.utilities.dates import DateLike, check_month, month_bounds, shift_month, to_date_string

logger = logging.getLogger(__name__)


def default_first_weekday(family: Optional[str]) -> int:
    if family == WORKOUT:
        return config.WORKOUT_FIRST_WEEKDAY
    if family == MEAL:
        return config.MEAL_FIRST_WEEKDAY
    return MONDAY


class CalendarView:
    def __init__(self, store: EntryStore, owner_id: str, family: Optional[str] = None,
                 first_weekday: Optional[int] = None, year: Optional[int] = None,
                 month: Optional[int] = None, today: Optional[Callable[[], date]] = None,
                 fetch_overflow: Optional[bool] = None,
                 program_window: Optional[Tuple[str, str]] = None,
                 bus: Optional[EventBus] = None, clock: Optional[Callable[[], datetime]] = None):
        if family is not None and family not in FAMILIES:
            raise ValidationError(f"Unknown calendar family '{family}'")
        self.store = store
        self.owner_id = owner_id
        self.family = family
        self.first_weekday = first_weekday if first_weekday is not None else default_first_weekday(family)
        self._today = today or date.today
        current = self._today()
        self.year = year if year is not None else current.year
        self.month = month if month is not None else current.month
        check_month(self.year, self.month)
        self.fetch_overflow = config.FETCH_GRID_OVERFLOW if fetch_overflow is None else fetch_overflow
        self.program_window = program_window

        self.entries: List[PlanEntry] = []
        self.index: EntryIndex = build_index([])
        self.cells: List[CalendarCell] = []
        self.summaries: Dict[str, Dict[str, Any]] = {}
        self.refresh_count = 0
        self.mutator = EntryMutator(store, on_change=self.refresh, bus=bus, clock=clock)

    def __str__(self) -> str:
        family = self.family or 'all'
        return f"CalendarView({self.owner_id}, {family}, {self.year}-{self.month:02d}, {len(self.entries)} entries)"

    __repr__ = __str__

    def fetch_range(self, year: Optional[int] = None, month: Optional[int] = None) -> Tuple[str, str]:
        """Date range fetched for a month: the whole grid, or the strict month."""
        year = self.year if year is None else year
        month = self.month if month is None else month
        if self.fetch_overflow:
            return month_grid_bounds(year, month, self.first_weekday)
        return month_bounds(year, month)

    async def _load(self, year: int, month: int):
        start, end = self.fetch_range(year, month)
        entries = await self.store.fetch_entries(self.owner_id, start, end)
        if self.family is not None:
            entries = [e for e in entries if e.family == self.family]
        index = build_index(entries)
        cells = generate_month_grid(year, month, self.first_weekday, index,
                                    today=self._today(), program_window=self.program_window)
        return entries, index, cells

    def _commit(self, year: int, month: int, loaded) -> List[CalendarCell]:
        self.entries, self.index, self.cells = loaded
        self.year, self.month = year, month
        self.summaries = summarize_grid(self.cells)
        self.refresh_count += 1
        logger.debug("Loaded %d entries for %s %d-%02d", len(self.entries), self.owner_id, year, month)
        return self.cells

    async def refresh(self) -> List[CalendarCell]:
        """Re-fetch the displayed month and rebuild index, grid and summaries."""
        return self._commit(self.year, self.month, await self._load(self.year, self.month))

    async def go_to(self, year: int, month: int) -> List[CalendarCell]:
        check_month(year, month)
        return self._commit(year, month, await self._load(year, month))

    async def navigate(self, delta: int) -> List[CalendarCell]:
        """Move ``delta`` months forward (negative = backward) and load that month."""
        return await self.go_to(*shift_month(self.year, self.month, delta))

    async def go_to_today(self) -> List[CalendarCell]:
        current = self._today()
        return await self.go_to(current.year, current.month)

    # --- Read helpers ---------------------------------------------------------
    def day(self, date_value: DateLike) -> List[PlanEntry]:
        return self.index.get(to_date_string(date_value))

    def day_summary(self, date_value: DateLike) -> Dict[str, Any]:
        return summarize_entries(self.day(date_value))

    def day_by_kind(self, date_value: DateLike) -> Dict[str, Dict[str, Any]]:
        return summarize_by_kind(self.day(date_value))

    def month_summary(self) -> Dict[str, Any]:
        return summarize_period(self.cells)

    def week(self, reference_date: DateLike) -> List[CalendarCell]:
        """Week grid from the loaded entries; days outside the fetched range come back empty."""
        return generate_week_grid(reference_date, self.first_weekday, self.index,
                                  today=self._today(), program_window=self.program_window)

    def to_dict(self):
        return {
            'owner_id': self.owner_id,
            'family': self.family,
            'year': self.year,
            'month': self.month,
            'first_weekday': self.first_weekday,
            'cells': [c.to_dict() for c in self.cells],
            'summaries': self.summaries,
            'month_summary': self.month_summary(),
        }


__all__ = ['CalendarView', 'default_first_weekday']
