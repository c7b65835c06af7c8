"""Month and week grid generation for the plan calendars.

Grids always cover whole weeks: the leading days of the previous month and the
trailing days of the next month are included and flagged as outside the
displayed month. The first weekday is a parameter because the workout
calendar starts weeks on Monday while the meal calendar starts on Sunday.
"""
import calendar
from datetime import date, timedelta
from typing import List, Optional, Tuple

from coach.domain.CalendarCell import CalendarCell
from coach.domain.errors import ValidationError
from coach.logic.calendar.index import EntryIndex, build_index
from coach.utilities.constants import DATE_FORMAT, FIRST_WEEKDAYS
from coach.utilities.dates import DateLike, check_month, parse_date_string, to_date_string

Window = Tuple[str, str]


def _check_first_weekday(first_weekday: int) -> None:
    if first_weekday not in FIRST_WEEKDAYS:
        raise ValidationError(f"First weekday must be Monday (0) or Sunday (6), got {first_weekday!r}")


def _as_index(entries_by_date) -> EntryIndex:
    if isinstance(entries_by_date, EntryIndex):
        return entries_by_date
    if entries_by_date is None:
        return build_index([])
    if isinstance(entries_by_date, dict):
        return EntryIndex(entries_by_date)
    return build_index(entries_by_date)


def _in_window(day: str, window: Optional[Window]) -> bool:
    return bool(window) and window[0] <= day <= window[1]


def _weeks(year: int, month: int, first_weekday: int) -> List[List[date]]:
    check_month(year, month)
    _check_first_weekday(first_weekday)
    return calendar.Calendar(firstweekday=first_weekday).monthdatescalendar(year, month)


def generate_month_grid(year: int, month: int, first_weekday: int, entries_by_date=None,
                        today: Optional[DateLike] = None,
                        program_window: Optional[Window] = None) -> List[CalendarCell]:
    """Return the cells of a month view, whole weeks only.

    ``month`` is one-based. ``entries_by_date`` may be an EntryIndex, a plain
    ``{date_string: [entries]}`` mapping or an iterable of entries. ``today``
    defaults to the current local date; pass it explicitly for a repeatable
    result.
    """
    index = _as_index(entries_by_date)
    today_str = to_date_string(today) if today is not None else date.today().strftime(DATE_FORMAT)
    cells = []
    for week in _weeks(year, month, first_weekday):
        for d in week:
            key = d.strftime(DATE_FORMAT)
            cells.append(CalendarCell(
                date=key,
                day=d.day,
                is_in_displayed_month=d.month == month,
                is_today=key == today_str,
                entries=index.get(key),
                is_in_program=_in_window(key, program_window),
            ))
    return cells


def generate_week_grid(reference_date: DateLike, first_weekday: int, entries_by_date=None,
                       today: Optional[DateLike] = None,
                       program_window: Optional[Window] = None) -> List[CalendarCell]:
    """The seven cells of the week containing ``reference_date``."""
    _check_first_weekday(first_weekday)
    index = _as_index(entries_by_date)
    ref = parse_date_string(to_date_string(reference_date))
    today_str = to_date_string(today) if today is not None else date.today().strftime(DATE_FORMAT)
    start = ref - timedelta(days=(ref.weekday() - first_weekday) % 7)
    cells = []
    for i in range(7):
        d = start + timedelta(days=i)
        key = d.strftime(DATE_FORMAT)
        cells.append(CalendarCell(
            date=key,
            day=d.day,
            is_in_displayed_month=True,
            is_today=key == today_str,
            entries=index.get(key),
            is_in_program=_in_window(key, program_window),
        ))
    return cells


def month_grid_bounds(year: int, month: int, first_weekday: int) -> Window:
    """First and last visible day of the month grid, for pre-fetching entries."""
    weeks = _weeks(year, month, first_weekday)
    return weeks[0][0].strftime(DATE_FORMAT), weeks[-1][-1].strftime(DATE_FORMAT)


def program_window(start_date: DateLike, duration_weeks: int) -> Window:
    """Inclusive date window covered by a program of ``duration_weeks`` weeks."""
    if duration_weeks < 1:
        raise ValidationError("Program duration must be at least one week")
    start = parse_date_string(to_date_string(start_date))
    end = start + timedelta(days=duration_weeks * 7 - 1)
    return start.strftime(DATE_FORMAT), end.strftime(DATE_FORMAT)


def grid_rows(cells: List[CalendarCell]) -> List[List[CalendarCell]]:
    """Split a flat grid into rows of seven for rendering."""
    return [cells[i:i + 7] for i in range(0, len(cells), 7)]


__all__ = [
    'generate_month_grid', 'generate_week_grid', 'month_grid_bounds', 'program_window', 'grid_rows'
]
