"""CalendarCell: one day's slot in a rendered month or week view (never persisted)."""
from typing import List, Optional

from coach.domain.PlanEntry import PlanEntry


class CalendarCell:
    def __init__(self, date: str, day: int, is_in_displayed_month: bool, is_today: bool,
                 entries: Optional[List[PlanEntry]] = None, is_in_program: bool = False):
        self.date = date
        self.day = day
        self.is_in_displayed_month = is_in_displayed_month
        self.is_today = is_today
        self.entries = entries[:] if entries else []
        self.is_in_program = is_in_program

    def __str__(self) -> str:
        flags = "".join([
            "M" if self.is_in_displayed_month else "-",
            "T" if self.is_today else "-",
            "P" if self.is_in_program else "-",
        ])
        return f"{self.date} [{flags}] {len(self.entries)} entries"

    __repr__ = __str__

    def __eq__(self, other) -> bool:
        if not isinstance(other, CalendarCell):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def to_dict(self):
        return {
            "date": self.date,
            "day": self.day,
            "is_in_displayed_month": self.is_in_displayed_month,
            "is_today": self.is_today,
            "is_in_program": self.is_in_program,
            "entries": [e.to_dict() for e in self.entries],
        }
