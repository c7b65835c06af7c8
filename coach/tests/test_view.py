import unittest
from datetime import date

from coach.domain.PlanEntry import PlanEntry
from coach.domain.errors import StorageError, ValidationError
from coach.infra.Memory_Store import InMemoryEntryStore
from coach.logic.planner.view import CalendarView
from coach.utilities.constants import MONDAY, SUNDAY


class FlakyStore(InMemoryEntryStore):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fail_fetch = False
        self.fail_create = False

    async def fetch_entries(self, owner_id, start, end):
        if self.fail_fetch:
            raise StorageError("timeout")
        return await super().fetch_entries(owner_id, start, end)

    async def create_entry(self, entry):
        if self.fail_create:
            raise StorageError("insert rejected", status_code=409)
        return await super().create_entry(entry)


def _today():
    return date(2025, 3, 10)


class TestCalendarView(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.store = FlakyStore([
            PlanEntry("client-1", "2025-03-10", "strength", "Push Day"),
            PlanEntry("client-1", "2025-03-10", "breakfast", "Oatmeal", payload={'calories': 350}),
            PlanEntry("client-1", "2025-02-24", "cardio", "Easy run"),
            PlanEntry("client-2", "2025-03-10", "strength", "Other client"),
        ])

    def _view(self, **kwargs):
        kwargs.setdefault("family", "workout")
        kwargs.setdefault("first_weekday", MONDAY)
        kwargs.setdefault("fetch_overflow", True)
        return CalendarView(self.store, "client-1", year=2025, month=3, today=_today, **kwargs)

    async def test_refresh_builds_grid(self):
        view = self._view()
        cells = await view.refresh()
        self.assertEqual(len(cells), 42)
        self.assertEqual([e.name for e in view.day("2025-03-10")], ["Push Day"])
        self.assertEqual([e.name for e in view.day("2025-02-24")], ["Easy run"])
        self.assertEqual(view.summaries["2025-03-10"]["count"], 1)
        self.assertTrue(next(c for c in cells if c.date == "2025-03-10").is_today)

    async def test_strict_month_fetch(self):
        view = self._view(fetch_overflow=False)
        await view.refresh()
        self.assertEqual(self.store.calls[-1], ("fetch_entries", ("client-1", "2025-03-01", "2025-03-31")))
        self.assertEqual(view.day("2025-02-24"), [])

    async def test_meal_view(self):
        view = self._view(family="meal", first_weekday=SUNDAY)
        cells = await view.refresh()
        self.assertEqual(cells[0].date, "2025-02-23")
        self.assertEqual([e.name for e in view.day("2025-03-10")], ["Oatmeal"])
        self.assertEqual(view.day_summary("2025-03-10")["calories"], 350)

    async def test_unknown_family(self):
        with self.assertRaises(ValidationError):
            self._view(family="sleep")

    async def test_mutation_refreshes_after_write(self):
        view = self._view()
        await view.refresh()
        before = view.refresh_count
        await view.mutator.create("client-1", "2025-03-12", "cardio", {'name': 'Intervals'})
        self.assertEqual(view.refresh_count, before + 1)
        self.assertEqual([e.name for e in view.day("2025-03-12")], ["Intervals"])
        # the fetch that refreshed the view came after the create
        ops = [op for op, _ in self.store.calls]
        self.assertEqual(ops[-2:], ["create_entry", "fetch_entries"])

    async def test_failed_write_leaves_view_untouched(self):
        view = self._view()
        await view.refresh()
        cells, count = list(view.cells), view.refresh_count
        self.store.fail_create = True
        with self.assertRaises(StorageError):
            await view.mutator.create("client-1", "2025-03-12", "cardio", {'name': 'Intervals'})
        self.assertEqual(view.cells, cells)
        self.assertEqual(view.refresh_count, count)

    async def test_failed_fetch_keeps_previous_month(self):
        view = self._view()
        await view.refresh()
        cells = list(view.cells)
        self.store.fail_fetch = True
        with self.assertRaises(StorageError):
            await view.navigate(1)
        self.assertEqual((view.year, view.month), (2025, 3))
        self.assertEqual(view.cells, cells)

    async def test_navigation(self):
        view = CalendarView(self.store, "client-1", "workout", MONDAY, year=2025, month=1, today=_today)
        await view.navigate(-1)
        self.assertEqual((view.year, view.month), (2024, 12))
        await view.navigate(1)
        self.assertEqual((view.year, view.month), (2025, 1))
        await view.go_to(2025, 6)
        self.assertEqual(view.month, 6)
        await view.go_to_today()
        self.assertEqual((view.year, view.month), (2025, 3))
        with self.assertRaises(ValidationError):
            await view.go_to(2025, 13)

    async def test_week_and_month_summary(self):
        view = self._view(family=None)
        await view.refresh()
        week = view.week("2025-03-12")
        self.assertEqual(week[0].date, "2025-03-10")
        self.assertEqual(len(week[0].entries), 2)
        summary = view.month_summary()
        self.assertEqual(summary["count"], 2)
        self.assertEqual(summary["calories"], 350)
        self.assertEqual(view.to_dict()["month"], 3)


if __name__ == '__main__':
    unittest.main()
