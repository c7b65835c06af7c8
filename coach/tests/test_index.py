import unittest

from coach.domain.PlanEntry import PlanEntry
from coach.logic.calendar.index import build_index


def _entry(date, name, kind="strength", order=None):
    return PlanEntry("client-1", date, kind, name, order=order)


class TestEntryIndex(unittest.TestCase):

    def test_round_trip(self):
        entries = [
            _entry("2025-03-10", "Push Day"),
            _entry("2025-03-12", "Pull Day"),
            _entry("2025-03-10", "Oatmeal", kind="breakfast"),
        ]
        index = build_index(entries)
        self.assertEqual(sorted(index.dates()), ["2025-03-10", "2025-03-12"])
        flattened = [e for d in index for e in index.get(d)]
        self.assertEqual(len(flattened), len(entries))
        for e in entries:
            self.assertIn(e, index.get(e.scheduled_date))

    def test_insertion_order_within_day(self):
        index = build_index([
            _entry("2025-03-10", "A"), _entry("2025-03-10", "B"), _entry("2025-03-10", "C"),
        ])
        self.assertEqual([e.name for e in index.get("2025-03-10")], ["A", "B", "C"])

    def test_explicit_order_wins(self):
        index = build_index([
            _entry("2025-03-10", "Later", order=2),
            _entry("2025-03-10", "Unordered"),
            _entry("2025-03-10", "First", order=1),
        ])
        self.assertEqual([e.name for e in index.get("2025-03-10")], ["First", "Later", "Unordered"])

    def test_missing_day_is_empty_list(self):
        index = build_index([])
        self.assertEqual(index.get("2025-03-10"), [])
        self.assertNotIn("2025-03-10", index)
        self.assertEqual(len(index), 0)

    def test_get_returns_a_copy(self):
        index = build_index([_entry("2025-03-10", "Push Day")])
        index.get("2025-03-10").clear()
        self.assertEqual(len(index.get("2025-03-10")), 1)


if __name__ == '__main__':
    unittest.main()
