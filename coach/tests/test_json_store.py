import json
import tempfile
import unittest
from pathlib import Path

from coach.domain.PlanEntry import PlanEntry
from coach.domain.Template import Template
from coach.domain.errors import NotFoundError, StorageError
from coach.infra.Json_Store import JsonEntryStore


class TestJsonEntryStore(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.data_dir = Path(self._tmp.name)
        self.store = JsonEntryStore(self.data_dir)

    def tearDown(self):
        self._tmp.cleanup()

    async def test_missing_file_is_empty(self):
        self.assertEqual(await self.store.fetch_entries("client-1", "2025-01-01", "2025-12-31"), [])

    async def test_persists_across_instances(self):
        created = await self.store.create_entry(
            PlanEntry("client-1", "2025-03-10", "strength", "Push Day"))
        self.assertTrue(created.id)
        self.assertTrue(created.created_at)

        other = JsonEntryStore(self.data_dir)
        found = await other.fetch_entries("client-1", "2025-03-01", "2025-03-31")
        self.assertEqual([e.id for e in found], [created.id])
        self.assertEqual(found[0].name, "Push Day")

    async def test_range_and_owner_filter(self):
        for owner, day in (("client-1", "2025-02-28"), ("client-1", "2025-03-01"),
                           ("client-2", "2025-03-01"), ("client-1", "2025-03-31")):
            await self.store.create_entry(PlanEntry(owner, day, "cardio", "Run"))
        found = await self.store.fetch_entries("client-1", "2025-03-01", "2025-03-31")
        self.assertEqual([e.scheduled_date for e in found], ["2025-03-01", "2025-03-31"])

    async def test_update_and_delete(self):
        created = await self.store.create_entry(
            PlanEntry("client-1", "2025-03-10", "lunch", "Chicken rice", payload={'calories': 650}))
        updated = await self.store.update_entry(created.id, {'payload': {'protein': 40}})
        self.assertEqual(updated.payload.calories, 650)
        self.assertEqual(updated.payload.protein, 40)
        await self.store.delete_entry(created.id)
        with self.assertRaises(NotFoundError):
            await self.store.get_entry(created.id)
        with self.assertRaises(NotFoundError):
            await self.store.update_entry(created.id, {'name': 'x'})

    async def test_corrupted_file(self):
        (self.data_dir / "plan_entries.json").write_text("{not json", encoding="utf-8")
        with self.assertRaises(StorageError):
            await self.store.fetch_entries("client-1", "2025-03-01", "2025-03-31")

    async def test_file_is_valid_json_after_write(self):
        await self.store.create_entry(PlanEntry("client-1", "2025-03-10", "rest", "Rest day"))
        records = json.loads((self.data_dir / "plan_entries.json").read_text(encoding="utf-8"))
        self.assertEqual(len(records), 1)
        self.assertEqual(records[0]["kind"], "rest")
        leftovers = [p for p in self.data_dir.iterdir() if p.name.startswith(".")]
        self.assertEqual(leftovers, [])

    async def test_templates(self):
        await self.store.create_template(Template("breakfast", "Porridge"))
        await self.store.create_template(Template("dinner", "Salmon", owner_id="client-1"))
        self.assertEqual(len(await self.store.fetch_templates("client-1")), 2)
        self.assertEqual([t.name for t in await self.store.fetch_templates("client-2")], ["Porridge"])


if __name__ == '__main__':
    unittest.main()
