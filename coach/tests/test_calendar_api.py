import unittest
from fastapi.testclient import TestClient

from coach.api.api_run import app
from coach.api.deps import get_store
from coach.domain.errors import StorageError
from coach.events.activity_feed import DEFAULT_FEED
from coach.infra.Memory_Store import InMemoryEntryStore

PUSH_DAY = {
    "owner_id": "client-1",
    "scheduled_date": "2025-03-10",
    "kind": "strength",
    "name": "Push Day",
    "exercises": [{"name": "Bench Press", "sets": 4, "reps": "6-8"}],
}
OATMEAL = {
    "owner_id": "client-1",
    "scheduled_date": "2025-03-10",
    "kind": "breakfast",
    "name": "Oatmeal",
    "calories": 350,
    "protein": 12,
}


class UnavailableStore(InMemoryEntryStore):
    async def fetch_entries(self, owner_id, start, end):
        raise StorageError("JWT expired", status_code=401)


class TestCalendarAPI(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)
        DEFAULT_FEED.start()

    def setUp(self):
        self.store = InMemoryEntryStore()
        app.dependency_overrides[get_store] = lambda: self.store

    def tearDown(self):
        app.dependency_overrides.clear()

    def _create(self, body):
        resp = self.client.post('/api/entries', json=body)
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()

    def test_create_entry(self):
        data = self._create(PUSH_DAY)
        self.assertTrue(data['id'])
        self.assertEqual(data['family'], 'workout')
        self.assertEqual(data['payload']['exercises'][0]['sets'], 4)
        self.assertEqual(len(self.store), 1)

    def test_empty_name_is_rejected(self):
        resp = self.client.post('/api/entries', json={**PUSH_DAY, 'name': ''})
        self.assertEqual(resp.status_code, 400)
        self.assertIn('Name cannot be empty', resp.json()['detail'])
        self.assertEqual(len(self.store), 0)

    def test_month_view(self):
        self._create(PUSH_DAY)
        self._create(OATMEAL)
        resp = self.client.get('/api/calendar/client-1',
                               params={'year': 2025, 'month': 3, 'family': 'workout', 'first_weekday': 0})
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(len(data['cells']), 42)
        self.assertEqual(data['cells'][0]['date'], '2025-02-24')
        day = next(c for c in data['cells'] if c['date'] == '2025-03-10')
        self.assertEqual([e['name'] for e in day['entries']], ['Push Day'])
        self.assertEqual(data['summaries']['2025-03-10']['count'], 1)
        self.assertEqual(data['month_summary']['count'], 1)

    def test_bad_calendar_arguments(self):
        self.assertEqual(self.client.get('/api/calendar/client-1',
                                         params={'year': 2025, 'month': 13}).status_code, 400)
        self.assertEqual(self.client.get('/api/calendar/client-1',
                                         params={'year': 2025, 'month': 3, 'first_weekday': 3}).status_code, 400)
        self.assertEqual(self.client.get('/api/calendar/client-1',
                                         params={'year': 2025, 'month': 3, 'family': 'sleep'}).status_code, 400)

    def test_week_view(self):
        self._create(PUSH_DAY)
        resp = self.client.get('/api/calendar/client-1/week', params={'date': '2025-03-12', 'first_weekday': 0})
        data = resp.json()
        self.assertEqual((data['start'], data['end']), ('2025-03-10', '2025-03-16'))
        self.assertEqual(data['week_summary']['count'], 1)

    def test_status_transitions(self):
        entry = self._create(PUSH_DAY)
        resp = self.client.post(f"/api/entries/{entry['id']}/complete")
        self.assertEqual(resp.json()['entry']['status'], 'completed')
        self.assertEqual(self.client.post(f"/api/entries/{entry['id']}/complete").status_code, 409)
        self.assertEqual(self.client.post(f"/api/entries/{entry['id']}/skip").status_code, 409)

    def test_complete_deleted_entry(self):
        entry = self._create(PUSH_DAY)
        self.assertEqual(self.client.delete(f"/api/entries/{entry['id']}").status_code, 200)
        resp = self.client.post(f"/api/entries/{entry['id']}/complete")
        self.assertEqual(resp.status_code, 200)
        self.assertIsNone(resp.json()['entry'])
        self.assertEqual(self.client.delete(f"/api/entries/{entry['id']}").status_code, 404)

    def test_patch(self):
        entry = self._create(OATMEAL)
        resp = self.client.patch(f"/api/entries/{entry['id']}", json={'payload': {'calories': 400}})
        self.assertEqual(resp.json()['payload']['calories'], 400)
        self.assertEqual(resp.json()['payload']['protein'], 12)
        self.assertEqual(self.client.patch('/api/entries/entry-404', json={'name': 'x'}).status_code, 404)
        self.assertEqual(self.client.patch(f"/api/entries/{entry['id']}",
                                           json={'status': 'completed'}).status_code, 400)

    def test_copy_day(self):
        self._create(PUSH_DAY)
        self._create(OATMEAL)
        resp = self.client.post('/api/days/copy', json={
            'owner_id': 'client-1', 'source_date': '2025-03-10',
            'target_dates': ['2025-03-17', '2025-03-24'],
        })
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()['count'], 4)
        self.assertEqual(len(self.store), 6)

    def test_copy_empty_day(self):
        resp = self.client.post('/api/days/copy', json={
            'owner_id': 'client-1', 'source_date': '2025-03-11', 'target_dates': ['2025-03-17'],
        })
        self.assertEqual(resp.status_code, 400)

    def test_duplicate_and_templates(self):
        entry = self._create(PUSH_DAY)
        dup = self.client.post(f"/api/entries/{entry['id']}/duplicate", json={'target_date': '2025-03-12'})
        self.assertEqual(dup.json()['scheduled_date'], '2025-03-12')

        template = self.client.post(f"/api/entries/{entry['id']}/template", json={'name': 'Push A'}).json()
        listed = self.client.get('/api/templates/client-1').json()
        self.assertEqual(listed['count'], 1)
        made = self.client.post(f"/api/templates/{template['id']}/instantiate",
                                json={'owner_id': 'client-1', 'date': '2025-03-19'})
        self.assertEqual(made.status_code, 201)
        self.assertEqual(made.json()['name'], 'Push A')
        missing = self.client.post('/api/templates/template-404/instantiate',
                                   json={'owner_id': 'client-1', 'date': '2025-03-19'})
        self.assertEqual(missing.status_code, 404)

    def test_storage_error_is_bad_gateway(self):
        app.dependency_overrides[get_store] = lambda: UnavailableStore()
        resp = self.client.get('/api/calendar/client-1', params={'year': 2025, 'month': 3})
        self.assertEqual(resp.status_code, 502)
        self.assertEqual(resp.json()['detail'], 'JWT expired')

    def test_nutrition(self):
        self._create(OATMEAL)
        day = self.client.get('/api/nutrition/client-1/day', params={'date': '2025-03-10'}).json()
        self.assertEqual(day['totals']['calories'], 350)
        self.assertIn('breakfast', day['by_kind'])
        portion = self.client.post('/api/nutrition/portion', json={
            'base': {'calories_per_100g': 389, 'protein_per_100g': 16.9}, 'quantity': 50,
        }).json()
        self.assertEqual(portion['calories'], 194)
        self.assertEqual(portion['protein'], 8.4)
        bad = self.client.post('/api/nutrition/portion', json={'base': {}, 'quantity': -5})
        self.assertEqual(bad.status_code, 400)

    def test_exports(self):
        self._create(PUSH_DAY)
        params = {'year': 2025, 'month': 3}
        csv_resp = self.client.get('/api/calendar/client-1/export/csv', params=params)
        self.assertTrue(csv_resp.headers['content-type'].startswith('text/csv'))
        self.assertIn('Push Day', csv_resp.text)
        json_resp = self.client.get('/api/calendar/client-1/export/json', params=params)
        self.assertEqual(len(json_resp.json()['entries']), 1)
        pdf_resp = self.client.get('/api/calendar/client-1/export/pdf', params=params)
        self.assertTrue(pdf_resp.content.startswith(b'%PDF'))
        self.assertEqual(self.client.get('/api/calendar/client-1/export/xml', params=params).status_code, 400)

    def test_import(self):
        resp = self.client.post('/api/entries/import', json={
            'owner_id': 'client-2',
            'entries': [
                {'scheduled_date': '2025-03-10', 'kind': 'lunch', 'name': 'Salad', 'payload': {'calories': 300}},
                {'scheduled_date': '2025-03-11', 'kind': 'lunch', 'name': ''},
            ],
        })
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()['count'], 1)
        self.assertEqual(resp.json()['errors'][0]['index'], 1)

    def test_activity_feed(self):
        since = self.client.get('/api/activity').json()['next_cursor']
        self._create(PUSH_DAY)
        data = self.client.get('/api/activity', params={'since': since, 'owner_id': 'client-1'}).json()
        self.assertEqual([e['type'] for e in data['events']], ['plan.entry_created'])
        self.assertGreater(data['next_cursor'], since)


if __name__ == '__main__':
    unittest.main()
