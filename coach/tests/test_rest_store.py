import json
import unittest

import httpx

from coach.domain.PlanEntry import PlanEntry
from coach.domain.errors import NotFoundError, StorageError
from coach.infra.Rest_Store import RestEntryStore


def _row(**overrides):
    row = {
        "id": "e1", "owner_id": "client-1", "scheduled_date": "2025-03-10", "kind": "lunch",
        "name": "Chicken rice", "status": "planned", "payload": {"calories": 650, "protein": 40},
        "notes": "", "order": None, "created_at": "2025-03-01T10:00:00", "completed_at": None,
    }
    row.update(overrides)
    return row


class TestRestEntryStore(unittest.IsolatedAsyncioTestCase):

    def _store(self, handler):
        self.requests = []

        def recording(request):
            self.requests.append(request)
            return handler(request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(recording),
                                   base_url="http://backend.test/rest/v1")
        return RestEntryStore("", client=client)

    async def test_fetch_sends_range_filters(self):
        store = self._store(lambda request: httpx.Response(200, json=[_row()]))
        entries = await store.fetch_entries("client-1", "2025-03-01", "2025-03-31")
        await store.aclose()

        request = self.requests[0]
        self.assertEqual(request.method, "GET")
        self.assertEqual(request.url.path, "/rest/v1/plan_entries")
        self.assertEqual(request.url.params["owner_id"], "eq.client-1")
        self.assertEqual(request.url.params.get_list("scheduled_date"),
                         ["gte.2025-03-01", "lte.2025-03-31"])
        self.assertEqual(entries[0].payload.calories, 650)

    async def test_create_asks_for_representation(self):
        store = self._store(lambda request: httpx.Response(201, json=[_row(id="new-id")]))
        created = await store.create_entry(PlanEntry("client-1", "2025-03-10", "lunch", "Chicken rice"))

        request = self.requests[0]
        body = json.loads(request.content)
        self.assertEqual(request.headers["Prefer"], "return=representation")
        self.assertNotIn("id", body)
        self.assertNotIn("family", body)
        self.assertEqual(created.id, "new-id")

    async def test_backend_error_message_is_kept(self):
        store = self._store(lambda request: httpx.Response(
            409, json={"message": "duplicate key value violates unique constraint"}))
        with self.assertRaises(StorageError) as ctx:
            await store.create_entry(PlanEntry("client-1", "2025-03-10", "lunch", "Chicken rice"))
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertIn("duplicate key", ctx.exception.message)

    async def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        store = self._store(handler)
        with self.assertRaises(StorageError):
            await store.fetch_entries("client-1", "2025-03-01", "2025-03-31")

    async def test_missing_rows_raise_not_found(self):
        store = self._store(lambda request: httpx.Response(200, json=[]))
        with self.assertRaises(NotFoundError):
            await store.get_entry("e404")
        with self.assertRaises(NotFoundError):
            await store.delete_entry("e404")
        with self.assertRaises(NotFoundError):
            await store.update_entry("e404", {"name": "x"})

    async def test_payload_patch_is_merged(self):
        def handler(request):
            if request.method == "GET":
                return httpx.Response(200, json=[_row()])
            sent = json.loads(request.content)
            return httpx.Response(200, json=[_row(payload=sent["payload"])])

        store = self._store(handler)
        updated = await store.update_entry("e1", {"payload": {"carbs": 70}})

        patch = self.requests[-1]
        self.assertEqual(patch.method, "PATCH")
        self.assertEqual(patch.url.params["id"], "eq.e1")
        sent = json.loads(patch.content)["payload"]
        self.assertEqual((sent["calories"], sent["protein"], sent["carbs"]), (650, 40, 70))
        self.assertEqual(updated.payload.carbs, 70)

    async def test_templates_include_shared(self):
        store = self._store(lambda request: httpx.Response(200, json=[
            {"id": "t1", "owner_id": None, "kind": "breakfast", "name": "Porridge", "payload": {}},
        ]))
        templates = await store.fetch_templates("client-1")
        self.assertEqual(self.requests[0].url.params["or"], "(owner_id.eq.client-1,owner_id.is.null)")
        self.assertEqual(templates[0].name, "Porridge")

    def test_requires_base_url(self):
        with self.assertRaises(StorageError):
            RestEntryStore("")


if __name__ == '__main__':
    unittest.main()
