"""Entry store backed by a hosted database exposed through a PostgREST-style API.

Tables (configurable): ``plan_entries`` and ``plan_templates``. Filters use the
PostgREST syntax (``owner_id=eq.<id>``, ``scheduled_date=gte.<date>``); writes
ask for the written row back with ``Prefer: return=representation``.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from coach.domain.PlanEntry import PlanEntry
from coach.domain.Template import Template
from coach.domain.errors import NotFoundError, StorageError
from coach.infra.Entry_Store import EntryStore, apply_patch

logger = logging.getLogger(__name__)

ENTRIES_TABLE = "plan_entries"
TEMPLATES_TABLE = "plan_templates"


def _record(data: Dict[str, Any]) -> Dict[str, Any]:
    rec = {k: v for k, v in data.items() if k != "family"}
    if rec.get("id") is None:
        rec.pop("id", None)
    if rec.get("created_at") is None:
        rec.pop("created_at", None)
    return rec


class RestEntryStore(EntryStore):
    def __init__(self, base_url: str, api_key: str = "", timeout: float = 10.0,
                 client: Optional[httpx.AsyncClient] = None,
                 entries_table: str = ENTRIES_TABLE, templates_table: str = TEMPLATES_TABLE):
        if not base_url and client is None:
            raise StorageError("BACKEND_URL is not configured")
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["apikey"] = api_key
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/rest/v1", headers=headers, timeout=timeout
        )
        self.entries_table = entries_table
        self.templates_table = templates_table

    async def _request(self, method: str, table: str, params=None, json=None, representation=False):
        headers = {"Prefer": "return=representation"} if representation else None
        try:
            response = await self._client.request(method, f"/{table}", params=params, json=json,
                                                  headers=headers)
        except httpx.HTTPError as e:
            logger.error("%s %s failed: %s", method, table, e)
            raise StorageError(f"Backend unreachable: {e}") from e
        if response.status_code >= 400:
            try:
                body = response.json()
                message = body.get("message") or body.get("error") or response.text
            except ValueError:
                message = response.text
            logger.error("%s %s -> %s: %s", method, table, response.status_code, message)
            raise StorageError(message or f"Backend error {response.status_code}",
                               status_code=response.status_code)
        if response.status_code == 204 or not response.content:
            return []
        return response.json()

    async def fetch_entries(self, owner_id: str, start: str, end: str) -> List[PlanEntry]:
        params = [
            ("owner_id", f"eq.{owner_id}"),
            ("scheduled_date", f"gte.{start}"),
            ("scheduled_date", f"lte.{end}"),
            ("order", "scheduled_date.asc,created_at.asc"),
        ]
        rows = await self._request("GET", self.entries_table, params=params)
        return [PlanEntry.from_dict(r) for r in rows]

    async def get_entry(self, entry_id: str) -> PlanEntry:
        rows = await self._request("GET", self.entries_table, params={"id": f"eq.{entry_id}"})
        if not rows:
            raise NotFoundError(f"Entry '{entry_id}' not found")
        return PlanEntry.from_dict(rows[0])

    async def create_entry(self, entry: PlanEntry) -> PlanEntry:
        rows = await self._request("POST", self.entries_table, json=_record(entry.to_dict()),
                                   representation=True)
        if not rows:
            raise StorageError("Backend did not return the created entry")
        return PlanEntry.from_dict(rows[0])

    async def update_entry(self, entry_id: str, patch: Dict[str, Any]) -> PlanEntry:
        body = dict(patch)
        if "payload" in body:
            # the payload column is replaced as a whole, so merge locally first
            current = await self.get_entry(entry_id)
            body["payload"] = apply_patch(current, {"payload": patch["payload"]}).payload.to_dict()
        body.pop("id", None)
        body.pop("family", None)
        rows = await self._request("PATCH", self.entries_table, params={"id": f"eq.{entry_id}"},
                                   json=body, representation=True)
        if not rows:
            raise NotFoundError(f"Entry '{entry_id}' not found")
        return PlanEntry.from_dict(rows[0])

    async def delete_entry(self, entry_id: str) -> None:
        rows = await self._request("DELETE", self.entries_table, params={"id": f"eq.{entry_id}"},
                                   representation=True)
        if not rows:
            raise NotFoundError(f"Entry '{entry_id}' not found")

    async def fetch_templates(self, owner_id: str) -> List[Template]:
        params = {"or": f"(owner_id.eq.{owner_id},owner_id.is.null)", "order": "name.asc"}
        rows = await self._request("GET", self.templates_table, params=params)
        return [Template.from_dict(r) for r in rows]

    async def create_template(self, template: Template) -> Template:
        rows = await self._request("POST", self.templates_table, json=_record(template.to_dict()),
                                   representation=True)
        if not rows:
            raise StorageError("Backend did not return the created template")
        return Template.from_dict(rows[0])

    async def aclose(self) -> None:
        await self._client.aclose()


__all__ = ['RestEntryStore', 'ENTRIES_TABLE', 'TEMPLATES_TABLE']
