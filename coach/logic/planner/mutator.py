"""Entry mutations: create, update, delete, status transitions and copies.

Every mutation awaits the storage write first and only then runs the
``on_change`` callback (the calendar view uses it to re-fetch and rebuild its
index). Nothing is applied optimistically and nothing is retried; errors are
raised to the caller. The one tolerated failure is ``mark_complete`` on an
entry that was already deleted: it is logged and ignored.

Status transitions:
    planned --mark_complete--> completed
    planned --mark_skipped---> skipped
Completed and skipped entries can only be deleted.
"""
import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

from coach.domain.PlanEntry import PlanEntry, WorkoutPayload, family_of, payload_for_kind
from coach.domain.Template import Template
from coach.domain.errors import (
    EmptySourceError, InvalidTransitionError, NotFoundError, PlanError, ValidationError
)
from coach.events.Event_Bus import EventBus
from coach.events.event_helpers import (
    publish_entry_created, publish_entry_updated, publish_entry_deleted,
    publish_entry_completed, publish_entry_skipped, publish_day_copied
)
from coach.infra.Entry_Store import EntryStore
from coach.logic.calendar.index import build_index
from coach.utilities.constants import COMPLETED, PLANNED, SKIPPED, REST_KIND, REST_DAY_NAME
from coach.utilities.dates import to_date_string
from coach.utilities.validators import (
    EntryCreateInput, EntryPatchInput, ExerciseInput, SaveTemplateInput, validate
)

logger = logging.getLogger(__name__)

_ENTRY_FIELDS = ('name', 'notes', 'order')


class EntryMutator:
    def __init__(self, store: EntryStore, on_change: Optional[Callable[[], Awaitable[Any]]] = None,
                 bus: Optional[EventBus] = None, clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.on_change = on_change
        self.bus = bus
        self.clock = clock or datetime.now

    async def _changed(self):
        if self.on_change is not None:
            await self.on_change()

    # --- Create / update / delete ------------------------------------------
    async def create(self, owner_id: str, date, kind: str, data: Optional[Dict[str, Any]] = None) -> PlanEntry:
        """Create a planned entry.

        ``data`` holds ``name``, optional ``notes``/``order`` and the payload
        fields, either flat or under a ``payload`` key. Rest days get a zeroed
        payload whatever was submitted.
        """
        data = dict(data or {})
        fields = {k: data.pop(k) for k in _ENTRY_FIELDS if k in data}
        payload = data.pop('payload', None)
        if payload is None:
            payload = data
        inp = validate(EntryCreateInput, {
            'owner_id': owner_id, 'scheduled_date': date, 'kind': kind, 'payload': payload, **fields
        })
        entry = PlanEntry(
            owner_id=inp.owner_id,
            scheduled_date=inp.scheduled_date,
            kind=inp.kind,
            name=inp.name,
            payload=payload_for_kind(inp.kind, inp.payload),
            notes=inp.notes,
            order=inp.order,
        )
        created = await self.store.create_entry(entry)
        logger.info("Created %s entry %s for %s on %s", created.kind, created.id, owner_id, created.scheduled_date)
        publish_entry_created(created, bus=self.bus)
        await self._changed()
        return created

    async def create_rest_day(self, owner_id: str, date, name: str = REST_DAY_NAME) -> PlanEntry:
        return await self.create(owner_id, date, REST_KIND, {'name': name})

    async def update(self, entry_id: str, patch: Dict[str, Any]) -> PlanEntry:
        """Partial update; the name is re-validated when it is part of the patch."""
        changes = validate(EntryPatchInput, dict(patch or {})).model_dump(exclude_unset=True)
        if not changes:
            return await self.store.get_entry(entry_id)
        if 'kind' in changes:
            current = await self.store.get_entry(entry_id)
            if family_of(changes['kind']) != current.family:
                raise ValidationError(
                    f"Cannot change a {current.family} entry into '{changes['kind']}'")
            if changes['kind'] == REST_KIND:
                changes['payload'] = WorkoutPayload.for_kind(REST_KIND).to_dict()
        exercises = (changes.get('payload') or {}).get('exercises')
        if exercises:
            changes['payload']['exercises'] = [
                validate(ExerciseInput, e).model_dump() for e in exercises
            ]
        updated = await self.store.update_entry(entry_id, changes)
        logger.info("Updated entry %s (%s)", entry_id, ", ".join(sorted(changes)))
        publish_entry_updated(updated, changes.keys(), bus=self.bus)
        await self._changed()
        return updated

    async def confirmed_delete(self, entry_id: str) -> None:
        """Hard delete. The caller has already asked the user for confirmation."""
        entry = await self.store.get_entry(entry_id)
        await self.store.delete_entry(entry_id)
        logger.info("Deleted entry %s of %s", entry_id, entry.owner_id)
        publish_entry_deleted(entry_id, owner_id=entry.owner_id, bus=self.bus)
        await self._changed()

    # --- Status transitions -------------------------------------------------
    def _check_planned(self, entry: PlanEntry, target: str):
        if entry.status != PLANNED:
            raise InvalidTransitionError(
                f"Entry '{entry.name}' is {entry.status} and cannot be marked {target}")

    async def mark_complete(self, entry_id: str) -> Optional[PlanEntry]:
        try:
            entry = await self.store.get_entry(entry_id)
        except NotFoundError:
            logger.warning("mark_complete: entry %s no longer exists, ignoring", entry_id)
            return None
        self._check_planned(entry, COMPLETED)
        try:
            updated = await self.store.update_entry(entry_id, {
                'status': COMPLETED,
                'completed_at': self.clock().isoformat(),
            })
        except NotFoundError:
            logger.warning("mark_complete: entry %s was deleted meanwhile, ignoring", entry_id)
            return None
        publish_entry_completed(updated, bus=self.bus)
        await self._changed()
        return updated

    async def mark_skipped(self, entry_id: str) -> PlanEntry:
        entry = await self.store.get_entry(entry_id)
        self._check_planned(entry, SKIPPED)
        updated = await self.store.update_entry(entry_id, {'status': SKIPPED})
        publish_entry_skipped(updated, bus=self.bus)
        await self._changed()
        return updated

    # --- Copies ---------------------------------------------------------------
    async def _source_entries(self, owner_id: str, source: str, family: Optional[str]) -> List[PlanEntry]:
        entries = await self.store.fetch_entries(owner_id, source, source)
        if family is not None:
            entries = [e for e in entries if e.family == family]
        if not entries:
            raise EmptySourceError(f"There is nothing to copy on {source}")
        return build_index(entries).get(source)

    async def _create_copies(self, entries: Iterable[PlanEntry], target: str) -> List[PlanEntry]:
        created: List[PlanEntry] = []
        try:
            for entry in entries:
                created.append(await self.store.create_entry(entry.copy_for(target)))
        except PlanError:
            await self._rollback(created)
            raise
        return created

    async def _rollback(self, created: List[PlanEntry]):
        for entry in created:
            try:
                await self.store.delete_entry(entry.id)
            except PlanError as e:
                logger.error("Rollback of copied entry %s failed: %s", entry.id, e)

    async def duplicate_day(self, owner_id: str, source_date, target_date,
                            family: Optional[str] = None) -> List[PlanEntry]:
        """Copy every entry of ``source_date`` to ``target_date`` with fresh ids, reset to planned."""
        source, target = to_date_string(source_date), to_date_string(target_date)
        entries = await self._source_entries(owner_id, source, family)
        created = await self._create_copies(entries, target)
        logger.info("Copied %d entries of %s from %s to %s", len(created), owner_id, source, target)
        publish_day_copied(owner_id, source, target, len(created), bus=self.bus)
        await self._changed()
        return created

    async def copy_day_to_many(self, owner_id: str, source_date, target_dates: Iterable,
                               replace_existing: bool = False,
                               family: Optional[str] = None) -> Dict[str, List[PlanEntry]]:
        """Copy one day onto several days.

        The copies for every target are stored first; if any of them fails,
        all copies made so far are removed again. With ``replace_existing``
        the target days' entries of the copied families are deleted only
        after every copy is stored.
        """
        source = to_date_string(source_date)
        targets = []
        for d in target_dates:
            key = to_date_string(d)
            if key not in targets and not (replace_existing and key == source):
                targets.append(key)
        if not targets:
            raise ValidationError("Select at least one day other than the source day")
        entries = await self._source_entries(owner_id, source, family)
        families = {e.family for e in entries}

        replaced: List[PlanEntry] = []
        if replace_existing:
            for target in targets:
                replaced.extend(e for e in await self.store.fetch_entries(owner_id, target, target)
                                if e.family in families)

        results: Dict[str, List[PlanEntry]] = {}
        try:
            for target in targets:
                results[target] = await self._create_copies(entries, target)
        except PlanError:
            await self._rollback([e for created in results.values() for e in created])
            raise
        try:
            for e in replaced:
                await self.store.delete_entry(e.id)
        except PlanError:
            await self._changed()
            raise
        for target, created in results.items():
            publish_day_copied(owner_id, source, target, len(created), bus=self.bus)
        logger.info("Copied %s to %d days for %s", source, len(results), owner_id)
        await self._changed()
        return results

    async def duplicate_entry(self, entry_id: str, target_date) -> PlanEntry:
        entry = await self.store.get_entry(entry_id)
        created = await self.store.create_entry(entry.copy_for(target_date))
        publish_entry_created(created, bus=self.bus)
        await self._changed()
        return created

    # --- Templates ------------------------------------------------------------
    async def instantiate_from_template(self, template_id: str, owner_id: str, date) -> PlanEntry:
        templates = await self.store.fetch_templates(owner_id)
        template = next((t for t in templates if t.id == template_id), None)
        if template is None:
            raise NotFoundError(f"Template '{template_id}' not found")
        entry = template.instantiate(owner_id, to_date_string(date))
        if not entry.name.strip():
            raise ValidationError("Template has no name")
        created = await self.store.create_entry(entry)
        logger.info("Instantiated template %s on %s for %s", template_id, created.scheduled_date, owner_id)
        publish_entry_created(created, bus=self.bus)
        await self._changed()
        return created

    async def save_as_template(self, entry_id: str, name: Optional[str] = None) -> Template:
        inp = validate(SaveTemplateInput, {'name': name})
        if inp.name is not None and not inp.name.strip():
            raise ValidationError("Template name cannot be empty")
        entry = await self.store.get_entry(entry_id)
        template = Template.from_entry(entry, inp.name.strip() if inp.name else None)
        return await self.store.create_template(template)


__all__ = ['EntryMutator']
