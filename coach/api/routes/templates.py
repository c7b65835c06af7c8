from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from coach.api.deps import get_mutator, get_store
from coach.infra.Entry_Store import EntryStore
from coach.logic.planner.mutator import EntryMutator
from coach.utilities.validators import InstantiateTemplateInput, validate

router = APIRouter(prefix="/api/templates", tags=["templates"])


@router.get("/{owner_id}")
async def list_templates(owner_id: str, store: EntryStore = Depends(get_store)):
    """The owner's templates plus the shared ones."""
    templates = await store.fetch_templates(owner_id)
    return {"templates": [t.to_dict() for t in templates], "count": len(templates)}


@router.post("/{template_id}/instantiate", status_code=201)
async def instantiate_template(template_id: str, payload: Dict[str, Any] = Body(...),
                               mutator: EntryMutator = Depends(get_mutator)):
    inp = validate(InstantiateTemplateInput, payload)
    entry = await mutator.instantiate_from_template(template_id, inp.owner_id, inp.date)
    return entry.to_dict()
