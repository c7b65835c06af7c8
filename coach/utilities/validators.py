"""
Input validation schemas using Pydantic for better data integrity.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from typing import Any, Dict, List, Optional, Type, TypeVar

from coach.domain.errors import ValidationError
from coach.utilities.constants import WORKOUT_KINDS, MEAL_KINDS, BASE_QUANTITY_GRAMS
from coach.utilities.dates import to_date_string

M = TypeVar("M", bound=BaseModel)


def validate(model: Type[M], data: Dict[str, Any]) -> M:
    """Build ``model`` from ``data``; pydantic errors become a plan ValidationError."""
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        where = ".".join(str(p) for p in first.get("loc", ()))
        message = first.get("msg", "Invalid input")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        raise ValidationError(f"{where}: {message}" if where else message) from e


def _canonical_date(v):
    # plan ValidationError subclasses ValueError, so pydantic reports it as a field error
    return to_date_string(v)


def _name(v):
    if v is None or not str(v).strip():
        raise ValueError('Name cannot be empty')
    return str(v).strip()


class ExerciseInput(BaseModel):
    """Schema for one exercise line of a workout."""
    name: str = Field(..., min_length=1, max_length=200)
    exercise_id: Optional[str] = None
    sets: int = Field(3, ge=0, le=100)
    reps: str = "8-12"
    weight: str = ""
    rest_seconds: int = Field(60, ge=0, le=3600)
    notes: str = ""

    @field_validator('reps', 'weight', mode='before')
    @classmethod
    def as_text(cls, v):
        """Reps and weight are free text ('8-12', '20kg')."""
        return "" if v is None else str(v)


class EntryCreateInput(BaseModel):
    """Schema for a new plan entry."""
    owner_id: str = Field(..., min_length=1)
    scheduled_date: str
    kind: str
    name: str
    notes: str = ""
    order: Optional[int] = None
    payload: Dict[str, Any] = Field(default_factory=dict)

    @field_validator('name', mode='before')
    @classmethod
    def validate_name(cls, v):
        return _name(v)

    @field_validator('scheduled_date', mode='before')
    @classmethod
    def validate_date(cls, v):
        return _canonical_date(v)

    @field_validator('kind')
    @classmethod
    def validate_kind(cls, v):
        if v not in WORKOUT_KINDS + MEAL_KINDS:
            raise ValueError(f"Unknown entry kind '{v}'")
        return v

    @field_validator('payload')
    @classmethod
    def validate_exercises(cls, v):
        """Exercise lines are checked when present."""
        if v.get('exercises'):
            v = dict(v)
            v['exercises'] = [ExerciseInput.model_validate(e).model_dump() for e in v['exercises']]
        return v


class EntryPatchInput(BaseModel):
    """Schema for a partial entry update. Status changes go through mark_complete/mark_skipped."""
    model_config = ConfigDict(extra='forbid')

    name: Optional[str] = None
    scheduled_date: Optional[str] = None
    kind: Optional[str] = None
    notes: Optional[str] = None
    order: Optional[int] = None
    payload: Optional[Dict[str, Any]] = None

    @field_validator('name', mode='before')
    @classmethod
    def validate_name(cls, v):
        return _name(v)

    @field_validator('scheduled_date', mode='before')
    @classmethod
    def validate_date(cls, v):
        return _canonical_date(v)

    @field_validator('kind')
    @classmethod
    def validate_kind(cls, v):
        if v not in WORKOUT_KINDS + MEAL_KINDS:
            raise ValueError(f"Unknown entry kind '{v}'")
        return v

    @field_validator('payload', mode='before')
    @classmethod
    def validate_payload(cls, v):
        # payload fields are merged; null would reset the whole payload
        if v is None:
            raise ValueError('Payload cannot be null')
        return v


class CopyDayInput(BaseModel):
    """Schema for copying one day onto one or more days."""
    owner_id: str = Field(..., min_length=1)
    source_date: str
    target_dates: List[str] = Field(..., min_length=1)
    replace_existing: bool = False

    @field_validator('source_date', mode='before')
    @classmethod
    def validate_source(cls, v):
        return _canonical_date(v)

    @field_validator('target_dates')
    @classmethod
    def validate_targets(cls, v):
        return [_canonical_date(d) for d in v]


class DuplicateEntryInput(BaseModel):
    target_date: str

    @field_validator('target_date', mode='before')
    @classmethod
    def validate_target(cls, v):
        return _canonical_date(v)


class InstantiateTemplateInput(BaseModel):
    owner_id: str = Field(..., min_length=1)
    date: str

    @field_validator('date', mode='before')
    @classmethod
    def validate_date(cls, v):
        return _canonical_date(v)


class SaveTemplateInput(BaseModel):
    name: Optional[str] = None


class PortionInput(BaseModel):
    """Schema for scaling food values to a quantity."""
    base: Dict[str, Optional[float]]
    quantity: float = Field(..., ge=0, le=100000)
    base_quantity: float = Field(BASE_QUANTITY_GRAMS, gt=0)


class ImportInput(BaseModel):
    owner_id: str = Field(..., min_length=1)
    entries: List[Dict[str, Any]]


__all__ = [
    'validate', 'ExerciseInput', 'EntryCreateInput', 'EntryPatchInput', 'CopyDayInput',
    'DuplicateEntryInput', 'InstantiateTemplateInput', 'SaveTemplateInput', 'PortionInput', 'ImportInput'
]
