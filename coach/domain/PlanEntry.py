"""PlanEntry domain entity: one workout or meal scheduled on a calendar day for a client.

The payload is a tagged union keyed by the entry kind: workout kinds carry a
WorkoutPayload (exercise list), meal kinds carry a MealPayload (macros).
"""
import copy
from typing import Any, Dict, List, Optional

from coach.domain.errors import ValidationError
from coach.utilities.constants import (
    WORKOUT, MEAL, WORKOUT_KINDS, MEAL_KINDS, REST_KIND, PLANNED, STATUSES,
    DEFAULT_DIFFICULTY, DEFAULT_DURATION_MINUTES, DURATION_BY_KIND,
    DEFAULT_SETS, DEFAULT_REPS, DEFAULT_REST_SECONDS, NUTRITION_FIELDS,
)
from coach.utilities.dates import to_date_string


def family_of(kind: str) -> str:
    """Return 'workout' or 'meal' for a kind; unknown kinds are rejected."""
    if kind in WORKOUT_KINDS:
        return WORKOUT
    if kind in MEAL_KINDS:
        return MEAL
    raise ValidationError(f"Unknown entry kind '{kind}'")


def _number(value):
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return value


class ExerciseItem:
    def __init__(self, name: str = "", exercise_id: Optional[str] = None, sets: int = DEFAULT_SETS,
                 reps: str = DEFAULT_REPS, weight: str = "", rest_seconds: int = DEFAULT_REST_SECONDS,
                 notes: str = ""):
        self.name = name
        self.exercise_id = exercise_id
        self.sets = sets
        self.reps = str(reps) if reps is not None else ""
        self.weight = str(weight) if weight is not None else ""
        self.rest_seconds = rest_seconds
        self.notes = notes or ""

    def __str__(self) -> str:
        return f"{self.name} {self.sets}x{self.reps}" + (f" @ {self.weight}" if self.weight else "")

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        d = dict(data) if isinstance(data, dict) else {}
        # older records used rest_time for the rest interval
        if 'rest_time' in d and 'rest_seconds' not in d:
            d['rest_seconds'] = d.pop('rest_time')
        allowed = {"name", "exercise_id", "sets", "reps", "weight", "rest_seconds", "notes"}
        return ExerciseItem(**{k: v for k, v in d.items() if k in allowed})

    def to_dict(self):
        return {
            "name": self.name,
            "exercise_id": self.exercise_id,
            "sets": self.sets,
            "reps": self.reps,
            "weight": self.weight,
            "rest_seconds": self.rest_seconds,
            "notes": self.notes,
        }


class WorkoutPayload:
    family = WORKOUT

    def __init__(self, exercises: Optional[List[ExerciseItem]] = None,
                 duration_minutes: int = DEFAULT_DURATION_MINUTES, difficulty: str = DEFAULT_DIFFICULTY,
                 instructions: str = "", program_id: Optional[str] = None):
        self.exercises = exercises[:] if exercises else []
        self.duration_minutes = duration_minutes
        self.difficulty = difficulty
        self.instructions = instructions or ""
        self.program_id = program_id

    @staticmethod
    def for_kind(kind: str, data: Optional[Dict[str, Any]] = None) -> "WorkoutPayload":
        """Build a payload for a workout kind; rest days ignore user input."""
        if kind == REST_KIND:
            return WorkoutPayload(exercises=[], duration_minutes=0,
                                  program_id=(data or {}).get("program_id"))
        d = dict(data or {})
        d.setdefault("duration_minutes", DURATION_BY_KIND.get(kind, DEFAULT_DURATION_MINUTES))
        return WorkoutPayload.from_dict(d)

    @staticmethod
    def from_dict(data):
        d = dict(data) if isinstance(data, dict) else {}
        exercises = [ExerciseItem.from_dict(e) for e in d.get("exercises") or []]
        duration = d.get("duration_minutes", d.get("estimated_duration_minutes"))
        return WorkoutPayload(
            exercises=exercises,
            duration_minutes=int(duration) if duration is not None else DEFAULT_DURATION_MINUTES,
            difficulty=d.get("difficulty") or d.get("difficulty_level") or DEFAULT_DIFFICULTY,
            instructions=d.get("instructions") or "",
            program_id=d.get("program_id"),
        )

    def to_dict(self):
        return {
            "exercises": [e.to_dict() for e in self.exercises],
            "duration_minutes": self.duration_minutes,
            "difficulty": self.difficulty,
            "instructions": self.instructions,
            "program_id": self.program_id,
        }


class MealPayload:
    family = MEAL

    def __init__(self, calories=None, protein=None, carbs=None, fats=None,
                 quantity_grams=None, food_id: Optional[str] = None, recipe_id: Optional[str] = None):
        self.calories = calories
        self.protein = protein
        self.carbs = carbs
        self.fats = fats
        self.quantity_grams = quantity_grams
        self.food_id = food_id
        self.recipe_id = recipe_id

    @staticmethod
    def from_dict(data):
        d = dict(data) if isinstance(data, dict) else {}
        # Normalize key synonyms
        if 'fat' in d and 'fats' not in d:
            d['fats'] = d.get('fat')
        if 'carbohydrates' in d and 'carbs' not in d:
            d['carbs'] = d.get('carbohydrates')
        values = {f: _number(d.get(f)) for f in NUTRITION_FIELDS}
        return MealPayload(
            quantity_grams=_number(d.get("quantity_grams")),
            food_id=d.get("food_id"),
            recipe_id=d.get("recipe_id"),
            **values,
        )

    def get(self, field: str) -> float:
        """Numeric value of a nutrition field, 0 when absent."""
        return getattr(self, field, None) or 0

    def to_dict(self):
        return {
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fats": self.fats,
            "quantity_grams": self.quantity_grams,
            "food_id": self.food_id,
            "recipe_id": self.recipe_id,
        }


def payload_for_kind(kind: str, data: Optional[Dict[str, Any]] = None):
    """Pick the payload variant for ``kind`` and build it from a plain dict."""
    if family_of(kind) == WORKOUT:
        return WorkoutPayload.for_kind(kind, data)
    return MealPayload.from_dict(data or {})


class PlanEntry:
    def __init__(self, owner_id: str, scheduled_date, kind: str, name: str = "", payload=None,
                 status: str = PLANNED, notes: str = "", id: Optional[str] = None,
                 order: Optional[int] = None, created_at: Optional[str] = None,
                 completed_at: Optional[str] = None):
        if status not in STATUSES:
            raise ValidationError(f"Unknown status '{status}'")
        self.id = id
        self.owner_id = owner_id
        self.scheduled_date = to_date_string(scheduled_date)
        self.kind = kind
        self.family = family_of(kind)
        self.name = name
        if payload is None or isinstance(payload, dict):
            payload = payload_for_kind(kind, payload)
        self.payload = payload
        self.status = status
        self.notes = notes or ""
        self.order = order
        self.created_at = created_at
        self.completed_at = completed_at

    def __str__(self) -> str:
        return f"{self.scheduled_date} {self.kind}: {self.name} [{self.status}]"

    __repr__ = __str__

    def __eq__(self, other) -> bool:
        if not isinstance(other, PlanEntry):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self):
        return hash((self.id, self.owner_id, self.scheduled_date, self.kind, self.name))

    def copy_for(self, target_date) -> "PlanEntry":
        """Unsaved copy on another day: same kind/payload, no id, status reset to planned."""
        return PlanEntry(
            owner_id=self.owner_id,
            scheduled_date=target_date,
            kind=self.kind,
            name=self.name,
            payload=copy.deepcopy(self.payload),
            notes=self.notes,
            order=self.order,
        )

    @staticmethod
    def from_dict(data):
        d = dict(data)
        # Flat meal records (calories at top level) are accepted as well
        payload = d.get("payload")
        if payload is None:
            payload = {k: v for k, v in d.items() if k not in _ENTRY_FIELDS}
        return PlanEntry(
            id=d.get("id"),
            owner_id=d.get("owner_id") or d.get("client_id"),
            scheduled_date=d.get("scheduled_date"),
            kind=d.get("kind"),
            name=d.get("name") or "",
            payload=payload,
            status=d.get("status") or PLANNED,
            notes=d.get("notes") or "",
            order=d.get("order"),
            created_at=d.get("created_at"),
            completed_at=d.get("completed_at"),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "scheduled_date": self.scheduled_date,
            "kind": self.kind,
            "family": self.family,
            "name": self.name,
            "status": self.status,
            "payload": self.payload.to_dict(),
            "notes": self.notes,
            "order": self.order,
            "created_at": self.created_at,
            "completed_at": self.completed_at,
        }


_ENTRY_FIELDS = {
    "id", "owner_id", "client_id", "scheduled_date", "kind", "family", "name", "status",
    "payload", "notes", "order", "created_at", "completed_at",
}

__all__ = [
    'family_of', 'ExerciseItem', 'WorkoutPayload', 'MealPayload', 'payload_for_kind', 'PlanEntry'
]
