from typing import Final

# Canonical local date string used for every index key and storage filter
DATE_FORMAT: Final[str] = "%Y-%m-%d"
DISPLAY_DATE_FORMAT: Final[str] = "%d.%m.%Y"

# Same numbering as the stdlib calendar module
MONDAY: Final[int] = 0
SUNDAY: Final[int] = 6
FIRST_WEEKDAYS: Final[tuple[int, ...]] = (MONDAY, SUNDAY)

WORKOUT: Final[str] = "workout"
MEAL: Final[str] = "meal"
FAMILIES: Final[tuple[str, ...]] = (WORKOUT, MEAL)

WORKOUT_KINDS: Final[tuple[str, ...]] = ("strength", "cardio", "flexibility", "rest", "active_recovery")
MEAL_KINDS: Final[tuple[str, ...]] = (
    "breakfast", "morning_snack", "lunch", "afternoon_snack", "dinner", "evening_snack"
)
REST_KIND: Final[str] = "rest"

# Suggested clock time per meal slot, shown next to the slot label
MEAL_TIMES: Final[dict[str, str]] = {
    "breakfast": "08:00",
    "morning_snack": "10:00",
    "lunch": "13:00",
    "afternoon_snack": "16:00",
    "dinner": "19:00",
    "evening_snack": "21:00",
}

PLANNED: Final[str] = "planned"
COMPLETED: Final[str] = "completed"
SKIPPED: Final[str] = "skipped"
STATUSES: Final[tuple[str, ...]] = (PLANNED, COMPLETED, SKIPPED)

DIFFICULTY_LEVELS: Final[tuple[str, ...]] = ("beginner", "intermediate", "advanced")
DEFAULT_DIFFICULTY: Final[str] = "intermediate"
DEFAULT_DURATION_MINUTES: Final[int] = 60
DURATION_BY_KIND: Final[dict[str, int]] = {"cardio": 30, "rest": 0}
REST_DAY_NAME: Final[str] = "Rest day"

# Exercise defaults used when an exercise is dropped onto a day
DEFAULT_SETS: Final[int] = 3
DEFAULT_REPS: Final[str] = "8-12"
DEFAULT_REST_SECONDS: Final[int] = 60

MACRO_FIELDS: Final[tuple[str, ...]] = ("protein", "carbs", "fats")
NUTRITION_FIELDS: Final[tuple[str, ...]] = ("calories",) + MACRO_FIELDS
MACRO_PRECISION: Final[int] = 1
BASE_QUANTITY_GRAMS: Final[int] = 100
PRESET_QUANTITIES: Final[tuple[int, ...]] = (50, 100, 150, 200, 250)

MAX_ACTIVITY_EVENTS: Final[int] = 300
