"""Configuration management for the Coach Planner application."""
import os
from typing import Final
from pathlib import Path

from coach.utilities.constants import MONDAY, SUNDAY

# Load environment variables from .env file if it exists
from dotenv import load_dotenv
env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)


def _weekday(value: str, default: int) -> int:
    """Accept 'monday'/'sunday' or the calendar-module number."""
    v = (value or '').strip().lower()
    if v in ('monday', 'mon'):
        return MONDAY
    if v in ('sunday', 'sun'):
        return SUNDAY
    if v.isdigit():
        return int(v)
    return default


# Application Settings
APP_HOST: Final[str] = os.getenv('APP_HOST', '0.0.0.0')
APP_PORT: Final[int] = int(os.getenv('APP_PORT', '8000'))
DEBUG: Final[bool] = os.getenv('DEBUG', 'False').lower() == 'true'
LOG_LEVEL: Final[str] = os.getenv('LOG_LEVEL', 'INFO').upper()

# Storage backend: memory | json | rest
STORAGE_BACKEND: Final[str] = os.getenv('STORAGE_BACKEND', 'memory').lower()
BACKEND_URL: Final[str] = os.getenv('BACKEND_URL', '')
BACKEND_API_KEY: Final[str] = os.getenv('BACKEND_API_KEY', '')
BACKEND_TIMEOUT: Final[float] = float(os.getenv('BACKEND_TIMEOUT', '10'))

# Calendar conventions; the workout and meal calendars differ by default
WORKOUT_FIRST_WEEKDAY: Final[int] = _weekday(os.getenv('WORKOUT_FIRST_WEEKDAY', ''), MONDAY)
MEAL_FIRST_WEEKDAY: Final[int] = _weekday(os.getenv('MEAL_FIRST_WEEKDAY', ''), SUNDAY)
# Fetch the leading/trailing days of the grid too, not only the strict month
FETCH_GRID_OVERFLOW: Final[bool] = os.getenv('FETCH_GRID_OVERFLOW', 'True').lower() == 'true'

# File Paths
BASE_DIR: Final[Path] = Path(__file__).parent.parent
DATA_DIR: Final[Path] = Path(os.getenv('DATA_DIR', str(BASE_DIR / 'data')))
