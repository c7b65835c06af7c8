from pathlib import Path

from coach.utilities.config import DATA_DIR as _CONFIG_DATA_DIR

# Centralized paths for data files (single source of truth)
DATA_DIR = Path(_CONFIG_DATA_DIR).resolve()
ENTRIES_FILE_NAME = 'plan_entries.json'
TEMPLATES_FILE_NAME = 'templates.json'
ENTRIES_FILE = DATA_DIR / ENTRIES_FILE_NAME
TEMPLATES_FILE = DATA_DIR / TEMPLATES_FILE_NAME

__all__ = ['DATA_DIR', 'ENTRIES_FILE_NAME', 'TEMPLATES_FILE_NAME', 'ENTRIES_FILE', 'TEMPLATES_FILE']
