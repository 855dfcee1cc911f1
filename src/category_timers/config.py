"""Configuration constants for category_timers."""

import os
from pathlib import Path

APP_NAME = "Category Timers"

# Directories and files
DATA_DIR = Path(os.environ.get(
    "CATEGORY_TIMERS_HOME", Path.home() / ".category_timers",
))
STORE_PATH = DATA_DIR / "storage.json"
LOG_PATH = DATA_DIR / "category_timers.log"

# Storage slots, one JSON array per collection
TIMERS_STORAGE_KEY = "@timers_app/timers"
HISTORY_STORAGE_KEY = "@timers_app/history"

# Tick driver
TICK_INTERVAL_SECONDS = 1.0

# Logging
LOG_LEVEL = os.environ.get("CATEGORY_TIMERS_LOG_LEVEL", "WARNING").upper()

# Progress bars
PROGRESS_SYMBOLS = ("░", "█")  # remaining, elapsed
PROGRESS_CELL_WIDTH = 12
