"""
Constants for the Courtside Match Clock application.

This module contains configuration constants used throughout the application.
"""
import os

# Application metadata
APP_TITLE = "Courtside Match Clock"

# Phase timing defaults (minutes)
DEFAULT_QUARTER_LENGTH_MIN = 15
DEFAULT_BREAK_LENGTH_MIN = 2
DEFAULT_HALFTIME_LENGTH_MIN = 5
MIN_PHASE_LENGTH_MIN = 1
MAX_PHASE_LENGTH_MIN = 60

# Countdown before the first quarter, independent of settings
START_DELAY_SECONDS = 10

TICK_INTERVAL_MS = 1000

# Vertical drag distance (px) that counts as one score step
SCORE_SWIPE_THRESHOLD_PX = 30

SOUND_TYPES = [
    "buzzer",
    "whistle-short",
    "whistle-long",
    "whistle-double",
    "whistle-netball",
    "whistle-hockey",
]
DEFAULT_SOUND_TYPE = "whistle-netball"

# Team defaults
DEFAULT_HOME_NAME = "HOME"
DEFAULT_HOME_COLOR = "#ef4444"
DEFAULT_GUEST_NAME = "GUEST"
DEFAULT_GUEST_COLOR = "#eab308"
DEFAULT_TEXT_COLOR = "#ffffff"

# Entitlement windows
MINUTE_MS = 60 * 1000
DAY_MS = 24 * 60 * MINUTE_MS
TRIAL_MINUTES = 30
TRIAL_MS = TRIAL_MINUTES * MINUTE_MS
LICENSE_MONTHS = 4
LICENSE_MS = LICENSE_MONTHS * 30 * DAY_MS

DEVICE_ID_LENGTH = 8
ACTIVATION_KEY_LENGTH = 16

# Persistence keys
STORAGE_KEYS = {
    "SETTINGS": "courtclock_settings",
    "HOME_TEAM": "courtclock_home_team",
    "GUEST_TEAM": "courtclock_guest_team",
    "PROFILES": "courtclock_profiles",
    "GAME_HISTORY": "courtclock_game_history",
    "FIRST_LAUNCH": "courtclock_install_date",
    "ACTIVATED": "courtclock_is_activated",
    "ACTIVATION_DATE": "courtclock_activation_date",
    "DEVICE_ID": "courtclock_device_id",
}

# Runtime configuration - can be overridden by environment variables
DATA_DIR = os.environ.get(
    "COURTCLOCK_DATA_DIR", os.path.join(os.path.expanduser("~"), ".courtclock")
)
STORE_FILENAME = "store.json"
WEB_HOST = os.environ.get("COURTCLOCK_HOST", "127.0.0.1")
WEB_PORT = int(os.environ.get("COURTCLOCK_PORT", "7122"))
