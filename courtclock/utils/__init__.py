"""
Utilities package for the Courtside Match Clock.

This package contains utility functions and constants used throughout the application.
"""
from .time_utils import fmt_mmss, now_ms
from .ids import generate_safe_id
from .constants import (
    APP_TITLE, DEFAULT_QUARTER_LENGTH_MIN, DEFAULT_BREAK_LENGTH_MIN,
    DEFAULT_HALFTIME_LENGTH_MIN, START_DELAY_SECONDS, STORAGE_KEYS,
    TRIAL_MS, LICENSE_MS
)

__all__ = [
    "fmt_mmss", "now_ms", "generate_safe_id", "APP_TITLE",
    "DEFAULT_QUARTER_LENGTH_MIN", "DEFAULT_BREAK_LENGTH_MIN",
    "DEFAULT_HALFTIME_LENGTH_MIN", "START_DELAY_SECONDS", "STORAGE_KEYS",
    "TRIAL_MS", "LICENSE_MS"
]
