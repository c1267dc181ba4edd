"""
Utilities package for the Sideline Lineup application.

This package contains utility functions used throughout the application.
"""
from .time_utils import fmt_mmss, now_ms
from .constants import (
    APP_TITLE, DEFAULT_FORMATION, DEFAULT_ORIENTATION, STORAGE_KEYS,
    ROSTER_SEED, TICK_INTERVAL_MS, PLACEHOLDER, LABEL_SEPARATOR, DEFAULT_DATA_DIR,
    DEFAULT_HOST, DEFAULT_PORT
)

__all__ = [
    "fmt_mmss", "now_ms", "APP_TITLE", "DEFAULT_FORMATION",
    "DEFAULT_ORIENTATION", "STORAGE_KEYS", "ROSTER_SEED", "TICK_INTERVAL_MS",
    "PLACEHOLDER", "LABEL_SEPARATOR", "DEFAULT_DATA_DIR", "DEFAULT_HOST", "DEFAULT_PORT"
]
