"""
Constants for the Sideline Lineup application.

This module contains configuration constants used throughout the application.
"""

# Application metadata
APP_TITLE = "Sideline Lineup"

# Formation / orientation defaults
DEFAULT_FORMATION = "433"
DEFAULT_ORIENTATION = "right"  # "up" | "right" | "down" | "left"

# Logical storage keys, one JSON document each
STORAGE_KEYS = {
    "roster": "soccer.roster",
    "attendance": "soccer.attendance",
    "assignments": "soccer.assignments",
    "formation": "soccer.formation",
    "orientation": "soccer.orientation",
    "minutes": "soccer.minutes",  # {pid: {totalMs, activeStartMs}}
    "clock": "soccer.clock",      # {running, startedAt, elapsedMs}
}

# Roster used when nothing has been saved yet
ROSTER_SEED = [
    {"id": "p1", "name": "Alex", "number": 2},
    {"id": "p2", "name": "Brian", "number": 3},
    {"id": "p3", "name": "Chris", "number": 4},
    {"id": "p4", "name": "David", "number": 7},
    {"id": "p5", "name": "Ethan", "number": 9},
    {"id": "p6", "name": "Frank", "number": 10},
    {"id": "p7", "name": "Gabe", "number": 11},
    {"id": "p8", "name": "Henry", "number": 12},
]

# Display refresh cadence
TICK_INTERVAL_MS = 1000

# Shown wherever a position is empty or references an unknown player
PLACEHOLDER = "—"

# Between a player and their playing time in lineup labels
LABEL_SEPARATOR = "·"

# Runtime defaults
DEFAULT_DATA_DIR = "sideline_data"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 7122
