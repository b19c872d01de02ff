"""Centralized constants for flipped-lingo.

All magic numbers and scheduling defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Ease factor ----------
DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
MAX_EASE_FACTOR = 2.5
PERFECT_EASE_BONUS = 0.15
HARD_EASE_PENALTY = 0.15
LAPSE_EASE_PENALTY = 0.2

# ---------- Quality ----------
MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 3

# ---------- Intervals (days) ----------
SECOND_REVIEW_INTERVAL = 6
LAPSE_INTERVAL = 1
MASTERED_INTERVAL = 21

# ---------- Scheduler defaults ----------
DEFAULT_MAX_NEW_CARDS_PER_DAY = 20
DEFAULT_MAX_REVIEWS_PER_DAY = 100
DEFAULT_EASY_BONUS = 1.3
DEFAULT_HARD_PENALTY = 0.8
DEFAULT_GRADUATING_INTERVAL = 1
DEFAULT_EASY_INTERVAL = 4
DEFAULT_MAXIMUM_INTERVAL = 36500  # ~100 years
DEFAULT_MINIMUM_INTERVAL = 1

# ---------- Study sessions ----------
DEFAULT_SESSION_SIZE = 20
DEFAULT_TARGET_MINUTES = 15
