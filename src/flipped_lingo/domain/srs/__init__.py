# Domain SRS Package
from .models import (
    DEFAULT_SETTINGS,
    Card,
    CardBucket,
    CardScheduleState,
    DeckStats,
    DueCards,
    ReviewOutcome,
    ReviewQuality,
    ReviewResult,
    SchedulerSettings,
)
from .ports import CardRepository

__all__ = [
    "DEFAULT_SETTINGS",
    "Card",
    "CardBucket",
    "CardRepository",
    "CardScheduleState",
    "DeckStats",
    "DueCards",
    "ReviewOutcome",
    "ReviewQuality",
    "ReviewResult",
    "SchedulerSettings",
]
