"""
Domain models for spaced-repetition scheduling.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum, IntEnum
from typing import Literal, NamedTuple

from flipped_lingo.domain import constants as c
from flipped_lingo.domain.errors import CorruptScheduleStateError


class ReviewQuality(IntEnum):
    """Self-assessed recall quality on the 0-5 scale."""

    BLACKOUT = 0
    INCORRECT = 1
    INCORRECT_EASY = 2
    HARD = 3
    GOOD = 4
    PERFECT = 5

    @property
    def label(self) -> str:
        return _QUALITY_LABELS[self]

    @property
    def is_passing(self) -> bool:
        return self >= c.PASSING_QUALITY


_QUALITY_LABELS = {
    ReviewQuality.BLACKOUT: "Complete Blackout",
    ReviewQuality.INCORRECT: "Incorrect",
    ReviewQuality.INCORRECT_EASY: "Incorrect (Easy)",
    ReviewQuality.HARD: "Correct (Hard)",
    ReviewQuality.GOOD: "Correct",
    ReviewQuality.PERFECT: "Perfect",
}


class CardBucket(Enum):
    """Exhaustive classification of a card for deck statistics."""

    NEW = "new"
    DUE = "due"
    MASTERED = "mastered"
    LEARNING = "learning"


@dataclass(frozen=True)
class CardScheduleState:
    """
    Scheduling memory of a single card.

    Attributes:
        interval: Days until the next review (0 before the first review).
        repetitions: Consecutive successful reviews since the last lapse.
        ease_factor: Interval growth multiplier, kept within [1.3, 2.5].
        next_review_date: The card is due once this is <= now.
        last_review_date: Time of the most recent review, None if never reviewed.
        quality: Quality of the most recent review (0 before the first review).
        is_new: True until the first review is recorded.
        total_reviews: Lifetime count of review events.
        correct_streak: Consecutive reviews with quality >= 3.
        average_quality: Running mean of every quality rating given.
    """

    interval: int
    repetitions: int
    ease_factor: float
    next_review_date: datetime
    is_new: bool
    total_reviews: int
    correct_streak: int
    average_quality: float
    quality: int = 0
    last_review_date: datetime | None = None

    @classmethod
    def fresh(cls, now: datetime) -> "CardScheduleState":
        return cls(
            interval=0,
            repetitions=0,
            ease_factor=c.DEFAULT_EASE_FACTOR,
            next_review_date=now,
            is_new=True,
            total_reviews=0,
            correct_streak=0,
            average_quality=0,
            quality=0,
        )

    def is_due(self, now: datetime) -> bool:
        return self.next_review_date <= now

    def check_integrity(self, card_id: str | None = None) -> None:
        """
        Raise CorruptScheduleStateError if this state could not have been
        produced by the scheduler. Never repairs the state.
        """
        problems = []
        if self.interval < 0:
            problems.append(f"negative interval {self.interval}")
        if self.repetitions < 0:
            problems.append(f"negative repetitions {self.repetitions}")
        if self.total_reviews < 0:
            problems.append(f"negative total_reviews {self.total_reviews}")
        if self.correct_streak < 0:
            problems.append(f"negative correct_streak {self.correct_streak}")
        if not c.MIN_EASE_FACTOR <= self.ease_factor <= c.MAX_EASE_FACTOR:
            problems.append(f"ease_factor {self.ease_factor} outside [1.3, 2.5]")
        if not c.MIN_QUALITY <= self.average_quality <= c.MAX_QUALITY:
            problems.append(f"average_quality {self.average_quality} outside [0, 5]")
        if self.is_new != (self.total_reviews == 0):
            problems.append(
                f"is_new={self.is_new} disagrees with total_reviews={self.total_reviews}"
            )
        if not self.is_new and self.interval < 1:
            problems.append("reviewed card with interval below 1")

        if problems:
            raise CorruptScheduleStateError(card_id, "; ".join(problems))


@dataclass(frozen=True)
class Card:
    """A front/back text pair with an optional schedule state attached."""

    id: str
    front: str
    back: str
    difficulty: Literal["easy", "medium", "hard"] | None = None
    srs_data: CardScheduleState | None = None

    def with_state(self, state: CardScheduleState) -> "Card":
        return replace(self, srs_data=state)


@dataclass(frozen=True)
class ReviewResult:
    """
    Record of one review event, appended to a session log.

    Attributes:
        card_id: The card that was reviewed.
        quality: Rating given (0-5).
        time_spent: Seconds spent on the card, supplied by the caller.
        was_correct: quality >= 3.
        previous_interval: Interval before this review (days).
        new_interval: Interval assigned by this review (days).
        review_date: When the review happened.
    """

    card_id: str
    quality: int
    time_spent: int
    was_correct: bool
    previous_interval: int
    new_interval: int
    review_date: datetime

    def with_time_spent(self, seconds: int) -> "ReviewResult":
        return replace(self, time_spent=seconds)


class ReviewOutcome(NamedTuple):
    updated_card: Card
    review_result: ReviewResult


class DueCards(NamedTuple):
    new_cards: list[Card]
    review_cards: list[Card]


@dataclass(frozen=True)
class SchedulerSettings:
    """Immutable tuning knobs for the scheduler. Override per call."""

    max_new_cards_per_day: int = c.DEFAULT_MAX_NEW_CARDS_PER_DAY
    max_reviews_per_day: int = c.DEFAULT_MAX_REVIEWS_PER_DAY
    easy_bonus: float = c.DEFAULT_EASY_BONUS
    hard_penalty: float = c.DEFAULT_HARD_PENALTY
    graduating_interval: int = c.DEFAULT_GRADUATING_INTERVAL
    easy_interval: int = c.DEFAULT_EASY_INTERVAL
    maximum_interval: int = c.DEFAULT_MAXIMUM_INTERVAL
    minimum_interval: int = c.DEFAULT_MINIMUM_INTERVAL


DEFAULT_SETTINGS = SchedulerSettings()


@dataclass(frozen=True)
class DeckStats:
    """
    Deck-level summary for dashboards.

    Only new/review/mastered are historical aggregate counters. Cards in the
    LEARNING bucket count towards total_cards and learning_cards only.
    """

    total_cards: int = 0
    new_cards: int = 0
    review_cards: int = 0
    mastered_cards: int = 0
    learning_cards: int = 0
    average_ease_factor: float = c.DEFAULT_EASE_FACTOR
    retention_rate: float = 0.0
    daily_reviews: int = 0
    streak_days: int = 0  # Not tracked: needs per-day review history
