"""
Stats calculator for deck dashboards.

This is a pure computation module with no I/O.
"""

from datetime import datetime, time

from flipped_lingo.domain import constants as c
from flipped_lingo.domain.srs.models import Card, CardBucket, CardScheduleState, DeckStats

from .scheduler import current_time


def local_midnight(now: datetime) -> datetime:
    """Start of the local calendar day containing now."""
    # Resolve the offset at midnight itself, which differs from now's on DST change days
    return datetime.combine(now.astimezone().date(), time.min).astimezone()


class StatsCalculator:
    """
    Computes deck-level summaries from card schedule states.

    Stateless and side-effect free.
    """

    def classify(self, state: CardScheduleState, now: datetime) -> CardBucket:
        """
        Place a card in exactly one bucket: new, then due, then mastered,
        otherwise learning.
        """
        if state.is_new:
            return CardBucket.NEW
        if state.is_due(now):
            return CardBucket.DUE
        if state.interval >= c.MASTERED_INTERVAL:
            return CardBucket.MASTERED
        return CardBucket.LEARNING

    def calculate(self, cards: list[Card], now: datetime | None = None) -> DeckStats:
        """
        Summarize the cards that carry a schedule state. Cards without one
        are ignored.
        """
        now = now or current_time()
        today = local_midnight(now)

        counts = dict.fromkeys(CardBucket, 0)
        total_cards = 0
        total_ease = 0.0
        total_streak = 0
        total_reviews = 0
        daily_reviews = 0

        for card in cards:
            state = card.srs_data
            if state is None:
                continue

            total_cards += 1
            counts[self.classify(state, now)] += 1

            total_ease += state.ease_factor
            total_streak += state.correct_streak
            total_reviews += state.total_reviews

            if state.last_review_date is not None and state.last_review_date >= today:
                daily_reviews += 1

        return DeckStats(
            total_cards=total_cards,
            new_cards=counts[CardBucket.NEW],
            review_cards=counts[CardBucket.DUE],
            mastered_cards=counts[CardBucket.MASTERED],
            learning_cards=counts[CardBucket.LEARNING],
            average_ease_factor=(
                total_ease / total_cards if total_cards else c.DEFAULT_EASE_FACTOR
            ),
            retention_rate=self._retention_rate(total_streak, total_reviews),
            daily_reviews=daily_reviews,
            streak_days=0,
        )

    def _retention_rate(self, total_streak: int, total_reviews: int) -> float:
        """
        Percentage of reviews counted as retained.

        The numerator is the sum of current correct streaks, not lifetime
        correct answers, so a lapse zeroes a card's contribution.
        """
        if total_reviews == 0:
            return 0.0
        return total_streak / total_reviews * 100


def calculate_stats(cards: list[Card], now: datetime | None = None) -> DeckStats:
    return StatsCalculator().calculate(cards, now)
