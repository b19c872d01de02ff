"""
Due-set selection and study session assembly.

Cards are split into new and due-for-review, capped per day, and combined
into a shuffled session:
1. Every capped review card is included (reviews take priority)
2. Remaining slots up to the session size are filled with new cards
3. The combined list is shuffled
"""

import logging
import random
from datetime import datetime
from typing import Protocol

from flipped_lingo.domain.constants import DEFAULT_SESSION_SIZE, DEFAULT_TARGET_MINUTES
from flipped_lingo.domain.srs.models import DEFAULT_SETTINGS, Card, DueCards, SchedulerSettings

from .scheduler import current_time, initialize_card

logger = logging.getLogger(__name__)


class Shuffler(Protocol):
    """Anything with random.shuffle semantics, e.g. random.Random(seed)."""

    def shuffle(self, x: list) -> None: ...


def get_cards_for_review(
    cards: list[Card],
    settings: SchedulerSettings = DEFAULT_SETTINGS,
    now: datetime | None = None,
) -> DueCards:
    """
    Partition cards into new and due-for-review lists.

    Cards that are neither new nor due are left out. Each list keeps the
    caller's order and is truncated to its daily cap.
    """
    now = now or current_time()
    new_cards: list[Card] = []
    review_cards: list[Card] = []

    for card in cards:
        card = initialize_card(card, now)
        if card.srs_data.is_new:
            new_cards.append(card)
        elif card.srs_data.is_due(now):
            review_cards.append(card)

    return DueCards(
        new_cards=new_cards[: settings.max_new_cards_per_day],
        review_cards=review_cards[: settings.max_reviews_per_day],
    )


def get_optimal_study_session(
    cards: list[Card],
    target_minutes: int = DEFAULT_TARGET_MINUTES,
    settings: SchedulerSettings = DEFAULT_SETTINGS,
    now: datetime | None = None,
    rng: Shuffler | None = None,
    session_size: int = DEFAULT_SESSION_SIZE,
) -> list[Card]:
    """
    Build a shuffled study session.

    Args:
        cards: The deck, in caller order.
        target_minutes: Accepted for API compatibility. It does not size the
            session; session_size does.
        settings: Daily caps and scheduler tuning.
        now: Reference time for due checks.
        rng: Shuffle source; defaults to the random module.
        session_size: Card count that new cards fill up to. Review cards are
            never trimmed to fit it.

    Returns:
        Session cards in random order. Empty means nothing to study.
    """
    due = get_cards_for_review(cards, settings, now)

    session = list(due.review_cards)
    remaining_slots = max(0, session_size - len(session))
    session.extend(due.new_cards[:remaining_slots])

    logger.debug(
        f"Session: {len(due.review_cards)} reviews, "
        f"{len(session) - len(due.review_cards)} new (target_minutes={target_minutes} unused)"
    )

    (rng or random).shuffle(session)
    return session
