"""
SM-2 derived review scheduler.

Pure functions of (state, quality, now, settings): no I/O, no hidden state.
The caller persists whatever comes back.
"""

import logging
import math
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from flipped_lingo.domain import constants as c
from flipped_lingo.domain.errors import InvalidQualityRatingError
from flipped_lingo.domain.srs.models import (
    DEFAULT_SETTINGS,
    Card,
    CardScheduleState,
    ReviewOutcome,
    ReviewResult,
    SchedulerSettings,
)

logger = logging.getLogger(__name__)


def current_time() -> datetime:
    return datetime.now(timezone.utc)


def round_half_up(value: float) -> int:
    """Round .5 upwards, matching the interval rounding of stored decks."""
    return math.floor(value + 0.5)


def validate_quality(quality: object) -> int:
    """
    Return quality as a plain int, or raise InvalidQualityRatingError.

    Only integers 0-5 are accepted. Booleans and floats are rejected even when
    numerically in range, since they point at a caller bug.
    """
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidQualityRatingError(quality)
    if not c.MIN_QUALITY <= quality <= c.MAX_QUALITY:
        raise InvalidQualityRatingError(quality)
    return int(quality)


def initialize_card(card: Card, now: datetime | None = None) -> Card:
    """
    Attach a fresh schedule state to a card that has none.

    Idempotent: a card that already carries state is returned unchanged.
    """
    if card.srs_data is not None:
        return card
    return card.with_state(CardScheduleState.fresh(now or current_time()))


def calculate_next_review(
    card: Card,
    quality: int,
    settings: SchedulerSettings = DEFAULT_SETTINGS,
    now: datetime | None = None,
) -> ReviewOutcome:
    """
    Apply one review to a card and compute its next schedule.

    Args:
        card: The reviewed card. Cards without state are initialized first.
        quality: Recall quality 0-5 (see ReviewQuality).
        settings: Scheduler tuning; defaults to DEFAULT_SETTINGS.
        now: Review time; defaults to the current UTC time.

    Returns:
        ReviewOutcome(updated_card, review_result). review_result.time_spent
        is 0 and is filled in by the caller.

    Raises:
        InvalidQualityRatingError: quality is not an integer in 0-5.
        CorruptScheduleStateError: the incoming state violates its invariants.
    """
    quality = validate_quality(quality)
    now = now or current_time()
    card = initialize_card(card, now)
    state = card.srs_data
    state.check_integrity(card.id)

    was_correct = quality >= c.PASSING_QUALITY
    previous_interval = state.interval

    new_average_quality = (state.average_quality * state.total_reviews + quality) / (
        state.total_reviews + 1
    )

    new_ease_factor = state.ease_factor
    if was_correct:
        if state.is_new:
            if quality == c.MAX_QUALITY:
                new_interval = settings.easy_interval
            else:
                new_interval = settings.graduating_interval
            new_repetitions = 1
        else:
            if state.repetitions == 0:
                new_interval = 1
            elif state.repetitions == 1:
                new_interval = c.SECOND_REVIEW_INTERVAL
            else:
                new_interval = round_half_up(state.interval * state.ease_factor)
            new_repetitions = state.repetitions + 1

        if quality == 5:
            new_interval = round_half_up(new_interval * settings.easy_bonus)
            new_ease_factor = min(c.MAX_EASE_FACTOR, state.ease_factor + c.PERFECT_EASE_BONUS)
        elif quality == 3:
            new_interval = round_half_up(new_interval * settings.hard_penalty)
            new_ease_factor = max(c.MIN_EASE_FACTOR, state.ease_factor - c.HARD_EASE_PENALTY)
    else:
        new_interval = c.LAPSE_INTERVAL
        new_repetitions = 0
        new_ease_factor = max(c.MIN_EASE_FACTOR, state.ease_factor - c.LAPSE_EASE_PENALTY)

    new_interval = max(settings.minimum_interval, min(settings.maximum_interval, new_interval))

    updated_state = replace(
        state,
        interval=new_interval,
        repetitions=new_repetitions,
        ease_factor=new_ease_factor,
        next_review_date=now + timedelta(days=new_interval),
        last_review_date=now,
        quality=quality,
        is_new=False,
        total_reviews=state.total_reviews + 1,
        correct_streak=state.correct_streak + 1 if was_correct else 0,
        average_quality=new_average_quality,
    )

    logger.debug(
        f"Reviewed {card.id}: q={quality} interval {previous_interval}->{new_interval} "
        f"ease {state.ease_factor:.2f}->{new_ease_factor:.2f}"
    )

    result = ReviewResult(
        card_id=card.id,
        quality=quality,
        time_spent=0,
        was_correct=was_correct,
        previous_interval=previous_interval,
        new_interval=new_interval,
        review_date=now,
    )
    return ReviewOutcome(card.with_state(updated_state), result)
