"""Tests for the SM-2 review update and card initialization."""

from datetime import timedelta

import pytest

from flipped_lingo.application.srs.scheduler import (
    calculate_next_review,
    initialize_card,
    round_half_up,
    validate_quality,
)
from flipped_lingo.domain.errors import CorruptScheduleStateError, InvalidQualityRatingError
from flipped_lingo.domain.srs.models import (
    Card,
    CardScheduleState,
    ReviewQuality,
    SchedulerSettings,
)


class TestInitializeCard:
    def test_attaches_default_state(self, new_card, now):
        card = initialize_card(new_card, now)
        state = card.srs_data

        assert state.interval == 0
        assert state.repetitions == 0
        assert state.ease_factor == 2.5
        assert state.next_review_date == now
        assert state.last_review_date is None
        assert state.is_new is True
        assert state.total_reviews == 0
        assert state.correct_streak == 0
        assert state.average_quality == 0
        assert state.quality == 0
        assert card.front == new_card.front

    def test_idempotent(self, new_card, now):
        once = initialize_card(new_card, now)
        twice = initialize_card(once, now + timedelta(days=3))

        assert twice is once
        assert twice.srs_data == once.srs_data

    def test_keeps_existing_state(self, make_card, now):
        card = make_card("c1", interval=12, repetitions=3)
        assert initialize_card(card, now) is card


class TestGraduation:
    def test_perfect_first_review_uses_easy_interval_with_bonus(self, new_card, now):
        updated, result = calculate_next_review(new_card, 5, now=now)
        state = updated.srs_data

        # round(4 * 1.3) = 5
        assert result.new_interval == 5
        assert state.interval == 5
        assert state.repetitions == 1
        assert state.ease_factor == 2.5
        assert state.next_review_date == now + timedelta(days=5)

    def test_good_first_review_uses_graduating_interval(self, new_card, now):
        updated, result = calculate_next_review(new_card, 4, now=now)

        assert result.new_interval == 1
        assert updated.srs_data.repetitions == 1
        assert updated.srs_data.ease_factor == 2.5

    def test_hard_first_review(self, new_card, now):
        updated, result = calculate_next_review(new_card, 3, now=now)

        # round(1 * 0.8) = 1
        assert result.new_interval == 1
        assert updated.srs_data.ease_factor == pytest.approx(2.35)

    def test_first_review_bookkeeping(self, new_card, now):
        updated, result = calculate_next_review(new_card, 4, now=now)
        state = updated.srs_data

        assert state.is_new is False
        assert state.total_reviews == 1
        assert state.correct_streak == 1
        assert state.average_quality == 4.0
        assert state.quality == 4
        assert state.last_review_date == now

        assert result.card_id == new_card.id
        assert result.previous_interval == 0
        assert result.was_correct is True
        assert result.time_spent == 0
        assert result.review_date == now


class TestRepeatReviews:
    def test_after_lapse_interval_is_one(self, make_card, now):
        card = make_card("c1", interval=1, repetitions=0, total_reviews=4, correct_streak=0)
        updated, result = calculate_next_review(card, 4, now=now)

        assert result.new_interval == 1
        assert updated.srs_data.repetitions == 1

    def test_second_success_interval_is_six(self, make_card, now):
        card = make_card("c1", interval=1, repetitions=1)
        updated, result = calculate_next_review(card, 4, now=now)

        assert result.new_interval == 6
        assert updated.srs_data.repetitions == 2

    @pytest.mark.parametrize(
        "quality, expected",
        [(3, 5), (4, 6), (5, 8)],  # 6 * 0.8 = 4.8, 6, 6 * 1.3 = 7.8
    )
    def test_second_success_quality_modifiers(self, make_card, now, quality, expected):
        card = make_card("c1", interval=1, repetitions=1)
        _, result = calculate_next_review(card, quality, now=now)
        assert result.new_interval == expected

    @pytest.mark.parametrize(
        "interval, ease, expected",
        [(10, 2.5, 25), (7, 2.2, 15), (3, 1.3, 4)],
    )
    def test_interval_grows_by_ease_factor(self, make_card, now, interval, ease, expected):
        card = make_card("c1", interval=interval, repetitions=2, ease_factor=ease)
        updated, result = calculate_next_review(card, 4, now=now)

        assert result.new_interval == expected
        assert updated.srs_data.ease_factor == ease
        assert updated.srs_data.repetitions == 3

    def test_average_quality_is_exact_running_mean(self, make_card, now):
        card = make_card("c1", interval=6, repetitions=2, total_reviews=3, average_quality=4.0)
        updated, _ = calculate_next_review(card, 1, now=now)

        assert updated.srs_data.average_quality == 3.25
        assert updated.srs_data.total_reviews == 4

    def test_correct_streak_increments(self, make_card, now):
        card = make_card("c1", interval=6, repetitions=2, total_reviews=5, correct_streak=3)
        updated, _ = calculate_next_review(card, 3, now=now)
        assert updated.srs_data.correct_streak == 4


class TestLapse:
    @pytest.mark.parametrize("quality", [0, 1, 2])
    def test_lapse_resets_progress(self, make_card, now, quality):
        card = make_card(
            "c1", interval=30, repetitions=4, ease_factor=2.0, total_reviews=6, correct_streak=4
        )
        updated, result = calculate_next_review(card, quality, now=now)
        state = updated.srs_data

        assert result.new_interval == 1
        assert result.previous_interval == 30
        assert result.was_correct is False
        assert state.repetitions == 0
        assert state.correct_streak == 0
        assert state.ease_factor == pytest.approx(1.8)
        assert state.next_review_date == now + timedelta(days=1)

    def test_lapse_ease_floor(self, make_card, now):
        card = make_card("c1", interval=4, repetitions=2, ease_factor=1.4)
        updated, _ = calculate_next_review(card, 0, now=now)
        assert updated.srs_data.ease_factor == 1.3

    def test_lapse_on_new_card(self, new_card, now):
        updated, result = calculate_next_review(new_card, 1, now=now)

        assert result.new_interval == 1
        assert updated.srs_data.is_new is False
        assert updated.srs_data.ease_factor == pytest.approx(2.3)


class TestEaseBounds:
    def test_repeated_perfect_never_exceeds_max(self, new_card, now):
        card = new_card
        for day in range(12):
            card, _ = calculate_next_review(card, 5, now=now + timedelta(days=day))
            assert card.srs_data.ease_factor <= 2.5

    def test_repeated_failure_never_drops_below_min(self, new_card, now):
        card = new_card
        for day in range(12):
            card, _ = calculate_next_review(card, 0, now=now + timedelta(days=day))
            assert card.srs_data.ease_factor >= 1.3
        assert card.srs_data.ease_factor == 1.3

    def test_repeated_hard_floor(self, make_card, now):
        card = make_card("c1", interval=6, repetitions=2, ease_factor=1.35)
        updated, _ = calculate_next_review(card, 3, now=now)
        assert updated.srs_data.ease_factor == 1.3


class TestIntervalClamp:
    def test_clamped_to_maximum(self, make_card, now):
        settings = SchedulerSettings(maximum_interval=30)
        card = make_card("c1", interval=20, repetitions=2, ease_factor=2.5)

        updated, result = calculate_next_review(card, 4, settings=settings, now=now)

        assert result.new_interval == 30
        assert updated.srs_data.next_review_date == now + timedelta(days=30)

    def test_clamped_to_minimum(self, new_card, now):
        settings = SchedulerSettings(minimum_interval=3)
        _, result = calculate_next_review(new_card, 4, settings=settings, now=now)
        assert result.new_interval == 3

    def test_default_maximum(self, make_card, now):
        card = make_card("c1", interval=30000, repetitions=9, ease_factor=2.5)
        _, result = calculate_next_review(card, 5, now=now)
        assert result.new_interval == 36500


class TestInputValidation:
    @pytest.mark.parametrize("quality", [-1, 6, 100, 3.0, 4.5, True, "4", None])
    def test_rejects_invalid_quality(self, new_card, now, quality):
        with pytest.raises(InvalidQualityRatingError) as exc_info:
            calculate_next_review(new_card, quality, now=now)
        assert exc_info.value.quality == quality

    def test_invalid_quality_is_value_error(self):
        with pytest.raises(ValueError):
            validate_quality(9)

    def test_accepts_review_quality_enum(self, new_card, now):
        _, result = calculate_next_review(new_card, ReviewQuality.PERFECT, now=now)

        assert result.quality == 5
        assert type(result.quality) is int

    def test_rejects_corrupt_state(self, now):
        corrupt = CardScheduleState(
            interval=-3,
            repetitions=1,
            ease_factor=2.5,
            next_review_date=now,
            is_new=False,
            total_reviews=2,
            correct_streak=1,
            average_quality=4.0,
        )
        card = Card(id="bad", front="f", back="b", srs_data=corrupt)

        with pytest.raises(CorruptScheduleStateError) as exc_info:
            calculate_next_review(card, 4, now=now)

        assert exc_info.value.card_id == "bad"
        assert "negative interval" in exc_info.value.reason


class TestPurity:
    def test_input_card_untouched(self, make_card, now):
        card = make_card("c1", interval=6, repetitions=2)
        before = card.srs_data

        calculate_next_review(card, 0, now=now)

        assert card.srs_data is before
        assert card.srs_data.interval == 6

    def test_same_inputs_same_outputs(self, make_card, now):
        card = make_card("c1", interval=6, repetitions=2, ease_factor=2.1)
        assert calculate_next_review(card, 4, now=now) == calculate_next_review(card, 4, now=now)

    def test_defaults_now_to_current_time(self, new_card):
        updated, result = calculate_next_review(new_card, 4)

        assert result.review_date.tzinfo is not None
        assert updated.srs_data.next_review_date == result.review_date + timedelta(days=1)


@pytest.mark.parametrize(
    "value, expected",
    [(0.5, 1), (2.5, 3), (5.2, 5), (4.8, 5), (0.8, 1), (7.0, 7)],
)
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected
