from datetime import datetime, timedelta, timezone

import pytest

from flipped_lingo.domain.srs.models import Card, CardScheduleState

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def reviewed_state(
    interval: int = 1,
    repetitions: int = 1,
    ease_factor: float = 2.5,
    due_in_days: int = 0,
    total_reviews: int = 1,
    correct_streak: int = 1,
    average_quality: float = 4.0,
    last_review_date: datetime | None = None,
) -> CardScheduleState:
    """A schedule state for a card that has been reviewed at least once."""
    return CardScheduleState(
        interval=interval,
        repetitions=repetitions,
        ease_factor=ease_factor,
        next_review_date=NOW + timedelta(days=due_in_days),
        last_review_date=last_review_date or NOW - timedelta(days=interval),
        quality=4,
        is_new=False,
        total_reviews=total_reviews,
        correct_streak=correct_streak,
        average_quality=average_quality,
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_state():
    return reviewed_state


@pytest.fixture
def new_card():
    return Card(id="c-new", front="o gato", back="the cat")


@pytest.fixture
def make_card():
    """Build a card, optionally with a reviewed state (pass state kwargs)."""

    def _make(card_id: str, new: bool = False, **state_kwargs) -> Card:
        card = Card(id=card_id, front=f"front {card_id}", back=f"back {card_id}")
        if new:
            return card.with_state(CardScheduleState.fresh(NOW))
        if state_kwargs:
            return card.with_state(reviewed_state(**state_kwargs))
        return card

    return _make


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config/logs
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture
def data_dir(tmp_path):
    d = tmp_path / "decks"
    d.mkdir()
    return d
