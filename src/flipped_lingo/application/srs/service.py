"""
Study Service — Application layer orchestrator.

Coordinates loading a deck from the repository, running a study session
through the scheduler, and writing the updated cards back.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from flipped_lingo.domain.constants import DEFAULT_SESSION_SIZE, DEFAULT_TARGET_MINUTES
from flipped_lingo.domain.errors import CardNotInSessionError
from flipped_lingo.domain.srs.models import (
    DEFAULT_SETTINGS,
    Card,
    DeckStats,
    ReviewResult,
    SchedulerSettings,
)
from flipped_lingo.domain.srs.ports import CardRepository

from .scheduler import calculate_next_review, current_time, initialize_card
from .selector import Shuffler, get_cards_for_review, get_optimal_study_session
from .stats_calculator import StatsCalculator

logger = logging.getLogger(__name__)


@dataclass
class StudySession:
    """A running study session and its review log."""

    deck_id: str
    cards: list[Card]
    started_at: datetime
    reviewed: list[ReviewResult] = field(default_factory=list)
    correct_count: int = 0
    incorrect_count: int = 0

    @property
    def is_complete(self) -> bool:
        reviewed_ids = {r.card_id for r in self.reviewed}
        return all(card.id in reviewed_ids for card in self.cards)

    @property
    def remaining(self) -> list[Card]:
        reviewed_ids = {r.card_id for r in self.reviewed}
        return [card for card in self.cards if card.id not in reviewed_ids]

    def next_card(self) -> Card | None:
        remaining = self.remaining
        return remaining[0] if remaining else None

    def record(self, result: ReviewResult) -> None:
        self.reviewed.append(result)
        if result.was_correct:
            self.correct_count += 1
        else:
            self.incorrect_count += 1


@dataclass(frozen=True)
class DeckOverview:
    """What a deck tile shows: stats plus today's due/new counts."""

    deck_id: str
    stats: DeckStats
    due_new: int
    due_reviews: int


class StudyService:
    """
    Application service for running study sessions against a deck.

    Depends on the CardRepository abstraction, not a concrete store.
    """

    def __init__(
        self,
        repo: CardRepository,
        settings: SchedulerSettings = DEFAULT_SETTINGS,
        calculator: StatsCalculator | None = None,
        rng: Shuffler | None = None,
        session_size: int = DEFAULT_SESSION_SIZE,
    ):
        """
        Args:
            repo: The repository (port) for loading and saving cards.
            settings: Scheduler settings used for every call.
            calculator: Optional custom stats calculator.
            rng: Optional shuffle source for session order.
            session_size: Card count new cards are topped up to.
        """
        self._repo = repo
        self._settings = settings
        self._calc = calculator or StatsCalculator()
        self._rng = rng
        self._session_size = session_size

    async def start_session(
        self,
        deck_id: str,
        target_minutes: int = DEFAULT_TARGET_MINUTES,
        now: datetime | None = None,
    ) -> StudySession:
        now = now or current_time()
        cards = [initialize_card(card, now) for card in await self._repo.load_cards(deck_id)]

        session_cards = get_optimal_study_session(
            cards,
            target_minutes=target_minutes,
            settings=self._settings,
            now=now,
            rng=self._rng,
            session_size=self._session_size,
        )
        logger.info(f"Started session on {deck_id}: {len(session_cards)} cards")
        return StudySession(deck_id=deck_id, cards=session_cards, started_at=now)

    def review(
        self,
        session: StudySession,
        card_id: str,
        quality: int,
        time_spent: int = 0,
        now: datetime | None = None,
    ) -> ReviewResult:
        """
        Review one session card and record the result.

        Raises:
            CardNotInSessionError: card_id is not in the session.
            InvalidQualityRatingError: quality is not an integer in 0-5.
        """
        for index, card in enumerate(session.cards):
            if card.id == card_id:
                break
        else:
            raise CardNotInSessionError(card_id)

        updated_card, result = calculate_next_review(card, quality, self._settings, now)
        result = result.with_time_spent(time_spent)

        session.cards[index] = updated_card
        session.record(result)
        return result

    async def finish_session(self, session: StudySession) -> DeckStats:
        """
        Merge the session's cards back into the stored deck and save it.

        Returns:
            Stats over the cards that were in the session.
        """
        studied = {card.id: card for card in session.cards}
        stored = await self._repo.load_cards(session.deck_id)
        merged = [studied.get(card.id, card) for card in stored]
        await self._repo.save_cards(session.deck_id, merged)

        logger.info(
            f"Finished session on {session.deck_id}: "
            f"{session.correct_count} correct, {session.incorrect_count} incorrect"
        )
        return self._calc.calculate(session.cards)

    async def review_card(
        self,
        deck_id: str,
        card_id: str,
        quality: int,
        time_spent: int = 0,
        now: datetime | None = None,
    ) -> ReviewResult:
        """
        Review a single stored card outside a session and save the deck.

        Raises:
            CardNotInSessionError: card_id is not in the deck.
        """
        cards = await self._repo.load_cards(deck_id)
        session = StudySession(
            deck_id=deck_id, cards=list(cards), started_at=now or current_time()
        )
        result = self.review(session, card_id, quality, time_spent, now)
        await self._repo.save_cards(deck_id, session.cards)
        return result

    async def deck_overview(self, deck_id: str, now: datetime | None = None) -> DeckOverview:
        now = now or current_time()
        cards = [initialize_card(card, now) for card in await self._repo.load_cards(deck_id)]
        due = get_cards_for_review(cards, self._settings, now)

        return DeckOverview(
            deck_id=deck_id,
            stats=self._calc.calculate(cards, now),
            due_new=len(due.new_cards),
            due_reviews=len(due.review_cards),
        )
