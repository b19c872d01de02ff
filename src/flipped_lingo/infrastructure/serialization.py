"""
Wire schemas for cards, decks and SRS backups.

Field names on the wire are camelCase (cardId, srsData, easeFactor, ...) so
decks and backups stay compatible with the browser app's storage format.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from flipped_lingo.domain.errors import BackupFormatError
from flipped_lingo.domain.srs.models import Card, CardScheduleState

logger = logging.getLogger(__name__)


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SrsDataModel(WireModel):
    interval: int
    repetitions: int
    ease_factor: float
    next_review_date: datetime
    last_review_date: datetime | None = None
    quality: int = 0
    is_new: bool
    total_reviews: int
    correct_streak: int
    average_quality: float

    @field_validator("next_review_date", "last_review_date")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        # Naive timestamps are stored as UTC
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def to_domain(self, card_id: str | None = None) -> CardScheduleState:
        """Convert to a domain state. Raises CorruptScheduleStateError on bad data."""
        state = CardScheduleState(
            interval=self.interval,
            repetitions=self.repetitions,
            ease_factor=self.ease_factor,
            next_review_date=self.next_review_date,
            last_review_date=self.last_review_date,
            quality=self.quality,
            is_new=self.is_new,
            total_reviews=self.total_reviews,
            correct_streak=self.correct_streak,
            average_quality=self.average_quality,
        )
        state.check_integrity(card_id)
        return state

    @classmethod
    def from_domain(cls, state: CardScheduleState) -> "SrsDataModel":
        return cls(
            interval=state.interval,
            repetitions=state.repetitions,
            ease_factor=state.ease_factor,
            next_review_date=state.next_review_date,
            last_review_date=state.last_review_date,
            quality=state.quality,
            is_new=state.is_new,
            total_reviews=state.total_reviews,
            correct_streak=state.correct_streak,
            average_quality=state.average_quality,
        )


class CardModel(WireModel):
    id: str
    front: str
    back: str
    difficulty: Literal["easy", "medium", "hard"] | None = None
    srs_data: SrsDataModel | None = None

    def to_domain(self) -> Card:
        return Card(
            id=self.id,
            front=self.front,
            back=self.back,
            difficulty=self.difficulty,
            srs_data=self.srs_data.to_domain(self.id) if self.srs_data else None,
        )

    @classmethod
    def from_domain(cls, card: Card) -> "CardModel":
        return cls(
            id=card.id,
            front=card.front,
            back=card.back,
            difficulty=card.difficulty,
            srs_data=SrsDataModel.from_domain(card.srs_data) if card.srs_data else None,
        )


class DeckFileModel(WireModel):
    id: str
    name: str
    cards: list[CardModel] = Field(default_factory=list)


class BackupEntryModel(WireModel):
    card_id: str
    srs_data: SrsDataModel | None = None


_backup_adapter = TypeAdapter(list[BackupEntryModel])


def export_srs_data(cards: list[Card]) -> str:
    """
    Serialize each card's schedule state as a JSON array of
    {"cardId": ..., "srsData": ...} entries.
    """
    entries = [
        BackupEntryModel(
            card_id=card.id,
            srs_data=SrsDataModel.from_domain(card.srs_data) if card.srs_data else None,
        )
        for card in cards
    ]
    return json.dumps(
        [entry.model_dump(mode="json", by_alias=True) for entry in entries], indent=2
    )


def import_srs_data(cards: list[Card], payload: str) -> list[Card]:
    """
    Restore schedule states from a backup produced by export_srs_data.

    Cards missing from the backup, or backed up without state, keep their
    current state. Entries for unknown card ids are ignored.

    Raises:
        BackupFormatError: payload is not a valid backup.
        CorruptScheduleStateError: a backed-up state violates its invariants.
    """
    try:
        entries = _backup_adapter.validate_json(payload)
    except ValidationError as e:
        raise BackupFormatError(f"Invalid SRS backup: {e}") from e

    states = {
        entry.card_id: entry.srs_data.to_domain(entry.card_id)
        for entry in entries
        if entry.srs_data is not None
    }

    known_ids = {card.id for card in cards}
    unknown = [card_id for card_id in states if card_id not in known_ids]
    if unknown:
        logger.warning(f"Backup has states for {len(unknown)} unknown card(s); ignoring them")

    return [card.with_state(states[card.id]) if card.id in states else card for card in cards]
