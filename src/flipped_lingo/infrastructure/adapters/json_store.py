"""
JSON Deck Repository — Infrastructure adapter for decks on local disk.

Implements CardRepository with one JSON file per deck:
    <data_dir>/<deck_id>.json  ->  {"id": ..., "name": ..., "cards": [...]}
"""

import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from flipped_lingo.domain.errors import BackupFormatError, DeckNotFoundError
from flipped_lingo.domain.srs.models import Card
from flipped_lingo.domain.srs.ports import CardRepository
from flipped_lingo.infrastructure.serialization import CardModel, DeckFileModel

logger = logging.getLogger(__name__)


class JsonDeckRepository(CardRepository):
    """
    Stores each deck, including every card's schedule state, as a JSON file.

    Writes go through a temp file and os.replace so a crash never leaves a
    half-written deck behind.
    """

    def __init__(self, data_dir: Path):
        self.data_dir = data_dir

    def deck_path(self, deck_id: str) -> Path:
        if not deck_id or Path(deck_id).name != deck_id:
            raise DeckNotFoundError(deck_id)
        return self.data_dir / f"{deck_id}.json"

    async def load_cards(self, deck_id: str) -> list[Card]:
        deck = self._read_deck(deck_id)
        return [card.to_domain() for card in deck.cards]

    async def save_cards(self, deck_id: str, cards: list[Card]) -> None:
        deck = self._read_deck(deck_id)
        deck.cards = [CardModel.from_domain(card) for card in cards]
        self._write_deck(deck)
        logger.debug(f"Saved {len(cards)} cards to deck {deck_id}")

    async def create_deck(self, deck_id: str, name: str, cards: list[Card] | None = None) -> None:
        deck = DeckFileModel(
            id=deck_id,
            name=name,
            cards=[CardModel.from_domain(card) for card in cards or []],
        )
        self._write_deck(deck)
        logger.info(f"Created deck {deck_id} ({len(deck.cards)} cards)")

    def list_decks(self) -> list[str]:
        if not self.data_dir.is_dir():
            return []
        return sorted(p.stem for p in self.data_dir.glob("*.json"))

    def _read_deck(self, deck_id: str) -> DeckFileModel:
        path = self.deck_path(deck_id)
        if not path.exists():
            raise DeckNotFoundError(deck_id)

        try:
            return DeckFileModel.model_validate_json(path.read_text(encoding="utf-8"))
        except (ValidationError, UnicodeDecodeError) as e:
            raise BackupFormatError(f"Deck file {path} is malformed: {e}") from e

    def _write_deck(self, deck: DeckFileModel) -> None:
        path = self.deck_path(deck.id)
        path.parent.mkdir(parents=True, exist_ok=True)

        content = deck.model_dump_json(by_alias=True, indent=2)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{deck.id}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
