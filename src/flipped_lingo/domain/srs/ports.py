"""
Ports (interfaces) for card persistence.

These define the contract that infrastructure adapters must implement.
The scheduler holds no memory between calls, so the host supplies the full
prior-state collection on every call and persists what comes back.
"""

from abc import ABC, abstractmethod

from .models import Card


class CardRepository(ABC):
    """
    Port for loading and storing a deck's cards with their schedule state.

    Implementations:
        - JsonDeckRepository: One JSON file per deck on local disk.
    """

    @abstractmethod
    async def load_cards(self, deck_id: str) -> list[Card]:
        """
        Load every card of a deck, in stored order.

        Raises:
            DeckNotFoundError: If the deck does not exist.
        """
        pass

    @abstractmethod
    async def save_cards(self, deck_id: str, cards: list[Card]) -> None:
        """
        Replace the stored cards of a deck.

        Raises:
            DeckNotFoundError: If the deck does not exist.
        """
        pass
