"""Exception hierarchy shared by every layer."""


class LingoError(Exception):
    """Base class for all flipped-lingo errors."""


class SchedulerError(LingoError):
    """Raised by the spaced-repetition core."""


class InvalidQualityRatingError(SchedulerError, ValueError):
    """A review quality outside the 0-5 rating scale."""

    def __init__(self, quality: object):
        self.quality = quality
        super().__init__(f"Quality rating must be an integer from 0 to 5, got {quality!r}")


class CorruptScheduleStateError(SchedulerError):
    """A stored schedule state violates its invariants."""

    def __init__(self, card_id: str | None, reason: str):
        self.card_id = card_id
        self.reason = reason
        super().__init__(f"Corrupt schedule state for card {card_id!r}: {reason}")


class DeckNotFoundError(LingoError):
    def __init__(self, deck_id: str):
        self.deck_id = deck_id
        super().__init__(f"Deck not found: {deck_id}")


class BackupFormatError(LingoError):
    """A backup payload that cannot be parsed."""


class CardNotInSessionError(LingoError):
    def __init__(self, card_id: str):
        self.card_id = card_id
        super().__init__(f"Card {card_id!r} is not part of this study session")
