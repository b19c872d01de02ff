"""flipped-lingo: spaced-repetition flashcards for language learners."""

from flipped_lingo.consts import VERSION

__version__ = VERSION
