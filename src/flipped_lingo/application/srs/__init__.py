# Application SRS Package
from .scheduler import calculate_next_review, initialize_card
from .selector import get_cards_for_review, get_optimal_study_session
from .service import DeckOverview, StudyService, StudySession
from .stats_calculator import StatsCalculator, calculate_stats

__all__ = [
    "initialize_card",
    "calculate_next_review",
    "get_cards_for_review",
    "get_optimal_study_session",
    "calculate_stats",
    "StatsCalculator",
    "StudyService",
    "StudySession",
    "DeckOverview",
]
