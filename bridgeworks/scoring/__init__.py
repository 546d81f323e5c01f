"""
Scoring — pure, side-effect-free engines.

    from bridgeworks.scoring import RevenuePredictor, FeatureSuggester, score_note
"""

from .catalog import CatalogStore, RevenueCatalog, SuggestionCatalog
from .notes import NoteScores, score_note
from .revenue import RevenuePredictor
from .suggestions import FeatureSuggester

__all__ = [
    "CatalogStore",
    "RevenueCatalog",
    "SuggestionCatalog",
    "NoteScores",
    "score_note",
    "RevenuePredictor",
    "FeatureSuggester",
]
