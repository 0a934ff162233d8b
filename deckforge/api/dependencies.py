"""
Shared service instances for the API.

The card repository and recommendation cache are loaded once per process
from settings.data_dir. Tests override these dependencies with instances
built on temporary folders.
"""

from functools import lru_cache

from deckforge.services.card_repository import CardRepository
from deckforge.services.recommendations import RecommendationCache


@lru_cache(maxsize=1)
def get_repository() -> CardRepository:
    """Card repository loaded from the data folder. Cached after first load."""
    return CardRepository.open()


@lru_cache(maxsize=1)
def get_recommendation_cache() -> RecommendationCache:
    """EDHREC cache sharing the process-wide card repository."""
    return RecommendationCache.open(get_repository())
