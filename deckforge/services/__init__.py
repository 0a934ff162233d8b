"""
DeckForge services.

Card lookups, EDHREC recommendations, deck generation and image downloads.
"""

from deckforge.services.card_repository import CardRepository
from deckforge.services.deck_builder import DeckBudget, generate_commander_deck
from deckforge.services.images import download_card_images
from deckforge.services.recommendations import RecommendationCache, rank_recommendations

__all__ = [
    "CardRepository",
    "DeckBudget",
    "RecommendationCache",
    "download_card_images",
    "generate_commander_deck",
    "rank_recommendations",
]
