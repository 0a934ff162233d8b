from deckforge.models.card import COLOR_LETTERS, Card, ImageUris
from deckforge.models.deck import COLOR_TO_BASIC_LAND, Deck, DeckStats
from deckforge.models.failure import (
    DeckForgeError,
    FailureDetail,
    FailureKind,
    NetworkError,
    NotFoundError,
    PersistenceError,
    ScrapeError,
    ValidationError,
)

__all__ = [
    "COLOR_LETTERS",
    "COLOR_TO_BASIC_LAND",
    "Card",
    "Deck",
    "DeckForgeError",
    "DeckStats",
    "FailureDetail",
    "FailureKind",
    "ImageUris",
    "NetworkError",
    "NotFoundError",
    "PersistenceError",
    "ScrapeError",
    "ValidationError",
]
