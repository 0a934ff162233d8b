"""
Deck API endpoints.

Generates commander decks and analyzes text deck lists.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from deckforge.api.dependencies import get_recommendation_cache, get_repository
from deckforge.models.deck import Deck
from deckforge.parsers.deck_list import parse_deck_text
from deckforge.services.card_repository import CardRepository
from deckforge.services.deck_builder import generate_commander_deck
from deckforge.services.recommendations import RecommendationCache

router = APIRouter(prefix="/decks", tags=["decks"])


class DeckStatsResponse(BaseModel):
    """Deck statistics, weighted by quantity."""

    card_count: int
    ramp_count: int
    board_wipe_count: int
    card_draw_count: int
    removal_count: int
    land_count: int
    mana_curve: dict[int, int]


class DeckResponse(BaseModel):
    """Response model for a deck."""

    name: str
    text: str
    cards: dict[str, int] = Field(default_factory=dict)
    total_cards: int
    stats: DeckStatsResponse

    @classmethod
    def from_deck(cls, deck: Deck) -> "DeckResponse":
        stats = deck.stats()
        return cls(
            name=deck.name,
            text=deck.to_text(),
            cards=deck.amounts,
            total_cards=deck.total_cards(),
            stats=DeckStatsResponse(
                card_count=stats.card_count,
                ramp_count=stats.ramp_count,
                board_wipe_count=stats.board_wipe_count,
                card_draw_count=stats.card_draw_count,
                removal_count=stats.removal_count,
                land_count=stats.land_count,
                mana_curve=stats.mana_curve,
            ),
        )


class DeckGenerateRequest(BaseModel):
    """Request model for generating a commander deck."""

    commander_id: str = Field(..., description="Scryfall ID of a legendary creature")
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="Category budget overrides",
        examples=[{"land": 36, "ramp": 12}],
    )
    offline: bool = Field(default=False, description="Use only locally cached data")


class DeckAnalyzeRequest(BaseModel):
    """Request model for analyzing a text deck list."""

    name: str = ""
    text: str = Field(
        ...,
        description="Deck list, one '<quantity> <name>' per line",
        examples=["1 Sol Ring\n10 Forest"],
    )
    offline: bool = False


@router.post("/generate", response_model=DeckResponse)
def generate_deck(
    request: DeckGenerateRequest,
    cache: Annotated[RecommendationCache, Depends(get_recommendation_cache)],
) -> DeckResponse:
    """
    Generate a 100-card commander deck.

    Returns 400 if the commander is not a legendary creature.
    """
    commander = cache.repository.resolve_by_id(request.commander_id, offline=request.offline)
    deck = generate_commander_deck(
        commander,
        cache,
        options=request.options,
        allow_remote=not request.offline,
    )
    return DeckResponse.from_deck(deck)


@router.post("/analyze", response_model=DeckResponse)
def analyze_deck(
    request: DeckAnalyzeRequest,
    repository: Annotated[CardRepository, Depends(get_repository)],
) -> DeckResponse:
    """Resolve a text deck list and compute its statistics."""
    deck = parse_deck_text(request.text, repository, name=request.name, offline=request.offline)
    return DeckResponse.from_deck(deck)
