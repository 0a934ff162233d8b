"""
Card API endpoints.

Card lookup by ID or exact name, card search, and EDHREC recommendations
for commanders.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from deckforge.api.dependencies import get_recommendation_cache, get_repository
from deckforge.models.card import Card
from deckforge.services.card_repository import CardRepository
from deckforge.services.recommendations import RecommendationCache

router = APIRouter(prefix="/cards", tags=["cards"])


class CardResponse(BaseModel):
    """Response model for a single card."""

    id: str
    name: str
    mana_cost: str = ""
    cmc: float = 0.0
    type_line: str = ""
    oracle_text: str = ""
    colors: list[str] = Field(default_factory=list)
    color_identity: list[str] = Field(default_factory=list)
    rarity: str = ""
    set_name: str = ""
    image_uris: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_card(cls, card: Card) -> "CardResponse":
        return cls(
            id=card.id,
            name=card.name,
            mana_cost=card.mana_cost,
            cmc=card.cmc,
            type_line=card.type_line,
            oracle_text=card.oracle_text,
            colors=list(card.colors),
            color_identity=list(card.color_identity),
            rarity=card.rarity,
            set_name=card.set_name,
            image_uris={
                "small": card.image_uris.small,
                "normal": card.image_uris.normal,
                "large": card.image_uris.large,
            },
        )


class CardListResponse(BaseModel):
    """Response model for a card search."""

    cards: list[CardResponse]
    count: int


class RecommendationResponse(BaseModel):
    """A recommended card with its synergy."""

    card: CardResponse
    synergy: int


class RecommendationListResponse(BaseModel):
    """Response model for commander recommendations."""

    commander: CardResponse
    recommendations: list[RecommendationResponse]
    count: int


@router.get("", response_model=CardListResponse)
def search_cards(
    repository: Annotated[CardRepository, Depends(get_repository)],
    name: Annotated[str | None, Query(description="Case-insensitive name fragment")] = None,
    set_name: Annotated[str | None, Query(alias="set", description="Set filter")] = None,
    offline: bool = False,
) -> CardListResponse:
    """
    Search cards by name and set.

    Searches Scryfall and falls back to the local card map when it is
    unreachable (or when ``offline`` is set).
    """
    params: dict[str, str] = {}
    if name:
        params["name"] = name
    if set_name:
        params["set"] = set_name

    cards = repository.search(params, offline=offline)
    return CardListResponse(cards=[CardResponse.from_card(c) for c in cards], count=len(cards))


@router.get("/named", response_model=CardResponse)
def get_card_by_name(
    repository: Annotated[CardRepository, Depends(get_repository)],
    exact: Annotated[str, Query(min_length=1, description="Exact card or face name")],
    offline: bool = False,
) -> CardResponse:
    """Get a card by its exact name. Returns 404 if no card matches."""
    return CardResponse.from_card(repository.resolve_by_exact_name(exact, offline=offline))


@router.get("/{card_id}", response_model=CardResponse)
def get_card(
    card_id: str,
    repository: Annotated[CardRepository, Depends(get_repository)],
) -> CardResponse:
    """Get a card by Scryfall ID. Returns 404 if Scryfall has no such card."""
    return CardResponse.from_card(repository.resolve_by_id(card_id))


@router.get("/{card_id}/recommendations", response_model=RecommendationListResponse)
def get_recommendations(
    card_id: str,
    cache: Annotated[RecommendationCache, Depends(get_recommendation_cache)],
    min_synergy: Annotated[int, Query(ge=0, le=100)] = 0,
    offline: bool = False,
) -> RecommendationListResponse:
    """
    Get EDHREC recommendations for a commander, best synergy first.

    Scrapes EDHREC on the first request for a commander unless ``offline``
    is set. Returns 400 if the card is not a legendary creature.
    """
    commander = cache.repository.resolve_by_id(card_id, offline=offline)
    ranked = cache.get_synergy_cards(commander, min_synergy, allow_remote=not offline)
    return RecommendationListResponse(
        commander=CardResponse.from_card(commander),
        recommendations=[
            RecommendationResponse(card=CardResponse.from_card(card), synergy=synergy)
            for card, synergy in ranked
        ],
        count=len(ranked),
    )
