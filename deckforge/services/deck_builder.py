"""
Commander deck generation.

Builds a 100-card commander deck around a legendary creature from EDHREC
recommendations and staples. Slots are allocated across budgeted categories
(lands, ramp, board wipes, card draw, removal), every card must fit inside
the commander's color identity, and remaining land slots are filled with
basics proportional to the deck's color pips.

Generation is best-effort: when recommendations and staples run out, the
deck is returned partially filled.
"""

import logging
from dataclasses import dataclass
from typing import Any

from deckforge.models.card import Card
from deckforge.models.deck import Deck
from deckforge.models.failure import ValidationError
from deckforge.services.recommendations import RecommendationCache

logger = logging.getLogger(__name__)

DECK_SIZE = 100
NON_COMMANDER_SLOTS = DECK_SIZE - 1

# Option keys accepted by generate_commander_deck
LAND_COUNT_KEY = "land"
RAMP_COUNT_KEY = "ramp"
BOARD_WIPE_COUNT_KEY = "boardwipes"
CARD_DRAW_COUNT_KEY = "carddraw"
REMOVAL_COUNT_KEY = "removal"


@dataclass
class DeckBudget:
    """Card counts per category for a generated deck."""

    land: int = 33
    ramp: int = 10
    board_wipes: int = 5
    card_draw: int = 10
    removal: int = 8

    @classmethod
    def from_options(cls, options: dict[str, Any] | None = None) -> "DeckBudget":
        """
        Build a budget from a sparse options mapping.

        Keys: land, ramp, boardwipes, carddraw, removal. Missing keys keep
        their defaults.

        Raises:
            ValidationError: On unknown keys, non-integer or negative values
        """
        fields = {
            LAND_COUNT_KEY: "land",
            RAMP_COUNT_KEY: "ramp",
            BOARD_WIPE_COUNT_KEY: "board_wipes",
            CARD_DRAW_COUNT_KEY: "card_draw",
            REMOVAL_COUNT_KEY: "removal",
        }
        options = options or {}

        unknown = set(options) - set(fields)
        if unknown:
            raise ValidationError(
                f"Unknown deck options: {', '.join(sorted(unknown))}",
                suggestion=f"Valid options: {', '.join(fields)}",
            )

        values: dict[str, int] = {}
        for key, value in options.items():
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationError(f"Deck option {key!r} must be an integer, got {value!r}")
            if value < 0:
                raise ValidationError(f"Deck option {key!r} must not be negative, got {value}")
            values[fields[key]] = value
        return cls(**values)


def _admissible(commander: Card, card: Card) -> bool:
    """A card may join the deck if its identity fits the commander's."""
    return commander.matches_color_identity(card.color_identity)


def generate_commander_deck(
    commander: Card,
    recommendations: RecommendationCache,
    options: dict[str, Any] | None = None,
    allow_remote: bool = True,
) -> Deck:
    """
    Generate a commander deck for a legendary creature.

    Strategy:
    1. Add the commander
    2. Fill the land budget from recommended lands, then staple lands
    3. Fill ramp/board wipe/card draw/removal budgets from staples
    4. Fill remaining nonland slots from recommendations by synergy
    5. Fill remaining land slots with basics proportional to color pips

    Args:
        commander: The legendary creature to build around
        recommendations: EDHREC cache (recommendations, staples, card lookups)
        options: Sparse category budget overrides (see DeckBudget.from_options)
        allow_remote: When False, only locally cached data is used

    Returns:
        The generated deck (possibly fewer than 100 cards)

    Raises:
        ValidationError: If the commander is not a legendary creature
        NotFoundError: If a card cannot be resolved
        ScrapeError: If EDHREC pages cannot be scraped
        NetworkError: If remote data is needed and unreachable
    """
    if not commander.is_commander_candidate():
        raise ValidationError(
            f"{commander.name} is not a legendary creature",
            detail=f"Type line: {commander.type_line}",
        )
    budget = DeckBudget.from_options(options)

    logger.info("Generating deck for %s", commander.name)
    deck = Deck(f"Commander deck for {commander.name}")
    deck.add_singleton(commander)

    staples = recommendations.get_staples(allow_remote)
    ranked = recommendations.get_ranked_cards(commander.id, allow_remote)

    # Lands: recommendations first, then staples
    lands_left = budget.land
    for card in [card for card, _ in ranked] + staples:
        if lands_left <= 0:
            break
        if _admissible(commander, card) and card.is_land() and deck.add_singleton(card):
            lands_left -= 1
            logger.debug("Adding %s -- land (%d left)", card.name, lands_left)
    logger.info("Added %d lands", budget.land - lands_left)

    slots_left = NON_COMMANDER_SLOTS - budget.land
    if slots_left <= 0:
        return deck

    # Category budgets from staples; one card may count for several categories
    ramp_left = budget.ramp
    wipes_left = budget.board_wipes
    draw_left = budget.card_draw
    removal_left = budget.removal
    for card in staples:
        if slots_left <= 0:
            break
        if not _admissible(commander, card) or card.id in deck:
            continue

        roles: list[str] = []
        if ramp_left > 0 and card.is_ramp():
            ramp_left -= 1
            roles.append("ramp")
        if wipes_left > 0 and card.is_board_wipe():
            wipes_left -= 1
            roles.append("board wipe")
        if draw_left > 0 and card.is_card_draw():
            draw_left -= 1
            roles.append("card draw")
        if removal_left > 0 and card.is_removal():
            removal_left -= 1
            roles.append("removal")

        if roles:
            deck.add_singleton(card)
            slots_left -= 1
            logger.debug("Adding %s -- %s", card.name, ", ".join(roles))

    # Remaining slots by synergy
    for card, synergy in ranked:
        if slots_left <= 0:
            break
        if _admissible(commander, card) and deck.add_singleton(card):
            slots_left -= 1
            logger.debug("Adding %s as recommendation (synergy: %d)", card.name, synergy)

    # Remaining land slots with basics
    for land_name, amount in deck.recommend_basic_lands(lands_left).items():
        if amount == 0:
            continue
        basic = recommendations.repository.resolve_by_exact_name(
            land_name, offline=not allow_remote
        )
        deck.add_card(basic, amount)
        logger.debug("Adding %d %s", amount, land_name)

    logger.info("Generated %s with %d cards", deck.name, deck.total_cards())
    return deck
