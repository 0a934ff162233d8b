"""
Deck model.

A Deck is an ordered list of unique cards with quantities. Statistics and
the basic land split are derived on demand; nothing is cached.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path

from deckforge.models.card import COLOR_LETTERS, Card

COLOR_TO_BASIC_LAND = {
    "W": "Plains",
    "U": "Island",
    "B": "Swamp",
    "R": "Mountain",
    "G": "Forest",
}

# Mana value histogram buckets (0..MAX_MANA_VALUE inclusive)
MAX_MANA_VALUE = 10


@dataclass
class DeckStats:
    """
    Statistics of a deck, weighted by quantity.

    Attributes:
        card_count: Total cards including duplicates
        ramp_count: Ramp cards
        board_wipe_count: Board wipes
        card_draw_count: Card draw
        removal_count: Targeted removal
        land_count: Lands of any kind
        mana_curve: Mana value (0-10) -> card count
    """

    card_count: int = 0
    ramp_count: int = 0
    board_wipe_count: int = 0
    card_draw_count: int = 0
    removal_count: int = 0
    land_count: int = 0
    mana_curve: dict[int, int] = field(
        default_factory=lambda: dict.fromkeys(range(MAX_MANA_VALUE + 1), 0)
    )


class Deck:
    """
    An ordered list of unique cards with quantities.

    Cards keep the order in which they were first added. Adding a card that
    is already present only raises its quantity, so every card ID in the
    quantity map has exactly one entry in the card list.
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._cards: list[Card] = []
        self._amounts: dict[str, int] = {}

    def __len__(self) -> int:
        """Number of unique cards."""
        return len(self._cards)

    def __contains__(self, card_id: str) -> bool:
        return card_id in self._amounts

    def add_card(self, card: Card, amount: int = 1) -> None:
        """Add ``amount`` copies of a card."""
        if amount < 1:
            raise ValueError(f"Quantity must be at least 1, got {amount}")
        if card.id not in self._amounts:
            self._cards.append(card)
            self._amounts[card.id] = 0
        self._amounts[card.id] += amount

    def add_singleton(self, card: Card) -> bool:
        """
        Add one copy of a card unless it is already in the deck.

        Returns:
            True if the card was added
        """
        if self.count(card.id) > 0:
            return False
        self.add_card(card, 1)
        return True

    def count(self, card_id: str) -> int:
        """Number of copies of a card in the deck."""
        return self._amounts.get(card_id, 0)

    @property
    def unique_cards(self) -> list[Card]:
        """Unique cards in first-added order."""
        return list(self._cards)

    @property
    def amounts(self) -> dict[str, int]:
        """Card ID -> quantity."""
        return dict(self._amounts)

    def total_cards(self) -> int:
        return sum(self._amounts.values())

    def entries(self) -> list[tuple[Card, int]]:
        """(card, quantity) pairs in deck order."""
        return [(card, self._amounts[card.id]) for card in self._cards]

    # -------------------------------------------------------------------------
    # Derived data
    # -------------------------------------------------------------------------

    def stats(self) -> DeckStats:
        """Compute card counts per category and the mana curve."""
        result = DeckStats()
        for card, amount in self.entries():
            result.card_count += amount
            if card.is_ramp():
                result.ramp_count += amount
            if card.is_board_wipe():
                result.board_wipe_count += amount
            if card.is_card_draw():
                result.card_draw_count += amount
            if card.is_removal():
                result.removal_count += amount
            if card.is_land():
                result.land_count += amount

            bucket = int(card.cmc)
            if bucket <= MAX_MANA_VALUE:
                result.mana_curve[bucket] += amount
        return result

    def pip_counts(self) -> dict[str, int]:
        """Color letter counts over all mana costs, weighted by quantity."""
        totals = dict.fromkeys(COLOR_LETTERS, 0)
        for card, amount in self.entries():
            for color, pips in card.count_color_pips().items():
                totals[color] += pips * amount
        return totals

    def recommend_basic_lands(self, count: int) -> dict[str, int]:
        """
        Split ``count`` basic lands proportionally to the deck's color pips.

        Each basic gets ``pips * count // total_pips``. The rounding
        shortfall goes entirely to the first basic (WUBRG order) that
        already received lands, or to the first color with pips when none
        did.

        Returns:
            Basic land name -> quantity, all five basics present
        """
        result = dict.fromkeys(COLOR_TO_BASIC_LAND.values(), 0)
        if count <= 0:
            return result

        pips = self.pip_counts()
        total_pips = sum(pips.values())
        if total_pips == 0:
            return result

        for color, color_pips in pips.items():
            result[COLOR_TO_BASIC_LAND[color]] = color_pips * count // total_pips

        shortfall = count - sum(result.values())
        if shortfall > 0:
            target = next((land for land, amount in result.items() if amount != 0), None)
            if target is None:
                color = next(c for c in COLOR_LETTERS if pips[c] > 0)
                target = COLOR_TO_BASIC_LAND[color]
            result[target] += shortfall
        return result

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_text(self) -> str:
        """Deck list, one "<quantity> <name>" line per unique card."""
        return "\n".join(f"{amount} {card.name}" for card, amount in self.entries())

    def to_json(self) -> str:
        """Quantity map keyed by card ID, pretty-printed."""
        return json.dumps(self._amounts, indent=4)

    def save(self, path: Path) -> None:
        """Write the text deck list to ``path``."""
        path.write_text(self.to_text(), encoding="utf-8")
