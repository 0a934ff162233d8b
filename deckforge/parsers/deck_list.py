"""
Parser for plain text deck lists.

Format:
    <quantity> <card name>

Example:
    1 Atraxa, Praetors' Voice
    1 Sol Ring
    10 Forest

Names are resolved to cards by exact name, so two-faced cards may be listed
by their full name or by one face.
"""

import re
from pathlib import Path
from typing import TYPE_CHECKING

from deckforge.models.deck import Deck
from deckforge.models.failure import PersistenceError, ValidationError

if TYPE_CHECKING:
    from deckforge.services.card_repository import CardRepository

# Pattern: "4 Lightning Bolt"
# Groups: (quantity, card_name)
DECK_LINE_PATTERN = re.compile(r"^(\d+)\s+(.+)$")


def parse_deck_line(line: str) -> tuple[int, str]:
    """
    Split a deck line into quantity and name.

    Raises:
        ValidationError: If the line is not "<quantity> <name>" or the
            quantity is zero
    """
    match = DECK_LINE_PATTERN.match(line.strip())
    if not match:
        raise ValidationError(f"Malformed deck line: {line!r}")
    quantity, name = match.groups()
    if int(quantity) < 1:
        raise ValidationError(f"Quantity must be at least 1: {line!r}")
    return int(quantity), name.strip()


def parse_deck_text(
    text: str,
    repository: "CardRepository",
    name: str = "",
    offline: bool = False,
) -> Deck:
    """
    Parse a text deck list into a Deck.

    Blank lines are skipped. Repeated names add up.

    Raises:
        ValidationError: On a malformed line
        NotFoundError: If a name does not resolve to a card
        NetworkError: If a name is not cached and Scryfall is unreachable
    """
    deck = Deck(name)
    for line in text.splitlines():
        if not line.strip():
            continue
        quantity, card_name = parse_deck_line(line)
        card = repository.resolve_by_exact_name(card_name, offline=offline)
        deck.add_card(card, quantity)
    return deck


def read_deck(path: Path, repository: "CardRepository", offline: bool = False) -> Deck:
    """
    Read a deck list file; the deck is named after the file.

    Raises:
        PersistenceError: If the file cannot be read
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise PersistenceError(f"Failed to read deck {path}", detail=str(e)) from e
    return parse_deck_text(text, repository, name=path.stem, offline=offline)
