from deckforge.parsers.deck_list import parse_deck_line, parse_deck_text, read_deck
from deckforge.parsers.scryfall import ScryfallClient, build_query

__all__ = [
    "ScryfallClient",
    "build_query",
    "parse_deck_line",
    "parse_deck_text",
    "read_deck",
]
