"""
Card repository.

Durable map of Scryfall card ID -> Card, backed by a JsonStore. Lookups hit
the local map first and go to Scryfall on a miss. Records fetched remotely
are stored first-write-wins: an ID already present is never overwritten, so
cards stay stable across sessions. The only exception is a bulk snapshot
ingest, which replaces the whole map.
"""

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from deckforge.config import ALL_CARDS_FILE, settings
from deckforge.db.json_store import JsonStore, dict_default, open_store
from deckforge.models.card import Card
from deckforge.models.failure import NetworkError, NotFoundError
from deckforge.parsers.scryfall import ScryfallClient

logger = logging.getLogger(__name__)


class CardRepository:
    """
    Card lookups with online fetch and offline fallback.

    Args:
        store: Store holding the ID -> card object document
        client: Scryfall client used on cache misses
    """

    def __init__(self, store: JsonStore[dict[str, Any]], client: ScryfallClient) -> None:
        self.store = store
        self.client = client
        self._cards: dict[str, Card] = {
            card_id: Card.from_dict(data) for card_id, data in store.data.items()
        }
        logger.info("Card repository loaded with %d cards", len(self._cards))

    @classmethod
    def open(
        cls,
        data_dir: Path | None = None,
        client: ScryfallClient | None = None,
    ) -> "CardRepository":
        """Load the repository from ``data_dir`` (defaults to settings.data_dir)."""
        path = (data_dir or settings.data_dir) / ALL_CARDS_FILE
        return cls(open_store(path, dict_default), client or ScryfallClient())

    def __len__(self) -> int:
        return len(self._cards)

    def __contains__(self, card_id: str) -> bool:
        return card_id in self._cards

    def get(self, card_id: str) -> Card | None:
        """Cached card by ID, without going online."""
        return self._cards.get(card_id)

    def all_cards(self) -> list[Card]:
        """Snapshot of every cached card, safe to iterate while others insert."""
        with self.store.lock:
            return list(self._cards.values())

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def _insert(self, card: Card) -> Card:
        """Store a card unless its ID is taken; return the stored record."""
        existing = self._cards.get(card.id)
        if existing is not None:
            return existing
        self._cards[card.id] = card
        self.store.data[card.id] = card.to_dict()
        logger.info("Added card %s (%s) to the card map", card.id, card.name)
        return card

    def insert_many(self, records: Iterable[dict[str, Any]]) -> list[Card]:
        """
        Store remote card objects first-write-wins and flush once.

        Records without an ID are skipped.

        Returns:
            The stored version of every record that had an ID
        """
        stored: list[Card] = []
        with self.store.lock:
            before = len(self._cards)
            for record in records:
                card = Card.from_dict(record)
                if not card.id:
                    logger.warning("Fetched card %r without an id, not storing it", card.name)
                    continue
                stored.append(self._insert(card))
            if len(self._cards) != before:
                self.store.flush()
        return stored

    def ingest_bulk_snapshot(self, records: Iterable[dict[str, Any]]) -> int:
        """
        Replace the whole card map with a full snapshot.

        The new map is built aside and swapped in only once complete.

        Returns:
            Number of cards in the new map
        """
        cards: dict[str, Card] = {}
        for record in records:
            card = Card.from_dict(record)
            if card.id:
                cards[card.id] = card

        with self.store.lock:
            self._cards = cards
            self.store.data = {card_id: card.to_dict() for card_id, card in cards.items()}
            self.store.flush()

        logger.info("Ingested bulk snapshot with %d cards", len(cards))
        return len(cards)

    def refresh_from_bulk(self) -> int:
        """Download the oracle cards export and ingest it."""
        return self.ingest_bulk_snapshot(self.client.download_bulk_cards())

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def resolve_by_id(self, card_id: str, offline: bool = False) -> Card:
        """
        Get a card by Scryfall ID, fetching it on a cache miss.

        Args:
            card_id: Scryfall card ID
            offline: When True, a cache miss is final

        Raises:
            NotFoundError: If Scryfall has no card with this ID, or the card
                is not cached and ``offline`` is True
            NetworkError: If the card is not cached and Scryfall is unreachable
        """
        card = self._cards.get(card_id)
        if card is not None:
            return card
        if offline:
            raise NotFoundError(f"No cached card with id {card_id}")

        logger.info("Card %s not cached, fetching it", card_id)
        record = self.client.fetch_card(card_id)
        stored = self.insert_many([record])
        if not stored:
            raise NotFoundError(f"Scryfall returned no usable record for {card_id}")
        return stored[0]

    def find_cached_by_name(self, name: str) -> Card | None:
        """First cached card whose name (or face name) equals ``name``."""
        for card in self.all_cards():
            if card.has_name(name):
                return card
        return None

    def resolve_by_exact_name(self, name: str, offline: bool = False) -> Card:
        """
        Get a card by exact name, searching Scryfall on a cache miss.

        Args:
            name: Full card name or the name of one face
            offline: When True, a cache miss is final

        Raises:
            NotFoundError: If no card carries this exact name
            NetworkError: If the card is not cached and Scryfall is unreachable
        """
        card = self.find_cached_by_name(name)
        if card is not None:
            return card
        if offline:
            raise NotFoundError(f"No cached card named '{name}'")

        logger.info("No cached card named %r, searching for it", name)
        candidates = self.insert_many(self.client.search_cards({"name": name}))
        for candidate in candidates:
            if candidate.has_name(name):
                return candidate

        raise NotFoundError(
            f"No card named '{name}'",
            detail=f"{len(candidates)} search results, none matched exactly",
        )

    def query(self, params: dict[str, str]) -> list[Card]:
        """Cached cards matching every filter (``name``, ``set``)."""
        return [card for card in self.all_cards() if card.matches(params)]

    def search(self, params: dict[str, str], offline: bool = False) -> list[Card]:
        """
        Search cards remotely, falling back to the cache when offline.

        Remote results are stored in the repository. A remote search with no
        matches returns an empty list.
        """
        if offline:
            return self.query(params)

        try:
            records = self.client.search_cards(params)
        except NetworkError:
            logger.warning("Failed to reach Scryfall, looking up cards locally")
            return self.query(params)
        except NotFoundError:
            return []

        return self.insert_many(records)
