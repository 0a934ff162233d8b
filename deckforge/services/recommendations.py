"""
Recommendation cache.

Durable map of commander card ID -> {candidate card ID: synergy}, plus the
global EDHREC staples list. Both are filled lazily by scraping EDHREC and
are never refreshed implicitly: once a commander (or the staples list) is
stored, it is served from disk. There is no expiry.
"""

import logging
from pathlib import Path
from typing import Any

from deckforge.config import EDHREC_DATA_FILE, EDHREC_STAPLES_FILE, settings
from deckforge.db.json_store import JsonStore, dict_default, list_default, open_store
from deckforge.models.card import Card
from deckforge.models.failure import NotFoundError, ValidationError
from deckforge.scrapers.edhrec import EdhrecScraper
from deckforge.services.card_repository import CardRepository

logger = logging.getLogger(__name__)


def rank_recommendations(recommendations: dict[str, int]) -> list[tuple[str, int]]:
    """
    Order a synergy map by score, highest first.

    Equal scores are ordered by card ID so the ranking is deterministic.
    """
    return sorted(recommendations.items(), key=lambda item: (-item[1], item[0]))


class RecommendationCache:
    """
    EDHREC data with a local cache.

    Args:
        data_store: Store holding the commander -> synergy map document
        staples_store: Store holding the list of staple card IDs
        repository: Card repository used to resolve scraped names
        scraper: EDHREC scraper used on cache misses
    """

    def __init__(
        self,
        data_store: JsonStore[dict[str, Any]],
        staples_store: JsonStore[list[Any]],
        repository: CardRepository,
        scraper: EdhrecScraper,
    ) -> None:
        self.data_store = data_store
        self.staples_store = staples_store
        self.repository = repository
        self.scraper = scraper

    @classmethod
    def open(
        cls,
        repository: CardRepository,
        scraper: EdhrecScraper | None = None,
        data_dir: Path | None = None,
    ) -> "RecommendationCache":
        """Load both EDHREC documents from ``data_dir`` (defaults to settings.data_dir)."""
        data_dir = data_dir or settings.data_dir
        return cls(
            open_store(data_dir / EDHREC_DATA_FILE, dict_default),
            open_store(data_dir / EDHREC_STAPLES_FILE, list_default),
            repository,
            scraper or EdhrecScraper(),
        )

    def has_recommendations(self, commander_id: str) -> bool:
        with self.data_store.lock:
            return commander_id in self.data_store.data

    def get_recommendations(self, commander_id: str, allow_remote: bool = True) -> dict[str, int]:
        """
        Get the synergy map for a commander.

        Cached entries are returned without any network access. On a miss the
        commander's EDHREC page is scraped, every recommended name resolved
        to a card, and the result stored before it is returned.

        Args:
            commander_id: Scryfall ID of the commander
            allow_remote: When False, only the local cache is consulted

        Returns:
            Candidate card ID -> synergy (0-100)

        Raises:
            NotFoundError: If not cached and ``allow_remote`` is False, or a
                scraped name cannot be resolved
            ScrapeError: If the page never rendered or cannot be parsed
            NetworkError: If EDHREC or Scryfall cannot be reached
        """
        with self.data_store.lock:
            cached = self.data_store.data.get(commander_id)
            if cached is not None:
                return dict(cached)

        if not allow_remote:
            raise NotFoundError(
                f"No local recommendations for {commander_id}",
                suggestion="Retry with remote access enabled to scrape them.",
            )

        commander = self.repository.resolve_by_id(commander_id)
        logger.info("Searching the best cards for %s", commander.name)

        result: dict[str, int] = {}
        for name, synergy in self.scraper.scrape_commander(commander.name):
            card = self.repository.resolve_by_exact_name(name)
            result[card.id] = synergy

        # Held across the flush so concurrent scrapes cannot interleave writes
        with self.data_store.lock:
            self.data_store.data[commander_id] = result
            self.data_store.flush()

        logger.info("Card stats for %s loaded (%d cards)", commander.name, len(result))
        return dict(result)

    def get_ranked_cards(
        self,
        commander_id: str,
        allow_remote: bool = True,
    ) -> list[tuple[Card, int]]:
        """
        Recommended cards for a commander, best synergy first.

        With ``allow_remote`` False, every card must already be in the card map.
        """
        recommendations = self.get_recommendations(commander_id, allow_remote)
        return [
            (self.repository.resolve_by_id(card_id, offline=not allow_remote), synergy)
            for card_id, synergy in rank_recommendations(recommendations)
        ]

    def get_synergy_cards(
        self,
        commander: Card,
        min_synergy: int = 0,
        allow_remote: bool = True,
    ) -> list[tuple[Card, int]]:
        """
        Recommended cards with at least ``min_synergy``, best first.

        Raises:
            ValidationError: If the card is not a legendary creature
        """
        if not commander.is_commander_candidate():
            raise ValidationError(
                f"Can't get recommendations for {commander.name}",
                detail="Only legendary creatures have commander recommendations",
            )
        return [
            (card, synergy)
            for card, synergy in self.get_ranked_cards(commander.id, allow_remote)
            if synergy >= min_synergy
        ]

    def get_staples(self, allow_remote: bool = True, refresh: bool = False) -> list[Card]:
        """
        Get the EDHREC staples, scraping them only when none are stored.

        Args:
            allow_remote: When False, only the local staples are used
            refresh: Scrape again even if staples are stored

        Raises:
            NotFoundError: If no staples are stored and remote access is off,
                or a stored staple is missing from the card map
            ScrapeError: If the page never rendered
            NetworkError: If EDHREC cannot be reached
        """
        if self.staples_store.exists() and not refresh:
            with self.staples_store.lock:
                staple_ids = list(self.staples_store.data)
            return [
                self.repository.resolve_by_id(card_id, offline=not allow_remote)
                for card_id in staple_ids
            ]

        if not allow_remote:
            raise NotFoundError(
                "No local EDHREC staples",
                suggestion="Retry with remote access enabled to scrape them.",
            )

        staples: list[Card] = []
        for name in self.scraper.scrape_staples():
            try:
                card = self.repository.resolve_by_exact_name(name)
            except NotFoundError:
                logger.warning("Skipping staple %r: no card with that name", name)
                continue
            if card.id not in {staple.id for staple in staples}:
                staples.append(card)

        with self.staples_store.lock:
            self.staples_store.data = [card.id for card in staples]
            self.staples_store.flush()

        logger.info("Stored %d EDHREC staples", len(staples))
        return staples
