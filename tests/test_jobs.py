"""Tests for command line jobs."""

from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import httpx
import pytest
import respx

from deckforge.jobs.download_cards import run_download
from deckforge.jobs.download_images import run_download_images
from deckforge.jobs.refresh_staples import run_refresh
from deckforge.models.failure import NetworkError
from deckforge.services.card_repository import CardRepository
from deckforge.services.recommendations import RecommendationCache

API = "https://api.scryfall.com"


class TestDownloadCards:
    @respx.mock
    def test_replaces_card_map(self, repository: CardRepository) -> None:
        """Bulk download swaps in the full snapshot."""
        respx.get(f"{API}/bulk-data").mock(
            return_value=httpx.Response(
                200,
                json={"data": [{"type": "oracle_cards", "download_uri": "https://data.test/o"}]},
            )
        )
        respx.get("https://data.test/o").mock(
            return_value=httpx.Response(200, json=[{"id": "only", "name": "Only Card"}])
        )

        assert run_download(repository) == 1
        assert repository.all_cards()[0].name == "Only Card"

    @respx.mock
    def test_failure_keeps_existing_cards(self, repository: CardRepository) -> None:
        """A failed download leaves the current card map in place."""
        before = len(repository)
        respx.get(f"{API}/bulk-data").mock(side_effect=httpx.ConnectError("down"))

        with pytest.raises(NetworkError):
            run_download(repository)

        assert len(repository) == before


class TestRefreshStaples:
    def test_rescrapes_and_closes_browser(
        self, recommendation_cache: RecommendationCache, browser: Any
    ) -> None:
        """Refresh scrapes even when staples are stored."""
        recommendation_cache.get_staples()

        count = run_refresh(recommendation_cache)

        assert count == 7
        assert len(browser.calls) == 2
        assert browser.closed

    def test_closes_browser_on_failure(self) -> None:
        """The browser session is closed even if scraping fails."""
        cache = MagicMock()
        cache.get_staples.side_effect = NetworkError("down")

        with pytest.raises(NetworkError):
            run_refresh(cache)

        cache.scraper.close.assert_called_once()


class TestDownloadImages:
    def test_deck_cards_filtered_by_name(
        self, repository: CardRepository, tmp_path: Path
    ) -> None:
        """With a deck file, params filter the deck's cards locally."""
        deck_path = tmp_path / "deck.txt"
        deck_path.write_text("1 Sol Ring\n1 Rhystic Study\n10 Island", encoding="utf-8")

        with patch(
            "deckforge.jobs.download_images.download_card_images", return_value=[]
        ) as download:
            run_download_images(
                tmp_path / "out",
                deck_path=deck_path,
                params={"name": "ring"},
                repository=repository,
            )

        cards = download.call_args.args[0]
        assert [card.name for card in cards] == ["Sol Ring"]

    @respx.mock
    def test_search_cards(self, repository: CardRepository, tmp_path: Path) -> None:
        """Without a deck, the card search picks the cards."""
        respx.get(f"{API}/cards/search").mock(
            return_value=httpx.Response(
                200, json={"data": [{"id": "as-1", "name": "Arcane Signet"}], "has_more": False}
            )
        )

        with patch(
            "deckforge.jobs.download_images.download_card_images", return_value=[]
        ) as download:
            run_download_images(
                tmp_path / "out", "large", params={"name": "signet"}, repository=repository
            )

        cards = download.call_args.args[0]
        assert [card.id for card in cards] == ["as-1"]
        assert download.call_args.args[2] == "large"
