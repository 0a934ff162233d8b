"""
Scryfall API client.

Fetches single cards, runs card searches, downloads the bulk oracle card
export and card images.

Transport failures (DNS, refused connection, timeouts) raise NetworkError;
a definitive 404 raises NotFoundError. Other HTTP error statuses are
reported as NetworkError with the status code in the detail.

API docs: https://scryfall.com/docs/api
"""

import logging
from pathlib import Path
from typing import Any

import httpx

from deckforge.config import settings
from deckforge.models.failure import NetworkError, NotFoundError

logger = logging.getLogger(__name__)

ORACLE_CARDS_TYPE = "oracle_cards"

# Search filter keys -> Scryfall query syntax
_QUERY_PREFIXES = {
    "name": "",
    "set": "set:",
}


def build_query(params: dict[str, str]) -> str:
    """
    Turn search filters into a Scryfall query string.

    Example: {"name": "sol ring", "set": "cmr"} -> "sol ring set:cmr"
    Empty values and unknown keys are skipped.
    """
    parts: list[str] = []
    for key, value in params.items():
        prefix = _QUERY_PREFIXES.get(key)
        if prefix is None or not value:
            continue
        parts.append(f"{prefix}{value}")
    return " ".join(parts)


class ScryfallClient:
    """
    Thin synchronous client for the Scryfall REST API.

    Pass an ``httpx.Client`` to reuse a connection pool (or to inject a
    mocked transport in tests).
    """

    def __init__(
        self,
        base_url: str | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = (base_url or settings.scryfall_api_url).rstrip("/")
        self._client = client or httpx.Client(
            headers={"User-Agent": settings.user_agent, "Accept": "application/json"},
            follow_redirects=True,
            timeout=settings.http_timeout,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ScryfallClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _get(self, url: str, params: dict[str, str] | None = None) -> httpx.Response:
        try:
            response = self._client.get(url, params=params)
        except httpx.TransportError as e:
            raise NetworkError(
                f"Could not reach {url}",
                detail=str(e),
                suggestion="Check your connection or retry in offline mode.",
            ) from e

        if response.status_code == 404:
            raise NotFoundError(f"Nothing found at {url}", detail=response.text[:200])

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NetworkError(
                f"Request to {url} failed",
                detail=f"HTTP {e.response.status_code}",
            ) from e
        return response

    def fetch_card(self, card_id: str) -> dict[str, Any]:
        """
        Fetch a single card object by Scryfall ID.

        Raises:
            NotFoundError: If no card has this ID
            NetworkError: If the request cannot be completed
        """
        logger.info("Fetching card %s", card_id)
        response = self._get(f"{self.base_url}/cards/{card_id}")
        data: dict[str, Any] = response.json()
        return data

    def search_cards(self, params: dict[str, str], max_pages: int = 1) -> list[dict[str, Any]]:
        """
        Run a card search.

        Args:
            params: Search filters (``name``, ``set``)
            max_pages: Result pages to follow (Scryfall pages hold 175 cards)

        Returns:
            Card objects in Scryfall order

        Raises:
            NotFoundError: If the search matches no cards
            NetworkError: If the request cannot be completed
        """
        query = build_query(params)
        logger.info("Searching cards with query %r", query)

        cards: list[dict[str, Any]] = []
        url = f"{self.base_url}/cards/search"
        request_params: dict[str, str] | None = {"q": query}

        for _ in range(max_pages):
            data = self._get(url, params=request_params).json()
            cards.extend(data.get("data", []))
            if not data.get("has_more"):
                break
            url = data["next_page"]
            request_params = None  # next_page already carries the query

        logger.info("Search returned %d cards", len(cards))
        return cards

    def get_bulk_data_url(self, bulk_type: str = ORACLE_CARDS_TYPE) -> str:
        """
        Find the download URL of a bulk data export.

        Raises:
            NotFoundError: If the export type is not listed
            NetworkError: If the request cannot be completed
        """
        data = self._get(f"{self.base_url}/bulk-data").json()
        for entry in data.get("data", []):
            if entry.get("type") == bulk_type:
                return str(entry["download_uri"])

        raise NotFoundError(f"Could not find {bulk_type} bulk data URL")

    def download_bulk_cards(self, bulk_type: str = ORACLE_CARDS_TYPE) -> list[dict[str, Any]]:
        """
        Download the full card array of a bulk export.

        Note:
            The oracle export is well over 100MB of JSON.
        """
        url = self.get_bulk_data_url(bulk_type)
        logger.info("Downloading %s from %s", bulk_type, url)
        cards: list[dict[str, Any]] = self._get(url).json()
        logger.info("Downloaded %d cards", len(cards))
        return cards

    def download_file(self, url: str, output_path: Path) -> None:
        """
        Stream a remote file (card image) to disk.

        Raises:
            NotFoundError: If the file does not exist
            NetworkError: If the download cannot be completed
        """
        try:
            with self._client.stream("GET", url) as response:
                if response.status_code == 404:
                    raise NotFoundError(f"Nothing found at {url}")
                response.raise_for_status()
                with open(output_path, "wb") as f:
                    for chunk in response.iter_bytes(chunk_size=8192):
                        f.write(chunk)
        except httpx.TransportError as e:
            output_path.unlink(missing_ok=True)
            raise NetworkError(f"Could not download {url}", detail=str(e)) from e
        except httpx.HTTPStatusError as e:
            output_path.unlink(missing_ok=True)
            raise NetworkError(
                f"Download of {url} failed",
                detail=f"HTTP {e.response.status_code}",
            ) from e
