"""
EDHREC scraper.

Extracts commander recommendations (card name + synergy percentage) and the
global staples list from EDHREC pages.

EDHREC renders its card tiles with JavaScript, so pages are loaded through a
headless browser. The browser sits behind the BrowserBackend protocol; the
Playwright backend is used by default and tests plug in a fixture-backed
double.

Note: Web scraping is inherently fragile. Tile text layout may change.
"""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Protocol

from playwright.sync_api import Browser, Playwright, sync_playwright
from playwright.sync_api import Error as PlaywrightError

from deckforge.config import settings
from deckforge.models.failure import NetworkError, ScrapeError

logger = logging.getLogger(__name__)

CARD_SELECTOR = 'div[class^="Card_container__"]'

# Characters dropped from commander names when building page URLs
DISALLOWED_URL_CHARS = (",", "'")

# Line offsets inside a card tile's text block
TILE_NAME_LINE = 3
TILE_SYNERGY_LINE = 5


class BrowserBackend(Protocol):
    """A browser session that can render a page and return tile texts."""

    def fetch_tiles(self, url: str, selector: str) -> list[str]:
        """Navigate to ``url`` and return the text of every ``selector`` match."""
        ...

    def close(self) -> None: ...


class PlaywrightBackend:
    """
    Headless Chromium through Playwright's sync API.

    The sync API only works on the thread that started it, while callers
    (API worker threads, jobs) may come from any thread. Every browser call
    therefore runs on one worker thread owned by the backend.
    """

    def __init__(self, headless: bool | None = None) -> None:
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="playwright")
        headless = settings.browser_headless if headless is None else headless
        try:
            self._playwright, self._browser = self._executor.submit(
                self._launch, headless
            ).result()
        except PlaywrightError as e:
            self._executor.shutdown(wait=False)
            raise NetworkError("Failed to start the browser", detail=str(e)) from e
        logger.info("Connected to browser")

    @staticmethod
    def _launch(headless: bool) -> tuple[Playwright, Browser]:
        playwright = sync_playwright().start()
        browser = playwright.chromium.launch(
            headless=headless,
            args=["--blink-settings=imagesEnabled=false", "--no-sandbox"],
        )
        return playwright, browser

    def fetch_tiles(self, url: str, selector: str) -> list[str]:
        return self._executor.submit(self._fetch_tiles, url, selector).result()

    def _fetch_tiles(self, url: str, selector: str) -> list[str]:
        page = self._browser.new_page()
        try:
            page.goto(url, wait_until="load")
            logger.info("Page rendered: %s", url)
            return [element.inner_text() for element in page.query_selector_all(selector)]
        except PlaywrightError as e:
            raise NetworkError(f"Failed to load {url}", detail=str(e)) from e
        finally:
            page.close()

    def close(self) -> None:
        try:
            self._executor.submit(self._shutdown).result()
        finally:
            self._executor.shutdown()

    def _shutdown(self) -> None:
        self._browser.close()
        self._playwright.stop()


def commander_url(card_name: str, base_url: str | None = None) -> str:
    """
    Build the EDHREC commander page URL for a card name.

    Example: "Atraxa, Praetors' Voice" -> ".../commanders/atraxa-praetors-voice"
    """
    slug = card_name.lower()
    for char in DISALLOWED_URL_CHARS:
        slug = slug.replace(char, "")
    slug = slug.replace(" ", "-")
    return f"{(base_url or settings.edhrec_url).rstrip('/')}/commanders/{slug}"


def staples_url(base_url: str | None = None) -> str:
    """EDHREC top cards page URL."""
    return f"{(base_url or settings.edhrec_url).rstrip('/')}/top"


def extract_name_and_synergy(text: str) -> tuple[str, int]:
    """
    Parse a recommendation tile's text block.

    The card name sits on line 3 and the synergy on line 5, e.g. "42% synergy".

    Raises:
        ScrapeError: If the tile does not have the expected layout
    """
    lines = text.split("\n")
    try:
        name = lines[TILE_NAME_LINE].strip()
        synergy = int(lines[TILE_SYNERGY_LINE].split("%")[0].strip())
    except (IndexError, ValueError) as e:
        raise ScrapeError("Unrecognized card tile layout", detail=repr(text[:200])) from e
    return name, synergy


def extract_name(text: str) -> str | None:
    """Card name of a staples tile, or None if the tile is too short."""
    lines = text.split("\n")
    if len(lines) <= TILE_NAME_LINE:
        return None
    return lines[TILE_NAME_LINE].strip()


class EdhrecScraper:
    """
    Scrapes EDHREC through one shared, lazily started browser session.

    Args:
        backend_factory: Creates the browser session on first use
        render_attempts: Page loads to try before giving up on a page
        base_url: EDHREC root URL
    """

    def __init__(
        self,
        backend_factory: Callable[[], BrowserBackend] = PlaywrightBackend,
        render_attempts: int | None = None,
        base_url: str | None = None,
    ) -> None:
        self._backend_factory = backend_factory
        self.render_attempts = render_attempts or settings.render_attempts
        self.base_url = base_url or settings.edhrec_url
        self._backend: BrowserBackend | None = None
        self._backend_lock = threading.Lock()

    @property
    def backend(self) -> BrowserBackend:
        """The shared browser session, started by the first caller."""
        if self._backend is None:
            with self._backend_lock:
                if self._backend is None:
                    self._backend = self._backend_factory()
        return self._backend

    def close(self) -> None:
        with self._backend_lock:
            if self._backend is not None:
                self._backend.close()
                self._backend = None

    def fetch_tiles(self, url: str) -> list[str]:
        """
        Load ``url`` until it shows more than one card tile.

        Raises:
            ScrapeError: If the page never rendered its tiles
            NetworkError: If the page cannot be loaded
        """
        logger.info("Accessing %s...", url)
        for attempt in range(1, self.render_attempts + 1):
            tiles = self.backend.fetch_tiles(url, CARD_SELECTOR)
            if len(tiles) > 1:
                logger.info("Found %d cards", len(tiles))
                return tiles
            logger.debug("Render attempt %d for %s found %d tiles", attempt, url, len(tiles))

        raise ScrapeError(
            f"{url} did not render its card list",
            detail=f"Gave up after {self.render_attempts} attempts",
        )

    def scrape_commander(self, commander_name: str) -> list[tuple[str, int]]:
        """
        Scrape the recommended cards for a commander.

        Returns:
            (card name, synergy) pairs in page order
        """
        tiles = self.fetch_tiles(commander_url(commander_name, self.base_url))
        # First tile is the commander itself
        return [extract_name_and_synergy(text) for text in tiles[1:]]

    def scrape_staples(self) -> list[str]:
        """Scrape the names of the EDHREC top cards, in page order."""
        tiles = self.fetch_tiles(staples_url(self.base_url))
        names: list[str] = []
        for text in tiles:
            name = extract_name(text)
            if name:
                names.append(name)
        return names
