"""
Refresh the EDHREC staples list.

Staples are never refreshed implicitly once stored; run this job to scrape
the EDHREC top cards page again.
"""

import logging

from deckforge.services.card_repository import CardRepository
from deckforge.services.recommendations import RecommendationCache

logger = logging.getLogger(__name__)


def run_refresh(cache: RecommendationCache | None = None) -> int:
    """
    Scrape and store the current staples.

    Returns:
        Number of staples stored
    """
    cache = cache or RecommendationCache.open(CardRepository.open())
    logger.info("Refreshing EDHREC staples...")

    try:
        staples = cache.get_staples(allow_remote=True, refresh=True)
    finally:
        cache.scraper.close()

    logger.info("Stored %d staples", len(staples))
    return len(staples)


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    run_refresh()


if __name__ == "__main__":
    main()
