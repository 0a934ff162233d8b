"""
Download the Scryfall oracle card database.

Run this job to replace the local card map with a fresh bulk snapshot.
"""

import logging

from deckforge.services.card_repository import CardRepository

logger = logging.getLogger(__name__)


def run_download(repository: CardRepository | None = None) -> int:
    """
    Download the oracle cards export and ingest it.

    Returns:
        Number of cards in the refreshed card map
    """
    repository = repository or CardRepository.open()
    logger.info("Downloading Scryfall oracle cards...")

    try:
        count = repository.refresh_from_bulk()
    except Exception as e:
        logger.error("Failed to download card database: %s", e)
        raise

    logger.info("Card map now holds %d cards", count)
    return count


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    run_download()


if __name__ == "__main__":
    main()
