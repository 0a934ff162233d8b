"""
Download card images for a deck list or a card search.

Usage:
    python -m deckforge.jobs.download_images --deck my_deck.txt --out images/
    python -m deckforge.jobs.download_images --name "sol ring" --quality large
"""

import argparse
import logging
from pathlib import Path

from deckforge.models.card import Card
from deckforge.parsers.deck_list import read_deck
from deckforge.services.card_repository import CardRepository
from deckforge.services.images import IMAGE_QUALITIES, download_card_images

logger = logging.getLogger(__name__)


def run_download_images(
    output_dir: Path,
    quality: str = "normal",
    deck_path: Path | None = None,
    params: dict[str, str] | None = None,
    repository: CardRepository | None = None,
) -> list[Path]:
    """
    Download images for the cards of a deck, or for a search result.

    With a deck, ``params`` further filters the deck's cards locally.
    """
    repository = repository or CardRepository.open()
    params = params or {}

    cards: list[Card]
    if deck_path is not None:
        deck = read_deck(deck_path, repository)
        cards = [card for card in deck.unique_cards if card.matches(params)]
    else:
        cards = repository.search(params)

    logger.info("Downloading %s images for %d cards", quality, len(cards))
    return download_card_images(cards, output_dir, quality, client=repository.client)


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    parser = argparse.ArgumentParser(description="Download card images")
    parser.add_argument("--out", type=Path, default=Path("."), help="Output folder")
    parser.add_argument("--quality", choices=IMAGE_QUALITIES, default="normal")
    parser.add_argument("--deck", type=Path, help="Deck list file")
    parser.add_argument("--name", help="Card name filter")
    parser.add_argument("--set", dest="set_name", help="Set filter")
    args = parser.parse_args()

    params: dict[str, str] = {}
    if args.name:
        params["name"] = args.name
    if args.set_name:
        params["set"] = args.set_name

    paths = run_download_images(args.out, args.quality, deck_path=args.deck, params=params)
    logger.info("Saved %d images to %s", len(paths), args.out)


if __name__ == "__main__":
    main()
