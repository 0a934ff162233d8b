"""
Card image downloads.

Images are cached under ``<data_dir>/images`` as ``<card id>_<quality>.jpg``
and copied to the requested output folder. Downloads run on a bounded
thread pool; every task runs to completion and the first failure is raised
afterwards.
"""

import logging
import shutil
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from deckforge.config import IMAGE_FILE_FORMAT, IMAGES_FOLDER, settings
from deckforge.models.card import Card
from deckforge.parsers.scryfall import ScryfallClient

logger = logging.getLogger(__name__)

IMAGE_QUALITIES = ("small", "normal", "large")


def image_file_name(card: Card, quality: str) -> str:
    return f"{card.id}_{quality}.{IMAGE_FILE_FORMAT}"


def download_card_image(
    card: Card,
    output_dir: Path,
    quality: str,
    client: ScryfallClient,
    images_dir: Path,
) -> Path | None:
    """
    Download one card image (or reuse the cached copy) into ``output_dir``.

    Returns:
        Path of the copied image, or None if the card has no image
    """
    url = card.image_uris.for_quality(quality)
    file_name = image_file_name(card, quality)
    cached_path = images_dir / file_name

    if not cached_path.exists():
        if not url:
            logger.warning("Can't download %s image for card %s: no url", quality, card.id)
            return None
        logger.info("Image of quality %s for card %s not cached, downloading it", quality, card.id)
        client.download_file(url, cached_path)

    result_path = output_dir / file_name
    shutil.copyfile(cached_path, result_path)
    logger.info("Saved image for %s", card.id)
    return result_path


def download_card_images(
    cards: Iterable[Card],
    output_dir: Path,
    quality: str = "normal",
    client: ScryfallClient | None = None,
    data_dir: Path | None = None,
    max_workers: int | None = None,
) -> list[Path]:
    """
    Download images for many cards concurrently.

    Args:
        cards: Cards to download (duplicates are downloaded once)
        output_dir: Folder the images are copied to
        quality: small, normal or large
        client: Scryfall client shared by the workers
        data_dir: DeckForge data folder holding the image cache
        max_workers: Concurrent downloads (defaults to settings)

    Returns:
        Paths of the saved images

    Raises:
        ValueError: If the quality is unknown
        NetworkError/NotFoundError: First download failure, after all tasks ran
    """
    if quality not in IMAGE_QUALITIES:
        raise ValueError(f"Unknown image quality: {quality}")

    images_dir = (data_dir or settings.data_dir) / IMAGES_FOLDER
    images_dir.mkdir(parents=True, exist_ok=True)
    output_dir.mkdir(parents=True, exist_ok=True)

    unique = list({card.id: card for card in cards}.values())
    client = client or ScryfallClient()
    saved: list[Path] = []
    first_error: Exception | None = None

    workers = max_workers or settings.image_download_workers
    with ThreadPoolExecutor(max_workers=workers) as executor:
        future_map = {
            executor.submit(
                download_card_image, card, output_dir, quality, client, images_dir
            ): card
            for card in unique
        }
        for future in as_completed(future_map):
            try:
                path = future.result()
            except Exception as e:
                logger.error("Failed to download image for %s: %s", future_map[future].id, e)
                if first_error is None:
                    first_error = e
                continue
            if path is not None:
                saved.append(path)

    if first_error is not None:
        raise first_error
    return saved
