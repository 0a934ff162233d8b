from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="DECKFORGE_")

    app_name: str = "DeckForge"
    debug: bool = False

    # All durable state (card map, EDHREC data, staples, images) lives here
    data_dir: Path = Path.home() / ".deckforge"

    scryfall_api_url: str = "https://api.scryfall.com"
    edhrec_url: str = "https://edhrec.com"
    user_agent: str = "DeckForge/1.0"
    http_timeout: float = 30.0

    # Headless browser scraping
    browser_headless: bool = True
    render_attempts: int = 5

    image_download_workers: int = 8


settings = Settings()


# =============================================================================
# DURABLE STATE FILE NAMES
# =============================================================================

ALL_CARDS_FILE = "all_cards.json"
EDHREC_DATA_FILE = "edhrec_data.json"
EDHREC_STAPLES_FILE = "edhrec_staples.json"
IMAGES_FOLDER = "images"
IMAGE_FILE_FORMAT = "jpg"
