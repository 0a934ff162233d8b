import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from deckforge.db.json_store import JsonStore, dict_default, list_default
from deckforge.models.card import Card
from deckforge.parsers.scryfall import ScryfallClient
from deckforge.scrapers.edhrec import EdhrecScraper, commander_url, staples_url
from deckforge.services.card_repository import CardRepository
from deckforge.services.recommendations import RecommendationCache

FIXTURES = Path(__file__).parent / "fixtures"

KINNAN_ID = "0f5d8a4e-kinnan"
ATRAXA_ID = "e8f90a1b-atraxa"


def _record(card_id: str, name: str, **fields: Any) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": card_id,
        "name": name,
        "mana_cost": "",
        "cmc": 0.0,
        "type_line": "",
        "oracle_text": "",
        "colors": [],
        "color_identity": [],
        "rarity": "common",
        "set_name": "Commander Legends",
        "image_uris": {
            "small": f"https://cards.scryfall.io/small/{card_id}.jpg",
            "normal": f"https://cards.scryfall.io/normal/{card_id}.jpg",
            "large": f"https://cards.scryfall.io/large/{card_id}.jpg",
        },
    }
    record.update(fields)
    return record


CARD_RECORDS: list[dict[str, Any]] = [
    _record(
        KINNAN_ID,
        "Kinnan, Bonder Prodigy",
        mana_cost="{G}{U}",
        cmc=2.0,
        type_line="Legendary Creature — Human Druid",
        oracle_text=(
            "Whenever you tap a nonland permanent for mana, add one additional mana "
            "of any type that permanent produced.\n"
            "{5}{G}{U}: Look at the top five cards of your library."
        ),
        colors=["G", "U"],
        color_identity=["G", "U"],
        rarity="mythic",
        set_name="Ikoria: Lair of Behemoths",
    ),
    _record(
        "1b2c3d4e-breeding-pool",
        "Breeding Pool",
        type_line="Land — Forest Island",
        oracle_text="({T}: Add {G} or {U}.)",
        color_identity=["G", "U"],
        rarity="rare",
    ),
    _record(
        "2c3d4e5f-stomping-ground",
        "Stomping Ground",
        type_line="Land — Mountain Forest",
        oracle_text="({T}: Add {R} or {G}.)",
        color_identity=["R", "G"],
        rarity="rare",
    ),
    _record(
        "3d4e5f60-command-tower",
        "Command Tower",
        type_line="Land",
        oracle_text="{T}: Add one mana of any color in your commander's color identity.",
    ),
    _record(
        "4e5f6071-sol-ring",
        "Sol Ring",
        mana_cost="{1}",
        cmc=1.0,
        type_line="Artifact",
        oracle_text="{T}: Add {C}{C}.",
        rarity="uncommon",
    ),
    _record(
        "5f607182-rhystic-study",
        "Rhystic Study",
        mana_cost="{2}{U}",
        cmc=3.0,
        type_line="Enchantment",
        oracle_text=(
            "Whenever an opponent casts a spell, you may draw a card unless "
            "that player pays {1}."
        ),
        colors=["U"],
        color_identity=["U"],
    ),
    _record(
        "60718293-beast-within",
        "Beast Within",
        mana_cost="{2}{G}",
        cmc=3.0,
        type_line="Instant",
        oracle_text=(
            "Destroy target permanent. Its controller creates a 3/3 green Beast creature token."
        ),
        colors=["G"],
        color_identity=["G"],
        rarity="uncommon",
    ),
    _record(
        "718293a4-rampant-growth",
        "Rampant Growth",
        mana_cost="{1}{G}",
        cmc=2.0,
        type_line="Sorcery",
        oracle_text=(
            "Search your library for a basic land card, put that card onto the "
            "battlefield tapped, then shuffle."
        ),
        colors=["G"],
        color_identity=["G"],
    ),
    _record(
        "8293a4b5-blasphemous-act",
        "Blasphemous Act",
        mana_cost="{8}{R}",
        cmc=9.0,
        type_line="Sorcery",
        oracle_text=(
            "This spell costs {1} less to cast for each creature on the battlefield.\n"
            "Blasphemous Act deals 13 damage to each creature."
        ),
        colors=["R"],
        color_identity=["R"],
        rarity="rare",
    ),
    _record(
        "93a4b5c6-cyclonic-rift",
        "Cyclonic Rift",
        mana_cost="{1}{U}",
        cmc=2.0,
        type_line="Instant",
        oracle_text=(
            "Return target nonland permanent you don't control to its owner's hand.\n"
            "Overload {6}{U}"
        ),
        colors=["U"],
        color_identity=["U"],
        rarity="mythic",
    ),
    _record(
        "a4b5c6d7-basalt-monolith",
        "Basalt Monolith",
        mana_cost="{3}",
        cmc=3.0,
        type_line="Artifact",
        oracle_text=(
            "Basalt Monolith doesn't untap during your untap step.\n"
            "{T}: Add {C}{C}{C}.\n"
            "{3}: Untap Basalt Monolith."
        ),
        rarity="uncommon",
    ),
    _record(
        "b5c6d7e8-forest",
        "Forest",
        type_line="Basic Land — Forest",
        oracle_text="({T}: Add {G}.)",
        color_identity=["G"],
    ),
    _record(
        "c6d7e8f9-island",
        "Island",
        type_line="Basic Land — Island",
        oracle_text="({T}: Add {U}.)",
        color_identity=["U"],
    ),
    _record(
        "d7e8f90a-plains",
        "Plains",
        type_line="Basic Land — Plains",
        oracle_text="({T}: Add {W}.)",
        color_identity=["W"],
    ),
    _record(
        ATRAXA_ID,
        "Atraxa, Praetors' Voice",
        mana_cost="{G}{W}{U}{B}",
        cmc=4.0,
        type_line="Legendary Creature — Phyrexian Angel Horror",
        oracle_text=(
            "Flying, vigilance, deathtouch, lifelink\n"
            "At the beginning of your end step, proliferate."
        ),
        colors=["W", "U", "B", "G"],
        color_identity=["W", "U", "B", "G"],
        rarity="mythic",
    ),
]


class FixtureBrowser:
    """
    Browser double serving tile texts from fixtures.

    ``pages`` maps a URL to the tile lists returned by successive loads;
    the last entry repeats once the others are used up.
    """

    def __init__(self, pages: dict[str, list[list[str]]]) -> None:
        self.pages = pages
        self.calls: list[str] = []
        self.closed = False

    def fetch_tiles(self, url: str, selector: str) -> list[str]:
        self.calls.append(url)
        attempts = self.pages.get(url, [])
        if not attempts:
            return []
        if len(attempts) > 1:
            return attempts.pop(0)
        return attempts[0]

    def close(self) -> None:
        self.closed = True


def load_tiles(name: str) -> list[str]:
    tiles: list[str] = json.loads((FIXTURES / name).read_text(encoding="utf-8"))
    return tiles


@pytest.fixture
def card_records() -> list[dict[str, Any]]:
    """Scryfall card objects known to the test repository."""
    return [dict(record) for record in CARD_RECORDS]


@pytest.fixture
def kinnan(card_records: list[dict[str, Any]]) -> Card:
    return Card.from_dict(card_records[0])


@pytest.fixture
def repository(tmp_path: Path, card_records: list[dict[str, Any]]) -> CardRepository:
    """Card repository on a temp folder, preloaded with CARD_RECORDS."""
    store: JsonStore[dict[str, Any]] = JsonStore(tmp_path / "all_cards.json", dict_default)
    repo = CardRepository(store, ScryfallClient())
    repo.insert_many(card_records)
    return repo


@pytest.fixture
def browser() -> FixtureBrowser:
    """Browser double serving the Kinnan and Atraxa pages and the top cards page."""
    return FixtureBrowser(
        {
            commander_url("Kinnan, Bonder Prodigy"): [load_tiles("edhrec_commander.json")],
            commander_url("Atraxa, Praetors' Voice"): [
                load_tiles("edhrec_commander_atraxa.json")
            ],
            staples_url(): [load_tiles("edhrec_top.json")],
        }
    )


@pytest.fixture
def scraper(browser: FixtureBrowser) -> EdhrecScraper:
    return EdhrecScraper(backend_factory=lambda: browser, render_attempts=3)


@pytest.fixture
def recommendation_cache(
    tmp_path: Path,
    repository: CardRepository,
    scraper: EdhrecScraper,
) -> RecommendationCache:
    """Empty EDHREC cache on a temp folder."""
    return RecommendationCache(
        JsonStore(tmp_path / "edhrec_data.json", dict_default),
        JsonStore(tmp_path / "edhrec_staples.json", list_default),
        repository,
        scraper,
    )


@pytest.fixture
def commander_tiles() -> list[str]:
    return load_tiles("edhrec_commander.json")


@pytest.fixture
def make_browser() -> Callable[[dict[str, list[list[str]]]], FixtureBrowser]:
    return FixtureBrowser
