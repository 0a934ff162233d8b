"""
Card model.

A Card is the oracle record returned by Scryfall, reduced to the fields
DeckForge uses. Cards are frozen: once fetched they never change, and the
card repository never overwrites a stored record.

Category predicates (land, ramp, board wipe, ...) are deterministic
substring rules over the type line and oracle text.
"""

from dataclasses import dataclass, field
from typing import Any

COLOR_LETTERS = ("W", "U", "B", "R", "G")

DUAL_FACE_SEPARATOR = " // "

# Oracle text fragments that identify card roles
RAMP_ADD_MANA = "Add "
RAMP_FETCH_BASIC = (
    "your library for a basic land card, put that card onto the battlefield tapped"
)
BOARD_WIPE_PHRASES = ("Destroy all ", " damage to each creature", "All creatures get -")
CARD_DRAW_PHRASE = "draw "
REMOVAL_PHRASE = "destroy target"


@dataclass(frozen=True, slots=True)
class ImageUris:
    """URLs for the card images at each quality."""

    small: str = ""
    normal: str = ""
    large: str = ""

    def for_quality(self, quality: str) -> str:
        """Return the URL for a quality name (small, normal, large)."""
        if quality not in ("small", "normal", "large"):
            raise ValueError(f"Unknown image quality: {quality}")
        url: str = getattr(self, quality)
        return url


@dataclass(frozen=True, slots=True)
class Card:
    """
    Oracle card record from Scryfall.

    Attributes:
        id: Scryfall card ID (primary key everywhere in DeckForge)
        name: Canonical name, "Front // Back" for two-faced cards
        mana_cost: Raw mana cost, e.g. "{2}{G}{G}"
        cmc: Mana value
        type_line: Full type line (e.g., "Legendary Creature - Elf Druid")
        oracle_text: Rules text, may span several lines
        colors: Color letters of the card
        color_identity: Color letters used for commander legality
        rarity: common, uncommon, rare, mythic
        image_uris: Image URLs (small/normal/large)
    """

    id: str
    name: str
    mana_cost: str = ""
    cmc: float = 0.0
    type_line: str = ""
    oracle_text: str = ""
    colors: tuple[str, ...] = ()
    color_identity: tuple[str, ...] = ()
    rarity: str = ""
    image_uris: ImageUris = field(default_factory=ImageUris)
    oracle_id: str = ""
    set: str = ""
    set_name: str = ""
    keywords: tuple[str, ...] = ()
    power: str = ""
    toughness: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Card":
        """
        Build a Card from a Scryfall card object.

        Unknown fields are ignored; missing fields take defaults.
        """
        images = data.get("image_uris") or {}
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            mana_cost=data.get("mana_cost") or "",
            cmc=float(data.get("cmc") or 0.0),
            type_line=data.get("type_line") or "",
            oracle_text=data.get("oracle_text") or "",
            colors=tuple(data.get("colors") or ()),
            color_identity=tuple(data.get("color_identity") or ()),
            rarity=data.get("rarity") or "",
            image_uris=ImageUris(
                small=images.get("small", ""),
                normal=images.get("normal", ""),
                large=images.get("large", ""),
            ),
            oracle_id=data.get("oracle_id") or "",
            set=data.get("set") or "",
            set_name=data.get("set_name") or "",
            keywords=tuple(data.get("keywords") or ()),
            power=data.get("power") or "",
            toughness=data.get("toughness") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize in the Scryfall field layout."""
        return {
            "id": self.id,
            "oracle_id": self.oracle_id,
            "name": self.name,
            "image_uris": {
                "small": self.image_uris.small,
                "normal": self.image_uris.normal,
                "large": self.image_uris.large,
            },
            "mana_cost": self.mana_cost,
            "cmc": self.cmc,
            "type_line": self.type_line,
            "oracle_text": self.oracle_text,
            "colors": list(self.colors),
            "color_identity": list(self.color_identity),
            "keywords": list(self.keywords),
            "set": self.set,
            "set_name": self.set_name,
            "rarity": self.rarity,
            "power": self.power,
            "toughness": self.toughness,
        }

    # -------------------------------------------------------------------------
    # Type line predicates
    # -------------------------------------------------------------------------

    def is_creature(self) -> bool:
        return "Creature" in self.type_line

    def is_legendary(self) -> bool:
        return "Legendary" in self.type_line

    def is_land(self) -> bool:
        return "Land" in self.type_line

    def is_basic_land(self) -> bool:
        return "Basic Land" in self.type_line

    def is_commander_candidate(self) -> bool:
        """True if the card can lead a commander deck (legendary creature)."""
        return self.is_creature() and self.is_legendary()

    # -------------------------------------------------------------------------
    # Oracle text predicates
    # -------------------------------------------------------------------------

    def is_ramp(self) -> bool:
        """Mana producers that are not lands, or basic land fetchers."""
        if not self.is_land() and RAMP_ADD_MANA in self.oracle_text:
            return True
        return RAMP_FETCH_BASIC in self.oracle_text

    def is_board_wipe(self) -> bool:
        return any(phrase in self.oracle_text for phrase in BOARD_WIPE_PHRASES)

    def is_card_draw(self) -> bool:
        return CARD_DRAW_PHRASE in self.oracle_text.lower()

    def is_removal(self) -> bool:
        return REMOVAL_PHRASE in self.oracle_text.lower()

    # -------------------------------------------------------------------------
    # Identity and naming
    # -------------------------------------------------------------------------

    def matches_color_identity(self, colors: list[str] | tuple[str, ...]) -> bool:
        """
        True if every color in ``colors`` is part of this card's identity.

        Called on the commander with a candidate's identity: the candidate
        is admissible when its identity is a subset of the commander's.
        """
        return set(colors).issubset(self.color_identity)

    def count_color_pips(self) -> dict[str, int]:
        """
        Count color letters in the mana cost.

        This is a flat character count: a hybrid symbol such as {G/U}
        counts once for G and once for U.
        """
        return {color: self.mana_cost.count(color) for color in COLOR_LETTERS}

    def has_name(self, name: str) -> bool:
        """
        True if the card is called ``name``.

        Two-faced cards also match either face name, except when both faces
        carry the same name.
        """
        if self.name == name:
            return True
        faces = self.name.split(DUAL_FACE_SEPARATOR)
        if len(faces) == 2 and faces[0] == faces[1]:
            return False
        return name in faces

    def matches(self, params: dict[str, str]) -> bool:
        """
        True if the card matches every filter in ``params``.

        Supported keys: ``name`` (case-insensitive substring) and ``set``
        (substring of the set name). Other keys are ignored.
        """
        for key, value in params.items():
            if key == "name" and value.lower() not in self.name.lower():
                return False
            if key == "set" and value not in self.set_name:
                return False
        return True
