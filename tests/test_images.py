from pathlib import Path

import httpx
import pytest
import respx

from deckforge.models.card import Card, ImageUris
from deckforge.models.failure import NotFoundError
from deckforge.parsers.scryfall import ScryfallClient
from deckforge.services.images import download_card_images, image_file_name


def image_card(card_id: str) -> Card:
    return Card(
        id=card_id,
        name=card_id.title(),
        image_uris=ImageUris(
            small=f"https://cards.test/small/{card_id}.jpg",
            normal=f"https://cards.test/normal/{card_id}.jpg",
            large=f"https://cards.test/large/{card_id}.jpg",
        ),
    )


class TestDownloadCardImages:
    @respx.mock
    def test_downloads_and_caches(self, tmp_path: Path) -> None:
        route = respx.get(url__regex=r"https://cards\.test/normal/.*").mock(
            return_value=httpx.Response(200, content=b"jpeg")
        )
        cards = [image_card("sol"), image_card("rift"), image_card("sol")]
        out = tmp_path / "out"

        paths = download_card_images(cards, out, client=ScryfallClient(), data_dir=tmp_path)

        assert sorted(p.name for p in paths) == ["rift_normal.jpg", "sol_normal.jpg"]
        assert (tmp_path / "images" / "sol_normal.jpg").read_bytes() == b"jpeg"
        assert route.call_count == 2

    @respx.mock
    def test_cached_images_are_not_downloaded_again(self, tmp_path: Path) -> None:
        route = respx.get(url__regex=r"https://cards\.test/large/.*").mock(
            return_value=httpx.Response(200, content=b"jpeg")
        )
        card = image_card("sol")
        client = ScryfallClient()

        download_card_images([card], tmp_path / "a", "large", client=client, data_dir=tmp_path)
        paths = download_card_images(
            [card], tmp_path / "b", "large", client=client, data_dir=tmp_path
        )

        assert paths == [tmp_path / "b" / image_file_name(card, "large")]
        assert route.call_count == 1

    def test_card_without_image_is_skipped(self, tmp_path: Path) -> None:
        paths = download_card_images(
            [Card(id="token", name="Token")], tmp_path / "out", data_dir=tmp_path
        )

        assert paths == []

    @respx.mock
    def test_failure_raised_after_other_downloads(self, tmp_path: Path) -> None:
        respx.get("https://cards.test/normal/gone.jpg").mock(return_value=httpx.Response(404))
        respx.get("https://cards.test/normal/sol.jpg").mock(
            return_value=httpx.Response(200, content=b"jpeg")
        )
        out = tmp_path / "out"

        with pytest.raises(NotFoundError):
            download_card_images(
                [image_card("gone"), image_card("sol")],
                out,
                client=ScryfallClient(),
                data_dir=tmp_path,
                max_workers=1,
            )

        assert (out / "sol_normal.jpg").exists()
        assert not (tmp_path / "images" / "gone_normal.jpg").exists()

    def test_unknown_quality(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            download_card_images([image_card("sol")], tmp_path, "huge", data_dir=tmp_path)
