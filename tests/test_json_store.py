import json
from pathlib import Path

import pytest

from deckforge.db.json_store import JsonStore, dict_default, list_default, open_store
from deckforge.models.failure import FailureKind, PersistenceError


class TestLoad:
    def test_missing_file_loads_default_without_writing(self, tmp_path: Path) -> None:
        path = tmp_path / "cards.json"

        store = open_store(path, dict_default)

        assert store.data == {}
        assert not store.exists()
        assert not path.exists()

    def test_reads_existing_document(self, tmp_path: Path) -> None:
        path = tmp_path / "staples.json"
        path.write_text(json.dumps(["a", "b"]), encoding="utf-8")

        store = open_store(path, list_default)

        assert store.data == ["a", "b"]

    def test_corrupted_file_raises_persistence_error(self, tmp_path: Path) -> None:
        path = tmp_path / "cards.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(PersistenceError) as exc_info:
            open_store(path, dict_default)

        assert exc_info.value.kind == FailureKind.PERSISTENCE_ERROR
        assert "corrupted" in exc_info.value.message


class TestFlush:
    def test_flush_then_load_restores_data(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "data.json"
        store: JsonStore[dict[str, int]] = JsonStore(path, dict_default)
        store.data["commander"] = 42

        store.flush()

        assert open_store(path, dict_default).data == {"commander": 42}

    def test_flush_leaves_no_temp_file(self, tmp_path: Path) -> None:
        store: JsonStore[list[str]] = JsonStore(tmp_path / "staples.json", list_default)
        store.data.append("id")

        store.flush()

        assert [p.name for p in tmp_path.iterdir()] == ["staples.json"]

    def test_unserializable_data_raises_persistence_error(self, tmp_path: Path) -> None:
        path = tmp_path / "data.json"
        path.write_text("{}", encoding="utf-8")
        store: JsonStore[dict[str, object]] = open_store(path, dict_default)
        store.data["bad"] = object()

        with pytest.raises(PersistenceError):
            store.flush()

        # Previous document is untouched
        assert json.loads(path.read_text(encoding="utf-8")) == {}
