"""
JSON document storage.

Each durable piece of DeckForge state (card map, EDHREC data, staples) is a
single JSON document on disk. A JsonStore owns one document: it is loaded
once, mutated in memory, and flushed back after every write.

The store assumes single-process ownership of its file.
"""

import json
import logging
import os
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any, Generic, TypeVar

from deckforge.models.failure import PersistenceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class JsonStore(Generic[T]):
    """
    A JSON document with explicit load/flush.

    ``lock`` is re-entrant so callers can hold it across a
    read-modify-write sequence that ends in ``flush()``.
    """

    def __init__(self, path: Path, default: Callable[[], T]) -> None:
        self.path = path
        self._default = default
        self.data: T = default()
        self.lock = threading.RLock()

    def exists(self) -> bool:
        """True if the document exists on disk."""
        return self.path.exists()

    def load(self) -> T:
        """
        Read the document from disk.

        A missing file loads as the default value; nothing is written until
        the first flush.

        Raises:
            PersistenceError: If the file cannot be read or is not valid JSON
        """
        with self.lock:
            if not self.path.exists():
                self.data = self._default()
                return self.data

            try:
                with open(self.path, encoding="utf-8") as f:
                    self.data = json.load(f)
            except json.JSONDecodeError as e:
                raise PersistenceError(
                    f"Stored data at {self.path} is corrupted",
                    detail=str(e),
                    suggestion="Delete the file to rebuild it from remote data.",
                ) from e
            except OSError as e:
                raise PersistenceError(f"Failed to read {self.path}", detail=str(e)) from e

            logger.debug("Loaded %s", self.path)
            return self.data

    def flush(self) -> None:
        """
        Write the in-memory document to disk.

        Writes go to a sibling temp file that replaces the target, so a
        crash mid-write leaves the previous document intact.

        Raises:
            PersistenceError: If the file cannot be written
        """
        with self.lock:
            tmp_path = self.path.with_name(self.path.name + ".tmp")
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with open(tmp_path, "w", encoding="utf-8") as f:
                    json.dump(self.data, f, indent=4)
                os.replace(tmp_path, self.path)
            except (OSError, TypeError) as e:
                raise PersistenceError(f"Failed to write {self.path}", detail=str(e)) from e

            logger.debug("Flushed %s", self.path)


def open_store(path: Path, default: Callable[[], T]) -> JsonStore[T]:
    """Create a store for ``path`` and load it."""
    store = JsonStore(path, default)
    store.load()
    return store


def dict_default() -> dict[str, Any]:
    return {}


def list_default() -> list[Any]:
    return []
