from deckforge.db.json_store import JsonStore, open_store

__all__ = [
    "JsonStore",
    "open_store",
]
