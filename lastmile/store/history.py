"""Recent destinations, most recent first."""

import json
import logging

from lastmile.store.kv import KeyValueStore

logger = logging.getLogger(__name__)

HISTORY_KEY = "history"


def insert_history(entries: list[str], destination: str, limit: int = 5) -> list[str]:
    """Insert destination at the front, dropping case-insensitive duplicates.

    Args:
        entries: Current history, most recent first
        destination: Destination to record (its spelling wins)
        limit: Maximum entries kept

    Returns:
        New history list
    """
    folded = destination.lower()
    remaining = [entry for entry in entries if entry.lower() != folded]
    return [destination, *remaining][:limit]


class SearchHistory:
    """Capped search history persisted as a JSON array."""

    def __init__(self, kv: KeyValueStore, limit: int = 5) -> None:
        self._kv = kv
        self._limit = limit

    def entries(self) -> list[str]:
        """Return stored history, most recent first."""
        raw = self._kv.get(HISTORY_KEY)
        if raw is None:
            return []
        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Discarding unreadable search history: {e}")
            return []
        if not isinstance(data, list):
            return []
        return [entry for entry in data if isinstance(entry, str)][: self._limit]

    def record(self, destination: str) -> list[str]:
        """Record a searched destination; blank input is ignored."""
        destination = destination.strip()
        if not destination:
            return self.entries()

        updated = insert_history(self.entries(), destination, self._limit)
        self._kv.set(HISTORY_KEY, json.dumps(updated))
        return updated

    def clear(self) -> None:
        """Remove all history."""
        self._kv.remove(HISTORY_KEY)
