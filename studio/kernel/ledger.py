"""
AI Builder Studio Kernel — Version History Ledger

A bounded, most-recent-first list of code snapshots. Entries are ordered by
insertion (prepend), never by timestamp, so two snapshots taken within the
same clock tick still have a well-defined head.

History is a convenience feature: write failures are logged, not raised.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from studio.kernel.store import KeyValueStore, StoreKey, remove_quietly, set_quietly
from studio.models.project import VersionEntry

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 50

_entries_adapter = TypeAdapter(list[VersionEntry])


def _now_ms() -> int:
    return int(time.time() * 1000)


class VersionLedger:
    """Append-only (bounded) code history persisted under StoreKey.HISTORY."""

    def __init__(
        self,
        store: KeyValueStore,
        capacity: int = DEFAULT_CAPACITY,
        clock: Callable[[], int] = _now_ms,
    ):
        self._store = store
        self.capacity = capacity
        self._clock = clock
        self._entries: list[VersionEntry] = self._read()

    def _read(self) -> list[VersionEntry]:
        raw = self._store.get(StoreKey.HISTORY)
        if not raw:
            return []
        try:
            entries = _entries_adapter.validate_json(raw)
        except PydanticValidationError as e:
            logger.warning("Discarding malformed version history: %s", e.error_count())
            return []
        return entries[: self.capacity]

    def get_history(self) -> list[VersionEntry]:
        """Current history, most recent first."""
        return self._entries

    @property
    def head(self) -> VersionEntry | None:
        return self._entries[0] if self._entries else None

    def add_to_history(self, code: str) -> list[VersionEntry]:
        """
        Prepend a snapshot of code and persist.

        No-op (returns the current list object unchanged, nothing persisted)
        when code is blank or equals the current head's code.

        Args:
            code: Code document to snapshot

        Returns:
            The history after the call, most recent first
        """
        if not code or not code.strip():
            return self._entries
        if self._entries and self._entries[0].code == code:
            return self._entries

        entry = VersionEntry(code=code, timestamp=self._clock())
        self._entries = [entry, *self._entries][: self.capacity]
        set_quietly(self._store, StoreKey.HISTORY, _entries_adapter.dump_json(self._entries).decode("utf-8"))
        return self._entries

    def clear_history(self) -> None:
        """Erase the persisted ledger entirely."""
        self._entries = []
        remove_quietly(self._store, StoreKey.HISTORY)
