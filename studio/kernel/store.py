"""
AI Builder Studio Kernel — Persistent Store Adapter

A process-wide string key/value namespace. Every stateful feature (code,
ledger, projects, theme, panel layout) reads and writes through one of these
under its own key; structured values are JSON-encoded by the caller.

Reads never fail: a missing backend or a missing key reads as None.
Writes raise StorageFailure when the backend rejects them. Callers on
low-stakes paths use set_quietly(), which logs and carries on.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from studio.config import Settings, settings
from studio.errors import StorageFailure

logger = logging.getLogger(__name__)


class StoreKey:
    """Every key the studio persists. No key is shared in meaning with another."""

    CODE = "ai-builder-studio-code"
    PREVIOUS_CODE = "ai-builder-studio-previous-code"
    INITIAL_PROMPT = "ai-builder-studio-initial-prompt"
    SOURCE_INFO = "ai-builder-studio-source-info"
    THEME = "ai-builder-studio-theme"
    PANEL_WIDTH = "ai-builder-panel-width"
    PROJECTS = "ai-builder-projects"
    HISTORY = "ai-builder-studio-history"


# ---------------------------------------------------------------------------
# Storage protocol
# ---------------------------------------------------------------------------


class KeyValueStore:
    """
    Abstract store interface.
    Implement with a file for real use, or in-memory for tests.
    """

    def get(self, key: str) -> str | None:
        """Read a value. Returns None if absent or no backend is available."""
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        """Write a value. Raises StorageFailure if the backend rejects it."""
        raise NotImplementedError

    def remove(self, key: str) -> None:
        """Remove a key. Removing an absent key is a no-op."""
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """
    In-memory store for testing.

    quota_bytes mimics a browser storage quota: a write that would push the
    total UTF-8 size of all values past it is rejected.
    """

    def __init__(self, quota_bytes: int | None = None) -> None:
        self.data: dict[str, str] = {}
        self.quota_bytes = quota_bytes
        self.fail_writes = False

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageFailure()
        if self.quota_bytes is not None:
            others = sum(len(v.encode("utf-8")) for k, v in self.data.items() if k != key)
            if others + len(value.encode("utf-8")) > self.quota_bytes:
                raise StorageFailure("Storage quota exceeded.")
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class FileStore(KeyValueStore):
    """
    Store backed by a single JSON object on disk.

    With path=None there is no backend at all: reads come back as None and
    writes raise StorageFailure.
    """

    def __init__(self, path: Path | None):
        self.path = path
        self._data: dict[str, str] = {}
        self._load()

    def _load(self) -> None:
        """Load the JSON object from disk. Unreadable files start empty."""
        if self.path is None or not self.path.exists():
            return
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("FileStore: could not read %s, starting empty: %s", self.path, e)
            return
        if isinstance(data, dict):
            self._data = {k: v for k, v in data.items() if isinstance(k, str) and isinstance(v, str)}

    def _save(self, data: dict[str, str]) -> None:
        if self.path is None:
            raise StorageFailure("No persistent storage is available.")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(data, f)
            tmp.chmod(0o600)
            tmp.replace(self.path)
        except OSError as e:
            raise StorageFailure(f"Could not write to storage: {e}") from e

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        updated = {**self._data, key: value}
        self._save(updated)
        self._data = updated

    def remove(self, key: str) -> None:
        if key not in self._data:
            return
        updated = {k: v for k, v in self._data.items() if k != key}
        self._save(updated)
        self._data = updated


# ---------------------------------------------------------------------------
# Helpers for low-stakes paths
# ---------------------------------------------------------------------------


def set_quietly(store: KeyValueStore, key: str, value: str) -> bool:
    """Write a value, logging instead of raising on StorageFailure. Returns success."""
    try:
        store.set(key, value)
        return True
    except StorageFailure as e:
        logger.warning("Could not persist %s: %s", key, e.message)
        return False


def remove_quietly(store: KeyValueStore, key: str) -> bool:
    """Remove a key, logging instead of raising on StorageFailure."""
    try:
        store.remove(key)
        return True
    except StorageFailure as e:
        logger.warning("Could not remove %s: %s", key, e.message)
        return False


def get_store(config: Settings = settings) -> KeyValueStore:
    """File-backed store at STUDIO_STORE_PATH (default ~/.ai-builder-studio/store.json)."""
    path = config.STORE_PATH
    logger.info("Using store file %s", path)
    return FileStore(path)
