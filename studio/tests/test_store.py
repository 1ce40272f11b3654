"""Tests for the key/value store adapters."""

from __future__ import annotations

import json

import pytest

from studio.errors import StorageFailure
from studio.config import Settings
from studio.kernel.store import FileStore, MemoryStore, get_store, remove_quietly, set_quietly


def test_memory_store_round_trip():
    store = MemoryStore()
    assert store.get("k") is None

    store.set("k", "v")
    assert store.get("k") == "v"

    store.remove("k")
    assert store.get("k") is None
    store.remove("k")  # absent key is a no-op


def test_memory_store_quota_rejects_oversized_write():
    store = MemoryStore(quota_bytes=10)
    store.set("a", "12345")

    with pytest.raises(StorageFailure):
        store.set("b", "123456")

    assert store.get("b") is None
    # Overwriting a key only counts its new size
    store.set("a", "1234567890")
    assert store.get("a") == "1234567890"


def test_memory_store_fail_writes():
    store = MemoryStore()
    store.fail_writes = True

    with pytest.raises(StorageFailure) as exc_info:
        store.set("k", "v")
    assert "Storage might be full" in exc_info.value.message


def test_quiet_helpers_swallow_storage_failure():
    store = MemoryStore()
    store.fail_writes = True

    assert set_quietly(store, "k", "v") is False
    assert store.get("k") is None

    store.fail_writes = False
    assert set_quietly(store, "k", "v") is True
    assert remove_quietly(store, "k") is True
    assert store.get("k") is None


def test_file_store_persists_across_instances(tmp_path):
    path = tmp_path / "nested" / "store.json"
    store = FileStore(path)
    store.set("ai-builder-studio-code", "<html></html>")
    store.set("ai-builder-studio-theme", "light")
    store.remove("ai-builder-studio-theme")

    reopened = FileStore(path)
    assert reopened.get("ai-builder-studio-code") == "<html></html>"
    assert reopened.get("ai-builder-studio-theme") is None
    assert json.loads(path.read_text()) == {"ai-builder-studio-code": "<html></html>"}


def test_file_store_unreadable_file_starts_empty(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{not json")

    store = FileStore(path)

    assert store.get("anything") is None
    store.set("k", "v")
    assert FileStore(path).get("k") == "v"


def test_file_store_without_backend():
    """No backend: reads are absent, writes fail."""
    store = FileStore(None)

    assert store.get("k") is None
    with pytest.raises(StorageFailure):
        store.set("k", "v")
    assert set_quietly(store, "k", "v") is False


def test_get_store_uses_configured_path(tmp_path, monkeypatch):
    path = tmp_path / "studio" / "store.json"
    monkeypatch.setenv("STUDIO_STORE_PATH", str(path))

    store = get_store(Settings())
    store.set("ai-builder-studio-theme", "light")

    assert isinstance(store, FileStore)
    assert json.loads(path.read_text()) == {"ai-builder-studio-theme": "light"}
