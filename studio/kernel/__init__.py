"""
AI Builder Studio Kernel — version and state reconciliation.

Components:
  store       — string key/value persistence (file-backed or in-memory)
  ledger      — bounded most-recent-first code history
  html_import — normalization of imported documents
  diff        — transient comparisons for the diff view
  controller  — session state coordinating all of the above
                (import from studio.kernel.controller)
"""

from studio.kernel.diff import Comparison
from studio.kernel.html_import import normalize_imported_html
from studio.kernel.ledger import VersionLedger
from studio.kernel.store import FileStore, KeyValueStore, MemoryStore, StoreKey, get_store

__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "FileStore",
    "StoreKey",
    "get_store",
    "VersionLedger",
    "normalize_imported_html",
    "Comparison",
]
