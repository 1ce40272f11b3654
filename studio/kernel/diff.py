"""
AI Builder Studio Kernel — Comparison

A comparison is a transient (original, modified) pair handed to a diff
viewer. Producing or discarding one never touches code, ledger, or source
descriptor. Line diffs are delegated to difflib.
"""

from __future__ import annotations

import difflib
from dataclasses import dataclass


@dataclass(frozen=True)
class Comparison:
    """Before/after pair for the diff view."""

    original: str
    modified: str
    original_label: str = "previous"
    modified_label: str = "current"

    @property
    def has_changes(self) -> bool:
        return self.original != self.modified

    def unified_diff(self, context: int = 3, max_lines: int | None = None) -> str:
        """
        Render a unified diff of original -> modified.

        Args:
            context: Lines of context around each hunk
            max_lines: Truncate the rendered diff to this many lines

        Returns:
            Diff text, or "" when the two sides are identical
        """
        lines = list(
            difflib.unified_diff(
                self.original.splitlines(),
                self.modified.splitlines(),
                fromfile=self.original_label,
                tofile=self.modified_label,
                n=context,
                lineterm="",
            )
        )
        if max_lines is not None and len(lines) > max_lines:
            lines = lines[:max_lines] + ["... (diff truncated)"]
        return "\n".join(lines)
