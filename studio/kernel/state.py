"""
AI Builder Studio Kernel — Controller State Types

The loading state is a tagged union: exactly one of Idle, Generating or
Refining. Busy states carry the request id they were issued with, so a late
response can be matched against the request that is still current.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from studio.models.project import VersionEntry

ActiveTab = Literal["preview", "code"]
Theme = Literal["light", "dark"]

MIN_PANEL_WIDTH = 20.0
MAX_PANEL_WIDTH = 80.0


@dataclass(frozen=True)
class Idle:
    kind: Literal["idle"] = "idle"


@dataclass(frozen=True)
class Generating:
    prompt: str
    request_id: int
    kind: Literal["generate"] = "generate"


@dataclass(frozen=True)
class Refining:
    request: str
    request_id: int
    kind: Literal["refine"] = "refine"


LoadingState = Idle | Generating | Refining

IDLE = Idle()


@dataclass(frozen=True)
class ConfirmClear:
    """Clear-all is waiting for confirmation."""


@dataclass(frozen=True)
class ConfirmRestore:
    """Restoring this ledger entry is waiting for confirmation."""

    entry: VersionEntry


PendingConfirmation = ConfirmClear | ConfirmRestore


def clamp_panel_width(width: float) -> float:
    return max(MIN_PANEL_WIDTH, min(MAX_PANEL_WIDTH, width))
