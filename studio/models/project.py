"""Persisted project models: source descriptors, saved projects, version entries."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

SourceType = Literal["prompt", "file", "github", "saved"]


class CodeSourceInfo(BaseModel):
    """Where the current code document came from."""

    model_config = ConfigDict(frozen=True)

    type: SourceType
    name: str


class SavedProject(BaseModel):
    """A named, durable bundle of code + prompt + source descriptor."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    generated_code: str = Field(alias="generatedCode")
    initial_prompt: str | None = Field(default=None, alias="initialPrompt")
    code_source_info: CodeSourceInfo | None = Field(default=None, alias="codeSourceInfo")


class VersionEntry(BaseModel):
    """A snapshot in the version history ledger. Timestamp is epoch milliseconds."""

    model_config = ConfigDict(frozen=True)

    code: str
    timestamp: int

    @property
    def created_at(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp / 1000, tz=UTC)
