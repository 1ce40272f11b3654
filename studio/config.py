"""
AI Builder Studio configuration — all environment variables in one place.

Read from environment at runtime. Never hardcode secrets.
"""

from __future__ import annotations

import os
from pathlib import Path

_PROVIDER_MODELS: dict[str, tuple[str, str]] = {
    # provider: (generation model, completion model)
    "anthropic": ("claude-sonnet-4-20250514", "claude-3-5-haiku-20241022"),
    "openai": ("gpt-4o", "gpt-4o-mini"),
}


def _flag(name: str) -> bool:
    return os.environ.get(name, "").lower() in ("1", "true", "yes")


class Settings:
    """Application settings from environment variables."""

    # AI Providers
    LLM_PROVIDER: str = os.environ.get("LLM_PROVIDER", "anthropic").lower()
    ANTHROPIC_API_KEY: str = os.environ.get("ANTHROPIC_API_KEY", "")
    OPENAI_API_KEY: str = os.environ.get("OPENAI_API_KEY", "")
    MAX_OUTPUT_TOKENS: int = int(os.environ.get("MAX_OUTPUT_TOKENS", "16000"))
    USE_MOCK_LLM: bool = _flag("USE_MOCK_LLM")

    # Repository host (clone-from-URL)
    GITHUB_API_URL: str = os.environ.get("GITHUB_API_URL", "https://api.github.com")
    GITHUB_HOST: str = os.environ.get("GITHUB_HOST", "github.com")
    GITHUB_TOKEN: str = os.environ.get("GITHUB_TOKEN", "")
    HTTP_TIMEOUT: float = float(os.environ.get("HTTP_TIMEOUT", "30"))

    # Persistence
    HISTORY_LIMIT: int = 50
    AUTOSAVE_DELAY_SECONDS: float = float(os.environ.get("AUTOSAVE_DELAY_SECONDS", "0.5"))

    # Presentation defaults
    DEFAULT_THEME: str = os.environ.get("DEFAULT_THEME", "dark")
    DEFAULT_PANEL_WIDTH: float = 50.0

    @property
    def GENERATION_MODEL(self) -> str:
        model = os.environ.get("GENERATION_MODEL")
        if model:
            return model
        return _PROVIDER_MODELS.get(self.LLM_PROVIDER, _PROVIDER_MODELS["anthropic"])[0]

    @property
    def COMPLETION_MODEL(self) -> str:
        model = os.environ.get("COMPLETION_MODEL")
        if model:
            return model
        return _PROVIDER_MODELS.get(self.LLM_PROVIDER, _PROVIDER_MODELS["anthropic"])[1]

    @property
    def STORE_PATH(self) -> Path:
        path = os.environ.get("STUDIO_STORE_PATH")
        if path:
            return Path(path).expanduser()
        return Path.home() / ".ai-builder-studio" / "store.json"


# Singleton instance
settings = Settings()

if settings.LLM_PROVIDER not in _PROVIDER_MODELS:
    raise RuntimeError(f"LLM_PROVIDER must be one of {sorted(_PROVIDER_MODELS)}, got {settings.LLM_PROVIDER!r}")
