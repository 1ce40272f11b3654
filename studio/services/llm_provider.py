"""
LLM provider factory.

Returns MockLLM when USE_MOCK_LLM=true (tests / UX simulation)
or a real backend when the selected provider's API key is available.
"""

from __future__ import annotations

import logging

from studio.config import Settings, settings
from studio.services.ai_provider import AnthropicBackend, GenerationBackend, OpenAIBackend
from studio.services.mock_llm import MockLLM

logger = logging.getLogger(__name__)


def get_backend(config: Settings = settings) -> GenerationBackend:
    """
    Return the configured generation backend.

    - USE_MOCK_LLM=true                         → MockLLM (deterministic, no API calls)
    - LLM_PROVIDER=openai + OPENAI_API_KEY      → OpenAIBackend
    - LLM_PROVIDER=anthropic + ANTHROPIC_API_KEY → AnthropicBackend
    - default                                   → MockLLM (fallback)
    """
    if config.USE_MOCK_LLM:
        return MockLLM()

    if config.LLM_PROVIDER == "openai" and config.OPENAI_API_KEY:
        return OpenAIBackend(api_key=config.OPENAI_API_KEY)

    if config.LLM_PROVIDER == "anthropic" and config.ANTHROPIC_API_KEY:
        return AnthropicBackend(api_key=config.ANTHROPIC_API_KEY)

    # Fallback to mock if no API key configured
    logger.warning("No API key configured for provider %r, using MockLLM", config.LLM_PROVIDER)
    return MockLLM()
