"""Tests for backend selection."""

from __future__ import annotations

from types import SimpleNamespace

from studio.services.ai_provider import AnthropicBackend, OpenAIBackend
from studio.services.llm_provider import get_backend
from studio.services.mock_llm import MockLLM


def _config(**overrides):
    values = {
        "USE_MOCK_LLM": False,
        "LLM_PROVIDER": "anthropic",
        "ANTHROPIC_API_KEY": "",
        "OPENAI_API_KEY": "",
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def test_mock_flag_wins():
    assert isinstance(get_backend(_config(USE_MOCK_LLM=True, ANTHROPIC_API_KEY="sk-ant")), MockLLM)


def test_anthropic_with_key():
    assert isinstance(get_backend(_config(ANTHROPIC_API_KEY="sk-ant")), AnthropicBackend)


def test_openai_with_key():
    assert isinstance(get_backend(_config(LLM_PROVIDER="openai", OPENAI_API_KEY="sk-test")), OpenAIBackend)


def test_missing_key_falls_back_to_mock():
    assert isinstance(get_backend(_config(LLM_PROVIDER="openai", ANTHROPIC_API_KEY="sk-ant")), MockLLM)
