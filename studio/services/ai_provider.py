"""
Generation backends for Anthropic and OpenAI models.

Each backend issues exactly one request per call and normalizes the answer to
a BackendResponse. No retries: a failed attempt is surfaced to the caller as
the SDK raised it.
"""

from __future__ import annotations

from dataclasses import dataclass

import anthropic
import openai


@dataclass
class BackendResponse:
    """
    Normalized model answer.

    candidates is 0 when the backend returned nothing to read at all; text is
    None when a candidate exists but carries no text.
    """

    text: str | None
    stop_reason: str | None
    candidates: int = 1


class GenerationBackend:
    """
    Abstract backend interface.
    Implement with a hosted model for production, or scripted for tests.
    """

    async def complete(
        self,
        prompt: str,
        *,
        model: str,
        max_tokens: int,
        temperature: float,
    ) -> BackendResponse:
        """Send one prompt, return the normalized response."""
        raise NotImplementedError


class AnthropicBackend(GenerationBackend):
    """Claude via the Anthropic Messages API."""

    def __init__(self, api_key: str):
        self.client = anthropic.AsyncAnthropic(api_key=api_key, max_retries=0)

    async def complete(
        self,
        prompt: str,
        *,
        model: str,
        max_tokens: int,
        temperature: float,
    ) -> BackendResponse:
        message = await self.client.messages.create(
            model=model,
            max_tokens=max_tokens,
            temperature=temperature,
            messages=[{"role": "user", "content": prompt}],
        )
        text = "".join(block.text for block in message.content if getattr(block, "type", None) == "text")
        return BackendResponse(text=text or None, stop_reason=message.stop_reason)


class OpenAIBackend(GenerationBackend):
    """GPT via the OpenAI Chat Completions API."""

    def __init__(self, api_key: str):
        self.client = openai.AsyncOpenAI(api_key=api_key, max_retries=0)

    async def complete(
        self,
        prompt: str,
        *,
        model: str,
        max_tokens: int,
        temperature: float,
    ) -> BackendResponse:
        response = await self.client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=max_tokens,
            temperature=temperature,
        )
        if not response.choices:
            return BackendResponse(text=None, stop_reason=None, candidates=0)
        choice = response.choices[0]
        return BackendResponse(
            text=choice.message.content or None,
            stop_reason=choice.finish_reason,
            candidates=len(response.choices),
        )
