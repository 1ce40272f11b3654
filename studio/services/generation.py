"""
Generation client: turns prompts into cleaned HTML documents.

generate() and refine() raise a GenerationFailure subclass on any failure,
after exactly one attempt. complete_at() never raises; a failed completion
is an empty suggestion.
"""

from __future__ import annotations

import logging
import re

import anthropic
import httpx
import openai

from studio.config import settings
from studio.errors import (
    GenerationFailure,
    InvalidCredential,
    NetworkFailure,
    NoCandidates,
    QuotaExceeded,
    RecitationBlocked,
    SafetyBlocked,
    TokenLimitReached,
    UnexpectedStop,
    UnknownGenerationFailure,
)
from studio.services.ai_provider import BackendResponse, GenerationBackend
from studio.services.prompt_builder import (
    build_completion_prompt,
    build_generation_prompt,
    build_refinement_prompt,
)

logger = logging.getLogger(__name__)

GENERATION_TEMPERATURE = 0.2
COMPLETION_TEMPERATURE = 0.1
COMPLETION_MAX_TOKENS = 100

# Normalized stop reasons across providers → failure class (None means success)
_STOP_REASONS: dict[str, type[GenerationFailure] | None] = {
    "end_turn": None,
    "stop_sequence": None,
    "stop": None,
    "refusal": SafetyBlocked,
    "content_filter": SafetyBlocked,
    "safety": SafetyBlocked,
    "recitation": RecitationBlocked,
    "max_tokens": TokenLimitReached,
    "length": TokenLimitReached,
    "model_context_window_exceeded": TokenLimitReached,
}

# SDK exception types → failure class, checked before any message matching
_TYPED_ERRORS: list[tuple[tuple[type[BaseException], ...], type[GenerationFailure]]] = [
    ((anthropic.AuthenticationError, openai.AuthenticationError), InvalidCredential),
    ((anthropic.PermissionDeniedError, openai.PermissionDeniedError), InvalidCredential),
    ((anthropic.RateLimitError, openai.RateLimitError), QuotaExceeded),
    ((anthropic.APIConnectionError, openai.APIConnectionError, httpx.TransportError), NetworkFailure),
]

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*|```\s*$")


def clean_code(text: str) -> str:
    """Strip an enclosing markdown code fence and surrounding whitespace."""
    return _FENCE_RE.sub("", text.strip()).strip()


def check_response(response: BackendResponse) -> str:
    """
    Validate a backend response and return its cleaned text.

    Raises:
        GenerationFailure: no candidates, a non-success stop reason, or empty text
    """
    if response.candidates == 0:
        raise NoCandidates()

    if response.stop_reason is not None:
        reason = response.stop_reason.lower()
        if reason not in _STOP_REASONS:
            raise UnexpectedStop(response.stop_reason)
        failure = _STOP_REASONS[reason]
        if failure is not None:
            raise failure()

    code = clean_code(response.text or "")
    if not code:
        raise NoCandidates("The API returned an empty response.")
    return code


def classify_error(error: BaseException) -> GenerationFailure:
    """
    Map an arbitrary backend exception to a GenerationFailure.

    Typed SDK errors are authoritative. Anything else falls back to keyword
    matching on the message, which is best-effort.
    """
    if isinstance(error, GenerationFailure):
        return error

    for types, failure in _TYPED_ERRORS:
        if isinstance(error, types):
            return failure()

    text = str(error).lower()
    if "api key not valid" in text or "invalid api key" in text or "invalid x-api-key" in text:
        return InvalidCredential()
    if "quota" in text:
        return QuotaExceeded()
    if "fetch" in text or "network" in text or "connection" in text:
        return NetworkFailure()
    return UnknownGenerationFailure(str(error) or None)


class GenerationClient:
    """Single-attempt generate/refine/complete over a GenerationBackend."""

    def __init__(
        self,
        backend: GenerationBackend,
        *,
        model: str | None = None,
        completion_model: str | None = None,
        max_tokens: int | None = None,
    ):
        self.backend = backend
        self.model = model or settings.GENERATION_MODEL
        self.completion_model = completion_model or settings.COMPLETION_MODEL
        self.max_tokens = max_tokens or settings.MAX_OUTPUT_TOKENS

    async def _call(self, prompt: str) -> str:
        try:
            response = await self.backend.complete(
                prompt,
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=GENERATION_TEMPERATURE,
            )
            return check_response(response)
        except Exception as e:
            failure = classify_error(e)
            logger.error("Generation API error (%s): %s", type(failure).__name__, e)
            if failure is e:
                raise
            raise failure from e

    async def generate(self, prompt: str) -> str:
        """
        Generate a complete single-file HTML application.

        Args:
            prompt: The user's description of the app

        Returns:
            Cleaned HTML document

        Raises:
            GenerationFailure: On any failure (no retry)
        """
        return await self._call(build_generation_prompt(prompt))

    async def refine(self, original_prompt: str, current_code: str, refinement_request: str) -> str:
        """
        Apply a modification request, returning the complete replacement document.

        Raises:
            GenerationFailure: On any failure (no retry)
        """
        return await self._call(build_refinement_prompt(original_prompt, current_code, refinement_request))

    async def complete_at(self, context: str, text_before: str, text_after: str) -> str:
        """Best-effort inline completion. Returns "" on any failure."""
        try:
            response = await self.backend.complete(
                build_completion_prompt(context, text_before, text_after),
                model=self.completion_model,
                max_tokens=COMPLETION_MAX_TOKENS,
                temperature=COMPLETION_TEMPERATURE,
            )
        except Exception as e:
            logger.warning("Code completion failed: %s", e)
            return ""
        if not response.text:
            return ""
        return clean_code(response.text)
