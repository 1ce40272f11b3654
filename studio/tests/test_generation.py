"""Tests for the generation client and its failure taxonomy."""

from __future__ import annotations

import anthropic
import httpx
import openai
import pytest

from studio.errors import (
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
from studio.services.ai_provider import BackendResponse
from studio.services.generation import (
    COMPLETION_MAX_TOKENS,
    GENERATION_TEMPERATURE,
    GenerationClient,
    check_response,
    classify_error,
    clean_code,
)
from studio.services.prompt_builder import CSS_CONTEXT

_ANTHROPIC_REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
_OPENAI_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def _response(status: int, request: httpx.Request) -> httpx.Response:
    return httpx.Response(status, request=request)


# ---------------------------------------------------------------------------
# clean_code / check_response
# ---------------------------------------------------------------------------


def test_clean_code_strips_fence():
    assert clean_code("```html\n<html></html>\n```") == "<html></html>"
    assert clean_code("  <html></html>  ") == "<html></html>"


def test_check_response_success():
    assert check_response(BackendResponse(text="```html\n<p>x</p>```", stop_reason="end_turn")) == "<p>x</p>"
    assert check_response(BackendResponse(text="<p>x</p>", stop_reason="stop")) == "<p>x</p>"
    assert check_response(BackendResponse(text="<p>x</p>", stop_reason=None)) == "<p>x</p>"


def test_check_response_no_candidates():
    with pytest.raises(NoCandidates):
        check_response(BackendResponse(text=None, stop_reason=None, candidates=0))


@pytest.mark.parametrize(
    "stop_reason,failure",
    [
        ("refusal", SafetyBlocked),
        ("content_filter", SafetyBlocked),
        ("SAFETY", SafetyBlocked),
        ("recitation", RecitationBlocked),
        ("max_tokens", TokenLimitReached),
        ("length", TokenLimitReached),
    ],
)
def test_check_response_stop_reasons(stop_reason, failure):
    with pytest.raises(failure):
        check_response(BackendResponse(text="<p>partial", stop_reason=stop_reason))


def test_check_response_unexpected_stop_names_reason():
    with pytest.raises(UnexpectedStop) as exc_info:
        check_response(BackendResponse(text="<p>x</p>", stop_reason="pause_turn"))

    assert exc_info.value.stop_reason == "pause_turn"
    assert exc_info.value.message == "Generation stopped for an unexpected reason: pause_turn"


def test_check_response_empty_text():
    with pytest.raises(NoCandidates) as exc_info:
        check_response(BackendResponse(text="```html\n```", stop_reason="end_turn"))

    assert exc_info.value.message == "The API returned an empty response."


# ---------------------------------------------------------------------------
# classify_error
# ---------------------------------------------------------------------------


def test_classify_typed_sdk_errors():
    auth = anthropic.AuthenticationError("bad key", response=_response(401, _ANTHROPIC_REQUEST), body=None)
    rate = openai.RateLimitError("slow down", response=_response(429, _OPENAI_REQUEST), body=None)
    conn = anthropic.APIConnectionError(request=_ANTHROPIC_REQUEST)

    assert isinstance(classify_error(auth), InvalidCredential)
    assert isinstance(classify_error(rate), QuotaExceeded)
    assert isinstance(classify_error(conn), NetworkFailure)
    assert isinstance(classify_error(httpx.ConnectError("refused")), NetworkFailure)


def test_classify_by_message_keywords():
    assert isinstance(classify_error(RuntimeError("API key not valid. Please pass a valid API key.")), InvalidCredential)
    assert isinstance(classify_error(RuntimeError("Resource has been exhausted (e.g. check quota).")), QuotaExceeded)
    assert isinstance(classify_error(RuntimeError("Failed to fetch")), NetworkFailure)


def test_classify_unknown_keeps_message():
    failure = classify_error(ValueError("something odd"))

    assert isinstance(failure, UnknownGenerationFailure)
    assert failure.message == "something odd"


def test_classify_passes_generation_failures_through():
    failure = SafetyBlocked()

    assert classify_error(failure) is failure


# ---------------------------------------------------------------------------
# GenerationClient
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_generate_returns_clean_code(generation, mock_llm):
    mock_llm.queue_text("```html\n<html>app</html>\n```")

    code = await generation.generate("a counter")

    assert code == "<html>app</html>"
    call = mock_llm.calls[0]
    assert call.model == "test-model"
    assert call.max_tokens == 1000
    assert call.temperature == GENERATION_TEMPERATURE
    assert '"a counter"' in call.prompt


@pytest.mark.asyncio
async def test_generate_single_attempt_on_failure(generation, mock_llm):
    mock_llm.queue_error(openai.AuthenticationError("bad", response=_response(401, _OPENAI_REQUEST), body=None))

    with pytest.raises(InvalidCredential) as exc_info:
        await generation.generate("a counter")

    assert exc_info.value.message == "API Key not valid. Please check your configuration."
    assert isinstance(exc_info.value.__cause__, openai.AuthenticationError)
    assert len(mock_llm.calls) == 1


@pytest.mark.asyncio
async def test_generate_bad_stop_reason(generation, mock_llm):
    mock_llm.queue_text("<html>trunc", stop_reason="max_tokens")

    with pytest.raises(TokenLimitReached):
        await generation.generate("a counter")


@pytest.mark.asyncio
async def test_refine_sends_original_prompt_and_code(generation, mock_llm):
    mock_llm.queue_text("<html>v2</html>")

    code = await generation.refine("a counter", "<html>v1</html>", "add a reset button")

    assert code == "<html>v2</html>"
    prompt = mock_llm.calls[0].prompt
    assert '"a counter"' in prompt
    assert "<html>v1</html>" in prompt
    assert '"add a reset button"' in prompt


@pytest.mark.asyncio
async def test_complete_at_uses_completion_model(generation, mock_llm):
    mock_llm.queue_text("```css\ncolor: red;\n```")

    snippet = await generation.complete_at(CSS_CONTEXT, "<style>p {", "}</style>")

    assert snippet == "color: red;"
    assert mock_llm.calls[0].model == "test-completion"
    assert mock_llm.calls[0].max_tokens == COMPLETION_MAX_TOKENS


@pytest.mark.asyncio
async def test_complete_at_never_raises(generation, mock_llm):
    mock_llm.queue_error(RuntimeError("boom"))
    mock_llm.queue_response(BackendResponse(text=None, stop_reason="end_turn"))

    assert await generation.complete_at(CSS_CONTEXT, "", "") == ""
    assert await generation.complete_at(CSS_CONTEXT, "", "") == ""
