"""
MockLLM — scripted generation backend.

Returns queued responses (or raises queued exceptions) in order and records
every prompt it receives. With an empty queue it answers with a small fixed
HTML document, which is enough to click through the UI without an API key.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass

from studio.services.ai_provider import BackendResponse, GenerationBackend

DEFAULT_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<script src="https://cdn.tailwindcss.com"></script>
<title>Mock App</title>
</head>
<body class="bg-gray-900 text-gray-100">
<main class="p-8"><h1 class="text-2xl font-bold">Mock App</h1></main>
</body>
</html>"""


@dataclass
class RecordedCall:
    prompt: str
    model: str
    max_tokens: int
    temperature: float


class MockLLM(GenerationBackend):
    """Deterministic backend for tests and offline use."""

    def __init__(self) -> None:
        self._queue: deque[BackendResponse | BaseException] = deque()
        self.calls: list[RecordedCall] = []

    def queue_text(self, text: str, stop_reason: str = "end_turn") -> MockLLM:
        self._queue.append(BackendResponse(text=text, stop_reason=stop_reason))
        return self

    def queue_response(self, response: BackendResponse) -> MockLLM:
        self._queue.append(response)
        return self

    def queue_error(self, error: BaseException) -> MockLLM:
        self._queue.append(error)
        return self

    async def complete(
        self,
        prompt: str,
        *,
        model: str,
        max_tokens: int,
        temperature: float,
    ) -> BackendResponse:
        self.calls.append(RecordedCall(prompt, model, max_tokens, temperature))
        if not self._queue:
            return BackendResponse(text=DEFAULT_HTML, stop_reason="end_turn")
        item = self._queue.popleft()
        if isinstance(item, BaseException):
            raise item
        return item
