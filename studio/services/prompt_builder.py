"""
Prompt builder for generation, refinement and inline completion.

Templates live in studio/prompts/*.md and are filled with str.format.
"""

from __future__ import annotations

import re
from pathlib import Path

PROMPTS_DIR = Path(__file__).parent.parent / "prompts"

CSS_CONTEXT = "CSS within a <style> tag"
JS_CONTEXT = "JavaScript within a <script> tag"
HTML_CONTEXT = "HTML markup"

# Cache loaded prompts in memory (they don't change at runtime)
_cache: dict[str, str] = {}

_OPEN_CLOSE_RE = re.compile(r"<(/?)(style|script)\b[^>]*>", re.IGNORECASE)


def _load(name: str) -> str:
    """Load and cache a prompt file."""
    if name not in _cache:
        path = PROMPTS_DIR / f"{name}.md"
        _cache[name] = path.read_text(encoding="utf-8")
    return _cache[name]


def build_generation_prompt(user_prompt: str) -> str:
    """Fixed instruction template followed by the user's request."""
    return f'{_load("generate").rstrip()}\n\n**User\'s Request:** "{user_prompt}"'


def build_refinement_prompt(original_prompt: str, current_code: str, refinement_request: str) -> str:
    """Template asking for a complete replacement document, not a diff."""
    return _load("refine").format(
        original_prompt=original_prompt,
        current_code=current_code,
        refinement_request=refinement_request,
    )


def build_completion_prompt(language_context: str, code_before: str, code_after: str) -> str:
    return _load("complete").format(
        language_context=language_context,
        code_before=code_before,
        code_after=code_after,
    )


def language_context(code_before: str) -> str:
    """
    Classify the cursor position from the text before it.

    Returns CSS_CONTEXT inside an unclosed <style>, JS_CONTEXT inside an
    unclosed <script>, HTML_CONTEXT otherwise.
    """
    open_tag: str | None = None
    for m in _OPEN_CLOSE_RE.finditer(code_before):
        closing, name = m.group(1), m.group(2).lower()
        if closing:
            if open_tag == name:
                open_tag = None
        elif open_tag is None:
            open_tag = name
    if open_tag == "style":
        return CSS_CONTEXT
    if open_tag == "script":
        return JS_CONTEXT
    return HTML_CONTEXT
