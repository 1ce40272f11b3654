"""
Error taxonomy for the studio core.

Every failure a user can see carries a ready-to-display ``message``. The
controller catches validation, generation and import failures at its boundary
and turns them into its single error field; storage failures from project
save/delete propagate to the caller that triggered them.
"""

from __future__ import annotations


class StudioError(Exception):
    """Base class for all studio failures."""

    default_message = "An unknown error occurred."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(StudioError):
    """A required input was empty or blank."""


class StorageFailure(StudioError):
    """The persistence backend rejected a write."""

    default_message = "Could not write to storage. Storage might be full."


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


class GenerationFailure(StudioError):
    """Base class for generation/refinement failures."""

    default_message = "An unknown error occurred while contacting the generation API."


class NoCandidates(GenerationFailure):
    default_message = "The API returned no candidates in the response."


class SafetyBlocked(GenerationFailure):
    default_message = "The request was blocked for safety reasons. Please modify your prompt and try again."


class RecitationBlocked(GenerationFailure):
    default_message = "The request was blocked due to potential recitation issues."


class TokenLimitReached(GenerationFailure):
    default_message = "The response was stopped because it reached the maximum token limit."


class UnexpectedStop(GenerationFailure):
    """The backend stopped for a reason we do not recognize."""

    def __init__(self, stop_reason: str):
        self.stop_reason = stop_reason
        super().__init__(f"Generation stopped for an unexpected reason: {stop_reason}")


class InvalidCredential(GenerationFailure):
    default_message = "API Key not valid. Please check your configuration."


class QuotaExceeded(GenerationFailure):
    default_message = "You have exceeded your API quota. Please check your account status."


class NetworkFailure(GenerationFailure):
    default_message = "Network error. Please check your internet connection and try again."


class UnknownGenerationFailure(GenerationFailure):
    pass


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------


class ImportFailure(StudioError):
    """Base class for repository import failures."""

    default_message = "Could not import the repository."


class InvalidUrl(ImportFailure):
    default_message = "Invalid GitHub repository URL. Please use the format: https://github.com/owner/repo"


class NotFound(ImportFailure):
    def __init__(self, repo: str):
        self.repo = repo
        super().__init__(f"Repository not found at {repo}. Please check the URL.")


class RateLimited(ImportFailure):
    default_message = "GitHub API rate limit exceeded. Please wait and try again later."


class RequestFailed(ImportFailure):
    def __init__(self, what: str, status_code: int, reason: str = ""):
        self.status_code = status_code
        super().__init__(f"Could not {what}. Status: {reason or status_code}")


class ImportNetworkError(ImportFailure):
    default_message = "Network error. Could not connect to GitHub API."


class FileNotFound(ImportFailure):
    default_message = "'index.html' not found in the root of the repository."
