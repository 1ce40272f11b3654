"""
Source import adapter.

Clone-from-URL fetches the root ``index.html`` of a public repository through
the GitHub REST contents API. Local imports are a plain read-to-text.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

import httpx

from studio.config import settings
from studio.errors import FileNotFound, ImportNetworkError, InvalidUrl, NotFound, RateLimited, RequestFailed

logger = logging.getLogger(__name__)

INDEX_FILE = "index.html"


@dataclass(frozen=True)
class RepoRef:
    owner: str
    repo: str

    @property
    def identifier(self) -> str:
        return f"{self.owner}/{self.repo}"


def parse_repo_url(repo_url: str, host: str | None = None) -> RepoRef:
    """
    Extract owner/repo from a URL of the form https://<host>/<owner>/<repo>.

    Raises:
        InvalidUrl: If the URL does not match
    """
    host = host or settings.GITHUB_HOST
    pattern = re.compile(r"https?://" + re.escape(host) + r"/([a-zA-Z0-9_.-]+)/([a-zA-Z0-9_.-]+)")
    match = pattern.search(repo_url.strip())
    if not match:
        raise InvalidUrl()
    owner, repo = match.group(1), match.group(2)
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    return RepoRef(owner=owner, repo=repo)


class GitHubImporter:
    """Fetches a repository's root index.html over HTTP."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        api_url: str | None = None,
        host: str | None = None,
        token: str | None = None,
    ):
        self.api_url = (api_url or settings.GITHUB_API_URL).rstrip("/")
        self.host = host or settings.GITHUB_HOST
        self.token = token if token is not None else settings.GITHUB_TOKEN
        self.client = client or httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT, follow_redirects=True)

    def _headers(self) -> dict:
        """Build request headers."""
        headers = {"Accept": "application/vnd.github+json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def fetch_root_index_file(self, repo_url: str) -> str:
        """
        Download index.html from the root of a repository.

        Args:
            repo_url: https://<host>/<owner>/<repo>

        Returns:
            Raw file text

        Raises:
            ImportFailure: InvalidUrl, NotFound, RateLimited, RequestFailed,
                ImportNetworkError or FileNotFound
        """
        ref = parse_repo_url(repo_url, self.host)
        contents_url = f"{self.api_url}/repos/{ref.owner}/{ref.repo}/contents/"

        try:
            res = await self.client.get(contents_url, headers=self._headers())
        except httpx.TransportError as e:
            logger.error("Could not reach repository host for %s: %s", ref.identifier, e)
            raise ImportNetworkError() from e

        if res.status_code == 404:
            raise NotFound(ref.identifier)
        if res.status_code == 403:
            raise RateLimited()
        if not res.is_success:
            raise RequestFailed("fetch repository contents", res.status_code, res.reason_phrase)

        try:
            listing = res.json()
        except ValueError as e:
            logger.error("Repository listing for %s is not JSON: %s", ref.identifier, e)
            raise RequestFailed(
                "read repository contents", res.status_code, "the response was not valid JSON"
            ) from e
        entry = None
        if isinstance(listing, list):
            entry = next(
                (f for f in listing if isinstance(f, dict) and f.get("name") == INDEX_FILE and f.get("type") == "file"),
                None,
            )
        if not entry or not entry.get("download_url"):
            raise FileNotFound()

        try:
            file_res = await self.client.get(entry["download_url"])
        except httpx.TransportError as e:
            logger.error("Could not download %s for %s: %s", INDEX_FILE, ref.identifier, e)
            raise ImportNetworkError("Network error. Could not download index.html.") from e

        if not file_res.is_success:
            raise RequestFailed("download index.html", file_res.status_code, file_res.reason_phrase)

        logger.info("Fetched %s from %s (%d bytes)", INDEX_FILE, ref.identifier, len(file_res.content))
        return file_res.text

    async def aclose(self) -> None:
        await self.client.aclose()


def read_local_file(path: str | Path) -> tuple[str, str]:
    """Read a local file as text. Returns (content, file name)."""
    path = Path(path)
    return path.read_text(encoding="utf-8"), path.name
