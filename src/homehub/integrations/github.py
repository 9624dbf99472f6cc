"""Publish meal records as JSON files through the GitHub Contents API."""

from __future__ import annotations

import base64
import json
import logging
import re
from typing import Any, Mapping, Optional

import httpx

from homehub import metrics
from homehub.config import Settings, get_settings
from homehub.errors import GitHubNotConfiguredError, GitHubUpstreamError

logger = logging.getLogger(__name__)

GITHUB_ACCEPT = "application/vnd.github.v3+json"
_NON_WORD_RUN = re.compile(r"[^\w]+", re.ASCII)


def slugify(text: str) -> str:
    """Lowercase ``text``, collapse non-word runs to ``-`` and trim hyphens at the ends."""

    return _NON_WORD_RUN.sub("-", text.lower()).strip("-")


def meal_file_path(meal_type: str, title: str) -> str:
    """Return ``meals/<type>/<slug>.json``; raises ``ValueError`` for an empty slug."""

    slug = slugify(title)
    if not slug:
        raise ValueError(f"Meal title {title!r} does not produce a usable file name")
    return f"meals/{meal_type.lower()}/{slug}.json"


def encode_meal(meal: Mapping[str, Any]) -> str:
    pretty = json.dumps(dict(meal), indent=2, ensure_ascii=False)
    return base64.b64encode(pretty.encode("utf-8")).decode("ascii")


class GitHubContentsClient:
    """Single-request wrapper around ``PUT /repos/{owner}/{repo}/contents/{path}``."""

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        branch: str,
        *,
        api_url: str = "https://api.github.com",
        timeout: Optional[float] = None,
    ) -> None:
        self._token = token
        self._owner = owner
        self._repo = repo
        self._branch = branch
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Accept": GITHUB_ACCEPT,
        }

    def put_file(self, path: str, content_b64: str, message: str) -> dict[str, Any]:
        """Create or update ``path``; raises ``GitHubUpstreamError`` on a non-2xx answer."""

        endpoint = f"{self._api_url}/repos/{self._owner}/{self._repo}/contents/{path}"
        payload = {"message": message, "content": content_b64, "branch": self._branch}
        with httpx.Client(timeout=self._timeout) as client:
            response = client.put(endpoint, headers=self._headers(), json=payload)

        try:
            result = response.json()
        except ValueError:
            result = {"message": response.text}
        if not response.is_success:
            message_text = result.get("message") if isinstance(result, dict) else None
            raise GitHubUpstreamError(response.status_code, message_text or response.reason_phrase)
        return result


class MealPublisher:
    """Commit a meal record to the configured repository."""

    def __init__(self, client: GitHubContentsClient) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "MealPublisher":
        settings = settings or get_settings()
        if not settings.github_token:
            raise GitHubNotConfiguredError("GitHub token is not configured")
        client = GitHubContentsClient(
            settings.github_token,
            settings.github_owner,
            settings.github_repo,
            settings.github_branch,
            api_url=settings.github_api_url,
            timeout=settings.github_timeout,
        )
        return cls(client)

    def save_meal(self, meal: Mapping[str, Any]) -> str:
        """Commit ``meal`` and return the web URL of the created file."""

        title = str(meal["title"])
        path = meal_file_path(str(meal["type"]), title)
        try:
            result = self._client.put_file(path, encode_meal(meal), f"Add meal: {title}")
        except GitHubUpstreamError as exc:
            logger.warning("GitHub rejected meal commit path=%s status=%s", path, exc.status_code)
            metrics.GITHUB_COMMITS.labels(outcome="rejected").inc()
            raise
        except httpx.HTTPError:
            logger.exception("GitHub meal commit failed path=%s", path)
            metrics.GITHUB_COMMITS.labels(outcome="error").inc()
            raise
        metrics.GITHUB_COMMITS.labels(outcome="committed").inc()
        logger.info("Committed meal file path=%s", path)
        return result["content"]["html_url"]


__all__ = [
    "GitHubContentsClient",
    "MealPublisher",
    "encode_meal",
    "meal_file_path",
    "slugify",
]
