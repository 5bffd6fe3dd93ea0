"""Lightweight GitHub Actions REST client scoped to a single repository."""

from __future__ import annotations

import base64
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

import httpx

from .github_exceptions import (
    GithubAPIError,
    GithubConfigurationError,
    GithubRateLimitError,
)

API_PREVIEW_HEADERS = {
    "Accept": "application/vnd.github+json",
}


class GitHubClient:
    def __init__(
        self,
        owner: str | None,
        repo: str | None,
        token: str | None = None,
        api_url: str = "https://api.github.com",
        timeout: float = 120,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not owner or not repo:
            raise GithubConfigurationError(
                "GITHUB_OWNER and GITHUB_REPO must be configured"
            )
        self.owner = owner
        self.repo = repo
        self._token = token.strip() if token and token.strip() else None
        self._api_url = api_url.rstrip("/")
        self._rest = httpx.Client(
            base_url=self._api_url, timeout=timeout, transport=transport
        )

    @classmethod
    def from_settings(cls, settings, transport: httpx.BaseTransport | None = None) -> "GitHubClient":
        return cls(
            owner=settings.GITHUB_OWNER,
            repo=settings.GITHUB_REPO,
            token=settings.GITHUB_TOKEN,
            api_url=settings.GITHUB_API_URL,
            timeout=settings.GITHUB_TIMEOUT_SECONDS,
            transport=transport,
        )

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def authenticated(self) -> bool:
        return self._token is not None

    def _headers(self) -> Dict[str, str]:
        headers = {"X-GitHub-Api-Version": "2022-11-28"}
        headers.update(API_PREVIEW_HEADERS)
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        if response.status_code in (403, 429) and (
            response.headers.get("X-RateLimit-Remaining") == "0"
            or "rate limit" in response.text.lower()
        ):
            self._handle_rate_limit(response)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise GithubAPIError(
                str(exc), status_code=response.status_code, body=response.text
            ) from exc
        return response

    def _handle_rate_limit(self, response: httpx.Response) -> None:
        reset_header = response.headers.get("X-RateLimit-Reset")
        retry_after_header = response.headers.get("Retry-After")
        wait_seconds = 60.0

        if retry_after_header:
            try:
                wait_seconds = float(retry_after_header)
            except ValueError:
                pass
        elif reset_header:
            try:
                reset_epoch = float(reset_header)
                now_epoch = datetime.now(timezone.utc).timestamp()
                wait_seconds = max(reset_epoch - now_epoch, 1.0)
            except ValueError:
                pass

        raise GithubRateLimitError("GitHub rate limit reached", retry_after=wait_seconds)

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        try:
            response = self._rest.get(path, headers=self._headers(), params=params)
        except httpx.RequestError as exc:
            raise GithubAPIError(f"GitHub request failed: {exc}") from exc
        return self._handle_response(response)

    def _paginate(
        self, path: str, key: str, params: Optional[Dict[str, Any]] = None
    ) -> Iterator[Dict[str, Any]]:
        url: Optional[str] = path
        query = params or {}
        while url:
            response = self._get(url, params=query)
            data = response.json()
            items = data.get(key) if isinstance(data, dict) else None
            for item in items or []:
                yield item
            url = None
            query = None
            link_header = response.headers.get("Link")
            if link_header:
                for part in link_header.split(","):
                    segment = part.strip()
                    if segment.endswith('rel="next"'):
                        url = segment[segment.find("<") + 1 : segment.find(">")]
                        break

    # Actions endpoints
    def list_workflows(self) -> List[Dict[str, Any]]:
        return list(
            self._paginate(
                f"/repos/{self.full_name}/actions/workflows",
                "workflows",
                params={"per_page": 100},
            )
        )

    def get_file_content(self, path: str) -> Optional[str]:
        """Return a repository file decoded as UTF-8, or None when it has no content."""
        data = self._get(f"/repos/{self.full_name}/contents/{path}").json()
        if not isinstance(data, dict) or not data.get("content"):
            return None
        return base64.b64decode(data["content"]).decode("utf-8")

    def list_workflow_runs(self, workflow_id: int | str, per_page: int = 100) -> List[Dict[str, Any]]:
        data = self._get(
            f"/repos/{self.full_name}/actions/workflows/{workflow_id}/runs",
            params={"per_page": per_page},
        ).json()
        if not isinstance(data, dict):
            return []
        return data.get("workflow_runs") or []

    def list_run_jobs(self, run_id: int | str) -> List[Dict[str, Any]]:
        return list(
            self._paginate(
                f"/repos/{self.full_name}/actions/runs/{run_id}/jobs",
                "jobs",
                params={"per_page": 100},
            )
        )

    def close(self) -> None:
        self._rest.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
