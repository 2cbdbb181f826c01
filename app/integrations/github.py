from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

GITHUB_API_VERSION = "2022-11-28"


class GitHubError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class CreatedRepository:
    name: str
    owner: str
    default_branch: str | None
    html_url: str | None = None


class PublishingClient(Protocol):
    def create_repository(
        self, *, name: str, homepage: str, description: str = "", auto_init: bool = True
    ) -> CreatedRepository: ...

    def enable_pages(self, *, owner: str, repo: str, branch: str, path: str = "/") -> None: ...

    def put_file(
        self, *, owner: str, repo: str, path: str, message: str, content_b64: str, branch: str
    ) -> None: ...

    def delete_repository(self, *, owner: str, repo: str) -> None: ...


def _error_detail(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:300]
    if isinstance(payload, dict):
        message = str(payload.get("message") or "")
        errors = payload.get("errors")
        if errors:
            return f"{message} {errors}"[:300]
        return message[:300]
    return str(payload)[:300]


class GitHubClient:
    """Thin blocking client for the GitHub REST endpoints used by publishing.

    No retries are performed; every call raises :class:`GitHubError` when the
    API answers with a non-success status or cannot be reached.
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str = "https://api.github.com",
        timeout_s: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        if not token:
            raise RuntimeError("GITHUB_TOKEN is missing")
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout_s,
            transport=transport,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
                "User-Agent": "eportfolio-generator",
            },
        )

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, url: str, *, json: dict[str, Any] | None = None) -> httpx.Response:
        try:
            response = self._client.request(method, url, json=json)
        except httpx.HTTPError as exc:
            raise GitHubError(f"GitHub request failed: {exc}") from exc
        if response.status_code >= 400:
            detail = _error_detail(response)
            logger.warning("github_api_error method=%s url=%s status=%s: %s", method, url, response.status_code, detail)
            raise GitHubError(
                f"GitHub API error {response.status_code}: {detail}",
                status_code=response.status_code,
            )
        return response

    def create_repository(
        self, *, name: str, homepage: str, description: str = "", auto_init: bool = True
    ) -> CreatedRepository:
        response = self._request(
            "POST",
            "/user/repos",
            json={
                "name": name,
                "description": description,
                "homepage": homepage,
                "auto_init": auto_init,
            },
        )
        payload = response.json()
        owner = payload.get("owner") or {}
        return CreatedRepository(
            name=str(payload.get("name") or name),
            owner=str(owner.get("login") or ""),
            default_branch=payload.get("default_branch"),
            html_url=payload.get("html_url"),
        )

    def enable_pages(self, *, owner: str, repo: str, branch: str, path: str = "/") -> None:
        self._request(
            "POST",
            f"/repos/{quote(owner)}/{quote(repo)}/pages",
            json={"source": {"branch": branch, "path": path}},
        )

    def put_file(
        self, *, owner: str, repo: str, path: str, message: str, content_b64: str, branch: str
    ) -> None:
        self._request(
            "PUT",
            f"/repos/{quote(owner)}/{quote(repo)}/contents/{quote(path)}",
            json={"message": message, "content": content_b64, "branch": branch},
        )

    def delete_repository(self, *, owner: str, repo: str) -> None:
        self._request("DELETE", f"/repos/{quote(owner)}/{quote(repo)}")
