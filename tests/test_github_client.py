import json

import httpx
import pytest

from app.integrations.github import GitHubClient, GitHubError


def _client(handler) -> GitHubClient:
    return GitHubClient("test-token", base_url="https://api.github.test", transport=httpx.MockTransport(handler))


def test_create_repository_sends_expected_payload() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            201,
            json={"name": "eportfolio-ada-1", "owner": {"login": "octo"}, "default_branch": "main"},
        )

    created = _client(handler).create_repository(
        name="eportfolio-ada-1",
        homepage="https://octo.github.io/eportfolio-ada-1",
        description="Ada | Engineer Portfolio",
    )

    assert created.name == "eportfolio-ada-1"
    assert created.owner == "octo"
    assert created.default_branch == "main"
    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/user/repos"
    assert request.headers["Authorization"] == "Bearer test-token"
    assert request.headers["Accept"] == "application/vnd.github+json"
    body = json.loads(request.content)
    assert body["auto_init"] is True
    assert body["homepage"] == "https://octo.github.io/eportfolio-ada-1"


def test_enable_pages_and_put_file_paths() -> None:
    seen: list[tuple[str, str, dict]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path, json.loads(request.content)))
        return httpx.Response(201, json={})

    client = _client(handler)
    client.enable_pages(owner="octo", repo="eportfolio-ada-1", branch="main")
    client.put_file(
        owner="octo",
        repo="eportfolio-ada-1",
        path="index.html",
        message="Add index.html",
        content_b64="PGh0bWw+",
        branch="main",
    )

    assert seen[0] == ("POST", "/repos/octo/eportfolio-ada-1/pages", {"source": {"branch": "main", "path": "/"}})
    assert seen[1] == (
        "PUT",
        "/repos/octo/eportfolio-ada-1/contents/index.html",
        {"message": "Add index.html", "content": "PGh0bWw+", "branch": "main"},
    )


def test_delete_repository() -> None:
    seen: list[tuple[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path))
        return httpx.Response(204)

    _client(handler).delete_repository(owner="octo", repo="eportfolio-ada-1")

    assert seen == [("DELETE", "/repos/octo/eportfolio-ada-1")]


def test_error_status_raises_github_error_with_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"message": "name already exists on this account"})

    with pytest.raises(GitHubError) as excinfo:
        _client(handler).create_repository(name="dup", homepage="https://octo.github.io/dup")

    assert excinfo.value.status_code == 422
    assert "name already exists" in str(excinfo.value)


def test_transport_errors_are_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(GitHubError) as excinfo:
        _client(handler).enable_pages(owner="octo", repo="r", branch="main")

    assert excinfo.value.status_code is None


def test_missing_token_is_rejected() -> None:
    with pytest.raises(RuntimeError):
        GitHubClient("")
