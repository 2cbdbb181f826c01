from __future__ import annotations

from io import BytesIO
from typing import Any

from fastapi import UploadFile
from starlette.datastructures import Headers

from app.integrations.github import CreatedRepository, GitHubError

FIXED_NOW = 1700000000.123
FIXED_STAMP = 1700000000123

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n<< /Root 1 0 R >>\n%%EOF\n"
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 64
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def fixed_clock() -> float:
    return FIXED_NOW


def make_upload(content: bytes, *, filename: str, content_type: str) -> UploadFile:
    return UploadFile(
        file=BytesIO(content),
        size=len(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


class FakePublishingClient:
    """Records every call; ``fail_on`` names a method (or ``put_file:<path>``) that raises."""

    def __init__(self, *, fail_on: str | None = None, default_branch: str | None = "main"):
        self.fail_on = fail_on
        self.default_branch = default_branch
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def calls_to(self, method: str) -> list[dict[str, Any]]:
        return [kwargs for name, kwargs in self.calls if name == method]

    def _record(self, method: str, kwargs: dict[str, Any], failure_key: str | None = None) -> None:
        self.calls.append((method, kwargs))
        if self.fail_on and self.fail_on in {method, failure_key}:
            raise GitHubError(f"{method} rejected", status_code=422)

    def create_repository(self, **kwargs: Any) -> CreatedRepository:
        self._record("create_repository", kwargs)
        return CreatedRepository(name=kwargs["name"], owner="octo", default_branch=self.default_branch)

    def enable_pages(self, **kwargs: Any) -> None:
        self._record("enable_pages", kwargs)

    def put_file(self, **kwargs: Any) -> None:
        self._record("put_file", kwargs, failure_key=f"put_file:{kwargs['path']}")

    def delete_repository(self, **kwargs: Any) -> None:
        self._record("delete_repository", kwargs)


def ada_form_fields() -> dict[str, str]:
    return {
        "name": "Ada Lovelace",
        "profession": "Engineer",
        "email": "ada@example.com",
        "template": "dark",
        "skills": '["C++"]',
        "skillProficiencies": "[80]",
        "projects": '[{"title": "Engine", "description": "desc"}]',
    }
