from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Mapping, Sequence

from fastapi import UploadFile

from app.core.errors import InvalidInput
from app.services import file_security

logger = logging.getLogger(__name__)

CHUNK_BYTES = 64 * 1024
SIGNATURE_PROBE_BYTES = 16


@dataclass(frozen=True)
class UploadRule:
    role: str
    allowed_types: frozenset[str]
    type_error: str


UPLOAD_RULES: Mapping[str, UploadRule] = {
    "cv": UploadRule(
        role="resume",
        allowed_types=frozenset({"application/pdf"}),
        type_error="CV must be a PDF file",
    ),
    "image": UploadRule(
        role="headshot",
        allowed_types=frozenset({"image/jpeg", "image/png"}),
        type_error="Profile image must be a JPEG or PNG file",
    ),
}


@dataclass(frozen=True)
class UploadedFile:
    role: str
    path: Path
    content_type: str
    size: int
    filename: str = ""


def discard_uploads(files: Iterable[UploadedFile]) -> None:
    for uploaded in files:
        try:
            uploaded.path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("upload_cleanup_failed path=%s: %s", uploaded.path, exc)


class UploadHandler:
    """Accepts the resume/headshot parts of a request and stores them on disk.

    Files are owned by the handler until :meth:`receive_all` returns; on any
    rejection the files it already wrote for the request are removed.
    """

    def __init__(
        self,
        upload_dir: str | Path,
        *,
        max_bytes: int,
        verify_signature: bool = True,
        clock: Callable[[], float] = time.time,
    ):
        self._upload_dir = Path(upload_dir)
        self._max_bytes = max_bytes
        self._verify_signature = verify_signature
        self._clock = clock

    async def receive_all(self, parts: Mapping[str, Sequence[UploadFile] | None]) -> list[UploadedFile]:
        stored: list[UploadedFile] = []
        try:
            for field, files in parts.items():
                uploaded = await self.receive(field, files)
                if uploaded is not None:
                    stored.append(uploaded)
        except BaseException:
            discard_uploads(stored)
            raise
        return stored

    async def receive(self, field: str, files: Sequence[UploadFile] | None) -> UploadedFile | None:
        rule = UPLOAD_RULES.get(field)
        if rule is None:
            raise InvalidInput(f"Unexpected file field '{field}'")
        present = [item for item in (files or []) if item is not None and (item.filename or item.size)]
        if not present:
            return None
        if len(present) > 1:
            raise InvalidInput(f"Only one '{field}' file may be uploaded")

        upload = present[0]
        content_type = file_security.normalize_content_type(upload.content_type)
        if content_type not in rule.allowed_types:
            raise InvalidInput(rule.type_error)
        if upload.size is not None and upload.size > self._max_bytes:
            raise InvalidInput(self._too_large_message())

        ext = file_security.extension_from_filename(upload.filename or "")
        if not ext:
            ext = file_security.extension_from_content_type(content_type)
        target = self._target_path(rule.role, ext)
        size = await self._store(upload, target, content_type)
        logger.info("upload_stored role=%s size=%s type=%s", rule.role, size, content_type)
        return UploadedFile(
            role=rule.role,
            path=target,
            content_type=content_type,
            size=size,
            filename=upload.filename or "",
        )

    def _target_path(self, role: str, ext: str) -> Path:
        stamp = int(self._clock() * 1000)
        suffix = f".{ext}" if ext else ""
        return self._upload_dir / f"{stamp}-{role}-{uuid.uuid4().hex[:8]}{suffix}"

    def _too_large_message(self) -> str:
        limit_mb = self._max_bytes / (1024 * 1024)
        return f"File too large. Maximum allowed size is {limit_mb:g} MB."

    async def _store(self, upload: UploadFile, target: Path, content_type: str) -> int:
        self._upload_dir.mkdir(parents=True, exist_ok=True)
        total = 0
        try:
            with target.open("wb") as handle:
                while True:
                    chunk = await upload.read(CHUNK_BYTES)
                    if not chunk:
                        break
                    if total == 0 and self._verify_signature:
                        try:
                            file_security.validate_upload_signature(
                                content_type=content_type,
                                head=chunk[:SIGNATURE_PROBE_BYTES],
                            )
                        except ValueError as exc:
                            raise InvalidInput(str(exc)) from exc
                    total += len(chunk)
                    if total > self._max_bytes:
                        raise InvalidInput(self._too_large_message())
                    handle.write(chunk)
        except BaseException:
            target.unlink(missing_ok=True)
            raise
        if total == 0:
            target.unlink(missing_ok=True)
            raise InvalidInput("Uploaded file is empty")
        return total
