from __future__ import annotations

import mimetypes
from typing import Any

CONTENT_TYPE_EXTENSION_HINTS = {
    "application/pdf": "pdf",
    "image/png": "png",
    "image/jpeg": "jpg",
}

PDF_MAGIC = b"%PDF-"
PNG_MAGIC = b"\x89PNG\r\n\x1a\n"
JPEG_MAGIC = b"\xff\xd8\xff"

_SIGNATURES = {
    "application/pdf": (PDF_MAGIC, ".pdf"),
    "image/png": (PNG_MAGIC, ".png"),
    "image/jpeg": (JPEG_MAGIC, ".jpg/.jpeg"),
}


def _safe_str(value: Any, max_len: int = 255) -> str:
    if value is None:
        return ""
    text = str(value).strip()
    if not text:
        return ""
    return text[:max_len]


def normalize_content_type(content_type: str | None) -> str:
    return _safe_str((content_type or "").split(";")[0], 120).lower()


def extension_from_content_type(content_type: str) -> str:
    sanitized = normalize_content_type(content_type)
    if not sanitized:
        return ""
    explicit = CONTENT_TYPE_EXTENSION_HINTS.get(sanitized)
    if explicit:
        return explicit
    guessed = mimetypes.guess_extension(sanitized) or ""
    return guessed.lstrip(".").lower()


def extension_from_filename(filename: str) -> str:
    name = _safe_str(filename)
    if "." not in name:
        return ""
    ext = name.rsplit(".", 1)[-1].lower()
    if not ext.isalnum() or len(ext) > 10:
        return ""
    return ext


def validate_upload_signature(*, content_type: str, head: bytes) -> None:
    expected = _SIGNATURES.get(normalize_content_type(content_type))
    if expected is None:
        return
    magic, label = expected
    if not head.startswith(magic):
        raise ValueError(f"File signature does not match {label} content.")
