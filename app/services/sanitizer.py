from __future__ import annotations

import html
import re
import unicodedata
from typing import Any
from urllib.parse import urlparse

from bs4 import BeautifulSoup

_DROPPED_TAGS = ["script", "style", "iframe", "noscript", "object", "embed", "template"]
_KEPT_CONTROL_CHARS = {"\n", "\t"}
# "&" that does not open a character reference.
_BARE_AMPERSAND = re.compile(r"&(?![A-Za-z][A-Za-z0-9]*;|#[0-9]+;|#[xX][0-9A-Fa-f]+;)")


def _strip_control_chars(text: str) -> str:
    return "".join(
        ch for ch in text if ch in _KEPT_CONTROL_CHARS or unicodedata.category(ch)[0] != "C"
    )


def sanitize_text(value: Any) -> str:
    """Reduce arbitrary input to escaped plain text.

    Markup is removed (script/style bodies included), control characters are
    dropped and the remaining text is HTML-escaped so it is safe inside both
    element content and double-quoted attributes. ``None`` maps to ``""``.
    """
    if value is None:
        return ""
    raw = str(value)
    if not raw.strip():
        return ""
    if "<" in raw or "&" in raw:
        soup = BeautifulSoup(_BARE_AMPERSAND.sub("&amp;", raw), "html.parser")
        for node in soup(_DROPPED_TAGS):
            node.decompose()
        raw = soup.get_text()
    text = _strip_control_chars(raw).strip()
    return html.escape(text, quote=True)


def sanitize_link(value: Any) -> str:
    text = html.unescape(sanitize_text(value))
    if not text or re.search(r"\s", text):
        return ""
    if not re.match(r"^[a-z][a-z0-9+.-]*:", text, flags=re.IGNORECASE):
        text = f"https://{text}"
    parsed = urlparse(text)
    if parsed.scheme.lower() not in {"http", "https"} or not parsed.netloc:
        return ""
    return html.escape(text, quote=True)
