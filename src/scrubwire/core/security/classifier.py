"""
Content classification for HTTP bodies.

Decides which structural sanitizer handles a body. A recognized declared
content type is authoritative; otherwise the body is sniffed.
"""

from enum import Enum
from typing import Union

from scrubwire.constants import (
    BASE64_MIN_SAMPLE_SIZE,
    BASE64_SAMPLE_SIZE,
    BASE64_VALID_RATIO,
)

BodyLike = Union[bytes, str]

_BINARY_TYPES = (
    "application/octet-stream",
    "application/pdf",
    "image/",
    "audio/",
    "video/",
    "application/zip",
    "application/gzip",
    "application/x-gzip",
    "application/x-tar",
    "application/x-7z-compressed",
    "application/x-rar-compressed",
)

_BASE64_ALPHABET = frozenset(
    b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/=\r\n"
)


class ContentKind(str, Enum):
    """Body formats with a dedicated sanitizer."""

    JSON = "json"
    XML = "xml"
    FORM_URLENCODED = "form"
    MULTIPART = "multipart"
    BINARY = "binary"
    PLAIN_TEXT = "text"


def _media_type(content_type: str) -> str:
    return (content_type or "").split(";", 1)[0].strip().lower()


def is_json(content_type: str) -> bool:
    media = _media_type(content_type)
    return media in ("application/json", "text/json") or media.endswith("+json")


def is_xml(content_type: str) -> bool:
    media = _media_type(content_type)
    return media in ("application/xml", "text/xml") or media.endswith("+xml")


def is_form_urlencoded(content_type: str) -> bool:
    return _media_type(content_type) == "application/x-www-form-urlencoded"


def is_multipart(content_type: str) -> bool:
    return _media_type(content_type) == "multipart/form-data"


def is_binary(content_type: str) -> bool:
    media = _media_type(content_type)
    if not media:
        return False
    return any(media.startswith(prefix) for prefix in _BINARY_TYPES)


def _as_text(body: BodyLike) -> str:
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    return body


def looks_like_json(body: BodyLike) -> bool:
    """Return True when the trimmed body is wrapped in ``{}`` or ``[]``."""
    trimmed = _as_text(body).strip()
    if not trimmed:
        return False
    first, last = trimmed[0], trimmed[-1]
    return (first == "{" and last == "}") or (first == "[" and last == "]")


def looks_like_xml(body: BodyLike) -> bool:
    trimmed = _as_text(body).strip()
    return trimmed.startswith("<") and trimmed.endswith(">")


def looks_like_base64(body: bytes) -> bool:
    """Heuristic: at least 90% of the leading sample is base64 alphabet."""
    if len(body) < BASE64_MIN_SAMPLE_SIZE:
        return False

    sample = body[:BASE64_SAMPLE_SIZE]
    valid = sum(1 for byte in sample if byte in _BASE64_ALPHABET)
    return valid / len(sample) >= BASE64_VALID_RATIO


def classify(content_type: str, body: BodyLike) -> ContentKind:
    """Pick the sanitizer for a body.

    Args:
        content_type: Declared ``Content-Type`` header value, possibly empty
        body: Raw body or a prefix of it

    Returns:
        The ContentKind whose sanitizer should run
    """
    if is_json(content_type):
        return ContentKind.JSON
    if is_xml(content_type):
        return ContentKind.XML
    if is_form_urlencoded(content_type):
        return ContentKind.FORM_URLENCODED
    if is_multipart(content_type):
        return ContentKind.MULTIPART
    if is_binary(content_type):
        return ContentKind.BINARY

    if looks_like_json(body):
        return ContentKind.JSON
    if looks_like_xml(body):
        return ContentKind.XML
    return ContentKind.PLAIN_TEXT
