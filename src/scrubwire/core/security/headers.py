"""Header, query string and URL sanitization."""

from enum import Enum
from typing import Dict, Mapping, Optional, Sequence, Union
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from scrubwire.constants import PARTIAL_MASK_MIN_LENGTH, PARTIAL_MASK_VISIBLE_CHARS

from .detectors import SecretDetector
from .fields import FieldMatcher

HeaderValue = Union[str, Sequence[str]]


class HeaderMaskMode(str, Enum):
    """How much of a sensitive header value stays visible."""

    FULL = "full"
    PARTIAL = "partial"


class HeaderSanitizer:
    """Masks sensitive headers and query parameters.

    Args:
        matcher: Field and header name matcher
        mask: Replacement text
        mode: FULL replaces the whole value, PARTIAL keeps the first and
            last four characters of values longer than eight characters
        detector: Used on non-sensitive header values when
            ``scan_values`` is set
        scan_values: Also run the detector over non-sensitive header values
    """

    def __init__(
        self,
        matcher: FieldMatcher,
        mask: str,
        mode: HeaderMaskMode = HeaderMaskMode.PARTIAL,
        detector: Optional[SecretDetector] = None,
        scan_values: bool = False,
    ):
        self.matcher = matcher
        self.mask = mask
        self.mode = HeaderMaskMode(mode)
        self.detector = detector
        self.scan_values = scan_values and detector is not None

    def sanitize_headers(self, headers: Optional[Mapping[str, HeaderValue]]) -> Dict[str, str]:
        """Return a plain dict of header name to sanitized, comma-joined value."""
        result: Dict[str, str] = {}
        if not headers:
            return result

        for name, values in headers.items():
            value = self._join(values)
            if self.matcher.is_sensitive_header(name):
                result[name] = self.mask_value(value)
            elif self.scan_values:
                result[name] = self.detector.mask_secrets(value)
            else:
                result[name] = value
        return result

    @staticmethod
    def _join(values: HeaderValue) -> str:
        if isinstance(values, bytes):
            return values.decode("latin-1")
        if isinstance(values, str):
            return values
        return ", ".join(str(value) for value in values)

    def mask_value(self, value: str) -> str:
        if self.mode is HeaderMaskMode.FULL or len(value) <= PARTIAL_MASK_MIN_LENGTH:
            return self.mask
        visible = PARTIAL_MASK_VISIBLE_CHARS
        return value[:visible] + self.mask + value[-visible:]

    def sanitize_query(self, raw_query: str) -> str:
        """Mask sensitive query parameters; other values are kept as they are."""
        if not raw_query:
            return raw_query

        try:
            pairs = parse_qsl(raw_query, keep_blank_values=True, errors="strict")
        except ValueError:
            return raw_query

        sanitized = [
            (key, self.mask if self.matcher.is_sensitive_field(key) else value)
            for key, value in pairs
        ]
        return urlencode(sanitized, safe="*")

    def sanitize_url(self, url: str) -> str:
        """Sanitize the query and drop ``user:password@`` credentials."""
        if not url:
            return url

        try:
            parts = urlsplit(url)
        except ValueError:
            return url

        netloc = parts.netloc
        if "@" in netloc:
            netloc = self.mask + "@" + netloc.rpartition("@")[2]

        return urlunsplit(
            (parts.scheme, netloc, parts.path, self.sanitize_query(parts.query), parts.fragment)
        )
