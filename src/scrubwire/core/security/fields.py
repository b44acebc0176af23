"""Field and header name matching."""

from typing import Iterable


class FieldMatcher:
    """Decides whether a field, parameter or header name is sensitive.

    Body field names are matched by case-insensitive substring, so
    ``api_key`` also catches ``user_api_key_2``. Header names are matched
    exactly (case-insensitive) against a separate, small vocabulary.
    """

    def __init__(self, sensitive_fields: Iterable[str], sensitive_headers: Iterable[str]):
        self._fields = tuple(sorted({f.lower() for f in sensitive_fields if f}))
        self._headers = frozenset(h.lower() for h in sensitive_headers if h)

    def is_sensitive_field(self, name: str) -> bool:
        lowered = str(name).lower()
        return any(sensitive in lowered for sensitive in self._fields)

    def is_sensitive_header(self, name: str) -> bool:
        return str(name).lower() in self._headers
