"""
Body handling policy.

An ordered list of ``BodyRule`` objects decides, from the content type, the
raw bytes and the size, whether a body is skipped, truncated, summarized or
passed on to structural sanitization. The first rule whose condition holds
wins.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence, Tuple

from scrubwire.constants import (
    BASE64_BODY_MESSAGE,
    BASE64_MIN_BODY_SIZE,
    BINARY_BODY_MESSAGE,
    BYTES_PER_KB,
    BYTES_PER_MB,
    SUMMARIZE_THRESHOLD,
    TRUNCATE_THRESHOLD,
)

from .classifier import is_binary, is_json, is_xml, looks_like_base64

RuleCondition = Callable[[str, bytes, int], bool]


class BodyAction(str, Enum):
    """What to do with a body matched by a rule."""

    SKIP = "skip"
    TRUNCATE = "truncate"
    SUMMARIZE = "summarize"
    SANITIZE = "sanitize"


@dataclass(frozen=True)
class BodyRule:
    """A condition over ``(content_type, body, size)`` and the action it triggers."""

    condition: RuleCondition
    action: BodyAction
    message: Optional[str] = None

    def matches(self, content_type: str, body: bytes, size: int) -> bool:
        return bool(self.condition(content_type, body, size))


def _binary_content(content_type: str, body: bytes, size: int) -> bool:
    return is_binary(content_type)


def _base64_payload(content_type: str, body: bytes, size: int) -> bool:
    return size > BASE64_MIN_BODY_SIZE and looks_like_base64(body)


def _large_structured_document(content_type: str, body: bytes, size: int) -> bool:
    return size > SUMMARIZE_THRESHOLD and (is_json(content_type) or is_xml(content_type))


def _large_body(content_type: str, body: bytes, size: int) -> bool:
    return size > TRUNCATE_THRESHOLD


def default_body_rules() -> Tuple[BodyRule, ...]:
    """Built-in rules, in evaluation order."""
    return (
        BodyRule(_binary_content, BodyAction.SKIP, BINARY_BODY_MESSAGE),
        BodyRule(_base64_payload, BodyAction.SKIP, BASE64_BODY_MESSAGE),
        BodyRule(_large_structured_document, BodyAction.SUMMARIZE),
        BodyRule(_large_body, BodyAction.TRUNCATE),
    )


def format_size(size: int) -> str:
    """Human readable size, rounded down to whole units."""
    if size < BYTES_PER_KB:
        return f"{size} bytes"
    if size < BYTES_PER_MB:
        return f"{size // BYTES_PER_KB} KB"
    return f"{size // BYTES_PER_MB} MB"


def summarize_body(body: bytes, content_type: str, size: int) -> str:
    """Describe a body by its size and top-level shape, never its values."""
    summary = f"[Large body - {format_size(size)}]"

    if is_json(content_type):
        try:
            data = json.loads(body)
        except ValueError:
            data = None
        if isinstance(data, dict):
            summary += f" Object with {len(data)} keys"
        elif isinstance(data, list):
            summary += f" Array with {len(data)} items"

    if is_xml(content_type):
        summary += " XML document"

    return summary


def truncation_notice(size: int) -> str:
    return f"\n... [truncated, total: {format_size(size)}]"


class BodyPolicy:
    """Evaluates body rules against a body.

    Args:
        rules: Rules in evaluation order
        max_body_size: Bodies above this size are truncated when no rule
            claims them
    """

    def __init__(self, rules: Sequence[BodyRule], max_body_size: int):
        self.rules = tuple(rules)
        self.max_body_size = max_body_size
        self._fallback = BodyRule(self._over_limit, BodyAction.TRUNCATE)

    def _over_limit(self, content_type: str, body: bytes, size: int) -> bool:
        return size > self.max_body_size

    def evaluate(self, content_type: str, body: bytes, size: int) -> Optional[BodyRule]:
        """Return the first matching rule, or None when none matches."""
        for rule in self.rules:
            if rule.matches(content_type, body, size):
                return rule
        return None

    def decide(self, content_type: str, body: bytes, size: int) -> Optional[BodyRule]:
        """Like ``evaluate``, but oversized unmatched bodies get truncated."""
        rule = self.evaluate(content_type, body, size)
        if rule is None and self._fallback.matches(content_type, body, size):
            return self._fallback
        return rule
