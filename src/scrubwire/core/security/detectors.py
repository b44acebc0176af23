"""
Secret detection over free text.

Defines the detector contract, the built-in secret shapes and the regular
expression strategy. ``scanning.ScanningDetector`` is the hand-written
alternative; both must reach the same masking decisions.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence, Tuple


class DetectionStrategy(str, Enum):
    """How free text is searched for secrets."""

    PATTERN = "pattern"
    SCAN = "scan"


# Issuer prefixes: Visa, MasterCard, Amex, Diners, Discover
CARD_ISSUER_PREFIX = r"(?:4|5[1-5]|3[47]|30[0-5]|3[68]|6011|65)"

JWT_MIN_LENGTH = 51


@dataclass(frozen=True)
class SecretPattern:
    """A named secret shape.

    Text matched by the optional ``prefix`` group is kept, the rest of the
    match is replaced with the mask. ``validator`` receives the secret part
    and can veto a match.
    """

    name: str
    regex: re.Pattern
    validator: Optional[Callable[[str], bool]] = None

    @classmethod
    def compile(
        cls,
        name: str,
        pattern: str,
        flags: int = 0,
        validator: Optional[Callable[[str], bool]] = None,
    ) -> "SecretPattern":
        return cls(name=name, regex=re.compile(pattern, flags), validator=validator)


# Labels match ASCII case-insensitively; \s is ASCII whitespace
_ASCII_IGNORECASE = re.IGNORECASE | re.ASCII


def _long_enough_for_jwt(token: str) -> bool:
    return len(token) >= JWT_MIN_LENGTH


def default_patterns() -> Tuple[SecretPattern, ...]:
    """Built-in detectors, in application order."""
    return (
        SecretPattern.compile(
            "bearer_token",
            r"(?P<prefix>bearer\s+)[A-Za-z0-9\-._~+/]+=*",
            _ASCII_IGNORECASE,
        ),
        SecretPattern.compile(
            "api_key",
            r"(?P<prefix>api[_-]?key[\"']?\s*[:=]\s*[\"']?)[A-Za-z0-9\-_]{20,}",
            _ASCII_IGNORECASE,
        ),
        SecretPattern.compile(
            "x_api_key",
            r"(?P<prefix>x-api-key:\s*)[A-Za-z0-9\-_]{20,}",
            _ASCII_IGNORECASE,
        ),
        SecretPattern.compile("aws_access_key", r"AKIA[0-9A-Z]{16}"),
        SecretPattern.compile(
            "aws_secret_key",
            r"(?P<prefix>aws[_-]?secret[_-]?access[_-]?key[\"']?\s*[:=]\s*[\"']?)"
            r"[A-Za-z0-9/+=]{40}",
            _ASCII_IGNORECASE,
        ),
        SecretPattern.compile("google_api_key", r"AIza[0-9A-Za-z\-_]{35}"),
        SecretPattern.compile("github_token", r"gh[ps]_[A-Za-z0-9]{36}"),
        SecretPattern.compile(
            "jwt",
            r"eyJ[A-Za-z0-9_-]*\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]*",
            validator=_long_enough_for_jwt,
        ),
        SecretPattern.compile(
            "private_key",
            r"-----BEGIN (?:RSA |EC |OPENSSH )?PRIVATE KEY-----"
            r"(?:.*?-----END [A-Z ]*PRIVATE KEY-----|.*\Z)",
            re.DOTALL,
        ),
        SecretPattern.compile(
            "credit_card",
            r"(?<![0-9])(?=" + CARD_ISSUER_PREFIX + r")"
            r"(?:[0-9]{13,19}"
            r"|[0-9]{4}(?P<sep>[ -])[0-9]{4}(?P=sep)[0-9]{4}(?P=sep)[0-9]{1,7}"
            r"|[0-9]{4}(?P<amex_sep>[ -])[0-9]{6}(?P=amex_sep)[0-9]{4,5})"
            r"(?![0-9])",
        ),
    )


BUILTIN_PATTERN_NAMES = frozenset(pattern.name for pattern in default_patterns())


class SecretDetector(ABC):
    """Contract: replace every detected secret in ``text`` with the mask."""

    def __init__(self, mask: str):
        self.mask = mask

    @abstractmethod
    def mask_secrets(self, text: str) -> str:
        """Return ``text`` with secrets masked."""


class RegexDetector(SecretDetector):
    """Detector backed by compiled regular expressions."""

    def __init__(self, patterns: Sequence[SecretPattern], mask: str):
        super().__init__(mask)
        self.patterns = tuple(patterns)

    def mask_secrets(self, text: str) -> str:
        if not text:
            return text

        result = text
        for pattern in self.patterns:
            result = pattern.regex.sub(self._replacer(pattern), result)
        return result

    def _replacer(self, pattern: SecretPattern) -> Callable[[re.Match], str]:
        mask = self.mask

        def replace(match: re.Match) -> str:
            matched = match.group(0)
            prefix = match.groupdict().get("prefix") or ""
            if pattern.validator is not None and not pattern.validator(matched[len(prefix):]):
                return matched
            return prefix + mask

        return replace
