"""
Secret detection by explicit scanning.

``ScanningDetector`` finds the built-in secret shapes with index arithmetic
and character-class checks instead of regular expressions. Every scanner
walks the text once, left to right, and returns the spans to mask; the
detector then stitches the output together in a single join per shape.

The scanners resume exactly where the equivalent expression in
``detectors.default_patterns`` would, so both strategies agree on what gets
masked. Shapes the scanner does not know (custom patterns) are ignored.
"""

import logging
from string import ascii_letters, ascii_lowercase, ascii_uppercase, digits
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .detectors import JWT_MIN_LENGTH, SecretDetector

logger = logging.getLogger(__name__)

Span = Tuple[int, int]

_DIGITS = frozenset(digits)
_ALNUM = frozenset(ascii_letters + digits)
_UPPER_ALNUM = frozenset(ascii_uppercase + digits)
_KEY_VALUE = frozenset(ascii_letters + digits + "-_")
_BEARER_TOKEN = frozenset(ascii_letters + digits + "-._~+/")
_AWS_SECRET = frozenset(ascii_letters + digits + "/+=")
_PEM_LABEL = frozenset(ascii_uppercase + " ")
_ASCII_SPACE = frozenset(" \t\n\r\f\v")
_ASCII_LOWER = str.maketrans(ascii_uppercase, ascii_lowercase)
_QUOTES = "\"'"
_ASSIGN = ":="
_CARD_SEPARATORS = " -"

_PEM_KINDS = ("RSA ", "EC ", "OPENSSH ")
_PEM_BEGIN = "-----BEGIN "
_PEM_END = "-----END "
_PEM_TAIL = "PRIVATE KEY-----"


def _run_end(text: str, start: int, charset: frozenset, limit: Optional[int] = None) -> int:
    """Index just past the run of ``charset`` characters starting at ``start``."""
    end = start
    stop = len(text) if limit is None else min(len(text), start + limit)
    while end < stop and text[end] in charset:
        end += 1
    return end


def _lower(text: str) -> str:
    """Lowercase A-Z only; positions stay aligned with ``text``."""
    return text.translate(_ASCII_LOWER)


def _skip_space(text: str, start: int) -> int:
    end = start
    while end < len(text) and text[end] in _ASCII_SPACE:
        end += 1
    return end


def _exact_run(text: str, start: int, charset: frozenset, length: int) -> bool:
    return _run_end(text, start, charset, length) - start == length


def _assignment_value_start(text: str, pos: int) -> int:
    """Parse ``["']?\\s*[:=]\\s*["']?`` at ``pos``; -1 when absent."""
    if pos < len(text) and text[pos] in _QUOTES:
        pos += 1
    pos = _skip_space(text, pos)
    if pos >= len(text) or text[pos] not in _ASSIGN:
        return -1
    pos = _skip_space(text, pos + 1)
    if pos < len(text) and text[pos] in _QUOTES:
        pos += 1
    return pos


def _has_card_issuer_prefix(text: str, pos: int) -> bool:
    if text.startswith(("4", "34", "37", "36", "38", "6011", "65"), pos):
        return True
    second = text[pos + 1:pos + 2]
    third = text[pos + 2:pos + 3]
    if text.startswith("5", pos) and second in ("1", "2", "3", "4", "5"):
        return True
    return text.startswith("30", pos) and third in ("0", "1", "2", "3", "4", "5")


def scan_bearer_tokens(text: str) -> List[Span]:
    spans: List[Span] = []
    lowered = _lower(text)
    pos = lowered.find("bearer")
    while pos != -1:
        after_label = pos + len("bearer")
        token_start = _skip_space(text, after_label)
        token_end = _run_end(text, token_start, _BEARER_TOKEN)
        if token_start > after_label and token_end > token_start:
            while token_end < len(text) and text[token_end] == "=":
                token_end += 1
            spans.append((token_start, token_end))
            pos = lowered.find("bearer", token_end)
        else:
            pos = lowered.find("bearer", pos + 1)
    return spans


def scan_api_keys(text: str) -> List[Span]:
    """``api_key``/``apikey``/``api-key`` labels followed by a 20+ char value."""
    spans: List[Span] = []
    lowered = _lower(text)
    pos = lowered.find("api")
    while pos != -1:
        label_end = pos + 3
        if label_end < len(text) and text[label_end] in "_-":
            label_end += 1
        resume = pos + 1
        if lowered.startswith("key", label_end):
            value_start = _assignment_value_start(text, label_end + 3)
            if value_start != -1:
                value_end = _run_end(text, value_start, _KEY_VALUE)
                if value_end - value_start >= 20:
                    spans.append((value_start, value_end))
                    resume = value_end
        pos = lowered.find("api", resume)
    return spans


def scan_x_api_key_headers(text: str) -> List[Span]:
    spans: List[Span] = []
    lowered = _lower(text)
    label = "x-api-key:"
    pos = lowered.find(label)
    while pos != -1:
        value_start = _skip_space(text, pos + len(label))
        value_end = _run_end(text, value_start, _KEY_VALUE)
        resume = pos + 1
        if value_end - value_start >= 20:
            spans.append((value_start, value_end))
            resume = value_end
        pos = lowered.find(label, resume)
    return spans


def _scan_fixed_prefix(text: str, prefix: str, charset: frozenset, length: int) -> List[Span]:
    """Literal ``prefix`` followed by exactly ``length`` characters of ``charset``."""
    spans: List[Span] = []
    pos = text.find(prefix)
    while pos != -1:
        body_start = pos + len(prefix)
        if _exact_run(text, body_start, charset, length):
            end = body_start + length
            spans.append((pos, end))
            pos = text.find(prefix, end)
        else:
            pos = text.find(prefix, pos + 1)
    return spans


def scan_aws_access_keys(text: str) -> List[Span]:
    return _scan_fixed_prefix(text, "AKIA", _UPPER_ALNUM, 16)


def scan_google_api_keys(text: str) -> List[Span]:
    return _scan_fixed_prefix(text, "AIza", _KEY_VALUE, 35)


def scan_github_tokens(text: str) -> List[Span]:
    spans: List[Span] = []
    for prefix in ("ghp_", "ghs_"):
        spans.extend(_scan_fixed_prefix(text, prefix, _ALNUM, 36))
    spans.sort()
    return spans


def scan_aws_secret_keys(text: str) -> List[Span]:
    """``aws_secret_access_key`` assignments with a 40 character value."""
    spans: List[Span] = []
    lowered = _lower(text)
    pos = lowered.find("aws")
    while pos != -1:
        cursor = pos + 3
        resume = pos + 1
        matched = True
        for word in ("secret", "access", "key"):
            if cursor < len(text) and text[cursor] in "_-":
                cursor += 1
            if not lowered.startswith(word, cursor):
                matched = False
                break
            cursor += len(word)
        if matched:
            value_start = _assignment_value_start(text, cursor)
            if value_start != -1 and _exact_run(text, value_start, _AWS_SECRET, 40):
                spans.append((value_start, value_start + 40))
                resume = value_start + 40
        pos = lowered.find("aws", resume)
    return spans


def scan_jwts(text: str) -> List[Span]:
    """Three base64url segments starting with ``eyJ``, longer than 50 chars."""
    spans: List[Span] = []
    pos = text.find("eyJ")
    while pos != -1:
        header_end = _run_end(text, pos + 3, _KEY_VALUE)
        resume = pos + 1
        if header_end < len(text) and text[header_end] == ".":
            payload_end = _run_end(text, header_end + 1, _KEY_VALUE)
            if payload_end > header_end + 1 and payload_end < len(text) and text[payload_end] == ".":
                token_end = _run_end(text, payload_end + 1, _KEY_VALUE)
                if token_end - pos >= JWT_MIN_LENGTH:
                    spans.append((pos, token_end))
                resume = token_end
        pos = text.find("eyJ", resume)
    return spans


def _pem_footer_end(text: str, start: int) -> int:
    """End index of the first ``-----END [A-Z ]*PRIVATE KEY-----`` after ``start``."""
    pos = text.find(_PEM_END, start)
    while pos != -1:
        label_start = pos + len(_PEM_END)
        tail = text.find(_PEM_TAIL, label_start)
        if tail == -1:
            return -1
        if all(ch in _PEM_LABEL for ch in text[label_start:tail]):
            return tail + len(_PEM_TAIL)
        pos = text.find(_PEM_END, pos + 1)
    return -1


def scan_private_keys(text: str) -> List[Span]:
    """Whole PEM private key blocks; an unterminated block runs to the end."""
    spans: List[Span] = []
    pos = text.find(_PEM_BEGIN)
    while pos != -1:
        cursor = pos + len(_PEM_BEGIN)
        for kind in _PEM_KINDS:
            if text.startswith(kind + _PEM_TAIL, cursor):
                cursor += len(kind)
                break
        if text.startswith(_PEM_TAIL, cursor):
            header_end = cursor + len(_PEM_TAIL)
            footer_end = _pem_footer_end(text, header_end)
            end = footer_end if footer_end != -1 else len(text)
            spans.append((pos, end))
            pos = text.find(_PEM_BEGIN, end)
        else:
            pos = text.find(_PEM_BEGIN, pos + 1)
    return spans


def _grouped_card_end(text: str, start: int) -> int:
    """Match 4-4-4-(1..7) or 4-6-(4..5) digit groups with one separator."""
    first_end = _run_end(text, start, _DIGITS)
    if first_end - start != 4 or first_end >= len(text):
        return -1
    separator = text[first_end]
    if separator not in _CARD_SEPARATORS:
        return -1

    groups = []
    cursor = first_end
    while cursor < len(text) and text[cursor] == separator and len(groups) < 3:
        group_end = _run_end(text, cursor + 1, _DIGITS)
        if group_end == cursor + 1:
            break
        groups.append(group_end - cursor - 1)
        cursor = group_end

    if len(groups) >= 3 and groups[0] == 4 and groups[1] == 4 and 1 <= groups[2] <= 7:
        return _end_after_groups(first_end, groups[:3])
    if len(groups) >= 2 and groups[0] == 6 and 4 <= groups[1] <= 5:
        return _end_after_groups(first_end, groups[:2])
    return -1


def _end_after_groups(first_end: int, groups: List[int]) -> int:
    return first_end + sum(size + 1 for size in groups)


def scan_credit_cards(text: str) -> List[Span]:
    spans: List[Span] = []
    pos = 0
    while pos < len(text):
        if text[pos] not in _DIGITS or (pos > 0 and text[pos - 1] in _DIGITS):
            pos += 1
            continue

        run_end = _run_end(text, pos, _DIGITS)
        if not _has_card_issuer_prefix(text, pos):
            pos = run_end
            continue

        if 13 <= run_end - pos <= 19:
            spans.append((pos, run_end))
            pos = run_end
            continue

        grouped_end = _grouped_card_end(text, pos)
        if grouped_end != -1:
            spans.append((pos, grouped_end))
            pos = grouped_end
        else:
            pos = run_end
    return spans


SCANNERS: Dict[str, Callable[[str], List[Span]]] = {
    "bearer_token": scan_bearer_tokens,
    "api_key": scan_api_keys,
    "x_api_key": scan_x_api_key_headers,
    "aws_access_key": scan_aws_access_keys,
    "aws_secret_key": scan_aws_secret_keys,
    "google_api_key": scan_google_api_keys,
    "github_token": scan_github_tokens,
    "jwt": scan_jwts,
    "private_key": scan_private_keys,
    "credit_card": scan_credit_cards,
}


class ScanningDetector(SecretDetector):
    """Detector built from hand-written linear scanners.

    Args:
        names: Detector names to enable, applied in the given order
        mask: Replacement text
    """

    def __init__(self, names: Iterable[str], mask: str):
        super().__init__(mask)
        requested = list(names)
        unknown = [name for name in requested if name not in SCANNERS]
        if unknown:
            logger.debug(
                "No scanner for detectors %s; they are skipped by the scan strategy",
                ", ".join(unknown),
            )
        self.names = tuple(name for name in requested if name in SCANNERS)

    def mask_secrets(self, text: str) -> str:
        if not text:
            return text

        result = text
        for name in self.names:
            spans = SCANNERS[name](result)
            if spans:
                result = self._apply(result, spans)
        return result

    def _apply(self, text: str, spans: List[Span]) -> str:
        pieces: List[str] = []
        cursor = 0
        for start, end in spans:
            if start < cursor:
                continue
            pieces.append(text[cursor:start])
            pieces.append(self.mask)
            cursor = end
        pieces.append(text[cursor:])
        return "".join(pieces)
