"""
Format-aware body sanitizers.

Each sanitizer knows the layout of one body format and masks values by field
name before handing the remaining text to the secret detector. A body that
does not actually parse as its declared format raises ``BodyParseError``; the
caller decides how to degrade.
"""

import json
import re
from typing import Any, Dict, List, Tuple
from urllib.parse import parse_qsl, urlencode

from scrubwire.exceptions import BodyParseError

from .classifier import looks_like_json
from .detectors import SecretDetector
from .fields import FieldMatcher

# Attribute text up to the closing ">", which may appear inside quoted values
_XML_TAG_BODY = r"(?:[^<>\"']|\"[^\"]*\"|'[^']*')*"
_XML_ELEMENT = re.compile(
    r"<(?P<tag>[A-Za-z_][\w:.\-]*)(?P<attrs>" + _XML_TAG_BODY + r")>"
    r"(?:<!\[CDATA\[(?P<cdata>.*?)\]\]>|(?P<text>[^<]+))"
    r"</(?P=tag)\s*>",
    re.IGNORECASE | re.DOTALL,
)
_XML_START_TAG = re.compile(r"<[A-Za-z_]" + _XML_TAG_BODY + r">")
_XML_ATTRIBUTE = re.compile(
    r"(?P<name>[A-Za-z_][\w:.\-]*)(?P<assign>\s*=\s*)(?P<quote>[\"'])(?P<value>.*?)(?P=quote)",
    re.DOTALL,
)

_FORM_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")

_MULTIPART_FIELD_NAME = re.compile(r'\bname="([^"]*)"')
_CONTENT_DISPOSITION = "content-disposition"


class StructuralSanitizer:
    """Masks sensitive values inside JSON, XML, form and multipart bodies.

    Args:
        matcher: Decides which field names are sensitive
        detector: Masks secrets in free text
        mask: Replacement for sensitive values
        max_nesting_depth: How many levels of JSON encoded inside JSON
            strings are unpacked before strings are treated as plain text
    """

    def __init__(
        self,
        matcher: FieldMatcher,
        detector: SecretDetector,
        mask: str,
        max_nesting_depth: int,
    ):
        self.matcher = matcher
        self.detector = detector
        self.mask = mask
        self.max_nesting_depth = max_nesting_depth

    def sanitize_text(self, text: str) -> str:
        return self.detector.mask_secrets(text)

    # JSON

    def sanitize_json(self, text: str) -> str:
        """Sanitize a JSON document and pretty-print the result."""
        data = self._load_json(text)
        return json.dumps(self._sanitize_value(data, 0), indent=2, ensure_ascii=False)

    def _load_json(self, text: str) -> Any:
        try:
            return json.loads(text)
        except ValueError as e:
            raise BodyParseError("json", str(e)) from e

    def _sanitize_value(self, value: Any, depth: int) -> Any:
        if isinstance(value, dict):
            return {
                key: self.mask if self.matcher.is_sensitive_field(key) else self._sanitize_value(item, depth)
                for key, item in value.items()
            }
        if isinstance(value, list):
            return [self._sanitize_value(item, depth) for item in value]
        if isinstance(value, str):
            return self._sanitize_string(value, depth)
        return value

    def _sanitize_string(self, value: str, depth: int) -> str:
        if depth < self.max_nesting_depth and looks_like_json(value):
            try:
                nested = json.loads(value)
            except ValueError:
                return self.sanitize_text(value)
            return json.dumps(self._sanitize_value(nested, depth + 1), ensure_ascii=False)
        return self.sanitize_text(value)

    # XML

    def sanitize_xml(self, text: str) -> str:
        """Mask sensitive element text and attribute values, then scan."""
        result = _XML_ELEMENT.sub(self._replace_element, text)
        result = _XML_START_TAG.sub(self._replace_attributes, result)
        return self.sanitize_text(result)

    def _replace_element(self, match: re.Match) -> str:
        if not self.matcher.is_sensitive_field(match.group("tag")):
            return match.group(0)
        value = "text" if match.group("cdata") is None else "cdata"
        start, end = match.span(value)
        offset = match.start()
        whole = match.group(0)
        return whole[:start - offset] + self.mask + whole[end - offset:]

    def _replace_attributes(self, match: re.Match) -> str:
        return _XML_ATTRIBUTE.sub(self._replace_attribute, match.group(0))

    def _replace_attribute(self, match: re.Match) -> str:
        if not self.matcher.is_sensitive_field(match.group("name")):
            return match.group(0)
        quote = match.group("quote")
        return match.group("name") + match.group("assign") + quote + self.mask + quote

    # Form URL-encoded

    def sanitize_form(self, text: str) -> str:
        """Sanitize ``application/x-www-form-urlencoded`` data, keeping key order."""
        fields = self._parse_form(text)

        pairs: List[Tuple[str, str]] = []
        for key, values in fields.items():
            if self.matcher.is_sensitive_field(key):
                pairs.append((key, self.mask))
            else:
                pairs.extend((key, self.sanitize_text(value)) for value in values)

        return urlencode(pairs, safe="*")

    def _parse_form(self, text: str) -> Dict[str, List[str]]:
        if ";" in text:
            raise BodyParseError("form", "semicolon separator")
        if _FORM_BAD_ESCAPE.search(text):
            raise BodyParseError("form", "invalid percent escape")

        fields: Dict[str, List[str]] = {}
        try:
            pairs = parse_qsl(text, keep_blank_values=True, errors="strict")
        except (ValueError, UnicodeDecodeError) as e:
            raise BodyParseError("form", str(e)) from e

        for key, value in pairs:
            fields.setdefault(key, []).append(value)
        return fields

    # Multipart

    def sanitize_multipart(self, text: str) -> str:
        """Mask the content lines of sensitive ``multipart/form-data`` parts."""
        result = []
        in_sensitive_field = False

        for line in text.split("\n"):
            if _CONTENT_DISPOSITION in line.lower():
                name = _MULTIPART_FIELD_NAME.search(line)
                if name:
                    in_sensitive_field = self.matcher.is_sensitive_field(name.group(1))
                result.append(line)
            elif line.startswith("--"):
                in_sensitive_field = False
                result.append(line)
            elif in_sensitive_field and line.strip() and not line.startswith("Content-"):
                result.append(self.mask + ("\r" if line.endswith("\r") else ""))
            else:
                result.append(line)

        return "\n".join(result)
