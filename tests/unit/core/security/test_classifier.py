"""
Tests for body content classification.
"""

import pytest

from scrubwire.core.security.classifier import (
    ContentKind,
    classify,
    is_binary,
    looks_like_base64,
    looks_like_json,
)


@pytest.mark.unit
class TestClassify:
    """Test picking a sanitizer from content type and body."""

    @pytest.mark.parametrize("content_type,expected", [
        ("application/json", ContentKind.JSON),
        ("application/json; charset=utf-8", ContentKind.JSON),
        ("application/vnd.api+json", ContentKind.JSON),
        ("text/xml", ContentKind.XML),
        ("application/soap+xml", ContentKind.XML),
        ("application/x-www-form-urlencoded", ContentKind.FORM_URLENCODED),
        ("multipart/form-data; boundary=xyz", ContentKind.MULTIPART),
        ("image/png", ContentKind.BINARY),
        ("application/octet-stream", ContentKind.BINARY),
        ("APPLICATION/JSON", ContentKind.JSON),
    ])
    def test_declared_content_type(self, content_type, expected):
        """Test that a recognized content type decides the kind."""
        assert classify(content_type, "anything") is expected

    def test_declared_type_wins_over_body(self):
        """Test that a JSON content type is kept even for a non-JSON body."""
        assert classify("application/json", "not json") is ContentKind.JSON

    @pytest.mark.parametrize("body,expected", [
        ('  {"a": 1}  ', ContentKind.JSON),
        ("[1, 2]", ContentKind.JSON),
        ("<a>1</a>", ContentKind.XML),
        ("hello", ContentKind.PLAIN_TEXT),
        ("", ContentKind.PLAIN_TEXT),
    ])
    def test_sniffed_when_type_unknown(self, body, expected):
        """Test body sniffing for empty and unrecognized content types."""
        assert classify("", body) is expected
        assert classify("text/plain", body) is expected

    def test_bytes_body(self):
        """Test sniffing a raw bytes body."""
        assert classify("", b'{"a": 1}') is ContentKind.JSON


@pytest.mark.unit
class TestHeuristics:
    """Test the individual detection helpers."""

    def test_looks_like_json_needs_matching_brackets(self):
        """Test that only {...} and [...] look like JSON."""
        assert looks_like_json('{"a": 1}')
        assert not looks_like_json('{"a": 1]')
        assert not looks_like_json("   ")

    def test_base64_payload(self):
        """Test that long runs of base64 alphabet are recognized."""
        assert looks_like_base64(b"QUJD" * 50)

    def test_base64_with_line_breaks(self):
        """Test that wrapped base64 still counts."""
        assert looks_like_base64((b"QUJD" * 19 + b"\r\n") * 5)

    def test_base64_requires_minimum_sample(self):
        """Test that short bodies are never treated as base64."""
        assert not looks_like_base64(b"a" * 50)

    def test_prose_is_not_base64(self):
        """Test that ordinary text is below the ratio."""
        assert not looks_like_base64(b"hello world! " * 20)

    def test_empty_content_type_is_not_binary(self):
        """Test that a missing content type is not binary."""
        assert not is_binary("")
        assert is_binary("video/mp4")
