"""
Tests for the logging transport adapter.
"""

import io
import json
from unittest.mock import Mock

import pytest
import requests

from scrubwire.constants import (
    DEFAULT_MASK,
    ERROR_LOG_MESSAGE,
    REQUEST_LOG_MESSAGE,
    RESPONSE_LOG_MESSAGE,
)
from scrubwire.core.security import HeaderMaskMode, SanitizerConfig
from scrubwire.exceptions import BodyReadError
from scrubwire.infrastructure.http import (
    InterceptorConfig,
    LoggingAdapter,
    default_should_log_body,
    install_logging,
)
from scrubwire.infrastructure.http.interceptor import read_body
from scrubwire.logging import ScrubLogger

MASK = DEFAULT_MASK
LOGIN_URL = "https://api.example.com/v1/login?token=abc&page=1"


@pytest.fixture
def adapter(inner_adapter, mock_logger):
    return LoggingAdapter(inner_adapter, InterceptorConfig(logger=mock_logger))


@pytest.fixture
def login_request(prepare_request):
    return prepare_request(
        "POST",
        LOGIN_URL,
        headers={"Authorization": "Bearer abcdefghijklmnop", "Content-Type": "application/json"},
        data=b'{"username": "bob", "password": "hunter2"}',
    )


def logged_fields(log_method, index=-1):
    args, kwargs = log_method.call_args_list[index]
    return args[0], kwargs


@pytest.mark.unit
class TestRequestLogging:
    """Test the request log entry."""

    def test_delegates_to_inner_adapter(self, adapter, inner_adapter, login_request):
        """Test that the inner adapter gets the request and its arguments."""
        response = adapter.send(login_request, timeout=5, verify=True)

        inner_adapter.send.assert_called_once_with(login_request, timeout=5, verify=True)
        assert response is inner_adapter.send.return_value

    def test_request_fields(self, adapter, mock_logger, login_request):
        """Test that the request entry is sanitized and ordered."""
        adapter.send(login_request)

        message, fields = logged_fields(mock_logger.info, 0)
        assert message == REQUEST_LOG_MESSAGE
        assert list(fields) == ["method", "url", "host", "headers", "body"]
        assert fields["method"] == "POST"
        assert fields["url"] == f"https://api.example.com/v1/login?token={MASK}&page=1"
        assert fields["host"] == "api.example.com"
        assert fields["headers"]["Authorization"] == f"Bear{MASK}mnop"
        assert fields["headers"]["Content-Type"] == "application/json"
        assert json.loads(fields["body"]) == {"username": "bob", "password": MASK}

    def test_verbose_fields(self, inner_adapter, mock_logger, login_request):
        """Test the extra path and query fields."""
        adapter = LoggingAdapter(inner_adapter, InterceptorConfig(logger=mock_logger, verbose=True))

        adapter.send(login_request)

        _, fields = logged_fields(mock_logger.info, 0)
        assert fields["path"] == "/v1/login"
        assert fields["query"] == f"token={MASK}&page=1"

    def test_credentials_not_in_host(self, adapter, mock_logger, prepare_request):
        adapter.send(prepare_request("GET", "https://user:pw@api.example.com/"))

        _, fields = logged_fields(mock_logger.info, 0)
        assert fields["host"] == "api.example.com"
        assert fields["url"] == f"https://{MASK}@api.example.com/"

    def test_header_and_body_logging_can_be_disabled(self, inner_adapter, mock_logger, login_request):
        body = login_request.body
        config = InterceptorConfig(logger=mock_logger, log_headers=False, log_request_body=False)

        LoggingAdapter(inner_adapter, config).send(login_request)

        _, fields = logged_fields(mock_logger.info, 0)
        assert "headers" not in fields
        assert "body" not in fields
        assert login_request.body is body

    def test_body_predicate_placeholder(self, inner_adapter, mock_logger, login_request):
        """Test the size placeholder when the body predicate declines."""
        config = InterceptorConfig(logger=mock_logger, should_log_body=lambda req, ct, size: False)

        LoggingAdapter(inner_adapter, config).send(login_request)

        _, fields = logged_fields(mock_logger.info, 0)
        assert fields["body"] == "[Body not logged - size: 42 bytes]"

    def test_default_config_skips_binary_bodies(self, inner_adapter, mock_logger, prepare_request):
        request = prepare_request("PUT", "https://api.example.com/img", data=b"\x89PNG",
                                  headers={"Content-Type": "image/png"})

        LoggingAdapter(inner_adapter, InterceptorConfig.default(mock_logger)).send(request)

        _, fields = logged_fields(mock_logger.info, 0)
        assert fields["body"] == "[Body not logged - size: 4 bytes]"

    def test_should_log_false_bypasses_logging(self, inner_adapter, mock_logger, login_request):
        """Test that excluded requests are passed through silently."""
        config = InterceptorConfig(logger=mock_logger, should_log=lambda request: False)

        LoggingAdapter(inner_adapter, config).send(login_request)

        inner_adapter.send.assert_called_once()
        mock_logger.info.assert_not_called()
        mock_logger.debug.assert_not_called()
        mock_logger.error.assert_not_called()

    def test_sanitizer_config_is_used(self, inner_adapter, mock_logger, login_request):
        sanitizer_config = SanitizerConfig(mask="[x]", header_mask_mode=HeaderMaskMode.FULL)
        config = InterceptorConfig(logger=mock_logger, sanitizer_config=sanitizer_config)

        LoggingAdapter(inner_adapter, config).send(login_request)

        _, fields = logged_fields(mock_logger.info, 0)
        assert fields["headers"]["Authorization"] == "[x]"
        assert json.loads(fields["body"])["password"] == "[x]"


@pytest.mark.unit
class TestRequestBodyRestoration:
    """Test that buffered request bodies are handed back intact."""

    def test_bytes_body_unchanged(self, adapter, inner_adapter, login_request):
        body = login_request.body

        adapter.send(login_request)

        sent = inner_adapter.send.call_args[0][0]
        assert sent.body == body

    def test_file_body_restored(self, adapter, inner_adapter, mock_logger, prepare_request):
        """Test that a file-like body is replaced by an equivalent stream."""
        request = prepare_request(
            "POST", "https://api.example.com/form",
            data=io.BytesIO(b"token=abc&city=Paris"),
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )

        adapter.send(request)

        sent = inner_adapter.send.call_args[0][0]
        assert sent.body.read() == b"token=abc&city=Paris"
        _, fields = logged_fields(mock_logger.info, 0)
        assert fields["body"] == f"token={MASK}&city=Paris"

    def test_iterable_body_restored(self, adapter, inner_adapter, mock_logger, prepare_request):
        """Test that a generator body is replaced by an equivalent iterable."""
        request = prepare_request(
            "POST", "https://api.example.com/upload",
            data=(chunk for chunk in [b"ab", b"cd"]),
        )

        adapter.send(request)

        sent = inner_adapter.send.call_args[0][0]
        assert list(sent.body) == [b"abcd"]
        _, fields = logged_fields(mock_logger.info, 0)
        assert fields["body"] == "abcd"

    def test_unreadable_body(self, adapter, inner_adapter, mock_logger, prepare_request):
        """Test that a failing stream is reported and the request still sent."""
        stream = Mock()
        stream.read.side_effect = OSError("stream closed")
        request = prepare_request("POST", "https://api.example.com/upload")
        request.body = stream

        adapter.send(request)

        inner_adapter.send.assert_called_once()
        mock_logger.debug.assert_any_call("Request body could not be buffered",
                                          error="Could not read request body: stream closed")

    def test_read_body_shapes(self):
        """Test read_body for each supported body type."""
        assert read_body(None) == (b"", None)
        assert read_body(b"abc") == (b"abc", b"abc")
        assert read_body("é") == ("é".encode("utf-8"), "é")

        data, replacement = read_body(io.StringIO("text"))
        assert data == b"text"
        assert replacement.read() == b"text"

        data, replacement = read_body([b"a", "b", None])
        assert data == b"ab"
        assert list(replacement) == [b"ab"]

    def test_read_body_errors(self):
        with pytest.raises(BodyReadError):
            read_body([b"a", 5.5])


@pytest.mark.unit
class TestResponseLogging:
    """Test the response log entry."""

    def test_response_fields(self, adapter, inner_adapter, mock_logger, login_request, make_response):
        inner_adapter.send.return_value = make_response(
            200, b'{"ok": true, "access_token": "tok"}',
            {"Content-Type": "application/json", "Set-Cookie": "session=abcdefghijkl"},
        )

        adapter.send(login_request)

        message, fields = logged_fields(mock_logger.debug)
        assert message == RESPONSE_LOG_MESSAGE
        assert list(fields) == ["method", "url", "status", "status_text", "duration_ms", "headers", "body"]
        assert fields["status"] == 200
        assert fields["status_text"] == "OK"
        assert fields["url"] == f"https://api.example.com/v1/login?token={MASK}&page=1"
        assert isinstance(fields["duration_ms"], int) and fields["duration_ms"] >= 0
        assert fields["headers"]["Set-Cookie"] == f"sess{MASK}ijkl"
        assert json.loads(fields["body"]) == {"ok": True, "access_token": MASK}

    def test_response_body_still_readable(self, adapter, inner_adapter, login_request):
        """Test that the caller can read a streamed response body after logging."""
        response = requests.Response()
        response.status_code = 200
        response.raw = io.BytesIO(b'{"a": 1}')
        inner_adapter.send.return_value = response

        result = adapter.send(login_request)

        assert result.json() == {"a": 1}
        assert result.content == b'{"a": 1}'

    def test_unreadable_response_body(self, adapter, inner_adapter, mock_logger, login_request):
        response = requests.Response()
        response.status_code = 200
        response.raw = Mock(spec=["read"])
        response.raw.read.side_effect = OSError("reset")
        inner_adapter.send.return_value = response

        result = adapter.send(login_request)

        assert result is response
        _, fields = logged_fields(mock_logger.debug)
        assert "body" not in fields

    def test_verbose_content_length(self, inner_adapter, mock_logger, login_request, make_response):
        inner_adapter.send.return_value = make_response(200, b"x" * 2048, {"Content-Length": "2048"})
        adapter = LoggingAdapter(inner_adapter, InterceptorConfig(logger=mock_logger, verbose=True))

        adapter.send(login_request)

        _, fields = logged_fields(mock_logger.debug)
        assert fields["content_length"] == "2 KB"

    def test_response_body_logging_disabled(self, inner_adapter, mock_logger, login_request, make_response):
        inner_adapter.send.return_value = make_response(200, b"secret stuff")
        config = InterceptorConfig(logger=mock_logger, log_response_body=False)

        LoggingAdapter(inner_adapter, config).send(login_request)

        _, fields = logged_fields(mock_logger.debug)
        assert "body" not in fields

    @pytest.mark.parametrize("status,level", [
        (200, "debug"),
        (302, "debug"),
        (404, "info"),
        (499, "info"),
        (500, "error"),
        (503, "error"),
    ])
    def test_log_level_by_status(self, adapter, inner_adapter, mock_logger, login_request,
                                 make_response, status, level):
        """Test that the response level follows the status class."""
        inner_adapter.send.return_value = make_response(status)

        adapter.send(login_request)

        message, fields = logged_fields(getattr(mock_logger, level))
        assert message == RESPONSE_LOG_MESSAGE
        assert fields["status"] == status


@pytest.mark.unit
class TestErrorLogging:
    """Test transport failures."""

    def test_error_logged_and_reraised(self, adapter, inner_adapter, mock_logger, login_request):
        error = requests.ConnectionError("connection refused")
        inner_adapter.send.side_effect = error

        with pytest.raises(requests.ConnectionError) as exc_info:
            adapter.send(login_request)

        assert exc_info.value is error
        message, fields = logged_fields(mock_logger.error)
        assert message == ERROR_LOG_MESSAGE
        assert list(fields) == ["method", "url", "error", "duration_ms"]
        assert fields["error"] == "connection refused"
        assert fields["url"] == f"https://api.example.com/v1/login?token={MASK}&page=1"

    def test_error_text_is_sanitized(self, adapter, inner_adapter, mock_logger, prepare_request):
        """Test that secrets quoted in the error message are masked."""
        request = prepare_request("GET", "https://api.example.com/v1?token=abc123")
        inner_adapter.send.side_effect = requests.ConnectionError(
            "Max retries exceeded with url: /v1?token=abc123 (Bearer abcdefghijkl)"
        )

        with pytest.raises(requests.ConnectionError):
            adapter.send(request)

        _, fields = logged_fields(mock_logger.error)
        assert "abc123" not in fields["error"]
        assert "abcdefghijkl" not in fields["error"]
        assert f"token={MASK}" in fields["error"]

    def test_error_without_message(self, adapter, inner_adapter, mock_logger, login_request):
        inner_adapter.send.side_effect = TimeoutError()

        with pytest.raises(TimeoutError):
            adapter.send(login_request)

        _, fields = logged_fields(mock_logger.error)
        assert fields["error"] == "TimeoutError"


@pytest.mark.unit
class TestAdapterComposition:
    """Test adapter construction helpers."""

    def test_defaults(self):
        adapter = LoggingAdapter()

        assert isinstance(adapter.next_adapter, requests.adapters.HTTPAdapter)
        assert isinstance(adapter.logger, ScrubLogger)
        assert adapter.logger.name == "scrubwire.http"

    def test_with_logger(self, adapter, inner_adapter):
        other = Mock(spec=["debug", "info", "error"])

        derived = adapter.with_logger(other)

        assert derived is not adapter
        assert derived.next_adapter is inner_adapter
        assert derived.logger is other
        assert adapter.logger is not other

    def test_without_body_logging(self, adapter, inner_adapter, mock_logger, login_request):
        derived = adapter.without_body_logging()

        derived.send(login_request)

        assert derived.next_adapter is inner_adapter
        assert adapter.interceptor_config.log_request_body is True
        _, fields = logged_fields(mock_logger.info, 0)
        assert "body" not in fields

    def test_close_closes_inner(self, adapter, inner_adapter):
        adapter.close()

        inner_adapter.close.assert_called_once()

    def test_install_logging(self, mock_logger):
        session = requests.Session()

        install_logging(session, InterceptorConfig(logger=mock_logger))
        install_logging(session, InterceptorConfig(logger=mock_logger))

        for prefix in ("http://", "https://"):
            mounted = session.adapters[prefix]
            assert isinstance(mounted, LoggingAdapter)
            assert not isinstance(mounted.next_adapter, LoggingAdapter)

    def test_default_should_log_body(self, prepare_request):
        request = prepare_request()

        assert default_should_log_body(request, "application/json", 100)
        assert not default_should_log_body(request, "application/pdf", 100)
        assert not default_should_log_body(request, "text/plain", 11 * 1024 * 1024)


@pytest.mark.unit
class TestDumps:
    """Test sanitized request and response dumps."""

    def test_dump_request(self, adapter, prepare_request):
        request = prepare_request(
            "POST", "https://api.example.com/v1?token=abc",
            headers={"Authorization": "Bearer abcdefghijklmnop", "Content-Type": "application/json"},
            data=b'{"secret": "s"}',
        )

        dump = adapter.dump_request(request)

        head, body = dump.split("\r\n\r\n", 1)
        lines = head.split("\r\n")
        assert lines[0] == f"POST /v1?token={MASK} HTTP/1.1"
        assert lines[1] == "Host: api.example.com"
        assert f"Authorization: Bear{MASK}mnop" in lines
        assert json.loads(body) == {"secret": MASK}
        assert request.body == b'{"secret": "s"}'

    def test_dump_response(self, adapter, make_response):
        response = make_response(201, b'{"token": "abc"}', {"Content-Type": "application/json"},
                                 reason="Created")

        dump = adapter.dump_response(response)

        assert dump.startswith("HTTP/1.1 201 Created\r\nContent-Type: application/json\r\n\r\n")
        assert json.loads(dump.split("\r\n\r\n", 1)[1]) == {"token": MASK}
