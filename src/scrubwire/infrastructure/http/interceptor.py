"""
Logging transport adapter for ``requests``.

``LoggingAdapter`` sits between a ``requests.Session`` and the adapter that
actually talks to the network. For every call it logs the sanitized request,
delegates, and logs the sanitized response or the transport error. Bodies
are buffered and handed back in an equivalent form, so neither the inner
adapter nor the caller notice the interception.
"""

import io
import time
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Union
from urllib.parse import urlsplit

import requests
from pydantic import BaseModel, ConfigDict, Field
from requests.adapters import BaseAdapter, HTTPAdapter

from scrubwire.constants import (
    ERROR_LOG_MESSAGE,
    HTTP_STATUS_CLIENT_ERROR,
    HTTP_STATUS_SERVER_ERROR,
    MAX_LOGGED_BODY_SIZE,
    REQUEST_LOG_MESSAGE,
    RESPONSE_LOG_MESSAGE,
)
from scrubwire.core.security import Sanitizer, SanitizerConfig, format_size
from scrubwire.core.security.classifier import is_binary
from scrubwire.exceptions import BodyReadError
from scrubwire.logging import ScrubLogger

DEFAULT_LOGGER_NAME = "scrubwire.http"

RequestPredicate = Callable[[requests.PreparedRequest], bool]
BodyPredicate = Callable[[requests.PreparedRequest, str, int], bool]


class Logger(Protocol):
    """Anything that accepts a message plus ordered structured fields."""

    def debug(self, msg: str, **fields: Any) -> None: ...

    def info(self, msg: str, **fields: Any) -> None: ...

    def error(self, msg: str, **fields: Any) -> None: ...


def log_all_requests(request: requests.PreparedRequest) -> bool:
    return True


def default_should_log_body(request: requests.PreparedRequest, content_type: str, size: int) -> bool:
    """Skip binary content and bodies larger than 10 MB."""
    return not is_binary(content_type) and size <= MAX_LOGGED_BODY_SIZE


class InterceptorConfig(BaseModel):
    """What the logging adapter records and where.

    ``InterceptorConfig()`` logs headers and every body; ``default()`` adds
    the predicates that keep binary and very large bodies out of the log.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    logger: Optional[Any] = Field(None, description="Logger; a ScrubLogger when unset")
    sanitizer_config: Optional[SanitizerConfig] = Field(
        None, description="Sanitizer settings; built-in defaults when unset"
    )
    log_request_body: bool = Field(True, description="Log request bodies")
    log_response_body: bool = Field(True, description="Log response bodies")
    log_headers: bool = Field(True, description="Log request and response headers")
    should_log: Optional[RequestPredicate] = Field(
        None, description="Return False to pass a request through unlogged"
    )
    should_log_body: Optional[BodyPredicate] = Field(
        None, description="Return False to log a size placeholder instead of the body"
    )
    verbose: bool = Field(False, description="Add path, query and content length fields")

    @classmethod
    def default(cls, logger: Optional[Logger] = None) -> "InterceptorConfig":
        return cls(
            logger=logger,
            should_log=log_all_requests,
            should_log_body=default_should_log_body,
        )

    @staticmethod
    def host_filter(exclude_hosts: Iterable[str]) -> RequestPredicate:
        """Predicate that skips requests to any of ``exclude_hosts``."""
        excluded = frozenset(host.lower() for host in exclude_hosts)
        if not excluded:
            return log_all_requests

        def should_log(request: requests.PreparedRequest) -> bool:
            host = (urlsplit(request.url or "").hostname or "").lower()
            return host not in excluded

        return should_log

    @staticmethod
    def body_size_filter(max_size: int) -> BodyPredicate:
        """Predicate that skips binary content and bodies above ``max_size``."""
        if max_size == MAX_LOGGED_BODY_SIZE:
            return default_should_log_body

        def should_log_body(request: requests.PreparedRequest, content_type: str, size: int) -> bool:
            return not is_binary(content_type) and size <= max_size

        return should_log_body


class LoggingAdapter(HTTPAdapter):
    """Transport adapter that logs sanitized traffic of an inner adapter.

    Args:
        next_adapter: Adapter that performs the request; a plain
            ``HTTPAdapter`` when omitted
        config: Interceptor settings; ``InterceptorConfig()`` when omitted
    """

    def __init__(
        self,
        next_adapter: Optional[BaseAdapter] = None,
        config: Optional[InterceptorConfig] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.next_adapter = next_adapter if next_adapter is not None else HTTPAdapter()
        self.interceptor_config = config if config is not None else InterceptorConfig()
        self.logger = self.interceptor_config.logger or ScrubLogger(DEFAULT_LOGGER_NAME)
        self.sanitizer = Sanitizer(self.interceptor_config.sanitizer_config)

    def send(self, request: requests.PreparedRequest, **kwargs) -> requests.Response:
        config = self.interceptor_config
        if config.should_log is not None and not config.should_log(request):
            return self.next_adapter.send(request, **kwargs)

        start = time.monotonic()
        self._log_request(request)

        try:
            response = self.next_adapter.send(request, **kwargs)
        except Exception as e:
            self._log_error(request, e, self._elapsed_ms(start))
            raise

        self._log_response(request, response, self._elapsed_ms(start))
        return response

    def close(self) -> None:
        self.next_adapter.close()
        super().close()

    def with_logger(self, logger: Logger) -> "LoggingAdapter":
        """New adapter sharing the inner transport, logging to ``logger``."""
        config = self.interceptor_config.model_copy(update={"logger": logger})
        return LoggingAdapter(self.next_adapter, config)

    def without_body_logging(self) -> "LoggingAdapter":
        """New adapter sharing the inner transport that never logs bodies."""
        config = self.interceptor_config.model_copy(
            update={"log_request_body": False, "log_response_body": False}
        )
        return LoggingAdapter(self.next_adapter, config)

    @staticmethod
    def _elapsed_ms(start: float) -> int:
        return int((time.monotonic() - start) * 1000)

    # Request side

    def _log_request(self, request: requests.PreparedRequest) -> None:
        config = self.interceptor_config
        parts = urlsplit(request.url or "")

        fields: Dict[str, Any] = {
            "method": request.method,
            "url": self.sanitizer.sanitize_url(request.url or ""),
            "host": parts.netloc.rpartition("@")[2],
        }

        if config.verbose:
            fields["path"] = parts.path
            if parts.query:
                fields["query"] = self.sanitizer.sanitize_query(parts.query)

        if config.log_headers:
            headers = self.sanitizer.sanitize_headers(request.headers)
            if headers:
                fields["headers"] = headers

        if config.log_request_body and request.body is not None:
            body = self._read_request_body(request)
            if body:
                fields["body"] = self._body_field(request, body, request.headers.get("Content-Type", ""))

        self.logger.info(REQUEST_LOG_MESSAGE, **fields)

    def _read_request_body(self, request: requests.PreparedRequest) -> bytes:
        """Buffer the request body and put an equivalent one back."""
        try:
            body, restored = read_body(request.body)
        except BodyReadError as e:
            self.logger.debug("Request body could not be buffered", error=e.message)
            return b""
        request.body = restored
        return body

    def _body_field(self, request: requests.PreparedRequest, body: bytes, content_type: str) -> str:
        should_log_body = self.interceptor_config.should_log_body
        if should_log_body is not None and not should_log_body(request, content_type, len(body)):
            return f"[Body not logged - size: {format_size(len(body))}]"
        return self.sanitizer.sanitize_body(body, content_type)

    # Response side

    def _log_response(
        self, request: requests.PreparedRequest, response: requests.Response, duration_ms: int
    ) -> None:
        config = self.interceptor_config
        status = response.status_code

        fields: Dict[str, Any] = {
            "method": request.method,
            "url": self.sanitizer.sanitize_url(request.url or ""),
            "status": status,
            "status_text": response.reason,
            "duration_ms": duration_ms,
        }

        if config.verbose:
            content_length = _content_length(response)
            if content_length:
                fields["content_length"] = format_size(content_length)

        if config.log_headers:
            headers = self.sanitizer.sanitize_headers(response.headers)
            if headers:
                fields["headers"] = headers

        if config.log_response_body:
            body = self._read_response_body(response)
            if body:
                fields["body"] = self._body_field(request, body, response.headers.get("Content-Type", ""))

        if status >= HTTP_STATUS_SERVER_ERROR:
            self.logger.error(RESPONSE_LOG_MESSAGE, **fields)
        elif status >= HTTP_STATUS_CLIENT_ERROR:
            self.logger.info(RESPONSE_LOG_MESSAGE, **fields)
        else:
            self.logger.debug(RESPONSE_LOG_MESSAGE, **fields)

    def _read_response_body(self, response: requests.Response) -> bytes:
        try:
            return response.content or b""
        except (requests.RequestException, OSError) as e:
            self.logger.debug("Response body could not be buffered", error=str(e))
            return b""

    # Errors

    def _log_error(self, request: requests.PreparedRequest, error: Exception, duration_ms: int) -> None:
        self.logger.error(
            ERROR_LOG_MESSAGE,
            method=request.method,
            url=self.sanitizer.sanitize_url(request.url or ""),
            error=self._sanitize_error(request, error),
            duration_ms=duration_ms,
        )

    def _sanitize_error(self, request: requests.PreparedRequest, error: Exception) -> str:
        text = str(error) or error.__class__.__name__
        url = request.url or ""
        if url:
            text = text.replace(url, self.sanitizer.sanitize_url(url))
            parts = urlsplit(url)
            if parts.query:
                text = text.replace(parts.query, self.sanitizer.sanitize_query(parts.query))
        return self.sanitizer.mask_secrets(text)

    # Debug dumps

    def dump_request(self, request: requests.PreparedRequest) -> str:
        """Sanitized textual dump: request line, headers and body."""
        parts = urlsplit(request.url or "")
        target = parts.path or "/"
        if parts.query:
            target += "?" + self.sanitizer.sanitize_query(parts.query)

        lines = [f"{request.method} {target} HTTP/1.1", f"Host: {parts.netloc.rpartition('@')[2]}"]
        lines.extend(_header_lines(self.sanitizer.sanitize_headers(request.headers)))

        body = b""
        if request.body is not None:
            body = self._read_request_body(request)
        return _join_dump(lines, self.sanitizer.sanitize_body(body, request.headers.get("Content-Type", "")))

    def dump_response(self, response: requests.Response) -> str:
        """Sanitized textual dump: status line, headers and body."""
        lines = [f"HTTP/1.1 {response.status_code} {response.reason or ''}".rstrip()]
        lines.extend(_header_lines(self.sanitizer.sanitize_headers(response.headers)))
        body = self._read_response_body(response)
        return _join_dump(lines, self.sanitizer.sanitize_body(body, response.headers.get("Content-Type", "")))


def read_body(body: Union[bytes, str, Any, None]):
    """Read a request body of any shape ``requests`` allows.

    Returns:
        ``(data, replacement)``: the buffered bytes and an equivalent body
        to put back on the request

    Raises:
        BodyReadError: If a stream or iterable fails while being read
    """
    if body is None:
        return b"", None
    if isinstance(body, (bytes, bytearray)):
        return bytes(body), body
    if isinstance(body, str):
        return body.encode("utf-8"), body

    if hasattr(body, "read"):
        try:
            data = body.read()
        except (OSError, ValueError) as e:
            raise BodyReadError("request", str(e)) from e
        data = _to_bytes(data)
        return data, io.BytesIO(data)

    try:
        chunks: List[bytes] = [_to_bytes(chunk) for chunk in body]
    except (OSError, ValueError, TypeError) as e:
        raise BodyReadError("request", str(e)) from e
    data = b"".join(chunks)
    return data, iter([data])


def _to_bytes(chunk: Union[bytes, str, None]) -> bytes:
    if chunk is None:
        return b""
    if isinstance(chunk, str):
        return chunk.encode("utf-8")
    return bytes(chunk)


def _content_length(response: requests.Response) -> int:
    try:
        return int(response.headers.get("Content-Length", 0))
    except (TypeError, ValueError):
        return 0


def _header_lines(headers: Dict[str, str]) -> List[str]:
    return [f"{name}: {value}" for name, value in headers.items()]


def _join_dump(lines: List[str], body: str) -> str:
    return "\r\n".join(lines) + "\r\n\r\n" + body


def install_logging(
    session: requests.Session, config: Optional[InterceptorConfig] = None
) -> requests.Session:
    """Wrap the session's ``http://`` and ``https://`` adapters with logging.

    Already wrapped adapters are re-wrapped around their inner transport, so
    calling this twice does not log every call twice.
    """
    for prefix in ("http://", "https://"):
        inner = session.adapters.get(prefix)
        if isinstance(inner, LoggingAdapter):
            inner = inner.next_adapter
        session.mount(prefix, LoggingAdapter(inner, config))
    return session
