"""
HTTP client with sanitized traffic logging.

This module provides a small convenience client whose session retries
transient failures and logs every call through ``LoggingAdapter``.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from scrubwire.constants import (
    DEFAULT_BACKOFF_FACTOR,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT_SECONDS,
)

from .interceptor import InterceptorConfig, install_logging


class HttpClient:
    """HTTP client whose traffic is logged with secrets redacted."""

    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        config: Optional[InterceptorConfig] = None,
        timeout: int = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
    ):
        """Initialize HTTP client with configuration.

        Args:
            base_url: Base URL for all requests
            session: Optional existing session; its adapters get wrapped
            config: Interceptor settings for the logging adapter
            timeout: Request timeout in seconds
            max_retries: Maximum number of retry attempts
            backoff_factor: Backoff factor for retries
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

        self.session = session or self._create_session(max_retries, backoff_factor)
        install_logging(self.session, config)

    def _create_session(self, max_retries: int, backoff_factor: float) -> requests.Session:
        """Create a session with retry configuration."""
        session = requests.Session()

        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["HEAD", "GET", "OPTIONS", "POST"]
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        return session

    def request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        """Perform a request relative to ``base_url``.

        Args:
            method: HTTP method
            endpoint: API endpoint (relative to base_url) or absolute URL
            **kwargs: Additional arguments passed to requests

        Returns:
            Response object
        """
        url = self._build_url(endpoint)
        kwargs.setdefault('timeout', self.timeout)
        self.logger.debug("%s %s", method.upper(), endpoint)
        return self.session.request(method.upper(), url, **kwargs)

    def get(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs
    ) -> requests.Response:
        """Perform GET request."""
        return self.request("GET", endpoint, params=params, headers=headers, **kwargs)

    def post(
        self,
        endpoint: str,
        data: Optional[Any] = None,
        json: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs
    ) -> requests.Response:
        """Perform POST request.

        Args:
            endpoint: API endpoint (relative to base_url)
            data: Form data, raw bytes or a file-like object
            json: JSON data
            headers: Additional headers
            **kwargs: Additional arguments passed to requests

        Returns:
            Response object
        """
        return self.request("POST", endpoint, data=data, json=json, headers=headers, **kwargs)

    def _build_url(self, endpoint: str) -> str:
        """Build full URL from endpoint."""
        if endpoint.startswith(('http://', 'https://')):
            return endpoint
        return urljoin(self.base_url + '/', endpoint.lstrip('/'))

    def close(self) -> None:
        """Close the HTTP session."""
        if self.session:
            self.session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
