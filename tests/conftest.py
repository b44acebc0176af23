"""
Pytest configuration and shared fixtures for scrubwire tests.
"""

import logging
import os
import tempfile
from pathlib import Path
from unittest.mock import Mock

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from scrubwire.core.config import ConfigManager
from scrubwire.core.security import DetectionStrategy, Sanitizer, SanitizerConfig
from scrubwire.logging import logging_manager


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep user config files and SCRUBWIRE_* variables out of every test."""
    for name in list(os.environ):
        if name.upper().startswith("SCRUBWIRE_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(
        "scrubwire.core.config.manager.DEFAULT_CONFIG_FILE",
        tmp_path / "no-such-dir" / "config.toml",
    )
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def reset_logging():
    """Remove handlers installed by configure_logging during a test."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in logging_manager.handlers:
        root.removeHandler(handler)
        handler.close()
    logging_manager.handlers.clear()
    logging_manager.config = None
    root.setLevel(level)
    for name in list(logging.Logger.manager.loggerDict):
        if name.startswith("scrubwire"):
            logging.getLogger(name).setLevel(logging.NOTSET)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def config_dir(temp_dir):
    """Create a temporary config directory."""
    config_dir = temp_dir / ".config" / "scrubwire"
    config_dir.mkdir(parents=True)
    return config_dir


@pytest.fixture
def config_file(config_dir):
    """Create a temporary config file path."""
    return config_dir / "config.toml"


@pytest.fixture
def sample_config_toml():
    """Sample configuration file content."""
    return """
[sanitizer]
mask = "[hidden]"
max_body_size = 2048
detection = "scan"
extra_sensitive_fields = ["employee_number"]

[interceptor]
verbose = true
exclude_hosts = ["Health.Internal"]

[logging]
level = "DEBUG"
format = "json"
"""


@pytest.fixture
def config_manager(config_file):
    """Create a ConfigManager instance for testing."""
    return ConfigManager(config_file)


@pytest.fixture
def sanitizer():
    """Sanitizer with built-in defaults."""
    return Sanitizer()


@pytest.fixture(params=[DetectionStrategy.PATTERN, DetectionStrategy.SCAN], ids=["pattern", "scan"])
def any_strategy_sanitizer(request):
    """Sanitizer for each detection strategy."""
    return Sanitizer(SanitizerConfig(detection=request.param))


@pytest.fixture
def mock_logger():
    """Logger double recording structured calls."""
    return Mock(spec=["debug", "info", "error"])


@pytest.fixture
def inner_adapter():
    """Transport adapter double standing in for the network."""
    adapter = Mock(spec=BaseAdapter)
    adapter.send.return_value = _make_response()
    return adapter


def _make_response(status=200, body=b"", headers=None, reason="OK"):
    response = requests.Response()
    response.status_code = status
    response.reason = reason
    response.headers = CaseInsensitiveDict(headers or {})
    response._content = body
    return response


@pytest.fixture
def make_response():
    """Factory for real requests.Response objects with a buffered body."""
    return _make_response


@pytest.fixture
def prepare_request():
    """Factory for PreparedRequests built the way a Session builds them."""

    def prepare(method="GET", url="https://api.example.com/v1/items", **kwargs):
        return requests.Request(method, url, **kwargs).prepare()

    return prepare
