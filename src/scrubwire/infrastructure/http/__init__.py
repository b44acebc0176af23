"""HTTP infrastructure components."""

from .client import HttpClient
from .interceptor import (
    InterceptorConfig,
    Logger,
    LoggingAdapter,
    default_should_log_body,
    install_logging,
)

__all__ = [
    "HttpClient",
    "InterceptorConfig",
    "Logger",
    "LoggingAdapter",
    "default_should_log_body",
    "install_logging",
]
