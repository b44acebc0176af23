"""
Application-wide constants for scrubwire.

This module contains the thresholds, default vocabularies and log messages
shared by the sanitizer, the interceptor and the configuration layer.
"""

# File size constants (bytes)
BYTES_PER_KB = 1024
BYTES_PER_MB = 1024 * 1024

# Masking defaults
DEFAULT_MASK = "***REDACTED***"
DEFAULT_MAX_BODY_SIZE = 100 * BYTES_PER_KB
DEFAULT_MAX_NESTING_DEPTH = 10
PARTIAL_MASK_MIN_LENGTH = 8
PARTIAL_MASK_VISIBLE_CHARS = 4

# Body policy thresholds
BASE64_MIN_BODY_SIZE = 1024
BASE64_SAMPLE_SIZE = 1000
BASE64_MIN_SAMPLE_SIZE = 100
BASE64_VALID_RATIO = 0.9
SUMMARIZE_THRESHOLD = 500 * BYTES_PER_KB
TRUNCATE_THRESHOLD = 100 * BYTES_PER_KB
MAX_LOGGED_BODY_SIZE = 10 * BYTES_PER_MB

# Body placeholders
BINARY_BODY_MESSAGE = "[Binary content - not logged]"
BASE64_BODY_MESSAGE = "[Base64 encoded data - not logged]"
SKIPPED_BODY_MESSAGE = "[Body not logged]"
FAILED_BODY_MESSAGE = "[Body not logged - sanitization failed]"

# Interceptor log messages
REQUEST_LOG_MESSAGE = "→ HTTP Request"
RESPONSE_LOG_MESSAGE = "← HTTP Response"
ERROR_LOG_MESSAGE = "✗ HTTP Request Failed"

# HTTP status boundaries for response log levels
HTTP_STATUS_CLIENT_ERROR = 400
HTTP_STATUS_SERVER_ERROR = 500

# Default HTTP client settings
DEFAULT_TIMEOUT_SECONDS = 30
DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_FACTOR = 0.3

DEFAULT_SENSITIVE_FIELDS = (
    # Authentication
    "password", "passwd", "pwd", "secret", "token",
    "api_key", "apikey", "api_secret", "access_token", "refresh_token",
    "client_secret", "client_id", "authorization", "auth",
    "bearer", "session", "session_id", "cookie",
    # Personal data
    "ssn", "social_security", "passport", "driver_license",
    "tax_id", "ein", "vat",
    # Financial data
    "credit_card", "card_number", "card_num", "cvv", "cvc",
    "pin", "account_number", "routing_number", "iban", "swift",
    # Cryptography
    "private_key", "public_key", "encryption_key", "signing_key",
    "certificate", "cert", "key", "pem",
    # Service specific
    "stripe_key", "aws_secret", "gcp_key", "azure_key",
    "webhook_secret", "signing_secret",
)

DEFAULT_SENSITIVE_HEADERS = (
    "authorization", "proxy-authorization",
    "cookie", "set-cookie",
    "x-api-key", "x-auth-token", "x-access-token",
    "api-key", "apikey",
)
