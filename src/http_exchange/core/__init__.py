"""Core HTTP Exchange модули."""

from .config import (
    TimeoutConfig,
    RedirectConfig,
    RedirectMode,
    SecurityConfig,
    HTTPClientConfig,
)
from .exceptions import (
    HTTPClientException,
    TransportError,
    ConnectionError,
    DNSError,
    TimeoutError,
    HTTPStatusError,
    ClientError,
    ServerError,
    TooManyRedirectsError,
    StreamConsumedError,
    ResponseTooLargeError,
    ConfigurationError,
    classify_requests_exception,
)
from .models import Request, BytesBody, MultipartBody, TextPart, BinaryPart
from .redirect import RedirectPolicy, RedirectDecision
from .response import Response, Hop
from .watchdog import CancellationToken, Watchdog
from .session_manager import SessionManager
from .http_client import HTTPClient

__all__ = [
    # Config
    "TimeoutConfig",
    "RedirectConfig",
    "RedirectMode",
    "SecurityConfig",
    "HTTPClientConfig",
    # Models
    "Request",
    "BytesBody",
    "MultipartBody",
    "TextPart",
    "BinaryPart",
    "Response",
    "Hop",
    # Policies
    "RedirectPolicy",
    "RedirectDecision",
    "CancellationToken",
    "Watchdog",
    # Core
    "HTTPClient",
    "SessionManager",
    # Exceptions
    "HTTPClientException",
    "TransportError",
    "ConnectionError",
    "DNSError",
    "TimeoutError",
    "HTTPStatusError",
    "ClientError",
    "ServerError",
    "TooManyRedirectsError",
    "StreamConsumedError",
    "ResponseTooLargeError",
    "ConfigurationError",
    "classify_requests_exception",
]
