"""HTTP Exchange - request/policy/consumer HTTP client on top of requests."""

import logging
from importlib.metadata import version, PackageNotFoundError

from .core.http_client import HTTPClient
from .core.config import (
    HTTPClientConfig,
    TimeoutConfig,
    RedirectConfig,
    RedirectMode,
    SecurityConfig,
)
from .core.models import Request, BytesBody, MultipartBody, TextPart, BinaryPart
from .core.redirect import RedirectPolicy, RedirectDecision
from .core.response import Response
from .core.watchdog import CancellationToken, Watchdog
from .core.exceptions import (
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
)
from .core.env_config import load_from_env
from .consumers import HttpResult, buffered, checked, status_only

# Users can configure logging themselves using logging.getLogger('http_exchange')
logging.getLogger('http_exchange').addHandler(logging.NullHandler())

try:
    __version__ = version("http-exchange-core")
except PackageNotFoundError:
    # Package is not installed (development mode)
    __version__ = "0.0.0-dev"

__license__ = "MIT"

__all__ = [
    # Core
    "HTTPClient",
    "Request",
    "Response",
    "BytesBody",
    "MultipartBody",
    "TextPart",
    "BinaryPart",

    # Config
    "HTTPClientConfig",
    "TimeoutConfig",
    "RedirectConfig",
    "RedirectMode",
    "SecurityConfig",
    "load_from_env",

    # Policies
    "RedirectPolicy",
    "RedirectDecision",
    "CancellationToken",
    "Watchdog",

    # Consumers
    "HttpResult",
    "buffered",
    "checked",
    "status_only",

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

    # Version
    "__version__",
]
