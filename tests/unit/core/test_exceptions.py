"""
Тесты иерархии исключений и классификации ошибок requests.
"""

import socket

import pytest
import requests
from urllib3.exceptions import MaxRetryError, NameResolutionError, ReadTimeoutError

from src.http_exchange.core.exceptions import (
    ClientError,
    ConfigurationError,
    ConnectionError,
    DNSError,
    HTTPClientException,
    HTTPStatusError,
    ResponseTooLargeError,
    ServerError,
    StreamConsumedError,
    TimeoutError,
    TooManyRedirectsError,
    TransportError,
    classify_requests_exception,
)

URL = "https://api.example.com/data"


class TestHierarchy:
    """Классы исключений и их поля."""

    @pytest.mark.parametrize("exc_class", [
        TransportError, ConnectionError, DNSError, TimeoutError,
    ])
    def test_transport_errors_are_retryable(self, exc_class):
        error = exc_class("boom", URL)
        assert isinstance(error, TransportError)
        assert isinstance(error, HTTPClientException)
        assert error.retryable is True
        assert error.url == URL

    def test_other_errors_not_retryable(self):
        assert HTTPStatusError(500).retryable is False
        assert TooManyRedirectsError(10).retryable is False
        assert ConfigurationError("bad").retryable is False

    def test_dns_error_is_connection_error(self):
        assert issubclass(DNSError, ConnectionError)

    def test_timeout_message(self):
        error = TimeoutError("Request aborted", URL, 2.5, "total")
        assert error.timeout == 2.5
        assert error.timeout_type == "total"
        assert "total timeout: 2.5s" in str(error)
        assert URL in str(error)

    def test_timeout_does_not_shadow_builtin_catching(self):
        """Наш TimeoutError не является builtins.TimeoutError."""
        assert not issubclass(TimeoutError, OSError)

    def test_http_status_error_message(self):
        error = HTTPStatusError(418, URL, "I'm a teapot")
        assert error.status_code == 418
        assert str(error) == f"HTTP 418 error for {URL}: I'm a teapot"

    @pytest.mark.parametrize("status,expected", [
        (404, ClientError),
        (429, ClientError),
        (500, ServerError),
        (503, ServerError),
        (302, HTTPStatusError),
    ])
    def test_from_status(self, status, expected):
        error = HTTPStatusError.from_status(status, URL)
        assert type(error) is expected
        assert error.status_code == status

    def test_too_many_redirects(self):
        error = TooManyRedirectsError(3, URL)
        assert error.max_redirects == 3
        assert "Exceeded 3 redirects" in str(error)

    def test_stream_consumed(self):
        assert "already been consumed" in str(StreamConsumedError(URL))

    def test_response_too_large(self):
        error = ResponseTooLargeError(2048, 1024, URL)
        assert error.size == 2048
        assert error.max_size == 1024


class TestClassifyRequestsException:
    """Конвертация requests.exceptions в TransportError и подклассы."""

    def test_connect_timeout(self):
        error = classify_requests_exception(
            requests.exceptions.ConnectTimeout(), URL, connect_timeout=3
        )
        assert isinstance(error, TimeoutError)
        assert error.timeout_type == "connect"
        assert error.timeout == 3

    def test_read_timeout(self):
        error = classify_requests_exception(
            requests.exceptions.ReadTimeout(), URL, inactivity_timeout=7
        )
        assert isinstance(error, TimeoutError)
        assert error.timeout_type == "inactivity"
        assert error.timeout == 7

    def test_read_timeout_wrapped_in_connection_error(self):
        """requests заворачивает таймаут чтения тела в ConnectionError."""
        cause = ReadTimeoutError(None, URL, "Read timed out.")
        exc = requests.exceptions.ConnectionError(cause)

        error = classify_requests_exception(exc, URL, inactivity_timeout=1)
        assert isinstance(error, TimeoutError)
        assert error.timeout_type == "inactivity"

    def test_socket_timeout_in_chain(self):
        exc = requests.exceptions.ConnectionError("read failed")
        exc.__cause__ = socket.timeout("timed out")

        error = classify_requests_exception(exc, URL)
        assert isinstance(error, TimeoutError)

    def test_name_resolution(self):
        reason = NameResolutionError("nowhere.invalid", None, socket.gaierror(-2, "Name or service not known"))
        exc = requests.exceptions.ConnectionError(MaxRetryError(None, URL, reason))

        error = classify_requests_exception(exc, URL)
        assert isinstance(error, DNSError)

    def test_connection_refused(self):
        exc = requests.exceptions.ConnectionError(ConnectionRefusedError(111, "Connection refused"))

        error = classify_requests_exception(exc, URL)
        assert type(error) is ConnectionError
        assert error.url == URL

    def test_other_request_exception(self):
        error = classify_requests_exception(requests.exceptions.ChunkedEncodingError("bad chunk"), URL)
        assert type(error) is TransportError
        assert "bad chunk" in str(error)
