# src/http_exchange/core/response.py
"""
Response handed to the consumer while the connection is still open.

The body is a stream: it can be read exactly once, through ``read()``,
``text()``, ``json()`` or ``iter_bytes()``. Every read observes the call's
cancellation token and the configured size limit.
"""

import json
from dataclasses import dataclass
from typing import Any, Iterator, List, Mapping, Optional

import requests
from urllib3.exceptions import HTTPError as Urllib3HTTPError

from .exceptions import (
    HTTPStatusError,
    ResponseTooLargeError,
    StreamConsumedError,
    TimeoutError,
    TransportError,
    classify_requests_exception,
)
from .utils import charset_from_content_type
from .watchdog import CancellationToken

_READ_ERRORS = (requests.exceptions.RequestException, Urllib3HTTPError, OSError, ValueError)

# Ответы без тела: Content-Length описывает ресурс, а не этот ответ
_BODILESS_STATUSES = (204, 304)


@dataclass(frozen=True)
class Hop:
    """One followed redirect: the request that was redirected and its status."""
    method: str
    url: str
    status_code: int
    location: str


class Response:
    """
    Open HTTP response.

    Owned by HTTPClient; the consumer must not keep it after returning.

    Attributes:
        status_code: HTTP status
        reason: Reason phrase
        headers: Case-insensitive response headers
        url: Final URL (after followed redirects)
        method: Method of the request that produced this response
        history: Redirects followed before this response
    """

    def __init__(
        self,
        raw: requests.Response,
        method: str,
        token: Optional[CancellationToken] = None,
        max_size: Optional[int] = None,
        history: Optional[List[Hop]] = None,
        inactivity_timeout: Optional[float] = None,
        total_timeout: Optional[float] = None,
    ):
        self._raw = raw
        self._token = token or CancellationToken()
        self._max_size = max_size
        self._inactivity_timeout = inactivity_timeout
        self._total_timeout = total_timeout
        self._consumed = False
        self.method = method
        self.history: List[Hop] = list(history or [])

    # ==================== Метаданные ====================

    @property
    def status_code(self) -> int:
        return self._raw.status_code

    @property
    def reason(self) -> str:
        return self._raw.reason or ""

    @property
    def headers(self) -> Mapping[str, str]:
        return self._raw.headers

    @property
    def url(self) -> str:
        return self._raw.url

    @property
    def location(self) -> Optional[str]:
        return self._raw.headers.get('Location')

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status_code < 400 and self.location is not None

    @property
    def consumed(self) -> bool:
        return self._consumed

    @property
    def charset(self) -> Optional[str]:
        return charset_from_content_type(self._raw.headers.get('Content-Type'))

    # ==================== Тело ====================

    def iter_bytes(self, chunk_size: int = 8192) -> Iterator[bytes]:
        """
        Stream the body in chunks.

        Raises:
            StreamConsumedError: body was already read
            ResponseTooLargeError: body exceeds security.max_response_size
            TimeoutError: a timeout budget was exceeded while reading
        """
        self._claim()
        self._check_declared_size()

        received = 0
        chunks = self._raw.iter_content(chunk_size=chunk_size)
        while True:
            self._raise_if_cancelled()
            try:
                chunk = next(chunks)
            except StopIteration:
                break
            except _READ_ERRORS as e:
                raise self._translate(e) from e

            if not chunk:
                continue
            received += len(chunk)
            if self._max_size is not None and received > self._max_size:
                raise ResponseTooLargeError(received, self._max_size, self.url)
            yield chunk

        self._raise_if_cancelled()

    def read(self) -> bytes:
        """Read the whole body."""
        return b"".join(self.iter_bytes())

    def text(self, encoding: Optional[str] = None) -> str:
        """Read the body as text (charset from Content-Type, UTF-8 otherwise)."""
        return self.read().decode(encoding or self.charset or "utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.read())

    def raise_for_status(self) -> None:
        """Raise HTTPStatusError for 4xx/5xx responses."""
        if self.status_code >= 400:
            raise HTTPStatusError.from_status(self.status_code, self.url, self.reason)

    def close(self) -> None:
        self._raw.close()

    # ==================== Внутренние методы ====================

    def _claim(self) -> None:
        if self._consumed:
            raise StreamConsumedError(self.url)
        self._consumed = True

    def _check_declared_size(self) -> None:
        if self.method == 'HEAD' or self.status_code in _BODILESS_STATUSES:
            return
        declared = self._raw.headers.get('Content-Length')
        if self._max_size is None or not declared or not declared.isdigit():
            return
        if int(declared) > self._max_size:
            raise ResponseTooLargeError(int(declared), self._max_size, self.url)

    def _raise_if_cancelled(self) -> None:
        if self._token.cancelled:
            raise TimeoutError("Request aborted", self.url, self._total_timeout, "total")

    def _translate(self, error: Exception) -> TransportError:
        if self._token.expired:
            return TimeoutError("Request aborted", self.url, self._total_timeout, "total")
        return classify_requests_exception(error, self.url, inactivity_timeout=self._inactivity_timeout)

    def __repr__(self) -> str:
        return f"<Response [{self.status_code}] {self.method} {self.url}>"
