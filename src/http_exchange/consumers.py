"""
Stock response consumers.

A consumer is any callable ``(Response) -> T``. It runs while the response is
open and its return value becomes the result of ``HTTPClient.execute``.

Example:
    >>> result = client.execute(Request("GET", "https://www.github.com"), checked)
    >>> print(result.status_code, len(result.text))
"""

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

from requests.structures import CaseInsensitiveDict

from .core.exceptions import HTTPStatusError
from .core.response import Hop, Response
from .core.utils import charset_from_content_type


@dataclass(frozen=True)
class HttpResult:
    """
    Immutable snapshot of a consumed response.

    Safe to keep after the exchange: the body is fully buffered and the
    connection is already released.
    """
    status_code: int
    body: bytes = b""
    reason: str = ""
    url: Optional[str] = None
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    history: Tuple[Hop, ...] = ()

    @property
    def text(self) -> str:
        charset = charset_from_content_type(self.headers.get('Content-Type')) or "utf-8"
        return self.body.decode(charset, errors="replace")

    def json(self) -> Any:
        return json.loads(self.body)

    @property
    def location(self) -> Optional[str]:
        return self.headers.get('Location')

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status_code < 400 and self.location is not None

    def raise_for_status(self) -> 'HttpResult':
        """Raise HTTPStatusError for 4xx/5xx, return self otherwise."""
        if self.status_code >= 400:
            raise HTTPStatusError.from_status(self.status_code, self.url, self.reason)
        return self


def buffered(response: Response) -> HttpResult:
    """Read the whole body into an HttpResult. Never raises on status."""
    body = response.read()
    return HttpResult(
        status_code=response.status_code,
        body=body,
        reason=response.reason,
        url=response.url,
        headers=CaseInsensitiveDict(response.headers),
        history=tuple(response.history),
    )


def checked(response: Response) -> HttpResult:
    """
    Like ``buffered``, but treat status >= 400 as a failure.

    Raises:
        ClientError: 4xx
        ServerError: 5xx
    """
    return buffered(response).raise_for_status()


def status_only(response: Response) -> int:
    """Return the status code without reading the body."""
    return response.status_code
