"""
Иерархия исключений HTTP Exchange.

Классификация:
- TransportError (retryable=True) - сбой DNS, соединения или сокета
- HTTPStatusError - решение вызывающего (consumer) считать статус ошибкой
- Остальные - ошибки использования или ограничения безопасности

Ядро ничего не ретраит; флаг retryable - подсказка для внешнего retry слоя.
"""

from typing import Optional
import socket

import requests
from urllib3.exceptions import NameResolutionError, ReadTimeoutError

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BASE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class HTTPClientException(Exception):
    """Базовое исключение HTTP Exchange."""

    retryable: bool = False

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ТРАНСПОРТ (retryable=True)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TransportError(HTTPClientException):
    """
    Сбой транспорта: DNS, установка соединения, ввод-вывод сокета.

    Args:
        message: Сообщение об ошибке
        url: URL запроса
    """
    retryable = True

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        full_message = message
        if url:
            full_message += f" (url: {url})"
        super().__init__(full_message)


class ConnectionError(TransportError):
    """
    Ошибка подключения.

    Примеры:
    - Connection refused
    - Connection reset
    - Network unreachable
    """


class DNSError(ConnectionError):
    """DNS resolution failed."""


class TimeoutError(TransportError):
    """
    Превышен один из бюджетов времени.

    Args:
        message: Сообщение об ошибке
        url: URL запроса
        timeout: Значение таймаута (сек)
        timeout_type: 'connect', 'inactivity' или 'total'
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        timeout_type: Optional[str] = None
    ):
        self.timeout = timeout
        self.timeout_type = timeout_type

        msg = message
        if timeout_type:
            msg += f" ({timeout_type} timeout"
            if timeout is not None:
                msg += f": {timeout}s"
            msg += ")"

        super().__init__(msg, url)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# HTTP СТАТУСЫ (решение consumer)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class HTTPStatusError(HTTPClientException):
    """
    Статус ответа, который вызывающий считает ошибкой.

    Args:
        status_code: HTTP статус
        url: URL
        message: Дополнительное сообщение (например, начало тела)
    """

    def __init__(self, status_code: int, url: Optional[str] = None, message: str = ""):
        self.status_code = status_code
        self.url = url

        msg = f"HTTP {status_code} error"
        if url:
            msg += f" for {url}"
        if message:
            msg += f": {message}"

        super().__init__(msg)

    @classmethod
    def from_status(cls, status_code: int, url: Optional[str] = None, message: str = "") -> 'HTTPStatusError':
        """Выбрать подкласс по классу статуса."""
        if 400 <= status_code < 500:
            return ClientError(status_code, url, message)
        if 500 <= status_code < 600:
            return ServerError(status_code, url, message)
        return cls(status_code, url, message)


class ClientError(HTTPStatusError):
    """4xx ошибка клиента."""


class ServerError(HTTPStatusError):
    """5xx ошибка сервера."""

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# СПЕЦИАЛЬНЫЕ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TooManyRedirectsError(HTTPClientException):
    """
    Превышен лимит редиректов.

    Args:
        max_redirects: Лимит
        url: Последний URL в цепочке
    """

    def __init__(self, max_redirects: int, url: Optional[str] = None):
        self.max_redirects = max_redirects
        self.url = url

        msg = f"Exceeded {max_redirects} redirects"
        if url:
            msg += f" (last url: {url})"
        super().__init__(msg)


class StreamConsumedError(HTTPClientException):
    """Тело ответа уже прочитано - повторное чтение невозможно."""

    def __init__(self, url: Optional[str] = None):
        self.url = url
        msg = "Response body has already been consumed"
        if url:
            msg += f" for {url}"
        super().__init__(msg)


class ResponseTooLargeError(HTTPClientException):
    """
    Ответ слишком большой.

    Args:
        size: Размер ответа (bytes)
        max_size: Максимально допустимый размер
        url: URL
    """

    def __init__(self, size: int, max_size: int, url: Optional[str] = None):
        self.size = size
        self.max_size = max_size
        self.url = url

        msg = f"Response too large: {size} bytes (max: {max_size})"
        if url:
            msg += f" for {url}"
        super().__init__(msg)


class ConfigurationError(HTTPClientException):
    """Ошибка конфигурации или некорректный запрос."""

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# УТИЛИТЫ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def _iter_causes(exc: BaseException):
    """Обойти цепочку args/__cause__/__context__ в поисках корневой причины."""
    seen = set()
    stack = [exc]
    while stack:
        current = stack.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        for arg in getattr(current, 'args', ()):
            if isinstance(arg, BaseException):
                stack.append(arg)
        reason = getattr(current, 'reason', None)
        if isinstance(reason, BaseException):
            stack.append(reason)
        for linked in (current.__cause__, current.__context__):
            if linked is not None:
                stack.append(linked)


def classify_requests_exception(
    exc: Exception,
    url: str,
    connect_timeout: Optional[float] = None,
    inactivity_timeout: Optional[float] = None,
) -> TransportError:
    """
    Конвертировать requests.exceptions в наши исключения.

    Args:
        exc: Исключение из requests
        url: URL запроса
        connect_timeout: Действовавший connect таймаут (для сообщения)
        inactivity_timeout: Действовавший read таймаут (для сообщения)

    Returns:
        Наше исключение с правильной классификацией

    Examples:
        >>> exc = requests.exceptions.ReadTimeout()
        >>> our_exc = classify_requests_exception(exc, "https://example.com")
        >>> assert isinstance(our_exc, TimeoutError)
        >>> assert our_exc.timeout_type == "inactivity"
    """
    # ConnectTimeout наследует и ConnectionError, и Timeout - проверяем первым
    if isinstance(exc, requests.exceptions.ConnectTimeout):
        return TimeoutError("Connection timed out", url, connect_timeout, "connect")

    if isinstance(exc, requests.exceptions.Timeout):
        return TimeoutError("No data received", url, inactivity_timeout, "inactivity")

    causes = list(_iter_causes(exc))

    # requests заворачивает таймаут чтения тела в ConnectionError
    if any(isinstance(c, (ReadTimeoutError, socket.timeout)) for c in causes):
        return TimeoutError("No data received", url, inactivity_timeout, "inactivity")

    if any(isinstance(c, (NameResolutionError, socket.gaierror)) for c in causes):
        return DNSError("Name resolution failed", url)

    if isinstance(exc, requests.exceptions.ConnectionError):
        return ConnectionError("Connection error", url)

    return TransportError(f"Transport failure: {exc}", url)
