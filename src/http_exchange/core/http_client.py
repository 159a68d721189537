# src/http_exchange/core/http_client.py
import json as jsonlib
import logging
import time
import uuid
from functools import partial
from typing import Any, Callable, List, Optional, TypeVar, Union

import requests
from requests.structures import CaseInsensitiveDict

from .config import HTTPClientConfig, TimeoutConfig
from .exceptions import (
    ConfigurationError,
    TimeoutError,
    TooManyRedirectsError,
    classify_requests_exception,
)
from .logging.filters import clear_correlation_id, set_correlation_id
from .models import Body, BytesBody, Request
from .redirect import RedirectPolicy
from .response import Hop, Response
from .session_manager import AbortableAdapter, SessionManager, abort_session
from .utils import is_cross_origin, sanitize_url
from .watchdog import CancellationToken, Watchdog

logger = logging.getLogger(__name__)

T = TypeVar('T')
Consumer = Callable[[Response], T]

# Заголовки, которые не переживают смену метода на GET / смену хоста
_BODY_HEADERS = ('Content-Type', 'Content-Length', 'Transfer-Encoding')
_CREDENTIAL_HEADERS = ('Authorization', 'Cookie', 'Proxy-Authorization')


def _abort(raw: requests.Response) -> None:
    """Wake a reader blocked in recv, then release the connection."""
    try:
        raw.raw.shutdown()
    finally:
        raw.close()


class HTTPClient:
    """
    HTTP клиент: Request -> Policy -> Consumer.

    Features:
        - execute(request, consumer): consumer получает открытый ответ,
          ресурсы освобождаются на любом пути выхода
        - Политика редиректов strict / lax / disabled
        - Таймауты connect / inactivity / total (watchdog)
        - Multipart тела
        - Отдельная сессия на каждый вызов, без общего пула
        - Immutable конфигурация
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        config: Optional[HTTPClientConfig] = None,
        **kwargs
    ):
        """
        Initialize HTTP client.

        Args:
            base_url: Base URL (ignored when config is given)
            config: HTTPClientConfig instance
            **kwargs: Parameters for HTTPClientConfig.create (when config is None)
        """
        if config is None:
            config = HTTPClientConfig.create(base_url=base_url, **kwargs)
        elif kwargs:
            raise ConfigurationError(
                f"Unexpected arguments with explicit config: {', '.join(sorted(kwargs))}"
            )

        object.__setattr__(self, '_config', config)
        object.__setattr__(self, '_redirect_policy', RedirectPolicy.from_config(config.redirect))

        logger_instance = None
        if config.logging:
            from .logging import ExchangeLogger
            logger_instance = ExchangeLogger(config=config.logging, name="http_exchange.client")
        object.__setattr__(self, '_logger', logger_instance)

        object.__setattr__(self, '_session_manager', SessionManager(session_factory=self._create_session))
        object.__setattr__(self, '_initialized', True)

    def __setattr__(self, name, value):
        """Запретить изменение после init (immutability)."""
        if hasattr(self, '_initialized'):
            raise RuntimeError(
                f"Cannot modify '{name}' - HTTPClient is immutable. "
                f"Create new instance instead."
            )
        object.__setattr__(self, name, value)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def _create_session(self) -> requests.Session:
        """Сессия на один вызов: одно соединение, без ретраев и авто-редиректов."""
        session = requests.Session()
        session.trust_env = False

        adapter = AbortableAdapter(pool_connections=1, pool_maxsize=1, max_retries=0)
        session.mount('http://', adapter)
        session.mount('https://', adapter)

        session.headers['User-Agent'] = self._config.user_agent
        session.headers.update(self._config.headers)
        return session

    def close(self):
        """
        Закрывает логгер и все незавершённые сессии.

        Новые запросы после close() невозможны.
        """
        if self._logger is not None:
            self._logger.close()
        self._session_manager.close_all()

    # ==================== Основной вызов ====================

    def execute(self, request: Request, consumer: Consumer) -> T:
        """
        Выполнить запрос и передать открытый ответ consumer.

        Args:
            request: Запрос
            consumer: Функция (Response) -> T, вызывается ровно один раз

        Returns:
            Результат consumer

        Raises:
            TransportError: DNS / соединение / сокет
            TimeoutError: превышен connect, inactivity или total бюджет
            TooManyRedirectsError: превышен лимит редиректов
            Exception: исключение consumer пробрасывается как есть

        Example:
            >>> with HTTPClient() as client:
            ...     status = client.execute(Request("GET", "https://example.com"),
            ...                             lambda r: r.status_code)
        """
        url = self._build_url(request.url)
        timeout = request.timeout or self._config.timeout

        headers = CaseInsensitiveDict(request.headers)
        correlation_id = headers.get('X-Correlation-ID') or str(uuid.uuid4())
        headers['X-Correlation-ID'] = correlation_id

        start_time = time.monotonic()
        deadline = start_time + timeout.total if timeout.total is not None else None
        token = CancellationToken(deadline)

        if self._logger:
            set_correlation_id(correlation_id)
        self._log(
            logging.INFO, "Request started",
            method=request.method,
            url=self._safe_url(url),
            correlation_id=correlation_id,
            timeout_connect=timeout.connect,
            timeout_inactivity=timeout.inactivity,
            timeout_total=timeout.total,
        )

        try:
            body, content_type = request.encode_body()
            if content_type and 'Content-Type' not in headers:
                headers['Content-Type'] = content_type

            with self._session_manager.lease() as session, Watchdog(timeout.total, token) as watchdog:
                # Wakes a send still waiting for response headers
                token.on_cancel(partial(abort_session, session))
                response = self._send(session, request.method, url, headers, body, timeout, deadline, token)
                try:
                    result = consumer(response)
                except TimeoutError:
                    raise
                except Exception as e:
                    if token.expired:
                        raise self._total_timeout_error(response.url, timeout) from e
                    raise
                finally:
                    response.close()

                if not watchdog.complete():
                    raise self._total_timeout_error(response.url, timeout)

            self._log(
                logging.INFO, "Request completed",
                method=response.method,
                url=self._safe_url(response.url),
                status_code=response.status_code,
                redirects=len(response.history),
                duration_ms=round((time.monotonic() - start_time) * 1000, 2),
                correlation_id=correlation_id,
            )
            return result

        except Exception as e:
            self._log(
                logging.ERROR, "Request failed",
                method=request.method,
                url=self._safe_url(url),
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=round((time.monotonic() - start_time) * 1000, 2),
                correlation_id=correlation_id,
            )
            raise

        finally:
            if self._logger:
                clear_correlation_id()

    # ==================== Удобные методы ====================

    def request(
        self,
        method: str,
        url: str,
        consumer: Optional[Consumer] = None,
        headers: Optional[dict] = None,
        body: Union[Body, bytes, str, None] = None,
        json: Any = None,
        timeout: Optional[TimeoutConfig] = None,
    ):
        """
        Построить Request и выполнить его.

        Args:
            method: HTTP метод
            url: Endpoint или полный URL
            consumer: Обработчик ответа (по умолчанию consumers.buffered)
            headers: Заголовки
            body: BytesBody / MultipartBody / bytes / str
            json: Объект для JSON тела (взаимоисключающе с body)
            timeout: Переопределение бюджета таймаутов

        Returns:
            Результат consumer (HttpResult по умолчанию)
        """
        if body is not None and json is not None:
            raise ConfigurationError("Pass either body or json, not both")
        if json is not None:
            body = BytesBody(jsonlib.dumps(json).encode("utf-8"), "application/json")
        elif isinstance(body, str):
            body = BytesBody(body.encode("utf-8"), "text/plain; charset=utf-8")
        elif isinstance(body, (bytes, bytearray)):
            body = BytesBody(bytes(body))

        if consumer is None:
            from ..consumers import buffered
            consumer = buffered

        req = Request(method, url, headers=headers or {}, body=body, timeout=timeout)
        return self.execute(req, consumer)

    def get(self, url: str, consumer: Optional[Consumer] = None, **kwargs: Any):
        """Выполняет GET запрос."""
        return self.request("GET", url, consumer, **kwargs)

    def head(self, url: str, consumer: Optional[Consumer] = None, **kwargs: Any):
        """Выполняет HEAD запрос."""
        return self.request("HEAD", url, consumer, **kwargs)

    def post(self, url: str, consumer: Optional[Consumer] = None, **kwargs: Any):
        """Выполняет POST запрос (body может быть MultipartBody)."""
        return self.request("POST", url, consumer, **kwargs)

    def put(self, url: str, consumer: Optional[Consumer] = None, **kwargs: Any):
        """Выполняет PUT запрос."""
        return self.request("PUT", url, consumer, **kwargs)

    def patch(self, url: str, consumer: Optional[Consumer] = None, **kwargs: Any):
        """Выполняет PATCH запрос."""
        return self.request("PATCH", url, consumer, **kwargs)

    def delete(self, url: str, consumer: Optional[Consumer] = None, **kwargs: Any):
        """Выполняет DELETE запрос."""
        return self.request("DELETE", url, consumer, **kwargs)

    # ==================== Внутренние методы ====================

    def _send(
        self,
        session: requests.Session,
        method: str,
        url: str,
        headers: CaseInsensitiveDict,
        body: Optional[bytes],
        timeout: TimeoutConfig,
        deadline: Optional[float],
        token: CancellationToken,
    ) -> Response:
        """
        Отправить запрос и пройти цепочку редиректов по политике.

        Каждый промежуточный ответ закрывается до следующего перехода.
        """
        history: List[Hop] = []
        max_redirects = self._redirect_policy.max_redirects

        while True:
            remaining = self._remaining(deadline, token, url, timeout)
            connect_timeout, read_timeout = timeout.as_tuple(remaining)

            try:
                raw = session.request(
                    method=method,
                    url=url,
                    headers=headers,
                    data=body,
                    timeout=(connect_timeout, read_timeout),
                    verify=self._config.security.verify_ssl,
                    allow_redirects=False,
                    stream=True,
                )
            except requests.exceptions.RequestException as e:
                if token.expired:
                    raise self._total_timeout_error(url, timeout) from e
                raise classify_requests_exception(e, url, connect_timeout, read_timeout) from e

            # Runs immediately if the watchdog already fired
            token.on_cancel(partial(_abort, raw))
            if token.cancelled:
                raise self._total_timeout_error(url, timeout)

            location = raw.headers.get('Location')
            decision = self._redirect_policy.decide(method, raw.status_code, location, base_url=raw.url or url)

            if not decision.follow:
                if raw.is_redirect:
                    self._log(
                        logging.DEBUG, "Redirect not followed",
                        method=method,
                        url=self._safe_url(url),
                        status_code=raw.status_code,
                        location=location,
                        mode=self._redirect_policy.mode.value,
                    )
                return Response(
                    raw,
                    method=method,
                    token=token,
                    max_size=self._config.security.max_response_size,
                    history=history,
                    inactivity_timeout=read_timeout,
                    total_timeout=timeout.total,
                )

            raw.close()
            if len(history) >= max_redirects:
                raise TooManyRedirectsError(max_redirects, url)
            history.append(Hop(method=method, url=url, status_code=raw.status_code, location=location))

            self._log(
                logging.DEBUG, "Redirect followed",
                status_code=raw.status_code,
                from_url=self._safe_url(url),
                to_url=self._safe_url(decision.next_url),
                method=method,
                next_method=decision.next_method,
            )

            # None removes the header from the session defaults as well
            if decision.next_method != method and decision.next_method == 'GET':
                body = None
                for name in _BODY_HEADERS:
                    headers[name] = None
            if is_cross_origin(url, decision.next_url):
                for name in _CREDENTIAL_HEADERS:
                    headers[name] = None

            method, url = decision.next_method, decision.next_url

    def _remaining(
        self,
        deadline: Optional[float],
        token: CancellationToken,
        url: str,
        timeout: TimeoutConfig
    ) -> Optional[float]:
        """Остаток total бюджета; TimeoutError если он исчерпан."""
        if token.cancelled:
            raise self._total_timeout_error(url, timeout)
        if deadline is None:
            return None
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            token.cancel("total timeout exhausted before send")
            raise self._total_timeout_error(url, timeout)
        return remaining

    @staticmethod
    def _total_timeout_error(url: str, timeout: TimeoutConfig) -> TimeoutError:
        return TimeoutError("Request aborted", url, timeout.total, "total")

    def _build_url(self, endpoint: str) -> str:
        """
        Строит полный URL из base_url и endpoint.

        Абсолютный endpoint используется как есть.
        """
        if endpoint.startswith(("http://", "https://")):
            return endpoint

        base = self._config.base_url
        if not base:
            raise ConfigurationError(f"Relative URL '{endpoint}' requires base_url")
        return f"{base}/{endpoint.lstrip('/')}"

    def _safe_url(self, url: Optional[str]) -> Optional[str]:
        return sanitize_url(url, self._config.security.sensitive_url_params) if url else url

    def _log(self, level: int, message: str, **fields: Any) -> None:
        if self._logger is not None:
            self._logger.log(level, message, **fields)
        else:
            logger.log(level, message, extra=fields)

    # ==================== Свойства ====================

    @property
    def config(self) -> HTTPClientConfig:
        return self._config

    @property
    def base_url(self) -> Optional[str]:
        """Base URL (read-only)."""
        return self._config.base_url

    @property
    def timeout(self) -> TimeoutConfig:
        return self._config.timeout

    @property
    def redirect_policy(self) -> RedirectPolicy:
        return self._redirect_policy

    @property
    def active_sessions(self) -> int:
        """Количество сессий, занятых вызовами прямо сейчас."""
        return self._session_manager.active_count
