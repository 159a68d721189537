"""
Система конфигурации для HTTP Exchange.

Все конфиги immutable (frozen dataclasses) для потокобезопасности.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple, Dict, Set, Union, TYPE_CHECKING, Mapping
from types import MappingProxyType

if TYPE_CHECKING:
    from .logging import LoggingConfig

Seconds = Optional[float]

DEFAULT_USER_AGENT = "http-exchange-core"

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TIMEOUT CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class TimeoutConfig:
    """
    Бюджет таймаутов одного запроса.

    Args:
        connect: Таймаут установки соединения (сек)
        inactivity: Максимальная пауза между двумя пакетами данных (сек),
            включая ожидание первого байта ответа
        total: Общий лимит на весь вызов, включая редиректы и consumer (сек)

    None означает "без лимита".

    Examples:
        >>> TimeoutConfig(connect=5, inactivity=30)
        >>> TimeoutConfig(connect=3, inactivity=10, total=60)
    """
    connect: Seconds = 5
    inactivity: Seconds = 30
    total: Seconds = None

    def __post_init__(self):
        """Валидация."""
        if self.connect is not None and self.connect < 0:
            raise ValueError("connect timeout must be non-negative")
        if self.inactivity is not None and self.inactivity < 0:
            raise ValueError("inactivity timeout must be non-negative")
        if self.total is not None and self.total < 0:
            raise ValueError("total timeout must be non-negative")

    def as_tuple(self, remaining: Seconds = None) -> Tuple[Seconds, Seconds]:
        """
        Вернуть (connect, read) для requests.

        Args:
            remaining: Остаток общего бюджета; ограничивает оба значения
        """
        return (_cap(self.connect, remaining), _cap(self.inactivity, remaining))


def _cap(value: Seconds, limit: Seconds) -> Seconds:
    if limit is None:
        return value
    if value is None:
        return limit
    return min(value, limit)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# REDIRECT CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class RedirectMode(str, Enum):
    """
    Режим обработки редиректов.

    - STRICT: 301/302 следуем только для GET/HEAD
    - LAX: 301/302 повторяем с исходным методом
    - DISABLED: никогда не следуем, 3xx отдаётся вызывающему как есть
    """
    STRICT = "strict"
    LAX = "lax"
    DISABLED = "disabled"


@dataclass(frozen=True)
class RedirectConfig:
    """
    Конфигурация редиректов.

    Args:
        mode: Режим (strict/lax/disabled)
        max_redirects: Максимум переходов за один вызов

    Examples:
        >>> RedirectConfig(mode=RedirectMode.LAX)
        >>> RedirectConfig(mode="disabled")
    """
    mode: RedirectMode = RedirectMode.STRICT
    max_redirects: int = 10

    def __post_init__(self):
        """Валидация и нормализация mode из строки."""
        if not isinstance(self.mode, RedirectMode):
            object.__setattr__(self, 'mode', RedirectMode(str(self.mode).lower()))
        if self.max_redirects < 0:
            raise ValueError("max_redirects must be non-negative")

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# SECURITY CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class SecurityConfig:
    """
    Конфигурация безопасности.

    Args:
        verify_ssl: Проверять SSL сертификаты
        max_response_size: Максимальный размер тела ответа (байты)
        sensitive_url_params: Дополнительные query-параметры для маскирования в логах

    Examples:
        >>> SecurityConfig(max_response_size=50*1024*1024)  # 50MB
        >>> SecurityConfig(verify_ssl=False)  # Для тестов
    """
    verify_ssl: bool = True
    max_response_size: int = 100 * 1024 * 1024  # 100MB
    sensitive_url_params: Set[str] = field(default_factory=set)

    def __post_init__(self):
        """Валидация."""
        if self.max_response_size <= 0:
            raise ValueError("max_response_size must be positive")

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# MAIN CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class HTTPClientConfig:
    """
    Главная конфигурация HTTPClient.

    Args:
        base_url: Базовый URL для относительных адресов (опционально)
        headers: Дефолтные заголовки
        user_agent: Значение User-Agent, если не задано в headers
        timeout: Бюджет таймаутов
        redirect: Политика редиректов
        security: Конфигурация безопасности
        logging: Конфигурация логирования (None = без логирования)

    Examples:
        >>> config = HTTPClientConfig(base_url="https://api.example.com")
        >>> config = HTTPClientConfig.create(timeout=10, redirect_mode="lax")
    """
    base_url: Optional[str] = None
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    user_agent: str = DEFAULT_USER_AGENT

    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    redirect: RedirectConfig = field(default_factory=RedirectConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    logging: Optional['LoggingConfig'] = None

    def __post_init__(self):
        """Normalize base_url and freeze headers."""
        if not isinstance(self.headers, MappingProxyType):
            object.__setattr__(self, 'headers', MappingProxyType(dict(self.headers or {})))

        if self.base_url:
            normalized = self.base_url.rstrip('/')
            if normalized != self.base_url:
                object.__setattr__(self, 'base_url', normalized)

    @classmethod
    def create(
        cls,
        base_url: Optional[str] = None,
        timeout: Union[float, Tuple[float, float], TimeoutConfig, None] = None,
        connect_timeout: Seconds = None,
        inactivity_timeout: Seconds = None,
        total_timeout: Seconds = None,
        redirect_mode: Union[str, RedirectMode] = RedirectMode.STRICT,
        max_redirects: int = 10,
        verify_ssl: bool = True,
        headers: Optional[Dict[str, str]] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        logging: Optional['LoggingConfig'] = None,
    ) -> 'HTTPClientConfig':
        """
        Удобный конструктор конфигурации.

        Args:
            base_url: Базовый URL
            timeout: Таймаут (число = inactivity, (connect, inactivity) или TimeoutConfig)
            connect_timeout: Таймаут подключения (переопределяет timeout)
            inactivity_timeout: Таймаут неактивности (переопределяет timeout)
            total_timeout: Общий лимит вызова
            redirect_mode: strict / lax / disabled
            max_redirects: Максимум редиректов
            verify_ssl: Проверять SSL
            headers: Заголовки
            user_agent: User-Agent по умолчанию
            logging: Конфигурация логирования

        Examples:
            >>> config = HTTPClientConfig.create(timeout=60)
            >>> config = HTTPClientConfig.create(timeout=(5, 30), total_timeout=90)
        """
        timeout_cfg = _build_timeout(timeout)
        overrides = {}
        if connect_timeout is not None:
            overrides['connect'] = connect_timeout
        if inactivity_timeout is not None:
            overrides['inactivity'] = inactivity_timeout
        if total_timeout is not None:
            overrides['total'] = total_timeout
        if overrides:
            timeout_cfg = replace(timeout_cfg, **overrides)

        return cls(
            base_url=base_url,
            headers=headers or {},
            user_agent=user_agent,
            timeout=timeout_cfg,
            redirect=RedirectConfig(mode=redirect_mode, max_redirects=max_redirects),
            security=SecurityConfig(verify_ssl=verify_ssl),
            logging=logging,
        )

    def with_timeout(self, timeout: Union[float, Tuple[float, float], TimeoutConfig]) -> 'HTTPClientConfig':
        """
        Создать новый конфиг с изменённым timeout.

        Example:
            >>> new_config = config.with_timeout(TimeoutConfig(total=5))
        """
        return replace(self, timeout=_build_timeout(timeout))

    def with_redirects(
        self,
        mode: Union[str, RedirectMode],
        max_redirects: Optional[int] = None
    ) -> 'HTTPClientConfig':
        """
        Создать новый конфиг с другой политикой редиректов.

        Example:
            >>> lax = config.with_redirects("lax")
        """
        if max_redirects is None:
            max_redirects = self.redirect.max_redirects
        return replace(self, redirect=RedirectConfig(mode=mode, max_redirects=max_redirects))

    def with_headers(self, headers: Dict[str, str]) -> 'HTTPClientConfig':
        """
        Создать новый конфиг с дополнительными заголовками.

        Example:
            >>> new_config = config.with_headers({"X-API-Key": "secret"})
        """
        merged = dict(self.headers)
        merged.update(headers)
        return replace(self, headers=merged)


def _build_timeout(timeout: Union[float, Tuple[float, float], TimeoutConfig, None]) -> TimeoutConfig:
    if timeout is None:
        return TimeoutConfig()
    if isinstance(timeout, TimeoutConfig):
        return timeout
    if isinstance(timeout, tuple):
        return TimeoutConfig(connect=timeout[0], inactivity=timeout[1])
    return TimeoutConfig(inactivity=timeout)
