"""
Политика редиректов.

Решение принимается по одному ответу за раз: follow / следующий метод /
следующий URL. Само выполнение перехода делает HTTPClient.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union
from urllib.parse import urljoin

from .config import RedirectConfig, RedirectMode
from .models import SAFE_METHODS

logger = logging.getLogger(__name__)

REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})


@dataclass(frozen=True)
class RedirectDecision:
    """
    Результат RedirectPolicy.decide.

    Attributes:
        follow: Повторять ли запрос автоматически
        next_method: Метод следующего запроса (исходный, если follow=False)
        next_url: URL следующего запроса (None, если follow=False)
    """
    follow: bool
    next_method: str
    next_url: Optional[str] = None

    @classmethod
    def stop(cls, method: str) -> 'RedirectDecision':
        return cls(follow=False, next_method=method, next_url=None)


class RedirectPolicy:
    """
    Решает, следовать ли 3xx ответу.

    | Статус   | Метод дальше                                        |
    |----------|-----------------------------------------------------|
    | 301, 302 | STRICT: только GET/HEAD; LAX: исходный метод        |
    | 303      | всегда GET                                          |
    | 307, 308 | исходный метод                                      |

    Без Location ответ не переходится. DISABLED не переходит никогда.

    Examples:
        >>> policy = RedirectPolicy(RedirectMode.STRICT)
        >>> policy.decide('POST', 301, '/long').follow
        False
        >>> RedirectPolicy("lax").decide('POST', 301, '/long').next_method
        'POST'
    """

    def __init__(self, mode: Union[str, RedirectMode] = RedirectMode.STRICT, max_redirects: int = 10):
        config = RedirectConfig(mode=mode, max_redirects=max_redirects)
        self.mode = config.mode
        self.max_redirects = config.max_redirects

    @classmethod
    def from_config(cls, config: RedirectConfig) -> 'RedirectPolicy':
        return cls(config.mode, config.max_redirects)

    def decide(
        self,
        method: str,
        status_code: int,
        location: Optional[str],
        base_url: Optional[str] = None
    ) -> RedirectDecision:
        """
        Принять решение по одному ответу.

        Args:
            method: Метод запроса, который вернул этот ответ
            status_code: Статус ответа
            location: Значение заголовка Location (или None)
            base_url: URL ответа; относительный Location резолвится от него

        Returns:
            RedirectDecision
        """
        method = method.upper()

        if self.mode is RedirectMode.DISABLED:
            return RedirectDecision.stop(method)

        if status_code not in REDIRECT_STATUSES or not location:
            return RedirectDecision.stop(method)

        next_url = urljoin(base_url, location) if base_url else location

        if status_code == 303:
            return RedirectDecision(follow=True, next_method='GET', next_url=next_url)

        if status_code in (307, 308):
            return RedirectDecision(follow=True, next_method=method, next_url=next_url)

        # 301 / 302
        if self.mode is RedirectMode.STRICT and method not in SAFE_METHODS:
            logger.debug("Refusing to follow %s for %s under strict policy", status_code, method)
            return RedirectDecision.stop(method)

        return RedirectDecision(follow=True, next_method=method, next_url=next_url)

    def __repr__(self) -> str:
        return f"RedirectPolicy(mode={self.mode.value!r}, max_redirects={self.max_redirects})"
