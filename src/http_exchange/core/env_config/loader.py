"""
Configuration loader from environment variables and .env files.
"""

from typing import Any, Optional

from ..config import (
    DEFAULT_USER_AGENT,
    HTTPClientConfig,
    RedirectConfig,
    SecurityConfig,
    TimeoutConfig,
)
from ..logging.config import LoggingConfig
from .validator import HTTPExchangeSettings


def load_from_env(env_file: Optional[str] = '.env', **overrides: Any) -> HTTPClientConfig:
    """
    Load HTTPClientConfig from the environment.

    Priority (highest to lowest):
    1. **overrides - explicit keyword arguments, named like the settings fields
    2. Environment variables (HTTP_EXCHANGE_*)
    3. .env file
    4. Defaults

    Args:
        env_file: .env file path (None disables .env loading)
        **overrides: Explicit values, e.g. ``timeout_total=10``

    Example:
        >>> config = load_from_env(redirect_mode="lax")
    """
    settings = HTTPExchangeSettings(_env_file=env_file, **overrides)

    logging_config = None
    if settings.log_level:
        logging_config = LoggingConfig(
            level=settings.log_level,
            format=settings.log_format,
            enable_console=settings.log_enable_console,
            enable_file=settings.log_file_path is not None,
            file_path=settings.log_file_path,
        )

    return HTTPClientConfig(
        base_url=settings.base_url,
        user_agent=settings.user_agent or DEFAULT_USER_AGENT,
        timeout=TimeoutConfig(
            connect=settings.timeout_connect,
            inactivity=settings.timeout_inactivity,
            total=settings.timeout_total,
        ),
        redirect=RedirectConfig(
            mode=settings.redirect_mode,
            max_redirects=settings.redirect_max,
        ),
        security=SecurityConfig(
            verify_ssl=settings.security_verify_ssl,
            max_response_size=settings.security_max_response_size,
        ),
        logging=logging_config,
    )


def print_config_summary(config: HTTPClientConfig) -> None:
    """
    Print a configuration summary.

    Example:
        >>> print_config_summary(load_from_env())
        HTTPClientConfig:
          base_url: https://api.example.com
          timeout: connect=5s, inactivity=30s, total=Nones
          ...
    """
    print("HTTPClientConfig:")
    print(f"  base_url: {config.base_url}")
    print(f"  timeout: connect={config.timeout.connect}s, "
          f"inactivity={config.timeout.inactivity}s, total={config.timeout.total}s")
    print(f"  redirect: mode={config.redirect.mode.value}, max={config.redirect.max_redirects}")
    print(f"  security: verify_ssl={config.security.verify_ssl}, "
          f"max_size={config.security.max_response_size}")
    if config.logging:
        print(f"  logging: level={config.logging.level.value}, format={config.logging.format.value}")
