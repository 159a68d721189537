"""
Environment configuration for HTTP Exchange.

Example:
    >>> from http_exchange.core.env_config import load_from_env
    >>> config = load_from_env()
    >>> config = load_from_env(env_file=None, timeout_total=10)
"""

from .loader import load_from_env, print_config_summary
from .validator import HTTPExchangeSettings

__all__ = [
    "load_from_env",
    "print_config_summary",
    "HTTPExchangeSettings",
]
