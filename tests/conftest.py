"""
Pytest configuration and fixtures for http-exchange-core tests.
"""

import pytest

from src.http_exchange.core.http_client import HTTPClient
from src.http_exchange.core.config import HTTPClientConfig, RedirectMode
from src.http_exchange.core.logging.config import LoggingConfig


@pytest.fixture
def base_url():
    """Base URL for testing."""
    return "https://api.example.com"


@pytest.fixture
def client(base_url):
    """HTTP client with the default (strict) redirect policy."""
    client = HTTPClient(base_url=base_url, timeout=10)
    yield client
    client.close()


@pytest.fixture
def lax_client(base_url):
    """HTTP client that re-issues 301/302 with the original method."""
    client = HTTPClient(base_url=base_url, timeout=10, redirect_mode=RedirectMode.LAX)
    yield client
    client.close()


@pytest.fixture
def no_redirect_client(base_url):
    """HTTP client that never follows redirects."""
    client = HTTPClient(base_url=base_url, timeout=10, redirect_mode=RedirectMode.DISABLED)
    yield client
    client.close()


@pytest.fixture
def logging_config_with_file(tmp_path):
    """
    LoggingConfig fixture with JSON file logging enabled.

    Uses temporary directory for log files to avoid cleanup issues.
    """
    log_file = tmp_path / "exchange.log"
    return LoggingConfig.create(
        level="DEBUG",
        format="json",
        enable_console=False,
        enable_file=True,
        file_path=str(log_file)
    )


@pytest.fixture
def logged_client(base_url, logging_config_with_file):
    """Client that writes JSON logs to a temp file."""
    config = HTTPClientConfig.create(base_url=base_url, logging=logging_config_with_file)
    client = HTTPClient(config=config)
    yield client
    client.close()
