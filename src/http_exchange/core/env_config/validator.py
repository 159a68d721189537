"""
Pydantic settings model for environment configuration.
"""

from typing import Optional, Literal
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class HTTPExchangeSettings(BaseSettings):
    """
    HTTP Exchange configuration from environment variables.

    Reads from:
    1. Environment variables (HTTP_EXCHANGE_*)
    2. .env file
    3. Defaults

    Example .env file:
        HTTP_EXCHANGE_BASE_URL=https://api.example.com
        HTTP_EXCHANGE_TIMEOUT_CONNECT=5
        HTTP_EXCHANGE_TIMEOUT_INACTIVITY=10
        HTTP_EXCHANGE_TIMEOUT_TOTAL=30
        HTTP_EXCHANGE_REDIRECT_MODE=lax
        HTTP_EXCHANGE_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix='HTTP_EXCHANGE_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    base_url: Optional[str] = Field(default=None, description="Base URL for relative requests")
    user_agent: Optional[str] = Field(default=None, description="Default User-Agent header")

    # Timeouts (None = no limit)
    timeout_connect: Optional[float] = Field(default=5.0, ge=0)
    timeout_inactivity: Optional[float] = Field(default=30.0, ge=0)
    timeout_total: Optional[float] = Field(default=None, ge=0)

    # Redirects
    redirect_mode: Literal["strict", "lax", "disabled"] = Field(default="strict")
    redirect_max: int = Field(default=10, ge=0)

    # Security
    security_verify_ssl: bool = Field(default=True)
    security_max_response_size: int = Field(default=100 * 1024 * 1024, gt=0)

    # Logging (disabled unless a level is set)
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None
    log_format: Literal["json", "text", "colored"] = Field(default="text")
    log_enable_console: bool = Field(default=True)
    log_file_path: Optional[str] = None

    @field_validator('redirect_mode', 'log_format', mode='before')
    @classmethod
    def lower_case(cls, v):
        return v.lower() if isinstance(v, str) else v

    @field_validator('log_level', mode='before')
    @classmethod
    def upper_case(cls, v):
        return v.upper() if isinstance(v, str) else v

    @field_validator('timeout_total')
    @classmethod
    def validate_total(cls, v: Optional[float], info) -> Optional[float]:
        """Total budget must leave room for the connect phase."""
        connect = info.data.get('timeout_connect')
        if v is not None and connect is not None and v < connect:
            raise ValueError(f"total timeout ({v}) must be >= connect timeout ({connect})")
        return v
