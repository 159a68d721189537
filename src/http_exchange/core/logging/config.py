"""
Настройки логирования обменов.

Уровень и формат принимаются строками в любом регистре.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """json - одна запись на строку, text / colored - для терминала."""
    JSON = "json"
    TEXT = "text"
    COLORED = "colored"


@dataclass(frozen=True)
class LoggingConfig:
    """
    Куда и как писать события обмена (Request started / completed / failed).

    Attributes:
        level: Минимальный уровень
        format: json, text или colored
        enable_console: Писать в stdout
        enable_file: Писать в ротируемый файл (нужен file_path)
        file_path: Путь к файлу лога
        max_bytes: Размер файла до ротации
        backup_count: Сколько ротированных файлов хранить
        enable_correlation_id: Добавлять X-Correlation-ID вызова в каждую запись
        extra_fields: Постоянные поля каждой записи (service, env, ...)
    """

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.TEXT
    enable_console: bool = True
    enable_file: bool = False
    file_path: Optional[str] = None
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5
    enable_correlation_id: bool = True
    extra_fields: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.level, LogLevel):
            object.__setattr__(self, 'level', LogLevel(str(self.level).upper()))
        if not isinstance(self.format, LogFormat):
            object.__setattr__(self, 'format', LogFormat(str(self.format).lower()))
        if self.enable_file and not self.file_path:
            raise ValueError("file_path is required when enable_file=True")

    @classmethod
    def create(cls, level: str = "INFO", format: str = "text", **options: Any) -> "LoggingConfig":
        """
        Конфиг из строковых значений; file_path без enable_file включает файл.

        Example:
            >>> config = LoggingConfig.create("debug", "json", file_path="/tmp/exchange.log")
            >>> config.enable_file
            True
        """
        if options.get('file_path') and 'enable_file' not in options:
            options['enable_file'] = True
        options['extra_fields'] = dict(options.get('extra_fields') or {})
        return cls(level=level, format=format, **options)
