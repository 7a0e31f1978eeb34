"""
Конфигурация логирования для модуля мониторинга конкурентов.

Предоставляет настройку корневого логгера с ротацией файлов и форматтер,
который дописывает структурированные поля из `extra={"context": {...}}`.
"""

import os
import logging
import logging.handlers
from typing import Any, Dict, Optional

from ..config.settings import LoggingConfig


class StructuredFormatter(logging.Formatter):
    """
    Форматтер, добавляющий поля контекста к сообщению.

    Пример: `logger.info("Правило добавлено", extra={"context": {"rule_id": rid}})`
    даёт строку `... - Правило добавлено | rule_id=rule_1`.
    """

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context: Optional[Dict[str, Any]] = getattr(record, 'context', None)
        if context:
            fields = " ".join(f"{key}={value}" for key, value in context.items())
            message = f"{message} | {fields}"
        return message


def setup_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    """
    Настройка системы логирования.

    Args:
        config: Конфигурация логирования (по умолчанию - значения LoggingConfig)

    Returns:
        Настроенный корневой логгер
    """
    config = config or LoggingConfig()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.level.upper()))
    root_logger.handlers.clear()

    formatter = StructuredFormatter(config.log_format, datefmt=config.date_format)

    if config.log_file:
        log_dir = os.path.dirname(config.log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            config.log_file,
            maxBytes=config.max_file_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    if config.console_output:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        console_handler.setLevel(getattr(logging, config.console_level.upper()))
        root_logger.addHandler(console_handler)

    # Снижение уровня логирования для внешних библиотек
    logging.getLogger('aiohttp').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"Система логирования настроена. Уровень: {config.level}, Файл: {config.log_file or '-'}"
    )
    return root_logger

