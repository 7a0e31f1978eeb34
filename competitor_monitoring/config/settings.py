"""
Настройки и конфигурация модуля мониторинга конкурентов.

Содержит параметры циклов мониторинга, уведомлений и логирования.
Значения по умолчанию перекрываются файлом config.json, а затем
переменными окружения (в том числе из файла .env).
"""

import os
import json
from pathlib import Path
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field, asdict
import logging

from dotenv import load_dotenv


logger = logging.getLogger(__name__)

VALID_FREQUENCIES = ('hourly', 'daily', 'weekly')
VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class MonitoringConfig:
    """Конфигурация мониторинга цен."""

    # Период таймера циклов, не зависит от частоты отдельных правил
    cycle_interval_seconds: int = 300

    # Максимальная длина истории одного продавца
    history_limit: int = 100

    # Значения по умолчанию для новых правил
    default_frequency: str = 'daily'
    default_price_threshold: float = 5.0

    # Источник цен
    fetcher_base_url: str = ''
    request_timeout: int = 30  # Секунды


@dataclass
class NotificationConfig:
    """Конфигурация уведомлений."""

    enabled: bool = True

    email_enabled: bool = False
    telegram_enabled: bool = False
    webhook_enabled: bool = False

    # Email настройки
    smtp_server: str = 'smtp.gmail.com'
    smtp_port: int = 587
    email_from: str = ''
    email_password: str = ''
    email_to: List[str] = field(default_factory=list)

    # Telegram настройки
    telegram_bot_token: str = ''
    telegram_chat_ids: List[str] = field(default_factory=list)

    # Webhook настройки
    webhook_url: str = ''
    webhook_headers: Dict[str, str] = field(default_factory=dict)
    webhook_timeout: int = 30


@dataclass
class LoggingConfig:
    """Конфигурация логирования."""

    level: str = 'INFO'

    # Пустая строка отключает запись в файл
    log_file: str = 'logs/competitor_monitoring.log'

    log_format: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    date_format: str = '%Y-%m-%d %H:%M:%S'

    # Ротация логов
    max_file_size_mb: int = 10
    backup_count: int = 5

    console_output: bool = True
    console_level: str = 'INFO'


class Settings:
    """
    Основной класс настроек модуля.

    Управляет загрузкой, сохранением и валидацией всех конфигураций.
    """

    def __init__(self, config_dir: Optional[str] = None, load_env: bool = True):
        """
        Инициализация настроек.

        Args:
            config_dir: Директория с config.json
            load_env: Применять ли переменные окружения
        """
        self.config_dir = Path(config_dir) if config_dir else Path.cwd()
        self.config_file = self.config_dir / 'config.json'

        self.monitoring = MonitoringConfig()
        self.notifications = NotificationConfig()
        self.logging = LoggingConfig()

        self.load_config()
        if load_env:
            self.apply_environment_variables()

        logger.debug(f"Настройки инициализированы из {self.config_dir}")

    def load_config(self) -> None:
        """Загрузка настроек из файла конфигурации."""
        if not self.config_file.exists():
            logger.info("Файл конфигурации не найден, используются настройки по умолчанию")
            return

        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config_data = json.load(f)

            if 'monitoring' in config_data:
                self._update_config(self.monitoring, config_data['monitoring'])

            if 'notifications' in config_data:
                self._update_config(self.notifications, config_data['notifications'])

            if 'logging' in config_data:
                self._update_config(self.logging, config_data['logging'])

            logger.info("Настройки успешно загружены из файла")

        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Ошибка загрузки настроек: {e}")
            logger.info("Используются настройки по умолчанию")

    def _update_config(self, config_obj: Any, config_data: Dict[str, Any]) -> None:
        """Обновление известных полей объекта конфигурации."""
        for key, value in config_data.items():
            if hasattr(config_obj, key):
                setattr(config_obj, key, value)
            else:
                logger.warning(f"Неизвестный параметр конфигурации: {key}")

    def save_config(self) -> None:
        """Сохранение настроек в файл конфигурации."""
        self.config_dir.mkdir(parents=True, exist_ok=True)

        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)

        logger.info(f"Настройки сохранены в {self.config_file}")

    def apply_environment_variables(self) -> None:
        """Применение переменных окружения (и файла .env) к настройкам."""
        load_dotenv(self.config_dir / '.env')

        if os.getenv('MONITOR_CYCLE_INTERVAL_SECONDS'):
            self.monitoring.cycle_interval_seconds = int(os.environ['MONITOR_CYCLE_INTERVAL_SECONDS'])

        if os.getenv('PRICE_FETCHER_URL'):
            self.monitoring.fetcher_base_url = os.environ['PRICE_FETCHER_URL']

        if os.getenv('TELEGRAM_BOT_TOKEN'):
            self.notifications.telegram_bot_token = os.environ['TELEGRAM_BOT_TOKEN']
            self.notifications.telegram_enabled = True

        if os.getenv('TELEGRAM_CHAT_IDS'):
            self.notifications.telegram_chat_ids = _split_list(os.environ['TELEGRAM_CHAT_IDS'])

        if os.getenv('WEBHOOK_URL'):
            self.notifications.webhook_url = os.environ['WEBHOOK_URL']
            self.notifications.webhook_enabled = True

        if os.getenv('EMAIL_FROM'):
            self.notifications.email_from = os.environ['EMAIL_FROM']

        if os.getenv('EMAIL_PASSWORD'):
            self.notifications.email_password = os.environ['EMAIL_PASSWORD']

        if os.getenv('EMAIL_TO'):
            self.notifications.email_to = _split_list(os.environ['EMAIL_TO'])

        if os.getenv('LOG_LEVEL'):
            self.logging.level = os.environ['LOG_LEVEL'].upper()

    def validate_config(self) -> List[str]:
        """
        Валидация настроек.

        Returns:
            Список ошибок валидации
        """
        errors = []

        if self.monitoring.cycle_interval_seconds <= 0:
            errors.append("Интервал цикла мониторинга должен быть больше 0")

        if self.monitoring.history_limit <= 0:
            errors.append("Размер истории цен должен быть больше 0")

        if self.monitoring.default_price_threshold < 0:
            errors.append("Порог изменения цены не может быть отрицательным")

        if self.monitoring.default_frequency not in VALID_FREQUENCIES:
            errors.append(f"Неверная частота по умолчанию: {self.monitoring.default_frequency}")

        if self.notifications.enabled:
            if self.notifications.email_enabled and not self.notifications.email_from:
                errors.append("Для email уведомлений необходимо указать отправителя")

            if self.notifications.telegram_enabled and not self.notifications.telegram_bot_token:
                errors.append("Для Telegram уведомлений необходимо указать токен бота")

            if self.notifications.webhook_enabled and not self.notifications.webhook_url:
                errors.append("Для webhook уведомлений необходимо указать URL")

        if self.logging.level not in VALID_LOG_LEVELS:
            errors.append(f"Неверный уровень логирования: {self.logging.level}")

        return errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            'monitoring': asdict(self.monitoring),
            'notifications': asdict(self.notifications),
            'logging': asdict(self.logging),
        }

    def __repr__(self) -> str:
        return f"Settings(config_file='{self.config_file}')"


def _split_list(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(',') if item.strip()]


# Глобальный экземпляр настроек
_settings_instance: Optional[Settings] = None


def get_settings(config_dir: Optional[str] = None) -> Settings:
    """
    Получение глобального экземпляра настроек.

    Args:
        config_dir: Директория конфигурации (используется только при первом вызове)
    """
    global _settings_instance

    if _settings_instance is None:
        _settings_instance = Settings(config_dir=config_dir)

    return _settings_instance


def reset_settings() -> None:
    """Сброс глобального экземпляра настроек."""
    global _settings_instance
    _settings_instance = None
