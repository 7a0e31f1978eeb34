"""
Конфигурация модуля мониторинга конкурентов.
"""

from .settings import (
    Settings,
    MonitoringConfig,
    NotificationConfig,
    LoggingConfig,
    get_settings,
    reset_settings,
)

__all__ = [
    "Settings",
    "MonitoringConfig",
    "NotificationConfig",
    "LoggingConfig",
    "get_settings",
    "reset_settings",
]
