"""
Кастомные исключения для модуля мониторинга конкурентов.
"""


class PriceMonitoringError(Exception):
    """Базовое исключение для модуля мониторинга цен."""
    pass


class ConfigurationError(PriceMonitoringError):
    """Ошибка конфигурации."""
    pass


class RuleNotFoundError(PriceMonitoringError):
    """Правило мониторинга не найдено в реестре."""
    pass


class PriceFetchError(PriceMonitoringError):
    """Ошибка получения текущих цен конкурентов."""
    pass


class NotificationError(PriceMonitoringError):
    """Оповещение не удалось доставить ни через один канал."""
    pass


class SchedulerError(PriceMonitoringError):
    """Ошибка планировщика циклов мониторинга."""
    pass
