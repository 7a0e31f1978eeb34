"""
Перечисления для моделей мониторинга цен конкурентов.
"""

from enum import Enum


class MarketplaceType(Enum):
    """Площадка, на которой продаёт конкурент."""
    MERCADO_LIVRE = "mercadolivre"
    AMAZON = "amazon"
    SHOPEE = "shopee"
    MAGALU = "magalu"
    AMERICANAS = "americanas"
    WILDBERRIES = "wildberries"
    OZON = "ozon"
    OTHER = "other"


class MonitoringFrequency(Enum):
    """Частота проверки правила мониторинга."""
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"


class AlertSeverity(Enum):
    """Важность оповещения об изменении цены."""
    MEDIUM = "medium"
    HIGH = "high"


class TrendDirection(Enum):
    """Направление ценового тренда."""
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class PriceSource(Enum):
    """Источник информации о цене."""
    AUTOMATED_MONITORING = "automated_monitoring"  # Плановая проверка
    MANUAL = "manual"                              # Ручной ввод
    IMPORT = "import"                              # Загрузка извне


def platform_value(platform) -> str:
    """Строковый идентификатор площадки (enum или произвольная строка)."""
    if isinstance(platform, Enum):
        return platform.value
    return str(platform)


__all__ = [
    "MarketplaceType",
    "MonitoringFrequency",
    "AlertSeverity",
    "TrendDirection",
    "PriceSource",
    "platform_value",
]
