"""
Модели данных для модуля мониторинга цен конкурентов.

Содержит:
- MonitoringRule: правило мониторинга товара
- PriceEntry, PriceHistory: ограниченная история цен продавца
- Alert: оповещение об изменении цены
- MarketTrend, MonitoringStats: производные снимки
- Перечисления площадок, частот, важности и направлений тренда
"""

from .enums import (
    MarketplaceType,
    MonitoringFrequency,
    AlertSeverity,
    TrendDirection,
    PriceSource,
)
from .rule import MonitoringRule
from .price_history import PriceEntry, PriceHistory, MAX_HISTORY_ENTRIES
from .alert import Alert
from .trend import MarketTrend, MonitoringStats

__all__ = [
    "MarketplaceType",
    "MonitoringFrequency",
    "AlertSeverity",
    "TrendDirection",
    "PriceSource",
    "MonitoringRule",
    "PriceEntry",
    "PriceHistory",
    "MAX_HISTORY_ENTRIES",
    "Alert",
    "MarketTrend",
    "MonitoringStats",
]
