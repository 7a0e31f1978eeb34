"""
Модуль мониторинга цен конкурентов и анализа рыночных трендов.

Этот модуль предоставляет функциональность для:
- Ведения правил мониторинга товаров на маркетплейсах
- Периодической проверки цен конкурентов и истории цен
- Оповещений о значительных изменениях цен
- Анализа трендов и волатильности цен

Основные компоненты:
- CompetitorMonitor: точка входа мониторинга
- MonitoringScheduler: циклы проверки правил
- NotificationService: доставка оповещений
"""

__version__ = "1.0.0"
__author__ = "WB Assistant Team"

from .core.competitor_monitor import CompetitorMonitor
from .core.price_fetcher import PriceObservation, HttpPriceFetcher, StaticPriceFetcher
from .models import MonitoringFrequency, MarketplaceType

__all__ = [
    "CompetitorMonitor",
    "PriceObservation",
    "HttpPriceFetcher",
    "StaticPriceFetcher",
    "MonitoringFrequency",
    "MarketplaceType",
]
