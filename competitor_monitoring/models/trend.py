"""
Производные снимки: рыночный тренд и статистика мониторинга.

Оба объекта вычисляются по запросу и нигде не хранятся.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any

from .enums import TrendDirection
from ..utils.serialization import market_trend_to_dict, monitoring_stats_to_dict


@dataclass
class MarketTrend:
    """
    Агрегированная статистика цен товара по всем площадкам.

    Attributes:
        product_name: Название товара
        avg_price: Средняя цена по всем записям
        price_change_24h: Изменение цены за 24 часа, %
        price_change_7d: Изменение цены за 7 дней, %
        price_change_30d: Изменение цены за 30 дней, %
        volatility: Коэффициент вариации цен, %
        trend_direction: Направление тренда
        opportunities: Эвристические рекомендации
    """

    product_name: str
    avg_price: float
    price_change_24h: float
    price_change_7d: float
    price_change_30d: float
    volatility: float
    trend_direction: TrendDirection
    opportunities: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return market_trend_to_dict(self)


@dataclass
class MonitoringStats:
    """Сводные показатели реестра правил."""

    total_rules: int
    active_rules: int
    total_products: int
    total_alerts_24h: int
    average_check_frequency: str

    def to_dict(self) -> Dict[str, Any]:
        return monitoring_stats_to_dict(self)
