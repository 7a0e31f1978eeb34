"""
Анализатор рыночных трендов.

Агрегирует все истории товара (по всем площадкам и продавцам) и считает
среднюю цену, изменения за 24 часа, 7 и 30 дней, волатильность,
направление тренда и эвристические возможности.
"""

from datetime import datetime, timedelta
from typing import List, Optional
import logging
import statistics

from ..models.price_history import PriceEntry
from ..models.trend import MarketTrend
from ..utils.price_statistics import (
    calculate_price_change,
    calculate_volatility,
    determine_trend,
    identify_opportunities,
    generate_simulated_trend,
)
from .history_store import PriceHistoryStore


logger = logging.getLogger(__name__)

TREND_WINDOWS = {
    '24h': timedelta(hours=24),
    '7d': timedelta(days=7),
    '30d': timedelta(days=30),
}


def _window(entries: List[PriceEntry], now: datetime, span: timedelta) -> List[PriceEntry]:
    start = now - span
    return [entry for entry in entries if entry.timestamp >= start]


def simulated_market_trend(product_name: str) -> MarketTrend:
    """Детерминированный тренд для товара без истории цен."""
    simulated = generate_simulated_trend(product_name)
    return MarketTrend(
        product_name=product_name,
        avg_price=simulated['avg_price'],
        price_change_24h=simulated['price_change_24h'],
        price_change_7d=simulated['price_change_7d'],
        price_change_30d=simulated['price_change_30d'],
        volatility=simulated['volatility'],
        trend_direction=determine_trend(simulated['price_change_7d']),
        opportunities=identify_opportunities(
            simulated['price_change_24h'],
            simulated['price_change_7d'],
            simulated['volatility']
        )
    )


def analyze_trend(product_name: str,
                  store: PriceHistoryStore,
                  now: Optional[datetime] = None) -> MarketTrend:
    """
    Рыночный тренд товара по всем его историям.

    Args:
        product_name: Название товара
        store: Хранилище историй цен
        now: Момент, от которого отсчитываются окна (по умолчанию - текущий)

    Returns:
        Снимок тренда; синтетический, если истории нет
    """
    histories = store.get_product_histories(product_name)
    all_prices = sorted(
        (entry for history in histories for entry in history.prices),
        key=lambda entry: entry.timestamp
    )

    if not all_prices:
        logger.debug(f"Нет истории цен для '{product_name}', используется синтетический тренд")
        return simulated_market_trend(product_name)

    now = now or datetime.now()

    price_change_24h = calculate_price_change(_window(all_prices, now, TREND_WINDOWS['24h']))
    price_change_7d = calculate_price_change(_window(all_prices, now, TREND_WINDOWS['7d']))
    price_change_30d = calculate_price_change(_window(all_prices, now, TREND_WINDOWS['30d']))
    volatility = calculate_volatility(all_prices)

    return MarketTrend(
        product_name=product_name,
        avg_price=statistics.fmean(entry.price for entry in all_prices),
        price_change_24h=price_change_24h,
        price_change_7d=price_change_7d,
        price_change_30d=price_change_30d,
        volatility=volatility,
        trend_direction=determine_trend(price_change_7d),
        opportunities=identify_opportunities(price_change_24h, price_change_7d, volatility)
    )
