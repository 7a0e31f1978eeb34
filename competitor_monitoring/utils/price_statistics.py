"""
Статистические функции для анализа рыночных трендов.

Все функции чистые: принимают записи истории или готовые числа
и не обращаются к состоянию сервиса.
"""

import math
import statistics
import struct
from typing import Dict, List, Sequence

from ..models.enums import TrendDirection
from ..models.price_history import PriceEntry

# Полоса шума: изменения за 7 дней в пределах ±3% трендом не считаются
TREND_BAND_PERCENT = 3.0

OPPORTUNITY_CORRECTION_IN_UPTREND = "short-term correction within an uptrend — entry opportunity"
OPPORTUNITY_HIGH_VOLATILITY = "high volatility — consider dynamic pricing"
OPPORTUNITY_STRONG_UPTREND = "strong uptrend — opportunity to raise prices"
OPPORTUNITY_DOWNTREND = "downtrend — opportunity to gain market share"
OPPORTUNITY_STABLE_MARKET = "stable market — good time to test premium pricing"

_INT32_MAX = 2147483647


def calculate_price_change(prices: Sequence[PriceEntry]) -> float:
    """
    Изменение цены между первой и последней записью окна.

    Args:
        prices: Записи окна в хронологическом порядке

    Returns:
        Изменение в процентах; 0, если записей меньше двух
    """
    if len(prices) < 2:
        return 0.0

    first_price = prices[0].price
    last_price = prices[-1].price
    return ((last_price - first_price) / first_price) * 100


def calculate_volatility(prices: Sequence[PriceEntry]) -> float:
    """
    Коэффициент вариации цен в процентах.

    Используется стандартное отклонение генеральной совокупности
    (деление на N).

    Args:
        prices: Записи истории

    Returns:
        Волатильность в процентах; 0, если записей меньше двух
    """
    if len(prices) < 2:
        return 0.0

    values = [entry.price for entry in prices]
    mean = statistics.fmean(values)
    return statistics.pstdev(values) / mean * 100


def determine_trend(price_change_7d: float) -> TrendDirection:
    """Направление тренда по изменению за 7 дней."""
    if price_change_7d > TREND_BAND_PERCENT:
        return TrendDirection.UP
    if price_change_7d < -TREND_BAND_PERCENT:
        return TrendDirection.DOWN
    return TrendDirection.STABLE


def identify_opportunities(change_24h: float, change_7d: float, volatility: float) -> List[str]:
    """
    Эвристические рыночные возможности.

    Правила независимы, срабатывать может любое их подмножество;
    порядок результата фиксирован.
    """
    opportunities = []

    if change_24h < -5 and change_7d > 0:
        opportunities.append(OPPORTUNITY_CORRECTION_IN_UPTREND)

    if volatility > 10:
        opportunities.append(OPPORTUNITY_HIGH_VOLATILITY)

    if change_24h > 5 and change_7d > 10:
        opportunities.append(OPPORTUNITY_STRONG_UPTREND)

    if change_7d < -10:
        opportunities.append(OPPORTUNITY_DOWNTREND)

    if abs(change_24h) < 1 and volatility < 3:
        opportunities.append(OPPORTUNITY_STABLE_MARKET)

    return opportunities


def round_half_up(value: float, digits: int = 2) -> float:
    """Округление с половиной вверх (не банковское, в отличие от round())."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def fold_name_hash(name: str) -> int:
    """
    32-битный знаковый хеш строки.

    Каждая кодовая единица UTF-16 сворачивается как `hash * 31 + code`
    с обрезкой до 32 бит после каждого шага.
    """
    encoded = name.encode('utf-16-le')
    codes = struct.unpack(f'<{len(encoded) // 2}H', encoded)

    value = 0
    for code in codes:
        value = (value * 31 + code) & 0xFFFFFFFF
        if value >= 0x80000000:
            value -= 0x100000000
    return value


def generate_simulated_trend(product_name: str) -> Dict[str, float]:
    """
    Детерминированные показатели тренда для товара без истории.

    Args:
        product_name: Название товара

    Returns:
        Словарь avg_price, price_change_24h, price_change_7d,
        price_change_30d, volatility (округлено до 2 знаков)
    """
    seed = abs(fold_name_hash(product_name)) / _INT32_MAX

    return {
        'avg_price': round_half_up(50 + seed * 200),
        'price_change_24h': round_half_up((seed - 0.5) * 10),
        'price_change_7d': round_half_up((seed - 0.5) * 20),
        'price_change_30d': round_half_up((seed - 0.5) * 40),
        'volatility': round_half_up(seed * 15),
    }
