"""
Детектор изменений цен конкурентов.

Сравнивает только что полученную цену с предыдущим наблюдением того же
продавца и создаёт оповещение, если изменение достигает порога правила.
"""

from datetime import datetime
from typing import List, Optional, Sequence
import logging

from ..models.alert import Alert, generate_id
from ..models.enums import AlertSeverity
from ..models.rule import MonitoringRule
from .history_store import PriceHistoryStore
from .price_fetcher import PriceObservation


logger = logging.getLogger(__name__)

# Изменение строго больше этого значения - высокая важность
HIGH_SEVERITY_PERCENT = 15.0
# Изменение строго больше этого значения требует реакции
ACTIONABLE_PERCENT = 20.0
# Порог "значительного" изменения для рекомендаций
SIGNIFICANT_CHANGE_PERCENT = 10.0

ALERT_TITLE = "Price change detected"


def generate_price_change_suggestions(change_percent: float, platform: str, product_name: str) -> List[str]:
    """
    Рекомендации по реакции на изменение цены конкурента.

    Args:
        change_percent: Изменение цены в процентах
        platform: Площадка конкурента
        product_name: Название товара

    Returns:
        От одной до четырёх строк; последняя есть всегда
    """
    suggestions = []

    if change_percent > SIGNIFICANT_CHANGE_PERCENT:
        suggestions.append("competitor raised price — opportunity to hold yours for market share")
        suggestions.append("watch whether other competitors follow the increase")
    elif change_percent < -SIGNIFICANT_CHANGE_PERCENT:
        suggestions.append("competitor cut price significantly")
        suggestions.append("evaluate whether to match or differentiate on value")
        suggestions.append("check whether this is a temporary promotion or a permanent change")

    suggestions.append(f"review positioning of {product_name} on platform {platform}")
    return suggestions


def alert_severity(change_percent: float) -> AlertSeverity:
    if abs(change_percent) > HIGH_SEVERITY_PERCENT:
        return AlertSeverity.HIGH
    return AlertSeverity.MEDIUM


def is_actionable(change_percent: float) -> bool:
    return abs(change_percent) > ACTIONABLE_PERCENT


def build_alert(rule: MonitoringRule,
                observation: PriceObservation,
                previous_price: float,
                change_percent: float,
                now: Optional[datetime] = None) -> Alert:
    """Оповещение для изменения, уже прошедшего порог правила."""
    magnitude = abs(change_percent)
    direction = "increased" if change_percent > 0 else "decreased"
    suggestions = generate_price_change_suggestions(change_percent, observation.platform, rule.product_name)
    created_at = now or datetime.now()

    return Alert(
        id=generate_id("alert", created_at),
        severity=alert_severity(change_percent),
        title=ALERT_TITLE,
        message=f"{observation.seller_name} {direction} the price by {magnitude:.1f}%",
        timestamp=created_at,
        actionable=is_actionable(change_percent),
        suggested_action=suggestions[0] if suggestions else None,
        product_id=rule.product_name,
        platform=observation.platform,
        seller=observation.seller_name,
        change_percent=change_percent,
        previous_price=previous_price,
        current_price=observation.price,
    )


def detect_price_changes(rule: MonitoringRule,
                         observations: Sequence[PriceObservation],
                         store: PriceHistoryStore,
                         now: Optional[datetime] = None) -> List[Alert]:
    """
    Поиск значительных изменений цен среди текущих наблюдений.

    История каждого наблюдения уже должна содержать его цену последней
    записью, поэтому сравнение идёт с предпоследней записью.

    Args:
        rule: Правило мониторинга
        observations: Только что полученные цены
        store: Хранилище историй
        now: Время создания оповещений

    Returns:
        Оповещения в порядке наблюдений
    """
    alerts = []

    for observation in observations:
        history = store.get(rule.product_name, observation.platform, observation.seller_name)
        previous = history.get_previous_entry() if history is not None else None
        if previous is None:
            continue

        previous_price = previous.price
        if previous_price <= 0:
            logger.warning(f"Пропущено сравнение с некорректной предыдущей ценой {previous_price} "
                           f"({rule.product_name} / {observation.platform} / {observation.seller_name})")
            continue

        change_percent = ((observation.price - previous_price) / previous_price) * 100

        if abs(change_percent) >= rule.price_threshold:
            alerts.append(build_alert(rule, observation, previous_price, change_percent, now))

    return alerts
