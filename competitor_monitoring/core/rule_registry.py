"""
Реестр правил мониторинга.

Владеет набором правил, создаёт и удаляет их и решает, какие правила
пора проверять в текущем цикле.
"""

from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Union
import logging

from ..models.enums import MarketplaceType, MonitoringFrequency, platform_value
from ..models.rule import MonitoringRule
from ..models.alert import generate_id
from .exceptions import RuleNotFoundError


logger = logging.getLogger(__name__)

# Минимальный интервал между проверками для каждой частоты
FREQUENCY_INTERVALS: Dict[MonitoringFrequency, timedelta] = {
    MonitoringFrequency.HOURLY: timedelta(hours=1),
    MonitoringFrequency.DAILY: timedelta(hours=24),
    MonitoringFrequency.WEEKLY: timedelta(days=7),
}

# Частота в часах для сводной статистики
FREQUENCY_HOURS: Dict[MonitoringFrequency, int] = {
    MonitoringFrequency.HOURLY: 1,
    MonitoringFrequency.DAILY: 24,
    MonitoringFrequency.WEEKLY: 168,
}


def _coerce_frequency(frequency: Union[MonitoringFrequency, str, None]) -> Optional[MonitoringFrequency]:
    if isinstance(frequency, MonitoringFrequency):
        return frequency
    try:
        return MonitoringFrequency(frequency)
    except ValueError:
        return None


def is_due(rule: MonitoringRule, now: datetime) -> bool:
    """
    Нужно ли проверять правило в момент `now`.

    Правило без успешных проверок проверяется всегда. Иначе - когда с
    последней проверки прошло строго больше интервала частоты.
    Неизвестная частота никогда не приводит к проверке.
    """
    if rule.last_check is None:
        return True

    frequency = _coerce_frequency(rule.frequency)
    if frequency is None:
        return False

    return now - rule.last_check > FREQUENCY_INTERVALS[frequency]


def frequency_label(rules: Iterable[MonitoringRule]) -> str:
    """
    Качественная оценка средней частоты проверок.

    Returns:
        "High" (< 2 ч, в том числе без правил), "Medium" (< 24 ч) или "Low"
    """
    hours = []
    for rule in rules:
        frequency = _coerce_frequency(rule.frequency)
        hours.append(FREQUENCY_HOURS.get(frequency, FREQUENCY_HOURS[MonitoringFrequency.WEEKLY]))

    # Без активных правил средняя частота считается нулевой
    average = sum(hours) / len(hours) if hours else 0
    if average < 2:
        return "High"
    if average < 24:
        return "Medium"
    return "Low"


class RuleRegistry:
    """Хранилище правил мониторинга в памяти процесса."""

    def __init__(self):
        self._rules: Dict[str, MonitoringRule] = {}

    def add_rule(self,
                 product_name: str,
                 platforms: Optional[Iterable[Union[MarketplaceType, str]]] = None,
                 frequency: Union[MonitoringFrequency, str] = MonitoringFrequency.DAILY,
                 price_threshold: float = 5.0,
                 now: Optional[datetime] = None) -> str:
        """
        Добавляет правило мониторинга.

        Args:
            product_name: Название товара
            platforms: Площадки (по умолчанию - все известные)
            frequency: Частота проверки
            price_threshold: Порог изменения цены в процентах
            now: Время создания (по умолчанию - текущее)

        Returns:
            ID созданного правила

        Raises:
            ValueError: При некорректных параметрах правила
        """
        if not product_name or not product_name.strip():
            raise ValueError("Название товара не может быть пустым")

        if price_threshold < 0:
            raise ValueError(f"Порог изменения цены не может быть отрицательным: {price_threshold}")

        parsed_frequency = _coerce_frequency(frequency)
        if parsed_frequency is None:
            raise ValueError(f"Неизвестная частота проверки: {frequency}")

        if platforms is None:
            platforms = list(MarketplaceType)

        created_at = now or datetime.now()
        rule = MonitoringRule(
            id=generate_id("rule", created_at),
            product_name=product_name,
            platforms=[platform_value(p) for p in platforms],
            frequency=parsed_frequency,
            price_threshold=price_threshold,
            is_active=True,
            created_at=created_at,
        )
        self._rules[rule.id] = rule

        logger.info("Правило мониторинга добавлено",
                    extra={"context": {"rule_id": rule.id, "product_name": product_name}})
        return rule.id

    def remove_rule(self, rule_id: str) -> bool:
        """
        Удаляет правило без возможности восстановления.

        Returns:
            True, если правило существовало
        """
        removed = self._rules.pop(rule_id, None) is not None
        if removed:
            logger.info("Правило мониторинга удалено", extra={"context": {"rule_id": rule_id}})
        return removed

    def get_rule(self, rule_id: str) -> MonitoringRule:
        if rule_id not in self._rules:
            raise RuleNotFoundError(f"Правило с ID {rule_id} не найдено")
        return self._rules[rule_id]

    def activate_rule(self, rule_id: str) -> None:
        """Включает правило в циклы мониторинга."""
        rule = self.get_rule(rule_id)
        if not rule.is_active:
            rule.is_active = True
            logger.info(f"Мониторинг товара {rule.product_name} включен")

    def deactivate_rule(self, rule_id: str) -> None:
        """Исключает правило из циклов мониторинга, не удаляя его."""
        rule = self.get_rule(rule_id)
        if rule.is_active:
            rule.is_active = False
            logger.info(f"Мониторинг товара {rule.product_name} отключен")

    def list_rules(self) -> List[MonitoringRule]:
        return list(self._rules.values())

    def list_active_rules(self) -> List[MonitoringRule]:
        return [rule for rule in self._rules.values() if rule.is_active]

    def due_rules(self, now: datetime) -> List[MonitoringRule]:
        """Активные правила, которые пора проверить."""
        return [rule for rule in self._rules.values() if rule.is_active and is_due(rule, now)]

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: str) -> bool:
        return rule_id in self._rules
