"""
Модель правила мониторинга.

Одно правило описывает, за каким товаром следить, на каких площадках,
как часто проверять цены и при каком изменении поднимать оповещение.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Dict, Any, Union

from .enums import MonitoringFrequency
from ..utils.serialization import rule_to_dict


@dataclass
class MonitoringRule:
    """
    Правило мониторинга цен конкурентов.

    Attributes:
        id: Уникальный ID правила
        product_name: Название отслеживаемого товара
        platforms: Идентификаторы площадок
        frequency: Частота проверки
        price_threshold: Порог изменения цены в процентах (5 означает ±5%)
        is_active: Участвует ли правило в циклах мониторинга
        created_at: Время создания правила
        last_check: Время последней успешной проверки
    """

    id: str
    product_name: str
    platforms: List[str] = field(default_factory=list)
    frequency: Union[MonitoringFrequency, str] = MonitoringFrequency.DAILY
    price_threshold: float = 5.0
    is_active: bool = True
    created_at: datetime = field(default_factory=datetime.now)
    last_check: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Преобразование в словарь."""
        return rule_to_dict(self)

    def __str__(self) -> str:
        frequency = self.frequency.value if isinstance(self.frequency, MonitoringFrequency) else self.frequency
        return f"MonitoringRule(id='{self.id}', product='{self.product_name}', frequency={frequency})"
