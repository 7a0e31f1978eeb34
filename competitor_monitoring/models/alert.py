"""
Модель оповещения об изменении цены конкурента.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Dict, Any
import uuid

from .enums import AlertSeverity
from ..utils.serialization import alert_to_dict

ALERT_TYPE_COMPETITOR_PRICE_CHANGE = "competitor_price_change"


def generate_id(prefix: str, now: Optional[datetime] = None) -> str:
    """Идентификатор вида `<prefix>_<epoch-ms>_<9 hex>`."""
    moment = now or datetime.now()
    return f"{prefix}_{int(moment.timestamp() * 1000)}_{uuid.uuid4().hex[:9]}"


@dataclass
class Alert:
    """
    Оповещение, созданное детектором изменений.

    Attributes:
        id: Уникальный ID оповещения
        type: Тип оповещения
        severity: Важность
        title: Заголовок
        message: Текст оповещения
        timestamp: Время создания
        actionable: Требует ли изменение реакции
        suggested_action: Первая рекомендация эвристики
        product_id: Товар, к которому относится оповещение
        platform: Площадка конкурента
        seller: Продавец
        change_percent: Изменение цены в процентах
        previous_price: Предыдущая цена
        current_price: Новая цена
    """

    id: str
    severity: AlertSeverity
    title: str
    message: str
    product_id: str
    type: str = ALERT_TYPE_COMPETITOR_PRICE_CHANGE
    timestamp: datetime = field(default_factory=datetime.now)
    actionable: bool = False
    suggested_action: Optional[str] = None
    platform: Optional[str] = None
    seller: Optional[str] = None
    change_percent: Optional[float] = None
    previous_price: Optional[float] = None
    current_price: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """Преобразование в словарь."""
        return alert_to_dict(self)
