"""
Модель истории цен конкурента.

История ведётся отдельно для каждой тройки (товар, площадка, продавец)
и хранит ограниченное число последних наблюдений.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Dict, Any

from .enums import PriceSource
from ..utils.serialization import price_entry_to_dict, price_history_to_dict

# Максимальное количество записей в одной истории
MAX_HISTORY_ENTRIES = 100


@dataclass
class PriceEntry:
    """
    Одно наблюдение цены.

    Attributes:
        price: Цена на момент наблюдения
        timestamp: Время наблюдения
        source: Источник информации о цене
    """

    price: float
    timestamp: datetime = field(default_factory=datetime.now)
    source: str = PriceSource.AUTOMATED_MONITORING.value

    def to_dict(self) -> Dict[str, Any]:
        """Преобразование в словарь."""
        return price_entry_to_dict(self)


@dataclass
class PriceHistory:
    """
    История цен одного продавца на одной площадке.

    Attributes:
        product_name: Название товара
        platform: Идентификатор площадки
        seller: Продавец
        prices: Записи в порядке добавления
    """

    product_name: str
    platform: str
    seller: str
    prices: List[PriceEntry] = field(default_factory=list)

    @property
    def key(self) -> tuple:
        return (self.product_name, self.platform, self.seller)

    def add_price_entry(self,
                        price: float,
                        timestamp: Optional[datetime] = None,
                        source: str = PriceSource.AUTOMATED_MONITORING.value,
                        limit: int = MAX_HISTORY_ENTRIES) -> PriceEntry:
        """
        Добавление записи с вытеснением самых старых.

        Args:
            price: Наблюдаемая цена
            timestamp: Время наблюдения (по умолчанию - текущее)
            source: Источник информации
            limit: Максимальная длина истории

        Returns:
            Созданная запись
        """
        entry = PriceEntry(price=price, timestamp=timestamp or datetime.now(), source=source)
        self.prices.append(entry)

        if len(self.prices) > limit:
            self.prices = self.prices[-limit:]

        return entry

    def get_latest_entry(self) -> Optional[PriceEntry]:
        """Последняя добавленная запись."""
        if not self.prices:
            return None
        return self.prices[-1]

    def get_previous_entry(self) -> Optional[PriceEntry]:
        """Запись, предшествующая последней."""
        if len(self.prices) < 2:
            return None
        return self.prices[-2]

    def to_dict(self) -> Dict[str, Any]:
        """Преобразование в словарь (делегировано утилите)."""
        return price_history_to_dict(self)

    def __len__(self) -> int:
        return len(self.prices)

    def __repr__(self) -> str:
        return (f"PriceHistory(product='{self.product_name}', platform='{self.platform}', "
                f"seller='{self.seller}', entries_count={len(self.prices)})")
