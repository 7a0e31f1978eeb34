"""
Хранилище истории цен конкурентов.

Каждая история адресуется тройкой (товар, площадка, продавец). Истории
создаются при первом наблюдении и ограничены по длине: при переполнении
вытесняются самые старые записи.
"""

from datetime import datetime
from typing import Dict, List, Optional, Tuple
import logging

from ..models.enums import PriceSource
from ..models.price_history import PriceHistory, PriceEntry, MAX_HISTORY_ENTRIES


logger = logging.getLogger(__name__)

HistoryKey = Tuple[str, str, str]


class PriceHistoryStore:
    """
    Ограниченные временные ряды цен в памяти процесса.

    Одна и та же схема ключей используется и при записи наблюдений,
    и при агрегировании по товару в анализе трендов.
    """

    def __init__(self, limit: int = MAX_HISTORY_ENTRIES):
        if limit <= 0:
            raise ValueError("Размер истории должен быть больше 0")
        self.limit = limit
        self._histories: Dict[HistoryKey, PriceHistory] = {}

    def record(self,
               product_name: str,
               platform: str,
               seller: str,
               price: float,
               timestamp: Optional[datetime] = None,
               source: str = PriceSource.AUTOMATED_MONITORING.value) -> PriceEntry:
        """
        Добавляет наблюдение цены, создавая историю при необходимости.

        Returns:
            Добавленная запись (последняя в истории)
        """
        key = (product_name, platform, seller)
        history = self._histories.get(key)
        if history is None:
            history = PriceHistory(product_name=product_name, platform=platform, seller=seller)
            self._histories[key] = history
            logger.debug(f"Создана история цен: {product_name} / {platform} / {seller}")

        return history.add_price_entry(price, timestamp=timestamp, source=source, limit=self.limit)

    def get(self, product_name: str, platform: str, seller: str) -> Optional[PriceHistory]:
        return self._histories.get((product_name, platform, seller))

    def get_product_histories(self, product_name: str) -> List[PriceHistory]:
        """Все истории товара по всем площадкам и продавцам в порядке создания."""
        return [h for h in self._histories.values() if h.product_name == product_name]

    def products(self) -> List[str]:
        """Товары, для которых есть хотя бы одна история."""
        return list(dict.fromkeys(h.product_name for h in self._histories.values()))

    def __len__(self) -> int:
        return len(self._histories)
