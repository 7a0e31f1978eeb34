"""
Источники текущих цен конкурентов.

Планировщик зависит только от протокола PriceFetcher. Модуль содержит
HTTP-клиент для внешнего сервиса цен и статический источник для
пробных запусков.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence
import logging

import aiohttp

from .exceptions import PriceFetchError


logger = logging.getLogger(__name__)

UNKNOWN_SELLER = "Unknown"


@dataclass
class PriceObservation:
    """
    Текущая цена продавца на площадке.

    Attributes:
        platform: Идентификатор площадки
        seller: Продавец (может быть пустым)
        price: Цена
        source_url: Страница, с которой получена цена
        checked_at: Время получения цены источником
    """

    platform: str
    seller: Optional[str]
    price: float
    source_url: str = ""
    checked_at: datetime = field(default_factory=datetime.now)

    @property
    def seller_name(self) -> str:
        """Имя продавца; пустое значение заменяется на "Unknown"."""
        return self.seller or UNKNOWN_SELLER

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'PriceObservation':
        """
        Создание наблюдения из JSON-объекта внешнего сервиса.

        Raises:
            PriceFetchError: Если обязательные поля отсутствуют или некорректны
        """
        try:
            checked_at = data.get('checked_at')
            if isinstance(checked_at, str):
                checked_at = datetime.fromisoformat(checked_at)

            return cls(
                platform=str(data['platform']),
                seller=data.get('seller') or None,
                price=float(data['price']),
                source_url=data.get('source_url') or "",
                checked_at=checked_at or datetime.now(),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise PriceFetchError(f"Некорректное наблюдение цены {dict(data)!r}: {e}") from e


class PriceFetcher(Protocol):
    """Внешний источник текущих цен."""

    async def fetch(self, product_name: str) -> List[PriceObservation]:
        ...


class HttpPriceFetcher:
    """
    Клиент HTTP-сервиса цен.

    Выполняет `GET <base_url>/prices?product=<name>` и ожидает JSON-список
    объектов с полями platform, seller, price, source_url, checked_at.
    """

    def __init__(self, base_url: str, timeout: int = 30, headers: Optional[Dict[str, str]] = None):
        if not base_url:
            raise ValueError("Не указан адрес сервиса цен")
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.headers = headers or {}

    async def fetch(self, product_name: str) -> List[PriceObservation]:
        url = f"{self.base_url}/prices"
        logger.debug(f"Запрос цен для товара '{product_name}': {url}")

        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    url,
                    params={'product': product_name},
                    headers=self.headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    if response.status >= 400:
                        error_text = await response.text()
                        raise PriceFetchError(f"HTTP {response.status}: {error_text}")
                    payload = await response.json()
        except aiohttp.ClientError as e:
            raise PriceFetchError(f"Сервис цен недоступен: {e}") from e
        except ValueError as e:
            raise PriceFetchError(f"Некорректный JSON в ответе сервиса цен: {e}") from e

        if not isinstance(payload, list):
            raise PriceFetchError(f"Ожидался список наблюдений, получено: {type(payload).__name__}")

        return [PriceObservation.from_dict(item) for item in payload]


class StaticPriceFetcher:
    """Источник с заранее заданными ценами (пробные запуски, демонстрации)."""

    def __init__(self, prices: Optional[Mapping[str, Sequence[PriceObservation]]] = None):
        self._prices: Dict[str, List[PriceObservation]] = {
            name: list(observations) for name, observations in (prices or {}).items()
        }

    def set_prices(self, product_name: str, observations: Sequence[PriceObservation]) -> None:
        self._prices[product_name] = list(observations)

    async def fetch(self, product_name: str) -> List[PriceObservation]:
        return list(self._prices.get(product_name, []))
