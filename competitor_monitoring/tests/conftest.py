import pytest
from datetime import datetime
from typing import List

from ..core.history_store import PriceHistoryStore
from ..core.price_fetcher import PriceObservation, StaticPriceFetcher
from ..core.rule_registry import RuleRegistry
from ..models.alert import Alert


class RecordingDispatcher:
    """Диспетчер, запоминающий полученные оповещения."""

    def __init__(self):
        self.alerts: List[Alert] = []

    async def dispatch(self, alert: Alert) -> None:
        self.alerts.append(alert)


@pytest.fixture
def now():
    return datetime(2024, 3, 1, 12, 0, 0)


@pytest.fixture
def registry():
    return RuleRegistry()


@pytest.fixture
def store():
    return PriceHistoryStore()


@pytest.fixture
def fetcher():
    return StaticPriceFetcher()


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


def observation(price, seller="SellerA", platform="amazon"):
    return PriceObservation(platform=platform, seller=seller, price=price)
