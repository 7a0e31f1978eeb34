"""
Фасад мониторинга конкурентов.

Связывает реестр правил, хранилище историй, источник цен, конвейер
оповещений и планировщик в одну точку входа для вызывающего кода.
"""

from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Union
import logging

from ..config.settings import MonitoringConfig
from ..models.enums import MarketplaceType, MonitoringFrequency
from ..models.price_history import PriceHistory
from ..models.rule import MonitoringRule
from ..models.trend import MarketTrend, MonitoringStats
from .alert_pipeline import AlertDispatcher, AlertPipeline
from .history_store import PriceHistoryStore
from .price_fetcher import PriceFetcher
from .rule_registry import RuleRegistry, frequency_label
from .scheduler import CycleReport, MonitoringScheduler, MonitoringStatus
from .trend_analyzer import analyze_trend


logger = logging.getLogger(__name__)

STATS_ALERT_WINDOW = timedelta(hours=24)


class CompetitorMonitor:
    """
    Мониторинг цен конкурентов по правилам.

    Все зависимости передаются явно, поэтому каждый экземпляр полностью
    изолирован от других.
    """

    def __init__(self,
                 fetcher: PriceFetcher,
                 dispatcher: Optional[AlertDispatcher] = None,
                 config: Optional[MonitoringConfig] = None,
                 registry: Optional[RuleRegistry] = None,
                 store: Optional[PriceHistoryStore] = None):
        """
        Args:
            fetcher: Источник текущих цен
            dispatcher: Получатель оповещений (по умолчанию - лог)
            config: Параметры мониторинга
            registry: Реестр правил (по умолчанию - новый пустой)
            store: Хранилище историй (по умолчанию - новое с лимитом из config)
        """
        self.config = config or MonitoringConfig()
        self.registry = registry if registry is not None else RuleRegistry()
        self.store = store if store is not None else PriceHistoryStore(limit=self.config.history_limit)
        self.pipeline = AlertPipeline(dispatcher)
        self.scheduler = MonitoringScheduler(
            self.registry, self.store, fetcher, self.pipeline, self.config
        )
        logger.debug(f"Монитор конкурентов создан (лимит истории {self.store.limit})")

    # Управление правилами

    def add_rule(self,
                 product_name: str,
                 platforms: Optional[Iterable[Union[MarketplaceType, str]]] = None,
                 frequency: Union[MonitoringFrequency, str, None] = None,
                 price_threshold: Optional[float] = None) -> str:
        """
        Добавляет правило; незаданные параметры берутся из конфигурации.

        Returns:
            ID созданного правила
        """
        return self.registry.add_rule(
            product_name,
            platforms=platforms,
            frequency=frequency if frequency is not None else self.config.default_frequency,
            price_threshold=(price_threshold if price_threshold is not None
                             else self.config.default_price_threshold),
        )

    def remove_rule(self, rule_id: str) -> bool:
        return self.registry.remove_rule(rule_id)

    def get_rule(self, rule_id: str) -> MonitoringRule:
        return self.registry.get_rule(rule_id)

    def activate_rule(self, rule_id: str) -> None:
        self.registry.activate_rule(rule_id)

    def deactivate_rule(self, rule_id: str) -> None:
        self.registry.deactivate_rule(rule_id)

    def list_active_rules(self) -> List[MonitoringRule]:
        return self.registry.list_active_rules()

    def get_stats(self, now: Optional[datetime] = None) -> MonitoringStats:
        """
        Сводная статистика мониторинга.

        Args:
            now: Конец 24-часового окна подсчёта оповещений

        Returns:
            Количество правил, товаров и оповещений, оценка частоты проверок
        """
        now = now or datetime.now()
        rules = self.registry.list_rules()
        active = [rule for rule in rules if rule.is_active]

        return MonitoringStats(
            total_rules=len(rules),
            active_rules=len(active),
            total_products=len({rule.product_name for rule in rules}),
            total_alerts_24h=self.pipeline.count_since(now - STATS_ALERT_WINDOW),
            average_check_frequency=frequency_label(active),
        )

    # Тренды и история

    def analyze_trend(self, product_name: str, now: Optional[datetime] = None) -> MarketTrend:
        return analyze_trend(product_name, self.store, now)

    def get_history(self, product_name: str) -> List[PriceHistory]:
        """Все истории цен товара; пустой список, если наблюдений не было."""
        return self.store.get_product_histories(product_name)

    # Циклы мониторинга

    async def run_cycle(self, now: Optional[datetime] = None) -> CycleReport:
        return await self.scheduler.run_cycle(now)

    def start_monitoring(self) -> None:
        self.scheduler.start_monitoring()

    def stop_monitoring(self) -> None:
        self.scheduler.stop_monitoring()

    async def wait_stopped(self) -> None:
        await self.scheduler.wait_stopped()

    def get_status(self) -> MonitoringStatus:
        return self.scheduler.get_status()
