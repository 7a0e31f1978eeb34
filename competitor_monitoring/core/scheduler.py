"""
Планировщик циклов мониторинга.

Цикл выбирает активные правила, которым пора проверка, и последовательно
проверяет каждое: получение цен, запись в историю, поиск изменений и
отправка оповещений. Ошибка одного правила не прерывает цикл.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional
import asyncio
import logging

from ..config.settings import MonitoringConfig
from ..models.alert import Alert
from ..models.enums import PriceSource
from ..models.rule import MonitoringRule
from .alert_pipeline import AlertPipeline
from .change_detector import detect_price_changes
from .exceptions import SchedulerError
from .history_store import PriceHistoryStore
from .price_fetcher import PriceFetcher
from .rule_registry import RuleRegistry


logger = logging.getLogger(__name__)


class MonitoringStatus(Enum):
    """Статус фонового мониторинга."""
    ACTIVE = "active"
    STOPPED = "stopped"


@dataclass
class CycleReport:
    """
    Итог одного цикла.

    Attributes:
        checked: ID успешно проверенных правил
        failed: ID правил, проверка которых завершилась ошибкой
        alerts: Оповещения, отправленные за цикл
    """
    checked: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    alerts: List[Alert] = field(default_factory=list)


class MonitoringScheduler:
    """Выполнение циклов мониторинга по правилам реестра."""

    def __init__(self,
                 registry: RuleRegistry,
                 store: PriceHistoryStore,
                 fetcher: PriceFetcher,
                 pipeline: AlertPipeline,
                 config: Optional[MonitoringConfig] = None):
        self.registry = registry
        self.store = store
        self.fetcher = fetcher
        self.pipeline = pipeline
        self.config = config or MonitoringConfig()

        self.status = MonitoringStatus.STOPPED
        self._cycle_running = False
        self._stop_event: Optional[asyncio.Event] = None
        self._monitoring_task: Optional[asyncio.Task] = None
        # Остановленные циклы, ещё не дождавшиеся конца текущей итерации
        self._stopping_tasks: List[asyncio.Task] = []

    async def check_rule(self, rule: MonitoringRule, now: datetime) -> List[Alert]:
        """
        Проверка одного правила.

        Все наблюдения записываются в историю до поиска изменений.

        Returns:
            Оповещения, найденные и отправленные для правила

        Raises:
            Exception: Ошибки источника цен и диспетчера пробрасываются
        """
        observations = await self.fetcher.fetch(rule.product_name)

        for observation in observations:
            self.store.record(
                rule.product_name,
                observation.platform,
                observation.seller_name,
                observation.price,
                timestamp=now,
                source=PriceSource.AUTOMATED_MONITORING.value
            )

        alerts = detect_price_changes(rule, observations, self.store, now)
        if alerts:
            await self.pipeline.process_alerts(alerts)

        logger.debug(f"Правило {rule.id} проверено: {len(observations)} цен, {len(alerts)} оповещений")
        return alerts

    async def run_cycle(self, now: Optional[datetime] = None) -> CycleReport:
        """
        Один цикл мониторинга.

        Успешная проверка обновляет last_check правила. При ошибке
        last_check не меняется, и правило снова проверяется в следующем цикле.

        Args:
            now: Момент цикла (по умолчанию - текущий)

        Returns:
            Итог цикла

        Raises:
            SchedulerError: Если цикл этого планировщика уже выполняется
        """
        if self._cycle_running:
            raise SchedulerError("Цикл мониторинга уже выполняется")

        now = now or datetime.now()
        report = CycleReport()
        self._cycle_running = True

        try:
            due = self.registry.due_rules(now)
            logger.info("Цикл мониторинга начат", extra={"context": {"due_rules": len(due)}})

            for rule in due:
                try:
                    alerts = await self.check_rule(rule, now)
                except Exception as e:
                    logger.error(f"Ошибка проверки правила {rule.id}: {e}", exc_info=True,
                                 extra={"context": {"rule_id": rule.id, "product_name": rule.product_name}})
                    report.failed.append(rule.id)
                    continue

                rule.last_check = now
                report.checked.append(rule.id)
                report.alerts.extend(alerts)
        finally:
            self._cycle_running = False

        logger.info("Цикл мониторинга завершен", extra={"context": {
            "checked": len(report.checked),
            "failed": len(report.failed),
            "alerts": len(report.alerts),
        }})
        return report

    async def _monitoring_loop(self, stop_event: asyncio.Event) -> None:
        interval = self.config.cycle_interval_seconds

        while not stop_event.is_set():
            try:
                await self.run_cycle()
            except SchedulerError as e:
                logger.warning(f"Цикл пропущен: {e}")

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                continue

    def start_monitoring(self) -> None:
        """
        Запускает циклы с периодом cycle_interval_seconds.

        Должен вызываться внутри работающего цикла событий asyncio.
        Каждый запуск получает собственное событие остановки, поэтому
        остановленный ранее цикл завершается и после повторного запуска.
        """
        if self.status == MonitoringStatus.ACTIVE:
            logger.warning("Мониторинг уже запущен")
            return

        if self._monitoring_task is not None and not self._monitoring_task.done():
            self._stopping_tasks.append(self._monitoring_task)

        self._stop_event = asyncio.Event()
        self._monitoring_task = asyncio.get_running_loop().create_task(
            self._monitoring_loop(self._stop_event)
        )
        self.status = MonitoringStatus.ACTIVE
        logger.info(f"Мониторинг цен запущен (интервал {self.config.cycle_interval_seconds} с)")

    def stop_monitoring(self) -> None:
        """Останавливает циклы; текущий цикл завершается до остановки."""
        if self.status == MonitoringStatus.STOPPED:
            logger.warning("Мониторинг уже остановлен")
            return

        self._stop_event.set()
        self.status = MonitoringStatus.STOPPED
        logger.info("Мониторинг цен остановлен")

    async def wait_stopped(self) -> None:
        """Ожидает завершения фоновых задач мониторинга, включая ранее остановленные."""
        tasks, self._stopping_tasks = self._stopping_tasks, []
        if self._monitoring_task is not None:
            tasks.append(self._monitoring_task)
            self._monitoring_task = None

        for task in tasks:
            await task

    def get_status(self) -> MonitoringStatus:
        return self.status
