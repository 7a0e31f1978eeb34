"""
Тесты планировщика циклов мониторинга.

Включает сквозной сценарий: два цикла с изменением цены конкурента.
"""

import asyncio
import pytest
from datetime import timedelta
from unittest.mock import AsyncMock

from ..config.settings import MonitoringConfig
from ..core.alert_pipeline import AlertPipeline
from ..core.exceptions import NotificationError, PriceFetchError, SchedulerError
from ..core.price_fetcher import PriceObservation
from ..core.scheduler import MonitoringScheduler, MonitoringStatus
from ..models.enums import AlertSeverity
from .conftest import observation


@pytest.fixture
def scheduler(registry, store, fetcher, dispatcher):
    return MonitoringScheduler(registry, store, fetcher, AlertPipeline(dispatcher))


class TestRunCycle:
    """Тесты одного цикла."""

    @pytest.mark.asyncio
    async def test_widget_price_drop_end_to_end(self, scheduler, registry, store, fetcher, dispatcher, now):
        """100 -> 94 между циклами даёт одно оповещение средней важности."""
        rule_id = registry.add_rule("Widget", platforms=["amazon"], frequency="hourly",
                                    price_threshold=5, now=now)

        fetcher.set_prices("Widget", [observation(100.0)])
        first = await scheduler.run_cycle(now)

        assert first.checked == [rule_id]
        assert first.alerts == []
        assert registry.get_rule(rule_id).last_check == now

        later = now + timedelta(minutes=61)
        fetcher.set_prices("Widget", [observation(94.0)])
        second = await scheduler.run_cycle(later)

        assert len(second.alerts) == 1
        alert = second.alerts[0]
        assert alert.severity == AlertSeverity.MEDIUM
        assert alert.message == "SellerA decreased the price by 6.0%"
        assert dispatcher.alerts == [alert]

        history = store.get("Widget", "amazon", "SellerA")
        assert [e.price for e in history.prices] == [100.0, 94.0]
        assert [e.timestamp for e in history.prices] == [now, later]
        assert {e.source for e in history.prices} == {"automated_monitoring"}

    @pytest.mark.asyncio
    async def test_rule_not_due_is_skipped(self, scheduler, registry, fetcher, now):
        rule_id = registry.add_rule("Widget", frequency="hourly", now=now)
        fetcher.set_prices("Widget", [observation(100.0)])

        await scheduler.run_cycle(now)
        report = await scheduler.run_cycle(now + timedelta(minutes=59))

        assert report.checked == []
        assert registry.get_rule(rule_id).last_check == now

    @pytest.mark.asyncio
    async def test_inactive_rule_is_skipped(self, scheduler, registry, fetcher, now):
        rule_id = registry.add_rule("Widget", now=now)
        registry.deactivate_rule(rule_id)

        report = await scheduler.run_cycle(now)

        assert report.checked == []
        assert registry.get_rule(rule_id).last_check is None

    @pytest.mark.asyncio
    async def test_missing_seller_recorded_as_unknown(self, scheduler, registry, store, fetcher, now):
        registry.add_rule("Widget", now=now)
        fetcher.set_prices("Widget", [PriceObservation(platform="amazon", seller="", price=100.0)])

        await scheduler.run_cycle(now)

        assert store.get("Widget", "amazon", "Unknown") is not None

    @pytest.mark.asyncio
    async def test_fetch_failure_is_isolated(self, registry, store, dispatcher, now, caplog):
        """Ошибка одного правила не прерывает цикл и не обновляет last_check."""
        failing_id = registry.add_rule("Broken", frequency="hourly", now=now)
        working_id = registry.add_rule("Widget", frequency="hourly", now=now)

        async def fetch(product_name):
            if product_name == "Broken":
                raise PriceFetchError("service unavailable")
            return [observation(100.0)]

        fetcher = AsyncMock()
        fetcher.fetch.side_effect = fetch
        scheduler = MonitoringScheduler(registry, store, fetcher, AlertPipeline(dispatcher))

        with caplog.at_level("ERROR"):
            report = await scheduler.run_cycle(now)

        assert report.failed == [failing_id]
        assert report.checked == [working_id]
        assert registry.get_rule(failing_id).last_check is None
        assert failing_id in caplog.text

        # Без отсрочки: правило снова проверяется в следующем цикле
        report = await scheduler.run_cycle(now + timedelta(minutes=1))
        assert report.failed == [failing_id]
        assert fetcher.fetch.await_count == 3

    @pytest.mark.asyncio
    async def test_dispatch_failure_keeps_history(self, registry, store, fetcher, now):
        """Цены записываются, даже если оповещение не доставлено."""
        rule_id = registry.add_rule("Widget", frequency="hourly", now=now)
        failing = AsyncMock()
        failing.dispatch.side_effect = NotificationError("no channels")
        scheduler = MonitoringScheduler(registry, store, fetcher, AlertPipeline(failing))

        fetcher.set_prices("Widget", [observation(100.0)])
        await scheduler.run_cycle(now)
        fetcher.set_prices("Widget", [observation(50.0)])
        report = await scheduler.run_cycle(now + timedelta(hours=2))

        assert report.failed == [rule_id]
        assert len(store.get("Widget", "amazon", "SellerA")) == 2
        assert registry.get_rule(rule_id).last_check == now

    @pytest.mark.asyncio
    async def test_reentrant_cycle_raises(self, registry, store, dispatcher, now):
        registry.add_rule("Widget", now=now)
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_fetch(product_name):
            started.set()
            await release.wait()
            return []

        fetcher = AsyncMock()
        fetcher.fetch.side_effect = slow_fetch
        scheduler = MonitoringScheduler(registry, store, fetcher, AlertPipeline(dispatcher))

        cycle = asyncio.ensure_future(scheduler.run_cycle(now))
        await started.wait()

        with pytest.raises(SchedulerError):
            await scheduler.run_cycle(now)

        release.set()
        report = await cycle
        assert len(report.checked) == 1


class TestMonitoringLoop:
    """Тесты фонового запуска циклов."""

    @pytest.mark.asyncio
    async def test_start_and_stop(self, registry, store, fetcher, dispatcher):
        registry.add_rule("Widget")
        fetcher.set_prices("Widget", [observation(100.0)])
        scheduler = MonitoringScheduler(registry, store, fetcher, AlertPipeline(dispatcher),
                                        MonitoringConfig(cycle_interval_seconds=3600))

        assert scheduler.get_status() == MonitoringStatus.STOPPED

        scheduler.start_monitoring()
        assert scheduler.get_status() == MonitoringStatus.ACTIVE

        # Первый цикл выполняется сразу после запуска
        for _ in range(10):
            await asyncio.sleep(0)
            if len(store):
                break

        scheduler.stop_monitoring()
        await asyncio.wait_for(scheduler.wait_stopped(), timeout=1)

        assert scheduler.get_status() == MonitoringStatus.STOPPED
        assert store.get("Widget", "amazon", "SellerA") is not None

    @pytest.mark.asyncio
    async def test_restart_in_same_tick_keeps_single_loop(self, registry, store, dispatcher):
        """Остановка и запуск без паузы не оставляют старый цикл работать."""
        seen_tasks = []

        class FailingFetcher:
            async def fetch(self, product_name):
                seen_tasks.append(asyncio.current_task())
                raise PriceFetchError("Сервис цен недоступен")

        registry.add_rule("Widget")
        scheduler = MonitoringScheduler(registry, store, FailingFetcher(), AlertPipeline(dispatcher),
                                        MonitoringConfig(cycle_interval_seconds=0.01))

        scheduler.start_monitoring()
        first = scheduler._monitoring_task
        await asyncio.sleep(0)

        scheduler.stop_monitoring()
        scheduler.start_monitoring()
        second = scheduler._monitoring_task
        seen_tasks.clear()

        await asyncio.sleep(0.1)

        assert first.done()
        assert seen_tasks
        assert set(seen_tasks) == {second}

        scheduler.stop_monitoring()
        await asyncio.wait_for(scheduler.wait_stopped(), timeout=1)

        assert second.done()
        assert scheduler._stopping_tasks == []
