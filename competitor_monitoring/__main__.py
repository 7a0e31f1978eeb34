"""
Запуск мониторинга конкурентов из командной строки.

    python -m competitor_monitoring --rules rules.json [--once] [--config-dir DIR]

Файл правил:

    {
        "rules": [{"product_name": "Widget", "frequency": "hourly", "price_threshold": 5}],
        "prices": {"Widget": [{"platform": "amazon", "seller": "SellerA", "price": 100}]}
    }

Раздел "prices" необязателен: если он задан, цены берутся из файла,
иначе - из HTTP-сервиса цен (monitoring.fetcher_base_url / PRICE_FETCHER_URL).
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import argparse
import asyncio
import json
import logging
import sys

from .config.settings import Settings, get_settings
from .core.alert_pipeline import AlertDispatcher, NotificationAlertDispatcher
from .core.competitor_monitor import CompetitorMonitor
from .core.exceptions import ConfigurationError, PriceFetchError
from .core.notification_service import NotificationService
from .core.scheduler import MonitoringStatus
from .core.price_fetcher import HttpPriceFetcher, PriceFetcher, PriceObservation, StaticPriceFetcher
from .utils.logger import setup_logging
from .utils.serialization import to_json


logger = logging.getLogger(__name__)


def load_rules_file(path: Path) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, List[PriceObservation]]]]:
    """
    Чтение файла правил.

    Returns:
        Описания правил и статические цены (None, если раздел не задан)

    Raises:
        ConfigurationError: Если файл не читается или имеет неверную структуру
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Не удалось прочитать файл правил {path}: {e}") from e

    rules = data.get('rules') if isinstance(data, dict) else None
    if not isinstance(rules, list):
        raise ConfigurationError(f"В файле {path} отсутствует список 'rules'")

    prices = None
    if 'prices' in data:
        try:
            prices = {
                product: [PriceObservation.from_dict(item) for item in items]
                for product, items in data['prices'].items()
            }
        except (AttributeError, PriceFetchError) as e:
            raise ConfigurationError(f"Некорректный раздел 'prices' в файле {path}: {e}") from e

    return rules, prices


def build_fetcher(settings: Settings, prices: Optional[Dict[str, List[PriceObservation]]]) -> PriceFetcher:
    if prices is not None:
        return StaticPriceFetcher(prices)

    if not settings.monitoring.fetcher_base_url:
        raise ConfigurationError("Не задан адрес сервиса цен (PRICE_FETCHER_URL) и нет цен в файле правил")

    return HttpPriceFetcher(settings.monitoring.fetcher_base_url, timeout=settings.monitoring.request_timeout)


def build_dispatcher(settings: Settings) -> Optional[AlertDispatcher]:
    if not settings.notifications.enabled:
        return None
    return NotificationAlertDispatcher(NotificationService(settings.notifications))


def build_monitor(settings: Settings, rules_path: Path) -> CompetitorMonitor:
    """Создание монитора с правилами из файла."""
    rules, prices = load_rules_file(rules_path)

    monitor = CompetitorMonitor(
        fetcher=build_fetcher(settings, prices),
        dispatcher=build_dispatcher(settings),
        config=settings.monitoring,
    )

    for spec in rules:
        try:
            monitor.add_rule(
                spec['product_name'],
                platforms=spec.get('platforms'),
                frequency=spec.get('frequency'),
                price_threshold=spec.get('price_threshold'),
            )
        except (KeyError, ValueError) as e:
            raise ConfigurationError(f"Некорректное правило {spec!r}: {e}") from e

    return monitor


async def run(monitor: CompetitorMonitor, once: bool) -> None:
    if once:
        report = await monitor.run_cycle()
        logger.info(f"Проверено правил: {len(report.checked)}, ошибок: {len(report.failed)}, "
                    f"оповещений: {len(report.alerts)}")
        print(to_json(monitor.get_stats()))
        return

    monitor.start_monitoring()
    try:
        await monitor.wait_stopped()
    finally:
        if monitor.get_status() == MonitoringStatus.ACTIVE:
            monitor.stop_monitoring()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="competitor_monitoring",
        description="Мониторинг цен конкурентов на маркетплейсах",
    )
    parser.add_argument("--rules", required=True, type=Path, help="JSON-файл с правилами мониторинга")
    parser.add_argument("--once", action="store_true", help="Выполнить один цикл и завершиться")
    parser.add_argument("--config-dir", default=None, help="Директория с config.json и .env")
    args = parser.parse_args(argv)

    settings = get_settings(args.config_dir)
    setup_logging(settings.logging)

    errors = settings.validate_config()
    if errors:
        for error in errors:
            logger.error(f"Ошибка конфигурации: {error}")
        return 2

    try:
        monitor = build_monitor(settings, args.rules)
    except ConfigurationError as e:
        logger.error(str(e))
        return 2

    try:
        asyncio.run(run(monitor, args.once))
    except KeyboardInterrupt:
        logger.info("🛑 Мониторинг остановлен пользователем")

    return 0


if __name__ == "__main__":
    sys.exit(main())
