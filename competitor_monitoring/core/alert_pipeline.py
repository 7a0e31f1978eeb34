"""
Конвейер оповещений.

Логирует каждое оповещение и передаёт его диспетчеру уведомлений.
Ошибки доставки не перехватываются: их изолирует планировщик на уровне
отдельного правила.
"""

from collections import deque
from datetime import datetime
from typing import Deque, Optional, Protocol, Sequence
import logging

from ..models.alert import Alert
from .exceptions import NotificationError
from .notification_service import NotificationService, MessageTemplates


logger = logging.getLogger(__name__)

# Сколько последних отправок учитывается в статистике
DISPATCH_LOG_SIZE = 10000


class AlertDispatcher(Protocol):
    """Внешний получатель оповещений."""

    async def dispatch(self, alert: Alert) -> None:
        ...


class LoggingAlertDispatcher:
    """Диспетчер по умолчанию: оповещение только записывается в лог."""

    async def dispatch(self, alert: Alert) -> None:
        logger.warning(f"🚨 ALERT: {alert.title} - {alert.message}")


class NotificationAlertDispatcher:
    """Доставка оповещений через NotificationService."""

    def __init__(self, service: NotificationService):
        self.service = service

    async def dispatch(self, alert: Alert) -> None:
        """
        Raises:
            NotificationError: Если ни один канал не доставил оповещение
        """
        if not self.service.config.enabled:
            return

        message = MessageTemplates.create_alert_message(alert)
        results = await self.service.send_notification(message)

        if not any(result.success for result in results):
            errors = "; ".join(r.error for r in results if r.error) or "no available channels"
            raise NotificationError(f"Оповещение {alert.id} не доставлено: {errors}")


class AlertPipeline:
    """Последовательная обработка пачки оповещений."""

    def __init__(self, dispatcher: Optional[AlertDispatcher] = None):
        self.dispatcher = dispatcher or LoggingAlertDispatcher()
        self._dispatched_at: Deque[datetime] = deque(maxlen=DISPATCH_LOG_SIZE)

    async def process_alerts(self, alerts: Sequence[Alert]) -> None:
        """
        Логирует и отправляет оповещения, сохраняя их порядок.

        Raises:
            Exception: Любая ошибка диспетчера пробрасывается вызывающему
        """
        for alert in alerts:
            logger.info("Сгенерировано оповещение о конкуренте", extra={"context": {
                "alert_id": alert.id,
                "type": alert.type,
                "severity": alert.severity.value,
                "product_id": alert.product_id,
            }})
            await self.dispatcher.dispatch(alert)
            self._dispatched_at.append(alert.timestamp)

    def count_since(self, cutoff: datetime) -> int:
        """Количество отправленных оповещений начиная с `cutoff`."""
        return sum(1 for ts in self._dispatched_at if ts >= cutoff)

