"""
Сервис уведомлений для модуля мониторинга конкурентов.

Обеспечивает отправку оповещений через различные каналы:
- Telegram Bot
- Email (SMTP)
- Webhook
- Консольный вывод (для отладки)
"""

import asyncio
import html
import logging
import smtplib
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from enum import Enum
from typing import Dict, List, Optional, Any

import aiohttp
from jinja2 import Template

from ..config.settings import NotificationConfig
from ..models.alert import Alert
from ..models.enums import AlertSeverity


logger = logging.getLogger(__name__)


class NotificationChannel(Enum):
    """Типы каналов уведомлений."""
    TELEGRAM = "telegram"
    EMAIL = "email"
    WEBHOOK = "webhook"
    CONSOLE = "console"


class NotificationPriority(Enum):
    """Приоритеты уведомлений."""
    NORMAL = "normal"
    HIGH = "high"
    CRITICAL = "critical"


class NotificationType(Enum):
    """Типы уведомлений."""
    COMPETITOR_PRICE_CHANGE = "competitor_price_change"


@dataclass
class NotificationMessage:
    """Сообщение для отправки уведомления."""

    title: str
    content: str
    notification_type: NotificationType
    priority: NotificationPriority = NotificationPriority.NORMAL
    channels: List[NotificationChannel] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'content': self.content,
            'type': self.notification_type.value,
            'priority': self.priority.value,
            'channels': [ch.value for ch in self.channels],
            'metadata': self.metadata,
            'created_at': self.created_at.isoformat()
        }


@dataclass
class NotificationResult:
    """Результат отправки уведомления."""

    success: bool
    channel: NotificationChannel
    message_id: Optional[str] = None
    error: Optional[str] = None
    sent_at: datetime = field(default_factory=datetime.now)


class BaseNotificationChannel(ABC):
    """Абстрактный базовый класс для каналов уведомлений."""

    channel_type: NotificationChannel

    def __init__(self, config: NotificationConfig):
        self.config = config
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    async def send(self, message: NotificationMessage) -> NotificationResult:
        """Отправить уведомление через канал."""

    @abstractmethod
    def is_available(self) -> bool:
        """Проверить доступность канала."""

    def _unavailable(self) -> NotificationResult:
        return NotificationResult(
            success=False,
            channel=self.channel_type,
            error=f"{self.channel_type.value} channel not configured or disabled"
        )


class TelegramChannel(BaseNotificationChannel):
    """Канал уведомлений через Telegram Bot."""

    channel_type = NotificationChannel.TELEGRAM

    def __init__(self, config: NotificationConfig):
        super().__init__(config)
        self.base_url = f"https://api.telegram.org/bot{config.telegram_bot_token}"

    def is_available(self) -> bool:
        return (
            self.config.telegram_enabled and
            bool(self.config.telegram_bot_token) and
            bool(self.config.telegram_chat_ids)
        )

    async def send(self, message: NotificationMessage) -> NotificationResult:
        if not self.is_available():
            return self._unavailable()

        text = self._format_message(message)
        results = []
        try:
            async with aiohttp.ClientSession() as session:
                for chat_id in self.config.telegram_chat_ids:
                    results.append(await self._send_to_chat(session, chat_id, text))
        except aiohttp.ClientError as e:
            self.logger.error(f"Error sending Telegram notification: {e}")
            return NotificationResult(success=False, channel=self.channel_type, error=str(e))

        # Успешно, если доставлено хотя бы в один чат
        delivered = [r for r in results if r.success]
        errors = [r.error for r in results if r.error]
        return NotificationResult(
            success=bool(delivered),
            channel=self.channel_type,
            message_id=delivered[0].message_id if delivered else None,
            error="; ".join(errors) if errors else None
        )

    async def _send_to_chat(self, session: aiohttp.ClientSession, chat_id: str, text: str) -> NotificationResult:
        payload = {
            'chat_id': chat_id,
            'text': text,
            'parse_mode': 'HTML',
            'disable_web_page_preview': True
        }
        async with session.post(f"{self.base_url}/sendMessage", json=payload) as response:
            if response.status == 200:
                result = await response.json()
                return NotificationResult(
                    success=True,
                    channel=self.channel_type,
                    message_id=str(result.get('result', {}).get('message_id'))
                )
            error_text = await response.text()
            return NotificationResult(
                success=False,
                channel=self.channel_type,
                error=f"HTTP {response.status}: {error_text}"
            )

    def _format_message(self, message: NotificationMessage) -> str:
        priority_emoji = {
            NotificationPriority.NORMAL: "📢",
            NotificationPriority.HIGH: "⚠️",
            NotificationPriority.CRITICAL: "🚨"
        }
        emoji = priority_emoji.get(message.priority, "📢")

        text = f"{emoji} <b>{html.escape(message.title)}</b>\n\n"
        text += f"{html.escape(message.content)}\n\n"
        text += f"<i>{message.created_at.strftime('%Y-%m-%d %H:%M:%S')}</i>"
        return text


EMAIL_TEMPLATE = Template("""
<html>
<body style="font-family: Arial, sans-serif; margin: 20px;">
    <div style="border-left: 4px solid {{ priority_color }}; padding-left: 10px;">
        <h2>{{ title }}</h2>
        <p><strong>Priority:</strong> {{ priority }}</p>
    </div>
    <div style="margin: 20px 0;">{{ content }}</div>
    {% if metadata %}
    <table>
        {% for key, value in metadata.items() %}
        <tr><td>{{ key }}</td><td>{{ value }}</td></tr>
        {% endfor %}
    </table>
    {% endif %}
    <p style="font-size: 12px; color: #666;">{{ created_at }}</p>
</body>
</html>
""", autoescape=True)


class EmailChannel(BaseNotificationChannel):
    """Канал уведомлений через Email."""

    channel_type = NotificationChannel.EMAIL

    def is_available(self) -> bool:
        return (
            self.config.email_enabled and
            bool(self.config.email_from) and
            bool(self.config.email_password) and
            bool(self.config.email_to)
        )

    async def send(self, message: NotificationMessage) -> NotificationResult:
        if not self.is_available():
            return self._unavailable()

        msg = MIMEMultipart('alternative')
        msg['Subject'] = f"[{message.priority.value.upper()}] {message.title}"
        msg['From'] = self.config.email_from
        msg['To'] = ', '.join(self.config.email_to)
        msg.attach(MIMEText(self._format_text_message(message), 'plain', 'utf-8'))
        msg.attach(MIMEText(self._format_html_message(message), 'html', 'utf-8'))

        try:
            await asyncio.to_thread(self._deliver, msg)
        except (smtplib.SMTPException, OSError) as e:
            self.logger.error(f"Error sending email notification: {e}")
            return NotificationResult(success=False, channel=self.channel_type, error=str(e))

        return NotificationResult(
            success=True,
            channel=self.channel_type,
            message_id=f"email_{datetime.now().timestamp()}"
        )

    def _deliver(self, msg: MIMEMultipart) -> None:
        with smtplib.SMTP(self.config.smtp_server, self.config.smtp_port) as server:
            server.starttls()
            server.login(self.config.email_from, self.config.email_password)
            server.send_message(msg)

    def _format_html_message(self, message: NotificationMessage) -> str:
        priority_colors = {
            NotificationPriority.NORMAL: "#007bff",
            NotificationPriority.HIGH: "#ffc107",
            NotificationPriority.CRITICAL: "#dc3545"
        }
        return EMAIL_TEMPLATE.render(
            title=message.title,
            content=message.content,
            priority=message.priority.value,
            priority_color=priority_colors.get(message.priority, "#007bff"),
            metadata=message.metadata,
            created_at=message.created_at.strftime('%Y-%m-%d %H:%M:%S')
        )

    def _format_text_message(self, message: NotificationMessage) -> str:
        text = f"{message.title}\n"
        text += "=" * len(message.title) + "\n\n"
        text += f"Priority: {message.priority.value}\n\n"
        text += f"{message.content}\n\n"
        text += message.created_at.strftime('%Y-%m-%d %H:%M:%S')
        return text


class WebhookChannel(BaseNotificationChannel):
    """Канал уведомлений через Webhook."""

    channel_type = NotificationChannel.WEBHOOK

    def is_available(self) -> bool:
        return self.config.webhook_enabled and bool(self.config.webhook_url)

    async def send(self, message: NotificationMessage) -> NotificationResult:
        if not self.is_available():
            return self._unavailable()

        payload = {
            'notification': message.to_dict(),
            'timestamp': datetime.now().isoformat(),
            'source': 'competitor_monitoring'
        }
        headers = {'Content-Type': 'application/json', **self.config.webhook_headers}

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self.config.webhook_url,
                    json=payload,
                    headers=headers,
                    timeout=aiohttp.ClientTimeout(total=self.config.webhook_timeout)
                ) as response:
                    if response.status < 400:
                        return NotificationResult(
                            success=True,
                            channel=self.channel_type,
                            message_id=f"webhook_{datetime.now().timestamp()}"
                        )
                    error_text = await response.text()
                    return NotificationResult(
                        success=False,
                        channel=self.channel_type,
                        error=f"HTTP {response.status}: {error_text}"
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.logger.error(f"Error sending webhook notification: {e}")
            return NotificationResult(success=False, channel=self.channel_type, error=str(e))


class ConsoleChannel(BaseNotificationChannel):
    """Канал уведомлений в консоль (для отладки)."""

    channel_type = NotificationChannel.CONSOLE

    def is_available(self) -> bool:
        return True

    async def send(self, message: NotificationMessage) -> NotificationResult:
        print(f"\n{'=' * 60}")
        print(f"NOTIFICATION: {message.title}")
        print(f"Priority: {message.priority.value}")
        print(f"Time: {message.created_at.strftime('%Y-%m-%d %H:%M:%S')}")
        print(f"{'=' * 60}")
        print(message.content)
        print(f"{'=' * 60}\n")

        return NotificationResult(
            success=True,
            channel=self.channel_type,
            message_id=f"console_{datetime.now().timestamp()}"
        )


class NotificationService:
    """Основной сервис уведомлений."""

    def __init__(self, config: Optional[NotificationConfig] = None):
        self.config = config or NotificationConfig()
        self.logger = logging.getLogger(__name__)

        self.channels: Dict[NotificationChannel, BaseNotificationChannel] = {
            NotificationChannel.TELEGRAM: TelegramChannel(self.config),
            NotificationChannel.EMAIL: EmailChannel(self.config),
            NotificationChannel.WEBHOOK: WebhookChannel(self.config),
            NotificationChannel.CONSOLE: ConsoleChannel(self.config)
        }

    async def send_notification(
        self,
        message: NotificationMessage,
        channels: Optional[List[NotificationChannel]] = None
    ) -> List[NotificationResult]:
        """
        Отправить уведомление через указанные каналы.

        Args:
            message: Сообщение для отправки
            channels: Список каналов (если не указан, используются каналы из сообщения)

        Returns:
            Список результатов отправки по доступным каналам
        """
        if not self.config.enabled:
            self.logger.info("Notifications are disabled")
            return []

        target_channels = channels or message.channels or self._get_default_channels()

        results = []
        for channel_type in target_channels:
            channel = self.channels.get(channel_type)
            if channel is None or not channel.is_available():
                self.logger.warning(f"Channel {channel_type.value} not available")
                continue

            result = await channel.send(message)
            results.append(result)

            if result.success:
                self.logger.info(f"Notification sent via {channel_type.value}: {message.title}")
            else:
                self.logger.error(f"Failed to send via {channel_type.value}: {result.error}")

        return results

    def _get_default_channels(self) -> List[NotificationChannel]:
        """Каналы по умолчанию; если ничего не настроено - консоль."""
        channels = []
        if self.config.telegram_enabled:
            channels.append(NotificationChannel.TELEGRAM)
        if self.config.email_enabled:
            channels.append(NotificationChannel.EMAIL)
        if self.config.webhook_enabled:
            channels.append(NotificationChannel.WEBHOOK)

        if not channels:
            channels.append(NotificationChannel.CONSOLE)

        return channels


class MessageTemplates:
    """Шаблоны сообщений для различных типов уведомлений."""

    @staticmethod
    def create_alert_message(alert: Alert) -> NotificationMessage:
        """Сообщение об изменении цены конкурента."""
        if alert.actionable:
            priority = NotificationPriority.CRITICAL
        elif alert.severity == AlertSeverity.HIGH:
            priority = NotificationPriority.HIGH
        else:
            priority = NotificationPriority.NORMAL

        content = f"{alert.product_id}: {alert.message}"
        if alert.previous_price is not None and alert.current_price is not None:
            content += f"\n{alert.previous_price:.2f} → {alert.current_price:.2f}"
        if alert.platform:
            content += f"\nPlatform: {alert.platform}"
        if alert.suggested_action:
            content += f"\n\n💡 {alert.suggested_action}"

        return NotificationMessage(
            title=f"{alert.title}: {alert.product_id}",
            content=content,
            notification_type=NotificationType.COMPETITOR_PRICE_CHANGE,
            priority=priority,
            metadata={
                'alert_id': alert.id,
                'severity': alert.severity.value,
                'seller': alert.seller,
                'change_percent': alert.change_percent,
            },
            created_at=alert.timestamp
        )

