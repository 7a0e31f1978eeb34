"""
Тесты для сервиса уведомлений.

Проверяет функциональность NotificationService и каналов уведомлений.
"""

import pytest
import smtplib
from unittest.mock import patch, AsyncMock, MagicMock

from ..config.settings import NotificationConfig
from ..core.notification_service import (
    NotificationService,
    NotificationMessage,
    NotificationChannel,
    NotificationPriority,
    NotificationType,
    TelegramChannel,
    EmailChannel,
    WebhookChannel,
    MessageTemplates,
)
from ..models.alert import Alert
from ..models.enums import AlertSeverity


def make_message(**kwargs):
    return NotificationMessage(
        title="Price change detected: Widget",
        content="Widget: SellerA decreased the price by 6.0%",
        notification_type=NotificationType.COMPETITOR_PRICE_CHANGE,
        **kwargs
    )


class TestNotificationMessage:
    """Тесты для NotificationMessage."""

    def test_to_dict(self):
        message = make_message(
            priority=NotificationPriority.HIGH,
            channels=[NotificationChannel.TELEGRAM],
            metadata={"alert_id": "alert_1"}
        )

        result = message.to_dict()

        assert result['type'] == "competitor_price_change"
        assert result['priority'] == "high"
        assert result['channels'] == ["telegram"]
        assert result['metadata'] == {"alert_id": "alert_1"}
        assert 'created_at' in result


class TestTelegramChannel:
    """Тесты для Telegram канала."""

    @pytest.fixture
    def telegram_channel(self):
        return TelegramChannel(NotificationConfig(
            telegram_enabled=True,
            telegram_bot_token="test_token",
            telegram_chat_ids=["123456789"]
        ))

    def test_unavailable_without_token(self):
        """Тест недоступности канала без токена."""
        channel = TelegramChannel(NotificationConfig(telegram_enabled=True, telegram_chat_ids=["1"]))
        assert channel.is_available() is False

    @pytest.mark.asyncio
    async def test_send_success(self, telegram_channel):
        """Тест успешной отправки через Telegram."""
        with patch('aiohttp.ClientSession') as mock_session:
            mock_response = AsyncMock()
            mock_response.status = 200
            mock_response.json = AsyncMock(return_value={'result': {'message_id': 123}})

            session = MagicMock()
            mock_session.return_value.__aenter__.return_value = session
            session.post.return_value.__aenter__.return_value = mock_response

            result = await telegram_channel.send(make_message())

        assert result.success is True
        assert result.channel == NotificationChannel.TELEGRAM
        assert result.message_id == "123"

    @pytest.mark.asyncio
    async def test_send_http_error(self, telegram_channel):
        with patch('aiohttp.ClientSession') as mock_session:
            mock_response = AsyncMock()
            mock_response.status = 401
            mock_response.text = AsyncMock(return_value="Unauthorized")

            session = MagicMock()
            mock_session.return_value.__aenter__.return_value = session
            session.post.return_value.__aenter__.return_value = mock_response

            result = await telegram_channel.send(make_message())

        assert result.success is False
        assert "HTTP 401" in result.error

    @pytest.mark.asyncio
    async def test_send_unavailable(self):
        result = await TelegramChannel(NotificationConfig()).send(make_message())

        assert result.success is False
        assert "not configured" in result.error

    def test_format_message(self, telegram_channel):
        formatted = telegram_channel._format_message(make_message(priority=NotificationPriority.CRITICAL))

        assert "Price change detected: Widget" in formatted
        assert "🚨" in formatted

    def test_format_message_escapes_html(self, telegram_channel):
        """Название товара с разметкой не ломает HTML-режим Telegram."""
        message = NotificationMessage(
            title="Price change detected: <Widget & Co>",
            content="<Widget & Co>: SellerA decreased the price by 6.0%",
            notification_type=NotificationType.COMPETITOR_PRICE_CHANGE,
        )

        formatted = telegram_channel._format_message(message)

        assert "<b>Price change detected: &lt;Widget &amp; Co&gt;</b>" in formatted
        assert "&lt;Widget &amp; Co&gt;: SellerA decreased" in formatted
        assert "<Widget" not in formatted


class TestEmailChannel:
    """Тесты для Email канала."""

    @pytest.fixture
    def email_channel(self):
        return EmailChannel(NotificationConfig(
            email_enabled=True,
            email_from="monitor@example.com",
            email_password="secret",
            email_to=["team@example.com"]
        ))

    @pytest.mark.asyncio
    async def test_send_success(self, email_channel):
        with patch('smtplib.SMTP') as mock_smtp:
            server = MagicMock()
            mock_smtp.return_value.__enter__.return_value = server

            result = await email_channel.send(make_message())

        assert result.success is True
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("monitor@example.com", "secret")
        server.send_message.assert_called_once()

    @pytest.mark.asyncio
    async def test_send_smtp_error(self, email_channel):
        with patch('smtplib.SMTP', side_effect=smtplib.SMTPException("refused")):
            result = await email_channel.send(make_message())

        assert result.success is False
        assert "refused" in result.error

    def test_html_is_escaped(self, email_channel):
        html = email_channel._format_html_message(make_message(metadata={"seller": "<b>x</b>"}))

        assert "&lt;b&gt;x&lt;/b&gt;" in html


class TestWebhookChannel:
    """Тесты для Webhook канала."""

    @pytest.mark.asyncio
    async def test_send_success(self):
        channel = WebhookChannel(NotificationConfig(webhook_enabled=True, webhook_url="https://hooks.example.com"))

        with patch('aiohttp.ClientSession') as mock_session:
            mock_response = AsyncMock()
            mock_response.status = 204
            session = MagicMock()
            mock_session.return_value.__aenter__.return_value = session
            session.post.return_value.__aenter__.return_value = mock_response

            result = await channel.send(make_message())

        assert result.success is True
        payload = session.post.call_args.kwargs['json']
        assert payload['source'] == "competitor_monitoring"
        assert payload['notification']['type'] == "competitor_price_change"


class TestNotificationService:
    """Тесты основного сервиса уведомлений."""

    @pytest.mark.asyncio
    async def test_console_fallback(self, capsys):
        """Без настроенных каналов используется консоль."""
        service = NotificationService(NotificationConfig())

        results = await service.send_notification(make_message())

        assert len(results) == 1
        assert results[0].channel == NotificationChannel.CONSOLE
        assert results[0].success is True
        assert "Price change detected: Widget" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_disabled(self):
        service = NotificationService(NotificationConfig(enabled=False))
        assert await service.send_notification(make_message()) == []

    @pytest.mark.asyncio
    async def test_unavailable_channel_skipped(self):
        service = NotificationService(NotificationConfig())

        results = await service.send_notification(make_message(), channels=[NotificationChannel.TELEGRAM])

        assert results == []


class TestMessageTemplates:
    """Тесты шаблонов сообщений."""

    @pytest.mark.parametrize("severity, actionable, expected", [
        (AlertSeverity.MEDIUM, False, NotificationPriority.NORMAL),
        (AlertSeverity.HIGH, False, NotificationPriority.HIGH),
        (AlertSeverity.HIGH, True, NotificationPriority.CRITICAL),
    ])
    def test_priority(self, now, severity, actionable, expected):
        alert = Alert(
            id="alert_1",
            severity=severity,
            title="Price change detected",
            message="SellerA decreased the price by 25.0%",
            product_id="Widget",
            timestamp=now,
            actionable=actionable,
            previous_price=100.0,
            current_price=75.0,
            platform="amazon",
            suggested_action="competitor cut price significantly",
        )

        message = MessageTemplates.create_alert_message(alert)

        assert message.priority == expected
        assert message.title == "Price change detected: Widget"
        assert "100.00 → 75.00" in message.content
        assert "competitor cut price significantly" in message.content
        assert message.created_at == now
