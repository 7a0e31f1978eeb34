"""
Общие утилиты для сериализации моделей в словари и JSON.

Цель: централизовать преобразования, чтобы модели оставались простыми
dataclass-объектами. Модуль не импортирует модели, чтобы не создавать
циклов импорта.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional
import json


def _enum_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


# -------- MonitoringRule --------

def rule_to_dict(rule: Any) -> Dict[str, Any]:
    return {
        'id': rule.id,
        'product_name': rule.product_name,
        'platforms': [_enum_value(p) for p in rule.platforms],
        'frequency': _enum_value(rule.frequency),
        'price_threshold': rule.price_threshold,
        'is_active': rule.is_active,
        'created_at': _isoformat(rule.created_at),
        'last_check': _isoformat(rule.last_check),
    }


# -------- PriceHistory --------

def price_entry_to_dict(entry: Any) -> Dict[str, Any]:
    return {
        'price': entry.price,
        'timestamp': _isoformat(entry.timestamp),
        'source': _enum_value(entry.source),
    }


def price_history_to_dict(history: Any) -> Dict[str, Any]:
    """Сериализация PriceHistory вместе со всеми записями."""
    return {
        'product_name': history.product_name,
        'platform': history.platform,
        'seller': history.seller,
        'prices': [price_entry_to_dict(e) for e in history.prices],
    }


# -------- Alert --------

def alert_to_dict(alert: Any) -> Dict[str, Any]:
    return {
        'id': alert.id,
        'type': alert.type,
        'severity': _enum_value(alert.severity),
        'title': alert.title,
        'message': alert.message,
        'timestamp': _isoformat(alert.timestamp),
        'actionable': alert.actionable,
        'suggested_action': alert.suggested_action,
        'product_id': alert.product_id,
        'platform': alert.platform,
        'seller': alert.seller,
        'change_percent': alert.change_percent,
        'previous_price': alert.previous_price,
        'current_price': alert.current_price,
    }


# -------- MarketTrend / MonitoringStats --------

def market_trend_to_dict(trend: Any) -> Dict[str, Any]:
    return {
        'product_name': trend.product_name,
        'avg_price': trend.avg_price,
        'price_change_24h': trend.price_change_24h,
        'price_change_7d': trend.price_change_7d,
        'price_change_30d': trend.price_change_30d,
        'volatility': trend.volatility,
        'trend_direction': _enum_value(trend.trend_direction),
        'opportunities': list(trend.opportunities),
    }


def monitoring_stats_to_dict(stats: Any) -> Dict[str, Any]:
    return {
        'total_rules': stats.total_rules,
        'active_rules': stats.active_rules,
        'total_products': stats.total_products,
        'total_alerts_24h': stats.total_alerts_24h,
        'average_check_frequency': stats.average_check_frequency,
    }


def to_json(model: Any) -> str:
    """JSON-представление любой модели с методом to_dict()."""
    return json.dumps(model.to_dict(), ensure_ascii=False, indent=2)
