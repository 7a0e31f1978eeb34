"""
Тесты для реестра правил мониторинга.
"""

import pytest
from datetime import timedelta

from ..core.exceptions import RuleNotFoundError
from ..core.rule_registry import RuleRegistry, is_due, frequency_label
from ..models.enums import MarketplaceType, MonitoringFrequency


class TestAddRule:
    """Тесты создания правил."""

    def test_add_rule_defaults(self, registry, now):
        """Новое правило активно и покрывает все площадки."""
        rule_id = registry.add_rule("Widget", now=now)
        rule = registry.get_rule(rule_id)

        assert rule_id.startswith("rule_")
        assert rule.product_name == "Widget"
        assert rule.is_active is True
        assert rule.created_at == now
        assert rule.last_check is None
        assert rule.frequency == MonitoringFrequency.DAILY
        assert rule.price_threshold == 5.0
        assert rule.platforms == [p.value for p in MarketplaceType]

    def test_add_rule_accepts_string_frequency(self, registry):
        """Частота может быть передана строкой."""
        rule_id = registry.add_rule("Widget", platforms=["amazon"], frequency="hourly")
        rule = registry.get_rule(rule_id)

        assert rule.frequency == MonitoringFrequency.HOURLY
        assert rule.platforms == ["amazon"]

    def test_add_rule_ids_are_unique(self, registry, now):
        """Правила, созданные в одну миллисекунду, получают разные ID."""
        first = registry.add_rule("Widget", now=now)
        second = registry.add_rule("Widget", now=now)

        assert first != second
        assert len(registry) == 2

    @pytest.mark.parametrize("kwargs", [
        {"product_name": ""},
        {"product_name": "   "},
        {"product_name": "Widget", "price_threshold": -1},
        {"product_name": "Widget", "frequency": "monthly"},
    ])
    def test_add_rule_rejects_invalid_input(self, registry, kwargs):
        """Некорректные параметры правила отклоняются."""
        with pytest.raises(ValueError):
            registry.add_rule(**kwargs)

        assert len(registry) == 0


class TestRuleLifecycle:
    """Тесты удаления и переключения правил."""

    def test_remove_rule(self, registry):
        rule_id = registry.add_rule("Widget")

        assert registry.remove_rule(rule_id) is True
        assert registry.remove_rule(rule_id) is False
        assert rule_id not in registry

    def test_get_unknown_rule_raises(self, registry):
        with pytest.raises(RuleNotFoundError):
            registry.get_rule("rule_missing")

    def test_deactivate_and_activate(self, registry):
        """Отключенное правило не попадает в список активных."""
        first = registry.add_rule("Widget")
        second = registry.add_rule("Gadget")

        registry.deactivate_rule(first)
        assert [r.id for r in registry.list_active_rules()] == [second]

        registry.activate_rule(first)
        assert [r.id for r in registry.list_active_rules()] == [first, second]

    def test_toggle_unknown_rule_raises(self, registry):
        with pytest.raises(RuleNotFoundError):
            registry.deactivate_rule("rule_missing")


class TestIsDue:
    """Тесты выбора правил для проверки."""

    def test_never_checked_rule_is_due(self, registry, now):
        rule = registry.get_rule(registry.add_rule("Widget", frequency="weekly"))
        assert is_due(rule, now) is True

    def test_hourly_rule_due_after_61_minutes(self, registry, now):
        rule = registry.get_rule(registry.add_rule("Widget", frequency="hourly"))
        rule.last_check = now - timedelta(minutes=61)
        assert is_due(rule, now) is True

    def test_hourly_rule_not_due_after_59_minutes(self, registry, now):
        rule = registry.get_rule(registry.add_rule("Widget", frequency="hourly"))
        rule.last_check = now - timedelta(minutes=59)
        assert is_due(rule, now) is False

    def test_interval_boundary_is_exclusive(self, registry, now):
        """Ровно один интервал - ещё не пора."""
        rule = registry.get_rule(registry.add_rule("Widget", frequency="daily"))
        rule.last_check = now - timedelta(hours=24)
        assert is_due(rule, now) is False

    def test_unknown_frequency_never_due(self, registry, now):
        rule = registry.get_rule(registry.add_rule("Widget"))
        rule.last_check = now - timedelta(days=365)
        rule.frequency = "monthly"
        assert is_due(rule, now) is False

    def test_due_rules_skip_inactive(self, registry, now):
        active = registry.add_rule("Widget")
        inactive = registry.add_rule("Gadget")
        registry.deactivate_rule(inactive)

        assert [r.id for r in registry.due_rules(now)] == [active]


class TestFrequencyLabel:
    """Тесты качественной оценки частоты проверок."""

    def _rules(self, *frequencies):
        registry = RuleRegistry()
        return [registry.get_rule(registry.add_rule("Widget", frequency=f)) for f in frequencies]

    def test_no_rules_is_high(self):
        """Пустой список даёт нулевую среднюю частоту."""
        assert frequency_label([]) == "High"

    def test_hourly_is_high(self):
        assert frequency_label(self._rules("hourly")) == "High"

    def test_mixed_is_medium(self):
        # (1 + 24) / 2 = 12.5
        assert frequency_label(self._rules("hourly", "daily")) == "Medium"

    def test_daily_is_low(self):
        assert frequency_label(self._rules("daily", "weekly")) == "Low"
