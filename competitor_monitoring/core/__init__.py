"""
Основные компоненты модуля мониторинга конкурентов.

Содержит:
- RuleRegistry: реестр правил мониторинга
- PriceHistoryStore: ограниченные истории цен
- PriceFetcher: источники текущих цен
- Детектор изменений цен и конвейер оповещений
- MonitoringScheduler: циклы мониторинга
- CompetitorMonitor: фасад для вызывающего кода
"""
