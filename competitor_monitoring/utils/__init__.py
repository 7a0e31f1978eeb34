"""
Вспомогательные утилиты: статистика цен, сериализация, логирование.
"""
