# crystal3d/utils/__init__.py
"""
Пакет утилит.

Экспортируем:
    * logger  – готовый объект logging.Logger (с level INFO)
    * Config  – настройки импорта из JSON
"""

from .logger import logger
from .config import Config

__all__ = ["logger", "Config"]
