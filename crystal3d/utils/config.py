"""
Загрузчик/сохранитель настроек импорта в формате JSON.
Если файл не найден – используются настройки по‑умолчанию.
"""

import copy
import json
from pathlib import Path

from crystal3d.utils.logger import logger

DEFAULT_CONFIG = {
    "obj": {
        "ignore_errors": False,
        "switch_yz": False,
        "skip_transparency_values": True,
        "smoothing_default": True,
    },
    "default_material": {
        "diffuse": [0.0, 0.0, 1.0],
        "opacity": 1.0,
    },
}


class Config:
    """Настройки импортёров, читаемые из JSON‑файла."""

    def __init__(self, path: str = "crystal3d.json"):
        self.path = Path(path)
        self._load()

    def _load(self):
        if self.path.is_file():
            try:
                with self.path.open("r", encoding="utf-8") as f:
                    self.data = json.load(f)
                logger.info(f"[Config] Loaded configuration from {self.path}.")
            except (OSError, ValueError) as exc:
                logger.error(f"[Config] Failed to read config: {exc}")
                self.data = copy.deepcopy(DEFAULT_CONFIG)
        else:
            logger.debug(f"[Config] No config file at {self.path} – using defaults.")
            self.data = copy.deepcopy(DEFAULT_CONFIG)

    def save(self):
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(self.data, f, indent=4)
        logger.info("[Config] Configuration saved.")

    def __getitem__(self, key):
        return self.data.get(key, DEFAULT_CONFIG.get(key))

    def __setitem__(self, key, value):
        self.data[key] = value

    def get(self, key, default=None):
        return self.data.get(key, default)

    # -------------------------------------------------------------
    def obj_options(self) -> dict:
        """Параметры для конструктора ObjReader (недостающие – из DEFAULT_CONFIG)."""
        section = self["obj"] or {}
        return {key: section.get(key, default)
                for key, default in DEFAULT_CONFIG["obj"].items()}
