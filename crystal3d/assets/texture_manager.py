# crystal3d/assets/texture_manager.py
"""Менеджер кэширования текстур – один объект на чтение файла."""

from pathlib import Path

from crystal3d.utils.logger import logger
from crystal3d.utils.texture_loader import load_texture


class TextureManager:
    """Кеширующий менеджер текстур; ключ – абсолютный путь к файлу."""

    def __init__(self):
        self._cache = {}

    def get(self, path):
        key = str(Path(path).expanduser().resolve())
        if key in self._cache:
            return self._cache[key]
        tex = load_texture(key)
        self._cache[key] = tex
        logger.debug(f"[TextureManager] Loaded texture: {key}")
        return tex

    def __len__(self):
        return len(self._cache)
