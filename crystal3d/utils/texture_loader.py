"""
Загружает PNG/JPG/BMP → RGBA‑массив numpy, возвращает объект Texture.
"""

from pathlib import Path

import numpy as np
from PIL import Image

from crystal3d.utils.logger import logger


class Texture:
    """Декодированное изображение: пиксели (h, w, 4) uint8 + путь к файлу."""

    def __init__(self, path: Path, pixels: np.ndarray):
        self.path = path
        self.pixels = pixels

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def __repr__(self):
        return f"Texture({self.path.name!r}, {self.width}x{self.height})"


def load_texture(path) -> Texture:
    """
    Загружает изображение через Pillow.
    FileNotFoundError – если файла нет, OSError – если Pillow не смог его декодировать.
    """
    p = Path(path).expanduser().resolve()
    if not p.is_file():
        raise FileNotFoundError(f"Texture not found: {p}")

    with Image.open(p) as img:
        pixels = np.array(img.convert("RGBA"), dtype=np.uint8)

    tex = Texture(p, pixels)
    logger.debug(f"[TextureLoader] Loaded texture {p} ({tex.width}x{tex.height})")
    return tex
