# -*- coding: utf-8 -*-
"""
Материал для отображения импортированной геометрии.

Хранит:

1️⃣  Диффузный цвет (RGB) и непрозрачность (`opacity`, 0 – прозрачный,
    1 – непрозрачный).  Если задана диффузная карта, цвет игнорируется
    рендером, а непрозрачность применяется к текстуре.

2️⃣  Необязательную emissive‑карту (в MTL это `map_Ka`) и блик
    (`specular` + `specular_power`) – блик добавляется, только если
    хотя бы один канал больше нуля.

3️⃣  Пути к картам, которые **загружаются** (по‑запросу) в методе
    `ensure_textures`.  Вызывать его нужно на потоке рендера –
    декодирование изображений идёт через Pillow.
"""

from __future__ import annotations

from crystal3d.utils import logger


class Material:
    """
    Параметры материала + ссылки на декодированные текстуры.
    Один и тот же объект используется как лицевой и как обратный материал.
    """

    # -------------------------------------------------------------
    # Инициализация
    # -------------------------------------------------------------
    def __init__(
        self,
        name: str = "Material",
        diffuse: tuple[float, float, float] = (1.0, 1.0, 1.0),
        opacity: float = 1.0,
        specular: tuple[float, float, float] | None = None,
        specular_power: float = 0.0,
        diffuse_map: str | None = None,
        emissive_map: str | None = None,
    ) -> None:
        self.name = name
        self.diffuse = tuple(float(c) for c in diffuse)
        self.opacity = float(opacity)
        self.specular = tuple(float(c) for c in specular) if specular else None
        self.specular_power = float(specular_power)

        # Пути к картам (загружаются «лениво»)
        self._texture_paths: dict[str, str] = {}
        if diffuse_map:
            self._texture_paths["diffuse"] = diffuse_map
        if emissive_map:
            self._texture_paths["emissive"] = emissive_map

        # После загрузки здесь лежат объекты Texture
        self.textures: dict[str, object] = {}

    # -------------------------------------------------------------
    @property
    def diffuse_rgba(self) -> tuple[float, float, float, float]:
        return self.diffuse + (self.opacity,)

    @property
    def has_specular(self) -> bool:
        return self.specular is not None and any(c > 0 for c in self.specular)

    @property
    def texture_paths(self) -> dict[str, str]:
        return dict(self._texture_paths)

    # -------------------------------------------------------------
    # Загрузка всех отложенных карт
    # -------------------------------------------------------------
    def ensure_textures(self, texture_manager) -> None:
        """
        Если карта ещё не загружена – берём её у `texture_manager`.
        Карта, которую не удалось декодировать, просто пропускается:
        материал остаётся с цветом.
        """
        for slot, path in self._texture_paths.items():
            if slot in self.textures:
                continue          # уже загружена

            try:
                self.textures[slot] = texture_manager.get(path)
            except OSError as exc:
                logger.error(f"[Material] Failed to load texture '{path}': {exc}")

    def __repr__(self):
        return f"Material({self.name!r}, diffuse={self.diffuse_rgba})"


def default_material() -> Material:
    """Материал по‑умолчанию – непрозрачный синий."""
    return Material(name="Default", diffuse=(0.0, 0.0, 1.0))


def material_from_config(section: dict | None) -> Material:
    """Материал по‑умолчанию из секции `default_material` файла настроек."""
    if not section:
        return default_material()
    return Material(
        name=section.get("name", "Default"),
        diffuse=tuple(section.get("diffuse", (0.0, 0.0, 1.0))),
        opacity=section.get("opacity", 1.0),
    )
