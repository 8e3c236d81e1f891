# -*- coding: utf-8 -*-
"""
Библиотека материалов Wavefront (.mtl).

Файл разбирается в словарь `MaterialDefinition` (имя → определение).
Определение превращается в отображаемый `Material` только при первом
обращении из геометрии (`get_material`), и это нужно делать на потоке
рендера: создание материала может декодировать изображения.
"""

from __future__ import annotations

import os

from crystal3d.assets.material import Material
from crystal3d.importers.model_reader import open_text
from crystal3d.importers.tokenizer import (
    logical_lines, parse_float, parse_floats, parse_int, split_line,
)
from crystal3d.utils import logger


def get_full_path(base_path, path):
    """
    Путь к файлу, на который ссылается модель, относительно `base_path`.
    Одиночный ведущий разделитель отбрасывается ("/tex.png" → "tex.png").
    Без `base_path` путь не разрешается – возвращается None.
    """
    seps = (os.sep, os.altsep or os.sep, "/", "\\")
    if len(path) > 1 and path[0] in seps and path[1] not in seps:
        path = path[1:]
    if not base_path or not base_path.strip():
        return None
    return os.path.abspath(os.path.join(base_path, path))


def _parse_color(arguments, line_no):
    """`Kd r g b` или `Kd r` (тогда g = b = r); значения прижимаются к [0, 1]."""
    values = parse_floats(arguments, line_no, count=1)
    if len(values) < 3:
        values = [values[0]] * 3
    return tuple(min(max(v, 0.0), 1.0) for v in values[:3])


class MaterialDefinition:
    """Определение материала из .mtl‑файла."""

    def __init__(self, name: str):
        self.name = name
        self.ambient = (0.0, 0.0, 0.0)
        self.diffuse = (0.0, 0.0, 0.0)
        self.specular = (0.0, 0.0, 0.0)
        self.specular_coefficient = 0.0
        # непрозрачность: 0 – прозрачный, 1 – непрозрачный
        self.dissolved = 1.0
        self.illumination = 0
        self.ambient_map = None
        self.diffuse_map = None
        self.specular_map = None
        self.alpha_map = None
        self.bump_map = None

        # texture_path → Material
        self._materials = {}

    def get_material(self, texture_path, texture_manager=None) -> Material:
        """Отображаемый материал; создаётся один раз для каждого пути к текстурам."""
        material = self._materials.get(texture_path)
        if material is None:
            material = self.create_material(texture_path, texture_manager)
            self._materials[texture_path] = material
        return material

    def create_material(self, texture_path, texture_manager=None) -> Material:
        diffuse_map = None
        if self.diffuse_map is not None:
            diffuse_map = self._existing_map(texture_path, self.diffuse_map)

        # ambient‑карта отображается как emissive
        emissive_map = None
        if self.ambient_map is not None:
            emissive_map = self._existing_map(texture_path, self.ambient_map)

        material = Material(
            name=self.name,
            diffuse=self.diffuse,
            opacity=self.dissolved,
            specular=self.specular if any(c > 0 for c in self.specular) else None,
            specular_power=self.specular_coefficient,
            diffuse_map=diffuse_map,
            emissive_map=emissive_map,
        )
        if texture_manager is not None:
            material.ensure_textures(texture_manager)
        return material

    def _existing_map(self, texture_path, map_name):
        path = get_full_path(texture_path, map_name)
        if path is None or not os.path.isfile(path):
            logger.warning(f"[Material] Texture map '{map_name}' of '{self.name}' not found.")
            return None
        return path

    def __repr__(self):
        return f"MaterialDefinition({self.name!r})"


class MtlReader:
    """
    Разбор .mtl.  Повторный `newmtl` с уже известным именем не ошибка:
    строки до следующего `newmtl` молча отбрасываются.
    """

    def __init__(self, materials=None, skip_transparency_values=True):
        self.materials = materials if materials is not None else {}
        self.skip_transparency_values = skip_transparency_values
        self._current = None
        self._handlers = {
            "newmtl": self._new_material,
            "ka": self._set_ambient,
            "kd": self._set_diffuse,
            "ks": self._set_specular,
            "ns": self._set_specular_coefficient,
            "d": self._set_dissolved,
            "tr": self._set_transparency,
            "illum": self._set_illumination,
            "map_ka": self._map_setter("ambient_map"),
            "map_kd": self._map_setter("diffuse_map"),
            "map_ks": self._map_setter("specular_map"),
            "map_d": self._map_setter("alpha_map"),
            "map_bump": self._map_setter("bump_map"),
            "bump": self._map_setter("bump_map"),
        }

    # -----------------------------------------------------------------
    def read(self, path):
        with open(path, "rb") as s:
            return self.read_stream(s)

    def read_stream(self, stream):
        """Дополнить `self.materials` определениями из потока."""
        self._current = None
        with open_text(stream) as reader:
            for line_no, line in logical_lines(reader):
                keyword, value = split_line(line)
                handler = self._handlers.get(keyword)
                if handler is not None:
                    handler(value, line_no)
        return self.materials

    # -----------------------------------------------------------------
    def _new_material(self, value, line_no):
        if not value:
            return
        if value in self.materials:
            self._current = None
        else:
            self._current = MaterialDefinition(value)
            self.materials[value] = self._current

    def _set_ambient(self, value, line_no):
        if self._current is not None and value:
            self._current.ambient = _parse_color(value, line_no)

    def _set_diffuse(self, value, line_no):
        if self._current is not None and value:
            self._current.diffuse = _parse_color(value, line_no)

    def _set_specular(self, value, line_no):
        if self._current is not None and value:
            self._current.specular = _parse_color(value, line_no)

    def _set_specular_coefficient(self, value, line_no):
        if self._current is not None and value:
            self._current.specular_coefficient = parse_float(value, line_no)

    def _set_dissolved(self, value, line_no):
        if self._current is not None and value:
            self._current.dissolved = parse_float(value, line_no)

    def _set_transparency(self, value, line_no):
        # Tr и d пишут в одно поле – побеждает последняя строка
        if not self.skip_transparency_values and self._current is not None and value:
            self._current.dissolved = parse_float(value, line_no)

    def _set_illumination(self, value, line_no):
        if self._current is not None and value:
            self._current.illumination = parse_int(value, line_no)

    def _map_setter(self, attribute):
        def setter(value, line_no):
            if self._current is not None:
                setattr(self._current, attribute, value or None)
        return setter
