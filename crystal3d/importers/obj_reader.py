# -*- coding: utf-8 -*-
"""
Читатель Wavefront .obj.

Чтение в две фазы:

1️⃣  `parse` – один последовательный проход по строкам.  Позиции,
    нормали и texcoords копятся в общих пулах, грани раскладываются по
    группам и под‑сеткам (новая под‑сетка – при смене материала), общие
    вершины ищутся по картам групп сглаживания.  Никаких объектов для
    отображения на этой фазе не создаётся.

2️⃣  `build_model` – через диспетчер (на потоке рендера) разрешает
    материалы и собирает по одному GeometryNode на каждую непустую
    под‑сетку.

Кривые/поверхности (`vp`, `cstype`, `curv`, `surf`, ...) не
поддерживаются и пропускаются, как и любые неизвестные ключевые слова.
"""

from __future__ import annotations

import gzip
import os

from crystal3d.assets.texture_manager import TextureManager
from crystal3d.geometry.mesh_builder import MeshBuilder
from crystal3d.importers.errors import FileFormatError
from crystal3d.importers.model_reader import ModelReader, open_text
from crystal3d.importers.mtl_reader import MtlReader, get_full_path
from crystal3d.importers.tokenizer import (
    logical_lines, parse_floats, parse_int, split_line,
)
from crystal3d.scene.mesh import GeometryNode
from crystal3d.scene.model import Model
from crystal3d.utils import logger

# Распознаются, но не обрабатываются
IGNORED_KEYWORDS = frozenset({
    # данные вершин свободных форм
    "vp", "cstype", "degree", "bmat", "step",
    # элементы
    "p", "l", "curv", "curv2", "surf",
    # тело кривых/поверхностей
    "parm", "trim", "hole", "scrv", "sp", "end",
    # связность поверхностей
    "con",
    # группировка
    "mg", "o",
    # атрибуты отображения
    "bevel", "c_interp", "d_interp", "lod", "shadow_obj", "trace_obj",
    "ctech", "stech",
})


class ObjSubMesh:
    """
    Часть группы с одним материалом.  Вершины копируются в собственный
    MeshBuilder; наличие texcoords/нормалей фиксируется первой гранью.
    """

    def __init__(self, material_name=None):
        self.material_name = material_name
        self.builder = MeshBuilder(create_normals=True, create_texcoords=True)
        self.emits_texcoords = True
        self.emits_normals = True
        self.attributes_latched = False

    def latch_attributes(self, emits_texcoords: bool, emits_normals: bool) -> None:
        """Один раз на под‑сетку: дальше состав атрибутов не меняется."""
        if self.attributes_latched:
            return
        self.emits_texcoords = emits_texcoords
        self.emits_normals = emits_normals
        self.builder.create_texcoords = emits_texcoords
        self.builder.create_normals = emits_normals
        self.attributes_latched = True

    @property
    def is_empty(self) -> bool:
        return self.builder.is_empty


class ObjGroup:
    """Группа из .obj (`g name`); всегда содержит хотя бы одну под‑сетку."""

    def __init__(self, name: str, material_name=None):
        self.name = name
        self.meshes: list[ObjSubMesh] = []
        self.add_mesh(material_name)

    @property
    def current_mesh(self) -> ObjSubMesh:
        return self.meshes[-1]

    @property
    def builder(self) -> MeshBuilder:
        return self.current_mesh.builder

    def set_material(self, material_name) -> None:
        self.current_mesh.material_name = material_name

    def add_mesh(self, material_name=None) -> ObjSubMesh:
        mesh = ObjSubMesh(material_name)
        self.meshes.append(mesh)
        return mesh

    def __repr__(self):
        return f"ObjGroup({self.name!r}, meshes={len(self.meshes)})"


class ObjReader(ModelReader):
    """Читатель .obj (+ связанных .mtl)."""

    def __init__(
        self,
        dispatcher=None,
        default_material=None,
        ignore_errors: bool = False,
        switch_yz: bool = False,
        skip_transparency_values: bool = True,
        smoothing_default: bool = True,
        texture_path: str | None = None,
    ):
        super().__init__(dispatcher, default_material)
        self.ignore_errors = ignore_errors
        self.switch_yz = switch_yz
        self.skip_transparency_values = skip_transparency_values
        self.texture_path = texture_path

        # name → MaterialDefinition (живёт весь вызов чтения)
        self.materials = {}
        self.textures = TextureManager()

        self.smoothing_default = smoothing_default
        self._reset()

        self._handlers = {
            "v": self._add_vertex,
            "vt": self._add_texcoord,
            "vn": self._add_normal,
            "f": self._add_face,
            "g": self._add_group,
            "s": self._set_smoothing_group,
            "mtllib": self._load_material_lib,
            "usemtl": self._use_material,
            "usemap": self._use_map,
        }

    # -----------------------------------------------------------------
    @property
    def smoothing_default(self) -> bool:
        return self._smoothing_default

    @smoothing_default.setter
    def smoothing_default(self, value: bool) -> None:
        self._smoothing_default = bool(value)
        self._current_smoothing_group = 1 if value else 0

    def _reset(self):
        self.positions = []
        self.texcoords = []
        self.normals = []
        self.groups: list[ObjGroup] = []

        # группа сглаживания → {(v, vt, vn) → локальный индекс вершины}
        self._smoothing_group_maps: dict[int, dict[tuple, int]] = {}
        self._current_smoothing_group = 1 if self._smoothing_default else 0
        self._current_material_name = None
        self._line_no = 0

    @property
    def current_group(self) -> ObjGroup:
        if not self.groups:
            self._add_group("default")
        return self.groups[-1]

    # -----------------------------------------------------------------
    # Публичные точки входа
    # -----------------------------------------------------------------
    def read_stream(self, stream) -> Model:
        self.parse(stream)
        return self.build_model()

    def read_z(self, path) -> Model:
        """Прочитать .obj, сжатый gzip (расширение .objz)."""
        if self.texture_path is None:
            self.texture_path = os.path.dirname(os.path.abspath(path))
        with open(path, "rb") as s, gzip.GzipFile(fileobj=s, mode="rb") as gz:
            return self.read_stream(gz)

    def read_with_materials(self, obj_stream, mtl_streams) -> Model:
        """Материалы из переданных потоков читаются до геометрии."""
        for mtl_stream in mtl_streams:
            self.load_materials(mtl_stream)
        return self.read_stream(obj_stream)

    def load_materials(self, stream) -> dict:
        reader = MtlReader(self.materials, self.skip_transparency_values)
        return reader.read_stream(stream)

    def parse(self, stream) -> list[ObjGroup]:
        """Фаза 1: разобрать поток в группы/под‑сетки, без объектов отображения."""
        self._reset()
        with open_text(stream) as reader:
            for line_no, line in logical_lines(reader):
                self._line_no = line_no
                keyword, arguments = split_line(line)
                handler = self._handlers.get(keyword)
                if handler is not None:
                    handler(arguments)
                elif keyword not in IGNORED_KEYWORDS:
                    logger.debug(f"[ObjReader] Unknown keyword '{keyword}' on line {line_no}.")
        return self.groups

    # -----------------------------------------------------------------
    # Данные вершин
    # -----------------------------------------------------------------
    def _add_vertex(self, arguments):
        x, y, z = parse_floats(arguments, self._line_no, count=3)[:3]
        self.positions.append((x, -z, y) if self.switch_yz else (x, y, z))

    def _add_texcoord(self, arguments):
        values = parse_floats(arguments, self._line_no, count=1)
        v = values[1] if len(values) > 1 else 0.0
        self.texcoords.append((values[0], 1.0 - v))

    def _add_normal(self, arguments):
        x, y, z = parse_floats(arguments, self._line_no, count=3)[:3]
        self.normals.append((x, -z, y) if self.switch_yz else (x, y, z))

    # -----------------------------------------------------------------
    # Группировка
    # -----------------------------------------------------------------
    def _add_group(self, name):
        self.groups.append(ObjGroup(name, self._current_material_name))
        self._smoothing_group_maps.clear()

    def _ensure_new_mesh(self):
        """Новая под‑сетка, только если в текущей уже есть треугольники."""
        group = self.current_group
        if not group.current_mesh.is_empty:
            group.add_mesh(self._current_material_name)
            self._smoothing_group_maps.clear()

    def _use_material(self, name):
        self._ensure_new_mesh()
        self._current_material_name = name or None
        self.current_group.set_material(self._current_material_name)

    def _use_map(self, arguments):
        self._ensure_new_mesh()

    def _set_smoothing_group(self, value):
        if value.lower() == "off":
            self._current_smoothing_group = 0
            return
        try:
            self._current_smoothing_group = int(value)
        except ValueError:
            if self.ignore_errors:
                return
            raise FileFormatError(
                f"Invalid smoothing group ({value}) on line {self._line_no}.", self._line_no)

    def _load_material_lib(self, arguments):
        # "mtllib a.mtl b.mtl" – если целиком это не имя файла, пробуем по словам
        path = get_full_path(self.texture_path, arguments)
        names = [arguments] if path and os.path.isfile(path) else arguments.split()
        for name in names:
            path = get_full_path(self.texture_path, name)
            if path is None or not os.path.isfile(path):
                logger.warning(f"[ObjReader] Material library '{name}' not found.")
                continue
            MtlReader(self.materials, self.skip_transparency_values).read(path)
            logger.debug(f"[ObjReader] Loaded material library {path}")

    # -----------------------------------------------------------------
    # Грани
    # -----------------------------------------------------------------
    def _resolve(self, token, pool_size):
        """Индекс из файла (1‑based, отрицательный – с конца пула) или None."""
        if not token:
            return None
        index = parse_int(token, self._line_no)
        if index < 0:
            index = pool_size + index + 1
        return index

    def _invalid(self, what, index):
        """Неверный индекс: None – грань пропускается (ignore_errors), иначе исключение."""
        if self.ignore_errors:
            logger.debug(f"[ObjReader] Dropped face on line {self._line_no}: invalid {what} index.")
            return None
        shown = "missing" if index is None else index
        raise FileFormatError(
            f"Invalid {what} index ({shown}) on line {self._line_no}.", self._line_no)

    def _add_face(self, arguments):
        """
        Грань – 3+ записей `v[/vt][/vn]`.  Сначала все записи разбираются
        и проверяются; грань с неверным индексом при ignore_errors
        отбрасывается целиком.  Затем каждой записи сопоставляется
        локальная вершина под‑сетки.
        """
        mesh = self.current_group.current_mesh
        builder = mesh.builder

        corners = []
        for field in arguments.split():
            parts = field.split("/")
            vi = self._resolve(parts[0], len(self.positions))
            vti = self._resolve(parts[1], len(self.texcoords)) if len(parts) > 1 else None
            vni = self._resolve(parts[2], len(self.normals)) if len(parts) > 2 else None
            corners.append((vi, vti, vni))

        if len(corners) < 3:
            if self.ignore_errors:
                return
            raise FileFormatError(
                f"Face with fewer than three vertices on line {self._line_no}.", self._line_no)

        # состав атрибутов фиксируется первой записью первой грани
        if mesh.attributes_latched:
            emits_texcoords, emits_normals = mesh.emits_texcoords, mesh.emits_normals
        else:
            emits_texcoords = corners[0][1] is not None
            emits_normals = corners[0][2] is not None

        for vi, vti, vni in corners:
            if vi is None or not 1 <= vi <= len(self.positions):
                return self._invalid("vertex", vi)
            if emits_texcoords and (vti is None or not 1 <= vti <= len(self.texcoords)):
                return self._invalid("texture coordinate", vti)
            if emits_normals and (vni is None or not 1 <= vni <= len(self.normals)):
                return self._invalid("normal", vni)

        mesh.latch_attributes(emits_texcoords, emits_normals)

        # при группе сглаживания 0 вершины никогда не разделяются
        smoothing_map = None
        if self._current_smoothing_group != 0:
            smoothing_map = self._smoothing_group_maps.setdefault(
                self._current_smoothing_group, {})

        face_indices = []
        for key in corners:
            if smoothing_map is not None and key in smoothing_map:
                face_indices.append(smoothing_map[key])
                continue
            vi, vti, vni = key
            index = builder.add_vertex(
                self.positions[vi - 1],
                normal=self.normals[vni - 1] if emits_normals else None,
                texcoord=self.texcoords[vti - 1] if emits_texcoords else None,
            )
            if smoothing_map is not None:
                smoothing_map[key] = index
            face_indices.append(index)

        if len(face_indices) <= 4:
            builder.add_polygon(face_indices)
        else:
            builder.add_polygon_by_triangulation(face_indices)

    # -----------------------------------------------------------------
    # Фаза 2 – сборка модели
    # -----------------------------------------------------------------
    def get_material(self, material_name):
        """Отображаемый материал по имени; неизвестное имя → материал по‑умолчанию."""
        definition = self.materials.get(material_name) if material_name else None
        if definition is None:
            return self.default_material
        return definition.get_material(self.texture_path, self.textures)

    def build_model(self) -> Model:
        return self.dispatch(self._build_model)

    def _build_model(self) -> Model:
        model = Model()
        for group in self.groups:
            for mesh in group.meshes:
                if mesh.is_empty:
                    continue
                material = self.get_material(mesh.material_name)
                model.add_mesh(GeometryNode(mesh.builder.to_mesh(),
                                            material, material, name=group.name))
        logger.info(f"[ObjReader] Built {len(model)} meshes from {len(self.groups)} groups "
                    f"({model.triangle_count} triangles).")
        return model


__all__ = ["ObjReader", "ObjGroup", "ObjSubMesh", "IGNORED_KEYWORDS"]
