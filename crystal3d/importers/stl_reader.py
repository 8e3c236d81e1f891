"""
Читатель STL (бинарный и ASCII).

Сначала данные пробуются как бинарные: 80 байт заголовка, uint32 –
число треугольников, затем по 50 байт на треугольник.  Если длина не
совпадает с объявленным числом треугольников, файл читается как ASCII.
"""

from __future__ import annotations

import struct

from crystal3d.assets.material import Material
from crystal3d.geometry.mesh_builder import MeshBuilder
from crystal3d.importers.errors import FileFormatError
from crystal3d.importers.model_reader import ModelReader
from crystal3d.importers.tokenizer import parse_float, split_line
from crystal3d.scene.mesh import GeometryNode
from crystal3d.scene.model import Model
from crystal3d.utils import logger

_HEADER_SIZE = 80
_STRUCT_TRIANGLE = struct.Struct("<12fH")
_TRIANGLE_SIZE = _STRUCT_TRIANGLE.size  # 50


def _attribute_color(attribute: int):
    """Цвет 5‑5‑5 из атрибута треугольника (бит 15 – признак цвета) или None."""
    if not attribute & 0x8000:
        return None
    blue = (attribute & 0x1F) * 8
    green = ((attribute >> 5) & 0x1F) * 8
    red = ((attribute >> 10) & 0x1F) * 8
    return red, green, blue


class StlReader(ModelReader):
    """Читатель .stl; смена цвета треугольников начинает новую сетку."""

    def __init__(self, dispatcher=None, default_material=None):
        super().__init__(dispatcher, default_material)
        self.header = ""
        self.meshes: list[MeshBuilder] = []
        self.materials: list[Material] = []
        self._last_color = None

    # -----------------------------------------------------------------
    def read_stream(self, stream) -> Model:
        data = stream.read()
        if isinstance(data, str):
            data = data.encode("utf-8")

        self.meshes.clear()
        self.materials.clear()
        self._last_color = None

        if not self._try_read_binary(data):
            self._read_ascii(data.decode("ascii", errors="replace"))
        return self.build_model()

    def build_model(self) -> Model:
        return self.dispatch(self._build_model)

    def _build_model(self) -> Model:
        model = Model(name=self.header or "Model")
        for builder, material in zip(self.meshes, self.materials):
            if builder.is_empty:
                continue
            model.add_mesh(GeometryNode(builder.to_mesh(), material, material,
                                        name=self.header or "Mesh"))
        logger.info(f"[StlReader] Built {len(model)} meshes ({model.triangle_count} triangles).")
        return model

    def _new_mesh(self, material):
        self.meshes.append(MeshBuilder(create_normals=True, create_texcoords=False))
        self.materials.append(material)

    @staticmethod
    def _add_facet(builder, normal, points):
        indices = [builder.add_vertex(p, normal=normal) for p in points]
        builder.add_polygon(indices)

    # -----------------------------------------------------------------
    # Бинарный формат
    # -----------------------------------------------------------------
    def _try_read_binary(self, data: bytes) -> bool:
        if len(data) < _HEADER_SIZE + 4:
            raise FileFormatError("Incomplete file")

        count = struct.unpack_from("<I", data, _HEADER_SIZE)[0]
        if len(data) - _HEADER_SIZE - 4 != count * _TRIANGLE_SIZE:
            return False

        self.header = data[:_HEADER_SIZE].decode("ascii", errors="replace").strip(" \0")
        self._new_mesh(self.default_material)

        offset = _HEADER_SIZE + 4
        for _ in range(count):
            values = _STRUCT_TRIANGLE.unpack_from(data, offset)
            offset += _TRIANGLE_SIZE

            color = _attribute_color(values[12])
            if color is not None and color != self._last_color:
                self._last_color = color
                self._new_mesh(Material(name=f"Color{len(self.materials)}",
                                        diffuse=tuple(c / 255.0 for c in color)))

            normal = values[0:3]
            points = [values[3:6], values[6:9], values[9:12]]
            self._add_facet(self.meshes[-1], normal, points)
        return True

    # -----------------------------------------------------------------
    # ASCII
    # -----------------------------------------------------------------
    def _read_ascii(self, text: str) -> None:
        self._new_mesh(self.default_material)
        lines = iter(text.splitlines())
        for raw in lines:
            line = raw.strip()
            if not line or line[0] in "\0#!$":
                continue
            keyword, values = split_line(line)
            if keyword == "solid":
                self.header = values
            elif keyword == "facet":
                self._read_facet(lines, values)

    @staticmethod
    def _next_line(lines):
        for raw in lines:
            line = raw.strip()
            if line:
                return line
        raise FileFormatError("Unexpected end of file.")

    def _expect(self, lines, token):
        keyword, _ = split_line(self._next_line(lines))
        if keyword != token:
            raise FileFormatError("Unexpected line.")

    def _read_facet(self, lines, values):
        keyword, arguments = split_line(values)
        fields = arguments.split()
        if keyword != "normal" or len(fields) < 3:
            raise FileFormatError("Unexpected line.")
        normal = tuple(parse_float(f) for f in fields[:3])

        self._expect(lines, "outer")
        points = []
        while True:
            keyword, arguments = split_line(self._next_line(lines))
            if keyword == "vertex":
                fields = arguments.split()
                if len(fields) < 3:
                    raise FileFormatError("Unexpected line.")
                points.append(tuple(parse_float(f) for f in fields[:3]))
            elif keyword == "endloop":
                break
        self._expect(lines, "endfacet")

        self._add_facet(self.meshes[-1], normal, points)
