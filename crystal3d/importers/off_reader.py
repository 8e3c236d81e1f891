"""
Читатель Object File Format (.off).

Заголовок – строка с `OFF` и префиксами: `ST` (texcoords), `C` (цвета),
`N` (нормали), `4` (однородные координаты), `n` (размерность вершин в
следующей строке).  Дальше строка с числами вершин/граней/рёбер,
вершины и грани вида `n i0 i1 ...`.  Бинарный вариант не поддерживается.
"""

from __future__ import annotations

from crystal3d.geometry.mesh_builder import MeshBuilder, MeshGeometry
from crystal3d.importers.errors import FileFormatError
from crystal3d.importers.model_reader import ModelReader, open_text
from crystal3d.importers.tokenizer import parse_float
from crystal3d.scene.mesh import GeometryNode
from crystal3d.scene.model import Model
from crystal3d.utils import logger


def _remove_comments(line: str) -> str:
    index = line.find("#")
    return line[:index] if index >= 0 else line


class OffReader(ModelReader):
    """Читатель .off – одна сетка с материалом по‑умолчанию."""

    def __init__(self, dispatcher=None, default_material=None):
        super().__init__(dispatcher, default_material)
        self.vertices: list[tuple] = []
        self.faces: list[list[int]] = []

    def read_stream(self, stream) -> Model:
        self.load(stream)
        return self.dispatch(self._build_model)

    # -----------------------------------------------------------------
    def load(self, stream) -> None:
        self.vertices.clear()
        self.faces.clear()

        header_seen = False
        contains_normals = contains_texcoords = contains_colors = False
        homogeneous = False
        vertex_dimension = 3
        expect_dimension = expect_counts = False
        vertex_count = face_count = 0

        with open_text(stream) as reader:
            for line_no, raw in enumerate(reader, 1):
                line = _remove_comments(raw).strip()
                if not line:
                    continue

                if expect_dimension:
                    vertex_dimension = int(self._values(line, line_no)[0])
                    expect_dimension = False
                    continue

                if not header_seen and "OFF" in line:
                    prefix, _, rest = line.partition("OFF")
                    if "BINARY" in rest.upper():
                        raise FileFormatError("Binary OFF files are not supported.", line_no)
                    contains_texcoords = "ST" in prefix
                    contains_colors = "C" in prefix
                    contains_normals = "N" in prefix
                    homogeneous = "4" in prefix
                    expect_dimension = "n" in prefix
                    header_seen = True
                    counts = rest.split()
                    if counts:
                        vertex_count, face_count = self._counts(rest, line_no)
                    else:
                        expect_counts = True
                    continue

                if not header_seen:
                    raise FileFormatError("Missing OFF header.", line_no)

                if expect_counts:
                    vertex_count, face_count = self._counts(line, line_no)
                    expect_counts = False
                    continue

                if len(self.vertices) < vertex_count:
                    values = self._values(line, line_no)
                    # w, нормали, цвета и texcoords идут после координат и не сохраняются
                    if len(values) < min(vertex_dimension, 3):
                        raise FileFormatError("Too few vertex coordinates.", line_no)
                    coords = list(values[:min(vertex_dimension, 3)]) + [0.0] * 3
                    self.vertices.append(tuple(coords[:3]))
                    continue

                if len(self.faces) < face_count:
                    values = [int(v) for v in self._values(line, line_no)]
                    n = values[0]
                    if n < 0 or len(values) < n + 1:
                        raise FileFormatError("Too few face indices.", line_no)
                    face = values[1:n + 1]
                    for index in face:
                        if not 0 <= index < vertex_count:
                            raise FileFormatError(f"Invalid vertex index ({index}).", line_no)
                    self.faces.append(face)

        if not header_seen:
            raise FileFormatError("Missing OFF header.")
        if len(self.vertices) < vertex_count or len(self.faces) < face_count:
            raise FileFormatError(
                f"Truncated file: expected {vertex_count} vertices and {face_count} faces, "
                f"got {len(self.vertices)} and {len(self.faces)}.")
        logger.debug(f"[OffReader] normals={contains_normals} colors={contains_colors} "
                     f"texcoords={contains_texcoords} homogeneous={homogeneous}")

    @staticmethod
    def _values(line, line_no):
        return [parse_float(token, line_no) for token in line.split()]

    def _counts(self, line, line_no):
        values = self._values(line, line_no)
        if len(values) < 2:
            raise FileFormatError("Expected vertex and face counts.", line_no)
        return int(values[0]), int(values[1])

    # -----------------------------------------------------------------
    def create_mesh_geometry(self) -> MeshGeometry:
        builder = MeshBuilder(create_normals=False, create_texcoords=False)
        for p in self.vertices:
            builder.add_vertex(p)
        for face in self.faces:
            builder.add_triangle_fan(face)
        return builder.to_mesh()

    def _build_model(self) -> Model:
        geometry = self.create_mesh_geometry()
        node = GeometryNode(geometry, self.default_material, self.default_material)
        return Model([node])
