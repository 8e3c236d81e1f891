"""
Читатель LightWave Object (.lwo, формат LWOB).

Файл – IFF‑контейнер: `FORM` + размер + `LWOB`, затем чанки
(ID из 4 байт, размер uint32, данные, выравнивание до чётного байта).
Все числа big‑endian.  Читаются:

* `PNTS` – точки (по три float32);
* `SRFS` – имена поверхностей, на каждую – своя сетка;
* `POLS` – полигоны: uint16 число вершин, индексы uint16, int16 номер
  поверхности (с 1);
* `SURF` – параметры поверхности: `COLR` (цвет) и `TRAN` (прозрачность).

Остальные чанки пропускаются.  LWO2 и detail‑полигоны не поддерживаются.
"""

from __future__ import annotations

import struct

from crystal3d.assets.material import Material
from crystal3d.geometry.mesh_builder import MeshBuilder
from crystal3d.importers.errors import FileFormatError
from crystal3d.importers.model_reader import ModelReader
from crystal3d.scene.mesh import GeometryNode
from crystal3d.scene.model import Model
from crystal3d.utils import logger

_CHUNK_HEADER = struct.Struct(">4sI")
_SUB_CHUNK_HEADER = struct.Struct(">4sH")
_POINT = struct.Struct(">3f")
_UINT16 = struct.Struct(">H")
_INT16 = struct.Struct(">h")


def _read_names(data: bytes) -> list[str]:
    """Строки S0: нуль‑терминированные, дополненные до чётной длины."""
    names = []
    offset = 0
    while offset < len(data):
        end = data.find(b"\0", offset)
        if end < 0:
            end = len(data)
        names.append(data[offset:end].decode("ascii", errors="replace"))
        offset = end + 1
        if offset % 2:
            offset += 1
    return names


class LwoReader(ModelReader):
    """Читатель .lwo; одна сетка на каждую поверхность из `SRFS`."""

    def __init__(self, dispatcher=None, default_material=None):
        super().__init__(dispatcher, default_material)
        self.points: list[tuple] = []
        self.surfaces: list[str] = []
        self.meshes: list[MeshBuilder] = []
        self.materials: list[Material] = []
        # точка LWO → вершина сетки, отдельно для каждой поверхности
        self._vertex_maps: list[dict[int, int]] = []

    # -----------------------------------------------------------------
    def read_stream(self, stream) -> Model:
        data = stream.read()
        self.points.clear()
        self.surfaces.clear()
        self.meshes.clear()
        self.materials.clear()
        self._vertex_maps.clear()

        if len(data) < 12:
            raise FileFormatError("Incomplete file")
        form_id, form_size = _CHUNK_HEADER.unpack_from(data, 0)
        if form_id != b"FORM":
            raise FileFormatError("Unknown file")
        if form_size + 8 != len(data):
            raise FileFormatError("Incomplete file (file length does not match header)")

        kind = data[8:12]
        if kind == b"LWO2":
            raise FileFormatError("LWO2 is not yet supported.")
        if kind != b"LWOB":
            raise FileFormatError(f"Unknown file format ({kind.decode('ascii', errors='replace')}).")

        handlers = {
            b"PNTS": self._read_points,
            b"SRFS": self._read_surface_names,
            b"POLS": self._read_polygons,
            b"SURF": self._read_surface,
        }
        offset = 12
        while offset < len(data):
            if offset + _CHUNK_HEADER.size > len(data):
                raise FileFormatError("Incomplete chunk header.")
            chunk_id, size = _CHUNK_HEADER.unpack_from(data, offset)
            offset += _CHUNK_HEADER.size
            if offset + size > len(data):
                raise FileFormatError(f"Chunk {chunk_id!r} runs past the end of the file.")

            handler = handlers.get(chunk_id)
            if handler is not None:
                handler(data[offset:offset + size])
            else:
                logger.debug(f"[LwoReader] Skipped chunk {chunk_id!r} ({size} bytes)")
            offset += size + (size & 1)

        return self.dispatch(self._build_model)

    def _build_model(self) -> Model:
        model = Model()
        for name, builder, material in zip(self.surfaces, self.meshes, self.materials):
            if builder.is_empty:
                continue
            model.add_mesh(GeometryNode(builder.to_mesh(), material, material, name=name))
        logger.info(f"[LwoReader] Built {len(model)} meshes ({model.triangle_count} triangles).")
        return model

    # -----------------------------------------------------------------
    # Чанки
    # -----------------------------------------------------------------
    def _read_points(self, chunk: bytes) -> None:
        count = len(chunk) // _POINT.size
        self.points = [_POINT.unpack_from(chunk, i * _POINT.size) for i in range(count)]

    def _read_surface_names(self, chunk: bytes) -> None:
        self.surfaces = _read_names(chunk)
        self.meshes = [MeshBuilder(create_normals=False, create_texcoords=False)
                       for _ in self.surfaces]
        self.materials = [self.default_material for _ in self.surfaces]
        self._vertex_maps = [{} for _ in self.surfaces]

    def _read_polygons(self, chunk: bytes) -> None:
        offset = 0
        while offset + 2 <= len(chunk):
            (count,) = _UINT16.unpack_from(chunk, offset)
            offset += 2
            if offset + 2 * count + 2 > len(chunk):
                raise FileFormatError("Truncated polygon record.")
            indices = struct.unpack_from(f">{count}H", chunk, offset)
            offset += 2 * count
            (surface,) = _INT16.unpack_from(chunk, offset)
            offset += 2

            if surface < 0:
                raise FileFormatError("Detail polygons are not supported.")
            if not 1 <= surface <= len(self.meshes):
                raise FileFormatError(f"Invalid surface index ({surface}).")
            self._add_polygon(surface - 1, indices)

    def _add_polygon(self, surface: int, indices) -> None:
        builder = self.meshes[surface]
        vertex_map = self._vertex_maps[surface]
        local = []
        for index in indices:
            if index >= len(self.points):
                raise FileFormatError(f"Invalid point index ({index}).")
            if index not in vertex_map:
                vertex_map[index] = builder.add_vertex(self.points[index])
            local.append(vertex_map[index])
        builder.add_polygon(local)

    def _read_surface(self, chunk: bytes) -> None:
        """SURF: имя (S0), затем под‑чанки с uint16‑размером."""
        end = chunk.find(b"\0")
        if end < 0:
            raise FileFormatError("Surface name is not terminated.")
        name = chunk[:end].decode("ascii", errors="replace")
        offset = end + 1 + ((end + 1) & 1)

        color = None
        transparency = 0.0
        while offset + _SUB_CHUNK_HEADER.size <= len(chunk):
            sub_id, size = _SUB_CHUNK_HEADER.unpack_from(chunk, offset)
            offset += _SUB_CHUNK_HEADER.size
            if sub_id == b"COLR" and size >= 3:
                color = tuple(c / 255.0 for c in chunk[offset:offset + 3])
            elif sub_id == b"TRAN" and size >= 4:
                (transparency,) = struct.unpack_from(">f", chunk, offset)
            offset += size + (size & 1)

        if name not in self.surfaces:
            logger.debug(f"[LwoReader] SURF '{name}' is not listed in SRFS.")
            return
        if color is None and transparency == 0.0:
            return
        index = self.surfaces.index(name)
        self.materials[index] = Material(
            name=name,
            diffuse=color if color is not None else self.default_material.diffuse,
            opacity=1.0 - transparency,
        )
