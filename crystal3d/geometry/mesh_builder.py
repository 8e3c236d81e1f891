"""
MeshBuilder – накапливает позиции/нормали/texcoords и индексы
треугольников, а затем отдаёт их одним объектом MeshGeometry.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import numpy as np

from crystal3d.geometry.triangulator import triangulate
from crystal3d.utils import logger

Point3 = Tuple[float, float, float]
Point2 = Tuple[float, float]


class MeshGeometry:
    """Готовая индексированная треугольная сетка (numpy‑массивы)."""

    def __init__(self,
                 positions: np.ndarray,
                 triangle_indices: np.ndarray,
                 normals: Optional[np.ndarray] = None,
                 texcoords: Optional[np.ndarray] = None):
        self.positions = np.asarray(positions, dtype=np.float32).reshape((-1, 3))
        self.triangle_indices = np.asarray(triangle_indices, dtype=np.uint32).ravel()
        self.normals = (np.asarray(normals, dtype=np.float32).reshape((-1, 3))
                        if normals is not None else None)
        self.texcoords = (np.asarray(texcoords, dtype=np.float32).reshape((-1, 2))
                          if texcoords is not None else None)

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def triangle_count(self) -> int:
        return len(self.triangle_indices) // 3

    @property
    def triangles(self) -> np.ndarray:
        """Индексы в виде (M, 3)."""
        return self.triangle_indices.reshape((-1, 3))


class MeshBuilder:
    """Построитель сетки; индексы полигонов – локальные индексы вершин."""

    def __init__(self, create_normals: bool = True, create_texcoords: bool = True):
        self.create_normals = create_normals
        self.create_texcoords = create_texcoords

        self.positions: List[Point3] = []
        self.normals: List[Point3] = []
        self.texcoords: List[Point2] = []
        self.triangle_indices: List[int] = []

    # -----------------------------------------------------------------
    def add_triangle(self, i0: int, i1: int, i2: int) -> None:
        self.triangle_indices.extend((i0, i1, i2))

    def add_triangle_fan(self, indices: Sequence[int]) -> None:
        """Веер из первой вершины: (0,1,2), (0,2,3), ..."""
        for i in range(1, len(indices) - 1):
            self.add_triangle(indices[0], indices[i], indices[i + 1])

    def add_polygon(self, indices: Sequence[int]) -> None:
        """Треугольник или выпуклый четырёхугольник (делится веером)."""
        if len(indices) < 3:
            return
        self.add_triangle_fan(indices)

    def add_polygon_by_triangulation(self, indices: Sequence[int]) -> None:
        """
        Многоугольник произвольной формы – отсечение ушей по позициям
        вершин.  Дорогая операция, только для n‑угольников.
        """
        points = [self.positions[i] for i in indices]
        triangles = triangulate(points)
        if not triangles:
            logger.warning(
                f"[MeshBuilder] Degenerate {len(indices)}-gon, falling back to a fan.")
            self.add_triangle_fan(indices)
            return
        for a, b, c in triangles:
            self.add_triangle(indices[a], indices[b], indices[c])

    # -----------------------------------------------------------------
    def add_vertex(self, position: Point3,
                   normal: Optional[Point3] = None,
                   texcoord: Optional[Point2] = None) -> int:
        """Добавить вершину, вернуть её индекс."""
        index = len(self.positions)
        self.positions.append(position)
        if self.create_normals and normal is not None:
            self.normals.append(normal)
        if self.create_texcoords and texcoord is not None:
            self.texcoords.append(texcoord)
        return index

    @property
    def is_empty(self) -> bool:
        return not self.triangle_indices

    def to_mesh(self) -> MeshGeometry:
        positions = np.array(self.positions, dtype=np.float32).reshape((-1, 3))
        normals = None
        if self.create_normals and len(self.normals) == len(self.positions):
            normals = np.array(self.normals, dtype=np.float32).reshape((-1, 3))
        texcoords = None
        if self.create_texcoords and len(self.texcoords) == len(self.positions):
            texcoords = np.array(self.texcoords, dtype=np.float32).reshape((-1, 2))
        return MeshGeometry(positions,
                            np.array(self.triangle_indices, dtype=np.uint32),
                            normals=normals,
                            texcoords=texcoords)
