"""
Триангуляция многоугольника «отсечением ушей».

Многоугольник в 3D проецируется на координатную плоскость, наиболее
перпендикулярную его нормали (нормаль по Ньюэллу), после чего индексы
треугольников считает `mapbox_earcut`.  Порядок обхода каждого
треугольника приводится к порядку обхода исходного многоугольника.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np
import mapbox_earcut as earcut

Triangle = Tuple[int, int, int]


def newell_normal(points: np.ndarray) -> np.ndarray:
    """Ненормированная нормаль многоугольника (метод Ньюэлла)."""
    nxt = np.roll(points, -1, axis=0)
    return np.array([
        np.sum((points[:, 1] - nxt[:, 1]) * (points[:, 2] + nxt[:, 2])),
        np.sum((points[:, 2] - nxt[:, 2]) * (points[:, 0] + nxt[:, 0])),
        np.sum((points[:, 0] - nxt[:, 0]) * (points[:, 1] + nxt[:, 1])),
    ])


def project_to_plane(points: np.ndarray) -> np.ndarray:
    """Отбросить ось, по которой нормаль максимальна."""
    normal = newell_normal(points)
    axis = int(np.argmax(np.abs(normal)))
    keep = [i for i in range(3) if i != axis]
    return np.ascontiguousarray(points[:, keep], dtype=np.float64)


def _signed_area(flat: np.ndarray) -> float:
    x, y = flat[:, 0], flat[:, 1]
    return 0.5 * float(np.sum(x * np.roll(y, -1) - np.roll(x, -1) * y))


def triangulate(points: Sequence[Sequence[float]]) -> List[Triangle]:
    """
    Вернуть треугольники (индексы в `points`), покрывающие многоугольник.
    Пустой список – если многоугольник вырожден (меньше трёх точек,
    нулевая площадь или earcut не нашёл ни одного уха).
    """
    pts = np.asarray(points, dtype=np.float64)
    if len(pts) < 3:
        return []

    flat = project_to_plane(pts)
    area = _signed_area(flat)
    # допуск по площади – относительно размеров самого многоугольника
    extent = float(np.max(flat.max(axis=0) - flat.min(axis=0)))
    if extent == 0.0 or abs(area) <= 1e-12 * extent * extent:
        return []

    rings = np.array([len(flat)], dtype=np.uint32)
    indices = earcut.triangulate_float64(flat, rings)

    triangles: List[Triangle] = []
    for i in range(0, len(indices), 3):
        a, b, c = int(indices[i]), int(indices[i + 1]), int(indices[i + 2])
        tri_area = _signed_area(flat[[a, b, c]])
        if (tri_area > 0) != (area > 0):
            b, c = c, b
        triangles.append((a, b, c))
    return triangles
