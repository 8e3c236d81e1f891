"""
Узел с геометрией – сетка MeshGeometry + лицевой и обратный материал.
"""

import numpy as np

from crystal3d.scene.node import Node


class GeometryNode(Node):
    """Сетка с материалом; по‑умолчанию поверхность двусторонняя."""
    def __init__(self, geometry, material=None, back_material=None, name="Mesh"):
        super().__init__(name)

        self.geometry = geometry
        self.material = material
        self.back_material = back_material if back_material is not None else material

        # bounding sphere
        verts = geometry.positions
        if len(verts):
            self._bounding_center = verts.mean(axis=0).astype(np.float32)
            self._bounding_radius = float(
                np.linalg.norm(verts - self._bounding_center, axis=1).max())
        else:
            self._bounding_center = np.zeros(3, dtype=np.float32)
            self._bounding_radius = 0.0

    @property
    def positions(self):
        return self.geometry.positions

    @property
    def normals(self):
        return self.geometry.normals

    @property
    def texcoords(self):
        return self.geometry.texcoords

    @property
    def indices(self):
        return self.geometry.triangle_indices

    @property
    def bounding_sphere(self):
        """(центр, радиус) в локальных координатах."""
        return self._bounding_center, self._bounding_radius
