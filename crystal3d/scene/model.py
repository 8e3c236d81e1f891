"""
Объединяет несколько GeometryNode‑ов в одну модель.
"""

from crystal3d.scene.node import Node


class Model(Node):
    """Упорядоченный набор узлов с геометрией – результат импорта."""
    def __init__(self, meshes=(), name="Model"):
        super().__init__(name)
        self.meshes = []
        for m in meshes:
            self.add_mesh(m)

    def add_mesh(self, mesh):
        self.meshes.append(mesh)
        self.add_child(mesh)

    def __len__(self):
        return len(self.meshes)

    def __iter__(self):
        return iter(self.meshes)

    def __getitem__(self, index):
        return self.meshes[index]

    @property
    def triangle_count(self) -> int:
        return sum(m.geometry.triangle_count for m in self.meshes)
