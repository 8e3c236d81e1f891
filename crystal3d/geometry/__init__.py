"""Построение сеток и триангуляция."""
from crystal3d.geometry.mesh_builder import MeshBuilder, MeshGeometry
from crystal3d.geometry.triangulator import triangulate

__all__ = ["MeshBuilder", "MeshGeometry", "triangulate"]
