"""
Пакет scene – узлы сцены (Node), узлы с геометрией, модели.
"""

from crystal3d.scene.node import Node
from crystal3d.scene.mesh import GeometryNode
from crystal3d.scene.model import Model

__all__ = ["Node", "GeometryNode", "Model"]
