"""
Crystal3D – импорт полигональных моделей (Wavefront OBJ/MTL, STL, OFF)
в индексированные треугольные сетки с материалами.
"""

from crystal3d.utils import logger, Config
from crystal3d.scene import Node, GeometryNode, Model
from crystal3d.geometry import MeshBuilder, MeshGeometry
from crystal3d.assets.material import Material, default_material
from crystal3d.assets.texture_manager import TextureManager
from crystal3d.multithread import Dispatcher, TaskPool
from crystal3d.importers import (
    FileFormatError,
    ObjReader,
    MtlReader,
    StlReader,
    OffReader,
    LwoReader,
    ModelImporter,
)

__version__ = "1.0.0"

__all__ = [
    "Config",
    "Node",
    "GeometryNode",
    "Model",
    "MeshBuilder",
    "MeshGeometry",
    "Material",
    "default_material",
    "TextureManager",
    "Dispatcher",
    "TaskPool",
    "FileFormatError",
    "ObjReader",
    "MtlReader",
    "StlReader",
    "OffReader",
    "LwoReader",
    "ModelImporter",
]
