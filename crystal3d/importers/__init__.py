"""
Пакет importers – читатели форматов моделей.
"""

from crystal3d.importers.errors import FileFormatError
from crystal3d.importers.model_reader import ModelReader
from crystal3d.importers.mtl_reader import MaterialDefinition, MtlReader
from crystal3d.importers.obj_reader import ObjGroup, ObjReader, ObjSubMesh
from crystal3d.importers.stl_reader import StlReader
from crystal3d.importers.off_reader import OffReader
from crystal3d.importers.lwo_reader import LwoReader
from crystal3d.importers.model_importer import ModelImporter

__all__ = [
    "FileFormatError",
    "ModelReader",
    "MaterialDefinition",
    "MtlReader",
    "ObjGroup",
    "ObjReader",
    "ObjSubMesh",
    "StlReader",
    "OffReader",
    "LwoReader",
    "ModelImporter",
]
