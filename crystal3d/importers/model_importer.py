"""
Импорт модели из файла – выбор читателя по расширению.
"""

from __future__ import annotations

import os

from crystal3d.assets.material import material_from_config
from crystal3d.importers.errors import FileFormatError
from crystal3d.importers.lwo_reader import LwoReader
from crystal3d.importers.obj_reader import ObjReader
from crystal3d.importers.off_reader import OffReader
from crystal3d.importers.stl_reader import StlReader
from crystal3d.multithread.dispatcher import TaskPool
from crystal3d.utils import logger


class ModelImporter:
    """Загружает .obj / .objz / .stl / .off / .lwo; каждый вызов – свой читатель."""

    def __init__(self, default_material=None, config=None):
        self.config = config
        if default_material is None:
            section = config["default_material"] if config is not None else None
            default_material = material_from_config(section)
        self.default_material = default_material

    def _obj_reader(self, dispatcher):
        options = self.config.obj_options() if self.config is not None else {}
        return ObjReader(dispatcher, self.default_material, **options)

    def load(self, path, dispatcher=None):
        """Прочитать модель; неизвестное расширение → FileFormatError."""
        if path is None:
            return None

        ext = os.path.splitext(str(path))[1].lower()
        if ext == ".obj":
            model = self._obj_reader(dispatcher).read(path)
        elif ext == ".objz":
            model = self._obj_reader(dispatcher).read_z(path)
        elif ext == ".stl":
            model = StlReader(dispatcher, self.default_material).read(path)
        elif ext == ".off":
            model = OffReader(dispatcher, self.default_material).read(path)
        elif ext == ".lwo":
            model = LwoReader(dispatcher, self.default_material).read(path)
        else:
            raise FileFormatError(f"File format not supported: {ext or path}")

        model.name = os.path.basename(str(path))
        logger.debug(f"[ModelImporter] Loaded {path}")
        return model

    def load_all(self, paths, dispatcher=None, max_workers=None):
        """
        Параллельно прочитать несколько файлов (у каждого свой читатель).
        Модели возвращаются в порядке `paths`; первая ошибка пробрасывается.
        """
        pool = TaskPool(max_workers=max_workers)
        try:
            futures = [pool.submit(self.load, p, dispatcher) for p in paths]
            pool.wait_all()
            return [f.result() for f in futures]
        finally:
            pool.shutdown()
