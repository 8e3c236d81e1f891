#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Пример: загрузка модели через ModelImporter.

    python examples/load_model.py path/to/model.obj [ещё файлы ...]

Без аргументов во временном каталоге создаётся куб (.obj + .mtl +
PNG‑заглушка) и загружается он.  Сборка материалов идёт на отдельном
потоке «рендера» (Dispatcher).
"""

from __future__ import annotations

import sys
import tempfile
from pathlib import Path

from PIL import Image, ImageDraw

from crystal3d import Config, Dispatcher, ModelImporter
from crystal3d.utils import logger

CUBE_OBJ = """\
mtllib cube.mtl
v -0.5 -0.5  0.5
v  0.5 -0.5  0.5
v  0.5  0.5  0.5
v -0.5  0.5  0.5
v -0.5 -0.5 -0.5
v  0.5 -0.5 -0.5
v  0.5  0.5 -0.5
v -0.5  0.5 -0.5
vt 0 0
vt 1 0
vt 1 1
vt 0 1
g cube
usemtl crate
s off
f 1/1 2/2 3/3 4/4
f 6/1 5/2 8/3 7/4
f 5/1 1/2 4/3 8/4
f 2/1 6/2 7/3 3/4
f 4/1 3/2 7/3 8/4
f 5/1 6/2 2/3 1/4
"""

CUBE_MTL = """\
newmtl crate
Kd 0.8 0.6 0.3
Ks 0.2 0.2 0.2
Ns 32
map_Kd crate.png
"""


# --------------------------------------------------------------
# 1️⃣  Куб‑заглушка на диске
# --------------------------------------------------------------
def write_sample_cube(directory: Path) -> Path:
    img = Image.new("RGBA", (64, 64), (120, 80, 30, 255))
    draw = ImageDraw.Draw(img)
    draw.rectangle((4, 4, 59, 59), outline=(60, 40, 10, 255), width=4)
    img.save(directory / "crate.png", "PNG")

    (directory / "cube.mtl").write_text(CUBE_MTL, encoding="utf-8")
    path = directory / "cube.obj"
    path.write_text(CUBE_OBJ, encoding="utf-8")
    logger.info(f"[Example] Sample cube written to {path}")
    return path


# --------------------------------------------------------------
# 2️⃣  Загрузка и вывод сводки
# --------------------------------------------------------------
def main(argv: list[str]) -> int:
    importer = ModelImporter(config=Config())

    with tempfile.TemporaryDirectory() as tmp, Dispatcher() as dispatcher:
        paths = argv or [str(write_sample_cube(Path(tmp)))]
        models = importer.load_all(paths, dispatcher=dispatcher)

        for model in models:
            logger.info(f"[Example] {model.name}: {len(model)} meshes, "
                        f"{model.triangle_count} triangles")
            for mesh in model:
                textures = ", ".join(sorted(mesh.material.textures)) or "none"
                logger.info(f"[Example]   {mesh.name}: {mesh.geometry.vertex_count} vertices, "
                            f"material={mesh.material.name}, textures={textures}")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
