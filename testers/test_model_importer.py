# -*- coding: utf-8 -*-
import gzip
import json
import struct

import pytest

from crystal3d.importers import FileFormatError, ModelImporter
from crystal3d.utils import Config

SQUARE_OBJ = "v 0 0 0\nv 1 0 0\nv 1 1 0\nv 0 1 0\nf 1 2 3 4\n"
BROKEN_OBJ = "v 0 0 0\nv 1 0 0\nv 1 1 0\nf 1 2 3\nf 1 2 7\n"


@pytest.fixture
def model_dir(tmp_path):
    (tmp_path / "square.obj").write_text(SQUARE_OBJ)
    (tmp_path / "broken.obj").write_text(BROKEN_OBJ)
    with gzip.open(tmp_path / "square.objz", "wt") as f:
        f.write(SQUARE_OBJ)
    (tmp_path / "tri.off").write_text("OFF\n3 1 0\n0 0 0\n1 0 0\n0 1 0\n3 0 1 2\n")
    facet = struct.pack("<12fH", 0, 0, 1, 0, 0, 0, 1, 0, 0, 0, 1, 0, 0)
    (tmp_path / "tri.stl").write_bytes(b"\0" * 80 + struct.pack("<I", 1) + facet)
    return tmp_path


@pytest.mark.parametrize("name, triangles", [
    ("square.obj", 2),
    ("square.objz", 2),
    ("tri.off", 1),
    ("tri.stl", 1),
    ("SQUARE.OBJ", 2),
])
def test_load_by_extension(model_dir, name, triangles):
    if name == "SQUARE.OBJ":
        (model_dir / name).write_text(SQUARE_OBJ)
    model = ModelImporter().load(str(model_dir / name))
    assert model.name == name
    assert model.triangle_count == triangles


def test_unsupported_extension(model_dir):
    path = model_dir / "scene.3ds"
    path.write_bytes(b"")
    with pytest.raises(FileFormatError, match="not supported"):
        ModelImporter().load(str(path))


def test_load_none():
    assert ModelImporter().load(None) is None


def test_errors_propagate(model_dir):
    with pytest.raises(FileFormatError):
        ModelImporter().load(str(model_dir / "broken.obj"))


def test_load_with_dispatcher(model_dir, recording_dispatcher):
    ModelImporter().load(str(model_dir / "square.obj"), recording_dispatcher)
    assert recording_dispatcher.calls == ["_build_model"]


def test_load_all_keeps_order(model_dir, render_dispatcher):
    names = ["tri.stl", "square.obj", "tri.off", "square.objz"]
    models = ModelImporter().load_all([str(model_dir / n) for n in names],
                                      dispatcher=render_dispatcher, max_workers=3)
    assert [m.name for m in models] == names


def test_load_all_raises_first_error(model_dir):
    paths = [str(model_dir / "square.obj"), str(model_dir / "broken.obj")]
    with pytest.raises(FileFormatError):
        ModelImporter().load_all(paths)


# ----------------------------------------------------------------------
# Настройки
# ----------------------------------------------------------------------
def test_config_defaults(tmp_path):
    config = Config(str(tmp_path / "absent.json"))
    assert config.obj_options() == {
        "ignore_errors": False,
        "switch_yz": False,
        "skip_transparency_values": True,
        "smoothing_default": True,
    }
    assert config["default_material"]["diffuse"] == [0.0, 0.0, 1.0]


def test_config_applies_obj_options(model_dir):
    path = model_dir / "crystal3d.json"
    path.write_text(json.dumps({
        "obj": {"ignore_errors": True, "unknown_option": 1},
        "default_material": {"diffuse": [1, 0, 0], "opacity": 0.5},
    }))
    importer = ModelImporter(config=Config(str(path)))
    model = importer.load(str(model_dir / "broken.obj"))
    assert model.triangle_count == 1
    assert model[0].material.diffuse_rgba == (1.0, 0.0, 0.0, 0.5)


def test_config_save_and_reload(tmp_path):
    path = tmp_path / "settings.json"
    config = Config(str(path))
    config["obj"] = dict(config["obj"], switch_yz=True)
    config.save()
    assert Config(str(path)).obj_options()["switch_yz"] is True


def test_broken_config_falls_back_to_defaults(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{ not json")
    config = Config(str(path))
    assert config.obj_options()["ignore_errors"] is False
