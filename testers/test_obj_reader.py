# -*- coding: utf-8 -*-
import gzip
import io
import logging
import threading

import numpy as np
import pytest

from conftest import text_stream
from crystal3d.geometry.mesh_builder import MeshBuilder
from crystal3d.importers import FileFormatError, ObjReader
from crystal3d.importers.mtl_reader import MaterialDefinition

SQUARE = """
    v 0 0 0
    v 1 0 0
    v 1 1 0
    v 0 1 0
"""


def parse(text, **kwargs):
    reader = ObjReader(**kwargs)
    groups = reader.parse(text_stream(text))
    return reader, groups


# ----------------------------------------------------------------------
# Вершины, texcoords, нормали
# ----------------------------------------------------------------------
def test_triangle_with_texcoords_end_to_end():
    reader, groups = parse("""
        v 0 0 0
        v 1 0 0
        v 1 1 0
        vt 0 0
        vt 1 0
        vt 1 1
        g square
        f 1/1 2/2 3/3
    """)
    assert [g.name for g in groups] == ["square"]
    mesh = groups[0].current_mesh
    assert mesh.emits_texcoords and not mesh.emits_normals

    geometry = mesh.builder.to_mesh()
    assert geometry.vertex_count == 3
    np.testing.assert_allclose(geometry.texcoords, [[0, 1], [1, 1], [1, 0]])
    assert geometry.normals is None
    assert geometry.triangles.tolist() == [[0, 1, 2]]


def test_texcoord_without_v_defaults_to_zero():
    reader, _ = parse("vt 0.25\nvt 0.5 0.75 0.1\n")
    assert reader.texcoords == [(0.25, 1.0), (0.5, 0.25)]


def test_switch_yz_for_positions_and_normals():
    reader, _ = parse("v 1 2 3\nvn 0 1 0\n", switch_yz=True)
    assert reader.positions == [(1.0, -3.0, 2.0)]
    assert reader.normals == [(0.0, -0.0, 1.0)]


def test_vertices_without_group_go_to_default_group():
    _, groups = parse(SQUARE + "f 1 2 3\n")
    assert [g.name for g in groups] == ["default"]


def test_continued_face_line():
    _, groups = parse(SQUARE + "f 1 2 \\\n 3 4\n")
    assert groups[0].builder.triangle_indices == [0, 1, 2, 0, 2, 3]


# ----------------------------------------------------------------------
# Группы сглаживания
# ----------------------------------------------------------------------
def test_vertices_shared_within_smoothing_group():
    _, groups = parse(SQUARE + "f 1 2 3\nf 1 3 4\n")
    builder = groups[0].builder
    assert len(builder.positions) == 4
    assert builder.triangle_indices == [0, 1, 2, 0, 2, 3]


@pytest.mark.parametrize("off", ["s off", "s 0", "S OFF"])
def test_smoothing_off_never_shares(off):
    _, groups = parse(SQUARE + off + "\nf 1 2 3\nf 1 3 4\n")
    builder = groups[0].builder
    assert len(builder.positions) == 6
    assert builder.triangle_indices == [0, 1, 2, 3, 4, 5]


def test_smoothing_default_off():
    _, groups = parse(SQUARE + "f 1 2 3\nf 1 3 4\n", smoothing_default=False)
    assert len(groups[0].builder.positions) == 6


def test_different_smoothing_groups_do_not_share():
    _, groups = parse(SQUARE + "s 1\nf 1 2 3\ns 2\nf 1 3 4\ns 1\nf 1 2 3\n")
    builder = groups[0].builder
    assert len(builder.positions) == 6
    # третья грань снова в группе 1 – вершины первой грани
    assert builder.triangle_indices[-3:] == [0, 1, 2]


def test_different_attributes_are_different_vertices():
    _, groups = parse(SQUARE + """
        vt 0 0
        vt 1 1
        f 1/1 2/1 3/1
        f 1/2 2/1 3/1
    """)
    builder = groups[0].builder
    assert len(builder.positions) == 4
    assert builder.triangle_indices == [0, 1, 2, 3, 1, 2]


def test_invalid_smoothing_group():
    with pytest.raises(FileFormatError) as err:
        parse(SQUARE + "s smooth\n")
    assert err.value.line_no == 5

    reader, _ = parse(SQUARE + "s smooth\n", ignore_errors=True)
    assert reader._current_smoothing_group == 1


# ----------------------------------------------------------------------
# Индексы
# ----------------------------------------------------------------------
def test_negative_index_counts_from_end():
    _, groups = parse("v 0 0 0\nv 1 0 0\nv 1 1 0\nf 1 2 -1\n")
    assert groups[0].builder.positions[2] == (1.0, 1.0, 0.0)


def test_negative_indices_resolve_against_current_pool():
    _, groups = parse("""
        v 0 0 0
        v 1 0 0
        v 1 1 0
        f -3 -2 -1
        v 5 5 5
        f -4 -3 -1
    """)
    positions = groups[0].builder.positions
    assert positions[:3] == [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (1.0, 1.0, 0.0)]
    assert positions[-1] == (5.0, 5.0, 5.0)
    # -4 и -3 во второй грани – те же вершины 1 и 2, что и в первой
    assert len(positions) == 4


def test_invalid_index_is_fatal_with_line_number():
    text = SQUARE + "f 1 2 3\nf 1 2 9\n"
    with pytest.raises(FileFormatError) as err:
        parse(text)
    assert err.value.line_no == 6
    assert "(9)" in str(err.value)
    assert "line 6" in str(err.value)


@pytest.mark.parametrize("face", ["f 0 1 2", "f 1 2 5", "f 1 2 -5"])
def test_out_of_range_indices(face):
    with pytest.raises(FileFormatError):
        parse(SQUARE + face + "\n")


def test_ignore_errors_drops_only_the_bad_face():
    _, groups = parse(SQUARE + "f 1 2 3\nf 1 2 9\nf 3 2 1\n", ignore_errors=True)
    builder = groups[0].builder
    assert builder.triangle_indices == [0, 1, 2, 2, 1, 0]
    assert len(builder.positions) == 3


def test_dropped_face_leaves_no_vertices():
    _, groups = parse(SQUARE + "s off\nf 1 2 3\nf 4 1 99\n", ignore_errors=True)
    assert len(groups[0].builder.positions) == 3


def test_number_format_error_is_fatal_even_with_ignore_errors():
    with pytest.raises(FileFormatError):
        parse("v 1 x 3\n", ignore_errors=True)
    with pytest.raises(FileFormatError):
        parse(SQUARE + "f 1 a 3\n", ignore_errors=True)


@pytest.mark.parametrize("line", ["v 1_0 0 0", "v ١ 0 0", "vt 0.5 nan"])
def test_malformed_numbers_are_rejected(line):
    with pytest.raises(FileFormatError) as err:
        parse(line + "\n", ignore_errors=True)
    assert err.value.line_no == 1


def test_face_with_two_vertices():
    with pytest.raises(FileFormatError):
        parse(SQUARE + "f 1 2\n")
    _, groups = parse(SQUARE + "f 1 2\n", ignore_errors=True)
    assert groups[0].current_mesh.is_empty


# ----------------------------------------------------------------------
# Состав атрибутов под‑сетки
# ----------------------------------------------------------------------
def test_first_face_without_normals_disables_normals():
    _, groups = parse(SQUARE + """
        vn 0 0 1
        f 1 2 3
        f 1//1 3//1 4//1
    """)
    mesh = groups[0].current_mesh
    assert not mesh.emits_normals
    assert mesh.builder.normals == []
    assert mesh.builder.to_mesh().normals is None
    assert mesh.builder.to_mesh().triangle_count == 2


def test_missing_normal_after_latch():
    text = SQUARE + "vn 0 0 1\nf 1//1 2//1 3//1\nf 1 3 4\n"
    with pytest.raises(FileFormatError) as err:
        parse(text)
    assert "normal" in str(err.value)

    _, groups = parse(text, ignore_errors=True)
    mesh = groups[0].current_mesh
    assert mesh.emits_normals
    assert mesh.builder.to_mesh().triangle_count == 1
    np.testing.assert_allclose(mesh.builder.to_mesh().normals, [[0, 0, 1]] * 3)


def test_invalid_first_face_does_not_latch():
    _, groups = parse(SQUARE + "vn 0 0 1\nf 1//7 2//7 3//7\nf 1 2 3\n",
                      ignore_errors=True)
    mesh = groups[0].current_mesh
    assert not mesh.emits_normals
    assert mesh.builder.to_mesh().triangle_count == 1


# ----------------------------------------------------------------------
# Многоугольники
# ----------------------------------------------------------------------
@pytest.fixture
def triangulation_calls(monkeypatch):
    calls = []
    original = MeshBuilder.add_polygon_by_triangulation

    def spy(self, indices):
        calls.append(list(indices))
        return original(self, indices)

    monkeypatch.setattr(MeshBuilder, "add_polygon_by_triangulation", spy)
    return calls


def test_quad_is_split_without_triangulation(triangulation_calls):
    _, groups = parse(SQUARE + "f 1 2 3 4\n")
    assert triangulation_calls == []
    assert groups[0].builder.triangle_indices == [0, 1, 2, 0, 2, 3]


def test_pentagon_is_triangulated(triangulation_calls):
    _, groups = parse("""
        v 0 0 0
        v 2 0 0
        v 2 2 0
        v 1 1 0
        v 0 2 0
        f 1 2 3 4 5
    """)
    assert triangulation_calls == [[0, 1, 2, 3, 4]]
    assert groups[0].builder.to_mesh().triangle_count == 3


def test_concave_polygon_is_triangulated(triangulation_calls):
    _, groups = parse("""
        v 0 0 0
        v 2 0 0
        v 2 1 0
        v 1 1 0
        v 1 2 0
        v 0 2 0
        f 1 2 3 4 5 6
    """)
    assert triangulation_calls == [[0, 1, 2, 3, 4, 5]]
    geometry = groups[0].builder.to_mesh()
    assert geometry.triangle_count == 4

    # все треугольники – против часовой стрелки, как и исходный контур
    p = geometry.positions
    total = 0.0
    for a, b, c in geometry.triangles:
        area = 0.5 * np.cross(p[b] - p[a], p[c] - p[a])[2]
        assert area > 0
        total += area
    assert total == pytest.approx(3.0)


# ----------------------------------------------------------------------
# Группы, материалы, под‑сетки
# ----------------------------------------------------------------------
def test_new_group_resets_vertex_sharing():
    _, groups = parse(SQUARE + "g A\nf 1 2 3\ng B\nf 1 2 3\n")
    assert [g.name for g in groups] == ["A", "B"]
    for group in groups:
        assert len(group.builder.positions) == 3
        assert group.builder.triangle_indices == [0, 1, 2]


def test_material_change_splits_mesh():
    _, groups = parse(SQUARE + "usemtl red\nf 1 2 3\nusemtl blue\nf 1 3 4\n")
    meshes = groups[0].meshes
    assert [m.material_name for m in meshes] == ["red", "blue"]
    # карта сглаживания начата заново – вершины 1 и 3 скопированы
    assert len(meshes[1].builder.positions) == 3


def test_material_change_without_geometry_does_not_split():
    _, groups = parse(SQUARE + "usemtl red\nusemtl blue\nf 1 2 3\n")
    assert [m.material_name for m in groups[0].meshes] == ["blue"]


def test_group_inherits_current_material():
    _, groups = parse(SQUARE + "usemtl red\nf 1 2 3\ng second\nf 1 3 4\n")
    assert groups[1].current_mesh.material_name == "red"


def test_usemap_starts_new_mesh():
    _, groups = parse(SQUARE + "usemtl red\nf 1 2 3\nusemap tex\nf 1 3 4\n")
    assert [m.material_name for m in groups[0].meshes] == ["red", "red"]


def test_unknown_and_unsupported_keywords_are_ignored(caplog):
    caplog.set_level(logging.DEBUG, logger="Crystal3D")
    _, groups = parse(SQUARE + """
        o object
        vp 0.5 0.5
        cstype bspline
        curv 0 1 1 2
        end
        frobnicate 1 2 3
        f 1 2 3
    """)
    assert groups[0].builder.to_mesh().triangle_count == 1
    assert any("frobnicate" in r.getMessage() for r in caplog.records)
    assert not any("cstype" in r.getMessage() for r in caplog.records)


def test_parse_resets_geometry_between_calls():
    reader = ObjReader()
    reader.parse(text_stream(SQUARE + "f 1 2 3\n"))
    groups = reader.parse(text_stream("v 0 0 0\nv 1 0 0\nv 0 1 0\nf 1 2 3\n"))
    assert len(reader.positions) == 3
    assert len(groups) == 1


# ----------------------------------------------------------------------
# Сборка модели
# ----------------------------------------------------------------------
MATERIALS = """
    newmtl red
    Kd 1 0 0
    d 0.5
"""


def test_build_model_resolves_materials():
    reader = ObjReader()
    model = reader.read_with_materials(
        text_stream(SQUARE + "usemtl red\nf 1 2 3\nusemtl missing\nf 1 3 4\n"),
        [text_stream(MATERIALS)],
    )
    assert len(model) == 2
    red, fallback = model[0], model[1]
    assert red.material.diffuse == (1.0, 0.0, 0.0)
    assert red.material.opacity == 0.5
    assert red.back_material is red.material
    assert fallback.material is reader.default_material
    assert fallback.material.diffuse == (0.0, 0.0, 1.0)
    assert model.triangle_count == 2


def test_same_definition_gives_same_material_object():
    reader = ObjReader()
    model = reader.read_with_materials(
        text_stream(SQUARE + "usemtl red\nf 1 2 3\ng other\nf 1 3 4\n"),
        [text_stream(MATERIALS)],
    )
    assert model[0].material is model[1].material
    assert [m.name for m in model] == ["default", "other"]


def test_empty_meshes_are_skipped():
    reader = ObjReader()
    model = reader.read_stream(text_stream(SQUARE + "g empty\ng full\nf 1 2 3\n"))
    assert [m.name for m in model] == ["full"]


def test_build_model_goes_through_dispatcher(recording_dispatcher):
    reader = ObjReader(dispatcher=recording_dispatcher)
    model = reader.read_stream(text_stream(SQUARE + "f 1 2 3\n"))
    assert recording_dispatcher.calls == ["_build_model"]
    assert len(model) == 1


def test_fatal_error_builds_nothing(recording_dispatcher):
    reader = ObjReader(dispatcher=recording_dispatcher)
    with pytest.raises(FileFormatError):
        reader.read_stream(text_stream(SQUARE + "f 1 2 9\n"))
    assert recording_dispatcher.calls == []


def test_materials_created_on_render_thread(render_dispatcher, monkeypatch):
    threads = []
    original = MaterialDefinition.create_material

    def spy(self, *args, **kwargs):
        threads.append(threading.get_ident())
        return original(self, *args, **kwargs)

    monkeypatch.setattr(MaterialDefinition, "create_material", spy)

    reader = ObjReader(dispatcher=render_dispatcher)
    reader.read_with_materials(text_stream(SQUARE + "usemtl red\nf 1 2 3\n"),
                               [text_stream(MATERIALS)])
    assert threads and threads[0] == render_dispatcher.invoke(threading.get_ident)
    assert threads[0] != threading.get_ident()


# ----------------------------------------------------------------------
# Файлы
# ----------------------------------------------------------------------
def test_read_file_with_mtllib_and_texture(tmp_path, make_texture):
    make_texture("wood.png", size=(4, 2))
    (tmp_path / "wood.mtl").write_text(
        "newmtl wood\nKd 0.5 0.4 0.3\nmap_Kd wood.png\n", encoding="utf-8")
    obj = tmp_path / "box.obj"
    obj.write_text("mtllib wood.mtl\n" + text_stream(SQUARE).read() +
                   "usemtl wood\nf 1 2 3 4\n", encoding="utf-8")

    model = ObjReader().read(str(obj))
    material = model[0].material
    assert material.name == "wood"
    texture = material.textures["diffuse"]
    assert (texture.width, texture.height) == (4, 2)
    assert texture.pixels.shape == (2, 4, 4)


def test_missing_mtllib_is_a_warning(tmp_path, caplog):
    obj = tmp_path / "box.obj"
    obj.write_text("mtllib nowhere.mtl\n" + text_stream(SQUARE).read() + "f 1 2 3\n",
                   encoding="utf-8")
    with caplog.at_level(logging.WARNING, logger="Crystal3D"):
        model = ObjReader().read(str(obj))
    assert len(model) == 1
    assert any("nowhere.mtl" in r.getMessage() for r in caplog.records)


def test_read_gzip_compressed(tmp_path):
    path = tmp_path / "square.objz"
    with gzip.open(path, "wt", encoding="utf-8") as f:
        f.write(text_stream(SQUARE).read() + "f 1 2 3 4\n")

    model = ObjReader().read_z(str(path))
    assert model.triangle_count == 2


def test_read_binary_stream_with_bom():
    data = ("\ufeff" + text_stream(SQUARE).read() + "f 1 2 3\n").encode("utf-8")
    model = ObjReader().read_stream(io.BytesIO(data))
    assert model.triangle_count == 1
