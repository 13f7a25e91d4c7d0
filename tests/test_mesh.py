import numpy as np
import pytest

from meshcorres.mesh import MeshModel, Triangle, read_obj, save_obj


def _sample_model():
    return MeshModel(
        vertices=[[1.0, 2.0, 3.0], [0.5, -1.25, 4.0], [2.0, 0.0, -3.5], [7.0, 7.0, 7.0]],
        normals=[[0.0, 0.0, 1.0], [0.0, 1.0, 0.0]],
        triangles=[Triangle((0, 1, 2), (0, 0, 0)), Triangle((1, 3, 2), (1, 1, 1))],
    )


def test_save_writes_documented_line_format(tmp_path):
    path = tmp_path / "m.obj"
    model = MeshModel(
        vertices=[[1.0, 2.0, 3.0], [0.0, 0.0, 0.0], [1.0, 0.0, 0.0]],
        normals=[[0.0, 0.0, 1.0]],
        triangles=[Triangle((0, 1, 2), (0, 0, 0))],
    )
    save_obj(path, model)
    lines = path.read_text().splitlines()
    assert lines[0] == "v    1.000000000    2.000000000    3.000000000"
    assert lines[3].startswith("vn ")
    assert lines[-1] == "f 1//1 2//1 3//1"
    assert len(lines) == 5


def test_round_trip(tmp_path):
    path = tmp_path / "m.obj"
    model = _sample_model()
    save_obj(path, model)
    loaded = read_obj(path)
    assert np.allclose(loaded.vertices, model.vertices)
    assert np.allclose(loaded.normals, model.normals)
    assert loaded.triangles == model.triangles


def test_read_texture_indices_and_ignored_lines(tmp_path):
    path = tmp_path / "t.obj"
    path.write_text(
        "# a comment\n"
        "o thing\n"
        "v 0 0 0\n"
        "v 1 0 0\n"
        "\n"
        "v 0 1 0\n"
        "vt 0.5 0.5\n"
        "vn 0 0 1\n"
        "vn 0 0 -1\n"
        "s off\n"
        "f 1/4/2 2/5/2 3/6/1\n"
    )
    model = read_obj(path)
    assert model.vertices.shape == (3, 3)
    assert model.normals.shape == (2, 3)
    assert model.triangles == [Triangle((0, 1, 2), (1, 1, 0))]


def test_read_reports_line_of_syntax_error(tmp_path):
    path = tmp_path / "bad.obj"
    path.write_text("v 0 0 0\nv 1 2\n")
    with pytest.raises(ValueError, match="line 2"):
        read_obj(path)


def test_face_without_normals_is_rejected(tmp_path):
    path = tmp_path / "bad.obj"
    path.write_text("v 0 0 0\nv 1 0 0\nv 0 1 0\nf 1 2 3\n")
    with pytest.raises(ValueError, match="line 4"):
        read_obj(path)


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_obj(tmp_path / "absent.obj")


def test_vertex_normal_indices_last_triangle_wins_and_isolated_is_zero():
    model = MeshModel(
        vertices=np.zeros((5, 3)),
        normals=np.zeros((3, 3)),
        triangles=[Triangle((0, 1, 2), (1, 1, 1)), Triangle((2, 3, 0), (2, 2, 2))],
    )
    assert model.vertex_normal_indices() == [2, 1, 2, 2, 0]


def test_copy_is_independent():
    model = _sample_model()
    duplicate = model.copy()
    duplicate.vertices[0, 0] = 99.0
    duplicate.triangles.append(Triangle((0, 0, 0), (0, 0, 0)))
    assert model.vertices[0, 0] == 1.0
    assert len(model.triangles) == 2


def test_empty_model_round_trip(tmp_path):
    path = tmp_path / "empty.obj"
    save_obj(path, MeshModel())
    loaded = read_obj(path)
    assert loaded.vertices.shape == (0, 3)
    assert loaded.triangles == []