import pytest

from meshcorres.constraint import (
    VertexConstraint,
    load_constraints,
    mapped_vertex,
    mapped_vertex_coord,
    save_constraints,
)
from meshcorres.mesh import MeshModel


@pytest.fixture
def target():
    return MeshModel(
        vertices=[(0.0, 0.0, 0.0), (1.0, 2.0, 3.0), (4.0, 5.0, 6.0)],
        normals=[(0.0, 0.0, 1.0)],
        triangles=[],
    )


def test_round_trip(tmp_path):
    constraints = [VertexConstraint(1, 2), VertexConstraint(4, 0), VertexConstraint(7, 1)]
    path = tmp_path / "markers.cons"
    save_constraints(path, constraints)
    assert load_constraints(path) == constraints


def test_saved_format(tmp_path):
    path = tmp_path / "markers.cons"
    save_constraints(path, [VertexConstraint(3, 9)])
    assert path.read_text() == "1\n3, 9\n"


def test_load_sorts_by_source(tmp_path):
    path = tmp_path / "markers.cons"
    path.write_text("3\n9, 1\n2, 5\n6, 0\n")
    loaded = load_constraints(path)
    assert [c.source for c in loaded] == [2, 6, 9]
    assert [c.target for c in loaded] == [5, 0, 1]


def test_load_without_space_after_comma(tmp_path):
    path = tmp_path / "markers.cons"
    path.write_text("2\n1,2\n0,3\n")
    assert load_constraints(path) == [VertexConstraint(0, 3), VertexConstraint(1, 2)]


def test_load_empty_list(tmp_path):
    path = tmp_path / "markers.cons"
    path.write_text("0\n")
    assert load_constraints(path) == []


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_constraints(tmp_path / "absent.cons")


def test_load_truncated_file(tmp_path):
    path = tmp_path / "markers.cons"
    path.write_text("3\n1, 2\n")
    with pytest.raises(ValueError):
        load_constraints(path)


def test_load_without_count(tmp_path):
    path = tmp_path / "markers.cons"
    path.write_text("")
    with pytest.raises(ValueError):
        load_constraints(path)


def test_mapped_vertex(target):
    constraints = [VertexConstraint(0, 2), VertexConstraint(5, 1)]
    assert mapped_vertex(target, constraints, 0).tolist() == [4.0, 5.0, 6.0]
    assert mapped_vertex(target, constraints, 1).tolist() == [1.0, 2.0, 3.0]


def test_mapped_vertex_coord(target):
    constraints = [VertexConstraint(0, 1)]
    coords = [mapped_vertex_coord(target, constraints, 0, d) for d in range(3)]
    assert coords == [1.0, 2.0, 3.0]


def test_mapped_vertex_out_of_bounds(target):
    with pytest.raises(IndexError):
        mapped_vertex(target, [VertexConstraint(0, 1)], 1)


def test_mapped_vertex_coord_bad_dimension(target):
    with pytest.raises(IndexError):
        mapped_vertex_coord(target, [VertexConstraint(0, 1)], 0, 3)