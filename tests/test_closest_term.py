import numpy as np

from meshcorres.closest_term import append_closest
from meshcorres.constraint import VertexConstraint
from meshcorres.linalg import TripletMatrix
from meshcorres.mesh import MeshModel, Triangle
from meshcorres.vertex_info import VertexInfoList


def _models():
    source = MeshModel(
        np.zeros((3, 3)),
        np.array([[0.0, 0.0, 1.0]]),
        [Triangle((0, 1, 2), (0, 0, 0))],
    )
    target = MeshModel(
        np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0], [7.0, 8.0, 9.0]]),
        np.array([[0.0, 0.0, 1.0]]),
        [Triangle((0, 1, 2), (0, 0, 0))],
    )
    return source, target


def test_returns_row_after_written_equations():
    source, target = _models()
    vtilist = VertexInfoList(source, [VertexConstraint(1, 0)])
    matrix = TripletMatrix(11, 6)
    rhs = np.zeros(11)
    assert append_closest(source, target, vtilist, [2, 0, 1], matrix, rhs, 2.0, 5) == 11
    assert matrix.nnz == 6


def test_writes_weighted_identity_rows():
    source, target = _models()
    vtilist = VertexInfoList(source, [VertexConstraint(1, 0)])
    matrix = TripletMatrix(6, 6)
    rhs = np.zeros(6)
    weight = 2.0
    append_closest(source, target, vtilist, [2, 0, 1], matrix, rhs, weight, 0)

    dense = matrix.to_sparse().toarray()
    assert np.array_equal(dense, weight * np.eye(6))
    expected = weight * np.concatenate((target.vertices[2], target.vertices[1]))
    assert np.allclose(rhs, expected)


def test_rhs_entries_are_overwritten():
    source, target = _models()
    vtilist = VertexInfoList(source, [])
    matrix = TripletMatrix(9, 9)
    rhs = np.full(9, 100.0)
    append_closest(source, target, vtilist, [0, 1, 2], matrix, rhs, 1.0, 0)
    assert np.allclose(rhs, target.vertices.reshape(-1))


def test_all_constrained_writes_nothing():
    source, target = _models()
    constraints = [VertexConstraint(i, i) for i in range(3)]
    vtilist = VertexInfoList(source, constraints)
    matrix = TripletMatrix(3, 3)
    rhs = np.zeros(3)
    assert append_closest(source, target, vtilist, [0, 1, 2], matrix, rhs, 1.0, 3) == 3
    assert matrix.nnz == 0
    assert np.all(rhs == 0)