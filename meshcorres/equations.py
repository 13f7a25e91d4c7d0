"""Assembly of the correspondence linear system.

The system gathers three kinds of equations:

* smoothness: the deformations of adjacent triangles should agree;
* identity: each deformation should stay close to the identity;
* closest point: free vertices are drawn to their closest target vertices.

Phase 1 uses the first two kinds. Phase 2 adds the closest-point equations.
"""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from .adjacency import AdjacencyList
from .closest_term import append_closest
from .constraint import VertexConstraint
from .elementary import append_elementary_term, elementary_terms
from .geometry import inverse_surface_matrices
from .linalg import TripletMatrix
from .mesh import MeshModel
from .vertex_info import VertexInfoList

Terms = Tuple[np.ndarray, np.ndarray]

_IDENTITY = np.eye(3).reshape(9)


def append_smoothness(
    source_model: MeshModel,
    adjacency: AdjacencyList,
    vtilist: VertexInfoList,
    terms: Terms,
    matrix: TripletMatrix,
    rhs: np.ndarray,
    weight: float,
    row: int,
) -> int:
    """Write T[i] - T[j] = 0 for every triangle i and each neighbour j.

    ``terms`` holds the elementary matrices and vectors of all triangles.
    Each pair takes nine rows starting at ``row``. Returns the row after
    the last written.
    """
    m_list, c_list = terms
    for i_triangle in range(len(source_model.triangles)):
        for i_adj in adjacency.adjacent(i_triangle):
            append_elementary_term(
                source_model, vtilist, i_triangle,
                m_list[i_triangle], c_list[i_triangle],
                matrix, rhs, weight, row,
            )
            append_elementary_term(
                source_model, vtilist, i_adj,
                m_list[i_adj], c_list[i_adj],
                matrix, rhs, -weight, row,
            )
            row += 9
    return row


def append_identity(
    source_model: MeshModel,
    vtilist: VertexInfoList,
    terms: Terms,
    matrix: TripletMatrix,
    rhs: np.ndarray,
    weight: float,
    row: int,
) -> int:
    """Write T[i] = I for every triangle i, nine rows each from ``row`` on.

    Returns the row after the last written.
    """
    m_list, c_list = terms
    for i_triangle in range(len(source_model.triangles)):
        c_identity = _IDENTITY + np.asarray(c_list[i_triangle], dtype=float)
        row = append_elementary_term(
            source_model, vtilist, i_triangle,
            m_list[i_triangle], c_identity,
            matrix, rhs, weight, row,
        )
    return row


def _new_system(nrow: int, ncol: int) -> Tuple[TripletMatrix, np.ndarray]:
    return TripletMatrix(nrow, ncol), np.zeros(nrow)


def _fill_phase1(
    source_model: MeshModel,
    target_model: MeshModel,
    adjacency: AdjacencyList,
    constraints: Sequence[VertexConstraint],
    vtilist: VertexInfoList,
    matrix: TripletMatrix,
    rhs: np.ndarray,
    weight_smooth: float,
    weight_identity: float,
) -> int:
    inv_surfaces = inverse_surface_matrices(source_model)
    terms = elementary_terms(
        source_model, target_model, constraints, vtilist, inv_surfaces
    )
    row = append_smoothness(
        source_model, adjacency, vtilist, terms, matrix, rhs, weight_smooth, 0
    )
    return append_identity(
        source_model, vtilist, terms, matrix, rhs, weight_identity, row
    )


def build_phase1(
    source_model: MeshModel,
    target_model: MeshModel,
    adjacency: AdjacencyList,
    constraints: Sequence[VertexConstraint],
    vtilist: VertexInfoList,
    weight_smooth: float,
    weight_identity: float,
) -> Tuple[TripletMatrix, np.ndarray]:
    """The smoothness and identity system, as ``(matrix, rhs)``.

    It has ``9 * (n_adjacency + n_triangle)`` rows and
    ``3 * (n_free + n_triangle)`` columns.
    """
    n_triangle = len(source_model.triangles)
    nrow = 9 * (adjacency.n_adjacency + n_triangle)
    ncol = 3 * (vtilist.n_free + n_triangle)
    matrix, rhs = _new_system(nrow, ncol)
    _fill_phase1(
        source_model, target_model, adjacency, constraints, vtilist,
        matrix, rhs, weight_smooth, weight_identity,
    )
    return matrix, rhs


def build_phase2(
    source_model: MeshModel,
    target_model: MeshModel,
    adjacency: AdjacencyList,
    constraints: Sequence[VertexConstraint],
    vtilist: VertexInfoList,
    join: Sequence[int],
    weight_smooth: float,
    weight_identity: float,
    weight_closest: float,
) -> Tuple[TripletMatrix, np.ndarray]:
    """The phase 1 system followed by the closest-point equations.

    ``join[i]`` is the target vertex closest to source vertex ``i``. The
    system has ``3 * n_free`` more rows than in phase 1.
    """
    n_triangle = len(source_model.triangles)
    nrow = 9 * (adjacency.n_adjacency + n_triangle) + 3 * vtilist.n_free
    ncol = 3 * (vtilist.n_free + n_triangle)
    matrix, rhs = _new_system(nrow, ncol)
    row = _fill_phase1(
        source_model, target_model, adjacency, constraints, vtilist,
        matrix, rhs, weight_smooth, weight_identity,
    )
    append_closest(
        source_model, target_model, vtilist, join, matrix, rhs, weight_closest, row
    )
    return matrix, rhs