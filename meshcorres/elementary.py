"""Elementary terms: the per-triangle pieces of the correspondence system.

For a triangle with inverse surface matrix inv(V), the deformation
T = U inv(V) is linear in the deformed vertices u1, u2, u3 and the phantom
vertex u4. Row ``3*i + j`` of the 9x4 matrix ``m`` holds the coefficients of
(u1, u2, u3, u4) along dimension ``i`` that yield T[i][j]. Coefficients of
constrained vertices are folded into the 9-vector ``c`` as constants, so that
``m . u - c`` equals T flattened row by row.
"""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from .constraint import VertexConstraint, mapped_vertex_coord
from .linalg import TripletMatrix
from .mesh import MeshModel
from .vertex_info import VertexInfoList


def elementary_term(
    source_model: MeshModel,
    target_model: MeshModel,
    constraints: Sequence[VertexConstraint],
    vtilist: VertexInfoList,
    inv_surfaces: np.ndarray,
    i_triangle: int,
) -> Tuple[np.ndarray, np.ndarray]:
    """The 9x4 coefficient matrix and 9-vector constant of one triangle."""
    inv_v = np.asarray(inv_surfaces[i_triangle], dtype=float)
    coef_v1 = -inv_v.sum(axis=0)
    infos = vtilist.triangle_info(source_model, i_triangle)

    m = np.zeros((9, 4))
    c = np.zeros(9)
    for dim in range(3):
        for eqn in range(3):
            row = 3 * dim + eqn
            coefficients = (coef_v1[eqn], inv_v[0][eqn], inv_v[1][eqn])
            for local, (coef, info) in enumerate(zip(coefficients, infos)):
                if info.is_free:
                    m[row][local] = coef
                else:
                    c[row] -= coef * mapped_vertex_coord(
                        target_model, constraints, info.index, dim
                    )
            m[row][3] = inv_v[2][eqn]
    return m, c


def elementary_terms(
    source_model: MeshModel,
    target_model: MeshModel,
    constraints: Sequence[VertexConstraint],
    vtilist: VertexInfoList,
    inv_surfaces: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """Elementary terms of every triangle, shaped (n, 9, 4) and (n, 9)."""
    n_triangle = len(source_model.triangles)
    m_list = np.zeros((n_triangle, 9, 4))
    c_list = np.zeros((n_triangle, 9))
    for i_triangle in range(n_triangle):
        m_list[i_triangle], c_list[i_triangle] = elementary_term(
            source_model, target_model, constraints, vtilist, inv_surfaces, i_triangle
        )
    return m_list, c_list


def append_elementary_term(
    source_model: MeshModel,
    vtilist: VertexInfoList,
    i_triangle: int,
    m,
    c,
    matrix: TripletMatrix,
    rhs: np.ndarray,
    weight: float,
    row: int,
) -> int:
    """Add a weighted elementary term into rows ``row .. row+8`` of the system.

    Coefficients go into ``matrix``, constants are added onto ``rhs`` in
    place. Returns the row after the nine written.
    """
    table = vtilist.triangle_var_indices(source_model, i_triangle)
    j_row = 0
    for dim in range(3):
        for _ in range(3):
            for local in range(4):
                i_var = table[dim][local]
                if i_var != -1:
                    matrix.add(row + j_row, i_var, weight * m[j_row][local])
            rhs[row + j_row] += weight * c[j_row]
            j_row += 1
    return row + 9