"""3x3 matrix helpers and per-triangle surface matrices."""

from __future__ import annotations

import numpy as np

from .mesh import MeshModel


def inverse3x3(matrix) -> np.ndarray:
    """Return the inverse of a 3x3 matrix; raises ValueError if singular."""
    (m00, m01, m02), (m10, m11, m12), (m20, m21, m22) = np.asarray(matrix, dtype=float)
    det = (
        m00 * m11 * m22 - m00 * m12 * m21 - m01 * m10 * m22
        + m01 * m12 * m20 + m02 * m10 * m21 - m02 * m11 * m20
    )
    if det == 0:
        raise ValueError("matrix is singular")
    factor = 1.0 / det
    return factor * np.array(
        [
            [m11 * m22 - m12 * m21, m02 * m21 - m01 * m22, m01 * m12 - m02 * m11],
            [m12 * m20 - m10 * m22, m00 * m22 - m02 * m20, m02 * m10 - m00 * m12],
            [m10 * m21 - m11 * m20, m01 * m20 - m00 * m21, m00 * m11 - m01 * m10],
        ]
    )


def matmul3x3(a, b) -> np.ndarray:
    """Return the product a*b of two 3x3 matrices."""
    return np.asarray(a, dtype=float) @ np.asarray(b, dtype=float)


def _edges(model: MeshModel, i_triangle: int):
    i0, i1, i2 = model.triangles[i_triangle].vertices
    v0 = model.vertices[i0]
    return model.vertices[i1] - v0, model.vertices[i2] - v0


def triangle_normal(model: MeshModel, i_triangle: int) -> np.ndarray:
    """Unnormalised normal (v2-v1) x (v3-v1) of a triangle."""
    u, v = _edges(model, i_triangle)
    return np.cross(u, v)


def surface_matrix(model: MeshModel, i_triangle: int) -> np.ndarray:
    """Surface matrix [v2-v1, v3-v1, v4] of a triangle, as columns.

    The phantom vertex v4 is the cross product of the two edges divided by
    the square root of its length.
    """
    u, v = _edges(model, i_triangle)
    cross = np.cross(u, v)
    with np.errstate(divide="ignore", invalid="ignore"):
        phantom = cross / np.sum(cross * cross) ** 0.25
    return np.column_stack((u, v, phantom))


def inverse_surface_matrices(model: MeshModel) -> np.ndarray:
    """Inverse surface matrix of every triangle, shaped (n_triangle, 3, 3)."""
    inverses = [
        inverse3x3(surface_matrix(model, i_triangle))
        for i_triangle in range(len(model.triangles))
    ]
    return np.array(inverses, dtype=float).reshape(-1, 3, 3)