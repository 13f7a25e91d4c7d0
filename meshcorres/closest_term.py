"""Closest-point term of the correspondence system.

Every free vertex is drawn towards its closest target vertex by three
equations, one per coordinate: weight * v = weight * c.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .linalg import TripletMatrix
from .mesh import MeshModel
from .vertex_info import VertexInfoList


def append_closest(
    source_model: MeshModel,
    target_model: MeshModel,
    vtilist: VertexInfoList,
    join: Sequence[int],
    matrix: TripletMatrix,
    rhs: np.ndarray,
    weight: float,
    row: int,
) -> int:
    """Write the closest-point equations of all free vertices from ``row`` on.

    ``join[i]`` is the target vertex closest to source vertex ``i``. The
    right-hand side is set in place. Returns the row after the last written.
    """
    for i_vertex in range(len(source_model.vertices)):
        if not vtilist.info(i_vertex).is_free:
            continue
        target = target_model.vertices[join[i_vertex]]
        for dim in range(3):
            matrix.add(row, vtilist.free_var_index(i_vertex, dim), weight)
            rhs[row] = weight * target[dim]
            row += 1
    return row