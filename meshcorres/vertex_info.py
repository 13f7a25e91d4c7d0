"""Classification of mesh vertices into free and constrained ones.

Free vertices are unknowns of the correspondence linear system; constrained
vertices take the position of their target vertex. The unknown vector holds
the coordinates of all free vertices, three per vertex, followed by the
coordinates of one phantom vertex per triangle.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence, Tuple

from .constraint import VertexConstraint
from .mesh import MeshModel


class VertexKind(Enum):
    CONSTRAINED = "constrained"
    FREE = "free"


@dataclass(frozen=True)
class VertexInfo:
    """Kind of a vertex and its index.

    For a free vertex ``index`` numbers it among free vertices; for a
    constrained one it is the index of its entry in the constraint list.
    """

    kind: VertexKind
    index: int

    @property
    def is_free(self) -> bool:
        return self.kind is VertexKind.FREE


class VertexInfoList:
    """Kind and index of every vertex of a model."""

    def __init__(self, model: MeshModel, constraints: Sequence[VertexConstraint]) -> None:
        """``constraints`` must be sorted by source vertex index."""
        self._infos: List[VertexInfo] = []
        i_free = 0
        i_cons = 0
        for i_vertex in range(len(model.vertices)):
            if i_cons < len(constraints) and constraints[i_cons].source == i_vertex:
                self._infos.append(VertexInfo(VertexKind.CONSTRAINED, i_cons))
                i_cons += 1
            else:
                self._infos.append(VertexInfo(VertexKind.FREE, i_free))
                i_free += 1
        self.n_free = i_free
        self.n_constrained = i_cons

    def __len__(self) -> int:
        return len(self._infos)

    def __iter__(self):
        return iter(self._infos)

    def info(self, i_vertex: int) -> VertexInfo:
        """Kind and index of one vertex."""
        if not 0 <= i_vertex < len(self._infos):
            raise IndexError("vertex index out of bounds")
        return self._infos[i_vertex]

    def triangle_info(
        self, model: MeshModel, i_triangle: int
    ) -> Tuple[VertexInfo, VertexInfo, VertexInfo]:
        """Info of the three vertices of a triangle."""
        a, b, c = (self.info(i) for i in model.triangles[i_triangle].vertices)
        return a, b, c

    def free_var_index(self, i_vertex: int, dimension: int) -> int:
        """Position of a free vertex's coordinate in the unknown vector."""
        info = self.info(i_vertex)
        if not info.is_free:
            raise ValueError(f"vertex {i_vertex} is not a free vertex")
        return info.index * 3 + dimension

    def phantom_var_index(self, i_triangle: int, dimension: int) -> int:
        """Position of a triangle's phantom vertex coordinate in the unknown vector."""
        return (self.n_free + i_triangle) * 3 + dimension

    def triangle_var_indices(self, model: MeshModel, i_triangle: int) -> List[List[int]]:
        """Unknown-vector positions for a triangle, as ``table[dimension][local]``.

        Columns 0-2 are the triangle's vertices (-1 for a constrained vertex),
        column 3 is its phantom vertex.
        """
        vertices = model.triangles[i_triangle].vertices
        table = []
        for dim in range(3):
            row = [
                self.free_var_index(i_vertex, dim) if self.info(i_vertex).is_free else -1
                for i_vertex in vertices
            ]
            row.append(self.phantom_var_index(i_triangle, dim))
            table.append(row)
        return table