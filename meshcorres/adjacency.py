"""Adjacency between the triangles of a mesh.

Two triangles are adjacent when they share an edge. An adjacency file holds
the number of triangles on its first line, then one line per triangle of the
form ``i [a, b, c]`` naming up to three adjacent triangles (``-1`` marks an
empty slot), and finally the total number of adjacencies.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import Dict, List, TextIO, Tuple, Union

from .mesh import MeshModel

PathLike = Union[str, "os.PathLike[str]"]

Entry = Tuple[int, int, int]

_INT = r"-?\d+"
_COUNT = re.compile(rf"\s*({_INT})")
_LINE = re.compile(
    rf"\s*{_INT}\s*\[\s*({_INT})\s*,\s*({_INT})\s*,\s*({_INT})\s*\]"
)


@dataclass
class AdjacencyList:
    """For every triangle, up to three adjacent triangles padded with -1.

    ``n_adjacency`` is the total number of (triangle, neighbour) pairs.
    """

    entries: List[Entry] = field(default_factory=list)
    n_adjacency: int = 0

    def __len__(self) -> int:
        return len(self.entries)

    def adjacent(self, i_triangle: int) -> Tuple[int, ...]:
        """Indices of the triangles adjacent to ``i_triangle``."""
        if not 0 <= i_triangle < len(self.entries):
            raise IndexError("triangle index out of bounds")
        entry = list(self.entries[i_triangle])
        while entry and entry[-1] == -1:
            entry.pop()
        return tuple(entry)

    def dump(self, stream: TextIO) -> None:
        """Write the triangle count and one line per triangle to ``stream``."""
        stream.write(f"{len(self.entries)}\n")
        for i, (a, b, c) in enumerate(self.entries):
            stream.write(f"{i} [{a}, {b}, {c}]\n")


def load_adjacencies(path: PathLike) -> AdjacencyList:
    """Read an adjacency file.

    Raises ``OSError`` if the file cannot be opened and ``ValueError`` if it
    is malformed.
    """
    with open(path, encoding="utf-8") as stream:
        text = stream.read()

    header = _COUNT.match(text)
    if header is None:
        raise ValueError(f"{path}: missing triangle count")
    count = int(header.group(1))
    if count < 0:
        raise ValueError(f"{path}: negative triangle count")

    entries: List[Entry] = []
    position = header.end()
    for _ in range(count):
        match = _LINE.match(text, position)
        if match is None:
            raise ValueError(f"{path}: expected {count} adjacency entries")
        a, b, c = (int(match.group(k)) for k in (1, 2, 3))
        entries.append((a, b, c))
        position = match.end()

    trailer = _COUNT.match(text, position)
    if trailer is None:
        raise ValueError(f"{path}: missing total adjacency count")
    return AdjacencyList(entries, int(trailer.group(1)))


def _edge_key(i_vertex0: int, i_vertex1: int, n_vertex: int) -> Tuple[int, int]:
    if i_vertex0 == i_vertex1:
        raise ValueError(f"degenerate edge <{i_vertex0}, {i_vertex1}>")
    for i_vertex in (i_vertex0, i_vertex1):
        if not 0 <= i_vertex < n_vertex:
            raise IndexError(f"vertex index {i_vertex} out of bounds")
    return (i_vertex0, i_vertex1) if i_vertex0 < i_vertex1 else (i_vertex1, i_vertex0)


_EDGES = ((0, 1), (1, 2), (0, 2))


def resolve_adjacencies(model: MeshModel) -> AdjacencyList:
    """Find the adjacent triangles of every triangle through shared edges.

    Each edge remembers two triangles; should a third triangle hold the same
    edge it replaces the second. Raises ``ValueError`` for a triangle with a
    repeated vertex and ``IndexError`` for a vertex index out of range.
    """
    n_vertex = len(model.vertices)
    edges: Dict[Tuple[int, int], List[int]] = {}
    for i_triangle, triangle in enumerate(model.triangles):
        for a, b in _EDGES:
            key = _edge_key(triangle.vertices[a], triangle.vertices[b], n_vertex)
            slots = edges.get(key)
            if slots is None:
                edges[key] = [i_triangle, -1]
            elif slots[0] == -1:
                slots[0] = i_triangle
            else:
                slots[1] = i_triangle

    entries: List[Entry] = []
    n_adjacency = 0
    for i_triangle, triangle in enumerate(model.triangles):
        found: List[int] = []
        for a, b in _EDGES:
            first, second = edges[
                _edge_key(triangle.vertices[a], triangle.vertices[b], n_vertex)
            ]
            other = second if first == i_triangle else first
            if other != -1:
                found.append(other)
        n_adjacency += len(found)
        found.extend([-1] * (3 - len(found)))
        entries.append((found[0], found[1], found[2]))
    return AdjacencyList(entries, n_adjacency)


def resolve_adjacencies_brute_force(model: MeshModel) -> AdjacencyList:
    """Find adjacencies by comparing every pair of triangles.

    Neighbours are listed in ascending order. Raises ``ValueError`` when a
    triangle shares edges with more than three others.
    """
    entries: List[Entry] = []
    n_adjacency = 0
    for i_triangle, reference in enumerate(model.triangles):
        found: List[int] = []
        for j_triangle, current in enumerate(model.triangles):
            n_shared = sum(1 for v in reference.vertices if v in current.vertices)
            if n_shared == 2:
                found.append(j_triangle)
        if len(found) > 3:
            raise ValueError(f"triangle {i_triangle} has more than three neighbours")
        n_adjacency += len(found)
        found.extend([-1] * (3 - len(found)))
        entries.append((found[0], found[1], found[2]))
    return AdjacencyList(entries, n_adjacency)