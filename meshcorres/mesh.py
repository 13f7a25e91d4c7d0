"""Triangle mesh models and reading/writing of Wavefront .obj files."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence, Tuple, Union

import numpy as np

PathLike = Union[str, "os.PathLike[str]"]


@dataclass(frozen=True)
class Triangle:
    """A triangular face: zero-based vertex indices and their normal indices."""

    vertices: Tuple[int, int, int]
    normals: Tuple[int, int, int]


def _as_points(values: Iterable) -> np.ndarray:
    return np.asarray(values, dtype=float).reshape(-1, 3)


@dataclass(eq=False)
class MeshModel:
    """A mesh of triangles with per-vertex coordinates and normal vectors."""

    vertices: np.ndarray = field(default_factory=lambda: np.zeros((0, 3)))
    normals: np.ndarray = field(default_factory=lambda: np.zeros((0, 3)))
    triangles: List[Triangle] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.vertices = _as_points(self.vertices)
        self.normals = _as_points(self.normals)
        self.triangles = list(self.triangles)

    def vertex_normal_indices(self) -> List[int]:
        """Index of a normal vector for each vertex.

        Vertices used by no triangle get normal 0; when several triangles
        name a vertex, the last one wins.
        """
        result = [0] * len(self.vertices)
        for triangle in self.triangles:
            for i_vertex, i_normal in zip(triangle.vertices, triangle.normals):
                result[i_vertex] = i_normal
        return result

    def copy(self) -> "MeshModel":
        """Return an independent copy of this model."""
        return MeshModel(self.vertices.copy(), self.normals.copy(), list(self.triangles))


def _parse_vector(fields: Sequence[str]) -> Tuple[float, float, float]:
    x, y, z = (float(token) for token in fields[:3])
    return x, y, z


def _parse_corner(token: str) -> Tuple[int, int]:
    parts = token.split("/")
    if len(parts) != 3 or not parts[0] or not parts[2]:
        raise ValueError(f"malformed face corner {token!r}")
    if parts[1]:
        int(parts[1])  # texture index must be numeric even though it is unused
    return int(parts[0]) - 1, int(parts[2]) - 1


def _parse_face(fields: Sequence[str]) -> Triangle:
    if len(fields) < 3:
        raise ValueError("face needs three corners")
    corners = [_parse_corner(token) for token in fields[:3]]
    vertices = tuple(v for v, _ in corners)
    normals = tuple(n for _, n in corners)
    return Triangle(vertices, normals)  # type: ignore[arg-type]


def read_obj(path: PathLike) -> MeshModel:
    """Read vertices, normals and triangular faces from an .obj file.

    Faces must be written as ``v//n`` or ``v/t/n``; indices in the file are
    one-based. Lines with other prefixes are ignored. Raises ``OSError`` if
    the file cannot be opened and ``ValueError`` naming the line on a
    syntax error.
    """
    vertices: List[Tuple[float, float, float]] = []
    normals: List[Tuple[float, float, float]] = []
    triangles: List[Triangle] = []

    with open(path, encoding="utf-8") as stream:
        for lineno, line in enumerate(stream, 1):
            fields = line.split()
            if not fields:
                continue
            prefix, rest = fields[0], fields[1:]
            try:
                if prefix == "v":
                    vertices.append(_parse_vector(rest))
                elif prefix == "vn":
                    normals.append(_parse_vector(rest))
                elif prefix == "f":
                    triangles.append(_parse_face(rest))
            except ValueError as exc:
                raise ValueError(f"{path}: syntax error on line {lineno}") from exc

    return MeshModel(_as_points(vertices), _as_points(normals), triangles)


def save_obj(path: PathLike, model: MeshModel) -> None:
    """Write a mesh model to an .obj file with one-based indices."""
    with open(path, "w", encoding="utf-8") as stream:
        for x, y, z in model.vertices:
            stream.write(f"v   {x:12.9f}   {y:12.9f}   {z:12.9f}\n")
        for x, y, z in model.normals:
            stream.write(f"vn   {x:12.9f}   {y:12.9f}   {z:12.9f}\n")
        for triangle in model.triangles:
            corners = " ".join(
                f"{v + 1}//{n + 1}" for v, n in zip(triangle.vertices, triangle.normals)
            )
            stream.write(f"f {corners}\n")