"""Vertex correspondence constraints between a source and a target mesh.

A constraint file holds the number of entries on its first line, then one
``source_vertex, target_vertex`` pair per line.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Union

import numpy as np

from .mesh import MeshModel

PathLike = Union[str, "os.PathLike[str]"]

_PAIR = re.compile(r"\s*(-?\d+),\s*(-?\d+)")


@dataclass(frozen=True)
class VertexConstraint:
    """Source vertex ``source`` is pinned to target vertex ``target``."""

    source: int
    target: int


def load_constraints(path: PathLike) -> List[VertexConstraint]:
    """Read constraints from a file, sorted by source vertex index.

    Raises ``OSError`` if the file cannot be opened and ``ValueError`` if it
    is malformed or holds fewer entries than it announces.
    """
    with open(path, encoding="utf-8") as stream:
        text = stream.read()

    header = re.match(r"\s*(-?\d+)", text)
    if header is None:
        raise ValueError(f"{path}: missing constraint count")
    count = int(header.group(1))
    if count < 0:
        raise ValueError(f"{path}: negative constraint count")

    constraints = []
    position = header.end()
    for _ in range(count):
        match = _PAIR.match(text, position)
        if match is None:
            raise ValueError(f"{path}: expected {count} constraint entries")
        constraints.append(VertexConstraint(int(match.group(1)), int(match.group(2))))
        position = match.end()

    return sorted(constraints, key=lambda entry: entry.source)


def save_constraints(path: PathLike, constraints: Iterable[VertexConstraint]) -> None:
    """Write constraints to a file in the order given."""
    entries = list(constraints)
    with open(path, "w", encoding="utf-8") as stream:
        stream.write(f"{len(entries)}\n")
        for entry in entries:
            stream.write(f"{entry.source}, {entry.target}\n")


def mapped_vertex(
    target_model: MeshModel, constraints: Sequence[VertexConstraint], i_cons: int
) -> np.ndarray:
    """Coordinates of the target vertex named by constraint ``i_cons``."""
    if not 0 <= i_cons < len(constraints):
        raise IndexError("constraint entry index out of bounds")
    return target_model.vertices[constraints[i_cons].target]


def mapped_vertex_coord(
    target_model: MeshModel,
    constraints: Sequence[VertexConstraint],
    i_cons: int,
    dimension: int,
) -> float:
    """One coordinate (0=x, 1=y, 2=z) of the target vertex of a constraint."""
    if not 0 <= dimension < 3:
        raise IndexError("dimension must be 0, 1 or 2")
    return float(mapped_vertex(target_model, constraints, i_cons)[dimension])