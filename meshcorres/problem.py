"""The correspondence problem: deform a source mesh into a target mesh and
find which triangles of the two correspond.

Solving runs in two phases. Phase 1 deforms the source under the marker
constraints with smoothness and identity terms only. Phase 2 repeats the
deformation with an added closest-point term whose weight rises through a
schedule ``[start:step:end)``. Finally triangle correspondences are resolved
between the deformed source and the target.
"""

from __future__ import annotations

import logging
import math
import os
import re
import sys
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from .adjacency import AdjacencyList, load_adjacencies, resolve_adjacencies
from .closest_point import build_vertex_tree, spatial_join
from .constraint import VertexConstraint, load_constraints
from .correspondence import TriangleCorrespondence, save_correspondences
from .equations import build_phase1, build_phase2
from .linalg import least_squares
from .mesh import MeshModel, read_obj, save_obj
from .triangle_resolve import resolve_triangle_correspondences_auto
from .vertex_info import VertexInfoList

PathLike = Union[str, "os.PathLike[str]"]

logger = logging.getLogger(__name__)

_PROG = "meshcorres"
_SCHEDULE = re.compile(r"\s*\[([^:\[\]]+):([^:\[\]]+):([^:\[\]]+)\]\s*")


@dataclass(eq=False)
class CorrespondenceProblem:
    """Meshes, constraints, weights and, after :meth:`solve`, the result.

    ``snapshot_path``, when set, receives the deformed source model after
    every deformation step.
    """

    source_model: MeshModel
    target_model: MeshModel
    adjacency: AdjacencyList
    constraints: List[VertexConstraint]
    weight_smooth: float = 1.0
    weight_identity: float = 0.01
    weight_closest_start: float = 0.0
    weight_closest_step: float = 1.0
    weight_closest_end: float = 0.0
    snapshot_path: Optional[PathLike] = None
    result: List[TriangleCorrespondence] = field(default_factory=list)
    vtilist: VertexInfoList = field(init=False)

    def __post_init__(self) -> None:
        self.constraints = sorted(self.constraints, key=lambda entry: entry.source)
        self.vtilist = VertexInfoList(self.source_model, self.constraints)

    @classmethod
    def from_files(
        cls,
        source_path: PathLike,
        target_path: PathLike,
        constraint_path: PathLike,
        adjacency_path: Optional[PathLike] = None,
    ) -> "CorrespondenceProblem":
        """Load the meshes, marker constraints and optionally the source
        adjacency; without an adjacency file it is resolved from the mesh."""
        source = read_obj(source_path)
        target = read_obj(target_path)
        constraints = load_constraints(constraint_path)
        if adjacency_path is not None:
            adjacency = load_adjacencies(adjacency_path)
        else:
            logger.info("Resolving source model connectivity...")
            adjacency = resolve_adjacencies(source)
        return cls(source, target, adjacency, constraints)

    def apply_deformation(self, solution) -> None:
        """Move free source vertices to their solved positions and pinned
        vertices onto their target vertices."""
        x = np.asarray(solution, dtype=float).reshape(-1)
        vertices = self.source_model.vertices
        for i_vertex in range(len(vertices)):
            info = self.vtilist.info(i_vertex)
            if info.is_free:
                vertices[i_vertex] = [
                    x[self.vtilist.free_var_index(i_vertex, dim)] for dim in range(3)
                ]
            else:
                target_index = self.constraints[info.index].target
                vertices[i_vertex] = self.target_model.vertices[target_index]
        if self.snapshot_path is not None:
            save_obj(self.snapshot_path, self.source_model)

    def _solve_and_apply(self, matrix, rhs) -> None:
        logger.info("solving linear system...")
        x = least_squares(matrix, rhs)
        logger.info("applying deformation...")
        self.apply_deformation(x)

    def _phase1(self) -> None:
        matrix, rhs = build_phase1(
            self.source_model, self.target_model, self.adjacency,
            self.constraints, self.vtilist,
            math.sqrt(self.weight_smooth), math.sqrt(self.weight_identity),
        )
        self._solve_and_apply(matrix, rhs)

    def _phase2(self) -> None:
        start = self.weight_closest_start
        step = self.weight_closest_step
        end = self.weight_closest_end
        if start < end and step <= 0:
            raise ValueError("closest point weight step must be positive")

        tree = build_vertex_tree(self.target_model)
        src_normals = self.source_model.vertex_normal_indices()
        tgt_normals = self.target_model.vertex_normal_indices()

        weight_closest = start
        while weight_closest < end:
            logger.info("current weight: %f", weight_closest)
            logger.info("resolving spatial join...")
            join = spatial_join(
                self.source_model, self.target_model, src_normals, tgt_normals, tree
            )
            logger.info("building linear system...")
            matrix, rhs = build_phase2(
                self.source_model, self.target_model, self.adjacency,
                self.constraints, self.vtilist, join,
                math.sqrt(self.weight_smooth), math.sqrt(self.weight_identity),
                weight_closest,
            )
            self._solve_and_apply(matrix, rhs)
            weight_closest += step

    def solve(self) -> List[TriangleCorrespondence]:
        """Deform the source into the target and resolve triangle
        correspondences, which are stored in ``result`` and returned."""
        self._phase1()
        self._phase2()
        self.result = resolve_triangle_correspondences_auto(
            self.source_model, self.target_model
        )
        return self.result


def parse_schedule(text: str) -> Tuple[float, float, float]:
    """Parse ``[start:step:end]`` into three floats; raises ValueError."""
    match = _SCHEDULE.fullmatch(text)
    if match is None:
        raise ValueError(f"schedule must look like [start:step:end], got {text!r}")
    try:
        start, step, end = (float(group) for group in match.groups())
    except ValueError as exc:
        raise ValueError(f"schedule holds a non-numeric value: {text!r}") from exc
    return start, step, end


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command line: ``source_ref target_ref markerpt [start:step:end]``.

    Writes the deformed source to ``out.obj`` and the triangle
    correspondences to ``out.tricorrs`` in the working directory.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 4:
        print(f"usage: {_PROG} source_ref target_ref markerpt [start:step:end]")
        return 0

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    previous_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    try:
        source_path, target_path, marker_path, schedule = args
        start, step, end = parse_schedule(schedule)
        logger.info("reading data...")
        problem = CorrespondenceProblem.from_files(source_path, target_path, marker_path)
        problem.weight_smooth = 1.0
        problem.weight_identity = 0.01
        problem.weight_closest_start = start
        problem.weight_closest_step = step
        problem.weight_closest_end = end
        problem.snapshot_path = "out.obj"

        problem.solve()

        save_obj("out.obj", problem.source_model)
        save_correspondences("out.tricorrs", problem.result)
    except (OSError, ValueError, IndexError) as exc:
        print(f"{_PROG}: {exc}", file=sys.stderr)
        return 1
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous_level)
    return 0