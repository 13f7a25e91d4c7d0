"""Triangle correspondences found by comparing triangle centroids.

A source triangle and a target triangle correspond when their centroids lie
within a threshold of each other and their normals point less than 90
degrees apart.
"""

from __future__ import annotations

import math
from typing import List

import numpy as np

from .correspondence import TriangleCorrespondence
from .geometry import triangle_normal
from .kdtree import Exemplar, KDNode, KDTree
from .mesh import MeshModel


def triangle_centroid(model: MeshModel, i_triangle: int) -> np.ndarray:
    """Mean of the three vertices of a triangle."""
    corners = model.vertices[list(model.triangles[i_triangle].vertices)]
    return corners.sum(axis=0) / 3


def _centroid_tree(model: MeshModel) -> KDTree:
    return KDTree(
        Exemplar(tuple(triangle_centroid(model, i_tri)), i_tri)
        for i_tri in range(len(model.triangles))
    )


def correspondence_threshold(model: MeshModel) -> float:
    """Search radius sqrt(4 * bounding-box surface area / triangle count).

    Raises ``ValueError`` for a model without vertices or triangles.
    """
    if len(model.vertices) == 0:
        raise ValueError("model has no vertices")
    if not model.triangles:
        raise ValueError("model has no triangles")
    dx, dy, dz = model.vertices.max(axis=0) - model.vertices.min(axis=0)
    area = dx * dy + dy * dz + dx * dz
    return math.sqrt(4 * area / len(model.triangles))


def resolve_triangle_correspondences(
    deformed_source: MeshModel, target: MeshModel, threshold: float
) -> List[TriangleCorrespondence]:
    """Every compatible (source, target) triangle pair within ``threshold``.

    Entries are grouped by target triangle in ascending order.
    """
    tree = _centroid_tree(deformed_source)
    result: List[TriangleCorrespondence] = []

    for i_tri in range(len(target.triangles)):
        centroid = triangle_centroid(target, i_tri)
        normal = triangle_normal(target, i_tri)

        def compatible(node: KDNode) -> bool:
            return float(np.dot(normal, triangle_normal(deformed_source, node.ident))) > 0

        for node, dist_sq in tree.range_search(centroid, threshold, compatible):
            result.append(TriangleCorrespondence(node.ident, i_tri, dist_sq))
    return result


def resolve_triangle_correspondences_auto(
    deformed_source: MeshModel, target: MeshModel
) -> List[TriangleCorrespondence]:
    """Like :func:`resolve_triangle_correspondences` with the larger of the
    two models' :func:`correspondence_threshold` as the radius."""
    threshold = max(
        correspondence_threshold(deformed_source), correspondence_threshold(target)
    )
    return resolve_triangle_correspondences(deformed_source, target, threshold)