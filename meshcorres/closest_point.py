"""Closest compatible target vertex for every vertex of a source mesh."""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from .kdtree import Exemplar, KDNode, KDTree
from .mesh import MeshModel


def build_vertex_tree(model: MeshModel) -> KDTree:
    """A 3-d tree over the model's vertices, identified by vertex index."""
    return KDTree(
        Exemplar(tuple(vertex), i_vertex) for i_vertex, vertex in enumerate(model.vertices)
    )


def spatial_join(
    source_model: MeshModel,
    target_model: MeshModel,
    src_normals: Sequence[int],
    tgt_normals: Sequence[int],
    tree: KDTree,
) -> List[int]:
    """For each source vertex, the index of the nearest target vertex whose
    normal points within 90 degrees of the source vertex's normal.

    ``src_normals`` and ``tgt_normals`` give a normal index per vertex, and
    ``tree`` is built over the target vertices. Raises ``ValueError`` when a
    source vertex has no compatible target vertex.
    """
    target_normals = target_model.normals
    result = []
    for i_vertex, vertex in enumerate(source_model.vertices):
        src_norm = source_model.normals[src_normals[i_vertex]]

        def compatible(node: KDNode) -> bool:
            return float(np.dot(src_norm, target_normals[tgt_normals[node.ident]])) > 0

        node, _ = tree.nearest(vertex, compatible)
        if node is None:
            raise ValueError(f"source vertex {i_vertex} has no compatible target vertex")
        result.append(node.ident)
    return result


def spatial_join_brute_force(
    source_model: MeshModel,
    target_model: MeshModel,
    src_normals: Sequence[int],
    tgt_normals: Sequence[int],
) -> List[int]:
    """Same as :func:`spatial_join` by exhaustive search.

    A source vertex with no compatible target vertex gets -1.
    """
    result = []
    for i_src, src_vertex in enumerate(source_model.vertices):
        src_norm = source_model.normals[src_normals[i_src]]
        closest = -1
        min_dist = 0.0
        for i_tgt, tgt_vertex in enumerate(target_model.vertices):
            tgt_norm = target_model.normals[tgt_normals[i_tgt]]
            if float(np.dot(src_norm, tgt_norm)) > 0:
                diff = src_vertex - tgt_vertex
                dist = float(np.dot(diff, diff))
                if closest == -1 or dist < min_dist:
                    min_dist = dist
                    closest = i_tgt
        result.append(closest)
    return result