import numpy as np
import pytest

from meshcorres.closest_point import (
    build_vertex_tree,
    spatial_join,
    spatial_join_brute_force,
)
from meshcorres.mesh import MeshModel


def _random_model(seed, n):
    rng = np.random.default_rng(seed)
    return MeshModel(vertices=rng.uniform(-1, 1, size=(n, 3)), normals=[[0, 0, 1]])


def test_tree_holds_every_vertex():
    model = _random_model(1, 25)
    tree = build_vertex_tree(model)
    assert sorted(node.ident for node in tree) == list(range(25))
    for node in tree:
        np.testing.assert_array_equal(node.point, model.vertices[node.ident])


def test_join_agrees_with_brute_force():
    source = _random_model(2, 30)
    target = _random_model(3, 40)
    src_n = [0] * 30
    tgt_n = [0] * 40
    tree = build_vertex_tree(target)
    fast = spatial_join(source, target, src_n, tgt_n, tree)
    slow = spatial_join_brute_force(source, target, src_n, tgt_n)
    assert fast == slow


def test_join_finds_true_nearest():
    source = _random_model(4, 15)
    target = _random_model(5, 20)
    result = spatial_join(source, target, [0] * 15, [0] * 20, build_vertex_tree(target))
    for i, j in enumerate(result):
        dists = np.sum((target.vertices - source.vertices[i]) ** 2, axis=1)
        assert dists[j] == pytest.approx(dists.min())


def test_join_respects_normal_orientation():
    source = MeshModel(vertices=[[0, 0, 0]], normals=[[0, 0, 1]])
    target = MeshModel(
        vertices=[[0, 0, 0.1], [0, 0, 1.0]],
        normals=[[0, 0, -1], [0, 0, 1]],
    )
    tgt_n = [0, 1]
    tree = build_vertex_tree(target)
    assert spatial_join(source, target, [0], tgt_n, tree) == [1]
    assert spatial_join_brute_force(source, target, [0], tgt_n) == [1]


def test_join_mixed_normals_agrees_with_brute_force():
    rng = np.random.default_rng(7)
    normals = [[0, 0, 1], [0, 0, -1], [1, 0, 0]]
    source = MeshModel(vertices=rng.uniform(-1, 1, (20, 3)), normals=normals)
    target = MeshModel(vertices=rng.uniform(-1, 1, (30, 3)), normals=normals)
    src_n = list(rng.integers(0, 3, 20))
    tgt_n = [0] * 10 + [1] * 10 + [2] * 10
    fast = spatial_join(source, target, src_n, tgt_n, build_vertex_tree(target))
    slow = spatial_join_brute_force(source, target, src_n, tgt_n)
    assert fast == slow


def test_no_compatible_vertex():
    source = MeshModel(vertices=[[0, 0, 0]], normals=[[0, 0, 1]])
    target = MeshModel(vertices=[[1, 1, 1], [2, 2, 2]], normals=[[0, 0, -1]])
    assert spatial_join_brute_force(source, target, [0], [0, 0]) == [-1]
    with pytest.raises(ValueError):
        spatial_join(source, target, [0], [0, 0], build_vertex_tree(target))


def test_empty_source():
    source = MeshModel()
    target = _random_model(8, 5)
    assert spatial_join(source, target, [], [0] * 5, build_vertex_tree(target)) == []
    assert spatial_join_brute_force(source, target, [], [0] * 5) == []