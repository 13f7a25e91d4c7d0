"""A 3-d tree for nearest-neighbour and range queries over points in space."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, MutableSequence, Optional, Sequence, Tuple

Point = Tuple[float, float, float]


@dataclass(frozen=True)
class Exemplar:
    """A point in 3-d space tagged with an integer identifier."""

    point: Point
    ident: int

    def __post_init__(self) -> None:
        coords = tuple(float(c) for c in self.point)
        if len(coords) != 3:
            raise ValueError("an exemplar needs exactly three coordinates")
        object.__setattr__(self, "point", coords)


@dataclass(eq=False)
class KDNode:
    """A node of the tree: one exemplar plus the axis it splits along."""

    point: Point
    ident: int
    axis: int
    left: Optional["KDNode"] = None
    right: Optional["KDNode"] = None


Condition = Optional[Callable[[KDNode], bool]]


def _squared_distance(a: Sequence[float], b: Sequence[float]) -> float:
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    dz = a[2] - b[2]
    return dx * dx + dy * dy + dz * dz


def select_split_dimension(exemplars: Iterable[Exemplar]) -> int:
    """Return the axis along which the exemplars vary the most."""
    items = list(exemplars)
    if not items:
        raise ValueError("cannot select a split dimension of no exemplars")
    count = len(items)
    variance = []
    for axis in range(3):
        values = [e.point[axis] for e in items]
        mean = sum(values) / count
        variance.append(sum((v - mean) * (v - mean) for v in values))
    axis = 0 if variance[0] > variance[1] else 1
    return 2 if variance[2] > variance[axis] else axis


def _swap(items: MutableSequence[Exemplar], i: int, j: int) -> None:
    items[i], items[j] = items[j], items[i]


def _median5(items: Sequence[Exemplar], start: int, axis: int) -> int:
    values = [items[start + i].point[axis] for i in range(5)]
    return values.index(sorted(values)[2])


def _partition(items: MutableSequence[Exemplar], lo: int, size: int, pivot: int, axis: int) -> int:
    last = lo + size - 1
    pivot_value = items[lo + pivot].point[axis]
    _swap(items, lo + pivot, last)
    store = 0
    for load in range(size - 1):
        if items[lo + load].point[axis] < pivot_value:
            _swap(items, lo + load, lo + store)
            store += 1
    _swap(items, lo + store, last)
    return store


def _kth_split(items: MutableSequence[Exemplar], lo: int, size: int, k: int, axis: int) -> None:
    while True:
        if size < 5:
            for i in range(lo, lo + size):
                for j in range(i + 1, lo + size):
                    if items[j].point[axis] < items[i].point[axis]:
                        _swap(items, i, j)
            return

        n_medians = size // 5
        median_of_medians = n_medians // 2
        for group in range(n_medians):
            start = lo + 5 * group
            _swap(items, start + _median5(items, start, axis), lo + group)

        _kth_split(items, lo, n_medians, median_of_medians, axis)
        position = _partition(items, lo, size, median_of_medians, axis)
        if k == position:
            return
        if k < position:
            size = position
        else:
            lo, size, k = lo + position + 1, size - position - 1, k - position - 1


def kth_split(exemplars: MutableSequence[Exemplar], k: int, axis: int) -> None:
    """Reorder exemplars in place so the k-th smallest along axis sits at k.

    Every exemplar before position k is then no greater along the axis, and
    every one after it no smaller.
    """
    if exemplars and not 0 <= k < len(exemplars):
        raise IndexError("split position out of range")
    _kth_split(exemplars, 0, len(exemplars), k, axis)


class KDTree:
    """A balanced 3-d tree built from a collection of exemplars."""

    def __init__(self, exemplars: Iterable[Exemplar] = ()) -> None:
        items = list(exemplars)
        self.root: Optional[KDNode] = self._build(items, 0, len(items))

    @classmethod
    def _build(cls, items: List[Exemplar], lo: int, hi: int) -> Optional[KDNode]:
        if lo == hi:
            return None
        size = hi - lo
        k = size // 2
        axis = select_split_dimension(items[lo:hi])
        _kth_split(items, lo, size, k, axis)
        pivot = items[lo + k]
        node = KDNode(pivot.point, pivot.ident, axis)
        node.left = cls._build(items, lo, lo + k)
        node.right = cls._build(items, lo + k + 1, hi)
        return node

    def __iter__(self) -> Iterator[KDNode]:
        stack = [self.root] if self.root is not None else []
        while stack:
            node = stack.pop()
            yield node
            stack.extend(child for child in (node.right, node.left) if child is not None)

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def insert(self, point: Sequence[float], ident: int) -> KDNode:
        """Add a point below its leaf position; the tree is not rebalanced."""
        coords = Exemplar(tuple(point), ident).point  # type: ignore[arg-type]
        if self.root is None:
            self.root = KDNode(coords, ident, 0)
            return self.root

        parent = self.root
        node: Optional[KDNode] = self.root
        while node is not None:
            parent = node
            node = node.right if coords[node.axis] > node.point[node.axis] else node.left

        axis = parent.axis
        new_node = KDNode(coords, ident, (axis + 1) % 3)
        if coords[axis] > parent.point[axis]:
            parent.right = new_node
        else:
            parent.left = new_node
        return new_node

    def nearest(
        self, point: Sequence[float], condition: Condition = None
    ) -> Tuple[Optional[KDNode], float]:
        """Closest node to point that satisfies condition, with its squared distance.

        Returns ``(None, inf)`` when no node qualifies.
        """
        x0 = tuple(float(c) for c in point)
        lower = [-math.inf] * 3
        upper = [math.inf] * 3
        best: List = [None, math.inf]

        def rect_distance() -> float:
            total = 0.0
            for axis in range(3):
                if x0[axis] < lower[axis]:
                    total += (lower[axis] - x0[axis]) ** 2
                elif x0[axis] > upper[axis]:
                    total += (upper[axis] - x0[axis]) ** 2
            return total

        def visit(node: KDNode) -> None:
            axis = node.axis
            split = node.point[axis]
            if x0[axis] <= split:
                nearer, further = node.left, node.right
                nearer_bound, further_bound = upper, lower
            else:
                nearer, further = node.right, node.left
                nearer_bound, further_bound = lower, upper

            if nearer is not None:
                saved = nearer_bound[axis]
                nearer_bound[axis] = split
                visit(nearer)
                nearer_bound[axis] = saved

            if condition is None or condition(node):
                dist_sq = _squared_distance(node.point, x0)
                if dist_sq < best[1]:
                    best[0], best[1] = node, dist_sq

            if further is not None:
                saved = further_bound[axis]
                further_bound[axis] = split
                if rect_distance() < best[1]:
                    visit(further)
                further_bound[axis] = saved

        if self.root is not None:
            visit(self.root)
        return best[0], best[1]

    def range_search(
        self, point: Sequence[float], radius: float, condition: Condition = None
    ) -> List[Tuple[KDNode, float]]:
        """All nodes strictly within radius of point that satisfy condition.

        Each hit comes with its squared distance.
        """
        x0 = tuple(float(c) for c in point)
        limit = radius * radius
        hits: List[Tuple[KDNode, float]] = []

        def visit(node: Optional[KDNode]) -> None:
            if node is None:
                return
            dist_sq = _squared_distance(node.point, x0)
            if dist_sq < limit and (condition is None or condition(node)):
                hits.append((node, dist_sq))
            dx = x0[node.axis] - node.point[node.axis]
            if dx <= 0:
                nearer, further = node.left, node.right
            else:
                nearer, further = node.right, node.left
            visit(nearer)
            if abs(dx) < radius:
                visit(further)

        visit(self.root)
        return hits