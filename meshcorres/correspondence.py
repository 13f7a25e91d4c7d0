"""Triangle correspondences between a deformed source mesh and a target mesh.

A correspondence file holds the number of entries on its first line, then one
``source_triangle, target_triangle, squared_distance`` triple per line.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Iterable, List, Tuple, Union

PathLike = Union[str, "os.PathLike[str]"]

_INT = r"[-+]?\d+"
_FLOAT = r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?|[-+]?(?:inf|nan)"
_ENTRY = re.compile(rf"\s*({_INT}),\s*({_INT}),\s*({_FLOAT})", re.IGNORECASE)
_COUNT = re.compile(rf"\s*({_INT})")


@dataclass(frozen=True)
class TriangleCorrespondence:
    """Source triangle ``source`` corresponds to target triangle ``target``.

    ``dist_sq`` is the squared distance between the two triangle centroids.
    """

    source: int
    target: int
    dist_sq: float

    def sort_key(self) -> Tuple[int, float, int]:
        """Order by target triangle, then distance, then source triangle."""
        return self.target, self.dist_sq, self.source


def sort_unique(entries: Iterable[TriangleCorrespondence]) -> List[TriangleCorrespondence]:
    """Sort entries by :meth:`TriangleCorrespondence.sort_key` and drop duplicates."""
    result: List[TriangleCorrespondence] = []
    for entry in sorted(entries, key=TriangleCorrespondence.sort_key):
        if not result or result[-1].sort_key() != entry.sort_key():
            result.append(entry)
    return result


def strip_correspondences(
    entries: Iterable[TriangleCorrespondence], max_corrs: int
) -> List[TriangleCorrespondence]:
    """Keep only the ``max_corrs`` nearest source triangles of each target triangle.

    The result is sorted and free of duplicates.
    """
    ordered = sort_unique(entries)
    if not ordered:
        return []

    kept = [ordered[0]]
    n_same = 0
    for entry in ordered[1:]:
        if kept[-1].target != entry.target:
            n_same = 0
        else:
            n_same += 1
        if n_same < max_corrs:
            kept.append(entry)
    return kept


def save_correspondences(path: PathLike, entries: Iterable[TriangleCorrespondence]) -> None:
    """Write correspondences to a text file in the order given."""
    items = list(entries)
    with open(path, "w", encoding="utf-8") as stream:
        stream.write(f"{len(items)}\n")
        for entry in items:
            stream.write(f"{entry.source}, {entry.target}, {entry.dist_sq:12.9f}\n")


def load_correspondences(path: PathLike) -> List[TriangleCorrespondence]:
    """Read correspondences from a text file, in file order.

    Raises ``OSError`` if the file cannot be opened and ``ValueError`` if it
    is malformed or holds fewer entries than it announces.
    """
    with open(path, encoding="utf-8") as stream:
        text = stream.read()

    header = _COUNT.match(text)
    if header is None:
        raise ValueError(f"{path}: missing correspondence count")
    count = int(header.group(1))
    if count < 0:
        raise ValueError(f"{path}: negative correspondence count")

    entries = []
    position = header.end()
    for _ in range(count):
        match = _ENTRY.match(text, position)
        if match is None:
            raise ValueError(f"{path}: expected {count} correspondence entries")
        entries.append(
            TriangleCorrespondence(
                int(match.group(1)), int(match.group(2)), float(match.group(3))
            )
        )
        position = match.end()
    return entries