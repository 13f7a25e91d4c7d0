"""Sparse matrices assembled from triplets, least-squares solving and
MatrixMarket reading and writing."""

from __future__ import annotations

import os
from typing import List, TextIO, Tuple, Union

import numpy as np
import scipy.io
import scipy.sparse
import scipy.sparse.linalg

PathLike = Union[str, "os.PathLike[str]"]


class TripletMatrix:
    """A real sparse matrix built up one ``(row, col, value)`` entry at a time.

    The shape grows to hold every entry added. Duplicate positions are summed
    when the matrix is converted.
    """

    def __init__(self, nrow: int = 0, ncol: int = 0) -> None:
        if nrow < 0 or ncol < 0:
            raise ValueError("matrix dimensions must be non-negative")
        self.nrow = nrow
        self.ncol = ncol
        self._rows: List[int] = []
        self._cols: List[int] = []
        self._values: List[float] = []

    @property
    def shape(self) -> Tuple[int, int]:
        return self.nrow, self.ncol

    @property
    def nnz(self) -> int:
        """Number of entries added, duplicates included."""
        return len(self._values)

    def add(self, row: int, col: int, value: float) -> None:
        """Append an entry, enlarging the shape if needed."""
        if row < 0 or col < 0:
            raise IndexError("matrix indices must be non-negative")
        self._rows.append(row)
        self._cols.append(col)
        self._values.append(float(value))
        self.nrow = max(self.nrow, row + 1)
        self.ncol = max(self.ncol, col + 1)

    def to_sparse(self) -> scipy.sparse.csc_matrix:
        """Column-compressed form with duplicate entries summed."""
        matrix = scipy.sparse.coo_matrix(
            (
                np.asarray(self._values, dtype=float),
                (np.asarray(self._rows, dtype=np.int64), np.asarray(self._cols, dtype=np.int64)),
            ),
            shape=self.shape,
        ).tocsc()
        matrix.sum_duplicates()
        return matrix


def _as_sparse(matrix) -> scipy.sparse.csc_matrix:
    if isinstance(matrix, TripletMatrix):
        return matrix.to_sparse()
    return scipy.sparse.csc_matrix(matrix, dtype=float)


def least_squares(matrix, rhs) -> np.ndarray:
    """Solve min ||rhs - A x||^2 through the normal equations A'A x = A'rhs.

    ``matrix`` may be a :class:`TripletMatrix`, a scipy sparse matrix or a
    dense array. Raises ``ValueError`` on a shape mismatch or when A'A is
    singular.
    """
    a = _as_sparse(matrix)
    c = np.asarray(rhs, dtype=float).reshape(-1)
    if c.shape[0] != a.shape[0]:
        raise ValueError(
            f"right-hand side has {c.shape[0]} rows, matrix has {a.shape[0]}"
        )
    a_t = a.T.tocsc()
    normal = (a_t @ a).tocsc()
    b = a_t @ c
    try:
        factor = scipy.sparse.linalg.splu(normal)
    except RuntimeError as exc:
        raise ValueError("normal equations are singular") from exc
    x = factor.solve(b)
    if not np.all(np.isfinite(x)):
        raise ValueError("normal equations are singular")
    return x


def read_matrix_market(path: PathLike):
    """Read a MatrixMarket file.

    Coordinate files give a column-compressed sparse matrix, array files a
    dense 2-d array.
    """
    data = scipy.io.mmread(os.fspath(path))
    if scipy.sparse.issparse(data):
        return scipy.sparse.csc_matrix(data, dtype=float)
    return np.asarray(data, dtype=float)


def _format(value: float) -> str:
    return repr(float(value))


def write_matrix_market(matrix, stream: TextIO) -> None:
    """Write a matrix to a text stream in MatrixMarket form.

    Sparse matrices and :class:`TripletMatrix` objects are written in
    coordinate form, dense arrays in array form (a 1-d array as one column).
    """
    if isinstance(matrix, TripletMatrix) or scipy.sparse.issparse(matrix):
        sparse = _as_sparse(matrix)
        sparse.sum_duplicates()
        sparse.sort_indices()
        coo = sparse.tocoo()
        stream.write("%%MatrixMarket matrix coordinate real general\n")
        stream.write(f"{coo.shape[0]} {coo.shape[1]} {coo.nnz}\n")
        for row, col, value in zip(coo.row, coo.col, coo.data):
            stream.write(f"{row + 1} {col + 1} {_format(value)}\n")
        return

    dense = np.asarray(matrix, dtype=float)
    if dense.ndim == 1:
        dense = dense.reshape(-1, 1)
    if dense.ndim != 2:
        raise ValueError("only 1-d and 2-d arrays can be written")
    stream.write("%%MatrixMarket matrix array real general\n")
    stream.write(f"{dense.shape[0]} {dense.shape[1]}\n")
    for value in dense.flatten(order="F"):
        stream.write(f"{_format(value)}\n")