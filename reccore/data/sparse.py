"""
Sparse rating containers backed by scipy.sparse.

Only the operations the similarity and evaluation code needs are exposed: row
and column vector access, counts, sums, dot products and co-observed values.
"""

from __future__ import annotations

from typing import Iterable, Iterator

import numpy as np
from scipy import sparse


class SparseVector:
    """Sorted index/value arrays for one row or column of a rating matrix."""

    __slots__ = ("_indices", "_values")

    def __init__(self, indices: Iterable[int], values: Iterable[float]) -> None:
        if not isinstance(indices, np.ndarray):
            indices = list(indices)
        if not isinstance(values, np.ndarray):
            values = list(values)
        idx = np.asarray(indices, dtype=np.int64)
        vals = np.asarray(values, dtype=np.float64)
        if idx.shape != vals.shape:
            raise ValueError("indices and values must have the same length")
        order = np.argsort(idx, kind="stable")
        self._indices = idx[order]
        self._values = vals[order]

    @classmethod
    def from_dict(cls, entries: dict[int, float]) -> "SparseVector":
        return cls(list(entries.keys()), list(entries.values()))

    @property
    def indices(self) -> np.ndarray:
        return self._indices

    @property
    def values(self) -> np.ndarray:
        return self._values

    def __len__(self) -> int:
        return int(self._indices.shape[0])

    def __contains__(self, index: int) -> bool:
        pos = np.searchsorted(self._indices, index)
        return bool(pos < len(self) and self._indices[pos] == index)

    def __iter__(self) -> Iterator[tuple[int, float]]:
        return zip(self._indices.tolist(), self._values.tolist())

    def get(self, index: int, default: float = 0.0) -> float:
        pos = np.searchsorted(self._indices, index)
        if pos < len(self) and self._indices[pos] == index:
            return float(self._values[pos])
        return default

    def index_list(self) -> list[int]:
        return self._indices.tolist()

    def inner(self, other: "SparseVector") -> float:
        """Sparse dot product over all shared positions."""
        a, b = self.co_observed(other)
        return float(np.dot(a, b))

    def co_observed(self, other: "SparseVector") -> tuple[np.ndarray, np.ndarray]:
        """Return the paired values at positions present in both vectors."""
        _, left, right = np.intersect1d(
            self._indices, other._indices, assume_unique=True, return_indices=True
        )
        return self._values[left], other._values[right]

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"SparseVector({dict(self)!r})"


class SparseRatingMatrix:
    """
    User-by-item rating matrix with fast row (CSR) and column (CSC) access.

    Stored zeros are removed on construction, so every stored entry is an
    observation.
    """

    def __init__(self, matrix: sparse.spmatrix | sparse.sparray) -> None:
        csr = sparse.csr_matrix(matrix, dtype=np.float64)
        csr.sum_duplicates()
        csr.eliminate_zeros()
        csr.sort_indices()
        self._csr = csr
        self._csc = csr.tocsc()
        self._csc.sort_indices()

    @classmethod
    def from_triples(
        cls,
        users: Iterable[int],
        items: Iterable[int],
        ratings: Iterable[float],
        *,
        shape: tuple[int, int] | None = None,
    ) -> "SparseRatingMatrix":
        rows = np.asarray(list(users), dtype=np.int64)
        cols = np.asarray(list(items), dtype=np.int64)
        data = np.asarray(list(ratings), dtype=np.float64)
        if shape is None:
            shape = (
                int(rows.max()) + 1 if rows.size else 0,
                int(cols.max()) + 1 if cols.size else 0,
            )
        return cls(sparse.coo_matrix((data, (rows, cols)), shape=shape))

    @property
    def shape(self) -> tuple[int, int]:
        return self._csr.shape

    @property
    def num_rows(self) -> int:
        return self._csr.shape[0]

    @property
    def num_columns(self) -> int:
        return self._csr.shape[1]

    @property
    def csr(self) -> sparse.csr_matrix:
        return self._csr

    def size(self) -> int:
        """Number of stored ratings."""
        return int(self._csr.nnz)

    def sum(self) -> float:
        return float(self._csr.data.sum())

    def mean(self) -> float:
        """Mean of the stored ratings, NaN when the matrix is empty."""
        if self.size() == 0:
            return float("nan")
        return self.sum() / self.size()

    def get(self, row: int, column: int) -> float:
        return self.row(row).get(column)

    def row(self, row: int) -> SparseVector:
        start, end = self._csr.indptr[row], self._csr.indptr[row + 1]
        return SparseVector(self._csr.indices[start:end], self._csr.data[start:end])

    def column(self, column: int) -> SparseVector:
        start, end = self._csc.indptr[column], self._csc.indptr[column + 1]
        return SparseVector(self._csc.indices[start:end], self._csc.data[start:end])

    def row_size(self, row: int) -> int:
        return int(self._csr.indptr[row + 1] - self._csr.indptr[row])

    def column_size(self, column: int) -> int:
        return int(self._csc.indptr[column + 1] - self._csc.indptr[column])

    def columns(self) -> list[int]:
        """Column ids holding at least one rating."""
        return np.flatnonzero(np.diff(self._csc.indptr)).tolist()

    def rows(self) -> list[int]:
        """Row ids holding at least one rating."""
        return np.flatnonzero(np.diff(self._csr.indptr)).tolist()

    def entries(self) -> Iterator[tuple[int, int, float]]:
        """Iterate stored ``(row, column, value)`` triples in row-major order."""
        coo = self._csr.tocoo()
        return zip(coo.row.tolist(), coo.col.tolist(), coo.data.tolist())

    def __len__(self) -> int:
        return self.size()
