"""
Pairwise correlation between sparse rating vectors.

The engine applies the configured similarity method and shrinkage, builds
upper-triangular correlation matrices over users or items, and scores the
diversity of ranked item lists against a lazily filled item-item cache.
"""

from __future__ import annotations

import math
from typing import Iterator, Literal, Sequence

import numpy as np
from loguru import logger

from reccore.data.scale import RatingScale
from reccore.data.sparse import SparseRatingMatrix, SparseVector
from reccore.utils.config import EvaluationConfig

from . import measures

Axis = Literal["user", "item"]


class SymmMatrix:
    """
    Symmetric coefficients for unordered index pairs, stored once per pair.

    ``get`` returns ``None`` for pairs that were never set, so a stored 0.0 is
    a real zero correlation rather than a cache miss.
    """

    def __init__(self) -> None:
        self._values: dict[tuple[int, int], float] = {}
        self._neighbors: dict[int, dict[int, float]] = {}

    @staticmethod
    def _key(i: int, j: int) -> tuple[int, int]:
        if i == j:
            raise ValueError("SymmMatrix holds off-diagonal pairs only.")
        return (i, j) if i < j else (j, i)

    def get(self, i: int, j: int) -> float | None:
        return self._values.get(self._key(i, j))

    def set(self, i: int, j: int, value: float) -> None:
        self._values[self._key(i, j)] = value
        self._neighbors.setdefault(i, {})[j] = value
        self._neighbors.setdefault(j, {})[i] = value

    def __contains__(self, pair: tuple[int, int]) -> bool:
        return self._key(*pair) in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[tuple[int, int, float]]:
        for (i, j), value in self._values.items():
            yield i, j, value

    def row(self, index: int) -> dict[int, float]:
        """All stored coefficients involving ``index``, keyed by the other index."""
        return dict(self._neighbors.get(index, {}))


class SimilarityEngine:
    """Correlation computations bound to one configuration and rating scale."""

    def __init__(self, config: EvaluationConfig, scale: RatingScale) -> None:
        self.config = config
        self.scale = scale

    def correlate(
        self,
        a: SparseVector,
        b: SparseVector,
        method: str | None = None,
        shrinkage: int | None = None,
    ) -> float:
        """
        Correlation between two sparse vectors; ``nan`` when undefined.

        Parameters
        ----------
        method:
            One of ``cos``, ``cos-binary``, ``msd``, ``cpc``, ``exjaccard`` or
            ``pcc``. Anything else is treated as ``pcc``. Defaults to the
            configured method.
        shrinkage:
            Multiply a defined coefficient by ``n / (n + shrinkage)`` where
            ``n`` is the co-observed count. Non-positive disables it.
        """
        method = (method or self.config.similarity).lower()
        shrinkage = self.config.shrinkage if shrinkage is None else shrinkage

        left, right = a.co_observed(b)
        if method == "cos":
            sim = measures.cosine(left, right)
        elif method == "cos-binary":
            # one-sided entries contribute to the norms
            sim = measures.safe_divide(
                a.inner(b),
                math.sqrt(float(np.dot(a.values, a.values)))
                * math.sqrt(float(np.dot(b.values, b.values))),
            )
        elif method == "msd":
            sim = measures.mean_squared_difference(left, right)
        elif method == "cpc":
            sim = measures.constrained_pearson(left, right, self.scale.midpoint)
        elif method == "exjaccard":
            sim = measures.extended_jaccard(left, right)
        else:
            sim = measures.pearson(left, right)

        return measures.shrink(sim, int(left.size), shrinkage)

    def build_matrix(
        self,
        matrix: SparseRatingMatrix,
        axis: Axis = "item",
        *,
        cache: SymmMatrix | None = None,
    ) -> SymmMatrix:
        """
        Correlate every pair of users (``axis="user"``) or items (``axis="item"``).

        Vectors without observations are skipped entirely. When ``cache`` is
        given it is filled in place and pairs it already holds are kept.
        """
        if axis not in ("user", "item"):
            raise ValueError(f"axis must be 'user' or 'item', got {axis!r}")

        logger.debug("Build {} similarity matrix ...", axis)
        corrs = cache if cache is not None else SymmMatrix()
        count = matrix.num_rows if axis == "user" else matrix.num_columns
        vectors = [
            matrix.row(idx) if axis == "user" else matrix.column(idx)
            for idx in range(count)
        ]

        for i in range(count):
            iv = vectors[i]
            if len(iv) == 0:
                continue
            for j in range(i + 1, count):
                if (i, j) in corrs:
                    continue
                sim = self.correlate(iv, vectors[j])
                if not math.isnan(sim):
                    corrs.set(i, j, sim)
        return corrs

    def diversity_at(
        self,
        ranked_items: Sequence[int],
        cutoff: int,
        item_matrix: SparseRatingMatrix,
        cache: SymmMatrix,
    ) -> float:
        """
        Half the mean dissimilarity among the first ``cutoff`` ranked items.

        Unset pairs are correlated from the item columns of ``item_matrix`` and
        written back to ``cache``. Returns ``nan`` when no pair is defined.
        """
        top = list(ranked_items[:cutoff])
        total = 0.0
        count = 0
        for pos, i in enumerate(top):
            for j in top[pos + 1 :]:
                corr = cache.get(i, j)
                if corr is None:
                    corr = self.correlate(item_matrix.column(i), item_matrix.column(j))
                    if math.isnan(corr):
                        continue
                    cache.set(i, j, corr)
                total += 1.0 - corr
                count += 1

        if count == 0:
            return float("nan")
        return 0.5 * (total / count)
