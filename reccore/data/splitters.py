"""Train/test splitting of a rating matrix into independent matrix pairs."""

from __future__ import annotations

import numpy as np

from .sparse import SparseRatingMatrix


def _subset(
    rows: np.ndarray,
    cols: np.ndarray,
    data: np.ndarray,
    mask: np.ndarray,
    shape: tuple[int, int],
) -> SparseRatingMatrix:
    return SparseRatingMatrix.from_triples(rows[mask], cols[mask], data[mask], shape=shape)


def split_by_ratio(
    matrix: SparseRatingMatrix,
    ratio: float,
    *,
    seed: int | None = None,
) -> tuple[SparseRatingMatrix, SparseRatingMatrix]:
    """Randomly keep ``ratio`` of the ratings for training and the rest for testing."""
    if not 0.0 < ratio < 1.0:
        raise ValueError("ratio must lie strictly between 0 and 1.")

    coo = matrix.csr.tocoo()
    rng = np.random.default_rng(seed)
    in_train = rng.random(coo.nnz) < ratio
    return (
        _subset(coo.row, coo.col, coo.data, in_train, matrix.shape),
        _subset(coo.row, coo.col, coo.data, ~in_train, matrix.shape),
    )


def kfold_splits(
    matrix: SparseRatingMatrix,
    folds: int,
    *,
    seed: int | None = None,
) -> list[tuple[SparseRatingMatrix, SparseRatingMatrix]]:
    """
    Assign every rating to one of ``folds`` folds and return one
    ``(train, test)`` pair per fold, in fold order.
    """
    if folds < 2:
        raise ValueError("folds must be at least 2.")

    coo = matrix.csr.tocoo()
    rng = np.random.default_rng(seed)
    assignment = rng.permutation(coo.nnz) % folds

    splits: list[tuple[SparseRatingMatrix, SparseRatingMatrix]] = []
    for fold in range(folds):
        in_test = assignment == fold
        splits.append(
            (
                _subset(coo.row, coo.col, coo.data, ~in_test, matrix.shape),
                _subset(coo.row, coo.col, coo.data, in_test, matrix.shape),
            )
        )
    return splits
