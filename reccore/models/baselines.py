"""Non-personalized reference recommenders."""

from __future__ import annotations

import numpy as np

from .contract import ModelContext, Recommender


class GlobalAverage(Recommender):
    """Predicts the training mean for every pair; all hooks keep their defaults."""

    def __init__(self, context: ModelContext) -> None:
        self.context = context
        self.name = "GlobalAverage"


class MostPopular(Recommender):
    """
    Ranks items by how many training ratings they received.

    Rating predictions fall back to the item mean (or the global mean for
    unseen items), while ``ranking_score`` uses the popularity count.
    """

    def __init__(self, context: ModelContext) -> None:
        self.context = context
        self.name = "MostPopular"
        self.item_counts: np.ndarray | None = None
        self.item_means: np.ndarray | None = None

    def train(self) -> None:
        csc = self.context.train_matrix.csr.tocsc()
        counts = np.diff(csc.indptr).astype(np.float64)
        sums = np.asarray(csc.sum(axis=0)).ravel()
        self.item_counts = counts
        self.item_means = np.where(
            counts > 0, sums / np.maximum(counts, 1), self.context.global_mean
        )

    def predict(self, user: int, item: int) -> float:
        if self.item_means is None or item >= self.item_means.shape[0]:
            return self.context.global_mean
        return float(self.item_means[item])

    def ranking_score(self, user: int, item: int) -> float:
        if self.item_counts is None or item >= self.item_counts.shape[0]:
            return 0.0
        return float(self.item_counts[item])
