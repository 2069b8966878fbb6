"""Item-based k-nearest-neighbour recommender built on the similarity engine."""

from __future__ import annotations

import numpy as np
from loguru import logger

from reccore.similarity import SimilarityEngine, SymmMatrix

from .contract import ModelContext, Recommender


class ItemKNN(Recommender):
    """
    Predicts ``mean_i + sum(sim * (r_uj - mean_j)) / sum(|sim|)`` over the
    ``knn.neighbors`` most similar items the user has rated.

    Only positively correlated neighbours are used. Without any such neighbour
    the item mean is returned.
    """

    def __init__(self, context: ModelContext, *, neighbors: int | None = None) -> None:
        self.context = context
        self.name = "ItemKNN"
        self.neighbors = int(
            neighbors if neighbors is not None else context.config.get("knn.neighbors", 20)
        )
        self.engine = SimilarityEngine(context.config, context.scale)
        self.correlations: SymmMatrix | None = None
        self.item_means: np.ndarray | None = None

    def initialize(self) -> None:
        train = self.context.train_matrix
        csc = train.csr.tocsc()
        counts = np.diff(csc.indptr)
        sums = np.asarray(csc.sum(axis=0)).ravel()
        self.item_means = np.where(
            counts > 0, sums / np.maximum(counts, 1), self.context.global_mean
        )

    def train(self) -> None:
        self.correlations = self.engine.build_matrix(
            self.context.train_matrix, "item", cache=self.correlations
        )
        logger.debug(
            "{}{} holds {} item correlations",
            self.name,
            self.context.fold_info,
            len(self.correlations),
        )

    def predict(self, user: int, item: int) -> float:
        if self.correlations is None or self.item_means is None:
            return self.context.global_mean

        rated = self.context.train_matrix.row(user)
        sims = self.correlations.row(item)
        candidates: list[tuple[float, int, float]] = []
        for j, rating in rated:
            sim = sims.get(j, 0.0)
            if j != item and sim > 0:
                candidates.append((sim, j, rating))
        if not candidates:
            return float(self.item_means[item])

        candidates.sort(key=lambda entry: (-entry[0], entry[1]))
        if self.neighbors > 0:
            candidates = candidates[: self.neighbors]

        numerator = sum(sim * (rating - self.item_means[j]) for sim, j, rating in candidates)
        denominator = sum(abs(sim) for sim, _, _ in candidates)
        return float(self.item_means[item] + numerator / denominator)
