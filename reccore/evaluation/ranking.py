"""Top-K item ranking evaluation against held-out test items."""

from __future__ import annotations

import math
from typing import Iterable

from loguru import logger

from reccore.models.contract import ModelContext, Recommender, algorithm_name
from reccore.similarity import SimilarityEngine, SymmMatrix

from .measures import Measure
from .metrics import (
    auc,
    average_precision,
    mean_or_nan,
    ndcg,
    precision_at,
    recall_at,
    reciprocal_rank,
)


class RankingEvaluator:
    """
    Ranks every unrated candidate item per test user and scores the list.

    Candidates are the items seen in training minus the ``num.ignore.items``
    most popular ones. Ties in score, and in popularity, go to the smaller
    item id.
    """

    def __init__(self, context: ModelContext, engine: SimilarityEngine | None = None) -> None:
        self.context = context
        self.engine = engine or SimilarityEngine(context.config, context.scale)

    def candidate_items(self) -> set[int]:
        train = self.context.train_matrix
        candidates = set(train.columns())
        num_ignore = self.context.config.num_ignore
        if num_ignore > 0:
            by_popularity = sorted(candidates, key=lambda j: (-train.column_size(j), j))
            candidates.difference_update(by_popularity[:num_ignore])
        return candidates

    def rank_items(
        self,
        model: Recommender,
        user: int,
        rated: set[int],
        candidates: Iterable[int],
    ) -> list[tuple[int, float]]:
        """Score unrated candidates, best first, truncated to ``num.reclist.len``."""
        scored: list[tuple[int, float]] = []
        for item in candidates:
            if item in rated:
                continue
            score = model.ranking_score(user, item)
            if not math.isnan(score):
                scored.append((item, score))

        scored.sort(key=lambda entry: (-entry[1], entry[0]))
        num_recs = self.context.config.num_recs
        if num_recs > 0:
            scored = scored[:num_recs]
        return scored

    def evaluate(
        self,
        model: Recommender,
        cache: SymmMatrix | None = None,
    ) -> dict[Measure, float]:
        context = self.context
        config = context.config
        train = context.train_matrix
        test = context.test_matrix
        diverse = config.is_diverse_used
        if diverse and cache is None:
            cache = SymmMatrix()

        candidates = self.candidate_items()
        ordered_candidates = sorted(candidates)
        if config.verbose:
            logger.debug(
                "{}{} has candidate items: {}",
                algorithm_name(model),
                context.fold_info,
                len(candidates),
            )

        per_metric: dict[Measure, list[float]] = {
            measure: []
            for measure in (
                Measure.Pre5,
                Measure.Pre10,
                Measure.Rec5,
                Measure.Rec10,
                Measure.AUC,
                Measure.MAP,
                Measure.NDCG,
                Measure.MRR,
                Measure.D5,
                Measure.D10,
            )
        }

        for user in test.rows():
            positives = {item for item in test.row(user).index_list() if item in candidates}
            if not positives:
                continue

            rated = set(train.row(user).index_list())
            num_cand = len(candidates) - sum(1 for item in rated if item in candidates)

            ranked = [item for item, _ in self.rank_items(model, user, rated, ordered_candidates)]
            if not ranked:
                continue

            per_metric[Measure.AUC].append(auc(ranked, positives, num_cand - len(ranked)))
            per_metric[Measure.MAP].append(average_precision(ranked, positives))
            per_metric[Measure.NDCG].append(ndcg(ranked, positives))
            per_metric[Measure.MRR].append(reciprocal_rank(ranked, positives))
            per_metric[Measure.Pre5].append(precision_at(ranked, positives, 5))
            per_metric[Measure.Pre10].append(precision_at(ranked, positives, 10))
            per_metric[Measure.Rec5].append(recall_at(ranked, positives, 5))
            per_metric[Measure.Rec10].append(recall_at(ranked, positives, 10))

            if diverse:
                per_metric[Measure.D5].append(self.engine.diversity_at(ranked, 5, train, cache))
                per_metric[Measure.D10].append(self.engine.diversity_at(ranked, 10, train, cache))

        measures = {measure: mean_or_nan(values) for measure, values in per_metric.items()}
        if not diverse:
            measures[Measure.D5] = 0.0
            measures[Measure.D10] = 0.0
        return measures
