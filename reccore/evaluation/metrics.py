"""Per-user ranking metrics and rating error losses."""

from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np


def _dcg(relevance: Sequence[int]) -> float:
    return sum(
        rel / np.log2(idx + 2) for idx, rel in enumerate(relevance)
    )


def hits_at(ranked: Sequence[int], ground_truth: set[int], cutoff: int) -> int:
    return sum(1 for item in ranked[:cutoff] if item in ground_truth)


def precision_at(ranked: Sequence[int], ground_truth: set[int], cutoff: int) -> float:
    """Hits in the top ``cutoff`` divided by the number of items actually listed there."""
    listed = min(cutoff, len(ranked))
    if listed == 0:
        return 0.0
    return hits_at(ranked, ground_truth, cutoff) / listed


def recall_at(ranked: Sequence[int], ground_truth: set[int], cutoff: int) -> float:
    if not ground_truth:
        return 0.0
    return hits_at(ranked, ground_truth, cutoff) / len(ground_truth)


def average_precision(ranked: Sequence[int], ground_truth: set[int]) -> float:
    hits = 0
    sum_precision = 0.0
    for idx, item in enumerate(ranked, start=1):
        if item in ground_truth:
            hits += 1
            sum_precision += hits / idx
    if hits == 0:
        return 0.0
    return sum_precision / len(ground_truth)


def reciprocal_rank(ranked: Sequence[int], ground_truth: set[int]) -> float:
    for idx, item in enumerate(ranked, start=1):
        if item in ground_truth:
            return 1.0 / idx
    return 0.0


def ndcg(ranked: Sequence[int], ground_truth: set[int]) -> float:
    """DCG of the list over the ideal DCG of ranking every positive first."""
    ideal = _dcg([1] * len(ground_truth))
    if ideal == 0:
        return 0.0
    return _dcg([1 if item in ground_truth else 0 for item in ranked]) / ideal


def auc(ranked: Sequence[int], ground_truth: set[int], num_dropped: int) -> float:
    """
    Fraction of (positive, negative) pairs ordered correctly.

    Parameters
    ----------
    ranked:
        Recommended items, best first.
    ground_truth:
        Held-out positive items.
    num_dropped:
        Candidates that were not ranked; they count as placed below the list.
    """
    num_relevant = sum(1 for item in ranked if item in ground_truth)
    num_eval_items = len(ranked) + num_dropped
    num_eval_pairs = (num_eval_items - num_relevant) * num_relevant
    if num_eval_pairs < 0:
        raise ValueError("Number of evaluation pairs cannot be negative.")
    if num_eval_pairs == 0:
        return 0.5

    num_correct_pairs = 0
    hits = 0
    for item in ranked:
        if item in ground_truth:
            hits += 1
        else:
            num_correct_pairs += hits

    ranked_set = set(ranked)
    num_missed = sum(1 for item in ground_truth if item not in ranked_set)
    num_correct_pairs += hits * (num_eval_items - len(ranked) - num_missed)
    return num_correct_pairs / num_eval_pairs


def asymmetric_loss(rate: float, pred: float, min_rate: float, max_rate: float) -> float:
    """
    Loss that is zero when prediction and truth fall on the same side of the
    scale midpoint, ``rate - pred`` for a missed positive and
    ``2 * (pred - rate)`` for a false positive.
    """
    median = (min_rate + max_rate) / 2.0
    if rate > median and pred <= median:
        return rate - pred
    if rate <= median and pred > median:
        return 2.0 * (pred - rate)
    return 0.0


def mean_or_nan(values: Iterable[float]) -> float:
    """Arithmetic mean of the defined values; ``nan`` when there are none."""
    arr = np.asarray([v for v in values if not np.isnan(v)], dtype=np.float64)
    if arr.size == 0:
        return float("nan")
    return float(np.mean(arr))
