"""Similarity measures over paired rating arrays.

Every function returns ``nan`` when the coefficient cannot be computed (no
pairs, or a zero denominator).
"""

from __future__ import annotations

import numpy as np

NAN = float("nan")


def safe_divide(numerator: float, denominator: float) -> float:
    if denominator == 0 or np.isnan(denominator):
        return NAN
    return float(numerator / denominator)


def cosine(a: np.ndarray, b: np.ndarray) -> float:
    if a.size == 0 or a.size != b.size:
        return NAN
    return safe_divide(np.dot(a, b), np.sqrt(np.dot(a, a)) * np.sqrt(np.dot(b, b)))


def mean_squared_difference(a: np.ndarray, b: np.ndarray) -> float:
    """``1 / (1 + mean((a - b)^2))``: 1.0 for identical ratings, towards 0 otherwise."""
    if a.size == 0 or a.size != b.size:
        return NAN
    diff = a - b
    return float(1.0 / (1.0 + np.mean(diff * diff)))


def constrained_pearson(a: np.ndarray, b: np.ndarray, median: float) -> float:
    """Pearson-style correlation centred on a fixed rating midpoint."""
    if a.size == 0 or a.size != b.size:
        return NAN
    da = a - median
    db = b - median
    return safe_divide(np.dot(da, db), np.sqrt(np.dot(da, da)) * np.sqrt(np.dot(db, db)))


def extended_jaccard(a: np.ndarray, b: np.ndarray) -> float:
    if a.size == 0 or a.size != b.size:
        return NAN
    inner = np.dot(a, b)
    return safe_divide(inner, np.dot(a, a) + np.dot(b, b) - inner)


def pearson(a: np.ndarray, b: np.ndarray) -> float:
    if a.size < 2 or a.size != b.size:
        return NAN
    da = a - a.mean()
    db = b - b.mean()
    return safe_divide(np.dot(da, db), np.sqrt(np.dot(da, da)) * np.sqrt(np.dot(db, db)))


def shrink(coefficient: float, overlap: int, shrinkage: int) -> float:
    """Discount a coefficient estimated from ``overlap`` co-observed pairs."""
    if shrinkage <= 0 or np.isnan(coefficient):
        return coefficient
    return coefficient * overlap / (overlap + shrinkage)
