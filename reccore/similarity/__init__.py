"""Similarity measures, correlation matrices, and diversity scoring."""

from .engine import SimilarityEngine, SymmMatrix  # noqa: F401
from .measures import (  # noqa: F401
    constrained_pearson,
    cosine,
    extended_jaccard,
    mean_squared_difference,
    pearson,
    shrink,
)
