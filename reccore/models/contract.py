"""
The contract every recommender satisfies to be trained and evaluated.

A recommender is anything exposing the lifecycle hooks and scorers of
:class:`Recommender`. Implementations that subclass the protocol explicitly
inherit the default hook bodies; structural implementations must define every
hook themselves.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum
from functools import cached_property
from typing import Protocol

from reccore.data.loaders import RatingStore
from reccore.data.scale import RatingScale
from reccore.data.sparse import SparseRatingMatrix
from reccore.errors import ConfigurationError, LifecycleError
from reccore.utils.config import EvaluationConfig


@dataclass(frozen=True)
class ModelContext:
    """Everything a recommender and its evaluators share during one run."""

    config: EvaluationConfig
    train_matrix: SparseRatingMatrix
    test_matrix: SparseRatingMatrix
    scale: RatingScale
    fold: int = 0
    store: RatingStore | None = None

    @cached_property
    def global_mean(self) -> float:
        return self.train_matrix.mean()

    @property
    def fold_info(self) -> str:
        return f" fold [{self.fold}]" if self.fold > 0 else ""


class ModelState(IntEnum):
    UNINITIALIZED = 0
    INITIALIZED = 1
    TRAINED = 2
    CLEANED_UP = 3


def advance(current: ModelState, target: ModelState) -> ModelState:
    """Move forward in the lifecycle; going back or standing still is an error."""
    if target <= current:
        raise LifecycleError(f"Cannot move from {current.name} to {target.name}.")
    return target


class Recommender(Protocol):
    """
    Lifecycle hooks and scorers of a recommendation algorithm.

    Hooks run in the order ``initialize -> train -> cleanup``; ``persist`` and
    ``restore`` serialize learned parameters. The defaults describe a baseline
    that predicts the global training mean for every user-item pair.
    """

    context: ModelContext

    def initialize(self) -> None:
        """Allocate model-specific state; may read the training matrix."""

    def train(self) -> None:
        """Fit parameters. The baseline has nothing to learn."""

    def cleanup(self) -> None:
        """Release intermediate structures that prediction does not need."""

    def predict(self, user: int, item: int) -> float:
        """Unbounded rating prediction; ``nan`` when it cannot be computed."""
        return self.context.global_mean

    def ranking_score(self, user: int, item: int) -> float:
        """Score used to order candidate items; the raw prediction by default."""
        return self.predict(user, item)

    def persist(self) -> None:
        """Serialize learned parameters."""

    def restore(self) -> None:
        """Load parameters written by :meth:`persist`."""


def algorithm_name(model: Recommender) -> str:
    return getattr(model, "name", None) or type(model).__name__


def bounded_prediction(model: Recommender, user: int, item: int) -> float:
    """The model's prediction clamped to the rating scale (``nan`` passes through)."""
    pred = model.predict(user, item)
    if math.isnan(pred):
        return pred
    return model.context.scale.clamp(pred)


def check_binary(config: EvaluationConfig) -> None:
    """Fail fast for algorithms that only work on binarized ratings."""
    if config.binary_threshold < 0:
        raise ConfigurationError(
            f"val.binary.threshold={config.binary_threshold}, ratings must be "
            "binarized first! Try setting a non-negative value."
        )
