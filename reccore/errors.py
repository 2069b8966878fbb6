"""Exception types raised by the evaluation core."""

from __future__ import annotations


class ReccoreError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(ReccoreError):
    """Missing or invalid setup detected before any computation starts."""


class LifecycleError(ReccoreError):
    """A model lifecycle transition was attempted out of order."""


class ModelFailure(ReccoreError):
    """
    A recommender raised while initializing, training, cleaning up or predicting.

    The orchestrator catches the original exception, wraps it here and hands it
    back inside the run result instead of propagating it further.
    """

    def __init__(self, algorithm: str, fold: int, cause: BaseException) -> None:
        fold_info = f" fold [{fold}]" if fold > 0 else ""
        super().__init__(f"{algorithm}{fold_info} failed: {cause}")
        self.algorithm = algorithm
        self.fold = fold
        self.cause = cause
