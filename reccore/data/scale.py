"""Rating scale description shared by predictors and error metrics."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from reccore.errors import ConfigurationError


@dataclass(frozen=True)
class RatingScale:
    """Strictly increasing rating levels, e.g. ``(1, 2, 3, 4, 5)``."""

    levels: tuple[float, ...]

    def __post_init__(self) -> None:
        if not self.levels:
            raise ConfigurationError("Rating scale must contain at least one level.")
        for low, high in zip(self.levels, self.levels[1:]):
            if not low < high:
                raise ConfigurationError(
                    f"Rating scale levels must be strictly increasing: {self.levels}"
                )

    @classmethod
    def from_ratings(cls, ratings: Iterable[float]) -> "RatingScale":
        return cls(tuple(sorted({float(r) for r in ratings})))

    @property
    def min_rate(self) -> float:
        return self.levels[0]

    @property
    def max_rate(self) -> float:
        return self.levels[-1]

    @property
    def midpoint(self) -> float:
        return (self.min_rate + self.max_rate) / 2.0

    @property
    def span(self) -> float:
        return self.max_rate - self.min_rate

    def clamp(self, value: float) -> float:
        return min(max(value, self.min_rate), self.max_rate)

    def normalize(self, rate: float) -> float:
        """Map a rating onto [0, 1]."""
        return (rate - self.min_rate) / self.span

    def denormalize(self, value: float) -> float:
        """Map a [0, 1] score back onto the rating range."""
        return self.min_rate + value * self.span
