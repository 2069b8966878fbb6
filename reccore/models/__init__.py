"""Model contract and reference recommender implementations."""

from __future__ import annotations

from typing import Callable

from reccore.errors import ConfigurationError

from .baselines import GlobalAverage, MostPopular  # noqa: F401
from .contract import (  # noqa: F401
    ModelContext,
    ModelState,
    Recommender,
    advance,
    algorithm_name,
    bounded_prediction,
    check_binary,
)
from .factorization import BiasedMF, BiasedMFModule  # noqa: F401
from .neighborhood import ItemKNN  # noqa: F401

RECOMMENDERS: dict[str, Callable[[ModelContext], Recommender]] = {
    "globalaverage": GlobalAverage,
    "mostpopular": MostPopular,
    "itemknn": ItemKNN,
    "biasedmf": BiasedMF,
}


def build_recommender(name: str, context: ModelContext) -> Recommender:
    """Instantiate a registered recommender by (case-insensitive) name."""
    try:
        factory = RECOMMENDERS[name.lower()]
    except KeyError as exc:
        raise ConfigurationError(
            f"Unsupported recommender '{name}'. Choose from: {', '.join(sorted(RECOMMENDERS))}"
        ) from exc
    return factory(context)
