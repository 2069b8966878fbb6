"""Configuration loading, manipulation, and the immutable evaluation settings."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, MutableMapping, Sequence

import yaml
from loguru import logger

from reccore.errors import ConfigurationError

SIMILARITY_METHODS = ("cos", "cos-binary", "msd", "cpc", "exjaccard", "pcc")
RATING_VIEWS = ("all", "cold-start")

_MISSING = object()


def load_config(config_path: Path) -> Mapping[str, Any]:
    """
    Parse a YAML configuration file into a nested mapping.

    Keys may be written either flat (``is.ranking.pred: true``) or nested
    (``is: {ranking: {pred: true}}``); :func:`lookup` resolves both forms.
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def clone_config(config: Mapping[str, Any]) -> dict[str, Any]:
    """Return a deep copy of the configuration mapping."""
    return copy.deepcopy(config)


def set_by_dotted_path(
    config: MutableMapping[str, Any],
    dotted_key: str,
    value: Any,
) -> None:
    """
    Assign a value inside a nested mapping using dotted-path syntax.

    Examples
    --------
    >>> cfg = {"mf": {"learn_rate": 0.01}}
    >>> set_by_dotted_path(cfg, "mf.learn_rate", 0.05)
    >>> cfg["mf"]["learn_rate"]
    0.05
    """
    keys: Sequence[str] = dotted_key.split(".")
    current: MutableMapping[str, Any] = config
    for key in keys[:-1]:
        if key not in current or not isinstance(current[key], MutableMapping):
            current[key] = {}
        current = current[key]  # type: ignore[assignment]
    current[keys[-1]] = value


def get_by_dotted_path(config: Mapping[str, Any], dotted_key: str, default: Any = None) -> Any:
    """Fetch a value from a nested mapping using dotted-path syntax."""
    current: Any = config
    for key in dotted_key.split("."):
        if not isinstance(current, Mapping) or key not in current:
            return default
        current = current[key]
    return current


def lookup(config: Mapping[str, Any], key: str, default: Any = None) -> Any:
    """Resolve ``key`` as a flat entry first, then as a nested dotted path."""
    if key in config:
        return config[key]
    return get_by_dotted_path(config, key, default)


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"on", "true", "yes", "1"}:
            return True
        if lowered in {"off", "false", "no", "0"}:
            return False
    if isinstance(value, int):
        return value != 0
    raise ConfigurationError(f"{key}={value!r} is not a boolean switch")


def _as_number(value: Any, key: str, kind: type) -> Any:
    try:
        return kind(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{key}={value!r} is not a valid {kind.__name__}") from exc


@dataclass(frozen=True)
class EvaluationConfig:
    """
    Read-only settings shared by every component of a run.

    Built once per process via :meth:`from_mapping` and passed explicitly into
    model, similarity and evaluator constructors.
    """

    is_ranking: bool = False
    is_diverse_used: bool = False
    binary_threshold: float = -1.0
    view: str = "all"
    num_recs: int = -1
    num_ignore: int = -1
    seed: int = 1
    similarity: str = "pcc"
    shrinkage: int = -1
    is_prediction_out: bool = False
    is_save_model: bool = False
    is_load_model: bool = False
    is_plot_loss: bool = False
    verbose: bool = False
    output_dir: Path = Path("Results")
    params: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "EvaluationConfig":
        def read(key: str, default: Any) -> Any:
            value = lookup(config, key, _MISSING)
            return default if value is _MISSING or value is None else value

        view = str(read("rating.pred.view", "all")).strip().lower()
        if view not in RATING_VIEWS:
            raise ConfigurationError(
                f"rating.pred.view={view!r} must be one of {', '.join(RATING_VIEWS)}"
            )

        similarity = str(read("similarity", "pcc")).strip().lower()
        if similarity not in SIMILARITY_METHODS:
            logger.warning(
                "Unknown similarity method '{}'; falling back to pcc.", similarity
            )
            similarity = "pcc"

        return cls(
            is_ranking=_as_bool(read("is.ranking.pred", False), "is.ranking.pred"),
            is_diverse_used=_as_bool(read("is.diverse.used", False), "is.diverse.used"),
            binary_threshold=_as_number(
                read("val.binary.threshold", -1.0), "val.binary.threshold", float
            ),
            view=view,
            num_recs=_as_number(read("num.reclist.len", -1), "num.reclist.len", int),
            num_ignore=_as_number(read("num.ignore.items", -1), "num.ignore.items", int),
            seed=_as_number(read("num.rand.seed", 1), "num.rand.seed", int),
            similarity=similarity,
            shrinkage=_as_number(read("num.shrinkage", -1), "num.shrinkage", int),
            is_prediction_out=_as_bool(read("is.prediction.out", False), "is.prediction.out"),
            is_save_model=_as_bool(read("is.save.model", False), "is.save.model"),
            is_load_model=_as_bool(read("is.load.model", False), "is.load.model"),
            is_plot_loss=_as_bool(read("is.plot.loss", False), "is.plot.loss"),
            verbose=_as_bool(read("is.verbose", False), "is.verbose"),
            output_dir=Path(str(read("output.dir", "Results"))),
            params=MappingProxyType(clone_config(config)),
        )

    def get(self, key: str, default: Any = None) -> Any:
        """Look up an algorithm-specific parameter such as ``knn.neighbors``."""
        value = lookup(self.params, key, _MISSING)
        return default if value is _MISSING or value is None else value
