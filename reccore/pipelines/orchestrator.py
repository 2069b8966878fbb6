"""
Run orchestration.

:func:`execute` drives one recommender through initialize, train and cleanup,
evaluates it in rating or ranking mode and reports the measures. The
experiment helpers split a rating store into folds, give every fold its own
model instance, and aggregate the fold results.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping

from loguru import logger

from reccore.data import RatingStore, kfold_splits, load_rating_store, split_by_ratio
from reccore.data.loaders import DEFAULT_COLUMNS, DEFAULT_SEPARATOR
from reccore.data.sparse import SparseRatingMatrix
from reccore.errors import ConfigurationError, ModelFailure
from reccore.evaluation import Measure, RankingEvaluator, RatingEvaluator, format_summary
from reccore.models import (
    ModelContext,
    ModelState,
    Recommender,
    advance,
    algorithm_name,
    build_recommender,
)
from reccore.reporting import average_measures, save_loss_curves
from reccore.similarity import SymmMatrix
from reccore.utils import EvaluationConfig, lookup, seed_everything

ModelFactory = Callable[[ModelContext], Recommender]


@dataclass
class RunResult:
    algorithm: str
    fold: int
    state: ModelState
    measures: dict[Measure, float] = field(default_factory=dict)
    summary: str | None = None
    error: ModelFailure | None = None
    loss_plot_path: Path | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


def _diversity_cache(model: Recommender) -> SymmMatrix:
    """Reuse an item-item correlation matrix the model already built, if any."""
    existing = getattr(model, "correlations", None)
    if isinstance(existing, SymmMatrix):
        return existing
    return SymmMatrix()


def _plot_loss(model: Recommender, context: ModelContext, algorithm: str) -> Path | None:
    history = getattr(model, "history", None)
    losses = list(getattr(history, "train_loss", []) or [])
    if not losses:
        logger.warning("{}{} recorded no training loss; skipping plot.", algorithm, context.fold_info)
        return None
    suffix = f"-{context.fold}" if context.fold > 0 else ""
    return save_loss_curves(
        {"Train": losses},
        output_path=context.config.output_dir / f"{algorithm}-loss{suffix}.png",
        title=f"{algorithm}{context.fold_info} training loss",
    )


def execute(model: Recommender) -> RunResult:
    """
    Train (or restore) and evaluate one recommender.

    Any exception raised by the model aborts the run and is returned as a
    :class:`ModelFailure` inside the result. ``ConfigurationError`` is fatal and
    propagates to the caller.
    """
    context = model.context
    config = context.config
    algorithm = algorithm_name(model)
    state = ModelState.UNINITIALIZED

    try:
        start = time.perf_counter()
        if config.is_load_model:
            model.restore()
            state = advance(state, ModelState.TRAINED)
        else:
            model.initialize()
            state = advance(state, ModelState.INITIALIZED)
            logger.debug("{}{}: building model ...", algorithm, context.fold_info)
            model.train()
            state = advance(state, ModelState.TRAINED)
            model.cleanup()
            state = advance(state, ModelState.CLEANED_UP)
        train_ms = (time.perf_counter() - start) * 1000.0

        if config.verbose:
            logger.debug("{}{} evaluate test data ... ", algorithm, context.fold_info)
        if config.is_ranking:
            cache = _diversity_cache(model) if config.is_diverse_used else None
            measures = RankingEvaluator(context).evaluate(model, cache)
        else:
            measures = RatingEvaluator(context).evaluate(model)
        test_ms = (time.perf_counter() - start) * 1000.0 - train_ms

        measures[Measure.TrainTime] = train_ms
        measures[Measure.TestTime] = test_ms
        summary = format_summary(algorithm, context.fold, measures, config)
        logger.info(summary)

        if config.is_save_model and not config.is_load_model:
            model.persist()

        loss_plot_path = _plot_loss(model, context, algorithm) if config.is_plot_loss else None
    except ConfigurationError:
        raise
    except Exception as exc:
        failure = ModelFailure(algorithm, context.fold, exc)
        logger.opt(exception=exc).error("{}", failure)
        return RunResult(algorithm=algorithm, fold=context.fold, state=state, error=failure)

    return RunResult(
        algorithm=algorithm,
        fold=context.fold,
        state=state,
        measures=measures,
        summary=summary,
        loss_plot_path=loss_plot_path,
    )


def run_fold(
    factory: ModelFactory,
    config: EvaluationConfig,
    train: SparseRatingMatrix,
    test: SparseRatingMatrix,
    *,
    store: RatingStore,
    fold: int = 0,
) -> RunResult:
    context = ModelContext(
        config=config,
        train_matrix=train,
        test_matrix=test,
        scale=store.scale,
        fold=fold,
        store=store,
    )
    return execute(factory(context))


def run_cross_validation(
    factory: ModelFactory,
    config: EvaluationConfig,
    store: RatingStore,
    *,
    folds: int = 5,
    seed: int | None = None,
) -> list[RunResult]:
    """Evaluate a fresh model instance on each of ``folds`` folds, in order."""
    results: list[RunResult] = []
    for fold, (train, test) in enumerate(kfold_splits(store.matrix, folds, seed=seed), start=1):
        results.append(run_fold(factory, config, train, test, store=store, fold=fold))
    return results


def run_experiment(raw_config: Mapping[str, Any]) -> list[RunResult]:
    """
    Load ratings, split them, and evaluate the configured recommender.

    Returns one result per fold (or a single result for a ratio split). For
    cross-validation the averaged measures are logged as a final summary.
    """
    config = EvaluationConfig.from_mapping(raw_config)
    seed = seed_everything(config.seed)

    data_path = lookup(raw_config, "data.path")
    if not data_path:
        raise ConfigurationError("data.path is required to run an experiment.")
    store = load_rating_store(
        Path(str(data_path)),
        sep=str(lookup(raw_config, "data.sep", DEFAULT_SEPARATOR)),
        columns=tuple(lookup(raw_config, "data.columns", DEFAULT_COLUMNS)),
        has_header=bool(lookup(raw_config, "data.has_header", False)),
        binary_threshold=config.binary_threshold,
    )

    recommender = str(lookup(raw_config, "recommender", "GlobalAverage"))

    def factory(context: ModelContext) -> Recommender:
        return build_recommender(recommender, context)

    setup = str(lookup(raw_config, "evaluation.setup", "cv")).lower()
    if setup == "ratio":
        ratio = float(lookup(raw_config, "evaluation.ratio", 0.8))
        train, test = split_by_ratio(store.matrix, ratio, seed=seed)
        return [run_fold(factory, config, train, test, store=store)]
    if setup != "cv":
        raise ConfigurationError(f"evaluation.setup={setup!r} must be 'cv' or 'ratio'")

    folds = int(lookup(raw_config, "evaluation.folds", 5))
    results = run_cross_validation(factory, config, store, folds=folds, seed=seed)
    failed = [result for result in results if not result.succeeded]
    if failed:
        logger.warning("{} of {} folds failed.", len(failed), len(results))

    averaged = average_measures(results)
    if averaged:
        logger.info(format_summary(results[0].algorithm, 0, averaged, config))
    return results
