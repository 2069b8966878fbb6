"""Prediction-error evaluation over the test matrix."""

from __future__ import annotations

import math
from pathlib import Path

from loguru import logger

from reccore.models.contract import ModelContext, Recommender, algorithm_name, bounded_prediction

from .measures import Measure
from .metrics import asymmetric_loss

PREDICTION_HEADER = "# userId itemId rating prediction"
COLD_START_THRESHOLD = 5


class PredictionWriter:
    """Buffered writer for the per-entry prediction log."""

    def __init__(self, path: Path, *, batch_size: int = 1000) -> None:
        self.path = path
        self.batch_size = batch_size
        self._buffer: list[str] = [PREDICTION_HEADER]
        path.parent.mkdir(parents=True, exist_ok=True)
        # start from an empty file for this algorithm and fold
        path.write_text("", encoding="utf-8")

    def add(self, user_id: str, item_id: str, rating: float, prediction: float) -> None:
        self._buffer.append(f"{user_id} {item_id} {rating} {round(prediction, 6)}")
        if len(self._buffer) >= self.batch_size:
            self.flush()

    def flush(self) -> None:
        if not self._buffer:
            return
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write("\n".join(self._buffer))
            handle.write("\n")
        self._buffer.clear()


def prediction_path(output_dir: Path, algorithm: str, fold: int) -> Path:
    suffix = f"-{fold}" if fold > 0 else ""
    return output_dir / f"{algorithm}-prediction{suffix}.txt"


class RatingEvaluator:
    """Accumulates MAE, RMSE, NMAE and asymmetric loss of bounded predictions."""

    def __init__(self, context: ModelContext) -> None:
        self.context = context

    def is_testable(self, user: int, item: int) -> bool:
        if self.context.config.view == "cold-start":
            return self.context.train_matrix.row_size(user) < COLD_START_THRESHOLD
        return True

    def evaluate(self, model: Recommender) -> dict[Measure, float]:
        context = self.context
        config = context.config
        scale = context.scale
        algorithm = algorithm_name(model)

        writer: PredictionWriter | None = None
        if config.is_prediction_out:
            writer = PredictionWriter(prediction_path(config.output_dir, algorithm, context.fold))

        sum_abs = 0.0
        sum_sq = 0.0
        sum_asymm = 0.0
        count = 0
        for user, item, rate in context.test_matrix.entries():
            if rate <= 0 or not self.is_testable(user, item):
                continue

            pred = bounded_prediction(model, user, item)
            if math.isnan(pred):
                continue

            err = rate - pred
            sum_abs += abs(err)
            sum_sq += err * err
            sum_asymm += asymmetric_loss(rate, pred, scale.min_rate, scale.max_rate)
            count += 1

            if writer is not None:
                writer.add(self._user_id(user), self._item_id(item), rate, pred)

        if writer is not None:
            writer.flush()
            logger.debug(
                "{}{} has written rating predictions to {}",
                algorithm,
                context.fold_info,
                writer.path,
            )

        if count == 0:
            logger.warning("{}{} produced no testable predictions.", algorithm, context.fold_info)
            nan = float("nan")
            return {Measure.MAE: nan, Measure.RMSE: nan, Measure.NMAE: nan, Measure.ASYMM: nan}

        mae = sum_abs / count
        return {
            Measure.MAE: mae,
            Measure.RMSE: math.sqrt(sum_sq / count),
            Measure.NMAE: mae / scale.span if scale.span > 0 else float("nan"),
            Measure.ASYMM: sum_asymm / count,
        }

    def _user_id(self, user: int) -> str:
        store = self.context.store
        return store.user_id(user) if store is not None else str(user)

    def _item_id(self, item: int) -> str:
        store = self.context.store
        return store.item_id(item) if store is not None else str(item)
