"""Named evaluation results and their one-line summary format."""

from __future__ import annotations

from enum import Enum
from typing import Mapping

from reccore.utils.config import EvaluationConfig
from reccore.utils.runtime import format_duration


class Measure(str, Enum):
    MAE = "MAE"
    RMSE = "RMSE"
    NMAE = "NMAE"
    ASYMM = "ASYMM"
    D5 = "D5"
    D10 = "D10"
    Pre5 = "Pre5"
    Pre10 = "Pre10"
    Rec5 = "Rec5"
    Rec10 = "Rec10"
    MAP = "MAP"
    MRR = "MRR"
    NDCG = "NDCG"
    AUC = "AUC"
    TrainTime = "TrainTime"
    TestTime = "TestTime"


RATING_MEASURES = (Measure.MAE, Measure.RMSE, Measure.NMAE, Measure.ASYMM)
RANKING_MEASURES = (
    Measure.Pre5,
    Measure.Pre10,
    Measure.Rec5,
    Measure.Rec10,
    Measure.AUC,
    Measure.MAP,
    Measure.NDCG,
    Measure.MRR,
)
DIVERSITY_MEASURES = (Measure.D5, Measure.D10)


def format_eval_info(measures: Mapping[Measure, float], config: EvaluationConfig) -> str:
    """Comma-separated measure values in the fixed reporting order."""
    if config.is_ranking:
        names = RANKING_MEASURES
        if config.is_diverse_used:
            names = DIVERSITY_MEASURES + names
        values = ",".join(f"{measures[name]:.6f}" for name in names)
        return f"{values},{config.num_ignore:2d}"
    return ",".join(f"{measures[name]:.6f}" for name in RATING_MEASURES)


def format_summary(
    algorithm: str,
    fold: int,
    measures: Mapping[Measure, float],
    config: EvaluationConfig,
) -> str:
    fold_info = f" fold [{fold}]" if fold > 0 else ""
    line = (
        f"{algorithm}{fold_info}: {format_eval_info(measures, config)}"
        f"\tTime: {format_duration(measures[Measure.TrainTime])}, "
        f"{format_duration(measures[Measure.TestTime])}"
    )
    if not config.is_ranking:
        line += f"\tView: {config.view}"
    return line
