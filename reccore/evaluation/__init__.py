"""Rating-error and ranking-quality evaluators with their metric helpers."""

from .measures import Measure, format_eval_info, format_summary  # noqa: F401
from .metrics import (  # noqa: F401
    asymmetric_loss,
    auc,
    average_precision,
    mean_or_nan,
    ndcg,
    precision_at,
    recall_at,
    reciprocal_rank,
)
from .ranking import RankingEvaluator  # noqa: F401
from .rating import PredictionWriter, RatingEvaluator  # noqa: F401
