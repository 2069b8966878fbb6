"""Tabulation of measures across runs (e.g. cross-validation folds)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

import pandas as pd

from reccore.evaluation.measures import Measure

if TYPE_CHECKING:  # pragma: no cover
    from reccore.pipelines.orchestrator import RunResult


def measures_frame(results: Sequence["RunResult"]) -> pd.DataFrame:
    """One row per successful run, indexed by fold, one column per measure."""
    rows = [
        {"fold": result.fold, **{measure.value: value for measure, value in result.measures.items()}}
        for result in results
        if result.succeeded
    ]
    if not rows:
        return pd.DataFrame(columns=["fold"]).set_index("fold")
    return pd.DataFrame(rows).set_index("fold").sort_index()


def average_measures(results: Sequence["RunResult"]) -> dict[Measure, float]:
    """Mean of every measure over the successful runs (NaN entries skipped)."""
    frame = measures_frame(results)
    if frame.empty:
        return {}
    means = frame.mean(axis=0, skipna=True)
    return {Measure(name): float(value) for name, value in means.items()}
