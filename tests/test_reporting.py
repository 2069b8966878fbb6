import math
from pathlib import Path

import pytest

from reccore.errors import ModelFailure
from reccore.evaluation import Measure
from reccore.models import ModelState
from reccore.pipelines import RunResult
from reccore.reporting import average_measures, measures_frame, save_loss_curves


def _result(fold, mae, rmse):
    return RunResult(
        algorithm="ItemKNN",
        fold=fold,
        state=ModelState.CLEANED_UP,
        measures={Measure.MAE: mae, Measure.RMSE: rmse},
    )


def test_save_loss_curves_writes_image(tmp_path: Path):
    target = tmp_path / "plots" / "loss.png"

    path = save_loss_curves({"Train": [1.0, 0.7, 0.5]}, output_path=target)

    assert path == target
    assert target.stat().st_size > 0


def test_save_loss_curves_rejects_empty_history(tmp_path: Path):
    with pytest.raises(ValueError):
        save_loss_curves({"Train": []}, output_path=tmp_path / "loss.png")


def test_measures_frame_skips_failed_runs():
    failed = RunResult(
        algorithm="ItemKNN",
        fold=3,
        state=ModelState.INITIALIZED,
        error=ModelFailure("ItemKNN", 3, RuntimeError("boom")),
    )

    frame = measures_frame([_result(2, 0.8, 1.1), _result(1, 0.6, 0.9), failed])

    assert list(frame.index) == [1, 2]
    assert frame.loc[2, "MAE"] == pytest.approx(0.8)


def test_average_measures_ignores_nan():
    averaged = average_measures([_result(1, 0.6, float("nan")), _result(2, 0.8, 1.0)])

    assert averaged[Measure.MAE] == pytest.approx(0.7)
    assert averaged[Measure.RMSE] == pytest.approx(1.0)
    assert average_measures([]) == {}
    assert not math.isnan(averaged[Measure.MAE])
