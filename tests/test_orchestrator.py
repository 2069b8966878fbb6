from pathlib import Path

import pytest

from reccore.data import RatingScale, SparseRatingMatrix
from reccore.errors import ConfigurationError, LifecycleError, ModelFailure
from reccore.evaluation import Measure
from reccore.models import (
    GlobalAverage,
    ModelContext,
    ModelState,
    Recommender,
    advance,
    check_binary,
)
from reccore.pipelines import execute, run_experiment
from reccore.utils import EvaluationConfig

FIVE_STARS = RatingScale((1.0, 2.0, 3.0, 4.0, 5.0))


def _context(settings=None, fold=0) -> ModelContext:
    shape = (2, 3)
    return ModelContext(
        config=EvaluationConfig.from_mapping(settings or {}),
        train_matrix=SparseRatingMatrix.from_triples([0, 0, 1], [0, 1, 0], [5.0, 3.0, 4.0], shape=shape),
        test_matrix=SparseRatingMatrix.from_triples([1], [1], [5.0], shape=shape),
        scale=FIVE_STARS,
        fold=fold,
    )


class Recording(Recommender):
    def __init__(self, context, fail_in=None):
        self.context = context
        self.name = "Recording"
        self.calls = []
        self.fail_in = fail_in

    def _hook(self, name):
        self.calls.append(name)
        if name == self.fail_in:
            raise RuntimeError(f"boom in {name}")

    def initialize(self):
        self._hook("initialize")

    def train(self):
        self._hook("train")

    def cleanup(self):
        self._hook("cleanup")

    def persist(self):
        self._hook("persist")

    def restore(self):
        self._hook("restore")


class NeedsBinary(GlobalAverage):
    def initialize(self):
        check_binary(self.context.config)


def test_lifecycle_runs_in_order_and_reports():
    model = Recording(_context(fold=2))

    result = execute(model)

    assert model.calls == ["initialize", "train", "cleanup"]
    assert result.succeeded
    assert result.state is ModelState.CLEANED_UP
    assert result.measures[Measure.MAE] == pytest.approx(1.0)
    assert result.measures[Measure.TrainTime] >= 0.0
    assert result.summary.startswith("Recording fold [2]: 1.000000,1.000000,0.250000,0.000000\tTime: ")
    assert result.summary.endswith("\tView: all")


def test_training_failure_is_returned_not_raised():
    model = Recording(_context(), fail_in="train")

    result = execute(model)

    assert not result.succeeded
    assert isinstance(result.error, ModelFailure)
    assert isinstance(result.error.cause, RuntimeError)
    assert result.state is ModelState.INITIALIZED
    assert model.calls == ["initialize", "train"]
    assert result.measures == {}


def test_configuration_error_propagates():
    with pytest.raises(ConfigurationError):
        execute(NeedsBinary(_context()))


def test_save_and_load_flags():
    saving = Recording(_context({"is.save.model": True}))
    execute(saving)
    assert saving.calls == ["initialize", "train", "cleanup", "persist"]

    loading = Recording(_context({"is.load.model": True, "is.save.model": True}))
    result = execute(loading)
    assert loading.calls == ["restore"]
    assert result.state is ModelState.TRAINED


def test_ranking_summary_reports_ignored_items():
    model = GlobalAverage(_context({"is.ranking.pred": True, "num.ignore.items": 0}))

    result = execute(model)

    info = result.summary.split(": ", 1)[1].split("\t")[0]
    assert len(info.split(",")) == 9
    assert info.endswith(", 0")


def test_lifecycle_cannot_move_backwards():
    assert advance(ModelState.UNINITIALIZED, ModelState.INITIALIZED) is ModelState.INITIALIZED
    with pytest.raises(LifecycleError):
        advance(ModelState.TRAINED, ModelState.INITIALIZED)
    with pytest.raises(LifecycleError):
        advance(ModelState.TRAINED, ModelState.TRAINED)


def _write_ratings(path: Path) -> Path:
    lines = [
        f"u{user} i{item} {1 + (user * 3 + item) % 5}"
        for user in range(8)
        for item in range(6)
        if (user + item) % 4
    ]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_run_experiment_cross_validation(tmp_path: Path):
    config = {
        "recommender": "ItemKNN",
        "data": {"path": str(_write_ratings(tmp_path / "ratings.txt"))},
        "evaluation": {"setup": "cv", "folds": 3},
        "output.dir": str(tmp_path / "out"),
        "is.prediction.out": True,
    }

    results = run_experiment(config)

    assert [result.fold for result in results] == [1, 2, 3]
    assert all(result.succeeded for result in results)
    assert (tmp_path / "out" / "ItemKNN-prediction-3.txt").exists()


def test_run_experiment_ratio_split_ranking(tmp_path: Path):
    config = {
        "recommender": "MostPopular",
        "data": {"path": str(_write_ratings(tmp_path / "ratings.txt"))},
        "evaluation": {"setup": "ratio", "ratio": 0.75},
        "is.ranking.pred": True,
        "is.diverse.used": True,
        "num.reclist.len": 5,
    }

    (result,) = run_experiment(config)

    assert result.fold == 0
    assert result.succeeded
    assert 0.0 <= result.measures[Measure.Pre5] <= 1.0


def test_run_experiment_requires_data_path():
    with pytest.raises(ConfigurationError):
        run_experiment({"recommender": "GlobalAverage"})


def test_run_experiment_rejects_unknown_setup(tmp_path: Path):
    config = {
        "data": {"path": str(_write_ratings(tmp_path / "ratings.txt"))},
        "evaluation": {"setup": "bootstrap"},
    }
    with pytest.raises(ConfigurationError):
        run_experiment(config)
