from pathlib import Path

import pytest

from reccore.errors import ConfigurationError
from reccore.models import check_binary
from reccore.utils import (
    EvaluationConfig,
    clone_config,
    get_by_dotted_path,
    load_config,
    lookup,
    set_by_dotted_path,
)


def test_load_config_reads_yaml(tmp_path: Path) -> None:
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "similarity: cos\nis.ranking.pred: true\nmf:\n  factors: 8\n", encoding="utf-8"
    )

    config = load_config(config_file)

    assert config["similarity"] == "cos"
    assert config["is.ranking.pred"] is True
    assert config["mf"]["factors"] == 8


def test_load_config_missing_file() -> None:
    with pytest.raises(FileNotFoundError):
        load_config(Path("does_not_exist.yaml"))


def test_clone_and_set_by_dotted_path() -> None:
    original = {"mf": {"learn_rate": 0.01}}
    cloned = clone_config(original)

    set_by_dotted_path(cloned, "mf.learn_rate", 0.05)
    set_by_dotted_path(cloned, "knn.neighbors", 30)

    assert original["mf"]["learn_rate"] == 0.01  # original untouched
    assert cloned["mf"]["learn_rate"] == 0.05
    assert get_by_dotted_path(cloned, "knn.neighbors") == 30


def test_lookup_prefers_flat_keys_then_nested_paths() -> None:
    config = {"num.shrinkage": 5, "num": {"shrinkage": 99, "ignore": {"items": 3}}}

    assert lookup(config, "num.shrinkage") == 5
    assert lookup(config, "num.ignore.items") == 3
    assert lookup(config, "num.reclist.len", -1) == -1


def test_evaluation_config_defaults() -> None:
    config = EvaluationConfig.from_mapping({})

    assert config.is_ranking is False
    assert config.view == "all"
    assert config.similarity == "pcc"
    assert config.num_recs == -1
    assert config.binary_threshold == -1.0
    assert config.output_dir == Path("Results")


def test_evaluation_config_parses_switches_and_numbers() -> None:
    config = EvaluationConfig.from_mapping(
        {
            "is.ranking.pred": "on",
            "is.diverse.used": "off",
            "rating.pred.view": "Cold-Start",
            "num.reclist.len": "10",
            "similarity": "COS-Binary",
            "knn": {"neighbors": 15},
        }
    )

    assert config.is_ranking is True
    assert config.is_diverse_used is False
    assert config.view == "cold-start"
    assert config.num_recs == 10
    assert config.similarity == "cos-binary"
    assert config.get("knn.neighbors") == 15
    assert config.get("mf.factors", 10) == 10


def test_evaluation_config_is_read_only() -> None:
    config = EvaluationConfig.from_mapping({"similarity": "cos"})

    with pytest.raises(AttributeError):
        config.similarity = "pcc"  # type: ignore[misc]
    with pytest.raises(TypeError):
        config.params["similarity"] = "pcc"  # type: ignore[index]


def test_unknown_similarity_falls_back_to_pcc() -> None:
    assert EvaluationConfig.from_mapping({"similarity": "manhattan"}).similarity == "pcc"


def test_invalid_view_and_values_raise_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        EvaluationConfig.from_mapping({"rating.pred.view": "warm"})
    with pytest.raises(ConfigurationError):
        EvaluationConfig.from_mapping({"num.reclist.len": "many"})
    with pytest.raises(ConfigurationError):
        EvaluationConfig.from_mapping({"is.ranking.pred": "maybe"})


def test_check_binary_requires_non_negative_threshold() -> None:
    check_binary(EvaluationConfig.from_mapping({"val.binary.threshold": 0}))

    with pytest.raises(ConfigurationError):
        check_binary(EvaluationConfig.from_mapping({"val.binary.threshold": -1}))
