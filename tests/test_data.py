from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from reccore.data import (
    IndexMapping,
    RatingDataset,
    RatingScale,
    SparseRatingMatrix,
    SparseVector,
    build_index_mapping,
    build_rating_store,
    kfold_splits,
    load_rating_store,
    split_by_ratio,
)
from reccore.errors import ConfigurationError


def _matrix() -> SparseRatingMatrix:
    # users 0..2, items 0..3
    return SparseRatingMatrix.from_triples(
        [0, 0, 1, 1, 2],
        [0, 2, 0, 1, 3],
        [5.0, 3.0, 4.0, 2.0, 1.0],
        shape=(3, 4),
    )


def test_build_index_mapping_preserves_order():
    mapping = build_index_mapping(["a", "b", "a", "c"])

    assert isinstance(mapping, IndexMapping)
    assert mapping.index_to_id == ["a", "b", "c"]
    assert mapping.id_to_index == {"a": 0, "b": 1, "c": 2}
    assert mapping.to_index("b") == 1
    assert mapping.to_id(2) == "c"


def test_index_mapping_missing_id():
    mapping = build_index_mapping(["x"])

    with pytest.raises(KeyError):
        mapping.to_index("y")


def test_sparse_vector_lookup_and_co_observed_values():
    a = SparseVector([3, 1, 5], [3.0, 1.0, 5.0])
    b = SparseVector.from_dict({5: 2.0, 1: 4.0, 7: 1.0})

    assert a.index_list() == [1, 3, 5]
    assert 3 in a and 4 not in a
    assert a.get(5) == 5.0
    assert a.get(4, default=-1.0) == -1.0

    left, right = a.co_observed(b)
    assert left.tolist() == [1.0, 5.0]
    assert right.tolist() == [4.0, 2.0]
    assert a.inner(b) == pytest.approx(1.0 * 4.0 + 5.0 * 2.0)


def test_sparse_rating_matrix_rows_columns_and_counts():
    matrix = _matrix()

    assert matrix.shape == (3, 4)
    assert matrix.size() == 5
    assert matrix.sum() == pytest.approx(15.0)
    assert matrix.mean() == pytest.approx(3.0)
    assert matrix.row(0).index_list() == [0, 2]
    assert matrix.column(0).index_list() == [0, 1]
    assert matrix.row_size(1) == 2
    assert matrix.column_size(3) == 1
    assert matrix.columns() == [0, 1, 2, 3]
    assert matrix.get(1, 1) == 2.0
    assert list(matrix.entries())[0] == (0, 0, 5.0)


def test_sparse_rating_matrix_drops_explicit_zeros():
    matrix = SparseRatingMatrix.from_triples([0, 0], [0, 1], [0.0, 2.0], shape=(1, 3))

    assert matrix.size() == 1
    assert matrix.columns() == [1]
    assert np.isnan(SparseRatingMatrix.from_triples([], [], [], shape=(2, 2)).mean())


def test_rating_scale_validates_levels():
    scale = RatingScale((1.0, 2.0, 3.0, 4.0, 5.0))

    assert scale.min_rate == 1.0 and scale.max_rate == 5.0
    assert scale.midpoint == 3.0
    assert scale.clamp(7.2) == 5.0
    assert scale.normalize(3.0) == pytest.approx(0.5)
    assert scale.denormalize(0.25) == pytest.approx(2.0)

    with pytest.raises(ConfigurationError):
        RatingScale(())
    with pytest.raises(ConfigurationError):
        RatingScale((1.0, 3.0, 2.0))


def test_build_rating_store_remaps_ids_and_keeps_latest_duplicate():
    frame = pd.DataFrame(
        [
            {"user": "u1", "item": "A", "rating": 5},
            {"user": "u1", "item": "B", "rating": 3},
            {"user": "u2", "item": "A", "rating": 4},
            {"user": "u2", "item": "A", "rating": 2},
        ]
    )

    store = build_rating_store(frame)

    assert store.num_users == 2
    assert store.num_items == 2
    assert store.matrix.get(1, 0) == 2.0
    assert store.user_id(1) == "u2"
    assert store.item_id(1) == "B"
    assert store.scale.levels == (2.0, 3.0, 5.0)


def test_build_rating_store_binarizes_ratings():
    frame = pd.DataFrame(
        [
            {"user": "u1", "item": "A", "rating": 5},
            {"user": "u1", "item": "B", "rating": 2},
        ]
    )

    store = build_rating_store(frame, binary_threshold=3)

    assert store.scale.levels == (0.0, 1.0)
    assert store.matrix.size() == 1
    assert store.matrix.get(0, 0) == 1.0


def test_load_rating_store_reads_whitespace_file(tmp_path: Path):
    path = tmp_path / "ratings.txt"
    path.write_text("# user item rating\n10 100 4\n10 200 5\n20 100 3\n", encoding="utf-8")

    store = load_rating_store(path)

    assert store.matrix.shape == (2, 2)
    assert store.user_id(0) == "10"
    assert store.item_id(1) == "200"
    assert store.matrix.sum() == pytest.approx(12.0)


def test_kfold_splits_partition_every_rating():
    matrix = SparseRatingMatrix.from_triples(
        np.repeat(np.arange(5), 4), np.tile(np.arange(4), 5), np.arange(1, 21) % 5 + 1.0
    )

    splits = kfold_splits(matrix, 4, seed=3)

    assert len(splits) == 4
    assert sum(test.size() for _, test in splits) == matrix.size()
    for train, test in splits:
        assert train.size() + test.size() == matrix.size()
        assert train.shape == test.shape == matrix.shape


def test_split_by_ratio_keeps_shape_and_ratings():
    matrix = _matrix()

    train, test = split_by_ratio(matrix, 0.6, seed=0)

    assert train.size() + test.size() == matrix.size()
    assert train.sum() + test.sum() == pytest.approx(matrix.sum())
    with pytest.raises(ValueError):
        split_by_ratio(matrix, 1.5)


def test_rating_dataset_yields_observed_triples():
    dataset = RatingDataset(_matrix())

    assert len(dataset) == 5
    user, item, rating = dataset[0]
    assert (int(user), int(item), float(rating)) == (0, 0, 5.0)
