"""
Rating ingestion helpers.

Ratings are read with pandas, remapped to contiguous indices and stored in a
:class:`SparseRatingMatrix`. The store keeps the index mappings so evaluators
can report predictions with the identifiers from the source file.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import pandas as pd
from loguru import logger

from .indexers import IndexMapping, build_index_mapping
from .scale import RatingScale
from .sparse import SparseRatingMatrix

DEFAULT_COLUMNS = ("user", "item", "rating")
DEFAULT_SEPARATOR = r"[\s,]+"


@dataclass(frozen=True)
class RatingStore:
    """Rating matrix plus the identifier mappings it was built with."""

    matrix: SparseRatingMatrix
    user_mapping: IndexMapping
    item_mapping: IndexMapping
    scale: RatingScale

    @property
    def num_users(self) -> int:
        return len(self.user_mapping)

    @property
    def num_items(self) -> int:
        return len(self.item_mapping)

    def user_id(self, index: int) -> str:
        return self.user_mapping.to_id(index)

    def item_id(self, index: int) -> str:
        return self.item_mapping.to_id(index)


def read_ratings(
    path: Path,
    *,
    sep: str = DEFAULT_SEPARATOR,
    columns: Sequence[str] = DEFAULT_COLUMNS,
    has_header: bool = False,
) -> pd.DataFrame:
    """Read a delimited ratings file into a frame with the given column names."""
    if not path.exists():
        raise FileNotFoundError(f"Expected ratings file at {path} but file was not found.")
    frame = pd.read_csv(
        path,
        sep=sep,
        engine="python",
        header=0 if has_header else None,
        comment="#",
        dtype=str,
    )
    frame = frame.iloc[:, : len(columns)]
    frame.columns = list(columns)[: frame.shape[1]]
    return frame


def build_rating_store(
    frame: pd.DataFrame,
    *,
    user_col: str = "user",
    item_col: str = "item",
    rating_col: str = "rating",
    binary_threshold: float = -1.0,
) -> RatingStore:
    """
    Convert a ratings frame into a :class:`RatingStore`.

    Parameters
    ----------
    frame:
        One row per observation. A missing rating column means implicit
        feedback and every observation is rated 1.
    binary_threshold:
        When non-negative, ratings above the threshold become 1 and all others
        are dropped; the scale is then ``(0, 1)``.
    """
    if user_col not in frame.columns or item_col not in frame.columns:
        raise ValueError(f"Ratings must contain '{user_col}' and '{item_col}' columns.")

    ratings = frame.dropna(subset=[user_col, item_col]).copy()
    ratings[user_col] = ratings[user_col].astype(str)
    ratings[item_col] = ratings[item_col].astype(str)
    if rating_col in ratings.columns:
        ratings[rating_col] = pd.to_numeric(ratings[rating_col], errors="coerce")
        ratings = ratings.dropna(subset=[rating_col])
    else:
        ratings[rating_col] = 1.0

    before = len(ratings)
    ratings = ratings.drop_duplicates(subset=[user_col, item_col], keep="last")
    if len(ratings) < before:
        logger.info("Dropped {} duplicate user-item ratings (kept the latest).", before - len(ratings))

    if binary_threshold >= 0:
        scale = RatingScale((0.0, 1.0))
        ratings[rating_col] = (ratings[rating_col] > binary_threshold).astype(float)
    else:
        scale = RatingScale.from_ratings(ratings[rating_col].tolist())

    user_mapping = build_index_mapping(ratings[user_col])
    item_mapping = build_index_mapping(ratings[item_col])

    matrix = SparseRatingMatrix.from_triples(
        ratings[user_col].map(user_mapping.id_to_index).tolist(),
        ratings[item_col].map(item_mapping.id_to_index).tolist(),
        ratings[rating_col].tolist(),
        shape=(len(user_mapping), len(item_mapping)),
    )
    logger.debug(
        "Rating store | users={} items={} ratings={} scale={}",
        len(user_mapping),
        len(item_mapping),
        matrix.size(),
        list(scale.levels),
    )
    return RatingStore(
        matrix=matrix,
        user_mapping=user_mapping,
        item_mapping=item_mapping,
        scale=scale,
    )


def load_rating_store(
    path: Path,
    *,
    sep: str = DEFAULT_SEPARATOR,
    columns: Sequence[str] = DEFAULT_COLUMNS,
    has_header: bool = False,
    binary_threshold: float = -1.0,
) -> RatingStore:
    """Convenience wrapper: :func:`read_ratings` followed by :func:`build_rating_store`."""
    frame = read_ratings(path, sep=sep, columns=columns, has_header=has_header)
    names = list(columns)
    return build_rating_store(
        frame,
        user_col=names[0],
        item_col=names[1],
        rating_col=names[2] if len(names) > 2 else "rating",
        binary_threshold=binary_threshold,
    )
