"""Rating containers, ingestion, and splitting utilities."""

from .datasets import RatingDataset  # noqa: F401
from .indexers import IndexMapping, build_index_mapping  # noqa: F401
from .loaders import RatingStore, build_rating_store, load_rating_store, read_ratings  # noqa: F401
from .scale import RatingScale  # noqa: F401
from .sparse import SparseRatingMatrix, SparseVector  # noqa: F401
from .splitters import kfold_splits, split_by_ratio  # noqa: F401
