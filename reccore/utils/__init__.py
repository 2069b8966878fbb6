"""Utility helpers shared across modules."""

from .config import (  # noqa: F401
    EvaluationConfig,
    clone_config,
    get_by_dotted_path,
    load_config,
    lookup,
    set_by_dotted_path,
)
from .runtime import format_duration, seed_everything  # noqa: F401
