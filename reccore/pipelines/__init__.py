"""High-level pipelines for training and evaluating recommenders."""

from .orchestrator import (  # noqa: F401
    RunResult,
    execute,
    run_cross_validation,
    run_experiment,
    run_fold,
)
