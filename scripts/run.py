"""Command-line interface for training and evaluating a recommender."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
project_root_str = str(PROJECT_ROOT)
if project_root_str not in sys.path:
    sys.path.insert(0, project_root_str)

from loguru import logger

from reccore.errors import ConfigurationError
from reccore.pipelines import run_experiment
from reccore.utils import load_config, set_by_dotted_path


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("configs/default.yaml"),
        help="Path to the YAML configuration file.",
    )
    parser.add_argument(
        "--recommender",
        default=None,
        help="Override the configured recommender (e.g. ItemKNN, BiasedMF).",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    config = dict(load_config(args.config))
    if args.recommender:
        set_by_dotted_path(config, "recommender", args.recommender)

    logger.info("Starting evaluation with config at {}", args.config)
    try:
        results = run_experiment(config)
    except ConfigurationError as exc:
        logger.error("Configuration error: {}", exc)
        return 2
    return 0 if all(result.succeeded for result in results) else 1


if __name__ == "__main__":
    sys.exit(main())
