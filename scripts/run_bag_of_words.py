"""
Build bag-of-words features for the SMS spam corpus.

This script is a convenience wrapper around
`spam_bow.run.run_bag_of_words`, which:

- loads the stopword list and the configured train/test corpora
- builds a document-term matrix for each split
- logs vocabulary statistics
- writes the bag-of-words CSV and summary under the output directory

Usage (from project root):

    python -m scripts.run_bag_of_words
    # or
    python scripts/run_bag_of_words.py --data-config config/data.yaml
"""

from __future__ import annotations

import argparse
import sys

from spam_bow.exceptions import ConfigurationError
from spam_bow.run import run_bag_of_words
from spam_bow.utils.run_utils import get_logger, load_pipeline_config


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Build bag-of-words features for spam detection."
    )
    parser.add_argument(
        "--data-config",
        type=str,
        default="config/data.yaml",
        help="Path to data config YAML (default: config/data.yaml).",
    )
    parser.add_argument(
        "--pipeline-config",
        type=str,
        default="config/pipeline.yaml",
        help="Path to pipeline config YAML (default: config/pipeline.yaml).",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()

    # Logging falls back to console-only defaults when the pipeline config
    # cannot be read; run_bag_of_words then reports that same error.
    try:
        run_cfg = load_pipeline_config(args.pipeline_config)
    except ConfigurationError:
        run_cfg = {}
    logger = get_logger(
        name="run_bag_of_words",
        config=run_cfg,
        log_file_suffix="cli",
    )

    logger.info("=" * 80)
    logger.info("Starting bag-of-words run.")
    logger.info(
        "Configs: data=%s, pipeline=%s",
        args.data_config,
        args.pipeline_config,
    )

    try:
        results = run_bag_of_words(
            data_config_path=args.data_config,
            pipeline_config_path=args.pipeline_config,
        )
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        return 2

    for split, result in results.items():
        logger.info(
            "%s: %d documents x %d terms",
            split,
            result.matrix.n_documents,
            result.matrix.vocabulary_size,
        )
    logger.info("Bag-of-words run finished.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
