"""
End-to-end bag-of-words run for the SMS spam corpus.

This module:

- loads config/data.yaml and config/pipeline.yaml
- loads the stopword list once (a missing list aborts the run)
- reads the train corpus and, when configured, the test corpus
- builds an independent bag-of-words matrix for each split
- logs the corpus summary and vocabulary statistics
- writes the bag-of-words CSV, the sparse matrix, the summary JSON and
  the top-terms chart under the configured output directory

Every configuration problem is raised before any document is processed,
and nothing is written unless all splits were built successfully.

Callable as a library function or via `python -m spam_bow.run`.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Tuple

import matplotlib.pyplot as plt
import pandas as pd

from spam_bow.analysis.plots import plot_top_terms
from spam_bow.analysis.vocabulary import (
    DEFAULT_HIGH_FREQUENCY_THRESHOLD,
    DEFAULT_TOP_N,
    preview_matrix,
    summarize_corpus,
)
from spam_bow.data.datasets import (
    DEFAULT_DATA_CONFIG_PATH,
    count_missing_messages,
    documents_from_frame,
    get_column_names,
    get_split_paths,
    load_data_config,
    read_corpus_csv,
)
from spam_bow.data.export import write_matrix_csv, write_sparse_matrix, write_summary_json
from spam_bow.data.records import Document
from spam_bow.exceptions import ConfigurationError
from spam_bow.features.pipeline import BagOfWordsResult, build_bag_of_words
from spam_bow.features.stopwords import StopwordSet
from spam_bow.utils.run_utils import (
    DEFAULT_PIPELINE_CONFIG_PATH,
    ensure_dir_exists,
    get_logger,
    get_parallel_settings,
    load_pipeline_config,
)


# ---------------------------------------------------------------------------
# Core helpers
# ---------------------------------------------------------------------------


def load_stopwords_from_config(data_cfg: Dict[str, Any]) -> StopwordSet:
    """
    Load the stopword list referenced by the "stopwords" section.

    Raises
    ------
    ConfigurationError
        If no path is configured or the file cannot be read.
    """
    sw_cfg = data_cfg.get("stopwords", {}) or {}
    path = sw_cfg.get("path")
    if not path:
        raise ConfigurationError('Missing "stopwords.path" in data config.')
    return StopwordSet.from_file(path, encoding=sw_cfg.get("encoding", "utf-8"))


def _load_split_documents(
    data_config_path: str,
    data_cfg: Dict[str, Any],
    logger: logging.Logger,
) -> List[Tuple[str, List[Document]]]:
    """
    Read and validate every configured split before any processing starts.

    The test split is skipped when not configured or when its CSV has no rows.
    """
    text_column, label_column = get_column_names(data_cfg["dataset"])
    split_paths = get_split_paths(data_config_path)

    splits = []
    for split, csv_path in split_paths.items():
        if csv_path is None:
            logger.info("No %s corpus configured; skipping.", split)
            continue

        df = read_corpus_csv(csv_path, text_column=text_column, label_column=label_column)
        if df.empty and split != "train":
            logger.info("The %s corpus at %s has no rows; skipping.", split, csv_path)
            continue

        missing = count_missing_messages(df, text_column=text_column)
        if missing:
            logger.warning(
                "%d %s message(s) are empty in %s; they will have all-zero rows.",
                missing,
                split,
                csv_path,
            )

        documents = documents_from_frame(df, text_column=text_column, label_column=label_column)
        logger.info("Loaded %s corpus with %d documents from %s.", split, len(documents), csv_path)
        splits.append((split, documents))

    return splits


def _log_summary(
    logger: logging.Logger,
    split: str,
    summary: Dict[str, Any],
    result: BagOfWordsResult,
) -> None:
    logger.info("=== BAG-OF-WORDS DATA STRUCTURE (%s) ===", split)
    logger.info("Documents: %d", summary["documents"])
    logger.info("Vocabulary size: %d", summary["vocabulary_size"])
    logger.info("Total non-zero entries: %d", summary["non_zero_entries"])
    logger.info("Label distribution: %s", summary["label_distribution"])
    logger.info(
        "Document-term matrix (first 5 docs, first 10 words):\n%s",
        preview_matrix(result.matrix, n_docs=5, n_terms=10),
    )

    top = pd.DataFrame(summary["top_terms"], columns=["term", "frequency"])
    logger.info("Top %d most frequent words:\n%s", len(top), top.to_string(index=False))
    logger.info(
        "Vocabulary statistics: unique=%d, appearing once=%d, appearing >%d times=%d",
        summary["vocabulary_size"],
        summary["singleton_terms"],
        summary["high_frequency_threshold"],
        summary["high_frequency_terms"],
    )


# ---------------------------------------------------------------------------
# Main run
# ---------------------------------------------------------------------------


def run_bag_of_words(
    data_config_path: str = DEFAULT_DATA_CONFIG_PATH,
    pipeline_config_path: str = DEFAULT_PIPELINE_CONFIG_PATH,
) -> Dict[str, BagOfWordsResult]:
    """
    Build, analyze and save bag-of-words matrices for every configured split.

    Parameters
    ----------
    data_config_path : str
        Path to config/data.yaml.
    pipeline_config_path : str
        Path to config/pipeline.yaml.

    Returns
    -------
    Dict[str, BagOfWordsResult]
        Results keyed by split name ("train", and "test" when present).
    """
    run_cfg = load_pipeline_config(pipeline_config_path)
    data_cfg = load_data_config(data_config_path)

    logger = get_logger(name="bag_of_words", config=run_cfg, log_file_suffix="bow")

    stopwords = load_stopwords_from_config(data_cfg)
    logger.info("Loaded %d stopwords.", len(stopwords))
    unmatchable = stopwords.unmatchable_words()
    if unmatchable:
        logger.warning(
            "%d stopword(s) contain non-alphanumeric characters and can never "
            "match a token: %s",
            len(unmatchable),
            list(unmatchable[:10]),
        )

    splits = _load_split_documents(data_config_path, data_cfg, logger)
    n_jobs, backend = get_parallel_settings(run_cfg)

    results: Dict[str, BagOfWordsResult] = {}
    for split, documents in splits:
        logger.info("=" * 80)
        logger.info("Building bag-of-words for the %s corpus.", split)
        results[split] = build_bag_of_words(
            documents,
            stopwords,
            n_jobs=n_jobs,
            backend=backend,
            logger=logger,
        )

    analysis_cfg = data_cfg.get("analysis", {}) or {}
    top_n = int(analysis_cfg.get("top_n", DEFAULT_TOP_N))
    threshold = int(analysis_cfg.get("high_frequency_threshold", DEFAULT_HIGH_FREQUENCY_THRESHOLD))

    _, label_column = get_column_names(data_cfg["dataset"])
    save_cfg = run_cfg.get("save", {}) or {}
    output_dir = run_cfg["paths"].get("output_dir", "outputs")
    ensure_dir_exists(output_dir)

    # Materialize every output table before writing any of them.
    reports = []
    for split, result in results.items():
        summary = summarize_corpus(result, top_n=top_n, high_frequency_threshold=threshold)
        frame = result.to_frame(label_column=label_column)
        reports.append((split, result, summary, frame))

    for split, result, summary, frame in reports:
        _log_summary(logger, split, summary, result)

        if bool(save_cfg.get("write_csv", True)):
            csv_path = write_matrix_csv(frame, os.path.join(output_dir, f"bow_{split}_data.csv"))
            logger.info("Bag-of-words data saved to %s", csv_path)

        if bool(save_cfg.get("write_sparse", False)):
            npz_path, vocab_path = write_sparse_matrix(result.matrix, output_dir, prefix=f"bow_{split}")
            logger.info("Sparse matrix saved to %s (vocabulary: %s)", npz_path, vocab_path)

        if bool(save_cfg.get("write_summary", True)):
            summary_path = write_summary_json(
                summary, os.path.join(output_dir, f"bow_{split}_summary.json")
            )
            logger.info("Summary saved to %s", summary_path)

        plot_cfg = save_cfg.get("plot_top_terms", {}) or {}
        if bool(plot_cfg.get("enabled", False)) and summary["top_terms"]:
            plot_path = os.path.join(output_dir, f"bow_{split}_top_terms.png")
            fig, _ = plot_top_terms(
                [(item["term"], item["frequency"]) for item in summary["top_terms"]],
                top_k=int(plot_cfg.get("top_k", 15)),
                out_path=plot_path,
                show=False,
            )
            plt.close(fig)
            logger.info("Top-terms chart saved to %s", plot_path)

    logger.info("Bag-of-words run completed.")
    return results


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """
    Main entry point when running this module as a script.
    """
    _ = run_bag_of_words()


if __name__ == "__main__":
    main()
