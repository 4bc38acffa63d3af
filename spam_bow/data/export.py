"""
Writers for finished bag-of-words outputs.

- the bag-of-words table as CSV (Category, doc_id, <terms...>)
- the sparse count matrix as .npz plus its vocabulary, one term per line
- the corpus summary as JSON

Callers only invoke these after the whole pipeline has succeeded, so a
failed run never leaves a partial matrix behind.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Tuple

import pandas as pd
import scipy.sparse as sp

from spam_bow.features.bow_matrix import DocumentTermMatrix
from spam_bow.utils.run_utils import ensure_dir_exists


def write_matrix_csv(frame: pd.DataFrame, path: str) -> str:
    """
    Save the bag-of-words table to CSV without the pandas index.
    """
    ensure_dir_exists(os.path.dirname(path))
    frame.to_csv(path, index=False, lineterminator="\n")
    return path


def write_sparse_matrix(
    matrix: DocumentTermMatrix,
    out_dir: str,
    prefix: str,
) -> Tuple[str, str]:
    """
    Save the CSR counts to <prefix>_counts.npz and the column terms to
    <prefix>_vocabulary.txt.

    Returns
    -------
    Tuple[str, str]
        (npz_path, vocabulary_path)
    """
    ensure_dir_exists(out_dir)

    npz_path = os.path.join(out_dir, f"{prefix}_counts.npz")
    sp.save_npz(npz_path, matrix.counts, compressed=True)

    vocab_path = os.path.join(out_dir, f"{prefix}_vocabulary.txt")
    with open(vocab_path, "w", encoding="utf-8", newline="\n") as f:
        for term in matrix.vocabulary:
            f.write(term + "\n")

    return npz_path, vocab_path


def write_summary_json(summary: Dict[str, Any], path: str) -> str:
    ensure_dir_exists(os.path.dirname(path))
    with open(path, "w", encoding="utf-8") as f:
        json.dump(summary, f, indent=2)
    return path
