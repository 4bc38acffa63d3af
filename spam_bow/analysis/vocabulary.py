"""
Vocabulary statistics for a finished document-term matrix.

This module provides helpers to:
- compute per-term totals across all documents (column sums)
- rank the most frequent terms, breaking ties by ascending term
- count singleton terms and terms above a frequency threshold
- summarize a whole bag-of-words result for logging and reporting

All functions are read-only with respect to the matrix.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

import pandas as pd

from spam_bow.features.bow_matrix import DocumentTermMatrix
from spam_bow.features.pipeline import BagOfWordsResult


DEFAULT_TOP_N = 20
DEFAULT_HIGH_FREQUENCY_THRESHOLD = 10


@dataclass(frozen=True)
class VocabularyStats:
    """
    Corpus-wide vocabulary statistics.

    Attributes
    ----------
    vocabulary_size : int
        Number of distinct terms (matrix columns).
    top_terms : Tuple[Tuple[str, int], ...]
        (term, total frequency) pairs, highest total first; ties in
        ascending term order.
    singleton_count : int
        Terms whose total frequency is exactly 1.
    high_frequency_count : int
        Terms whose total frequency is strictly greater than the threshold.
    high_frequency_threshold : int
        Threshold used for high_frequency_count.
    """

    vocabulary_size: int
    top_terms: Tuple[Tuple[str, int], ...]
    singleton_count: int
    high_frequency_count: int
    high_frequency_threshold: int


def term_totals(matrix: DocumentTermMatrix) -> Dict[str, int]:
    """
    Total frequency of every vocabulary term, in vocabulary order.
    """
    sums = matrix.column_sums()
    return {term: int(total) for term, total in zip(matrix.vocabulary, sums)}


def rank_terms(totals: Dict[str, int], top_n: int) -> List[Tuple[str, int]]:
    """
    Return the top_n (term, total) pairs by descending total, then ascending term.

    Raises
    ------
    ValueError
        If top_n is negative.
    """
    if top_n < 0:
        raise ValueError(f"top_n must be non-negative, got {top_n}")
    ranked = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
    return ranked[:top_n]


def analyze_vocabulary(
    matrix: DocumentTermMatrix,
    top_n: int = DEFAULT_TOP_N,
    high_frequency_threshold: int = DEFAULT_HIGH_FREQUENCY_THRESHOLD,
) -> VocabularyStats:
    """
    Compute vocabulary statistics from a document-term matrix.

    Parameters
    ----------
    matrix : DocumentTermMatrix
        Finished matrix; it is not modified.
    top_n : int
        Number of top terms to report. Fewer are returned when the
        vocabulary is smaller.
    high_frequency_threshold : int
        Terms with a total strictly greater than this are counted as
        high-frequency.

    Returns
    -------
    VocabularyStats
        Ranked top terms and singleton / high-frequency counts.
    """
    totals = term_totals(matrix)

    return VocabularyStats(
        vocabulary_size=len(totals),
        top_terms=tuple(rank_terms(totals, top_n)),
        singleton_count=sum(1 for total in totals.values() if total == 1),
        high_frequency_count=sum(1 for total in totals.values() if total > high_frequency_threshold),
        high_frequency_threshold=int(high_frequency_threshold),
    )


def summarize_corpus(
    result: BagOfWordsResult,
    top_n: int = DEFAULT_TOP_N,
    high_frequency_threshold: int = DEFAULT_HIGH_FREQUENCY_THRESHOLD,
) -> Dict[str, Any]:
    """
    Build the JSON-friendly summary of a bag-of-words result.

    Returns
    -------
    Dict[str, Any]
        Keys: "documents", "vocabulary_size", "non_zero_entries",
        "empty_documents", "label_distribution", "top_terms",
        "singleton_terms", "high_frequency_terms",
        "high_frequency_threshold".
    """
    stats = analyze_vocabulary(
        result.matrix,
        top_n=top_n,
        high_frequency_threshold=high_frequency_threshold,
    )

    return {
        "documents": result.matrix.n_documents,
        "vocabulary_size": stats.vocabulary_size,
        "non_zero_entries": result.matrix.nnz,
        "empty_documents": len(result.empty_doc_ids),
        "label_distribution": result.labels.label_distribution(),
        "top_terms": [{"term": term, "frequency": total} for term, total in stats.top_terms],
        "singleton_terms": stats.singleton_count,
        "high_frequency_terms": stats.high_frequency_count,
        "high_frequency_threshold": stats.high_frequency_threshold,
    }


def preview_matrix(
    matrix: DocumentTermMatrix,
    n_docs: int = 5,
    n_terms: int = 10,
) -> pd.DataFrame:
    """
    Dense preview of the first n_docs rows and n_terms columns.
    """
    rows = min(n_docs, matrix.n_documents)
    cols = min(n_terms, matrix.vocabulary_size)
    block = matrix.counts[:rows, :cols].toarray()
    return pd.DataFrame(
        block,
        index=pd.Index(matrix.doc_ids[:rows], name="doc_id"),
        columns=list(matrix.vocabulary[:cols]),
    )
