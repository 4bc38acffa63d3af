"""
Two-pass bag-of-words pipeline.

Pass 1 (map phase) runs independently per document:

    raw text -> normalize_text -> tokenize_text -> StopwordFilter

and may be spread across joblib workers. Its results are merged back into
doc_id order in a MapPhaseResult, which is the synchronization barrier:
nothing downstream starts until every document has been filtered.

Pass 2 (reduce phase) counts (doc_id, term) pairs over the complete
filtered token set, fixes the vocabulary and assembles the matrix, then
verifies it against the map-phase results before returning.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

import pandas as pd
from joblib import Parallel, delayed

from spam_bow.data.records import CountEntry, Document, LabelTable, Token
from spam_bow.exceptions import InvariantViolationError
from spam_bow.features.bow_matrix import (
    DocumentTermMatrix,
    assemble_matrix,
    verify_columns,
    verify_row_sums,
)
from spam_bow.features.counting import count_frequencies
from spam_bow.features.preprocessing import normalize_text, tokenize_text
from spam_bow.features.stopwords import StopwordFilter, StopwordSet


# ---------------------------------------------------------------------------
# Map phase
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DocumentTerms:
    """Surviving terms of one document, in text order."""

    doc_id: int
    terms: Tuple[str, ...]


def process_document(document: Document, stopwords: StopwordSet) -> DocumentTerms:
    """
    Normalize, tokenize and stopword-filter a single document.

    Parameters
    ----------
    document : Document
        Input document.
    stopwords : StopwordSet
        Shared, read-only stopword set.

    Returns
    -------
    DocumentTerms
        The terms that survive filtering, left to right. May be empty.
    """
    normalized = normalize_text(document.raw_text)
    tokens = tokenize_text(normalized, document.doc_id)
    kept = StopwordFilter(stopwords).filter(tokens)
    return DocumentTerms(doc_id=document.doc_id, terms=tuple(token.term for token in kept))


@dataclass(frozen=True)
class MapPhaseResult:
    """
    Complete output of pass 1, ordered by doc_id.

    Building this object requires every document to have been processed;
    the reduce phase only ever reads from it.
    """

    documents: Tuple[Document, ...]
    processed: Tuple[DocumentTerms, ...]

    def tokens(self) -> Iterator[Token]:
        for item in self.processed:
            for term in item.terms:
                yield Token(doc_id=item.doc_id, term=term)

    def surviving_counts(self) -> Dict[int, int]:
        return {item.doc_id: len(item.terms) for item in self.processed}

    def vocabulary(self) -> Set[str]:
        return {term for item in self.processed for term in item.terms}

    def empty_doc_ids(self) -> List[int]:
        return [item.doc_id for item in self.processed if not item.terms]


def run_map_phase(
    documents: Sequence[Document],
    stopwords: StopwordSet,
    n_jobs: int = 1,
    backend: Optional[str] = None,
) -> MapPhaseResult:
    """
    Process every document, possibly in parallel, and merge deterministically.

    Parameters
    ----------
    documents : Sequence[Document]
        The whole corpus.
    stopwords : StopwordSet
        Stopwords shared by all workers.
    n_jobs : int
        Number of joblib workers (1 runs in-process, -1 uses all cores).
    backend : Optional[str]
        joblib backend name, e.g. "loky" or "threading". None uses the default.

    Returns
    -------
    MapPhaseResult
        Documents and their surviving terms, both sorted by doc_id.
    """
    ordered = tuple(sorted(documents, key=lambda doc: doc.doc_id))

    processed = Parallel(n_jobs=n_jobs, backend=backend)(
        delayed(process_document)(doc, stopwords) for doc in ordered
    )

    # Workers may finish in any order; the merge must not depend on it.
    processed = tuple(sorted(processed, key=lambda item: item.doc_id))

    return MapPhaseResult(documents=ordered, processed=processed)


# ---------------------------------------------------------------------------
# Reduce phase
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BagOfWordsResult:
    """
    Finished bag-of-words representation of one corpus.

    Attributes
    ----------
    matrix : DocumentTermMatrix
        Counts, one row per document and one column per vocabulary term.
    labels : LabelTable
        doc_id -> label, joinable with the matrix rows.
    count_entries : Tuple[CountEntry, ...]
        Sparse (doc_id, term, frequency) table the matrix was built from.
    empty_doc_ids : Tuple[int, ...]
        Documents with no surviving tokens (all-zero rows).
    """

    matrix: DocumentTermMatrix
    labels: LabelTable
    count_entries: Tuple[CountEntry, ...]
    empty_doc_ids: Tuple[int, ...]

    def to_frame(self, label_column: str = "Category") -> pd.DataFrame:
        return self.matrix.to_frame(self.labels, label_column=label_column)


def run_reduce_phase(
    map_result: MapPhaseResult,
    stopwords: StopwordSet,
) -> BagOfWordsResult:
    """
    Count, assemble and verify the matrix from a complete MapPhaseResult.

    Raises
    ------
    InvariantViolationError
        If the assembled matrix disagrees with the map-phase output.
    """
    entries = count_frequencies(map_result.tokens())
    matrix = assemble_matrix(entries, map_result.documents)

    verify_columns(matrix, map_result.vocabulary())
    verify_row_sums(matrix, map_result.surviving_counts())

    leaked = [term for term in matrix.vocabulary if term in stopwords]
    if leaked:
        raise InvariantViolationError(f"Stopword(s) present as matrix columns: {leaked[:10]}")

    return BagOfWordsResult(
        matrix=matrix,
        labels=LabelTable.from_documents(map_result.documents),
        count_entries=tuple(entries),
        empty_doc_ids=tuple(map_result.empty_doc_ids()),
    )


def build_bag_of_words(
    documents: Sequence[Document],
    stopwords: StopwordSet,
    n_jobs: int = 1,
    backend: Optional[str] = None,
    logger: Optional[logging.Logger] = None,
) -> BagOfWordsResult:
    """
    End-to-end bag-of-words construction for one corpus.

    Parameters
    ----------
    documents : Sequence[Document]
        Whole corpus with doc_ids 1..N.
    stopwords : StopwordSet
        Stopwords to exclude from the vocabulary.
    n_jobs : int
        joblib workers for the map phase.
    backend : Optional[str]
        joblib backend for the map phase.
    logger : Optional[logging.Logger]
        If given, receives progress messages.

    Returns
    -------
    BagOfWordsResult
        Verified matrix, labels and sparse count table.
    """
    if logger is not None:
        logger.info(
            "Map phase: normalizing, tokenizing and filtering %d documents (n_jobs=%s)...",
            len(documents),
            n_jobs,
        )
    map_result = run_map_phase(documents, stopwords, n_jobs=n_jobs, backend=backend)

    if logger is not None:
        logger.info("Reduce phase: counting terms and assembling the document-term matrix...")
    result = run_reduce_phase(map_result, stopwords)

    if logger is not None:
        logger.info(
            "Matrix shape: %s, non-zero cells: %d",
            result.matrix.shape,
            result.matrix.nnz,
        )
        if result.empty_doc_ids:
            logger.info(
                "%d document(s) have no surviving tokens and keep all-zero rows (first: %s).",
                len(result.empty_doc_ids),
                list(result.empty_doc_ids[:10]),
            )

    return result
