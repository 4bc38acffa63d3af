"""
Document-term matrix assembly.

assemble_matrix turns the sparse CountEntry table of a whole corpus into a
DocumentTermMatrix:

- rows: every doc_id of the corpus, ascending, with no gaps. A document
  without any CountEntry gets an all-zero row; it is never dropped.
- columns: the vocabulary, i.e. the distinct terms of all entries, sorted
  lexicographically (Python string order) so output is reproducible.
- cells: the entry frequency, or 0 when the pair is absent.

Counts are vectorized by scikit-learn's DictVectorizer from one
{term: frequency} dict per document and stored as a scipy CSR matrix of
int64. Vocabularies are usually much larger than the number of tokens per
message, so the output table keeps sparse columns and a dense grid is
only built on request (to_dense).

The column set can only be fixed once every document has been filtered,
so assembly always takes the complete entry list, never a stream.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

import numpy as np
import pandas as pd
import scipy.sparse as sp
from sklearn.feature_extraction import DictVectorizer

from spam_bow.data.records import CountEntry, Document, LabelTable
from spam_bow.exceptions import ConfigurationError, InvariantViolationError


@dataclass(frozen=True, eq=False)
class DocumentTermMatrix:
    """
    Bag-of-words counts indexed by (doc_id row, term column).

    Attributes
    ----------
    doc_ids : Tuple[int, ...]
        Row index, ascending.
    vocabulary : Tuple[str, ...]
        Column index, sorted lexicographically.
    counts : scipy.sparse.csr_matrix
        Shape (len(doc_ids), len(vocabulary)), dtype int64.
    """

    doc_ids: Tuple[int, ...]
    vocabulary: Tuple[str, ...]
    counts: sp.csr_matrix

    @property
    def shape(self) -> Tuple[int, int]:
        return (len(self.doc_ids), len(self.vocabulary))

    @property
    def n_documents(self) -> int:
        return len(self.doc_ids)

    @property
    def vocabulary_size(self) -> int:
        return len(self.vocabulary)

    @property
    def nnz(self) -> int:
        """Number of non-zero cells."""
        return int(self.counts.count_nonzero())

    def row_sums(self) -> np.ndarray:
        return np.asarray(self.counts.sum(axis=1), dtype=np.int64).ravel()

    def column_sums(self) -> np.ndarray:
        return np.asarray(self.counts.sum(axis=0), dtype=np.int64).ravel()

    def row(self, doc_id: int) -> Dict[str, int]:
        """
        Non-zero counts of one document as {term: frequency}.
        """
        try:
            i = self.doc_ids.index(doc_id)
        except ValueError:
            raise KeyError(f"Unknown doc_id: {doc_id}") from None

        row = self.counts[i]
        return {self.vocabulary[j]: int(v) for j, v in zip(row.indices, row.data) if v}

    def column(self, term: str) -> np.ndarray:
        """
        Dense counts of one term across all documents, in doc_id order.
        """
        try:
            j = self.vocabulary.index(term)
        except ValueError:
            raise KeyError(f"Term not in vocabulary: {term!r}") from None
        return self.counts[:, j].toarray().ravel().astype(np.int64)

    def to_dense(self) -> np.ndarray:
        return self.counts.toarray().astype(np.int64)

    def to_frame(
        self,
        labels: LabelTable,
        label_column: str = "Category",
    ) -> pd.DataFrame:
        """
        Materialize the matrix as the output table.

        Columns are [label_column, "doc_id", <term_1>, <term_2>, ...] with
        terms in vocabulary order. Normalized terms contain neither "_" nor
        upper case, so they never collide with "doc_id" or "Category"; a
        custom label_column that equals a term is rejected. Term columns
        are pandas sparse columns (Sparse[int64, 0]); the CSV writer
        renders absent pairs as 0.

        Parameters
        ----------
        labels : LabelTable
            Labels for every doc_id of the matrix.
        label_column : str
            Name of the label column in the output.

        Returns
        -------
        pd.DataFrame
            One row per document, ordered by doc_id.
        """
        if label_column in self.vocabulary or label_column == "doc_id":
            raise ConfigurationError(
                f"Label column name {label_column!r} collides with a matrix column."
            )

        missing = [doc_id for doc_id in self.doc_ids if doc_id not in labels.labels]
        if missing:
            raise InvariantViolationError(
                f"No label for doc_id(s) {missing[:10]} present in the matrix."
            )

        features = pd.DataFrame.sparse.from_spmatrix(
            self.counts,
            columns=list(self.vocabulary),
        )
        head = pd.DataFrame(
            {
                label_column: [labels[doc_id] for doc_id in self.doc_ids],
                "doc_id": np.asarray(self.doc_ids, dtype=np.int64),
            }
        )
        return pd.concat([head, features], axis=1)


def _check_doc_ids(doc_ids: Sequence[int]) -> List[int]:
    """
    Validate that doc ids are unique and form 1..N; return them sorted.
    """
    duplicates = sorted(doc_id for doc_id, n in Counter(doc_ids).items() if n > 1)
    if duplicates:
        raise InvariantViolationError(f"Duplicate doc_id(s): {duplicates[:10]}")

    ordered = sorted(doc_ids)
    if ordered != list(range(1, len(ordered) + 1)):
        raise InvariantViolationError(
            "doc_ids must be contiguous starting at 1; "
            f"got {len(ordered)} ids ranging {ordered[0]}..{ordered[-1]}"
        )
    return ordered


def _document_dicts(
    entries: Iterable[CountEntry],
    doc_ids: Sequence[int],
) -> List[Dict[str, int]]:
    """
    Group entries into one {term: frequency} dict per doc_id, in row order.

    Documents without entries get an empty dict, i.e. an all-zero row.
    """
    per_doc: Dict[int, Dict[str, int]] = {doc_id: {} for doc_id in doc_ids}

    for entry in entries:
        if entry.doc_id not in per_doc:
            raise InvariantViolationError(
                f"CountEntry references unknown doc_id {entry.doc_id} (term {entry.term!r})"
            )
        if entry.frequency < 1:
            raise InvariantViolationError(
                f"Non-positive frequency {entry.frequency} for doc_id "
                f"{entry.doc_id}, term {entry.term!r}"
            )
        terms = per_doc[entry.doc_id]
        if entry.term in terms:
            raise InvariantViolationError(
                f"Duplicate CountEntry for doc_id {entry.doc_id}, term {entry.term!r}"
            )
        terms[entry.term] = int(entry.frequency)

    return [per_doc[doc_id] for doc_id in doc_ids]


def _build_count_vectorizer() -> DictVectorizer:
    """
    Construct a DictVectorizer producing sorted int64 CSR count columns.
    """
    return DictVectorizer(sort=True, sparse=True, dtype=np.int64)


def assemble_matrix(
    entries: Iterable[CountEntry],
    documents: Iterable[Document],
) -> DocumentTermMatrix:
    """
    Build the document-term matrix from the full CountEntry table.

    Parameters
    ----------
    entries : Iterable[CountEntry]
        Every (doc_id, term, frequency) entry of the corpus.
    documents : Iterable[Document]
        Every document of the corpus, including those without entries.

    Returns
    -------
    DocumentTermMatrix
        Matrix with one row per document and one column per vocabulary term.

    Raises
    ------
    InvariantViolationError
        On duplicate or non-contiguous doc ids, entries for unknown
        documents, duplicate (doc_id, term) entries or non-positive
        frequencies.
    """
    doc_ids = _check_doc_ids([doc.doc_id for doc in documents])
    rows = _document_dicts(entries, doc_ids)

    # DictVectorizer refuses an empty sample sequence.
    if not rows:
        return DocumentTermMatrix(
            doc_ids=(),
            vocabulary=(),
            counts=sp.csr_matrix((0, 0), dtype=np.int64),
        )

    vectorizer = _build_count_vectorizer()
    counts = sp.csr_matrix(vectorizer.fit_transform(rows), dtype=np.int64)
    counts.sort_indices()

    return DocumentTermMatrix(
        doc_ids=tuple(doc_ids),
        vocabulary=tuple(vectorizer.feature_names_),
        counts=counts,
    )


def verify_row_sums(
    matrix: DocumentTermMatrix,
    surviving_counts: Mapping[int, int],
) -> None:
    """
    Check that each row sums to the document's surviving token count.

    Raises
    ------
    InvariantViolationError
        If a document is missing from surviving_counts or a sum differs.
    """
    sums = matrix.row_sums()
    mismatches = []
    for doc_id, total in zip(matrix.doc_ids, sums):
        if doc_id not in surviving_counts:
            raise InvariantViolationError(f"No surviving token count for doc_id {doc_id}")
        if int(total) != int(surviving_counts[doc_id]):
            mismatches.append((doc_id, int(total), int(surviving_counts[doc_id])))

    if mismatches:
        raise InvariantViolationError(
            "Row sums do not match surviving token counts "
            f"(doc_id, row_sum, expected): {mismatches[:10]}"
        )


def verify_columns(matrix: DocumentTermMatrix, vocabulary: Iterable[str]) -> None:
    """
    Check that every column is a term of the discovered vocabulary.
    """
    known = set(vocabulary)
    unknown = [term for term in matrix.vocabulary if term not in known]
    if unknown:
        raise InvariantViolationError(
            f"Matrix column(s) not in the discovered vocabulary: {unknown[:10]}"
        )
