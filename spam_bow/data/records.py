"""
Typed records shared across the pipeline.

The corpus is handled as explicit records rather than loose DataFrame
columns so that field types cannot be coerced silently between steps:

- Document: one input message with its 1-based position as doc_id
- Token: one word occurrence inside a document (ephemeral)
- CountEntry: one (doc_id, term) pair with its frequency (sparse form)
- LabelTable: doc_id -> label, kept apart from the feature matrix
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable


@dataclass(frozen=True)
class Document:
    doc_id: int
    raw_text: str
    label: str


@dataclass(frozen=True)
class Token:
    doc_id: int
    term: str


@dataclass(frozen=True)
class CountEntry:
    doc_id: int
    term: str
    frequency: int


@dataclass(frozen=True)
class LabelTable:
    """
    Mapping from doc_id to its label, 1:1 with the corpus documents.

    Parameters
    ----------
    labels : Dict[int, str]
        doc_id -> label. Stored as a plain dict sorted by doc_id.
    """

    labels: Dict[int, str] = field(default_factory=dict)

    @classmethod
    def from_documents(cls, documents: Iterable[Document]) -> "LabelTable":
        return cls(labels={doc.doc_id: doc.label for doc in sorted(documents, key=lambda d: d.doc_id)})

    def __len__(self) -> int:
        return len(self.labels)

    def __getitem__(self, doc_id: int) -> str:
        return self.labels[doc_id]

    def label_distribution(self) -> Dict[str, int]:
        """
        Count documents per label, ordered by label name.
        """
        counts = Counter(self.labels.values())
        return {label: counts[label] for label in sorted(counts)}

