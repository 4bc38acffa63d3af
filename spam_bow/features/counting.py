"""
Per-document term frequency counting.

Filtered tokens of the whole corpus are reduced to one CountEntry per
distinct (doc_id, term) pair. Repeated occurrences are consolidated into
the frequency; pairs with zero occurrences are never materialized.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, List

from spam_bow.data.records import CountEntry, Token


def count_frequencies(tokens: Iterable[Token]) -> List[CountEntry]:
    """
    Group tokens by (doc_id, term) and count occurrences.

    Parameters
    ----------
    tokens : Iterable[Token]
        Filtered tokens, from any number of documents, in any order.

    Returns
    -------
    List[CountEntry]
        One entry per distinct pair, sorted by (doc_id, term).
    """
    counts = Counter((token.doc_id, token.term) for token in tokens)
    return [
        CountEntry(doc_id=doc_id, term=term, frequency=frequency)
        for (doc_id, term), frequency in sorted(counts.items())
    ]
