"""
Shared pytest fixtures for the bag-of-words tests.
"""

from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import pytest  # noqa: E402

from spam_bow.data.records import Document  # noqa: E402
from spam_bow.features.stopwords import StopwordSet  # noqa: E402


@pytest.fixture
def stopwords() -> StopwordSet:
    return StopwordSet.from_lines(["now", "the", "a", "to", "you"])


@pytest.fixture
def small_corpus():
    """
    Five labeled messages, including one made only of punctuation.
    """
    messages = [
        ("spam", "FREE!! WIN cash NOW"),
        ("ham", "Are you coming to the party tonight?"),
        ("spam", "win win WIN a free prize, call now"),
        ("ham", "!!!"),
        ("ham", "Ok see you at the party"),
    ]
    return [
        Document(doc_id=i, raw_text=text, label=label)
        for i, (label, text) in enumerate(messages, start=1)
    ]
