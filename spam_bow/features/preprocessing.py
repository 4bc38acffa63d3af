"""
Text normalization and tokenization for bag-of-words features.

The normalization applied to every message is:

- case folding (lowercase)
- every maximal run of characters that are not letters or digits
  (punctuation, symbols, underscores, any whitespace) becomes one space
- leading/trailing space is trimmed

Words are therefore split on every non-alphanumeric boundary:
"don't" -> "don", "t" and "e-mail" -> "e", "mail". Digits are kept.

normalize_text is idempotent: normalize_text(normalize_text(x)) equals
normalize_text(x) for every string x.
"""

from __future__ import annotations

import re
from typing import Iterator

from spam_bow.data.records import Token


# Letters and digits only; "_" is part of \w, so it is excluded explicitly.
_NON_ALNUM_RUN = re.compile(r"[\W_]+")


def fold_case(text: str) -> str:
    """
    Case folding shared by the normalizer and the stopword loader.

    Both sides must fold identically, otherwise stopword filtering
    silently under- or over-matches.
    """
    return text.lower()


def normalize_text(text: str) -> str:
    """
    Apply the bag-of-words normalization to a raw message.

    Parameters
    ----------
    text : str
        Raw input text.

    Returns
    -------
    str
        Lowercased text made of alphanumeric words separated by single spaces.
    """
    if not isinstance(text, str):
        text = str(text)

    text = fold_case(text)
    text = _NON_ALNUM_RUN.sub(" ", text)
    return text.strip()


class TokenStream:
    """
    Lazy, restartable sequence of Tokens for one document.

    Every iteration splits the normalized text again, so the stream can be
    consumed any number of times and always yields the same tokens, left
    to right.

    Parameters
    ----------
    text : str
        Normalized text of the document.
    doc_id : int
        Id of the owning document.
    """

    def __init__(self, text: str, doc_id: int) -> None:
        self.text = text
        self.doc_id = doc_id

    def __iter__(self) -> Iterator[Token]:
        for term in self.text.split():
            if term:
                yield Token(doc_id=self.doc_id, term=term)

    def __repr__(self) -> str:
        return f"TokenStream(doc_id={self.doc_id!r}, text={self.text!r})"


def tokenize_text(text: str, doc_id: int) -> TokenStream:
    """
    Tokenize normalized text into a TokenStream owned by doc_id.

    Parameters
    ----------
    text : str
        Text string (already normalized).
    doc_id : int
        Id of the document the tokens belong to.

    Returns
    -------
    TokenStream
        Restartable iterable of Token values.
    """
    return TokenStream(text, doc_id)
