"""
Stopword loading and filtering.

A StopwordSet is loaded once from a line-delimited text file, trimmed,
stripped of blank lines and case-folded exactly like message text. It is
immutable and picklable, so the same instance can be shared read-only by
every worker of the map phase.

StopwordFilter implements anti-join semantics: a token is dropped iff its
term is exactly one of the stopwords. There is no substring or prefix
matching.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Iterator, Tuple

from spam_bow.data.records import Token
from spam_bow.exceptions import ConfigurationError
from spam_bow.features.preprocessing import fold_case, normalize_text


@dataclass(frozen=True)
class StopwordSet:
    words: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "StopwordSet":
        """
        Build a StopwordSet from candidate lines.

        Parameters
        ----------
        lines : Iterable[str]
            One candidate term per item; surrounding whitespace is trimmed
            and blank lines are ignored.

        Returns
        -------
        StopwordSet
            Case-folded, deduplicated stopwords.
        """
        words = set()
        for line in lines:
            word = line.strip()
            if word:
                words.add(fold_case(word))
        return cls(words=frozenset(words))

    @classmethod
    def from_file(cls, path: str, encoding: str = "utf-8") -> "StopwordSet":
        """
        Load stopwords from a line-delimited text file.

        Raises
        ------
        ConfigurationError
            If the file does not exist or cannot be read/decoded.
        """
        try:
            with open(path, "r", encoding=encoding) as f:
                return cls.from_lines(f)
        except FileNotFoundError as exc:
            raise ConfigurationError(f"Stopword file not found: {path}") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigurationError(f"Stopword file could not be read: {path} ({exc})") from exc

    def __contains__(self, term: object) -> bool:
        return term in self.words

    def __len__(self) -> int:
        return len(self.words)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.words))

    def unmatchable_words(self) -> Tuple[str, ...]:
        """
        Stopwords that no token can ever equal, sorted.

        Tokens come from normalized text, so an entry containing
        punctuation, symbols or inner whitespace (e.g. "don't", "e-mail")
        never matches: message text splits "don't" into "don" and "t".
        """
        return tuple(word for word in sorted(self.words) if normalize_text(word) != word)


class StopwordFilter:
    """
    Predicate removing tokens whose term is in a StopwordSet.
    """

    def __init__(self, stopwords: StopwordSet) -> None:
        self.stopwords = stopwords

    def keep(self, token: Token) -> bool:
        return token.term not in self.stopwords

    def filter(self, tokens: Iterable[Token]) -> Iterator[Token]:
        """
        Lazily yield the tokens that are not stopwords, preserving order.
        """
        for token in tokens:
            if self.keep(token):
                yield token
