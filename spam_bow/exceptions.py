"""
Error types raised by the bag-of-words pipeline.

- ConfigurationError: a required resource or setting is missing or invalid.
  Raised before any document is processed; the run aborts.
- InvariantViolationError: the assembled matrix disagrees with the data it
  was built from. This indicates a bug and must never be silenced.

Documents that end up with no surviving tokens are not errors; they are
kept as all-zero rows.
"""

from __future__ import annotations


class BagOfWordsError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(BagOfWordsError):
    """A configuration file, input file or required field is missing or invalid."""


class InvariantViolationError(BagOfWordsError):
    """The document-term matrix failed an internal consistency check."""
