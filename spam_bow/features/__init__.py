"""
Text preprocessing and bag-of-words feature extraction.

This subpackage includes:
- text normalization and tokenization
- stopword loading and filtering
- per-document term frequency counting
- document-term matrix assembly and the two-pass pipeline driver.
"""
