"""
Data loading and record utilities.

This subpackage provides:
- typed records (Document, Token, CountEntry, LabelTable)
- functions to load the labeled message corpus from CSV
- writers for the finished bag-of-words outputs.
"""
