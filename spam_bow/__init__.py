"""
Top-level package for the bag-of-words SMS spam feature pipeline.

This package contains modules for:
- corpus loading and typed document records
- text normalization, tokenization and stopword filtering
- per-document frequency counting and document-term matrix assembly
- vocabulary statistics and reporting helpers
- shared configuration and logging utilities

The resulting document-term matrix is the input to downstream spam
classifiers; model training itself lives outside this package.
"""
