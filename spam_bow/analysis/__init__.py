"""
Vocabulary analysis utilities.

This subpackage offers:
- corpus-wide term totals and top-term ranking
- singleton / high-frequency vocabulary statistics
- plotting of the most frequent terms.
"""
