"""
Plotting utilities for vocabulary analysis.

This module provides a helper to visualize the most frequent terms of a
corpus as a horizontal bar chart, most frequent at the top.

These plots are for reporting only; nothing in the feature pipeline
depends on them.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import matplotlib.pyplot as plt


def plot_top_terms(
    top_terms: Sequence[Tuple[str, int]],
    top_k: Optional[int] = 15,
    figsize: Tuple[float, float] = (8.0, 6.0),
    color: str = "steelblue",
    title: Optional[str] = None,
    out_path: Optional[str] = None,
    show: bool = True,
):
    """
    Plot a horizontal bar chart of term frequencies.

    Parameters
    ----------
    top_terms : Sequence[Tuple[str, int]]
        (term, frequency) pairs, highest first, as produced by
        `analyze_vocabulary(...).top_terms`.
    top_k : Optional[int]
        If provided, only the first top_k terms are shown.
    figsize : Tuple[float, float]
        Figure size in inches.
    color : str
        Bar color.
    title : Optional[str]
        Title for the plot. If None, a default is constructed.
    out_path : Optional[str]
        If provided, save the figure to this path (e.g., PNG).
    show : bool
        If True, call plt.show(). If False, just return the figure/axes.

    Returns
    -------
    (fig, ax)
        Matplotlib Figure and Axes objects.
    """
    pairs = list(top_terms)
    if not pairs:
        raise ValueError("top_terms is empty; nothing to plot.")

    if top_k is not None and top_k > 0:
        pairs = pairs[:top_k]

    # barh draws bottom-up; reverse so the most frequent term is on top.
    terms = [term for term, _ in reversed(pairs)]
    freqs = [int(freq) for _, freq in reversed(pairs)]

    fig, ax = plt.subplots(figsize=figsize)
    ax.barh(terms, freqs, color=color)

    ax.set_xlabel("Frequency")
    ax.set_ylabel("Words")

    if title is None:
        title = f"Top {len(pairs)} Most Frequent Words"
    ax.set_title(title)

    fig.tight_layout()

    if out_path is not None:
        fig.savefig(out_path, dpi=150, bbox_inches="tight")

    if show:
        plt.show()

    return fig, ax
