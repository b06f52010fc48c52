"""Null-distribution plot for a permutation test."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import matplotlib.pyplot as plt
import numpy as np

logger = logging.getLogger(__name__)


PLOT_PARAMS = {
    "figure.dpi": 150,
    "savefig.dpi": 300,
    "savefig.bbox": "tight",
    "font.size": 10,
    "axes.labelsize": 11,
    "legend.fontsize": 9,
    "axes.spines.top": False,
    "axes.spines.right": False,
}


def plot_null_distribution(
    null_distribution: np.ndarray,
    observed_difference: float,
    effect_size: float,
    p_value: float,
    bins: int = 20,
    output_path: Optional[Path] = None,
):
    """Histogram of permuted differences with the observed difference marked.

    The legend carries the effect size and p-value. If ``output_path`` is
    given the figure is saved there and closed; otherwise it is returned open.
    """
    null_distribution = np.asarray(null_distribution, dtype=float)
    finite = null_distribution[np.isfinite(null_distribution)]

    with plt.rc_context(PLOT_PARAMS):
        fig, ax = plt.subplots(figsize=(7, 4.5))
        ax.hist(finite, bins=bins, color="#3498DB", edgecolor="white")
        ax.plot(
            [observed_difference], [0], "*", color="#E74C3C", markersize=12,
            clip_on=False, zorder=3,
            label=f"Observed difference.\nEffect size: {effect_size:.2f},\np = {p_value:f}",
        )
        ax.set_xlabel("Random differences")
        ax.set_ylabel("Count")
        ax.legend()

        if output_path is not None:
            output_path = Path(output_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            fig.savefig(output_path)
            plt.close(fig)
            logger.info("Saved null distribution plot: %s", output_path)
            return None

    return fig
