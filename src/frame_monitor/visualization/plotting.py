import os
from typing import Optional, Sequence, Tuple

import numpy as np
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from frame_monitor.export.dataset import DetectorDataset


def plot_frame_histogram(dataset: DetectorDataset, ax=None, show_errors: bool = True,
                         color: str = "tab:blue"):
    """
    Step plot of the weighted frame histogram.

    Parameters:
        dataset: Exported monitor dataset
        ax: Matplotlib axis; a new figure is created if None
        show_errors: Draw sqrt(I2) error bars at the bin centres

    Returns:
        The axis drawn on
    """
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 5))

    edges = dataset.bin_edges()
    ax.stairs(dataset.weights, edges, color=color, label=dataset.filename)
    if show_errors:
        ax.errorbar(dataset.bin_centers(), dataset.weights, yerr=dataset.errors(),
                    fmt="none", ecolor=color, alpha=0.6)

    ax.set_xlim(dataset.limits)
    ax.set_xlabel(dataset.xlabel)
    ax.set_ylabel(dataset.ylabel)
    ax.set_title(f"{dataset.title}: {dataset.name}")
    ax.legend(loc="upper right")
    return ax


def plot_detection_area(outline: Sequence[Tuple[float, float, float]], ax=None):
    """Draw the detection rectangle outline (x, y) returned by FrameMonitor.display()."""
    if ax is None:
        _, ax = plt.subplots(figsize=(5, 5))
    points = np.asarray(outline, dtype=np.float64)
    ax.plot(points[:, 0], points[:, 1], color="k")
    ax.set_aspect("equal")
    ax.set_xlabel("x [m]")
    ax.set_ylabel("y [m]")
    return ax


def save_monitor_plot(dataset: DetectorDataset, outline, output_path: str) -> str:
    """Histogram and detection area side by side, saved as an image."""
    fig, (ax_hist, ax_area) = plt.subplots(1, 2, figsize=(13, 5),
                                           gridspec_kw={"width_ratios": [2, 1]})
    plot_frame_histogram(dataset, ax=ax_hist)
    plot_detection_area(outline, ax=ax_area)
    fig.tight_layout()

    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    fig.savefig(output_path, dpi=150)
    plt.close(fig)
    return output_path
