# src/frame_monitor/export/dataset.py
from typing import Dict, Any, Optional, Tuple

import numpy as np


TITLE = "Frame monitor"
XLABEL = "Time-of-flight [µs]"
YLABEL = "Intensity"
XVAR = "t"


class DetectorDataset:
    """Named, axis-labelled 1-D histogram handed to a sink."""

    def __init__(self, name: str, filename: str, limits: Tuple[float, float],
                 counts: np.ndarray, weights: np.ndarray, weights_sq: np.ndarray,
                 title: str = TITLE, xlabel: str = XLABEL, ylabel: str = YLABEL,
                 xvar: str = XVAR, metadata: Optional[Dict[str, Any]] = None):
        if not (len(counts) == len(weights) == len(weights_sq)):
            raise ValueError("counts, weights and weights_sq must have the same length")
        self.name = name
        self.filename = filename
        self.limits = (float(limits[0]), float(limits[1]))
        self.counts = np.asarray(counts, dtype=np.float64)
        self.weights = np.asarray(weights, dtype=np.float64)
        self.weights_sq = np.asarray(weights_sq, dtype=np.float64)
        self.title = title
        self.xlabel = xlabel
        self.ylabel = ylabel
        self.xvar = xvar
        self.metadata = metadata or {}

    @property
    def n_bins(self) -> int:
        return len(self.counts)

    def bin_edges(self) -> np.ndarray:
        return np.linspace(self.limits[0], self.limits[1], self.n_bins + 1)

    def bin_centers(self) -> np.ndarray:
        edges = self.bin_edges()
        return 0.5 * (edges[:-1] + edges[1:])

    def errors(self) -> np.ndarray:
        return np.sqrt(self.weights_sq)

    def header(self) -> Dict[str, Any]:
        """Descriptive fields, without the arrays."""
        return {
            "name": self.name,
            "filename": self.filename,
            "title": self.title,
            "xlabel": self.xlabel,
            "ylabel": self.ylabel,
            "xvar": self.xvar,
            "xlimits": list(self.limits),
            "n_bins": self.n_bins,
            "total_counts": float(self.counts.sum()),
            "total_intensity": float(self.weights.sum()),
        }


def build_dataset(params, store) -> DetectorDataset:
    """
    Package a histogram store into a dataset over [0, period).

    Args:
        params: Resolved MonitorParameters
        store: Filled HistogramStore
    """
    snapshot = store.snapshot()
    return DetectorDataset(
        name=params.name,
        filename=params.filename,
        limits=(0.0, params.period),
        counts=snapshot["counts"],
        weights=snapshot["weights"],
        weights_sq=snapshot["weights_sq"],
        metadata={"parameters": params.to_dict()},
    )
