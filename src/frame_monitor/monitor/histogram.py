#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Histogram store for the frame monitor.

Three parallel float64 arrays indexed by time bin:

- counts: number of events in the bin
- weights: sum of event weights p
- weights_sq: sum of p**2, used downstream for uncertainty estimates

Single-event updates take the lock of their own bin only, so writers on
different bins never contend. Batch updates go through a private partial
store which is merged elementwise. Sums do not depend on the order events
arrive in, but floating-point bit patterns can differ from one accumulation
order to another. That difference is accepted and is not a defect.
"""

import threading
import logging
from typing import Dict

import numpy as np

logger = logging.getLogger(__name__)


class HistogramStore:
    """Owned buffer of per-bin counters with atomic per-bin updates."""

    def __init__(self, n_bins: int):
        if n_bins < 1:
            raise ValueError(f"n_bins must be >= 1, got {n_bins}")
        self.n_bins = int(n_bins)
        self.counts = np.zeros(self.n_bins, dtype=np.float64)
        self.weights = np.zeros(self.n_bins, dtype=np.float64)
        self.weights_sq = np.zeros(self.n_bins, dtype=np.float64)
        self._locks = [threading.Lock() for _ in range(self.n_bins)]

    def __len__(self) -> int:
        return self.n_bins

    def add(self, index: int, p: float) -> None:
        """Add one event of weight p to bin `index`."""
        with self._locks[index]:
            self.counts[index] += 1
            self.weights[index] += p
            self.weights_sq[index] += p * p

    def add_many(self, indices: np.ndarray, weights: np.ndarray) -> int:
        """
        Add a batch of classified events.

        Args:
            indices: Bin indices; negative entries are skipped
            weights: Event weights, same length as indices

        Returns:
            Number of events accumulated
        """
        partial = self.partial(indices, weights, self.n_bins)
        self.merge(partial)
        return int(partial.counts.sum())

    @classmethod
    def partial(cls, indices: np.ndarray, weights: np.ndarray, n_bins: int) -> "HistogramStore":
        """Build an unshared store from a batch of classified events."""
        indices = np.asarray(indices, dtype=np.int64)
        weights = np.asarray(weights, dtype=np.float64)
        if indices.shape != weights.shape:
            raise ValueError(f"indices and weights must have the same shape, "
                             f"got {indices.shape} and {weights.shape}")

        store = cls(n_bins)
        keep = (indices >= 0) & (indices < n_bins)
        idx = indices[keep]
        w = weights[keep]
        np.add.at(store.counts, idx, 1.0)
        np.add.at(store.weights, idx, w)
        np.add.at(store.weights_sq, idx, w * w)
        return store

    def merge(self, other: "HistogramStore") -> "HistogramStore":
        """Add another store of the same length into this one, bin by bin."""
        if other.n_bins != self.n_bins:
            raise ValueError(f"Cannot merge histogram of {other.n_bins} bins into {self.n_bins} bins")
        for i in np.flatnonzero(other.counts):
            with self._locks[i]:
                self.counts[i] += other.counts[i]
                self.weights[i] += other.weights[i]
                self.weights_sq[i] += other.weights_sq[i]
        return self

    @property
    def total_counts(self) -> float:
        return float(self.counts.sum())

    def uncertainties(self) -> np.ndarray:
        """Per-bin statistical uncertainty of the weighted sum."""
        return np.sqrt(self.weights_sq)

    def snapshot(self) -> Dict[str, np.ndarray]:
        """Copies of the three arrays."""
        return {
            "counts": self.counts.copy(),
            "weights": self.weights.copy(),
            "weights_sq": self.weights_sq.copy(),
        }

    def reset(self) -> None:
        for i in range(self.n_bins):
            with self._locks[i]:
                self.counts[i] = 0.0
                self.weights[i] = 0.0
                self.weights_sq[i] = 0.0
        logger.debug(f"Histogram of {self.n_bins} bins reset")
