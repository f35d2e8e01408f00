#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Frame monitor instrument.

Observes particles crossing a rectangle in the z=0 plane and histograms
their arrival time modulo the source period, weighted by particle weight.

Lifecycle of an instance:

    UNCONFIGURED -> RESOLVED -> ACCUMULATING -> EXPORTED | SKIPPED -> RELEASED

Only ACCUMULATING is entered repeatedly, and it may be entered from many
threads at once.
"""

import logging
import threading
from enum import Enum
from typing import Dict, Any, List, Optional, Tuple

import numpy as np

from frame_monitor.exceptions import MonitorStateError
from frame_monitor.export.dataset import DetectorDataset, build_dataset
from frame_monitor.export.sinks import DetectorSink
from frame_monitor.monitor.classifier import (
    NegativeTimePolicy,
    as_policy,
    classify,
    classify_many,
)
from frame_monitor.monitor.engine import Neutron, TransportEngine
from frame_monitor.monitor.histogram import HistogramStore
from frame_monitor.monitor.parameters import MonitorParameters, resolve_parameters

logger = logging.getLogger(__name__)


class MonitorState(str, Enum):
    UNCONFIGURED = "unconfigured"
    RESOLVED = "resolved"
    ACCUMULATING = "accumulating"
    EXPORTED = "exported"
    SKIPPED = "skipped"
    RELEASED = "released"


class FrameMonitor:
    """
    Periodic time-of-flight monitor.

    Args:
        name: Instance identifier, also the default export name
        config: Raw monitor parameters (see parameters.DEFAULT_PARAMETERS)
        negative_times: 'exclude' (default) or 'wrap'

    Raises:
        NullDetectionAreaError: If the detection rectangle is degenerate
    """

    def __init__(self, name: str, config: Optional[Dict[str, Any]] = None,
                 negative_times: str = NegativeTimePolicy.EXCLUDE):
        self.name = name
        self.state = MonitorState.UNCONFIGURED
        self.policy = as_policy(negative_times)

        # Fatal configuration errors propagate before any histogram exists
        self.params: MonitorParameters = resolve_parameters(name, config)
        self.state = MonitorState.RESOLVED

        self.store: Optional[HistogramStore] = HistogramStore(self.params.n_bins)
        self._stats_lock = threading.Lock()
        self.n_seen = 0
        self.n_absorbed = 0
        self.n_excluded = 0

    def _require_accumulating(self):
        if self.state == MonitorState.RESOLVED:
            self.state = MonitorState.ACCUMULATING
        elif self.state != MonitorState.ACCUMULATING:
            raise MonitorStateError(f"{self.name}: cannot accumulate in state '{self.state.value}'")

    def _count(self, seen: int = 0, absorbed: int = 0, excluded: int = 0):
        with self._stats_lock:
            self.n_seen += seen
            self.n_absorbed += absorbed
            self.n_excluded += excluded

    def accumulate(self, index: int, p: float) -> None:
        """Add one classified event of weight p."""
        self._require_accumulating()
        self.store.add(index, p)

    def trace(self, neutron: Neutron, engine: TransportEngine) -> Optional[Neutron]:
        """
        Process one particle arriving from the transport engine.

        Args:
            neutron: Incoming particle state
            engine: Host engine providing propagation, scatter and restore

        Returns:
            The particle after the monitor (restored if restore_neutron is set),
            or None if the engine absorbed it before the plane
        """
        self._require_accumulating()

        at_plane = engine.propagate_to_plane(neutron)
        if at_plane is None:
            self._count(seen=1, absorbed=1)
            return None

        index = classify(at_plane.x, at_plane.y, at_plane.t, self.params, self.policy)
        if index is None:
            self._count(seen=1, excluded=1)
        else:
            self.store.add(index, at_plane.p)
            engine.mark_scattered(at_plane)
            self._count(seen=1)

        if self.params.restore_neutron:
            return engine.restore_state(at_plane)
        return at_plane

    def trace_arrays(self, x: np.ndarray, y: np.ndarray, t: np.ndarray,
                     p: np.ndarray) -> int:
        """
        Classify and accumulate a batch of events already at the plane.

        Returns:
            Number of events accumulated
        """
        self._require_accumulating()
        indices, weights = self.classify_arrays(x, y, t, p)
        accumulated = self.store.add_many(indices, weights)
        self._count(seen=len(indices), excluded=len(indices) - accumulated)
        return accumulated

    def classify_arrays(self, x, y, t, p) -> Tuple[np.ndarray, np.ndarray]:
        indices = classify_many(x, y, t, self.params, self.policy)
        weights = np.asarray(p, dtype=np.float64)
        if weights.shape != indices.shape:
            raise ValueError(f"Weight array shape {weights.shape} does not match events {indices.shape}")
        return indices, weights

    def record_absorbed(self, n_events: int) -> None:
        """Count events the engine absorbed before they reached the plane."""
        self._require_accumulating()
        self._count(seen=n_events, absorbed=n_events)

    def merge_partial(self, partial: HistogramStore, seen: int) -> None:
        """Merge a worker's partial histogram built from `seen` events."""
        self._require_accumulating()
        self.store.merge(partial)
        self._count(seen=seen, excluded=seen - int(partial.counts.sum()))

    def dataset(self) -> DetectorDataset:
        if self.store is None:
            raise MonitorStateError(f"{self.name}: histogram already released")
        return build_dataset(self.params, self.store)

    def finalize(self, sink: Optional[DetectorSink]) -> Optional[DetectorDataset]:
        """
        Export the histogram once, or skip when write_output is off.

        Returns:
            The exported dataset, or None if export was skipped
        """
        if self.state not in (MonitorState.RESOLVED, MonitorState.ACCUMULATING):
            raise MonitorStateError(f"{self.name}: cannot finalize in state '{self.state.value}'")

        logger.info(f"{self.name}: {self.n_seen} events seen, {self.n_absorbed} absorbed, "
                    f"{self.n_excluded} excluded, {self.store.total_counts:.0f} counted")

        if not self.params.write_output or sink is None:
            self.state = MonitorState.SKIPPED
            logger.info(f"{self.name}: output disabled, export skipped")
            return None

        dataset = self.dataset()
        sink.write(dataset)
        self.state = MonitorState.EXPORTED
        return dataset

    def release(self) -> None:
        """Drop the histogram once the export decision has been made."""
        if self.state not in (MonitorState.EXPORTED, MonitorState.SKIPPED):
            raise MonitorStateError(f"{self.name}: cannot release in state '{self.state.value}'")
        self.store = None
        self.state = MonitorState.RELEASED

    def display(self) -> List[Tuple[float, float, float]]:
        """Closed outline of the detection rectangle at z=0."""
        p = self.params
        return [
            (p.xmin, p.ymin, 0.0),
            (p.xmax, p.ymin, 0.0),
            (p.xmax, p.ymax, 0.0),
            (p.xmin, p.ymax, 0.0),
            (p.xmin, p.ymin, 0.0),
        ]
