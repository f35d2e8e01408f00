# src/frame_monitor/pipeline/batch_processor.py
from typing import Dict, List, Optional, Any
import os
import time
import logging
from datetime import datetime
from concurrent.futures import ThreadPoolExecutor, as_completed

import numpy as np
from tqdm import tqdm

from frame_monitor.monitor.engine import BallisticEngine
from frame_monitor.monitor.frame_monitor import FrameMonitor
from frame_monitor.monitor.histogram import HistogramStore
from frame_monitor.utils.json_utils import json_dump

logger = logging.getLogger(__name__)


class BatchEventProcessor:
    """
    Feeds an event table through a FrameMonitor in batches.

    Events are first propagated ballistically to the monitor plane. With a
    single worker each batch is accumulated straight into the monitor. With
    several workers each batch is classified on a thread into its own
    partial histogram, and the partial histograms are merged into the
    monitor as they complete.
    """

    def __init__(self, monitor: FrameMonitor, batch_size: int = 10000,
                 num_workers: int = 1, show_progress: bool = True):
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        if num_workers < 1:
            raise ValueError(f"num_workers must be >= 1, got {num_workers}")
        self.monitor = monitor
        self.batch_size = batch_size
        self.num_workers = num_workers
        self.show_progress = show_progress
        self.stats: Dict[str, Any] = {}

    def _batches(self, n_events: int) -> List[slice]:
        return [slice(start, min(start + self.batch_size, n_events))
                for start in range(0, n_events, self.batch_size)]

    def process(self, events: Dict[str, np.ndarray]) -> Dict[str, Any]:
        """
        Process all events.

        Args:
            events: Column arrays as returned by load_events

        Returns:
            Processing statistics
        """
        n_events = len(events["x"])
        logger.info(f"Processing {n_events} events in batches of {self.batch_size} "
                    f"with {self.num_workers} worker(s)")

        start = time.perf_counter()
        moved, reached = BallisticEngine.propagate_arrays(events)
        at_plane = {name: column[reached] for name, column in moved.items()}
        n_absorbed = n_events - len(at_plane["x"])
        self.monitor.record_absorbed(n_absorbed)
        batches = self._batches(len(at_plane["x"]))

        if self.num_workers > 1:
            self._process_batches_parallel(at_plane, batches)
        else:
            self._process_batches_sequential(at_plane, batches)

        self.stats = {
            "total_events": n_events,
            "batches": len(batches),
            "num_workers": self.num_workers,
            "absorbed_events": n_absorbed,
            "counted_events": self.monitor.store.total_counts,
            "excluded_events": self.monitor.n_excluded,
            "elapsed_seconds": round(time.perf_counter() - start, 6),
        }
        logger.info(f"Processed {n_events} events: {self.stats['counted_events']:.0f} counted, "
                    f"{self.stats['excluded_events']} excluded, {n_absorbed} absorbed")
        return self.stats

    def _process_batches_sequential(self, events: Dict[str, np.ndarray], batches: List[slice]):
        """Process batches on the calling thread"""
        for batch in tqdm(batches, desc="Processing batches", disable=not self.show_progress):
            accumulated = self.monitor.trace_arrays(
                events["x"][batch], events["y"][batch], events["t"][batch], events["p"][batch]
            )
            logger.debug(f"Batch {batch.start}:{batch.stop} accumulated {accumulated} events")

    def _classify_batch(self, events: Dict[str, np.ndarray], batch: slice) -> HistogramStore:
        indices, weights = self.monitor.classify_arrays(
            events["x"][batch], events["y"][batch], events["t"][batch], events["p"][batch]
        )
        return HistogramStore.partial(indices, weights, self.monitor.params.n_bins)

    def _process_batches_parallel(self, events: Dict[str, np.ndarray], batches: List[slice]):
        """Process batches on a thread pool, one partial histogram per batch"""
        with ThreadPoolExecutor(max_workers=self.num_workers) as executor:
            futures = {executor.submit(self._classify_batch, events, batch): batch
                       for batch in batches}
            for future in tqdm(as_completed(futures), total=len(futures),
                               desc="Processing batches", disable=not self.show_progress):
                batch = futures[future]
                partial = future.result()
                self.monitor.merge_partial(partial, seen=batch.stop - batch.start)
                logger.debug(f"Batch {batch.start}:{batch.stop} merged "
                             f"({partial.total_counts:.0f} events)")

    def save_summary(self, output_dir: str, extra: Optional[Dict[str, Any]] = None) -> str:
        """Save a processing summary next to the exported data"""
        os.makedirs(output_dir, exist_ok=True)
        summary_file = os.path.join(output_dir, f"{self.monitor.name}_summary.json")

        summary = {
            "monitor": self.monitor.name,
            "creation_timestamp": datetime.now().isoformat(),
            "parameters": self.monitor.params.to_dict(),
            "negative_times": self.monitor.policy.value,
            "statistics": self.stats,
        }
        if extra:
            summary.update(extra)

        with open(summary_file, 'w') as f:
            json_dump(summary, f, indent=2)

        logger.info(f"Processing summary saved to: {summary_file}")
        return summary_file
