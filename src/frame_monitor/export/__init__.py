"""
Frame monitor export package.

Turns a filled histogram into a labelled dataset and hands it to a sink.
"""

from frame_monitor.export.dataset import DetectorDataset, build_dataset
from frame_monitor.export.sinks import (
    DetectorSink,
    MemorySink,
    H5Sink,
    TextSink,
    create_sink,
    load_h5_dataset,
)

__all__ = [
    'DetectorDataset',
    'build_dataset',
    'DetectorSink',
    'MemorySink',
    'H5Sink',
    'TextSink',
    'create_sink',
    'load_h5_dataset',
]
