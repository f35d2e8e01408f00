"""
Frame monitor core: parameter resolution, classification and accumulation.
"""

from frame_monitor.monitor.parameters import MonitorParameters, resolve_parameters
from frame_monitor.monitor.classifier import NegativeTimePolicy, classify, classify_many
from frame_monitor.monitor.histogram import HistogramStore
from frame_monitor.monitor.engine import Neutron, TransportEngine, BallisticEngine
from frame_monitor.monitor.frame_monitor import FrameMonitor, MonitorState

__all__ = [
    'MonitorParameters',
    'resolve_parameters',
    'NegativeTimePolicy',
    'classify',
    'classify_many',
    'HistogramStore',
    'Neutron',
    'TransportEngine',
    'BallisticEngine',
    'FrameMonitor',
    'MonitorState',
]
