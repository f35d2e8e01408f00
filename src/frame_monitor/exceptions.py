#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Exceptions raised by the frame monitor.
"""


class ConfigurationError(ValueError):
    """Raised when the monitor configuration cannot be resolved."""
    pass


class NullDetectionAreaError(ConfigurationError):
    """Raised when the detection rectangle has no area (xmin >= xmax or ymin >= ymax)."""
    pass


class MonitorStateError(RuntimeError):
    """Raised when a monitor operation is called in the wrong lifecycle state."""
    pass
