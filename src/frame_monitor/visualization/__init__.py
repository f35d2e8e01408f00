"""
Visualization module for the frame monitor.

This module provides plots of the frame histogram and the detection area.
"""

from .plotting import plot_frame_histogram, plot_detection_area, save_monitor_plot

__all__ = ["plot_frame_histogram", "plot_detection_area", "save_monitor_plot"]
