"""
frame_monitor: periodic time-of-flight monitor for particle-transport simulations.
"""

__version__ = "0.1.0"
