#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Host transport engine interface.

The monitor never moves particles itself. It calls into a TransportEngine to
bring a particle to the detection plane, to record that it interacted, and
to restore its incoming state when the monitor must not disturb it.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)


class Neutron:
    """Particle state as supplied by the transport engine."""

    __slots__ = ("x", "y", "z", "vx", "vy", "vz", "t", "sx", "sy", "sz", "p")

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0,
                 vx: float = 0.0, vy: float = 0.0, vz: float = 0.0,
                 t: float = 0.0, sx: float = 0.0, sy: float = 0.0, sz: float = 0.0,
                 p: float = 1.0):
        self.x = x
        self.y = y
        self.z = z
        self.vx = vx
        self.vy = vy
        self.vz = vz
        self.t = t
        self.sx = sx
        self.sy = sy
        self.sz = sz
        self.p = p

    def copy(self) -> "Neutron":
        return Neutron(**self.as_dict())

    def as_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in self.__slots__}

    def __eq__(self, other):
        if not isinstance(other, Neutron):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __repr__(self):
        fields = ", ".join(f"{k}={v!r}" for k, v in self.as_dict().items())
        return f"Neutron({fields})"


class TransportEngine(ABC):
    """Callbacks the monitor uses; implemented by the transport engine."""

    @abstractmethod
    def propagate_to_plane(self, neutron: Neutron) -> Optional[Neutron]:
        """
        Move the particle to the z=0 plane of the monitor.

        Returns:
            The particle at the plane, or None if it never reaches it
        """
        pass

    @abstractmethod
    def mark_scattered(self, neutron: Neutron) -> None:
        """Record that the particle interacted with the monitor."""
        pass

    @abstractmethod
    def restore_state(self, neutron: Neutron) -> Neutron:
        """Return the particle in the state it had before the monitor saw it."""
        pass


class BallisticEngine(TransportEngine):
    """
    Straight-line propagation to z=0 with no gravity.

    Keeps the incoming state of the last particle propagated on each thread
    so that restore_state can hand it back.
    """

    def __init__(self):
        self.scattered = 0
        self.absorbed = 0
        self._counter_lock = threading.Lock()
        self._local = threading.local()

    def propagate_to_plane(self, neutron: Neutron) -> Optional[Neutron]:
        self._local.saved = neutron.copy()
        dt = -neutron.z / neutron.vz if neutron.vz != 0 else -1.0
        if neutron.vz == 0 or dt < 0:
            # Parallel to or moving away from the plane
            with self._counter_lock:
                self.absorbed += 1
            return None

        moved = neutron.copy()
        moved.x += neutron.vx * dt
        moved.y += neutron.vy * dt
        moved.z = 0.0
        moved.t += dt
        return moved

    @staticmethod
    def propagate_arrays(events: Dict[str, np.ndarray]) -> Tuple[Dict[str, np.ndarray], np.ndarray]:
        """
        Vectorized propagate_to_plane for a table of events.

        Returns:
            (events at the plane, boolean mask of events that reached it)
        """
        z = np.asarray(events["z"], dtype=np.float64)
        vz = np.asarray(events["vz"], dtype=np.float64)
        reached = vz != 0
        dt = np.zeros_like(z)
        np.divide(-z, vz, out=dt, where=reached)
        reached &= dt >= 0
        dt = np.where(reached, dt, 0.0)

        moved = dict(events)
        moved["x"] = events["x"] + events["vx"] * dt
        moved["y"] = events["y"] + events["vy"] * dt
        moved["z"] = np.where(reached, 0.0, z)
        moved["t"] = events["t"] + dt
        return moved, reached

    def mark_scattered(self, neutron: Neutron) -> None:
        with self._counter_lock:
            self.scattered += 1

    def restore_state(self, neutron: Neutron) -> Neutron:
        saved = getattr(self._local, "saved", None)
        if saved is None:
            logger.warning("restore_state called before any propagation; keeping current state")
            return neutron
        return saved.copy()
