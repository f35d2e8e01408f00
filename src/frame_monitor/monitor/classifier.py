#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Event classification for the frame monitor.

An event at the detection plane is either excluded or assigned a time bin.
Arrival times (seconds) are converted to microseconds and folded into the
frame period before binning. All functions here are pure.
"""

import math
from enum import Enum
from typing import Optional, Union

import numpy as np

from frame_monitor.monitor.parameters import MonitorParameters, US_PER_S

EXCLUDED = -1


class NegativeTimePolicy(str, Enum):
    """How arrival times before t=0 are folded into the frame."""
    # Sign-preserving remainder: negative times give a negative phase and are excluded
    EXCLUDE = "exclude"
    # Floor remainder: negative times wrap forward into [0, period)
    WRAP = "wrap"


def as_policy(value: Union[str, NegativeTimePolicy, None]) -> NegativeTimePolicy:
    if value is None:
        return NegativeTimePolicy.EXCLUDE
    try:
        return NegativeTimePolicy(value)
    except ValueError:
        raise ValueError(f"Unknown negative time policy: {value!r} "
                         f"(expected one of {[p.value for p in NegativeTimePolicy]})")


def inside_rectangle(x: float, y: float, params: MonitorParameters) -> bool:
    """Strict inclusion test; events on the edges are outside."""
    return params.xmin < x < params.xmax and params.ymin < y < params.ymax


def fold_time(t_us: float, period: float,
              policy: NegativeTimePolicy = NegativeTimePolicy.EXCLUDE) -> float:
    """Fold a time in microseconds into the frame period."""
    if policy == NegativeTimePolicy.WRAP:
        return t_us % period
    return math.fmod(t_us, period)


def time_bin(t: float, params: MonitorParameters,
             policy: NegativeTimePolicy = NegativeTimePolicy.EXCLUDE) -> Optional[int]:
    """
    Compute the periodic time bin of an arrival time.

    Args:
        t: Arrival time in seconds
        params: Resolved monitor parameters
        policy: Negative-time folding policy

    Returns:
        Bin index in [0, n_bins), or None when the index falls outside
    """
    t_us = t * US_PER_S
    # Huge finite times overflow to inf in microseconds
    if not math.isfinite(t_us):
        return None
    phase = fold_time(t_us, params.period, policy)
    index = math.floor(phase / params.tick)
    if 0 <= index < params.n_bins:
        return index
    return None


def classify(x: float, y: float, t: float, params: MonitorParameters,
             policy: NegativeTimePolicy = NegativeTimePolicy.EXCLUDE) -> Optional[int]:
    """Return the bin index of an event, or None when it is excluded."""
    # NaN coordinates fail every comparison and are excluded here
    if not inside_rectangle(x, y, params):
        return None
    return time_bin(t, params, policy)


def classify_many(x: np.ndarray, y: np.ndarray, t: np.ndarray, params: MonitorParameters,
                  policy: NegativeTimePolicy = NegativeTimePolicy.EXCLUDE) -> np.ndarray:
    """
    Vectorized classify.

    Returns:
        int64 array of bin indices, EXCLUDED (-1) for excluded events
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    t = np.asarray(t, dtype=np.float64)
    if not (x.shape == y.shape == t.shape):
        raise ValueError(f"Event arrays must have the same shape, got {x.shape}, {y.shape}, {t.shape}")

    inside = (x > params.xmin) & (x < params.xmax) & (y > params.ymin) & (y < params.ymax)
    with np.errstate(over="ignore"):
        t_us = np.where(inside, t, 0.0) * US_PER_S
    inside &= np.isfinite(t_us)
    t_us = np.where(inside, t_us, 0.0)
    if policy == NegativeTimePolicy.WRAP:
        phase = np.mod(t_us, params.period)
    else:
        phase = np.fmod(t_us, params.period)
    raw_index = np.floor(phase / params.tick)

    valid = inside & (raw_index >= 0) & (raw_index < params.n_bins)
    indices = np.full(x.shape, EXCLUDED, dtype=np.int64)
    indices[valid] = raw_index[valid].astype(np.int64)
    return indices
