#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Loading of particle event tables for offline monitor runs.

Events are read from CSV (pandas) or HDF5 (h5py) files into a dictionary of
float64 arrays. Required columns are x, y, t and p; z, vx, vy and vz are
optional and default to an event already sitting on the plane.
"""

import os
import logging
from typing import Dict, Optional

import h5py
import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("x", "y", "t", "p")
OPTIONAL_COLUMNS = {"z": 0.0, "vx": 0.0, "vy": 0.0, "vz": 1.0}


def _complete(columns: Dict[str, np.ndarray], source: str) -> Dict[str, np.ndarray]:
    missing = [c for c in REQUIRED_COLUMNS if c not in columns]
    if missing:
        raise ValueError(f"Event file {source} is missing required columns: {missing}")

    n_events = len(columns["x"])
    events = {c: np.asarray(columns[c], dtype=np.float64) for c in REQUIRED_COLUMNS}
    for name, default in OPTIONAL_COLUMNS.items():
        if name in columns:
            events[name] = np.asarray(columns[name], dtype=np.float64)
        else:
            events[name] = np.full(n_events, default, dtype=np.float64)

    lengths = {k: len(v) for k, v in events.items()}
    if len(set(lengths.values())) != 1:
        raise ValueError(f"Event columns in {source} have different lengths: {lengths}")
    return events


def load_csv_events(path: str) -> Dict[str, np.ndarray]:
    df = pd.read_csv(path, comment="#", skipinitialspace=True)
    df.columns = [str(c).strip() for c in df.columns]
    return _complete({c: df[c].to_numpy() for c in df.columns}, path)


def load_h5_events(path: str, group: Optional[str] = None) -> Dict[str, np.ndarray]:
    with h5py.File(path, 'r') as f:
        node = f[group] if group else f
        columns = {name: node[name][:] for name in node.keys()
                   if isinstance(node[name], h5py.Dataset)}
    return _complete(columns, path)


def load_events(path: str, group: Optional[str] = None) -> Dict[str, np.ndarray]:
    """
    Load an event table.

    Args:
        path: CSV (.csv, .txt) or HDF5 (.h5, .hdf5) file
        group: Optional HDF5 group holding one dataset per column

    Returns:
        Dictionary of column name -> float64 array
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Event file not found: {path}")

    ext = os.path.splitext(path)[1].lower()
    if ext in (".h5", ".hdf5"):
        events = load_h5_events(path, group)
    elif ext in (".csv", ".txt"):
        events = load_csv_events(path)
    else:
        raise ValueError(f"Unsupported event file type: {ext}")

    logger.info(f"Loaded {len(events['x'])} events from {path}")
    return events
