#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Export sinks for frame monitor datasets.
"""

import json
import os
import logging
from abc import ABC, abstractmethod
from typing import List

import h5py
import numpy as np

from frame_monitor.export.dataset import DetectorDataset
from frame_monitor.utils.json_utils import json_dumps

logger = logging.getLogger(__name__)


class DetectorSink(ABC):
    """Destination for exported datasets."""

    @abstractmethod
    def write(self, dataset: DetectorDataset) -> None:
        pass


class MemorySink(DetectorSink):
    """Keeps exported datasets in memory."""

    def __init__(self):
        self.datasets: List[DetectorDataset] = []

    def write(self, dataset: DetectorDataset) -> None:
        self.datasets.append(dataset)


class H5Sink(DetectorSink):
    """
    Writes each dataset as a group of an HDF5 file.

    The group is named after the dataset filename and holds the arrays
    N (counts), I (weight sum), I2 (squared weight sum) and edges.
    """

    def __init__(self, output_path: str):
        """
        :param output_path: Path of the HDF5 file; created or appended to.
        """
        self.output_path = output_path

    def write(self, dataset: DetectorDataset) -> None:
        directory = os.path.dirname(self.output_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with h5py.File(self.output_path, 'a') as f:
            group_name = dataset.filename
            if group_name in f:
                del f[group_name]  # Replace existing group
            grp = f.create_group(group_name)

            grp.create_dataset('N', data=dataset.counts)
            grp.create_dataset('I', data=dataset.weights)
            grp.create_dataset('I2', data=dataset.weights_sq)
            grp.create_dataset('edges', data=dataset.bin_edges())

            for key, value in dataset.header().items():
                if isinstance(value, str):
                    grp.attrs[key] = value
                else:
                    grp.attrs[key] = json_dumps(value)
            grp.attrs['metadata'] = json_dumps(dataset.metadata)

        logger.info(f"Dataset '{dataset.name}' written to {self.output_path}:{group_name}")


class TextSink(DetectorSink):
    """
    Writes each dataset to a column text file in a directory.

    Header lines start with '#'; columns are t, I, I_err, N.
    """

    def __init__(self, output_dir: str, extension: str = ".dat"):
        self.output_dir = output_dir
        self.extension = extension

    def path_for(self, dataset: DetectorDataset) -> str:
        filename = dataset.filename
        if not os.path.splitext(filename)[1]:
            filename += self.extension
        return os.path.join(self.output_dir, filename)

    def write(self, dataset: DetectorDataset) -> None:
        os.makedirs(self.output_dir, exist_ok=True)
        path = self.path_for(dataset)

        header = [f"{key}: {value}" for key, value in dataset.header().items()]
        header.append(f"variables: {dataset.xvar} I I_err N")
        columns = np.column_stack([
            dataset.bin_centers(),
            dataset.weights,
            dataset.errors(),
            dataset.counts,
        ])
        np.savetxt(path, columns, header="\n".join(header), comments="# ", encoding="utf-8")
        logger.info(f"Dataset '{dataset.name}' written to {path}")


def load_h5_dataset(path: str, group_name: str) -> DetectorDataset:
    """Read back a dataset written by H5Sink."""
    with h5py.File(path, 'r') as f:
        if group_name not in f:
            raise ValueError(f"Group {group_name} not found in file {path}")
        grp = f[group_name]
        limits = json.loads(grp.attrs['xlimits'])
        return DetectorDataset(
            name=grp.attrs['name'],
            filename=grp.attrs['filename'],
            limits=(limits[0], limits[1]),
            counts=grp['N'][:],
            weights=grp['I'][:],
            weights_sq=grp['I2'][:],
            title=grp.attrs['title'],
            xlabel=grp.attrs['xlabel'],
            ylabel=grp.attrs['ylabel'],
            xvar=grp.attrs['xvar'],
            metadata=json.loads(grp.attrs['metadata']),
        )


SINK_TYPES = ("h5", "text", "none")


def create_sink(kind: str, output_dir: str, run_name: str = "frame_monitor"):
    """
    Build a sink from its short name.

    Args:
        kind: One of 'h5', 'text' or 'none'
        output_dir: Directory for the exported files
        run_name: Base name of the HDF5 file

    Returns:
        DetectorSink, or None for 'none'
    """
    if kind not in SINK_TYPES:
        raise ValueError(f"Unknown sink type: {kind} (expected one of {list(SINK_TYPES)})")
    if kind == "h5":
        return H5Sink(os.path.join(output_dir, f"{run_name}.h5"))
    if kind == "text":
        return TextSink(output_dir)
    return None
