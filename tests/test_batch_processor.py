import json

import numpy as np
import pytest

from frame_monitor.monitor.frame_monitor import FrameMonitor
from frame_monitor.pipeline.batch_processor import BatchEventProcessor


def run_monitor(config, events, **kwargs):
    monitor = FrameMonitor("frame_mon", config)
    processor = BatchEventProcessor(monitor, show_progress=False, **kwargs)
    stats = processor.process(events)
    return monitor, processor, stats


def test_parallel_matches_sequential(scenario_config, random_events):
    seq, _, seq_stats = run_monitor(scenario_config, random_events, batch_size=333, num_workers=1)
    par, _, par_stats = run_monitor(scenario_config, random_events, batch_size=333, num_workers=4)

    np.testing.assert_array_equal(seq.store.counts, par.store.counts)
    np.testing.assert_allclose(seq.store.weights, par.store.weights, rtol=1e-12)
    np.testing.assert_allclose(seq.store.weights_sq, par.store.weights_sq, rtol=1e-12)
    assert seq_stats["counted_events"] == par_stats["counted_events"]
    assert seq_stats["batches"] == 16


def test_events_are_propagated_to_plane(scenario_config):
    # Starts 1 m upstream at 1000 m/s: arrives at 1000 us
    events = {
        "x": np.array([0.0, 0.0, 0.0]),
        "y": np.array([0.0, 0.0, 0.0]),
        "z": np.array([-1.0, -1.0, 1.0]),
        "vx": np.array([0.0, 100.0, 0.0]),
        "vy": np.zeros(3),
        "vz": np.array([1000.0, 1000.0, 1000.0]),
        "t": np.zeros(3),
        "p": np.ones(3),
    }
    monitor, _, stats = run_monitor(scenario_config, events)

    # Second event drifts 10 cm sideways, third moves away from the plane
    assert monitor.store.counts[1] == 1
    assert monitor.store.total_counts == 1
    assert stats["absorbed_events"] == 1
    assert stats["excluded_events"] == 1
    assert monitor.n_seen == 3


def test_summary_file(tmp_path, scenario_config, random_events):
    _, processor, stats = run_monitor(scenario_config, random_events, num_workers=2, batch_size=1000)
    path = processor.save_summary(str(tmp_path), extra={"events_file": "events.csv"})

    with open(path) as f:
        summary = json.load(f)
    assert summary["monitor"] == "frame_mon"
    assert summary["parameters"]["n_bins"] == 20
    assert summary["negative_times"] == "exclude"
    assert summary["statistics"]["total_events"] == stats["total_events"]
    assert summary["events_file"] == "events.csv"


@pytest.mark.parametrize("kwargs", [{"batch_size": 0}, {"num_workers": 0}])
def test_invalid_processor_settings(monitor, kwargs):
    with pytest.raises(ValueError):
        BatchEventProcessor(monitor, **kwargs)
