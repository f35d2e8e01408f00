import numpy as np
import pytest

from frame_monitor.monitor.frame_monitor import FrameMonitor


@pytest.fixture
def scenario_config():
    # 20 bins of 1000 us over a 20000 us frame, 10 cm x 10 cm rectangle
    return {"xwidth": 0.1, "yheight": 0.1, "frame": 20000, "dt": 0, "nt": 20}


@pytest.fixture
def monitor(scenario_config):
    return FrameMonitor("frame_mon", scenario_config)


@pytest.fixture
def random_events():
    rng = np.random.default_rng(12345)
    n = 5000
    return {
        "x": rng.uniform(-0.08, 0.08, n),
        "y": rng.uniform(-0.08, 0.08, n),
        "z": np.zeros(n),
        "vx": np.zeros(n),
        "vy": np.zeros(n),
        "vz": np.ones(n),
        "t": rng.uniform(0.0, 0.1, n),
        "p": rng.uniform(0.1, 2.0, n),
    }
