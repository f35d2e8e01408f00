import h5py
import numpy as np
import pytest

from frame_monitor.data.event_loader import load_events


def test_csv_events_with_defaults(tmp_path):
    path = tmp_path / "events.csv"
    path.write_text("x,y,t,p\n0.0,0.0,0.0005,1.0\n0.01,-0.01,0.0015,0.5\n")

    events = load_events(str(path))

    assert events["x"].tolist() == [0.0, 0.01]
    assert events["p"].tolist() == [1.0, 0.5]
    assert events["z"].tolist() == [0.0, 0.0]
    assert events["vz"].tolist() == [1.0, 1.0]


def test_h5_events_in_group(tmp_path):
    path = tmp_path / "events.h5"
    with h5py.File(path, "w") as f:
        grp = f.create_group("run1")
        for name in ("x", "y", "z", "vx", "vy", "vz", "t", "p"):
            grp.create_dataset(name, data=np.arange(3, dtype=np.float64))

    events = load_events(str(path), group="run1")
    assert set(events) == {"x", "y", "z", "vx", "vy", "vz", "t", "p"}
    assert events["t"].tolist() == [0.0, 1.0, 2.0]


def test_missing_column_rejected(tmp_path):
    path = tmp_path / "events.csv"
    path.write_text("x,y,t\n0,0,0\n")
    with pytest.raises(ValueError, match="p"):
        load_events(str(path))


def test_unknown_extension_and_missing_file(tmp_path):
    path = tmp_path / "events.json"
    path.write_text("{}")
    with pytest.raises(ValueError):
        load_events(str(path))
    with pytest.raises(FileNotFoundError):
        load_events(str(tmp_path / "absent.csv"))
