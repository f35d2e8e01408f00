import math

import pytest

from frame_monitor.exceptions import ConfigurationError, NullDetectionAreaError
from frame_monitor.monitor.parameters import MAX_BINS, resolve_parameters, resolve_filename


def test_width_overrides_explicit_bounds():
    params = resolve_parameters("mon", {"xmin": 1.0, "xmax": 2.0, "xwidth": 0.1,
                                        "ymin": -3.0, "ymax": 3.0, "yheight": 0.2})
    assert params.xmin == pytest.approx(-0.05)
    assert params.xmax == pytest.approx(0.05)
    assert params.ymin == pytest.approx(-0.1)
    assert params.ymax == pytest.approx(0.1)


def test_explicit_bounds_used_without_width():
    params = resolve_parameters("mon", {"xmin": 0.01, "xmax": 0.02, "ymin": -0.5, "ymax": 0.25})
    assert (params.xmin, params.xmax, params.ymin, params.ymax) == (0.01, 0.02, -0.5, 0.25)


@pytest.mark.parametrize("frequency, expected", [(50, 20000.0), (100, 10000.0), (14, 1e6 / 14)])
def test_frequency_overrides_frame(frequency, expected):
    params = resolve_parameters("mon", {"frame": 20000, "frequency": frequency})
    assert params.period == pytest.approx(expected)


def test_frame_used_when_frequency_is_zero():
    params = resolve_parameters("mon", {"frame": 71428.0, "frequency": 0})
    assert params.period == 71428.0


def test_dt_overrides_nt():
    params = resolve_parameters("mon", {"frame": 20000, "dt": 2000, "nt": 20})
    assert params.n_bins == 10
    assert params.tick == pytest.approx(2000.0)
    # The original bin-count request is kept alongside
    assert params.nt == 20


def test_dt_rounds_bin_count_up_and_ignores_sign():
    params = resolve_parameters("mon", {"frame": 20000, "dt": -3000})
    assert params.n_bins == math.ceil(20000 / 3000)
    assert params.tick == pytest.approx(20000 / 7)


def test_nt_used_when_dt_is_zero(scenario_config):
    params = resolve_parameters("mon", scenario_config)
    assert params.n_bins == 20
    assert params.tick == pytest.approx(1000.0)
    assert params.period == 20000.0


def test_null_detection_area_is_fatal():
    with pytest.raises(NullDetectionAreaError):
        resolve_parameters("mon", {"xmin": 0.1, "xmax": 0.05, "ymin": -0.05, "ymax": 0.05})


def test_zero_height_area_is_fatal():
    with pytest.raises(NullDetectionAreaError):
        resolve_parameters("mon", {"ymin": 0.02, "ymax": 0.02})


@pytest.mark.parametrize("config", [
    {"frame": 0},
    {"frame": -10},
    {"nt": 0},
    {"nt": 2.5},
    {"frame": "fast"},
    {"xmin": float("nan")},
    {"frame": 20000, "dt": 1e-320},   # bin count overflows to inf
    {"frame": 20000, "dt": 1e-300},   # finite but far too many bins
    {"nt": MAX_BINS + 1},
    {"nt": float("inf")},
    {"restore_neutron": "false"},
    {"write_output": 0},
])
def test_unusable_values_raise_configuration_error(config):
    with pytest.raises(ConfigurationError):
        resolve_parameters("mon", config)


def test_filename_defaults_to_instance_name():
    assert resolve_parameters("frame_mon", {}).filename == "frame_mon"
    assert resolve_parameters("frame_mon", {"filename": "tof.dat"}).filename == "tof.dat"
    assert resolve_filename("", "mon") == "mon"
    assert resolve_filename(None, "mon") == "mon"


def test_unknown_keys_are_ignored_with_warning(caplog):
    params = resolve_parameters("mon", {"nt": 5, "bogus": 1})
    assert params.n_bins == 5
    assert "bogus" in caplog.text


def test_tick_is_positive_for_valid_configurations():
    for frame in (1.0, 333.3, 20000.0, 1e6):
        for nt in (1, 3, 7, 1000):
            params = resolve_parameters("mon", {"frame": frame, "nt": nt})
            assert params.tick > 0
            assert params.n_bins >= 1


def test_to_dict_echoes_resolved_values(scenario_config):
    echoed = resolve_parameters("mon", scenario_config).to_dict()
    assert echoed["n_bins"] == 20
    assert echoed["write_output"] is True
    assert echoed["filename"] == "mon"


def test_flags_accept_booleans():
    params = resolve_parameters("mon", {"restore_neutron": True, "write_output": False})
    assert params.restore_neutron is True
    assert params.write_output is False
