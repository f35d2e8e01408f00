#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Parameter resolution for the frame monitor.

The raw configuration may describe the same quantity twice (bounds vs.
width/height, frame vs. frequency, bin width vs. bin count). This module
applies the override precedence once, at setup, and returns an immutable
set of resolved parameters.
"""

import math
import logging
from typing import Dict, Any, NamedTuple, Optional

from frame_monitor.exceptions import ConfigurationError, NullDetectionAreaError

logger = logging.getLogger(__name__)

# Defaults of the instrument definition
DEFAULT_PARAMETERS = {
    "xmin": -0.05,
    "xmax": 0.05,
    "ymin": -0.05,
    "ymax": 0.05,
    "xwidth": 0.0,
    "yheight": 0.0,
    "frame": 20000.0,
    "frequency": 0.0,
    "dt": 0.0,
    "nt": 20,
    "restore_neutron": False,
    "write_output": True,
    "filename": "",
}

US_PER_S = 1e6

# Each bin carries its own lock, so the bin count is bounded
MAX_BINS = 1_000_000


class MonitorParameters(NamedTuple):
    """Resolved, immutable monitor configuration."""
    name: str
    xmin: float
    xmax: float
    ymin: float
    ymax: float
    period: float
    n_bins: int
    tick: float
    nt: int
    restore_neutron: bool
    write_output: bool
    filename: str

    def to_dict(self) -> Dict[str, Any]:
        """Echo the resolved configuration as a plain dictionary."""
        return dict(self._asdict())


def resolve_filename(filename: Optional[str], name: str) -> str:
    """Return the export destination, defaulting to the instance name."""
    return filename if filename else name


def _as_float(config: Dict[str, Any], key: str) -> float:
    try:
        value = float(config[key])
    except (TypeError, ValueError):
        raise ConfigurationError(f"Parameter '{key}' must be a number, got {config[key]!r}")
    if not math.isfinite(value):
        raise ConfigurationError(f"Parameter '{key}' must be finite, got {value}")
    return value


def _as_flag(config: Dict[str, Any], key: str) -> bool:
    value = config[key]
    if not isinstance(value, bool):
        raise ConfigurationError(f"Parameter '{key}' must be true or false, got {value!r}")
    return value


def resolve_parameters(name: str, raw_config: Optional[Dict[str, Any]] = None) -> MonitorParameters:
    """
    Resolve the raw monitor configuration.

    Args:
        name: Identifier of the monitor instance
        raw_config: Raw parameters; missing keys take the instrument defaults

    Returns:
        MonitorParameters with the rectangle, period, bin count and bin width

    Raises:
        NullDetectionAreaError: If the detection rectangle is degenerate
        ConfigurationError: If the period or bin count is not usable
    """
    raw_config = raw_config or {}
    unknown = set(raw_config) - set(DEFAULT_PARAMETERS)
    if unknown:
        logger.warning(f"Ignoring unknown monitor parameters: {sorted(unknown)}")

    config = DEFAULT_PARAMETERS.copy()
    config.update({k: v for k, v in raw_config.items() if k in DEFAULT_PARAMETERS and v is not None})

    xmin = _as_float(config, "xmin")
    xmax = _as_float(config, "xmax")
    ymin = _as_float(config, "ymin")
    ymax = _as_float(config, "ymax")
    xwidth = _as_float(config, "xwidth")
    yheight = _as_float(config, "yheight")

    # Width and height override the explicit bounds
    if xwidth > 0:
        xmax = xwidth / 2
        xmin = -xmax
    if yheight > 0:
        ymax = yheight / 2
        ymin = -ymax

    if xmin >= xmax or ymin >= ymax:
        logger.error(f"{name}: Null detection area! x=[{xmin}, {xmax}], y=[{ymin}, {ymax}]")
        raise NullDetectionAreaError(
            f"{name}: Null detection area, x=[{xmin}, {xmax}] y=[{ymin}, {ymax}]"
        )

    frame = _as_float(config, "frame")
    frequency = _as_float(config, "frequency")
    period = US_PER_S / frequency if frequency > 0 else frame
    if period <= 0:
        raise ConfigurationError(f"{name}: frame period must be > 0, got {period}")

    dt = abs(_as_float(config, "dt"))
    nt = config["nt"]
    if isinstance(nt, bool) or not isinstance(nt, (int, float)) or \
            (isinstance(nt, float) and not nt.is_integer()):
        raise ConfigurationError(f"{name}: 'nt' must be an integer bin count, got {nt!r}")
    nt = int(nt)

    if dt > 0:
        ratio = period / dt
        if not math.isfinite(ratio) or ratio > MAX_BINS:
            raise ConfigurationError(f"{name}: dt={dt} us gives {ratio} bins over a {period} us frame, "
                                     f"more than the maximum of {MAX_BINS}")
        n_bins = int(math.ceil(ratio))
    else:
        n_bins = nt
    if not 1 <= n_bins <= MAX_BINS:
        raise ConfigurationError(f"{name}: number of time bins must be in [1, {MAX_BINS}], got {n_bins}")

    restore_neutron = _as_flag(config, "restore_neutron")
    write_output = _as_flag(config, "write_output")

    params = MonitorParameters(
        name=name,
        xmin=xmin,
        xmax=xmax,
        ymin=ymin,
        ymax=ymax,
        period=period,
        n_bins=n_bins,
        tick=period / n_bins,
        nt=nt,
        restore_neutron=restore_neutron,
        write_output=write_output,
        filename=resolve_filename(config["filename"], name),
    )

    logger.info(f"{name}: x=[{xmin}, {xmax}] y=[{ymin}, {ymax}], period={period} us, "
                f"{n_bins} bins of {params.tick} us")
    return params
