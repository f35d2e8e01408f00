#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Configuration utilities for the frame monitor.
This module provides functions for loading, merging and validating run configurations.
"""

import os
import yaml
import logging
from typing import Dict, Any

from frame_monitor.exceptions import ConfigurationError
from frame_monitor.export.sinks import SINK_TYPES
from frame_monitor.monitor.classifier import NegativeTimePolicy
from frame_monitor.monitor.parameters import DEFAULT_PARAMETERS

logger = logging.getLogger(__name__)


def merge_configs(base_config: Dict[str, Any], override_config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge override configuration into base configuration.

    Args:
        base_config: Base configuration dictionary
        override_config: Override configuration dictionary

    Returns:
        Merged configuration dictionary
    """
    result = base_config.copy()

    for key, value in override_config.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def validate_config(config: Dict[str, Any]) -> bool:
    """
    Validate the structure of a run configuration.

    Monitor parameter values are checked when the monitor resolves them.

    Args:
        config: Configuration dictionary

    Returns:
        True if configuration is valid, raises exception otherwise
    """
    required_sections = ["name", "monitor", "run", "output"]
    for section in required_sections:
        if section not in config:
            raise ConfigurationError(f"Missing required configuration section: {section}")

    if not config["name"]:
        raise ConfigurationError("Configuration field 'name' must not be empty")

    monitor_config = config["monitor"] or {}
    if not isinstance(monitor_config, dict):
        raise ConfigurationError("Configuration section 'monitor' must be a mapping")

    run_config = config["run"]
    workers = run_config.get("num_workers", 1)
    if not isinstance(workers, int) or workers < 1:
        raise ConfigurationError(f"run.num_workers must be a positive integer, got {workers!r}")
    batch_size = run_config.get("batch_size", 10000)
    if not isinstance(batch_size, int) or batch_size < 1:
        raise ConfigurationError(f"run.batch_size must be a positive integer, got {batch_size!r}")
    policy = run_config.get("negative_times", NegativeTimePolicy.EXCLUDE.value)
    if policy not in [p.value for p in NegativeTimePolicy]:
        raise ConfigurationError(f"run.negative_times must be one of "
                                 f"{[p.value for p in NegativeTimePolicy]}, got {policy!r}")

    sink = config["output"].get("sink", "h5")
    if sink not in SINK_TYPES:
        raise ConfigurationError(f"output.sink must be one of {list(SINK_TYPES)}, got {sink!r}")

    output_dir = config["output"].get("dir")
    if output_dir and not os.path.exists(output_dir):
        try:
            os.makedirs(output_dir, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(f"Cannot create output directory: {output_dir}, error: {e}")

    logger.info("Configuration validated successfully")
    return True


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)

    if not config:
        logger.warning(f"Empty configuration loaded from {config_path}")
        config = {}

    return config


def save_config(config: Dict[str, Any], config_path: str) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: Configuration dictionary
        config_path: Path to save configuration
    """
    directory = os.path.dirname(config_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(config_path, 'w') as f:
        yaml.dump(config, f, default_flow_style=False)

    logger.info(f"Configuration saved to {config_path}")


def generate_default_config() -> Dict[str, Any]:
    """
    Generate default configuration.

    Returns:
        Default configuration dictionary
    """
    default_config = {
        "name": "frame_monitor",
        "monitor": DEFAULT_PARAMETERS.copy(),
        "run": {
            "num_workers": 1,
            "batch_size": 10000,
            "negative_times": NegativeTimePolicy.EXCLUDE.value,
        },
        "output": {
            "dir": "./output",
            "sink": "h5",
            "plot": False,
        },
    }

    return default_config
