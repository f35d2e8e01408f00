import logging
import logging.config
import os
from typing import Optional

import yaml


def setup_logger(name: str, config_path: str = "config/logging.yaml",
                 log_dir: Optional[str] = None) -> logging.Logger:
    """
    Configure logging from a YAML dictConfig file and return a named logger.

    Relative file handler paths are placed under log_dir when it is given,
    so the run log lands next to the exported histogram.
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Logging config file not found: {config_path}")

    with open(config_path, 'r') as f:
        log_config = yaml.safe_load(f)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        for handler in log_config.get("handlers", {}).values():
            filename = handler.get("filename")
            if filename and not os.path.isabs(filename):
                handler["filename"] = os.path.join(log_dir, filename)

    logging.config.dictConfig(log_config)
    return logging.getLogger(name)
