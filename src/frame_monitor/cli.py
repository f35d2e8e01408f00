#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Command line interface for the frame monitor.
This module runs a monitor over an event file and exports the frame histogram.
"""

import argparse
import os
import sys
import logging
from typing import Dict, Any, Optional

from frame_monitor.data.event_loader import load_events
from frame_monitor.exceptions import ConfigurationError
from frame_monitor.export.sinks import SINK_TYPES, create_sink
from frame_monitor.monitor.frame_monitor import FrameMonitor
from frame_monitor.pipeline.batch_processor import BatchEventProcessor
from frame_monitor.utils.config_utils import (
    generate_default_config,
    load_config,
    merge_configs,
    validate_config,
)
from frame_monitor.utils.logging_utils import setup_logger

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Periodic time-of-flight frame monitor")

    # Configuration options
    parser.add_argument("--config", type=str, default=None,
                        help="Path to base configuration file (defaults are used if omitted)")
    parser.add_argument("--override", type=str, default=None,
                        help="Path to override configuration file")

    # Input
    parser.add_argument("--events", type=str, required=True,
                        help="Event file (.csv or .h5) with columns x, y, t, p")
    parser.add_argument("--group", type=str, default=None,
                        help="HDF5 group holding the event columns")

    # Run options
    parser.add_argument("--name", type=str,
                        help="Monitor name (overrides config)")
    parser.add_argument("--workers", type=int,
                        help="Number of worker threads (overrides config)")
    parser.add_argument("--batch-size", type=int,
                        help="Events per batch (overrides config)")
    parser.add_argument("--negative-times", type=str, choices=["exclude", "wrap"],
                        help="Folding policy for negative arrival times (overrides config)")

    # Output options
    parser.add_argument("--output-dir", type=str,
                        help="Output directory (overrides config)")
    parser.add_argument("--sink", type=str, choices=list(SINK_TYPES),
                        help="Export sink (overrides config)")
    parser.add_argument("--plot", action="store_true",
                        help="Save a PNG plot of the histogram")
    parser.add_argument("--no-progress", action="store_true",
                        help="Disable the progress bar")
    parser.add_argument("--logging-config", type=str, default=None,
                        help="YAML logging configuration (dictConfig); replaces --log-level setup")
    parser.add_argument("--log-level", type=str, choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        default="INFO", help="Logging level")

    return parser.parse_args(argv)


def setup_logging(log_level: str, output_dir: Optional[str] = None):
    """Set up logging configuration."""
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {log_level}")

    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    console_formatter = logging.Formatter(
        '%(levelname)s - %(message)s'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
        log_file = os.path.join(output_dir, "frame_monitor.log")
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)


def build_config_from_args(args, base_config: Dict[str, Any]) -> Dict[str, Any]:
    """Build configuration dictionary from command line arguments."""
    config = merge_configs(generate_default_config(), base_config)

    if args.name:
        config["name"] = args.name

    if args.workers is not None:
        config["run"]["num_workers"] = args.workers

    if args.batch_size is not None:
        config["run"]["batch_size"] = args.batch_size

    if args.negative_times:
        config["run"]["negative_times"] = args.negative_times

    if args.output_dir:
        config["output"]["dir"] = args.output_dir

    if args.sink:
        config["output"]["sink"] = args.sink

    if args.plot:
        config["output"]["plot"] = True

    return config


def run(config: Dict[str, Any], events_path: str, group: Optional[str] = None,
        show_progress: bool = True) -> Dict[str, Any]:
    """
    Run one monitor over an event file.

    Returns:
        Dictionary with the processing statistics and output paths
    """
    name = config["name"]
    output_dir = config["output"]["dir"]

    monitor = FrameMonitor(name, config["monitor"],
                           negative_times=config["run"]["negative_times"])
    events = load_events(events_path, group)

    processor = BatchEventProcessor(monitor,
                                    batch_size=config["run"]["batch_size"],
                                    num_workers=config["run"]["num_workers"],
                                    show_progress=show_progress)
    stats = processor.process(events)

    sink = create_sink(config["output"]["sink"], output_dir, run_name=name)
    dataset = monitor.finalize(sink)

    result = {"statistics": stats, "exported": dataset is not None}
    if dataset is not None and config["output"].get("plot"):
        # Imported here so matplotlib is only loaded when plotting
        from frame_monitor.visualization.plotting import save_monitor_plot
        result["plot"] = save_monitor_plot(dataset, monitor.display(),
                                           os.path.join(output_dir, f"{dataset.filename}.png"))

    result["summary"] = processor.save_summary(output_dir, extra={"events_file": events_path})
    monitor.release()
    return result


def main(argv=None):
    """Main entry point for the frame monitor."""
    args = parse_args(argv)

    base_config = load_config(args.config) if args.config else {}

    if args.override:
        base_config = merge_configs(base_config, load_config(args.override))

    config = build_config_from_args(args, base_config)
    output_dir = config["output"]["dir"]
    if args.logging_config:
        setup_logger("frame_monitor", args.logging_config, log_dir=output_dir)
    else:
        setup_logging(args.log_level, output_dir)

    try:
        validate_config(config)
        result = run(config, args.events, group=args.group, show_progress=not args.no_progress)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 2

    logger.info(f"Frame monitor completed successfully. Results saved to {output_dir}")
    logger.debug(f"Run result: {result}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
