"""
Run configuration and logging helpers.

This module centralizes functionality shared by the pipeline driver and
the scripts:

- loading the run configuration (config/pipeline.yaml)
- ensuring output directories exist before writing files
- reading the map-phase parallelism settings
- constructing loggers that respect the logging section of the config
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional, Tuple

import yaml

from spam_bow.exceptions import ConfigurationError


DEFAULT_PIPELINE_CONFIG_PATH = "config/pipeline.yaml"

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


# ---------------------------------------------------------------------------
# Config loading
# ---------------------------------------------------------------------------


def load_pipeline_config(
    config_path: str = DEFAULT_PIPELINE_CONFIG_PATH,
) -> Dict[str, Any]:
    """
    Load and return the run configuration dictionary.

    Parameters
    ----------
    config_path : str
        Path to the pipeline YAML configuration file.

    Returns
    -------
    Dict[str, Any]
        Parsed configuration with sections such as "general", "paths",
        "logging" and "save".

    Raises
    ------
    ConfigurationError
        If the YAML file does not exist, is empty, or lacks "paths".
    """
    if not os.path.exists(config_path):
        raise ConfigurationError(f"Pipeline config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)

    if not isinstance(cfg, dict):
        raise ConfigurationError(f"Pipeline config file is empty or invalid: {config_path}")

    if "paths" not in cfg:
        raise ConfigurationError(f'Missing "paths" section in pipeline config: {config_path}')

    return cfg


def get_parallel_settings(config: Dict[str, Any]) -> Tuple[int, Optional[str]]:
    """
    Return (n_jobs, backend) for the map phase from the "general" section.
    """
    general_cfg = config.get("general", {}) or {}
    n_jobs = int(general_cfg.get("n_jobs", 1))
    if n_jobs == 0:
        raise ConfigurationError("general.n_jobs must be non-zero (use 1 for in-process).")
    backend = general_cfg.get("backend") or None
    return n_jobs, backend


# ---------------------------------------------------------------------------
# Filesystem utilities
# ---------------------------------------------------------------------------


def ensure_dir_exists(path: str) -> None:
    if path and not os.path.exists(path):
        os.makedirs(path, exist_ok=True)


# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------


def _parse_log_level(level_str: str) -> int:
    """
    Convert a string log level into a logging module constant.

    Unknown names fall back to INFO.
    """
    level_str = (level_str or "INFO").upper()
    return {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }.get(level_str, logging.INFO)


def get_logger(
    name: str,
    config: Dict[str, Any],
    log_file_suffix: Optional[str] = None,
) -> logging.Logger:
    """
    Construct and return a logger that respects the logging section of
    the pipeline config.

    Parameters
    ----------
    name : str
        Logger name.
    config : Dict[str, Any]
        Pipeline configuration.
    log_file_suffix : Optional[str]
        Optional suffix appended to the log file name (e.g., "train").

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(name)

    # Already configured by an earlier call.
    if logger.handlers:
        return logger

    logging_cfg = config.get("logging", {}) or {}
    paths_cfg = config.get("paths", {}) or {}

    level = _parse_log_level(logging_cfg.get("level", "INFO"))
    logger.setLevel(level)

    formatter = logging.Formatter(fmt=_LOG_FORMAT, datefmt=_LOG_DATEFMT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if bool(logging_cfg.get("to_file", False)):
        logs_dir = paths_cfg.get("logs_dir", "outputs/logs")
        ensure_dir_exists(logs_dir)

        file_prefix = logging_cfg.get("file_prefix", "bag_of_words")
        if log_file_suffix:
            filename = f"{file_prefix}_{log_file_suffix}.log"
        else:
            filename = f"{file_prefix}.log"

        file_handler = logging.FileHandler(os.path.join(logs_dir, filename), encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
