#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Logging and Configuration Helpers
================================================================================

Project:        Molecular Motion Canvas
Module:         utils.py

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        February 9, 2026
Last Updated:   February 9, 2026

License:        MIT License
================================================================================
"""

import json
import logging
import logging.handlers
import os
from typing import Optional

from .simulation import SimulationConfig

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure the root logger.

    Logs go to the console and, if ``log_file`` is given, to a rotating
    file (1 MB, 5 backups).
    """
    logger = logging.getLogger()
    logger.setLevel(level.upper())

    # Clear existing handlers to avoid duplication
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=1024 * 1024, backupCount=5
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logging.debug(f"Log level set to {level.upper()}")


def load_config(path: str) -> SimulationConfig:
    """
    Load a SimulationConfig from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        json.JSONDecodeError: If the file is not valid JSON
        ValueError: If the file contains unknown or invalid settings
    """
    logging.info(f"Loading configuration from {path}")
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except FileNotFoundError:
        logging.error(f"Configuration file not found at {path}")
        raise
    except json.JSONDecodeError:
        logging.error(f"Error decoding JSON from {path}")
        raise

    return SimulationConfig.from_dict(data)
