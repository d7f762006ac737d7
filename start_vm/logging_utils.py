#!/usr/bin/env python3
"""
Shared logging utilities for start-vm.

Diagnostic messages go through the standard `logging` module to stderr.
They are silent unless the DEBUG environment variable is set.
"""

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def configure_logging(environ=None, stream=None):
    """
    Attach a stderr handler to the package logger.

    Args:
        environ: Mapping to read DEBUG from; defaults to os.environ.
        stream: Destination for log records; defaults to sys.stderr.

    Returns:
        The configured package logger.
    """
    environ = os.environ if environ is None else environ
    logger = logging.getLogger("start_vm")
    level = logging.DEBUG if environ.get("DEBUG") else logging.WARNING
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger
