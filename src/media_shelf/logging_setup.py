"""Logging configuration for the command-line entry point."""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(debug: bool = False) -> None:
    """
    Configures the root logger.

    Debug mode logs everything to stderr; otherwise only warnings and errors.
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    level = logging.DEBUG if debug else logging.WARNING
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.setLevel(level)
    root_logger.setLevel(level)
    root_logger.addHandler(handler)
    if debug:
        logging.info("Debug logging enabled")
