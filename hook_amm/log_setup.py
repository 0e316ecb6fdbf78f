"""Logging configuration for the command-line tools."""

import logging


def setup_logging(level: str = "WARNING") -> None:
    """Attach a console handler to the package logger."""
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s"))

    package_logger = logging.getLogger("hook_amm")
    for existing in package_logger.handlers[:]:
        if not isinstance(existing, logging.NullHandler):
            package_logger.removeHandler(existing)
    package_logger.addHandler(handler)
    package_logger.setLevel(numeric_level)
