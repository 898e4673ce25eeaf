# lap_telemetry/core/logging.py
"""Logging setup."""
import logging
import sys


def setup_logging(log_level: int = logging.INFO) -> logging.Logger:
    """Configure console logging for the telemetry backend."""
    formatter = logging.Formatter('%(levelname)-8s %(name)s: %(message)s')

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Avoid stacking handlers when the app module is re-imported (reload, tests)
    if not any(getattr(h, "_lap_telemetry", False) for h in root_logger.handlers):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        console_handler._lap_telemetry = True
        root_logger.addHandler(console_handler)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific module."""
    return logging.getLogger(name)
