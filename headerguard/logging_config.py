"""Centralized logging setup."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level_name: str = "INFO") -> None:
    """
    Configure console logging for the service.

    Args:
        level_name: "DEBUG" | "INFO" | "WARNING" | "ERROR" | "CRITICAL"
    """
    level = getattr(logging, level_name.upper(), logging.INFO)
    root = logging.getLogger()

    # Avoid duplicate handlers when the app factory runs more than once
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    root.setLevel(level)
