"""Logging utilities for the scene agent."""

import logging
import sys

_LOGGER_NAME = "scene_agent"


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger instance for the agent.

    Args:
        name: Optional sub-logger name. If None, returns the root agent logger.

    Returns:
        The requested logger.
    """
    if name:
        if name == _LOGGER_NAME or name.startswith(f"{_LOGGER_NAME}."):
            return logging.getLogger(name)
        return logging.getLogger(f"{_LOGGER_NAME}.{name}")
    return logging.getLogger(_LOGGER_NAME)


def setup_logging(
    level: int = logging.INFO, format_str: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
) -> None:
    """Setup default logging configuration for the agent.

    This adds a StreamHandler to the agent's root logger.
    Should typically be called by the hosting application (editor plugin, CLI),
    not by the agent core itself.

    Args:
        level: Logging level.
        format_str: Log format string.
    """
    logger = logging.getLogger(_LOGGER_NAME)

    # Avoid adding multiple handlers if called multiple times
    if any(not isinstance(h, logging.NullHandler) for h in logger.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(format_str)
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(level)


# Set default NullHandler to avoid "No handler found" warnings
logging.getLogger(_LOGGER_NAME).addHandler(logging.NullHandler())
