"""Utility modules for cgp_evolve."""

from cgp_evolve.utils.logging import setup_logger, LOGGER_NAME

__all__ = [
    "setup_logger",
    "LOGGER_NAME",
]
