"""Exceptions raised by the CGP engine."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when a CGP configuration violates a construction rule."""


class ArityMismatch(ValueError):
    """Raised when an individual is run with the wrong number of inputs."""

    def __init__(self, expected: int, got: int):
        self.expected = expected
        self.got = got
        super().__init__(f"Individual expects {expected} inputs, got {got}")
