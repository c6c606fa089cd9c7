"""Exception types raised by the simulation core.

``ConfigError`` is fatal to session creation; ``OutOfRange`` is reported
per call and leaves the grid untouched.
"""

from __future__ import annotations


class BiograteError(Exception):
    """Base class for all simulation errors."""


class ConfigError(BiograteError, ValueError):
    """A biome/species catalog or YAML config is malformed."""


class OutOfRange(BiograteError, IndexError):  # noqa: N818
    """Grid coordinates fall outside the world."""

    def __init__(self, x: int, y: int, width: int, height: int) -> None:
        self.x = x
        self.y = y
        super().__init__(f"({x}, {y}) out of bounds for {width}x{height}")
