"""Shared fixtures for the Biograte test suite."""

from __future__ import annotations

from collections.abc import Callable

import numpy as np
import pytest
from numpy.random import Generator

from biograte.ecology.catalog import Catalog
from biograte.simulation.config import SimulationConfig
from biograte.world.environment import Ambient
from biograte.world.world import World


class FixedRng:
    """Random source that always returns the same draw.

    ``random()`` returns ``value``; ``integers`` always picks ``low``.
    A value of 0.0 makes every positive probability fire, 1.0 makes
    every probability fail.
    """

    def __init__(self, value: float) -> None:
        self.value = value
        self.draws = 0

    def random(self) -> float:
        self.draws += 1
        return self.value

    def integers(self, low: int, high: int) -> int:
        assert low < high
        return low


@pytest.fixture
def rng() -> Generator:
    """A deterministic random generator for reproducible tests."""
    return np.random.default_rng(seed=12345)


@pytest.fixture
def fixed_rng() -> Callable[[float], FixedRng]:
    """Factory for random sources pinned to one draw value."""
    return FixedRng


@pytest.fixture
def always() -> FixedRng:
    """A random source under which every positive chance succeeds."""
    return FixedRng(0.0)


@pytest.fixture
def never() -> FixedRng:
    """A random source under which every chance fails."""
    return FixedRng(1.0)


@pytest.fixture
def catalog() -> Catalog:
    """The built-in biome and species catalog."""
    return Catalog()


@pytest.fixture
def small_world() -> World:
    """A small 8x8 world for fast tests."""
    return World(width=8, height=8)


@pytest.fixture
def forest_climate() -> Ambient:
    """Ambient climate at the exact centre of the forest window."""
    return Ambient(temperature=12.5, humidity=65.0, altitude=0.0)


@pytest.fixture
def desert_climate() -> Ambient:
    """Hot, dry ambient climate where desert is the best fit."""
    return Ambient(temperature=40.0, humidity=5.0, altitude=0.0)


@pytest.fixture
def default_config() -> SimulationConfig:
    """Default simulation config (no YAML file needed)."""
    return SimulationConfig()
