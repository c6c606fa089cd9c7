"""Config — load simulation parameters from YAML files.

Grid size, ambient climate, tick cadence and catalog overrides live in
YAML and are parsed into a typed dataclass here.  Biome and species
overrides are validated when the catalog is built, so a bad entry fails
before any session exists.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from biograte.ecology.catalog import Catalog
from biograte.errors import ConfigError
from biograte.world.environment import Ambient


@dataclass
class SimulationConfig:
    """Top-level simulation configuration.

    Attributes:
        seed: RNG seed, or None to draw fresh OS entropy each session.
        world_width: Number of grid columns.
        world_height: Number of grid rows.
        ambient_temperature: Starting ambient temperature (degrees C).
        ambient_humidity: Starting ambient humidity (percent).
        ambient_altitude: Starting ambient altitude.
        tick_interval_ms: Milliseconds between generations when running.
        rescore_after_replacement: Score a replaced cell again under its
            new biome before mortality, growth and invasion.
        biomes: Per-biome overrides merged over the default catalog.
        species: Per-species overrides and additions.
    """

    seed: int | None = None
    world_width: int = 60
    world_height: int = 60
    ambient_temperature: float = 15.0
    ambient_humidity: float = 50.0
    ambient_altitude: float = 50.0
    tick_interval_ms: int = 200
    rescore_after_replacement: bool = False

    biomes: dict[str, dict[str, Any]] = field(default_factory=dict)
    species: dict[str, dict[str, Any]] = field(default_factory=dict)

    @property
    def ambient(self) -> Ambient:
        """Return the configured starting ambient climate."""
        return Ambient(
            temperature=self.ambient_temperature,
            humidity=self.ambient_humidity,
            altitude=self.ambient_altitude,
        )

    @property
    def ticks_per_second(self) -> float:
        """Return the generation rate implied by ``tick_interval_ms``."""
        return 1000.0 / self.tick_interval_ms

    def build_catalog(self) -> Catalog:
        """Build the validated catalog for this configuration.

        Raises:
            ConfigError: If an override is malformed.
        """
        return Catalog.from_mapping(self.biomes, self.species)

    @classmethod
    def from_yaml(cls, path: str | Path) -> SimulationConfig:
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML config file.

        Returns:
            A populated SimulationConfig instance.

        Raises:
            FileNotFoundError: If the config file does not exist.
            ConfigError: If the file is not a mapping or a section has
                the wrong shape.
        """
        path = Path(path)
        with path.open("r") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, Mapping):
            msg = f"{path}: top level must be a mapping"
            raise ConfigError(msg)

        config = cls(
            seed=data.get("seed", cls.seed),
            world_width=data.get("world_width", cls.world_width),
            world_height=data.get("world_height", cls.world_height),
            ambient_temperature=data.get(
                "ambient_temperature",
                cls.ambient_temperature,
            ),
            ambient_humidity=data.get(
                "ambient_humidity",
                cls.ambient_humidity,
            ),
            ambient_altitude=data.get(
                "ambient_altitude",
                cls.ambient_altitude,
            ),
            tick_interval_ms=data.get("tick_interval_ms", cls.tick_interval_ms),
            rescore_after_replacement=data.get(
                "rescore_after_replacement",
                cls.rescore_after_replacement,
            ),
            biomes=_section(data, "biomes", path),
            species=_section(data, "species", path),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Check and normalise scalar settings in place.

        Raises:
            ConfigError: On a wrongly typed scalar, a non-finite ambient
                reading, or a non-positive grid size or tick interval.
        """
        self.world_width = _as_int("world_width", self.world_width)
        self.world_height = _as_int("world_height", self.world_height)
        self.tick_interval_ms = _as_int("tick_interval_ms", self.tick_interval_ms)
        self.ambient_temperature = _as_finite("ambient_temperature", self.ambient_temperature)
        self.ambient_humidity = _as_finite("ambient_humidity", self.ambient_humidity)
        self.ambient_altitude = _as_finite("ambient_altitude", self.ambient_altitude)
        if self.seed is not None:
            self.seed = _as_int("seed", self.seed)
        if not isinstance(self.rescore_after_replacement, bool):
            msg = (
                "rescore_after_replacement must be true or false, "
                f"got {self.rescore_after_replacement!r}"
            )
            raise ConfigError(msg)

        if self.world_width <= 0 or self.world_height <= 0:
            msg = f"grid must be at least 1x1, got {self.world_width}x{self.world_height}"
            raise ConfigError(msg)
        if self.tick_interval_ms <= 0:
            msg = f"tick_interval_ms must be positive, got {self.tick_interval_ms}"
            raise ConfigError(msg)


def _as_int(name: str, value: Any) -> int:
    # bool is an int subclass; YAML `yes` must not become a grid size.
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"{name} must be an integer, got {value!r}"
        raise ConfigError(msg)
    return value


def _as_finite(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        msg = f"{name} must be a number, got {value!r}"
        raise ConfigError(msg)
    if not math.isfinite(value):
        msg = f"{name} must be finite, got {value!r}"
        raise ConfigError(msg)
    return float(value)


def _section(data: Mapping[str, Any], key: str, path: Path) -> dict[str, dict[str, Any]]:
    section = data.get(key) or {}
    if not isinstance(section, Mapping):
        msg = f"{path}: '{key}' must be a mapping"
        raise ConfigError(msg)
    return dict(section)
