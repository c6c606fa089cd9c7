"""Catalog — static biome and species profiles.

Biome profiles carry the optimal climate window and an aggression
coefficient used by invasion.  Species profiles name the biomes a plant
can live in and how readily it establishes itself.  Catalogs are
validated once, when built, so a malformed entry stops session creation
instead of surfacing mid-tick.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from biograte.errors import ConfigError
from biograte.world.cell import Biome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BiomeProfile:
    """Climate tolerances for one biome.

    Attributes:
        temperature: Optimal (low, high) temperature window.
        humidity: Optimal (low, high) humidity window.
        aggression: Invasive pressure coefficient (0.0-1.0).
        colour: RGB display colour.
        name: Human-readable label.
    """

    temperature: tuple[float, float]
    humidity: tuple[float, float]
    aggression: float
    colour: tuple[int, int, int] = (245, 245, 245)
    name: str = ""

    @property
    def temperature_mid(self) -> float:
        return (self.temperature[0] + self.temperature[1]) / 2.0

    @property
    def temperature_half_width(self) -> float:
        return (self.temperature[1] - self.temperature[0]) / 2.0

    @property
    def humidity_mid(self) -> float:
        return (self.humidity[0] + self.humidity[1]) / 2.0

    @property
    def humidity_half_width(self) -> float:
        return (self.humidity[1] - self.humidity[0]) / 2.0


@dataclass(frozen=True)
class SpeciesProfile:
    """A plant species and the biomes it can colonise.

    Attributes:
        biomes: Host biomes.
        growth: Establishment rate; scales the per-tick join chance.
        competitiveness: Carried for future rules; nothing reads it yet.
        name: Human-readable label.
    """

    biomes: frozenset[Biome]
    growth: float
    competitiveness: float
    name: str = ""

    def hosted_by(self, biome: Biome) -> bool:
        """Return True if this species can live in ``biome``."""
        return biome in self.biomes


DEFAULT_BIOMES: dict[Biome, BiomeProfile] = {
    Biome.EMPTY: BiomeProfile((0.0, 100.0), (0.0, 100.0), 0.0, (245, 245, 245), "Empty"),
    Biome.TUNDRA: BiomeProfile((-10.0, 10.0), (10.0, 40.0), 0.6, (199, 233, 240), "Tundra"),
    Biome.DESERT: BiomeProfile((25.0, 50.0), (0.0, 20.0), 0.9, (244, 228, 193), "Desert"),
    Biome.SAVANNA: BiomeProfile((20.0, 35.0), (20.0, 50.0), 0.8, (232, 212, 160), "Savanna"),
    Biome.GRASSLAND: BiomeProfile((10.0, 25.0), (30.0, 60.0), 0.7, (200, 230, 160), "Grassland"),
    Biome.FOREST: BiomeProfile((5.0, 20.0), (50.0, 80.0), 0.5, (127, 176, 105), "Forest"),
    Biome.RAINFOREST: BiomeProfile((20.0, 30.0), (70.0, 100.0), 0.6, (45, 106, 79), "Rainforest"),
}

DEFAULT_SPECIES: dict[str, SpeciesProfile] = {
    "cactus": SpeciesProfile(frozenset({Biome.DESERT}), 0.8, 0.9, "Cactus"),
    "lichen": SpeciesProfile(frozenset({Biome.TUNDRA}), 0.5, 0.4, "Lichen"),
    "grass": SpeciesProfile(frozenset({Biome.GRASSLAND, Biome.SAVANNA}), 1.2, 0.8, "Grass"),
    "shrub": SpeciesProfile(frozenset({Biome.SAVANNA, Biome.GRASSLAND}), 0.9, 0.7, "Shrub"),
    "oak": SpeciesProfile(frozenset({Biome.FOREST}), 0.5, 0.5, "Oak"),
    "pine": SpeciesProfile(frozenset({Biome.FOREST, Biome.TUNDRA}), 0.6, 0.6, "Pine"),
    "palm": SpeciesProfile(frozenset({Biome.RAINFOREST}), 0.9, 0.7, "Palm"),
    "liana": SpeciesProfile(frozenset({Biome.RAINFOREST, Biome.FOREST}), 0.8, 0.6, "Liana"),
}


@dataclass(frozen=True)
class Catalog:
    """Validated biome and species tables.

    Species are kept in insertion order; the growth rule walks them in
    that order.

    Attributes:
        biomes: Profile for every Biome member.
        species: Profiles keyed by species identifier.
    """

    biomes: Mapping[Biome, BiomeProfile] = field(
        default_factory=lambda: dict(DEFAULT_BIOMES),
    )
    species: Mapping[str, SpeciesProfile] = field(
        default_factory=lambda: dict(DEFAULT_SPECIES),
    )

    def __post_init__(self) -> None:
        """Reject degenerate or inconsistent entries."""
        missing = [b.value for b in Biome if b not in self.biomes]
        if missing:
            msg = f"catalog has no profile for biome(s): {', '.join(missing)}"
            raise ConfigError(msg)
        for biome, profile in self.biomes.items():
            _validate_biome(biome, profile)
        for key, species in self.species.items():
            _validate_species(key, species)

    def biome(self, biome: Biome) -> BiomeProfile:
        """Return the profile for ``biome``."""
        return self.biomes[biome]

    @classmethod
    def from_mapping(
        cls,
        biomes: Mapping[str, Mapping[str, Any]] | None = None,
        species: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> Catalog:
        """Build a catalog from plain config mappings.

        Entries override the defaults field by field; species identifiers
        not in the defaults are added.  Biome tags must name a Biome
        member.

        Args:
            biomes: ``{tag: {temperature, humidity, aggression, colour, name}}``.
            species: ``{id: {biomes, growth, competitiveness, name}}``.

        Raises:
            ConfigError: On unknown tags, missing fields or bad values.
        """
        biome_table = dict(DEFAULT_BIOMES)
        for tag, data in (biomes or {}).items():
            biome = _parse_biome(tag)
            biome_table[biome] = _biome_from_mapping(tag, data, biome_table[biome])

        species_table = dict(DEFAULT_SPECIES)
        for key, data in (species or {}).items():
            species_table[str(key)] = _species_from_mapping(
                key,
                data,
                species_table.get(str(key)),
            )

        catalog = cls(biomes=biome_table, species=species_table)
        logger.debug(
            "Loaded catalog with %d biomes and %d species",
            len(catalog.biomes),
            len(catalog.species),
        )
        return catalog


def _parse_biome(tag: Any) -> Biome:
    try:
        return Biome(str(tag).lower())
    except ValueError:
        msg = f"unknown biome tag {tag!r}"
        raise ConfigError(msg) from None


def _parse_range(owner: str, name: str, value: Any) -> tuple[float, float]:
    try:
        lo, hi = value
        return float(lo), float(hi)
    except (TypeError, ValueError):
        msg = f"{owner}: {name} must be a [low, high] pair, got {value!r}"
        raise ConfigError(msg) from None


def _as_float(owner: str, name: str, value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        msg = f"{owner}: {name} must be a number, got {value!r}"
        raise ConfigError(msg) from None


def _biome_from_mapping(
    tag: str,
    data: Mapping[str, Any],
    base: BiomeProfile,
) -> BiomeProfile:
    if not isinstance(data, Mapping):
        msg = f"biome {tag!r}: expected a mapping, got {type(data).__name__}"
        raise ConfigError(msg)
    changes: dict[str, Any] = {}
    if "temperature" in data:
        changes["temperature"] = _parse_range(tag, "temperature", data["temperature"])
    if "humidity" in data:
        changes["humidity"] = _parse_range(tag, "humidity", data["humidity"])
    if "aggression" in data:
        changes["aggression"] = _as_float(tag, "aggression", data["aggression"])
    if "colour" in data:
        try:
            r, g, b = (int(c) for c in data["colour"])
        except (TypeError, ValueError):
            msg = f"biome {tag!r}: colour must be [r, g, b], got {data['colour']!r}"
            raise ConfigError(msg) from None
        changes["colour"] = (r, g, b)
    if "name" in data:
        changes["name"] = str(data["name"])
    return replace(base, **changes)


def _species_from_mapping(
    key: str,
    data: Mapping[str, Any],
    base: SpeciesProfile | None,
) -> SpeciesProfile:
    if not isinstance(data, Mapping):
        msg = f"species {key!r}: expected a mapping, got {type(data).__name__}"
        raise ConfigError(msg)
    if base is None:
        required = {"biomes", "growth", "competitiveness"} - set(data)
        if required:
            msg = f"species {key!r}: missing field(s) {', '.join(sorted(required))}"
            raise ConfigError(msg)
        base = SpeciesProfile(frozenset(), 0.0, 0.0, str(key).title())

    changes: dict[str, Any] = {}
    if "biomes" in data:
        hosts = data["biomes"]
        if isinstance(hosts, str) or not hasattr(hosts, "__iter__"):
            msg = f"species {key!r}: biomes must be a list of tags, got {hosts!r}"
            raise ConfigError(msg)
        changes["biomes"] = frozenset(_parse_biome(tag) for tag in hosts)
    if "growth" in data:
        changes["growth"] = _as_float(key, "growth", data["growth"])
    if "competitiveness" in data:
        changes["competitiveness"] = _as_float(
            key,
            "competitiveness",
            data["competitiveness"],
        )
    if "name" in data:
        changes["name"] = str(data["name"])
    return replace(base, **changes)


def _validate_biome(biome: Biome, profile: BiomeProfile) -> None:
    for name, (lo, hi) in (
        ("temperature", profile.temperature),
        ("humidity", profile.humidity),
    ):
        if not lo < hi:
            msg = f"biome {biome.value!r}: degenerate {name} range [{lo}, {hi}]"
            raise ConfigError(msg)
    if not 0.0 <= profile.aggression <= 1.0:
        msg = f"biome {biome.value!r}: aggression {profile.aggression} not in [0, 1]"
        raise ConfigError(msg)


def _validate_species(key: str, species: SpeciesProfile) -> None:
    if not species.biomes:
        msg = f"species {key!r}: no host biomes"
        raise ConfigError(msg)
    if Biome.EMPTY in species.biomes:
        msg = f"species {key!r}: cannot live in the empty biome"
        raise ConfigError(msg)
    if species.growth < 0.0:
        msg = f"species {key!r}: negative growth {species.growth}"
        raise ConfigError(msg)
