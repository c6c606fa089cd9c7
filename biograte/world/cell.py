"""Cell — a single tile in the world grid.

Each cell holds a biome classification, its climate readings, a vegetation
density and the plant species currently living there.  ``CellView`` is the
frozen counterpart handed to anything that must not mutate the grid.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

VEGETATION_MAX = 100.0


class Biome(Enum):
    """Ecological classification of a cell.

    Member order is the enumeration order used for tie-breaking when
    searching for the best-fitting biome.
    """

    EMPTY = "empty"
    TUNDRA = "tundra"
    DESERT = "desert"
    SAVANNA = "savanna"
    GRASSLAND = "grassland"
    FOREST = "forest"
    RAINFOREST = "rainforest"

    @classmethod
    def living(cls) -> tuple[Biome, ...]:
        """Return every biome except EMPTY, in enumeration order."""
        return tuple(b for b in cls if b is not cls.EMPTY)


@dataclass
class Cell:
    """A single tile in the world grid.

    Attributes:
        x: Column position.
        y: Row position.
        biome: Current biome; EMPTY means nothing grows here.
        temperature: Local temperature in degrees Celsius.
        humidity: Local humidity in percent.
        altitude: Elevation; set when seeded, never changed by ticks.
        vegetation: Vegetation density (0.0-100.0).
        species: Identifiers of the plant species resident here.
    """

    x: int
    y: int
    biome: Biome = Biome.EMPTY
    temperature: float = 15.0
    humidity: float = 50.0
    altitude: float = 50.0
    vegetation: float = 0.0
    species: set[str] = field(default_factory=set)

    @property
    def is_empty(self) -> bool:
        """Return True if no biome occupies this cell."""
        return self.biome is Biome.EMPTY

    def clear(self) -> None:
        """Kill everything on this cell, keeping its climate readings."""
        self.biome = Biome.EMPTY
        self.vegetation = 0.0
        self.species.clear()

    def freeze(self) -> CellView:
        """Return an immutable copy of this cell's current state."""
        return CellView(
            x=self.x,
            y=self.y,
            biome=self.biome,
            temperature=self.temperature,
            humidity=self.humidity,
            altitude=self.altitude,
            vegetation=self.vegetation,
            species=frozenset(self.species),
        )


@dataclass(frozen=True)
class CellView:
    """Read-only snapshot of a cell, safe to hand to renderers."""

    x: int
    y: int
    biome: Biome
    temperature: float
    humidity: float
    altitude: float
    vegetation: float
    species: frozenset[str]

    @property
    def is_empty(self) -> bool:
        """Return True if no biome occupies this cell."""
        return self.biome is Biome.EMPTY
