"""Session — one running succession simulation.

A Session owns a World, the catalog it is scored against, a random
source and the generation counter.  Every mutator runs under the
session's lock, so painting from a UI thread can never interleave with a
generation in progress.

The module-level functions (``create_session``, ``paint_cell``,
``advance_generation``, ``reset_session``, ``snapshot``,
``compute_statistics``) are the interface offered to drivers; each takes
the session explicitly.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

import numpy as np
from numpy.random import Generator

from biograte.ecology.catalog import Catalog
from biograte.ecology.succession import advance
from biograte.errors import OutOfRange
from biograte.simulation.config import SimulationConfig
from biograte.world.cell import Biome
from biograte.world.environment import Ambient
from biograte.world.world import GridSnapshot, World

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Statistics:
    """Aggregates over living (non-empty) cells.

    Attributes:
        active_cell_count: Number of cells with a living biome.
        average_vegetation: Mean vegetation of active cells; 0.0 when
            there are none.
        total_species_instances: Sum of resident species over active cells.
        biome_counts: Read-only active cell count per living biome.
    """

    active_cell_count: int
    average_vegetation: float
    total_species_instances: int
    biome_counts: Mapping[Biome, int]


@dataclass
class Session:
    """Drives one grid forward generation by generation.

    Attributes:
        world: The spatial grid (next-generation buffer during a tick).
        catalog: Biome and species profiles.
        rng: Random source; any object with ``random()`` and
            ``integers(low, high)`` works.
        rescore_after_replacement: See ``SimulationConfig``.
        generation: Generations advanced since creation or last reset.
    """

    world: World
    catalog: Catalog = field(default_factory=Catalog)
    rng: Generator = field(default_factory=np.random.default_rng)
    rescore_after_replacement: bool = False
    generation: int = 0
    _lock: threading.RLock = field(
        default_factory=threading.RLock,
        init=False,
        repr=False,
        compare=False,
    )

    @classmethod
    def from_config(cls, config: SimulationConfig) -> Session:
        """Build a session, catalog and RNG from a loaded config.

        Raises:
            ConfigError: If the config or its catalog overrides are invalid.
        """
        config.validate()
        return create_session(
            config.world_width,
            config.world_height,
            config.ambient,
            catalog=config.build_catalog(),
            rng=np.random.default_rng(config.seed),
            rescore_after_replacement=config.rescore_after_replacement,
        )

    @property
    def width(self) -> int:
        return self.world.width

    @property
    def height(self) -> int:
        return self.world.height

    def paint(self, x: int, y: int, biome: Biome, ambient: Ambient) -> None:
        """Seed the cell at ``(x, y)`` with ``biome`` under ``ambient``.

        Raises:
            OutOfRange: If ``(x, y)`` is outside the grid.  The grid is
                left unchanged.
        """
        with self._lock:
            try:
                self.world.paint(x, y, biome, ambient)
            except OutOfRange:
                logger.warning(
                    "Rejected paint of %s at (%d, %d) on %dx%d grid",
                    biome.value,
                    x,
                    y,
                    self.width,
                    self.height,
                )
                raise

    def step(self) -> int:
        """Advance the simulation by one generation.

        Returns:
            The new generation count.
        """
        with self._lock:
            advance(
                self.world,
                self.catalog,
                self.rng,
                rescore_after_replacement=self.rescore_after_replacement,
            )
            self.generation += 1
            if logger.isEnabledFor(logging.DEBUG):
                stats = self.statistics()
                logger.debug(
                    "Generation %d: %d active cells, mean vegetation %.1f, "
                    "%d species instances",
                    self.generation,
                    stats.active_cell_count,
                    stats.average_vegetation,
                    stats.total_species_instances,
                )
            return self.generation

    def run(self, generations: int) -> int:
        """Advance a fixed number of generations.

        Args:
            generations: Number of generations to advance.

        Returns:
            The generation count afterwards.
        """
        for _ in range(generations):
            self.step()
        return self.generation

    def reset(self, ambient: Ambient) -> None:
        """Empty the grid under ``ambient`` and restart the counter."""
        with self._lock:
            self.world.fill(ambient)
            self.generation = 0
            logger.info(
                "Reset %dx%d grid at %.1f C, %.1f%% humidity, altitude %.1f",
                self.width,
                self.height,
                ambient.temperature,
                ambient.humidity,
                ambient.altitude,
            )

    def snapshot(self) -> GridSnapshot:
        """Return a frozen copy of the grid for rendering."""
        with self._lock:
            return self.world.freeze()

    def statistics(self) -> Statistics:
        """Aggregate vegetation and species over living cells."""
        return _summarise(self.snapshot())


def _summarise(grid: GridSnapshot) -> Statistics:
    biomes = grid.biome_grid()
    active = biomes != list(Biome).index(Biome.EMPTY)
    count = int(active.sum())
    vegetation = grid.vegetation_grid()[active]
    species = grid.species_count_grid()[active]
    counts = np.bincount(biomes[active], minlength=len(Biome))
    return Statistics(
        active_cell_count=count,
        average_vegetation=float(vegetation.mean()) if count else 0.0,
        total_species_instances=int(species.sum()),
        biome_counts=MappingProxyType(
            {
                biome: int(counts[i])
                for i, biome in enumerate(Biome)
                if biome is not Biome.EMPTY
            },
        ),
    )


def create_session(
    width: int,
    height: int,
    ambient: Ambient,
    *,
    catalog: Catalog | None = None,
    rng: Generator | None = None,
    rescore_after_replacement: bool = False,
) -> Session:
    """Allocate an all-empty grid whose cells carry the ambient climate.

    Args:
        width: Grid columns.
        height: Grid rows.
        ambient: Climate copied into every cell.
        catalog: Biome/species profiles; the defaults when omitted.
        rng: Random source; a fresh unseeded generator when omitted.
        rescore_after_replacement: See ``SimulationConfig``.

    Returns:
        A new Session at generation 0.
    """
    world = World(width=width, height=height)
    world.fill(ambient)
    session = Session(
        world=world,
        catalog=catalog if catalog is not None else Catalog(),
        rng=rng if rng is not None else np.random.default_rng(),
        rescore_after_replacement=rescore_after_replacement,
    )
    logger.info("Created %dx%d session", width, height)
    return session


def paint_cell(session: Session, x: int, y: int, biome: Biome, ambient: Ambient) -> None:
    """Seed one cell; see ``Session.paint``."""
    session.paint(x, y, biome, ambient)


def advance_generation(session: Session) -> int:
    """Advance one generation and return the new generation count."""
    return session.step()


def reset_session(session: Session, ambient: Ambient) -> None:
    """Empty the grid and reset the generation counter to 0."""
    session.reset(ambient)


def snapshot(session: Session) -> GridSnapshot:
    """Return a read-only view of the grid."""
    return session.snapshot()


def compute_statistics(session: Session) -> Statistics:
    """Aggregate active-cell count, mean vegetation and species instances."""
    return session.statistics()
