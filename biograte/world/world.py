"""World grid — the spatial container for the simulation.

The World owns cells arranged in a 2D grid and provides the spatial
queries (bounds-checked lookup, 8-neighbourhoods) used by the succession
rules.  ``GridSnapshot`` is a frozen copy of a World: the tick engine reads
the previous generation through it, and renderers receive one instead of
the live grid.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from biograte.errors import OutOfRange
from biograte.world.cell import VEGETATION_MAX, Biome, Cell, CellView

if TYPE_CHECKING:
    from biograte.world.environment import Ambient

# Row-major order over the 3x3 block, centre excluded.  Colonization
# tie-breaks depend on this order.
_NEIGHBOUR_OFFSETS: tuple[tuple[int, int], ...] = (
    (-1, -1),
    (0, -1),
    (1, -1),
    (-1, 0),
    (1, 0),
    (-1, 1),
    (0, 1),
    (1, 1),
)

_BIOME_INDEX: dict[Biome, int] = {b: i for i, b in enumerate(Biome)}


def neighbour_positions(x: int, y: int, width: int, height: int) -> list[tuple[int, int]]:
    """Return in-bounds positions of the up-to-8 cells around ``(x, y)``."""
    result: list[tuple[int, int]] = []
    for dx, dy in _NEIGHBOUR_OFFSETS:
        nx, ny = x + dx, y + dy
        if 0 <= nx < width and 0 <= ny < height:
            result.append((nx, ny))
    return result


@dataclass
class World:
    """A 2D grid world that contains all spatial simulation state.

    Attributes:
        width: Number of columns in the grid.
        height: Number of rows in the grid.
        cells: 2D list of Cell objects indexed as ``cells[y][x]``.
    """

    width: int
    height: int
    cells: list[list[Cell]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Initialise the grid with empty cells."""
        if self.width <= 0 or self.height <= 0:
            msg = f"grid must be at least 1x1, got {self.width}x{self.height}"
            raise ValueError(msg)
        self.cells = [
            [Cell(x=x, y=y) for x in range(self.width)] for y in range(self.height)
        ]

    def in_bounds(self, x: int, y: int) -> bool:
        """Return True if ``(x, y)`` lies inside the grid."""
        return 0 <= x < self.width and 0 <= y < self.height

    def cell_at(self, x: int, y: int) -> Cell:
        """Return the cell at grid coordinates ``(x, y)``.

        Args:
            x: Column index.
            y: Row index.

        Raises:
            OutOfRange: If coordinates are out of bounds.
        """
        if not self.in_bounds(x, y):
            raise OutOfRange(x, y, self.width, self.height)
        return self.cells[y][x]

    def neighbours(self, x: int, y: int) -> list[Cell]:
        """Return the live cells adjacent to ``(x, y)``, diagonals included.

        Args:
            x: Column index.
            y: Row index.

        Returns:
            Up to 8 neighbouring Cell objects (excludes out-of-bounds).
        """
        return [
            self.cells[ny][nx]
            for nx, ny in neighbour_positions(x, y, self.width, self.height)
        ]

    def fill(self, ambient: Ambient) -> None:
        """Reset every cell to EMPTY with the given ambient climate."""
        for row in self.cells:
            for cell in row:
                cell.clear()
                cell.temperature = ambient.temperature
                cell.humidity = ambient.humidity
                cell.altitude = ambient.altitude

    def paint(self, x: int, y: int, biome: Biome, ambient: Ambient) -> Cell:
        """Seed one cell with a biome under the current ambient climate.

        The cell starts at vegetation 50 with no species.  Painting
        ``Biome.EMPTY`` clears the cell instead.

        Raises:
            OutOfRange: If coordinates are out of bounds.
        """
        cell = self.cell_at(x, y)
        cell.temperature = ambient.temperature
        cell.humidity = ambient.humidity
        cell.altitude = ambient.altitude
        cell.species.clear()
        if biome is Biome.EMPTY:
            cell.clear()
        else:
            cell.biome = biome
            cell.vegetation = 50.0
        return cell

    def freeze(self) -> GridSnapshot:
        """Return an immutable copy of the whole grid."""
        return GridSnapshot(
            width=self.width,
            height=self.height,
            cells=tuple(tuple(cell.freeze() for cell in row) for row in self.cells),
        )

    def invariant_violations(self) -> list[str]:
        """List every cell that breaks the vegetation/empty invariants."""
        problems: list[str] = []
        for row in self.cells:
            for cell in row:
                where = f"({cell.x}, {cell.y})"
                if not 0.0 <= cell.vegetation <= VEGETATION_MAX:
                    problems.append(f"{where} vegetation {cell.vegetation}")
                if cell.is_empty and cell.vegetation != 0.0:
                    problems.append(f"{where} empty with vegetation {cell.vegetation}")
                if cell.is_empty and cell.species:
                    problems.append(f"{where} empty with species {sorted(cell.species)}")
        return problems


@dataclass(frozen=True)
class GridSnapshot:
    """Frozen view of a World at one instant.

    Attributes:
        width: Number of columns.
        height: Number of rows.
        cells: Rows of CellView objects indexed as ``cells[y][x]``.
    """

    width: int
    height: int
    cells: tuple[tuple[CellView, ...], ...] = field(repr=False)

    def cell_at(self, x: int, y: int) -> CellView:
        """Return the frozen cell at ``(x, y)``.

        Raises:
            OutOfRange: If coordinates are out of bounds.
        """
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise OutOfRange(x, y, self.width, self.height)
        return self.cells[y][x]

    def neighbours(self, x: int, y: int) -> list[CellView]:
        """Return the frozen cells adjacent to ``(x, y)``."""
        return [
            self.cells[ny][nx]
            for nx, ny in neighbour_positions(x, y, self.width, self.height)
        ]

    def __iter__(self) -> Iterator[CellView]:
        for row in self.cells:
            yield from row

    def vegetation_grid(self) -> NDArray[np.float64]:
        """Return vegetation densities as a ``(height, width)`` array."""
        return np.array(
            [[c.vegetation for c in row] for row in self.cells],
            dtype=np.float64,
        )

    def biome_grid(self) -> NDArray[np.int_]:
        """Return biomes as indices into ``list(Biome)``, shape ``(height, width)``."""
        return np.array(
            [[_BIOME_INDEX[c.biome] for c in row] for row in self.cells],
            dtype=np.int_,
        )

    def species_count_grid(self) -> NDArray[np.int_]:
        """Return the number of resident species per cell."""
        return np.array(
            [[len(c.species) for c in row] for row in self.cells],
            dtype=np.int_,
        )
