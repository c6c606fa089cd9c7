"""Succession rules — the per-generation update of every cell.

One generation walks the grid in row-major order and applies, per cell:

1. Climate diffusion toward the neighbourhood average
2. Colonization of empty cells by vigorous neighbours
3. Replacement by a better-fitting biome
4. Mortality under hostile climate
5. Growth and species arrival, or decline and species loss
6. Species dispersal into neighbouring cells
7. Invasion by competing neighbour biomes

Neighbour reads for climate, colonization and invasion see only the
previous generation (a frozen ``GridSnapshot``).  The cell's own running
state and the dispersal targets come from the live World, which is the
next generation being built, so a species can hop into a neighbour that
was already updated this tick.

``rng`` only needs ``random()`` returning a float in [0, 1) and
``integers(low, high)`` returning an int in ``[low, high)``, which a
``numpy.random.Generator`` provides.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING

from biograte.ecology.fitness import best_fit, current_fitness, suitability
from biograte.world.cell import VEGETATION_MAX, Biome

if TYPE_CHECKING:
    from numpy.random import Generator

    from biograte.ecology.catalog import Catalog
    from biograte.world.cell import Cell, CellView
    from biograte.world.world import GridSnapshot, World

# -- Constants ---------------------------------------------------------------

_DIFFUSION_WEIGHT = 0.6  # share of the neighbourhood average in the new value
_NEIGHBOURHOOD = 8
_COLONIZER_MIN_VEGETATION = 30.0
_COLONIZATION_RATE = 0.3
_COLONIZATION_VEGETATION = 10.0
_REPLACEMENT_RATE = 0.8
_REPLACEMENT_MIN_VEGETATION = 10.0
_HOSTILE_SCORE = 0.3  # below: mortality; at or below: decline
_MORTALITY_RATE = 0.3
_GROWTH_RATE = 2.0
_SPECIES_ARRIVAL_RATE = 0.12
_DECLINE_RATE = 4.0
_SPECIES_LOSS_CHANCE = 0.35
_SPECIES_DROP_CHANCE = 0.5
_COLLAPSE_VEGETATION = 10.0
_COLLAPSE_CHANCE = 0.25
_DISPERSAL_MIN_VEGETATION = 30.0
_DISPERSAL_TARGET_MAX_VEGETATION = 80.0
_DISPERSAL_CHANCE = 0.2
_DISPERSAL_BOOST = 8.0
_INVASION_SUITABILITY_WEIGHT = 0.6
_INVASION_VEGETATION_SCALE = 150.0
_INVASION_AGGRESSION_WEIGHT = 0.3
_MAX_THREATS = 3
_INVASION_RATE = 0.35
_INVASION_VEGETATION_PER_NEIGHBOUR = 8.0
_INVASION_MAX_VEGETATION = 35.0


def chance(rng: Generator, probability: float) -> bool:
    """Draw once and return True with ``probability``, clamped to [0, 1]."""
    p = min(1.0, max(0.0, probability))
    return bool(rng.random() < p)


@dataclass
class Threat:
    """A neighbouring biome pressing on a cell.

    Attributes:
        biome: The invading biome.
        strength: Best single-neighbour invasion strength in the group.
        count: How many neighbours carry this biome.
        aggression: The invading biome's aggression coefficient.
    """

    biome: Biome
    strength: float
    count: int
    aggression: float

    @property
    def power(self) -> float:
        """Combined pressure used to rank and resolve threats."""
        return self.strength * self.count * (1.0 + self.aggression)


def diffuse_climate(cell: Cell, neighbours: list[CellView]) -> None:
    """Relax temperature and humidity toward the neighbourhood average.

    The average includes the cell itself; the result keeps 40% of the
    cell's own reading so a single tick never fully overwrites it.
    """
    n = len(neighbours) + 1
    avg_temp = (cell.temperature + sum(nb.temperature for nb in neighbours)) / n
    avg_hum = (cell.humidity + sum(nb.humidity for nb in neighbours)) / n
    keep = 1.0 - _DIFFUSION_WEIGHT
    cell.temperature = _DIFFUSION_WEIGHT * avg_temp + keep * cell.temperature
    cell.humidity = _DIFFUSION_WEIGHT * avg_hum + keep * cell.humidity


def colonize(cell: Cell, neighbours: list[CellView], rng: Generator) -> bool:
    """Let an empty cell adopt the dominant vigorous neighbouring biome.

    Only neighbours with a living biome and vegetation above 30 count.
    With none, nothing is drawn and the cell stays empty.

    Returns:
        True if the cell was colonised.
    """
    colonizers = [
        nb
        for nb in neighbours
        if not nb.is_empty and nb.vegetation > _COLONIZER_MIN_VEGETATION
    ]
    if not colonizers:
        return False

    probability = len(colonizers) / _NEIGHBOURHOOD * _COLONIZATION_RATE
    if not chance(rng, probability):
        return False

    # Counter preserves first-seen order, so ties go to the earliest neighbour
    dominant, _ = Counter(nb.biome for nb in colonizers).most_common(1)[0]
    cell.biome = dominant
    cell.vegetation = _COLONIZATION_VEGETATION
    return True


def replace_with_better_fit(
    cell: Cell,
    score: float,
    catalog: Catalog,
    rng: Generator,
) -> bool:
    """Possibly hand the cell to the biome that best fits its climate.

    Args:
        cell: A living cell.
        score: The cell's current fitness.
        catalog: Biome profiles.
        rng: Random source.

    Returns:
        True if the biome was replaced.
    """
    alternative, alt_score = best_fit(
        cell.temperature,
        cell.humidity,
        cell.altitude,
        catalog,
    )
    if alternative is cell.biome:
        return False
    if not chance(rng, (alt_score - score) * _REPLACEMENT_RATE):
        return False

    cell.biome = alternative
    cell.vegetation = max(_REPLACEMENT_MIN_VEGETATION, cell.vegetation * 0.5)
    cell.species.clear()
    return True


def apply_mortality(cell: Cell, score: float, rng: Generator) -> bool:
    """Kill a cell whose climate is hostile, with a score-scaled chance.

    Returns:
        True if the cell died.
    """
    if score >= _HOSTILE_SCORE:
        return False
    if chance(rng, (1.0 - score) * _MORTALITY_RATE):
        cell.clear()
        return True
    return False


def grow_or_decline(
    cell: Cell,
    score: float,
    catalog: Catalog,
    rng: Generator,
) -> bool:
    """Grow vegetation and admit species, or decline and shed them.

    Above the hostile threshold vegetation grows by ``2 * score`` and every
    hosted, non-resident species gets one arrival draw, in catalog order.
    At or below it vegetation shrinks by ``4 * (1 - score)``; with 35%
    chance each resident species is independently lost with 50% chance,
    and sparse vegetation (below 10) collapses with 25% chance.

    Returns:
        True if the cell collapsed to empty.
    """
    if score > _HOSTILE_SCORE:
        cell.vegetation = min(VEGETATION_MAX, cell.vegetation + _GROWTH_RATE * score)
        for key, species in catalog.species.items():
            if not species.hosted_by(cell.biome) or key in cell.species:
                continue
            if chance(rng, species.growth * _SPECIES_ARRIVAL_RATE * score):
                cell.species.add(key)
        return False

    cell.vegetation = max(0.0, cell.vegetation - _DECLINE_RATE * (1.0 - score))
    if chance(rng, _SPECIES_LOSS_CHANCE):
        cell.species = {
            key
            for key in sorted(cell.species)
            if not chance(rng, _SPECIES_DROP_CHANCE)
        }
    if cell.vegetation < _COLLAPSE_VEGETATION and chance(rng, _COLLAPSE_CHANCE):
        cell.clear()
        return True
    return False


def disperse_species(
    cell: Cell,
    targets: list[Cell],
    catalog: Catalog,
    rng: Generator,
) -> Cell | None:
    """Occasionally send one resident species into a neighbouring cell.

    Args:
        cell: The source cell.
        targets: Live (next-generation) neighbours of the source.
        catalog: Species profiles.
        rng: Random source.

    Returns:
        The neighbour that received a species, or None.
    """
    if not cell.species or cell.vegetation <= _DISPERSAL_MIN_VEGETATION:
        return None
    candidates = [
        nb
        for nb in targets
        if not nb.is_empty and nb.vegetation < _DISPERSAL_TARGET_MAX_VEGETATION
    ]
    if not candidates or not chance(rng, _DISPERSAL_CHANCE):
        return None

    target = candidates[int(rng.integers(0, len(candidates)))]
    residents = sorted(cell.species)
    key = residents[int(rng.integers(0, len(residents)))]
    if not catalog.species[key].hosted_by(target.biome) or key in target.species:
        return None

    target.species.add(key)
    target.vegetation = min(VEGETATION_MAX, target.vegetation + _DISPERSAL_BOOST)
    return target


def rank_threats(
    cell: Cell,
    neighbours: list[CellView],
    catalog: Catalog,
) -> list[Threat]:
    """Group differing living neighbours by biome and rank their pressure.

    Each group's strength is the best single neighbour's
    ``0.6 * suitability + vegetation / 150 + 0.3 * aggression``, where
    suitability is judged against this cell's climate.  Groups are sorted
    by ``strength * count * (1 + aggression)``, strongest first; equal
    powers keep neighbour order.
    """
    threats: dict[Biome, Threat] = {}
    for nb in neighbours:
        if nb.is_empty or nb.biome is cell.biome:
            continue
        aggression = catalog.biome(nb.biome).aggression
        strength = (
            _INVASION_SUITABILITY_WEIGHT
            * suitability(nb.biome, cell.temperature, cell.humidity, cell.altitude, catalog)
            + nb.vegetation / _INVASION_VEGETATION_SCALE
            + _INVASION_AGGRESSION_WEIGHT * aggression
        )
        threat = threats.get(nb.biome)
        if threat is None:
            threats[nb.biome] = Threat(nb.biome, strength, 1, aggression)
        else:
            threat.count += 1
            threat.strength = max(threat.strength, strength)
    return sorted(threats.values(), key=lambda t: t.power, reverse=True)


def invade(
    cell: Cell,
    neighbours: list[CellView],
    score: float,
    aggression: float,
    catalog: Catalog,
    rng: Generator,
) -> Biome | None:
    """Resolve up to three neighbouring threats against a living cell.

    Each threat is tried independently; a later success overwrites an
    earlier one.  The defence uses the cell's vegetation as it stands at
    each attempt.

    Args:
        cell: A living cell.
        neighbours: Previous-generation neighbours.
        score: The cell's fitness for this tick.
        aggression: The cell's biome aggression for this tick.
        catalog: Biome profiles.
        rng: Random source.

    Returns:
        The biome that holds the cell after the last successful
        invasion, or None if every attempt failed.
    """
    winner: Biome | None = None
    for threat in rank_threats(cell, neighbours, catalog)[:_MAX_THREATS]:
        defence = score * (cell.vegetation / VEGETATION_MAX) * (1.0 + aggression)
        if chance(rng, (threat.power - defence) * _INVASION_RATE):
            cell.biome = threat.biome
            cell.vegetation = min(
                _INVASION_MAX_VEGETATION,
                threat.count * _INVASION_VEGETATION_PER_NEIGHBOUR,
            )
            cell.species.clear()
            winner = threat.biome
    return winner


def update_cell(
    world: World,
    previous: GridSnapshot,
    x: int,
    y: int,
    catalog: Catalog,
    rng: Generator,
    *,
    rescore_after_replacement: bool = False,
) -> None:
    """Run the full rule pipeline for the cell at ``(x, y)``.

    The fitness score and aggression used by mortality, growth and
    invasion are taken before any replacement.  With
    ``rescore_after_replacement`` a replaced cell is scored again under
    its new biome instead.
    """
    cell = world.cells[y][x]
    neighbours = previous.neighbours(x, y)

    diffuse_climate(cell, neighbours)

    if cell.is_empty:
        colonize(cell, neighbours, rng)
        return

    score = current_fitness(cell, catalog)
    aggression = catalog.biome(cell.biome).aggression
    replaced = replace_with_better_fit(cell, score, catalog, rng)
    if replaced and rescore_after_replacement:
        score = current_fitness(cell, catalog)
        aggression = catalog.biome(cell.biome).aggression

    if apply_mortality(cell, score, rng):
        return
    if grow_or_decline(cell, score, catalog, rng):
        return

    disperse_species(cell, world.neighbours(x, y), catalog, rng)
    invade(cell, neighbours, score, aggression, catalog, rng)


def advance(
    world: World,
    catalog: Catalog,
    rng: Generator,
    *,
    rescore_after_replacement: bool = False,
) -> None:
    """Advance every cell of ``world`` by one generation, in place.

    Args:
        world: Grid to update; becomes the next generation.
        catalog: Biome and species profiles.
        rng: Random source.
        rescore_after_replacement: Re-score cells whose biome was just
            replaced before applying mortality, growth and invasion.
    """
    previous = world.freeze()
    for y in range(world.height):
        for x in range(world.width):
            update_cell(
                world,
                previous,
                x,
                y,
                catalog,
                rng,
                rescore_after_replacement=rescore_after_replacement,
            )
