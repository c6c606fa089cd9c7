"""Fitness — how well a biome suits a patch of climate.

All functions here are pure: the same inputs always give the same score.
A score of 1.0 means the climate sits exactly at the centre of the biome's
optimal window; 0.0 means it is, on average, at or beyond the window edge.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from biograte.errors import ConfigError
from biograte.world.cell import Biome

if TYPE_CHECKING:
    from biograte.ecology.catalog import Catalog
    from biograte.world.cell import Cell, CellView

# Every 10 units of altitude cool the effective temperature by one degree
ALTITUDE_LAPSE = 10.0


def adjusted_temperature(temperature: float, altitude: float) -> float:
    """Return the temperature a plant effectively feels at ``altitude``."""
    return temperature - altitude / ALTITUDE_LAPSE


def suitability(
    biome: Biome,
    temperature: float,
    humidity: float,
    altitude: float,
    catalog: Catalog,
) -> float:
    """Score how well ``biome`` fits the given climate.

    The temperature and humidity distances from the centre of the biome's
    optimal window are each normalised by the window's half-width, then
    averaged; the score is one minus that average, clamped to [0, 1].

    Args:
        biome: Biome to evaluate.
        temperature: Air temperature before altitude cooling.
        humidity: Humidity in percent.
        altitude: Elevation.
        catalog: Source of the biome's optimal windows.

    Returns:
        Suitability in [0.0, 1.0].

    Raises:
        ConfigError: If the biome's window has zero width.
    """
    profile = catalog.biome(biome)
    t_half = profile.temperature_half_width
    h_half = profile.humidity_half_width
    if t_half <= 0.0 or h_half <= 0.0:
        msg = f"biome {biome.value!r} has a degenerate climate window"
        raise ConfigError(msg)

    t_dist = abs(adjusted_temperature(temperature, altitude) - profile.temperature_mid) / t_half
    h_dist = abs(humidity - profile.humidity_mid) / h_half
    score = 1.0 - (t_dist + h_dist) / 2.0
    return min(1.0, max(0.0, score))


def best_fit(
    temperature: float,
    humidity: float,
    altitude: float,
    catalog: Catalog,
) -> tuple[Biome, float]:
    """Find the living biome that best suits the given climate.

    Biomes are tried in ``Biome`` enumeration order and the first maximum
    wins, so ties always resolve the same way.

    Returns:
        ``(biome, score)`` for the best candidate.
    """
    best = Biome.living()[0]
    best_score = -1.0
    for biome in Biome.living():
        score = suitability(biome, temperature, humidity, altitude, catalog)
        if score > best_score:
            best, best_score = biome, score
    return best, best_score


def current_fitness(cell: Cell | CellView, catalog: Catalog) -> float:
    """Return the suitability of a cell's own biome under its own climate."""
    return suitability(
        cell.biome,
        cell.temperature,
        cell.humidity,
        cell.altitude,
        catalog,
    )
