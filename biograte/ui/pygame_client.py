"""Pygame 2D visualization for the Biograte simulation.

Renders the biome grid in a window, with darker shades for denser
vegetation, and lets the user paint biomes with the mouse.  The
simulation advances at a fixed generation rate while the display
refreshes at the Pygame frame rate.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

import numpy as np
import pygame

from biograte.world.cell import Biome
from biograte.world.environment import Ambient

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from biograte.simulation.session import Session
    from biograte.world.world import GridSnapshot

_BG = (250, 250, 250)
_GRID_LINE = (224, 224, 224)
_TEXT = (40, 40, 40)
_SELECTED_BORDER = (0, 0, 0)

# Full vegetation darkens the biome colour by 40%
_MAX_DARKENING = 0.4


def shade_palette(
    colours: NDArray[np.float64],
    biomes: NDArray[np.int_],
    vegetation: NDArray[np.float64],
) -> NDArray[np.uint8]:
    """Return per-cell RGB colours, darkened by vegetation density.

    Args:
        colours: ``(len(Biome), 3)`` base colour table.
        biomes: ``(h, w)`` biome indices.
        vegetation: ``(h, w)`` vegetation densities (0-100).

    Returns:
        ``(h, w, 3)`` uint8 colours.
    """
    darkness = 1.0 - (vegetation / 100.0) * _MAX_DARKENING
    return np.floor(colours[biomes] * darkness[..., None]).astype(np.uint8)


class PygameRenderer:
    """Renders a Session into a Pygame window and relays user input.

    Attributes:
        session: The simulation session to visualise.
        cell_size: Pixel size of each grid cell.
        ambient: Climate applied to painted cells and resets.
        selected: Biome painted by the mouse.
        screen: The Pygame display surface.
    """

    _BIOME_KEYS: ClassVar[dict[int, Biome]] = {
        pygame.K_1: Biome.TUNDRA,
        pygame.K_2: Biome.DESERT,
        pygame.K_3: Biome.SAVANNA,
        pygame.K_4: Biome.GRASSLAND,
        pygame.K_5: Biome.FOREST,
        pygame.K_6: Biome.RAINFOREST,
    }

    _AMBIENT_KEYS: ClassVar[dict[int, tuple[str, int]]] = {
        pygame.K_UP: ("temperature", 1),
        pygame.K_DOWN: ("temperature", -1),
        pygame.K_RIGHT: ("humidity", 1),
        pygame.K_LEFT: ("humidity", -1),
        pygame.K_PAGEUP: ("altitude", 1),
        pygame.K_PAGEDOWN: ("altitude", -1),
    }

    def __init__(
        self,
        session: Session,
        ambient: Ambient,
        cell_size: int = 10,
        ticks_per_second: float = 5.0,
    ) -> None:
        """Initialise the renderer.

        Args:
            session: The simulation session to render.
            ambient: Starting ambient climate for painting.
            cell_size: Pixel width/height per grid cell.
            ticks_per_second: Generations per real-time second.
        """
        self.session = session
        self.ambient = ambient
        self.cell_size = cell_size
        self.ticks_per_second = ticks_per_second
        self.selected = Biome.FOREST
        self._tick_accumulator = 0.0
        self._drawing = False
        self._colours = np.array(
            [session.catalog.biome(b).colour for b in Biome],
            dtype=np.float64,
        )

        w = session.width * cell_size
        h = session.height * cell_size
        self._panel_width = 260
        self._win_w = w + self._panel_width
        self._win_h = max(h, 560)

        pygame.init()
        self.screen = pygame.display.set_mode((self._win_w, self._win_h))
        pygame.display.set_caption("Biograte")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("monospace", 14)
        self.running = True
        self.paused = True

    def run(self, fps: int = 30) -> None:
        """Main loop: handle events, step sim, render.

        Args:
            fps: Target frames per second.
        """
        while self.running:
            dt = self.clock.tick(fps) / 1000.0  # seconds elapsed
            self._handle_events()
            if not self.paused:
                self._tick_accumulator += self.ticks_per_second * dt
                steps = int(self._tick_accumulator)
                self._tick_accumulator -= steps
                for _ in range(steps):
                    self.session.step()
            self._draw()

        pygame.quit()

    def _handle_events(self) -> None:
        """Process Pygame input events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self._drawing = True
                self._paint_at(event.pos)
            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                self._drawing = False
            elif event.type == pygame.MOUSEMOTION and self._drawing:
                self._paint_at(event.pos)
            elif event.type == pygame.KEYDOWN:
                self._handle_key(event.key)

    def _handle_key(self, key: int) -> None:
        if key == pygame.K_ESCAPE:
            self.running = False
        elif key == pygame.K_SPACE:
            self.paused = not self.paused
        elif key == pygame.K_r:
            self.paused = True
            self._tick_accumulator = 0.0
            self.session.reset(self.ambient)
        elif key in self._BIOME_KEYS:
            self.selected = self._BIOME_KEYS[key]
        elif key in self._AMBIENT_KEYS:
            reading, steps = self._AMBIENT_KEYS[key]
            self.ambient = self.ambient.nudged(reading, steps)

    def _paint_at(self, pos: tuple[int, int]) -> None:
        """Paint the selected biome under the mouse, ignoring the side panel."""
        x = pos[0] // self.cell_size
        y = pos[1] // self.cell_size
        if 0 <= x < self.session.width and 0 <= y < self.session.height:
            self.session.paint(x, y, self.selected, self.ambient)

    def _draw(self) -> None:
        """Render one frame."""
        grid = self.session.snapshot()
        self.screen.fill(_BG)
        self._draw_cells(grid)
        self._draw_info_panel()
        pygame.display.flip()

    def _draw_cells(self, grid: GridSnapshot) -> None:
        """Draw every cell in its shaded biome colour with grid lines."""
        cs = self.cell_size
        colours = shade_palette(
            self._colours,
            grid.biome_grid(),
            grid.vegetation_grid(),
        )
        for y in range(grid.height):
            for x in range(grid.width):
                rect = (x * cs, y * cs, cs, cs)
                pygame.draw.rect(self.screen, colours[y, x].tolist(), rect)
                pygame.draw.rect(self.screen, _GRID_LINE, rect, 1)

    def _draw_info_panel(self) -> None:
        """Draw controls, statistics and the biome legend on the right."""
        panel_x = self.session.width * self.cell_size + 10
        y = 10
        stats = self.session.statistics()
        ambient = self.ambient

        lines = [
            f"Generation: {self.session.generation}",
            f"{'PAUSED' if self.paused else 'RUNNING'}",
            "",
            "--- Statistics ---",
            f"Active cells: {stats.active_cell_count}",
            f"Mean vegetation: {stats.average_vegetation:.1f}%",
            f"Species: {stats.total_species_instances}",
            "",
            "--- Ambient ---",
            f"Temperature: {ambient.temperature:.0f} C",
            f"Humidity: {ambient.humidity:.0f}%",
            f"Altitude: {ambient.altitude:.0f} m",
            "",
            "--- Controls ---",
            "SPACE: play/pause",
            "R: reset",
            "1-6: select biome",
            "UP/DOWN: temperature",
            "LEFT/RIGHT: humidity",
            "PGUP/PGDN: altitude",
            "ESC: quit",
            "",
            "--- Biomes ---",
        ]
        for line in lines:
            surf = self.font.render(line, True, _TEXT)
            self.screen.blit(surf, (panel_x, y))
            y += 18

        for key_index, biome in enumerate(Biome.living(), start=1):
            profile = self.session.catalog.biome(biome)
            swatch = (panel_x, y + 2, 12, 12)
            pygame.draw.rect(self.screen, profile.colour, swatch)
            if biome is self.selected:
                pygame.draw.rect(self.screen, _SELECTED_BORDER, swatch, 2)
            label = f"{key_index} {profile.name} {profile.aggression:.0%}"
            surf = self.font.render(label, True, _TEXT)
            self.screen.blit(surf, (panel_x + 18, y))
            y += 18
